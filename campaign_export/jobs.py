"""Generation job manager: asynchronous, pollable export jobs."""

import asyncio
import logging
import math
import threading
import time
from collections import OrderedDict
from datetime import datetime, timezone
from itertools import islice
from typing import Callable, Dict, List, Optional, Sequence
from uuid import uuid4

from campaign_export.config import GenerationConfig
from campaign_export.directory import LocationDirectory
from campaign_export.errors import ArtifactNotReady, GenerationFailure, InputError, JobNotFound
from campaign_export.models import (
    AdVariant,
    CampaignConfiguration,
    GeneratedRecord,
    GenerationJob,
    JobSnapshot,
    JobStatus,
)
from campaign_export.processors.csv_export import CsvArtifactWriter
from campaign_export.processors.expander import expand_records
from campaign_export.reference_template import REFERENCE_TEMPLATE, ReferenceCreativeTemplate
from campaign_export.validation import validate_submission

logger = logging.getLogger(__name__)

CANCELLED_MESSAGE = "Job cancelled"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def default_file_name(when: datetime) -> str:
    return f"ad_generation_{when:%Y-%m-%d}.csv"


def resolve_file_name(hint: Optional[str], when: datetime) -> str:
    if hint and hint.strip():
        name = hint.strip()
        return name if name.lower().endswith(".csv") else f"{name}.csv"
    return default_file_name(when)


class GenerationJobManager:
    """Owns every generation job and its cached artifact.

    All job state lives in one mapping guarded by a single lock. Processing
    advances in cooperative ticks, so status can be polled while a job runs
    and cancellation or timeout is noticed at the next tick boundary.
    """

    def __init__(
        self,
        directory: LocationDirectory,
        config: Optional[GenerationConfig] = None,
        template: ReferenceCreativeTemplate = REFERENCE_TEMPLATE,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.directory = directory
        self.config = config or GenerationConfig()
        self.template = template
        self._clock = clock
        self._lock = threading.Lock()
        self._jobs: "OrderedDict[str, GenerationJob]" = OrderedDict()

    # Submission

    def submit(
        self,
        location_ids: Sequence[str],
        ad_variants: Sequence[AdVariant],
        campaign: CampaignConfiguration,
        file_name_hint: Optional[str] = None,
    ) -> JobSnapshot:
        """Validate the request and create a job in ``processing``.

        Raises InputError before any job exists. The caller schedules
        process_job() (or calls run_job()) to actually produce the file.
        """
        validate_submission(location_ids, ad_variants, campaign)
        locations = self.directory.get_locations(location_ids)

        job = GenerationJob(
            id=f"job_{uuid4().hex}",
            location_ids=list(location_ids),
            ad_variant_ids=[variant.id for variant in ad_variants],
            total_records=len(locations) * len(ad_variants),
            created_at=_utcnow(),
            file_name_hint=file_name_hint,
            locations=locations,
            ad_variants=list(ad_variants),
            campaign=campaign,
        )

        with self._lock:
            self._jobs[job.id] = job
            job.status = JobStatus.PROCESSING
            job.started_at = _utcnow()
            self._evict_locked()
            snapshot = self._snapshot(job)

        logger.info(
            f"Created job {job.id}: {len(locations)} locations x {len(ad_variants)} ad variants "
            f"= {job.total_records} records"
        )
        return snapshot

    def preview(
        self,
        location_ids: Sequence[str],
        ad_variants: Sequence[AdVariant],
        campaign: CampaignConfiguration,
        limit: Optional[int] = None,
    ) -> List[GeneratedRecord]:
        """First records of the cross-product, without creating a job."""
        validate_submission(location_ids, ad_variants, campaign)
        locations = self.directory.get_locations(location_ids)
        expansion = expand_records(
            locations, ad_variants, campaign,
            template=self.template,
            default_landing_page=self.config.default_landing_page,
        )
        count = self.config.max_preview_records if limit is None else limit
        return list(islice(expansion, max(count, 0)))

    # Processing

    async def process_job(self, job_id: str) -> JobSnapshot:
        """Advance a job tick by tick until it completes or fails."""
        with self._lock:
            job = self._get_locked(job_id)
            if job.status != JobStatus.PROCESSING:
                return self._snapshot(job)

        started = self._clock()
        logger.info(f"Processing job {job_id} ({job.total_records} records)")

        try:
            expansion = expand_records(
                job.locations, job.ad_variants, job.campaign,
                template=self.template,
                default_landing_page=self.config.default_landing_page,
            )
            if len(expansion) != job.total_records:
                raise GenerationFailure(
                    f"Expected {job.total_records} records, expansion has {len(expansion)}"
                )

            step = max(1, math.ceil(job.total_records / self.config.progress_steps))
            records = iter(expansion)
            writer = CsvArtifactWriter()

            while True:
                with self._lock:
                    # Failed elsewhere (shutdown cleanup)
                    if job.status != JobStatus.PROCESSING:
                        return self._snapshot(job)

                    if job.cancel_requested:
                        self._fail_locked(job, CANCELLED_MESSAGE)
                        logger.info(f"Job {job_id} cancelled at {job.processed_records}/{job.total_records}")
                        return self._snapshot(job)

                    elapsed = self._clock() - started
                    if elapsed > self.config.job_timeout_seconds:
                        self._fail_locked(
                            job, f"Job timed out after {self.config.job_timeout_seconds:g} seconds"
                        )
                        logger.warning(f"Job {job_id} timed out after {elapsed:.1f}s")
                        return self._snapshot(job)

                batch = list(islice(records, step))
                if not batch:
                    raise GenerationFailure(
                        f"Expansion ended early at {job.processed_records}/{job.total_records} records"
                    )
                writer.write_records(batch)

                with self._lock:
                    job.processed_records = min(job.processed_records + len(batch), job.total_records)
                    if job.processed_records >= job.total_records:
                        self._complete_locked(job, writer.to_bytes())
                        logger.info(
                            f"Job {job_id} completed: {writer.rows_written} rows -> {job.file_name}"
                        )
                        return self._snapshot(job)

                await asyncio.sleep(self.config.tick_interval)

        except Exception as e:
            logger.error(f"Job {job_id} failed: {e}", exc_info=True)
            message = str(e) if isinstance(e, GenerationFailure) else f"Generation failed: {e}"
            with self._lock:
                self._fail_locked(job, message)
                return self._snapshot(job)

    def run_job(self, job_id: str) -> JobSnapshot:
        """Run process_job() to completion from synchronous code."""
        return asyncio.run(self.process_job(job_id))

    # Queries

    def get_status(self, job_id: str) -> JobSnapshot:
        with self._lock:
            return self._snapshot(self._get_locked(job_id))

    def download(self, job_id: str) -> bytes:
        """Cached artifact bytes; identical on every call."""
        with self._lock:
            job = self._get_locked(job_id)
            if job.status != JobStatus.COMPLETED or job.artifact is None:
                raise ArtifactNotReady(job_id, job.status.value, reason=job.error)
            return job.artifact

    def list_jobs(self, limit: int = 20) -> List[JobSnapshot]:
        with self._lock:
            jobs = list(reversed(self._jobs.values()))[:limit]
            return [self._snapshot(job) for job in jobs]

    def stats(self) -> Dict[str, float]:
        with self._lock:
            jobs = list(self._jobs.values())

        completed = [job for job in jobs if job.status == JobStatus.COMPLETED]
        failed = [job for job in jobs if job.status == JobStatus.FAILED]
        durations = [
            (job.completed_at - job.started_at).total_seconds()
            for job in completed
            if job.completed_at and job.started_at
        ]

        return {
            "total_jobs": len(jobs),
            "completed_jobs": len(completed),
            "failed_jobs": len(failed),
            "total_records_generated": sum(job.total_records for job in completed),
            "average_processing_seconds": round(sum(durations) / len(durations), 3) if durations else 0.0,
        }

    # Mutations

    def cancel(self, job_id: str) -> JobSnapshot:
        """Request cancellation; terminal jobs are returned unchanged."""
        with self._lock:
            job = self._get_locked(job_id)
            if not job.status.is_terminal:
                job.cancel_requested = True
                logger.info(f"Cancellation requested for job {job_id}")
            return self._snapshot(job)

    def delete_job(self, job_id: str):
        with self._lock:
            job = self._get_locked(job_id)
            if not job.status.is_terminal:
                raise InputError([f"job {job_id} is still {job.status.value}; cancel it first"])
            del self._jobs[job_id]
        logger.info(f"Deleted job {job_id}")

    def fail_unfinished_jobs(self, reason: str) -> int:
        """Mark every non-terminal job failed (used on shutdown/startup cleanup)."""
        count = 0
        with self._lock:
            for job in self._jobs.values():
                if not job.status.is_terminal:
                    self._fail_locked(job, reason)
                    count += 1
        if count:
            logger.warning(f"Marked {count} unfinished jobs as failed: {reason}")
        return count

    # Internals (caller holds the lock)

    def _get_locked(self, job_id: str) -> GenerationJob:
        job = self._jobs.get(job_id)
        if job is None:
            raise JobNotFound(job_id)
        return job

    def _complete_locked(self, job: GenerationJob, artifact: bytes):
        job.completed_at = _utcnow()
        job.file_name = resolve_file_name(job.file_name_hint, job.completed_at)
        job.artifact = artifact
        job.status = JobStatus.COMPLETED
        self._release_inputs(job)

    def _fail_locked(self, job: GenerationJob, message: str):
        if job.status.is_terminal:
            return
        job.status = JobStatus.FAILED
        job.error = message
        job.completed_at = _utcnow()
        job.artifact = None
        self._release_inputs(job)

    @staticmethod
    def _release_inputs(job: GenerationJob):
        job.locations = []
        job.ad_variants = []
        job.campaign = None

    def _evict_locked(self):
        excess = len(self._jobs) - self.config.max_jobs_retained
        if excess <= 0:
            return
        for job_id in [jid for jid, job in self._jobs.items() if job.status.is_terminal][:excess]:
            del self._jobs[job_id]
            logger.debug(f"Evicted job {job_id}")

    @staticmethod
    def _snapshot(job: GenerationJob) -> JobSnapshot:
        return JobSnapshot(
            id=job.id,
            status=job.status,
            location_ids=list(job.location_ids),
            ad_variant_ids=list(job.ad_variant_ids),
            total_records=job.total_records,
            processed_records=job.processed_records,
            created_at=job.created_at,
            completed_at=job.completed_at,
            file_name=job.file_name,
            error=job.error,
        )
