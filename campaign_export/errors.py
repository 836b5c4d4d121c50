"""Error taxonomy for the export engine."""

from typing import Iterable, List, Optional


class CampaignExportError(Exception):
    """Base class for all export engine errors."""


class InputError(CampaignExportError):
    """Submission rejected before any job was created."""

    def __init__(self, problems: Iterable[str]):
        self.problems: List[str] = list(problems)
        super().__init__("; ".join(self.problems) or "Invalid input")


class JobNotFound(CampaignExportError):
    """Status or download requested for an unknown job id."""

    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__(f"Job not found: {job_id}")


class ArtifactNotReady(CampaignExportError):
    """Download requested for a job that has no artifact."""

    def __init__(self, job_id: str, status: str, reason: Optional[str] = None):
        self.job_id = job_id
        self.status = status
        message = f"Artifact for job {job_id} is not ready (status: {status})"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class GenerationFailure(CampaignExportError):
    """Fault during expansion or serialization after a job started."""


class DirectoryError(CampaignExportError):
    """Location directory could not be read or written."""
