"""
Campaign Export Service - wires the location directory and job manager for FastAPI
"""
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from campaign_export.config import AppConfig, load_config_from_env
from campaign_export.directory import LocationDirectory, build_directory
from campaign_export.jobs import GenerationJobManager
from campaign_export.models import AdVariant, CampaignConfiguration, Location, TargetingConfig

logger = logging.getLogger(__name__)


class CampaignExportService:
    """Facade used by the API: returns plain dicts, raises engine errors."""

    def __init__(self, directory: LocationDirectory, manager: GenerationJobManager):
        self.directory = directory
        self.manager = manager

    # Locations

    def search_locations(
        self,
        search: Optional[str] = None,
        states: Optional[Sequence[str]] = None,
        cities: Optional[Sequence[str]] = None,
        zip_codes: Optional[Sequence[str]] = None,
    ) -> List[Dict]:
        locations = self.directory.search_locations(search, states, cities, zip_codes)
        return [location.to_dict() for location in locations]

    def get_states(self) -> List[str]:
        return self.directory.unique_states()

    def get_cities(self, state: Optional[str] = None) -> List[str]:
        return self.directory.unique_cities(state)

    def get_location(self, location_id: str) -> Optional[Location]:
        return self.directory.get_location(location_id)

    def get_targeting_config(self, location_id: str) -> Optional[Dict]:
        config = self.directory.get_targeting_config(location_id)
        return config.to_dict() if config else None

    def save_targeting_config(self, config: TargetingConfig) -> Dict:
        return self.directory.save_targeting_config(config).to_dict()

    def delete_targeting_config(self, location_id: str) -> bool:
        return self.directory.delete_targeting_config(location_id)

    # Generation

    def submit_generation(
        self,
        location_ids: Sequence[str],
        ad_variants: Sequence[AdVariant],
        campaign: CampaignConfiguration,
        file_name_hint: Optional[str] = None,
    ) -> Dict:
        return self.manager.submit(location_ids, ad_variants, campaign, file_name_hint).to_dict()

    async def process_job(self, job_id: str):
        await self.manager.process_job(job_id)

    def preview(
        self,
        location_ids: Sequence[str],
        ad_variants: Sequence[AdVariant],
        campaign: CampaignConfiguration,
        limit: Optional[int] = None,
    ) -> List[Dict]:
        records = self.manager.preview(location_ids, ad_variants, campaign, limit)
        return [record.to_dict() for record in records]

    def get_generation_status(self, job_id: str) -> Dict:
        return self.manager.get_status(job_id).to_dict()

    def download_artifact(self, job_id: str) -> Tuple[str, bytes]:
        content = self.manager.download(job_id)
        return self.manager.get_status(job_id).file_name, content

    def list_jobs(self, limit: int = 20) -> List[Dict]:
        return [snapshot.to_dict() for snapshot in self.manager.list_jobs(limit)]

    def cancel_job(self, job_id: str) -> Dict:
        return self.manager.cancel(job_id).to_dict()

    def delete_job(self, job_id: str):
        self.manager.delete_job(job_id)

    def stats(self) -> Dict:
        return self.manager.stats()

    def cleanup_unfinished_jobs(self) -> int:
        """Fail jobs that can no longer finish (process shutting down)."""
        return self.manager.fail_unfinished_jobs("Job interrupted by server shutdown")


def build_export_service(config: Optional[AppConfig] = None) -> CampaignExportService:
    """Create the service from configuration (environment by default)."""
    config = config or load_config_from_env()

    connect = None
    if config.directory.source == "postgres":
        from backend.database import get_db_connection, init_db
        init_db()
        connect = get_db_connection

    directory = build_directory(config.directory, connect=connect)
    manager = GenerationJobManager(directory, config.generation)

    logger.info(f"Campaign export service ready (source: {config.directory.source})")
    return CampaignExportService(directory, manager)
