"""Location directory: where locations and their targeting configs come from."""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import asdict, replace
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence

import psycopg2
from psycopg2.extras import RealDictCursor

from campaign_export.config import DirectoryConfig
from campaign_export.errors import CampaignExportError, DirectoryError, InputError
from campaign_export.models import Location, TargetingConfig
from campaign_export.processors.data_loader import (
    load_locations,
    load_targeting_configs,
    location_from_record,
    targeting_config_from_record,
)
from campaign_export.utils.cache import LocationCache
from campaign_export.utils.retry import sync_retry
from campaign_export.validation import validate_targeting_config

logger = logging.getLogger(__name__)


class LocationDirectory(ABC):
    """Read/write contract over locations and their global targeting configs.

    Subclasses supply raw loading and storage; this class handles caching,
    exclusion of pseudo-locations, config attachment and filtering.
    """

    def __init__(self, cache: Optional[LocationCache] = None, excluded_codes: Iterable[str] = ("CORP",)):
        self.cache = cache or LocationCache(ttl_seconds=300)
        self.excluded_codes = set(excluded_codes)

    @abstractmethod
    def _load_locations(self) -> List[Location]:
        ...

    @abstractmethod
    def _load_targeting_configs(self) -> List[TargetingConfig]:
        ...

    @abstractmethod
    def _store_targeting_config(self, config: TargetingConfig):
        ...

    @abstractmethod
    def _remove_targeting_config(self, location_id: str) -> bool:
        ...

    def _load_all(self) -> List[Location]:
        try:
            locations = self._load_locations()
            loaded = [c for c in self._load_targeting_configs() if c.user_id is None]
        except CampaignExportError:
            raise
        except Exception as e:
            logger.error(f"Failed to load location directory: {e}", exc_info=True)
            raise DirectoryError(f"Failed to load locations: {e}") from e

        configs = {}
        for config in loaded:
            problems = validate_targeting_config(config)
            if problems:
                logger.warning(f"Ignoring invalid targeting config for {config.location_id}: {problems}")
                continue
            configs[config.location_id] = config

        result = []
        for location in locations:
            if location.code in self.excluded_codes:
                continue
            result.append(replace(location, targeting=configs.get(location.id)))

        result.sort(key=lambda loc: loc.name.lower())
        logger.info(f"Location directory loaded {len(result)} locations ({len(configs)} with targeting)")
        return result

    def list_locations(self) -> List[Location]:
        return list(self.cache.get_or_load(self._load_all))

    def get_location(self, location_id: str) -> Optional[Location]:
        for location in self.list_locations():
            if location.id == location_id:
                return location
        return None

    def get_targeting_config(self, location_id: str) -> Optional[TargetingConfig]:
        location = self.get_location(location_id)
        return location.targeting if location else None

    def get_locations(self, location_ids: Sequence[str]) -> List[Location]:
        """Resolve ids in the requested order; unknown ids are an InputError."""
        by_id = {location.id: location for location in self.list_locations()}
        missing = [lid for lid in location_ids if lid not in by_id]
        if missing:
            raise InputError([f"unknown location id: {lid}" for lid in missing])
        return [by_id[lid] for lid in location_ids]

    def search_locations(
        self,
        search: Optional[str] = None,
        states: Optional[Sequence[str]] = None,
        cities: Optional[Sequence[str]] = None,
        zip_codes: Optional[Sequence[str]] = None,
    ) -> List[Location]:
        locations = self.list_locations()

        if search:
            term = search.lower()
            locations = [
                loc for loc in locations
                if term in loc.name.lower()
                or term in loc.display_name.lower()
                or term in loc.city.lower()
            ]
        if states:
            locations = [loc for loc in locations if loc.state in states]
        if cities:
            locations = [loc for loc in locations if loc.city in cities]
        if zip_codes:
            locations = [loc for loc in locations if loc.zip_code in zip_codes]

        return locations

    def unique_states(self) -> List[str]:
        return sorted({loc.state for loc in self.list_locations()})

    def unique_cities(self, state: Optional[str] = None) -> List[str]:
        return sorted({
            loc.city for loc in self.list_locations()
            if state is None or loc.state == state
        })

    def save_targeting_config(self, config: TargetingConfig) -> TargetingConfig:
        problems = validate_targeting_config(config)
        if self.get_location(config.location_id) is None:
            problems.insert(0, f"unknown location id: {config.location_id}")
        if problems:
            raise InputError(problems)

        self._store_targeting_config(config)
        self.cache.invalidate()
        logger.info(f"Saved targeting config for location {config.location_id}")
        return config

    def delete_targeting_config(self, location_id: str) -> bool:
        removed = self._remove_targeting_config(location_id)
        if removed:
            self.cache.invalidate()
            logger.info(f"Deleted targeting config for location {location_id}")
        return removed


class InMemoryLocationDirectory(LocationDirectory):
    """Directory over in-process sequences."""

    def __init__(
        self,
        locations: Iterable[Location] = (),
        configs: Iterable[TargetingConfig] = (),
        cache: Optional[LocationCache] = None,
        excluded_codes: Iterable[str] = ("CORP",),
    ):
        super().__init__(cache=cache or LocationCache(ttl_seconds=0), excluded_codes=excluded_codes)
        self._locations = list(locations)
        self._configs: Dict[str, TargetingConfig] = {c.location_id: c for c in configs}

    def _load_locations(self) -> List[Location]:
        return list(self._locations)

    def _load_targeting_configs(self) -> List[TargetingConfig]:
        return list(self._configs.values())

    def _store_targeting_config(self, config: TargetingConfig):
        self._configs[config.location_id] = config

    def _remove_targeting_config(self, location_id: str) -> bool:
        return self._configs.pop(location_id, None) is not None


class FileLocationDirectory(InMemoryLocationDirectory):
    """Directory loaded from a locations file (JSON, CSV or Excel).

    Targeting configs may come from a second file. Writes are kept in memory
    and lost on restart.
    """

    def __init__(
        self,
        locations_file: Path,
        targeting_file: Optional[Path] = None,
        cache: Optional[LocationCache] = None,
        excluded_codes: Iterable[str] = ("CORP",),
    ):
        super().__init__(cache=cache or LocationCache(ttl_seconds=300), excluded_codes=excluded_codes)
        self.locations_file = Path(locations_file)
        self.targeting_file = Path(targeting_file) if targeting_file else None
        self._configs_loaded = False

    def _load_locations(self) -> List[Location]:
        try:
            return load_locations(self.locations_file)
        except (OSError, ValueError) as e:
            raise DirectoryError(f"Cannot read locations file {self.locations_file}: {e}") from e

    def _load_targeting_configs(self) -> List[TargetingConfig]:
        if not self._configs_loaded:
            if self.targeting_file is not None:
                try:
                    configs = load_targeting_configs(self.targeting_file)
                except (OSError, ValueError) as e:
                    raise DirectoryError(f"Cannot read targeting file {self.targeting_file}: {e}") from e
                # In-memory writes made before the first load take precedence
                for config in configs:
                    self._configs.setdefault(config.location_id, config)
            self._configs_loaded = True
        return super()._load_targeting_configs()


_TRANSIENT_DB_ERRORS = (psycopg2.OperationalError, psycopg2.InterfaceError)


class PostgresLocationDirectory(LocationDirectory):
    """Directory backed by the ``locations`` and ``location_configs`` tables."""

    def __init__(
        self,
        database_url: Optional[str] = None,
        connect: Optional[Callable] = None,
        cache: Optional[LocationCache] = None,
        excluded_codes: Iterable[str] = ("CORP",),
    ):
        super().__init__(cache=cache, excluded_codes=excluded_codes)
        if connect is None and database_url is None:
            raise ValueError("PostgresLocationDirectory needs a database_url or a connect callable")
        self.database_url = database_url
        self._connect = connect or self._default_connect

    def _default_connect(self):
        return psycopg2.connect(self.database_url, cursor_factory=RealDictCursor)

    def _run(self, operation: Callable, commit: bool = False):
        """Run operation(cursor) on a fresh connection, retrying transient errors."""

        @sync_retry(max_attempts=3, delay=1.0, backoff=2.0, retry_on=_TRANSIENT_DB_ERRORS)
        def attempt():
            conn = self._connect()
            cur = conn.cursor()
            try:
                result = operation(cur)
                if commit:
                    conn.commit()
                return result
            except Exception:
                if commit:
                    conn.rollback()
                raise
            finally:
                cur.close()
                conn.close()

        try:
            return attempt()
        except psycopg2.Error as e:
            logger.error(f"Database operation failed: {e}")
            raise DirectoryError(f"Database error: {e}") from e

    def _load_locations(self) -> List[Location]:
        def query(cur):
            cur.execute("""
                SELECT id, name, display_name, code, address_1, address_2, city, state,
                       zip_code, phone_number, latitude, longitude, landing_page_url
                FROM locations
                ORDER BY name
            """)
            return cur.fetchall()

        return [location_from_record(dict(row)) for row in self._run(query)]

    def _load_targeting_configs(self) -> List[TargetingConfig]:
        def query(cur):
            cur.execute("""
                SELECT location_id, user_id, primary_lat, primary_lng, radius_miles,
                       coordinate_list, landing_page_url, notes, is_active
                FROM location_configs
                WHERE user_id IS NULL
            """)
            return cur.fetchall()

        return [targeting_config_from_record(dict(row)) for row in self._run(query)]

    def _store_targeting_config(self, config: TargetingConfig):
        coordinate_list = json.dumps([asdict(c) for c in config.coordinate_list])
        values = (
            config.primary_lat, config.primary_lng, config.radius_miles, coordinate_list,
            config.landing_page_url, config.notes, config.is_active,
        )

        def upsert(cur):
            # NULL user_id never conflicts on the unique key, so update first
            cur.execute("""
                UPDATE location_configs
                SET primary_lat = %s, primary_lng = %s, radius_miles = %s, coordinate_list = %s,
                    landing_page_url = %s, notes = %s, is_active = %s, updated_at = CURRENT_TIMESTAMP
                WHERE location_id = %s AND user_id IS NULL
            """, values + (config.location_id,))
            if cur.rowcount == 0:
                cur.execute("""
                    INSERT INTO location_configs
                        (primary_lat, primary_lng, radius_miles, coordinate_list,
                         landing_page_url, notes, is_active, location_id)
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                """, values + (config.location_id,))

        self._run(upsert, commit=True)

    def _remove_targeting_config(self, location_id: str) -> bool:
        def delete(cur):
            cur.execute("""
                DELETE FROM location_configs
                WHERE location_id = %s AND user_id IS NULL
            """, (location_id,))
            return cur.rowcount > 0

        return self._run(delete, commit=True)


def build_directory(config: DirectoryConfig, connect: Optional[Callable] = None) -> LocationDirectory:
    """Create the directory selected by configuration."""
    cache = LocationCache(ttl_seconds=config.cache_ttl_seconds)

    if config.source == "postgres":
        logger.info("Using PostgreSQL location directory")
        return PostgresLocationDirectory(
            database_url=config.database_url,
            connect=connect,
            cache=cache,
            excluded_codes=config.excluded_codes,
        )

    logger.info(f"Using file location directory: {config.locations_file}")
    return FileLocationDirectory(
        locations_file=config.locations_file,
        targeting_file=config.targeting_file,
        cache=cache,
        excluded_codes=config.excluded_codes,
    )
