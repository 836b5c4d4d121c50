"""Configuration management for the campaign export engine."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv


@dataclass
class DirectoryConfig:
    """Where location records and targeting configs come from."""
    source: str = "file"  # "file" or "postgres"
    locations_file: Path = Path("locations.json")
    targeting_file: Optional[Path] = None
    database_url: str = "postgresql://postgres:postgres@db:5432/myapp"
    cache_ttl_seconds: int = 300  # 0 = never expires, invalidate manually
    excluded_codes: Tuple[str, ...] = ("CORP",)


@dataclass
class GenerationConfig:
    """Job processing settings."""
    progress_steps: int = 20
    tick_interval: float = 0.05
    job_timeout_seconds: float = 300.0
    default_landing_page: str = "https://waxcenter.com"
    max_preview_records: int = 12
    max_jobs_retained: int = 100


@dataclass
class AppConfig:
    """Application configuration."""
    directory: DirectoryConfig = field(default_factory=DirectoryConfig)
    generation: GenerationConfig = field(default_factory=GenerationConfig)
    log_level: str = "INFO"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"Environment variable {name} must be an integer, got {raw!r}")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise RuntimeError(f"Environment variable {name} must be a number, got {raw!r}")


def load_config_from_env(env_file: Optional[Path] = None) -> AppConfig:
    """Load configuration from environment variables (and a .env file if present)."""

    env_path = env_file or Path(".env")
    if env_path.exists():
        load_dotenv(env_path)

    source = os.getenv("LOCATION_SOURCE", "file").lower().strip()
    if source not in ("file", "postgres"):
        raise RuntimeError(
            f"LOCATION_SOURCE must be 'file' or 'postgres', got {source!r}"
        )

    targeting_file = os.getenv("TARGETING_FILE")
    excluded = os.getenv("EXCLUDED_LOCATION_CODES", "CORP")

    directory_config = DirectoryConfig(
        source=source,
        locations_file=Path(os.getenv("LOCATIONS_FILE", "locations.json")),
        targeting_file=Path(targeting_file) if targeting_file else None,
        database_url=os.getenv("DATABASE_URL", "postgresql://postgres:postgres@db:5432/myapp"),
        cache_ttl_seconds=_env_int("LOCATION_CACHE_TTL", 300),
        excluded_codes=tuple(code.strip() for code in excluded.split(",") if code.strip()),
    )

    generation_config = GenerationConfig(
        progress_steps=_env_int("PROGRESS_STEPS", 20),
        tick_interval=_env_float("TICK_INTERVAL", 0.05),
        job_timeout_seconds=_env_float("JOB_TIMEOUT_SECONDS", 300.0),
        default_landing_page=os.getenv("DEFAULT_LANDING_PAGE", "https://waxcenter.com"),
        max_preview_records=_env_int("MAX_PREVIEW_RECORDS", 12),
        max_jobs_retained=_env_int("MAX_JOBS_RETAINED", 100),
    )

    if generation_config.progress_steps < 1:
        raise RuntimeError("PROGRESS_STEPS must be at least 1")

    return AppConfig(
        directory=directory_config,
        generation=generation_config,
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
