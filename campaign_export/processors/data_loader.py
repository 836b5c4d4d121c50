"""Location and targeting data loading from various sources."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from campaign_export.dates import parse_datetime
from campaign_export.models import (
    AdStatus,
    AdVariant,
    CampaignConfiguration,
    Coordinate,
    Location,
    TargetingConfig,
)

logger = logging.getLogger(__name__)


def _to_float(value: Any, default: Optional[float] = None) -> Optional[float]:
    if value is None or value == "":
        return default
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    # pandas hands back NaN for empty numeric cells
    if result != result:
        return default
    return result


def _to_bool(value: Any, default: bool = True) -> bool:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "y", "t")


def _first(record: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = record.get(key)
        if value not in (None, ""):
            return value
    return None


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def location_from_record(record: Dict[str, Any]) -> Location:
    """Build a Location from a nested center record or a flat row.

    Nested records carry ``address_info``, ``contact_info.phone_1``,
    ``state.short_name`` and ``location.latitude/longitude``. Flat rows (CSV,
    Excel, database) use plain column names. Missing values get defaults here
    so nothing downstream has to guess.
    """
    address_info = _as_dict(record.get("address_info"))
    phone_1 = _as_dict(_as_dict(record.get("contact_info")).get("phone_1"))
    state = record.get("state")
    coords = _as_dict(record.get("location")) or _as_dict(record.get("coordinates"))

    state_name = state.get("short_name") if isinstance(state, dict) else state
    name = _first(record, "name") or "Unknown Location"

    lat = _first(coords, "latitude", "lat")
    if lat is None:
        lat = _first(record, "latitude", "lat")
    lng = _first(coords, "longitude", "lng")
    if lng is None:
        lng = _first(record, "longitude", "lng")

    return Location(
        id=str(_first(record, "id") or ""),
        name=str(name),
        display_name=str(_first(record, "display_name", "displayName") or name),
        code=str(_first(record, "code") or ""),
        address_1=str(_first(address_info, "address_1") or _first(record, "address_1", "address") or ""),
        address_2=str(_first(address_info, "address_2") or _first(record, "address_2") or ""),
        city=str(_first(address_info, "city") or _first(record, "city") or "Unknown City"),
        state=str(state_name or "Unknown State"),
        zip_code=str(_first(address_info, "zip_code") or _first(record, "zip_code", "zipCode") or ""),
        phone_number=str(_first(phone_1, "display_number") or _first(record, "phone_number", "phoneNumber") or ""),
        lat=_to_float(lat, 0.0),
        lng=_to_float(lng, 0.0),
        landing_page_url=_first(record, "landing_page_url", "landingPageUrl"),
    )


def _coordinate_list(value: Any) -> List[Coordinate]:
    if value in (None, ""):
        return []
    if isinstance(value, str):
        value = json.loads(value)

    coords = []
    for entry in value or []:
        coords.append(Coordinate(
            lat=_to_float(entry.get("lat")),
            lng=_to_float(entry.get("lng")),
            radius=_to_float(entry.get("radius"), 1.0),
        ))
    return coords


def targeting_config_from_record(record: Dict[str, Any]) -> TargetingConfig:
    """Build a TargetingConfig from camelCase JSON or snake_case columns."""
    location_id = _first(record, "location_id", "locationId")
    if not location_id:
        raise ValueError(f"Targeting config without location id: {record}")

    return TargetingConfig(
        location_id=str(location_id),
        primary_lat=_to_float(_first(record, "primary_lat", "primaryLat")),
        primary_lng=_to_float(_first(record, "primary_lng", "primaryLng")),
        radius_miles=_to_float(_first(record, "radius_miles", "radiusMiles")),
        coordinate_list=_coordinate_list(_first(record, "coordinate_list", "coordinateList")),
        landing_page_url=_first(record, "landing_page_url", "landingPageUrl"),
        notes=str(_first(record, "notes") or ""),
        is_active=_to_bool(_first(record, "is_active", "isActive")),
        user_id=_first(record, "user_id", "userId"),
    )


def ad_variant_from_record(record: Dict[str, Any]) -> AdVariant:
    status = _first(record, "status") or AdStatus.ACTIVE.value
    return AdVariant(
        id=str(_first(record, "id") or ""),
        name=str(_first(record, "name") or ""),
        template_id=str(_first(record, "template_id", "templateId") or ""),
        caption=str(_first(record, "caption") or ""),
        scheduled_date=_first(record, "scheduled_date", "scheduledDate"),
        status=AdStatus(str(status).capitalize()),
        landing_page=str(_first(record, "landing_page", "landingPage") or ""),
        notes=str(_first(record, "notes") or ""),
    )


def campaign_from_record(record: Dict[str, Any]) -> CampaignConfiguration:
    """Build a CampaignConfiguration (with its ad variants) from JSON data.

    Keys that are absent keep the dataclass defaults.
    """
    defaults = CampaignConfiguration()
    selected = _first(record, "selected_date", "selectedDate")
    budget = _first(record, "budget")
    radius = _first(record, "radius")
    day = _first(record, "day")

    return CampaignConfiguration(
        prefix=str(_first(record, "prefix") or defaults.prefix),
        platform=str(_first(record, "platform") or defaults.platform),
        objective=str(_first(record, "objective") or defaults.objective),
        test_type=str(_first(record, "test_type", "testType") or defaults.test_type),
        duration=str(_first(record, "duration") or defaults.duration),
        budget=_to_float(budget) if budget is not None else defaults.budget,
        bid_strategy=str(_first(record, "bid_strategy", "bidStrategy") or defaults.bid_strategy),
        start_date=_first(record, "start_date", "startDate") or defaults.start_date,
        end_date=_first(record, "end_date", "endDate"),
        radius=_to_float(radius) if radius is not None else defaults.radius,
        ads=[ad_variant_from_record(ad) for ad in record.get("ads") or []],
        selected_date=parse_datetime(selected) if selected else None,
        month=_first(record, "month") or (None if selected else defaults.month),
        day=str(day) if day is not None else (None if selected else defaults.day),
    )


def load_campaign(file_path: Path) -> CampaignConfiguration:
    """Load a campaign definition (including ``ads``) from a JSON file."""

    if not file_path.exists():
        raise FileNotFoundError(f"Campaign file not found: {file_path}")

    with open(file_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    campaign = campaign_from_record(data)
    logger.info(f"Loaded campaign {campaign.prefix} with {len(campaign.ads)} ad variants")
    return campaign


def _read_json_records(file_path: Path, key: str) -> List[Dict[str, Any]]:
    with open(file_path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get(key, [])
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of records in {file_path}")
    return data


def _read_table_records(file_path: Path, sheet_name=0) -> List[Dict[str, Any]]:
    suffix = file_path.suffix.lower()
    if suffix in (".xlsx", ".xls"):
        df = pd.read_excel(file_path, sheet_name=sheet_name, dtype=str)
    else:
        df = pd.read_csv(file_path, dtype=str)
    df = df.fillna("")
    df.columns = [str(col).strip() for col in df.columns]
    return df.to_dict(orient="records")


def load_locations(file_path: Path) -> List[Location]:
    """Load locations from JSON (``{"centers": [...]}`` or a list), CSV or Excel."""

    if not file_path.exists():
        raise FileNotFoundError(f"Locations file not found: {file_path}")

    suffix = file_path.suffix.lower()
    logger.info(f"Loading locations from {file_path}")

    try:
        if suffix == ".json":
            records = _read_json_records(file_path, "centers")
        elif suffix in (".csv", ".xlsx", ".xls"):
            records = _read_table_records(file_path)
        else:
            raise ValueError(f"Unsupported file format: {suffix}. Use .json, .csv or .xlsx")

        locations = [location_from_record(record) for record in records]
        locations = [loc for loc in locations if loc.id]

        logger.info(f"Loaded {len(locations)} locations from {file_path.name}")
        return locations

    except Exception as e:
        logger.error(f"Failed to load locations file: {e}")
        raise


def load_targeting_configs(file_path: Path) -> List[TargetingConfig]:
    """Load targeting configs from JSON (``{"configs": [...]}`` or a list) or CSV."""

    if not file_path.exists():
        raise FileNotFoundError(f"Targeting file not found: {file_path}")

    suffix = file_path.suffix.lower()
    logger.info(f"Loading targeting configs from {file_path}")

    try:
        if suffix == ".json":
            records = _read_json_records(file_path, "configs")
        elif suffix in (".csv", ".xlsx", ".xls"):
            records = _read_table_records(file_path)
        else:
            raise ValueError(f"Unsupported file format: {suffix}. Use .json or .csv")

        configs = [targeting_config_from_record(record) for record in records]
        logger.info(f"Loaded {len(configs)} targeting configs")
        return configs

    except Exception as e:
        logger.error(f"Failed to load targeting file: {e}")
        raise
