"""Structural validation for targeting configs and generation requests."""

import logging
import math
from typing import List, Optional, Sequence
from urllib.parse import urlparse

from campaign_export.dates import parse_datetime
from campaign_export.errors import InputError
from campaign_export.models import AdVariant, CampaignConfiguration, TargetingConfig

logger = logging.getLogger(__name__)


def _is_finite(value) -> bool:
    return value is not None and math.isfinite(value)


def _is_positive(value) -> bool:
    return _is_finite(value) and value > 0


def _check_point(lat, lng, radius, label: str) -> List[str]:
    problems = []
    if not _is_finite(lat) or not -90 <= lat <= 90:
        problems.append(f"{label}: latitude must be between -90 and 90")
    if not _is_finite(lng) or not -180 <= lng <= 180:
        problems.append(f"{label}: longitude must be between -180 and 180")
    if not _is_positive(radius):
        problems.append(f"{label}: radius must be greater than 0")
    return problems


def is_absolute_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def validate_targeting_config(config: TargetingConfig) -> List[str]:
    """Return a list of problems (empty when the config is valid)."""
    problems = []

    primary = (config.primary_lat, config.primary_lng, config.radius_miles)
    if any(v is not None for v in primary):
        if any(v is None for v in primary):
            problems.append("primaryLat, primaryLng and radiusMiles must be set together")
        else:
            problems.extend(_check_point(*primary, label="primary point"))

    for index, coord in enumerate(config.coordinate_list):
        problems.extend(_check_point(coord.lat, coord.lng, coord.radius, label=f"coordinate {index + 1}"))

    if config.landing_page_url and not is_absolute_url(config.landing_page_url):
        problems.append(f"landingPageUrl is not a valid absolute URL: {config.landing_page_url}")

    return problems


def validate_campaign(campaign: CampaignConfiguration) -> List[str]:
    problems = []

    if not campaign.prefix:
        problems.append("campaign prefix is required")
    if not campaign.platform:
        problems.append("campaign platform is required")
    if not _is_positive(campaign.budget):
        problems.append("budget must be greater than 0")
    if not _is_positive(campaign.radius):
        problems.append("radius must be greater than 0")
    if not campaign.resolved_month or not campaign.resolved_day:
        problems.append("campaign month and day are required")

    start = end = None
    try:
        start = parse_datetime(campaign.start_date)
    except ValueError as e:
        problems.append(f"startDate: {e}")
    try:
        end = parse_datetime(campaign.end_date)
    except ValueError as e:
        problems.append(f"endDate: {e}")

    if start is not None and end is not None and not start < end:
        problems.append("startDate must be before endDate")

    return problems


def validate_submission(
    location_ids: Sequence[str],
    ad_variants: Sequence[AdVariant],
    campaign: Optional[CampaignConfiguration],
):
    """Raise InputError listing every problem with a generation request."""
    problems = []

    if not location_ids:
        problems.append("at least one location must be selected")
    if not ad_variants:
        problems.append("at least one ad variant is required")

    seen = set()
    for variant in ad_variants:
        if variant.id in seen:
            problems.append(f"duplicate ad variant id: {variant.id}")
        seen.add(variant.id)

    if campaign is None:
        problems.append("campaign configuration is required")
    else:
        problems.extend(validate_campaign(campaign))

    if problems:
        logger.warning(f"Rejected generation request: {problems}")
        raise InputError(problems)
