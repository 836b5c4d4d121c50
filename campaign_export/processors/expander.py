"""Cross-product expansion of locations x ad variants into export records."""

import logging
import re
from typing import Iterator, Optional, Sequence

from campaign_export.dates import parse_datetime
from campaign_export.errors import InputError
from campaign_export.models import (
    AdVariant,
    CampaignConfiguration,
    GeneratedRecord,
    Location,
    TargetingConfig,
)
from campaign_export.processors.csv_export import format_decimal
from campaign_export.reference_template import REFERENCE_TEMPLATE, ReferenceCreativeTemplate
from campaign_export.templates.naming import build_names

logger = logging.getLogger(__name__)

DEFAULT_LANDING_PAGE = "https://waxcenter.com"

_PLACEHOLDER = re.compile(r"\{\{location\.(name|city|state|address|phone|id)\}\}")


def substitute_variables(template: Optional[str], location: Location) -> str:
    """Fill {{location.*}} placeholders with the location's values."""
    if not template:
        return ""

    values = {
        "name": location.name,
        "city": location.city,
        "state": location.state,
        "address": location.address,
        "phone": location.phone_number,
        "id": location.id,
    }
    return _PLACEHOLDER.sub(lambda m: values[m.group(1)] or "", template)


def active_targeting(location: Location) -> Optional[TargetingConfig]:
    config = location.targeting
    if config is not None and config.is_active:
        return config
    return None


def resolve_landing_page(
    location: Location,
    ad_variant: AdVariant,
    default: str = DEFAULT_LANDING_PAGE,
) -> str:
    """First non-empty of: location field, targeting override, variant template, default."""
    config = active_targeting(location)
    candidates = (
        location.landing_page_url,
        config.landing_page_url if config else None,
        substitute_variables(ad_variant.landing_page, location),
    )
    for candidate in candidates:
        if candidate and candidate.strip():
            return candidate.strip()
    return default


def format_point(lat: float, lng: float, radius: float) -> str:
    return f"({lat:.3f}, {lng:.3f}) +{format_decimal(radius)}mi"


def render_targeting(location: Location, campaign: CampaignConfiguration) -> str:
    """Render the Addresses cell for one location.

    An active config with a full primary triple wins; otherwise the
    location's own point is used with the campaign radius. Extra
    coordinates from an active config always follow the primary entry.
    """
    config = active_targeting(location)

    if config is not None and config.has_primary:
        entries = [format_point(config.primary_lat, config.primary_lng, config.radius_miles)]
    else:
        entries = [format_point(location.lat, location.lng, campaign.radius)]

    if config is not None:
        entries.extend(format_point(c.lat, c.lng, c.radius) for c in config.coordinate_list)

    return ", ".join(entries)


def build_record(
    location: Location,
    ad_variant: AdVariant,
    campaign: CampaignConfiguration,
    template: ReferenceCreativeTemplate = REFERENCE_TEMPLATE,
    default_landing_page: str = DEFAULT_LANDING_PAGE,
) -> GeneratedRecord:
    names = build_names(
        location.name,
        campaign.resolved_month,
        campaign.resolved_day,
        prefix=campaign.prefix,
        platform=campaign.platform,
        objective=campaign.objective,
        test_type=campaign.test_type,
    )

    return GeneratedRecord(
        location_id=location.id,
        ad_variant_id=ad_variant.id,
        campaign_name=names.campaign,
        ad_set_name=names.ad_set,
        ad_name=names.ad,
        link=resolve_landing_page(location, ad_variant, default_landing_page),
        addresses=render_targeting(location, campaign),
        lifetime_budget=campaign.budget,
        start_time=parse_datetime(campaign.start_date),
        stop_time=parse_datetime(campaign.end_date),
        bid_strategy=campaign.bid_strategy,
        template=template,
    )


class RecordExpansion:
    """Lazy, restartable sequence of records, location-major."""

    def __init__(
        self,
        locations: Sequence[Location],
        ad_variants: Sequence[AdVariant],
        campaign: CampaignConfiguration,
        template: ReferenceCreativeTemplate = REFERENCE_TEMPLATE,
        default_landing_page: str = DEFAULT_LANDING_PAGE,
    ):
        self.locations = list(locations)
        self.ad_variants = list(ad_variants)
        self.campaign = campaign
        self.template = template
        self.default_landing_page = default_landing_page

    def __len__(self) -> int:
        return len(self.locations) * len(self.ad_variants)

    def __iter__(self) -> Iterator[GeneratedRecord]:
        for location in self.locations:
            for ad_variant in self.ad_variants:
                yield build_record(
                    location,
                    ad_variant,
                    self.campaign,
                    template=self.template,
                    default_landing_page=self.default_landing_page,
                )


def expand_records(
    locations: Sequence[Location],
    ad_variants: Sequence[AdVariant],
    campaign: CampaignConfiguration,
    template: ReferenceCreativeTemplate = REFERENCE_TEMPLATE,
    default_landing_page: str = DEFAULT_LANDING_PAGE,
) -> RecordExpansion:
    """Expand the cross-product; an empty side is an input error."""
    problems = []
    if not locations:
        problems.append("no locations to expand")
    if not ad_variants:
        problems.append("no ad variants to expand")
    if problems:
        raise InputError(problems)

    expansion = RecordExpansion(locations, ad_variants, campaign, template, default_landing_page)
    logger.debug(
        f"Expanding {len(expansion.locations)} locations x {len(expansion.ad_variants)} ad variants"
    )
    return expansion
