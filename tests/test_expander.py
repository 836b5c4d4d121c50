from dataclasses import replace

import pytest

from campaign_export.errors import InputError
from campaign_export.models import AdVariant, Coordinate, TargetingConfig
from campaign_export.processors.expander import (
    build_record,
    expand_records,
    render_targeting,
    resolve_landing_page,
    substitute_variables,
)
from campaign_export.reference_template import REFERENCE_TEMPLATE


def test_targeting_uses_config_primary_point(chicago, chicago_targeting, campaign):
    location = replace(chicago, targeting=chicago_targeting)
    assert render_targeting(location, campaign) == "(41.714, -87.653) +8mi"


def test_targeting_falls_back_to_location_and_campaign_radius(chicago, campaign):
    assert render_targeting(chicago, campaign) == "(41.878, -87.630) +5mi"


def test_inactive_config_is_ignored(chicago, chicago_targeting, campaign):
    location = replace(chicago, targeting=replace(chicago_targeting, is_active=False))
    assert render_targeting(location, campaign) == "(41.878, -87.630) +5mi"


def test_config_without_primary_point_uses_location_coordinates(chicago, campaign):
    config = TargetingConfig(location_id="loc-chi", notes="landing page only")
    location = replace(chicago, targeting=config)
    assert render_targeting(location, campaign) == "(41.878, -87.630) +5mi"


def test_extra_coordinates_follow_primary_entry(chicago, chicago_targeting, campaign):
    config = replace(chicago_targeting, coordinate_list=[
        Coordinate(41.9, -87.7, 2.5),
        Coordinate(41.85, -87.65),
    ])
    location = replace(chicago, targeting=config)
    assert render_targeting(location, campaign) == (
        "(41.714, -87.653) +8mi, (41.900, -87.700) +2.5mi, (41.850, -87.650) +1mi"
    )


def test_landing_page_precedence(chicago, chicago_targeting):
    variant = AdVariant(id="ad-1", name="x", landing_page="https://waxcenter.com/{{location.city}}/{{location.id}}")

    assert resolve_landing_page(chicago, AdVariant(id="ad-1", name="x")) == "https://waxcenter.com"
    assert resolve_landing_page(chicago, variant) == "https://waxcenter.com/Chicago/loc-chi"

    configured = replace(chicago, targeting=replace(chicago_targeting, landing_page_url="https://waxcenter.com/chicago-loop"))
    assert resolve_landing_page(configured, variant) == "https://waxcenter.com/chicago-loop"

    explicit = replace(configured, landing_page_url="https://example.com/own-page")
    assert resolve_landing_page(explicit, variant) == "https://example.com/own-page"


def test_custom_default_landing_page(chicago, ad_variant):
    assert resolve_landing_page(chicago, ad_variant, default="https://example.com") == "https://example.com"


def test_substitute_variables(chicago):
    template = "{{location.name}}|{{location.state}}|{{location.address}}|{{location.phone}}|{{location.unknown}}"
    assert substitute_variables(template, chicago) == "Chicago|IL|123 State St|(312) 555-0100|{{location.unknown}}"
    assert substitute_variables(None, chicago) == ""


def test_record_fields(chicago, ad_variant, campaign):
    record = build_record(chicago, ad_variant, campaign)

    assert record.location_id == "loc-chi"
    assert record.ad_variant_id == "ad-1"
    assert record.campaign_name == "EWC_Meta_June25_Engagement_LocalTest_Chicago"
    assert record.ad_name == record.ad_set_name == "EWC_Meta_June25_Engagement_LocalTest_Chicago_June"
    assert record.lifetime_budget == 92.69
    assert record.start_time.isoformat() == "2025-06-26T02:32:00+00:00"
    assert record.template is REFERENCE_TEMPLATE


def test_cross_product_is_location_major(chicago, ofallon, ad_variants, campaign):
    expansion = expand_records([chicago, ofallon], ad_variants, campaign)

    pairs = [(r.location_id, r.ad_variant_id) for r in expansion]
    assert pairs == [
        ("loc-chi", "ad-1"), ("loc-chi", "ad-2"), ("loc-chi", "ad-3"),
        ("loc-ofa", "ad-1"), ("loc-ofa", "ad-2"), ("loc-ofa", "ad-3"),
    ]
    assert len(expansion) == 6


def test_expansion_is_restartable(chicago, ofallon, ad_variants, campaign):
    expansion = expand_records([chicago, ofallon], ad_variants, campaign)

    first = [r.ad_name for r in expansion]
    second = [r.ad_name for r in expansion]
    assert first == second
    assert len(first) == 6


def test_empty_inputs_are_rejected(chicago, ad_variant, campaign):
    with pytest.raises(InputError):
        expand_records([], [ad_variant], campaign)
    with pytest.raises(InputError):
        expand_records([chicago], [], campaign)


def test_creative_fields_do_not_vary_by_location(chicago, ofallon, ad_variant, campaign):
    records = list(expand_records([chicago, ofallon], [ad_variant], campaign))
    assert records[0].template is records[1].template
    assert records[0].campaign_name != records[1].campaign_name
