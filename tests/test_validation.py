from datetime import datetime, timezone

import pytest

from campaign_export.dates import parse_datetime
from campaign_export.errors import InputError
from campaign_export.models import AdVariant, CampaignConfiguration, Coordinate, TargetingConfig
from campaign_export.validation import (
    validate_campaign,
    validate_submission,
    validate_targeting_config,
)


def test_valid_targeting_config(chicago_targeting):
    assert validate_targeting_config(chicago_targeting) == []
    assert validate_targeting_config(TargetingConfig(location_id="x")) == []


def test_primary_point_is_all_or_nothing():
    config = TargetingConfig(location_id="x", primary_lat=41.7, primary_lng=-87.6)
    assert validate_targeting_config(config) == [
        "primaryLat, primaryLng and radiusMiles must be set together"
    ]


@pytest.mark.parametrize("lat, lng, radius", [
    (90.1, 0, 1),
    (-91, 0, 1),
    (0, 180.5, 1),
    (0, -181, 1),
    (0, 0, 0),
    (0, 0, -2),
])
def test_out_of_range_primary_point(lat, lng, radius):
    config = TargetingConfig(location_id="x", primary_lat=lat, primary_lng=lng, radius_miles=radius)
    assert len(validate_targeting_config(config)) == 1


def test_boundary_values_are_valid():
    config = TargetingConfig(location_id="x", primary_lat=-90, primary_lng=180, radius_miles=0.1)
    assert validate_targeting_config(config) == []


def test_each_coordinate_is_checked(chicago_targeting):
    chicago_targeting.coordinate_list = [Coordinate(41.9, -87.7, 2), Coordinate(100, -87.7, 0)]
    problems = validate_targeting_config(chicago_targeting)
    assert problems == [
        "coordinate 2: latitude must be between -90 and 90",
        "coordinate 2: radius must be greater than 0",
    ]


@pytest.mark.parametrize("url", ["waxcenter.com", "ftp://waxcenter.com", "https://"])
def test_landing_page_must_be_absolute(url):
    config = TargetingConfig(location_id="x", landing_page_url=url)
    assert len(validate_targeting_config(config)) == 1


def test_valid_campaign(campaign):
    assert validate_campaign(campaign) == []


def test_campaign_problems():
    campaign = CampaignConfiguration(
        prefix="",
        budget=-1,
        radius=0,
        start_date="not a date",
        month=None,
        day=None,
    )
    problems = validate_campaign(campaign)

    assert "campaign prefix is required" in problems
    assert "budget must be greater than 0" in problems
    assert "radius must be greater than 0" in problems
    assert "campaign month and day are required" in problems
    assert any(p.startswith("startDate:") for p in problems)


def test_start_must_precede_end(campaign):
    campaign.end_date = campaign.start_date
    assert validate_campaign(campaign) == ["startDate must be before endDate"]


def test_month_and_day_from_selected_date(campaign):
    campaign.month = None
    campaign.day = None
    campaign.selected_date = datetime(2025, 7, 4, tzinfo=timezone.utc)

    assert validate_campaign(campaign) == []
    assert campaign.resolved_month == "July"
    assert campaign.resolved_day == "4"


def test_submission_aggregates_problems(campaign):
    variants = [AdVariant(id="a", name="A"), AdVariant(id="a", name="A again")]
    campaign.budget = 0

    with pytest.raises(InputError) as exc_info:
        validate_submission([], variants, campaign)

    assert exc_info.value.problems == [
        "at least one location must be selected",
        "duplicate ad variant id: a",
        "budget must be greater than 0",
    ]


def test_submission_requires_ad_variants(campaign):
    with pytest.raises(InputError) as exc_info:
        validate_submission(["loc-chi"], [], campaign)
    assert exc_info.value.problems == ["at least one ad variant is required"]


def test_parse_datetime_formats():
    expected = datetime(2025, 6, 26, 2, 32, tzinfo=timezone.utc)

    assert parse_datetime("2025-06-26T02:32:00Z") == expected
    assert parse_datetime("2025-06-26T04:32:00+02:00") == expected
    assert parse_datetime("06/26/2025 2:32:00 am") == expected
    assert parse_datetime("06/26/2025 02:32 AM") == expected
    assert parse_datetime(datetime(2025, 6, 26, 2, 32)) == expected
    assert parse_datetime("06/26/2025") == datetime(2025, 6, 26, tzinfo=timezone.utc)
    assert parse_datetime(None) is None
    assert parse_datetime("  ") is None

    with pytest.raises(ValueError):
        parse_datetime("26 June")


@pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_budget_and_radius(campaign, value):
    campaign.budget = value
    campaign.radius = value
    problems = validate_campaign(campaign)

    assert "budget must be greater than 0" in problems
    assert "radius must be greater than 0" in problems


@pytest.mark.parametrize("lat, lng, radius", [
    (float("nan"), 0, 1),
    (0, float("nan"), 1),
    (0, 0, float("nan")),
    (0, 0, float("inf")),
])
def test_non_finite_points(lat, lng, radius):
    config = TargetingConfig(location_id="x", primary_lat=lat, primary_lng=lng, radius_miles=radius)
    assert len(validate_targeting_config(config)) == 1

    config = TargetingConfig(location_id="x", coordinate_list=[Coordinate(lat, lng, radius)])
    assert len(validate_targeting_config(config)) == 1
