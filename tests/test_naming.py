import pytest

from campaign_export.templates.naming import (
    build_names,
    generate_ad_name,
    generate_ad_set_name,
    generate_campaign_name,
    normalize_location_name,
)

LOCATION_NAMES = [
    "Chicago",
    "O'Fallon",
    "Oak Brook  North",
    "  St. Louis\t- West\n",
    "",
    "Winston-Salem (Hanes Mall)",
]


def test_campaign_name_format():
    assert generate_campaign_name("Chicago", "June", "25") == "EWC_Meta_June25_Engagement_LocalTest_Chicago"


def test_custom_prefix_and_platform():
    name = generate_campaign_name("Chicago", "July", "4", prefix="ABC", platform="Facebook",
                                  objective="Traffic", test_type="ABTest")
    assert name == "ABC_Facebook_July4_Traffic_ABTest_Chicago"


@pytest.mark.parametrize("location_name", LOCATION_NAMES)
def test_ad_name_equals_ad_set_name(location_name):
    names = build_names(location_name, "June", "25")
    assert names.ad == names.ad_set
    assert names.ad_set == names.campaign + "_June"
    assert generate_ad_name(location_name, "June", "25") == generate_ad_set_name(location_name, "June", "25")


@pytest.mark.parametrize("location_name", LOCATION_NAMES)
def test_normalized_name_has_no_whitespace(location_name):
    normalized = normalize_location_name(location_name)
    assert not any(ch.isspace() for ch in normalized)


def test_whitespace_is_removed_not_replaced():
    assert normalize_location_name("Oak Brook  North") == "OakBrookNorth"
    assert normalize_location_name("  St. Louis\t- West\n") == "St.Louis-West"


def test_punctuation_and_case_are_kept():
    assert normalize_location_name("O'Fallon") == "O'Fallon"
    assert normalize_location_name("Winston-Salem (Hanes Mall)") == "Winston-Salem(HanesMall)"


def test_empty_and_missing_names_do_not_raise():
    assert normalize_location_name("") == ""
    assert normalize_location_name(None) == ""
    assert build_names(None, "June", "25").campaign == "EWC_Meta_June25_Engagement_LocalTest_"


def test_names_are_deterministic():
    first = build_names("Oak Brook", "June", "25", prefix="EWC")
    second = build_names("Oak Brook", "June", "25", prefix="EWC")
    assert first == second
