"""Name generators for campaigns, ad sets and ads."""

from typing import NamedTuple, Optional


class NameSet(NamedTuple):
    campaign: str
    ad_set: str
    ad: str


def normalize_location_name(name: Optional[str]) -> str:
    """Drop every whitespace run. Punctuation and case are left alone."""
    return "".join((name or "").split())


def generate_campaign_name(
    location_name: Optional[str],
    month: str,
    day: str,
    prefix: str = "EWC",
    platform: str = "Meta",
    objective: str = "Engagement",
    test_type: str = "LocalTest",
) -> str:
    """Generate campaign name, e.g. EWC_Meta_June25_Engagement_LocalTest_Chicago."""
    location = normalize_location_name(location_name)
    return f"{prefix}_{platform}_{month}{day}_{objective}_{test_type}_{location}"


def generate_ad_set_name(location_name: Optional[str], month: str, day: str, **kwargs) -> str:
    """Ad set name is the campaign name suffixed with the month."""
    return f"{generate_campaign_name(location_name, month, day, **kwargs)}_{month}"


def generate_ad_name(location_name: Optional[str], month: str, day: str, **kwargs) -> str:
    # Identical to the ad set name
    return generate_ad_set_name(location_name, month, day, **kwargs)


def build_names(
    location_name: Optional[str],
    month: str,
    day: str,
    prefix: str = "EWC",
    platform: str = "Meta",
    objective: str = "Engagement",
    test_type: str = "LocalTest",
) -> NameSet:
    """Build all three names for one location."""
    campaign = generate_campaign_name(
        location_name, month, day,
        prefix=prefix, platform=platform, objective=objective, test_type=test_type,
    )
    ad_set = f"{campaign}_{month}"
    return NameSet(campaign=campaign, ad_set=ad_set, ad=ad_set)
