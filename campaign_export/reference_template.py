"""Reference creative template shared by every generated ad row.

These values come from a known-good bulk-import file and are not user
editable. Only name, targeting, landing page, budget and schedule fields
vary per row; everything here is copied verbatim.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Tuple

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent / "data"

DEFAULT_PLACEMENTS = (
    "Default, Default, Default, Default, audience_network classic, "
    "facebook biz_disco_feed, facebook facebook_reels, facebook facebook_reels_overlay, "
    "facebook feed, facebook instream_video, facebook marketplace, "
    "facebook right_hand_column, facebook search, facebook story, facebook video_feeds, "
    "instagram explore, instagram reels, instagram story, instagram stream, messenger story"
)

INTERESTS: Tuple[Tuple[str, str], ...] = (
    ("6002997877444", "Waxing"),
    ("6003095705016", "Beauty & Fashion"),
    ("6003152657675", "Wellness SPA"),
    ("6003244295567", "Self care"),
    ("6003251053061", "Shaving"),
    ("6003393295343", "Health And Beauty"),
    ("6003503807196", "European Wax Center"),
    ("6003522953242", "Brazilian Waxing"),
    ("6015279452180", "Bombshell Brazilian Waxing & Beauty Lounge"),
)


def load_excluded_zip_codes(path: Path = DATA_DIR / "excluded_zip_codes.txt") -> Tuple[str, ...]:
    """Load the excluded zip code list (one code per line)."""
    if not path.exists():
        raise ValueError(f"Excluded zip code file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        codes = tuple(line.strip() for line in f if line.strip())

    logger.debug(f"Loaded {len(codes)} excluded zip codes from {path}")
    return codes


@dataclass(frozen=True)
class ReferenceCreativeTemplate:
    """Fixed campaign, ad set and ad level values for the Meta bulk importer."""

    # Campaign level
    campaign_status: str = "ACTIVE"
    campaign_objective: str = "Outcome Engagement"
    buying_type: str = "AUCTION"
    new_objective: str = "Yes"
    buy_with_prime_type: str = "NONE"
    is_budget_scheduling_enabled_for_campaign: str = "No"
    campaign_high_demand_periods: Tuple[Any, ...] = ()
    buy_with_integration_partner: str = "NONE"

    # Ad set level
    ad_set_run_status: str = "ACTIVE"
    ad_set_lifetime_impressions: int = 0
    destination_type: str = "UNDEFINED"
    use_accelerated_delivery: str = "No"
    is_budget_scheduling_enabled_for_ad_set: str = "No"
    ad_set_high_demand_periods: Tuple[Any, ...] = ()
    link_object_id: str = "o:108555182262"
    optimized_conversion_tracking_pixels: str = "tp:1035642271793092"
    optimized_event: str = "SCHEDULE"
    location_types: str = "home, recent"
    excluded_regions: str = "Alaska US, Wyoming US"
    excluded_zip_codes: Tuple[str, ...] = ()
    gender: str = "Women"
    age_min: int = 18
    age_max: int = 54
    excluded_custom_audiences: str = "120213927766160508:AUD-FBAllPriorServicedCustomers"
    interests: Tuple[Tuple[str, str], ...] = INTERESTS
    targeting_relaxation: str = "custom_audience: Off, lookalike: Off"
    brand_safety_inventory_filtering_levels: str = "FACEBOOK_STANDARD, AN_STANDARD, FEED_RELAXED"
    optimization_goal: str = "OFFSITE_CONVERSIONS"
    attribution_windows: Tuple[Tuple[str, int], ...] = (("CLICK_THROUGH", 1),)
    billing_event: str = "IMPRESSIONS"

    # Ad level
    ad_status: str = "ACTIVE"
    preview_link: str = "https://www.facebook.com/?feed_demo_ad=120228258706880508&h=AQCXa9GVq2c5YDX-hxc"
    instagram_preview_link: str = "https://www.instagram.com/p/DLShxy_sE-_/"
    dynamic_creative_ad_format: str = "Link Page Post Ad"
    title: str = "Get your First Wax Free"
    title_placement: str = DEFAULT_PLACEMENTS
    body: str = "You learn something new everyday"
    body_placement: str = DEFAULT_PLACEMENTS
    display_link: str = "waxcenter.com"
    link_placement: str = DEFAULT_PLACEMENTS
    optimize_text_per_person: str = "No"
    conversion_tracking_pixels: str = "tp:1035642271793092"
    image_hash: str = "303541819130038:d28e1dc58e7fcc7ac6d3e309eac2d3ad"
    video_thumbnail_url: str = (
        "https://scontent-dfw5-1.xx.fbcdn.net/v/t15.13418-10/"
        "467701760_926931896038122_8058283634477458555_n.jpg?stp=dst-jpg_tt6&_nc_cat=103"
        "&ccb=1-7&_nc_sid=ace027&_nc_oc=AdlRhXqk3kXyhfvnEB8Qa7Oe8kveKql6aq7ivD7J8C1oa6U_ViFu5l3ECSLnLDYj1YI"
        "&_nc_ad=z-m&_nc_cid=0&_nc_zt=23&_nc_ht=scontent-dfw5-1.xx&_nc_gid=DprWR9RBxU4CVd-KxeA7MA"
        "&oh=00_AfPBEpbKMyhLvJjipyeZU_KeCjc8t-5S7HwTZ6zRx7Td_Q&oe=685FA2F2"
    )
    image_placement: str = "Default"
    additional_image_1_hash: str = "303541819130038:0642b7ec8b997de13d35e3760f43ee2e"
    additional_image_1_placement: str = "audience_network classic"
    additional_image_2_hash: str = ""
    additional_image_2_placement: str = ""
    additional_image_3_hash: str = ""
    additional_image_3_placement: str = ""
    additional_image_4_hash: str = ""
    additional_image_4_placement: str = ""
    creative_type: str = "Link Page Post Ad"
    url_tags: str = (
        "utm_source=facebook&utm_medium=cpc&utm_campaign={{campaign.name}}"
        "&utm_content={{ad.name}}&acadia_source=facebook&acadia_medium=cpc"
        "&utm_term={{adset.name}}&placement={{placement}}"
    )
    video_id: str = "v:1794899587789121"
    video_placement: str = (
        "facebook biz_disco_feed, facebook facebook_reels_overlay, facebook feed, "
        "facebook instream_video, facebook marketplace, facebook video_feeds, "
        "instagram explore, instagram stream"
    )
    additional_video_1_id: str = "v:1243573153921320"
    additional_video_1_placement: str = (
        "facebook facebook_reels, facebook right_hand_column, facebook search, "
        "facebook story, instagram reels, instagram story, messenger story"
    )
    additional_video_1_thumbnail_url: str = (
        "https://scontent-dfw5-2.xx.fbcdn.net/v/t15.13418-10/"
        "467256659_543283285137927_5402167441693162688_n.jpg?stp=dst-jpg_tt6&_nc_cat=102"
        "&ccb=1-7&_nc_sid=ace027&_nc_oc=Adl-w5-p4KgKcpfNbwFCMI8p2z8bvGQvk3O2EUHsARUHic1iLG7nej7NHJZf5vrcj-w"
        "&_nc_ad=z-m&_nc_cid=0&_nc_zt=23&_nc_ht=scontent-dfw5-2.xx&_nc_gid=DprWR9RBxU4CVd-KxeA7MA"
        "&oh=00_AfMi8ih1MsPowL9pJrKsL6C9UW1sfWFo4HOhjCFJSCvgkA&oe=685F93A7"
    )
    instagram_account_id: str = "x:602557576501192"
    call_to_action: str = "BOOK_TRAVEL"
    additional_custom_tracking_specs: Tuple[Any, ...] = ()
    video_retargeting: str = "No"
    permalink: str = (
        "https://www.facebook.com/100067578193272/posts/"
        "pfbid02f9M3ZgPPTqtYjvm3MzhNwE4HVV1BUT4cmZEactPNPvgPUgCnFVYC4GQ6E5pAeCQl"
        "?dco_ad_id=120228258706880508"
    )
    use_page_as_actor: str = "No"
    dynamic_creative_call_to_action: str = "BOOK_TRAVEL"
    degrees_of_freedom_type: str = "USER_ENROLLED_AUTOFLOW"

    @property
    def excluded_zip(self) -> str:
        return ", ".join(f"US:{code}" for code in self.excluded_zip_codes)

    @property
    def flexible_inclusions(self) -> List[Dict[str, Any]]:
        """Interest targeting in the importer's flexible_spec shape."""
        return [{"interests": [{"id": interest_id, "name": name} for interest_id, name in self.interests]}]

    @property
    def attribution_spec(self) -> List[Dict[str, Any]]:
        return [
            {"event_type": event_type, "window_days": window_days}
            for event_type, window_days in self.attribution_windows
        ]


REFERENCE_TEMPLATE = ReferenceCreativeTemplate(excluded_zip_codes=load_excluded_zip_codes())
