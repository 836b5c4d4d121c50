"""Bulk-import CSV serialization.

The importer maps columns by position, not by header, so EXPORT_COLUMNS
order is part of the file format.
"""

import csv
import io
import json
import logging
from datetime import datetime
from decimal import Decimal
from operator import attrgetter
from typing import Any, Callable, Iterable, List, Optional, Tuple

from campaign_export.dates import format_export_datetime

logger = logging.getLogger(__name__)

Getter = Optional[Callable[[Any], Any]]


def _record(name: str) -> Callable[[Any], Any]:
    return attrgetter(name)


def _fixed(name: str) -> Callable[[Any], Any]:
    return attrgetter(f"template.{name}")


EXPORT_COLUMNS: List[Tuple[str, Getter]] = [
    # Campaign
    ("Campaign ID", None),
    ("Campaign Name", _record("campaign_name")),
    ("Campaign Status", _fixed("campaign_status")),
    ("Campaign Objective", _fixed("campaign_objective")),
    ("Buying Type", _fixed("buying_type")),
    ("Campaign Lifetime Budget", _record("lifetime_budget")),
    ("Campaign Bid Strategy", _record("bid_strategy")),
    ("Campaign Start Time", _record("start_time")),
    ("Campaign Stop Time", _record("stop_time")),
    ("New Objective", _fixed("new_objective")),
    ("Buy With Prime Type", _fixed("buy_with_prime_type")),
    ("Is Budget Scheduling Enabled For Campaign", _fixed("is_budget_scheduling_enabled_for_campaign")),
    ("Campaign High Demand Periods", _fixed("campaign_high_demand_periods")),
    ("Buy With Integration Partner", _fixed("buy_with_integration_partner")),
    # Ad set
    ("Ad Set ID", None),
    ("Ad Set Run Status", _fixed("ad_set_run_status")),
    ("Ad Set Lifetime Impressions", _fixed("ad_set_lifetime_impressions")),
    ("Ad Set Name", _record("ad_set_name")),
    ("Ad Set Time Start", _record("start_time")),
    ("Ad Set Time Stop", _record("stop_time")),
    ("Destination Type", _fixed("destination_type")),
    ("Use Accelerated Delivery", _fixed("use_accelerated_delivery")),
    ("Is Budget Scheduling Enabled For Ad Set", _fixed("is_budget_scheduling_enabled_for_ad_set")),
    ("Ad Set High Demand Periods", _fixed("ad_set_high_demand_periods")),
    ("Link Object ID", _fixed("link_object_id")),
    ("Optimized Conversion Tracking Pixels", _fixed("optimized_conversion_tracking_pixels")),
    ("Optimized Event", _fixed("optimized_event")),
    ("Link", _record("link")),
    ("Addresses", _record("addresses")),
    ("Location Types", _fixed("location_types")),
    ("Excluded Regions", _fixed("excluded_regions")),
    ("Excluded Zip", _fixed("excluded_zip")),
    ("Gender", _fixed("gender")),
    ("Age Min", _fixed("age_min")),
    ("Age Max", _fixed("age_max")),
    ("Excluded Custom Audiences", _fixed("excluded_custom_audiences")),
    ("Flexible Inclusions", _fixed("flexible_inclusions")),
    ("Targeting Relaxation", _fixed("targeting_relaxation")),
    ("Brand Safety Inventory Filtering Levels", _fixed("brand_safety_inventory_filtering_levels")),
    ("Optimization Goal", _fixed("optimization_goal")),
    ("Attribution Spec", _fixed("attribution_spec")),
    ("Billing Event", _fixed("billing_event")),
    # Ad
    ("Ad ID", None),
    ("Ad Status", _fixed("ad_status")),
    ("Preview Link", _fixed("preview_link")),
    ("Instagram Preview Link", _fixed("instagram_preview_link")),
    ("Ad Name", _record("ad_name")),
    ("Automatic Format", _fixed("dynamic_creative_ad_format")),
    ("Title", _fixed("title")),
    ("Title Placement", _fixed("title_placement")),
    ("Body", _fixed("body")),
    ("Body Placement", _fixed("body_placement")),
    ("Display Link", _fixed("display_link")),
    ("Link Placement", _fixed("link_placement")),
    ("Optimize text per person", _fixed("optimize_text_per_person")),
    ("Conversion Tracking Pixels", _fixed("conversion_tracking_pixels")),
    ("Image Hash", _fixed("image_hash")),
    ("Video Thumbnail URL", _fixed("video_thumbnail_url")),
    ("Image Placement", _fixed("image_placement")),
    ("Additional Image 1 Hash", _fixed("additional_image_1_hash")),
    ("Additional Image 1 Placement", _fixed("additional_image_1_placement")),
    ("Additional Image 2 Hash", _fixed("additional_image_2_hash")),
    ("Additional Image 2 Placement", _fixed("additional_image_2_placement")),
    ("Additional Image 3 Hash", _fixed("additional_image_3_hash")),
    ("Additional Image 3 Placement", _fixed("additional_image_3_placement")),
    ("Additional Image 4 Hash", _fixed("additional_image_4_hash")),
    ("Additional Image 4 Placement", _fixed("additional_image_4_placement")),
    ("Creative Type", _fixed("creative_type")),
    ("URL Tags", _fixed("url_tags")),
    ("Video ID", _fixed("video_id")),
    ("Video Placement", _fixed("video_placement")),
    ("Additional Video 1 ID", _fixed("additional_video_1_id")),
    ("Additional Video 1 Placement", _fixed("additional_video_1_placement")),
    ("Additional Video 1 Thumbnail URL", _fixed("additional_video_1_thumbnail_url")),
    ("Instagram Account ID", _fixed("instagram_account_id")),
    ("Call to Action", _fixed("call_to_action")),
    ("Additional Custom Tracking Specs", _fixed("additional_custom_tracking_specs")),
    ("Video Retargeting", _fixed("video_retargeting")),
    ("Permalink", _fixed("permalink")),
    ("Use Page as Actor", _fixed("use_page_as_actor")),
    ("Dynamic Creative Call to Action", _fixed("dynamic_creative_call_to_action")),
    ("Degrees of Freedom Type", _fixed("degrees_of_freedom_type")),
]

EXPORT_HEADERS: List[str] = [header for header, _ in EXPORT_COLUMNS]


def format_decimal(value) -> str:
    """Plain decimal string: 8.0 -> "8", 92.69 -> "92.69", 1e-05 -> "0.00001"."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        # shortest round-trip digits, never exponent form
        return format(Decimal(repr(value)), "f")
    return str(value)


def format_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return format_export_datetime(value)
    if isinstance(value, (list, tuple, dict)):
        data = list(value) if isinstance(value, tuple) else value
        return json.dumps(data, separators=(",", ":"), ensure_ascii=False)
    if isinstance(value, (int, float)):
        return format_decimal(value)
    return str(value)


def record_to_row(record) -> List[str]:
    return [format_cell(getter(record)) if getter else "" for _, getter in EXPORT_COLUMNS]


class CsvArtifactWriter:
    """Incremental CSV writer: header once, then rows in batches."""

    def __init__(self):
        self._buffer = io.StringIO()
        self._writer = csv.writer(self._buffer, quoting=csv.QUOTE_MINIMAL)
        self._writer.writerow(EXPORT_HEADERS)
        self.rows_written = 0

    def write_records(self, records: Iterable) -> int:
        count = 0
        for record in records:
            self._writer.writerow(record_to_row(record))
            count += 1
        self.rows_written += count
        return count

    def getvalue(self) -> str:
        return self._buffer.getvalue()

    def to_bytes(self) -> bytes:
        return self.getvalue().encode("utf-8")


def serialize_records(records: Iterable) -> str:
    """Serialize records into a single CSV text blob."""
    writer = CsvArtifactWriter()
    writer.write_records(records)
    logger.debug(f"Serialized {writer.rows_written} rows x {len(EXPORT_HEADERS)} columns")
    return writer.getvalue()
