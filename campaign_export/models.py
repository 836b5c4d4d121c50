"""Data models for the campaign export engine."""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

DateInput = Union[datetime, str, None]


@dataclass
class Coordinate:
    """Extra targeting point with its own radius (miles)."""
    lat: float
    lng: float
    radius: float = 1.0


@dataclass
class TargetingConfig:
    """Per-location geo-targeting override."""
    location_id: str
    primary_lat: Optional[float] = None
    primary_lng: Optional[float] = None
    radius_miles: Optional[float] = None
    coordinate_list: List[Coordinate] = field(default_factory=list)
    landing_page_url: Optional[str] = None
    notes: str = ""
    is_active: bool = True
    user_id: Optional[str] = None  # None = global config

    @property
    def has_primary(self) -> bool:
        return (
            self.primary_lat is not None
            and self.primary_lng is not None
            and self.radius_miles is not None
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "locationId": self.location_id,
            "primaryLat": self.primary_lat,
            "primaryLng": self.primary_lng,
            "radiusMiles": self.radius_miles,
            "coordinateList": [asdict(c) for c in self.coordinate_list],
            "landingPageUrl": self.landing_page_url,
            "notes": self.notes,
            "isActive": self.is_active,
        }


@dataclass
class Location:
    """Retail location as resolved at the directory boundary."""
    id: str
    name: str
    display_name: str = ""
    code: str = ""
    address_1: str = ""
    address_2: str = ""
    city: str = "Unknown City"
    state: str = "Unknown State"
    zip_code: str = ""
    phone_number: str = ""
    lat: float = 0.0
    lng: float = 0.0
    landing_page_url: Optional[str] = None
    targeting: Optional[TargetingConfig] = None

    @property
    def address(self) -> str:
        parts = [self.address_1, self.address_2]
        return ", ".join(p for p in parts if p)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "displayName": self.display_name,
            "code": self.code,
            "address": self.address,
            "city": self.city,
            "state": self.state,
            "zipCode": self.zip_code,
            "phoneNumber": self.phone_number,
            "coordinates": {"lat": self.lat, "lng": self.lng},
            "landingPageUrl": self.landing_page_url,
            "config": self.targeting.to_dict() if self.targeting else None,
        }


class AdStatus(str, Enum):
    ACTIVE = "Active"
    PAUSED = "Paused"
    DRAFT = "Draft"
    COMPLETED = "Completed"


@dataclass
class AdVariant:
    """One creative definition within a campaign."""
    id: str
    name: str
    template_id: str = ""
    caption: str = ""
    scheduled_date: DateInput = None
    status: AdStatus = AdStatus.ACTIVE
    landing_page: str = ""  # may contain {{location.*}} placeholders
    notes: str = ""


@dataclass
class CampaignConfiguration:
    """Shared settings for one export run."""
    prefix: str = "EWC"
    platform: str = "Meta"
    objective: str = "Engagement"
    test_type: str = "LocalTest"
    duration: str = "Evergreen"
    budget: float = 92.69
    bid_strategy: str = "Highest volume or value"
    start_date: DateInput = "06/26/2025 2:32:00 am"
    end_date: DateInput = None
    radius: float = 5.0
    ads: List[AdVariant] = field(default_factory=list)
    selected_date: Optional[datetime] = None
    month: Optional[str] = "June"
    day: Optional[str] = "25"

    @property
    def resolved_month(self) -> str:
        if self.month:
            return self.month
        if self.selected_date is not None:
            return self.selected_date.strftime("%B")
        return ""

    @property
    def resolved_day(self) -> str:
        if self.day:
            return str(self.day)
        if self.selected_date is not None:
            return str(self.selected_date.day)
        return ""


@dataclass
class GeneratedRecord:
    """One resolved (location x ad variant) row, pre-serialization."""
    location_id: str
    ad_variant_id: str
    campaign_name: str
    ad_set_name: str
    ad_name: str
    link: str
    addresses: str
    lifetime_budget: float
    start_time: Optional[datetime]
    stop_time: Optional[datetime]
    bid_strategy: str
    template: Any  # ReferenceCreativeTemplate

    def to_dict(self) -> Dict[str, Any]:
        return {
            "locationId": self.location_id,
            "adVariantId": self.ad_variant_id,
            "campaignName": self.campaign_name,
            "adSetName": self.ad_set_name,
            "adName": self.ad_name,
            "link": self.link,
            "addresses": self.addresses,
            "lifetimeBudget": self.lifetime_budget,
            "startTime": self.start_time.isoformat() if self.start_time else None,
            "stopTime": self.stop_time.isoformat() if self.stop_time else None,
            "bidStrategy": self.bid_strategy,
        }


class JobStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


@dataclass
class GenerationJob:
    """Mutable job state, owned by the job manager."""
    id: str
    location_ids: List[str]
    ad_variant_ids: List[str]
    total_records: int
    created_at: datetime
    status: JobStatus = JobStatus.PENDING
    processed_records: int = 0
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    file_name: Optional[str] = None
    file_name_hint: Optional[str] = None
    error: Optional[str] = None
    cancel_requested: bool = False
    artifact: Optional[bytes] = None
    # Inputs kept for processing; released once the job is terminal
    locations: List[Location] = field(default_factory=list, repr=False)
    ad_variants: List[AdVariant] = field(default_factory=list, repr=False)
    campaign: Optional[CampaignConfiguration] = field(default=None, repr=False)


@dataclass(frozen=True)
class JobSnapshot:
    """Read-only view of a job returned to callers."""
    id: str
    status: JobStatus
    location_ids: List[str]
    ad_variant_ids: List[str]
    total_records: int
    processed_records: int
    created_at: datetime
    completed_at: Optional[datetime]
    file_name: Optional[str]
    error: Optional[str]

    @property
    def progress(self) -> float:
        if self.total_records == 0:
            return 0.0
        return round(100.0 * self.processed_records / self.total_records, 1)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "status": self.status.value,
            "locationIds": list(self.location_ids),
            "adVariantIds": list(self.ad_variant_ids),
            "totalRecords": self.total_records,
            "processedRecords": self.processed_records,
            "progress": self.progress,
            "createdAt": self.created_at.isoformat(),
            "completedAt": self.completed_at.isoformat() if self.completed_at else None,
            "fileName": self.file_name,
            "error": self.error,
        }
