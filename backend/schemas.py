"""Request bodies for the HTTP API (camelCase on the wire)."""

from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from campaign_export.dates import parse_datetime
from campaign_export.errors import InputError
from campaign_export.models import (
    AdStatus,
    AdVariant,
    CampaignConfiguration,
    Coordinate,
    TargetingConfig,
)


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, allow_inf_nan=False)


class CoordinateIn(ApiModel):
    lat: float
    lng: float
    radius: float = 1.0


class TargetingConfigIn(ApiModel):
    primary_lat: Optional[float] = None
    primary_lng: Optional[float] = None
    radius_miles: Optional[float] = None
    coordinate_list: List[CoordinateIn] = Field(default_factory=list)
    landing_page_url: Optional[str] = None
    notes: str = ""
    is_active: bool = True

    def to_model(self, location_id: str) -> TargetingConfig:
        return TargetingConfig(
            location_id=location_id,
            primary_lat=self.primary_lat,
            primary_lng=self.primary_lng,
            radius_miles=self.radius_miles,
            coordinate_list=[Coordinate(c.lat, c.lng, c.radius) for c in self.coordinate_list],
            landing_page_url=self.landing_page_url or None,
            notes=self.notes,
            is_active=self.is_active,
        )


class AdVariantIn(ApiModel):
    id: str
    name: str = ""
    template_id: str = ""
    caption: str = ""
    scheduled_date: Optional[str] = None
    status: AdStatus = AdStatus.ACTIVE
    landing_page: str = ""
    notes: str = ""

    def to_model(self) -> AdVariant:
        return AdVariant(
            id=self.id,
            name=self.name,
            template_id=self.template_id,
            caption=self.caption,
            scheduled_date=self.scheduled_date,
            status=self.status,
            landing_page=self.landing_page,
            notes=self.notes,
        )


class CampaignIn(ApiModel):
    prefix: str = "EWC"
    platform: str = "Meta"
    objective: str = "Engagement"
    test_type: str = "LocalTest"
    duration: str = "Evergreen"
    budget: float = 92.69
    bid_strategy: str = "Highest volume or value"
    start_date: Optional[str] = "06/26/2025 2:32:00 am"
    end_date: Optional[str] = None
    radius: float = 5.0
    selected_date: Optional[str] = None
    month: Optional[str] = None
    day: Optional[Union[int, str]] = None

    def to_model(self, ads: List[AdVariant]) -> CampaignConfiguration:
        try:
            selected = parse_datetime(self.selected_date)
        except ValueError as e:
            raise InputError([f"selectedDate: {e}"])

        # Without a selected date fall back to the stock June 25 campaign
        month = self.month or (None if selected else "June")
        day = self.day if self.day is not None else (None if selected else "25")

        return CampaignConfiguration(
            prefix=self.prefix,
            platform=self.platform,
            objective=self.objective,
            test_type=self.test_type,
            duration=self.duration,
            budget=self.budget,
            bid_strategy=self.bid_strategy,
            start_date=self.start_date,
            end_date=self.end_date,
            radius=self.radius,
            ads=ads,
            selected_date=selected,
            month=month,
            day=str(day) if day is not None else None,
        )


class GenerationRequest(ApiModel):
    location_ids: List[str] = Field(default_factory=list)
    ad_variants: List[AdVariantIn] = Field(default_factory=list)
    campaign: CampaignIn = Field(default_factory=CampaignIn)
    file_name: Optional[str] = None

    def variants(self) -> List[AdVariant]:
        return [variant.to_model() for variant in self.ad_variants]

    def campaign_model(self) -> CampaignConfiguration:
        return self.campaign.to_model(self.variants())


class PreviewRequest(GenerationRequest):
    limit: Optional[int] = None
