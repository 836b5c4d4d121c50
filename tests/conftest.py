import csv
import io

import pytest

from campaign_export.config import GenerationConfig
from campaign_export.directory import InMemoryLocationDirectory
from campaign_export.jobs import GenerationJobManager
from campaign_export.models import (
    AdVariant,
    CampaignConfiguration,
    Location,
    TargetingConfig,
)


@pytest.fixture
def chicago():
    return Location(
        id="loc-chi",
        name="Chicago",
        display_name="Chicago - Loop",
        code="CHI",
        address_1="123 State St",
        city="Chicago",
        state="IL",
        zip_code="60601",
        phone_number="(312) 555-0100",
        lat=41.8781,
        lng=-87.6298,
    )


@pytest.fixture
def ofallon():
    return Location(
        id="loc-ofa",
        name="O'Fallon",
        display_name="O'Fallon",
        code="OFA",
        address_1="1 Main St",
        city="O'Fallon",
        state="MO",
        zip_code="63366",
        lat=38.8106,
        lng=-90.6998,
    )


@pytest.fixture
def corporate():
    return Location(id="loc-corp", name="Corporate Office", code="CORP", city="Plano", state="TX")


@pytest.fixture
def ad_variant():
    return AdVariant(id="ad-1", name="First Wax Free")


@pytest.fixture
def ad_variants():
    return [AdVariant(id=f"ad-{i}", name=f"Variant {i}") for i in range(1, 4)]


@pytest.fixture
def campaign(ad_variant):
    return CampaignConfiguration(
        prefix="EWC",
        platform="Meta",
        objective="Engagement",
        test_type="LocalTest",
        budget=92.69,
        start_date="2025-06-26T02:32:00Z",
        end_date="2025-07-26T02:32:00Z",
        radius=5,
        ads=[ad_variant],
        month="June",
        day="25",
    )


@pytest.fixture
def chicago_targeting():
    return TargetingConfig(
        location_id="loc-chi",
        primary_lat=41.714,
        primary_lng=-87.653,
        radius_miles=8,
    )


@pytest.fixture
def directory(chicago, ofallon, corporate):
    return InMemoryLocationDirectory([chicago, ofallon, corporate])


@pytest.fixture
def generation_config():
    return GenerationConfig(tick_interval=0)


@pytest.fixture
def manager(directory, generation_config):
    return GenerationJobManager(directory, generation_config)


def parse_csv(content):
    """Parse CSV bytes or text into a header row and data rows."""
    if isinstance(content, bytes):
        content = content.decode("utf-8")
    rows = list(csv.reader(io.StringIO(content)))
    return rows[0], rows[1:]
