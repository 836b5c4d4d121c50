import json

import pytest
from conftest import parse_csv

from campaign_export.cli import main


@pytest.fixture
def inputs(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("LOCATION_SOURCE", raising=False)
    monkeypatch.delenv("PROGRESS_STEPS", raising=False)

    locations = tmp_path / "locations.json"
    locations.write_text(json.dumps({"centers": [
        {"id": "c-1", "code": "0101", "name": "Oak Brook", "state": {"short_name": "IL"},
         "location": {"latitude": 41.8498, "longitude": -87.9506}},
        {"id": "c-2", "code": "0102", "name": "Naperville"},
        {"id": "c-corp", "code": "CORP", "name": "Corporate"},
    ]}), encoding="utf-8")

    campaign = tmp_path / "campaign.json"
    campaign.write_text(json.dumps({
        "budget": 50,
        "startDate": "2025-06-26T02:32:00Z",
        "ads": [{"id": "ad-1", "name": "First"}, {"id": "ad-2", "name": "Second"}],
    }), encoding="utf-8")
    return locations, campaign


def test_writes_all_locations(inputs, tmp_path):
    locations, campaign = inputs
    output = tmp_path / "out" / "export.csv"

    exit_code = main(["--locations", str(locations), "--campaign", str(campaign), "--output", str(output)])

    assert exit_code == 0
    _, rows = parse_csv(output.read_bytes())
    assert len(rows) == 4


def test_selected_locations(inputs, tmp_path):
    locations, campaign = inputs
    output = tmp_path / "export.csv"

    exit_code = main([
        "--locations", str(locations), "--campaign", str(campaign), "--output", str(output),
        "--location-id", "c-2",
    ])

    assert exit_code == 0
    _, rows = parse_csv(output.read_bytes())
    assert len(rows) == 2


def test_unknown_location_fails(inputs, tmp_path):
    locations, campaign = inputs
    output = tmp_path / "export.csv"

    exit_code = main([
        "--locations", str(locations), "--campaign", str(campaign), "--output", str(output),
        "--location-id", "nope",
    ])

    assert exit_code == 1
    assert not output.exists()


def test_bad_configuration(inputs, tmp_path, monkeypatch):
    locations, campaign = inputs
    monkeypatch.setenv("LOCATION_SOURCE", "mysql")

    exit_code = main(["--locations", str(locations), "--campaign", str(campaign),
                      "--output", str(tmp_path / "export.csv")])
    assert exit_code == 2
