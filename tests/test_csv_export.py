import json
from datetime import datetime, timedelta, timezone

from conftest import parse_csv

from campaign_export.processors.csv_export import (
    EXPORT_HEADERS,
    format_cell,
    serialize_records,
)
from campaign_export.processors.expander import expand_records
from campaign_export.reference_template import REFERENCE_TEMPLATE


def test_header_layout():
    assert len(EXPORT_HEADERS) == 82
    assert len(set(EXPORT_HEADERS)) == 82
    assert EXPORT_HEADERS[0] == "Campaign ID"
    assert EXPORT_HEADERS[1] == "Campaign Name"
    assert EXPORT_HEADERS[14] == "Ad Set ID"
    assert EXPORT_HEADERS[27:29] == ["Link", "Addresses"]
    assert EXPORT_HEADERS[42] == "Ad ID"
    assert EXPORT_HEADERS[46] == "Ad Name"
    assert EXPORT_HEADERS[-1] == "Degrees of Freedom Type"


def test_format_cell():
    assert format_cell(None) == ""
    assert format_cell("") == ""
    assert format_cell(92.69) == "92.69"
    assert format_cell(8.0) == "8"
    assert format_cell(0) == "0"
    assert format_cell(0.00001) == "0.00001"
    assert format_cell(1e16) == "10000000000000000"
    assert format_cell(1.5e-7) == "0.00000015"
    assert format_cell(()) == "[]"
    assert format_cell([{"event_type": "CLICK_THROUGH", "window_days": 1}]) == (
        '[{"event_type":"CLICK_THROUGH","window_days":1}]'
    )


def test_date_format_is_utc_twelve_hour_clock():
    assert format_cell(datetime(2025, 6, 26, 2, 32, tzinfo=timezone.utc)) == "06/26/2025 02:32:00 am"
    assert format_cell(datetime(2025, 1, 1, 0, 0, 0)) == "01/01/2025 12:00:00 am"
    assert format_cell(datetime(2025, 1, 1, 12, 0, 5)) == "01/01/2025 12:00:05 pm"
    assert format_cell(datetime(2025, 12, 31, 23, 59, 59)) == "12/31/2025 11:59:59 pm"

    central = timezone(timedelta(hours=-5))
    assert format_cell(datetime(2025, 6, 25, 21, 32, tzinfo=central)) == "06/26/2025 02:32:00 am"


def test_serialized_rows_parse_back(chicago, ofallon, ad_variants, campaign):
    text = serialize_records(expand_records([chicago, ofallon], ad_variants, campaign))

    header, rows = parse_csv(text)
    assert header == EXPORT_HEADERS
    assert len(rows) == 6
    assert all(len(row) == len(EXPORT_HEADERS) for row in rows)

    column = {name: index for index, name in enumerate(header)}
    for row in rows:
        assert json.loads(row[column["Flexible Inclusions"]]) == REFERENCE_TEMPLATE.flexible_inclusions
        assert json.loads(row[column["Attribution Spec"]]) == [
            {"event_type": "CLICK_THROUGH", "window_days": 1}
        ]
        assert json.loads(row[column["Campaign High Demand Periods"]]) == []


def test_row_values(chicago, ad_variant, campaign):
    _, rows = parse_csv(serialize_records(expand_records([chicago], [ad_variant], campaign)))
    row = dict(zip(EXPORT_HEADERS, rows[0]))

    assert row["Campaign ID"] == ""
    assert row["Campaign Name"] == "EWC_Meta_June25_Engagement_LocalTest_Chicago"
    assert row["Campaign Status"] == "ACTIVE"
    assert row["Campaign Lifetime Budget"] == "92.69"
    assert row["Campaign Start Time"] == "06/26/2025 02:32:00 am"
    assert row["Campaign Stop Time"] == "07/26/2025 02:32:00 am"
    assert row["Ad Set Time Start"] == row["Campaign Start Time"]
    assert row["Ad Set Lifetime Impressions"] == "0"
    assert row["Link"] == "https://waxcenter.com"
    assert row["Addresses"] == "(41.878, -87.630) +5mi"
    assert row["Age Min"] == "18"
    assert row["Excluded Zip"].startswith("US:50001, US:50002, ")
    assert row["Excluded Zip"].endswith("US:52801")
    assert row["Call to Action"] == "BOOK_TRAVEL"
    assert row["Additional Image 2 Hash"] == ""
    assert row["Additional Custom Tracking Specs"] == "[]"


def test_quoting_is_minimal_and_quotes_are_doubled(chicago, ad_variant, campaign):
    text = serialize_records(expand_records([chicago], [ad_variant], campaign))
    data_line = text.splitlines()[1]

    # Plain cells stay unquoted
    assert data_line.startswith(",EWC_Meta_June25_Engagement_LocalTest_Chicago,ACTIVE,")
    # JSON cells are quoted with embedded quotes doubled
    assert '"[{""interests"":[{""id"":""6002997877444"",""name"":""Waxing""}' in data_line
    # Cells containing commas are quoted
    assert '"(41.878, -87.630) +5mi"' in data_line


def test_missing_values_render_empty(chicago, ad_variant, campaign):
    campaign.end_date = None
    text = serialize_records(expand_records([chicago], [ad_variant], campaign))
    _, rows = parse_csv(text)
    row = dict(zip(EXPORT_HEADERS, rows[0]))

    assert row["Campaign Stop Time"] == ""
    assert "null" not in rows[0]
    assert "None" not in rows[0]
    assert "undefined" not in rows[0]


def test_apostrophes_are_not_quoted(ofallon, ad_variant, campaign):
    text = serialize_records(expand_records([ofallon], [ad_variant], campaign))
    assert ",EWC_Meta_June25_Engagement_LocalTest_O'Fallon," in text
