import math

from coverage_map.records import (
    ProviderRecord,
    data_quality_summary,
    load_records,
    load_records_csv,
    normalize_row,
    parse_active,
    partner_options,
    region_options,
)


def test_active_truthy_values():
    for raw in ["", "TRUE", "true", "1", "yes", "YES", " Yes "]:
        assert parse_active(raw) is True, raw
    assert parse_active(None) is True


def test_active_falsy_values():
    for raw in ["FALSE", "0", "no", "inactive", "y"]:
        assert parse_active(raw) is False, raw


def test_normalize_row_trims_and_uppercases_region():
    record = normalize_row(
        {
            "partner": "  Acme ",
            "name": " Jo ",
            "role": "Technician ",
            "lat": " 32.75",
            "lon": "-97.33 ",
            "state": " tx ",
            "price": " $90/hr ",
        }
    )
    assert record.partner == "Acme"
    assert record.name == "Jo"
    assert record.role == "Technician"
    assert record.lat == 32.75
    assert record.lon == -97.33
    assert record.region == "TX"
    assert record.price == "$90/hr"
    assert record.notes == ""
    assert record.active is True
    assert record.service_radius_miles is None


def test_normalize_row_bad_coordinates_become_nan():
    record = normalize_row({"partner": "Acme", "lat": "abc", "lon": ""})
    assert math.isnan(record.lat)
    assert math.isnan(record.lon)
    assert record.has_valid_location is False


def test_normalize_row_radius_override():
    assert normalize_row({"partner": "A", "service_radius_miles": "40"}).service_radius_miles == 40.0
    assert math.isnan(normalize_row({"partner": "A", "service_radius_miles": "far"}).service_radius_miles)


def test_display_fallbacks():
    record = ProviderRecord(partner="A", name="", role="Plumber", lat=0.0, lon=0.0)
    assert record.display_name == "Unnamed"
    assert record.role_label == "?"
    assert ProviderRecord(partner="A", name="X", role="Electrician", lat=0, lon=0).role_label == "E"


def test_load_records_drops_missing_partner_and_keeps_invalid_coordinates():
    rows = [
        {"partner": "A", "lat": "1", "lon": "2"},
        {"partner": "   ", "lat": "1", "lon": "2"},
        {"partner": "B", "lat": "999", "lon": "2", "extra": "ignored"},
    ]
    records = load_records(rows)
    assert [r.partner for r in records] == ["A", "B"]
    assert records[1].has_valid_location is False


def test_load_records_csv_skips_blank_lines(tmp_path):
    path = tmp_path / "data.csv"
    path.write_text(
        "partner,name,role,lat,lon,active,state\n"
        "P1,Alpha,Technician,32.75,-97.33,TRUE,tx\n"
        ",,,,,,\n"
        "\n"
        "P2,Beta,Electrician,21.3,-157.8,no,HI\n",
        encoding="utf-8",
    )
    records = load_records_csv(str(path))
    assert [r.name for r in records] == ["Alpha", "Beta"]
    assert records[0].region == "TX"
    assert records[1].active is False


def test_options_and_quality_summary():
    records = load_records(
        [
            {"partner": "Zed", "state": "tx", "lat": "1", "lon": "1"},
            {"partner": "Acme", "state": "", "lat": "x", "lon": "1", "active": "0"},
            {"partner": "Acme", "state": "HI", "lat": "2", "lon": "2"},
        ]
    )
    assert partner_options(records) == ["All", "Acme", "Zed"]
    assert region_options(records) == ["All", "HI", "TX"]
    assert data_quality_summary(records) == {
        "total": 3,
        "active": 2,
        "inactive": 1,
        "invalid_coordinates": 1,
    }
