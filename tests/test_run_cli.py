import json

import run
from coverage_map.geo import JobPoint
from coverage_map.geocoder import Geocoder
from coverage_map.http import GatewayError

CSV_TEXT = (
    "partner,name,role,lat,lon,active,state,service_radius_miles\n"
    "P1,Alpha,Technician,32.75,-97.33,TRUE,TX,\n"
    "P2,Beta,Electrician,21.3,-157.8,yes,HI,\n"
    "P3,Gamma,Technician,bad,-97.0,,TX,\n"
    "P4,Delta,Technician,35.0,-97.33,0,TX,\n"
)


def _write_data(tmp_path):
    path = tmp_path / "data.csv"
    path.write_text(CSV_TEXT, encoding="utf-8")
    return str(path)


def _no_env(monkeypatch):
    monkeypatch.setattr(run, "load_env", lambda *a, **k: None)


def test_check_data(tmp_path, monkeypatch, capsys):
    _no_env(monkeypatch)
    code = run.main(["--data", _write_data(tmp_path), "--check-data"])
    out = capsys.readouterr().out
    assert code == 0
    assert "Records: 4" in out
    assert "- inactive: 1" in out
    assert "- invalid coordinates: 1" in out


def test_job_coordinates_resolve_and_write_outputs(tmp_path, monkeypatch, capsys):
    _no_env(monkeypatch)
    out_dir = tmp_path / "out"
    code = run.main(
        [
            "--data", _write_data(tmp_path),
            "--config", str(tmp_path / "none.json"),
            "--job-lat", "32.76",
            "--job-lon", "-97.34",
            "--out", str(out_dir),
        ]
    )
    out = capsys.readouterr().out
    assert code == 0
    assert "3 location(s) shown" in out
    assert "Best match: Alpha" in out
    payload = json.loads((out_dir / "coverage.json").read_text(encoding="utf-8"))
    assert payload["kind"] == "eligible"
    assert [r["name"] for r in payload["results"]] == ["Alpha"]


def test_address_search_failure_exits_nonzero(tmp_path, monkeypatch, capsys):
    _no_env(monkeypatch)

    def fail(self, address):
        raise GatewayError("HTTP 500", status_code=500)

    monkeypatch.setattr(Geocoder, "geocode", fail)
    code = run.main(["--data", _write_data(tmp_path), "--config", str(tmp_path / "none.json"), "--address", "x"])
    assert code == 1
    assert "Geocoding failed (HTTP 500)" in capsys.readouterr().out


def test_address_search_found(tmp_path, monkeypatch, capsys):
    _no_env(monkeypatch)
    monkeypatch.setattr(Geocoder, "geocode", lambda self, address: JobPoint(35.0, -97.33, "Norman, OK"))
    code = run.main(["--data", _write_data(tmp_path), "--config", str(tmp_path / "none.json"), "--address", "norman"])
    out = capsys.readouterr().out
    assert code == 0
    assert "Job: Norman, OK" in out
    assert "No resources within 100 mi" in out


def test_missing_data_file(tmp_path, monkeypatch, capsys):
    _no_env(monkeypatch)
    code = run.main(["--data", str(tmp_path / "missing.csv")])
    assert code == 1
    assert "Data file not found" in capsys.readouterr().err


def test_max_outside_flag_narrows_fallback(tmp_path, monkeypatch, capsys):
    _no_env(monkeypatch)
    code = run.main(
        [
            "--data", _write_data(tmp_path),
            "--config", str(tmp_path / "none.json"),
            "--job-lat", "35.0",
            "--job-lon", "-97.33",
            "--max-outside", "120",
        ]
    )
    assert code == 0
    assert "No resources within 100 mi or 120 mi" in capsys.readouterr().out


def test_no_job_prints_fit_bounds_without_excluded_regions(tmp_path, monkeypatch, capsys):
    _no_env(monkeypatch)
    code = run.main(["--data", _write_data(tmp_path), "--config", str(tmp_path / "none.json")])
    out = capsys.readouterr().out
    assert code == 0
    assert "Fit bounds: (32.7500, -97.3300) - (32.7500, -97.3300)" in out
    assert "Center: 32.7500, -97.3300" in out


def test_invalid_config_exits_nonzero(tmp_path, monkeypatch, capsys):
    _no_env(monkeypatch)
    bad = tmp_path / "bad.json"
    bad.write_text('{"geocode": "https://geo.example/api"}', encoding="utf-8")
    code = run.main(["--data", _write_data(tmp_path), "--config", str(bad)])
    assert code == 1
    assert "geocode must be a JSON object" in capsys.readouterr().err
