import json

import pytest

from fleet_trajectory import main as cli
from fleet_trajectory.export import positions_to_records


@pytest.fixture
def trip_file(tmp_path, city_trip):
    path = tmp_path / "trip.json"
    path.write_text(json.dumps({"positions": positions_to_records(city_trip)}), encoding="utf-8")
    return path


def test_optimize_writes_result_geojson_and_report(tmp_path, trip_file, city_trip) -> None:
    out = tmp_path / "out" / "optimized.json"
    geo = tmp_path / "track.geojson"
    report = tmp_path / "trip.xlsx"
    code = cli.main(
        [
            "optimize",
            str(trip_file),
            "--preset",
            "conservative",
            "--tolerance",
            "1000000",
            "--output",
            str(out),
            "--geojson",
            str(geo),
            "--report",
            str(report),
        ]
    )
    assert code == 0
    payload = json.loads(out.read_text(encoding="utf-8"))
    assert payload["originalCount"] == len(city_trip)
    assert payload["optimizedCount"] == len(payload["optimizedPositions"])
    assert payload["optimizedPositions"][0]["deviceTime"] == city_trip[0].timestamp.isoformat()
    feature = json.loads(geo.read_text(encoding="utf-8"))
    assert feature["geometry"]["type"] == "LineString"
    assert feature["properties"]["originalCount"] == len(city_trip)
    assert report.exists()


def test_optimize_prints_result_when_no_output_given(trip_file, capsys) -> None:
    assert cli.main(["optimize", str(trip_file), "--disable-time-filter"]) == 0
    printed = json.loads(capsys.readouterr().out)
    assert printed["statistics"]["timeFiltered"] == 0


def test_optimize_prints_polyline(trip_file, capsys) -> None:
    assert cli.main(["optimize", str(trip_file), "--polyline"]) == 0
    assert capsys.readouterr().out.strip()


def test_settings_from_args_applies_overrides() -> None:
    parser = cli._build_parser()
    args = parser.parse_args(
        [
            "optimize",
            "trip.json",
            "--preset",
            "aggressive",
            "--min-speed",
            "3",
            "--no-preserve-stops",
            "--disable-accuracy-filter",
        ]
    )
    settings = cli._settings_from_args(args)
    assert settings.tolerance == 25.0
    assert settings.min_speed == 3.0
    assert settings.preserve_stops is False
    assert settings.enable_accuracy_filter is False
    assert settings.enable_time_filter is True


def test_missing_input_returns_error_code(tmp_path, caplog) -> None:
    assert cli.main(["optimize", str(tmp_path / "nope.json")]) == 1
    assert "Failed to load positions" in caplog.text


def test_fetch_without_server_returns_error_code(monkeypatch, caplog) -> None:
    monkeypatch.setattr("fleet_trajectory.config.TRACCAR_URL", "")
    code = cli.main(
        ["fetch", "--device-id", "7", "--start", "2024-05-01T00:00:00Z", "--end", "2024-05-02T00:00:00Z"]
    )
    assert code == 1
    assert "TRACCAR_URL" in caplog.text


def test_fetch_writes_positions(monkeypatch, tmp_path, city_trip) -> None:
    calls = {}

    class FakeClient:
        def __init__(self, base_url, speed_multiplier=1.0):
            calls["init"] = (base_url, speed_multiplier)

        def get_route(self, device_id, start, end, limit=1000):
            calls["route"] = (device_id, start, end, limit)
            return city_trip

    monkeypatch.setattr(cli, "TraccarClient", FakeClient)
    out = tmp_path / "raw.json"
    code = cli.main(
        [
            "fetch",
            "--url",
            "https://fleet.example.com",
            "--device-id",
            "7",
            "--start",
            "2024-05-01T00:00:00Z",
            "--end",
            "2024-05-02T00:00:00Z",
            "--limit",
            "25",
            "--output",
            str(out),
            "--optimize",
        ]
    )
    assert code == 0
    assert calls["init"][0] == "https://fleet.example.com"
    assert calls["route"][0] == 7
    assert calls["route"][3] == 25
    payload = json.loads(out.read_text(encoding="utf-8"))
    assert payload["originalCount"] == len(city_trip)


@pytest.mark.parametrize("content", ["[1, 2, 3]", "{not json"])
def test_unusable_position_file_returns_error_code(tmp_path, caplog, content) -> None:
    trip = tmp_path / "trip.json"
    trip.write_text(content, encoding="utf-8")
    assert cli.main(["optimize", str(trip)]) == 1
    assert "Failed to load positions" in caplog.text


def test_optimize_prints_potential(trip_file, capsys, city_trip) -> None:
    assert cli.main(["optimize", str(trip_file), "--potential"]) == 0
    printed = json.loads(capsys.readouterr().out)
    assert printed["totalPositions"] == len(city_trip)
    assert set(printed["optimizationPotential"]) == {"withTolerance10", "withTolerance25", "withTolerance50"}
    assert printed["recommendations"]["recommendedTolerance"] in (10.0, 25.0)


def test_fetch_potential_reports_device_window(monkeypatch, capsys, city_trip) -> None:
    class FakeClient:
        def __init__(self, base_url, speed_multiplier=1.0):
            pass

        def get_route(self, device_id, start, end, limit=1000):
            return city_trip

    monkeypatch.setattr(cli, "TraccarClient", FakeClient)
    code = cli.main(
        ["fetch", "--device-id", "7", "--start", "2024-05-01T00:00:00Z", "--end", "2024-05-02T00:00:00Z", "--potential"]
    )
    assert code == 0
    printed = json.loads(capsys.readouterr().out)
    assert printed["deviceId"] == 7
    assert printed["period"] == {"from": "2024-05-01T00:00:00Z", "to": "2024-05-02T00:00:00Z"}
    assert printed["totalPositions"] == len(city_trip)


def test_idle_threshold_help_names_optimizer_setting(capsys) -> None:
    parser = cli._build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(["optimize", "--help"])
    help_text = " ".join(capsys.readouterr().out.split())
    assert "for the report" in help_text
    assert "IDLE_THRESHOLD_MINUTES" in help_text
    args = parser.parse_args(["optimize", "trip.json", "--idle-threshold", "10"])
    assert cli._settings_from_args(args) == cli.OptimizationSettings()
