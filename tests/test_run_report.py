import json

from shapely.geometry import mapping

import src.run_report as run_report
from conftest import CENTER_LAT, CENTER_LON, GEOID_CENTER, square_at


def _write_block_groups(tmp_path):
    path = tmp_path / "bg.json"
    path.write_text(json.dumps({
        "type": "FeatureCollection",
        "features": [
            {"type": "Feature", "properties": {"GEOID": GEOID_CENTER}, "geometry": mapping(square_at(0, 0))}
        ],
    }))
    return str(path)


def test_main_writes_report(tmp_path):
    demographics = tmp_path / "d.csv"
    demographics.write_text(f"GEOID,B01003_001E_curr\n{GEOID_CENTER},900\n")
    output = tmp_path / "report.json"

    code = run_report.main([
        "--lat", str(CENTER_LAT),
        "--lon", str(CENTER_LON),
        "--radii", "1", "2",
        "--block-groups", _write_block_groups(tmp_path),
        "--demographics", str(demographics),
        "--rates", str(tmp_path / "missing.csv"),
        "--output", str(output),
    ])

    assert code == 0
    report = json.loads(output.read_text())
    assert report["radii"] == [1, 2]
    assert report["summaries"]["2mile"]["population"] == 900


def test_main_prints_estimates_without_tables(tmp_path, capsys):
    code = run_report.main([
        "--lat", "40.0",
        "--lon", "-100.0",
        "--block-groups", _write_block_groups(tmp_path),
        "--demographics", str(tmp_path / "missing.csv"),
        "--rates", str(tmp_path / "missing.csv"),
    ])

    assert code == 0
    out = capsys.readouterr().out
    payload, _ = json.JSONDecoder().raw_decode(out[out.index("{\n"):])
    assert payload["summaries"]["1mile"]["estimated"] is True


def test_main_fails_without_block_groups(tmp_path):
    code = run_report.main([
        "--lat", str(CENTER_LAT),
        "--lon", str(CENTER_LON),
        "--block-groups", str(tmp_path / "missing.json"),
    ])

    assert code == 1
