"""End-to-end tests for the command line entry point."""

from pathlib import Path

import pandas as pd
import pytest

import main

CATALOG_PATH = str(Path(__file__).parent.parent / "data" / "catalog.json")


@pytest.fixture(autouse=True)
def map_env(monkeypatch):
    monkeypatch.setattr(main, "load_dotenv", lambda: None)
    monkeypatch.delenv("MAPBOX_PK", raising=False)
    monkeypatch.delenv("FILTER_BRANCH", raising=False)
    monkeypatch.setenv("MAP_RENDERER", "folium")
    monkeypatch.setenv("MAP_TILES", "cartodbpositron")


def test_parse_args():
    args = main.parse_args(["--branch", "101", "-d", "Retail", "-d", "Mining", "--employee-bin", "Large"])
    assert args.branch == "101"
    assert args.department == ["Retail", "Mining"]
    assert args.employee_bin == "Large"
    assert args.page == 1


def test_rejects_unknown_bin():
    with pytest.raises(SystemExit):
        main.parse_args(["--distance-bin", "Galaxy"])


def test_prints_summary(capsys):
    assert main.main(["--catalog", CATALOG_PATH, "--branch", "102"]) == 0
    out = capsys.readouterr().out
    assert "View: Cape Town" in out
    assert "Matching opportunities: 5" in out
    assert "Groote Schuur Hospital" in out
    assert "Analysis for Cape Town" in out


def test_export_csv(tmp_path):
    target = tmp_path / "exports" / "joburg.csv"
    assert main.main(["--catalog", CATALOG_PATH, "--branch", "101", "--export-csv", str(target)]) == 0
    df = pd.read_csv(target)
    assert len(df) == 6
    assert df["id"].iloc[0] == "opp-001"
    assert list(df["max_employees"]) == sorted(df["max_employees"], reverse=True)


def test_export_map(tmp_path):
    target = tmp_path / "map.html"
    code = main.main([
        "--catalog", CATALOG_PATH, "--branch", "101", "--select", "opp-002", "--export-map", str(target),
    ])
    assert code == 0
    html = target.read_text(encoding="utf-8")
    assert "Sandton Retail Group" in html


def test_export_map_without_token_fails(tmp_path, monkeypatch):
    monkeypatch.setenv("MAP_TILES", "mapbox")
    target = tmp_path / "map.html"
    assert main.main(["--catalog", CATALOG_PATH, "--export-map", str(target)]) == 1
    assert not target.exists()


def test_missing_catalog(tmp_path):
    assert main.main(["--catalog", str(tmp_path / "missing.json")]) == 1
