"""Tests for catalog loading, models and diagnostics."""

import json
from pathlib import Path

import pytest

from config import MapConfig, Settings
from portal.catalog import StaticCatalog, load_catalog
from portal.diagnostics import collect_diagnostics, should_show_diagnostics
from portal.models import Branch, BranchStatus, Opportunity, StrategicValue

CATALOG_PATH = Path(__file__).parent.parent / "data" / "catalog.json"


def opportunity_dict(**overrides):
    data = {
        "id": "opp-1",
        "name": "Test Site",
        "department": "Retail",
        "branchCode": "101",
        "employees": "100-500",
        "maxEmployees": 500,
        "currentPenetration": 50,
        "strategicValue": "Medium",
        "distance": 4,
        "latitude": -26.1,
        "longitude": 28.1,
    }
    data.update(overrides)
    return data


BRANCH = {"code": "101", "city": "Johannesburg", "latitude": -26.2, "longitude": 28.0, "status": "VALIDATED"}


class TestBundledCatalog:
    def test_loads(self):
        catalog = load_catalog(str(CATALOG_PATH))
        assert len(catalog.get_branches()) == 4
        assert len(catalog.get_opportunities()) == 18

    def test_branch_fields(self):
        catalog = load_catalog(str(CATALOG_PATH))
        joburg = catalog.find_branch("101")
        assert joburg.city == "Johannesburg"
        assert joburg.status == BranchStatus.VALIDATED
        assert joburg.cluster_tags == ["Mining", "Finance", "Retail"]
        assert catalog.find_branch(102).status == BranchStatus.HIGH_POTENTIAL

    def test_every_opportunity_has_a_known_branch(self):
        catalog = load_catalog(str(CATALOG_PATH))
        codes = {b.code for b in catalog.get_branches()}
        assert all(o.branch_code in codes for o in catalog.get_opportunities())

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_catalog(str(tmp_path / "nope.json"))


class TestValidation:
    def test_duplicate_opportunity_ids(self):
        with pytest.raises(ValueError, match="Duplicate opportunity"):
            StaticCatalog.from_dict({"branches": [BRANCH], "opportunities": [opportunity_dict(), opportunity_dict()]})

    def test_duplicate_branch_codes(self):
        with pytest.raises(ValueError, match="Duplicate branch"):
            StaticCatalog.from_dict({"branches": [BRANCH, BRANCH], "opportunities": []})

    def test_penetration_above_headcount(self):
        with pytest.raises(ValueError, match="exceeds"):
            StaticCatalog.from_dict({
                "branches": [BRANCH],
                "opportunities": [opportunity_dict(currentPenetration=600)],
            })

    def test_unknown_branch_is_only_a_warning(self):
        catalog = StaticCatalog.from_dict({
            "branches": [BRANCH],
            "opportunities": [opportunity_dict(branchCode="999")],
        })
        assert catalog.find_opportunity("opp-1").branch_code == "999"

    def test_loads_from_file(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps({"branches": [BRANCH], "opportunities": [opportunity_dict()]}))
        assert len(load_catalog(str(path)).get_opportunities()) == 1


class TestModels:
    def test_camel_and_snake_case_keys(self):
        camel = Opportunity.from_dict(opportunity_dict())
        snake = Opportunity.from_dict(camel.to_dict())
        assert camel == snake
        assert camel.strategic_value == StrategicValue.MEDIUM

    def test_penetration(self):
        opp = Opportunity.from_dict(opportunity_dict(maxEmployees=800, currentPenetration=100))
        assert opp.penetration_rate == 0.125
        assert opp.penetration_percent == 13

    def test_zero_headcount(self):
        opp = Opportunity.from_dict(opportunity_dict(maxEmployees=0, currentPenetration=0))
        assert opp.penetration_rate == 0.0
        assert opp.penetration_percent == 0

    def test_unknown_status(self):
        branch = Branch.from_dict({**BRANCH, "status": "PENDING"})
        assert branch.status == BranchStatus.UNKNOWN
        assert Branch.from_dict({**BRANCH, "status": "high potential"}).status == BranchStatus.HIGH_POTENTIAL


class TestDiagnostics:
    def test_missing_token(self):
        settings = Settings()
        diagnostics = collect_diagnostics(settings)
        assert diagnostics["map_token"] == "Missing"
        assert should_show_diagnostics(settings, diagnostics) is True

    def test_hidden_in_production_with_token(self):
        settings = Settings(environment="production", map_config=MapConfig(access_token="pk.x"))
        diagnostics = collect_diagnostics(settings)
        assert diagnostics["map_token"] == "Set"
        assert should_show_diagnostics(settings, diagnostics) is False
