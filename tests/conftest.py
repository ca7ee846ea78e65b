"""Shared fixtures: small hand-built catalogs."""

import pytest

from config import Settings
from portal.catalog import StaticCatalog
from portal.models import Branch, BranchStatus, Opportunity, StrategicValue


def make_branch(code="101", city="Johannesburg", latitude=-26.2, longitude=28.0, **kwargs):
    return Branch(
        code=code,
        city=city,
        latitude=latitude,
        longitude=longitude,
        median_income=kwargs.pop("median_income", 15000.0),
        avg_travel_cost=kwargs.pop("avg_travel_cost", "R80"),
        opportunity_clusters=kwargs.pop("opportunity_clusters", "Mining-Retail"),
        strategic_actions=kwargs.pop("strategic_actions", "Grow payroll lending"),
        status=kwargs.pop("status", BranchStatus.VALIDATED),
    )


def make_opportunity(
    id="opp-1",
    name="Test Site",
    department="Retail",
    branch_code="101",
    max_employees=500,
    current_penetration=50,
    distance=5,
    latitude=-26.1,
    longitude=28.1,
    strategic_value=StrategicValue.MEDIUM,
):
    return Opportunity(
        id=id,
        name=name,
        department=department,
        branch_code=branch_code,
        employees=f"0-{max_employees}",
        max_employees=max_employees,
        current_penetration=current_penetration,
        strategic_value=strategic_value,
        distance=distance,
        latitude=latitude,
        longitude=longitude,
    )


@pytest.fixture
def branches():
    return [
        make_branch("101", "Johannesburg", -26.2041, 28.0473),
        make_branch("102", "Cape Town", -33.9249, 18.4241, status=BranchStatus.HIGH_POTENTIAL),
    ]


@pytest.fixture
def opportunities():
    return [
        make_opportunity("a", "Alpha Mine", "Mining", "101", 4000, 400, 24),
        make_opportunity("b", "Beta Retail", "Retail", "101", 1000, 100, 3),
        make_opportunity("c", "Gamma Clinic", "Healthcare", "101", 250, 100, 10),
        make_opportunity("d", "Delta Hospital", "Healthcare", "102", 3500, 700, 6,
                         latitude=-33.94, longitude=18.46),
        make_opportunity("e", "Epsilon Retail", "Retail", "102", 251, 20, 19,
                         latitude=-33.90, longitude=18.62),
        make_opportunity("f", "Zeta Depot", "Public Sector", "101", 1001, 150, 8),
        make_opportunity("g", "Eta Works", "Manufacturing", "101", 2000, 240, 27),
        make_opportunity("h", "Theta Mall", "Retail", "101", 200, 20, 15),
    ]


@pytest.fixture
def catalog(branches, opportunities):
    return StaticCatalog(branches, opportunities)


@pytest.fixture
def settings():
    return Settings()
