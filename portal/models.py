"""
Data models for branches and sales opportunities.
"""
from dataclasses import dataclass, asdict
from enum import Enum


class BranchStatus(Enum):
    """Feasibility status of a branch, used for the panel icon."""
    VALIDATED = "VALIDATED"
    NEEDS_ANALYSIS = "NEEDS ANALYSIS"
    HIGH_POTENTIAL = "HIGH POTENTIAL"
    LOW_POTENTIAL = "LOW POTENTIAL"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value) -> "BranchStatus":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "").strip().upper())
        except ValueError:
            return cls.UNKNOWN


class StrategicValue(Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @classmethod
    def parse(cls, value) -> "StrategicValue":
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().capitalize())


def _pick(data: dict, *keys, default=None):
    for key in keys:
        if key in data:
            return data[key]
    return default


@dataclass(frozen=True)
class Branch:
    """A fixed business site that anchors a set of nearby opportunities."""
    code: str
    city: str
    latitude: float
    longitude: float
    median_income: float = 0.0
    avg_travel_cost: str = ""
    opportunity_clusters: str = ""  # Hyphen-delimited tags
    strategic_actions: str = ""
    status: BranchStatus = BranchStatus.UNKNOWN

    @property
    def cluster_tags(self) -> list[str]:
        return [tag.strip() for tag in self.opportunity_clusters.split("-") if tag.strip()]

    def to_dict(self) -> dict:
        data = asdict(self)
        data["status"] = self.status.value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Branch":
        return cls(
            code=str(data["code"]),
            city=data.get("city", ""),
            latitude=data.get("latitude"),
            longitude=data.get("longitude"),
            median_income=float(_pick(data, "median_income", "medianIncome", default=0) or 0),
            avg_travel_cost=str(_pick(data, "avg_travel_cost", "avgTravelCost", default="")),
            opportunity_clusters=_pick(data, "opportunity_clusters", "opportunityClusters", default=""),
            strategic_actions=_pick(data, "strategic_actions", "strategicActions", default=""),
            status=BranchStatus.parse(data.get("status")),
        )


@dataclass(frozen=True)
class Opportunity:
    """A prospective client site tied to exactly one branch."""
    id: str
    name: str
    department: str
    branch_code: str
    employees: str  # Display string, e.g. "1,000-4,000"
    max_employees: int
    current_penetration: int
    strategic_value: StrategicValue
    distance: float  # km from its branch
    latitude: float
    longitude: float

    @property
    def penetration_rate(self) -> float:
        if self.max_employees <= 0:
            return 0.0
        return self.current_penetration / self.max_employees

    @property
    def penetration_percent(self) -> int:
        # Half-up rounding so 12.5 shows as 13
        return int(self.penetration_rate * 100 + 0.5)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["strategic_value"] = self.strategic_value.value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Opportunity":
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            department=data.get("department", ""),
            branch_code=str(_pick(data, "branch_code", "branchCode")),
            employees=str(data.get("employees", "")),
            max_employees=int(_pick(data, "max_employees", "maxEmployees", default=0)),
            current_penetration=int(_pick(data, "current_penetration", "currentPenetration", default=0)),
            strategic_value=StrategicValue.parse(_pick(data, "strategic_value", "strategicValue", default="Low")),
            distance=float(data.get("distance", 0)),
            latitude=data.get("latitude"),
            longitude=data.get("longitude"),
        )

    @property
    def display_name(self) -> str:
        return f"{self.name} ({self.id})"
