"""Vision scope contracts: modes, risk levels, section markers and AnalysisResult."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class AnalysisMode(str, Enum):
    KITCHEN = "kitchen"
    WAREHOUSE = "warehouse"
    OFFICE = "office"


DEFAULT_MODE = AnalysisMode.KITCHEN

MODE_LABELS: dict[AnalysisMode, str] = {
    AnalysisMode.KITCHEN: "Kitchen / Food Safety",
    AnalysisMode.WAREHOUSE: "Warehouse / Storage",
    AnalysisMode.OFFICE: "Office Safety",
}


def parse_mode(value: str | AnalysisMode | None) -> AnalysisMode:
    """Map a raw mode tag to ``AnalysisMode``; unknown or empty -> kitchen."""
    if isinstance(value, AnalysisMode):
        return value
    if not value:
        return DEFAULT_MODE
    try:
        return AnalysisMode(str(value).strip().lower())
    except ValueError:
        return DEFAULT_MODE


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


# Section markers shared by the prompt templates and the reply parser.
WHAT_I_SEE = "WHAT_I_SEE"
WHAT_THIS_MEANS = "WHAT_THIS_MEANS"
POSSIBLE_ISSUES = "POSSIBLE_ISSUES"
WHAT_YOU_CAN_DO_NEXT = "WHAT_YOU_CAN_DO_NEXT"
RISK_LEVEL = "RISK_LEVEL"

SECTION_TAGS: tuple[str, ...] = (
    WHAT_I_SEE,
    WHAT_THIS_MEANS,
    POSSIBLE_ISSUES,
    WHAT_YOU_CAN_DO_NEXT,
    RISK_LEVEL,
)

EMPTY_OUTPUT_NOTE = "Empty model output. Check billing/credits or try another image."
MISSING_SECTIONS_NOTE = "The model reply did not contain the expected sections. Try again or use another image."


class AnalysisResult(BaseModel):
    """Structured safety assessment parsed from one model reply."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    what_i_see: str = Field(default="", alias="whatISee")
    what_this_means: str = Field(default="", alias="whatThisMeans")
    possible_issues: str = Field(default="", alias="possibleIssues")
    what_you_can_do_next: str = Field(default="", alias="whatYouCanDoNext")
    risk_level: RiskLevel = Field(default=RiskLevel.LOW, alias="riskLevel")
    raw: str = ""
    # Set only on degraded-success replies (e.g. empty model output).
    error: str | None = None
