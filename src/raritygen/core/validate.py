from enum import Enum

from pydantic import BaseModel, Field


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class Issue(BaseModel):
    code: str = Field(description="Issue code, e.g. TIER_QUOTA_SUM_MISMATCH")
    severity: Severity = Field(description="Error or warning")
    message: str = Field(description="Human-readable description")
    location: str = Field(description="Path to issue, e.g. categories[2]")


def format_issues(issues: list[Issue]) -> str:
    return "; ".join(f"{issue.location}: {issue.message}" for issue in issues)
