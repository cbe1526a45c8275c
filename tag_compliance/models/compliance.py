"""Compliance result and summary data models."""

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .enums import ViolationType
from .violations import Violation


class ComplianceResult(BaseModel):
    """
    Verdict for one evaluated resource.

    Fields cannot be reassigned, but the containers they hold are plain dicts
    and lists: treat them as read-only. The evaluator copies the input tags,
    so later changes to the caller's mapping do not reach the result.
    """

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "is_compliant": False,
                "resource_tags": {"Environment": "prod"},
                "violations": [
                    {
                        "kind": "missing_required_tag",
                        "message": "Missing required tag 'Project'",
                        "tag_key": "Project",
                    }
                ],
                "compliance_level": "standard",
            }
        },
    )

    is_compliant: bool = Field(..., description="True when no violation was found")
    resource_tags: dict[str, str] = Field(
        default_factory=dict, description="Tags the resource was evaluated with"
    )
    violations: list[Violation] = Field(
        default_factory=list, description="Violations in evaluation order"
    )
    compliance_level: str | None = Field(
        None, description="Compliance level named by the applied criteria"
    )

    @model_validator(mode="after")
    def validate_verdict(self) -> "ComplianceResult":
        """Ensure the verdict agrees with the violation list."""
        if self.is_compliant == bool(self.violations):
            raise ValueError("is_compliant must be True exactly when violations is empty")
        return self


class ComplianceSummary(BaseModel):
    """Aggregate over a batch of compliance results."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "total_resources": 10,
                "compliant_resources": 7,
                "non_compliant_resources": 3,
                "global_violations": {"missing_required_tag": 4, "invalid_value": 1},
            }
        },
    )

    total_resources: int = Field(0, description="Number of evaluated resources", ge=0)
    compliant_resources: int = Field(0, description="Resources without violations", ge=0)
    non_compliant_resources: int = Field(
        0, description="Resources with at least one violation", ge=0
    )
    global_violations: dict[ViolationType, int] = Field(
        default_factory=dict, description="Violation count per kind"
    )

    @model_validator(mode="after")
    def validate_counts(self) -> "ComplianceSummary":
        """Ensure compliant and non-compliant counts add up to the total."""
        if self.compliant_resources + self.non_compliant_resources != self.total_resources:
            raise ValueError(
                "compliant_resources + non_compliant_resources must equal total_resources"
            )
        return self

    @property
    def compliance_score(self) -> float:
        """Ratio of compliant resources; 1.0 when nothing was evaluated."""
        if self.total_resources == 0:
            return 1.0
        return self.compliant_resources / self.total_resources
