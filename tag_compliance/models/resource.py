"""Discovered resource and compliance report data models."""

from pydantic import BaseModel, Field

from .compliance import ComplianceResult, ComplianceSummary


class Resource(BaseModel):
    """A resource handed over by discovery, with its raw tags."""

    resource_id: str = Field(..., description="Resource identifier (name, ID or ARN)")
    resource_type: str = Field(..., description="Resource type key (e.g., s3, ec2)")
    region: str | None = Field(None, description="Region where the resource lives")
    tags: dict[str, str] = Field(
        default_factory=dict,
        description="Tags associated with the resource"
    )


class ResourceCompliance(BaseModel):
    """Compliance verdict for one identified resource."""

    resource_id: str
    resource_type: str
    region: str | None = None
    result: ComplianceResult


class ExcludedResourceMatch(BaseModel):
    """A resource exempted by an excluded_resources pattern."""

    resource_id: str
    resource_type: str
    pattern: str
    reason: str


class ComplianceReport(BaseModel):
    """Outcome of checking a batch of resources against a policy."""

    results: list[ResourceCompliance] = Field(default_factory=list)
    excluded: list[ExcludedResourceMatch] = Field(default_factory=list)
    skipped_resources: int = Field(
        0, description="Resources with no applicable tag criteria", ge=0
    )
    summary: ComplianceSummary = Field(default_factory=ComplianceSummary)
