# Copyright (c) 2025 OptimNow - Jean Latiere. All Rights Reserved.
# Licensed under the Proprietary Software License.
# See LICENSE file in the project root for full license information.

"""Tagging policy document data models.

Models are frozen once constructed. Semantic rules (positive batch sizes,
recognized level names, region codes, ...) are not enforced
here: the staged PolicyValidator reports them with field-level errors.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

SUPPORTED_POLICY_VERSION = "1.0"
DEFAULT_AWS_REGION = "us-east-1"
DEFAULT_BATCH_SIZE = 20


class PolicyModel(BaseModel):
    """
    Base for policy sections: frozen, tolerant of unknown keys.

    Freezing blocks field reassignment only. Nested dicts and lists are shared
    with every LoadedPolicy and evaluator built from the document and must not
    be mutated; use model_copy(update=...) to derive a changed document.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_null_values(cls, data: Any) -> Any:
        # Empty YAML keys ("list:") load as None; fall back to field defaults.
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class TagCriteria(PolicyModel):
    """Tag rules applied to one resource type, or globally."""

    minimum_required_tags: int = Field(
        0, description="Minimum number of required tags that must be present"
    )
    required_tags: list[str] = Field(
        default_factory=list, description="Tag keys that must be present"
    )
    forbidden_tags: list[str] = Field(
        default_factory=list, description="Tag keys that must be absent"
    )
    specific_tags: dict[str, str] = Field(
        default_factory=dict, description="Exact key/value pairs that must match verbatim"
    )
    compliance_level: str = Field(
        "", description="Name of a compliance level defined in compliance_levels"
    )


class GlobalConfig(PolicyModel):
    """Default settings applied across all resources."""

    enabled: bool = Field(False, description="Whether global criteria apply")
    batch_size: int | None = Field(None, description="Default processing batch size")
    tag_criteria: TagCriteria = Field(default_factory=TagCriteria)


class ExcludedResource(PolicyModel):
    """A resource identifier pattern exempt from evaluation."""

    pattern: str = Field("", description="Wildcard pattern matched against resource IDs")
    reason: str = Field("", description="Why matching resources are excluded")


class ResourceConfig(PolicyModel):
    """Configuration specific to one resource type."""

    enabled: bool = Field(False, description="Whether this resource type is evaluated")
    regions: list[str] = Field(
        default_factory=list,
        description="Regions for this resource type (overrides aws.regions when set)",
    )
    tag_criteria: TagCriteria = Field(default_factory=TagCriteria)
    excluded_resources: list[ExcludedResource] = Field(default_factory=list)


class ComplianceLevel(PolicyModel):
    """A named bundle of required and exact-match tags."""

    required_tags: list[str] = Field(default_factory=list)
    specific_tags: dict[str, str] = Field(default_factory=dict)


class CaseRule(PolicyModel):
    """Case constraint for the value of one tag."""

    case: str = Field("", description="lowercase, uppercase or mixed")
    pattern: str | None = Field(None, description="Regex the value must match (mixed case)")
    message: str = Field("", description="Message reported when the rule is violated")


class TagValidation(PolicyModel):
    """Value-level validation rules keyed by tag name."""

    allowed_values: dict[str, list[str]] = Field(default_factory=dict)
    pattern_rules: dict[str, str] = Field(default_factory=dict)
    case_rules: dict[str, CaseRule] = Field(default_factory=dict)


class SlackNotificationConfig(PolicyModel):
    enabled: bool = False
    channels: dict[str, str] = Field(default_factory=dict)


class EmailNotificationConfig(PolicyModel):
    enabled: bool = False
    recipients: list[str] = Field(default_factory=list)
    frequency: str = ""


class NotificationConfig(PolicyModel):
    """Reporting channels for scan results."""

    slack: SlackNotificationConfig = Field(default_factory=SlackNotificationConfig)
    email: EmailNotificationConfig = Field(default_factory=EmailNotificationConfig)


class RegionsConfig(PolicyModel):
    mode: str = Field("", description="all or specific")
    region_list: list[str] = Field(
        default_factory=list, alias="list", description="Regions scanned in specific mode"
    )


class AWSConfig(PolicyModel):
    """Region scanning configuration."""

    regions: RegionsConfig = Field(default_factory=RegionsConfig)
    batch_size: int | None = Field(None, description="Resources processed per batch")


class PolicyDocument(PolicyModel):
    """Complete tagging policy document."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "version": "1.0",
                "global": {
                    "enabled": True,
                    "tag_criteria": {
                        "minimum_required_tags": 2,
                        "required_tags": ["Environment", "Owner"],
                        "forbidden_tags": ["Temporary"],
                        "compliance_level": "standard",
                    },
                },
                "compliance_levels": {
                    "standard": {"required_tags": ["Owner"], "specific_tags": {}}
                },
                "tag_validation": {
                    "allowed_values": {"Environment": ["dev", "staging", "prod"]},
                    "pattern_rules": {"CostCenter": "^[A-Z]{2}-[0-9]{4}$"},
                    "case_rules": {
                        "Environment": {
                            "case": "lowercase",
                            "message": "Environment tag must be lowercase",
                        }
                    },
                },
                "aws": {"regions": {"mode": "all"}, "batch_size": 20},
            }
        }
    )

    version: str = Field("", description="Policy schema version")
    global_config: GlobalConfig = Field(default_factory=GlobalConfig, alias="global")
    resources: dict[str, ResourceConfig] = Field(default_factory=dict)
    compliance_levels: dict[str, ComplianceLevel] = Field(default_factory=dict)
    tag_validation: TagValidation = Field(default_factory=TagValidation)
    notifications: NotificationConfig = Field(default_factory=NotificationConfig)
    aws: AWSConfig = Field(default_factory=AWSConfig)
