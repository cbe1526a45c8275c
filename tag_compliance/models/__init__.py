"""Data models for the tag compliance engine."""

from .enums import (
    CaseType,
    ComplianceLevelName,
    NotificationFrequency,
    RegionMode,
    ViolationType,
)
from .violations import Violation
from .compliance import ComplianceResult, ComplianceSummary
from .policy import (
    DEFAULT_AWS_REGION,
    DEFAULT_BATCH_SIZE,
    SUPPORTED_POLICY_VERSION,
    AWSConfig,
    CaseRule,
    ComplianceLevel,
    EmailNotificationConfig,
    ExcludedResource,
    GlobalConfig,
    NotificationConfig,
    PolicyDocument,
    RegionsConfig,
    ResourceConfig,
    SlackNotificationConfig,
    TagCriteria,
    TagValidation,
)
from .resource import (
    ComplianceReport,
    ExcludedResourceMatch,
    Resource,
    ResourceCompliance,
)

__all__ = [
    "CaseType",
    "ComplianceLevelName",
    "NotificationFrequency",
    "RegionMode",
    "ViolationType",
    "Violation",
    "ComplianceResult",
    "ComplianceSummary",
    "DEFAULT_AWS_REGION",
    "DEFAULT_BATCH_SIZE",
    "SUPPORTED_POLICY_VERSION",
    "AWSConfig",
    "CaseRule",
    "ComplianceLevel",
    "EmailNotificationConfig",
    "ExcludedResource",
    "GlobalConfig",
    "NotificationConfig",
    "PolicyDocument",
    "RegionsConfig",
    "ResourceConfig",
    "SlackNotificationConfig",
    "TagCriteria",
    "TagValidation",
    "ComplianceReport",
    "ExcludedResourceMatch",
    "Resource",
    "ResourceCompliance",
]
