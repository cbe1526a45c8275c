"""Enumerations for violation kinds and policy vocabularies."""

from enum import Enum


class ViolationType(str, Enum):
    """Kinds of tagging policy violations."""

    MISSING_REQUIRED_TAG = "missing_required_tag"
    FORBIDDEN_TAG_PRESENT = "forbidden_tag_present"
    INVALID_VALUE = "invalid_value"
    INVALID_FORMAT = "invalid_format"
    CASE_MISMATCH = "case_mismatch"
    SPECIFIC_TAG_MISMATCH = "specific_tag_mismatch"


class ComplianceLevelName(str, Enum):
    """Recognized compliance level names."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    STANDARD = "standard"


class CaseType(str, Enum):
    """Case rules applicable to tag values."""

    LOWERCASE = "lowercase"
    UPPERCASE = "uppercase"
    MIXED = "mixed"


class RegionMode(str, Enum):
    """Region scanning strategies."""

    ALL = "all"
    SPECIFIC = "specific"


class NotificationFrequency(str, Enum):
    """How often email notifications are sent."""

    DAILY = "daily"
    HOURLY = "hourly"
    WEEKLY = "weekly"
