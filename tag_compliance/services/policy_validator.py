# Copyright (c) 2025 OptimNow - Jean Latiere. All Rights Reserved.
# Licensed under the Proprietary Software License.
# See LICENSE file in the project root for full license information.

"""Staged semantic validation of tagging policy documents."""

import logging
from typing import Any

from ..models import (
    DEFAULT_AWS_REGION,
    DEFAULT_BATCH_SIZE,
    SUPPORTED_POLICY_VERSION,
    CaseType,
    ComplianceLevelName,
    NotificationFrequency,
    PolicyDocument,
    RegionMode,
    TagCriteria,
)
from ..utils.aws_regions import is_valid_region

logger = logging.getLogger(__name__)

VALID_COMPLIANCE_LEVELS = tuple(level.value for level in ComplianceLevelName)
VALID_CASE_TYPES = tuple(case.value for case in CaseType)
VALID_REGION_MODES = tuple(mode.value for mode in RegionMode)
VALID_EMAIL_FREQUENCIES = tuple(freq.value for freq in NotificationFrequency)


class PolicyValidationError(Exception):
    """Raised when policy configuration is invalid."""

    stage = "policy"

    def __init__(self, message: str, field: str | None = None, value: Any = None):
        """
        Initialize policy validation error.

        Args:
            message: Human-readable error message
            field: Dotted path of the offending field (optional)
            value: The offending value (optional)
        """
        self.message = message
        self.field = field
        self.value = value
        super().__init__(message)


class UnsupportedVersionError(PolicyValidationError):
    """Raised when the policy version is missing or not supported."""

    stage = "version"


class GlobalConfigError(PolicyValidationError):
    stage = "global"


class ResourceConfigError(PolicyValidationError):
    stage = "resources"


class ComplianceLevelError(PolicyValidationError):
    stage = "compliance_levels"


class TagValidationRuleError(PolicyValidationError):
    stage = "tag_validation"


class TagCriteriaError(PolicyValidationError):
    """Raised when a tag criteria block is self-contradictory."""

    stage = "tag_criteria"


class MinimumRequiredTagsError(TagCriteriaError):
    """Raised when minimum_required_tags is negative or exceeds required_tags."""


class NotificationConfigError(PolicyValidationError):
    stage = "notifications"


class AWSConfigError(PolicyValidationError):
    stage = "aws"


class PolicyValidator:
    """
    Validates a parsed policy document before any resource is evaluated.

    Stages run in a fixed order and the first failure is raised:
    1. Version
    2. Global configuration (batch size, tag criteria)
    3. Enabled resource configurations
    4. Compliance levels
    5. Tag validation rules
    6. Tag criteria (shared by stages 2 and 3)
    7. Notifications
    8. AWS region configuration

    The input document is never modified. Validation returns a normalized
    copy in which an empty specific-region list becomes the default region
    and a missing AWS batch size is filled in.
    """

    def __init__(
        self,
        default_region: str = DEFAULT_AWS_REGION,
        default_batch_size: int = DEFAULT_BATCH_SIZE,
    ):
        """
        Initialize the PolicyValidator.

        Args:
            default_region: Region used when a region list must be defaulted
            default_batch_size: Batch size used when neither aws nor global set one
        """
        self.default_region = default_region
        self.default_batch_size = default_batch_size

    def validate(self, document: PolicyDocument) -> PolicyDocument:
        """
        Run every validation stage against a policy document.

        Args:
            document: Parsed policy document

        Returns:
            PolicyDocument: The validated, normalized document

        Raises:
            PolicyValidationError: A stage-specific subclass on the first failure
        """
        try:
            self.validate_version(document)
            self.validate_global_config(document)
            self.validate_resource_configs(document)
            self.validate_compliance_levels(document)
            self.validate_tag_validation_rules(document)
            self.validate_notifications(document)
            normalized = self.validate_aws_config(document)
        except PolicyValidationError as e:
            logger.warning(f"Policy rejected at {e.stage} stage: {e.message}")
            raise

        logger.debug("Policy document passed all validation stages")
        return normalized

    def validate_version(self, document: PolicyDocument) -> None:
        """Stage 1: exact match against the supported version."""
        if not document.version:
            raise UnsupportedVersionError(
                "Policy version is missing", field="version", value=document.version
            )

        if document.version != SUPPORTED_POLICY_VERSION:
            raise UnsupportedVersionError(
                f"Unsupported policy version: {document.version}. "
                f"Expected {SUPPORTED_POLICY_VERSION}",
                field="version",
                value=document.version,
            )

    def validate_global_config(self, document: PolicyDocument) -> None:
        """Stage 2: global batch size and global tag criteria."""
        batch_size = document.global_config.batch_size
        if batch_size is not None and batch_size <= 0:
            raise GlobalConfigError(
                f"Global batch size must be a positive number, got {batch_size}",
                field="global.batch_size",
                value=batch_size,
            )

        self.validate_tag_criteria(document.global_config.tag_criteria, "global.tag_criteria")

    def validate_resource_configs(self, document: PolicyDocument) -> None:
        """Stage 3: criteria, exclusions and level names of enabled resources."""
        for resource_type in sorted(document.resources):
            resource_config = document.resources[resource_type]
            if not resource_config.enabled:
                logger.debug(f"Skipping validation of disabled resource type {resource_type}")
                continue

            context = f"resources.{resource_type}"
            self.validate_tag_criteria(resource_config.tag_criteria, f"{context}.tag_criteria")

            for index, excluded in enumerate(resource_config.excluded_resources):
                if not excluded.pattern:
                    raise ResourceConfigError(
                        f"Excluded resource pattern cannot be empty for resource type "
                        f"{resource_type}",
                        field=f"{context}.excluded_resources[{index}].pattern",
                        value=excluded.pattern,
                    )
                if not excluded.reason:
                    raise ResourceConfigError(
                        f"Excluded resource '{excluded.pattern}' for resource type "
                        f"{resource_type} must give a reason",
                        field=f"{context}.excluded_resources[{index}].reason",
                        value=excluded.reason,
                    )

            level = resource_config.tag_criteria.compliance_level
            if level and level not in VALID_COMPLIANCE_LEVELS:
                raise ResourceConfigError(
                    f"Invalid compliance level {level} for resource type {resource_type}. "
                    f"Must be one of {list(VALID_COMPLIANCE_LEVELS)}",
                    field=f"{context}.tag_criteria.compliance_level",
                    value=level,
                )

    def validate_compliance_levels(self, document: PolicyDocument) -> None:
        """Stage 4: level names, their tags, and references from criteria."""
        for level_name in sorted(document.compliance_levels):
            level = document.compliance_levels[level_name]
            context = f"compliance_levels.{level_name}"

            if level_name not in VALID_COMPLIANCE_LEVELS:
                raise ComplianceLevelError(
                    f"Invalid compliance level: {level_name}. "
                    f"Must be one of {list(VALID_COMPLIANCE_LEVELS)}",
                    field=context,
                    value=level_name,
                )

            for tag in level.required_tags:
                if not tag:
                    raise ComplianceLevelError(
                        f"Empty required tag in compliance level '{level_name}'",
                        field=f"{context}.required_tags",
                        value=tag,
                    )

            for key, value in level.specific_tags.items():
                if not key or not value:
                    raise ComplianceLevelError(
                        f"Empty key or value in specific tags of compliance level "
                        f"'{level_name}'",
                        field=f"{context}.specific_tags",
                        value={key: value},
                    )

        for field, level in self._referenced_levels(document):
            if level not in document.compliance_levels:
                raise ComplianceLevelError(
                    f"{field} references undefined compliance level: {level}",
                    field=field,
                    value=level,
                )

    def validate_tag_validation_rules(self, document: PolicyDocument) -> None:
        """Stage 5: allowed values, pattern rules and case rules."""
        tag_validation = document.tag_validation

        for tag_name in sorted(tag_validation.allowed_values):
            values = tag_validation.allowed_values[tag_name]
            field = f"tag_validation.allowed_values.{tag_name}"
            if not values:
                raise TagValidationRuleError(
                    f"No allowed values specified for tag {tag_name}", field=field, value=values
                )
            if any(value == "" for value in values):
                raise TagValidationRuleError(
                    f"Empty value found in allowed values for tag {tag_name}",
                    field=field,
                    value=values,
                )

        # Compilability is checked by the pattern compiler
        for tag_name in sorted(tag_validation.pattern_rules):
            pattern = tag_validation.pattern_rules[tag_name]
            if not pattern:
                raise TagValidationRuleError(
                    f"Empty pattern rule for tag {tag_name}",
                    field=f"tag_validation.pattern_rules.{tag_name}",
                    value=pattern,
                )

        for tag_name in sorted(tag_validation.case_rules):
            rule = tag_validation.case_rules[tag_name]
            if rule.case not in VALID_CASE_TYPES:
                raise TagValidationRuleError(
                    f"Invalid case type for tag {tag_name}: {rule.case!r}. "
                    f"Must be one of {list(VALID_CASE_TYPES)}",
                    field=f"tag_validation.case_rules.{tag_name}.case",
                    value=rule.case,
                )

    def validate_tag_criteria(self, criteria: TagCriteria, context: str) -> None:
        """
        Stage 6: check one tag criteria block.

        Args:
            criteria: Criteria to check
            context: Dotted path of the criteria, used in error messages

        Raises:
            MinimumRequiredTagsError: Negative minimum, or minimum above the
                number of distinct required tags
            TagCriteriaError: Empty required tag key
        """
        minimum = criteria.minimum_required_tags
        if minimum < 0:
            raise MinimumRequiredTagsError(
                f"{context}: minimum required tags cannot be negative, got {minimum}",
                field=f"{context}.minimum_required_tags",
                value=minimum,
            )

        # Repeated keys count once, as in the evaluator
        distinct_required = len(set(criteria.required_tags))
        if minimum > distinct_required:
            raise MinimumRequiredTagsError(
                f"{context}: minimum required tags ({minimum}) cannot be greater than "
                f"the number of distinct required tags ({distinct_required})",
                field=f"{context}.minimum_required_tags",
                value=minimum,
            )

        for tag in criteria.required_tags:
            if not tag:
                raise TagCriteriaError(
                    f"{context}: required tag keys cannot be empty",
                    field=f"{context}.required_tags",
                    value=tag,
                )

    def validate_notifications(self, document: PolicyDocument) -> None:
        """Stage 7: Slack channels and email recipients/frequency."""
        slack = document.notifications.slack
        if slack.enabled and not slack.channels:
            raise NotificationConfigError(
                "Slack notifications enabled but no channels specified",
                field="notifications.slack.channels",
                value=slack.channels,
            )

        email = document.notifications.email
        if email.enabled:
            if not email.recipients:
                raise NotificationConfigError(
                    "Email notifications enabled but no recipients specified",
                    field="notifications.email.recipients",
                    value=email.recipients,
                )
            if email.frequency and email.frequency not in VALID_EMAIL_FREQUENCIES:
                raise NotificationConfigError(
                    f"Invalid email notification frequency: {email.frequency}",
                    field="notifications.email.frequency",
                    value=email.frequency,
                )

    def validate_aws_config(self, document: PolicyDocument) -> PolicyDocument:
        """
        Stage 8: region mode, batch size and region codes.

        Returns:
            PolicyDocument: Copy of the document with normalized AWS settings
        """
        aws = document.aws
        regions = aws.regions

        if not regions.mode:
            regions = regions.model_copy(
                update={"mode": RegionMode.SPECIFIC.value, "region_list": [self.default_region]}
            )

        if regions.mode not in VALID_REGION_MODES:
            raise AWSConfigError(
                f"Invalid AWS regions mode. Must be 'all' or 'specific', got {regions.mode}",
                field="aws.regions.mode",
                value=regions.mode,
            )

        if aws.batch_size is not None and aws.batch_size <= 0:
            raise AWSConfigError(
                f"AWS batch size must be a positive number, got {aws.batch_size}",
                field="aws.batch_size",
                value=aws.batch_size,
            )

        batch_size = aws.batch_size
        if batch_size is None:
            batch_size = document.global_config.batch_size or self.default_batch_size

        if regions.mode == RegionMode.SPECIFIC.value:
            if not regions.region_list:
                logger.info(
                    f"No regions listed for specific mode, defaulting to {self.default_region}"
                )
                regions = regions.model_copy(update={"region_list": [self.default_region]})

            for region in regions.region_list:
                if not region:
                    raise AWSConfigError(
                        "Empty region specified in AWS regions list",
                        field="aws.regions.list",
                        value=region,
                    )
                if not is_valid_region(region):
                    raise AWSConfigError(
                        f"Invalid AWS region: {region}", field="aws.regions.list", value=region
                    )

        for resource_type in sorted(document.resources):
            for region in document.resources[resource_type].regions:
                if not is_valid_region(region):
                    raise AWSConfigError(
                        f"Invalid region {region} specified for resource type {resource_type}",
                        field=f"resources.{resource_type}.regions",
                        value=region,
                    )

        normalized_aws = aws.model_copy(update={"regions": regions, "batch_size": batch_size})
        return document.model_copy(update={"aws": normalized_aws})

    @staticmethod
    def _referenced_levels(document: PolicyDocument) -> list[tuple[str, str]]:
        """Compliance levels named by global and enabled resource criteria."""
        references = []
        global_level = document.global_config.tag_criteria.compliance_level
        if global_level:
            references.append(("global.tag_criteria.compliance_level", global_level))

        for resource_type in sorted(document.resources):
            resource_config = document.resources[resource_type]
            level = resource_config.tag_criteria.compliance_level
            if resource_config.enabled and level:
                references.append(
                    (f"resources.{resource_type}.tag_criteria.compliance_level", level)
                )
        return references
