# Copyright (c) 2025 OptimNow - Jean Latiere. All Rights Reserved.
# Licensed under the Proprietary Software License.
# See LICENSE file in the project root for full license information.

"""Evaluation of a resource's tags against tag criteria and validation rules."""

from collections.abc import Mapping

from ..models import (
    CaseType,
    ComplianceResult,
    TagCriteria,
    TagValidation,
    Violation,
    ViolationType,
)
from .pattern_compiler import CompiledPatterns, compile_patterns


class TagRuleEvaluator:
    """
    Produces a compliance verdict for one tag set at a time.

    The evaluator only reads the validated tag_validation rules and the
    compiled pattern table it was built with, so a single instance can be
    shared by concurrent callers.

    Checks run in a fixed order, each over sorted tag keys:
    1. Required tags (explicit list and minimum count)
    2. Forbidden tags
    3. Specific tags
    4. Allowed values
    5. Value patterns
    6. Value case
    """

    def __init__(self, tag_validation: TagValidation, patterns: CompiledPatterns):
        """
        Initialize the evaluator.

        Args:
            tag_validation: Validated tag_validation section of the policy
            patterns: Compiled pattern table for the same policy
        """
        self.tag_validation = tag_validation
        self.patterns = patterns

    def evaluate(self, tags: Mapping[str, str], criteria: TagCriteria) -> ComplianceResult:
        """
        Evaluate a resource's tags.

        Violations are returned, never raised, and every check runs regardless
        of how many violations earlier checks found.

        Args:
            tags: The resource's tags
            criteria: Tag criteria applicable to the resource type

        Returns:
            ComplianceResult for this tag set
        """
        violations: list[Violation] = []
        violations.extend(self._check_required_tags(tags, criteria))
        violations.extend(self._check_forbidden_tags(tags, criteria))
        violations.extend(self._check_specific_tags(tags, criteria))
        violations.extend(self._check_allowed_values(tags))
        violations.extend(self._check_patterns(tags))
        violations.extend(self._check_case(tags))

        return ComplianceResult(
            is_compliant=not violations,
            resource_tags=dict(tags),
            violations=violations,
            compliance_level=criteria.compliance_level or None,
        )

    def _check_required_tags(
        self, tags: Mapping[str, str], criteria: TagCriteria
    ) -> list[Violation]:
        required = sorted(set(criteria.required_tags))
        violations = [
            Violation(
                kind=ViolationType.MISSING_REQUIRED_TAG,
                message=f"Missing required tag '{key}'",
                tag_key=key,
            )
            for key in required
            if key not in tags
        ]

        # The count rule is independent of the list rule; it only adds a
        # violation when the per-key ones do not already cover the shortfall.
        present = len(required) - len(violations)
        shortfall = criteria.minimum_required_tags - present
        if shortfall > len(violations):
            violations.append(
                Violation(
                    kind=ViolationType.MISSING_REQUIRED_TAG,
                    message=(
                        f"Resource has {present} required tag(s), "
                        f"minimum is {criteria.minimum_required_tags}"
                    ),
                )
            )
        return violations

    def _check_forbidden_tags(
        self, tags: Mapping[str, str], criteria: TagCriteria
    ) -> list[Violation]:
        return [
            Violation(
                kind=ViolationType.FORBIDDEN_TAG_PRESENT,
                message=f"Tag '{key}' is forbidden",
                tag_key=key,
            )
            for key in sorted(set(criteria.forbidden_tags))
            if key in tags
        ]

    def _check_specific_tags(
        self, tags: Mapping[str, str], criteria: TagCriteria
    ) -> list[Violation]:
        violations = []
        for key in sorted(criteria.specific_tags):
            expected = criteria.specific_tags[key]
            if key not in tags:
                message = f"Missing tag '{key}' with required value '{expected}'"
            elif tags[key] != expected:
                message = f"Tag '{key}' must be '{expected}', found '{tags[key]}'"
            else:
                continue
            violations.append(
                Violation(
                    kind=ViolationType.SPECIFIC_TAG_MISMATCH, message=message, tag_key=key
                )
            )
        return violations

    def _check_allowed_values(self, tags: Mapping[str, str]) -> list[Violation]:
        violations = []
        allowed_values = self.tag_validation.allowed_values
        for key in sorted(tags):
            allowed = allowed_values.get(key)
            if allowed is not None and tags[key] not in allowed:
                violations.append(
                    Violation(
                        kind=ViolationType.INVALID_VALUE,
                        message=(
                            f"Tag '{key}' value '{tags[key]}' is not one of the "
                            f"allowed values: {', '.join(allowed)}"
                        ),
                        tag_key=key,
                    )
                )
        return violations

    def _check_patterns(self, tags: Mapping[str, str]) -> list[Violation]:
        violations = []
        for key in sorted(tags):
            pattern = self.patterns.pattern_rules.get(key)
            if pattern is not None and not pattern.search(tags[key]):
                violations.append(
                    Violation(
                        kind=ViolationType.INVALID_FORMAT,
                        message=(
                            f"Tag '{key}' value '{tags[key]}' does not match "
                            f"required pattern: {pattern.pattern}"
                        ),
                        tag_key=key,
                    )
                )
        return violations

    def _check_case(self, tags: Mapping[str, str]) -> list[Violation]:
        violations = []
        for key in sorted(tags):
            rule = self.tag_validation.case_rules.get(key)
            if rule is None:
                continue

            value = tags[key]
            if rule.case == CaseType.LOWERCASE.value:
                matches = value == value.lower()
            elif rule.case == CaseType.UPPERCASE.value:
                matches = value == value.upper()
            else:
                pattern = self.patterns.case_patterns.get(key)
                matches = pattern is None or pattern.search(value) is not None

            if not matches:
                violations.append(
                    Violation(
                        kind=ViolationType.CASE_MISMATCH,
                        message=rule.message or f"Tag '{key}' value must be {rule.case}",
                        tag_key=key,
                    )
                )
        return violations


def evaluate_tags(
    tags: Mapping[str, str],
    criteria: TagCriteria,
    tag_validation: TagValidation | None = None,
    patterns: CompiledPatterns | None = None,
) -> ComplianceResult:
    """
    Evaluate one tag set without building an evaluator first.

    Args:
        tags: The resource's tags
        criteria: Applicable tag criteria
        tag_validation: Value rules; none when omitted
        patterns: Compiled patterns; compiled from tag_validation when omitted

    Returns:
        ComplianceResult for this tag set
    """
    tag_validation = tag_validation or TagValidation()
    if patterns is None:
        patterns = compile_patterns(tag_validation)
    return TagRuleEvaluator(tag_validation, patterns).evaluate(tags, criteria)
