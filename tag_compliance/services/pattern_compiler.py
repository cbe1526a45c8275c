# Copyright (c) 2025 OptimNow - Jean Latiere. All Rights Reserved.
# Licensed under the Proprietary Software License.
# See LICENSE file in the project root for full license information.

"""Compilation of user-supplied tag value patterns."""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from ..models import CaseType, TagValidation
from .policy_validator import PolicyValidationError

logger = logging.getLogger(__name__)


class InvalidPatternError(PolicyValidationError):
    """Raised when a policy regex cannot be compiled."""

    stage = "patterns"

    def __init__(self, tag_key: str, raw_pattern: str, reason: str = ""):
        """
        Initialize invalid pattern error.

        Args:
            tag_key: Tag whose pattern failed to compile
            raw_pattern: The pattern as written in the policy
            reason: Compiler error message
        """
        self.tag_key = tag_key
        self.raw_pattern = raw_pattern
        message = f"Invalid pattern for tag {tag_key}: {raw_pattern!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message, field=tag_key, value=raw_pattern)


def _frozen() -> Mapping[str, re.Pattern]:
    return MappingProxyType({})


@dataclass(frozen=True)
class CompiledPatterns:
    """Read-only table of compiled patterns keyed by tag name."""

    pattern_rules: Mapping[str, re.Pattern] = field(default_factory=_frozen)
    case_patterns: Mapping[str, re.Pattern] = field(default_factory=_frozen)

    def __len__(self) -> int:
        return len(self.pattern_rules) + len(self.case_patterns)


def _compile(tag_key: str, raw_pattern: str) -> re.Pattern:
    try:
        return re.compile(raw_pattern)
    except re.error as e:
        raise InvalidPatternError(tag_key, raw_pattern, str(e)) from e


def compile_patterns(tag_validation: TagValidation) -> CompiledPatterns:
    """
    Compile every pattern rule and mixed-case pattern of a policy.

    Tags are processed in sorted order and the first failure aborts the whole
    compilation, so a table is either complete or never returned.

    Args:
        tag_validation: The policy's tag_validation section

    Returns:
        CompiledPatterns: Immutable compiled-pattern table

    Raises:
        InvalidPatternError: On the first pattern that does not compile
    """
    pattern_rules: dict[str, re.Pattern] = {}
    for tag_key in sorted(tag_validation.pattern_rules):
        pattern_rules[tag_key] = _compile(tag_key, tag_validation.pattern_rules[tag_key])

    case_patterns: dict[str, re.Pattern] = {}
    for tag_key in sorted(tag_validation.case_rules):
        rule = tag_validation.case_rules[tag_key]
        if rule.case == CaseType.MIXED.value and rule.pattern:
            case_patterns[tag_key] = _compile(tag_key, rule.pattern)

    compiled = CompiledPatterns(
        pattern_rules=MappingProxyType(pattern_rules),
        case_patterns=MappingProxyType(case_patterns),
    )
    logger.debug(f"Compiled {len(compiled)} tag value patterns")
    return compiled
