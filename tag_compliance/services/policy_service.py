# Copyright (c) 2025 OptimNow - Jean Latiere. All Rights Reserved.
# Licensed under the Proprietary Software License.
# See LICENSE file in the project root for full license information.

"""Policy service for loading, validating and querying tagging policies."""

import logging
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ..config import Settings, settings as app_settings
from ..models import ExcludedResource, PolicyDocument, RegionMode, TagCriteria
from ..utils.aws_regions import sorted_regions
from .pattern_compiler import CompiledPatterns, compile_patterns
from .policy_validator import PolicyValidationError, PolicyValidator
from .rule_evaluator import TagRuleEvaluator

logger = logging.getLogger(__name__)

POLICY_FILE_EXTENSIONS = (".yaml", ".yml")

# Accepted in policy files but not evaluated
UNSUPPORTED_TAG_CRITERIA_KEYS = ("max_tags",)
UNSUPPORTED_TAG_VALIDATION_KEYS = (
    "prohibited_tags",
    "key_format_rules",
    "key_validation",
    "value_validation",
    "length_rules",
)


def find_unsupported_keys(policy_data: dict) -> list[str]:
    """
    List dotted paths of policy keys that are parsed but have no effect.

    Args:
        policy_data: Raw policy mapping, before model validation

    Returns:
        Paths such as "resources.s3.tag_criteria.max_tags"; criteria sections
        first (global, then resources), then tag_validation
    """
    criteria_sections = []
    global_section = policy_data.get("global")
    if isinstance(global_section, dict):
        criteria_sections.append(("global.tag_criteria", global_section.get("tag_criteria")))

    resources = policy_data.get("resources")
    if isinstance(resources, dict):
        for resource_type, resource_section in resources.items():
            if isinstance(resource_section, dict):
                criteria_sections.append(
                    (
                        f"resources.{resource_type}.tag_criteria",
                        resource_section.get("tag_criteria"),
                    )
                )

    found = []
    for context, criteria in criteria_sections:
        if isinstance(criteria, dict):
            found.extend(
                f"{context}.{key}" for key in UNSUPPORTED_TAG_CRITERIA_KEYS if key in criteria
            )

    tag_validation = policy_data.get("tag_validation")
    if isinstance(tag_validation, dict):
        found.extend(
            f"tag_validation.{key}"
            for key in UNSUPPORTED_TAG_VALIDATION_KEYS
            if key in tag_validation
        )
    return found


class PolicyNotFoundError(Exception):
    """Raised when policy file is not found."""

    pass


class PolicyFileError(PolicyValidationError):
    """Raised when the policy file cannot be used (extension, empty, unreadable)."""

    stage = "file"


class PolicyParseError(PolicyValidationError):
    """Raised when the policy file is not valid YAML."""

    stage = "parse"


class PolicyStructureError(PolicyValidationError):
    """Raised when the policy does not match the document structure."""

    stage = "structure"


@dataclass(frozen=True)
class LoadedPolicy:
    """A validated policy document together with its compiled patterns."""

    document: PolicyDocument
    patterns: CompiledPatterns
    source: Path | None = None

    def criteria_for(self, resource_type: str) -> TagCriteria | None:
        """
        Get the tag criteria applicable to a resource type.

        Resource-specific criteria replace the global criteria wholesale when
        the resource type is configured and enabled; there is no field-level
        merge.

        Args:
            resource_type: Resource type key (e.g., "s3")

        Returns:
            The applicable criteria, or None when nothing applies
        """
        resource_config = self.document.resources.get(resource_type)
        if resource_config is not None and resource_config.enabled:
            return resource_config.tag_criteria

        if self.document.global_config.enabled:
            return self.document.global_config.tag_criteria

        return None

    def exclusion_for(self, resource_type: str, resource_id: str) -> ExcludedResource | None:
        """
        Find the exclusion rule matching a resource, if any.

        Patterns are shell-style wildcards (e.g., "terraform-state-*") matched
        case-sensitively against the whole resource identifier.
        """
        resource_config = self.document.resources.get(resource_type)
        if resource_config is None or not resource_config.enabled:
            return None

        for excluded in resource_config.excluded_resources:
            if fnmatchcase(resource_id, excluded.pattern):
                return excluded
        return None

    def regions_for(self, resource_type: str) -> list[str]:
        """Regions to scan for a resource type, honouring per-resource overrides."""
        resource_config = self.document.resources.get(resource_type)
        if resource_config is not None and resource_config.regions:
            return list(resource_config.regions)

        regions = self.document.aws.regions
        if regions.mode == RegionMode.ALL.value:
            return sorted_regions()
        return list(regions.region_list)

    def evaluator(self) -> TagRuleEvaluator:
        """Build a rule evaluator bound to this policy's rules and patterns."""
        return TagRuleEvaluator(self.document.tag_validation, self.patterns)


class PolicyService:
    """
    Service for loading and managing tagging policies.

    This service handles:
    - Loading policy from a YAML file
    - Validating policy structure and semantics on load
    - Compiling pattern rules once per loaded policy
    - Caching the loaded policy for later retrieval
    """

    def __init__(
        self,
        policy_path: str | Path | None = None,
        config: Settings | None = None,
    ):
        """
        Initialize the PolicyService.

        Args:
            policy_path: Path to the policy YAML file. If None, uses the configured path.
            config: Settings to use. If None, uses the global settings.
        """
        config = config or app_settings()
        self._policy: LoadedPolicy | None = None
        self._policy_path = Path(policy_path) if policy_path else Path(config.policy_path)
        self._validator = PolicyValidator(
            default_region=config.default_region,
            default_batch_size=config.default_batch_size,
        )

    @property
    def policy_path(self) -> Path:
        return self._policy_path

    def load_policy(self, policy_path: str | Path | None = None) -> LoadedPolicy:
        """
        Load tagging policy from a YAML file.

        This method:
        1. Checks the file exists, has a YAML extension and is not empty
        2. Parses the YAML document
        3. Builds the document model and runs the staged validator
        4. Compiles pattern rules
        5. Caches the policy for future retrieval

        Args:
            policy_path: Optional path to policy file. If None, uses instance path.

        Returns:
            LoadedPolicy: The loaded and validated policy

        Raises:
            PolicyNotFoundError: If the policy file doesn't exist
            PolicyValidationError: If the file or the policy is invalid
        """
        path = Path(policy_path) if policy_path else self._policy_path
        logger.info(f"Loading tagging policy from {path}")

        if not path.exists():
            raise PolicyNotFoundError(
                f"Policy file not found: {path}. " f"Please create a policy file at this location."
            )

        if path.suffix.lower() not in POLICY_FILE_EXTENSIONS:
            raise PolicyFileError(
                f"Policy file {path} must have a .yaml or .yml extension",
                field="path",
                value=str(path),
            )

        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            raise PolicyFileError(f"Error reading policy file {path}: {e}") from e

        if not content.strip():
            raise PolicyFileError(f"Policy file {path} is empty", field="path", value=str(path))

        try:
            policy_data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise PolicyParseError(f"Invalid YAML in policy file {path}: {e}") from e

        self._policy = self.load_policy_data(policy_data, source=path)
        return self._policy

    def load_policy_data(self, policy_data: Any, source: Path | None = None) -> LoadedPolicy:
        """
        Build a loaded policy from already-parsed data.

        Args:
            policy_data: Mapping with the policy document's keys
            source: File the data came from, if any

        Returns:
            LoadedPolicy: The validated policy with compiled patterns

        Raises:
            PolicyValidationError: If the policy is invalid
        """
        origin = source or "policy data"
        if not isinstance(policy_data, dict):
            raise PolicyStructureError(
                f"Invalid policy structure in {origin}: expected a mapping at the top level, "
                f"got {type(policy_data).__name__}"
            )

        for key_path in find_unsupported_keys(policy_data):
            logger.warning(f"Policy key {key_path} in {origin} is not supported and has no effect")

        try:
            document = PolicyDocument.model_validate(policy_data)
        except ValidationError as e:
            raise PolicyStructureError(f"Invalid policy structure in {origin}: {e}") from e

        return self.build_policy(document, source=source)

    def build_policy(self, document: PolicyDocument, source: Path | None = None) -> LoadedPolicy:
        """Validate a document model and compile its patterns."""
        validated = self._validator.validate(document)
        patterns = compile_patterns(validated.tag_validation)

        logger.info(
            f"Policy version {validated.version} loaded: "
            f"{len(validated.resources)} resource type(s), "
            f"{len(validated.compliance_levels)} compliance level(s), "
            f"{len(patterns)} pattern(s)"
        )
        return LoadedPolicy(document=validated, patterns=patterns, source=source)

    def get_policy(self) -> LoadedPolicy:
        """
        Get the currently loaded policy.

        If no policy is loaded, attempts to load from the configured path.

        Returns:
            LoadedPolicy: The current policy

        Raises:
            PolicyNotFoundError: If no policy is loaded and the file doesn't exist
            PolicyValidationError: If policy validation fails
        """
        if self._policy is None:
            self.load_policy()

        return self._policy

    def reload_policy(self) -> LoadedPolicy:
        """
        Reload the policy from disk.

        Useful for picking up changes to the policy file without restarting.
        """
        return self.load_policy()

    def validate_policy_data(self, policy_data: Any) -> tuple[bool, str | None]:
        """
        Validate policy data without caching it.

        Useful for pre-validation before saving a policy file.

        Args:
            policy_data: Dictionary containing policy data

        Returns:
            Tuple of (is_valid, error_message)
        """
        try:
            self.load_policy_data(policy_data)
            return True, None
        except PolicyValidationError as e:
            return False, str(e)
