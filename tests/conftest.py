"""Pytest configuration and shared fixtures."""

import copy

import pytest
import yaml

from tag_compliance.config import Settings
from tag_compliance.models import PolicyDocument, TagCriteria, TagValidation
from tag_compliance.services import PolicyService, TagRuleEvaluator, compile_patterns


# =============================================================================
# Environment and Configuration Fixtures
# =============================================================================

@pytest.fixture
def test_settings(tmp_path):
    """Settings independent of the caller's environment."""
    return Settings(
        policy_path=str(tmp_path / "tag-compliance.yaml"),
        log_level="DEBUG",
        default_region="us-east-1",
        default_batch_size=20,
    )


# =============================================================================
# Policy Fixtures
# =============================================================================

SAMPLE_POLICY = {
    "version": "1.0",
    "global": {
        "enabled": True,
        "batch_size": 10,
        "tag_criteria": {
            "minimum_required_tags": 2,
            "required_tags": ["Environment", "Owner"],
            "forbidden_tags": ["Temporary"],
            "specific_tags": {"ManagedBy": "terraform"},
            "compliance_level": "standard",
        },
    },
    "resources": {
        "s3": {
            "enabled": True,
            "tag_criteria": {
                "minimum_required_tags": 1,
                "required_tags": ["DataClassification"],
                "compliance_level": "high",
            },
            "excluded_resources": [
                {"pattern": "terraform-state-*", "reason": "State buckets managed separately"}
            ],
        },
        "ec2": {
            "enabled": False,
            "tag_criteria": {"minimum_required_tags": 5, "required_tags": []},
        },
    },
    "compliance_levels": {
        "high": {
            "required_tags": ["DataClassification"],
            "specific_tags": {"EncryptionRequired": "true"},
        },
        "standard": {"required_tags": ["Owner"]},
    },
    "tag_validation": {
        "allowed_values": {"Environment": ["dev", "staging", "prod"]},
        "pattern_rules": {"CostCenter": "^[A-Z]{2}-[0-9]{4}$"},
        "case_rules": {
            "Project": {"case": "lowercase", "message": "Project tag must be lowercase"},
            "ProjectCode": {
                "case": "mixed",
                "pattern": "^[A-Z]+-[0-9]+$",
                "message": "ProjectCode must follow pattern: UPPERCASE-numbers",
            },
        },
    },
    "notifications": {
        "slack": {"enabled": True, "channels": {"alerts": "compliance-alerts"}},
        "email": {"enabled": True, "recipients": ["cloud-team@company.com"], "frequency": "daily"},
    },
    "aws": {"regions": {"mode": "specific", "list": ["us-east-1", "eu-west-1"]}},
}


@pytest.fixture
def policy_data():
    """A valid policy document as a plain dictionary (safe to mutate)."""
    return copy.deepcopy(SAMPLE_POLICY)


@pytest.fixture
def policy_document(policy_data):
    """The sample policy as a document model."""
    return PolicyDocument.model_validate(policy_data)


@pytest.fixture
def write_policy_file(tmp_path):
    """Write a policy dictionary to a YAML file and return its path."""

    def _write(data, name="tag-compliance.yaml"):
        path = tmp_path / name
        path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def loaded_policy(policy_data, test_settings):
    """The sample policy loaded, validated and compiled."""
    return PolicyService(config=test_settings).load_policy_data(policy_data)


# =============================================================================
# Evaluator Fixtures
# =============================================================================

@pytest.fixture
def make_evaluator():
    """Build an evaluator from tag_validation keyword arguments."""

    def _make(**rules):
        tag_validation = TagValidation.model_validate(rules)
        return TagRuleEvaluator(tag_validation, compile_patterns(tag_validation))

    return _make


@pytest.fixture
def empty_criteria():
    return TagCriteria()
