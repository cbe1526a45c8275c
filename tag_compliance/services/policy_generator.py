# Copyright (c) 2025 OptimNow - Jean Latiere. All Rights Reserved.
# Licensed under the Proprietary Software License.
# See LICENSE file in the project root for full license information.

"""Generation of a default tagging policy document."""

import logging
from pathlib import Path

import yaml

from ..models import (
    DEFAULT_BATCH_SIZE,
    SUPPORTED_POLICY_VERSION,
    AWSConfig,
    CaseRule,
    ComplianceLevel,
    ExcludedResource,
    GlobalConfig,
    PolicyDocument,
    RegionsConfig,
    ResourceConfig,
    TagCriteria,
    TagValidation,
)

logger = logging.getLogger(__name__)


def generate_default_policy() -> PolicyDocument:
    """
    Build the default policy document.

    The defaults cover a global baseline plus stricter S3 and EC2 criteria,
    the "high" and "standard" compliance levels they reference, and scanning
    of all regions.

    Returns:
        PolicyDocument that passes validation unchanged
    """
    return PolicyDocument(
        version=SUPPORTED_POLICY_VERSION,
        aws=AWSConfig(
            regions=RegionsConfig(mode="all"),
            batch_size=DEFAULT_BATCH_SIZE,
        ),
        global_config=GlobalConfig(
            enabled=True,
            tag_criteria=TagCriteria(
                minimum_required_tags=3,
                required_tags=["Environment", "Owner", "Project"],
                forbidden_tags=["Temporary", "Test"],
                specific_tags={"ComplianceLevel": "high", "ManagedBy": "terraform"},
                compliance_level="high",
            ),
        ),
        resources={
            "s3": ResourceConfig(
                enabled=True,
                tag_criteria=TagCriteria(
                    minimum_required_tags=4,
                    required_tags=["DataClassification", "BackupPolicy", "Environment", "Owner"],
                    forbidden_tags=["Temporary", "Test"],
                    specific_tags={"EncryptionRequired": "true"},
                    compliance_level="high",
                ),
                excluded_resources=[
                    ExcludedResource(
                        pattern="terraform-state-*",
                        reason="Terraform state buckets managed separately",
                    ),
                    ExcludedResource(
                        pattern="log-archive-*",
                        reason="Logging buckets excluded from standard compliance",
                    ),
                ],
            ),
            "ec2": ResourceConfig(
                enabled=True,
                tag_criteria=TagCriteria(
                    minimum_required_tags=3,
                    required_tags=["Application", "PatchGroup", "Environment"],
                    forbidden_tags=["Temporary", "Test"],
                    specific_tags={"AutoStop": "enabled"},
                    compliance_level="standard",
                ),
                excluded_resources=[
                    ExcludedResource(
                        pattern="bastion-*",
                        reason="Bastion hosts managed by security team",
                    ),
                ],
            ),
        },
        compliance_levels={
            "high": ComplianceLevel(
                required_tags=["DataClassification", "BackupPolicy", "Environment", "Owner"],
                specific_tags={"EncryptionRequired": "true"},
            ),
            "standard": ComplianceLevel(
                required_tags=["Application", "PatchGroup", "Environment"],
                specific_tags={"AutoStop": "enabled"},
            ),
        },
        tag_validation=TagValidation(
            allowed_values={
                "Environment": ["production", "staging", "development", "sandbox"],
                "DataClassification": ["public", "private", "confidential", "restricted"],
            },
            case_rules={
                "Environment": CaseRule(
                    case="lowercase", message="Environment tag must be lowercase"
                ),
            },
        ),
    )


def dump_policy(document: PolicyDocument) -> str:
    """
    Serialize a policy document to YAML using the document's key names.

    Args:
        document: Policy to serialize

    Returns:
        YAML text
    """
    data = document.model_dump(mode="json", by_alias=True, exclude_none=True)
    return yaml.safe_dump(data, default_flow_style=False, sort_keys=False)


def write_policy(document: PolicyDocument, path: str | Path) -> Path:
    """
    Write a policy document as YAML, creating parent directories.

    Args:
        document: Policy to write
        path: Destination file

    Returns:
        The path written to
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dump_policy(document), encoding="utf-8")
    logger.info(f"Wrote policy version {document.version} to {path}")
    return path
