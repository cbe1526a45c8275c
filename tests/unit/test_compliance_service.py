"""
Unit tests for ComplianceService.

Tests criteria selection, exclusions, ordering and summary aggregation over
batches of resources.
"""

import pytest

from tag_compliance.models import Resource, ViolationType
from tag_compliance.services import ComplianceService, PolicyService


@pytest.fixture
def service(loaded_policy):
    return ComplianceService(loaded_policy)


COMPLIANT_S3_TAGS = {"DataClassification": "internal"}
COMPLIANT_GLOBAL_TAGS = {"Environment": "prod", "Owner": "team", "ManagedBy": "terraform"}


class TestCheckResource:

    def test_resource_specific_criteria(self, service):
        resource = Resource(resource_id="data-bucket", resource_type="s3", tags={})
        result = service.check_resource(resource)

        assert result.is_compliant is False
        assert result.compliance_level == "high"
        assert [v.tag_key for v in result.violations] == ["DataClassification"]

    def test_global_criteria_for_unconfigured_type(self, service):
        resource = Resource(
            resource_id="i-123", resource_type="ec2", tags=COMPLIANT_GLOBAL_TAGS
        )
        result = service.check_resource(resource)

        assert result.is_compliant is True
        assert result.compliance_level == "standard"

    def test_tag_validation_applies_to_every_type(self, service):
        resource = Resource(
            resource_id="data-bucket",
            resource_type="s3",
            tags={**COMPLIANT_S3_TAGS, "Environment": "qa", "Project": "MyApp"},
        )
        result = service.check_resource(resource)

        assert [v.kind for v in result.violations] == [
            ViolationType.INVALID_VALUE,
            ViolationType.CASE_MISMATCH,
        ]

    def test_no_criteria(self, policy_data, test_settings):
        policy_data["global"]["enabled"] = False
        policy = PolicyService(config=test_settings).load_policy_data(policy_data)

        resource = Resource(resource_id="db-1", resource_type="rds")
        assert ComplianceService(policy).check_resource(resource) is None


class TestCheckResources:

    def test_report_summary(self, service):
        report = service.check_resources(
            [
                Resource(resource_id="b-bucket", resource_type="s3", tags=COMPLIANT_S3_TAGS),
                Resource(resource_id="a-bucket", resource_type="s3", tags={}),
                Resource(resource_id="i-1", resource_type="ec2", tags=COMPLIANT_GLOBAL_TAGS),
            ]
        )

        assert report.summary.total_resources == 3
        assert report.summary.compliant_resources == 2
        assert report.summary.non_compliant_resources == 1
        assert report.summary.global_violations == {ViolationType.MISSING_REQUIRED_TAG: 1}

    def test_results_sorted_by_type_then_id(self, service):
        report = service.check_resources(
            [
                {"resource_id": "z-bucket", "resource_type": "s3"},
                {"resource_id": "a-bucket", "resource_type": "s3"},
                {"resource_id": "i-9", "resource_type": "ec2"},
            ]
        )

        assert [(r.resource_type, r.resource_id) for r in report.results] == [
            ("ec2", "i-9"),
            ("s3", "a-bucket"),
            ("s3", "z-bucket"),
        ]

    def test_excluded_resources_recorded_not_evaluated(self, service):
        report = service.check_resources(
            [
                Resource(resource_id="terraform-state-prod", resource_type="s3"),
                Resource(resource_id="app-bucket", resource_type="s3", tags=COMPLIANT_S3_TAGS),
            ]
        )

        assert [r.resource_id for r in report.results] == ["app-bucket"]
        assert len(report.excluded) == 1
        assert report.excluded[0].pattern == "terraform-state-*"
        assert report.excluded[0].reason == "State buckets managed separately"
        assert report.summary.total_resources == 1

    def test_skipped_resources_counted(self, policy_data, test_settings):
        policy_data["global"]["enabled"] = False
        policy = PolicyService(config=test_settings).load_policy_data(policy_data)

        report = ComplianceService(policy).check_resources(
            [
                {"resource_id": "db-1", "resource_type": "rds"},
                {"resource_id": "bucket", "resource_type": "s3", "tags": COMPLIANT_S3_TAGS},
            ]
        )

        assert report.skipped_resources == 1
        assert report.summary.total_resources == 1

    def test_region_carried_into_results(self, service):
        report = service.check_resources(
            [{"resource_id": "i-1", "resource_type": "ec2", "region": "eu-west-1"}]
        )
        assert report.results[0].region == "eu-west-1"

    def test_empty_batch(self, service):
        report = service.check_resources([])

        assert report.results == []
        assert report.summary.total_resources == 0
        assert report.summary.compliance_score == 1.0
