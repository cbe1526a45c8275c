# Copyright (c) 2025 OptimNow - Jean Latiere. All Rights Reserved.
# Licensed under the Proprietary Software License.
# See LICENSE file in the project root for full license information.

"""Compliance service evaluating batches of discovered resources."""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from ..models import (
    ComplianceReport,
    ComplianceResult,
    ExcludedResourceMatch,
    Resource,
    ResourceCompliance,
)
from .policy_service import LoadedPolicy
from .summary import aggregate_results

logger = logging.getLogger(__name__)


class ComplianceService:
    """
    Service for checking tag compliance of discovered resources.

    Selects the applicable criteria per resource type, applies exclusions,
    evaluates every remaining resource and aggregates the results. The
    service holds no state besides the validated policy, so independent
    batches can be checked from several threads.
    """

    def __init__(self, policy: LoadedPolicy):
        """
        Initialize compliance service.

        Args:
            policy: Loaded and validated policy
        """
        self.policy = policy
        self._evaluator = policy.evaluator()

    def check_resource(self, resource: Resource) -> ComplianceResult | None:
        """
        Evaluate one resource without applying exclusions.

        Args:
            resource: Resource with its tags

        Returns:
            ComplianceResult, or None when no criteria apply to its type
        """
        criteria = self.policy.criteria_for(resource.resource_type)
        if criteria is None:
            return None
        return self._evaluator.evaluate(resource.tags, criteria)

    def check_resources(
        self, resources: Iterable[Resource | Mapping[str, Any]]
    ) -> ComplianceReport:
        """
        Check tag compliance for a batch of resources.

        This method:
        1. Orders resources by type then identifier
        2. Records resources matching an excluded_resources pattern
        3. Skips resources whose type has no applicable criteria
        4. Evaluates everything else and aggregates a summary

        Args:
            resources: Resources as models or plain dictionaries

        Returns:
            ComplianceReport with per-resource results and the summary
        """
        ordered = sorted(
            (r if isinstance(r, Resource) else Resource.model_validate(r) for r in resources),
            key=lambda r: (r.resource_type, r.resource_id),
        )
        logger.info(f"Checking tag compliance for {len(ordered)} resources")

        results: list[ResourceCompliance] = []
        excluded: list[ExcludedResourceMatch] = []
        skipped = 0

        for resource in ordered:
            exclusion = self.policy.exclusion_for(resource.resource_type, resource.resource_id)
            if exclusion is not None:
                logger.debug(
                    f"Excluding {resource.resource_type} {resource.resource_id}: "
                    f"{exclusion.reason}"
                )
                excluded.append(
                    ExcludedResourceMatch(
                        resource_id=resource.resource_id,
                        resource_type=resource.resource_type,
                        pattern=exclusion.pattern,
                        reason=exclusion.reason,
                    )
                )
                continue

            result = self.check_resource(resource)
            if result is None:
                skipped += 1
                continue

            results.append(
                ResourceCompliance(
                    resource_id=resource.resource_id,
                    resource_type=resource.resource_type,
                    region=resource.region,
                    result=result,
                )
            )

        summary = aggregate_results(entry.result for entry in results)
        if excluded:
            logger.info(f"Excluded {len(excluded)} resources by policy")
        if skipped:
            logger.info(f"Skipped {skipped} resources with no applicable tag criteria")
        logger.info(
            f"{summary.compliant_resources}/{summary.total_resources} resources compliant"
        )

        return ComplianceReport(
            results=results,
            excluded=excluded,
            skipped_resources=skipped,
            summary=summary,
        )
