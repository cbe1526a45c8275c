"""Aggregation of compliance results into a summary."""

from collections import Counter
from collections.abc import Iterable

from ..models import ComplianceResult, ComplianceSummary, ViolationType


def aggregate_results(results: Iterable[ComplianceResult]) -> ComplianceSummary:
    """
    Fold compliance results into totals and a per-kind violation histogram.

    Args:
        results: Results to aggregate; consumed once

    Returns:
        ComplianceSummary with kinds ordered as declared in ViolationType
    """
    total = 0
    compliant = 0
    kind_counts: Counter[ViolationType] = Counter()

    for result in results:
        total += 1
        if result.is_compliant:
            compliant += 1
        for violation in result.violations:
            kind_counts[violation.kind] += 1

    return ComplianceSummary(
        total_resources=total,
        compliant_resources=compliant,
        non_compliant_resources=total - compliant,
        global_violations={kind: kind_counts[kind] for kind in ViolationType if kind in kind_counts},
    )
