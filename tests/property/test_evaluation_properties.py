"""
Property-based tests for tag evaluation and result aggregation.

Properties:
*For any* tag set and criteria, a result is compliant exactly when it has no
violations, and evaluating the same input twice yields the same result.
*For any* batch of results, compliant and non-compliant counts add up to the
total and the histogram counts every violation once.
"""

from hypothesis import given, settings, strategies as st

from tag_compliance.models import TagCriteria, TagValidation, ViolationType
from tag_compliance.services import TagRuleEvaluator, aggregate_results, compile_patterns


# =============================================================================
# Strategies for generating test data
# =============================================================================

TAG_KEYS = ["Environment", "Owner", "Project", "CostCenter", "Temporary", "ManagedBy"]
TAG_VALUES = ["prod", "dev", "Prod", "TEAM", "terraform", "AB-1234", "x", ""]


@st.composite
def tags_strategy(draw):
    """Generate a tag dictionary over a small key/value vocabulary."""
    keys = draw(st.lists(st.sampled_from(TAG_KEYS), unique=True, max_size=len(TAG_KEYS)))
    return {key: draw(st.sampled_from(TAG_VALUES)) for key in keys}


@st.composite
def criteria_strategy(draw):
    """Generate tag criteria that would pass policy validation."""
    required = draw(st.lists(st.sampled_from(TAG_KEYS), unique=True, max_size=4))
    return TagCriteria(
        required_tags=required,
        minimum_required_tags=draw(st.integers(min_value=0, max_value=len(required))),
        forbidden_tags=draw(st.lists(st.sampled_from(TAG_KEYS), unique=True, max_size=2)),
        specific_tags=draw(
            st.dictionaries(st.sampled_from(TAG_KEYS), st.sampled_from(TAG_VALUES[:-1]), max_size=2)
        ),
    )


TAG_VALIDATION = TagValidation.model_validate(
    {
        "allowed_values": {"Environment": ["prod", "dev"]},
        "pattern_rules": {"CostCenter": "^[A-Z]{2}-[0-9]{4}$"},
        "case_rules": {
            "Project": {"case": "lowercase"},
            "Owner": {"case": "uppercase"},
            "ManagedBy": {"case": "mixed", "pattern": "^[a-z]+$"},
        },
    }
)
EVALUATOR = TagRuleEvaluator(TAG_VALIDATION, compile_patterns(TAG_VALIDATION))


# =============================================================================
# Properties
# =============================================================================


@settings(max_examples=200)
@given(tags=tags_strategy(), criteria=criteria_strategy())
def test_compliant_iff_no_violations(tags, criteria):
    result = EVALUATOR.evaluate(tags, criteria)
    assert result.is_compliant == (len(result.violations) == 0)


@settings(max_examples=100)
@given(tags=tags_strategy(), criteria=criteria_strategy())
def test_evaluation_is_deterministic(tags, criteria):
    first = EVALUATOR.evaluate(tags, criteria)
    second = EVALUATOR.evaluate(dict(sorted(tags.items(), reverse=True)), criteria)
    assert first.violations == second.violations


@settings(max_examples=100)
@given(tags=tags_strategy(), criteria=criteria_strategy())
def test_missing_required_keys_each_reported(tags, criteria):
    result = EVALUATOR.evaluate(tags, criteria)
    reported = {
        v.tag_key for v in result.violations if v.kind == ViolationType.MISSING_REQUIRED_TAG
    }
    assert {key for key in criteria.required_tags if key not in tags} <= reported


@settings(max_examples=100)
@given(batch=st.lists(st.tuples(tags_strategy(), criteria_strategy()), max_size=20))
def test_summary_counts_add_up(batch):
    results = [EVALUATOR.evaluate(tags, criteria) for tags, criteria in batch]
    summary = aggregate_results(results)

    assert summary.total_resources == len(results)
    assert summary.compliant_resources + summary.non_compliant_resources == len(results)
    assert sum(summary.global_violations.values()) == sum(len(r.violations) for r in results)
    assert 0.0 <= summary.compliance_score <= 1.0
