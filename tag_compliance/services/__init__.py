"""Service layer for the tag compliance engine."""

from .policy_validator import PolicyValidationError, PolicyValidator
from .pattern_compiler import CompiledPatterns, InvalidPatternError, compile_patterns
from .rule_evaluator import TagRuleEvaluator, evaluate_tags
from .summary import aggregate_results
from .policy_service import LoadedPolicy, PolicyNotFoundError, PolicyService
from .policy_generator import dump_policy, generate_default_policy, write_policy
from .compliance_service import ComplianceService

__all__ = [
    "PolicyValidationError",
    "PolicyValidator",
    "CompiledPatterns",
    "InvalidPatternError",
    "compile_patterns",
    "TagRuleEvaluator",
    "evaluate_tags",
    "aggregate_results",
    "LoadedPolicy",
    "PolicyNotFoundError",
    "PolicyService",
    "dump_policy",
    "generate_default_policy",
    "write_policy",
    "ComplianceService",
]
