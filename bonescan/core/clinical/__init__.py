"""
Clinical Rule Layer

Deterministic correction of the model's diagnosis and specialist choice.

Usage:
    from bonescan.core.clinical import SpecialistRoutingEngine, PolicyMode

    engine = SpecialistRoutingEngine(PolicyMode.FRACTURE_ONLY)
    record = engine.apply(record)
"""
from .engine import SpecialistRoutingEngine, match_rule
from .base import (
    PolicyMode,
    RoutingRule,
    ScopePolicy,
    RuleOutcome,
    build_haystack,
    NO_SPECIALIST_NEEDED,
    GENERAL_PHYSICIAN_FALLBACK,
)
from .rules_fracture import FRACTURE_ROUTING_RULES, FRACTURE_SCOPE_POLICY
from .rules_general import GENERAL_ROUTING_RULES

__all__ = [
    "SpecialistRoutingEngine",
    "match_rule",
    "PolicyMode",
    "RoutingRule",
    "ScopePolicy",
    "RuleOutcome",
    "build_haystack",
    "NO_SPECIALIST_NEEDED",
    "GENERAL_PHYSICIAN_FALLBACK",
    "FRACTURE_ROUTING_RULES",
    "FRACTURE_SCOPE_POLICY",
    "GENERAL_ROUTING_RULES",
]
