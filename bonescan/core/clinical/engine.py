"""
Specialist Routing Engine

Enforces domain policy the vision model only approximates. Runs three stages
over a validated AnalysisRecord:

    A. Scope filter      – fracture-only deployments rewrite out-of-scope
                           diagnoses into a non-detection.
    B. Specialist rules  – the first matching RoutingRule overwrites
                           doctorType, whatever the model proposed.
    C. Non-detection     – a non-detection always carries a specialist
                           sentinel.

Usage:
    from bonescan.core.clinical import SpecialistRoutingEngine, PolicyMode

    engine = SpecialistRoutingEngine(PolicyMode.FRACTURE_ONLY)
    corrected = engine.apply(record)

The engine never mutates its input and never raises; running it again on its
own output changes nothing.
"""
from __future__ import annotations

from typing import Dict, Optional, Sequence

from bonescan.models.analysis import AnalysisRecord, Severity, Urgency
from bonescan.utils import get_logger
from .base import (
    PolicyMode,
    RoutingRule,
    RuleOutcome,
    ScopePolicy,
    build_haystack,
    NO_SPECIALIST_NEEDED,
    GENERAL_PHYSICIAN_FALLBACK,
)
from .rules_fracture import FRACTURE_ROUTING_RULES, FRACTURE_SCOPE_POLICY
from .rules_general import GENERAL_ROUTING_RULES

logger = get_logger(__name__)

# ── Registry: policy → (routing table, scope policy) ─────────────────────────
_POLICY_TABLES: Dict[PolicyMode, tuple] = {
    PolicyMode.FRACTURE_ONLY: (FRACTURE_ROUTING_RULES, FRACTURE_SCOPE_POLICY),
    PolicyMode.GENERAL:       (GENERAL_ROUTING_RULES, None),
}


def match_rule(haystack: str, rules: Sequence[RoutingRule]) -> Optional[RoutingRule]:
    """Return the first rule matching the haystack, in table order."""
    for rule in rules:
        if rule.matches(haystack):
            return rule
    return None


class SpecialistRoutingEngine:
    """
    Applies scope filtering and specialist routing for one deployment policy.

    The rule table is read-only and chosen at construction, so the same
    engine can serve concurrent requests.
    """

    def __init__(
        self,
        policy: PolicyMode = PolicyMode.FRACTURE_ONLY,
        routing_rules: Optional[Sequence[RoutingRule]] = None,
        scope_policy: Optional[ScopePolicy] = None,
    ):
        self.policy = PolicyMode(policy)
        default_rules, default_scope = _POLICY_TABLES[self.policy]
        self.routing_rules = tuple(routing_rules) if routing_rules is not None else default_rules
        self.scope_policy = scope_policy if scope_policy is not None else default_scope

    # ── Public API ───────────────────────────────────────────────────────────

    def apply(self, record: AnalysisRecord) -> AnalysisRecord:
        """Return the corrected record."""
        return self.evaluate(record).record

    def evaluate(self, record: AnalysisRecord) -> RuleOutcome:
        """Run all stages and report which of them changed the record."""
        scope_filtered = False
        matched: Optional[RoutingRule] = None

        if record.detected:
            haystack = build_haystack(record)
            if self.scope_policy is not None and self.scope_policy.is_out_of_scope(haystack, record.condition):
                record = self._filter_out_of_scope(record, self.scope_policy)
                scope_filtered = True
            else:
                record, matched = self._route_specialist(record, haystack)

        if not record.detected and not record.doctor_type.strip():
            record = record.model_copy(update={"doctor_type": NO_SPECIALIST_NEEDED})

        return RuleOutcome(record=record, scope_filtered=scope_filtered, matched_rule=matched)

    # ── Stages ───────────────────────────────────────────────────────────────

    @staticmethod
    def _filter_out_of_scope(record: AnalysisRecord, scope: ScopePolicy) -> AnalysisRecord:
        logger.info(f"Out-of-scope finding filtered: '{record.condition}'")
        return record.model_copy(update={
            "detected": False,
            "severity": Severity.NONE,
            "condition": scope.condition_text,
            "doctor_type": scope.specialist_text,
            "urgency": Urgency.ROUTINE,
            "medication": scope.medication_text,
            "additional_notes": scope.notes_text,
        })

    def _route_specialist(self, record: AnalysisRecord, haystack: str):
        rule = match_rule(haystack, self.routing_rules)

        if rule is None:
            if not record.doctor_type.strip():
                logger.debug("No routing rule matched and no specialist given; using fallback")
                return record.model_copy(update={"doctor_type": GENERAL_PHYSICIAN_FALLBACK}), None
            return record, None

        if record.doctor_type != rule.specialist:
            logger.info(
                f"Specialist corrected [{rule.rule_id}]: "
                f"'{record.doctor_type}' -> '{rule.specialist}'",
                extra={"context": {"rule": rule.rule_id, "policy": self.policy.value}},
            )
            record = record.model_copy(update={"doctor_type": rule.specialist})
        return record, rule

    # ── Introspection ────────────────────────────────────────────────────────

    @staticmethod
    def registered_policies():
        """Policies with a rule table."""
        return list(_POLICY_TABLES.keys())

    def describe(self) -> Dict:
        """Compact summary of the active rule set, suitable for JSON responses."""
        return {
            "policy": self.policy.value,
            "scope_filter": self.scope_policy is not None,
            "rules": [
                {"rule_id": r.rule_id, "specialist": r.specialist}
                for r in self.routing_rules
            ],
        }
