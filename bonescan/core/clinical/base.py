"""
Clinical Rule Layer - Base Types

Data contracts shared by the rule tables and the routing engine. Rules are
plain data so that priority and coverage can be tested without running the
rest of the pipeline.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Iterable, Optional, Tuple

from bonescan.models.analysis import AnalysisRecord


NO_SPECIALIST_NEEDED = "No specialist needed — General Physician for routine follow-up"
GENERAL_PHYSICIAN_FALLBACK = "General Physician for further evaluation"


class PolicyMode(str, Enum):
    """
    Deployment policy.

    FRACTURE_ONLY – out-of-scope (non-fracture) diagnoses are filtered out
    GENERAL       – every diagnosis the model reports is kept
    """
    FRACTURE_ONLY = "fracture_only"
    GENERAL       = "general"


def _keyword_set(words: Iterable[str]) -> FrozenSet[str]:
    return frozenset(w.lower() for w in words)


@dataclass(frozen=True)
class RoutingRule:
    """
    One keyword-to-specialist mapping.

    Matches when at least one condition keyword is a substring of the
    haystack and, if region keywords are given, at least one of those too.
    """
    rule_id: str                                  # e.g. "FX-SPINE"
    condition_keywords: FrozenSet[str]
    specialist: str
    region_keywords: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        object.__setattr__(self, "condition_keywords", _keyword_set(self.condition_keywords))
        object.__setattr__(self, "region_keywords", _keyword_set(self.region_keywords))

    def matches(self, haystack: str) -> bool:
        if not any(k in haystack for k in self.condition_keywords):
            return False
        if self.region_keywords and not any(k in haystack for k in self.region_keywords):
            return False
        return True


@dataclass(frozen=True)
class ScopePolicy:
    """What counts as out of scope, and what an out-of-scope record becomes."""
    denylist: FrozenSet[str]
    override_terms: FrozenSet[str]
    condition_text: str
    specialist_text: str
    medication_text: str
    notes_text: str

    def __post_init__(self):
        object.__setattr__(self, "denylist", _keyword_set(self.denylist))
        object.__setattr__(self, "override_terms", _keyword_set(self.override_terms))

    def is_out_of_scope(self, haystack: str, condition: str) -> bool:
        """Disease terms count anywhere in the haystack; override terms only in the condition label."""
        if not any(term in haystack for term in self.denylist):
            return False
        condition = condition.lower()
        return not any(term in condition for term in self.override_terms)


@dataclass(frozen=True)
class RuleOutcome:
    """Result of running the rule engine on one record."""
    record: AnalysisRecord
    scope_filtered: bool = False
    matched_rule: Optional[RoutingRule] = None

    @property
    def specialist_corrected(self) -> bool:
        return self.matched_rule is not None


def build_haystack(record: AnalysisRecord) -> str:
    """Lowercase condition + region + findings, the text every keyword rule searches."""
    return " ".join((record.condition, record.affected_region, record.findings)).lower()


RoutingTable = Tuple[RoutingRule, ...]
