"""
General Diagnosis Routing Rules

Used when the deployment reports any condition the model finds, not just
fractures. Trauma rules keep their priority; disease rules follow, and the
generic fracture catch-all stays at the very end.
"""
from __future__ import annotations

from .base import RoutingRule, RoutingTable
from .rules_fracture import FRACTURE_ROUTING_RULES

_TRAUMA_RULES = FRACTURE_ROUTING_RULES[:-1]
_FRACTURE_CATCH_ALL = FRACTURE_ROUTING_RULES[-1]

DISEASE_ROUTING_RULES: RoutingTable = (
    RoutingRule(
        rule_id="DX-ONCOLOGY",
        condition_keywords={"tumor", "tumour", "cancer", "sarcoma", "neoplasm", "malignan", "metasta"},
        specialist="Oncologist",
    ),
    RoutingRule(
        rule_id="DX-PULMONARY",
        condition_keywords={"pneumonia", "tuberculosis", "pleural effusion", "lung", "pulmonary"},
        specialist="Pulmonologist",
    ),
    RoutingRule(
        rule_id="DX-CARDIAC",
        condition_keywords={"cardiomegaly", "heart", "cardiac"},
        specialist="Cardiologist",
    ),
    RoutingRule(
        rule_id="DX-RHEUMATOLOGY",
        condition_keywords={"arthritis", "osteoarthr", "rheumatoid", "gout", "synovitis"},
        specialist="Rheumatologist",
    ),
    RoutingRule(
        rule_id="DX-BONE-DENSITY",
        condition_keywords={"osteoporosis", "osteopenia", "rickets", "paget"},
        specialist="Endocrinologist",
    ),
    RoutingRule(
        rule_id="DX-INFECTION",
        condition_keywords={"osteomyelitis", "infection", "septic"},
        specialist="Infectious Disease Specialist",
    ),
    RoutingRule(
        rule_id="DX-UROLOGY",
        condition_keywords={"kidney stone", "renal stone", "nephrolith", "ureter"},
        specialist="Urologist",
    ),
)

GENERAL_ROUTING_RULES: RoutingTable = _TRAUMA_RULES + DISEASE_ROUTING_RULES + (_FRACTURE_CATCH_ALL,)
