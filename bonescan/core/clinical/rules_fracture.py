"""
Fracture Routing Rules

Keyword table mapping fracture patterns to the specialist who should see the
patient, plus the scope policy for fracture-only deployments.

Rules are ordered by clinical priority: spinal and cranial trauma outrank the
generic "fracture" catch-all, which must stay last. First match wins, so
reordering this table changes behaviour.
"""
from __future__ import annotations

from .base import RoutingRule, ScopePolicy, RoutingTable, GENERAL_PHYSICIAN_FALLBACK

SPINE_SPECIALIST = "Orthopedic Spine Surgeon; also consult Neurosurgeon"
ORTHOPEDIC_SURGEON = "Orthopedic Surgeon"
TRAUMA_SURGEON = "Orthopedic Trauma Surgeon"

FRACTURE_ROUTING_RULES: RoutingTable = (
    RoutingRule(
        rule_id="FX-SPINE",
        condition_keywords={"spinal", "spine", "vertebr", "lumbar", "thoracic", "cervical"},
        specialist=SPINE_SPECIALIST,
    ),
    RoutingRule(
        rule_id="FX-SKULL",
        condition_keywords={"skull", "cranial"},
        specialist="Neurosurgeon",
    ),
    RoutingRule(
        rule_id="FX-FACIAL",
        condition_keywords={"jaw", "mandib", "maxill", "facial", "zygomatic", "orbital", "nasal bone"},
        specialist="Oral and Maxillofacial Surgeon",
    ),
    RoutingRule(
        rule_id="FX-RIB-LUNG",
        condition_keywords={"rib"},
        region_keywords={"lung", "pneumothorax", "pulmonary"},
        specialist="Cardiothoracic Surgeon",
    ),
    RoutingRule(
        rule_id="FX-GROWTH-PLATE",
        condition_keywords={"growth plate", "epiphyseal", "salter-harris", "physis"},
        specialist="Pediatric Orthopedic Surgeon",
    ),
    RoutingRule(
        rule_id="FX-STRESS",
        condition_keywords={"stress fracture", "fatigue fracture", "hairline"},
        specialist="Sports Medicine Specialist",
    ),
    RoutingRule(
        rule_id="FX-DISLOCATION",
        condition_keywords={"dislocation", "subluxation"},
        specialist=ORTHOPEDIC_SURGEON,
    ),
    RoutingRule(
        rule_id="FX-PELVIS",
        condition_keywords={"pelvic", "pelvis", "acetabul"},
        specialist=TRAUMA_SURGEON,
    ),
    RoutingRule(
        rule_id="FX-COMPLEX",
        condition_keywords={"compound", "open fracture", "comminuted"},
        specialist=TRAUMA_SURGEON,
    ),
    RoutingRule(
        rule_id="FX-GENERIC",
        condition_keywords={"fracture", "broken", "crack"},
        specialist=ORTHOPEDIC_SURGEON,
    ),
)

# Diseases a fracture-only deployment must not report as its diagnosis.
OUT_OF_SCOPE_TERMS = (
    "arthritis", "osteoarthr", "rheumatoid", "osteoporosis", "osteopenia",
    "tumor", "tumour", "cancer", "sarcoma", "neoplasm", "malignant", "metasta",
    "osteomyelitis", "infection", "septic", "gout", "paget", "rickets",
    "spondylosis", "degenerative", "inflammation", "synovitis", "bursitis",
    "tendinitis", "carpal tunnel", "plantar fasciitis",
)

# Any of these keeps the record in scope even if a disease term is present.
IN_SCOPE_TERMS = ("fracture", "broken", "crack", "dislocation")

FRACTURE_SCOPE_POLICY = ScopePolicy(
    denylist=frozenset(OUT_OF_SCOPE_TERMS),
    override_terms=frozenset(IN_SCOPE_TERMS),
    condition_text="No fracture detected",
    specialist_text=GENERAL_PHYSICIAN_FALLBACK,
    medication_text="No fracture-specific medication needed",
    notes_text=(
        "The scan may show a non-fracture condition. This system detects fractures only. "
        "Please consult a General Physician for comprehensive evaluation."
    ),
)
