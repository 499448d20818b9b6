"""Multi-layer defense against destructive oracle answers."""

from vellum.defense.chain import DefenseChain, DefenseDecision
from vellum.defense.constraints import SECTION_PROFILES, SectionProfile, profile_for
from vellum.defense.heuristic import default_patterns, detect
from vellum.defense.validator import validate, validate_patterns
from vellum.defense.verifier import verify, verify_patterns

__all__ = [
    "DefenseChain",
    "DefenseDecision",
    "SECTION_PROFILES",
    "SectionProfile",
    "profile_for",
    "default_patterns",
    "detect",
    "validate",
    "validate_patterns",
    "verify",
    "verify_patterns",
]
