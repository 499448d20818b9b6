"""Static constraint profiles for every section type."""

from dataclasses import dataclass
from typing import Dict, Optional

from vellum.models import SectionType


@dataclass(frozen=True)
class SectionProfile:
    """Position, size and confidence bounds for one section type.

    Fractions are relative to the unit the section is measured in: lines for
    boundary and line-pattern sections, characters for inline patterns.
    """

    max_removal_fraction: float
    min_confidence: float
    min_lines: int = 0
    max_end_fraction: Optional[float] = None
    min_start_fraction: Optional[float] = None
    # Tighter removal bound for sections that start in the first half.
    early_removal_fraction: Optional[float] = None
    unit: str = "lines"

    def removal_limit(self, start_fraction: float) -> float:
        if self.early_removal_fraction is not None and start_fraction < 0.5:
            return self.early_removal_fraction
        return self.max_removal_fraction


SECTION_PROFILES: Dict[SectionType, SectionProfile] = {
    SectionType.FRONT_MATTER: SectionProfile(
        max_end_fraction=0.40,
        max_removal_fraction=0.40,
        min_lines=3,
        min_confidence=0.60,
    ),
    SectionType.TABLE_OF_CONTENTS: SectionProfile(
        max_end_fraction=0.35,
        max_removal_fraction=0.20,
        min_lines=5,
        min_confidence=0.60,
    ),
    SectionType.INDEX: SectionProfile(
        min_start_fraction=0.60,
        max_removal_fraction=0.25,
        min_lines=10,
        min_confidence=0.65,
    ),
    SectionType.BACK_MATTER: SectionProfile(
        min_start_fraction=0.50,
        max_removal_fraction=0.45,
        min_lines=5,
        min_confidence=0.70,
    ),
    SectionType.AUXILIARY_LIST: SectionProfile(
        max_end_fraction=0.40,
        max_removal_fraction=0.15,
        min_lines=3,
        min_confidence=0.65,
    ),
    SectionType.FOOTNOTES: SectionProfile(
        max_removal_fraction=0.12,
        early_removal_fraction=0.05,
        min_lines=4,
        min_confidence=0.70,
    ),
    SectionType.CITATIONS: SectionProfile(
        max_removal_fraction=0.10,
        min_confidence=0.50,
        unit="chars",
    ),
    SectionType.PAGE_NUMBERS: SectionProfile(
        max_removal_fraction=0.15,
        min_confidence=0.50,
    ),
    SectionType.HEADERS_FOOTERS: SectionProfile(
        max_removal_fraction=0.15,
        min_confidence=0.50,
    ),
    SectionType.FOOTNOTE_MARKERS: SectionProfile(
        max_removal_fraction=0.05,
        min_confidence=0.50,
        unit="chars",
    ),
}

assert set(SECTION_PROFILES) == set(SectionType), "every section type needs a profile"


def profile_for(section_type: SectionType) -> SectionProfile:
    return SECTION_PROFILES[section_type]
