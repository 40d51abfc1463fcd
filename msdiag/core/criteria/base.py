"""
McDonald 2024 Criteria — Base Types

Defines the data contracts shared by the classifier, the wizard collector
and the report presenter.  These are scenario-agnostic value types.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional, Set, Tuple


class AnatomicalLocation(str, Enum):
    """
    The five MRI regions that count toward dissemination in space (DIS).

    The optic nerve was added as a fifth region in the 2024 revision.
    """
    PERIVENTRICULAR = "periventricular"
    CORTICAL_JUXTA  = "cortical_juxtacortical"
    INFRATENTORIAL  = "infratentorial"
    SPINAL_CORD     = "spinal_cord"
    OPTIC_NERVE     = "optic_nerve"

    @property
    def label(self) -> str:
        return LOCATION_LABELS[self]


LOCATION_LABELS = {
    AnatomicalLocation.PERIVENTRICULAR: "Periventricular",
    AnatomicalLocation.CORTICAL_JUXTA:  "Cortical/Juxtacortical",
    AnatomicalLocation.INFRATENTORIAL:  "Infratentorial",
    AnatomicalLocation.SPINAL_CORD:     "Spinal cord",
    AnatomicalLocation.OPTIC_NERVE:     "Optic nerve (new 2024)",
}

# Canonical display order for evidence strings
LOCATION_ORDER = list(AnatomicalLocation)


class ClinicalScenario(str, Enum):
    """
    Evaluation context that selects the rule branch.

    CIS         – typical attack / relapsing onset
    PROGRESSIVE – steady progression from onset
    RIS         – radiologically isolated, asymptomatic
    UNKNOWN     – context not chosen (e.g. radiologist flow)
    """
    CIS         = "CIS"
    PROGRESSIVE = "PROGRESSIVE"
    RIS         = "RIS"
    UNKNOWN     = "UNKNOWN"


class DiagnosisStatus(str, Enum):
    """
    Diagnostic outcome.

    RADIOLOGICALLY_SUGGESTIVE is reserved for a future rule branch; the
    current rule set never produces it.
    """
    MS                        = "MS"
    NO_MS                     = "NO_MS"
    POSSIBLE                  = "POSSIBLE"
    RIS_HIGH_RISK             = "RIS_HIGH_RISK"
    RADIOLOGICALLY_SUGGESTIVE = "RADIOLOGICALLY_SUGGESTIVE"


class UserRole(str, Enum):
    """Who is driving the wizard; decides the step sequence and result view."""
    NEUROLOGIST = "NEUROLOGIST"
    RADIOLOGIST = "RADIOLOGIST"


@dataclass
class Findings:
    """
    Clinical and imaging findings for one patient.

    Built field-by-field by the collector, then handed to the classifier,
    which only reads it.
    """
    scenario: Optional[ClinicalScenario] = None

    # ── Inert inputs (collected, not consulted by the 2024 rule set) ──────
    age_over_50: bool = False
    vascular_risk: bool = False

    # ── Dissemination in space ────────────────────────────────────────────
    locations: Set[AnatomicalLocation] = field(default_factory=set)

    # ── Supportive evidence ───────────────────────────────────────────────
    has_dit: bool = False   # new T2 or simultaneously enhancing lesions
    has_csf: bool = False   # oligoclonal bands or kFLC
    has_cvs: bool = False   # central vein sign ("select 6")
    has_prl: bool = False   # paramagnetic rim lesions

    # Only meaningful for PROGRESSIVE (>1 year of progression)
    progression_duration: bool = False

    def __post_init__(self):
        # Any iterable is accepted; duplicates collapse so DIS counts regions
        self.locations = set(self.locations)

    def toggle_location(self, location: AnatomicalLocation) -> None:
        if location in self.locations:
            self.locations.discard(location)
        else:
            self.locations.add(location)

    def copy(self, **overrides: Any) -> "Findings":
        """Return a copy with `overrides` applied; the receiver is untouched."""
        overrides.setdefault("locations", set(self.locations))
        return replace(self, **overrides)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scenario": self.scenario.value if isinstance(self.scenario, ClinicalScenario) else self.scenario,
            "age_over_50": self.age_over_50,
            "vascular_risk": self.vascular_risk,
            "locations": [loc.value for loc in LOCATION_ORDER if loc in self.locations],
            "has_dit": self.has_dit,
            "has_csf": self.has_csf,
            "has_cvs": self.has_cvs,
            "has_prl": self.has_prl,
            "progression_duration": self.progression_duration,
        }


@dataclass(frozen=True)
class EvidenceSummary:
    """Human-readable evidence lines attached to every verdict."""
    dis: str    # selected locations, or a "none selected" sentinel
    dit: str    # supportive evidence that fired, in DIT/CSF/CVS/PRL order

    def to_dict(self) -> Dict[str, str]:
        return {"dis": self.dis, "dit": self.dit}


@dataclass(frozen=True)
class Verdict:
    """
    Classifier output.  A fresh instance is built on every call.

    `recommendations` is ordered: presenters may surface only the first
    one or two entries.
    """
    status: DiagnosisStatus
    title: str
    description: str
    evidence_summary: EvidenceSummary
    recommendations: Tuple[str, ...] = ()

    @property
    def is_diagnostic(self) -> bool:
        return self.status == DiagnosisStatus.MS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "title": self.title,
            "description": self.description,
            "recommendations": list(self.recommendations),
            "evidence_summary": self.evidence_summary.to_dict(),
        }
