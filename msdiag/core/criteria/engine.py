"""
Diagnosis Engine

Central entry point used by the API and the wizard.  Wraps the pure
classifier with logging, the three-scenario radiologist matrix and JSON
summaries.

Usage:
    from msdiag.core.criteria import DiagnosisEngine, Findings

    engine = DiagnosisEngine()
    verdict = engine.evaluate(findings)
    matrix = engine.evaluate_matrix(findings)   # CIS / RIS / PROGRESSIVE
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List

from .base import (
    AnatomicalLocation,
    ClinicalScenario,
    DiagnosisStatus,
    Findings,
    Verdict,
)
from .rules_mcdonald import classify, has_dissemination_in_space, has_supportive_evidence

logger = logging.getLogger(__name__)

# Number of recommendations shown on a matrix card
MATRIX_RECOMMENDATION_LIMIT = 2

CONCLUSION_MEETS = "Meets criteria"
CONCLUSION_NOT_DIAGNOSTIC = "Not diagnostic"

# Representable but not yet produced by any rule
RESERVED_STATUSES = frozenset({DiagnosisStatus.RADIOLOGICALLY_SUGGESTIVE})

# Matrix columns: (key, title, subtitle)
_MATRIX_COLUMNS = [
    ("cis",         "Symptomatic",  "Typical attack (CIS)"),
    ("ris",         "Asymptomatic", "Incidental finding (RIS)"),
    ("progressive", "Progressive",  "After >1yr of decline"),
]


@dataclass(frozen=True)
class ScenarioMatrix:
    """
    The same findings evaluated under the three clinical contexts.

    Used by the radiologist flow, where the clinical context is usually
    unknown at reporting time.
    """
    cis: Verdict
    ris: Verdict
    progressive: Verdict
    has_dis: bool
    has_supportive_evidence: bool

    def cells(self) -> List[tuple]:
        return [(key, title, sub, getattr(self, key)) for key, title, sub in _MATRIX_COLUMNS]


def conclusion_for(verdict: Verdict) -> str:
    return CONCLUSION_MEETS if verdict.is_diagnostic else CONCLUSION_NOT_DIAGNOSTIC


class DiagnosisEngine:
    """
    Evaluates Findings against the McDonald 2024 rules.

    Stateless — safe to call from multiple threads / concurrent requests.
    """

    def evaluate(self, findings: Findings) -> Verdict:
        """Classify findings under their own stored scenario."""
        verdict = classify(findings)
        scenario = findings.scenario.value if isinstance(findings.scenario, ClinicalScenario) else findings.scenario
        if verdict.status == DiagnosisStatus.MS:
            logger.info(f"DiagnosisEngine [{scenario}]: {verdict.status.value} ({verdict.title})")
        else:
            logger.debug(f"DiagnosisEngine [{scenario}]: {verdict.status.value} ({verdict.title})")
        return verdict

    def evaluate_matrix(self, findings: Findings) -> ScenarioMatrix:
        """
        Evaluate the findings as CIS, as RIS and as PROGRESSIVE.

        The progressive column assumes the one-year duration is met,
        whatever the stored value.  `findings` is not modified.
        """
        matrix = ScenarioMatrix(
            cis=classify(findings, scenario=ClinicalScenario.CIS),
            ris=classify(findings, scenario=ClinicalScenario.RIS),
            progressive=classify(
                findings,
                scenario=ClinicalScenario.PROGRESSIVE,
                progression_duration=True,
            ),
            has_dis=has_dissemination_in_space(findings),
            has_supportive_evidence=has_supportive_evidence(findings),
        )
        logger.debug(
            "DiagnosisEngine matrix: "
            + ", ".join(f"{key}={v.status.value}" for key, _, _, v in matrix.cells())
        )
        return matrix

    @staticmethod
    def summarise(verdict: Verdict) -> Dict[str, Any]:
        """Build a JSON-ready dict for a single verdict."""
        summary = verdict.to_dict()
        summary["conclusion"] = conclusion_for(verdict)
        return summary

    @staticmethod
    def summarise_matrix(matrix: ScenarioMatrix) -> Dict[str, Any]:
        """
        Build a compact matrix summary suitable for JSON API responses.

        Example output:
        {
            "has_dis": true,
            "has_supportive_evidence": false,
            "evidence_summary": {"dis": "...", "dit": "None"},
            "scenarios": [{"key": "cis", "title": "Symptomatic", ...}, ...]
        }
        """
        scenarios = []
        for key, title, sub, verdict in matrix.cells():
            scenarios.append({
                "key": key,
                "title": title,
                "subtitle": sub,
                "status": verdict.status.value,
                "verdict_title": verdict.title,
                "recommendations": list(verdict.recommendations[:MATRIX_RECOMMENDATION_LIMIT]),
                "conclusion": conclusion_for(verdict),
            })
        return {
            "has_dis": matrix.has_dis,
            "has_supportive_evidence": matrix.has_supportive_evidence,
            "evidence_summary": matrix.cis.evidence_summary.to_dict(),
            "scenarios": scenarios,
        }

    @staticmethod
    def statuses() -> List[Dict[str, Any]]:
        """Outcome taxonomy; `reserved` marks statuses no rule produces yet."""
        return [
            {"id": s.value, "reserved": s in RESERVED_STATUSES}
            for s in DiagnosisStatus
        ]

    @staticmethod
    def reference() -> Dict[str, Any]:
        """Reference tables for clients building a findings form."""
        return {
            "locations": [{"id": loc.value, "label": loc.label} for loc in AnatomicalLocation],
            "scenarios": [s.value for s in ClinicalScenario],
            "statuses": DiagnosisEngine.statuses(),
        }
