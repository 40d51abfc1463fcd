"""
McDonald 2024 Criteria Layer

Classifies MRI / clinical findings into a diagnosis category with the
evidence that justified it.

Usage:
    from msdiag.core.criteria import DiagnosisEngine, Findings, ClinicalScenario

    findings = Findings(scenario=ClinicalScenario.CIS)
    verdict = DiagnosisEngine().evaluate(findings)
"""
from .base import (
    AnatomicalLocation,
    ClinicalScenario,
    DiagnosisStatus,
    EvidenceSummary,
    Findings,
    UserRole,
    Verdict,
)
from .engine import DiagnosisEngine, ScenarioMatrix
from .rules_mcdonald import classify

__all__ = [
    "AnatomicalLocation",
    "ClinicalScenario",
    "DiagnosisStatus",
    "EvidenceSummary",
    "Findings",
    "UserRole",
    "Verdict",
    "DiagnosisEngine",
    "ScenarioMatrix",
    "classify",
]
