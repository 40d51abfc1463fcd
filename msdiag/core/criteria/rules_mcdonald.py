"""
McDonald 2024 Diagnostic Rules

Maps a Findings record to exactly one Verdict.

Rule source:
  - Montalban et al. (2024): Diagnosis of multiple sclerosis: 2024 revisions
    of the McDonald criteria. The Lancet Neurology.

Design principles:
  - `classify` is pure and total: it reads its input, builds a new Verdict,
    and never raises.  Unknown or missing scenarios fall through to NO_MS.
  - One rule function per scenario, registered in _SCENARIO_RULES.
  - Rule text lives in module-level constants so wording can be reviewed
    without hunting through logic.
"""
from __future__ import annotations

from typing import Callable, Dict, List, Optional

from .base import (
    ClinicalScenario,
    DiagnosisStatus,
    EvidenceSummary,
    Findings,
    LOCATION_LABELS,
    LOCATION_ORDER,
    Verdict,
)

# ── Thresholds ────────────────────────────────────────────────────────────────
# DIS: at least 2 of the 5 regions
MIN_DIS_LOCATIONS = 2

# Single-region biomarker exception (CIS only)
BIOMARKER_EXCEPTION_LOCATIONS = 1

# ── Evidence labels ───────────────────────────────────────────────────────────
NO_LOCATIONS_LABEL = "No regions selected"
NO_EVIDENCE_LABEL  = "None"

DIT_LABEL = "MRI (DIT)"
CSF_LABEL = "CSF (OCB/kFLC)"
CVS_LABEL = "Central Vein Sign (CVS)"
PRL_LABEL = "Paramagnetic Rim (PRL)"

# ── Recommendation text ───────────────────────────────────────────────────────
REC_RIS_MS            = ("DIS + (DIT/CSF/CVS) present.", "Symptoms not required.")
REC_RIS_DIS_PRESENT   = "DIS present."
REC_RIS_NO_DIS        = "No DIS."
REC_RIS_MONITOR       = "Monitor clinical/MRI."
REC_PROGRESSIVE_WAIT  = ("Requires 1 year of progression.",)
REC_PROGRESSIVE_MS    = ("1yr progression + DIS + supportive evidence.",)
REC_CIS_MS            = ("DIS + (DIT/CSF/CVS/PRL).",)
REC_CIS_BIOMARKER     = ("New 2024 rule.",)
REC_CIS_POSSIBLE      = ("DIS or DIT missing.",)


# ── Helpers ───────────────────────────────────────────────────────────────────

def has_dissemination_in_space(findings: Findings) -> bool:
    return len(findings.locations) >= MIN_DIS_LOCATIONS


def has_supportive_evidence(findings: Findings) -> bool:
    """Any of DIT, CSF, CVS or PRL."""
    return findings.has_dit or findings.has_csf or findings.has_cvs or findings.has_prl


def build_evidence_summary(findings: Findings) -> EvidenceSummary:
    """
    Build the DIS / DIT evidence lines.

    Locations are listed in canonical region order so the output does not
    depend on set iteration order.
    """
    locations = [LOCATION_LABELS[loc] for loc in LOCATION_ORDER if loc in findings.locations]
    dis = ", ".join(locations) if locations else NO_LOCATIONS_LABEL

    factors: List[str] = []
    if findings.has_dit:
        factors.append(DIT_LABEL)
    if findings.has_csf:
        factors.append(CSF_LABEL)
    if findings.has_cvs:
        factors.append(CVS_LABEL)
    if findings.has_prl:
        factors.append(PRL_LABEL)
    dit = ", ".join(factors) if factors else NO_EVIDENCE_LABEL

    return EvidenceSummary(dis=dis, dit=dit)


# ── Rule 1: Radiologically isolated syndrome ──────────────────────────────────

def rule_ris(findings: Findings, evidence: EvidenceSummary) -> Verdict:
    """
    RIS converts to MS with DIS plus DIT, CSF or CVS.

    PRL does not count here, unlike the generic supportive-evidence rule.
    """
    has_dis = has_dissemination_in_space(findings)
    ris_evidence = findings.has_dit or findings.has_csf or findings.has_cvs

    if has_dis and ris_evidence:
        return Verdict(
            status=DiagnosisStatus.MS,
            title="MS (via RIS)",
            description="Meets the 2024 criteria for MS from RIS.",
            evidence_summary=evidence,
            recommendations=REC_RIS_MS,
        )
    return Verdict(
        status=DiagnosisStatus.RIS_HIGH_RISK,
        title="RIS",
        description="Meets RIS criteria, not yet MS.",
        evidence_summary=evidence,
        recommendations=(
            REC_RIS_DIS_PRESENT if has_dis else REC_RIS_NO_DIS,
            REC_RIS_MONITOR,
        ),
    )


# ── Rule 2: Primary progressive course ────────────────────────────────────────

def rule_progressive(findings: Findings, evidence: EvidenceSummary) -> Verdict:
    """
    Progressive MS needs one year of progression before DIS is considered.
    """
    if not findings.progression_duration:
        return Verdict(
            status=DiagnosisStatus.POSSIBLE,
            title="Possibly progressive",
            description="Requires 1 year of progression.",
            evidence_summary=evidence,
            recommendations=REC_PROGRESSIVE_WAIT,
        )
    if has_dissemination_in_space(findings) and has_supportive_evidence(findings):
        return Verdict(
            status=DiagnosisStatus.MS,
            title="Progressive MS",
            description="Meets criteria.",
            evidence_summary=evidence,
            recommendations=REC_PROGRESSIVE_MS,
        )
    return _no_diagnosis(evidence)


# ── Rule 3: Typical attack / relapsing onset ──────────────────────────────────

def rule_cis(findings: Findings, evidence: EvidenceSummary) -> Verdict:
    """
    Relapsing MS: DIS plus any supportive evidence.

    2024 exception: a single region is enough when a specific biomarker
    (CVS or PRL) coexists with DIT or CSF.
    """
    if has_dissemination_in_space(findings) and has_supportive_evidence(findings):
        return Verdict(
            status=DiagnosisStatus.MS,
            title="Relapsing MS",
            description="Meets McDonald 2024.",
            evidence_summary=evidence,
            recommendations=REC_CIS_MS,
        )

    specific_biomarker = findings.has_cvs or findings.has_prl
    dit_or_csf = findings.has_dit or findings.has_csf
    if len(findings.locations) == BIOMARKER_EXCEPTION_LOCATIONS and specific_biomarker and dit_or_csf:
        return Verdict(
            status=DiagnosisStatus.MS,
            title="MS (biomarker)",
            description="1 region, but biomarker + DIT/CSF.",
            evidence_summary=evidence,
            recommendations=REC_CIS_BIOMARKER,
        )

    return Verdict(
        status=DiagnosisStatus.POSSIBLE,
        title="Possibly MS / CIS",
        description="Does not yet fully meet criteria.",
        evidence_summary=evidence,
        recommendations=REC_CIS_POSSIBLE,
    )


def _no_diagnosis(evidence: EvidenceSummary) -> Verdict:
    return Verdict(
        status=DiagnosisStatus.NO_MS,
        title="No diagnosis",
        description="Insufficient criteria.",
        evidence_summary=evidence,
        recommendations=(),
    )


# ── Registry: scenario → rule ─────────────────────────────────────────────────
# UNKNOWN is deliberately absent and resolves to the NO_MS fallback.
_SCENARIO_RULES: Dict[ClinicalScenario, Callable[[Findings, EvidenceSummary], Verdict]] = {
    ClinicalScenario.RIS:         rule_ris,
    ClinicalScenario.PROGRESSIVE: rule_progressive,
    ClinicalScenario.CIS:         rule_cis,
}


def classify(
    findings: Findings,
    scenario: Optional[ClinicalScenario] = None,
    progression_duration: Optional[bool] = None,
) -> Verdict:
    """
    Classify findings against the McDonald 2024 rule set.

    Args:
        findings: The findings record.  Never mutated.
        scenario: Optional override for `findings.scenario`.
        progression_duration: Optional override for
                              `findings.progression_duration`.

    Returns:
        A new Verdict.  Missing, UNKNOWN or unrecognised scenarios yield
        NO_MS with no recommendations.
    """
    if scenario is not None or progression_duration is not None:
        overrides = {}
        if scenario is not None:
            overrides["scenario"] = scenario
        if progression_duration is not None:
            overrides["progression_duration"] = progression_duration
        findings = findings.copy(**overrides)

    evidence = build_evidence_summary(findings)

    rule = None
    if isinstance(findings.scenario, str):
        rule = _SCENARIO_RULES.get(findings.scenario)
    if rule is None:
        return _no_diagnosis(evidence)
    return rule(findings, evidence)
