"""
API Schemas

Pydantic request/response models for the diagnosis and wizard endpoints.
"""
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from msdiag.core.criteria import AnatomicalLocation, ClinicalScenario, Findings, UserRole


class FindingsInput(BaseModel):
    """A complete findings record submitted in one request."""
    # Kept as a plain string: unrecognised values fall through to NO_MS
    scenario: Optional[str] = None
    age_over_50: bool = False
    vascular_risk: bool = False
    locations: List[AnatomicalLocation] = Field(default_factory=list, max_length=5)
    has_dit: bool = False
    has_csf: bool = False
    has_cvs: bool = False
    has_prl: bool = False
    progression_duration: bool = False

    model_config = {
        "json_schema_extra": {"example": {
            "scenario": "CIS",
            "locations": ["periventricular", "spinal_cord"],
            "has_dit": False, "has_csf": True, "has_cvs": False, "has_prl": False,
            "progression_duration": False, "age_over_50": False,
        }}
    }

    def to_findings(self) -> Findings:
        scenario: Optional[Union[ClinicalScenario, str]]
        try:
            scenario = ClinicalScenario(self.scenario)
        except ValueError:
            scenario = self.scenario
        return Findings(
            scenario=scenario,
            age_over_50=self.age_over_50,
            vascular_risk=self.vascular_risk,
            locations=set(self.locations),
            has_dit=self.has_dit,
            has_csf=self.has_csf,
            has_cvs=self.has_cvs,
            has_prl=self.has_prl,
            progression_duration=self.progression_duration,
        )


class ReportRequest(BaseModel):
    """Findings plus the view to render."""
    findings: FindingsInput
    role: UserRole = UserRole.NEUROLOGIST


class EvidenceSummaryResponse(BaseModel):
    dis: str
    dit: str


class VerdictResponse(BaseModel):
    status: str
    title: str
    description: str
    recommendations: List[str]
    evidence_summary: EvidenceSummaryResponse
    conclusion: str


class MatrixCellResponse(BaseModel):
    key: str
    title: str
    subtitle: str
    status: str
    verdict_title: str
    recommendations: List[str]
    conclusion: str


class MatrixResponse(BaseModel):
    has_dis: bool
    has_supportive_evidence: bool
    evidence_summary: EvidenceSummaryResponse
    scenarios: List[MatrixCellResponse]


class SessionCreateRequest(BaseModel):
    role: UserRole


class SessionAction(BaseModel):
    """
    One wizard action.

    `value` carries the scenario, location, biomarker name or boolean,
    depending on `action`.
    """
    action: Literal[
        "select_scenario",
        "toggle_location",
        "toggle_flag",
        "set_progression_duration",
        "set_age_over_50",
        "set_vascular_risk",
    ]
    value: Union[bool, str]


class StepResponse(BaseModel):
    number: int
    total: int
    step: str
    title: str
    can_proceed: bool
    is_final: bool


class SessionResponse(BaseModel):
    session_id: str
    role: str
    step: StepResponse
    findings: Dict[str, Any]
    location_count: int


class SessionResultResponse(BaseModel):
    session_id: str
    role: str
    verdict: Optional[VerdictResponse] = None
    matrix: Optional[MatrixResponse] = None


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float
    active_sessions: int
    timestamp: str
