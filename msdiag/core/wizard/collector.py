"""
Findings Collector

Role-dependent multi-step wizard that builds a Findings record one action at
a time.  All UI bookkeeping (role, current step) lives here; the classifier
only ever sees the finished Findings.

Flows:
  NEUROLOGIST  Clinical context → MRI locations → Biomarkers → Result
  RADIOLOGIST  MRI locations → Biomarkers → Conclusion matrix
"""
from __future__ import annotations

import threading
import time
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from msdiag.core.criteria import (
    AnatomicalLocation,
    ClinicalScenario,
    DiagnosisEngine,
    Findings,
    ScenarioMatrix,
    UserRole,
    Verdict,
)
from msdiag.utils import get_logger, SessionLimitError, SessionNotFoundError, WizardStepError

logger = get_logger(__name__)


class WizardStep(str, Enum):
    CLINICAL   = "clinical"
    LOCATIONS  = "locations"
    BIOMARKERS = "biomarkers"
    RESULT     = "result"


STEP_TITLES = {
    WizardStep.CLINICAL:   "Clinical context",
    WizardStep.LOCATIONS:  "MRI locations (DIS)",
    WizardStep.BIOMARKERS: "Biomarkers (DIT)",
}

RESULT_TITLES = {
    UserRole.NEUROLOGIST: "Result",
    UserRole.RADIOLOGIST: "Conclusion matrix",
}

ROLE_FLOWS = {
    UserRole.NEUROLOGIST: [WizardStep.CLINICAL, WizardStep.LOCATIONS, WizardStep.BIOMARKERS, WizardStep.RESULT],
    UserRole.RADIOLOGIST: [WizardStep.LOCATIONS, WizardStep.BIOMARKERS, WizardStep.RESULT],
}

# Scenarios a neurologist can pick on the clinical step
SELECTABLE_SCENARIOS = (ClinicalScenario.CIS, ClinicalScenario.PROGRESSIVE, ClinicalScenario.RIS)

BIOMARKER_FLAGS = {
    "dit": "has_dit",
    "csf": "has_csf",
    "cvs": "has_cvs",
    "prl": "has_prl",
}


@dataclass(frozen=True)
class StepInfo:
    """Snapshot of where the wizard is."""
    number: int             # 1-based
    total: int
    step: WizardStep
    title: str
    can_proceed: bool
    is_final: bool          # last input step; "next" computes the result

    def to_dict(self) -> Dict[str, Any]:
        return {
            "number": self.number,
            "total": self.total,
            "step": self.step.value,
            "title": self.title,
            "can_proceed": self.can_proceed,
            "is_final": self.is_final,
        }


class FindingsCollector:
    """
    Wizard state for one patient work-up.

    The collector owns a mutable Findings; `findings` hands out a copy so
    callers cannot change it behind the wizard's back.
    """

    def __init__(self, role: UserRole, engine: Optional[DiagnosisEngine] = None):
        self.role = UserRole(role)
        self._engine = engine or DiagnosisEngine()
        self._findings = Findings()
        self._index = 0

    # ── Navigation ────────────────────────────────────────────────────────

    @property
    def flow(self) -> List[WizardStep]:
        return ROLE_FLOWS[self.role]

    @property
    def step(self) -> WizardStep:
        return self.flow[self._index]

    @property
    def findings(self) -> Findings:
        return self._findings.copy()

    def current_step(self) -> StepInfo:
        step = self.step
        title = RESULT_TITLES[self.role] if step == WizardStep.RESULT else STEP_TITLES[step]
        return StepInfo(
            number=self._index + 1,
            total=len(self.flow),
            step=step,
            title=title,
            can_proceed=self._can_proceed(),
            is_final=self._index == len(self.flow) - 2,
        )

    def _can_proceed(self) -> bool:
        step = self.step
        if step == WizardStep.RESULT:
            return False
        if step == WizardStep.CLINICAL:
            return self._findings.scenario is not None
        return True

    def next_step(self) -> StepInfo:
        if not self._can_proceed():
            raise WizardStepError(
                f"Cannot leave step '{self.step.value}' yet",
                step=self._index + 1,
            )
        self._index += 1
        logger.debug(f"FindingsCollector [{self.role.value}]: → {self.step.value}")
        return self.current_step()

    def previous_step(self) -> StepInfo:
        if self._index == 0:
            raise WizardStepError("Already at the first step", step=1)
        self._index -= 1
        return self.current_step()

    def reset(self) -> StepInfo:
        """Start a new patient.  The role is kept."""
        self._findings = Findings()
        self._index = 0
        return self.current_step()

    def switch_role(self, role: UserRole) -> StepInfo:
        self.role = UserRole(role)
        return self.reset()

    # ── Actions ───────────────────────────────────────────────────────────

    def _require(self, step: WizardStep, action: str) -> None:
        if self.step != step:
            raise WizardStepError(
                f"'{action}' is only available on the {step.value} step",
                step=self._index + 1,
                details={"action": action, "current": self.step.value},
            )

    def select_scenario(self, scenario: ClinicalScenario) -> None:
        self._require(WizardStep.CLINICAL, "select_scenario")
        scenario = ClinicalScenario(scenario)
        if scenario not in SELECTABLE_SCENARIOS:
            raise WizardStepError(
                f"Scenario {scenario.value} cannot be selected",
                step=self._index + 1,
                details={"scenario": scenario.value},
            )
        self._findings.scenario = scenario

    def set_progression_duration(self, value: bool) -> None:
        self._require(WizardStep.CLINICAL, "set_progression_duration")
        if self._findings.scenario != ClinicalScenario.PROGRESSIVE:
            raise WizardStepError(
                "Progression duration applies to the progressive scenario only",
                step=self._index + 1,
            )
        self._findings.progression_duration = bool(value)

    def set_age_over_50(self, value: bool) -> None:
        self._require(WizardStep.CLINICAL, "set_age_over_50")
        self._findings.age_over_50 = bool(value)

    def set_vascular_risk(self, value: bool) -> None:
        self._require(WizardStep.CLINICAL, "set_vascular_risk")
        self._findings.vascular_risk = bool(value)

    def toggle_location(self, location: AnatomicalLocation) -> None:
        self._require(WizardStep.LOCATIONS, "toggle_location")
        self._findings.toggle_location(AnatomicalLocation(location))

    def toggle_flag(self, flag: str) -> None:
        """Toggle one biomarker: dit, csf, cvs or prl."""
        self._require(WizardStep.BIOMARKERS, "toggle_flag")
        attr = BIOMARKER_FLAGS.get(flag.lower())
        if attr is None:
            raise WizardStepError(
                f"Unknown biomarker '{flag}'",
                step=self._index + 1,
                details={"allowed": sorted(BIOMARKER_FLAGS)},
            )
        setattr(self._findings, attr, not getattr(self._findings, attr))

    # ── Result ────────────────────────────────────────────────────────────

    def result(self) -> Union[Verdict, ScenarioMatrix]:
        """
        Neurologists get a single verdict; radiologists get the
        three-scenario matrix.  Only available on the result step.
        """
        self._require(WizardStep.RESULT, "result")
        if self.role == UserRole.RADIOLOGIST:
            return self._engine.evaluate_matrix(self._findings)
        return self._engine.evaluate(self._findings)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "role": self.role.value,
            "step": self.current_step().to_dict(),
            "findings": self._findings.to_dict(),
            "location_count": len(self._findings.locations),
        }


class SessionStore:
    """
    In-process map of session id → collector.

    Nothing is persisted; sessions vanish on discard, on shutdown, or once
    they sit idle for longer than `ttl_seconds`.  Idle sessions are swept
    before each create, so abandoned wizards never hold the cap.
    """

    def __init__(
        self,
        max_sessions: int = 1000,
        engine: Optional[DiagnosisEngine] = None,
        ttl_seconds: float = 3600.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_sessions = max_sessions
        self.ttl_seconds = ttl_seconds
        self._engine = engine or DiagnosisEngine()
        self._clock = clock
        self._sessions: Dict[str, FindingsCollector] = {}
        self._last_seen: Dict[str, float] = {}
        self._lock = threading.Lock()

    def _is_expired(self, session_id: str, now: float) -> bool:
        return now - self._last_seen.get(session_id, now) > self.ttl_seconds

    def _evict_expired(self, now: float) -> int:
        """Drop idle sessions.  Caller holds the lock."""
        expired = [sid for sid in self._sessions if self._is_expired(sid, now)]
        for sid in expired:
            self._sessions.pop(sid, None)
            self._last_seen.pop(sid, None)
        if expired:
            logger.info(f"SessionStore: expired {len(expired)} idle session(s)")
        return len(expired)

    def create(self, role: UserRole) -> tuple:
        with self._lock:
            now = self._clock()
            self._evict_expired(now)
            if len(self._sessions) >= self.max_sessions:
                raise SessionLimitError(self.max_sessions)
            session_id = str(uuid.uuid4())
            collector = FindingsCollector(role, engine=self._engine)
            self._sessions[session_id] = collector
            self._last_seen[session_id] = now
        logger.info(f"SessionStore: created {session_id} ({collector.role.value})")
        return session_id, collector

    def get(self, session_id: str) -> FindingsCollector:
        """Look up a session and mark it as active."""
        with self._lock:
            now = self._clock()
            collector = self._sessions.get(session_id)
            if collector is not None and self._is_expired(session_id, now):
                self._sessions.pop(session_id, None)
                self._last_seen.pop(session_id, None)
                logger.info(f"SessionStore: {session_id} expired")
                collector = None
            if collector is None:
                raise SessionNotFoundError(session_id)
            self._last_seen[session_id] = now
        return collector

    def discard(self, session_id: str) -> None:
        with self._lock:
            self._last_seen.pop(session_id, None)
            if self._sessions.pop(session_id, None) is None:
                raise SessionNotFoundError(session_id)
        logger.info(f"SessionStore: discarded {session_id}")

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()
            self._last_seen.clear()

    def __len__(self) -> int:
        return len(self._sessions)
