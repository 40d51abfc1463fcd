"""
MS Diagnosis 2024 - FastAPI Application

Main application entry point with API endpoints for:
- One-shot classification of a findings record
- Radiologist three-scenario conclusion matrix
- PDF reports (streamed, never stored)
- Step-by-step findings wizard sessions (in memory only)
"""
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Union
import io
import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse

from msdiag import config
from msdiag.core.criteria import (
    AnatomicalLocation,
    ClinicalScenario,
    DiagnosisEngine,
    ScenarioMatrix,
    UserRole,
    Verdict,
)
from msdiag.core.reports import VerdictReportGenerator
from msdiag.core.wizard import FindingsCollector, SessionStore
from msdiag.models.diagnosis import (
    FindingsInput,
    HealthResponse,
    MatrixResponse,
    ReportRequest,
    SessionAction,
    SessionCreateRequest,
    SessionResponse,
    SessionResultResponse,
    VerdictResponse,
)
from msdiag.utils import DiagnosisServiceError, setup_logging

logger = logging.getLogger(__name__)


# ---- Shared singletons ----
_engine = DiagnosisEngine()
_sessions = SessionStore(
    max_sessions=config.MAX_SESSIONS,
    engine=_engine,
    ttl_seconds=config.SESSION_TTL,
)
_report_gen = VerdictReportGenerator()
START_TIME = datetime.now()


# ---- Application Lifespan ----

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging on startup, drop wizard sessions on shutdown."""
    setup_logging(config.LOG_LEVEL, config.LOG_FILE or None)
    app.state.engine = _engine
    app.state.sessions = _sessions
    logger.info("API ready to accept requests")
    yield
    _sessions.clear()
    logger.info("MS Diagnosis API shut down.")


# ---- FastAPI Application ----

app = FastAPI(
    title=config.APP_TITLE,
    description="McDonald 2024 criteria classifier for multiple sclerosis",
    version=config.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(DiagnosisServiceError)
async def diagnosis_error_handler(request: Request, exc: DiagnosisServiceError):
    logger.warning(f"{request.method} {request.url.path}: {exc.code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# ---- Utility Functions ----

def _session_payload(session_id: str, collector: FindingsCollector) -> dict:
    return {"session_id": session_id, **collector.to_dict()}


def _result_payload(result: Union[Verdict, ScenarioMatrix]) -> dict:
    if isinstance(result, ScenarioMatrix):
        return {"matrix": _engine.summarise_matrix(result)}
    return {"verdict": _engine.summarise(result)}


def _apply_action(collector: FindingsCollector, action: SessionAction) -> None:
    """Route one wizard action to the collector."""
    value = action.value
    name = action.action

    if name in ("set_progression_duration", "set_age_over_50", "set_vascular_risk"):
        if not isinstance(value, bool):
            raise HTTPException(status_code=422, detail=f"'{name}' expects a boolean value")
        getattr(collector, name)(value)
        return

    if not isinstance(value, str):
        raise HTTPException(status_code=422, detail=f"'{name}' expects a string value")

    if name == "select_scenario":
        try:
            scenario = ClinicalScenario(value)
        except ValueError:
            raise HTTPException(status_code=422, detail=f"Unknown scenario '{value}'")
        collector.select_scenario(scenario)
    elif name == "toggle_location":
        try:
            location = AnatomicalLocation(value)
        except ValueError:
            raise HTTPException(status_code=422, detail=f"Unknown location '{value}'")
        collector.toggle_location(location)
    elif name == "toggle_flag":
        collector.toggle_flag(value)


# ---- Health ----

@app.get("/", response_model=HealthResponse, tags=["Health"])
async def root():
    return await health_check()


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    return HealthResponse(
        status="healthy",
        version=config.APP_VERSION,
        uptime_seconds=(datetime.now() - START_TIME).total_seconds(),
        active_sessions=len(_sessions),
        timestamp=datetime.now().isoformat(),
    )


@app.get("/api/v1/reference", tags=["Reference"])
async def reference():
    """Locations, scenarios and statuses known to the rule set."""
    return {**_engine.reference(), "rule_source": config.RULE_SOURCE}


# ---- One-shot diagnosis ----

@app.post("/api/v1/diagnosis", response_model=VerdictResponse, tags=["Diagnosis"])
async def diagnose(findings: FindingsInput):
    """Classify findings under their own clinical scenario."""
    verdict = _engine.evaluate(findings.to_findings())
    return _engine.summarise(verdict)


@app.post("/api/v1/diagnosis/matrix", response_model=MatrixResponse, tags=["Diagnosis"])
async def diagnose_matrix(findings: FindingsInput):
    """Classify imaging findings as CIS, RIS and progressive side by side."""
    matrix = _engine.evaluate_matrix(findings.to_findings())
    return _engine.summarise_matrix(matrix)


@app.post("/api/v1/diagnosis/report", tags=["Reports"])
async def diagnosis_report(request: ReportRequest):
    """Render the neurologist verdict or radiologist matrix as a PDF."""
    findings = request.findings.to_findings()
    if request.role == UserRole.RADIOLOGIST:
        result = _engine.evaluate_matrix(findings)
    else:
        result = _engine.evaluate(findings)

    report = _report_gen.generate(result, request.role)
    return StreamingResponse(
        io.BytesIO(report.pdf_bytes),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{report.filename}"'},
    )


# ---- Wizard sessions ----

@app.post("/api/v1/sessions", response_model=SessionResponse, status_code=201, tags=["Wizard"])
async def create_session(request: SessionCreateRequest):
    session_id, collector = _sessions.create(request.role)
    return _session_payload(session_id, collector)


@app.get("/api/v1/sessions/{session_id}", response_model=SessionResponse, tags=["Wizard"])
async def get_session(session_id: str):
    return _session_payload(session_id, _sessions.get(session_id))


@app.delete("/api/v1/sessions/{session_id}", status_code=204, tags=["Wizard"])
async def delete_session(session_id: str):
    _sessions.discard(session_id)


@app.post("/api/v1/sessions/{session_id}/actions", response_model=SessionResponse, tags=["Wizard"])
async def session_action(session_id: str, action: SessionAction):
    collector = _sessions.get(session_id)
    _apply_action(collector, action)
    return _session_payload(session_id, collector)


@app.post("/api/v1/sessions/{session_id}/next", response_model=SessionResponse, tags=["Wizard"])
async def session_next(session_id: str):
    collector = _sessions.get(session_id)
    collector.next_step()
    return _session_payload(session_id, collector)


@app.post("/api/v1/sessions/{session_id}/back", response_model=SessionResponse, tags=["Wizard"])
async def session_back(session_id: str):
    collector = _sessions.get(session_id)
    collector.previous_step()
    return _session_payload(session_id, collector)


@app.post("/api/v1/sessions/{session_id}/reset", response_model=SessionResponse, tags=["Wizard"])
async def session_reset(session_id: str):
    """New patient: clear findings, keep the role."""
    collector = _sessions.get(session_id)
    collector.reset()
    return _session_payload(session_id, collector)


@app.get("/api/v1/sessions/{session_id}/result", response_model=SessionResultResponse, tags=["Wizard"])
async def session_result(session_id: str):
    collector = _sessions.get(session_id)
    result = collector.result()
    return {"session_id": session_id, "role": collector.role.value, **_result_payload(result)}


# To run the server:
# uvicorn msdiag.main:app --reload
