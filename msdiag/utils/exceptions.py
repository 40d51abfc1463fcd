"""
Custom Exception Hierarchy

Error types for the service shell around the classifier.  The classifier
itself is total and raises none of these.
"""
from typing import Optional, Dict, Any


class DiagnosisServiceError(Exception):
    """Base exception for all diagnosis service errors."""

    status_code = 500

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details
        }


class SessionNotFoundError(DiagnosisServiceError):
    """Wizard session id is unknown or was discarded."""

    status_code = 404

    def __init__(self, session_id: str):
        super().__init__(
            message=f"Session {session_id} not found",
            code="SESSION_NOT_FOUND",
            details={"session_id": session_id}
        )
        self.session_id = session_id


class SessionLimitError(DiagnosisServiceError):
    """Too many concurrent wizard sessions in this process."""

    status_code = 503

    def __init__(self, limit: int):
        super().__init__(
            message=f"Session limit of {limit} reached",
            code="SESSION_LIMIT",
            details={"limit": limit}
        )


class WizardStepError(DiagnosisServiceError):
    """Illegal wizard transition or action for the current step/role."""

    status_code = 409

    def __init__(
        self,
        message: str,
        step: int = 0,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="WIZARD_STEP_ERROR",
            details={"step": step, **(details or {})}
        )
        self.step = step


class ReportGenerationError(DiagnosisServiceError):
    """A verdict or matrix PDF could not be rendered."""

    status_code = 500

    def __init__(self, message: str, role: str, report_id: Optional[str] = None):
        details: Dict[str, Any] = {"role": role}
        if report_id:
            details["report_id"] = report_id
        super().__init__(
            message=message,
            code="REPORT_GENERATION_FAILED",
            details=details
        )
        self.role = role
        self.report_id = report_id
