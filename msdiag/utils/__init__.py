"""
Utilities Package - Logging and Exception Handling
"""
from .logging import get_logger, setup_logging
from .exceptions import (
    DiagnosisServiceError,
    SessionNotFoundError,
    SessionLimitError,
    WizardStepError,
    ReportGenerationError,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "DiagnosisServiceError",
    "SessionNotFoundError",
    "SessionLimitError",
    "WizardStepError",
    "ReportGenerationError",
]
