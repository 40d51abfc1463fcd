"""
Findings Collector Package

Multi-step wizard that builds Findings for a neurologist or radiologist.
"""
from .collector import (
    FindingsCollector,
    SessionStore,
    StepInfo,
    WizardStep,
    BIOMARKER_FLAGS,
)

__all__ = [
    "FindingsCollector",
    "SessionStore",
    "StepInfo",
    "WizardStep",
    "BIOMARKER_FLAGS",
]
