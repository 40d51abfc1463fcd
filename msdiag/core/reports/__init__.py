"""
Report Generation Module

Renders diagnosis results as downloadable PDFs.
Two views:
- Neurologist: single verdict with evidence and recommendations
- Radiologist: three-scenario conclusion matrix
"""
from .verdict_report import VerdictReportGenerator, VerdictReport

__all__ = [
    "VerdictReportGenerator",
    "VerdictReport",
]
