"""
Unit Tests for Report Generation

Tests for the neurologist and radiologist PDF views.
"""
import pytest
from datetime import datetime

from msdiag.core.criteria import ClinicalScenario, Findings, UserRole
from msdiag.core.reports import VerdictReportGenerator, VerdictReport
from msdiag.utils import ReportGenerationError


@pytest.fixture
def generator() -> VerdictReportGenerator:
    return VerdictReportGenerator()


class TestVerdictReportGenerator:
    """Tests for VerdictReportGenerator."""

    def test_single_verdict_pdf(self, generator, engine, cis_findings):
        """Test neurologist report renders a PDF for one verdict."""
        report = generator.generate(engine.evaluate(cis_findings), UserRole.NEUROLOGIST)

        assert isinstance(report, VerdictReport)
        assert report.pdf_bytes.startswith(b"%PDF")
        assert report.role == UserRole.NEUROLOGIST
        assert report.filename == f"{report.report_id}.pdf"
        assert isinstance(report.generated_at, datetime)

    def test_empty_recommendations(self, generator, engine):
        """Test a verdict without recommendations still renders."""
        verdict = engine.evaluate(Findings())
        report = generator.generate(verdict, UserRole.NEUROLOGIST)
        assert report.pdf_bytes.startswith(b"%PDF")

    def test_matrix_pdf(self, generator, engine, two_locations):
        """Test radiologist report renders the three-scenario matrix."""
        matrix = engine.evaluate_matrix(Findings(locations=two_locations, has_cvs=True))
        report = generator.generate(matrix, UserRole.RADIOLOGIST)
        assert report.pdf_bytes.startswith(b"%PDF")
        assert report.to_dict()["size_bytes"] == len(report.pdf_bytes)

    def test_unique_report_ids(self, generator, engine):
        """Test each report gets its own id."""
        verdict = engine.evaluate(Findings(scenario=ClinicalScenario.RIS))
        first = generator.generate(verdict, UserRole.NEUROLOGIST)
        second = generator.generate(verdict, UserRole.NEUROLOGIST)
        assert first.report_id != second.report_id

    def test_rejects_unknown_result(self, generator):
        """Test non-verdict input raises ReportGenerationError carrying role and id."""
        with pytest.raises(ReportGenerationError) as exc_info:
            generator.generate({"status": "MS"}, UserRole.NEUROLOGIST)

        err = exc_info.value
        assert err.status_code == 500
        assert err.to_dict()["error"] == "REPORT_GENERATION_FAILED"
        assert err.details["role"] == "NEUROLOGIST"
        assert err.report_id.startswith("MS-")
        assert err.details["report_id"] == err.report_id
