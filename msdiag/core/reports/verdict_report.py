"""
Verdict Report Generator

Renders a Verdict (neurologist view) or a ScenarioMatrix (radiologist view)
as a PDF.  Reports are built in memory and returned as bytes; nothing is
written to disk.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Union
from datetime import datetime
import io
import uuid
from xml.sax.saxutils import escape

from reportlab.lib.pagesizes import A4
from reportlab.lib.colors import HexColor, white
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import cm
from reportlab.lib.enums import TA_CENTER
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle

from msdiag.config import RULE_SOURCE
from msdiag.core.criteria import DiagnosisStatus, ScenarioMatrix, UserRole, Verdict
from msdiag.core.criteria.engine import MATRIX_RECOMMENDATION_LIMIT, conclusion_for
from msdiag.utils import get_logger, ReportGenerationError

logger = get_logger(__name__)


# Status banner colors (background, text)
STATUS_COLORS = {
    DiagnosisStatus.MS:                        (HexColor("#DCFCE7"), HexColor("#14532D")),  # Green
    DiagnosisStatus.POSSIBLE:                  (HexColor("#FEF3C7"), HexColor("#78350F")),  # Amber
    DiagnosisStatus.RIS_HIGH_RISK:             (HexColor("#FFEDD5"), HexColor("#7C2D12")),  # Orange
    DiagnosisStatus.NO_MS:                     (HexColor("#F1F5F9"), HexColor("#0F172A")),  # Slate
    DiagnosisStatus.RADIOLOGICALLY_SUGGESTIVE: (HexColor("#F1F5F9"), HexColor("#0F172A")),
}

ROLE_LABELS = {
    UserRole.NEUROLOGIST: "Mode: Neurologist",
    UserRole.RADIOLOGIST: "Mode: Radiologist",
}

MATRIX_NOTE = (
    "The matrix shows the diagnosis depending on the (often unknown) clinical "
    "context. State in the report whether the images meet the criteria for DIS "
    "and DIT/biomarkers, and correlate with the scenarios above."
)


@dataclass
class VerdictReport:
    """Data container for a generated report."""
    report_id: str
    generated_at: datetime
    role: UserRole
    pdf_bytes: bytes

    @property
    def filename(self) -> str:
        return f"{self.report_id}.pdf"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "report_id": self.report_id,
            "generated_at": self.generated_at.isoformat(),
            "role": self.role.value,
            "size_bytes": len(self.pdf_bytes),
        }


class VerdictReportGenerator:
    """Builds neurologist and radiologist PDF reports."""

    def __init__(self):
        self._styles = getSampleStyleSheet()
        self._create_custom_styles()

    def _create_custom_styles(self):
        if 'ReportTitle' not in self._styles:
            self._styles.add(ParagraphStyle(
                name='ReportTitle',
                parent=self._styles['Title'],
                fontSize=22,
                spaceAfter=6,
                textColor=HexColor("#0F172A"),
                alignment=TA_CENTER,
                fontName='Helvetica-Bold'
            ))

        if 'RoleLine' not in self._styles:
            self._styles.add(ParagraphStyle(
                name='RoleLine',
                parent=self._styles['Normal'],
                fontSize=9,
                textColor=HexColor("#64748B"),
                alignment=TA_CENTER,
                spaceAfter=18
            ))

        if 'SectionHeader' not in self._styles:
            self._styles.add(ParagraphStyle(
                name='SectionHeader',
                parent=self._styles['Heading2'],
                fontSize=13,
                spaceBefore=16,
                spaceAfter=8,
                textColor=HexColor("#1F2937"),
                fontName='Helvetica-Bold'
            ))

        if 'CardText' not in self._styles:
            self._styles.add(ParagraphStyle(
                name='CardText',
                parent=self._styles['Normal'],
                fontSize=9,
                leading=12
            ))

        if 'Footnote' not in self._styles:
            self._styles.add(ParagraphStyle(
                name='Footnote',
                parent=self._styles['Normal'],
                fontSize=8,
                textColor=HexColor("#94A3B8"),
                spaceBefore=20
            ))

    def generate(self, result: Union[Verdict, ScenarioMatrix], role: UserRole) -> VerdictReport:
        """
        Render a report for `result`.

        Args:
            result: Single verdict (neurologist) or scenario matrix (radiologist)
            role: Which view to render

        Returns:
            VerdictReport holding the PDF bytes
        """
        role = UserRole(role)
        report_id = f"MS-{datetime.now().strftime('%Y%m%d-%H%M%S')}-{uuid.uuid4().hex[:6]}"

        if isinstance(result, ScenarioMatrix):
            story = self._build_matrix(result)
        elif isinstance(result, Verdict):
            story = self._build_single(result)
        else:
            raise ReportGenerationError(
                f"Cannot render {type(result).__name__}",
                role=role.value,
                report_id=report_id,
            )

        header = [
            Paragraph("MS Diagnosis 2024", self._styles['ReportTitle']),
            Paragraph(ROLE_LABELS[role], self._styles['RoleLine']),
        ]
        footer = [Paragraph(f"Based on: {RULE_SOURCE}", self._styles['Footnote'])]

        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            title=f"MS Diagnosis {report_id}",
            leftMargin=2 * cm, rightMargin=2 * cm,
            topMargin=2 * cm, bottomMargin=2 * cm,
        )
        try:
            doc.build(header + story + footer)
        except Exception as exc:
            logger.error(f"VerdictReportGenerator: build failed for {report_id}: {exc}", exc_info=True)
            raise ReportGenerationError(str(exc), role=role.value, report_id=report_id) from exc

        report = VerdictReport(
            report_id=report_id,
            generated_at=datetime.now(),
            role=role,
            pdf_bytes=buffer.getvalue(),
        )
        logger.info(f"VerdictReportGenerator: {report_id} ({len(report.pdf_bytes)} bytes)")
        return report

    # ── Neurologist: single verdict ───────────────────────────────────────

    def _build_single(self, verdict: Verdict) -> List:
        background, text = STATUS_COLORS[verdict.status]
        banner = Table(
            [[Paragraph(f"<b>{escape(verdict.title)}</b>", self._styles["Heading2"])],
             [Paragraph(escape(verdict.description), self._styles['Normal'])]],
            colWidths=[17 * cm],
        )
        banner.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, -1), background),
            ('TEXTCOLOR', (0, 0), (-1, -1), text),
            ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
            ('TOPPADDING', (0, 0), (-1, -1), 10),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 10),
        ]))

        story = [banner, Paragraph("Diagnostic basis", self._styles['SectionHeader'])]
        story.append(self._evidence_table(verdict))

        story.append(Paragraph("Recommendations", self._styles['SectionHeader']))
        if verdict.recommendations:
            for rec in verdict.recommendations:
                story.append(Paragraph(f"• {escape(rec)}", self._styles['Normal']))
        else:
            story.append(Paragraph("None.", self._styles["Normal"]))
        return story

    def _evidence_table(self, verdict: Verdict) -> Table:
        table = Table(
            [["DIS (locations)", verdict.evidence_summary.dis],
             ["DIT / Bio", verdict.evidence_summary.dit]],
            colWidths=[4 * cm, 13 * cm],
        )
        table.setStyle(TableStyle([
            ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 9),
            ('TEXTCOLOR', (0, 0), (0, -1), HexColor("#64748B")),
            ('LINEBELOW', (0, 0), (-1, 0), 0.5, HexColor("#E2E8F0")),
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ]))
        return table

    # ── Radiologist: conclusion matrix ────────────────────────────────────

    def _build_matrix(self, matrix: ScenarioMatrix) -> List:
        flags = Paragraph(
            f"DIS: {'Yes' if matrix.has_dis else 'No'} &nbsp;&nbsp; "
            f"Supportive (DIT/Bio): {'Yes' if matrix.has_supportive_evidence else 'No'}",
            self._styles['RoleLine'],
        )
        story = [
            Paragraph("Radiological conclusion matrix", self._styles['SectionHeader']),
            flags,
        ]

        cells = []
        backgrounds = []
        for col, (_, title, sub, verdict) in enumerate(matrix.cells()):
            recs = "<br/>".join(f"• {escape(r)}" for r in verdict.recommendations[:MATRIX_RECOMMENDATION_LIMIT])
            cells.append(Paragraph(
                f"<b>{escape(title.upper())}</b><br/><font size=8>{escape(sub)}</font><br/><br/>"
                f"<b>{escape(verdict.title)}</b><br/>{recs}<br/><br/>"
                f"<b>Conclusion:</b> {conclusion_for(verdict)}",
                self._styles['CardText'],
            ))
            backgrounds.append(('BACKGROUND', (col, 0), (col, 0), STATUS_COLORS[verdict.status][0]))

        grid = Table([cells], colWidths=[5.6 * cm] * 3)
        grid.setStyle(TableStyle([
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
            ('BOX', (0, 0), (-1, -1), 0.5, HexColor("#CBD5E1")),
            ('INNERGRID', (0, 0), (-1, -1), 0.5, white),
            ('TOPPADDING', (0, 0), (-1, -1), 8),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 8),
        ] + backgrounds))
        story.append(grid)

        story.append(Paragraph("Evidence", self._styles['SectionHeader']))
        story.append(self._evidence_table(matrix.cis))
        story.append(Spacer(1, 0.4 * cm))
        story.append(Paragraph(MATRIX_NOTE, self._styles['CardText']))
        return story
