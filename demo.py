"""
End-to-End Demo Script for the MS Diagnosis Service

Walks both wizard flows with example findings:
1. Neurologist: clinical context → locations → biomarkers → single verdict
2. Radiologist: locations → biomarkers → three-scenario matrix
3. PDF report rendered in memory

Run: python demo.py
"""
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from msdiag.core.criteria import AnatomicalLocation, ClinicalScenario, DiagnosisEngine, UserRole
from msdiag.core.reports import VerdictReportGenerator
from msdiag.core.wizard import FindingsCollector
from msdiag.utils import setup_logging


def print_verdict(verdict, indent="   "):
    print(f"{indent}{verdict.status.value}: {verdict.title}")
    print(f"{indent}  DIS: {verdict.evidence_summary.dis}")
    print(f"{indent}  DIT/Bio: {verdict.evidence_summary.dit}")
    for rec in verdict.recommendations:
        print(f"{indent}  - {rec}")


def main():
    setup_logging("WARNING")
    engine = DiagnosisEngine()

    print("=" * 60)
    print("MS DIAGNOSIS 2024 - DEMO")
    print("=" * 60)

    print("\n[1/3] Neurologist flow (single region + CVS + DIT)...")
    neuro = FindingsCollector(UserRole.NEUROLOGIST, engine=engine)
    neuro.select_scenario(ClinicalScenario.CIS)
    neuro.next_step()
    neuro.toggle_location(AnatomicalLocation.PERIVENTRICULAR)
    neuro.next_step()
    neuro.toggle_flag("cvs")
    neuro.toggle_flag("dit")
    neuro.next_step()
    verdict = neuro.result()
    print_verdict(verdict)

    print("\n[2/3] Radiologist flow (two regions + PRL)...")
    radio = FindingsCollector(UserRole.RADIOLOGIST, engine=engine)
    radio.toggle_location(AnatomicalLocation.INFRATENTORIAL)
    radio.toggle_location(AnatomicalLocation.SPINAL_CORD)
    radio.next_step()
    radio.toggle_flag("prl")
    radio.next_step()
    matrix = radio.result()
    print(f"   DIS: {'Yes' if matrix.has_dis else 'No'}  "
          f"Supportive: {'Yes' if matrix.has_supportive_evidence else 'No'}")
    for _, title, sub, cell in matrix.cells():
        print(f"   [{title} / {sub}]")
        print_verdict(cell, indent="     ")

    print("\n[3/3] Rendering PDF reports...")
    generator = VerdictReportGenerator()
    for result, role in ((verdict, UserRole.NEUROLOGIST), (matrix, UserRole.RADIOLOGIST)):
        report = generator.generate(result, role)
        print(f"   ✓ {report.report_id} ({role.value}, {len(report.pdf_bytes)} bytes)")

    print("\nDone.")


if __name__ == "__main__":
    main()
