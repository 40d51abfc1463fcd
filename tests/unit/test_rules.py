"""
Unit Tests for the McDonald 2024 Rules

Branch coverage for every clinical scenario, the evidence summary and the
purity / determinism guarantees of `classify`.
"""
import pytest

from msdiag.core.criteria import (
    AnatomicalLocation,
    ClinicalScenario,
    DiagnosisStatus,
    Findings,
    classify,
)
from msdiag.core.criteria.rules_mcdonald import (
    NO_EVIDENCE_LABEL,
    NO_LOCATIONS_LABEL,
    DIT_LABEL,
    PRL_LABEL,
    build_evidence_summary,
    has_dissemination_in_space,
)


def _snapshot(findings: Findings) -> dict:
    return findings.to_dict()


class TestRIS:
    """Radiologically isolated syndrome."""

    def test_dis_with_cvs_is_ms(self, two_locations):
        """Test DIS plus CVS converts RIS to MS."""
        f = Findings(scenario=ClinicalScenario.RIS, locations=two_locations, has_cvs=True)
        verdict = classify(f)
        assert verdict.status == DiagnosisStatus.MS
        assert verdict.title == "MS (via RIS)"
        assert verdict.recommendations == ("DIS + (DIT/CSF/CVS) present.", "Symptoms not required.")

    def test_single_location_without_evidence_is_high_risk(self):
        """Test one region and no markers stays RIS with a 'No DIS' note."""
        f = Findings(scenario=ClinicalScenario.RIS, locations={AnatomicalLocation.INFRATENTORIAL})
        verdict = classify(f)
        assert verdict.status == DiagnosisStatus.RIS_HIGH_RISK
        assert verdict.title == "RIS"
        assert verdict.recommendations[0] == "No DIS."
        assert verdict.recommendations[1] == "Monitor clinical/MRI."

    def test_dis_without_evidence_reports_dis_present(self, two_locations):
        """Test DIS without markers stays RIS with a 'DIS present' note."""
        f = Findings(scenario=ClinicalScenario.RIS, locations=two_locations)
        verdict = classify(f)
        assert verdict.status == DiagnosisStatus.RIS_HIGH_RISK
        assert verdict.recommendations == ("DIS present.", "Monitor clinical/MRI.")

    def test_prl_alone_does_not_convert(self, two_locations):
        """PRL is not RIS evidence, even though it is supportive elsewhere."""
        f = Findings(scenario=ClinicalScenario.RIS, locations=two_locations, has_prl=True)
        verdict = classify(f)
        assert verdict.status == DiagnosisStatus.RIS_HIGH_RISK
        assert verdict.status != DiagnosisStatus.MS

    @pytest.mark.parametrize("flag", ["has_dit", "has_csf", "has_cvs"])
    def test_each_ris_marker_converts(self, two_locations, flag):
        """Test each of DIT, CSF and CVS alone converts RIS with DIS."""
        f = Findings(scenario=ClinicalScenario.RIS, locations=two_locations, **{flag: True})
        assert classify(f).status == DiagnosisStatus.MS


class TestProgressive:
    """Primary progressive course."""

    def test_without_duration_is_possible_regardless_of_findings(self):
        """Test missing one-year duration caps the verdict at POSSIBLE."""
        f = Findings(
            scenario=ClinicalScenario.PROGRESSIVE,
            locations=set(AnatomicalLocation),
            has_dit=True, has_csf=True, has_cvs=True, has_prl=True,
            progression_duration=False,
        )
        verdict = classify(f)
        assert verdict.status == DiagnosisStatus.POSSIBLE
        assert verdict.title == "Possibly progressive"
        assert verdict.recommendations == ("Requires 1 year of progression.",)

    def test_duration_dis_and_dit_is_ms(self, two_locations):
        """Test duration, DIS and DIT give progressive MS."""
        f = Findings(
            scenario=ClinicalScenario.PROGRESSIVE,
            locations=two_locations,
            has_dit=True,
            progression_duration=True,
        )
        verdict = classify(f)
        assert verdict.status == DiagnosisStatus.MS
        assert verdict.title == "Progressive MS"
        assert len(verdict.recommendations) == 1

    def test_prl_counts_as_support(self, two_locations):
        """Test PRL is supportive evidence for the progressive branch."""
        f = Findings(
            scenario=ClinicalScenario.PROGRESSIVE,
            locations=two_locations,
            has_prl=True,
            progression_duration=True,
        )
        assert classify(f).status == DiagnosisStatus.MS

    def test_duration_without_dis_is_no_ms(self):
        """Test duration without DIS gives no diagnosis."""
        f = Findings(
            scenario=ClinicalScenario.PROGRESSIVE,
            locations={AnatomicalLocation.SPINAL_CORD},
            has_dit=True,
            progression_duration=True,
        )
        verdict = classify(f)
        assert verdict.status == DiagnosisStatus.NO_MS
        assert verdict.title == "No diagnosis"
        assert verdict.recommendations == ()


class TestCIS:
    """Typical attack / relapsing onset."""

    def test_dis_and_csf_is_relapsing_ms(self, cis_findings):
        """Test DIS plus CSF gives relapsing MS."""
        verdict = classify(cis_findings)
        assert verdict.status == DiagnosisStatus.MS
        assert verdict.title == "Relapsing MS"

    def test_single_location_biomarker_exception(self):
        """Test one region with CVS and DIT meets the 2024 biomarker rule."""
        f = Findings(
            scenario=ClinicalScenario.CIS,
            locations={AnatomicalLocation.PERIVENTRICULAR},
            has_cvs=True,
            has_dit=True,
        )
        verdict = classify(f)
        assert verdict.status == DiagnosisStatus.MS
        assert verdict.title == "MS (biomarker)"
        assert verdict.recommendations == ("New 2024 rule.",)

    def test_single_location_prl_and_csf(self):
        """Test one region with PRL and CSF meets the biomarker rule."""
        f = Findings(
            scenario=ClinicalScenario.CIS,
            locations={AnatomicalLocation.OPTIC_NERVE},
            has_prl=True,
            has_csf=True,
        )
        assert classify(f).title == "MS (biomarker)"

    def test_single_location_needs_dit_or_csf(self):
        """Test imaging biomarkers alone are not enough with one region."""
        f = Findings(
            scenario=ClinicalScenario.CIS,
            locations={AnatomicalLocation.PERIVENTRICULAR},
            has_cvs=True,
            has_prl=True,
        )
        assert classify(f).status == DiagnosisStatus.POSSIBLE

    def test_generic_rule_takes_precedence(self, two_locations):
        """Test the DIS rule wins over the biomarker rule when both hold."""
        f = Findings(scenario=ClinicalScenario.CIS, locations=two_locations, has_cvs=True, has_dit=True)
        assert classify(f).title == "Relapsing MS"

    def test_empty_is_possible(self):
        """Test CIS without findings is possible MS."""
        verdict = classify(Findings(scenario=ClinicalScenario.CIS))
        assert verdict.status == DiagnosisStatus.POSSIBLE
        assert verdict.title == "Possibly MS / CIS"
        assert verdict.recommendations == ("DIS or DIT missing.",)

    def test_repeated_region_counts_once(self):
        """Test a region listed twice does not satisfy DIS."""
        f = Findings(
            scenario=ClinicalScenario.CIS,
            locations=[AnatomicalLocation.PERIVENTRICULAR, AnatomicalLocation.PERIVENTRICULAR],
            has_csf=True,
        )
        assert f.locations == {AnatomicalLocation.PERIVENTRICULAR}
        assert has_dissemination_in_space(f) is False
        assert classify(f).status == DiagnosisStatus.POSSIBLE


class TestFallback:
    """Scenarios without a rule resolve to NO_MS."""

    @pytest.mark.parametrize("scenario", [None, ClinicalScenario.UNKNOWN, "SOMETHING_ELSE", 42])
    def test_fallback(self, two_locations, scenario):
        """Test unset, unknown and non-string scenarios give NO_MS."""
        f = Findings(scenario=scenario, locations=two_locations, has_dit=True, has_cvs=True,
                     progression_duration=True)
        verdict = classify(f)
        assert verdict.status == DiagnosisStatus.NO_MS
        assert verdict.recommendations == ()

    def test_plain_string_scenario_is_recognised(self, two_locations):
        """Test a plain 'CIS' string selects the CIS rule."""
        f = Findings(scenario="CIS", locations=two_locations, has_csf=True)
        assert classify(f).status == DiagnosisStatus.MS


class TestEvidenceSummary:
    """Tests for the DIS / DIT evidence lines."""

    def test_sentinels_when_empty(self, empty_findings):
        """Test empty findings use the 'none' labels."""
        evidence = build_evidence_summary(empty_findings)
        assert evidence.dis == NO_LOCATIONS_LABEL
        assert evidence.dit == NO_EVIDENCE_LABEL

    def test_dit_listed_before_prl(self):
        """Test only markers that fired are listed, in fixed order."""
        evidence = build_evidence_summary(Findings(has_dit=True, has_prl=True))
        assert evidence.dit == f"{DIT_LABEL}, {PRL_LABEL}"
        assert "CSF" not in evidence.dit
        assert "CVS" not in evidence.dit

    def test_locations_in_canonical_order(self):
        """Test regions are listed in canonical order, not selection order."""
        f = Findings(locations={AnatomicalLocation.OPTIC_NERVE, AnatomicalLocation.PERIVENTRICULAR})
        evidence = build_evidence_summary(f)
        assert evidence.dis == "Periventricular, Optic nerve (new 2024)"

    def test_same_evidence_across_scenarios(self, cis_findings):
        """Test the evidence lines do not depend on the scenario."""
        summaries = {
            classify(cis_findings, scenario=s).evidence_summary
            for s in ClinicalScenario
        }
        summaries.add(classify(cis_findings.copy(scenario=None)).evidence_summary)
        assert len(summaries) == 1


class TestPurity:
    """Tests that classify is deterministic and leaves its input alone."""

    def test_deterministic(self, cis_findings):
        """Test equal input gives equal verdicts."""
        assert classify(cis_findings) == classify(cis_findings)

    def test_does_not_mutate_input(self, two_locations):
        """Test classification, with or without overrides, leaves findings unchanged."""
        f = Findings(scenario=ClinicalScenario.RIS, locations=two_locations, has_prl=True)
        before = _snapshot(f)
        classify(f)
        classify(f, scenario=ClinicalScenario.PROGRESSIVE, progression_duration=True)
        assert _snapshot(f) == before

    def test_override_leaves_stored_scenario(self, cis_findings):
        """Test a scenario override does not write back to the findings."""
        verdict = classify(cis_findings, scenario=ClinicalScenario.RIS)
        assert verdict.title == "MS (via RIS)"
        assert cis_findings.scenario == ClinicalScenario.CIS

    def test_inert_fields_do_not_change_verdict(self, cis_findings):
        """Test age and vascular risk are not consulted."""
        aged = cis_findings.copy(age_over_50=True, vascular_risk=True)
        assert classify(aged) == classify(cis_findings)

    def test_constructor_copies_locations(self, two_locations):
        """Test findings own their location set, separate from the caller's."""
        f = Findings(locations=two_locations)
        f.toggle_location(AnatomicalLocation.OPTIC_NERVE)
        assert AnatomicalLocation.OPTIC_NERVE not in two_locations

    def test_reserved_status_never_produced(self, two_locations):
        """Test no branch returns the reserved status."""
        for scenario in list(ClinicalScenario) + [None]:
            for dit in (False, True):
                f = Findings(scenario=scenario, locations=two_locations, has_dit=dit, progression_duration=True)
                assert classify(f).status != DiagnosisStatus.RADIOLOGICALLY_SUGGESTIVE
