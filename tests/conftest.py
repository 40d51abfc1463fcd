"""
Pytest Configuration and Fixtures

Shared fixtures for the MS diagnosis tests.
"""
import pytest
from pathlib import Path
import sys

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from msdiag.core.criteria import AnatomicalLocation, ClinicalScenario, DiagnosisEngine, Findings


@pytest.fixture
def two_locations() -> set:
    """Two distinct regions: enough for dissemination in space."""
    return {AnatomicalLocation.PERIVENTRICULAR, AnatomicalLocation.SPINAL_CORD}


@pytest.fixture
def empty_findings() -> Findings:
    """Fresh record, as the collector starts it."""
    return Findings()


@pytest.fixture
def cis_findings(two_locations) -> Findings:
    """Relapsing onset with DIS and positive CSF."""
    return Findings(scenario=ClinicalScenario.CIS, locations=set(two_locations), has_csf=True)


@pytest.fixture
def engine() -> DiagnosisEngine:
    """Stateless engine shared by a test."""
    return DiagnosisEngine()
