"""Test fixtures for space-compliance-engine.

Provides:
- settings: Service settings with defaults, independent of the environment
- catalog: The bundled requirement catalog, loaded once per session
- engine: An AssessmentEngine over the bundled catalog
- make_profile: Factory for OperatorProfile instances around a baseline
- make_status: Factory for RequirementStatus records in the assessment_id assessment
- tiny_document: Raw document of a hand-built two-category catalog
- tiny_framework: The parsed hand-built two-category catalog for exact scoring checks
"""

import os
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import pytest

from space_compliance_engine.assessment.engine import AssessmentEngine
from space_compliance_engine.catalog.inventory import FrameworkCatalog, RequirementCatalog, load_catalog, parse_framework
from space_compliance_engine.core.models import ComplianceStatus, OperatorProfile, RequirementStatus
from space_compliance_engine.settings import Settings

ASSESSMENT_ID = "assessment-001"
SETTINGS_ENV_PREFIX = "SPACE_COMPLIANCE_"

# Spacecraft operator established in Germany, medium-sized, single LEO satellite
BASELINE_PROFILE: dict[str, Any] = {
    "operator_types": ["SCO"],
    "activity_types": ["spacecraft_operation"],
    "establishment_country": "DE",
    "entity_size": "medium",
    "orbit_regime": "LEO",
}


@pytest.fixture()
def settings(monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Return settings with defaults only.

    Any SPACE_COMPLIANCE_ variables in the environment are removed for the
    duration of the test.

    Returns:
        Settings instance built from field defaults.
    """
    for name in list(os.environ):
        if name.upper().startswith(SETTINGS_ENV_PREFIX):
            monkeypatch.delenv(name)
    return Settings(_env_file=None)


@pytest.fixture(scope="session")
def catalog() -> RequirementCatalog:
    """Load the bundled requirement catalog once for the whole session.

    Returns:
        The immutable RequirementCatalog.
    """
    return load_catalog()


@pytest.fixture()
def engine(catalog: RequirementCatalog, settings: Settings) -> AssessmentEngine:
    """Create an AssessmentEngine over the bundled catalog.

    Args:
        catalog: Session-scoped catalog fixture.
        settings: Default settings fixture.

    Returns:
        AssessmentEngine ready to assess any framework.
    """
    return AssessmentEngine(catalog, settings)


@pytest.fixture()
def make_profile() -> Callable[..., OperatorProfile]:
    """Return a factory building profiles from the baseline plus overrides.

    Returns:
        Callable accepting profile field overrides as keyword arguments.
    """

    def _make(**overrides: Any) -> OperatorProfile:
        fields = dict(BASELINE_PROFILE)
        fields.update(overrides)
        return OperatorProfile.parse(fields)

    return _make


@pytest.fixture()
def baseline_profile(make_profile: Callable[..., OperatorProfile]) -> OperatorProfile:
    """Return the baseline spacecraft operator profile."""
    return make_profile()


@pytest.fixture()
def make_status() -> Callable[..., RequirementStatus]:
    """Return a factory for RequirementStatus records in the default assessment.

    Returns:
        Callable (requirement_id, status, **fields) -> RequirementStatus.
    """

    def _make(requirement_id: str, status: str, **fields: Any) -> RequirementStatus:
        fields.setdefault("assessment_id", ASSESSMENT_ID)
        return RequirementStatus(requirement_id=requirement_id, status=ComplianceStatus(status), **fields)

    return _make


@pytest.fixture()
def assessment_id() -> str:
    """Return the assessment id used by make_status."""
    return ASSESSMENT_ID


@pytest.fixture()
def fixed_time() -> datetime:
    """Return a fixed generation timestamp for report tests."""
    return datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _tiny_framework_document() -> dict[str, Any]:
    """Build a small NIS2-coded framework document.

    Layout:
        governance (weight 0.4): t-gov-1 (mandatory, critical), t-gov-2 (mandatory, minor)
        risk_management (weight 0.6): t-risk-1, t-risk-2 (mandatory, major),
            t-risk-3 (optional), t-risk-sat (satcom only)
    """
    return {
        "code": "nis2",
        "name": "Tiny",
        "version": "test",
        "weights": {"governance": 0.4, "risk_management": 0.6},
        "items": [
            {
                "label": "Governance",
                "items": [
                    {
                        "id": "t-gov-1",
                        "title": "Accountability",
                        "text": "Management approves measures.",
                        "category": "governance",
                        "mandatory": True,
                        "severity": "critical",
                        "applies_to": ["ALL"],
                    },
                    {
                        "id": "t-gov-2",
                        "title": "Training",
                        "text": "Management follows training.",
                        "category": "governance",
                        "mandatory": True,
                        "severity": "minor",
                        "applies_to": ["ALL"],
                    },
                ],
            },
            {
                "label": "Risk management",
                "items": [
                    {
                        "id": "t-risk-1",
                        "title": "Risk analysis",
                        "text": "Analyse risks.",
                        "category": "risk_management",
                        "mandatory": True,
                        "severity": "major",
                        "applies_to": ["ALL"],
                    },
                    {
                        "id": "t-risk-2",
                        "title": "Incident handling",
                        "text": "Handle incidents.",
                        "category": "risk_management",
                        "mandatory": True,
                        "severity": "major",
                        "applies_to": ["ALL"],
                    },
                    {
                        "id": "t-risk-3",
                        "title": "Cyber hygiene",
                        "text": "Basic hygiene practices.",
                        "category": "risk_management",
                        "mandatory": False,
                        "severity": "minor",
                        "applies_to": ["ALL"],
                    },
                    {
                        "id": "t-risk-sat",
                        "title": "Link protection",
                        "text": "Protect satellite links.",
                        "category": "risk_management",
                        "mandatory": True,
                        "severity": "major",
                        "applies_to": ["satcom"],
                    },
                ],
            },
        ],
    }


@pytest.fixture()
def tiny_document() -> dict[str, Any]:
    """Return a fresh, mutable copy of the tiny framework document."""
    return _tiny_framework_document()


@pytest.fixture()
def tiny_framework(tiny_document: dict[str, Any]) -> FrameworkCatalog:
    """Return the parsed tiny framework catalog."""
    return parse_framework(tiny_document)
