"""
Pytest Configuration and Shared Fixtures

Global fixtures and configuration for the test suite.
"""

import pytest
import numpy as np

from countguard.privacy.policy import Below10Mode, ObfuscationPolicy
from countguard.workflow.cache import ObfuscationCache


@pytest.fixture
def rng():
    """Seeded generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def obf_cache():
    return ObfuscationCache()


@pytest.fixture
def default_policy():
    return ObfuscationPolicy()


@pytest.fixture
def strict_policy():
    """Policy that zeroes small counts and obfuscates zero."""
    return ObfuscationPolicy(
        epsilon=0.5,
        rounding_step=5,
        obfuscate_zero=True,
        below_10_mode=Below10Mode.ZERO,
    )


def _population(count):
    return [
        {
            "code": {"coding": [{"system": "http://hl7.org/fhir/measure-population",
                                 "code": "initial-population"}]},
            "count": count,
        }
    ]


def _stratifier(name, strata):
    return {
        "code": [{"text": name}],
        "stratum": [
            {"value": {"text": value}, "population": _population(count)}
            for value, count in strata
        ],
    }


@pytest.fixture
def sample_report():
    """MeasureReport with one group per category plus an unknown one."""
    return {
        "resourceType": "MeasureReport",
        "status": "complete",
        "type": "summary",
        "measure": "urn:uuid:fe7e5bf7-befb-4ddb-9c57-7b4c1b1c2b7a",
        "date": "2024-03-01T12:00:00+00:00",
        "group": [
            {
                "code": {"text": "patients"},
                "population": _population(74),
                "stratifier": [
                    _stratifier("Gender", [("male", 31), ("female", 43)]),
                    _stratifier("Age", [("0-9", 0), ("10-19", 7), ("20-29", 67)]),
                ],
            },
            {
                "code": {"text": "diagnosis"},
                "population": _population(112),
                "stratifier": [
                    _stratifier("diagnosis", [("C34.0", 10), ("C61", 102)]),
                ],
            },
            {
                "code": {"text": "specimen"},
                "population": _population(250),
                "stratifier": [
                    _stratifier("sample_kind", [("blood-serum", 180), ("tissue-frozen", 70)]),
                ],
            },
            {
                "code": {"text": "medications"},
                "population": _population(5),
                "stratifier": [
                    _stratifier("medication", [("L01", 3), ("L02", 2)]),
                ],
            },
        ],
    }


# Configure pytest settings
def pytest_configure(config):
    """Configure pytest settings."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
