"""
Unit test conftest.py for okms-secrets.

Keeps the OKMS_* environment overrides of the developer's shell out of the
unit tests.
"""

import pytest

OKMS_ENV_VARS = [
    'OKMS_PROVIDER',
    'OKMS_SERVER',
    'OKMS_ID',
    'OKMS_CAS_REQUIRED',
    'OKMS_TIMEOUT',
]


@pytest.fixture(autouse=True)
def clean_okms_environment(monkeypatch):
    """Remove OKMS_* overrides for the duration of each test."""
    for env_var in OKMS_ENV_VARS:
        monkeypatch.delenv(env_var, raising=False)
