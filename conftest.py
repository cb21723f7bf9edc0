"""
Root-level shared test fixtures.

Inherited by the secrets core tests and the config/CLI tests.
"""

from __future__ import annotations

import pytest

from vaultexplorer.config import reset_config

TEST_CHANGED_BY = "TESTHOST\\tester"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove env vars that leak between tests and pin the ChangedBy stamp."""
    for key in [
        "VAULTEXPLORER_WORKSPACE",
        "VAULTEXPLORER_ALIASES_FILE",
        "VAULTEXPLORER_MAX_VALUE_BYTES",
    ]:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("VAULTEXPLORER_CHANGED_BY", TEST_CHANGED_BY)
    reset_config()
    yield
    reset_config()
