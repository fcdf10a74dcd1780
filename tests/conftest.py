"""Shared pytest fixtures for chill-script tests."""

from __future__ import annotations

from decimal import Decimal

import pytest

from chillscript.core.config import ScriptSettings
from chillscript.script import ChillScriptRuntime


@pytest.fixture(autouse=True)
def _clean_script_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep CHILL_SCRIPT_* variables from the outer shell out of the tests."""
    for name in (
        "CHILL_SCRIPT_MAX_DEPTH",
        "CHILL_SCRIPT_DIVISION_PRECISION",
        "CHILL_SCRIPT_FILLER_WORDS",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def settings() -> ScriptSettings:
    return ScriptSettings()


@pytest.fixture
def runtime() -> ChillScriptRuntime:
    """A runtime with a few order-shaped bindings."""
    return ChillScriptRuntime(
        {
            "price": Decimal("19.99"),
            "qty": 3,
            "discount": 5,
            "items": [10, 20, 30],
            "order": {"customer": {"name": "Ada", "tier": 2}},
        }
    )
