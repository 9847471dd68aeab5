"""Shared pytest fixtures for test modules."""

from __future__ import annotations

import os

import pytest

from tests.helpers import CountingEvaluator, FakeClock


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def evaluator() -> CountingEvaluator:
    return CountingEvaluator()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove MOBILE_DETECT__ env vars so tests are isolated from the shell."""
    for key in list(os.environ):
        if key.startswith("MOBILE_DETECT__"):
            monkeypatch.delenv(key)
