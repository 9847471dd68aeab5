"""Shared test helpers."""

from __future__ import annotations


class FakeClock:
    """Settable clock for stores that take a ``clock`` callable."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingEvaluator:
    """Rule evaluator that records every call and answers from a fixed table."""

    def __init__(self, answers: dict[str, object] | None = None, default: object = True) -> None:
        self.answers = answers or {}
        self.default = default
        self.calls: list[tuple[str, str, dict[str, str]]] = []

    def evaluate(self, check_name: str, user_agent: str, headers: dict[str, str]) -> object:
        self.calls.append((check_name, user_agent, dict(headers)))
        return self.answers.get(check_name, self.default)
