"""Signature-table rule evaluation.

The signature table is a YAML document with one mapping of rule name to regex
per group (phones, tablets, operating systems, browsers) plus a set of mobile
header checks. ``SignatureRuleEvaluator`` answers three kinds of checks:

    "mobile"   any mobile header check, or any rule in any group matches
    "tablet"   any tablet rule matches
    <rule>     the named rule matches (case-insensitive name lookup)
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from functools import cache
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

import yaml

from mobile_detect.exceptions import UnknownRuleError

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping

logger = logging.getLogger(__name__)

MOBILE_CHECK = "mobile"
TABLET_CHECK = "tablet"

RULE_GROUPS: tuple[str, ...] = ("phones", "tablets", "operating_systems", "browsers")

_DEFAULT_TABLE_PATH = Path(__file__).parent / "data" / "signatures.yaml"


class RuleEvaluator(Protocol):
    def evaluate(self, check_name: str, user_agent: str, headers: Mapping[str, str]) -> object: ...


@dataclass(frozen=True)
class HeaderRule:
    """A header whose presence, or one of whose values, marks a mobile client."""

    header: str
    matches: tuple[str, ...] | None = None

    def applies_to(self, headers: Mapping[str, str]) -> bool:
        value = headers.get(self.header)
        if value is None:
            return False
        if self.matches is None:
            return True
        return any(fragment in value for fragment in self.matches)


@dataclass(frozen=True)
class SignatureTable:
    groups: dict[str, dict[str, re.Pattern[str]]]
    mobile_headers: tuple[HeaderRule, ...]

    @classmethod
    def from_mapping(cls, raw: Mapping[str, object]) -> SignatureTable:
        groups: dict[str, dict[str, re.Pattern[str]]] = {}
        for group in RULE_GROUPS:
            rules = raw.get(group) or {}
            if not isinstance(rules, dict):
                raise ValueError(f"Signature group '{group}' must be a mapping, got {type(rules).__name__}")
            groups[group] = {str(name): re.compile(str(pattern), re.IGNORECASE) for name, pattern in rules.items()}

        header_rules: list[HeaderRule] = []
        raw_headers = raw.get("mobile_headers") or {}
        if not isinstance(raw_headers, dict):
            raise ValueError("Signature section 'mobile_headers' must be a mapping")
        for header, rule in raw_headers.items():
            matches = None
            if isinstance(rule, dict) and rule.get("matches") is not None:
                matches = tuple(str(m) for m in rule["matches"])
            header_rules.append(HeaderRule(header=str(header), matches=matches))
        return cls(groups=groups, mobile_headers=tuple(header_rules))

    def rules(self) -> Iterator[tuple[str, re.Pattern[str]]]:
        for group in RULE_GROUPS:
            yield from self.groups[group].items()


@cache
def load_default_table() -> SignatureTable:
    """Load the signature table bundled with the package."""
    text = _DEFAULT_TABLE_PATH.read_text(encoding="utf-8")
    return SignatureTable.from_mapping(yaml.safe_load(text))


class SignatureRuleEvaluator:
    def __init__(self, table: SignatureTable | None = None) -> None:
        self._table = table if table is not None else load_default_table()
        self._names = {name.lower(): name for name, _ in self._table.rules()}
        self._patterns = dict(self._table.rules())

    def rule_names(self) -> list[str]:
        return list(self._patterns)

    def resolve(self, name: str) -> str:
        """Return the table's spelling of a check name, e.g. ``"ipad"`` -> ``"iPad"``.

        Raises:
            UnknownRuleError: If no rule and no built-in check has that name.
        """
        lowered = name.lower()
        if lowered in (MOBILE_CHECK, TABLET_CHECK):
            return lowered
        try:
            return self._names[lowered]
        except KeyError:
            raise UnknownRuleError(f"No detection rule named '{name}'") from None

    def evaluate(self, check_name: str, user_agent: str, headers: Mapping[str, str]) -> bool:
        if check_name == MOBILE_CHECK:
            return self._is_mobile(user_agent, headers)
        if check_name == TABLET_CHECK:
            return self._matches_any(self._table.groups["tablets"].values(), user_agent)
        pattern = self._patterns.get(self.resolve(check_name))
        if pattern is None:
            raise UnknownRuleError(f"No detection rule named '{check_name}'")
        return pattern.search(user_agent) is not None

    def _is_mobile(self, user_agent: str, headers: Mapping[str, str]) -> bool:
        for rule in self._table.mobile_headers:
            if rule.applies_to(headers):
                logger.debug("Mobile header %s matched", rule.header)
                return True
        return self._matches_any((pattern for _, pattern in self._table.rules()), user_agent)

    @staticmethod
    def _matches_any(patterns: Iterable[re.Pattern[str]], user_agent: str) -> bool:
        return any(pattern.search(user_agent) for pattern in patterns)
