from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

DEFAULT_RULES_FILENAME = "default_rules.yaml"


class RulesError(ValueError):
    pass


@dataclass(frozen=True)
class ScanRule:
    rule_id: str
    pattern: re.Pattern[str]
    hint: str = ""

    @property
    def source(self) -> str:
        return self.pattern.pattern


@dataclass(frozen=True)
class ScanRules:
    forbidden: tuple[ScanRule, ...]
    allowed_path_markers: tuple[str, ...] = ()

    def first_match(self, line: str) -> ScanRule | None:
        for rule in self.forbidden:
            if rule.pattern.search(line):
                return rule
        return None

    def is_allowed_path(self, path: str | Path) -> bool:
        normalized = str(path).replace("\\", "/")
        return any(marker in normalized for marker in self.allowed_path_markers)


def _make_rule(rule_id: str, pattern: str, hint: str = "") -> ScanRule:
    try:
        compiled = re.compile(pattern)
    except re.error as e:
        raise RulesError(f"Invalid pattern for rule {rule_id!r}: {e}") from e
    return ScanRule(rule_id=rule_id, pattern=compiled, hint=hint)


def default_rules_path() -> Path:
    return Path(__file__).resolve().parent / DEFAULT_RULES_FILENAME


def _parse_forbidden(raw: Any, *, where: str) -> tuple[ScanRule, ...]:
    if not isinstance(raw, list) or not raw:
        raise RulesError(f"Expected a non-empty list for forbidden in {where}.")
    rules: list[ScanRule] = []
    seen: set[str] = set()
    for idx, item in enumerate(raw):
        if not isinstance(item, dict):
            raise RulesError(f"Expected a mapping for forbidden[{idx}] in {where}.")
        unknown = set(item) - {"id", "pattern", "hint"}
        if unknown:
            raise RulesError(
                f"Unknown keys in forbidden[{idx}] in {where}: {', '.join(sorted(unknown))}."
            )
        pattern = item.get("pattern")
        if not isinstance(pattern, str) or not pattern:
            raise RulesError(f"Expected non-empty string for forbidden[{idx}].pattern in {where}.")
        rule_id = item.get("id", f"rule_{idx + 1}")
        if not isinstance(rule_id, str) or not rule_id:
            raise RulesError(f"Expected non-empty string for forbidden[{idx}].id in {where}.")
        if rule_id in seen:
            raise RulesError(f"Duplicate rule id {rule_id!r} in {where}.")
        seen.add(rule_id)
        hint = item.get("hint", "")
        if not isinstance(hint, str):
            raise RulesError(f"Expected string for forbidden[{idx}].hint in {where}.")
        rules.append(_make_rule(rule_id, pattern, hint))
    return tuple(rules)


def _parse_markers(raw: Any, *, where: str) -> tuple[str, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list) or not all(isinstance(m, str) and m for m in raw):
        raise RulesError(f"Expected a list of non-empty strings for allowed_path_markers in {where}.")
    return tuple(raw)


def rules_from_mapping(
    data: Mapping[str, Any],
    *,
    base: ScanRules | None = None,
    where: str = "rules",
) -> ScanRules:
    """
    Build a rule table from a mapping with ``forbidden`` and ``allowed_path_markers`` keys.

    Keys missing from ``data`` are taken from ``base`` (when given), so a project config can
    override just the allow-list or just the patterns.
    """

    if "forbidden" in data:
        forbidden = _parse_forbidden(data["forbidden"], where=where)
    elif base is not None:
        forbidden = base.forbidden
    else:
        raise RulesError(f"Missing forbidden in {where}.")

    if "allowed_path_markers" in data:
        markers = _parse_markers(data["allowed_path_markers"], where=where)
    elif base is not None:
        markers = base.allowed_path_markers
    else:
        markers = ()

    return ScanRules(forbidden=forbidden, allowed_path_markers=markers)


def load_rules(path: Path | None = None) -> ScanRules:
    """
    Load a rule table from YAML.

    Parameters
    ----------
    path:
        Rules file; defaults to the bundled ``default_rules.yaml``.

    Raises
    ------
    RulesError
        If the file cannot be read or does not describe a valid rule table.
    """

    rules_path = path or default_rules_path()
    try:
        raw = yaml.safe_load(rules_path.read_text(encoding="utf-8"))
    except OSError as e:
        raise RulesError(f"Failed to read {rules_path}: {e}") from e
    except yaml.YAMLError as e:
        raise RulesError(f"Failed to parse YAML in {rules_path}: {e}") from e

    if not isinstance(raw, dict):
        raise RulesError(f"Expected a YAML mapping in {rules_path}.")
    data = {k: v for k, v in raw.items() if k != "version"}
    unknown = set(data) - {"forbidden", "allowed_path_markers"}
    if unknown:
        raise RulesError(f"Unknown keys in {rules_path}: {', '.join(sorted(unknown))}.")
    return rules_from_mapping(data, where=str(rules_path))


@lru_cache(maxsize=1)
def default_rules() -> ScanRules:
    return load_rules()
