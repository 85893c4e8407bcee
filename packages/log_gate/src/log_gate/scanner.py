from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from log_gate.rules import ScanRules, default_rules


class ScanInputError(OSError):
    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Failed to read {path}: {reason}")
        self.path = path


class ScanVerdict(str, Enum):
    CLEAN = "Clean"
    BLOCKED = "Blocked"


@dataclass(frozen=True)
class ScanMatch:
    path: str
    line_number: int
    pattern: str
    line_text: str
    rule_id: str
    hint: str = ""


@dataclass(frozen=True)
class ScanResult:
    matches: tuple[ScanMatch, ...]
    scanned: tuple[str, ...] = ()
    skipped: tuple[str, ...] = ()

    @property
    def verdict(self) -> ScanVerdict:
        return ScanVerdict.BLOCKED if self.matches else ScanVerdict.CLEAN

    @property
    def blocked(self) -> bool:
        return self.verdict is ScanVerdict.BLOCKED

    def by_path(self) -> dict[str, list[ScanMatch]]:
        grouped: dict[str, list[ScanMatch]] = {}
        for match in self.matches:
            grouped.setdefault(match.path, []).append(match)
        return grouped


def is_allowed_path(path: str | Path, *, rules: ScanRules | None = None) -> bool:
    return (rules or default_rules()).is_allowed_path(path)


def scan_text(path: str, text: str, *, rules: ScanRules) -> list[ScanMatch]:
    matches: list[ScanMatch] = []
    for line_number, line in enumerate(text.splitlines(), start=1):
        rule = rules.first_match(line)
        if rule is None:
            continue
        matches.append(
            ScanMatch(
                path=path,
                line_number=line_number,
                pattern=rule.source,
                line_text=line.strip(),
                rule_id=rule.rule_id,
                hint=rule.hint,
            )
        )
    return matches


def scan_sources(
    sources: Iterable[tuple[str | Path, str]],
    *,
    rules: ScanRules | None = None,
) -> ScanResult:
    """
    Scan ``(path, text)`` pairs for forbidden debug output.

    Paths on the allow-list are skipped without being read. Each offending line yields one match
    for the first rule it violates; matches keep input path order, then line order.
    """

    active = rules or default_rules()
    matches: list[ScanMatch] = []
    scanned: list[str] = []
    skipped: list[str] = []
    for raw_path, text in sources:
        path = str(raw_path)
        if active.is_allowed_path(path):
            skipped.append(path)
            continue
        scanned.append(path)
        matches.extend(scan_text(path, text, rules=active))
    return ScanResult(matches=tuple(matches), scanned=tuple(scanned), skipped=tuple(skipped))


def _read_source(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise ScanInputError(path, e.strerror or str(e)) from e


def scan_files(paths: Iterable[str | Path], *, rules: ScanRules | None = None) -> ScanResult:
    """
    Read and scan files from disk.

    Raises
    ------
    ScanInputError
        If a non-allow-listed file cannot be read.
    """

    active = rules or default_rules()
    sources: list[tuple[str, str]] = []
    for raw_path in paths:
        path = Path(raw_path)
        if active.is_allowed_path(raw_path):
            sources.append((str(raw_path), ""))
            continue
        sources.append((str(raw_path), _read_source(path)))
    return scan_sources(sources, rules=active)
