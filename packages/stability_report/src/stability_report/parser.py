from __future__ import annotations

import enum
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from stability_report.records import ClassMember, ClassRecord, ComposableRecord, ReportRecord

_CLASS_RE = re.compile(r"^(?P<indent>\s*)(?P<stability>stable|unstable)\s+class\s+(?P<name>[^\s{(<]+)")
_MEMBER_RE = re.compile(
    r"^\s*(?P<stability>stable|unstable)\s+(?P<kind>val|var)\s+(?P<name>[^\s:]+)\s*:\s*(?P<type>.+?)\s*$"
)
_MARKER_RE = re.compile(r"\b(?:restartable|skippable)\b")
_RESTARTABLE_RE = re.compile(r"\brestartable\b")
_SKIPPABLE_RE = re.compile(r"\bskippable\b")
_NOT_SKIPPABLE_RE = re.compile(r"\bnot\s+skippable\b")
_FUN_RE = re.compile(r"\bfun\s+(?:<[^>]*>\s*)?(?:[\w.]+\.)?(?P<name>\w+)\s*\(")


class ReportReadError(OSError):
    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Failed to read report {path}: {reason}")
        self.path = path


class _State(enum.Enum):
    OUTSIDE_RECORD = "outside_record"
    INSIDE_CLASS_RECORD = "inside_class_record"


@dataclass
class _OpenClass:
    name: str
    stability: str
    indent: int
    members: list[ClassMember] = field(default_factory=list)

    def close(self) -> ClassRecord:
        stability = "stable" if self.stability == "stable" else "unstable"
        return ClassRecord(name=self.name, stability=stability, members=tuple(self.members))


@dataclass(frozen=True)
class _PendingComposable:
    restartable: bool
    skippable: bool


def _indent_of(line: str) -> int:
    return len(line) - len(line.lstrip())


def _composable_flags(line: str) -> _PendingComposable:
    skippable = _SKIPPABLE_RE.search(line) is not None and _NOT_SKIPPABLE_RE.search(line) is None
    return _PendingComposable(
        restartable=_RESTARTABLE_RE.search(line) is not None,
        skippable=skippable,
    )


def iter_records(lines: Iterable[str]) -> Iterable[ReportRecord]:
    """
    Yield report records from compiler report lines, in file order.

    The class grammar is tracked with two states. Outside a record, a class header
    (``unstable class Foo``) opens one. Inside a record, member lines
    (``unstable val items: List<Item>``) are attached; any other non-blank line at the header's
    indentation or shallower closes the record and is then read as an outside line, while deeper
    lines are ignored.

    Composable markers (``restartable``, ``skippable``, ``not skippable``) are remembered until
    the next ``fun Name(`` on the same or a later line. Unrecognised lines are skipped.
    """

    state = _State.OUTSIDE_RECORD
    current: _OpenClass | None = None
    pending: _PendingComposable | None = None

    for raw in lines:
        line = raw.rstrip("\r\n")
        if not line.strip():
            continue

        if state is _State.INSIDE_CLASS_RECORD and current is not None:
            member = _MEMBER_RE.match(line)
            if member is not None:
                current.members.append(
                    ClassMember(
                        name=member.group("name"),
                        type=member.group("type"),
                        stable=member.group("stability") == "stable",
                        mutable=member.group("kind") == "var",
                    )
                )
                continue
            if _indent_of(line) > current.indent:
                continue
            yield current.close()
            current = None
            state = _State.OUTSIDE_RECORD

        header = _CLASS_RE.match(line)
        if header is not None:
            current = _OpenClass(
                name=header.group("name"),
                stability=header.group("stability"),
                indent=len(header.group("indent")),
            )
            state = _State.INSIDE_CLASS_RECORD
            pending = None
            continue

        marker = _MARKER_RE.search(line)
        if marker is not None:
            pending = _composable_flags(line)
            fun = _FUN_RE.search(line, marker.end())
        elif pending is not None:
            fun = _FUN_RE.search(line)
        else:
            continue

        if fun is not None and pending is not None:
            yield ComposableRecord(
                name=fun.group("name"),
                restartable=pending.restartable,
                skippable=pending.skippable,
            )
            pending = None

    if current is not None:
        yield current.close()


def parse_report(text: str) -> list[ReportRecord]:
    return list(iter_records(text.splitlines()))


def parse_report_file(path: Path) -> list[ReportRecord]:
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise ReportReadError(path, str(e)) from e
    return parse_report(text)


def parse_report_files(paths: Iterable[Path]) -> list[ReportRecord]:
    records: list[ReportRecord] = []
    for path in paths:
        records.extend(parse_report_file(path))
    return records
