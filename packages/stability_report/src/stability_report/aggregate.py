from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Literal

from stability_report.records import ClassMember, ClassRecord, ComposableRecord, ReportRecord

IssueKind = Literal["unstable_class", "non_skippable_composable"]

GOOD_RATE = 0.9
WARN_RATE = 0.7


@dataclass(frozen=True)
class _HintRule:
    hint_id: str
    applies: Callable[[ClassMember], bool]
    message: str


_COLLECTION_RE = re.compile(
    r"^(?:kotlin\.collections\.)?(?:Mutable)?(?:List|Set|Map|Collection|Iterable|ArrayList|HashMap|HashSet|"
    r"LinkedHashMap|LinkedHashSet|Array)\b"
)
_FUNCTION_TYPE_RE = re.compile(r"->|^Function\d*\b")


def _make_rule(hint_id: str, applies: Callable[[ClassMember], bool], message: str) -> _HintRule:
    return _HintRule(hint_id=hint_id, applies=applies, message=message)


# First matching rule wins for each member.
HINT_RULES: tuple[_HintRule, ...] = (
    _make_rule(
        "mutable_property",
        lambda m: m.mutable,
        "Make `{name}` a `val`; a `var` property is never stable.",
    ),
    _make_rule(
        "collection_type",
        lambda m: _COLLECTION_RE.match(m.type.strip()) is not None,
        "Replace `{type}` in `{name}` with an immutable collection "
        "(ImmutableList/ImmutableMap/ImmutableSet from kotlinx.collections.immutable).",
    ),
    _make_rule(
        "function_type",
        lambda m: _FUNCTION_TYPE_RE.search(m.type) is not None,
        "Hold the lambda `{name}` in a stable wrapper or remember it at the call site.",
    ),
    _make_rule(
        "unstable_type",
        lambda m: True,
        "Make `{type}` stable (annotate it with @Immutable/@Stable) or map `{name}` to a stable UI model.",
    ),
)

CLASS_WITHOUT_MEMBERS_HINT = (
    "Annotate the class with @Immutable (or @Stable) if its instances never change after construction."
)
NON_SKIPPABLE_HINTS: tuple[str, ...] = (
    "Ensure all parameters are stable.",
    "Wrap lambda callbacks in remember { } so they keep their identity.",
    "Hoist state to the parent composable.",
)


@dataclass(frozen=True)
class StabilityIssue:
    kind: IssueKind
    name: str
    unstable_members: tuple[tuple[str, str], ...]
    hints: tuple[str, ...]

    @property
    def severity(self) -> int:
        return len(self.unstable_members)


@dataclass(frozen=True)
class StabilitySummary:
    stable_count: int
    unstable_count: int
    skippable_count: int
    non_skippable_count: int
    issues: tuple[StabilityIssue, ...]

    @property
    def class_count(self) -> int:
        return self.stable_count + self.unstable_count

    @property
    def composable_count(self) -> int:
        return self.skippable_count + self.non_skippable_count

    @property
    def stability_rate(self) -> float:
        return _rate(self.stable_count, self.class_count)

    @property
    def skippable_rate(self) -> float:
        return _rate(self.skippable_count, self.composable_count)


def _rate(part: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return float(part) / float(total)


def rate_grade(rate: float) -> str:
    if rate >= GOOD_RATE:
        return "good"
    if rate >= WARN_RATE:
        return "warn"
    return "poor"


def hint_for_member(member: ClassMember) -> str:
    for rule in HINT_RULES:
        if rule.applies(member):
            return rule.message.format(name=member.name, type=member.type)
    return ""


def _class_issue(record: ClassRecord) -> StabilityIssue:
    unstable = [m for m in record.members if not m.stable]
    hints: list[str] = []
    for member in unstable:
        hint = hint_for_member(member)
        if hint and hint not in hints:
            hints.append(hint)
    if not hints:
        hints.append(CLASS_WITHOUT_MEMBERS_HINT)
    return StabilityIssue(
        kind="unstable_class",
        name=record.name,
        unstable_members=tuple((m.name, m.type) for m in unstable),
        hints=tuple(hints),
    )


def _composable_issue(record: ComposableRecord) -> StabilityIssue:
    return StabilityIssue(
        kind="non_skippable_composable",
        name=record.name,
        unstable_members=(),
        hints=NON_SKIPPABLE_HINTS,
    )


def summarize(records: Iterable[ReportRecord]) -> StabilitySummary:
    """
    Aggregate parsed records into counts and a ranked issue list.

    Unstable classes come first, most unstable members first and then by name. Non-skippable
    composables follow, by name.

    A report directory usually holds one report per build variant (``app_debug-classes.txt``,
    ``app_release-classes.txt``), so a record is counted once per kind and name; the first one
    read wins.
    """

    stable = unstable = skippable = non_skippable = 0
    class_issues: list[StabilityIssue] = []
    composable_issues: list[StabilityIssue] = []
    seen: set[tuple[str, str]] = set()

    for record in records:
        key = (type(record).__name__, record.name)
        if key in seen:
            continue
        seen.add(key)
        if isinstance(record, ClassRecord):
            if record.is_stable:
                stable += 1
            else:
                unstable += 1
                class_issues.append(_class_issue(record))
        elif isinstance(record, ComposableRecord):
            if record.skippable:
                skippable += 1
            else:
                non_skippable += 1
                composable_issues.append(_composable_issue(record))

    class_issues.sort(key=lambda i: (-i.severity, i.name))
    composable_issues.sort(key=lambda i: i.name)
    return StabilitySummary(
        stable_count=stable,
        unstable_count=unstable,
        skippable_count=skippable,
        non_skippable_count=non_skippable,
        issues=(*class_issues, *composable_issues),
    )
