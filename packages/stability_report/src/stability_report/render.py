from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from stability_report.aggregate import StabilityIssue, StabilitySummary, rate_grade

_MAX_MEMBERS_PER_CLASS = 5
_MAX_COMPOSABLES_LISTED = 10


def _percent(rate: float) -> str:
    return f"{rate * 100:.0f}%"


def _class_issues(summary: StabilitySummary) -> list[StabilityIssue]:
    return [i for i in summary.issues if i.kind == "unstable_class"]


def _composable_issues(summary: StabilitySummary) -> list[StabilityIssue]:
    return [i for i in summary.issues if i.kind == "non_skippable_composable"]


def summary_to_dict(
    summary: StabilitySummary,
    *,
    module: str | None = None,
    module_metrics: Mapping[str, int] | None = None,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "module": module,
        "classes": {
            "stable": summary.stable_count,
            "unstable": summary.unstable_count,
            "stability_rate": summary.stability_rate,
            "grade": rate_grade(summary.stability_rate),
        },
        "composables": {
            "skippable": summary.skippable_count,
            "non_skippable": summary.non_skippable_count,
            "skippable_rate": summary.skippable_rate,
        },
        "issues": [
            {
                "rank": idx,
                "kind": issue.kind,
                "name": issue.name,
                "unstable_members": [
                    {"name": name, "type": type_} for name, type_ in issue.unstable_members
                ],
                "hints": list(issue.hints),
            }
            for idx, issue in enumerate(summary.issues, start=1)
        ],
    }
    if module_metrics:
        payload["compiler_metrics"] = dict(module_metrics)
    return payload


def render_summary_json(
    summary: StabilitySummary,
    *,
    module: str | None = None,
    module_metrics: Mapping[str, int] | None = None,
) -> str:
    payload = summary_to_dict(summary, module=module, module_metrics=module_metrics)
    return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"


def render_summary_text(
    summary: StabilitySummary,
    *,
    module: str | None = None,
    module_metrics: Mapping[str, int] | None = None,
) -> str:
    lines: list[str] = []
    title = "Compose Stability Analyzer"
    if module:
        title += f" ({module})"
    lines.append(title)
    lines.append("=" * len(title))
    lines.append("")

    lines.append("Unstable classes:")
    class_issues = _class_issues(summary)
    if class_issues:
        for issue in class_issues:
            lines.append(f"   x {issue.name}")
            for name, type_ in issue.unstable_members[:_MAX_MEMBERS_PER_CLASS]:
                lines.append(f"      - {name}: {type_}")
            hidden = len(issue.unstable_members) - _MAX_MEMBERS_PER_CLASS
            if hidden > 0:
                lines.append(f"      ... {hidden} more")
    else:
        lines.append("   No unstable classes found.")
    lines.append("")
    lines.append(f"   Total: {summary.stable_count} stable, {summary.unstable_count} unstable")
    lines.append(
        f"   Stability rate: {_percent(summary.stability_rate)} ({rate_grade(summary.stability_rate)})"
    )
    lines.append("")

    lines.append("Non-skippable composables:")
    composable_issues = _composable_issues(summary)
    if composable_issues:
        for issue in composable_issues[:_MAX_COMPOSABLES_LISTED]:
            lines.append(f"   ! fun {issue.name} - not skippable")
        hidden = len(composable_issues) - _MAX_COMPOSABLES_LISTED
        if hidden > 0:
            lines.append(f"   ... {hidden} more")
    else:
        lines.append("   All composables are skippable.")
    lines.append("")
    lines.append(
        f"   Total: {summary.skippable_count} skippable, {summary.non_skippable_count} not skippable"
    )
    lines.append("")

    if module_metrics:
        lines.append("Compiler metrics:")
        for key, value in module_metrics.items():
            lines.append(f"   {key}: {value}")
        lines.append("")

    lines.append("Recommendations:")
    if not summary.issues:
        lines.append("   Nothing to fix.")
    for idx, issue in enumerate(summary.issues, start=1):
        label = "class" if issue.kind == "unstable_class" else "composable"
        lines.append(f"{idx}. {issue.name} ({label})")
        for hint in issue.hints:
            lines.append(f"   - {hint}")
    lines.append("")
    return "\n".join(lines)


def render_summary_markdown(
    summary: StabilitySummary,
    *,
    module: str | None = None,
    module_metrics: Mapping[str, int] | None = None,
) -> str:
    lines: list[str] = []
    lines.append(f"# Compose stability report{f' ({module})' if module else ''}")
    lines.append("")
    lines.append("## Summary")
    lines.append("")
    lines.append("| Metric | Value |")
    lines.append("|---|---|")
    lines.append(f"| Stable classes | {summary.stable_count} |")
    lines.append(f"| Unstable classes | {summary.unstable_count} |")
    lines.append(
        f"| Stability rate | {_percent(summary.stability_rate)} ({rate_grade(summary.stability_rate)}) |"
    )
    lines.append(f"| Skippable composables | {summary.skippable_count} |")
    lines.append(f"| Non-skippable composables | {summary.non_skippable_count} |")
    lines.append("")

    if module_metrics:
        lines.append("## Compiler metrics")
        lines.append("")
        for key, value in module_metrics.items():
            lines.append(f"- `{key}`: {value}")
        lines.append("")

    lines.append("## Issues")
    lines.append("")
    if not summary.issues:
        lines.append("_None reported._")
        lines.append("")
    for idx, issue in enumerate(summary.issues, start=1):
        label = "Unstable class" if issue.kind == "unstable_class" else "Non-skippable composable"
        lines.append(f"### {idx}. {issue.name}")
        lines.append("")
        lines.append(f"- Kind: {label}")
        if issue.unstable_members:
            members = ", ".join(f"`{name}: {type_}`" for name, type_ in issue.unstable_members)
            lines.append(f"- Unstable members: {members}")
        for hint in issue.hints:
            lines.append(f"- Hint: {hint}")
        lines.append("")
    return "\n".join(lines)
