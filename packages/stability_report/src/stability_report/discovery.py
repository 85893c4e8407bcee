from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

CLASSES_SUFFIX = "-classes.txt"
COMPOSABLES_SUFFIX = "-composables.txt"
MODULE_METRICS_SUFFIX = "-module.json"

DEFAULT_REPORTS_SUBDIR = Path("build") / "compose-reports"


class ReportsNotFoundError(FileNotFoundError):
    def __init__(self, report_dir: Path) -> None:
        super().__init__(f"No report files found in {report_dir}")
        self.report_dir = report_dir


@dataclass(frozen=True)
class ReportFiles:
    report_dir: Path
    classes: tuple[Path, ...]
    composables: tuple[Path, ...]
    module_metrics: tuple[Path, ...]

    @property
    def text_reports(self) -> list[Path]:
        return [*self.classes, *self.composables]


def report_dir_for_module(project_root: Path, module: str) -> Path:
    """Compose compiler reports live at ``<module>/build/compose-reports`` by convention."""
    return project_root / module.strip(":").replace(":", "/") / DEFAULT_REPORTS_SUBDIR


def gradle_report_command(module: str) -> str:
    return (
        f"./gradlew :{module.strip(':')}:assembleRelease "
        "-PcomposeCompilerReports=true -PcomposeCompilerMetrics=true"
    )


def discover_report_files(report_dir: Path) -> ReportFiles:
    """
    Find compiler report files under ``report_dir`` (recursively, sorted by path).

    Raises
    ------
    ReportsNotFoundError
        When the directory is missing or holds no ``*-classes.txt`` / ``*-composables.txt`` file.
    """

    if not report_dir.is_dir():
        raise ReportsNotFoundError(report_dir)

    files = sorted(p for p in report_dir.rglob("*") if p.is_file())
    found = ReportFiles(
        report_dir=report_dir,
        classes=tuple(p for p in files if p.name.endswith(CLASSES_SUFFIX)),
        composables=tuple(p for p in files if p.name.endswith(COMPOSABLES_SUFFIX)),
        module_metrics=tuple(p for p in files if p.name.endswith(MODULE_METRICS_SUFFIX)),
    )
    if not found.text_reports:
        raise ReportsNotFoundError(report_dir)
    return found


def load_module_metrics(paths: list[Path] | tuple[Path, ...]) -> dict[str, int]:
    """
    Sum the integer counters of compiler ``*-module.json`` files.

    Unreadable or non-object files are skipped; these metrics are supplementary to the text
    reports.
    """

    totals: dict[str, int] = {}
    for path in paths:
        try:
            raw: Any = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            continue
        if not isinstance(raw, dict):
            continue
        for key, value in raw.items():
            if isinstance(value, bool) or not isinstance(value, int):
                continue
            totals[key] = totals.get(key, 0) + value
    return dict(sorted(totals.items()))
