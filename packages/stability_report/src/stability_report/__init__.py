from stability_report.aggregate import (
    HINT_RULES,
    StabilityIssue,
    StabilitySummary,
    hint_for_member,
    rate_grade,
    summarize,
)
from stability_report.discovery import (
    ReportFiles,
    ReportsNotFoundError,
    discover_report_files,
    gradle_report_command,
    load_module_metrics,
    report_dir_for_module,
)
from stability_report.parser import (
    ReportReadError,
    iter_records,
    parse_report,
    parse_report_file,
    parse_report_files,
)
from stability_report.records import ClassMember, ClassRecord, ComposableRecord, ReportRecord
from stability_report.render import (
    render_summary_json,
    render_summary_markdown,
    render_summary_text,
    summary_to_dict,
)

__all__ = [
    "HINT_RULES",
    "ClassMember",
    "ClassRecord",
    "ComposableRecord",
    "ReportFiles",
    "ReportReadError",
    "ReportRecord",
    "ReportsNotFoundError",
    "StabilityIssue",
    "StabilitySummary",
    "discover_report_files",
    "gradle_report_command",
    "hint_for_member",
    "iter_records",
    "load_module_metrics",
    "parse_report",
    "parse_report_file",
    "parse_report_files",
    "rate_grade",
    "render_summary_json",
    "render_summary_markdown",
    "render_summary_text",
    "report_dir_for_module",
    "summarize",
    "summary_to_dict",
]
