from __future__ import annotations

import argparse
import subprocess
import sys
from pathlib import Path

from feature_scaffold import (
    DEFAULT_BASE_PACKAGE,
    DEFAULT_OUTPUT_DIR,
    ScaffoldError,
    ScaffoldResult,
    load_template_library,
    scaffold_feature,
)
from log_gate import ScanInputError, ScanResult, scan_files
from stability_report import (
    ReportReadError,
    ReportsNotFoundError,
    discover_report_files,
    gradle_report_command,
    load_module_metrics,
    parse_report_files,
    render_summary_json,
    render_summary_markdown,
    render_summary_text,
    report_dir_for_module,
    summarize,
)

from composekit.config import ConfigError, ProjectConfig, load_project_config

DEFAULT_PATTERN = "mvi"
DEFAULT_MODULE = "app"

_STAGED_FILES_ARGV = ["git", "diff", "--cached", "--name-only", "--diff-filter=ACM"]


def _eprint(*args: object) -> None:
    print(*args, file=sys.stderr)


def _print_scaffold_result(result: ScaffoldResult) -> None:
    names = result.names
    if result.dry_run:
        print(f"Dry run: {names.pascal} ({result.variant}) would generate {len(result.files)} files:")
    else:
        print(f"Feature module generated: {names.pascal} ({result.variant})")
        print("")
        print("Generated files:")
    for outcome in result.written:
        print(f"   {outcome.path}")

    for outcome in result.failed:
        _eprint(f"ERROR: {outcome.path}: {outcome.error}")
    for error in result.directory_errors:
        _eprint(f"ERROR: {error}")
    for outcome in result.written:
        if outcome.unresolved_tokens:
            tokens = ", ".join("{{" + t + "}}" for t in outcome.unresolved_tokens)
            _eprint(f"WARNING: {outcome.path}: unresolved placeholders: {tokens}")

    if result.next_steps and result.ok:
        print("")
        print("Next steps:")
        for idx, step in enumerate(result.next_steps, start=1):
            print(f"   {idx}. {step}")


def cmd_generate_feature(args: argparse.Namespace, config: ProjectConfig) -> int:
    pattern = args.pattern or config.pattern or DEFAULT_PATTERN
    base_package = args.package or config.base_package or DEFAULT_BASE_PACKAGE
    if args.output:
        output_root = Path(args.output)
    else:
        output_root = config.output_dir or Path(DEFAULT_OUTPUT_DIR)
    templates_dir = Path(args.templates) if args.templates else config.templates_dir

    try:
        library = load_template_library(templates_dir) if templates_dir else None
        result = scaffold_feature(
            args.feature_name,
            variant=pattern,
            output_root=output_root,
            base_package=base_package,
            library=library,
            dry_run=bool(args.dry_run),
        )
    except ScaffoldError as exc:
        _eprint(f"ERROR: {exc}")
        return 1

    _print_scaffold_result(result)
    return 0 if result.ok else 1


def cmd_analyze_stability(args: argparse.Namespace, config: ProjectConfig) -> int:
    module = args.module
    if args.reports_dir:
        report_dir = Path(args.reports_dir)
    else:
        report_dir = report_dir_for_module(Path(args.project_root), module)

    try:
        found = discover_report_files(report_dir)
        records = parse_report_files(found.text_reports)
    except ReportsNotFoundError as exc:
        _eprint(f"ERROR: {exc}")
        _eprint(f"Generate them with: {gradle_report_command(module)}")
        return 1
    except ReportReadError as exc:
        _eprint(f"ERROR: {exc}")
        return 1

    summary = summarize(records)
    metrics = load_module_metrics(found.module_metrics)
    if args.format == "json":
        output = render_summary_json(summary, module=module, module_metrics=metrics)
    elif args.format == "markdown":
        output = render_summary_markdown(summary, module=module, module_metrics=metrics)
    else:
        output = render_summary_text(summary, module=module, module_metrics=metrics)
    print(output.rstrip("\n"))

    fail_under = args.fail_under if args.fail_under is not None else config.fail_under
    if fail_under is not None:
        percent = summary.stability_rate * 100
        if percent < fail_under:
            _eprint(f"ERROR: Stability rate {percent:.0f}% is below the required {fail_under:g}%.")
            return 1
    return 0


def _read_paths_from(source: str) -> list[str]:
    if source == "-":
        text = sys.stdin.read()
    else:
        text = Path(source).read_text(encoding="utf-8")
    return [line.strip() for line in text.splitlines() if line.strip()]


def _staged_paths() -> list[str]:
    proc = subprocess.run(_STAGED_FILES_ARGV, capture_output=True, text=True, check=False)
    if proc.returncode != 0:
        msg = proc.stderr.strip() or proc.stdout.strip() or "command failed"
        raise RuntimeError(f"{' '.join(_STAGED_FILES_ARGV)}: {msg}")
    # Staged entries can be gone from the working tree (deleted or renamed after `git add`).
    staged = [line.strip() for line in proc.stdout.splitlines() if line.strip()]
    return [path for path in staged if Path(path).is_file()]


def _normalize_extensions(raw: list[str]) -> tuple[str, ...]:
    return tuple(ext if ext.startswith(".") else f".{ext}" for ext in raw if ext)


def _print_scan_result(result: ScanResult) -> None:
    for path, matches in result.by_path().items():
        print(f"Found in: {path}")
        for match in matches:
            print(f"   Line {match.line_number}: {match.line_text}  [{match.rule_id}]")
        print("")

    print("Commit blocked: remove debug logs before committing.")
    hints = list(dict.fromkeys(m.hint for m in result.matches if m.hint))
    if hints:
        print("")
        print("Suggestions:")
        for hint in hints:
            print(f"   - {hint}")
    print("")
    print("To bypass (emergency only): git commit --no-verify")


def cmd_detect_logs(args: argparse.Namespace, config: ProjectConfig) -> int:
    paths: list[str] = list(args.paths)
    try:
        if args.paths_from:
            paths.extend(_read_paths_from(args.paths_from))
        if args.staged:
            paths.extend(_staged_paths())
    except (OSError, RuntimeError) as exc:
        _eprint(f"ERROR: {exc}")
        return 2

    extensions = _normalize_extensions(args.ext) if args.ext else config.extensions
    candidates = [p for p in dict.fromkeys(paths) if p.endswith(extensions)]
    if not candidates:
        print(f"No files to scan ({', '.join(extensions)}).")
        return 0

    try:
        result = scan_files(candidates, rules=config.rules())
    except ScanInputError as exc:
        _eprint(f"ERROR: {exc}")
        return 2

    if result.blocked:
        _print_scan_result(result)
        return 1

    print(f"No forbidden log statements found ({len(result.scanned)} files scanned).")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="composekit",
        description="Developer tooling for Jetpack Compose Android projects.",
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    gen_p = sub.add_parser(
        "generate-feature",
        help="Generate a feature module from a template variant.",
        epilog="Example: composekit generate-feature UserProfile --pattern mvi --package com.acme",
    )
    gen_p.add_argument("feature_name", help="Feature name, e.g. UserProfile.")
    gen_p.add_argument(
        "--pattern",
        help=f"Template variant (bundled: mvi, mvvm; default: {DEFAULT_PATTERN}).",
    )
    gen_p.add_argument(
        "--package",
        help=f"Base package (env COMPOSEKIT_BASE_PACKAGE; default: {DEFAULT_BASE_PACKAGE}).",
    )
    gen_p.add_argument("--output", help=f"Output directory (default: {DEFAULT_OUTPUT_DIR}/).")
    gen_p.add_argument("--templates", help="Template library directory containing variants.yaml.")
    gen_p.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the files that would be generated without writing anything.",
    )
    gen_p.set_defaults(func=cmd_generate_feature)

    stab_p = sub.add_parser(
        "analyze-stability",
        help="Summarize Compose compiler stability reports for a module.",
    )
    stab_p.add_argument(
        "module",
        nargs="?",
        default=DEFAULT_MODULE,
        help=f"Gradle module (default: {DEFAULT_MODULE}).",
    )
    stab_p.add_argument("--project-root", default=".", help="Android project root (default: .).")
    stab_p.add_argument(
        "--reports-dir",
        help="Report directory (default: <project-root>/<module>/build/compose-reports).",
    )
    stab_p.add_argument(
        "--format",
        choices=["text", "markdown", "json"],
        default="text",
        help="Output format (default: text).",
    )
    stab_p.add_argument(
        "--fail-under",
        type=float,
        help="Exit 1 when the class stability rate (percent) is below this value.",
    )
    stab_p.set_defaults(func=cmd_analyze_stability)

    logs_p = sub.add_parser(
        "detect-logs",
        help="Block commits that contain debug log statements.",
        epilog="Pre-commit hook: composekit detect-logs --staged",
    )
    logs_p.add_argument("paths", nargs="*", help="Files to scan.")
    logs_p.add_argument("--paths-from", help="Read paths (one per line) from a file, or '-' for stdin.")
    logs_p.add_argument(
        "--staged",
        action="store_true",
        help="Scan files staged in git (added, copied or modified).",
    )
    logs_p.add_argument(
        "--ext",
        action="append",
        help="File extension to scan; repeatable (default: .kt).",
    )
    logs_p.set_defaults(func=cmd_detect_logs)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = load_project_config()
    except ConfigError as exc:
        _eprint(f"ERROR: {exc}")
        return 2
    return int(args.func(args, config))


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
