from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path

from feature_scaffold.errors import (
    InvalidPackageError,
    ManifestError,
    OutputCollisionError,
    OutputRootError,
)
from feature_scaffold.manifest import TemplateEntry, TemplateLibrary, load_template_library
from feature_scaffold.naming import NameContext, derive_names
from feature_scaffold.substitution import find_tokens, substitute

DEFAULT_BASE_PACKAGE = "com.example"
DEFAULT_OUTPUT_DIR = "feature"
DEFAULT_DATA_TYPE = "Any"

_PACKAGE_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")


@dataclass(frozen=True)
class FileOutcome:
    template: str
    path: Path
    ok: bool
    error: str | None = None
    unresolved_tokens: tuple[str, ...] = ()


@dataclass(frozen=True)
class ScaffoldResult:
    names: NameContext
    variant: str
    output_root: Path
    files: tuple[FileOutcome, ...]
    directories: tuple[Path, ...] = ()
    next_steps: tuple[str, ...] = ()
    directory_errors: tuple[str, ...] = ()
    dry_run: bool = False

    @property
    def written(self) -> list[FileOutcome]:
        return [f for f in self.files if f.ok]

    @property
    def failed(self) -> list[FileOutcome]:
        return [f for f in self.files if not f.ok]

    @property
    def ok(self) -> bool:
        return not self.failed and not self.directory_errors


@dataclass(frozen=True)
class _PlannedFile:
    entry: TemplateEntry
    source: Path
    target: Path
    substitutions: dict[str, str]


def validate_base_package(base_package: str) -> None:
    if _PACKAGE_RE.match(base_package) is None:
        raise InvalidPackageError(
            f"Package must be a dotted identifier path (e.g. com.example): {base_package!r}",
            code="invalid_package",
            details={"package": base_package},
        )


def build_substitutions(
    names: NameContext,
    *,
    base_package: str,
    data_type: str = DEFAULT_DATA_TYPE,
) -> dict[str, str]:
    """Token table shared by output path patterns and template bodies."""
    full_package = f"{base_package}.feature.{names.lower}"
    return {
        "FEATURE_NAME": names.original,
        "FEATURE_PASCAL": names.pascal,
        "FEATURE_LOWER": names.lower,
        "FEATURE_UPPER": names.upper,
        "FEATURE_SNAKE": names.snake,
        "FEATURE_NAME_CAMEL": names.camel,
        "BASE_PACKAGE": base_package,
        "PACKAGE": full_package,
        "FULL_PACKAGE": full_package,
        "PACKAGE_PATH": full_package.replace(".", "/"),
        "DATA_TYPE": data_type,
    }


def _resolve_under(root: Path, pattern: str, substitutions: dict[str, str]) -> Path:
    rel = substitute(pattern, substitutions).replace("\\", "/")
    target = (root / rel).resolve()
    try:
        target.relative_to(root)
    except ValueError as e:
        raise ManifestError(
            f"Output path escapes the output root: {pattern!r} -> {target}",
            code="output_outside_root",
            details={"pattern": pattern},
        ) from e
    return target


def _plan(
    library: TemplateLibrary,
    variant: str,
    root: Path,
    substitutions: dict[str, str],
) -> tuple[list[_PlannedFile], list[Path]]:
    manifest = library.get(variant)
    planned: list[_PlannedFile] = []
    seen: dict[Path, str] = {}
    for entry in manifest.files:
        target = _resolve_under(root, entry.output, substitutions)
        previous = seen.get(target)
        if previous is not None:
            raise OutputCollisionError(
                f"Manifest '{variant}' writes {target} twice ({previous} and {entry.template}).",
                code="output_collision",
                details={"path": str(target), "templates": [previous, entry.template]},
            )
        seen[target] = entry.template
        planned.append(
            _PlannedFile(
                entry=entry,
                source=library.template_path(entry),
                target=target,
                substitutions=substitutions,
            )
        )
    directories = [_resolve_under(root, d, substitutions) for d in manifest.directories]
    return planned, directories


def _prepare_output_root(root: Path) -> None:
    try:
        root.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise OutputRootError(
            f"Cannot create output root {root}: {e}",
            code="output_root_unwritable",
            details={"path": str(root)},
        ) from e
    if not root.is_dir():
        raise OutputRootError(f"Output root is not a directory: {root}", code="output_root_not_dir")
    if not os.access(root, os.W_OK | os.X_OK):
        raise OutputRootError(f"Output root is not writable: {root}", code="output_root_unwritable")


def _write_one(item: _PlannedFile) -> FileOutcome:
    template = item.entry.template
    if not item.source.is_file():
        return FileOutcome(template, item.target, ok=False, error=f"Template not found: {item.source}")
    try:
        text = item.source.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        return FileOutcome(template, item.target, ok=False, error=f"Failed reading template {item.source}: {e}")

    rendered = substitute(text, item.substitutions)
    try:
        item.target.parent.mkdir(parents=True, exist_ok=True)
        with item.target.open("w", encoding="utf-8", newline="\n") as fh:
            fh.write(rendered)
    except OSError as e:
        return FileOutcome(template, item.target, ok=False, error=f"Failed writing {item.target}: {e}")
    return FileOutcome(template, item.target, ok=True, unresolved_tokens=tuple(find_tokens(rendered)))


def scaffold_feature(
    feature_name: str,
    *,
    variant: str,
    output_root: Path,
    base_package: str = DEFAULT_BASE_PACKAGE,
    library: TemplateLibrary | None = None,
    dry_run: bool = False,
) -> ScaffoldResult:
    """
    Expand a variant's templates for one feature into ``output_root``.

    Validation (feature name, package, variant, output path collisions) happens before any file
    is touched. Afterwards each file is written independently: a failure is recorded on its
    ``FileOutcome`` and the remaining files are still written. Files that were already written are
    kept. Running again with the same inputs overwrites the same files.

    Parameters
    ----------
    feature_name:
        Feature name, conventionally PascalCase.
    variant:
        Registered variant name (``mvi``, ``mvvm``).
    output_root:
        Directory that receives the generated module directory.
    base_package:
        Base package; the generated package is ``<base_package>.feature.<lower name>``.
    library:
        Template library. Defaults to the bundled one.
    dry_run:
        Resolve every path but write nothing.

    Returns
    -------
    ScaffoldResult
        Per-file outcomes, in manifest order.
    """

    names = derive_names(feature_name)
    validate_base_package(base_package)
    lib = library or load_template_library()
    manifest = lib.get(variant)

    root = Path(output_root).resolve()
    substitutions = build_substitutions(names, base_package=base_package)
    planned, directories = _plan(lib, variant, root, substitutions)
    next_steps = tuple(substitute(step, substitutions) for step in manifest.next_steps)

    if dry_run:
        return ScaffoldResult(
            names=names,
            variant=variant,
            output_root=root,
            files=tuple(FileOutcome(p.entry.template, p.target, ok=True) for p in planned),
            directories=tuple(directories),
            next_steps=next_steps,
            dry_run=True,
        )

    _prepare_output_root(root)
    outcomes = tuple(_write_one(item) for item in planned)

    created_dirs: list[Path] = []
    directory_errors: list[str] = []
    for directory in directories:
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            directory_errors.append(f"Failed creating {directory}: {e}")
            continue
        created_dirs.append(directory)

    return ScaffoldResult(
        names=names,
        variant=variant,
        output_root=root,
        files=outcomes,
        directories=tuple(created_dirs),
        next_steps=next_steps,
        directory_errors=tuple(directory_errors),
    )
