from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml
from jsonschema import Draft202012Validator

from feature_scaffold.errors import ManifestError, UnknownVariantError

MANIFEST_FILENAME = "variants.yaml"
SCHEMA_FILENAME = "variants.schema.json"


def default_templates_dir() -> Path:
    return Path(__file__).resolve().parent / "templates"


@dataclass(frozen=True)
class TemplateEntry:
    template: str
    output: str


@dataclass(frozen=True)
class VariantManifest:
    name: str
    description: str
    files: tuple[TemplateEntry, ...]
    directories: tuple[str, ...] = ()
    next_steps: tuple[str, ...] = ()


@dataclass(frozen=True)
class TemplateLibrary:
    root: Path
    variants: Mapping[str, VariantManifest]

    @property
    def names(self) -> list[str]:
        return sorted(self.variants)

    def get(self, variant: str) -> VariantManifest:
        manifest = self.variants.get(variant)
        if manifest is None:
            known = ", ".join(self.names) or "<none>"
            raise UnknownVariantError(
                f"UnknownVariant: {variant!r} (known variants: {known})",
                code="unknown_variant",
                details={"variant": variant, "known": self.names},
            )
        return manifest

    def template_path(self, entry: TemplateEntry) -> Path:
        return self.root / entry.template


def _load_yaml_mapping(path: Path) -> dict[str, Any]:
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ManifestError(f"Failed to read {path}: {e}", code="manifest_unreadable") from e
    except yaml.YAMLError as e:
        raise ManifestError(f"Failed to parse YAML in {path}: {e}", code="manifest_invalid") from e

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ManifestError(
            f"Expected a YAML mapping in {path}, got {type(raw).__name__}.",
            code="manifest_invalid",
        )
    return raw


def _load_schema(path: Path) -> dict[str, Any]:
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ManifestError(f"Failed to load schema {path}: {e}", code="schema_unreadable") from e
    if not isinstance(raw, dict):
        raise ManifestError(f"Schema must be a JSON object: {path}", code="schema_invalid")
    return raw


def validate_manifest_data(data: Any, schema: dict[str, Any]) -> list[str]:
    """Validate raw manifest data against the JSON schema; return `$.path: message` errors."""
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(data), key=lambda e: str(e.path))
    formatted: list[str] = []
    for error in errors:
        path = "$"
        for part in error.path:
            path += f"[{part!r}]" if isinstance(part, int) else f".{part}"
        formatted.append(f"{path}: {error.message}")
    return formatted


def _parse_variant(name: str, raw: dict[str, Any]) -> VariantManifest:
    files = tuple(TemplateEntry(template=f["template"], output=f["output"]) for f in raw["files"])
    return VariantManifest(
        name=name,
        description=str(raw.get("description", "")),
        files=files,
        directories=tuple(raw.get("directories") or ()),
        next_steps=tuple(raw.get("next_steps") or ()),
    )


def load_template_library(
    templates_dir: Path | None = None,
    *,
    schema_path: Path | None = None,
) -> TemplateLibrary:
    """
    Load the variant manifests shipped with a template library.

    Parameters
    ----------
    templates_dir:
        Directory holding ``variants.yaml`` and the template files it references. Defaults to the
        library bundled with this package.
    schema_path:
        JSON schema used to validate ``variants.yaml``. Defaults to the bundled schema.

    Returns
    -------
    TemplateLibrary
        An immutable variant table.

    Raises
    ------
    ManifestError
        When the manifest is missing, unparsable or fails schema validation.
    """

    root = (templates_dir or default_templates_dir()).resolve()
    manifest_path = root / MANIFEST_FILENAME
    if not manifest_path.is_file():
        raise ManifestError(f"Missing scaffold manifest: {manifest_path}", code="manifest_missing")

    data = _load_yaml_mapping(manifest_path)
    schema = _load_schema(schema_path or (default_templates_dir() / SCHEMA_FILENAME))
    errors = validate_manifest_data(data, schema)
    if errors:
        raise ManifestError(
            f"Invalid scaffold manifest {manifest_path}: " + "; ".join(errors),
            code="manifest_invalid",
            details={"errors": errors},
        )

    variants = {name: _parse_variant(name, raw) for name, raw in data["variants"].items()}
    return TemplateLibrary(root=root, variants=MappingProxyType(variants))
