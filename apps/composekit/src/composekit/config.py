from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import yaml
from log_gate import RulesError, ScanRules, default_rules, rules_from_mapping

CONFIG_ENV_VAR = "COMPOSEKIT_CONFIG"
BASE_PACKAGE_ENV_VAR = "COMPOSEKIT_BASE_PACKAGE"
DEFAULT_CONFIG_FILENAME = "composekit.yaml"
DEFAULT_EXTENSIONS: tuple[str, ...] = (".kt",)

_TOP_LEVEL_KEYS = {"base_package", "output_dir", "pattern", "templates_dir", "log_gate", "stability"}
_LOG_GATE_KEYS = {"forbidden", "allowed_path_markers", "extensions"}
_STABILITY_KEYS = {"fail_under"}


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class ProjectConfig:
    """Project-level defaults; CLI flags take precedence over every field."""

    path: Path | None = None
    base_package: str | None = None
    output_dir: Path | None = None
    pattern: str | None = None
    templates_dir: Path | None = None
    scan_rules: ScanRules | None = None
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS
    fail_under: float | None = None

    def rules(self) -> ScanRules:
        return self.scan_rules or default_rules()


def _load_yaml_mapping(path: Path) -> dict[str, Any]:
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Failed to read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML in {path}: {e}") from e

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(raw).__name__}.")
    return raw


def _ensure_no_unknown_keys(*, data: Mapping[str, Any], allowed: set[str], where: str) -> None:
    unknown = set(data) - allowed
    if not unknown:
        return
    unknown_list = ", ".join(sorted(str(k) for k in unknown))
    allowed_list = ", ".join(sorted(allowed))
    raise ConfigError(f"Unknown keys in {where}: {unknown_list}. Allowed: {allowed_list}.")


def _optional_str(data: Mapping[str, Any], key: str, *, where: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"Expected non-empty string for {key} in {where}.")
    return value.strip()


def _optional_dir(data: Mapping[str, Any], key: str, *, base: Path, where: str) -> Path | None:
    value = _optional_str(data, key, where=where)
    if value is None:
        return None
    raw = Path(value)
    return raw if raw.is_absolute() else base / raw


def _optional_mapping(data: Mapping[str, Any], key: str, *, where: str) -> dict[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"Expected a mapping for {key} in {where}.")
    return value


def _parse_extensions(raw: Any, *, where: str) -> tuple[str, ...]:
    if not isinstance(raw, list) or not raw:
        raise ConfigError(f"Expected a non-empty list for log_gate.extensions in {where}.")
    extensions: list[str] = []
    for item in raw:
        if not isinstance(item, str) or not item.strip():
            raise ConfigError(f"Expected non-empty strings in log_gate.extensions in {where}.")
        ext = item.strip()
        extensions.append(ext if ext.startswith(".") else f".{ext}")
    return tuple(extensions)


def _parse_fail_under(raw: Any, *, where: str) -> float | None:
    if raw is None:
        return None
    if isinstance(raw, bool) or not isinstance(raw, (int, float)) or not 0 <= raw <= 100:
        raise ConfigError(f"Expected a percentage between 0 and 100 for stability.fail_under in {where}.")
    return float(raw)


def parse_project_config(data: Mapping[str, Any], *, path: Path) -> ProjectConfig:
    where = str(path)
    _ensure_no_unknown_keys(data=data, allowed=_TOP_LEVEL_KEYS, where=where)
    base = path.parent

    log_gate = _optional_mapping(data, "log_gate", where=where)
    _ensure_no_unknown_keys(data=log_gate, allowed=_LOG_GATE_KEYS, where=f"{where} (log_gate)")
    rule_data = {k: v for k, v in log_gate.items() if k != "extensions"}
    scan_rules: ScanRules | None = None
    if rule_data:
        try:
            scan_rules = rules_from_mapping(rule_data, base=default_rules(), where=f"{where} (log_gate)")
        except RulesError as e:
            raise ConfigError(str(e)) from e
    extensions = (
        _parse_extensions(log_gate["extensions"], where=where)
        if "extensions" in log_gate
        else DEFAULT_EXTENSIONS
    )

    stability = _optional_mapping(data, "stability", where=where)
    _ensure_no_unknown_keys(data=stability, allowed=_STABILITY_KEYS, where=f"{where} (stability)")

    return ProjectConfig(
        path=path,
        base_package=_optional_str(data, "base_package", where=where),
        output_dir=_optional_dir(data, "output_dir", base=base, where=where),
        pattern=_optional_str(data, "pattern", where=where),
        templates_dir=_optional_dir(data, "templates_dir", base=base, where=where),
        scan_rules=scan_rules,
        extensions=extensions,
        fail_under=_parse_fail_under(stability.get("fail_under"), where=where),
    )


def find_config_path(cwd: Path, environ: Mapping[str, str]) -> Path | None:
    explicit = environ.get(CONFIG_ENV_VAR, "").strip()
    if explicit:
        path = Path(explicit)
        path = path if path.is_absolute() else cwd / path
        if not path.is_file():
            raise ConfigError(f"{CONFIG_ENV_VAR} points to a missing file: {path}")
        return path
    candidate = cwd / DEFAULT_CONFIG_FILENAME
    return candidate if candidate.is_file() else None


def load_project_config(
    cwd: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> ProjectConfig:
    """
    Load project defaults from ``composekit.yaml`` and the environment.

    Parameters
    ----------
    cwd:
        Directory searched for ``composekit.yaml``; defaults to the process working directory.
    environ:
        Environment mapping; defaults to ``os.environ``.

    Returns
    -------
    ProjectConfig
        Config file values with environment overrides applied. Relative directories in the file
        are resolved against the file's own directory.

    Raises
    ------
    ConfigError
        If the file named by ``COMPOSEKIT_CONFIG`` is missing, or the config file is invalid.
    """

    cwd = cwd or Path.cwd()
    env = os.environ if environ is None else environ

    path = find_config_path(cwd, env)
    config = parse_project_config(_load_yaml_mapping(path), path=path) if path else ProjectConfig()

    env_package = env.get(BASE_PACKAGE_ENV_VAR, "").strip()
    if env_package:
        config = replace(config, base_package=env_package)
    return config
