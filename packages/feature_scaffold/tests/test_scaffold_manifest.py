from __future__ import annotations

from pathlib import Path

import pytest

from feature_scaffold import ManifestError, UnknownVariantError, load_template_library


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def test_bundled_library_registers_mvi_and_mvvm() -> None:
    library = load_template_library()
    assert library.names == ["mvi", "mvvm"]

    mvi = library.get("mvi")
    assert len(mvi.files) == 7
    for entry in mvi.files:
        assert library.template_path(entry).is_file(), entry.template

    mvvm = library.get("mvvm")
    for entry in mvvm.files:
        assert library.template_path(entry).is_file(), entry.template


def test_unknown_variant_lists_known_variants() -> None:
    library = load_template_library()
    with pytest.raises(UnknownVariantError) as excinfo:
        library.get("viper")
    message = str(excinfo.value)
    assert "UnknownVariant" in message
    assert "mvi" in message and "mvvm" in message
    assert excinfo.value.code == "unknown_variant"


def test_library_variants_are_read_only() -> None:
    library = load_template_library()
    with pytest.raises(TypeError):
        library.variants["extra"] = library.get("mvi")  # type: ignore[index]


def test_custom_library_from_directory(tmp_path: Path) -> None:
    _write(
        tmp_path / "variants.yaml",
        "\n".join(
            [
                "version: 1",
                "variants:",
                "  tiny:",
                "    files:",
                "      - template: tiny/Main.kt.template",
                "        output: '{{FEATURE_LOWER}}/Main.kt'",
                "",
            ]
        ),
    )
    library = load_template_library(tmp_path)
    tiny = library.get("tiny")
    assert tiny.description == ""
    assert tiny.directories == ()
    assert library.template_path(tiny.files[0]) == tmp_path.resolve() / "tiny" / "Main.kt.template"


def test_missing_manifest_is_reported(tmp_path: Path) -> None:
    with pytest.raises(ManifestError) as excinfo:
        load_template_library(tmp_path)
    assert excinfo.value.code == "manifest_missing"


def test_schema_violations_are_reported_with_paths(tmp_path: Path) -> None:
    _write(
        tmp_path / "variants.yaml",
        "version: 1\nvariants:\n  broken:\n    files:\n      - template: x\n",
    )
    with pytest.raises(ManifestError) as excinfo:
        load_template_library(tmp_path)
    assert excinfo.value.code == "manifest_invalid"
    errors = excinfo.value.details["errors"]
    assert any("'output' is a required property" in e for e in errors)
    assert any(e.startswith("$.variants.broken.files[0]") for e in errors)


def test_invalid_yaml_is_reported(tmp_path: Path) -> None:
    _write(tmp_path / "variants.yaml", "version: [1\n")
    with pytest.raises(ManifestError, match="Failed to parse YAML"):
        load_template_library(tmp_path)
