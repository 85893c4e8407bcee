from __future__ import annotations

from pathlib import Path

import pytest

from feature_scaffold import (
    InvalidFeatureNameError,
    InvalidPackageError,
    ManifestError,
    OutputCollisionError,
    OutputRootError,
    UnknownVariantError,
    load_template_library,
    scaffold_feature,
)


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def _snapshot(root: Path) -> dict[str, str]:
    return {
        p.relative_to(root).as_posix(): p.read_text(encoding="utf-8")
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


def _library(tmp_path: Path, files: list[tuple[str, str]], bodies: dict[str, str]) -> Path:
    lib = tmp_path / "lib"
    lines = ["version: 1", "variants:", "  custom:", "    files:"]
    for template, output in files:
        lines.append(f"      - template: {template}")
        lines.append(f"        output: '{output}'")
    _write(lib / "variants.yaml", "\n".join(lines) + "\n")
    for name, body in bodies.items():
        _write(lib / name, body)
    return lib


def test_mvi_user_profile_generates_every_manifest_file(tmp_path: Path) -> None:
    out = tmp_path / "feature"
    library = load_template_library()
    result = scaffold_feature("UserProfile", variant="mvi", output_root=out, library=library)

    assert result.ok
    assert len(result.written) == len(library.get("mvi").files)

    pkg_dir = out / "userprofile" / "src" / "main" / "kotlin" / "com" / "example" / "feature" / "userprofile"
    assert (pkg_dir / "UserProfileContract.kt").is_file()
    assert (pkg_dir / "ui" / "UserProfileScreen.kt").is_file()
    assert (pkg_dir / "navigation" / "UserProfileNavigation.kt").is_file()
    assert (out / "userprofile" / "build.gradle.kts").is_file()
    assert (out / "userprofile" / "src" / "androidTest" / "kotlin").is_dir()

    for outcome in result.files:
        text = outcome.path.read_text(encoding="utf-8")
        assert "{{FEATURE_NAME}}" not in text
        assert "{{FEATURE_LOWER}}" not in text
        assert outcome.unresolved_tokens == ()

    contract = (pkg_dir / "UserProfileContract.kt").read_text(encoding="utf-8")
    assert contract.startswith("package com.example.feature.userprofile\n")
    assert "data class UserProfileState(" in contract

    navigation = (pkg_dir / "navigation" / "UserProfileNavigation.kt").read_text(encoding="utf-8")
    assert 'const val USER_PROFILE_ROUTE = "userprofile"' in navigation
    assert "fun NavGraphBuilder.userProfileScreen(" in navigation

    assert any('include(":feature:userprofile")' in step for step in result.next_steps)


def test_snake_case_name_yields_kotlin_identifiers(tmp_path: Path) -> None:
    result = scaffold_feature("order_history", variant="mvi", output_root=tmp_path)
    assert result.ok

    pkg_dir = tmp_path / "orderhistory" / "src" / "main" / "kotlin" / "com" / "example" / "feature" / "orderhistory"
    viewmodel = (pkg_dir / "OrderHistoryViewModel.kt").read_text(encoding="utf-8")
    assert "class OrderHistoryViewModel @Inject constructor(" in viewmodel
    assert "order_history" not in viewmodel

    navigation = (pkg_dir / "navigation" / "OrderHistoryNavigation.kt").read_text(encoding="utf-8")
    assert "fun NavController.navigateToOrderHistory() {" in navigation
    assert "fun NavGraphBuilder.orderHistoryScreen(" in navigation
    assert 'const val ORDER_HISTORY_ROUTE = "orderhistory"' in navigation

    gradle = (tmp_path / "orderhistory" / "build.gradle.kts").read_text(encoding="utf-8")
    assert 'resourcePrefix = "order_history_"' in gradle
    assert any("OrderHistoryViewModel" in step for step in result.next_steps)


def test_custom_template_sees_every_token(tmp_path: Path) -> None:
    lib = _library(
        tmp_path,
        files=[("all.template", "{{FEATURE_LOWER}}/All.txt")],
        bodies={
            "all.template": (
                "{{FEATURE_NAME}} {{FEATURE_PASCAL}} {{FEATURE_SNAKE}} {{FEATURE_UPPER}} "
                "{{FEATURE_NAME_CAMEL}} {{BASE_PACKAGE}} {{FULL_PACKAGE}} {{PACKAGE_PATH}} {{DATA_TYPE}}\n"
            )
        },
    )
    result = scaffold_feature(
        "order_history",
        variant="custom",
        output_root=tmp_path / "out",
        base_package="io.acme",
        library=load_template_library(lib),
    )
    assert result.ok
    assert result.files[0].path.read_text(encoding="utf-8") == (
        "order_history OrderHistory order_history ORDER_HISTORY orderHistory io.acme "
        "io.acme.feature.orderhistory io/acme/feature/orderhistory Any\n"
    )


def test_mvvm_uses_custom_base_package(tmp_path: Path) -> None:
    result = scaffold_feature(
        "Checkout", variant="mvvm", output_root=tmp_path, base_package="io.acme.shop"
    )
    assert result.ok
    view_model = (
        tmp_path
        / "checkout/src/main/kotlin/io/acme/shop/feature/checkout/CheckoutViewModel.kt"
    )
    assert view_model.read_text(encoding="utf-8").startswith("package io.acme.shop.feature.checkout\n")


def test_scaffold_is_idempotent(tmp_path: Path) -> None:
    first = tmp_path / "first"
    second = tmp_path / "second"
    scaffold_feature("UserProfile", variant="mvi", output_root=first)
    scaffold_feature("UserProfile", variant="mvi", output_root=second)
    assert _snapshot(first) == _snapshot(second)

    # Re-running into the same directory overwrites instead of duplicating.
    scaffold_feature("UserProfile", variant="mvi", output_root=first)
    assert _snapshot(first) == _snapshot(second)


def test_validation_errors_happen_before_any_io(tmp_path: Path) -> None:
    out = tmp_path / "never"
    with pytest.raises(InvalidFeatureNameError):
        scaffold_feature("", variant="mvi", output_root=out)
    with pytest.raises(UnknownVariantError):
        scaffold_feature("Cart", variant="viper", output_root=out)
    with pytest.raises(InvalidPackageError):
        scaffold_feature("Cart", variant="mvi", output_root=out, base_package="com..example")
    assert not out.exists()


def test_missing_template_fails_only_that_file(tmp_path: Path) -> None:
    lib = _library(
        tmp_path,
        files=[
            ("a.template", "{{FEATURE_LOWER}}/A.kt"),
            ("missing.template", "{{FEATURE_LOWER}}/B.kt"),
            ("c.template", "{{FEATURE_LOWER}}/C.kt"),
        ],
        bodies={"a.template": "A {{FEATURE_NAME}}\n", "c.template": "C {{FEATURE_NAME}}\n"},
    )
    out = tmp_path / "out"
    result = scaffold_feature("Cart", variant="custom", output_root=out, library=load_template_library(lib))

    assert not result.ok
    assert [f.path.name for f in result.written] == ["A.kt", "C.kt"]
    assert len(result.failed) == 1
    assert "Template not found" in (result.failed[0].error or "")
    assert (out / "cart" / "C.kt").read_text(encoding="utf-8") == "C Cart\n"


def test_colliding_output_paths_abort_the_run(tmp_path: Path) -> None:
    lib = _library(
        tmp_path,
        files=[
            ("a.template", "{{FEATURE_LOWER}}/Same.kt"),
            ("b.template", "{{FEATURE_LOWER}}/Same.kt"),
        ],
        bodies={"a.template": "a", "b.template": "b"},
    )
    out = tmp_path / "out"
    with pytest.raises(OutputCollisionError) as excinfo:
        scaffold_feature("Cart", variant="custom", output_root=out, library=load_template_library(lib))
    assert excinfo.value.details["templates"] == ["a.template", "b.template"]
    assert not out.exists()


def test_output_path_escaping_root_is_rejected(tmp_path: Path) -> None:
    lib = _library(
        tmp_path,
        files=[("a.template", "../{{FEATURE_LOWER}}.kt")],
        bodies={"a.template": "a"},
    )
    with pytest.raises(ManifestError):
        scaffold_feature(
            "Cart", variant="custom", output_root=tmp_path / "out", library=load_template_library(lib)
        )


def test_output_root_that_is_a_file_fails_whole_run(tmp_path: Path) -> None:
    blocker = tmp_path / "feature"
    blocker.write_text("not a directory", encoding="utf-8")
    with pytest.raises(OutputRootError):
        scaffold_feature("Cart", variant="mvi", output_root=blocker)


def test_dry_run_writes_nothing(tmp_path: Path) -> None:
    out = tmp_path / "out"
    result = scaffold_feature("Cart", variant="mvi", output_root=out, dry_run=True)
    assert result.dry_run
    assert len(result.files) == 7
    assert not out.exists()


def test_unresolved_tokens_are_reported(tmp_path: Path) -> None:
    lib = _library(
        tmp_path,
        files=[("a.template", "{{FEATURE_LOWER}}/A.kt")],
        bodies={"a.template": "{{FEATURE_NAME}} {{UNKNOWN_TOKEN}}\n"},
    )
    result = scaffold_feature(
        "Cart", variant="custom", output_root=tmp_path / "out", library=load_template_library(lib)
    )
    assert result.ok
    assert result.files[0].unresolved_tokens == ("UNKNOWN_TOKEN",)
    assert result.files[0].path.read_text(encoding="utf-8") == "Cart {{UNKNOWN_TOKEN}}\n"
