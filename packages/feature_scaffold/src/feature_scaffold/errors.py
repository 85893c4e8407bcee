from __future__ import annotations

from typing import Any


class ScaffoldError(RuntimeError):
    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.details = details or {}


class InvalidFeatureNameError(ScaffoldError, ValueError):
    pass


class InvalidPackageError(ScaffoldError, ValueError):
    pass


class UnknownVariantError(ScaffoldError, ValueError):
    pass


class ManifestError(ScaffoldError):
    """Template library configuration is missing, malformed or inconsistent."""


class OutputRootError(ScaffoldError):
    pass


class OutputCollisionError(ScaffoldError):
    """Two manifest entries resolved to the same output path in one run."""
