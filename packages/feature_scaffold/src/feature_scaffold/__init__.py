from feature_scaffold.errors import (
    InvalidFeatureNameError,
    InvalidPackageError,
    ManifestError,
    OutputCollisionError,
    OutputRootError,
    ScaffoldError,
    UnknownVariantError,
)
from feature_scaffold.manifest import (
    TemplateEntry,
    TemplateLibrary,
    VariantManifest,
    load_template_library,
)
from feature_scaffold.naming import NameContext, derive_names
from feature_scaffold.substitution import find_tokens, substitute
from feature_scaffold.writer import (
    DEFAULT_BASE_PACKAGE,
    DEFAULT_OUTPUT_DIR,
    FileOutcome,
    ScaffoldResult,
    build_substitutions,
    scaffold_feature,
)

__all__ = [
    "DEFAULT_BASE_PACKAGE",
    "DEFAULT_OUTPUT_DIR",
    "FileOutcome",
    "InvalidFeatureNameError",
    "InvalidPackageError",
    "ManifestError",
    "NameContext",
    "OutputCollisionError",
    "OutputRootError",
    "ScaffoldError",
    "ScaffoldResult",
    "TemplateEntry",
    "TemplateLibrary",
    "UnknownVariantError",
    "VariantManifest",
    "build_substitutions",
    "derive_names",
    "find_tokens",
    "load_template_library",
    "scaffold_feature",
    "substitute",
]
