from log_gate.rules import (
    RulesError,
    ScanRule,
    ScanRules,
    default_rules,
    default_rules_path,
    load_rules,
    rules_from_mapping,
)
from log_gate.scanner import (
    ScanInputError,
    ScanMatch,
    ScanResult,
    ScanVerdict,
    is_allowed_path,
    scan_files,
    scan_sources,
    scan_text,
)

__all__ = [
    "RulesError",
    "ScanInputError",
    "ScanMatch",
    "ScanResult",
    "ScanRule",
    "ScanRules",
    "ScanVerdict",
    "default_rules",
    "default_rules_path",
    "is_allowed_path",
    "load_rules",
    "rules_from_mapping",
    "scan_files",
    "scan_sources",
    "scan_text",
]
