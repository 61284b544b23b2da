"""Infrastructure: configuration loading, Go source scanning, coverage measurement."""

from archlint.infrastructure.config import (
    CONFIG_FILENAME,
    ConfigError,
    ErrorPrompt,
    LintConfig,
    detect_module,
    load_config,
)
from archlint.infrastructure.coverage_runner import (
    CoverageError,
    DirectorySummary,
    overall_coverage,
    run_coverage,
    summarize_by_directory,
)
from archlint.infrastructure.scanner import ScanError, ScanResult, scan

__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "CoverageError",
    "DirectorySummary",
    "ErrorPrompt",
    "LintConfig",
    "ScanError",
    "ScanResult",
    "detect_module",
    "load_config",
    "overall_coverage",
    "run_coverage",
    "scan",
    "summarize_by_directory",
]
