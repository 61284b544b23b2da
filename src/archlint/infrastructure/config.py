"""Load ``.archlint.yml`` into a :class:`LintConfig` and derive the core Policy.

Two layouts are accepted. A hand-written file carries ``structure``,
``rules`` and ``error_prompt`` at the top level. A preset-generated file
nests them under ``preset`` and keeps user changes under ``overrides``,
which are deep-merged over the preset section on load.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from archlint.rules.policy import Policy, TestFileLocation

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".archlint.yml"
GO_MOD_FILENAME = "go.mod"

DEFAULT_SCAN_PATHS: tuple[str, ...] = ("cmd", "pkg", "internal")
DEFAULT_IGNORE_PATHS: tuple[str, ...] = ("vendor", "testdata")
DEFAULT_DIRECTORIES_IMPORT: dict[str, tuple[str, ...]] = {
    "cmd": ("pkg", "internal"),
    "pkg": ("internal",),
    "internal": ("internal",),
}

SHARED_IMPORTS_WARN = "warn"
SHARED_IMPORTS_ERROR = "error"
VALID_SHARED_IMPORT_MODES: frozenset[str] = frozenset({SHARED_IMPORTS_WARN, SHARED_IMPORTS_ERROR})

_PRESET_SECTIONS = ("structure", "rules", "error_prompt")


class ConfigError(ValueError):
    """Raised when the configuration file or go.mod cannot be used."""


@dataclass(frozen=True)
class ErrorPrompt:
    """Architectural context printed alongside violations."""

    enabled: bool = False
    architectural_goals: str = ""
    principles: tuple[str, ...] = ()
    refactoring_guidance: str = ""
    coverage_guidance: str = ""
    blackbox_testing_guidance: str = ""


@dataclass(frozen=True)
class LintConfig:
    """Fully resolved configuration of one project."""

    module: str
    scan_paths: tuple[str, ...] = DEFAULT_SCAN_PATHS
    ignore_paths: tuple[str, ...] = DEFAULT_IGNORE_PATHS
    required_directories: dict[str, str] = field(default_factory=dict)
    allow_other_directories: bool = True
    directories_import: dict[str, tuple[str, ...]] = field(default_factory=dict)
    detect_unused: bool = False
    detect_shared_external_imports: bool = False
    shared_imports_mode: str = SHARED_IMPORTS_WARN
    shared_import_exclusions: tuple[str, ...] = ()
    shared_import_exclusion_patterns: tuple[str, ...] = ()
    lint_test_files: bool = False
    test_file_location: TestFileLocation = TestFileLocation.COLOCATED
    require_blackbox_tests: bool = False
    strict_test_naming: bool = False
    flag_missing_tests: bool = True
    coverage_enabled: bool = False
    coverage_threshold: float = 0.0
    package_thresholds: dict[str, float] = field(default_factory=dict)
    error_prompt: ErrorPrompt = field(default_factory=ErrorPrompt)
    preset: str | None = None

    def to_policy(self) -> Policy:
        """Build the immutable Policy consumed by the validator."""
        return Policy(
            module=self.module,
            directories_import=dict(self.directories_import),
            required_directories=dict(self.required_directories),
            allow_other_directories=self.allow_other_directories,
            detect_unused=self.detect_unused,
            detect_shared_external_imports=self.detect_shared_external_imports,
            shared_import_exclusions=self.shared_import_exclusions,
            shared_import_exclusion_patterns=self.shared_import_exclusion_patterns,
            lint_test_files=self.lint_test_files,
            test_file_location=self.test_file_location,
            require_blackbox_tests=self.require_blackbox_tests,
            strict_test_naming=self.strict_test_naming,
            flag_missing_tests=self.flag_missing_tests,
            coverage_enabled=self.coverage_enabled,
            coverage_threshold=self.coverage_threshold,
            package_thresholds=dict(self.package_thresholds),
        )


# ---------------------------------------------------------------------------
# go.mod
# ---------------------------------------------------------------------------


def detect_module(project_root: Path) -> str:
    """Read the module path from ``go.mod`` in *project_root*.

    Raises :class:`ConfigError` if the file is missing or has no module line.
    """
    go_mod = project_root / GO_MOD_FILENAME
    try:
        text = go_mod.read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"Cannot detect module: {go_mod} not readable ({exc})"
        raise ConfigError(msg) from exc

    for line in text.splitlines():
        stripped = line.strip()
        if stripped.startswith("module "):
            module = stripped[len("module ") :].strip().strip('"')
            if module:
                return module

    msg = f"Cannot detect module: no module directive in {go_mod}"
    raise ConfigError(msg)


# ---------------------------------------------------------------------------
# Typed accessors
# ---------------------------------------------------------------------------


def _mapping(data: dict[str, Any], key: str, where: str) -> dict[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        msg = f"{where}: '{key}' must be a mapping"
        raise ConfigError(msg)
    return value


def _str_list(data: dict[str, Any], key: str, where: str) -> tuple[str, ...] | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        msg = f"{where}: '{key}' must be a list of strings"
        raise ConfigError(msg)
    return tuple(value)


def _bool(data: dict[str, Any], key: str, where: str, default: bool) -> bool:
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, bool):
        msg = f"{where}: '{key}' must be true or false"
        raise ConfigError(msg)
    return value


def _number(value: Any, key: str, where: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        msg = f"{where}: '{key}' must be a number"
        raise ConfigError(msg)
    return float(value)


def _str(data: dict[str, Any], key: str, where: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        msg = f"{where}: '{key}' must be a string"
        raise ConfigError(msg)
    return value


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return *base* with *override* merged in; nested mappings merge, the rest replaces."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


# ---------------------------------------------------------------------------
# Section parsers
# ---------------------------------------------------------------------------


def _parse_directories_import(rules: dict[str, Any], where: str) -> dict[str, tuple[str, ...]]:
    raw = _mapping(rules, "directories_import", where)
    parsed: dict[str, tuple[str, ...]] = {}
    for key, allowed in raw.items():
        if allowed is None:
            parsed[str(key)] = ()
            continue
        if not isinstance(allowed, list) or not all(isinstance(a, str) for a in allowed):
            msg = f"{where}: directories_import.{key} must be a list of paths"
            raise ConfigError(msg)
        parsed[str(key)] = tuple(allowed)
    return parsed


def _parse_required_directories(structure: dict[str, Any], where: str) -> dict[str, str]:
    raw = _mapping(structure, "required_directories", where)
    return {str(k): "" if v is None else str(v) for k, v in raw.items()}


def _parse_error_prompt(section: dict[str, Any], where: str) -> ErrorPrompt:
    return ErrorPrompt(
        enabled=_bool(section, "enabled", where, False),
        architectural_goals=_str(section, "architectural_goals", where),
        principles=_str_list(section, "principles", where) or (),
        refactoring_guidance=_str(section, "refactoring_guidance", where),
        coverage_guidance=_str(section, "coverage_guidance", where),
        blackbox_testing_guidance=_str(section, "blackbox_testing_guidance", where),
    )


def _resolve_sections(data: dict[str, Any], where: str) -> tuple[dict[str, Any], str | None]:
    """Return the effective ``structure/rules/error_prompt`` body and the preset name."""
    if "preset" not in data:
        return {k: data[k] for k in _PRESET_SECTIONS if k in data}, None

    preset = _mapping(data, "preset", where)
    name = preset.get("name")
    body = {k: preset[k] for k in _PRESET_SECTIONS if k in preset}
    overrides = _mapping(data, "overrides", where)
    unknown = set(overrides) - set(_PRESET_SECTIONS)
    if unknown:
        msg = f"{where}: unknown overrides section(s): {sorted(unknown)}"
        raise ConfigError(msg)
    return deep_merge(body, overrides), str(name) if name else None


def parse_config(data: dict[str, Any], project_root: Path, where: str) -> LintConfig:
    """Build a :class:`LintConfig` from already-parsed YAML data."""
    body, preset_name = _resolve_sections(data, where)
    structure = _mapping(body, "structure", where)
    rules = _mapping(body, "rules", where)
    shared = _mapping(rules, "shared_external_imports", f"{where}: rules")
    tests = _mapping(rules, "test_files", f"{where}: rules")
    cov = _mapping(rules, "test_coverage", f"{where}: rules")

    module = _str(data, "module", where) or detect_module(project_root)

    mode = _str(shared, "mode", where) or SHARED_IMPORTS_WARN
    if mode not in VALID_SHARED_IMPORT_MODES:
        msg = (
            f"{where}: shared_external_imports.mode '{mode}' must be one of "
            f"{sorted(VALID_SHARED_IMPORT_MODES)}"
        )
        raise ConfigError(msg)

    location_raw = _str(tests, "location", where) or TestFileLocation.COLOCATED.value
    try:
        location = TestFileLocation(location_raw)
    except ValueError as exc:
        valid = [loc.value for loc in TestFileLocation]
        msg = f"{where}: test_files.location '{location_raw}' must be one of {valid}"
        raise ConfigError(msg) from exc

    thresholds_raw = _mapping(cov, "package_thresholds", where)
    thresholds = {
        str(k): _number(v, f"package_thresholds.{k}", where) for k, v in thresholds_raw.items()
    }
    threshold = cov.get("threshold")

    return LintConfig(
        module=module,
        scan_paths=_str_list(data, "scan_paths", where) or DEFAULT_SCAN_PATHS,
        ignore_paths=_str_list(data, "ignore_paths", where) or DEFAULT_IGNORE_PATHS,
        required_directories=_parse_required_directories(structure, where),
        allow_other_directories=_bool(structure, "allow_other_directories", where, True),
        directories_import=_parse_directories_import(rules, where),
        detect_unused=_bool(rules, "detect_unused", where, False),
        detect_shared_external_imports=_bool(shared, "detect", where, False),
        shared_imports_mode=mode,
        shared_import_exclusions=_str_list(shared, "exclusions", where) or (),
        shared_import_exclusion_patterns=_str_list(shared, "exclusion_patterns", where) or (),
        lint_test_files=_bool(tests, "lint", where, False),
        test_file_location=location,
        require_blackbox_tests=_bool(tests, "require_blackbox", where, False),
        strict_test_naming=_bool(tests, "strict_naming", where, False),
        flag_missing_tests=_bool(tests, "flag_missing_tests", where, True),
        coverage_enabled=_bool(cov, "enabled", where, False),
        coverage_threshold=0.0 if threshold is None else _number(threshold, "threshold", where),
        package_thresholds=thresholds,
        error_prompt=_parse_error_prompt(_mapping(body, "error_prompt", where), where),
        preset=preset_name,
    )


def default_config(project_root: Path) -> LintConfig:
    """Configuration used when the project has no config file."""
    return LintConfig(
        module=detect_module(project_root),
        directories_import=dict(DEFAULT_DIRECTORIES_IMPORT),
        detect_unused=True,
    )


def load_config(project_root: Path, config_path: Path | None = None) -> LintConfig:
    """Load the project configuration.

    Falls back to :func:`default_config` when *config_path* is not given and
    the project has no ``.archlint.yml``.
    """
    path = config_path if config_path is not None else project_root / CONFIG_FILENAME
    if not path.is_file():
        if config_path is not None:
            msg = f"Config file not found: {path}"
            raise ConfigError(msg)
        logger.debug("No %s in %s, using defaults", CONFIG_FILENAME, project_root)
        return default_config(project_root)

    try:
        with path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        msg = f"{path.name}: invalid YAML ({exc})"
        raise ConfigError(msg) from exc
    except OSError as exc:
        msg = f"Cannot read {path}: {exc}"
        raise ConfigError(msg) from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        msg = f"{path.name} must be a YAML mapping"
        raise ConfigError(msg)

    config = parse_config(data, project_root, path.name)
    logger.debug("Loaded %s (module=%s, preset=%s)", path, config.module, config.preset)
    return config
