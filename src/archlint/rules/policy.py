"""Policy object consumed by the validator, and coverage input records."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping


class TestFileLocation(str, Enum):
    """Where test files are expected to live."""

    __test__ = False

    COLOCATED = "colocated"
    SEPARATE = "separate"
    ANY = "any"


@dataclass(frozen=True)
class Policy:
    """Immutable rule configuration for one validation run.

    Every check is disabled unless switched on here; the configuration
    loader is what decides user-facing defaults. The maps are copied into
    read-only views on construction.
    """

    module: str = ""
    # directory key (exact path or top-level name) -> allowed local prefixes
    directories_import: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    # required directory -> description of its purpose
    required_directories: Mapping[str, str] = field(default_factory=dict)
    allow_other_directories: bool = True
    detect_unused: bool = False
    detect_shared_external_imports: bool = False
    shared_import_exclusions: tuple[str, ...] = ()
    shared_import_exclusion_patterns: tuple[str, ...] = ()
    lint_test_files: bool = False
    test_file_location: TestFileLocation = TestFileLocation.ANY
    require_blackbox_tests: bool = False
    strict_test_naming: bool = False
    flag_missing_tests: bool = False
    coverage_enabled: bool = False
    coverage_threshold: float = 0.0
    package_thresholds: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        imports = {key: tuple(allowed) for key, allowed in self.directories_import.items()}
        object.__setattr__(self, "directories_import", MappingProxyType(imports))
        object.__setattr__(
            self, "required_directories", MappingProxyType(dict(self.required_directories))
        )
        object.__setattr__(
            self, "package_thresholds", MappingProxyType(dict(self.package_thresholds))
        )

    def allowed_imports_for(
        self, file_dir: str, file_top: str
    ) -> tuple[str | None, tuple[str, ...]]:
        """Return ``(rule_key, allowed)`` for a file's directory.

        The exact directory wins over its top-level directory. ``rule_key``
        is None when neither has an entry.
        """
        if file_dir in self.directories_import:
            return file_dir, tuple(self.directories_import[file_dir])
        if file_top in self.directories_import:
            return file_top, tuple(self.directories_import[file_top])
        return None, ()


@dataclass(frozen=True)
class PackageCoverage:
    """Coverage of one package, as measured by an external tool."""

    package_path: str
    coverage: float  # percentage, 0-100
    has_tests: bool
