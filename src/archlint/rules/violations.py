"""Violation record and taxonomy shared by every validation pass."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ViolationKind(str, Enum):
    """What kind of architectural rule a violation breaks."""

    PKG_TO_PKG = "PkgToPkg"
    SKIP_LEVEL = "SkipLevel"
    CROSS_ENTRY_POINT = "CrossEntryPoint"
    UNUSED_PACKAGE = "UnusedPackage"
    FORBIDDEN_IMPORT = "ForbiddenImport"
    MISSING_DIRECTORY = "MissingDirectory"
    UNEXPECTED_DIRECTORY = "UnexpectedDirectory"
    EMPTY_DIRECTORY = "EmptyDirectory"
    UNUSED_DIRECTORY = "UnusedDirectory"
    SHARED_EXTERNAL_IMPORT = "SharedExternalImport"
    TEST_FILE_LOCATION = "TestFileLocation"
    WHITEBOX_TEST = "WhiteboxTest"
    INSUFFICIENT_COVERAGE = "InsufficientCoverage"
    TEST_NAMING_CONVENTION = "TestNamingConvention"

    @property
    def label(self) -> str:
        """Human-readable title used in reports."""
        return _LABELS[self]

    @property
    def is_test_related(self) -> bool:
        return self in _TEST_KINDS


_LABELS: dict[ViolationKind, str] = {
    ViolationKind.PKG_TO_PKG: "Forbidden pkg-to-pkg Dependency",
    ViolationKind.SKIP_LEVEL: "Skip-level Import",
    ViolationKind.CROSS_ENTRY_POINT: "Cross-cmd Dependency",
    ViolationKind.UNUSED_PACKAGE: "Unused Package",
    ViolationKind.FORBIDDEN_IMPORT: "Forbidden Import",
    ViolationKind.MISSING_DIRECTORY: "Missing Required Directory",
    ViolationKind.UNEXPECTED_DIRECTORY: "Unexpected Directory",
    ViolationKind.EMPTY_DIRECTORY: "Empty Required Directory",
    ViolationKind.UNUSED_DIRECTORY: "Unused Required Directory",
    ViolationKind.SHARED_EXTERNAL_IMPORT: "Shared External Import",
    ViolationKind.TEST_FILE_LOCATION: "Test File Wrong Location",
    ViolationKind.WHITEBOX_TEST: "Whitebox Test",
    ViolationKind.INSUFFICIENT_COVERAGE: "Insufficient Test Coverage",
    ViolationKind.TEST_NAMING_CONVENTION: "Test Naming Convention",
}

_TEST_KINDS: frozenset[ViolationKind] = frozenset(
    {
        ViolationKind.INSUFFICIENT_COVERAGE,
        ViolationKind.TEST_FILE_LOCATION,
        ViolationKind.TEST_NAMING_CONVENTION,
    }
)


@dataclass(frozen=True)
class Violation:
    """A single rule violation.

    ``line`` is 0 when the finding has no meaningful line number.
    """

    kind: ViolationKind
    file: str
    issue: str
    rule: str
    fix: str
    line: int = 0
