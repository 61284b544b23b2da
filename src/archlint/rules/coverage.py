"""Hierarchical test-coverage thresholds."""

from __future__ import annotations

from typing import TYPE_CHECKING

from archlint.graph.model import ROOT_DIR
from archlint.rules.violations import Violation, ViolationKind

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from archlint.rules.policy import PackageCoverage, Policy


def relative_package_path(package_path: str, module: str) -> str:
    """Strip the module prefix; the module itself maps to ``"."``."""
    if module and package_path == module:
        return ROOT_DIR
    if module and package_path.startswith(module + "/"):
        return package_path[len(module) + 1 :]
    return package_path


def threshold_for_package(
    package_path: str,
    module: str,
    default: float,
    overrides: Mapping[str, float],
) -> float:
    """Return the most specific threshold for *package_path*.

    For ``cmd/foo/bar`` the keys ``cmd/foo/bar``, ``cmd/foo`` and ``cmd``
    are tried in that order before falling back to *default*.
    """
    parts = relative_package_path(package_path, module).split("/")
    for i in range(len(parts), 0, -1):
        prefix = "/".join(parts[:i])
        if prefix in overrides:
            return overrides[prefix]
    return default


def _coverage_violation(result: PackageCoverage, threshold: float) -> Violation:
    pkg = result.package_path
    if not result.has_tests:
        issue = f"Package has no tests (0% coverage, threshold: {threshold:.0f}%)"
        fix = (
            "Add test files for this package:\n"
            f"1. Create {pkg}_test.go files in the package directory\n"
            "2. Write tests for the exported API\n"
            "3. Run 'go test ./...' to verify"
        )
    else:
        issue = f"Package coverage {result.coverage:.1f}% is below threshold {threshold:.0f}%"
        fix = (
            "Improve test coverage for this package:\n"
            f"1. Run 'go test -cover {pkg}' to see current coverage\n"
            f"2. Run 'go test -coverprofile=coverage.out {pkg} && "
            "go tool cover -html=coverage.out' to see detailed coverage\n"
            "3. Add tests for uncovered code paths\n"
            "4. Consider table-driven tests for better coverage"
        )
    return Violation(
        kind=ViolationKind.INSUFFICIENT_COVERAGE,
        file=pkg,
        issue=issue,
        rule=f"Minimum test coverage: {threshold:.0f}% (hierarchical threshold)",
        fix=fix,
    )


def validate_coverage(results: Iterable[PackageCoverage], policy: Policy) -> list[Violation]:
    violations: list[Violation] = []
    for result in results:
        threshold = threshold_for_package(
            result.package_path,
            policy.module,
            policy.coverage_threshold,
            policy.package_thresholds,
        )
        if result.coverage < threshold:
            violations.append(_coverage_violation(result, threshold))
    return violations
