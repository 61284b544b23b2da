"""Compose every rule pass into one validation run."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from archlint.rules.architecture import check_imports
from archlint.rules.coverage import validate_coverage
from archlint.rules.policy import TestFileLocation
from archlint.rules.reachability import detect_unused_packages
from archlint.rules.shared_imports import detect_shared_external_imports
from archlint.rules.structure import validate_structure
from archlint.rules.test_files import validate_blackbox_tests, validate_test_file_locations
from archlint.rules.test_naming import validate_test_naming

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from archlint.graph.model import Graph
    from archlint.rules.policy import PackageCoverage, Policy
    from archlint.rules.violations import Violation

logger = logging.getLogger(__name__)


def validate(
    graph: Graph,
    policy: Policy,
    coverage: Sequence[PackageCoverage] | None = None,
    project_root: Path | None = None,
) -> list[Violation]:
    """Run every enabled pass and return violations in emission order.

    Structure checks need *project_root*; coverage checks need *coverage*.
    Passes whose input is absent are skipped.
    """
    violations: list[Violation] = []

    if project_root is not None:
        violations.extend(validate_structure(graph, policy, project_root))

    violations.extend(check_imports(graph, policy))

    if policy.detect_unused:
        violations.extend(detect_unused_packages(graph))

    if policy.detect_shared_external_imports:
        violations.extend(detect_shared_external_imports(graph, policy))

    if policy.lint_test_files and policy.test_file_location is not TestFileLocation.ANY:
        violations.extend(validate_test_file_locations(graph, policy))

    if policy.require_blackbox_tests:
        violations.extend(validate_blackbox_tests(graph))

    if policy.coverage_enabled and coverage:
        violations.extend(validate_coverage(coverage, policy))

    if policy.strict_test_naming:
        violations.extend(validate_test_naming(graph, policy))

    logger.debug("Validated %d files: %d violations", len(graph.nodes), len(violations))
    return violations
