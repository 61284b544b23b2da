"""Measure per-package test coverage by running ``go test -cover``."""

from __future__ import annotations

import logging
import os
import re
import shutil
import subprocess
from dataclasses import dataclass
from typing import TYPE_CHECKING

from archlint.graph.model import ROOT_DIR, is_under
from archlint.rules.coverage import relative_package_path
from archlint.rules.policy import PackageCoverage

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from pathlib import Path

    from rich.table import Table

logger = logging.getLogger(__name__)

_COVERAGE_RE = re.compile(r"coverage:\s+([0-9]+(?:\.[0-9]+)?)%")
_NO_TEST_FILES = "[no test files]"

# Seconds allowed for a single package's ``go test`` run.
DEFAULT_TIMEOUT = 300


class CoverageError(Exception):
    """Raised when coverage cannot be measured at all (e.g. no Go toolchain)."""


@dataclass(frozen=True)
class DirectorySummary:
    """Aggregated coverage of the packages under one scan path."""

    directory: str
    packages: int
    packages_with_tests: int
    average_coverage: float


def parse_coverage_output(output: str) -> tuple[float, bool]:
    """Return ``(percent, has_tests)`` from ``go test -cover`` output."""
    if _NO_TEST_FILES in output or "no test files" in output:
        return 0.0, False
    match = _COVERAGE_RE.search(output)
    if match is None:
        return 0.0, False
    return float(match.group(1)), True


def find_packages(project_root: Path, module: str, scan_paths: Iterable[str]) -> list[str]:
    """Import paths of every directory holding ``.go`` files under *scan_paths*."""
    packages: set[str] = set()
    for scan_path in scan_paths:
        start = project_root / scan_path
        if not start.is_dir():
            continue
        for dirpath, dirnames, filenames in os.walk(start):
            dirnames[:] = [d for d in dirnames if d != "vendor" and not d.startswith(".")]
            if not any(name.endswith(".go") for name in filenames):
                continue
            rel = os.path.relpath(dirpath, project_root).replace(os.sep, "/")
            if rel == ROOT_DIR:
                packages.add(module)
            else:
                packages.add(f"{module}/{rel}" if module else rel)
    return sorted(packages)


def _run_package(project_root: Path, package: str, timeout: int) -> PackageCoverage:
    try:
        result = subprocess.run(  # noqa: S603
            ["go", "test", "-cover", package],  # noqa: S607
            cwd=str(project_root),
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        logger.warning("go test timed out for %s", package)
        return PackageCoverage(package_path=package, coverage=0.0, has_tests=False)
    except OSError as exc:
        logger.warning("Cannot run go test for %s: %s", package, exc)
        return PackageCoverage(package_path=package, coverage=0.0, has_tests=False)

    percent, has_tests = parse_coverage_output(result.stdout + result.stderr)
    if result.returncode != 0 and has_tests:
        logger.warning("go test failed for %s", package)
    return PackageCoverage(package_path=package, coverage=percent, has_tests=has_tests)


def run_coverage(
    project_root: Path,
    module: str,
    scan_paths: Iterable[str],
    *,
    timeout: int = DEFAULT_TIMEOUT,
) -> list[PackageCoverage]:
    """Run ``go test -cover`` for each package and collect the results.

    Raises :class:`CoverageError` if the ``go`` binary is not available.
    """
    if shutil.which("go") is None:
        msg = "go binary not found on PATH"
        raise CoverageError(msg)

    packages = find_packages(project_root, module, scan_paths)
    logger.debug("Measuring coverage for %d packages", len(packages))
    return [_run_package(project_root, pkg, timeout) for pkg in packages]


def summarize_by_directory(
    results: Sequence[PackageCoverage], module: str, scan_paths: Iterable[str]
) -> list[DirectorySummary]:
    """Average coverage per scan path, in scan-path order."""
    summaries: list[DirectorySummary] = []
    for scan_path in scan_paths:
        members = [
            r for r in results if is_under(relative_package_path(r.package_path, module), scan_path)
        ]
        if not members:
            continue
        summaries.append(
            DirectorySummary(
                directory=scan_path,
                packages=len(members),
                packages_with_tests=sum(1 for r in members if r.has_tests),
                average_coverage=sum(r.coverage for r in members) / len(members),
            )
        )
    return summaries


def overall_coverage(results: Sequence[PackageCoverage]) -> float:
    """Unweighted mean coverage across packages; 0 when there are none."""
    if not results:
        return 0.0
    return sum(r.coverage for r in results) / len(results)


def summary_table(summaries: Sequence[DirectorySummary], overall: float) -> Table:
    """Rich table of per-directory coverage with an overall row."""
    from rich.table import Table

    table = Table(title="Test Coverage", show_header=True, box=None, padding=(0, 1))
    table.add_column("directory", style="cyan")
    table.add_column("packages", justify="right")
    table.add_column("with tests", justify="right")
    table.add_column("coverage", justify="right")
    for s in summaries:
        table.add_row(
            s.directory,
            str(s.packages),
            str(s.packages_with_tests),
            f"{s.average_coverage:.1f}%",
        )
    table.add_row("[bold]Overall[/bold]", "", "", f"[bold]{overall:.1f}%[/bold]")
    return table
