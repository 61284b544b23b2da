"""Required-directory and top-level layout validation."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

from archlint.graph.model import is_under
from archlint.rules.architecture import TEST_FILE_SUFFIX
from archlint.rules.violations import Violation, ViolationKind

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from archlint.graph.model import Graph
    from archlint.rules.policy import Policy

logger = logging.getLogger(__name__)

SOURCE_SUFFIX = ".go"

# Top-level directories never reported as unexpected.
ALWAYS_SKIPPED_DIRS: frozenset[str] = frozenset({"vendor", "testdata"})


def contains_source_files(directory: Path) -> bool:
    """Return True if *directory* holds a non-test source file anywhere below it.

    Unreadable subdirectories are skipped.
    """
    for _dirpath, _dirnames, filenames in os.walk(directory, onerror=_log_walk_error):
        for name in filenames:
            if name.endswith(SOURCE_SUFFIX) and not name.endswith(TEST_FILE_SUFFIX):
                return True
    return False


def _log_walk_error(exc: OSError) -> None:
    logger.debug("Skipping unreadable path during structure check: %s", exc)


def _check_required_directory(
    project_root: Path, dir_path: str, description: str
) -> list[Violation]:
    full_path = project_root / dir_path
    purpose = f"Directory purpose: {description}"

    try:
        exists = full_path.exists()
        is_dir = full_path.is_dir()
    except OSError as exc:
        logger.debug("Cannot stat %s: %s", full_path, exc)
        return []

    if not exists:
        return [
            Violation(
                kind=ViolationKind.MISSING_DIRECTORY,
                file=dir_path,
                issue=f"Required directory '{dir_path}' does not exist",
                rule=purpose,
                fix=f"Create the directory: mkdir -p {dir_path}",
            )
        ]
    if not is_dir:
        return [
            Violation(
                kind=ViolationKind.MISSING_DIRECTORY,
                file=dir_path,
                issue=f"'{dir_path}' exists but is not a directory",
                rule=purpose,
                fix=(
                    f"Remove the file and create directory: rm {dir_path} && mkdir -p {dir_path}"
                ),
            )
        ]
    if not contains_source_files(full_path):
        return [
            Violation(
                kind=ViolationKind.EMPTY_DIRECTORY,
                file=dir_path,
                issue=(
                    f"Required directory '{dir_path}' exists but contains no "
                    f"{SOURCE_SUFFIX} files"
                ),
                rule=purpose,
                fix=f"Add code to {dir_path} or remove it from required_directories",
            )
        ]
    return []


def detect_unused_required_directories(
    graph: Graph, required: Mapping[str, str]
) -> list[Violation]:
    """Flag required directories under which no graph node lives."""
    violations: list[Violation] = []
    for dir_path, description in required.items():
        if any(is_under(node.directory, dir_path) for node in graph.nodes):
            continue
        violations.append(
            Violation(
                kind=ViolationKind.UNUSED_DIRECTORY,
                file=dir_path,
                issue=f"Required directory '{dir_path}' contains no scanned {SOURCE_SUFFIX} files",
                rule=f"Directory purpose: {description}",
                fix=f"Add code to {dir_path} or remove it from required_directories",
            )
        )
    return violations


def detect_unexpected_directories(project_root: Path, policy: Policy) -> list[Violation]:
    """Flag top-level directories that are neither required nor parents of one.

    Hidden directories and conventional exclusions are skipped. If the
    project root cannot be listed, nothing is reported.
    """
    try:
        entries = sorted(project_root.iterdir())
    except OSError as exc:
        logger.debug("Cannot list project root %s: %s", project_root, exc)
        return []

    required = policy.required_directories
    violations: list[Violation] = []
    for entry in entries:
        try:
            if not entry.is_dir():
                continue
        except OSError:
            continue
        name = entry.name
        if name.startswith(".") or name in ALWAYS_SKIPPED_DIRS:
            continue
        if name in required or any(req.startswith(name + "/") for req in required):
            continue
        violations.append(
            Violation(
                kind=ViolationKind.UNEXPECTED_DIRECTORY,
                file=name,
                issue=f"Directory '{name}' is not in the required structure",
                rule=(
                    "allow_other_directories is set to false - "
                    "only required directories are allowed"
                ),
                fix="Remove directory or add to required_directories in .archlint.yml",
            )
        )
    return violations


def validate_structure(graph: Graph, policy: Policy, project_root: Path) -> list[Violation]:
    """Check required directories on disk and, in strict mode, the top-level layout."""
    if not policy.required_directories:
        return []

    violations: list[Violation] = []
    present: dict[str, str] = {}
    for dir_path, description in policy.required_directories.items():
        found = _check_required_directory(project_root, dir_path, description)
        violations.extend(found)
        if not any(v.kind is ViolationKind.MISSING_DIRECTORY for v in found):
            present[dir_path] = description

    violations.extend(detect_unused_required_directories(graph, present))

    if not policy.allow_other_directories:
        violations.extend(detect_unexpected_directories(project_root, policy))

    return violations
