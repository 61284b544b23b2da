"""Unused-package detection via reachability from entry-point files."""

from __future__ import annotations

import logging
from collections import deque
from typing import TYPE_CHECKING

from archlint.graph.model import top_level_dir
from archlint.rules.architecture import ENTRY_POINT_DIR, LIBRARY_DIR
from archlint.rules.violations import Violation, ViolationKind

if TYPE_CHECKING:
    from archlint.graph.model import Graph

logger = logging.getLogger(__name__)


def reachable_paths(graph: Graph, entry_dir: str = ENTRY_POINT_DIR) -> set[str]:
    """Return every local path transitively imported from *entry_dir* files.

    Seeds are the direct local imports of files under *entry_dir*. Expanding
    a reached path ``p`` pulls in the imports of every node whose directory
    starts with ``p``, so reaching a parent package also reaches the
    packages nested below it. The reached set doubles as the visited set,
    so import cycles terminate.
    """
    reached: set[str] = set()
    frontier: deque[str] = deque()

    def _visit(local_path: str) -> None:
        if local_path not in reached:
            reached.add(local_path)
            frontier.append(local_path)

    for node in graph.nodes:
        if top_level_dir(node.directory) != entry_dir:
            continue
        for dep in node.local_dependencies:
            if dep.local_path is not None:
                _visit(dep.local_path)

    while frontier:
        current = frontier.popleft()
        for node in graph.nodes:
            if not node.directory.startswith(current):
                continue
            for dep in node.local_dependencies:
                if dep.local_path is not None:
                    _visit(dep.local_path)

    return reached


def detect_unused_packages(graph: Graph) -> list[Violation]:
    """Flag library directories that no entry point reaches."""
    reached = reachable_paths(graph)

    library_dirs: list[str] = []
    seen: set[str] = set()
    for node in graph.nodes:
        file_dir = node.directory
        if top_level_dir(file_dir) == LIBRARY_DIR and file_dir not in seen:
            seen.add(file_dir)
            library_dirs.append(file_dir)

    violations = [
        Violation(
            kind=ViolationKind.UNUSED_PACKAGE,
            file=package_dir,
            issue=(
                f"Package {package_dir} not imported by any {ENTRY_POINT_DIR}/ package"
            ),
            rule=f"All packages should be transitively imported from {ENTRY_POINT_DIR}/",
            fix=f"Remove package or add import from {ENTRY_POINT_DIR}/",
        )
        for package_dir in library_dirs
        if package_dir not in reached
    ]
    logger.debug(
        "Reachability: %d paths reached, %d unused packages", len(reached), len(violations)
    )
    return violations
