"""Graph builder: turn scanned file descriptors into a dependency graph."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from archlint.graph.imports import classify
from archlint.graph.model import FileNode, Graph, directory_of

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from archlint.graph.model import SourceFile

logger = logging.getLogger(__name__)


def _collect_package_dirs(files: Sequence[SourceFile]) -> frozenset[str]:
    """Directories that hold at least one scanned file."""
    return frozenset(directory_of(f.rel_path) for f in files)


def build_detailed(
    files: Sequence[SourceFile],
    module_root: str,
    usage_map: Mapping[str, Mapping[str, Sequence[str]]] | None,
) -> Graph:
    """Build a graph, attaching the symbols each import is used for.

    Symbols come from *usage_map* (``rel_path -> import_path -> symbols``).
    A missing map, file entry or import entry yields an empty symbol list.
    Node order follows *files*; dependency order follows each file's
    import order.
    """
    package_dirs = _collect_package_dirs(files)

    usage_map = usage_map or {}
    nodes: list[FileNode] = []
    for source in files:
        file_usages = usage_map.get(source.rel_path) or {}
        deps = tuple(
            classify(
                import_path,
                module_root,
                used_symbols=tuple(file_usages.get(import_path) or ()),
            )
            for import_path in source.imports
        )
        nodes.append(
            FileNode(
                rel_path=source.rel_path,
                package=source.package,
                base_name=source.base_name,
                is_test=source.is_test,
                dependencies=deps,
            )
        )

    logger.debug(
        "Built graph: %d nodes, %d package directories", len(nodes), len(package_dirs)
    )
    return Graph(nodes=tuple(nodes), local_package_dirs=package_dirs, module=module_root)


def build(files: Sequence[SourceFile], module_root: str) -> Graph:
    """Build a dependency graph from *files* without symbol usage."""
    return build_detailed(files, module_root, None)
