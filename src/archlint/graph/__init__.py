"""Graph domain: import classification, graph model and builder."""

from archlint.graph.builder import build, build_detailed
from archlint.graph.imports import classify, is_local_import, is_standard_library
from archlint.graph.model import (
    ROOT_DIR,
    Dependency,
    DependencyKind,
    FileNode,
    Graph,
    SourceFile,
    directory_of,
    is_under,
    top_level_dir,
)

__all__ = [
    "ROOT_DIR",
    "Dependency",
    "DependencyKind",
    "FileNode",
    "Graph",
    "SourceFile",
    "build",
    "build_detailed",
    "classify",
    "directory_of",
    "is_local_import",
    "is_standard_library",
    "is_under",
    "top_level_dir",
]
