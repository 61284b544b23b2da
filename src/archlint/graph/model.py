"""Dependency graph model: file descriptors, classified dependencies, graph."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from enum import Enum

# Directory of a file at the project root, and the local path of an
# import that names the module root itself.
ROOT_DIR = "."


class DependencyKind(str, Enum):
    """Classification of a single import."""

    LOCAL = "local"
    EXTERNAL = "external"
    STDLIB = "stdlib"


@dataclass(frozen=True)
class SourceFile:
    """A scanned source file, as handed over by the scanner.

    ``base_name`` is the file name without extension and without the
    trailing test suffix, so ``foo.go`` and ``foo_test.go`` share ``foo``.
    """

    rel_path: str
    package: str
    base_name: str
    is_test: bool = False
    imports: tuple[str, ...] = ()


@dataclass(frozen=True)
class Dependency:
    """One import of a file, classified against the module root.

    ``local_path`` is set iff ``kind`` is LOCAL.
    """

    import_path: str
    kind: DependencyKind
    local_path: str | None = None
    used_symbols: tuple[str, ...] = ()

    @property
    def is_local(self) -> bool:
        return self.kind is DependencyKind.LOCAL

    @property
    def is_stdlib(self) -> bool:
        """True for non-local imports whose root segment is a bare word."""
        if self.is_local:
            return False
        return is_standard_library(self.import_path)

    @property
    def category(self) -> DependencyKind:
        """LOCAL, STDLIB or EXTERNAL, refining external imports."""
        if self.is_local:
            return DependencyKind.LOCAL
        return DependencyKind.STDLIB if self.is_stdlib else DependencyKind.EXTERNAL


@dataclass(frozen=True)
class FileNode:
    """A file in the dependency graph with its classified imports."""

    rel_path: str
    package: str
    base_name: str
    is_test: bool
    dependencies: tuple[Dependency, ...] = ()

    @property
    def directory(self) -> str:
        return directory_of(self.rel_path)

    @property
    def local_dependencies(self) -> tuple[Dependency, ...]:
        return tuple(dep for dep in self.dependencies if dep.is_local)


@dataclass(frozen=True)
class Graph:
    """Dependency graph: one node per scanned file, in scan order."""

    nodes: tuple[FileNode, ...] = ()
    local_package_dirs: frozenset[str] = field(default_factory=frozenset)
    module: str = ""

    def is_local_package(self, local_path: str) -> bool:
        """Return True if *local_path* is a directory holding a scanned file."""
        return local_path in self.local_package_dirs


def is_standard_library(import_path: str) -> bool:
    """Heuristic stdlib check: the first path segment contains no dot.

    Standard-library roots are bare words (``fmt``, ``net/http``) while
    third-party roots are domains (``github.com/...``, ``gopkg.in/...``).
    """
    first_segment = import_path.split("/", 1)[0]
    return "." not in first_segment


def directory_of(rel_path: str) -> str:
    """Return the ``/``-joined directory of a relative path (``.`` for root files)."""
    directory = posixpath.dirname(rel_path.replace("\\", "/"))
    return directory or ROOT_DIR


def top_level_dir(path: str) -> str:
    """Return the first ``/``-delimited segment of *path*."""
    return path.split("/", 1)[0]


def is_under(path: str, directory: str) -> bool:
    """Return True if *path* equals *directory* or is nested beneath it."""
    return path == directory or path.startswith(directory + "/")
