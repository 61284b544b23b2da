"""Per-file import rules: layer isolation and the configured directory policy."""

from __future__ import annotations

from typing import TYPE_CHECKING

from archlint.graph.model import top_level_dir
from archlint.rules.violations import Violation, ViolationKind

if TYPE_CHECKING:
    from archlint.graph.model import Dependency, FileNode, Graph
    from archlint.rules.policy import Policy

# Top-level directory conventions.
ENTRY_POINT_DIR = "cmd"
LIBRARY_DIR = "pkg"
ISOLATED_DIR = "internal"

TEST_FILE_SUFFIX = "_test.go"
TEST_PACKAGE_SUFFIX = "_test"


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------


def is_direct_subpackage(parent: str, child: str) -> bool:
    """Return True if *child* is exactly one level below *parent*.

    ``pkg/orders`` -> ``pkg/orders/models`` is direct,
    ``pkg/orders`` -> ``pkg/orders/models/entities`` is not.
    """
    prefix = parent + "/"
    if not child.startswith(prefix):
        return False
    return "/" not in child[len(prefix) :]


def is_skip_level_import(parent: str, child: str) -> bool:
    """Return True if *child* sits two or more levels below *parent*."""
    prefix = parent + "/"
    if not child.startswith(prefix):
        return False
    return "/" in child[len(prefix) :]


def direct_subpackage(parent: str, child: str) -> str:
    """Return the path one level below *parent* on the way to *child*."""
    prefix = parent + "/"
    if not child.startswith(prefix):
        return child
    return prefix + child[len(prefix) :].split("/", 1)[0]


def is_import_allowed(local_path: str, allowed: tuple[str, ...]) -> bool:
    """Prefix match on path segments: ``internal/app`` allows ``internal/app/user``."""
    return any(local_path == a or local_path.startswith(a + "/") for a in allowed)


def format_allowed(allowed: tuple[str, ...]) -> str:
    return "[" + " ".join(allowed) + "]"


def is_blackbox_test(node: FileNode) -> bool:
    """A test file whose package name carries the test suffix."""
    return node.rel_path.endswith(TEST_FILE_SUFFIX) and node.package.endswith(
        TEST_PACKAGE_SUFFIX
    )


# ---------------------------------------------------------------------------
# Rule checks
# ---------------------------------------------------------------------------


def _check_entry_points(node: FileNode, file_dir: str, local_path: str) -> list[Violation]:
    if local_path.startswith(file_dir + "/"):
        return []
    return [
        Violation(
            kind=ViolationKind.CROSS_ENTRY_POINT,
            file=node.rel_path,
            issue=f"{file_dir} imports {local_path}",
            rule=f"{ENTRY_POINT_DIR} packages must not import other {ENTRY_POINT_DIR} packages",
            fix=f"Extract shared code to {LIBRARY_DIR}/ or {ISOLATED_DIR}/",
        )
    ]


def _check_library(node: FileNode, file_dir: str, local_path: str) -> list[Violation]:
    if is_direct_subpackage(file_dir, local_path):
        return []
    if is_skip_level_import(file_dir, local_path):
        return [
            Violation(
                kind=ViolationKind.SKIP_LEVEL,
                file=node.rel_path,
                issue=f"{file_dir} imports {local_path}",
                rule="Can only import direct subpackages, not nested ones",
                fix=f"Import {direct_subpackage(file_dir, local_path)} instead",
            )
        ]
    return [
        Violation(
            kind=ViolationKind.PKG_TO_PKG,
            file=node.rel_path,
            issue=f"{file_dir} imports {local_path}",
            rule=(
                f"{LIBRARY_DIR} packages must not import other {LIBRARY_DIR} packages "
                "(except own subpackages)"
            ),
            fix=f"Import from {ISOLATED_DIR}/ or define interface locally",
        )
    ]


def _check_directory_policy(
    node: FileNode,
    file_dir: str,
    dep: Dependency,
    policy: Policy,
) -> list[Violation]:
    local_path = dep.local_path or ""
    file_top = top_level_dir(file_dir)
    rule_key, allowed = policy.allowed_imports_for(file_dir, file_top)
    if rule_key is None or is_import_allowed(local_path, allowed):
        return []

    fix = "Restructure dependencies according to allowed imports"
    if file_top == ISOLATED_DIR and top_level_dir(local_path) == ISOLATED_DIR:
        fix = "Use interfaces and dependency inversion instead of direct imports"

    return [
        Violation(
            kind=ViolationKind.FORBIDDEN_IMPORT,
            file=node.rel_path,
            issue=f"{file_dir} imports {local_path}",
            rule=f"{rule_key} can only import from: {format_allowed(allowed)}",
            fix=fix,
        )
    ]


def check_file(node: FileNode, policy: Policy) -> list[Violation]:
    """Check every local import of *node* against isolation and directory rules.

    A blackbox test importing exactly its own directory is exempt from all
    of these rules.
    """
    violations: list[Violation] = []
    file_dir = node.directory
    file_top = top_level_dir(file_dir)
    blackbox = is_blackbox_test(node)

    for dep in node.dependencies:
        if not dep.is_local or dep.local_path is None:
            continue
        local_path = dep.local_path
        if blackbox and local_path == file_dir:
            continue

        dep_top = top_level_dir(local_path)
        if file_top == dep_top == ENTRY_POINT_DIR:
            violations.extend(_check_entry_points(node, file_dir, local_path))
        if file_top == dep_top == LIBRARY_DIR:
            violations.extend(_check_library(node, file_dir, local_path))
        violations.extend(_check_directory_policy(node, file_dir, dep, policy))

    return violations


def check_imports(graph: Graph, policy: Policy) -> list[Violation]:
    """Run :func:`check_file` over every node, in graph order."""
    violations: list[Violation] = []
    for node in graph.nodes:
        violations.extend(check_file(node, policy))
    return violations
