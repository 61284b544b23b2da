"""Go source scanner: package clause, imports and symbol usage via tree-sitter."""

from __future__ import annotations

import functools
import logging
import os
import posixpath
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from tree_sitter import Language, Parser

from archlint.graph.model import SourceFile

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from tree_sitter import Node as TSNode

logger = logging.getLogger(__name__)

GO_SUFFIX = ".go"
GO_TEST_SUFFIX = "_test.go"

# Import names that bind nothing usable as a selector operand.
_UNQUALIFIED_IMPORT_NAMES = frozenset({"_", "."})

_HEADER_NODE_TYPES = frozenset({"package_clause", "import_declaration", "comment"})

UsageMap = dict[str, dict[str, tuple[str, ...]]]


class ScanError(Exception):
    """Raised when a source file cannot be read or parsed."""


@dataclass
class ScanResult:
    """Scanned files sorted by path, plus optional per-file symbol usage."""

    files: list[SourceFile] = field(default_factory=list)
    usages: UsageMap = field(default_factory=dict)


@dataclass(frozen=True)
class _ImportSpec:
    path: str
    name: str | None  # explicit alias, if any


@functools.lru_cache(maxsize=1)
def _go_language() -> Language:
    try:
        import tree_sitter_go as tsgo
    except ImportError as exc:
        msg = "tree-sitter-go is not installed"
        raise ScanError(msg) from exc
    return Language(tsgo.language())


def base_name_of(file_name: str) -> str:
    """``foo.go`` and ``foo_test.go`` both map to ``foo``."""
    if not file_name.endswith(GO_SUFFIX):
        return file_name
    stem = file_name[: -len(GO_SUFFIX)]
    if stem.endswith("_test"):
        stem = stem[: -len("_test")]
    return stem


def default_import_name(import_path: str) -> str:
    """Name a package is referred to by when imported without an alias."""
    return import_path.rsplit("/", 1)[-1]


# ---------------------------------------------------------------------------
# Tree extraction
# ---------------------------------------------------------------------------


def _node_text(node: TSNode | None) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8")


def _extract_package(root: TSNode) -> str | None:
    for child in root.children:
        if child.type != "package_clause":
            continue
        for sub in child.children:
            if sub.type == "package_identifier":
                return _node_text(sub)
    return None


def _extract_import_spec(spec: TSNode) -> _ImportSpec | None:
    path_node = spec.child_by_field_name("path")
    raw = _node_text(path_node)
    if len(raw) < 2:
        return None
    path = raw[1:-1]
    name_node = spec.child_by_field_name("name")
    name = _node_text(name_node) if name_node is not None else None
    return _ImportSpec(path=path, name=name)


def _extract_imports(root: TSNode) -> list[_ImportSpec]:
    specs: list[_ImportSpec] = []
    for child in root.children:
        if child.type != "import_declaration":
            continue
        for sub in child.children:
            if sub.type == "import_spec":
                info = _extract_import_spec(sub)
                if info is not None:
                    specs.append(info)
            elif sub.type == "import_spec_list":
                for spec in sub.children:
                    if spec.type == "import_spec":
                        info = _extract_import_spec(spec)
                        if info is not None:
                            specs.append(info)
    return specs


def _walk(root: TSNode) -> Iterator[TSNode]:
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def _qualified_reference(node: TSNode) -> tuple[str, str] | None:
    """Return ``(qualifier, symbol)`` for ``alias.Symbol`` expressions and types."""
    if node.type == "selector_expression":
        operand = node.child_by_field_name("operand")
        member = node.child_by_field_name("field")
    elif node.type == "qualified_type":
        operand = node.child_by_field_name("package")
        member = node.child_by_field_name("name")
    else:
        return None
    if operand is None or member is None or operand.type not in (
        "identifier",
        "package_identifier",
    ):
        return None
    return _node_text(operand), _node_text(member)


def extract_usages(root: TSNode, imports: Iterable[_ImportSpec]) -> dict[str, tuple[str, ...]]:
    """Map each import path to the sorted, distinct symbols selected from it."""
    by_name: dict[str, str] = {}
    for spec in imports:
        name = spec.name if spec.name is not None else default_import_name(spec.path)
        if name in _UNQUALIFIED_IMPORT_NAMES:
            continue
        by_name[name] = spec.path

    used: dict[str, set[str]] = {}
    for node in _walk(root):
        ref = _qualified_reference(node)
        if ref is None:
            continue
        qualifier, symbol = ref
        import_path = by_name.get(qualifier)
        if import_path is not None:
            used.setdefault(import_path, set()).add(symbol)
    return {path: tuple(sorted(symbols)) for path, symbols in used.items()}


# ---------------------------------------------------------------------------
# File and tree walking
# ---------------------------------------------------------------------------


def parse_go_file(
    path: Path, rel_path: str, *, include_usages: bool = False
) -> tuple[SourceFile, dict[str, tuple[str, ...]]]:
    """Parse one Go file. Raises :class:`ScanError` on unreadable or malformed input."""
    try:
        content = path.read_bytes()
    except OSError as exc:
        msg = f"Cannot read {rel_path}: {exc}"
        raise ScanError(msg) from exc

    parser = Parser(_go_language())
    tree = parser.parse(content)
    root = tree.root_node

    package = _extract_package(root)
    if not package:
        msg = f"Cannot parse {rel_path}: missing or malformed package clause"
        raise ScanError(msg)
    # only the header (package clause and imports) has to be well-formed
    for child in root.children:
        if not child.is_named:
            continue
        if child.type == "ERROR" or (child.type in _HEADER_NODE_TYPES and child.has_error):
            msg = f"Cannot parse {rel_path}: syntax error at line {child.start_point.row + 1}"
            raise ScanError(msg)
        if child.type not in _HEADER_NODE_TYPES:
            break

    imports = _extract_imports(root)
    file_name = posixpath.basename(rel_path)
    source = SourceFile(
        rel_path=rel_path,
        package=package,
        base_name=base_name_of(file_name),
        is_test=file_name.endswith(GO_TEST_SUFFIX),
        imports=tuple(spec.path for spec in imports),
    )
    usages = extract_usages(root, imports) if include_usages else {}
    return source, usages


def is_ignored(rel_path: str, ignore_paths: Iterable[str]) -> bool:
    for ignored in ignore_paths:
        base = ignored.rstrip("/")
        if rel_path == base or rel_path.startswith(base + "/"):
            return True
    return False


def _join(rel_dir: str, name: str) -> str:
    return name if rel_dir == "." else f"{rel_dir}/{name}"


def _iter_go_files(
    project_root: Path, scan_path: str, ignore_paths: tuple[str, ...]
) -> Iterator[tuple[Path, str]]:
    start = project_root / scan_path
    if not start.is_dir():
        logger.debug("Scan path %s does not exist, skipping", scan_path)
        return

    for dirpath, dirnames, filenames in os.walk(start):
        current = Path(dirpath)
        rel_dir = current.relative_to(project_root).as_posix()
        dirnames[:] = sorted(
            d
            for d in dirnames
            if not d.startswith(".") and not is_ignored(_join(rel_dir, d), ignore_paths)
        )
        for name in filenames:
            if name.endswith(GO_SUFFIX):
                yield current / name, _join(rel_dir, name)


def scan(
    project_root: Path,
    scan_paths: Iterable[str],
    ignore_paths: Iterable[str] = (),
    *,
    include_tests: bool = False,
    include_usages: bool = False,
) -> ScanResult:
    """Scan *scan_paths* under *project_root* for Go files.

    Missing scan paths are skipped. Test files are only included with
    *include_tests*. The result is sorted by relative path.
    """
    ignores = tuple(ignore_paths)
    seen: dict[str, tuple[SourceFile, dict[str, tuple[str, ...]]]] = {}

    for scan_path in scan_paths:
        for path, rel_path in _iter_go_files(project_root, scan_path.strip("/"), ignores):
            if rel_path in seen or is_ignored(rel_path, ignores):
                continue
            if not include_tests and rel_path.endswith(GO_TEST_SUFFIX):
                continue
            seen[rel_path] = parse_go_file(path, rel_path, include_usages=include_usages)

    result = ScanResult()
    for rel_path in sorted(seen):
        source, usages = seen[rel_path]
        result.files.append(source)
        if include_usages:
            result.usages[rel_path] = usages

    logger.debug("Scanned %d Go files under %s", len(result.files), project_root)
    return result
