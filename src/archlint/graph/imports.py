"""Import classifier: decide whether an import path is local or external."""

from __future__ import annotations

from archlint.graph.model import ROOT_DIR, Dependency, DependencyKind, is_standard_library

__all__ = [
    "classify",
    "is_local_import",
    "is_standard_library",
    "local_path_of",
]


def is_local_import(import_path: str, module_root: str) -> bool:
    """Return True if *import_path* is rooted at *module_root*.

    Matching happens on path-segment boundaries, so ``example.com/app``
    does not claim ``example.com/application``.
    """
    if not module_root:
        return False
    return import_path == module_root or import_path.startswith(module_root + "/")


def local_path_of(import_path: str, module_root: str) -> str:
    """Strip the module prefix from a local import path."""
    if import_path == module_root:
        return ROOT_DIR
    return import_path[len(module_root) + 1 :]


def classify(
    import_path: str,
    module_root: str,
    *,
    used_symbols: tuple[str, ...] = (),
) -> Dependency:
    """Classify *import_path* relative to *module_root*.

    The result is LOCAL (with ``local_path`` set) or EXTERNAL. Whether an
    external import belongs to the standard library is a separate question
    answered by :func:`is_standard_library` / :attr:`Dependency.is_stdlib`.
    """
    if is_local_import(import_path, module_root):
        return Dependency(
            import_path=import_path,
            kind=DependencyKind.LOCAL,
            local_path=local_path_of(import_path, module_root),
            used_symbols=used_symbols,
        )
    return Dependency(
        import_path=import_path,
        kind=DependencyKind.EXTERNAL,
        used_symbols=used_symbols,
    )
