"""Detection of third-party imports shared across architectural layers."""

from __future__ import annotations

import fnmatch
from dataclasses import dataclass
from typing import TYPE_CHECKING

from archlint.graph.imports import is_standard_library
from archlint.rules.violations import Violation, ViolationKind

if TYPE_CHECKING:
    from collections.abc import Iterable

    from archlint.graph.model import Graph
    from archlint.rules.policy import Policy


@dataclass(frozen=True)
class ImportLocation:
    """Where an external package is imported from."""

    file: str
    layer: str


def layer_of(file_dir: str, layers: Iterable[str]) -> str | None:
    """Return the layer key owning *file_dir*, or None if it is outside all layers.

    An exact key wins; otherwise the longest key that is a path prefix.
    """
    layer_list = list(layers)
    if file_dir in layer_list:
        return file_dir
    matches = [layer for layer in layer_list if file_dir.startswith(layer + "/")]
    if not matches:
        return None
    return max(matches, key=len)


def is_excluded(
    package: str,
    exclusions: Iterable[str],
    patterns: Iterable[str],
) -> bool:
    """Check a package against exact exclusions and glob / ``prefix/*`` patterns."""
    if package in set(exclusions):
        return True
    for pattern in patterns:
        # `*` stays inside one path segment
        if pattern.count("/") == package.count("/") and fnmatch.fnmatchcase(package, pattern):
            return True
        if pattern.endswith("/*"):
            prefix = pattern[:-2]
            if package == prefix or package.startswith(prefix + "/"):
                return True
    return False


def detect_shared_external_imports(graph: Graph, policy: Policy) -> list[Violation]:
    """Flag non-stdlib external packages imported from two or more layers.

    Layers are the directory-policy keys. Files outside every layer do not
    take part in this check.
    """
    layers = list(policy.directories_import)
    locations: dict[str, list[ImportLocation]] = {}

    for node in graph.nodes:
        layer = layer_of(node.directory, layers)
        if layer is None:
            continue
        for dep in node.dependencies:
            if dep.is_local or is_standard_library(dep.import_path):
                continue
            locations.setdefault(dep.import_path, []).append(
                ImportLocation(file=node.rel_path, layer=layer)
            )

    violations: list[Violation] = []
    for package, found in locations.items():
        layer_set = {loc.layer for loc in found}
        if len(layer_set) < 2:
            continue
        if is_excluded(
            package,
            policy.shared_import_exclusions,
            policy.shared_import_exclusion_patterns,
        ):
            continue

        listing = "\n    - ".join(f"{loc.file} (layer: {loc.layer})" for loc in found)
        violations.append(
            Violation(
                kind=ViolationKind.SHARED_EXTERNAL_IMPORT,
                file=found[0].file,
                issue=(
                    f"External package '{package}' imported by {len(layer_set)} layers"
                    f"\n  Imported by:\n    - {listing}"
                ),
                rule="External packages should typically be owned by a single layer",
                fix=(
                    f"Consider: (1) Add '{package}' to shared_external_imports.exclusions "
                    "if it's a utility, or (2) Refactor to centralize usage in one layer"
                ),
            )
        )

    return violations
