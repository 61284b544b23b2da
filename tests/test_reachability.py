"""Tests for archlint.rules.reachability: unused package detection."""

from __future__ import annotations

from archlint.rules.reachability import detect_unused_packages, reachable_paths
from archlint.rules.violations import ViolationKind
from tests.conftest import graph_of, source


class TestReachablePaths:
    """Tests for reachable_paths()."""

    def test_seeds_are_entry_point_imports(self) -> None:
        graph = graph_of(
            source("cmd/api/main.go", "/pkg/server", "fmt"),
            source("pkg/server/server.go"),
        )
        assert reachable_paths(graph) == {"pkg/server"}

    def test_transitive_imports(self) -> None:
        graph = graph_of(
            source("cmd/api/main.go", "/pkg/server"),
            source("pkg/server/server.go", "/internal/store"),
            source("internal/store/store.go", "/internal/model"),
            source("internal/model/model.go"),
        )
        assert reachable_paths(graph) == {
            "pkg/server",
            "internal/store",
            "internal/model",
        }

    def test_reaching_parent_expands_nested_packages(self) -> None:
        graph = graph_of(
            source("cmd/api/main.go", "/pkg/orders"),
            source("pkg/orders/orders.go"),
            source("pkg/orders/models/model.go", "/internal/ids"),
            source("internal/ids/ids.go"),
        )
        assert "internal/ids" in reachable_paths(graph)

    def test_cycles_terminate(self) -> None:
        graph = graph_of(
            source("cmd/api/main.go", "/internal/a"),
            source("internal/a/a.go", "/internal/b"),
            source("internal/b/b.go", "/internal/a"),
        )
        assert reachable_paths(graph) == {"internal/a", "internal/b"}

    def test_no_entry_points(self) -> None:
        graph = graph_of(source("pkg/a/a.go", "/pkg/b"), source("pkg/b/b.go"))
        assert reachable_paths(graph) == set()


class TestDetectUnusedPackages:
    """Tests for detect_unused_packages()."""

    def test_unreached_library_package_flagged(self) -> None:
        graph = graph_of(
            source("cmd/api/main.go", "/pkg/used"),
            source("pkg/used/used.go"),
            source("pkg/unused/service.go"),
        )
        violations = detect_unused_packages(graph)

        assert len(violations) == 1
        v = violations[0]
        assert v.kind is ViolationKind.UNUSED_PACKAGE
        assert v.file == "pkg/unused"
        assert v.issue == "Package pkg/unused not imported by any cmd/ package"

    def test_one_violation_per_directory(self) -> None:
        graph = graph_of(
            source("cmd/api/main.go"),
            source("pkg/unused/a.go"),
            source("pkg/unused/b.go"),
            source("pkg/other/c.go"),
        )
        assert [v.file for v in detect_unused_packages(graph)] == [
            "pkg/unused",
            "pkg/other",
        ]

    def test_internal_packages_not_considered(self) -> None:
        graph = graph_of(source("cmd/api/main.go"), source("internal/orphan/x.go"))
        assert detect_unused_packages(graph) == []

    def test_all_reached(self) -> None:
        graph = graph_of(
            source("cmd/api/main.go", "/pkg/a"),
            source("pkg/a/a.go", "/pkg/a/b"),
            source("pkg/a/b/b.go"),
        )
        assert detect_unused_packages(graph) == []
