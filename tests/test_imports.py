"""Tests for archlint.graph.imports: import classification."""

from __future__ import annotations

from archlint.graph import model
from archlint.graph.imports import (
    classify,
    is_local_import,
    is_standard_library,
    local_path_of,
)
from archlint.graph.model import Dependency, DependencyKind

MODULE = "example.com/app"


class TestIsLocalImport:
    """Tests for module-prefix matching."""

    def test_module_subpackage_is_local(self) -> None:
        assert is_local_import("example.com/app/pkg/orders", MODULE)

    def test_module_root_is_local(self) -> None:
        assert is_local_import(MODULE, MODULE)

    def test_prefix_on_segment_boundary_only(self) -> None:
        assert not is_local_import("example.com/application/x", MODULE)

    def test_empty_module_root_claims_nothing(self) -> None:
        assert not is_local_import("fmt", "")


class TestLocalPathOf:
    """Tests for stripping the module prefix."""

    def test_strips_prefix(self) -> None:
        assert local_path_of("example.com/app/internal/store", MODULE) == "internal/store"

    def test_module_root_maps_to_dot(self) -> None:
        assert local_path_of(MODULE, MODULE) == "."


class TestIsStandardLibrary:
    """Tests for the dotless-first-segment heuristic."""

    def test_bare_words_are_stdlib(self) -> None:
        assert is_standard_library("fmt")
        assert is_standard_library("net/http")
        assert is_standard_library("encoding/json")

    def test_domains_are_not_stdlib(self) -> None:
        assert not is_standard_library("github.com/spf13/cobra")
        assert not is_standard_library("gopkg.in/yaml.v3")

    def test_shared_with_graph_model(self) -> None:
        assert is_standard_library is model.is_standard_library

    def test_dependency_built_without_classify(self) -> None:
        dep = Dependency(import_path="os/exec", kind=DependencyKind.EXTERNAL)
        assert dep.is_stdlib
        assert dep.category is DependencyKind.STDLIB


class TestClassify:
    """Tests for classify()."""

    def test_local_import_sets_local_path(self) -> None:
        dep = classify("example.com/app/pkg/orders", MODULE)
        assert dep.kind is DependencyKind.LOCAL
        assert dep.local_path == "pkg/orders"
        assert dep.is_local

    def test_external_import_has_no_local_path(self) -> None:
        dep = classify("github.com/google/uuid", MODULE)
        assert dep.kind is DependencyKind.EXTERNAL
        assert dep.local_path is None
        assert not dep.is_stdlib
        assert dep.category is DependencyKind.EXTERNAL

    def test_stdlib_import_is_external_kind_with_stdlib_category(self) -> None:
        dep = classify("net/http", MODULE)
        assert dep.kind is DependencyKind.EXTERNAL
        assert dep.is_stdlib
        assert dep.category is DependencyKind.STDLIB

    def test_used_symbols_carried_through(self) -> None:
        dep = classify("fmt", MODULE, used_symbols=("Println", "Sprintf"))
        assert dep.used_symbols == ("Println", "Sprintf")
