"""Tests for archlint.rules.shared_imports: external imports shared across layers."""

from __future__ import annotations

from archlint.rules.policy import Policy
from archlint.rules.shared_imports import (
    detect_shared_external_imports,
    is_excluded,
    layer_of,
)
from archlint.rules.violations import ViolationKind
from tests.conftest import graph_of, source

LAYERS = {
    "internal/domain": (),
    "internal/app": ("internal/domain",),
    "internal/infra": ("internal/domain",),
}


def _policy(**kwargs) -> Policy:
    return Policy(directories_import=dict(LAYERS), detect_shared_external_imports=True, **kwargs)


class TestLayerOf:
    """Tests for layer resolution."""

    def test_exact_match(self) -> None:
        assert layer_of("internal/app", LAYERS) == "internal/app"

    def test_nested_directory(self) -> None:
        assert layer_of("internal/app/user", LAYERS) == "internal/app"

    def test_longest_prefix_wins(self) -> None:
        layers = ["internal", "internal/app"]
        assert layer_of("internal/app/user", layers) == "internal/app"
        assert layer_of("internal/other", layers) == "internal"

    def test_outside_all_layers(self) -> None:
        assert layer_of("pkg/x", LAYERS) is None
        assert layer_of("internal/application", LAYERS) is None


class TestIsExcluded:
    """Tests for exclusion matching."""

    def test_exact(self) -> None:
        assert is_excluded("github.com/google/uuid", ["github.com/google/uuid"], [])

    def test_glob(self) -> None:
        assert is_excluded("github.com/acme/log", [], ["github.com/acme/*"])

    def test_prefix_star_covers_nested_paths(self) -> None:
        assert is_excluded("golang.org/x/text/cases", [], ["golang.org/x/text/*"])

    def test_glob_star_stays_within_one_segment(self) -> None:
        assert is_excluded("github.com/a/log", [], ["github.com/*/log"])
        assert not is_excluded("github.com/a/b/log", [], ["github.com/*/log"])
        assert not is_excluded("github.com/acme/log/v2", [], ["github.com/acme/l*"])

    def test_not_excluded(self) -> None:
        assert not is_excluded("github.com/lib/pq", ["github.com/google/uuid"], ["gopkg.in/*"])


class TestDetectSharedExternalImports:
    """Tests for detect_shared_external_imports()."""

    def test_package_in_two_layers_flagged(self) -> None:
        graph = graph_of(
            source("internal/app/app.go", "github.com/lib/pq"),
            source("internal/infra/db.go", "github.com/lib/pq"),
        )
        violations = detect_shared_external_imports(graph, _policy())

        assert len(violations) == 1
        v = violations[0]
        assert v.kind is ViolationKind.SHARED_EXTERNAL_IMPORT
        assert v.file == "internal/app/app.go"
        assert v.issue.startswith("External package 'github.com/lib/pq' imported by 2 layers")
        assert "internal/infra/db.go (layer: internal/infra)" in v.issue
        assert "shared_external_imports.exclusions" in v.fix

    def test_same_layer_not_flagged(self) -> None:
        graph = graph_of(
            source("internal/infra/db.go", "github.com/lib/pq"),
            source("internal/infra/pg/conn.go", "github.com/lib/pq"),
        )
        assert detect_shared_external_imports(graph, _policy()) == []

    def test_stdlib_never_flagged(self) -> None:
        graph = graph_of(
            source("internal/app/app.go", "net/http"),
            source("internal/infra/db.go", "net/http"),
        )
        assert detect_shared_external_imports(graph, _policy()) == []

    def test_exclusions_respected(self) -> None:
        graph = graph_of(
            source("internal/app/app.go", "github.com/google/uuid", "golang.org/x/text/cases"),
            source("internal/infra/db.go", "github.com/google/uuid", "golang.org/x/text/cases"),
        )
        policy = _policy(
            shared_import_exclusions=("github.com/google/uuid",),
            shared_import_exclusion_patterns=("golang.org/x/text/*",),
        )
        assert detect_shared_external_imports(graph, policy) == []

    def test_files_outside_layers_ignored(self) -> None:
        graph = graph_of(
            source("internal/app/app.go", "github.com/lib/pq"),
            source("tools/migrate/main.go", "github.com/lib/pq"),
        )
        assert detect_shared_external_imports(graph, _policy()) == []

    def test_local_imports_ignored(self) -> None:
        graph = graph_of(
            source("internal/app/app.go", "/internal/domain"),
            source("internal/infra/db.go", "/internal/domain"),
        )
        assert detect_shared_external_imports(graph, _policy()) == []
