"""Tests for archlint.rules.test_naming: strict 1:1 test naming."""

from __future__ import annotations

import pytest

from archlint.rules.policy import Policy
from archlint.rules.test_naming import (
    FileGroup,
    check_group,
    group_files,
    should_exclude_from_test_naming,
    validate_test_naming,
)
from archlint.rules.violations import ViolationKind
from tests.conftest import graph_of, source


def _policy(*, flag_missing: bool = True) -> Policy:
    return Policy(strict_test_naming=True, flag_missing_tests=flag_missing)


class TestExclusions:
    """Tests for should_exclude_from_test_naming()."""

    @pytest.mark.parametrize(
        "base_name",
        ["doc", "api_gen", "schema_generated", "order.pb", "store_mock", "repo_mocks",
         "db_helper", "testutil", "testutil_http"],
    )
    def test_excluded(self, base_name: str) -> None:
        assert should_exclude_from_test_naming(base_name)

    @pytest.mark.parametrize("base_name", ["order", "generator", "docs", "helpers"])
    def test_not_excluded(self, base_name: str) -> None:
        assert not should_exclude_from_test_naming(base_name)


class TestGroupFiles:
    """Tests for group_files()."""

    def test_groups_by_directory_and_base_name(self) -> None:
        graph = graph_of(
            source("a/order.go"),
            source("a/order_test.go"),
            source("b/order.go"),
            source("a/doc.go"),
        )
        groups = group_files(graph)

        assert [(g.directory, g.base_name) for g in groups] == [("a", "order"), ("b", "order")]
        assert groups[0].impl_files == ["a/order.go"]
        assert groups[0].test_files == ["a/order_test.go"]


class TestCheckGroup:
    """Tests for check_group()."""

    def test_matched_pair_is_clean(self) -> None:
        group = FileGroup("a", "order", ["a/order.go"], ["a/order_test.go"])
        assert check_group(group, flag_missing_tests=True) == []

    def test_duplicate_implementation_flags_extras_only(self) -> None:
        group = FileGroup("a", "order", ["a/order.go", "a/order.go.dup"], ["a/order_test.go"])
        violations = check_group(group, flag_missing_tests=False)
        assert [v.file for v in violations] == ["a/order.go.dup"]
        assert "Multiple implementation files" in violations[0].issue

    def test_duplicate_tests_flag_each(self) -> None:
        group = FileGroup("a", "order", ["a/order.go"], ["a/order_test.go", "a/x/order_test.go"])
        violations = check_group(group, flag_missing_tests=False)
        assert [v.file for v in violations] == ["a/order_test.go", "a/x/order_test.go"]
        assert all(v.rule.startswith("strict_test_naming: ") for v in violations)

    def test_orphaned_test(self) -> None:
        group = FileGroup("a", "legacy", [], ["a/legacy_test.go"])
        violations = check_group(group, flag_missing_tests=False)

        assert len(violations) == 1
        assert violations[0].kind is ViolationKind.TEST_NAMING_CONVENTION
        assert violations[0].issue == (
            "Test file 'legacy_test.go' has no corresponding implementation file"
        )

    def test_missing_test_only_when_flagged(self) -> None:
        group = FileGroup("a", "order", ["a/order.go"], [])
        assert check_group(group, flag_missing_tests=False) == []

        violations = check_group(group, flag_missing_tests=True)
        assert [v.file for v in violations] == ["a/order.go"]
        assert violations[0].issue == (
            "Implementation file 'order.go' has no corresponding test file"
        )


class TestValidateTestNaming:
    """Tests for validate_test_naming()."""

    def test_mixed_project(self) -> None:
        graph = graph_of(
            source("internal/orders/orders.go"),
            source("internal/orders/orders_test.go", package="orders_test"),
            source("internal/orders/legacy_test.go", package="orders_test"),
            source("internal/orders/repo.go"),
            source("internal/orders/repo_mock.go"),
            source("internal/orders/doc.go"),
        )
        violations = validate_test_naming(graph, _policy())

        assert [v.file for v in violations] == [
            "internal/orders/legacy_test.go",
            "internal/orders/repo.go",
        ]

    def test_missing_tests_disabled(self) -> None:
        graph = graph_of(source("internal/orders/repo.go"))
        assert validate_test_naming(graph, _policy(flag_missing=False)) == []
