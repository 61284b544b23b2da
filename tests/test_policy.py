"""Tests for archlint.rules.policy: the Policy value object."""

from __future__ import annotations

import pytest

from archlint.rules.policy import Policy


class TestPolicyMaps:
    """Tests for the read-only rule maps."""

    def test_maps_reject_mutation(self) -> None:
        policy = Policy(
            directories_import={"cmd": ("pkg",)},
            required_directories={"cmd": "Entry points"},
            package_thresholds={"pkg": 80.0},
        )
        with pytest.raises(TypeError):
            policy.directories_import["pkg"] = ()  # type: ignore[index]
        with pytest.raises(TypeError):
            policy.required_directories["pkg"] = "Libraries"  # type: ignore[index]
        with pytest.raises(TypeError):
            policy.package_thresholds["cmd"] = 10.0  # type: ignore[index]

    def test_caller_dict_changes_do_not_leak(self) -> None:
        imports = {"cmd": ("pkg",)}
        thresholds = {"pkg": 80.0}
        policy = Policy(directories_import=imports, package_thresholds=thresholds)

        imports["internal"] = ()
        thresholds["pkg"] = 0.0

        assert dict(policy.directories_import) == {"cmd": ("pkg",)}
        assert policy.package_thresholds["pkg"] == 80.0

    def test_allowed_lists_become_tuples(self) -> None:
        policy = Policy(directories_import={"pkg": ["internal"]})  # type: ignore[dict-item]
        assert policy.directories_import["pkg"] == ("internal",)

    def test_defaults_are_empty(self) -> None:
        policy = Policy()
        assert len(policy.directories_import) == 0
        assert len(policy.required_directories) == 0
        assert len(policy.package_thresholds) == 0


class TestAllowedImportsFor:
    """Tests for allow-list lookup."""

    def test_exact_directory_wins(self) -> None:
        policy = Policy(directories_import={"pkg": ("internal",), "pkg/api": ()})
        assert policy.allowed_imports_for("pkg/api", "pkg") == ("pkg/api", ())

    def test_falls_back_to_top_level(self) -> None:
        policy = Policy(directories_import={"pkg": ("internal",)})
        assert policy.allowed_imports_for("pkg/api", "pkg") == ("pkg", ("internal",))

    def test_no_entry(self) -> None:
        assert Policy().allowed_imports_for("tools", "tools") == (None, ())
