"""Tests for archlint.onboarding.presets: presets, init and refresh."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
import yaml

from archlint.infrastructure.config import CONFIG_FILENAME, ConfigError, load_config
from archlint.onboarding.presets import (
    PRESETS,
    create_config_from_preset,
    create_default_config,
    get_preset,
    refresh_config,
    render_preset_config,
)
from tests.conftest import MODULE

if TYPE_CHECKING:
    from pathlib import Path

# ---------------------------------------------------------------------------
# Preset catalogue
# ---------------------------------------------------------------------------


class TestPresetCatalogue:
    """Tests for the built-in presets."""

    def test_known_presets(self) -> None:
        assert set(PRESETS) == {"ddd", "simple", "hexagonal"}

    def test_get_preset(self) -> None:
        assert get_preset("ddd").name == "ddd"

    def test_unknown_preset(self) -> None:
        with pytest.raises(ValueError, match="Unknown preset 'onion'"):
            get_preset("onion")

    @pytest.mark.parametrize("name", sorted(PRESETS))
    def test_rules_only_reference_layers(self, name: str) -> None:
        preset = PRESETS[name]
        for allowed in preset.directories_import.values():
            for target in allowed:
                assert target in preset.directories_import

    def test_ddd_domain_is_pure(self) -> None:
        ddd = get_preset("ddd")
        assert ddd.directories_import["internal/domain"] == ()
        assert ddd.package_thresholds["internal/domain"] == 90


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


class TestRenderPresetConfig:
    """Tests for render_preset_config()."""

    def test_round_trips_through_loader(self, go_project: Path) -> None:
        text = render_preset_config(get_preset("hexagonal"), MODULE)
        (go_project / CONFIG_FILENAME).write_text(text)

        config = load_config(go_project)

        assert config.preset == "hexagonal"
        assert config.module == MODULE
        assert config.directories_import["internal/adapters"] == (
            "internal/ports",
            "internal/core",
        )
        assert config.coverage_threshold == 75.0
        assert config.require_blackbox_tests is True
        assert config.error_prompt.enabled is True
        assert "Ports & Adapters" in config.error_prompt.architectural_goals

    def test_multiline_strings_as_blocks(self) -> None:
        text = render_preset_config(get_preset("ddd"), MODULE)
        assert "architectural_goals: |" in text

    def test_example_overrides_only_without_overrides(self) -> None:
        preset = get_preset("simple")
        assert "#overrides:" in render_preset_config(preset, MODULE)

        text = render_preset_config(preset, MODULE, {"rules": {"detect_unused": False}})
        assert "#overrides:" not in text
        assert yaml.safe_load(text)["overrides"] == {"rules": {"detect_unused": False}}


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------


class TestCreateConfig:
    """Tests for create_default_config() and create_config_from_preset()."""

    def test_default_config(self, go_project: Path) -> None:
        path = create_default_config(go_project)
        config = load_config(go_project)

        assert path == go_project / CONFIG_FILENAME
        assert config.directories_import == {
            "cmd": ("pkg",),
            "pkg": ("internal",),
            "internal": (),
        }
        assert config.detect_unused is True

    def test_refuses_to_overwrite(self, go_project: Path) -> None:
        (go_project / CONFIG_FILENAME).write_text("rules: {}\n")
        with pytest.raises(ConfigError, match="already exists"):
            create_default_config(go_project)
        with pytest.raises(ConfigError, match="already exists"):
            create_config_from_preset(go_project, "ddd")

    def test_preset_config_with_dirs(self, go_project: Path) -> None:
        create_config_from_preset(go_project, "ddd", create_dirs=True)

        text = (go_project / CONFIG_FILENAME).read_text()
        assert text.startswith("# Auto-generated by archlint init --preset=ddd")
        for directory in ("internal/domain", "internal/app", "internal/infra", "cmd"):
            assert (go_project / directory).is_dir()

    def test_preset_config_without_dirs(self, go_project: Path) -> None:
        create_config_from_preset(go_project, "simple")
        assert not (go_project / "pkg").exists()
        assert load_config(go_project).preset == "simple"

    def test_preset_needs_go_mod(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Cannot detect module"):
            create_config_from_preset(tmp_path, "simple")
        assert not (tmp_path / CONFIG_FILENAME).exists()


# ---------------------------------------------------------------------------
# refresh
# ---------------------------------------------------------------------------


class TestRefreshConfig:
    """Tests for refresh_config()."""

    def test_keeps_overrides_and_writes_backup(self, go_project: Path) -> None:
        create_config_from_preset(go_project, "simple")
        path = go_project / CONFIG_FILENAME
        data = yaml.safe_load(path.read_text())
        data["overrides"] = {"rules": {"test_coverage": {"threshold": 42}}}
        path.write_text(yaml.safe_dump(data))
        before = path.read_text()

        applied = refresh_config(go_project)

        assert applied == "simple"
        assert (go_project / f"{CONFIG_FILENAME}.backup").read_text() == before
        config = load_config(go_project)
        assert config.coverage_threshold == 42.0
        assert config.preset == "simple"

    def test_switch_preset(self, go_project: Path) -> None:
        create_config_from_preset(go_project, "simple")
        assert refresh_config(go_project, "ddd") == "ddd"
        assert "internal/domain" in load_config(go_project).directories_import

    def test_missing_config(self, go_project: Path) -> None:
        with pytest.raises(ConfigError, match="run 'archlint init' first"):
            refresh_config(go_project)

    def test_not_from_preset(self, go_project: Path) -> None:
        create_default_config(go_project)
        with pytest.raises(ConfigError, match="not created from a preset"):
            refresh_config(go_project)

    def test_invalid_yaml(self, go_project: Path) -> None:
        (go_project / CONFIG_FILENAME).write_text("preset: {broken\n")
        with pytest.raises(ConfigError, match="invalid YAML"):
            refresh_config(go_project)
