"""Tests for SwitchyardSettings — unified settings with TOML source."""

from pathlib import Path

import click
import pytest
from pydantic import ValidationError

from switchyard.config.models import BUILTIN_BEHAVIORS
from switchyard.config.settings import SwitchyardSettings


class TestSwitchyardSettingsDefaults:
    def test_all_defaults(self, tmp_path: Path) -> None:
        """With no TOML and no env vars, all fields use code defaults."""
        settings = SwitchyardSettings.load(project_root=tmp_path)
        assert settings.project_root == tmp_path
        assert settings.config_path is None
        assert settings.json_output is False
        assert settings.verbose is False
        assert settings.pipeline.behaviors == list(BUILTIN_BEHAVIORS)
        assert settings.performance.slow_request_threshold_ms == 500.0
        assert settings.cache.namespace == "Switchyard:Cache"
        assert settings.cache.max_entries is None
        assert settings.plugins.enabled is True

    def test_frozen(self, tmp_path: Path) -> None:
        settings = SwitchyardSettings.load(project_root=tmp_path)
        with pytest.raises(ValidationError):
            settings.verbose = True  # type: ignore[misc]

    def test_plugin_dir_relative_to_root(self, tmp_path: Path) -> None:
        settings = SwitchyardSettings.load(project_root=tmp_path)
        assert settings.plugin_dir == tmp_path / ".switchyard" / "plugins"


class TestTomlSource:
    def test_loads_from_toml(self, tmp_path: Path) -> None:
        toml = tmp_path / "switchyard.toml"
        toml.write_text(
            '[pipeline]\nbehaviors = ["validation"]\n[cache]\nnamespace = "App"\n'
        )
        settings = SwitchyardSettings.load(project_root=tmp_path)
        assert settings.config_path == toml
        assert settings.pipeline.behaviors == ["validation"]
        assert settings.cache.namespace == "App"
        assert settings.performance.slow_request_threshold_ms == 500.0  # default preserved

    def test_root_follows_discovered_file(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "switchyard.toml").write_text("")
        nested = tmp_path / "src" / "app"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)
        settings = SwitchyardSettings.load()
        assert settings.project_root == tmp_path.resolve()

    def test_explicit_config_path(self, tmp_path: Path) -> None:
        custom = tmp_path / "custom" / "my.toml"
        custom.parent.mkdir(parents=True)
        custom.write_text("[performance]\nslow_request_threshold_ms = 125\n")
        settings = SwitchyardSettings.load(config_path=str(custom), project_root=tmp_path)
        assert settings.performance.slow_request_threshold_ms == 125
        assert settings.config_path == custom

    def test_missing_explicit_config(self, tmp_path: Path) -> None:
        with pytest.raises(click.ClickException, match="Config file not found"):
            SwitchyardSettings.load(config_path=tmp_path / "nope.toml", project_root=tmp_path)

    def test_reads_pyproject_table(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text(
            '[project]\nname = "app"\n\n[tool.switchyard.plugins]\nenabled = false\n'
        )
        settings = SwitchyardSettings.load(project_root=tmp_path)
        assert settings.config_path == tmp_path / "pyproject.toml"
        assert settings.plugins.enabled is False

    def test_invalid_toml(self, tmp_path: Path) -> None:
        (tmp_path / "switchyard.toml").write_text("[pipeline\n")
        with pytest.raises(click.ClickException, match="Invalid TOML"):
            SwitchyardSettings.load(project_root=tmp_path)

    def test_invalid_values_rejected(self, tmp_path: Path) -> None:
        (tmp_path / "switchyard.toml").write_text(
            "[performance]\nslow_request_threshold_ms = 0\n"
        )
        with pytest.raises(ValidationError):
            SwitchyardSettings.load(project_root=tmp_path)

    def test_duplicate_behaviors_rejected(self, tmp_path: Path) -> None:
        (tmp_path / "switchyard.toml").write_text(
            '[pipeline]\nbehaviors = ["caching", "caching"]\n'
        )
        with pytest.raises(ValidationError, match="twice"):
            SwitchyardSettings.load(project_root=tmp_path)


class TestPriority:
    def test_env_overrides_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "switchyard.toml").write_text(
            "[performance]\nslow_request_threshold_ms = 200\n"
        )
        monkeypatch.setenv("SWITCHYARD_PERFORMANCE__SLOW_REQUEST_THRESHOLD_MS", "50")
        settings = SwitchyardSettings.load(project_root=tmp_path)
        assert settings.performance.slow_request_threshold_ms == 50

    def test_cli_flags_override_env(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("SWITCHYARD_VERBOSE", "false")
        settings = SwitchyardSettings.load(project_root=tmp_path, verbose=True, json_output=True)
        assert settings.verbose is True
        assert settings.json_output is True
