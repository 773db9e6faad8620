from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from zensort.config import CONFIG_ENV_VAR, AppConfig, Settings, load_app_config, load_config, resolve_config_path
from zensort.models import Strategy


def write_yaml(path: Path, content: str) -> Path:
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


class TestLoadConfig:
    def test_full_settings(self, tmp_path: Path) -> None:
        config_path = write_yaml(
            tmp_path / "zensort.yaml",
            f"""
            settings:
              root: "{tmp_path / 'Downloads'}"
              strategy: first-letter
              sweep_on_start: false
              log_level: debug
              log_file: "{tmp_path / 'logs' / 'zensort.log'}"
            """,
        )

        config = load_config(config_path)

        assert config.source == config_path
        assert config.settings.root == tmp_path / "Downloads"
        assert config.settings.strategy is Strategy.BY_FIRST_LETTER
        assert config.settings.sweep_on_start is False
        assert config.settings.log_level == "DEBUG"
        assert config.settings.log_file == tmp_path / "logs" / "zensort.log"

    def test_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        config = load_config(write_yaml(tmp_path / "zensort.yaml", ""))

        assert config.settings == Settings()
        assert config.settings.strategy is Strategy.BY_CATEGORY
        assert config.settings.sweep_on_start is True

    def test_environment_variables_are_expanded(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ZENSORT_TEST_HOME", str(tmp_path))
        config_path = write_yaml(
            tmp_path / "zensort.yaml",
            """
            settings:
              root: "$ZENSORT_TEST_HOME/Downloads"
            """,
        )

        assert load_config(config_path).settings.root == tmp_path / "Downloads"

    @pytest.mark.parametrize(("raw", "expected"), [("yes", True), ("off", False), ("1", True)])
    def test_boolean_strings(self, tmp_path: Path, raw: str, expected: bool) -> None:
        config_path = write_yaml(
            tmp_path / "zensort.yaml",
            f"""
            settings:
              sweep_on_start: "{raw}"
            """,
        )

        assert load_config(config_path).settings.sweep_on_start is expected


class TestValidation:
    def test_unknown_strategy(self, tmp_path: Path) -> None:
        config_path = write_yaml(
            tmp_path / "zensort.yaml",
            """
            settings:
              strategy: by-size
            """,
        )

        with pytest.raises(ValueError, match="'settings.strategy'"):
            load_config(config_path)

    def test_unknown_key(self, tmp_path: Path) -> None:
        config_path = write_yaml(
            tmp_path / "zensort.yaml",
            """
            settings:
              recursive: true
            """,
        )

        with pytest.raises(ValueError, match="Unknown key\\(s\\) under 'settings': recursive"):
            load_config(config_path)

    def test_bad_boolean(self, tmp_path: Path) -> None:
        config_path = write_yaml(
            tmp_path / "zensort.yaml",
            """
            settings:
              sweep_on_start: sometimes
            """,
        )

        with pytest.raises(ValueError, match="settings.sweep_on_start"):
            load_config(config_path)

    def test_bad_log_level(self, tmp_path: Path) -> None:
        config_path = write_yaml(
            tmp_path / "zensort.yaml",
            """
            settings:
              log_level: chatty
            """,
        )

        with pytest.raises(ValueError, match="settings.log_level"):
            load_config(config_path)

    def test_settings_must_be_mapping(self, tmp_path: Path) -> None:
        config_path = write_yaml(
            tmp_path / "zensort.yaml",
            """
            settings:
              - root
            """,
        )

        with pytest.raises(ValueError, match="mapping"):
            load_config(config_path)

    def test_top_level_must_be_mapping(self, tmp_path: Path) -> None:
        config_path = write_yaml(tmp_path / "zensort.yaml", "- just a list\n")

        with pytest.raises(ValueError, match="mapping at the top level"):
            load_config(config_path)


class TestResolution:
    def test_explicit_path_wins(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "env.yaml"))

        assert resolve_config_path(tmp_path / "explicit.yaml") == tmp_path / "explicit.yaml"

    def test_environment_variable(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "env.yaml"))

        assert resolve_config_path() == tmp_path / "env.yaml"

    def test_nothing_configured_gives_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)

        config = load_app_config()

        assert config == AppConfig()
        assert config.source is None

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="Config file not found"):
            load_app_config(tmp_path / "missing.yaml")
