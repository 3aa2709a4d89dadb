"""Unit tests for dashboard configuration loading."""

from pathlib import Path

import pytest

from duckboard import __version__
from duckboard.config import (
    DEFAULT_BASE_URL,
    ConfigError,
    DashboardConfig,
    find_config,
    load_config,
)


@pytest.mark.unit
class TestDashboardConfig:
    """Tests for DashboardConfig."""

    def test_defaults(self) -> None:
        config = DashboardConfig()

        assert config.default_server == ""
        assert config.version == __version__
        assert config.base_url == DEFAULT_BASE_URL
        assert config.request_timeout == 10.0
        assert config.poll_interval == 15.0
        assert config.default_view is None

    def test_from_dict_coerces_values(self) -> None:
        config = DashboardConfig.from_dict(
            {"default_server": "ci.local:15825", "request_timeout": "2.5", "default_view": ""}
        )

        assert config.default_server == "ci.local:15825"
        assert config.request_timeout == 2.5
        assert config.default_view is None

    def test_unknown_key_rejected(self) -> None:
        with pytest.raises(ConfigError, match="poll_intervall"):
            DashboardConfig.from_dict({"poll_intervall": 5})

    @pytest.mark.parametrize("value", ["soon", 0, -3, None])
    def test_invalid_interval_rejected(self, value) -> None:
        with pytest.raises(ConfigError, match="poll_interval"):
            DashboardConfig.from_dict({"poll_interval": value})

    def test_null_server_means_local(self) -> None:
        config = DashboardConfig.from_dict({"default_server": None})

        assert config.default_server == ""
        assert config.server_label == "local"

    def test_server_label(self) -> None:
        assert DashboardConfig(default_server="ci:15825").server_label == "ci:15825"


@pytest.mark.unit
class TestLoadConfig:
    """Tests for load_config."""

    def test_without_file_or_env(self) -> None:
        assert load_config(environ={}) == DashboardConfig()

    def test_reads_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "duckboard.yaml"
        config_file.write_text(
            "default_server: ci.local:15825\npoll_interval: 30\ndefault_view: nightly\n"
        )

        config = load_config(config_file, environ={})

        assert config.default_server == "ci.local:15825"
        assert config.poll_interval == 30.0
        assert config.default_view == "nightly"

    def test_env_overrides_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "duckboard.yaml"
        config_file.write_text("default_server: from-file\nrequest_timeout: 4\n")

        config = load_config(
            config_file,
            environ={"DUCKBOARD_SERVER": "from-env", "DUCKBOARD_VERSION": "9.9.9"},
        )

        assert config.default_server == "from-env"
        assert config.version == "9.9.9"
        assert config.request_timeout == 4.0

    def test_empty_file(self, tmp_path: Path) -> None:
        config_file = tmp_path / "duckboard.yaml"
        config_file.write_text("")

        assert load_config(config_file, environ={}) == DashboardConfig()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "missing.yaml", environ={})

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "duckboard.yaml"
        config_file.write_text("default_server: [unclosed\n")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(config_file, environ={})

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        config_file = tmp_path / "duckboard.yaml"
        config_file.write_text("- ci.local\n")

        with pytest.raises(ConfigError, match="mapping"):
            load_config(config_file, environ={})

    def test_invalid_env_value(self) -> None:
        with pytest.raises(ConfigError, match="request_timeout"):
            load_config(environ={"DUCKBOARD_TIMEOUT": "forever"})


@pytest.mark.unit
class TestFindConfig:
    """Tests for find_config."""

    def test_found_in_parent(self, tmp_path: Path) -> None:
        config_file = tmp_path / "duckboard.yaml"
        config_file.write_text("{}\n")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)

        assert find_config(nested) == config_file.resolve()

    def test_not_found(self, tmp_path: Path) -> None:
        # tmp_path parents are not expected to carry a duckboard.yaml
        assert find_config(tmp_path) is None
