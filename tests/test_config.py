"""
Tests for YAML configuration loading and timeout resolution.
"""
import pytest
from pydantic import ValidationError

from automr.ci.exceptions import ConfigError
from automr.config.loader import default_config_path, load_config
from automr.config.models import (
    DEFAULT_PIPELINE_TIMEOUT,
    AppConfig,
    PlatformConfig,
    parse_duration,
    resolve_pipeline_timeout,
)


class TestParseDuration:
    """Tests for parse_duration."""

    @pytest.mark.parametrize(
        "text,seconds",
        [
            ("30m", 1800),
            ("1h30m", 5400),
            ("45s", 45),
            ("2h", 7200),
            ("1m30s", 90),
            ("1.5h", 5400),
            ("90", 90),
            (" 10M ", 600),
        ],
    )
    def test_valid(self, text, seconds):
        assert parse_duration(text) == seconds

    @pytest.mark.parametrize("text", ["", "abc", "30x", "m30", "30m junk"])
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_duration(text)


class TestPlatformConfig:
    """Tests for PlatformConfig validation."""

    def test_timeout_string(self):
        assert PlatformConfig(pipeline_timeout="45m").pipeline_timeout == 2700

    def test_timeout_bounds(self):
        with pytest.raises(ValidationError, match="too small"):
            PlatformConfig(pipeline_timeout="30s")
        with pytest.raises(ValidationError, match="too large"):
            PlatformConfig(pipeline_timeout="9h")

    def test_bounds_are_inclusive(self):
        assert PlatformConfig(pipeline_timeout="1m").pipeline_timeout == 60
        assert PlatformConfig(pipeline_timeout="8h").pipeline_timeout == 8 * 3600

    def test_username_validation(self):
        assert PlatformConfig(assignee=" alice ").assignee == "alice"
        with pytest.raises(ValidationError, match="invalid characters"):
            PlatformConfig(reviewer="bob; rm -rf /")


class TestResolvePipelineTimeout:
    """Tests for resolve_pipeline_timeout."""

    def test_cli_wins(self):
        platform = PlatformConfig(pipeline_timeout="1h")
        assert resolve_pipeline_timeout("10m", platform) == 600

    def test_config_used_without_cli(self):
        platform = PlatformConfig(pipeline_timeout="1h")
        assert resolve_pipeline_timeout(None, platform) == 3600

    def test_default(self):
        assert resolve_pipeline_timeout(None, PlatformConfig()) == DEFAULT_PIPELINE_TIMEOUT == 1800

    def test_cli_out_of_bounds(self):
        with pytest.raises(ValueError, match="--timeout too small"):
            resolve_pipeline_timeout("5s", PlatformConfig())


class TestLoadConfig:
    """Tests for load_config."""

    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(tmp_path / "missing.yml")
        assert config == AppConfig()
        assert config.watch.poll_interval == 5.0

    def test_full_file(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text(
            "github:\n"
            "  assignee: alice\n"
            "  reviewer: bob\n"
            "  pipeline_timeout: 1h\n"
            "gitlab:\n"
            "  assignee: carol\n"
            "  reviewer: dave\n"
            "  api_url: https://git.example.com/api/v4\n"
            "watch:\n"
            "  poll_interval: 10\n"
        )

        config = load_config(path)

        assert config.github.pipeline_timeout == 3600
        assert config.gitlab.api_url == "https://git.example.com/api/v4"
        assert config.gitlab.pipeline_timeout is None
        assert config.watch.poll_interval == 10
        assert config.for_platform("gitlab").assignee == "carol"

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("")
        assert load_config(path) == AppConfig()

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("github: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(path)

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("github:\n  pipeline_timeout: forever\n")
        with pytest.raises(ConfigError, match="Invalid config"):
            load_config(path)

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(path)

    def test_env_override_path(self, tmp_path, monkeypatch):
        monkeypatch.setenv("AUTOMR_CONFIG", str(tmp_path / "alt.yml"))
        assert default_config_path() == tmp_path / "alt.yml"

    def test_unknown_platform(self):
        with pytest.raises(ValueError):
            AppConfig().for_platform("bitbucket")
