"""
Tests for configuration loading.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from pagelens.config import Config, ExtractionConfig, MonitoringConfig, find_config_file, load_config, settings
from pagelens.exceptions import ConfigError


@pytest.mark.unit
class TestConfigModels:
    def test_defaults(self):
        config = Config()
        assert config.fetch.timeout == 30.0
        assert config.fetch.retries == 3
        assert config.fetch.follow_redirects is True
        assert config.fetch.user_agent.startswith("pagelens/")
        assert config.parser.backend == "html.parser"
        assert config.extraction.snippet_min_length == 120
        assert config.extraction.snippet_max_length == 256
        assert config.extraction.skipped_link_schemes == ["javascript:", "mailto:", "tel:"]
        assert config.monitoring.log_level == "WARNING"
        assert config.monitoring.metrics_enabled is True

    def test_log_level_normalized(self):
        assert MonitoringConfig(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            MonitoringConfig(log_level="LOUD")

    def test_log_file_parent_created(self, tmp_path):
        log_file = tmp_path / "logs" / "nested" / "pagelens.log"
        config = MonitoringConfig(log_file=log_file)
        assert config.log_file == str(log_file)
        assert log_file.parent.is_dir()

    def test_empty_skipped_scheme_rejected(self):
        with pytest.raises(ValidationError):
            ExtractionConfig(skipped_link_schemes=["javascript:", ""])

    def test_unknown_backend_rejected(self):
        with pytest.raises(ValidationError):
            Config(parser={"backend": "regex"})

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("PAGELENS_FETCH__TIMEOUT", "5")
        monkeypatch.setenv("PAGELENS_MONITORING__METRICS_ENABLED", "false")
        config = Config()
        assert config.fetch.timeout == 5.0
        assert config.monitoring.metrics_enabled is False


@pytest.mark.unit
class TestYamlLoading:
    def test_from_yaml(self, tmp_path):
        path = tmp_path / "pagelens.yaml"
        path.write_text("fetch:\n  timeout: 10\n  retries: 0\nextraction:\n  snippet_max_length: 80\n")
        config = Config.from_yaml(path)
        assert config.fetch.timeout == 10.0
        assert config.fetch.retries == 0
        assert config.extraction.snippet_max_length == 80

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "pagelens.yaml"
        path.write_text("")
        assert Config.from_yaml(path).fetch.timeout == 30.0

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            Config.from_yaml(tmp_path / "absent.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "pagelens.yaml"
        path.write_text("fetch: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            Config.from_yaml(path)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "pagelens.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            Config.from_yaml(path)

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "pagelens.yaml"
        path.write_text("fetch:\n  timeout: -1\n")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            Config.from_yaml(path)


@pytest.mark.unit
class TestDiscovery:
    def test_no_config_file(self):
        assert find_config_file() is None

    def test_finds_yml(self):
        Path("pagelens.yml").write_text("fetch:\n  retries: 1\n")
        assert find_config_file() == Path.cwd() / "pagelens.yml"
        assert load_config().fetch.retries == 1

    def test_explicit_path_wins(self, tmp_path):
        Path("pagelens.yaml").write_text("fetch:\n  retries: 1\n")
        other = tmp_path / "other.yaml"
        other.write_text("fetch:\n  retries: 2\n")
        assert load_config(other).fetch.retries == 2

    def test_lazy_settings_fall_back_on_invalid_file(self):
        Path("pagelens.yaml").write_text("fetch:\n  timeout: -1\n")
        assert settings.fetch.timeout == 30.0

    def test_lazy_settings_read_file(self):
        Path("pagelens.yaml").write_text("parser:\n  backend: lxml\n")
        assert settings.parser.backend == "lxml"
