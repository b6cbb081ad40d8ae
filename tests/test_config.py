"""
Tests for environment and YAML configuration.
"""

import pytest

from toolcall_client.config import get_config
from toolcall_client.config_loader import load_config, resolve_env_vars


class TestEnvironmentConfig:
    """Tests for get_config()."""

    def test_defaults(self):
        config = get_config()
        assert config.client.base_url == "https://api.openai.com"
        assert config.client.api_key == ""
        assert config.client.max_iterations == 5
        assert config.client.timeout == 60.0
        assert config.log_level == "INFO"
        assert config.langfuse.enabled is False

    def test_reads_environment_each_call(self, monkeypatch):
        monkeypatch.setenv("OPENAI_MODEL", "first")
        assert get_config().client.model == "first"
        monkeypatch.setenv("OPENAI_MODEL", "second")
        assert get_config().client.model == "second"

    def test_langfuse_enabled_with_both_keys(self, monkeypatch):
        monkeypatch.setenv("LANGFUSE_PUBLIC_KEY", "pk")
        assert get_config().langfuse.enabled is False
        monkeypatch.setenv("LANGFUSE_SECRET_KEY", "sk")
        assert get_config().langfuse.enabled is True


class TestResolveEnvVars:
    """Tests for ${VAR} interpolation."""

    def test_set_variable(self, monkeypatch):
        monkeypatch.setenv("MY_VAR", "value")
        assert resolve_env_vars("x-${MY_VAR}-y") == "x-value-y"

    def test_default_used_when_unset(self, monkeypatch):
        monkeypatch.delenv("MISSING_VAR", raising=False)
        assert resolve_env_vars("${MISSING_VAR:-fallback}") == "fallback"

    def test_unset_without_default_is_empty(self, monkeypatch):
        monkeypatch.delenv("MISSING_VAR", raising=False)
        assert resolve_env_vars("${MISSING_VAR}") == ""


class TestLoadConfig:
    """Tests for load_config()."""

    def test_no_file_returns_environment_config(self):
        config = load_config()
        assert config.client.base_url == "https://api.openai.com"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "nope.yaml"))

    def test_file_values_override(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TEST_API_KEY", "secret")
        path = tmp_path / "config.yaml"
        path.write_text(
            "client:\n"
            "  base_url: http://localhost:8000\n"
            "  api_key: ${TEST_API_KEY}\n"
            "  model: local-model\n"
            "  max_iterations: 8\n"
            "logging:\n"
            "  level: DEBUG\n"
        )

        config = load_config(str(path))

        assert config.client.base_url == "http://localhost:8000"
        assert config.client.api_key == "secret"
        assert config.client.model == "local-model"
        assert config.client.max_iterations == 8
        assert config.client.timeout == 60.0
        assert config.log_level == "DEBUG"

    def test_path_from_environment(self, tmp_path, monkeypatch):
        path = tmp_path / "config.yaml"
        path.write_text("client:\n  model: from-env-path\n")
        monkeypatch.setenv("TOOLCALL_CLIENT_CONFIG", str(path))

        assert load_config().client.model == "from-env-path"

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_config(str(path)).client.max_iterations == 5

    def test_non_mapping_rejected(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ValueError):
            load_config(str(path))

    def test_invalid_number_rejected(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("client:\n  max_iterations: lots\n")
        with pytest.raises(ValueError, match="Invalid configuration"):
            load_config(str(path))

    def test_langfuse_section(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "langfuse:\n  public_key: pk\n  secret_key: sk\n  debug: 'true'\n"
        )

        config = load_config(str(path))

        assert config.langfuse.enabled is True
        assert config.langfuse.debug is True
