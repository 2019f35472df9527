"""Tests for pipeline configuration loading and validation."""

import pytest

from patient_document_generation.core.config import PipelineConfiguration
from patient_document_generation.core.exceptions import ConfigurationError


@pytest.fixture
def env(clean_env, tmp_path):
    """Clean environment with no .env file in the working directory."""
    clean_env.chdir(tmp_path)
    return clean_env


class TestFromEnvironment:
    def test_defaults_with_gemini_key(self, env):
        env.setenv("GEMINI_API_KEY", "g-key")
        config = PipelineConfiguration.from_environment()

        assert config.llm_provider == "gemini"
        assert config.gemini_api_key == "g-key"
        assert config.gemini_model == "gemini-2.5-flash"
        assert config.request_timeout == 90.0
        assert config.max_note_length == 50_000
        assert config.emergency_number == "112"
        assert config.log_level == "INFO"
        assert config.active_model == "gemini-2.5-flash"

    def test_google_api_key_is_accepted(self, env):
        env.setenv("GOOGLE_API_KEY", "google-key")
        assert PipelineConfiguration.from_environment().gemini_api_key == "google-key"

    def test_openai_selected_when_only_its_key_is_set(self, env):
        env.setenv("OPENAI_API_KEY", "o-key")
        env.setenv("OPENAI_BASE_URL", "https://gateway.example/v1")
        config = PipelineConfiguration.from_environment()

        assert config.llm_provider == "openai"
        assert config.openai_base_url == "https://gateway.example/v1"
        assert config.active_model == "gpt-4o-mini"

    def test_explicit_provider_wins(self, env):
        env.setenv("OPENAI_API_KEY", "o-key")
        env.setenv("LLM_PROVIDER", "GEMINI")
        with pytest.raises(ConfigurationError, match="Gemini API key required"):
            PipelineConfiguration.from_environment()

    def test_numeric_and_text_overrides(self, env):
        env.setenv("GEMINI_API_KEY", "g-key")
        env.setenv("REQUEST_TIMEOUT", "30")
        env.setenv("RATE_LIMIT_DELAY", "0")
        env.setenv("MAX_NOTE_LENGTH", "1000")
        env.setenv("EMERGENCY_NUMBER", " 911 ")
        env.setenv("LOG_LEVEL", "debug")
        config = PipelineConfiguration.from_environment()

        assert config.request_timeout == 30.0
        assert config.rate_limit_delay == 0.0
        assert config.max_note_length == 1000
        assert config.emergency_number == "911"
        assert config.log_level == "DEBUG"

    def test_invalid_number_is_a_configuration_error(self, env):
        env.setenv("GEMINI_API_KEY", "g-key")
        env.setenv("MAX_NOTE_LENGTH", "lots")
        with pytest.raises(ConfigurationError, match="Invalid numeric setting"):
            PipelineConfiguration.from_environment()

    def test_missing_key_fails_fast(self, env):
        with pytest.raises(ConfigurationError):
            PipelineConfiguration.from_environment()

    def test_validation_can_be_deferred(self, env):
        config = PipelineConfiguration.from_environment(validate_on_load=False)
        assert config.gemini_api_key is None

    def test_env_file_is_loaded(self, env, tmp_path):
        # Registers the variable so the value loaded from the file is removed at teardown.
        env.setenv("GEMINI_API_KEY", "placeholder")
        env.delenv("GEMINI_API_KEY")
        env_file = tmp_path / "settings.env"
        env_file.write_text("GEMINI_API_KEY=from-file\n", encoding="utf-8")

        config = PipelineConfiguration.from_environment(env_file=str(env_file))
        assert config.gemini_api_key == "from-file"


class TestValidate:
    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"llm_provider": "llama"}, "Unsupported LLM provider"),
            ({"gemini_api_key": None}, "Gemini API key required"),
            ({"llm_provider": "openai"}, "OpenAI API key required"),
            ({"request_timeout": 0}, "Request timeout must be positive"),
            ({"rate_limit_delay": -1}, "Rate limit delay cannot be negative"),
            ({"max_note_length": 0}, "Maximum note length must be positive"),
            ({"emergency_number": "11 2"}, "Emergency number must be digits only"),
            ({"emergency_number": ""}, "Emergency number must be digits only"),
        ],
    )
    def test_invalid_settings(self, overrides, message):
        settings = {"gemini_api_key": "g-key"}
        settings.update(overrides)
        with pytest.raises(ConfigurationError, match=message):
            PipelineConfiguration(**settings).validate()

    def test_valid_configuration_passes(self, config):
        config.validate()


class TestToDict:
    def test_keys_are_redacted(self):
        config = PipelineConfiguration(gemini_api_key="secret", openai_api_key=None)
        data = config.to_dict()
        assert data["gemini_api_key"] == "***"
        assert data["openai_api_key"] is None
        assert "secret" not in str(data)
