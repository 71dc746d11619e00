"""Test Settings loading, env overrides and dispatch validation."""

import pytest

from composition_kit.core.config import Settings, load_settings
from composition_kit.core.enums import DispatchMode, LogFormat, RegistrationPolicy
from composition_kit.core.errors import ConfigError


class TestSettingsDefaults:
    def test_default_settings(self):
        settings = Settings()
        assert settings.dispatch.mode == DispatchMode.SEQUENTIAL
        assert settings.dispatch.continue_on_error is False
        assert settings.dispatch.recipient_timeout_seconds is None
        assert settings.registration.policy == RegistrationPolicy.MANY
        assert settings.factory.discriminator_field == "type"
        assert settings.observability.log_format == LogFormat.CONSOLE

    def test_nested_override(self):
        settings = Settings(dispatch={"mode": "parallel", "recipient_timeout_seconds": 1.5})
        assert settings.dispatch.mode == DispatchMode.PARALLEL
        assert settings.dispatch.recipient_timeout_seconds == 1.5


class TestEnvironment:
    def test_env_var_override(self, monkeypatch):
        monkeypatch.setenv("COMPOSITION_DISPATCH__MODE", "parallel")
        monkeypatch.setenv("COMPOSITION_REGISTRATION__POLICY", "single")
        settings = Settings()
        assert settings.dispatch.mode == DispatchMode.PARALLEL
        assert settings.registration.policy == RegistrationPolicy.SINGLE


class TestLoadSettings:
    def test_load_from_toml(self, tmp_path):
        path = tmp_path / "demo.toml"
        path.write_text(
            '[dispatch]\nmode = "parallel"\n\n[demo]\nsirens = ["attic"]\n',
            encoding="utf-8",
        )
        settings = load_settings(config_path=path)
        assert settings.dispatch.mode == DispatchMode.PARALLEL
        assert settings.demo.sirens == ["attic"]

    def test_overrides_merge_into_file_sections(self, tmp_path):
        path = tmp_path / "demo.toml"
        path.write_text(
            '[dispatch]\nmode = "parallel"\nrecipient_timeout_seconds = 2.0\n',
            encoding="utf-8",
        )
        settings = load_settings(
            config_path=path, overrides={"dispatch": {"mode": "sequential"}},
        )
        assert settings.dispatch.mode == DispatchMode.SEQUENTIAL
        assert settings.dispatch.recipient_timeout_seconds == 2.0

    def test_missing_file_uses_defaults(self, tmp_path):
        settings = load_settings(config_path=tmp_path / "absent.toml")
        assert settings.dispatch.mode == DispatchMode.SEQUENTIAL


class TestValidateDispatch:
    def test_defaults_pass(self):
        Settings().validate_dispatch()  # Should not raise

    def test_non_positive_timeout(self):
        settings = Settings(dispatch={"recipient_timeout_seconds": 0})
        with pytest.raises(ConfigError, match="positive"):
            settings.validate_dispatch()

    def test_empty_discriminator(self):
        settings = Settings(factory={"discriminator_field": ""})
        with pytest.raises(ConfigError, match="discriminator_field"):
            settings.validate_dispatch()
