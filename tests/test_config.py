import pytest

from config import (
    DEFAULT_ACCOUNTS,
    DevelopmentSettings,
    ProductionSettings,
    Settings,
    TestingSettings,
    get_settings,
    get_settings_for_environment,
)


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:

    def test_defaults(self):
        settings = Settings()

        assert settings.port == 3000
        assert settings.history_capacity == 10
        assert settings.accounts == DEFAULT_ACCOUNTS
        assert not settings.rate_limit_enabled

    @pytest.mark.parametrize("env, settings_class", [
        ("development", DevelopmentSettings),
        ("production", ProductionSettings),
        ("testing", TestingSettings),
        ("TESTING", TestingSettings),
    ])
    def test_profile_for_environment(self, env, settings_class):
        assert type(get_settings_for_environment(env)) is settings_class

    def test_unknown_environment_uses_base_settings(self):
        assert type(get_settings_for_environment("staging")) is Settings

    def test_get_settings_follows_environment_variable(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "development")

        settings = get_settings()

        assert isinstance(settings, DevelopmentSettings)
        assert settings.log_level == "DEBUG"
        assert settings.log_format == "text"

    def test_get_settings_defaults_to_production(self, monkeypatch):
        monkeypatch.delenv("ENVIRONMENT", raising=False)

        assert isinstance(get_settings(), ProductionSettings)

    def test_environment_variable_overrides_profile(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "testing")
        monkeypatch.setenv("LOG_LEVEL", "ERROR")

        assert get_settings().log_level == "ERROR"

    def test_accounts_from_environment(self, monkeypatch):
        monkeypatch.setenv("ACCOUNTS", '{"7": 1000}')

        assert Settings().accounts == {7: 1000}

    def test_rejects_out_of_range_account_id(self, monkeypatch):
        monkeypatch.setenv("ACCOUNTS", '{"300": 1000}')

        with pytest.raises(ValueError):
            Settings()
