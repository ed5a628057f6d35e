"""Tests for configuration loading."""

from prospector.config import DEFAULT_DATABASE_URL, Settings, load_config


def clear_env(monkeypatch):
    for name in ("GEMINI_API_KEY", "API_KEY", "GOOGLE_MAPS_API_KEY", "DATABASE_URL"):
        monkeypatch.delenv(name, raising=False)


class TestSettings:
    """Test Settings defaults."""

    def test_defaults(self, monkeypatch):
        clear_env(monkeypatch)
        settings = Settings()
        assert settings.gemini_api_key == ""
        assert settings.database_url == DEFAULT_DATABASE_URL
        assert settings.strategies == ["low_presence", "popular", "nearby"]
        assert settings.max_attempts == 1

    def test_map_mode(self):
        assert Settings(maps_api_key="").map_mode == "placeholder"
        assert Settings(maps_api_key="k").map_mode == "live"

    def test_default_location(self):
        location = Settings(default_lat=45.76, default_lng=4.83).default_location
        assert (location.lat, location.lng) == (45.76, 4.83)


class TestLoadConfig:
    """Test YAML loading and environment overrides."""

    def test_yaml_values_applied(self, monkeypatch, tmp_path):
        clear_env(monkeypatch)
        path = tmp_path / "prospector.yaml"
        path.write_text(
            "default_locality: Lyon\n"
            "strategies: [popular]\n"
            "exact_name_dedup: true\n"
            "unknown_key: ignored\n"
        )
        settings = load_config(str(path))
        assert settings.default_locality == "Lyon"
        assert settings.strategies == ["popular"]
        assert settings.exact_name_dedup is True
        assert not hasattr(settings, "unknown_key")

    def test_properties_not_overwritten(self, monkeypatch, tmp_path):
        clear_env(monkeypatch)
        path = tmp_path / "prospector.yaml"
        path.write_text("map_mode: live\n")
        assert load_config(str(path)).map_mode == "placeholder"

    def test_env_wins_over_file(self, monkeypatch, tmp_path):
        clear_env(monkeypatch)
        monkeypatch.setenv("GEMINI_API_KEY", "env_key")
        path = tmp_path / "prospector.yaml"
        path.write_text("gemini_api_key: file_key\n")
        assert load_config(str(path)).gemini_api_key == "env_key"

    def test_missing_file_uses_defaults(self, monkeypatch, tmp_path):
        clear_env(monkeypatch)
        settings = load_config(str(tmp_path / "absent.yaml"))
        assert settings.default_locality == "Paris"

    def test_database_url_from_env(self, monkeypatch):
        clear_env(monkeypatch)
        monkeypatch.setenv("DATABASE_URL", "sqlite:///:memory:")
        assert load_config().database_url == "sqlite:///:memory:"
