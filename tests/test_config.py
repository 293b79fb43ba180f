"""Tests for geoio.config settings."""

from geoio.config import Settings


class TestSettings:
    def test_defaults(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        settings = Settings()
        assert settings.gadm_base_url == "https://geodata.ucdavis.edu/gadm/gadm4.1/json"
        assert settings.gadm_version == "41"
        assert settings.gadm_timeout_seconds == 60.0
        assert settings.log_level == "info"

    def test_environment_overrides(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("GEOIO_GADM_TIMEOUT_SECONDS", "5")
        monkeypatch.setenv("GEOIO_LOG_LEVEL", "debug")
        settings = Settings()
        assert settings.gadm_timeout_seconds == 5.0
        assert settings.log_level == "debug"

    def test_env_file(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".env").write_text("GEOIO_GADM_VERSION=36\nUNRELATED=1\n")
        assert Settings().gadm_version == "36"
