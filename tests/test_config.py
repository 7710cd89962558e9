"""Settings unit testleri."""

from stockroom.config import Settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in (
            "STOCKROOM_API_URL",
            "STOCKROOM_ACCESS_TOKEN",
            "STOCKROOM_TIMEOUT",
            "STOCKROOM_PAGE_SIZE",
            "STOCKROOM_AUDIT_BUCKET",
        ):
            monkeypatch.delenv(name, raising=False)
        settings = Settings.from_env()
        assert settings.api_url == "http://localhost:3000"
        assert settings.access_token is None
        assert settings.page_size == 10
        assert settings.audit_bucket is None

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("STOCKROOM_API_URL", "https://wms.example.com")
        monkeypatch.setenv("STOCKROOM_PAGE_SIZE", "25")
        monkeypatch.setenv("STOCKROOM_TIMEOUT", "3.5")
        monkeypatch.setenv("STOCKROOM_LOG_LEVEL", "debug")
        settings = Settings.from_env()
        assert settings.api_url == "https://wms.example.com"
        assert settings.page_size == 25
        assert settings.timeout == 3.5
        assert settings.log_level == "DEBUG"

    def test_invalid_number_falls_back(self, monkeypatch):
        monkeypatch.setenv("STOCKROOM_PAGE_SIZE", "çok")
        assert Settings.from_env().page_size == 10
