"""Tests for checker settings."""

from tinyts.config.settings import CheckerSettings, load_settings


class TestCheckerSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self, monkeypatch, tmp_path):
        """Without environment variables the checker uses equality."""
        monkeypatch.chdir(tmp_path)
        for name in ("TINYTS_SUBTYPING", "TINYTS_RECURSION_LIMIT", "TINYTS_LOG_FILTER"):
            monkeypatch.delenv(name, raising=False)
        settings = load_settings()
        assert settings.subtyping is False
        assert settings.recursion_limit is None
        assert settings.log_filter == "info"

    def test_environment(self, monkeypatch):
        """TINYTS_* variables are read case-insensitively."""
        monkeypatch.setenv("TINYTS_SUBTYPING", "1")
        monkeypatch.setenv("tinyts_recursion_limit", "5000")
        settings = CheckerSettings()
        assert settings.subtyping is True
        assert settings.recursion_limit == 5000

    def test_dotenv(self, monkeypatch, tmp_path):
        """A .env file in the working directory is honoured."""
        monkeypatch.delenv("TINYTS_LOG_FILTER", raising=False)
        (tmp_path / ".env").write_text("TINYTS_LOG_FILTER=debug\n")
        monkeypatch.chdir(tmp_path)
        assert load_settings().log_filter == "debug"

    def test_overrides(self):
        """Explicit values win over the environment."""
        assert load_settings(subtyping=True).subtyping is True
