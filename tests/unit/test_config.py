"""Unit tests for environment configuration"""

import logging
from pathlib import Path

import pytest

from lexsearch.config import DEFAULT_STATIC_DIR, Settings, get_settings, parse_address
from lexsearch.logging_config import setup_logging


class TestSettings:
    """Test Settings.from_env defaults and overrides"""

    def test_defaults(self):
        settings = get_settings()
        assert settings.index_path == Path("index.json")
        assert settings.address == "127.0.0.1:6969"
        assert settings.top_n == 20
        assert settings.static_dir == DEFAULT_STATIC_DIR
        assert settings.log_file is None  # LOG_FILE="" in tests

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("LEXSEARCH_INDEX_PATH", "/data/gl.json")
        monkeypatch.setenv("LEXSEARCH_ADDRESS", "0.0.0.0:8080")
        monkeypatch.setenv("LEXSEARCH_TOP_N", "5")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = Settings.from_env()
        assert settings.index_path == Path("/data/gl.json")
        assert settings.address == "0.0.0.0:8080"
        assert settings.top_n == 5
        assert settings.console_level == logging.DEBUG

    def test_env_local_file(self, tmp_path, monkeypatch):
        """.env.local in the working directory is loaded"""
        (tmp_path / ".env.local").write_text("LEXSEARCH_TOP_N=7\n", encoding="utf-8")
        monkeypatch.setenv("LEXSEARCH_TOP_N", "20")  # Restored by monkeypatch afterwards

        settings = Settings.from_env()
        assert settings.top_n == 7
        assert settings.env_file == tmp_path / ".env.local"

    @pytest.mark.parametrize("value", ["abc", "0", "-3"])
    def test_invalid_top_n(self, monkeypatch, value):
        monkeypatch.setenv("LEXSEARCH_TOP_N", value)
        with pytest.raises(ValueError, match="LEXSEARCH_TOP_N"):
            Settings.from_env()

    def test_invalid_address(self, monkeypatch):
        monkeypatch.setenv("LEXSEARCH_ADDRESS", "localhost")
        with pytest.raises(ValueError):
            Settings.from_env()

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()


class TestParseAddress:
    def test_host_port(self):
        assert parse_address("127.0.0.1:6969") == ("127.0.0.1", 6969)

    def test_ipv6_like(self):
        assert parse_address("[::1]:8000") == ("[::1]", 8000)

    @pytest.mark.parametrize("address", ["6969", ":6969", "host:port"])
    def test_invalid(self, address):
        with pytest.raises(ValueError):
            parse_address(address)


class TestSetupLogging:
    """Console + rotating session log file"""

    def test_console_only(self):
        assert setup_logging(log_file=None) is None
        assert len(logging.getLogger().handlers) == 1

    def test_session_file_created(self, tmp_path):
        session_log = setup_logging(log_file=str(tmp_path / "logs" / "lexsearch.log"))

        logging.getLogger("lexsearch.test").info("hello from test")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert session_log.parent == tmp_path / "logs"
        assert session_log.name.startswith("lexsearch_")
        assert "hello from test" in session_log.read_text(encoding="utf-8")

    def test_old_sessions_cleaned_up(self, tmp_path):
        logs = tmp_path / "logs"
        logs.mkdir()
        for i in range(8):
            (logs / f"lexsearch_20240101_00000{i}.log").write_text("old", encoding="utf-8")

        setup_logging(log_file=str(logs / "lexsearch.log"))

        remaining = sorted(p.name for p in logs.glob("lexsearch_*.log"))
        assert len(remaining) == 5  # 4 newest old sessions + this session
        assert "lexsearch_20240101_000000.log" not in remaining
