"""
Tests for configuration helpers.

Run with: python -m pytest tests/test_config.py -v
"""

import pytest

from nura.core.config import Config


class TestWakeConfig:

    def test_wake_words_drop_blanks(self, monkeypatch):
        monkeypatch.setattr(Config, "WAKE_WORDS", ["ok nura", " ", "oye nura "])
        assert Config.get_wake_words() == ["ok nura", "oye nura"]

    def test_default_aliases_are_copies(self, monkeypatch):
        monkeypatch.delenv("NURA_WAKE_ALIASES", raising=False)
        aliases = Config.get_wake_aliases()
        assert "ok nora" in aliases["ok nura"]
        aliases["ok nura"].append("ok mura")
        assert "ok mura" not in Config.WAKE_ALIASES["ok nura"]

    def test_aliases_override(self, monkeypatch):
        monkeypatch.setenv("NURA_WAKE_ALIASES", '{"hey nura": ["hey nora"]}')
        assert Config.get_wake_aliases() == {"hey nura": ["hey nora"]}

    def test_aliases_override_must_be_object(self, monkeypatch):
        monkeypatch.setenv("NURA_WAKE_ALIASES", '["hey nora"]')
        with pytest.raises(ValueError):
            Config.get_wake_aliases()
