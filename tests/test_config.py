"""Pytest tests for settings loaded from the environment."""

from __future__ import annotations

from pathlib import Path

import pytest

from chessly.config import Settings, load_settings


class TestLoadSettings:

    def test_defaults(self):
        settings = load_settings({})
        assert settings == Settings()
        assert settings.port == 8088
        assert settings.store_path.name == "session_store.json"
        assert settings.view_path.name == "current_session.json"

    def test_overrides(self, tmp_path):
        settings = load_settings({
            "CHESSLY_DATA_DIR": str(tmp_path),
            "CHESSLY_SESSION_KEY": "game-2",
            "CHESSLY_HOST": "0.0.0.0",
            "CHESSLY_PORT": "9000",
            "CHESSLY_LOG_LEVEL": "debug",
        })
        assert settings.data_dir == Path(tmp_path)
        assert settings.store_path == Path(tmp_path) / "session_store.json"
        assert settings.session_key == "game-2"
        assert settings.host == "0.0.0.0"
        assert settings.port == 9000
        assert settings.log_level == "DEBUG"

    @pytest.mark.parametrize("port", ["abc", "70000", "-1"])
    def test_bad_port(self, port):
        with pytest.raises(ValueError, match="CHESSLY_PORT"):
            load_settings({"CHESSLY_PORT": port})
