"""Runtime settings read from CHESSLY_* environment variables.

Command-line flags in the entry points override these values.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_DEFAULT_DATA_DIR = _PROJECT_ROOT / "data"

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class Settings:
    data_dir: Path = _DEFAULT_DATA_DIR
    session_key: str = "chessly.session"
    host: str = "127.0.0.1"
    port: int = 8088
    log_level: str = "INFO"

    @property
    def store_path(self) -> Path:
        """JSON file backing the key-value store."""
        return self.data_dir / "session_store.json"

    @property
    def view_path(self) -> Path:
        """Readable session view mirrored for the terminal renderer."""
        return self.data_dir / "current_session.json"


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from the environment.

    Args:
        environ: Mapping to read instead of os.environ.

    Raises:
        ValueError: If CHESSLY_PORT is not a port number.
    """
    env = os.environ if environ is None else environ

    port_text = env.get("CHESSLY_PORT", "8088")
    try:
        port = int(port_text)
    except ValueError:
        raise ValueError(f"CHESSLY_PORT must be an integer, got {port_text!r}") from None
    if not 0 <= port <= 65535:
        raise ValueError(f"CHESSLY_PORT out of range: {port}")

    data_dir = env.get("CHESSLY_DATA_DIR")
    return Settings(
        data_dir=Path(data_dir) if data_dir else _DEFAULT_DATA_DIR,
        session_key=env.get("CHESSLY_SESSION_KEY", "chessly.session"),
        host=env.get("CHESSLY_HOST", "127.0.0.1"),
        port=port,
        log_level=env.get("CHESSLY_LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for an entry point."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=_LOG_FORMAT)
