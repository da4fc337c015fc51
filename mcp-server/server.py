"""MCP server for Chessly.

Exposes the click-driven game session to agents via FastMCP. The
session is file-backed and re-read whenever another process has saved
it, so the browser board and this server play the same game. The view
file is re-synced after every action for the terminal board.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

# Add project root and mcp-server dir to path for imports
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_MCP_SERVER_DIR = Path(__file__).resolve().parent
sys.path.insert(0, str(_PROJECT_ROOT))
sys.path.insert(0, str(_MCP_SERVER_DIR))

from mcp.server.fastmcp import FastMCP  # noqa: E402

from chessly.board import square_coords  # noqa: E402
from chessly.config import configure_logging, load_settings  # noqa: E402
from chessly.persistence import JsonFileStore  # noqa: E402
from chessly.session import GameSession  # noqa: E402

from response_schemas import (  # noqa: E402
    ERROR_SCHEMA,
    PGN_SCHEMA,
    SESSION_VIEW_SCHEMA,
    TARGETS_SCHEMA,
    minify_session_view,
    validate_response,
)

_log = logging.getLogger("chessly.mcp")

mcp = FastMCP("chessly")

_settings = load_settings()

# Opened on first use so importing this module touches no files.
_session: GameSession | None = None


def _get_session() -> GameSession:
    """Return the shared session, opening it from disk on first use.

    Later calls pick up any snapshot another front end saved meanwhile.
    """
    global _session
    if _session is None:
        store = JsonFileStore(_settings.store_path)
        _session = GameSession.open(
            store, _settings.session_key, view_path=_settings.view_path
        )
    else:
        _session.sync()
    return _session


def _checked(response: dict, schema: dict) -> dict:
    """Log schema mismatches when CHESSLY_VALIDATE=1, then pass the response on."""
    for error in validate_response(response, schema):
        _log.warning("Response schema mismatch: %s", error)
    return response


def _error(exc: ValueError) -> dict:
    return _checked({"error": str(exc)}, ERROR_SCHEMA)


def _respond(session: GameSession) -> dict:
    """Minified view plus the notifications raised by the last action."""
    view = session.view()
    view["notifications"] = [n.to_dict() for n in session.drain_notifications()]
    return _checked(minify_session_view(view), SESSION_VIEW_SCHEMA)


# ---------------------------------------------------------------------------
# Session tools
# ---------------------------------------------------------------------------


@mcp.tool()
def get_session() -> dict:
    """Get the current board, turn, captured pieces and move list.

    Returns:
        Minified session view.
    """
    return _respond(_get_session())


@mcp.tool()
def click_square(square: str, promotion: str | None = None) -> dict:
    """Click a square, as a player would on the board.

    The first click on one of your pieces selects it; clicking a
    destination then attempts the move. Clicking the selected square
    again deselects it.

    Args:
        square: Square name (e.g., 'e2').
        promotion: Optional promotion piece ('q', 'r', 'b', 'n').

    Returns:
        Minified session view with any notifications.
    """
    session = _get_session()
    try:
        session.click_square(square, promotion)
    except ValueError as exc:
        return _error(exc)
    return _respond(session)


@mcp.tool()
def select_and_move(from_square: str, to_square: str, promotion: str | None = None) -> dict:
    """Select a piece and move it in one call.

    Args:
        from_square: Square of the piece to move (e.g., 'e2').
        to_square: Destination square (e.g., 'e4').
        promotion: Optional promotion piece ('q', 'r', 'b', 'n').

    Returns:
        Minified session view with any notifications.
    """
    session = _get_session()
    try:
        session.move(from_square, to_square, promotion)
    except ValueError as exc:
        return _error(exc)
    return _respond(session)


@mcp.tool()
def restart_game() -> dict:
    """Discard the current game and start from the initial position.

    Returns:
        Minified session view.
    """
    session = _get_session()
    session.restart()
    return _respond(session)


@mcp.tool()
def undo_last_move() -> dict:
    """Take back the last half-move.

    Returns:
        Minified session view with an info or error notification.
    """
    session = _get_session()
    session.undo_last()
    return _respond(session)


@mcp.tool()
def get_game_pgn() -> dict:
    """Export the game so far as PGN.

    Returns:
        Dict with pgn string.
    """
    return _checked({"pgn": _get_session().pgn()}, PGN_SCHEMA)


@mcp.tool()
def get_legal_targets(square: str) -> dict:
    """List the squares the piece on a square can legally move to.

    Args:
        square: Square name (e.g., 'g1').

    Returns:
        Dict with square and sorted target squares.
    """
    session = _get_session()
    try:
        square_coords(square)
    except ValueError as exc:
        return _error(exc)
    return _checked(
        {"square": square, "targets": session.legal_targets_from(square)},
        TARGETS_SCHEMA,
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    configure_logging(_settings.log_level)
    mcp.run()
