"""Response schemas and minification for MCP tool responses.

Minifies the session view returned by MCP tools to keep agent context
small. The view file mirrored for the terminal board is NOT affected;
only MCP return values are.

PGN string format for move_list uses standard chess notation
(1.e4 e5 2.Nf3 ...) which is natural for an agent to read.
"""

from __future__ import annotations

import os


# ---------------------------------------------------------------------------
# Minification functions
# ---------------------------------------------------------------------------


def minify_session_view(view: dict) -> dict:
    """Minify a session view for MCP response.

    Replaces the glyph grid with eight rank strings of FEN letters,
    compacts move_history to a PGN move string, joins each roster into
    one string, and drops fields only the browser uses.

    Args:
        view: Session view (as produced by GameSession.view), optionally
            carrying a notifications list.

    Returns:
        Minified dict with reduced token footprint.
    """
    result = {}

    for key in ("selection", "turn", "status", "result", "ply", "fen"):
        if key in view:
            result[key] = view[key]

    pieces = view.get("pieces", [])
    result["board"] = [
        "".join(symbol or "." for symbol in row) for row in pieces
    ]

    history = view.get("move_history", [])
    result["move_list"] = _moves_to_pgn_string([m.get("san", "") for m in history])

    captured = view.get("captured", {})
    result["captured"] = {
        "white": "".join(captured.get("white", [])),
        "black": "".join(captured.get("black", [])),
    }

    result["legal_targets"] = list(view.get("legal_targets", []))
    result["notifications"] = [
        f"{n['severity']}: {n['message']}" for n in view.get("notifications", [])
    ]

    # Removed fields: grid, pieces, position, move_history

    return result


# ---------------------------------------------------------------------------
# Helper: move list to PGN string
# ---------------------------------------------------------------------------


def _moves_to_pgn_string(moves: list[str]) -> str:
    """Convert a list of SAN moves to a PGN move string.

    E.g., ['e4', 'e5', 'Nf3', 'Nc6'] -> '1.e4 e5 2.Nf3 Nc6'

    Args:
        moves: List of SAN move strings.

    Returns:
        PGN-formatted move string.
    """
    if not moves:
        return ""

    parts = []
    for i, move in enumerate(moves):
        if i % 2 == 0:
            move_num = i // 2 + 1
            parts.append(f"{move_num}.{move}")
        else:
            parts.append(move)

    return " ".join(parts)


# ---------------------------------------------------------------------------
# Validation schemas (dict-based)
# ---------------------------------------------------------------------------

SESSION_VIEW_SCHEMA = {
    "selection": (str, type(None)),
    "turn": str,
    "status": str,
    "result": str,
    "ply": int,
    "fen": str,
    "board": list,
    "move_list": str,
    "captured": dict,
    "legal_targets": list,
    "notifications": list,
}

PGN_SCHEMA = {
    "pgn": str,
}

TARGETS_SCHEMA = {
    "square": str,
    "targets": list,
}

ERROR_SCHEMA = {
    "error": str,
}


def _type_label(expected: type | tuple[type, ...]) -> str:
    if isinstance(expected, tuple):
        return "(" + ", ".join(t.__name__ for t in expected) + ")"
    return expected.__name__


def validate_response(response: dict, schema: dict) -> list[str]:
    """List the ways a tool response departs from its schema.

    Disabled unless CHESSLY_VALIDATE=1, in which case the server checks
    every response it returns.

    Args:
        response: Tool response dict.
        schema: Key name to expected type, or tuple of accepted types.

    Returns:
        Error strings; empty when the response matches or validation is off.
    """
    if os.environ.get("CHESSLY_VALIDATE") != "1":
        return []
    if not isinstance(response, dict):
        return [f"Response is not a dict: {type(response).__name__}"]

    errors = [f"Missing key: {key}" for key in schema if key not in response]
    for key, expected in schema.items():
        if key in response and not isinstance(response[key], expected):
            errors.append(
                f"Key '{key}': expected {_type_label(expected)}, "
                f"got {type(response[key]).__name__}"
            )
    return errors
