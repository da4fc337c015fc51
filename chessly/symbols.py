"""Unicode piece glyphs and side names.

The glyph table is keyed by python-chess piece symbols (FEN letters),
uppercase for white and lowercase for black.
"""

from __future__ import annotations

import chess

_PIECE_SYMBOLS = {
    "K": "\u2654", "Q": "\u2655", "R": "\u2656", "B": "\u2657",
    "N": "\u2658", "P": "\u2659",
    "k": "\u265a", "q": "\u265b", "r": "\u265c", "b": "\u265d",
    "n": "\u265e", "p": "\u265f",
}

SIDES = ("white", "black")


def glyph(piece_type: chess.PieceType, color: chess.Color) -> str:
    """Return the glyph for a piece kind and side."""
    return _PIECE_SYMBOLS[chess.Piece(piece_type, color).symbol()]


def piece_glyph(piece: chess.Piece | None) -> str:
    """Return the glyph for a piece, or an empty string for no piece."""
    if piece is None:
        return ""
    return _PIECE_SYMBOLS[piece.symbol()]


def side_name(color: chess.Color) -> str:
    return "white" if color == chess.WHITE else "black"


def side_title(color: chess.Color) -> str:
    return side_name(color).capitalize()


def parse_side(name: str) -> chess.Color:
    """Convert 'white' / 'black' to a python-chess color.

    Raises:
        ValueError: If the name is not a side.
    """
    if name == "white":
        return chess.WHITE
    if name == "black":
        return chess.BLACK
    raise ValueError(f"Unknown side: {name!r}")
