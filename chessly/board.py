"""Board projection: square labels and the 8x8 display grid.

Row 0 is rank 8 and column 0 is the a-file, so the grid reads the way
the board is drawn for white.
"""

from __future__ import annotations

from dataclasses import dataclass

import chess

from chessly.symbols import glyph

_FILES = "abcdefgh"


@dataclass(frozen=True)
class Cell:
    """A piece occupying a square, as seen by the renderer."""

    piece_type: chess.PieceType
    color: chess.Color

    @property
    def symbol(self) -> str:
        """FEN letter, uppercase for white."""
        return chess.Piece(self.piece_type, self.color).symbol()

    @property
    def glyph(self) -> str:
        return glyph(self.piece_type, self.color)


def square_label(row: int, col: int) -> str:
    """Convert a grid coordinate to a square label.

    Args:
        row: Grid row, 0 (rank 8) to 7 (rank 1).
        col: Grid column, 0 (a-file) to 7 (h-file).

    Returns:
        Label such as 'e4'.

    Raises:
        ValueError: If either coordinate is outside the board.
    """
    if not (0 <= row < 8 and 0 <= col < 8):
        raise ValueError(f"Coordinate out of range: ({row}, {col})")
    return f"{_FILES[col]}{8 - row}"


def square_coords(label: str) -> tuple[int, int]:
    """Inverse of square_label.

    Raises:
        ValueError: If the label is not a board square.
    """
    if not isinstance(label, str) or len(label) != 2:
        raise ValueError(f"Invalid square: {label!r}")
    file_char, rank_char = label[0], label[1]
    if file_char not in _FILES or rank_char not in "12345678":
        raise ValueError(f"Invalid square: {label!r}")
    return 8 - int(rank_char), _FILES.index(file_char)


def to_square(label: str) -> chess.Square:
    """Convert a square label to a python-chess square index."""
    row, col = square_coords(label)
    return chess.square(col, 7 - row)


def label_of(square: chess.Square) -> str:
    return chess.square_name(square)


def project_board(position: chess.Board) -> list[list[Cell | None]]:
    """Project a position onto an 8x8 grid of cells.

    Pure function of the position; recomputed wholesale after every
    mutation rather than patched.

    Args:
        position: The authoritative board.

    Returns:
        grid[row][col] holding the piece on square_label(row, col), or None.
    """
    grid: list[list[Cell | None]] = []
    for row in range(8):
        cells: list[Cell | None] = []
        for col in range(8):
            piece = position.piece_at(to_square(square_label(row, col)))
            cells.append(None if piece is None else Cell(piece.piece_type, piece.color))
        grid.append(cells)
    return grid


def grid_glyphs(grid: list[list[Cell | None]]) -> list[list[str]]:
    """Flatten a grid to glyph strings, empty string for empty squares."""
    return [["" if cell is None else cell.glyph for cell in row] for row in grid]


def grid_symbols(grid: list[list[Cell | None]]) -> list[list[str | None]]:
    """Flatten a grid to FEN letters, None for empty squares."""
    return [[None if cell is None else cell.symbol for cell in row] for row in grid]
