"""Click interpretation: which square, if any, is armed.

The machine is Idle or Armed(square). It never looks at chess rules
beyond "is this piece on the side to move"; move legality is the
coordinator's business.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

import chess


class ClickKind(enum.Enum):
    ARM = "arm"
    REARM = "rearm"
    DESELECT = "deselect"
    ATTEMPT_MOVE = "attempt_move"
    WRONG_SIDE = "wrong_side"
    EMPTY_SQUARE = "empty_square"


@dataclass(frozen=True)
class ClickDecision:
    """What a click means, as decided by the selection machine."""

    kind: ClickKind
    square: str
    from_label: str | None = None

    @property
    def is_error(self) -> bool:
        return self.kind in (ClickKind.WRONG_SIDE, ClickKind.EMPTY_SQUARE)


class SelectionMachine:
    """Tracks at most one armed square."""

    def __init__(self, armed: str | None = None) -> None:
        self._armed = armed

    @property
    def armed(self) -> str | None:
        return self._armed

    @property
    def is_idle(self) -> bool:
        return self._armed is None

    def reset(self) -> None:
        self._armed = None

    def click(
        self,
        square: str,
        piece: chess.Piece | None,
        turn: chess.Color,
    ) -> ClickDecision:
        """Apply a click on a square.

        Args:
            square: Label of the clicked square.
            piece: Piece on that square, or None.
            turn: Side to move.

        Returns:
            The decision. For ATTEMPT_MOVE the machine is already back to
            Idle, whatever the move's outcome turns out to be.
        """
        own_piece = piece is not None and piece.color == turn

        if self._armed is None:
            if own_piece:
                self._armed = square
                return ClickDecision(ClickKind.ARM, square)
            if piece is not None:
                return ClickDecision(ClickKind.WRONG_SIDE, square)
            return ClickDecision(ClickKind.EMPTY_SQUARE, square)

        armed = self._armed
        if square == armed:
            self._armed = None
            return ClickDecision(ClickKind.DESELECT, square)
        if own_piece:
            self._armed = square
            return ClickDecision(ClickKind.REARM, square, from_label=armed)

        self._armed = None
        return ClickDecision(ClickKind.ATTEMPT_MOVE, square, from_label=armed)
