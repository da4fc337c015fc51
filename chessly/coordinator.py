"""Move submission and its fan-out to the ledger and notifications."""

from __future__ import annotations

import logging

import chess

from chessly.ledger import Ledger
from chessly.notifications import Notifier
from chessly.rules import MoveOutcome, RulesEngine
from chessly.symbols import glyph, side_name, side_title

_log = logging.getLogger(__name__)


def describe_move(outcome: MoveOutcome) -> str:
    """History text, e.g. '♙ moved from e2 to e4'."""
    symbol = glyph(outcome.piece_type, outcome.mover)
    return f"{symbol} moved from {outcome.from_label} to {outcome.to_label}"


class MoveCoordinator:
    """Submits moves to the engine and keeps the ledger in step."""

    def __init__(self, engine: RulesEngine, ledger: Ledger, notifier: Notifier) -> None:
        self.engine = engine
        self.ledger = ledger
        self.notifier = notifier

    def attempt_move(
        self,
        from_label: str,
        to_label: str,
        promotion: chess.PieceType | None = None,
    ) -> bool:
        """Try a move and report the result.

        On success the move is logged to the ledger, a capture is credited
        to the mover's roster, and at most one game-state notification is
        raised (checkmate, else draw, else check). On rejection nothing
        changes except an error notification.

        Returns:
            True if the engine accepted the move.
        """
        outcome = self.engine.submit_move(from_label, to_label, promotion)
        if outcome is None:
            _log.info("Rejected move %s-%s", from_label, to_label)
            self.notifier.error(f"Invalid move from {from_label} to {to_label}. Try again.")
            return False

        captured_glyph = None
        if outcome.captured is not None:
            # After the move the side to move is the one that lost the piece.
            captured_glyph = glyph(outcome.captured, self.engine.turn)

        self.ledger.append(
            describe_move(outcome),
            captured=captured_glyph,
            capturing_side=side_name(outcome.mover),
            san=outcome.san,
            uci=outcome.uci,
        )
        _log.info("Move %d: %s (%s)", self.engine.ply, outcome.san, outcome.uci)

        self._announce(outcome)
        return True

    def _announce(self, outcome: MoveOutcome) -> None:
        if self.engine.is_checkmate():
            self.notifier.success(f"{side_title(outcome.mover)} wins by checkmate!")
        elif self.engine.is_draw():
            self.notifier.info("The game is a draw!")
        elif self.engine.is_in_check():
            self.notifier.info(f"{side_title(self.engine.turn)} is in check!")
