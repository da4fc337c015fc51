"""Rules engine adapter over python-chess.

RulesEngine is the only owner of the authoritative chess.Board. Callers
query it, submit moves, undo, and serialize it; nothing else mutates the
board. Legality, check, checkmate and draw detection all come from
python-chess.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import chess
import chess.pgn

from chessly.board import label_of, to_square
from chessly.symbols import side_name

_log = logging.getLogger(__name__)

_PROMOTION_LETTERS = {
    "q": chess.QUEEN,
    "r": chess.ROOK,
    "b": chess.BISHOP,
    "n": chess.KNIGHT,
}


@dataclass(frozen=True)
class MoveOutcome:
    """Descriptor of a move the engine accepted (or just took back)."""

    from_label: str
    to_label: str
    mover: chess.Color
    piece_type: chess.PieceType
    captured: chess.PieceType | None
    san: str
    uci: str
    promotion: chess.PieceType | None = None

    @property
    def mover_name(self) -> str:
        return side_name(self.mover)


def parse_promotion(letter: str | None) -> chess.PieceType | None:
    """Convert a promotion letter ('q', 'r', 'b', 'n') to a piece type.

    Raises:
        ValueError: If the letter is not a promotion piece.
    """
    if letter is None:
        return None
    try:
        return _PROMOTION_LETTERS[letter.lower()]
    except (KeyError, AttributeError):
        raise ValueError(f"Invalid promotion piece: {letter!r}") from None


class RulesEngine:
    """Exclusively-owned wrapper around a python-chess Board."""

    def __init__(self, board: chess.Board | None = None) -> None:
        self._board = board if board is not None else chess.Board()

    # -- queries ---------------------------------------------------------

    @property
    def position(self) -> chess.Board:
        """A copy of the current position, safe to hand to projectors."""
        return self._board.copy()

    @property
    def turn(self) -> chess.Color:
        return self._board.turn

    @property
    def ply(self) -> int:
        """Number of half-moves played since the starting position."""
        return len(self._board.move_stack)

    def piece_at(self, label: str) -> chess.Piece | None:
        return self._board.piece_at(to_square(label))

    def fen(self) -> str:
        return self._board.fen()

    def move_history(self) -> list[str]:
        """UCI strings of the moves played, oldest first."""
        return [m.uci() for m in self._board.move_stack]

    def legal_targets(self, label: str) -> list[str]:
        """Destination labels of legal moves starting on a square."""
        origin = to_square(label)
        targets = {
            label_of(m.to_square)
            for m in self._board.legal_moves
            if m.from_square == origin
        }
        return sorted(targets)

    def is_checkmate(self) -> bool:
        return self._board.is_checkmate()

    def is_draw(self) -> bool:
        """True once a draw has been reached on the board.

        Covers stalemate, dead positions, the fifty and seventy-five move
        rules, and threefold or fivefold repetition of the current position.
        """
        board = self._board
        return (
            board.is_stalemate()
            or board.is_insufficient_material()
            or board.is_seventyfive_moves()
            or board.is_fivefold_repetition()
            or board.is_fifty_moves()
            or board.is_repetition(3)
        )

    def is_in_check(self) -> bool:
        return self._board.is_check()

    def is_game_over(self) -> bool:
        return self.is_checkmate() or self.is_draw()

    def result(self) -> str:
        if self.is_checkmate():
            return "0-1" if self._board.turn == chess.WHITE else "1-0"
        if self.is_draw():
            return "1/2-1/2"
        return "*"

    # -- mutations -------------------------------------------------------

    def submit_move(
        self,
        from_label: str,
        to_label: str,
        promotion: chess.PieceType | None = None,
    ) -> MoveOutcome | None:
        """Play a move if it is legal.

        Pawn moves to the last rank promote to a queen unless another
        promotion piece is given.

        Args:
            from_label: Origin square label.
            to_label: Destination square label.
            promotion: Optional promotion piece type.

        Returns:
            The accepted move's descriptor, or None if the engine rejects it.
            A rejected move leaves the position untouched.
        """
        try:
            move = self._board.find_move(
                to_square(from_label), to_square(to_label), promotion
            )
        except chess.IllegalMoveError:
            return None

        outcome = self._describe(move)
        self._board.push(move)
        _log.debug("Move %s accepted (%s)", outcome.uci, outcome.san)
        return outcome

    def undo(self) -> MoveOutcome | None:
        """Take back the last move.

        Returns:
            Descriptor of the move taken back, or None if there is none.
        """
        if not self._board.move_stack:
            return None
        move = self._board.pop()
        return self._describe(move)

    def reset(self) -> None:
        self._board = chess.Board()

    def _describe(self, move: chess.Move) -> MoveOutcome:
        """Describe a move against the position it is played from."""
        board = self._board
        piece = board.piece_at(move.from_square)
        if board.is_en_passant(move):
            captured = chess.PAWN
        elif board.is_capture(move):
            captured = board.piece_type_at(move.to_square)
        else:
            captured = None
        return MoveOutcome(
            from_label=label_of(move.from_square),
            to_label=label_of(move.to_square),
            mover=board.turn,
            piece_type=piece.piece_type,
            captured=captured,
            san=board.san(move),
            uci=move.uci(),
            promotion=move.promotion,
        )

    # -- encoding --------------------------------------------------------

    def serialize(self) -> str:
        """Encode the position including its move history.

        Uses the UCI 'position' command syntax without the keyword:
            startpos
            startpos moves e2e4 e7e5
            fen <FEN> moves e2e4
        """
        root = self._board.root()
        if root.fen() == chess.STARTING_FEN:
            parts = ["startpos"]
        else:
            parts = ["fen", root.fen()]
        if self._board.move_stack:
            parts.append("moves")
            parts.extend(m.uci() for m in self._board.move_stack)
        return " ".join(parts)

    @classmethod
    def deserialize(cls, text: str) -> RulesEngine:
        """Rebuild an engine from serialize() output by replaying its moves.

        Raises:
            ValueError: On an unknown keyword, an invalid FEN, or an
                illegal move in the history.
        """
        if not isinstance(text, str):
            raise ValueError("Position encoding must be a string")
        tokens = text.split()
        if not tokens:
            raise ValueError("Empty position encoding")

        if "moves" in tokens:
            moves_idx = tokens.index("moves")
            head, move_tokens = tokens[:moves_idx], tokens[moves_idx + 1:]
        else:
            head, move_tokens = tokens, []

        if head == ["startpos"]:
            board = chess.Board()
        elif len(head) > 1 and head[0] == "fen":
            board = chess.Board(" ".join(head[1:]))
            if not board.is_valid():
                raise ValueError(f"Invalid FEN position: {' '.join(head[1:])}")
        else:
            raise ValueError(f"Unknown position type: {' '.join(head)!r}")

        for uci in move_tokens:
            move = chess.Move.from_uci(uci)
            if move not in board.legal_moves:
                raise ValueError(f"Illegal move in history: {uci}")
            board.push(move)

        return cls(board)

    def pgn(self, headers: dict[str, str] | None = None) -> str:
        """Export the game so far as a PGN string."""
        game = chess.pgn.Game.from_board(self._board)
        game.headers["Event"] = "Chessly"
        game.headers["Result"] = self.result()
        for key, value in (headers or {}).items():
            game.headers[key] = value
        return str(game)
