"""Pytest tests for the selection state machine."""

from __future__ import annotations

import chess

from chessly.selection import ClickKind, SelectionMachine

_WHITE_PAWN = chess.Piece(chess.PAWN, chess.WHITE)
_WHITE_KNIGHT = chess.Piece(chess.KNIGHT, chess.WHITE)
_BLACK_PAWN = chess.Piece(chess.PAWN, chess.BLACK)


class TestFromIdle:

    def test_own_piece_arms(self):
        machine = SelectionMachine()
        decision = machine.click("e2", _WHITE_PAWN, chess.WHITE)
        assert decision.kind is ClickKind.ARM
        assert machine.armed == "e2"

    def test_opponent_piece_is_wrong_side(self):
        machine = SelectionMachine()
        decision = machine.click("f7", _BLACK_PAWN, chess.WHITE)
        assert decision.kind is ClickKind.WRONG_SIDE
        assert decision.is_error
        assert machine.is_idle

    def test_empty_square(self):
        machine = SelectionMachine()
        decision = machine.click("e4", None, chess.WHITE)
        assert decision.kind is ClickKind.EMPTY_SQUARE
        assert machine.is_idle


class TestFromArmed:

    def test_same_square_deselects(self):
        machine = SelectionMachine("e2")
        decision = machine.click("e2", _WHITE_PAWN, chess.WHITE)
        assert decision.kind is ClickKind.DESELECT
        assert machine.is_idle

    def test_other_own_piece_rearms(self):
        machine = SelectionMachine("e2")
        decision = machine.click("g1", _WHITE_KNIGHT, chess.WHITE)
        assert decision.kind is ClickKind.REARM
        assert decision.from_label == "e2"
        assert machine.armed == "g1"

    def test_empty_target_attempts_move_and_goes_idle(self):
        machine = SelectionMachine("e2")
        decision = machine.click("e4", None, chess.WHITE)
        assert decision.kind is ClickKind.ATTEMPT_MOVE
        assert (decision.from_label, decision.square) == ("e2", "e4")
        assert machine.is_idle

    def test_opponent_target_attempts_move(self):
        machine = SelectionMachine("e2")
        decision = machine.click("f7", _BLACK_PAWN, chess.WHITE)
        assert decision.kind is ClickKind.ATTEMPT_MOVE
        assert not decision.is_error
        assert machine.is_idle

    def test_reset(self):
        machine = SelectionMachine("e2")
        machine.reset()
        assert machine.armed is None
