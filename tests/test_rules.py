"""Pytest tests for the python-chess rules adapter.

Covers move submission (captures, en passant, promotion, castling),
undo, game-state queries, and the position encoding.
"""

from __future__ import annotations

import chess
import pytest

from chessly.rules import RulesEngine, parse_promotion


def _engine_after(*ucis: str) -> RulesEngine:
    engine = RulesEngine()
    for uci in ucis:
        assert engine.submit_move(uci[:2], uci[2:4]) is not None, uci
    return engine


# ---------------------------------------------------------------------------
# Move submission
# ---------------------------------------------------------------------------


class TestSubmitMove:

    def test_legal_move(self):
        engine = RulesEngine()
        outcome = engine.submit_move("e2", "e4")
        assert outcome is not None
        assert (outcome.from_label, outcome.to_label) == ("e2", "e4")
        assert outcome.mover == chess.WHITE
        assert outcome.mover_name == "white"
        assert outcome.piece_type == chess.PAWN
        assert outcome.captured is None
        assert outcome.san == "e4"
        assert outcome.uci == "e2e4"
        assert engine.turn == chess.BLACK
        assert engine.ply == 1

    def test_illegal_move_is_rejected_without_mutation(self):
        engine = RulesEngine()
        fen = engine.fen()
        assert engine.submit_move("e2", "e5") is None
        assert engine.submit_move("e7", "e5") is None
        assert engine.fen() == fen
        assert engine.ply == 0

    def test_capture_reports_captured_kind(self):
        engine = _engine_after("e2e4", "g8f6", "e4e5", "a7a6")
        outcome = engine.submit_move("e5", "f6")
        assert outcome.captured == chess.KNIGHT
        assert outcome.san == "exf6"

    def test_en_passant_captures_pawn(self):
        engine = _engine_after("e2e4", "a7a6", "e4e5", "d7d5")
        outcome = engine.submit_move("e5", "d6")
        assert outcome.captured == chess.PAWN
        assert engine.piece_at("d5") is None

    def test_promotion_defaults_to_queen(self):
        engine = RulesEngine(chess.Board("8/P6k/8/8/8/8/8/K7 w - - 0 1"))
        outcome = engine.submit_move("a7", "a8")
        assert outcome.promotion == chess.QUEEN
        assert engine.piece_at("a8") == chess.Piece(chess.QUEEN, chess.WHITE)

    def test_underpromotion(self):
        engine = RulesEngine(chess.Board("8/P6k/8/8/8/8/8/K7 w - - 0 1"))
        outcome = engine.submit_move("a7", "a8", chess.KNIGHT)
        assert outcome.uci == "a7a8n"
        assert engine.piece_at("a8") == chess.Piece(chess.KNIGHT, chess.WHITE)

    def test_castling_reports_king_move(self):
        engine = _engine_after("e2e4", "e7e5", "g1f3", "b8c6", "f1c4", "g8f6")
        outcome = engine.submit_move("e1", "g1")
        assert outcome.piece_type == chess.KING
        assert outcome.to_label == "g1"
        assert outcome.san == "O-O"
        assert engine.piece_at("f1") == chess.Piece(chess.ROOK, chess.WHITE)

    def test_legal_targets(self):
        engine = RulesEngine()
        assert engine.legal_targets("g1") == ["f3", "h3"]
        assert engine.legal_targets("e2") == ["e3", "e4"]
        assert engine.legal_targets("e1") == []

    def test_parse_promotion(self):
        assert parse_promotion(None) is None
        assert parse_promotion("Q") == chess.QUEEN
        assert parse_promotion("n") == chess.KNIGHT
        with pytest.raises(ValueError, match="Invalid promotion"):
            parse_promotion("k")


# ---------------------------------------------------------------------------
# Undo and reset
# ---------------------------------------------------------------------------


class TestUndo:

    def test_undo_restores_position(self):
        engine = RulesEngine()
        start = engine.fen()
        engine.submit_move("e2", "e4")
        outcome = engine.undo()
        assert outcome.uci == "e2e4"
        assert outcome.mover == chess.WHITE
        assert engine.fen() == start

    def test_undo_capture_descriptor(self):
        engine = _engine_after("e2e4", "d7d5", "e4d5")
        outcome = engine.undo()
        assert outcome.captured == chess.PAWN
        assert engine.piece_at("d5") == chess.Piece(chess.PAWN, chess.BLACK)

    def test_undo_empty(self):
        assert RulesEngine().undo() is None

    def test_reset(self):
        engine = _engine_after("e2e4")
        engine.reset()
        assert engine.fen() == chess.STARTING_FEN
        assert engine.ply == 0


# ---------------------------------------------------------------------------
# Game state
# ---------------------------------------------------------------------------


class TestGameState:

    def test_checkmate(self):
        engine = _engine_after("f2f3", "e7e5", "g2g4", "d8h4")
        assert engine.is_checkmate()
        assert engine.is_in_check()
        assert not engine.is_draw()
        assert engine.result() == "0-1"
        assert engine.is_game_over()

    def test_check(self):
        engine = _engine_after("e2e4", "f7f5", "d1h5")
        assert engine.is_in_check()
        assert not engine.is_checkmate()
        assert engine.result() == "*"

    def test_stalemate_is_draw(self):
        engine = RulesEngine(chess.Board("7k/8/6K1/5Q2/8/8/8/8 w - - 0 1"))
        engine.submit_move("f5", "f7")
        assert engine.is_draw()
        assert not engine.is_checkmate()
        assert engine.result() == "1/2-1/2"

    def test_insufficient_material_is_draw(self):
        engine = RulesEngine(chess.Board("8/8/8/4k3/8/8/8/4K3 w - - 0 1"))
        assert engine.is_draw()

    def test_fifty_move_rule_only_once_reached(self):
        engine = RulesEngine(chess.Board("7k/8/8/8/8/8/8/K5R1 w - - 99 80"))
        assert not engine.is_draw()
        assert engine.result() == "*"
        engine.submit_move("g1", "f1")
        assert engine.is_draw()

    def test_threefold_repetition_only_once_reached(self):
        engine = _engine_after("g1f3", "g8f6", "f3g1", "f6g8", "g1f3", "g8f6", "f3g1")
        assert not engine.is_draw()
        engine.submit_move("f6", "g8")
        assert engine.is_draw()


# ---------------------------------------------------------------------------
# Position encoding
# ---------------------------------------------------------------------------


class TestEncoding:

    def test_startpos(self):
        assert RulesEngine().serialize() == "startpos"

    def test_startpos_with_moves(self):
        engine = _engine_after("e2e4", "e7e5")
        assert engine.serialize() == "startpos moves e2e4 e7e5"

    def test_round_trip_keeps_history(self):
        engine = _engine_after("e2e4", "d7d5", "e4d5")
        restored = RulesEngine.deserialize(engine.serialize())
        assert restored.fen() == engine.fen()
        assert restored.move_history() == ["e2e4", "d7d5", "e4d5"]
        assert restored.undo().uci == "e4d5"

    def test_custom_fen_with_moves(self):
        fen = "8/P6k/8/8/8/8/8/K7 w - - 0 1"
        engine = RulesEngine(chess.Board(fen))
        engine.submit_move("a7", "a8")
        text = engine.serialize()
        assert text == f"fen {fen} moves a7a8q"
        assert RulesEngine.deserialize(text).fen() == engine.fen()

    @pytest.mark.parametrize("text", [
        "",
        "   ",
        "moves e2e4",
        "nonsense",
        "fen",
        "fen not/a/fen w - - 0 1",
        "startpos moves e2e5",
        "startpos moves zz99",
        "fen 8/8/8/8/8/8/8/8 w - - 0 1",
    ])
    def test_invalid_encodings(self, text):
        with pytest.raises(ValueError):
            RulesEngine.deserialize(text)

    def test_non_string_encoding(self):
        with pytest.raises(ValueError):
            RulesEngine.deserialize(42)

    def test_pgn_export(self):
        engine = _engine_after("e2e4", "e7e5", "g1f3")
        pgn = engine.pgn({"White": "Alice"})
        assert '[Event "Chessly"]' in pgn
        assert '[White "Alice"]' in pgn
        assert "1. e4 e5 2. Nf3" in pgn
