"""The game session: one state bundle, one entry point per user action.

GameSession owns the rules engine, the ledger, the selection machine and
the notification queue. Every action (click, restart, undo) runs to
completion, re-derives the board grid, and writes a snapshot before it
returns.
"""

from __future__ import annotations

import logging
from pathlib import Path

import chess

from chessly.board import Cell, grid_glyphs, grid_symbols, project_board, square_coords, square_label
from chessly.coordinator import MoveCoordinator
from chessly.ledger import Ledger, MoveRecord
from chessly.notifications import Notification, Notifier
from chessly.persistence import KeyValueStore, PersistenceBridge, sync_view_file
from chessly.rules import RulesEngine, parse_promotion
from chessly.selection import ClickDecision, ClickKind, SelectionMachine
from chessly.symbols import side_name, side_title

_log = logging.getLogger(__name__)


class GameSession:
    """Interaction state kept consistent with the authoritative position."""

    def __init__(
        self,
        bridge: PersistenceBridge,
        engine: RulesEngine | None = None,
        ledger: Ledger | None = None,
        selection: str | None = None,
        view_path: str | Path | None = None,
    ) -> None:
        self._bridge = bridge
        self._engine = engine if engine is not None else RulesEngine()
        self._ledger = ledger if ledger is not None else Ledger()
        self._selection = SelectionMachine(selection)
        self._notifier = Notifier()
        self._coordinator = MoveCoordinator(self._engine, self._ledger, self._notifier)
        self._view_path = Path(view_path) if view_path is not None else None
        self._grid = project_board(self._engine.position)

    @classmethod
    def open(
        cls,
        store: KeyValueStore,
        key: str = "chessly.session",
        view_path: str | Path | None = None,
    ) -> GameSession:
        """Resume the session saved under key, or start a fresh one."""
        bridge = PersistenceBridge(store, key)
        loaded = bridge.load()
        session = cls(
            bridge,
            engine=loaded.engine,
            ledger=loaded.ledger,
            selection=loaded.selection,
            view_path=view_path,
        )
        session._snapshot()
        return session

    # -- actions ---------------------------------------------------------

    def sync(self) -> bool:
        """Adopt the stored snapshot if another session has replaced it.

        Every action calls this first, so sessions sharing a store key
        act on the latest saved game instead of overwriting it.

        Returns:
            True if the in-memory state was replaced.
        """
        if not self._bridge.is_stale():
            return False
        loaded = self._bridge.load()
        self._engine = loaded.engine
        self._ledger = loaded.ledger
        self._selection = SelectionMachine(loaded.selection)
        self._coordinator = MoveCoordinator(self._engine, self._ledger, self._notifier)
        self._refresh()
        _log.info("Picked up session saved elsewhere at ply %d", self._engine.ply)
        return True

    def click(self, row: int, col: int, promotion: str | None = None) -> ClickDecision:
        """Handle a click on grid coordinate (row, col).

        Raises:
            ValueError: If the coordinate or promotion letter is invalid.
        """
        return self.click_square(square_label(row, col), promotion)

    def click_square(self, square: str, promotion: str | None = None) -> ClickDecision:
        """Handle a click on a labelled square.

        Raises:
            ValueError: If the label or promotion letter is invalid. Nothing
                is changed in that case.
        """
        square_coords(square)
        promotion_type = parse_promotion(promotion)
        self.sync()

        turn = self._engine.turn
        decision = self._selection.click(square, self._engine.piece_at(square), turn)

        if decision.kind is ClickKind.WRONG_SIDE:
            self._notifier.error(f"Invalid selection: It's {side_title(turn)}'s turn!")
        elif decision.kind is ClickKind.EMPTY_SQUARE:
            self._notifier.error("Invalid selection: No piece at this square!")
        elif decision.kind is ClickKind.ATTEMPT_MOVE:
            self._coordinator.attempt_move(decision.from_label, square, promotion_type)

        self._refresh()
        self._snapshot()
        return decision

    def move(self, from_square: str, to_square: str, promotion: str | None = None) -> bool:
        """Play a move as the two clicks that would make it.

        Returns:
            True if the move was played.

        Raises:
            ValueError: If either label or the promotion letter is invalid.
                Nothing is changed in that case.
        """
        square_coords(from_square)
        square_coords(to_square)
        parse_promotion(promotion)

        self.sync()
        ply = self._engine.ply
        self._selection.reset()
        first = self.click_square(from_square)
        if first.kind is not ClickKind.ARM:
            return False
        second = self.click_square(to_square, promotion)
        if second.kind in (ClickKind.REARM, ClickKind.DESELECT):
            self._selection.reset()
            self._notifier.error(f"Invalid move from {from_square} to {to_square}. Try again.")
            self._snapshot()
        return self._engine.ply == ply + 1

    def restart(self) -> None:
        """Start a new game from the standard position."""
        self.sync()
        self._engine.reset()
        self._ledger.reset()
        self._selection.reset()
        _log.info("Session restarted")
        self._notifier.info("New game started")
        self._refresh()
        self._snapshot()

    def undo_last(self) -> bool:
        """Take back the last move.

        Returns:
            True if a move was taken back.
        """
        self.sync()
        if not self._ledger.records:
            self._notifier.error("No moves to undo!")
            return False

        record, _ = self._ledger.undo_last(self._engine)
        self._selection.reset()
        _log.info("Undid %s", record.uci or record.description)
        self._notifier.info("Last move undone")
        self._refresh()
        self._snapshot()
        return True

    # -- projections -----------------------------------------------------

    @property
    def grid(self) -> list[list[Cell | None]]:
        return [list(row) for row in self._grid]

    @property
    def selection(self) -> str | None:
        return self._selection.armed

    @property
    def turn(self) -> chess.Color:
        return self._engine.turn

    @property
    def records(self) -> list[MoveRecord]:
        return list(self._ledger.records)

    @property
    def rosters(self) -> dict[str, list[str]]:
        return {side: list(glyphs) for side, glyphs in self._ledger.rosters.items()}

    @property
    def ply(self) -> int:
        return self._engine.ply

    @property
    def legal_targets(self) -> list[str]:
        """Legal destinations of the armed piece, empty when idle."""
        armed = self._selection.armed
        if armed is None:
            return []
        return self._engine.legal_targets(armed)

    def legal_targets_from(self, square: str) -> list[str]:
        return self._engine.legal_targets(square)

    @property
    def status(self) -> str:
        if self._engine.is_checkmate():
            return "checkmate"
        if self._engine.is_draw():
            return "draw"
        if self._engine.is_in_check():
            return "check"
        return "active"

    @property
    def result(self) -> str:
        return self._engine.result()

    def position_encoding(self) -> str:
        return self._engine.serialize()

    def pgn(self) -> str:
        return self._engine.pgn()

    def drain_notifications(self) -> list[Notification]:
        return self._notifier.drain()

    def view(self) -> dict:
        """Everything a renderer needs, as plain JSON-ready data."""
        return {
            "grid": grid_glyphs(self._grid),
            "pieces": grid_symbols(self._grid),
            "selection": self._selection.armed,
            "legal_targets": self.legal_targets,
            "turn": side_name(self._engine.turn),
            "move_history": [
                {
                    "description": r.description,
                    "captured": r.captured,
                    "san": r.san,
                    "uci": r.uci,
                }
                for r in self._ledger.records
            ],
            "captured": self.rosters,
            "status": self.status,
            "result": self.result,
            "ply": self._engine.ply,
            "fen": self._engine.fen(),
            "position": self._engine.serialize(),
        }

    # -- internals -------------------------------------------------------

    def _refresh(self) -> None:
        self._grid = project_board(self._engine.position)

    def _snapshot(self) -> None:
        self._bridge.save(self._engine, self._ledger, self._selection.armed)
        if self._view_path is not None:
            sync_view_file(self.view(), self._view_path)
