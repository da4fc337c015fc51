"""Move history and captured-piece rosters.

Each MoveRecord remembers which roster, if any, received its captured
glyph, so taking a move back pops from that roster without working the
capturing side out again.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING

from chessly.symbols import SIDES

if TYPE_CHECKING:
    from chessly.rules import MoveOutcome, RulesEngine

_log = logging.getLogger(__name__)


class NothingToUndoError(ValueError):
    """Raised when taking back a move with an empty history."""


class LedgerDesyncError(ValueError):
    """Raised when the engine and the ledger disagree about the history."""


@dataclass(frozen=True)
class MoveRecord:
    """One completed half-move as shown in the history panel."""

    description: str
    captured: str | None = None
    roster: str | None = None
    san: str = ""
    uci: str = ""


@dataclass
class Ledger:
    """Append-only move log plus one captured-piece roster per side."""

    records: list[MoveRecord] = field(default_factory=list)
    rosters: dict[str, list[str]] = field(
        default_factory=lambda: {"white": [], "black": []}
    )

    def append(
        self,
        description: str,
        captured: str | None = None,
        capturing_side: str | None = None,
        san: str = "",
        uci: str = "",
    ) -> MoveRecord:
        """Record a move and, if it captured, credit the capturing side.

        Args:
            description: History text for the move.
            captured: Glyph of the captured piece, or None.
            capturing_side: 'white' or 'black'; required with a capture.
            san: Standard algebraic notation of the move.
            uci: UCI notation of the move.

        Returns:
            The appended record.

        Raises:
            ValueError: If a capture has no valid capturing side.
        """
        roster = None
        if captured is not None:
            if capturing_side not in SIDES:
                raise ValueError(f"Invalid capturing side: {capturing_side!r}")
            self.rosters[capturing_side].append(captured)
            roster = capturing_side
        record = MoveRecord(
            description=description,
            captured=captured,
            roster=roster,
            san=san,
            uci=uci,
        )
        self.records.append(record)
        return record

    def pop_last(self) -> MoveRecord:
        """Remove the last record and its roster entry.

        Raises:
            NothingToUndoError: If there is no record.
        """
        if not self.records:
            raise NothingToUndoError("Nothing to undo")
        record = self.records.pop()
        if record.roster is not None:
            self.rosters[record.roster].pop()
        return record

    def undo_last(self, engine: RulesEngine) -> tuple[MoveRecord, MoveOutcome]:
        """Take back the last move in the engine and the ledger together.

        Raises:
            NothingToUndoError: If there is no record.
            LedgerDesyncError: If the engine has no move to take back.
        """
        if not self.records:
            raise NothingToUndoError("Nothing to undo")
        outcome = engine.undo()
        if outcome is None:
            raise LedgerDesyncError(
                f"Engine has no move to undo but ledger holds {len(self.records)}"
            )
        record = self.pop_last()
        if record.uci and record.uci != outcome.uci:
            _log.warning("Undo mismatch: ledger %s, engine %s", record.uci, outcome.uci)
        return record, outcome

    def reset(self) -> None:
        self.records.clear()
        for roster in self.rosters.values():
            roster.clear()

    @property
    def capture_count(self) -> int:
        return sum(1 for r in self.records if r.captured is not None)

    def descriptions(self) -> list[str]:
        return [r.description for r in self.records]

    def is_consistent(self) -> bool:
        """Roster sizes match the records that point at them."""
        for side in SIDES:
            expected = [r.captured for r in self.records if r.roster == side]
            if expected != self.rosters[side]:
                return False
        return True

    def to_dict(self) -> dict:
        return {
            "records": [asdict(r) for r in self.records],
            "rosters": {side: list(self.rosters[side]) for side in SIDES},
        }

    @classmethod
    def from_dict(cls, data: dict) -> Ledger:
        """Rebuild a ledger from to_dict() output.

        Raises:
            ValueError, KeyError, TypeError: On malformed input.
        """
        raw_records = data["records"]
        raw_rosters = data["rosters"]
        if not isinstance(raw_records, list) or not isinstance(raw_rosters, dict):
            raise ValueError("Ledger data has the wrong shape")

        records = []
        for raw in raw_records:
            if not isinstance(raw, dict):
                raise ValueError("Move record must be an object")
            record = MoveRecord(**raw)
            if not isinstance(record.description, str):
                raise ValueError("Move description must be a string")
            if record.roster is not None and record.roster not in SIDES:
                raise ValueError(f"Invalid roster: {record.roster!r}")
            if (record.captured is None) != (record.roster is None):
                raise ValueError("Captured glyph and roster must be set together")
            records.append(record)

        rosters = {}
        for side in SIDES:
            roster = raw_rosters[side]
            if not isinstance(roster, list) or not all(isinstance(g, str) for g in roster):
                raise ValueError(f"Roster {side} must be a list of glyphs")
            rosters[side] = list(roster)

        ledger = cls(records=records, rosters=rosters)
        if not ledger.is_consistent():
            raise ValueError("Rosters do not match the move records")
        return ledger
