"""Session snapshot persistence.

A snapshot is one JSON blob holding the position encoding, the ledger
and the armed square, stored under a single key in a key-value store.
Writes are best-effort: failures are logged and swallowed. Reads fall
back to a fresh session whenever the blob is missing, unreadable, or
inconsistent with itself.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from chessly.board import square_coords
from chessly.ledger import Ledger
from chessly.rules import RulesEngine

_log = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


class KeyValueStore(Protocol):
    """Synchronous get/set of string blobs. Implementations never raise."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, blob: str) -> None: ...


class MemoryStore:
    """In-process store, used by tests and throwaway sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, blob: str) -> None:
        self.data[key] = blob


class JsonFileStore:
    """Key-value store backed by one JSON object on disk.

    Writes go through a temp file and os.replace() so readers never see
    a half-written file.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError, UnicodeDecodeError) as exc:
            _log.warning("Unreadable store %s: %s", self._path, exc)
            return {}
        if not isinstance(data, dict):
            _log.warning("Store %s does not hold a JSON object", self._path)
            return {}
        return data

    def get(self, key: str) -> str | None:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, blob: str) -> None:
        data = self._read_all()
        data[key] = blob
        tmp = self._path.with_suffix(".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(
                json.dumps(data, indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
            os.replace(tmp, self._path)
        except OSError as exc:
            _log.warning("Could not write store %s: %s", self._path, exc)


@dataclass
class LoadedSession:
    """State rebuilt from a snapshot, or a fresh default."""

    engine: RulesEngine = field(default_factory=RulesEngine)
    ledger: Ledger = field(default_factory=Ledger)
    selection: str | None = None
    restored: bool = False


class PersistenceBridge:
    """Saves and restores session snapshots under one store key."""

    def __init__(self, store: KeyValueStore, key: str = "chessly.session") -> None:
        self._store = store
        self._key = key
        self._last_blob: str | None = None

    @property
    def key(self) -> str:
        return self._key

    def save(self, engine: RulesEngine, ledger: Ledger, selection: str | None) -> bool:
        """Write a snapshot. Returns False if it could not be written."""
        snapshot = {
            "version": SNAPSHOT_VERSION,
            "position": engine.serialize(),
            "selection": selection,
            **ledger.to_dict(),
        }
        try:
            blob = json.dumps(snapshot, ensure_ascii=False)
            self._store.set(self._key, blob)
            self._last_blob = blob
        except (TypeError, ValueError, OSError) as exc:
            _log.warning("Snapshot not saved: %s", exc)
            return False
        return True

    def is_stale(self) -> bool:
        """True when the store holds a snapshot this bridge did not write or read.

        Another session saving under the same key makes this bridge stale.
        """
        try:
            blob = self._store.get(self._key)
        except OSError:
            return False
        return blob is not None and blob != self._last_blob

    def load(self) -> LoadedSession:
        """Read the snapshot, or return a fresh session if it is unusable."""
        try:
            blob = self._store.get(self._key)
        except OSError as exc:
            _log.warning("Snapshot not readable: %s", exc)
            return LoadedSession()
        self._last_blob = blob
        if blob is None:
            _log.info("No saved session under %s; starting fresh", self._key)
            return LoadedSession()

        try:
            loaded = _parse_snapshot(blob)
        except (ValueError, KeyError, TypeError) as exc:
            _log.warning("Discarding corrupt session snapshot: %s", exc)
            return LoadedSession()

        _log.info("Restored session at ply %d", loaded.engine.ply)
        return loaded


def _parse_snapshot(blob: str) -> LoadedSession:
    """Decode and cross-check a snapshot blob.

    Raises:
        ValueError, KeyError, TypeError: If the blob is malformed or its
            parts disagree with each other.
    """
    data = json.loads(blob)
    if not isinstance(data, dict):
        raise ValueError("Snapshot is not a JSON object")
    if data.get("version") != SNAPSHOT_VERSION:
        raise ValueError(f"Unsupported snapshot version: {data.get('version')!r}")

    engine = RulesEngine.deserialize(data["position"])
    ledger = Ledger.from_dict(data)

    if len(ledger.records) != engine.ply:
        raise ValueError(
            f"Ledger holds {len(ledger.records)} moves, position has {engine.ply}"
        )
    for record, uci in zip(ledger.records, engine.move_history()):
        if record.uci and record.uci != uci:
            raise ValueError(f"Ledger move {record.uci} does not match {uci}")

    selection = data.get("selection")
    if selection is not None:
        square_coords(selection)
        piece = engine.piece_at(selection)
        if piece is None or piece.color != engine.turn:
            raise ValueError(f"Armed square {selection} holds no piece of the side to move")

    return LoadedSession(engine=engine, ledger=ledger, selection=selection, restored=True)


def sync_view_file(view: dict, path: str | Path) -> None:
    """Mirror the session view to a JSON file for the terminal renderer.

    Best-effort; failures are logged and swallowed.
    """
    target = Path(path)
    tmp = target.with_suffix(".tmp")
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        tmp.write_text(
            json.dumps(view, indent=2, default=str, ensure_ascii=False),
            encoding="utf-8",
        )
        os.replace(tmp, target)
    except OSError as exc:
        _log.warning("Could not write view file %s: %s", target, exc)
