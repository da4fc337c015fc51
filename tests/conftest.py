"""Shared test fixtures.

Usage:
    pytest tests/

Fixtures:
    store              - Empty in-memory key-value store.
    session            - Fresh GameSession backed by the store.
    play               - Clicks a sequence of squares on a session.
    moves              - Plays a sequence of UCI moves as click pairs.
    enable_validation  - Sets CHESSLY_VALIDATE=1 for schema validation.
"""

from __future__ import annotations

import os

import pytest

from chessly.persistence import MemoryStore
from chessly.session import GameSession


@pytest.fixture()
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture()
def session(store) -> GameSession:
    """A fresh session with its notifications already drained."""
    s = GameSession.open(store)
    s.drain_notifications()
    return s


@pytest.fixture()
def play():
    """Return a helper that clicks each square label in order."""

    def _play(session: GameSession, *squares: str) -> None:
        for square in squares:
            session.click_square(square)

    return _play


@pytest.fixture()
def moves():
    """Return a helper that plays UCI moves ('e2e4') and asserts each lands."""

    def _moves(session: GameSession, *ucis: str) -> None:
        for uci in ucis:
            promotion = uci[4:] or None
            assert session.move(uci[:2], uci[2:4], promotion), f"move {uci} rejected"

    return _moves


# ---------------------------------------------------------------------------
# Schema validation fixture
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def enable_validation():
    """Set CHESSLY_VALIDATE=1 for the test.

    Restores the original env var value after the test.
    """
    original = os.environ.get("CHESSLY_VALIDATE")
    os.environ["CHESSLY_VALIDATE"] = "1"
    yield
    if original is None:
        os.environ.pop("CHESSLY_VALIDATE", None)
    else:
        os.environ["CHESSLY_VALIDATE"] = original
