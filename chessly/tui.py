"""Terminal board for Chessly.

Renders a Rich-based board from the session view file that the game
session mirrors after every action, and redraws when watchdog reports a
change. --once renders the current view and exits.
"""

from __future__ import annotations

import argparse
import json
import sys
import time
from pathlib import Path

from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from chessly.board import square_label
from chessly.config import load_settings

_LIGHT_SQ = "grey85"
_DARK_SQ = "grey50"
_SELECTED = "yellow"
_TARGET = "dark_sea_green"

_STATUS_TEXT = {
    "check": "[bold yellow]Check[/bold yellow]",
    "checkmate": "[bold red]Checkmate[/bold red]",
    "draw": "[bold]Draw[/bold]",
}


def load_view(path: Path) -> dict | None:
    """Load a session view dict from a JSON file.

    Args:
        path: Path to the JSON file.

    Returns:
        Parsed dict or None if file missing/corrupt.
    """
    if not path.exists():
        return None
    try:
        text = path.read_text(encoding="utf-8")
        data = json.loads(text)
        if isinstance(data, dict) and isinstance(data.get("grid"), list):
            return data
        return None
    except (json.JSONDecodeError, OSError):
        return None


def render_board(view: dict) -> Layout:
    """Render the full board layout from a session view.

    Args:
        view: Session view with grid, selection, move_history, etc.

    Returns:
        Rich Layout with board and sidebar.
    """
    layout = Layout()
    layout.split_row(
        Layout(name="board", ratio=2),
        Layout(name="sidebar", ratio=1),
    )
    layout["board"].update(render_board_panel(view))
    layout["sidebar"].update(render_sidebar(view))
    return layout


def render_board_panel(view: dict) -> Panel:
    """Render the grid, highlighting the armed square and its targets."""
    grid = view.get("grid", [])
    selection = view.get("selection")
    targets = set(view.get("legal_targets", []))

    table = Table(show_header=False, show_edge=False, pad_edge=False,
                  box=None, padding=(0, 1))
    table.add_column(width=2, justify="right")
    for _ in range(8):
        table.add_column(width=3, justify="center")

    for row, cells in enumerate(grid):
        line: list[Text] = [Text(str(8 - row), style="bold")]
        for col, symbol in enumerate(cells):
            label = square_label(row, col)
            bg = _DARK_SQ if (row + col) % 2 == 1 else _LIGHT_SQ
            if label == selection:
                bg = _SELECTED
            elif label in targets:
                bg = _TARGET
            line.append(Text(f" {symbol or ' '} ", style=f"on {bg}"))
        table.add_row(*line)

    file_labels = [Text("  ")]
    for col in range(8):
        file_labels.append(Text(f" {chr(ord('a') + col)} ", style="bold"))
    table.add_row(*file_labels)

    title = "Chessly"
    if view.get("status") in ("checkmate", "draw"):
        title = f"Game Over: {view.get('result', '?')}"

    return Panel(table, title=title, border_style="blue")


def render_sidebar(view: dict) -> Panel:
    """Render turn, status, captured pieces and move history."""
    parts: list[str] = []

    turn = view.get("turn", "white")
    parts.append(f"[bold]Current Turn:[/bold] {turn.capitalize()}")
    status = _STATUS_TEXT.get(view.get("status", "active"))
    if status:
        parts.append(status)
    parts.append("")

    captured = view.get("captured", {})
    parts.append("[bold]Captured by White:[/bold]")
    parts.append("  " + " ".join(captured.get("white", [])))
    parts.append("[bold]Captured by Black:[/bold]")
    parts.append("  " + " ".join(captured.get("black", [])))
    parts.append("")

    history = view.get("move_history", [])
    if history:
        parts.append("[bold]Move History:[/bold]")
        for i, entry in enumerate(history, 1):
            parts.append(f"  {i}. {entry.get('description', '')}")

    content = "\n".join(parts)
    return Panel(content, title="Game", border_style="green")


def _render_waiting() -> Panel:
    return Panel(
        Text("Waiting for a session...\n\nStart the web server to see the board.",
             justify="center"),
        title="Chessly",
        border_style="dim",
    )


def _watch_loop(console: Console, view_path: Path) -> None:
    """Watch the view file and redraw at ~4Hz when it changes."""
    from watchdog.events import FileSystemEventHandler
    from watchdog.observers import Observer

    last_view: dict | None = None
    view_changed = True

    class _Handler(FileSystemEventHandler):
        def on_any_event(self, event):
            nonlocal view_changed
            if str(event.src_path).endswith(view_path.name) or \
                    str(getattr(event, "dest_path", "")).endswith(view_path.name):
                view_changed = True

    observer = Observer()
    view_path.parent.mkdir(parents=True, exist_ok=True)
    observer.schedule(_Handler(), str(view_path.parent), recursive=False)
    observer.start()

    try:
        with Live(console=console, refresh_per_second=4) as live:
            while True:
                if view_changed:
                    view = load_view(view_path)
                    if view is not None:
                        last_view = view
                        live.update(render_board(view))
                    elif last_view is None:
                        live.update(_render_waiting())
                    view_changed = False
                time.sleep(0.25)
    except KeyboardInterrupt:
        pass
    finally:
        observer.stop()
        observer.join()


def main() -> None:
    """CLI entry point for the terminal board."""
    settings = load_settings()
    parser = argparse.ArgumentParser(description="Chessly terminal board")
    parser.add_argument(
        "--once", action="store_true",
        help="Render the current session and exit (no watch loop)",
    )
    parser.add_argument(
        "--file", type=Path, default=settings.view_path,
        help="Session view file to render",
    )
    args = parser.parse_args()

    console = Console()

    if args.once:
        view = load_view(args.file)
        if view is None:
            console.print(f"[red]No session view found at {args.file}[/red]")
            sys.exit(1)
        console.print(render_board(view))
        return

    _watch_loop(console, args.file)


if __name__ == "__main__":
    main()
