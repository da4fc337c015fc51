"""HTTP server for the browser board.

Serves index.html and a small JSON API over one GameSession. The server
handles one request at a time, so every action runs to completion before
the next click is read.
Launch: python -m chessly.web_server [--port 8088] [--data-dir data]
"""

from __future__ import annotations

import argparse
import http.server
import json
import logging
from pathlib import Path

from chessly.config import configure_logging, load_settings
from chessly.persistence import JsonFileStore
from chessly.session import GameSession

_log = logging.getLogger(__name__)

_INDEX_HTML = Path(__file__).resolve().parent / "static" / "index.html"

_MAX_BODY = 4096


class BadRequest(ValueError):
    """Request body is missing, oversized, or not what the route expects."""


class SessionHandler(http.server.BaseHTTPRequestHandler):
    """Serves the board page and the session JSON API."""

    session: GameSession

    def do_GET(self) -> None:
        if self.path == "/" or self.path == "/index.html":
            self._serve_file(_INDEX_HTML, "text/html; charset=utf-8")
        elif self.path == "/api/session":
            self.session.sync()
            self._send_view()
        elif self.path == "/api/pgn":
            self.session.sync()
            self._send_json(200, {"pgn": self.session.pgn()})
        else:
            self._send_json(404, {"error": f"Not found: {self.path}"})

    def do_POST(self) -> None:
        try:
            body = self._read_json()
            if self.path == "/api/click":
                self._handle_click(body)
            elif self.path == "/api/restart":
                self.session.restart()
            elif self.path == "/api/undo":
                self.session.undo_last()
            else:
                self._send_json(404, {"error": f"Not found: {self.path}"})
                return
        except ValueError as exc:
            self._send_json(400, {"error": str(exc)})
            return
        self._send_view()

    def _handle_click(self, body: dict) -> None:
        promotion = body.get("promotion")
        if promotion is not None and not isinstance(promotion, str):
            raise BadRequest("promotion must be a letter")
        if "square" in body:
            square = body["square"]
            if not isinstance(square, str):
                raise BadRequest("square must be a string")
            self.session.click_square(square, promotion)
            return
        row, col = body.get("row"), body.get("col")
        if not isinstance(row, int) or not isinstance(col, int) \
                or isinstance(row, bool) or isinstance(col, bool):
            raise BadRequest("row and col must be integers")
        self.session.click(row, col, promotion)

    def _read_json(self) -> dict:
        length_text = self.headers.get("Content-Length", "0")
        try:
            length = int(length_text)
        except ValueError:
            raise BadRequest("Invalid Content-Length") from None
        if length < 0 or length > _MAX_BODY:
            raise BadRequest("Request body too large")
        if length == 0:
            return {}
        try:
            body = json.loads(self.rfile.read(length).decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise BadRequest(f"Invalid JSON: {exc}") from None
        if not isinstance(body, dict):
            raise BadRequest("Request body must be a JSON object")
        return body

    def _send_view(self) -> None:
        view = self.session.view()
        view["notifications"] = [n.to_dict() for n in self.session.drain_notifications()]
        self._send_json(200, view)

    def _serve_file(self, path: Path, content_type: str) -> None:
        if not path.exists():
            self.send_error(404, f"File not found: {path.name}")
            return
        data = path.read_bytes()
        self.send_response(200)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(data)))
        self.end_headers()
        self.wfile.write(data)

    def _send_json(self, status: int, payload: dict) -> None:
        data = json.dumps(payload, ensure_ascii=False).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json; charset=utf-8")
        self.send_header("Content-Length", str(len(data)))
        self.send_header("Cache-Control", "no-cache")
        self.end_headers()
        self.wfile.write(data)

    def log_message(self, format: str, *args: object) -> None:
        _log.debug("%s - %s", self.address_string(), format % args)


def make_server(session: GameSession, host: str, port: int) -> http.server.HTTPServer:
    """Bind an HTTP server whose handler drives the given session."""
    handler = type("BoundSessionHandler", (SessionHandler,), {"session": session})
    return http.server.HTTPServer((host, port), handler)


def main() -> None:
    settings = load_settings()
    parser = argparse.ArgumentParser(description="Chessly browser board")
    parser.add_argument("--host", default=settings.host, help=f"Host (default: {settings.host})")
    parser.add_argument("--port", type=int, default=settings.port, help=f"Port (default: {settings.port})")
    parser.add_argument("--data-dir", type=Path, default=settings.data_dir, help="Session data directory")
    args = parser.parse_args()

    configure_logging(settings.log_level)
    store = JsonFileStore(args.data_dir / settings.store_path.name)
    session = GameSession.open(
        store,
        settings.session_key,
        view_path=args.data_dir / settings.view_path.name,
    )

    server = make_server(session, args.host, args.port)
    print(f"Chessly: http://{args.host}:{server.server_port}")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        print("\nShutting down.")
    finally:
        server.server_close()


if __name__ == "__main__":
    main()
