"""Web service with a greeting, a health check and a timestamp websocket."""

from __future__ import annotations

import argparse
import base64
import hashlib
import html
import json
import logging
import os
import select
import signal
import socket
import struct
import threading
import time
from collections.abc import Iterator, Sequence
from socketserver import ThreadingMixIn
from typing import Any
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

from flask import Flask, Response, request

from promohub.database import DatabaseService

logger = logging.getLogger(__name__)

ALLOWED_ORIGINS = ("http://localhost:5173",)
ALLOWED_METHODS = ("GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH")
ALLOWED_HEADERS = ("Accept", "Authorization", "Content-Type")

_SOCKET_KEY = "werkzeug.socket"
_WEBSOCKET_GUID = "258EAFA5-E914-47DA-95CA-C5AB0DC85B11"
_PUSH_INTERVAL = 2.0


def _json(payload: Any) -> Response:
    body = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
    return Response(body, status=200, mimetype="application/json")


def _frame(opcode: int, payload: bytes) -> bytes:
    """Encode a final, unmasked frame; every payload sent here is under 126 bytes."""
    return bytes([0x80 | opcode, len(payload)]) + payload


def _push_timestamps(sock: socket.socket) -> None:
    """Send a timestamp every two seconds until the client speaks or hangs up."""
    try:
        while True:
            sock.sendall(_frame(0x1, f"server timestamp: {time.time_ns()}".encode()))
            if select.select([sock], [], [], _PUSH_INTERVAL)[0]:
                break
    except (OSError, ValueError):
        pass
    finally:
        try:
            sock.sendall(_frame(0x8, struct.pack("!H", 1001) + b"server closing websocket"))
        except OSError:
            pass


def _websocket_stream(sock: socket.socket) -> Iterator[bytes]:
    # The connection no longer speaks HTTP: end the exchange as a closed client.
    _push_timestamps(sock)
    raise ConnectionAbortedError("connection taken over by websocket")
    yield b""  # pragma: no cover


def _handshake_problem() -> tuple[int, str] | None:
    connection = {token.strip().lower() for token in request.headers.get("Connection", "").split(",")}
    if "upgrade" not in connection or request.headers.get("Upgrade", "").lower() != "websocket":
        return 426, "not a websocket upgrade request"
    if request.headers.get("Sec-WebSocket-Version") != "13":
        return 400, "unsupported websocket protocol version"
    if not request.headers.get("Sec-WebSocket-Key", "").strip():
        return 400, "missing Sec-WebSocket-Key"
    if request.environ.get(_SOCKET_KEY) is None:
        return 500, "the server cannot hand over the connection"
    return None


def _websocket_failure(status: int, reason: str) -> Response:
    logger.warning("could not open websocket: %s", reason)
    return Response("could not open websocket", status=status, mimetype="text/plain")


def create_app(database: DatabaseService | None) -> Flask:
    """Build the application; ``database`` serves the health check."""
    app = Flask(__name__)

    @app.before_request
    def check_origin():
        origin = request.headers.get("Origin")
        if not origin or origin in (f"http://{request.host}", f"https://{request.host}"):
            return None
        if origin not in ALLOWED_ORIGINS:
            return Response(status=403)
        if request.method != "OPTIONS":
            return None
        response = Response(status=204)
        response.headers.update({
            "Access-Control-Allow-Origin": origin,
            "Access-Control-Allow-Credentials": "true",
            "Access-Control-Allow-Methods": ",".join(ALLOWED_METHODS),
            "Access-Control-Allow-Headers": ",".join(ALLOWED_HEADERS),
        })
        response.vary.add("Origin")
        return response

    @app.after_request
    def add_cors_headers(response: Response) -> Response:
        origin = request.headers.get("Origin")
        if origin in ALLOWED_ORIGINS and request.method != "OPTIONS":
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Access-Control-Allow-Credentials"] = "true"
            response.vary.add("Origin")
        return response

    @app.get("/")
    def hello_world():
        return _json({"message": "Hello World"})

    @app.get("/health")
    def health():
        if database is None:
            raise RuntimeError("no database configured")
        return _json(database.health())

    @app.get("/websocket")
    def websocket():
        problem = _handshake_problem()
        if problem is not None:
            return _websocket_failure(*problem)
        sock = request.environ[_SOCKET_KEY]
        key = request.headers["Sec-WebSocket-Key"].strip()
        accept = base64.b64encode(hashlib.sha1((key + _WEBSOCKET_GUID).encode("ascii")).digest())
        handshake = (
            "HTTP/1.1 101 Switching Protocols\r\nUpgrade: websocket\r\nConnection: Upgrade\r\n"
            f"Sec-WebSocket-Accept: {accept.decode('ascii')}\r\n\r\n"
        )
        try:
            sock.sendall(handshake.encode("ascii"))
        except OSError as exc:
            return _websocket_failure(500, str(exc))
        return Response(_websocket_stream(sock))

    @app.post("/hello")
    def hello():
        name = html.escape(request.form.get("name", ""))
        body = f'<div class="bg-green-100 p-4 shadow-md rounded-lg mt-6"><p>Hello, {name}</p></div>'
        return Response(body, status=200, mimetype="text/html")

    return app


class _RequestHandler(WSGIRequestHandler):
    timeout = 30

    def get_environ(self) -> dict[str, Any]:
        environ = super().get_environ()
        environ[_SOCKET_KEY] = self.connection
        return environ


class _ThreadingWSGIServer(ThreadingMixIn, WSGIServer):
    daemon_threads = True


def main(argv: Sequence[str] | None = None) -> int:
    """Serve the application until SIGINT or SIGTERM, then shut down cleanly."""
    try:
        default_port = int(os.environ.get("PORT", ""))
    except ValueError:
        default_port = 0
    parser = argparse.ArgumentParser(prog="promohub-server", description="Serve the web service.")
    parser.add_argument("--port", type=int, default=default_port, help="port to listen on")
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")

    database = DatabaseService.from_environ()
    server = make_server(
        "", args.port, create_app(database),
        server_class=_ThreadingWSGIServer, handler_class=_RequestHandler,
    )
    watched = (signal.SIGINT, signal.SIGTERM)

    def on_signal(signum: int, frame: object) -> None:
        logger.info("shutting down gracefully, press Ctrl+C again to force")
        for sig in watched:
            signal.signal(sig, signal.SIG_DFL)
        threading.Thread(target=server.shutdown, daemon=True).start()

    previous = {sig: signal.signal(sig, on_signal) for sig in watched}
    try:
        server.serve_forever()
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)
        server.server_close()
        database.close()
    logger.info("Server exiting")
    logger.info("Graceful shutdown complete.")
    return 0