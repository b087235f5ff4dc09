"""HTTP service for server mode.

Exposes the subset of the bridge API that browser clients fall back to:
``GET /api/list-projects`` and ``POST /api/create-project``.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Callable, Iterable
from socketserver import ThreadingMixIn
from typing import Any
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

from neuralforge.api_schema import CreateProjectBody, parse_payload
from neuralforge.projects import ProjectStore

logger = logging.getLogger(__name__)

StartResponse = Callable[[str, list[tuple[str, str]]], Any]
WsgiApp = Callable[[dict[str, Any], StartResponse], Iterable[bytes]]

_ALLOWED_METHODS = "GET,POST,HEAD,PUT,DELETE,PATCH,OPTIONS"
_CORS_HEADERS = [
    ("Access-Control-Allow-Origin", "*"),
    ("Access-Control-Allow-Methods", _ALLOWED_METHODS),
    ("Access-Control-Allow-Headers", "Content-Type"),
]


class _ThreadedWSGIServer(ThreadingMixIn, WSGIServer):
    daemon_threads = True


class _LoggingRequestHandler(WSGIRequestHandler):
    def log_message(self, format: str, *args: object) -> None:  # noqa: A002
        logger.debug("%s %s", self.address_string(), format % args)


def build_app(store: ProjectStore) -> WsgiApp:
    def app(environ: dict[str, Any], start_response: StartResponse) -> Iterable[bytes]:
        method = environ.get("REQUEST_METHOD", "GET").upper()
        path = environ.get("PATH_INFO", "/") or "/"
        if method == "OPTIONS":
            return _respond(start_response, "204 No Content", b"")
        if path == "/api/list-projects":
            if method not in {"GET", "HEAD"}:
                return _text(start_response, "405 Method Not Allowed", "method not allowed")
            return _list_projects(store, start_response)
        if path == "/api/create-project":
            if method != "POST":
                return _text(start_response, "405 Method Not Allowed", "method not allowed")
            return _create_project(store, environ, start_response)
        return _text(start_response, "404 Not Found", "not found")

    return app


def _list_projects(store: ProjectStore, start_response: StartResponse) -> Iterable[bytes]:
    try:
        projects = store.list()
    except OSError as exc:
        logger.exception("list projects failed")
        return _text(start_response, "500 Internal Server Error", f"Failed to list projects: {exc}")
    if not projects:
        return _respond(start_response, "204 No Content", b"")
    return _json(start_response, "200 OK", projects)


def _create_project(store: ProjectStore, environ: dict[str, Any], start_response: StartResponse) -> Iterable[bytes]:
    try:
        length = int(environ.get("CONTENT_LENGTH") or 0)
    except ValueError:
        length = 0
    raw = environ["wsgi.input"].read(length) if length > 0 else b""
    try:
        body = json.loads(raw.decode("utf-8")) if raw else None
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        return _text(start_response, "400 Bad Request", f"Invalid request body: {exc}")
    parsed, error = parse_payload(CreateProjectBody, body)
    if error or not isinstance(parsed, CreateProjectBody):
        return _text(start_response, "400 Bad Request", error or "ProjectName is required")
    try:
        project_dir = store.create(parsed.project_name)
    except (OSError, ValueError) as exc:
        logger.exception("create project failed")
        return _text(start_response, "500 Internal Server Error", f"Failed to create project: {exc}")
    return _text(start_response, "201 Created", str(project_dir))


def _json(start_response: StartResponse, status: str, payload: Any) -> Iterable[bytes]:
    body = json.dumps(payload, ensure_ascii=False).encode("utf-8")
    return _respond(start_response, status, body, "application/json")


def _text(start_response: StartResponse, status: str, message: str) -> Iterable[bytes]:
    return _respond(start_response, status, message.encode("utf-8"), "text/plain; charset=utf-8")


def _respond(
    start_response: StartResponse,
    status: str,
    body: bytes,
    content_type: str = "text/plain; charset=utf-8",
) -> Iterable[bytes]:
    headers = [("Content-Type", content_type), ("Content-Length", str(len(body))), *_CORS_HEADERS]
    start_response(status, headers)
    return [body]


class ProjectServer:
    def __init__(self, store: ProjectStore, host: str = "localhost", port: int = 8080) -> None:
        self._store = store
        self._host = host
        self._port = port
        self._httpd: WSGIServer | None = None
        self._thread: threading.Thread | None = None
        self._address: str | None = None

    @property
    def address(self) -> str | None:
        return self._address

    def _bind(self) -> WSGIServer:
        if self._httpd is not None:
            return self._httpd
        httpd = make_server(
            self._host,
            self._port,
            build_app(self._store),
            server_class=_ThreadedWSGIServer,
            handler_class=_LoggingRequestHandler,
        )
        host, port = httpd.server_address[:2]
        self._address = f"http://{host.decode() if isinstance(host, bytes) else host}:{port}"
        self._httpd = httpd
        return httpd

    def start(self) -> str:
        """Serve from a background thread and return the bound address."""
        if self._thread is not None and self._address:
            return self._address
        httpd = self._bind()
        thread = threading.Thread(target=httpd.serve_forever, daemon=True, name="neuralforge-server")
        thread.start()
        self._thread = thread
        logger.info("server running on %s", self._address)
        return self._address or ""

    def serve_forever(self) -> None:
        httpd = self._bind()
        logger.info("server running on %s", self._address)
        try:
            httpd.serve_forever()
        finally:
            httpd.server_close()

    def stop(self) -> None:
        if self._httpd is None:
            return
        if self._thread is not None:
            self._httpd.shutdown()
        self._httpd.server_close()
        self._httpd = None
        self._thread = None
