"""FileServer - FastAPI app served by uvicorn.

Usage:
    server = FileServer(config.server)
    server.on_error(lambda err: log.error(str(err)))
    server.use("/", basic_auth(config.auth))
    server.use("/", static_files(config.files))
    await server.listen()
"""

from __future__ import annotations

import logging
import os
import socket
import traceback
from collections.abc import Callable
from typing import Any, NoReturn

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import Response
from fastapi.staticfiles import StaticFiles

from servedir.core.config import ServerSettings
from servedir.core.errors import StartupError
from servedir.core.logging import get_logger
from servedir.server.middleware import CallNext, HttpMiddleware

_logger = get_logger(__name__)

ErrorCallback = Callable[[StartupError], None]
ListeningCallback = Callable[[str, str, int], None]


def uvicorn_log_settings(verbosity: int) -> tuple[str, bool]:
    """Map servedir verbosity to uvicorn log settings.

    Returns:
        (log_level, access_log)
    """
    if verbosity <= 0:
        return ("error", False)
    if verbosity == 1:
        return ("warning", False)
    if verbosity == 2:
        return ("info", True)
    return ("debug", True)


def silence_uvicorn_loggers() -> None:
    """Best-effort silencing for uvicorn loggers (quiet mode)."""
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logger = logging.getLogger(name)
        logger.handlers.clear()
        logger.propagate = False
        logger.setLevel(logging.ERROR)


def _normalize_path(path: str) -> str:
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1:
        path = path.rstrip("/")
    return path


def _path_matches(request_path: str, prefix: str) -> bool:
    if prefix == "/":
        return True
    return request_path == prefix or request_path.startswith(prefix + "/")


class FileServer:
    """HTTP(S) server with path-scoped middleware and mounted apps."""

    def __init__(self, settings: ServerSettings, *, verbosity: int = 1) -> None:
        self.settings = settings
        self.verbosity = int(verbosity)

        self.app = FastAPI(title="servedir", docs_url=None, redoc_url=None, openapi_url=None)
        self.app.middleware("http")(self._dispatch)

        self._middleware: list[tuple[str, HttpMiddleware]] = []
        self._mounts: list[tuple[str, Any]] = []
        self._error_callbacks: list[ErrorCallback] = []
        self._listening_callbacks: list[ListeningCallback] = []
        self._server: uvicorn.Server | None = None

    def use(self, path: str, handler: HttpMiddleware | Any) -> None:
        """Register middleware for requests under ``path``, or mount an ASGI app there."""
        path = _normalize_path(path)
        if isinstance(handler, HttpMiddleware):
            self._middleware.append((path, handler))
            _logger.debug(f"middleware {handler.name} at {path}")
            return

        self._mounts.append((path, handler))
        self.app.mount(path, handler)
        _logger.debug(f"mounted {type(handler).__name__} at {path}")

    def on_error(self, callback: ErrorCallback) -> None:
        self._error_callbacks.append(callback)

    def on_listening(self, callback: ListeningCallback) -> None:
        self._listening_callbacks.append(callback)

    async def listen(self) -> None:
        """Bind, announce and serve until shutdown.

        Raises:
            StartupError: Bad TLS material, missing directory or bind failure
                (also published to ``on_error`` callbacks)
        """
        self._check_mounts()
        config = self._uvicorn_config()
        sock = self._bind()
        try:
            host, port = sock.getsockname()[:2]
            for callback in list(self._listening_callbacks):
                callback(self.settings.scheme, str(host), int(port))

            self._server = uvicorn.Server(config)
            await self._server.serve(sockets=[sock])
        finally:
            sock.close()

    def stop(self) -> None:
        if self._server is not None:
            self._server.should_exit = True

    async def _dispatch(self, request: Request, call_next: CallNext) -> Response:
        path = request.url.path
        chain = [mw for prefix, mw in self._middleware if _path_matches(path, prefix)]

        async def run(index: int, req: Request) -> Response:
            if index == len(chain):
                return await call_next(req)
            return await chain[index].dispatch(req, lambda r: run(index + 1, r))

        return await run(0, request)

    def _check_mounts(self) -> None:
        for path, handler in self._mounts:
            if not isinstance(handler, StaticFiles) or handler.directory is None:
                continue
            directory = os.fspath(handler.directory)
            if not os.path.isdir(directory):
                self._fail(
                    StartupError(
                        f"Directory '{directory}' does not exist (mounted at {path})",
                        "Pass an existing directory as the [file] argument",
                    )
                )

    def _uvicorn_config(self) -> uvicorn.Config:
        s = self.settings
        log_level, access_log = uvicorn_log_settings(self.verbosity)
        if self.verbosity <= 0:
            silence_uvicorn_loggers()

        ssl_options: dict[str, Any] = {}
        if s.ssl:
            if not s.key or not s.cert:
                self._fail(
                    StartupError(
                        "SSL requires both a private key and a certificate",
                        "Pass --key <file> and --cert <file>",
                    )
                )
            ssl_options = {"ssl_keyfile": s.key, "ssl_certfile": s.cert}

        config = uvicorn.Config(
            self.app,
            host=s.host,
            port=s.port,
            log_level=log_level,
            access_log=access_log,
            **ssl_options,
        )
        try:
            # Loads the TLS context now so certificate problems surface before binding.
            config.load()
        except (OSError, ValueError) as e:
            self._fail(StartupError(f"Failed to load TLS material: {e}"))
        return config

    def _bind(self) -> socket.socket:
        host, port = self.settings.host, self.settings.port
        if not 0 <= port <= 65535:
            self._fail(self._bind_error(ValueError("port must be between 0 and 65535")))
        try:
            family, socktype, proto, _canon, address = socket.getaddrinfo(
                host or None, port, type=socket.SOCK_STREAM, flags=socket.AI_PASSIVE
            )[0]
        except (OSError, OverflowError) as e:
            self._fail(self._bind_error(e))

        sock = socket.socket(family, socktype, proto)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind(address)
        except (OSError, OverflowError) as e:
            sock.close()
            self._fail(self._bind_error(e))
        return sock

    def _bind_error(self, error: Exception) -> StartupError:
        return StartupError(
            f"Cannot listen on {self.settings.host}:{self.settings.port}: {error}",
            "Pick another port with --port or stop the process using it",
        )

    def _fail(self, error: StartupError) -> NoReturn:
        for callback in list(self._error_callbacks):
            try:
                callback(error)
            except Exception as e:
                _logger.error(
                    f"Error in on_error callback {callback}: {type(e).__name__}: {e}\n"
                    f"{traceback.format_exc()}"
                )
        raise error
