"""Middleware factories: HTTP basic auth and static files."""

from __future__ import annotations

import base64
import binascii
import secrets
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from fastapi import Request
from fastapi.responses import PlainTextResponse, Response
from fastapi.staticfiles import StaticFiles

from servedir.core.config import AuthSettings, FileSettings

REALM = "servedir"

CallNext = Callable[[Request], Awaitable[Response]]


@dataclass(frozen=True)
class HttpMiddleware:
    """Request interceptor registered with ``FileServer.use``."""

    name: str
    dispatch: Callable[[Request, CallNext], Awaitable[Response]]


def check_credentials(header: str | None, auth: AuthSettings) -> bool:
    """Validate an ``Authorization`` header against ``auth``.

    Authentication is off (always valid) when no password is configured.
    """
    if auth.password is None:
        return True
    if not header:
        return False

    scheme, _, encoded = header.partition(" ")
    if scheme.lower() != "basic":
        return False
    try:
        decoded = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return False

    username, sep, password = decoded.partition(":")
    if not sep:
        return False
    # Both comparisons always run.
    user_ok = secrets.compare_digest(username.encode("utf-8"), auth.username.encode("utf-8"))
    pass_ok = secrets.compare_digest(password.encode("utf-8"), auth.password.encode("utf-8"))
    return user_ok and pass_ok


def basic_auth(auth: AuthSettings) -> HttpMiddleware:
    async def dispatch(request: Request, call_next: CallNext) -> Response:
        if check_credentials(request.headers.get("authorization"), auth):
            return await call_next(request)
        return PlainTextResponse(
            "Unauthorized",
            status_code=401,
            headers={"WWW-Authenticate": f'Basic realm="{REALM}"'},
        )

    return HttpMiddleware(name="basic_auth", dispatch=dispatch)


def static_files(files: FileSettings) -> StaticFiles:
    """Serve ``files.prefix``.

    With ``jail`` set, symlinks are resolved before the containment check, so
    anything whose real path leaves the prefix answers 404. The directory
    itself is checked by ``FileServer.listen``.
    """
    return StaticFiles(
        directory=files.prefix,
        html=files.use_index,
        check_dir=False,
        follow_symlink=not files.jail,
    )
