"""HTTP(S) file server built on FastAPI and uvicorn."""

from servedir.server.app import FileServer, silence_uvicorn_loggers, uvicorn_log_settings
from servedir.server.interfaces import InterfaceAddresses, list_addresses
from servedir.server.middleware import (
    HttpMiddleware,
    basic_auth,
    check_credentials,
    static_files,
)

__all__ = [
    "FileServer",
    "HttpMiddleware",
    "InterfaceAddresses",
    "basic_auth",
    "check_credentials",
    "list_addresses",
    "silence_uvicorn_loggers",
    "static_files",
    "uvicorn_log_settings",
]
