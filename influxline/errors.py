"""Error kinds reported by the line protocol client."""

from __future__ import annotations

from typing import Optional


class WriteError(Exception):
    """Base class for every failure the client reports."""


class EncodingError(WriteError, ValueError):
    """A point cannot be rendered as line protocol (never sent over the wire)."""


class ConfigError(WriteError, ValueError):
    """Client configuration cannot produce a valid write endpoint."""


class TransportError(WriteError):
    """No response was received from the server."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause


class ServerError(WriteError):
    """The server answered with a non-2xx status."""

    def __init__(self, status_code: int, body: str = "") -> None:
        detail = f": {body}" if body else ""
        super().__init__(f"Server returned HTTP {status_code}{detail}")
        self.status_code = status_code
        self.body = body
