"""HTTP transport for line protocol payloads."""

from __future__ import annotations

import http.client
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Protocol

from influxline.errors import TransportError

CONTENT_TYPE = "text/plain; charset=utf-8"
MAX_BODY_CHARS = 200


@dataclass(frozen=True)
class TransportResponse:
    status: int
    body: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class Transport(Protocol):
    """Anything able to POST a payload and hand back the response."""

    def post(self, url: str, body: bytes, timeout: float) -> TransportResponse:
        ...


class HttpTransport:
    """POSTs payloads with urllib; raises TransportError when nothing comes back."""

    def post(self, url: str, body: bytes, timeout: float) -> TransportResponse:
        req = urllib.request.Request(url, data=body, method="POST")
        req.add_header("Content-Type", CONTENT_TYPE)
        try:
            with urllib.request.urlopen(req, timeout=timeout) as resp:  # noqa: S310
                return TransportResponse(status=resp.status, body=_read_text(resp))
        except urllib.error.HTTPError as exc:
            return TransportResponse(status=exc.code, body=_read_text(exc))
        except urllib.error.URLError as exc:
            raise TransportError(f"Connection to {url} failed: {exc.reason}", cause=exc) from exc
        except http.client.HTTPException as exc:
            raise TransportError(f"Bad response from {url}: {exc!r}", cause=exc) from exc
        except (TimeoutError, OSError) as exc:
            raise TransportError(f"Request to {url} failed: {exc}", cause=exc) from exc


def _read_text(stream) -> str:
    try:
        raw = stream.read()
    except OSError:
        return ""
    if not raw:
        return ""
    return raw.decode("utf-8", errors="replace")[:MAX_BODY_CHARS]
