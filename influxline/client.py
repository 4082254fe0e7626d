"""Buffered line protocol client for an InfluxDB 1.x style /write endpoint."""

from __future__ import annotations

import asyncio
import logging
import math
import threading
import urllib.parse
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, List, Optional, Union

from influxline.errors import ConfigError, ServerError, TransportError, WriteError
from influxline.point import Point
from influxline.precision import Clock, Precision, system_clock
from influxline.result import WriteResult
from influxline.transport import HttpTransport, Transport

if TYPE_CHECKING:
    from influxline.config import ClientConfig

PROTOCOLS = ("http", "https")
DEFAULT_PORT = 8086

ResultCallback = Callable[[WriteResult], None]


@dataclass(frozen=True)
class _Request:
    url: str
    body: bytes
    timeout: float
    points: int


class InfluxClient:
    """Buffer points and write them to the database one request per flush.

    Flushing is fire-and-forget with respect to the buffer: the pending points are
    dropped when the flush is issued, and a failed write does not put them back.
    Writes are sent by a single worker thread, so overlapping flushes are queued in
    call order and never run concurrently. Every flush or single write resolves its
    future exactly once with a ``WriteResult``.
    """

    def __init__(
        self,
        server: str,
        database: str,
        port: Optional[int] = DEFAULT_PORT,
        protocol: str = "http",
        precision: Union[Precision, str] = Precision.SECONDS,
        timeout_s: float = 5.0,
        transport: Optional[Transport] = None,
        clock: Clock = system_clock,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._protocol = _check_protocol(protocol)
        self._server = server
        self._port = _check_port(port)
        self._database = database
        self._precision = Precision.parse(precision)
        self._timeout_s = _check_timeout(timeout_s)
        self.transport = transport or HttpTransport()
        self.clock = clock
        self.logger = logger or logging.getLogger(__name__)

        self._pending: List[Point] = []
        self._lock = threading.Lock()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="influxline-writer")
        self._closed = False

    @classmethod
    def from_config(cls, cfg: "ClientConfig", **kwargs) -> "InfluxClient":
        return cls(
            server=cfg.server,
            database=cfg.database,
            port=cfg.port,
            protocol=cfg.protocol,
            precision=cfg.precision,
            timeout_s=cfg.timeout_s,
            **kwargs,
        )

    # configuration

    def set_protocol(self, protocol: str) -> None:
        protocol = _check_protocol(protocol)
        with self._lock:
            self._protocol = protocol

    def set_server(self, server: str) -> None:
        with self._lock:
            self._server = server

    def set_port(self, port: Optional[int]) -> None:
        """Set the server port; None leaves the port out of the URL."""

        port = _check_port(port)
        with self._lock:
            self._port = port

    def set_database(self, database: str) -> None:
        """Database to write into. It must already exist on the server."""

        with self._lock:
            self._database = database

    def set_precision(self, precision: Union[Precision, str]) -> None:
        precision = Precision.parse(precision)
        with self._lock:
            self._precision = precision

    def set_timeout(self, timeout_s: float) -> None:
        timeout_s = _check_timeout(timeout_s)
        with self._lock:
            self._timeout_s = timeout_s

    @property
    def precision(self) -> Precision:
        return self._precision

    def build_endpoint(self) -> str:
        with self._lock:
            return self._build_endpoint_locked()

    def _build_endpoint_locked(self) -> str:
        server = _check_server(self._server)
        if not self._database:
            raise ConfigError("Database name must not be empty")
        host = f"{server}:{self._port}" if self._port is not None else server
        db = urllib.parse.quote(self._database, safe="")
        return f"{self._protocol}://{host}/write?db={db}&precision={self._precision.value}"

    # buffer

    def prepare(self, point: Point) -> None:
        """Queue a point for the next flush. Nothing is encoded yet."""

        with self._lock:
            self._pending.append(point)

    @property
    def pending(self) -> List[Point]:
        with self._lock:
            return list(self._pending)

    @property
    def queue_depth(self) -> int:
        with self._lock:
            return len(self._pending)

    # writes

    def flush(self, callback: Optional[ResultCallback] = None) -> "Future[WriteResult]":
        """Send every pending point in one request.

        The buffer is emptied before the request goes out, whatever the outcome.
        """

        with self._lock:
            if not self._pending:
                future = _resolved(WriteResult.empty())
            else:
                batch = self._pending[:]
                self._pending.clear()
                future = self._dispatch_locked(batch)
        # outside the lock so a callback may call back into the client
        _attach(future, callback)
        return future

    def write_single(self, point: Point, callback: Optional[ResultCallback] = None) -> "Future[WriteResult]":
        """Write one point immediately, bypassing the buffer."""

        with self._lock:
            future = self._dispatch_locked([point])
        _attach(future, callback)
        return future

    async def aflush(self) -> WriteResult:
        return await asyncio.wrap_future(self.flush())

    async def awrite_single(self, point: Point) -> WriteResult:
        return await asyncio.wrap_future(self.write_single(point))

    def close(self) -> None:
        """Wait for queued writes and stop the worker. Pending points are not flushed."""

        with self._lock:
            self._closed = True
        self._executor.shutdown(wait=True)

    def __enter__(self) -> "InfluxClient":
        return self

    def __exit__(self, *_exc) -> None:
        self.close()

    def _dispatch_locked(self, batch: List[Point]) -> "Future[WriteResult]":
        # Endpoint, timestamps and body are fixed here, at call time.
        if self._closed:
            return _resolved(self._report(WriteResult.failure(len(batch), ConfigError("Client is closed"))))
        try:
            url = self._build_endpoint_locked()
            lines = [p.line(self._precision, self.clock) for p in batch]
        except WriteError as exc:
            return _resolved(self._report(WriteResult.failure(len(batch), exc)))
        request = _Request(
            url=url,
            body="\n".join(lines).encode("utf-8"),
            timeout=self._timeout_s,
            points=len(batch),
        )
        return self._executor.submit(self._send, request)

    def _send(self, request: _Request) -> WriteResult:
        try:
            response = self.transport.post(request.url, request.body, request.timeout)
        except TransportError as exc:
            return self._report(WriteResult.failure(request.points, exc))
        except Exception as exc:  # pylint: disable=broad-except
            error = TransportError(f"Request to {request.url} failed: {exc!r}", cause=exc)
            return self._report(WriteResult.failure(request.points, error))
        if not response.ok:
            error = ServerError(response.status, response.body)
            return self._report(WriteResult.failure(request.points, error, status_code=response.status))
        return self._report(WriteResult.success(request.points, status_code=response.status))

    def _report(self, result: WriteResult) -> WriteResult:
        if result.ok:
            self.logger.debug("Wrote %s points (HTTP %s)", result.points, result.status_code)
        else:
            self.logger.warning("Write of %s points failed: %s", result.points, result.error)
        return result


def _resolved(result: WriteResult) -> "Future[WriteResult]":
    future: Future[WriteResult] = Future()
    future.set_result(result)
    return future


def _attach(future: "Future[WriteResult]", callback: Optional[ResultCallback]) -> None:
    if callback is None:
        return
    future.add_done_callback(lambda f: callback(f.result()))


def _check_protocol(protocol: str) -> str:
    value = str(protocol).strip().lower()
    if value not in PROTOCOLS:
        raise ConfigError(f"Protocol must be one of {', '.join(PROTOCOLS)}, got {protocol!r}")
    return value


def _check_port(port: Optional[int]) -> Optional[int]:
    if port is None:
        return None
    if isinstance(port, bool) or not isinstance(port, int) or not 1 <= port <= 65535:
        raise ConfigError(f"Port must be an integer in 1..65535, got {port!r}")
    return port


def _check_server(server: Optional[str]) -> str:
    value = (server or "").strip()
    if not value:
        raise ConfigError("Server address must not be empty")
    if any(ch.isspace() or not ch.isprintable() for ch in value):
        raise ConfigError(f"Server address contains whitespace or control characters: {server!r}")
    if any(ch in value for ch in "/?#@"):
        raise ConfigError(f"Server must be a bare host name, got {server!r}")
    # bracketed IPv6 literals are the only hosts allowed to contain ':'
    bracketed = value.startswith("[") and value.endswith("]")
    if ":" in value and not bracketed:
        raise ConfigError(f"Server must not carry a port, use set_port instead: {server!r}")
    return value


def _check_timeout(timeout_s: float) -> float:
    try:
        value = float(timeout_s)
    except (TypeError, ValueError):
        raise ConfigError(f"Timeout must be a number, got {timeout_s!r}") from None
    if not math.isfinite(value) or value <= 0:
        raise ConfigError(f"Timeout must be a positive finite number, got {timeout_s!r}")
    return value
