"""Per-call outcome of a flush or single write."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from influxline.errors import WriteError


@dataclass(frozen=True)
class WriteResult:
    ok: bool
    points: int
    status_code: Optional[int] = None
    error: Optional[WriteError] = None

    @classmethod
    def success(cls, points: int, status_code: Optional[int] = None) -> "WriteResult":
        return cls(ok=True, points=points, status_code=status_code)

    @classmethod
    def failure(cls, points: int, error: WriteError, status_code: Optional[int] = None) -> "WriteResult":
        return cls(ok=False, points=points, status_code=status_code, error=error)

    @classmethod
    def empty(cls) -> "WriteResult":
        """Result of a flush that had nothing to send."""

        return cls(ok=True, points=0)

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error
