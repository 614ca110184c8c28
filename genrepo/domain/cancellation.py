"""Cooperative cancellation signal threaded through every repository call."""

from __future__ import annotations

from .errors import OperationCancelledError


class CancellationToken:
    """A one-way switch checked by repositories at their suspension points.

    In-memory operations check at entry and before each streamed element;
    the SQL backend checks before and after each round trip.
    """

    __slots__ = ("_cancelled", "_reason")

    def __init__(self) -> None:
        self._cancelled = False
        self._reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self, reason: str | None = None) -> None:
        self._cancelled = True
        self._reason = reason

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise OperationCancelledError(self._reason or "Operation was cancelled")

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self._cancelled})"


def raise_if_cancelled(token: CancellationToken | None) -> None:
    """Raise OperationCancelledError when ``token`` is set; None means never."""
    if token is not None:
        token.raise_if_cancelled()
