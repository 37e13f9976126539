"""Exception hierarchy for sempath.

Every error raised by the library derives from ``SempathError`` and carries an
optional ``context`` dict that is appended to the message, so callers can see
which node, edge or cell triggered the failure.

Non-fatal conditions (edges dropped during preparation) are reported through
the ``warnings`` machinery with ``DroppedEdgeWarning`` instead.
"""

from __future__ import annotations

from typing import Any


class SempathError(Exception):
    """Base exception for all sempath errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = dict(context or {})

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
        return f"{self.message} ({details})"


class InvalidLayoutError(SempathError):
    """Malformed layout grid: bad shape, duplicated names, unknown algorithm."""


class LayoutMismatchError(SempathError):
    """Node table and layout disagree about which names exist."""


class ModelNotSupportedError(SempathError):
    """The fitted-model object or parameter table is not recognised."""


class DegenerateEdgeError(SempathError):
    """An edge joins two distinct nodes drawn at the same coordinates."""


class StyleError(SempathError):
    """A visual attribute holds a value the renderer cannot draw."""


class DroppedEdgeWarning(UserWarning):
    """An edge was dropped because one of its endpoints is not drawn."""
