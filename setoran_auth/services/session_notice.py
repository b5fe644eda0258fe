"""Notice shown to the user after a forced logout."""

from __future__ import annotations

from typing import Optional


class SessionNotice:
    """Holds the session-expired notice until the user logs in again.

    The notice cannot be dismissed on its own; only a successful login clears it.
    """

    EXPIRED_MESSAGE = "Your login session has ended, please log in again."

    def __init__(self) -> None:
        self._message: Optional[str] = None

    @property
    def message(self) -> Optional[str]:
        return self._message

    def show_expired(self) -> None:
        self._message = self.EXPIRED_MESSAGE

    def resolve(self) -> None:
        self._message = None


__all__ = ["SessionNotice"]
