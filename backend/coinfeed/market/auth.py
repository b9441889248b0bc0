"""Credential holder shared by the REST client and the market session."""

from __future__ import annotations

import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)

CredentialListener = Callable[[str | None], None]


class CredentialProvider:
    """Current auth token, with change notification.

    Login and logout live elsewhere; they only call set_token() / clear().
    Listeners are called synchronously, and only when the token changes.
    """

    def __init__(self, token: str | None = None) -> None:
        self._token = _normalize(token)
        self._listeners: list[CredentialListener] = []

    @property
    def token(self) -> str | None:
        return self._token

    def set_token(self, token: str | None) -> None:
        token = _normalize(token)
        if token == self._token:
            return
        self._token = token
        logger.info("Credential %s", "set" if token else "cleared")
        for listener in list(self._listeners):
            listener(token)

    def clear(self) -> None:
        self.set_token(None)

    def subscribe(self, listener: CredentialListener) -> Callable[[], None]:
        """Register a listener. Returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe


def _normalize(token: str | None) -> str | None:
    if token is None:
        return None
    token = token.strip()
    return token or None
