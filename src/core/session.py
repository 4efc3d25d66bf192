"""Channel session lifecycle (core domain).

The session is an explicit state machine:

    unauthenticated -> pairing -> ready
    pairing -> failed
    failed | disconnected -> pairing
    any state -> disconnected

Callers query ``current_state()`` synchronously; observers subscribe to
transition events. Channel-dependent operations gate on ``require_ready()``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional, Union

from core.errors import ChannelNotReady, InvalidTransition
from core.models import SessionState

LOGGER = logging.getLogger(__name__)

_ALLOWED: dict[SessionState, set[SessionState]] = {
    SessionState.UNAUTHENTICATED: {SessionState.PAIRING, SessionState.DISCONNECTED},
    SessionState.PAIRING: {SessionState.READY, SessionState.FAILED, SessionState.DISCONNECTED},
    SessionState.READY: {SessionState.DISCONNECTED},
    SessionState.FAILED: {SessionState.PAIRING, SessionState.DISCONNECTED},
    SessionState.DISCONNECTED: {SessionState.PAIRING},
}

# Marks a transition that leaves last_error untouched.
_KEEP = object()

_NOT_READY_HINTS = {
    SessionState.UNAUTHENTICATED: "Run `sitewire login` or start the server and scan the QR code.",
    SessionState.PAIRING: "Scan the QR code shown in the server log to finish pairing.",
    SessionState.FAILED: "Pairing was rejected. Restart pairing with `sitewire login`.",
    SessionState.DISCONNECTED: "The channel dropped. Restart pairing with `sitewire login`.",
}


@dataclass(frozen=True)
class SessionEvent:
    """One observable session change.

    ``previous == current`` only for pairing challenge refreshes.
    """

    previous: SessionState
    current: SessionState
    reason: Optional[str]
    at: datetime


SessionObserver = Callable[[SessionEvent], None]


class Session:
    """Owns the channel connection state for the whole process."""

    def __init__(self) -> None:
        self._state = SessionState.UNAUTHENTICATED
        self._last_error: Optional[str] = None
        self._challenge: Optional[str] = None
        self._observers: list[SessionObserver] = []

    def current_state(self) -> SessionState:
        return self._state

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    @property
    def pairing_challenge(self) -> Optional[str]:
        return self._challenge if self._state is SessionState.PAIRING else None

    @property
    def is_ready(self) -> bool:
        return self._state is SessionState.READY

    def subscribe(self, observer: SessionObserver) -> Callable[[], None]:
        """Register an observer and return a callable that removes it."""

        self._observers.append(observer)

        def _unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return _unsubscribe

    def require_ready(self) -> None:
        if self._state is not SessionState.READY:
            raise ChannelNotReady(
                self._state.value,
                reason=self._last_error,
                hint=_NOT_READY_HINTS.get(self._state),
            )

    def begin_pairing(self, challenge: Optional[str] = None) -> None:
        """Enter pairing. ``challenge`` is None when resuming a stored session."""

        self._transition(SessionState.PAIRING, reason="pairing started", challenge=challenge)

    def refresh_challenge(self, challenge: str) -> None:
        """Replace the pairing challenge (QR codes expire) without leaving pairing."""

        if self._state is not SessionState.PAIRING:
            raise InvalidTransition(self._state.value, SessionState.PAIRING.value)
        self._challenge = challenge
        self._emit(SessionEvent(self._state, self._state, "challenge refreshed", _now()))

    def mark_ready(self) -> None:
        self._transition(SessionState.READY, reason="paired", error=None)

    def mark_failed(self, reason: str) -> None:
        self._transition(SessionState.FAILED, reason=reason, error=reason)

    def mark_disconnected(self, reason: str = "connection lost") -> None:
        if self._state is SessionState.DISCONNECTED:
            return
        self._transition(SessionState.DISCONNECTED, reason=reason, error=reason)

    def _transition(
        self,
        target: SessionState,
        reason: Optional[str],
        challenge: Optional[str] = None,
        error: Union[str, None, object] = _KEEP,
    ) -> None:
        previous = self._state
        if target not in _ALLOWED[previous]:
            raise InvalidTransition(previous.value, target.value)
        self._state = target
        self._challenge = challenge
        if error is not _KEEP:
            self._last_error = error
        LOGGER.info("Session %s -> %s (%s)", previous.value, target.value, reason)
        self._emit(SessionEvent(previous, target, reason, _now()))

    def _emit(self, event: SessionEvent) -> None:
        for observer in list(self._observers):
            try:
                observer(event)
            except Exception:
                LOGGER.exception("Session observer failed for %s", event.current.value)


def _now() -> datetime:
    return datetime.now(timezone.utc)
