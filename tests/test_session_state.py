from __future__ import annotations

from typing import Optional

import pytest

from core.errors import ChannelNotReady, InvalidTransition
from core.models import SessionState
from core.session import Session, SessionEvent


def test_starts_unauthenticated_and_not_ready() -> None:
    session = Session()
    assert session.current_state() is SessionState.UNAUTHENTICATED
    with pytest.raises(ChannelNotReady) as excinfo:
        session.require_ready()
    assert excinfo.value.state == "unauthenticated"
    assert excinfo.value.hint


def test_pairing_to_ready_clears_challenge() -> None:
    session = Session()
    session.begin_pairing("tg://login?token=abc")
    assert session.pairing_challenge == "tg://login?token=abc"
    session.mark_ready()
    assert session.is_ready
    assert session.pairing_challenge is None
    session.require_ready()


def test_ready_requires_pairing() -> None:
    session = Session()
    with pytest.raises(InvalidTransition):
        session.mark_ready()


def test_failed_and_disconnected_recover_through_pairing() -> None:
    session = Session()
    session.begin_pairing("code-1")
    session.mark_failed("rejected")
    assert session.last_error == "rejected"
    with pytest.raises(InvalidTransition):
        session.mark_ready()

    session.begin_pairing("code-2")
    session.mark_ready()
    session.mark_disconnected("network down")
    assert session.current_state() is SessionState.DISCONNECTED
    with pytest.raises(ChannelNotReady):
        session.require_ready()

    session.begin_pairing(None)
    session.mark_ready()
    assert session.last_error is None


def test_repeated_disconnect_is_ignored() -> None:
    session = Session()
    events: list[SessionEvent] = []
    session.subscribe(events.append)
    session.mark_disconnected("down")
    session.mark_disconnected("still down")
    assert len(events) == 1


def test_observers_see_transitions_in_order() -> None:
    session = Session()
    events: list[SessionEvent] = []
    unsubscribe = session.subscribe(events.append)

    session.begin_pairing("code-1")
    session.refresh_challenge("code-2")
    session.mark_ready()
    unsubscribe()
    session.mark_disconnected()

    assert [(event.previous, event.current) for event in events] == [
        (SessionState.UNAUTHENTICATED, SessionState.PAIRING),
        (SessionState.PAIRING, SessionState.PAIRING),
        (SessionState.PAIRING, SessionState.READY),
    ]


def test_observer_sees_challenge_on_pairing_event() -> None:
    session = Session()
    seen: list[str] = []
    session.subscribe(lambda event: seen.append(session.pairing_challenge or ""))
    session.begin_pairing("code-1")
    assert seen == ["code-1"]


def test_observers_read_the_new_last_error() -> None:
    session = Session()
    seen: list[Optional[str]] = []
    session.subscribe(lambda event: seen.append(session.last_error))
    session.begin_pairing("code")
    session.mark_failed("rejected")
    session.begin_pairing("code-2")
    session.mark_ready()
    session.mark_disconnected("socket closed")
    assert seen == [None, "rejected", "rejected", None, "socket closed"]


def test_rejected_transition_keeps_last_error() -> None:
    session = Session()
    session.begin_pairing("code")
    session.mark_failed("rejected")
    with pytest.raises(InvalidTransition):
        session.mark_ready()
    assert session.last_error == "rejected"


def test_failing_observer_does_not_block_transition() -> None:
    session = Session()

    def _broken(event: SessionEvent) -> None:
        raise RuntimeError("boom")

    session.subscribe(_broken)
    session.begin_pairing("code")
    assert session.current_state() is SessionState.PAIRING


def test_refresh_outside_pairing_is_rejected() -> None:
    session = Session()
    with pytest.raises(InvalidTransition):
        session.refresh_challenge("code")
