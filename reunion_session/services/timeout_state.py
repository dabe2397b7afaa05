"""Pure transitions of the session-timeout state machine.

Every function takes the current ``TimeoutState`` (plus the wall-clock ``now``
in epoch milliseconds where it matters) and returns a new state or a decision.
Timers, network calls and navigation live in the coordinator.

Invariants kept by every returned state:

* ``warning_deadline <= logout_deadline``
* ``warning_deadline == logout_deadline - min(lead, timeout) * 1000`` right
  after ``schedule``
"""

from __future__ import annotations

import math
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict

from reunion_session.schemas.enums import ResumeAction, TimeoutPhase

class TimeoutState(BaseModel):
    model_config = ConfigDict(frozen=True)

    phase: TimeoutPhase = TimeoutPhase.IDLE
    timeout_seconds: int | None = None
    warning_deadline: int | None = None
    logout_deadline: int | None = None
    show_warning: bool = False
    seconds_left: int = 0
    last_activity_at: int = 0
    last_ping_at: int | None = None


class ResumeDecision(NamedTuple):
    action: ResumeAction
    remaining: int


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def warning_lead(total_seconds: int, lead_seconds: int) -> int:
    return min(lead_seconds, total_seconds)


def schedule(
    state: TimeoutState,
    total_seconds: int,
    now: int,
    lead_seconds: int,
) -> TimeoutState:
    """Arm fresh deadlines ``total_seconds`` from ``now``; any visible warning is dismissed."""
    warning_at = max(total_seconds - lead_seconds, 0)
    return state.model_copy(
        update={
            "phase": TimeoutPhase.ACTIVE,
            "warning_deadline": now + warning_at * 1000,
            "logout_deadline": now + total_seconds * 1000,
            "show_warning": False,
            "seconds_left": 0,
        }
    )


def begin_countdown(state: TimeoutState, lead_seconds: int) -> TimeoutState:
    return state.model_copy(
        update={
            "phase": TimeoutPhase.WARNING,
            "show_warning": True,
            "seconds_left": max(lead_seconds, 0),
        }
    )


def tick(state: TimeoutState) -> TimeoutState:
    """One countdown second. A result with ``seconds_left == 0`` means time is up."""
    return state.model_copy(update={"seconds_left": max(state.seconds_left - 1, 0)})


def dismiss(state: TimeoutState) -> TimeoutState:
    return state.model_copy(
        update={"phase": TimeoutPhase.ACTIVE, "show_warning": False, "seconds_left": 0}
    )


def record_activity(state: TimeoutState, now: int) -> TimeoutState:
    return state.model_copy(update={"last_activity_at": now})


def activity_resets_timer(state: TimeoutState) -> bool:
    # Only an explicit "stay logged in" may dismiss a visible warning.
    return (
        state.phase is TimeoutPhase.ACTIVE
        and not state.show_warning
        and state.timeout_seconds is not None
    )


def ping_allowed(state: TimeoutState, now: int, throttle_ms: int) -> bool:
    return state.last_ping_at is None or now - state.last_ping_at >= throttle_ms


def record_ping(state: TimeoutState, now: int) -> TimeoutState:
    return state.model_copy(update={"last_ping_at": now})


def force_next_ping(state: TimeoutState) -> TimeoutState:
    return state.model_copy(update={"last_ping_at": None})


def auth_failure_ends_session(state: TimeoutState, now: int, grace_ms: int) -> bool:
    """A 401/403 right after activity may be a cookie that has not propagated yet."""
    return now - state.last_activity_at > grace_ms


def seconds_until_logout(state: TimeoutState, now: int) -> int:
    if state.logout_deadline is None:
        return 0
    return max(0, round_half_up((state.logout_deadline - now) / 1000))


def resolve_resume(state: TimeoutState, now: int) -> ResumeDecision:
    """Decide what to do when the host wakes up after its timers were suspended."""
    if state.logout_deadline is None or state.warning_deadline is None:
        return ResumeDecision(ResumeAction.VERIFY, 0)
    if now >= state.logout_deadline:
        return ResumeDecision(ResumeAction.VERIFY, 0)
    remaining = seconds_until_logout(state, now)
    if now >= state.warning_deadline:
        if remaining <= 0:
            return ResumeDecision(ResumeAction.VERIFY, 0)
        return ResumeDecision(ResumeAction.SHOW_WARNING, remaining)
    return ResumeDecision(ResumeAction.REALIGN, remaining)


def terminate(state: TimeoutState) -> TimeoutState:
    return state.model_copy(
        update={
            "phase": TimeoutPhase.LOGGED_OUT,
            "warning_deadline": None,
            "logout_deadline": None,
            "show_warning": False,
            "seconds_left": 0,
        }
    )


def reset(state: TimeoutState) -> TimeoutState:
    """Back to IDLE after the login flag disappeared."""
    return state.model_copy(
        update={
            "phase": TimeoutPhase.IDLE,
            "warning_deadline": None,
            "logout_deadline": None,
            "show_warning": False,
            "seconds_left": 0,
        }
    )
