from __future__ import annotations

import pytest

from reunion_session.schemas.enums import ResumeAction, TimeoutPhase
from reunion_session.services import timeout_state as ts

LEAD = 120


def _armed(total: int = 1200, now: int = 0) -> ts.TimeoutState:
    state = ts.TimeoutState(timeout_seconds=total)
    return ts.schedule(state, total, now, LEAD)


class TestSchedule:
    @pytest.mark.parametrize("total", [120, 121, 600, 1200, 86400])
    def test_warning_leads_logout_by_lead(self, total):
        state = ts.schedule(ts.TimeoutState(), total, now=5_000, lead_seconds=LEAD)
        assert state.logout_deadline == 5_000 + total * 1000
        assert state.warning_deadline == state.logout_deadline - LEAD * 1000

    @pytest.mark.parametrize("total", [1, 30, 119])
    def test_short_timeout_warns_immediately(self, total):
        state = ts.schedule(ts.TimeoutState(), total, now=5_000, lead_seconds=LEAD)
        assert state.warning_deadline == 5_000
        assert state.logout_deadline - state.warning_deadline == total * 1000
        assert ts.warning_lead(total, LEAD) == total

    def test_idempotent_from_same_instant(self):
        first = ts.schedule(ts.TimeoutState(), 1200, now=42, lead_seconds=LEAD)
        second = ts.schedule(first, 1200, now=42, lead_seconds=LEAD)
        assert first.warning_deadline == second.warning_deadline
        assert first.logout_deadline == second.logout_deadline

    def test_dismisses_warning(self):
        warning = ts.begin_countdown(_armed(), 120)
        state = ts.schedule(warning, 1200, now=10, lead_seconds=LEAD)
        assert state.phase is TimeoutPhase.ACTIVE
        assert state.show_warning is False
        assert state.seconds_left == 0

    def test_custom_lead(self):
        state = ts.schedule(ts.TimeoutState(), 600, now=0, lead_seconds=60)
        assert state.warning_deadline == 540_000


class TestCountdown:
    def test_begin_countdown(self):
        state = ts.begin_countdown(_armed(), 120)
        assert state.phase is TimeoutPhase.WARNING
        assert state.show_warning is True
        assert state.seconds_left == 120

    def test_tick_decrements_and_floors_at_zero(self):
        state = ts.begin_countdown(_armed(), 2)
        state = ts.tick(state)
        assert state.seconds_left == 1
        state = ts.tick(ts.tick(state))
        assert state.seconds_left == 0

    def test_dismiss(self):
        state = ts.dismiss(ts.begin_countdown(_armed(), 50))
        assert state.phase is TimeoutPhase.ACTIVE
        assert state.show_warning is False


class TestActivity:
    def test_resets_only_while_active(self):
        state = _armed()
        assert ts.activity_resets_timer(state)
        assert not ts.activity_resets_timer(ts.begin_countdown(state, 120))
        assert not ts.activity_resets_timer(ts.TimeoutState())
        assert not ts.activity_resets_timer(ts.terminate(state))

    def test_needs_known_timeout(self):
        state = ts.schedule(ts.TimeoutState(), 1200, now=0, lead_seconds=LEAD)
        assert state.timeout_seconds is None
        assert not ts.activity_resets_timer(state)


class TestPingThrottle:
    def test_first_ping_always_allowed(self):
        assert ts.ping_allowed(ts.TimeoutState(), now=0, throttle_ms=60_000)

    def test_throttled_within_window(self):
        state = ts.record_ping(ts.TimeoutState(), 1_000)
        assert not ts.ping_allowed(state, now=60_999, throttle_ms=60_000)
        assert ts.ping_allowed(state, now=61_000, throttle_ms=60_000)

    def test_force_next_ping(self):
        state = ts.force_next_ping(ts.record_ping(ts.TimeoutState(), 1_000))
        assert ts.ping_allowed(state, now=1_001, throttle_ms=60_000)


class TestAuthGrace:
    def test_recent_activity_protects(self):
        state = ts.record_activity(ts.TimeoutState(), 35_000)
        assert not ts.auth_failure_ends_session(state, now=40_000, grace_ms=30_000)

    def test_stale_activity_logs_out(self):
        state = ts.record_activity(ts.TimeoutState(), 100_000)
        assert ts.auth_failure_ends_session(state, now=200_000, grace_ms=30_000)

    def test_boundary_is_exclusive(self):
        state = ts.record_activity(ts.TimeoutState(), 0)
        assert not ts.auth_failure_ends_session(state, now=30_000, grace_ms=30_000)


class TestResume:
    def test_past_logout_deadline_verifies(self):
        decision = ts.resolve_resume(_armed(), now=1_250_000)
        assert decision.action is ResumeAction.VERIFY

    def test_inside_warning_window_uses_corrected_remaining(self):
        decision = ts.resolve_resume(_armed(), now=1_150_000)
        assert decision == ts.ResumeDecision(ResumeAction.SHOW_WARNING, 50)

    def test_rounds_to_zero_verifies(self):
        decision = ts.resolve_resume(_armed(), now=1_199_600)
        assert decision.action is ResumeAction.VERIFY

    def test_safe_window_realigns(self):
        decision = ts.resolve_resume(_armed(), now=300_000)
        assert decision == ts.ResumeDecision(ResumeAction.REALIGN, 900)

    def test_unarmed_state_verifies(self):
        assert ts.resolve_resume(ts.TimeoutState(), now=0).action is ResumeAction.VERIFY


class TestRounding:
    def test_half_rounds_up(self):
        assert ts.round_half_up(0.5) == 1
        assert ts.round_half_up(2.5) == 3
        assert ts.round_half_up(2.49) == 2

    def test_seconds_until_logout_clamped(self):
        state = _armed(total=10)
        assert ts.seconds_until_logout(state, now=4_400) == 6
        assert ts.seconds_until_logout(state, now=20_000) == 0


class TestTerminalStates:
    def test_terminate(self):
        state = ts.terminate(ts.begin_countdown(_armed(), 10))
        assert state.phase is TimeoutPhase.LOGGED_OUT
        assert state.show_warning is False
        assert state.logout_deadline is None

    def test_reset_keeps_timeout(self):
        state = ts.reset(_armed())
        assert state.phase is TimeoutPhase.IDLE
        assert state.timeout_seconds == 1200
        assert state.warning_deadline is None
