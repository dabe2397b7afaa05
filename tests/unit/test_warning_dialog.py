from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from reunion_session.schemas.responses import DialogState
from reunion_session.services.warning_dialog import WarningDialog, format_time


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [(120, "2:00"), (61, "1:01"), (60, "1:00"), (59, "59s"), (5, "5s"), (0, "0s")],
)
def test_format_time(seconds, expected):
    assert format_time(seconds) == expected


@pytest.fixture
def session():
    mock = MagicMock()
    mock.dialog_state = DialogState(show_warning=True, seconds_left=95)
    return mock


class TestWarningDialog:
    def test_render_open(self, session):
        view = WarningDialog(session).render()
        assert view.open is True
        assert view.title == "Session Expiring"
        assert view.countdown == "1:35"
        assert view.actions == ["Log Out", "Stay Logged In"]

    def test_render_closed(self, session):
        session.dialog_state = DialogState()
        view = WarningDialog(session).render()
        assert view.open is False
        assert view.countdown == "0s"

    def test_stay_logged_in(self, session):
        WarningDialog(session).stay_logged_in()
        session.extend_session.assert_called_once_with()
        session.logout_now.assert_not_called()

    def test_close_extends(self, session):
        WarningDialog(session).close()
        session.extend_session.assert_called_once_with()

    def test_log_out(self, session):
        WarningDialog(session).log_out()
        session.logout_now.assert_called_once_with()
        session.extend_session.assert_not_called()
