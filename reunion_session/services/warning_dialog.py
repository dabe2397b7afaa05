from __future__ import annotations

from typing import Protocol

from reunion_session.schemas.responses import DialogState, DialogView

TITLE = "Session Expiring"
MESSAGE = "Your session is about to expire due to inactivity. You will be logged out in:"
HINT = 'Click "Stay Logged In" to continue your session, or "Log Out" to end it now.'
ACTION_LOG_OUT = "Log Out"
ACTION_STAY = "Stay Logged In"


class DialogSession(Protocol):
    @property
    def dialog_state(self) -> DialogState: ...

    def extend_session(self) -> None: ...

    def logout_now(self) -> None: ...


def format_time(seconds: int) -> str:
    minutes, secs = divmod(max(seconds, 0), 60)
    if minutes > 0:
        return f"{minutes}:{secs:02d}"
    return f"{secs}s"


class WarningDialog:
    """Modal warning shown while the session countdown runs."""

    def __init__(self, session: DialogSession) -> None:
        self._session = session

    def render(self) -> DialogView:
        state = self._session.dialog_state
        return DialogView(
            open=state.show_warning,
            title=TITLE,
            countdown=format_time(state.seconds_left),
            message=MESSAGE,
            hint=HINT,
            actions=[ACTION_LOG_OUT, ACTION_STAY],
        )

    def stay_logged_in(self) -> None:
        self._session.extend_session()

    def log_out(self) -> None:
        self._session.logout_now()

    def close(self) -> None:
        # Dismissing the dialog counts as staying logged in.
        self._session.extend_session()
