"""Study timer for FocaPlus.

A StudyTimer measures one study session, either as a free-running stopwatch
or as Pomodoro study/rest cycles.  The host calls ``tick()`` once per second
while the timer is running; user actions (start, pause, resume, reset,
finish) are plain method calls.  Every method returns the list of events
that happened so the host can react to phase changes.
"""

from datetime import datetime, timezone
from typing import Optional

from focaplus.core.models import (
    ActivityType,
    StudySession,
    TimerMode,
    TimerPhase,
    TimerState,
    TimerStatus,
)
from focaplus.core.xp import calculate_xp


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StudyTimer:
    """Stopwatch / Pomodoro state machine for a single study session."""

    STUDY_SECONDS = 25 * 60
    REST_SECONDS = 5 * 60

    def __init__(
        self,
        mode: TimerMode = TimerMode.STOPWATCH,
        activity_type: ActivityType = ActivityType.STUDY_CONTENT,
        study_seconds: int = STUDY_SECONDS,
        rest_seconds: int = REST_SECONDS,
    ) -> None:
        self.mode = mode
        self.activity_type = activity_type
        self.study_seconds = study_seconds
        self.rest_seconds = rest_seconds

        self.status = TimerStatus.IDLE
        self.phase = TimerPhase.STUDYING
        self.elapsed_seconds = 0
        self.remaining_seconds = study_seconds if mode == TimerMode.POMODORO else 0
        self.rest_elapsed_seconds = 0
        self.cycles_completed = 0
        self.started_at: Optional[datetime] = None
        self.ended_at: Optional[datetime] = None
        self._session: Optional[StudySession] = None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self.status == TimerStatus.RUNNING

    @property
    def is_pomodoro(self) -> bool:
        return self.mode == TimerMode.POMODORO

    def duration_seconds(self) -> int:
        """Seconds that count as studying.

        Pomodoro only counts completed study blocks; break time and a study
        block still in progress are left out.
        """
        if self.is_pomodoro:
            return self.cycles_completed * self.study_seconds
        return self.elapsed_seconds

    def time_spent_seconds(self) -> int:
        """Focus time shown on the summary (Pomodoro includes the breaks)."""
        if self.is_pomodoro:
            return self.cycles_completed * (self.study_seconds + self.rest_seconds)
        return self.elapsed_seconds

    def state(self) -> TimerState:
        return TimerState(
            mode=self.mode,
            status=self.status,
            phase=self.phase,
            elapsed_seconds=self.elapsed_seconds,
            remaining_seconds=self.remaining_seconds,
            rest_seconds=self.rest_elapsed_seconds,
            cycles_completed=self.cycles_completed,
            started_at=self.started_at,
        )

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def start(self, now: Optional[datetime] = None) -> list[str]:
        """Idle -> Running.  ``started_at`` is only recorded the first time."""
        if self.status != TimerStatus.IDLE:
            return []
        if self.started_at is None:
            self.started_at = now or _utcnow()
        self.status = TimerStatus.RUNNING
        return ["started"]

    def pause(self) -> list[str]:
        if self.status != TimerStatus.RUNNING:
            return []
        self.status = TimerStatus.PAUSED
        return ["paused"]

    def resume(self) -> list[str]:
        if self.status != TimerStatus.PAUSED:
            return []
        self.status = TimerStatus.RUNNING
        return ["resumed"]

    def toggle(self, now: Optional[datetime] = None) -> list[str]:
        """Start/pause button: start when idle, otherwise pause or resume."""
        if self.status == TimerStatus.IDLE:
            return self.start(now)
        if self.status == TimerStatus.RUNNING:
            return self.pause()
        return self.resume()

    def tick(self) -> list[str]:
        """Advance the timer by one second.  Does nothing unless running.

        Returns a list of event strings:
        - ``'study_completed'`` / ``'rest_started'`` – a study block finished
        - ``'rest_completed'`` / ``'study_started'`` – a break finished
        """
        events: list[str] = []
        if self.status != TimerStatus.RUNNING:
            return events

        self.elapsed_seconds += 1
        if not self.is_pomodoro:
            return events

        if self.phase == TimerPhase.RESTING:
            self.rest_elapsed_seconds += 1
        self.remaining_seconds -= 1
        if self.remaining_seconds > 0:
            return events

        if self.phase == TimerPhase.STUDYING:
            self.cycles_completed += 1
            self.phase = TimerPhase.RESTING
            self.remaining_seconds = self.rest_seconds
            events.append("study_completed")
            events.append("rest_started")
        else:
            self.phase = TimerPhase.STUDYING
            self.remaining_seconds = self.study_seconds
            events.append("rest_completed")
            events.append("study_started")
        return events

    def reset(self) -> list[str]:
        """Pomodoro only: back to an idle first study block, cycles cleared."""
        if not self.is_pomodoro or self.status == TimerStatus.FINISHED:
            return []
        self.status = TimerStatus.IDLE
        self.phase = TimerPhase.STUDYING
        self.remaining_seconds = self.study_seconds
        self.cycles_completed = 0
        self.elapsed_seconds = 0
        self.rest_elapsed_seconds = 0
        return ["reset"]

    def finish(self, now: Optional[datetime] = None) -> StudySession:
        """Stop the clock for good and return the session draft.

        The draft is computed once; later calls return the same object.
        """
        if self._session is not None:
            return self._session

        self.status = TimerStatus.FINISHED
        self.ended_at = now or _utcnow()
        if self.started_at is None or self.started_at > self.ended_at:
            self.started_at = self.ended_at

        duration = self.duration_seconds()
        self._session = StudySession(
            activity_type=self.activity_type,
            mode=self.mode,
            duration_seconds=duration,
            pomodoro_cycles=self.cycles_completed if self.is_pomodoro else 0,
            points_earned=calculate_xp(duration, self.activity_type.label),
            started_at=self.started_at,
            ended_at=self.ended_at,
        )
        return self._session
