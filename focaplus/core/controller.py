"""Study controller for FocaPlus.

Owns the single live StudyTimer of the study screen and the clock thread that
ticks it once per second.  User actions arrive from other threads (the web
dashboard), so every access to the timer goes through one lock: ticks and
actions are strictly serialized and the timer has a single mutator at a time.
"""

import logging
import threading
import time
from typing import Any, Optional

from focaplus.core.models import ActivityType, FinishOutcome, TimerMode
from focaplus.core.recorder import StudySessionRecorder
from focaplus.core.timer import StudyTimer

logger = logging.getLogger(__name__)


class NoActiveTimerError(RuntimeError):
    """An action needs a timer but no study screen is open."""


class StudyController:
    """Hosts one study session at a time and ticks it from a daemon thread."""

    def __init__(
        self,
        recorder: StudySessionRecorder,
        study_seconds: int = StudyTimer.STUDY_SECONDS,
        rest_seconds: int = StudyTimer.REST_SECONDS,
        tick_interval: float = 1.0,
    ) -> None:
        self.recorder = recorder
        self.study_seconds = study_seconds
        self.rest_seconds = rest_seconds
        self.tick_interval = tick_interval
        self.timer: Optional[StudyTimer] = None
        self.discipline_id: Optional[str] = None
        self.discipline_name: Optional[str] = None
        self.last_outcome: Optional[FinishOutcome] = None
        self._lock = threading.Lock()
        self._submitting = False
        self._running = False
        self._thread: Optional[threading.Thread] = None

    # ------------------------------------------------------------------
    # Study screen lifecycle
    # ------------------------------------------------------------------

    def begin(self, mode: TimerMode, activity_type: ActivityType,
              discipline_id: Optional[str], discipline_name: Optional[str] = None,
              autostart: Optional[bool] = None) -> StudyTimer:
        """Open a study screen with a fresh timer.

        Any previous unfinished timer is abandoned.  Stopwatch timers start
        right away and Pomodoro timers wait for the user, unless *autostart*
        says otherwise.
        """
        if autostart is None:
            autostart = mode == TimerMode.STOPWATCH
        with self._lock:
            if self.timer is not None:
                logger.info("Abandoning unfinished %s timer", self.timer.mode.value)
            self.timer = StudyTimer(mode, activity_type, self.study_seconds, self.rest_seconds)
            self.discipline_id = discipline_id
            self.discipline_name = discipline_name
            if autostart:
                self.timer.start()
            logger.info("Study screen opened: %s / %s for discipline %s",
                        mode.value, activity_type.label, discipline_id)
            return self.timer

    def abandon(self) -> None:
        """Leave the study screen without submitting anything."""
        with self._lock:
            if self.timer is not None:
                logger.info("Study timer abandoned after %ds", self.timer.elapsed_seconds)
            self.timer = None
            self.discipline_id = None
            self.discipline_name = None

    def start(self) -> list[str]:
        with self._lock:
            return self._require_timer().start()

    def pause(self) -> list[str]:
        with self._lock:
            return self._require_timer().pause()

    def resume(self) -> list[str]:
        with self._lock:
            return self._require_timer().resume()

    def toggle(self) -> list[str]:
        with self._lock:
            return self._require_timer().toggle()

    def reset(self) -> list[str]:
        with self._lock:
            return self._require_timer().reset()

    def finish(self) -> FinishOutcome:
        """Finish and submit the current session, then close the screen.

        The timer is stopped and detached under the lock; the submission runs
        without it so status reads, actions and ticks are not held up by the
        network.  If the recorder raises (``MissingIdentifierError``) the
        stopped timer is put back so the caller can show the message.
        """
        with self._lock:
            timer = self._require_timer()
            timer.finish()
            discipline_id, discipline_name = self.discipline_id, self.discipline_name
            self.timer = None
            self._submitting = True
        try:
            outcome = self.recorder.finish(timer, discipline_id, discipline_name)
        except Exception:
            with self._lock:
                self._submitting = False
                if self.timer is None:
                    self.timer = timer
                    self.discipline_id, self.discipline_name = discipline_id, discipline_name
            raise
        with self._lock:
            self._submitting = False
            self.last_outcome = outcome
            if self.timer is None:
                self.discipline_id = None
                self.discipline_name = None
        logger.info("Study session finished: %ds, +%d XP (total %d, submitted=%s)",
                    outcome.session.duration_seconds, outcome.points_earned,
                    outcome.total_points, outcome.submitted)
        return outcome

    def status(self) -> dict[str, Any]:
        """JSON-ready snapshot of the study screen."""
        with self._lock:
            if self.timer is None:
                return {"active": False, "submitting": self._submitting}
            state = self.timer.state()
            return {
                "active": True,
                "mode": state.mode.value,
                "activity_type": self.timer.activity_type.label,
                "discipline_id": self.discipline_id,
                "discipline_name": self.discipline_name,
                "status": state.status.value,
                "phase": state.phase.value,
                "is_running": state.is_running,
                "elapsed_seconds": state.elapsed_seconds,
                "remaining_seconds": state.remaining_seconds,
                "rest_seconds": state.rest_seconds,
                "cycles_completed": state.cycles_completed,
                "started_at": state.started_at.isoformat() if state.started_at else None,
            }

    # ------------------------------------------------------------------
    # Clock
    # ------------------------------------------------------------------

    def tick_once(self) -> list[str]:
        """One clock tick.  Only a running timer is affected."""
        with self._lock:
            if self.timer is None:
                return []
            events = self.timer.tick()
        for event in events:
            logger.debug("Timer event: %s", event)
        return events

    def run(self) -> None:
        """Clock loop: tick every ``tick_interval`` seconds until stopped."""
        self._running = True
        self._loop()

    def _loop(self) -> None:
        next_tick = time.monotonic() + self.tick_interval
        while self._running:
            delay = next_tick - time.monotonic()
            if delay > 0:
                time.sleep(delay)
            next_tick += self.tick_interval
            try:
                self.tick_once()
            except Exception:
                logger.exception("Timer tick failed")

    def start_clock(self) -> threading.Thread:
        """Run the clock loop in a daemon thread."""
        self._running = True
        self._thread = threading.Thread(target=self._loop, daemon=True, name="focaplus-clock")
        self._thread.start()
        return self._thread

    def stop_clock(self) -> None:
        self._running = False
        if self._thread is not None:
            self._thread.join(timeout=self.tick_interval * 2)
            self._thread = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_timer(self) -> StudyTimer:
        if self.timer is None:
            raise NoActiveTimerError("No study session is open")
        return self.timer
