"""Unit tests for StudySessionRecorder and the fallback total."""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from focaplus.api.client import ApiError
from focaplus.core.models import (
    ActivityType,
    DisciplineInstance,
    ScoreRecord,
    StudySessionRecord,
    TimerMode,
    TimerStatus,
)
from focaplus.core.recorder import (
    MissingIdentifierError,
    StudySessionRecorder,
    fallback_total,
)
from focaplus.core.timer import StudyTimer

T0 = datetime(2025, 3, 1, 9, 0, 0, tzinfo=timezone.utc)


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def _record(session_id="sess-1") -> StudySessionRecord:
    return StudySessionRecord(
        id=session_id, user_id="u-1", user_course_id="uc-1",
        discipline_instance_id="disc-1", session_type="LESSON", mode="STOPWATCH",
        duration_seconds=185, pomodoro_cycles=0, points_earned=3,
        started_at=T0, ended_at=T0,
    )


def _score(points, source_id="other", source_type="STUDY_SESSION") -> ScoreRecord:
    return ScoreRecord(points=points, source_type=source_type, source_id=source_id)


def _stopwatch(seconds=185, activity=ActivityType.WATCH_LESSON) -> StudyTimer:
    timer = StudyTimer(TimerMode.STOPWATCH, activity)
    timer.start(T0)
    for _ in range(seconds):
        timer.tick()
    return timer


@pytest.fixture
def apis():
    sessions = MagicMock()
    scores = MagicMock()
    disciplines = MagicMock()
    disciplines.get_by_id.return_value = DisciplineInstance(id="disc-1", user_course_id="uc-1")
    sessions.create.return_value = _record()
    scores.get_by_discipline.return_value = []
    return sessions, scores, disciplines


@pytest.fixture
def recorder(apis):
    sessions, scores, disciplines = apis
    return StudySessionRecorder(sessions, scores, disciplines)


# ------------------------------------------------------------------
# fallback_total
# ------------------------------------------------------------------

class TestFallbackTotal:
    def test_no_known_scores(self):
        assert fallback_total([], 7) == 7

    def test_sums_positive_scores_plus_new_points(self):
        assert fallback_total([_score(10), _score(5)], 3) == 18

    def test_ignores_zero_and_negative_scores(self):
        assert fallback_total([_score(10), _score(0), _score(-4)], 3) == 13


# ------------------------------------------------------------------
# Successful submission
# ------------------------------------------------------------------

class TestSubmit:
    def test_submits_payload_with_resolved_course(self, recorder, apis):
        sessions, _, disciplines = apis
        recorder.finish(_stopwatch(), "disc-1", "Cálculo")

        disciplines.get_by_id.assert_called_once_with("disc-1")
        payload = sessions.create.call_args[0][0]
        assert payload["userCourseId"] == "uc-1"
        assert payload["disciplineInstanceId"] == "disc-1"
        assert payload["sessionType"] == "LESSON"
        assert payload["mode"] == "STOPWATCH"
        assert payload["durationSeconds"] == 185
        assert payload["pointsEarned"] == 3
        assert "pomodoroCycles" not in payload

    def test_outcome_fields(self, recorder):
        outcome = recorder.finish(_stopwatch(), "disc-1", "Cálculo")
        assert outcome.submitted is True
        assert outcome.points_earned == 3
        assert outcome.time_spent_seconds == 185
        assert outcome.discipline_id == "disc-1"
        assert outcome.discipline_name == "Cálculo"
        assert outcome.record.id == "sess-1"

    def test_credited_session_uses_backend_sum(self, recorder, apis):
        _, scores, _ = apis
        scores.get_by_discipline.return_value = [
            _score(10), _score(0, source_type="TASK"), _score(3, source_id="sess-1"),
        ]
        outcome = recorder.finish(_stopwatch(), "disc-1")
        assert outcome.total_points == 13

    def test_uncredited_session_adds_points_locally(self, recorder, apis):
        _, scores, _ = apis
        scores.get_by_discipline.return_value = [_score(10), _score(20)]
        outcome = recorder.finish(_stopwatch(), "disc-1")
        assert outcome.total_points == 33

    def test_zero_point_credit_counts_as_uncredited(self, recorder, apis):
        _, scores, _ = apis
        scores.get_by_discipline.return_value = [_score(10), _score(0, source_id="sess-1")]
        outcome = recorder.finish(_stopwatch(), "disc-1")
        assert outcome.total_points == 13

    def test_score_for_other_source_type_is_not_a_credit(self, recorder, apis):
        _, scores, _ = apis
        scores.get_by_discipline.return_value = [_score(3, source_id="sess-1", source_type="TASK")]
        outcome = recorder.finish(_stopwatch(), "disc-1")
        assert outcome.total_points == 6

    def test_pomodoro_payload_has_cycles(self, recorder, apis):
        sessions, _, _ = apis
        timer = StudyTimer(TimerMode.POMODORO, ActivityType.STUDY_FOR_ASSESSMENT)
        timer.start(T0)
        for _ in range(2 * 1800):
            timer.tick()
        outcome = recorder.finish(timer, "disc-1")
        payload = sessions.create.call_args[0][0]
        assert payload["pomodoroCycles"] == 2
        assert payload["durationSeconds"] == 3000
        assert payload["pointsEarned"] == 100
        assert outcome.time_spent_seconds == 3600


# ------------------------------------------------------------------
# Failures
# ------------------------------------------------------------------

class TestSubmitFailure:
    def test_create_failure_falls_back_to_reread_scores(self, recorder, apis):
        sessions, scores, _ = apis
        sessions.create.side_effect = ApiError("boom", status=500)
        scores.get_by_discipline.return_value = [_score(10), _score(0)]
        outcome = recorder.finish(_stopwatch(), "disc-1")
        assert outcome.submitted is False
        assert outcome.record is None
        assert outcome.total_points == 13

    def test_discipline_lookup_failure_is_absorbed(self, recorder, apis):
        sessions, _, disciplines = apis
        disciplines.get_by_id.side_effect = ApiError("offline")
        outcome = recorder.finish(_stopwatch(), "disc-1")
        sessions.create.assert_not_called()
        assert outcome.total_points == 3

    def test_everything_down_uses_last_known_scores(self, recorder, apis):
        sessions, scores, _ = apis
        scores.get_by_discipline.return_value = [_score(40)]
        assert recorder.discipline_total("disc-1") == 40

        sessions.create.side_effect = ApiError("offline")
        scores.get_by_discipline.side_effect = ApiError("offline")
        outcome = recorder.finish(_stopwatch(), "disc-1")
        assert outcome.total_points == 43

    def test_everything_down_without_history(self, recorder, apis):
        sessions, scores, _ = apis
        sessions.create.side_effect = ApiError("offline")
        scores.get_by_discipline.side_effect = ApiError("offline")
        outcome = recorder.finish(_stopwatch(), "disc-1")
        assert outcome.total_points == outcome.points_earned == 3

    def test_score_read_failure_after_create(self, recorder, apis):
        _, scores, _ = apis
        scores.get_by_discipline.side_effect = ApiError("offline")
        outcome = recorder.finish(_stopwatch(), "disc-1")
        assert outcome.submitted is True
        assert outcome.total_points == 3

    def test_malformed_response_is_absorbed(self, recorder, apis):
        _, _, disciplines = apis
        disciplines.get_by_id.side_effect = KeyError("userCourseId")
        outcome = recorder.finish(_stopwatch(), "disc-1")
        assert outcome.submitted is False

    @pytest.mark.parametrize("discipline_id", [None, ""])
    def test_missing_discipline_blocks_submission(self, recorder, apis, discipline_id):
        sessions, scores, disciplines = apis
        timer = _stopwatch()
        with pytest.raises(MissingIdentifierError):
            recorder.finish(timer, discipline_id)
        assert timer.status == TimerStatus.FINISHED
        disciplines.get_by_id.assert_not_called()
        sessions.create.assert_not_called()
        scores.get_by_discipline.assert_not_called()


class TestDisciplineTotal:
    def test_sums_all_points(self, recorder, apis):
        _, scores, _ = apis
        scores.get_by_discipline.return_value = [_score(10), _score(-2), _score(5)]
        assert recorder.discipline_total("disc-1") == 13

    def test_remembers_last_read(self, recorder, apis):
        _, scores, _ = apis
        scores.get_by_discipline.return_value = [_score(10)]
        recorder.discipline_total("disc-1")
        assert [s.points for s in recorder.known_scores("disc-1")] == [10]
        assert recorder.known_scores("disc-2") == []

    def test_propagates_api_error(self, recorder, apis):
        _, scores, _ = apis
        scores.get_by_discipline.side_effect = ApiError("offline")
        with pytest.raises(ApiError):
            recorder.discipline_total("disc-1")
