"""Submission of finished study sessions.

The recorder finishes a StudyTimer, posts the session to the backend and
reads back the discipline's score ledger to learn the authoritative XP
total.  Network trouble never blocks the user: the total then falls back to
``fallback_total`` over the best scores available.
"""

import logging
from typing import Optional

from focaplus.api.client import ApiError
from focaplus.api.resources import DisciplineInstancesApi, ScoresApi, StudySessionsApi
from focaplus.core.models import FinishOutcome, ScoreRecord, StudySessionRecord
from focaplus.core.timer import StudyTimer

logger = logging.getLogger(__name__)

STUDY_SESSION_SOURCE = "STUDY_SESSION"

# Malformed responses are treated like failed requests
_SUBMISSION_ERRORS = (ApiError, KeyError, TypeError, ValueError)


class MissingIdentifierError(ValueError):
    """The session can't be submitted because no discipline id is known."""

    user_message = "ID da disciplina não encontrado."


def fallback_total(scores: list[ScoreRecord], points_earned: int) -> int:
    """Best-effort discipline total when the backend hasn't credited a session.

    Sum of the known positive scores plus the points just earned.
    """
    return sum(s.points for s in scores if s.points > 0) + points_earned


def sum_points(scores: list[ScoreRecord]) -> int:
    return sum(s.points for s in scores)


class StudySessionRecorder:
    """Submits finished sessions and works out the discipline total."""

    def __init__(
        self,
        sessions_api: StudySessionsApi,
        scores_api: ScoresApi,
        disciplines_api: DisciplineInstancesApi,
    ) -> None:
        self.sessions_api = sessions_api
        self.scores_api = scores_api
        self.disciplines_api = disciplines_api
        self._known_scores: dict[str, list[ScoreRecord]] = {}  # keyed by discipline id

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def finish(self, timer: StudyTimer, discipline_id: Optional[str],
               discipline_name: Optional[str] = None) -> FinishOutcome:
        """Finish *timer* and submit the session.

        Raises ``MissingIdentifierError`` when *discipline_id* is empty; the
        timer is still stopped.  Submission failures are logged and absorbed.
        """
        session = timer.finish()
        if not discipline_id:
            raise MissingIdentifierError(MissingIdentifierError.user_message)

        points = session.points_earned
        record: Optional[StudySessionRecord] = None
        try:
            discipline = self.disciplines_api.get_by_id(discipline_id)
            record = self.sessions_api.create(
                session.to_payload(discipline.user_course_id, discipline_id)
            )
            scores = self._read_scores(discipline_id)
            total = self._total_after_submit(scores, record, points)
        except _SUBMISSION_ERRORS as exc:
            logger.warning("Could not submit study session for discipline %s: %s",
                           discipline_id, exc)
            total = self._total_after_failure(discipline_id, points)

        return FinishOutcome(
            session=session,
            points_earned=points,
            total_points=total,
            time_spent_seconds=timer.time_spent_seconds(),
            submitted=record is not None,
            discipline_id=discipline_id,
            discipline_name=discipline_name,
            record=record,
        )

    def discipline_total(self, discipline_id: str) -> int:
        """Authoritative XP total for a discipline.  Raises ``ApiError``."""
        return sum_points(self._read_scores(discipline_id))

    def known_scores(self, discipline_id: str) -> list[ScoreRecord]:
        """Scores from the last successful read for *discipline_id*."""
        return list(self._known_scores.get(discipline_id, []))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _read_scores(self, discipline_id: str) -> list[ScoreRecord]:
        scores = self.scores_api.get_by_discipline(discipline_id)
        self._known_scores[discipline_id] = scores
        return scores

    @staticmethod
    def _total_after_submit(scores: list[ScoreRecord], record: StudySessionRecord,
                            points: int) -> int:
        credited = next(
            (s for s in scores
             if s.source_id == record.id and s.source_type == STUDY_SESSION_SOURCE),
            None,
        )
        if credited is None or credited.points == 0:
            # score not written yet on the backend
            return fallback_total(scores, points)
        return sum_points(scores)

    def _total_after_failure(self, discipline_id: str, points: int) -> int:
        try:
            scores = self._read_scores(discipline_id)
        except _SUBMISSION_ERRORS as exc:
            logger.warning("Could not read scores for discipline %s: %s", discipline_id, exc)
            scores = self.known_scores(discipline_id)
        return fallback_total(scores, points)
