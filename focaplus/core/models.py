"""Core data models for FocaPlus.

Defines all dataclasses and enums used across the application:
- Activity: ActivityType
- Timer: TimerMode, TimerPhase, TimerStatus, TimerState
- Sessions: StudySession, StudySessionRecord, FinishOutcome
- Backend: ScoreRecord, DisciplineInstance, AuthTokens
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp from the backend (``Z`` suffix allowed)."""
    if not value:
        return None
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


# ---------------------------------------------------------------------------
# Activity
# ---------------------------------------------------------------------------

class ActivityType(Enum):
    """What the user is studying for.  Values are the labels shown in the app."""
    STUDY_FOR_ASSESSMENT = "Estudar para Avaliação"
    DO_HOMEWORK = "Fazer Tarefa de casa"
    WATCH_LESSON = "Assistir Aula"
    STUDY_CONTENT = "Estudar Conteúdo"

    @property
    def label(self) -> str:
        return self.value

    @property
    def session_type(self) -> str:
        """Backend ``sessionType`` code."""
        return _SESSION_TYPES[self]

    @classmethod
    def from_label(cls, text: Optional[str]) -> "ActivityType":
        """Resolve a label, member name or session type code.

        Unknown or empty input resolves to ``STUDY_CONTENT``.
        """
        if not text:
            return cls.STUDY_CONTENT
        for member in cls:
            if text in (member.value, member.name, member.session_type):
                return member
        return cls.STUDY_CONTENT


_SESSION_TYPES = {
    ActivityType.STUDY_FOR_ASSESSMENT: "ASSESSMENT",
    ActivityType.DO_HOMEWORK: "HOMEWORK",
    ActivityType.WATCH_LESSON: "LESSON",
    ActivityType.STUDY_CONTENT: "CONTENT",
}


# ---------------------------------------------------------------------------
# Timer
# ---------------------------------------------------------------------------

class TimerMode(Enum):
    """How study time is measured."""
    STOPWATCH = "STOPWATCH"
    POMODORO = "POMODORO"


class TimerPhase(Enum):
    """Pomodoro phase.  Stopwatch timers are always STUDYING."""
    STUDYING = "studying"
    RESTING = "resting"


class TimerStatus(Enum):
    """Lifecycle state of a StudyTimer."""
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    FINISHED = "finished"


@dataclass
class TimerState:
    """Snapshot of a timer, suitable for display."""
    mode: TimerMode
    status: TimerStatus
    phase: TimerPhase
    elapsed_seconds: int
    remaining_seconds: int   # Pomodoro countdown; 0 for stopwatch
    rest_seconds: int        # break time ticked so far
    cycles_completed: int
    started_at: Optional[datetime] = None

    @property
    def is_running(self) -> bool:
        return self.status == TimerStatus.RUNNING


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StudySession:
    """A finished timer run, ready to be submitted once."""
    activity_type: ActivityType
    mode: TimerMode
    duration_seconds: int
    pomodoro_cycles: int
    points_earned: int
    started_at: datetime
    ended_at: datetime

    def to_payload(self, user_course_id: str, discipline_instance_id: str) -> dict[str, Any]:
        """Build the ``POST /study-sessions`` body."""
        payload: dict[str, Any] = {
            "userCourseId": user_course_id,
            "disciplineInstanceId": discipline_instance_id,
            "sessionType": self.activity_type.session_type,
            "mode": self.mode.value,
            "durationSeconds": self.duration_seconds,
            "pointsEarned": self.points_earned,
            "startedAt": self.started_at.isoformat(),
            "endedAt": self.ended_at.isoformat(),
        }
        if self.mode == TimerMode.POMODORO:
            payload["pomodoroCycles"] = self.pomodoro_cycles
        return payload


@dataclass
class StudySessionRecord:
    """A study session as persisted by the backend."""
    id: str
    user_id: str
    user_course_id: str
    discipline_instance_id: Optional[str]
    session_type: str
    mode: str
    duration_seconds: int
    pomodoro_cycles: int
    points_earned: int
    started_at: Optional[datetime]
    ended_at: Optional[datetime]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StudySessionRecord":
        return cls(
            id=str(data["id"]),
            user_id=str(data.get("userId", "")),
            user_course_id=str(data.get("userCourseId", "")),
            discipline_instance_id=data.get("disciplineInstanceId"),
            session_type=data.get("sessionType", ""),
            mode=data.get("mode", ""),
            duration_seconds=int(data.get("durationSeconds") or 0),
            pomodoro_cycles=int(data.get("pomodoroCycles") or 0),
            points_earned=int(data.get("pointsEarned") or 0),
            started_at=parse_timestamp(data.get("startedAt")),
            ended_at=parse_timestamp(data.get("endedAt")),
        )


@dataclass
class FinishOutcome:
    """Everything the "study finished" summary shows."""
    session: StudySession
    points_earned: int
    total_points: int
    time_spent_seconds: int
    submitted: bool
    discipline_id: str
    discipline_name: Optional[str] = None
    record: Optional[StudySessionRecord] = None


# ---------------------------------------------------------------------------
# Backend
# ---------------------------------------------------------------------------

@dataclass
class ScoreRecord:
    """One XP entry in the backend score ledger."""
    points: int
    source_type: str = ""
    source_id: str = ""
    id: str = ""
    discipline_instance_id: str = ""
    user_course_id: str = ""
    created_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ScoreRecord":
        return cls(
            points=int(data.get("points") or 0),
            source_type=data.get("sourceType") or "",
            source_id=str(data.get("sourceId") or ""),
            id=str(data.get("id") or ""),
            discipline_instance_id=str(data.get("disciplineInstanceId") or ""),
            user_course_id=str(data.get("userCourseId") or ""),
            created_at=parse_timestamp(data.get("createdAt")),
        )


@dataclass
class DisciplineInstance:
    """The subset of a discipline instance the study flow needs."""
    id: str
    user_course_id: str
    name: str = ""
    status: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DisciplineInstance":
        return cls(
            id=str(data["id"]),
            user_course_id=str(data["userCourseId"]),
            name=data.get("name") or "",
            status=data.get("status") or "",
        )


@dataclass
class AuthTokens:
    """Tokens returned by ``/auth/login`` and ``/auth/refresh``."""
    access_token: str
    refresh_token: str
    user: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AuthTokens":
        return cls(
            access_token=data["accessToken"],
            refresh_token=data["refreshToken"],
            user=data.get("user") or {},
        )
