"""Thin wrappers around the backend resources the study flow uses."""

from typing import Any

from focaplus.api.client import ApiClient, build_path
from focaplus.core.models import (
    AuthTokens,
    DisciplineInstance,
    ScoreRecord,
    StudySessionRecord,
)


def _as_list(data: Any) -> list[dict[str, Any]]:
    return data if isinstance(data, list) else []


class StudySessionsApi:
    """``/study-sessions``"""

    def __init__(self, client: ApiClient) -> None:
        self.client = client

    def create(self, payload: dict[str, Any]) -> StudySessionRecord:
        return StudySessionRecord.from_dict(self.client.post("/study-sessions", payload))

    def get_all(self) -> list[StudySessionRecord]:
        return [StudySessionRecord.from_dict(d) for d in _as_list(self.client.get("/study-sessions"))]

    def get_by_discipline(self, discipline_instance_id: str) -> list[StudySessionRecord]:
        data = self.client.get(build_path("/study-sessions/by-discipline", discipline_instance_id))
        return [StudySessionRecord.from_dict(d) for d in _as_list(data)]

    def get_by_id(self, session_id: str) -> StudySessionRecord:
        return StudySessionRecord.from_dict(self.client.get(build_path("/study-sessions", session_id)))

    def delete(self, session_id: str) -> None:
        self.client.delete(build_path("/study-sessions", session_id))


class ScoresApi:
    """``/score-records``"""

    def __init__(self, client: ApiClient) -> None:
        self.client = client

    def get_my_scores(self) -> list[ScoreRecord]:
        return [ScoreRecord.from_dict(d) for d in _as_list(self.client.get("/score-records/me"))]

    def get_by_discipline(self, discipline_instance_id: str) -> list[ScoreRecord]:
        data = self.client.get(build_path("/score-records/by-discipline", discipline_instance_id))
        return [ScoreRecord.from_dict(d) for d in _as_list(data)]

    def get_by_user_course(self, user_course_id: str) -> list[ScoreRecord]:
        data = self.client.get(build_path("/score-records/by-course", user_course_id))
        return [ScoreRecord.from_dict(d) for d in _as_list(data)]


class DisciplineInstancesApi:
    """``/discipline-instances`` (read-only; only lookups are needed here)."""

    def __init__(self, client: ApiClient) -> None:
        self.client = client

    def get_by_id(self, discipline_instance_id: str) -> DisciplineInstance:
        data = self.client.get(build_path("/discipline-instances", discipline_instance_id))
        return DisciplineInstance.from_dict(data)


class AuthApi:
    """``/auth``"""

    def __init__(self, client: ApiClient) -> None:
        self.client = client

    def login(self, email: str, password: str) -> AuthTokens:
        return AuthTokens.from_dict(self.client.post("/auth/login", {"email": email, "password": password}))

    def refresh(self, refresh_token: str) -> AuthTokens:
        return AuthTokens.from_dict(self.client.post("/auth/refresh", {"refreshToken": refresh_token}))
