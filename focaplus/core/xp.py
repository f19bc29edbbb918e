"""XP calculation for finished study sessions.

One XP per whole minute studied, weighted by the activity type.  Every
finished session earns at least 1 XP.
"""

import math

# Keyed by the activity label as shown in the app
STUDY_TYPE_MULTIPLIERS: dict[str, float] = {
    "Estudar para Avaliação": 2.0,
    "Fazer Tarefa de casa": 1.5,
    "Assistir Aula": 1.0,
    "Estudar Conteúdo": 1.0,
}

DEFAULT_MULTIPLIER = 1.0


def get_multiplier(activity_type: str) -> float:
    """Return the XP multiplier for *activity_type*, 1.0 when unknown."""
    return STUDY_TYPE_MULTIPLIERS.get(activity_type, DEFAULT_MULTIPLIER)


def calculate_xp(duration_seconds: int, activity_type: str) -> int:
    """Convert studied seconds into XP.

    Partial minutes are dropped, then the minute count is multiplied and
    rounded half up (so 1.5 becomes 2).
    """
    minutes = max(0, duration_seconds) // 60
    weighted = minutes * get_multiplier(activity_type)
    return max(1, math.floor(weighted + 0.5))
