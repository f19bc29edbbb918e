"""Text formatter for FocaPlus.

Renders timer clocks, the "study finished" summary and session history as
plain text.  User-facing wording is Brazilian Portuguese, like the app.
"""

from focaplus.core.models import FinishOutcome, StudySessionRecord


class TextFormatter:
    """Formats timer and session data as human-readable plain text."""

    @staticmethod
    def format_clock(seconds: int) -> str:
        """Stopwatch display, 'HH:MM:SS'."""
        seconds = max(0, seconds)
        hours, rest = divmod(seconds, 3600)
        minutes, secs = divmod(rest, 60)
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"

    @staticmethod
    def format_countdown(seconds: int) -> str:
        """Pomodoro display, 'MM:SS' (minutes may exceed 59)."""
        seconds = max(0, seconds)
        minutes, secs = divmod(seconds, 60)
        return f"{minutes:02d}:{secs:02d}"

    @staticmethod
    def format_focus_time(seconds: int) -> str:
        """Spell out focus time, e.g. '1 hora e 5 minutos' or '0 minutos'.

        Truncates to whole minutes.
        """
        seconds = max(0, seconds)
        hours = seconds // 3600
        minutes = (seconds % 3600) // 60
        minute_str = f"{minutes} minuto{'s' if minutes != 1 else ''}"
        if hours > 0:
            return f"{hours} hora{'s' if hours > 1 else ''} e {minute_str}"
        return minute_str

    @staticmethod
    def format_outcome(outcome: FinishOutcome) -> str:
        """Render the summary shown after a session is finished."""
        title = outcome.discipline_name or "Disciplina"
        lines = [
            "Estudo finalizado",
            "",
            f"  {title}",
            f"  {outcome.session.activity_type.label} ✓",
            "",
            f"  Tempo total: {TextFormatter.format_focus_time(outcome.time_spent_seconds)} de foco",
            f"  Pontos ganhos: +{outcome.points_earned}XP",
            f"  Total na disciplina: +{outcome.total_points}XP",
        ]
        if outcome.session.pomodoro_cycles:
            lines.append(f"  Pomodoros completados: {outcome.session.pomodoro_cycles}")
        if not outcome.submitted:
            lines.append("")
            lines.append("  (sessão não enviada; total estimado localmente)")
        return "\n".join(lines) + "\n"

    @staticmethod
    def format_history(records: list[StudySessionRecord]) -> str:
        """Render a discipline's sessions as an aligned table.

        Returns lines like:
          Início            Tipo        Modo       Duração  XP
          ──────────────────────────────────────────────────
          2025-03-01 09:00  ASSESSMENT  POMODORO   50m      100
        """
        if not records:
            return "  Nenhuma sessão registrada.\n"

        rows = []
        for r in records:
            started = r.started_at.strftime("%Y-%m-%d %H:%M") if r.started_at else "-"
            rows.append((started, r.session_type, r.mode,
                         TextFormatter.format_duration(r.duration_seconds), str(r.points_earned)))

        headers = ("Início", "Tipo", "Modo", "Duração", "XP")
        widths = [max(len(h), *(len(row[i]) for row in rows)) for i, h in enumerate(headers)]

        def _line(cells) -> str:
            return "  " + "  ".join(
                f"{cell:>{w}}" if i == len(cells) - 1 else f"{cell:<{w}}"
                for i, (cell, w) in enumerate(zip(cells, widths))
            )

        header = _line(headers)
        separator = "  " + "─" * (len(header) - 2)
        lines = [header, separator] + [_line(row) for row in rows]
        lines.append(separator)
        total_xp = sum(r.points_earned for r in records)
        lines.append(f"  Total: {len(records)} sessões, {total_xp}XP")
        return "\n".join(lines) + "\n"

    @staticmethod
    def format_duration(seconds: int) -> str:
        """Format seconds as 'Xh Ym' or 'Ym', truncated to whole minutes."""
        total_minutes = max(0, seconds) // 60
        hours, minutes = divmod(total_minutes, 60)
        if hours == 0:
            return f"{minutes}m"
        return f"{hours}h {minutes}m"
