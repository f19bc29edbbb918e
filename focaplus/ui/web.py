"""Web-based study screen for FocaPlus.

A lightweight Flask app serving a single page with:
- Study timer (stopwatch or Pomodoro) and its controls
- The "study finished" summary
- Discipline XP total
"""

import logging
import threading
from typing import Any, Optional

from flask import Flask, jsonify, render_template_string, request

from focaplus.api.client import ApiError
from focaplus.core.controller import NoActiveTimerError
from focaplus.core.models import ActivityType, FinishOutcome, TimerMode
from focaplus.core.recorder import MissingIdentifierError
from focaplus.core.xp import calculate_xp
from focaplus.reporting.formatter import TextFormatter

logger = logging.getLogger(__name__)

# Will be set by start_dashboard()
_app_ref = None  # type: Optional[Any]  # StudyApp


def outcome_to_dict(outcome: FinishOutcome) -> dict[str, Any]:
    session = outcome.session
    return {
        "discipline_id": outcome.discipline_id,
        "discipline_name": outcome.discipline_name,
        "activity_type": session.activity_type.label,
        "mode": session.mode.value,
        "duration_seconds": session.duration_seconds,
        "pomodoro_cycles": session.pomodoro_cycles,
        "time_spent_seconds": outcome.time_spent_seconds,
        "time_spent": TextFormatter.format_focus_time(outcome.time_spent_seconds),
        "points_earned": outcome.points_earned,
        "total_points": outcome.total_points,
        "submitted": outcome.submitted,
        "session_id": outcome.record.id if outcome.record else None,
        "started_at": session.started_at.isoformat(),
        "ended_at": session.ended_at.isoformat(),
    }


def create_flask_app() -> Flask:
    app = Flask(__name__)
    app.config["SEND_FILE_MAX_AGE_DEFAULT"] = 0

    def _controller():
        if _app_ref is None or _app_ref.controller is None:
            return None
        return _app_ref.controller

    def _action(name: str):
        controller = _controller()
        if controller is None:
            return jsonify({"error": "not ready"}), 500
        try:
            events = getattr(controller, name)()
        except NoActiveTimerError as exc:
            return jsonify({"error": str(exc)}), 409
        return jsonify({"events": events, "status": controller.status()})

    @app.route("/")
    def index():
        return render_template_string(
            STUDY_HTML,
            activity_types=[a.label for a in ActivityType],
        )

    @app.route("/api/status")
    def api_status():
        controller = _controller()
        if controller is None:
            return jsonify({"error": "not initialized"})
        data = controller.status()
        last = controller.last_outcome
        data["last_outcome"] = outcome_to_dict(last) if last else None
        return jsonify(data)

    @app.route("/api/study/begin", methods=["POST"])
    def api_begin():
        controller = _controller()
        if controller is None:
            return jsonify({"error": "not ready"}), 500
        data = request.json or {}
        try:
            mode = TimerMode(str(data.get("mode", "STOPWATCH")).upper())
        except ValueError:
            return jsonify({"error": "mode must be STOPWATCH or POMODORO"}), 400
        default_type = _app_ref.config.get("default_activity_type") if _app_ref.config else None
        activity = ActivityType.from_label(data.get("activity_type") or default_type)
        controller.begin(
            mode, activity,
            discipline_id=str(data.get("discipline_id") or "").strip() or None,
            discipline_name=str(data.get("discipline_name") or "").strip() or None,
            autostart=data.get("autostart"),
        )
        return jsonify({"ok": True, "status": controller.status()})

    @app.route("/api/study/start", methods=["POST"])
    def api_start():
        return _action("start")

    @app.route("/api/study/pause", methods=["POST"])
    def api_pause():
        return _action("pause")

    @app.route("/api/study/resume", methods=["POST"])
    def api_resume():
        return _action("resume")

    @app.route("/api/study/toggle", methods=["POST"])
    def api_toggle():
        return _action("toggle")

    @app.route("/api/study/reset", methods=["POST"])
    def api_reset():
        return _action("reset")

    @app.route("/api/study/finish", methods=["POST"])
    def api_finish():
        controller = _controller()
        if controller is None:
            return jsonify({"error": "not ready"}), 500
        try:
            outcome = controller.finish()
        except NoActiveTimerError as exc:
            return jsonify({"error": str(exc)}), 409
        except MissingIdentifierError as exc:
            return jsonify({"error": str(exc)}), 400
        return jsonify(outcome_to_dict(outcome))

    @app.route("/api/study/abandon", methods=["POST"])
    def api_abandon():
        controller = _controller()
        if controller is not None:
            controller.abandon()
        return jsonify({"ok": True})

    @app.route("/api/score/<discipline_id>")
    def api_score(discipline_id):
        if _app_ref is None or _app_ref.recorder is None:
            return jsonify({"error": "not ready"}), 500
        try:
            total = _app_ref.recorder.discipline_total(discipline_id)
        except ApiError as exc:
            return jsonify({"error": str(exc)}), 502
        return jsonify({"discipline_id": discipline_id, "total_points": total})

    @app.route("/api/xp")
    def api_xp():
        try:
            seconds = int(request.args.get("seconds", "0"))
        except ValueError:
            return jsonify({"error": "seconds must be an integer"}), 400
        activity = request.args.get("activity_type", "")
        return jsonify({"points": calculate_xp(seconds, activity)})

    return app


def start_dashboard(app_ref, port: int = 5555) -> threading.Thread:
    """Start the Flask study page in a daemon thread."""
    global _app_ref
    _app_ref = app_ref
    flask_app = create_flask_app()

    def _run():
        flask_app.run(host="127.0.0.1", port=port, debug=False, use_reloader=False)

    t = threading.Thread(target=_run, daemon=True, name="focaplus-web")
    t.start()
    logger.info("Study page started at http://127.0.0.1:%d", port)
    return t


STUDY_HTML = r"""<!DOCTYPE html>
<html lang="pt-BR">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>FocaPlus</title>
<style>
  body { font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", sans-serif;
         background: #f8f9fa; color: #333; max-width: 520px; margin: 0 auto; padding: 20px; }
  .card { background: #fff; border-radius: 10px; padding: 20px; margin-bottom: 16px;
          box-shadow: 0 1px 3px rgba(0,0,0,0.06); }
  #clock { font-size: 3em; font-weight: 300; text-align: center; font-variant-numeric: tabular-nums; }
  #phase { text-align: center; color: #888; }
  button { padding: 8px 16px; border-radius: 6px; border: 1px solid #ddd; cursor: pointer; }
  input, select { padding: 6px 10px; border: 1px solid #ddd; border-radius: 6px; width: 100%; margin-bottom: 8px; }
</style>
</head>
<body>
<div class="card">
  <input id="discipline-id" placeholder="ID da disciplina">
  <input id="discipline-name" placeholder="Nome da disciplina">
  <select id="activity">
    {% for label in activity_types %}<option>{{ label }}</option>{% endfor %}
  </select>
  <button onclick="begin('STOPWATCH')">Cronômetro</button>
  <button onclick="begin('POMODORO')">Pomodoro</button>
</div>
<div class="card">
  <div id="clock">--:--</div>
  <div id="phase"></div>
  <div style="display:flex;gap:8px;justify-content:center;margin-top:12px">
    <button onclick="post('toggle')">Iniciar / Pausar</button>
    <button onclick="post('reset')">Reiniciar</button>
    <button onclick="finish()">Finalizar</button>
  </div>
</div>
<div class="card" id="summary" style="display:none"></div>
<script>
function pad(n) { return String(n).padStart(2, '0'); }
function fmt(s, hours) {
  if (hours) return pad(Math.floor(s / 3600)) + ':' + pad(Math.floor(s % 3600 / 60)) + ':' + pad(s % 60);
  return pad(Math.floor(s / 60)) + ':' + pad(s % 60);
}
async function post(action, body) {
  const r = await fetch('/api/study/' + action, {method: 'POST',
    headers: {'Content-Type': 'application/json'}, body: JSON.stringify(body || {})});
  return [r.status, await r.json()];
}
function begin(mode) {
  post('begin', {mode: mode, activity_type: document.getElementById('activity').value,
    discipline_id: document.getElementById('discipline-id').value,
    discipline_name: document.getElementById('discipline-name').value});
}
async function finish() {
  const [status, data] = await post('finish');
  if (status !== 200) { alert(data.error); return; }
  const el = document.getElementById('summary');
  el.style.display = 'block';
  el.innerHTML = '<b>Estudo finalizado</b><br>Tempo total: ' + data.time_spent + ' de foco<br>' +
    'Pontos ganhos: +' + data.points_earned + 'XP<br>Total na disciplina: +' + data.total_points + 'XP';
}
async function refresh() {
  const s = await (await fetch('/api/status')).json();
  if (!s.active) {
    document.getElementById('clock').textContent = '--:--';
    document.getElementById('phase').textContent = s.submitting ? 'Enviando...' : '';
    return;
  }
  const pomodoro = s.mode === 'POMODORO';
  document.getElementById('clock').textContent = pomodoro ? fmt(s.remaining_seconds, false) : fmt(s.elapsed_seconds, true);
  document.getElementById('phase').textContent = pomodoro
    ? (s.phase === 'resting' ? 'Descanso' : 'Estudo') + ' · Pomodoros completados: ' + s.cycles_completed
    : s.activity_type;
}
setInterval(refresh, 1000); refresh();
</script>
</body>
</html>
"""
