"""FocaPlus application.

Wires the configuration, token store, backend client, session recorder and
study controller together, then runs the controller's clock and the web study
page in daemon threads until interrupted.
"""

import logging
import os
import threading
from typing import Optional

from focaplus.api.client import ApiClient
from focaplus.api.resources import DisciplineInstancesApi, ScoresApi, StudySessionsApi
from focaplus.core.config import load_config, pomodoro_seconds
from focaplus.core.controller import StudyController
from focaplus.core.recorder import StudySessionRecorder
from focaplus.persistence.token_store import TokenStore

logger = logging.getLogger(__name__)


def open_token_store(config: dict) -> TokenStore:
    """Create (and initialize) the token store at the configured path."""
    db_path = os.path.expanduser(config.get("database_path", "~/.focaplus/focaplus.db"))
    db_dir = os.path.dirname(db_path)
    if db_dir:
        os.makedirs(db_dir, exist_ok=True)
    store = TokenStore(db_path)
    store.init_db()
    return store


def build_client(config: dict, token_store: Optional[TokenStore]) -> ApiClient:
    return ApiClient(
        base_url=config.get("api_base_url", "http://localhost:8080/api/v1"),
        timeout=config.get("request_timeout_seconds", 10),
        token_store=token_store,
    )


def build_recorder(client: ApiClient) -> StudySessionRecorder:
    return StudySessionRecorder(
        sessions_api=StudySessionsApi(client),
        scores_api=ScoresApi(client),
        disciplines_api=DisciplineInstancesApi(client),
    )


class StudyApp:
    """Main application class that serves the study page."""

    def __init__(self, config_path: str) -> None:
        self.config_path = config_path
        self.config = load_config(config_path)
        self.controller: Optional[StudyController] = None
        self.recorder: Optional[StudySessionRecorder] = None
        self._store: Optional[TokenStore] = None
        self._stop_event = threading.Event()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Initialize all components, start the clock and the study page,
        then block until ``stop()`` or Ctrl+C."""
        self._init_components()
        self.controller.start_clock()
        self._start_dashboard()
        try:
            self._stop_event.wait()
        except KeyboardInterrupt:
            logger.info("Interrupted")
        finally:
            self.stop()

    def stop(self) -> None:
        """Stop the clock and clean up resources.  An open timer is abandoned."""
        self._stop_event.set()
        if self.controller is not None:
            self.controller.abandon()
            self.controller.stop_clock()
        if self._store is not None:
            self._store.close()
            self._store = None

    # ------------------------------------------------------------------
    # Component initialization
    # ------------------------------------------------------------------

    def _init_components(self) -> None:
        """Wire up all FocaPlus components from config."""
        self._store = open_token_store(self.config)
        if self._store.load_tokens() is None:
            logger.warning("Not logged in; run 'focaplus --login EMAIL' first")

        client = build_client(self.config, self._store)
        self.recorder = build_recorder(client)

        study_seconds, rest_seconds = pomodoro_seconds(self.config)
        self.controller = StudyController(
            self.recorder, study_seconds=study_seconds, rest_seconds=rest_seconds,
        )

    # ------------------------------------------------------------------
    # Web study page
    # ------------------------------------------------------------------

    def _start_dashboard(self) -> None:
        """Start the study page in a background thread."""
        try:
            from focaplus.ui.web import start_dashboard
            start_dashboard(self, port=self.config.get("dashboard_port", 5555))
        except Exception:
            logger.exception("Failed to start study page")
