"""FocaPlus application entry point.

Supports two modes:
  - App mode (default): serves the study page and runs the timer clock
  - CLI mode: one-off backend queries and login management

Usage:
    python -m focaplus.main                          # app mode
    python -m focaplus.main --total DISCIPLINE_ID    # print discipline XP total
    python -m focaplus.main --history DISCIPLINE_ID  # list discipline sessions
    python -m focaplus.main --login EMAIL            # log in and store tokens
    python -m focaplus.main --logout                 # forget stored tokens
    python -m focaplus.main --xp 1500 --activity "Assistir Aula"
"""

import argparse
import getpass
import logging
import sys

from focaplus.api.client import ApiError
from focaplus.api.resources import AuthApi, StudySessionsApi
from focaplus.core.config import get_default_config_path, load_config
from focaplus.core.xp import calculate_xp
from focaplus.reporting.formatter import TextFormatter
from focaplus.ui.app import StudyApp, build_client, build_recorder, open_token_store


def build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="focaplus",
        description="FocaPlus study timer and XP tracker",
    )
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--total", metavar="DISCIPLINE_ID",
                       help="Print the discipline's XP total and exit")
    group.add_argument("--history", metavar="DISCIPLINE_ID",
                       help="Print the discipline's study sessions and exit")
    group.add_argument("--login", metavar="EMAIL",
                       help="Log in (prompts for the password) and store the tokens")
    group.add_argument("--logout", action="store_true",
                       help="Forget the stored login")
    group.add_argument("--xp", type=int, metavar="SECONDS",
                       help="Print the XP a session of SECONDS would earn")
    parser.add_argument("--activity", default=None,
                        help="Activity type label used with --xp")
    return parser


def _print_total(config: dict, discipline_id: str) -> int:
    store = open_token_store(config)
    try:
        recorder = build_recorder(build_client(config, store))
        total = recorder.discipline_total(discipline_id)
    finally:
        store.close()
    print(f"Total na disciplina: {total}XP")
    return 0


def _print_history(config: dict, discipline_id: str) -> int:
    store = open_token_store(config)
    try:
        records = StudySessionsApi(build_client(config, store)).get_by_discipline(discipline_id)
    finally:
        store.close()
    print(TextFormatter.format_history(records), end="")
    return 0


def _login(config: dict, email: str) -> int:
    password = getpass.getpass("Senha: ")
    store = open_token_store(config)
    try:
        tokens = AuthApi(build_client(config, None)).login(email, password)
        store.save_tokens(tokens)
    finally:
        store.close()
    print(f"Login realizado: {email}")
    return 0


def _logout(config: dict) -> int:
    store = open_token_store(config)
    try:
        store.clear()
    finally:
        store.close()
    print("Sessão encerrada.")
    return 0


def main(args: list[str] | None = None) -> int:
    """Entry point for FocaPlus.

    When *args* is ``None`` the arguments are read from ``sys.argv``.
    Returns the process exit code.
    """
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    parser = build_parser()
    parsed = parser.parse_args(args)

    if parsed.xp is not None:
        activity = parsed.activity or "Estudar Conteúdo"
        print(calculate_xp(parsed.xp, activity))
        return 0

    config_path = get_default_config_path()
    config = load_config(str(config_path))

    try:
        if parsed.total:
            return _print_total(config, parsed.total)
        if parsed.history:
            return _print_history(config, parsed.history)
        if parsed.login:
            return _login(config, parsed.login)
    except ApiError as exc:
        print(f"Erro: {exc}", file=sys.stderr)
        return 1
    if parsed.logout:
        return _logout(config)

    app = StudyApp(str(config_path))
    app.start()
    return 0


if __name__ == "__main__":
    sys.exit(main())
