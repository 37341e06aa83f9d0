from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from .auth import authorize_interactive, session_from_token
from .cache_flow import analyze_industry, analyze_role
from .config import STATE_KEY_CLIENT_ID
from .environment import assert_runtime_compatibility
from .errors import AuthRequired, PredictionFailure
from .export import predictions_frame, predictions_to_csv
from .models import CacheStatus, FlowResult, JobInput
from .predictor import PredictionRequestor
from .runtime import LocalState, load_settings
from .sheets import SheetSession, SheetsClient


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
DEFAULT_BULK_INDUSTRY = "Technology"

CACHE_STATUS_MESSAGES = {
    CacheStatus.HIT: "Loaded from Google Sheet",
    CacheStatus.REFRESHED: "Data was outdated. Refreshed from AI & updated Sheet.",
}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="futurework",
        description="Predict when a job role is likely to be automated, cached in a Google Sheet.",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--no-cache", action="store_true", help="Skip the Google Sheet cache")
    parser.add_argument(
        "--authorize",
        action="store_true",
        help="Run the browser consent flow instead of reading FUTUREWORK_SHEETS_TOKEN",
    )
    parser.add_argument("--client-id", default=None, help="Google OAuth client ID (saved locally)")
    parser.add_argument("--csv", type=Path, default=None, help="Write results to this CSV file")

    sub = parser.add_subparsers(dest="command", required=True)

    analyze = sub.add_parser("analyze", help="Assess a single industry/country/role")
    analyze.add_argument("--industry", required=True)
    analyze.add_argument("--country", required=True)
    analyze.add_argument("--role", required=True)

    bulk = sub.add_parser("bulk", help="Top five at-risk roles in an industry")
    bulk.add_argument("--industry", default="")
    return parser


def _resolve_session(args: argparse.Namespace, state: LocalState, client_secret: str | None) -> SheetSession | None:
    if args.no_cache:
        return None
    if args.client_id:
        state.set(STATE_KEY_CLIENT_ID, args.client_id)
    if args.authorize:
        client_id = state.get(STATE_KEY_CLIENT_ID)
        if not client_id:
            raise AuthRequired("No Google OAuth client ID configured. Pass --client-id once.")
        return authorize_interactive(client_id, client_secret)
    return session_from_token(os.getenv("FUTUREWORK_SHEETS_TOKEN"))


def _print_result(result: FlowResult) -> None:
    message = CACHE_STATUS_MESSAGES.get(result.cache_status)
    if message:
        print(f"[{message}]")
    if not result.predictions:
        print("No predictions returned.")
        return
    print(predictions_frame(result.predictions).to_string(index=False))


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format=LOG_FORMAT)
    settings = load_settings()
    try:
        assert_runtime_compatibility(settings)
    except RuntimeError as exc:
        print(exc, file=sys.stderr)
        return 2

    state = LocalState(settings.state_path)
    client = SheetsClient(state, settings)
    requestor = PredictionRequestor(settings)

    try:
        session = _resolve_session(args, state, settings.oauth_client_secret)
    except AuthRequired as exc:
        print(f"Sheets not connected: {exc}", file=sys.stderr)
        session = None

    try:
        if args.command == "analyze":
            job_input = JobInput(industry=args.industry, country=args.country, role=args.role)
            result = analyze_role(job_input, requestor, client, session)
        else:
            industry = args.industry.strip() or DEFAULT_BULK_INDUSTRY
            result = analyze_industry(industry, requestor, client, session)
    except PredictionFailure as exc:
        print(str(exc), file=sys.stderr)
        return 1

    _print_result(result)

    if args.csv is not None and result.predictions:
        args.csv.parent.mkdir(parents=True, exist_ok=True)
        args.csv.write_text(predictions_to_csv(result.predictions), encoding="utf-8")
        print(f"\nWrote {len(result.predictions)} row(s) to {args.csv}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
