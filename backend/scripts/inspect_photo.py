#!/usr/bin/env python3
"""
Analyze a workplace photo against a running Workplace Inspector API.

Usage data and the last 20 results are kept on this device in
~/.workplace_inspector/state.json (override with --state).

Usage:
  cd backend
  export INSPECTOR_API_URL="http://127.0.0.1:8000"
  PYTHONPATH=. python scripts/inspect_photo.py analyze photo.jpg --mode warehouse
  PYTHONPATH=. python scripts/inspect_photo.py history
  PYTHONPATH=. python scripts/inspect_photo.py show <id>
  PYTHONPATH=. python scripts/inspect_photo.py usage
  PYTHONPATH=. python scripts/inspect_photo.py clear
"""

from __future__ import annotations

import argparse
import mimetypes
import os
import sys
from datetime import datetime
from pathlib import Path

# Run from repo root or backend; ensure backend is on path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from workplace_inspector.client.api_client import INSPECTOR_API_URL, AnalysisRequestError, InspectorClient
from workplace_inspector.client.history import HistoryCache
from workplace_inspector.client.storage import DEFAULT_STATE_PATH, JsonFileStore
from workplace_inspector.client.usage import UPGRADE_MESSAGE, UsageGate, UsageLimitReached
from workplace_inspector.core.errors import InspectionInputError
from workplace_inspector.services.ai.vision.contracts import MODE_LABELS, AnalysisMode, AnalysisResult


def _print_result(result: AnalysisResult, mode: AnalysisMode) -> None:
    print(f"Mode: {MODE_LABELS[mode]}")
    print(f"Risk level: {result.risk_level.value}")
    for title, body in (
        ("What I see", result.what_i_see),
        ("What this means", result.what_this_means),
        ("Possible issues", result.possible_issues),
        ("What you can do next", result.what_you_can_do_next),
    ):
        print(f"\n{title}:\n{body or '(nothing reported)'}")
    if result.error:
        print(f"\nNote: {result.error}")


def _format_ts(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000).strftime("%Y-%m-%d %H:%M:%S")


def main() -> None:
    parser = argparse.ArgumentParser(description="Workplace safety photo analysis.")
    parser.add_argument("--state", default=str(DEFAULT_STATE_PATH), help="Local state file.")
    parser.add_argument("--api-url", default=INSPECTOR_API_URL, help="Inspector API base URL.")
    sub = parser.add_subparsers(dest="command", required=True)

    analyze = sub.add_parser("analyze", help="Analyze a photo.")
    analyze.add_argument("path", type=Path)
    analyze.add_argument("--mode", choices=[m.value for m in AnalysisMode], default=AnalysisMode.KITCHEN.value)

    sub.add_parser("history", help="List stored analyses (newest first).")
    show = sub.add_parser("show", help="Reopen a stored analysis.")
    show.add_argument("item_id")
    sub.add_parser("usage", help="Show today's free analyses.")
    sub.add_parser("clear", help="Clear stored history.")

    args = parser.parse_args()

    store = JsonFileStore(args.state)
    gate = UsageGate(store)
    history = HistoryCache(store)

    if args.command == "analyze":
        content_type = mimetypes.guess_type(args.path.name)[0] or "application/octet-stream"
        try:
            content = args.path.read_bytes()
        except OSError as exc:
            print(f"Error: cannot read {args.path}: {exc}", file=sys.stderr)
            sys.exit(1)
        with InspectorClient(gate, history, base_url=args.api_url) as client:
            try:
                outcome = client.analyze(content, content_type, args.mode, filename=args.path.name)
            except InspectionInputError as exc:
                print(exc.message, file=sys.stderr)
                sys.exit(2)
            except UsageLimitReached as exc:
                print(exc.message, file=sys.stderr)
                sys.exit(3)
            except AnalysisRequestError as exc:
                print(f"Analysis failed ({exc.status_code or 'no response'}): {exc.message}", file=sys.stderr)
                sys.exit(1)
        _print_result(outcome.result, outcome.mode)
        print(f"\nFree analyses left today: {outcome.remaining_today}/{gate.limit}")
        return

    if args.command == "history":
        items = history.list()
        if not items:
            print("No history yet.")
            return
        for item in items:
            print(f"{item.id}  {_format_ts(item.created_at)}  {item.mode.value:<9}  {item.risk_level.value}")
        return

    if args.command == "show":
        reopened = history.reopen(args.item_id)
        if reopened is None:
            print(f"No history item {args.item_id!r}.", file=sys.stderr)
            sys.exit(1)
        print(f"Analyzed at {_format_ts(reopened.created_at)}")
        _print_result(reopened.result, reopened.mode)
        return

    if args.command == "usage":
        usage = gate.load()
        print(f"Free today: {usage.count} / {gate.limit} used ({gate.remaining_today()} left)")
        if gate.is_exhausted():
            print(UPGRADE_MESSAGE)
        return

    if args.command == "clear":
        history.clear()
        print("History cleared.")


if __name__ == "__main__":
    main()
