"""
Drinkjoy CLI entrypoint.

This CLI is intended for quick local demos and debugging without a UI.
It delegates all matching logic to `drinkjoy.recommender`.
"""

from __future__ import annotations

import argparse
import json
from datetime import datetime
from typing import Any

from drinkjoy.catalog.loader import load_drinks
from drinkjoy.config.settings import get_settings
from drinkjoy.core.logging import configure_logging
from drinkjoy.core.rng import PythonRandomSource
from drinkjoy.core.time import parse_at
from drinkjoy.domain.models import ChatPreferences, MatchRequest, Preferences, RecommendationResult
from drinkjoy.features.happy_hour import happy_hour_status
from drinkjoy.ingestion.chat_preferences import calculate_confidence, normalize_chat_preferences
from drinkjoy.recommender.chat import assemble_chat_matches
from drinkjoy.recommender.recommend import recommend, recommend_more
from drinkjoy.scoring.explain import chat_line, match_message, one_line_summary


def _preferences_from_args(args: argparse.Namespace) -> Preferences:
    return Preferences(
        category=args.category,
        flavor=args.flavor,
        strength=args.strength,
        occasion=args.occasion,
        temperature=args.temperature,
        adventure=args.adventure,
        allergies=args.allergy or [],
        use_weather=bool(args.use_weather),
    )


def _request_from_args(args: argparse.Namespace) -> MatchRequest:
    return MatchRequest(
        preferences=_preferences_from_args(args),
        max_results=int(args.max_results) if args.max_results is not None else None,
        exclude_ids=args.exclude or [],
        city=args.city,
        lat=args.lat,
        lon=args.lon,
    )


def _run_kwargs(args: argparse.Namespace) -> dict[str, Any]:
    settings = get_settings()
    kwargs: dict[str, Any] = {"settings": settings}
    if args.seed is not None:
        kwargs["rng"] = PythonRandomSource(int(args.seed))
    if args.at:
        kwargs["now"] = parse_at(args.at, settings.app.timezone)
    return kwargs


def _print_result(result: RecommendationResult, *, as_json: bool, now: datetime | None = None) -> None:
    if as_json:
        print(json.dumps(result.model_dump(mode="json", by_alias=True), ensure_ascii=False, indent=2))
        return

    settings = get_settings()
    print(f"Generated at: {result.generated_at.isoformat()}")
    happy = result.meta.get("happy_hour") or {}
    if happy.get("active"):
        print(f"Happy hour is on ({happy.get('window')})")
    for w in result.meta.get("warnings") or []:
        print(f"! {w.get('message')}")
    print("Top results:" if result.results else "No matching drinks.")
    for i, item in enumerate(result.results, start=1):
        print(f"{i:>2}. {one_line_summary(item)}")
        badge = happy_hour_status(item.drink, now or result.generated_at, settings)
        extra = f"  [{badge}]" if badge else ""
        print(f"    {match_message(item.score)}{extra}")
    return None


def _cmd_recommend(args: argparse.Namespace) -> int:
    """Handle the `recommend` subcommand."""
    kwargs = _run_kwargs(args)
    result = recommend(_request_from_args(args), **kwargs)
    _print_result(result, as_json=bool(args.json), now=kwargs.get("now"))
    return 0


def _cmd_more(args: argparse.Namespace) -> int:
    """Handle the `more` subcommand (supplementary results)."""
    kwargs = _run_kwargs(args)
    result = recommend_more(_request_from_args(args), all_categories=bool(args.all_categories), **kwargs)
    _print_result(result, as_json=bool(args.json), now=kwargs.get("now"))
    return 0


def _cmd_chat_match(args: argparse.Namespace) -> int:
    """Handle the `chat-match` subcommand (chat-side tiers)."""
    settings = get_settings()
    raw = ChatPreferences(
        category=args.category,
        flavor=args.flavor,
        strength=args.strength,
        occasion=args.occasion,
        allergies=args.allergy or [],
    )
    chat = normalize_chat_preferences(raw)
    matches = assemble_chat_matches(chat, load_drinks(settings.catalog.path), settings=settings)

    if args.json:
        payload = {
            "preferences": chat.model_dump(mode="json"),
            "confidence": calculate_confidence(chat),
            "matches": [m.model_dump(mode="json") for m in matches],
        }
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return 0

    print(f"Confidence: {calculate_confidence(chat)}")
    if not matches:
        print("No matching drinks.")
    for m in matches:
        print(chat_line(m))
    return 0


def _add_preference_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--category", type=str, default=None, help="cocktail|beer|wine|spirit|non-alcoholic|any|featured")
    p.add_argument("--flavor", type=str, default=None)
    p.add_argument("--strength", type=str, default=None, help="light|medium|strong")
    p.add_argument("--occasion", type=str, default=None)
    p.add_argument("--allergy", action="append", default=[], help="Repeatable, e.g. --allergy gluten")


def _add_run_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--temperature", type=str, default=None, help="cold|cool|room|warm")
    p.add_argument("--adventure", type=str, default=None, help="classic|bold|fruity|simple")
    p.add_argument("--use-weather", action="store_true", help="Score against current weather (needs a location)")
    p.add_argument("--city", type=str, default=None)
    p.add_argument("--lat", type=float, default=None)
    p.add_argument("--lon", type=float, default=None)
    p.add_argument("--max-results", type=int, default=None)
    p.add_argument("--exclude", action="append", default=[], help="Drink id to skip (repeatable)")
    p.add_argument("--seed", type=int, default=None, help="Seed the random source for reproducible output")
    p.add_argument("--at", type=str, default=None, help="Evaluate at this time: ISO datetime or HH:MM today (happy hour)")
    p.add_argument("--json", action="store_true", help="Output machine-readable JSON")


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the Drinkjoy CLI."""
    parser = argparse.ArgumentParser(prog="drinkjoy")
    parser.add_argument("--log-level", type=str, default=None, help="Override the configured log level")
    sub = parser.add_subparsers(dest="command", required=True)

    rec = sub.add_parser("recommend", help="Ranked drink recommendations for a set of preferences.")
    _add_preference_args(rec)
    _add_run_args(rec)
    rec.set_defaults(func=_cmd_recommend)

    more = sub.add_parser("more", help="More options beyond drinks already shown.")
    _add_preference_args(more)
    _add_run_args(more)
    more.add_argument("--all-categories", action="store_true", help="Open the category filter")
    more.set_defaults(func=_cmd_more)

    chat = sub.add_parser("chat-match", help="Chat-side tiered matches for loosely worded preferences.")
    _add_preference_args(chat)
    chat.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    chat.set_defaults(func=_cmd_chat_match)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m drinkjoy.cli`."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    func: Any = getattr(args, "func")
    return int(func(args))


if __name__ == "__main__":
    raise SystemExit(main())
