"""
Small explainability formatting helpers.

Used by the CLI to print compact summaries of recommendation results.
"""

from __future__ import annotations

from drinkjoy.domain.models import ChatMatch, ScoredCandidate


def match_message(score: int) -> str:
    """Headline for a wizard score."""
    if score >= 80:
        return "Perfect Match!"
    if score >= 60:
        return "Great Match!"
    if score >= 40:
        return "Good Match!"
    return "Worth a Try!"


def one_line_summary(candidate: ScoredCandidate) -> str:
    """Render a compact single-line summary for a scored drink."""
    parts = [f"{candidate.score:>3}", candidate.drink.name, f"({candidate.drink.category})"]
    if candidate.reasons:
        parts.append("| " + "; ".join(candidate.reasons))
    return " ".join(parts)


def chat_line(match: ChatMatch) -> str:
    reasons = ", ".join(match.match_reasons) or "-"
    return f"[{match.match_quality}] {match.score:>3} {match.drink.name} ({match.drink.category}) {reasons}"
