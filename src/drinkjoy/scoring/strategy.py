"""
Scoring strategies.

Two scorers answer "how well does this drink match these preferences":
- `WizardScoringStrategy`: the fine-grained wizard engine (rule table + perturbation)
- `ChatScoringStrategy`: the coarse chat-side scorer used for tiered answers

They share a call shape but not their numbers. The chat scorer uses different
weights, thresholds and preference fields, so the two are kept as separate
strategies instead of being merged.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol

from drinkjoy.config.settings import Settings, get_settings
from drinkjoy.core.rng import RandomSource, default_source
from drinkjoy.domain.models import ChatPreferences, Drink, Preferences, ScoredCandidate, WeatherReading
from drinkjoy.features.popularity import PopularityMap
from drinkjoy.scoring.chat import score_for_chat
from drinkjoy.scoring.engine import score_drink
from drinkjoy.scoring.rules import build_wizard_rules


class ScoringStrategy(Protocol):
    name: str

    def score(self, drink: Drink, preferences: Any) -> ScoredCandidate | None: ...


class WizardScoringStrategy:
    name = "wizard"

    def __init__(
        self,
        *,
        weather: WeatherReading | None = None,
        popularity: PopularityMap | None = None,
        now: datetime | None = None,
        rng: RandomSource | None = None,
        settings: Settings | None = None,
    ):
        self._settings = settings or get_settings()
        self._weather = weather
        self._popularity = popularity
        self._now = now
        self._rng = default_source(rng)
        self._rules = build_wizard_rules(self._settings)

    def score(self, drink: Drink, preferences: Preferences) -> ScoredCandidate | None:
        return score_drink(
            drink,
            preferences,
            self._weather,
            self._popularity,
            now=self._now,
            rng=self._rng,
            settings=self._settings,
            rules=self._rules,
        )


class ChatScoringStrategy:
    """Chat scorer behind the common interface; allergy conflicts come back as None."""

    name = "chat"

    def __init__(self, *, settings: Settings | None = None):
        self._settings = settings or get_settings()

    def score(self, drink: Drink, preferences: ChatPreferences) -> ScoredCandidate | None:
        result = score_for_chat(drink, preferences, self._settings)
        if not result.allergy_compatible:
            return None
        return ScoredCandidate(drink=drink, score=result.score, reasons=list(result.match_reasons))
