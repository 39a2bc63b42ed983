"""
Chat preference normalization.

The conversational layer hands us loosely-worded preferences ("date night",
"peaty", "celiac"). This module maps them onto the canonical wizard values,
scores how complete they are, decides whether we know enough to recommend, and
pulls the JSON block out of an assistant reply.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from drinkjoy.domain.models import NO_ALLERGY, ChatPreferences, Preferences

logger = logging.getLogger(__name__)

CATEGORY_MAP: dict[str, str] = {
    "cocktail": "cocktail",
    "cocktails": "cocktail",
    "mixed drinks": "cocktail",
    "beer": "beer",
    "beers": "beer",
    "cider": "beer",
    "wine": "wine",
    "wines": "wine",
    "spirit": "spirit",
    "spirits": "spirit",
    "whiskey": "spirit",
    "vodka": "spirit",
    "rum": "spirit",
    "gin": "spirit",
    "tequila": "spirit",
    "mezcal": "spirit",
    "non-alcoholic": "non-alcoholic",
    "nonalcoholic": "non-alcoholic",
    "mocktail": "non-alcoholic",
    "any": "any",
    "surprise": "any",
    "featured": "featured",
}

FLAVOR_MAP: dict[str, str] = {
    "crisp": "crisp",
    "clean": "crisp",
    "refreshing": "crisp",
    "light": "crisp",
    "smokey": "smokey",
    "smoky": "smokey",
    "peaty": "smokey",
    "charred": "smokey",
    "sweet": "sweet",
    "sugary": "sweet",
    "dessert": "sweet",
    "bitter": "bitter",
    "hoppy": "bitter",
    "earthy": "bitter",
    "herbal": "bitter",
    "sour": "sour",
    "tart": "sour",
    "citrus": "sour",
    "acidic": "sour",
    "smooth": "smooth",
    "mellow": "smooth",
    "creamy": "smooth",
    "silky": "smooth",
}

STRENGTH_MAP: dict[str, str] = {
    "light": "light",
    "easy": "light",
    "easy going": "light",
    "mild": "light",
    "low alcohol": "light",
    "medium": "medium",
    "balanced": "medium",
    "moderate": "medium",
    "regular": "medium",
    "strong": "strong",
    "powerful": "strong",
    "high proof": "strong",
    "potent": "strong",
    "bring the power": "strong",
}

OCCASION_MAP: dict[str, str] = {
    "casual": "casual",
    "happy hour": "casual",
    "relaxing": "casual",
    "everyday": "casual",
    "celebration": "celebration",
    "celebrating": "celebration",
    "party": "party",
    "festive": "celebration",
    "business": "business",
    "work": "business",
    "meeting": "business",
    "professional": "business",
    "romantic": "romantic",
    "date": "romantic",
    "intimate": "romantic",
    "date night": "romantic",
    "sports": "sports",
    "game day": "sports",
    "watching": "sports",
    "game": "sports",
    "exploring": "exploring",
    "adventure": "exploring",
    "trying new": "exploring",
    "experimental": "exploring",
    "newly21": "newly21",
    "new to drinking": "newly21",
    "beginner": "newly21",
    "birthday": "birthday",
    "birthday party": "birthday",
    "special occasion": "birthday",
}

ALLERGY_MAP: dict[str, str] = {
    "none": "none",
    "no": "none",
    "nope": "none",
    "nothing": "none",
    "no allergies": "none",
    "gluten": "gluten",
    "gluten-free": "gluten",
    "celiac": "gluten",
    "coeliac": "gluten",
    "wheat": "gluten",
    "barley": "gluten",
    "dairy": "dairy",
    "lactose": "dairy",
    "milk": "dairy",
    "nuts": "nuts",
    "nut": "nuts",
    "tree nuts": "nuts",
    "tree nut": "nuts",
    "peanuts": "nuts",
    "peanut": "nuts",
    "almonds": "nuts",
    "eggs": "eggs",
    "egg": "eggs",
    "soy": "soy",
    "soybean": "soy",
    "gin": "gin",
    "vodka": "vodka",
    "whiskey": "whiskey",
    "whisky": "whiskey",
    "bourbon": "bourbon",
    "scotch": "scotch",
    "rum": "rum",
    "tequila": "tequila",
    "mezcal": "tequila",
}

CONFIDENCE_WEIGHTS: dict[str, int] = {
    "category": 30,
    "flavor": 25,
    "strength": 20,
    "occasion": 15,
    "allergies": 10,
}

READY_CONFIDENCE = 60

FOLLOW_UP_QUESTIONS: dict[str, str] = {
    "category": "What type of drink interests you most - cocktails, beer, wine, or spirits?",
    "flavor": "Do you prefer crisp and refreshing drinks, or something smoother and richer?",
    "strength": "Are you looking for something light and easy, or would you prefer something stronger?",
    "occasion": "What's the occasion - casual hangout, celebration, or something special?",
    "allergies": "Any allergies I should know about, like gluten or dairy?",
}


def _lookup(mapping: dict[str, str], value: str | None) -> str | None:
    if not value:
        return None
    return mapping.get(value.strip().lower())


def normalize_chat_preferences(chat: ChatPreferences) -> ChatPreferences:
    """Canonical chat preferences; unrecognized category, flavour, strength and occasion words are dropped.

    Allergy labels are never dropped: a label missing from `ALLERGY_MAP` is kept
    as written (lower-cased) so the allergy filter and its unknown-label policy
    decide what to do with it. The list collapses to ["none"] only when every
    entry is a none-word.
    """
    allergies: list[str] = []
    for raw in chat.allergies:
        label = raw.strip().lower()
        if label:
            canonical = ALLERGY_MAP.get(label, label)
            if canonical not in allergies:
                allergies.append(canonical)
    if NO_ALLERGY in allergies and len(allergies) > 1:
        allergies.remove(NO_ALLERGY)
    return ChatPreferences(
        category=_lookup(CATEGORY_MAP, chat.category),
        flavor=_lookup(FLAVOR_MAP, chat.flavor),
        strength=_lookup(STRENGTH_MAP, chat.strength),
        occasion=_lookup(OCCASION_MAP, chat.occasion),
        allergies=allergies,
        custom_requests=list(chat.custom_requests),
    )


def to_preferences(chat: ChatPreferences, *, use_weather: bool = True) -> Preferences:
    """Convert chat preferences into wizard `Preferences`."""
    canonical = normalize_chat_preferences(chat)
    return Preferences(
        category=canonical.category,
        flavor=canonical.flavor,
        strength=canonical.strength,
        occasion=canonical.occasion,
        allergies=canonical.allergies,
        use_weather=use_weather,
    )


def calculate_confidence(chat: ChatPreferences) -> int:
    """How complete the extracted preferences are, 0..100."""
    score = 0
    for field in ("category", "flavor", "strength", "occasion"):
        if getattr(chat, field):
            score += CONFIDENCE_WEIGHTS[field]
    if chat.allergies:
        score += CONFIDENCE_WEIGHTS["allergies"]
    return min(score, 100)


def is_ready_for_recommendations(chat: ChatPreferences, confidence: int | None = None) -> bool:
    """Need a category or a flavour, and enough overall confidence."""
    if confidence is None:
        confidence = calculate_confidence(chat)
    return bool(chat.category or chat.flavor) and confidence >= READY_CONFIDENCE


def follow_up_questions(chat: ChatPreferences) -> list[str]:
    questions: list[str] = []
    for field in ("category", "flavor", "strength", "occasion", "allergies"):
        if not getattr(chat, field):
            questions.append(FOLLOW_UP_QUESTIONS[field])
    return questions


class AssistantReply(BaseModel):
    """Structured part of an assistant turn (or the plain text when there is none)."""

    message: str
    preferences: ChatPreferences | None = None
    confidence: int = 0
    ready: bool = False
    quick_buttons: list[str] = Field(default_factory=list)


_JSON_BLOCK = re.compile(r"\{[\s\S]*(\"ready\"|\"quickButtons\"|\"message\")[\s\S]*\}")


def parse_assistant_reply(text: str) -> AssistantReply:
    """Extract the JSON block an assistant reply carries.

    Falls back to the raw text when there is no block or it is malformed.
    """
    match = _JSON_BLOCK.search(text or "")
    if match is None:
        return AssistantReply(message=(text or "").strip())

    block = match.group(0)
    try:
        data: Any = json.loads(block)
        if not isinstance(data, dict):
            raise ValueError("reply JSON is not an object")
        prefs_raw = data.get("preferences")
        preferences = ChatPreferences.model_validate(prefs_raw) if isinstance(prefs_raw, dict) else None
        buttons = data.get("quickButtons") or []
        return AssistantReply(
            message=str(data.get("message") or text.replace(block, "").strip()),
            preferences=preferences,
            confidence=int(data.get("confidence") or 0),
            ready=bool(data.get("ready") or False),
            quick_buttons=[str(b) for b in buttons] if isinstance(buttons, list) else [],
        )
    except (ValueError, TypeError, ValidationError) as exc:
        logger.warning("Could not parse assistant reply JSON: %s", exc)
        return AssistantReply(message=text.strip())
