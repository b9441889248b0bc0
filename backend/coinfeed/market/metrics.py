"""Trend classification derived from a (current, previous) price pair."""

from __future__ import annotations

UP = "up"
DOWN = "down"
FLAT = "flat"

# Presentation tokens; colors are up to the consuming view
TREND_CLASSES: dict[str, str] = {
    UP: "positive",
    DOWN: "negative",
    FLAT: "neutral",
}

TREND_ARROWS: dict[str, str] = {
    UP: "↑",
    DOWN: "↓",
    FLAT: "→",
}


def trend_symbol(current: float, previous: float | None) -> str:
    """'up', 'down', or 'flat'. No previous sample yet counts as flat."""
    if previous is None:
        return FLAT
    if current > previous:
        return UP
    elif current < previous:
        return DOWN
    return FLAT


def trend_class(current: float, previous: float | None) -> str:
    """'positive', 'negative', or 'neutral'."""
    return TREND_CLASSES[trend_symbol(current, previous)]


def trend_arrow(current: float, previous: float | None) -> str:
    return TREND_ARROWS[trend_symbol(current, previous)]


def change_class(change_percent: float) -> str:
    """Token for a 24h percentage change. Zero is shown as positive."""
    return TREND_CLASSES[UP] if change_percent >= 0 else TREND_CLASSES[DOWN]
