"""Display formatting for prices, magnitudes and chart labels."""

from __future__ import annotations

from datetime import datetime

# Largest first; the first threshold the value reaches wins
MAGNITUDE_SUFFIXES: tuple[tuple[float, str], ...] = (
    (1e12, "T"),
    (1e9, "B"),
    (1e6, "M"),
)


def format_decimal(value: float) -> str:
    """Two fractional digits with comma thousands separators: 1234.5 -> '1,234.50'."""
    return f"{value:,.2f}"


def format_magnitude(value: float) -> str:
    """Abbreviate large values: 2.5e12 -> '2.50T', 3.2e9 -> '3.20B'.

    Values below 1e6, including all negatives, fall back to format_decimal.
    """
    for threshold, suffix in MAGNITUDE_SUFFIXES:
        if value >= threshold:
            return f"{value / threshold:.2f}{suffix}"
    return format_decimal(value)


def format_percent(value: float) -> str:
    """Signed percentage: 2.5 -> '+2.50%', -1 -> '-1.00%', 0 -> '0.00%'."""
    sign = "+" if value > 0 else ""
    return f"{sign}{format_decimal(value)}%"


def format_timestamp(timestamp_ms: int, tz=None) -> str:
    """24-hour HH:MM:SS label for an epoch-milliseconds timestamp.

    Uses local time unless a tzinfo is given.
    """
    return datetime.fromtimestamp(timestamp_ms / 1000.0, tz=tz).strftime("%H:%M:%S")
