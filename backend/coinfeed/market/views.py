"""Payload builders for the list view, detail view and chart."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from .formatting import format_decimal, format_magnitude, format_percent, format_timestamp
from .metrics import change_class, trend_arrow, trend_class, trend_symbol
from .models import HistoryPoint, Instrument, Timeframe

TIMEFRAME_LABELS: dict[Timeframe, str] = {tf: tf.value.upper() for tf in Timeframe}


def list_row(instrument: Instrument) -> dict:
    """One row of the coin table."""
    return {
        "symbol": instrument.symbol,
        "name": instrument.name,
        "price": f"${format_decimal(instrument.price)}",
        "trend": trend_symbol(instrument.price, instrument.previous_price),
        "trend_arrow": trend_arrow(instrument.price, instrument.previous_price),
        "trend_class": trend_class(instrument.price, instrument.previous_price),
        "change_24h": format_percent(instrument.change_24h),
        "change_class": change_class(instrument.change_24h),
        "market_cap": format_magnitude(instrument.market_cap),
        "volume_24h": format_magnitude(instrument.volume_24h),
    }


def list_rows(instruments: Iterable[Instrument]) -> list[dict]:
    return [list_row(instrument) for instrument in instruments]


def chart_data(series: Sequence[HistoryPoint], tz=None) -> dict:
    """Chart input: time labels plus a price dataset and a volume dataset.

    The volume dataset is meant for a secondary y-axis.
    """
    return {
        "labels": [format_timestamp(point.timestamp, tz=tz) for point in series],
        "datasets": [
            {
                "label": "Price (USD)",
                "axis": "price",
                "data": [point.price for point in series],
            },
            {
                "label": "Volume",
                "axis": "volume",
                "data": [point.volume for point in series],
            },
        ],
    }


def detail_payload(
    instrument: Instrument,
    series: Sequence[HistoryPoint] = (),
    timeframe: Timeframe = Timeframe.ONE_MINUTE,
    loading: bool = False,
    tz=None,
) -> dict:
    return {
        "status": "ok",
        "title": f"{instrument.name} ({instrument.symbol})",
        "symbol": instrument.symbol,
        "price": f"${format_decimal(instrument.price)}",
        "change_24h": format_percent(instrument.change_24h),
        "change_class": change_class(instrument.change_24h),
        "trend": trend_symbol(instrument.price, instrument.previous_price),
        "description": instrument.description,
        "stats": {
            "market_cap": f"${format_magnitude(instrument.market_cap)}",
            "volume_24h": f"${format_magnitude(instrument.volume_24h)}",
            "circulating_supply": f"{format_magnitude(instrument.circulating_supply)} {instrument.symbol}",
        },
        "timeframe": timeframe.value,
        "timeframes": [{"value": tf.value, "label": label} for tf, label in TIMEFRAME_LABELS.items()],
        # Only show a loading state before the first series arrives
        "loading": loading and not series,
        "chart": chart_data(series, tz=tz),
    }


def not_found_payload(symbol: str | None) -> dict:
    return {"status": "not_found", "symbol": symbol, "message": "Coin not found"}


def integrity_error_payload(symbol: str, error: Exception | None) -> dict:
    message = "Price history unavailable"
    if error is not None:
        message = f"{message}: {error}"
    return {"status": "integrity_error", "symbol": symbol, "message": message}
