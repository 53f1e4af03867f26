"""
Normalisation of user selections that feed dependent query keys.
"""

from typing import Optional

from marketpulse.domain.market.errors import InvalidTimeRangeError

TIME_RANGES_HOURS = (1, 6, 24, 72, 168)
NEWS_WINDOW_HOURS = 24
SYMBOL_NEWS_LIMIT = 20
INDICATOR_HISTORY_DAYS = 30
NEWS_SENTIMENTS = ("POSITIVE", "NEGATIVE", "NEUTRAL")


def normalize_symbol(symbol: Optional[str]) -> Optional[str]:
    """Upper-case and strip a ticker. Blank input means no selection."""
    if symbol is None:
        return None
    symbol = symbol.strip().upper()
    return symbol or None


def normalize_identifier(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def normalize_sentiment(sentiment: Optional[str]) -> Optional[str]:
    """Upper-case a news sentiment filter. Blank input means no filter.

    Raises:
        ValueError: If the sentiment is not one of NEWS_SENTIMENTS.
    """
    value = normalize_identifier(sentiment)
    if value is None:
        return None
    value = value.upper()
    if value not in NEWS_SENTIMENTS:
        raise ValueError(f"Unknown news sentiment: {sentiment}")
    return value


def validate_range(hours: int) -> int:
    """Return ``hours`` if it is a supported history range.

    Raises:
        InvalidTimeRangeError: If the range is not one of TIME_RANGES_HOURS.
    """
    if hours not in TIME_RANGES_HOURS:
        raise InvalidTimeRangeError(hours, TIME_RANGES_HOURS)
    return hours
