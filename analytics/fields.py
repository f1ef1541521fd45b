"""
Tolerant readers for trade fields.

Every analytics function reads trades through these helpers so that
missing or malformed values degrade to neutral defaults (0 P&L, excluded
dates, sentinel labels) instead of raising.
"""

import logging
import math
from datetime import date, datetime, time
from typing import Any, Mapping, Optional

import pandas as pd

from shared.constants import (
    HOURS_IN_DAY,
    NO_STRATEGY_LABEL,
    STATUS_CLOSED,
    STATUS_OPEN,
    UNKNOWN_INSTRUMENT_LABEL,
)

logger = logging.getLogger(__name__)


def is_missing(value: Any) -> bool:
    """True for None, NaN (as produced by pandas for empty CSV cells) and ''."""
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str) and value == '':
        return True
    return False


def to_float(value: Any, default: float = 0.0) -> float:
    """Coerce *value* to a finite float, or return *default*."""
    if is_missing(value):
        return default
    try:
        result = float(value)
    except (TypeError, ValueError):
        logger.debug("Non-numeric value %r treated as %s", value, default)
        return default
    if not math.isfinite(result):
        return default
    return result


def parse_date(value: Any) -> Optional[date]:
    """Parse a date-like value into a ``datetime.date``.

    Accepts ``date``, ``datetime``/``pd.Timestamp`` and ISO-8601 strings.
    Returns None for anything missing or unparsable.
    """
    if is_missing(value):
        return None
    if isinstance(value, datetime):
        if pd.isna(value):
            return None
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    try:
        parsed = pd.to_datetime(value.strip(), errors='coerce')
    except (ValueError, TypeError, OverflowError):
        parsed = None
    if parsed is None or pd.isna(parsed):
        logger.debug("Unparsable date %r excluded", value)
        return None
    return parsed.date()


def trade_status(trade: Mapping) -> str:
    return str(trade.get('status') or '').lower()


def is_closed(trade: Mapping) -> bool:
    return trade_status(trade) == STATUS_CLOSED


def is_open(trade: Mapping) -> bool:
    return trade_status(trade) == STATUS_OPEN


def trade_pnl(trade: Mapping) -> float:
    """Realized P&L of a trade; 0 when absent or malformed."""
    return to_float(trade.get('pnl'))


def entry_date(trade: Mapping) -> Optional[date]:
    return parse_date(trade.get('entry_date'))


def exit_date(trade: Mapping) -> Optional[date]:
    return parse_date(trade.get('exit_date'))


def settlement_date(trade: Mapping) -> Optional[date]:
    """Exit date, falling back to the creation timestamp."""
    return exit_date(trade) or parse_date(trade.get('created_at'))


def entry_hour(trade: Mapping) -> Optional[int]:
    """Hour component (0-23) of ``entry_time``, or None."""
    value = trade.get('entry_time')
    if isinstance(value, (time, datetime)):
        return value.hour
    if is_missing(value) or not isinstance(value, str):
        return None
    try:
        hour = int(value.strip().split(':')[0])
    except ValueError:
        return None
    if 0 <= hour < HOURS_IN_DAY:
        return hour
    return None


def strategy_label(trade: Mapping) -> str:
    value = trade.get('strategy')
    return NO_STRATEGY_LABEL if is_missing(value) else str(value)


def instrument_label(trade: Mapping) -> str:
    value = trade.get('instrument')
    return UNKNOWN_INSTRUMENT_LABEL if is_missing(value) else str(value)


def notional(trade: Mapping) -> float:
    """entry_price x quantity; 0 when either is missing."""
    return to_float(trade.get('entry_price')) * to_float(trade.get('quantity'))
