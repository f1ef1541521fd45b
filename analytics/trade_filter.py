"""
Trade Filter
Selects the subset of trades relevant to a computation.

All functions return new lists in the original (stable) order and never
modify the input.  Trades with missing or malformed dates are dropped from
ranged queries rather than raising.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Any, Iterable, List, Mapping, Optional

from analytics.fields import (
    entry_date,
    instrument_label,
    is_closed,
    is_missing,
    is_open,
    parse_date,
    strategy_label,
    trade_pnl,
)
from shared.constants import (
    FILTER_ALL,
    OUTCOME_LOSING,
    OUTCOME_WINNING,
    PERIOD_DAYS,
)

logger = logging.getLogger(__name__)


def filter_closed(trades: Iterable[Mapping]) -> List[Mapping]:
    """Return trades whose status is ``closed``."""
    return [t for t in trades if is_closed(t)]


def filter_open(trades: Iterable[Mapping]) -> List[Mapping]:
    """Return trades whose status is ``open``."""
    return [t for t in trades if is_open(t)]


def filter_by_date_range(
    trades: Iterable[Mapping],
    start: Any = None,
    end: Any = None,
) -> List[Mapping]:
    """
    Return trades whose entry date falls in ``[start, end]`` (inclusive).

    Args:
        trades: Trade collection
        start: Lower bound (date, datetime or ISO string); None for open-ended.
            The string ``"all"`` disables filtering entirely.
        end: Upper bound; None for open-ended.

    Returns:
        Matching trades in their original order
    """
    if isinstance(start, str) and start == FILTER_ALL:
        return list(trades)

    start_date = parse_date(start) if start is not None else None
    end_date = parse_date(end) if end is not None else None
    if start_date is None and end_date is None:
        return list(trades)

    selected = []
    for trade in trades:
        d = entry_date(trade)
        if d is None:
            continue
        if start_date is not None and d < start_date:
            continue
        if end_date is not None and d > end_date:
            continue
        selected.append(trade)
    return selected


def period_start(period: str, now: Optional[datetime] = None) -> Optional[date]:
    """First date included by a lookback *period* such as ``"30d"``; None for all."""
    days = PERIOD_DAYS.get(period)
    if days is None:
        return None
    now = now or datetime.now()
    return (now - timedelta(days=days)).date()


def filter_by_period(
    trades: Iterable[Mapping],
    period: str = FILTER_ALL,
    now: Optional[datetime] = None,
) -> List[Mapping]:
    """
    Keep trades entered within the lookback *period*.

    ``"all"`` and unrecognised periods return every trade.
    """
    start = period_start(period, now)
    if start is None:
        if period != FILTER_ALL:
            logger.debug("Unknown period %r, not filtering", period)
        return list(trades)
    return filter_by_date_range(trades, start=start)


def _matches_outcome(trade: Mapping, outcome: str) -> bool:
    if outcome == OUTCOME_WINNING:
        return trade_pnl(trade) > 0
    if outcome == OUTCOME_LOSING:
        return trade_pnl(trade) < 0
    return True


def filter_trades(
    trades: Iterable[Mapping],
    instrument: str = FILTER_ALL,
    strategy: str = FILTER_ALL,
    outcome: str = FILTER_ALL,
    date_range: str = FILTER_ALL,
    now: Optional[datetime] = None,
) -> List[Mapping]:
    """
    Apply the journal filter bar: instrument, strategy, outcome and period.

    Instrument and strategy are exact, case-sensitive label matches
    (unset fields compare as their sentinel labels).
    """
    selected = filter_by_period(trades, date_range, now=now)
    if instrument != FILTER_ALL:
        selected = [t for t in selected if instrument_label(t) == instrument]
    if strategy != FILTER_ALL:
        selected = [t for t in selected if strategy_label(t) == strategy]
    if outcome != FILTER_ALL:
        selected = [t for t in selected if _matches_outcome(t, outcome)]
    return selected


def search_trades(trades: Iterable[Mapping], term: Optional[str]) -> List[Mapping]:
    """Case-insensitive substring search over instrument, strategy, notes and tags."""
    if not term:
        return list(trades)

    needle = term.lower()
    matches = []
    for trade in trades:
        haystack = [trade.get('instrument'), trade.get('strategy'), trade.get('notes')]
        tags = trade.get('tags')
        if isinstance(tags, (list, tuple)):
            haystack.extend(tags)
        if any(not is_missing(v) and needle in str(v).lower() for v in haystack):
            matches.append(trade)
    return matches
