"""
Cumulative Series Builder
Day-bucketed and running-cumulative realized P&L for charting.
"""

import logging
import math
from enum import Enum
from typing import Iterable, List, Mapping, Union

import pandas as pd

from analytics.fields import settlement_date, trade_pnl
from analytics.trade_filter import filter_closed
from shared.types import CumulativePoint, DailyPoint

logger = logging.getLogger(__name__)


class CumulativePolicy(str, Enum):
    """Which dates a cumulative series keeps."""
    # every date with closed trades, including net-zero days (balance curve)
    ALL_DATES = "all_dates"
    # only dates whose net P&L is non-zero (candle-style charts)
    TRADING_DAYS_ONLY = "trading_days_only"


def build_daily_series(trades: Iterable[Mapping]) -> List[DailyPoint]:
    """
    Net P&L per calendar date over closed trades.

    Trades are dated by exit date, falling back to their creation
    timestamp; trades with neither are skipped.

    Returns:
        ``[{date, daily_pnl}]`` sorted ascending by ISO date
    """
    rows = []
    for trade in filter_closed(trades):
        d = settlement_date(trade)
        if d is None:
            logger.debug("Trade %s has no exit/created date; excluded from daily series", trade.get('id'))
            continue
        rows.append((d.isoformat(), trade_pnl(trade)))

    if not rows:
        return []

    df = pd.DataFrame(rows, columns=['date', 'daily_pnl'])
    daily = df.groupby('date', sort=True)['daily_pnl'].sum()
    return [{'date': d, 'daily_pnl': float(pnl)} for d, pnl in daily.items()]


def build_cumulative_series(
    daily_series: Iterable[DailyPoint],
    policy: Union[CumulativePolicy, str] = CumulativePolicy.ALL_DATES,
) -> List[CumulativePoint]:
    """
    Running cumulative P&L over a daily series.

    Args:
        daily_series: Output of :func:`build_daily_series` (ascending dates)
        policy: ``ALL_DATES`` keeps net-zero days; ``TRADING_DAYS_ONLY``
            drops them

    Returns:
        ``[{date, daily_pnl, cumulative_pnl}]``; the last cumulative value
        is the correctly rounded (``math.fsum``) total of the emitted
        ``daily_pnl`` values
    """
    policy = CumulativePolicy(policy)
    emitted: List[float] = []
    series: List[CumulativePoint] = []

    for point in daily_series:
        daily_pnl = point['daily_pnl']
        if policy is CumulativePolicy.TRADING_DAYS_ONLY and daily_pnl == 0:
            continue
        emitted.append(daily_pnl)
        cumulative = math.fsum(emitted)
        series.append({
            'date': point['date'],
            'daily_pnl': daily_pnl,
            'cumulative_pnl': cumulative,
        })

    return series


def cumulative_pnl_series(
    trades: Iterable[Mapping],
    policy: Union[CumulativePolicy, str] = CumulativePolicy.ALL_DATES,
) -> List[CumulativePoint]:
    """Daily then cumulative series straight from a trade collection."""
    return build_cumulative_series(build_daily_series(trades), policy)
