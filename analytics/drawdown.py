"""
Drawdown Engine
Running balance, peak and drawdown series over closed trades, plus
drawdown-period statistics derived from that series.
"""

import logging
import math
from typing import Iterable, List, Mapping, Optional, Tuple

from analytics.fields import entry_date, instrument_label, trade_pnl
from analytics.trade_filter import filter_closed
from shared.types import DrawdownAnalysis, DrawdownPoint, DrawdownStats

logger = logging.getLogger(__name__)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def chronological_closed_trades(trades: Iterable[Mapping]) -> List[Tuple]:
    """
    Closed trades with a usable entry date as ``(date, trade)`` pairs,
    sorted ascending by entry date.  Python's sort is stable, so trades on
    the same date keep their original order.
    """
    dated = []
    for trade in filter_closed(trades):
        d = entry_date(trade)
        if d is None:
            logger.debug("Trade %s has no usable entry_date; excluded from drawdown", trade.get('id'))
            continue
        dated.append((d, trade))
    dated.sort(key=lambda pair: pair[0])
    return dated


def build_drawdown_series(trades: Iterable[Mapping]) -> List[DrawdownPoint]:
    """
    Walk closed trades in entry-date order, tracking the running total
    and its high-water mark (which starts at 0).

    Args:
        trades: Trade collection (filtered to closed trades internally)

    Returns:
        One point per trade; empty list for no closed trades
    """
    running_total = 0.0
    peak = 0.0
    series: List[DrawdownPoint] = []

    for index, (d, trade) in enumerate(chronological_closed_trades(trades), 1):
        pnl = trade_pnl(trade)
        running_total += pnl
        peak = max(peak, running_total)
        drawdown = peak - running_total
        drawdown_percent = (drawdown / peak * 100) if peak > 0 else 0.0

        series.append({
            'date': d.isoformat(),
            'running_total': running_total,
            'peak': peak,
            'drawdown': drawdown,
            'drawdown_percent': drawdown_percent,
            'trade_index': index,
            'trade_pnl': pnl,
            'instrument': instrument_label(trade),
        })

    return series


def max_drawdown(series: List[DrawdownPoint]) -> Tuple[float, Optional[str]]:
    """
    Largest drawdown in *series* and the date it was first reached.

    Returns:
        ``(0.0, None)`` when the series never drops below its peak
    """
    worst = 0.0
    worst_date = None
    for point in series:
        # strict comparison: the first occurrence wins on ties
        if point['drawdown'] > worst:
            worst = point['drawdown']
            worst_date = point['date']
    return worst, worst_date


def drawdown_statistics(series: List[DrawdownPoint]) -> DrawdownStats:
    """
    Drawdown-period statistics.

    A period starts on the first point with drawdown > 0 after a point at 0
    (or at the start of the series) and ends when drawdown returns to 0.
    Lengths are measured in trades.  A period still open at the end of the
    series counts as a period and toward the longest length.
    """
    periods: List[int] = []
    current_length = 0
    recoveries = 0
    points_in_drawdown = 0

    for point in series:
        if point['drawdown'] > 0:
            points_in_drawdown += 1
            current_length += 1
        else:
            if current_length > 0:
                periods.append(current_length)
                recoveries += 1
            current_length = 0

    if current_length > 0:
        periods.append(current_length)

    total_points = len(series)
    return {
        'longest_drawdown': max(periods) if periods else 0,
        'avg_drawdown_length': _round_half_up(points_in_drawdown / len(periods)) if periods else 0,
        'recovery_trades': recoveries,
        'time_in_drawdown': round(points_in_drawdown / total_points * 100, 2) if total_points else 0.0,
        'drawdown_periods': len(periods),
        'current_drawdown': round(series[-1]['drawdown'], 2) if series else 0.0,
    }


def analyze_drawdown(trades: Iterable[Mapping]) -> DrawdownAnalysis:
    """
    Full drawdown analysis: the series, its maximum and period statistics.

    Args:
        trades: Trade collection

    Returns:
        Dictionary with ``series`` plus summary statistics
    """
    series = build_drawdown_series(trades)
    worst, worst_date = max_drawdown(series)
    worst_percent = max((p['drawdown_percent'] for p in series), default=0.0)

    analysis: DrawdownAnalysis = {
        'series': series,
        'max_drawdown': round(worst, 2),
        'max_drawdown_date': worst_date,
        'max_drawdown_percent': round(worst_percent, 2),
        **drawdown_statistics(series),
    }
    return analysis
