"""
Trading-performance analytics engine.

Pure functions over an in-memory list of trade dicts.
"""

from .trade_filter import (
    filter_closed,
    filter_open,
    filter_by_date_range,
    filter_by_period,
    filter_trades,
    search_trades,
)
from .metrics_calculator import calculate_metrics, sharpe_ratio
from .drawdown import analyze_drawdown, build_drawdown_series, drawdown_statistics, max_drawdown
from .grouping import (
    group_by,
    strategy_breakdown,
    instrument_breakdown,
    hourly_breakdown,
    day_of_week_breakdown,
    monthly_breakdown,
    pnl_distribution,
)
from .cumulative import (
    CumulativePolicy,
    build_daily_series,
    build_cumulative_series,
    cumulative_pnl_series,
)

__all__ = [
    'filter_closed',
    'filter_open',
    'filter_by_date_range',
    'filter_by_period',
    'filter_trades',
    'search_trades',
    'calculate_metrics',
    'sharpe_ratio',
    'analyze_drawdown',
    'build_drawdown_series',
    'drawdown_statistics',
    'max_drawdown',
    'group_by',
    'strategy_breakdown',
    'instrument_breakdown',
    'hourly_breakdown',
    'day_of_week_breakdown',
    'monthly_breakdown',
    'pnl_distribution',
    'CumulativePolicy',
    'build_daily_series',
    'build_cumulative_series',
    'cumulative_pnl_series',
]
