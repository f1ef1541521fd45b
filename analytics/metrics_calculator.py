"""
Metrics Calculator
Aggregate performance statistics over closed trades.
"""

import logging
import math
from typing import Iterable, List, Mapping

import numpy as np
import pandas as pd

from analytics.drawdown import build_drawdown_series, max_drawdown
from analytics.fields import entry_date, exit_date, notional, trade_pnl
from analytics.trade_filter import filter_closed
from shared.constants import (
    SHARPE_FIRST_TRADE,
    SHARPE_NORMALIZATIONS,
    SHARPE_PER_TRADE,
)
from shared.types import MetricsResult

logger = logging.getLogger(__name__)


def empty_metrics() -> MetricsResult:
    """Metrics record for an empty (or all-open) trade set."""
    return {
        'total_trades': 0,
        'winning_trades': 0,
        'losing_trades': 0,
        'win_rate': 0,
        'total_pnl': 0,
        'avg_win': 0,
        'avg_loss': 0,
        'profit_factor': 0,
        'max_drawdown': 0,
        'largest_win': 0,
        'largest_loss': 0,
        'expectancy': 0,
        'sharpe_ratio': 0,
        'avg_hold_days': 0,
    }


def trade_returns(closed_trades: List[Mapping], normalization: str = SHARPE_PER_TRADE) -> List[float]:
    """
    Percentage return of each closed trade.

    ``per_trade`` divides each trade's P&L by its own entry notional and
    skips trades without one.  ``first_trade`` divides every P&L by the
    first trade's notional, matching the journal's historical figures.
    """
    if normalization not in SHARPE_NORMALIZATIONS:
        raise ValueError(
            f"Unknown sharpe normalization {normalization!r}; "
            f"expected one of {SHARPE_NORMALIZATIONS}"
        )
    if not closed_trades:
        return []

    if normalization == SHARPE_FIRST_TRADE:
        base = notional(closed_trades[0])
        if base <= 0:
            return []
        return [trade_pnl(t) / base * 100 for t in closed_trades]

    returns = []
    for trade in closed_trades:
        n = notional(trade)
        if n > 0:
            returns.append(trade_pnl(trade) / n * 100)
    return returns


def sharpe_ratio(closed_trades: List[Mapping], normalization: str = SHARPE_PER_TRADE) -> float:
    """
    Per-trade Sharpe ratio (zero risk-free rate, population std).

    Returns:
        mean(returns) / std(returns), or 0 when undefined
    """
    returns = np.asarray(trade_returns(closed_trades, normalization), dtype=float)
    if returns.size == 0:
        return 0.0
    std = float(np.std(returns))
    if np.isclose(std, 0.0):
        return 0.0
    return float(np.mean(returns)) / std


def average_hold_days(closed_trades: List[Mapping]) -> float:
    """Mean calendar days between entry and exit, over trades with both dates."""
    holds = []
    for trade in closed_trades:
        start, end = entry_date(trade), exit_date(trade)
        if start is not None and end is not None:
            holds.append((end - start).days)
    return float(np.mean(holds)) if holds else 0.0


def calculate_metrics(
    trades: Iterable[Mapping],
    sharpe_normalization: str = SHARPE_PER_TRADE,
) -> MetricsResult:
    """
    Calculate trading statistics over the closed trades in *trades*.

    Args:
        trades: Trade collection (open trades are ignored)
        sharpe_normalization: 'per_trade' or 'first_trade'

    Returns:
        Fixed-shape metrics dictionary, values rounded to 2 decimals
    """
    closed = filter_closed(trades)
    if not closed:
        # still reject a bad policy name even with nothing to compute
        trade_returns([], sharpe_normalization)
        return empty_metrics()

    pnls = pd.Series([trade_pnl(t) for t in closed], dtype=float)
    wins = pnls[pnls > 0]
    losses = pnls[pnls < 0]

    total_trades = len(pnls)
    win_count = len(wins)
    loss_count = len(losses)

    win_rate = win_count / total_trades * 100
    # fsum is exact, so the total does not depend on trade order
    total_pnl = math.fsum(pnls)
    avg_win = float(wins.mean()) if win_count > 0 else 0.0
    avg_loss = abs(float(losses.mean())) if loss_count > 0 else 0.0

    # No losses -> 0, including the all-wins case (unlike group breakdowns).
    profit_factor = (avg_win * win_count) / (avg_loss * loss_count) if avg_loss > 0 else 0.0

    largest_win = float(wins.max()) if win_count > 0 else 0.0
    largest_loss = float(losses.min()) if loss_count > 0 else 0.0

    expectancy = (win_rate / 100) * avg_win - ((100 - win_rate) / 100) * avg_loss

    worst_drawdown, _ = max_drawdown(build_drawdown_series(closed))

    stats: MetricsResult = {
        'total_trades': total_trades,
        'winning_trades': win_count,
        'losing_trades': loss_count,
        'win_rate': round(win_rate, 2),
        'total_pnl': round(total_pnl, 2),
        'avg_win': round(avg_win, 2),
        'avg_loss': round(avg_loss, 2),
        'profit_factor': round(profit_factor, 2),
        'max_drawdown': round(worst_drawdown, 2),
        'largest_win': round(largest_win, 2),
        'largest_loss': round(largest_loss, 2),
        'expectancy': round(expectancy, 2),
        'sharpe_ratio': round(sharpe_ratio(closed, sharpe_normalization), 2),
        'avg_hold_days': round(average_hold_days(closed), 2),
    }

    logger.debug("Calculated metrics over %d closed trades", total_trades)
    return stats
