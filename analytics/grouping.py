"""
Grouping Aggregator
Per-bucket win/loss/P&L statistics (by strategy, instrument, hour,
weekday, month) and the P&L distribution histogram.

Aggregation is one pass into per-key accumulators followed by one pass
over the buckets to derive ratios.
"""

import logging
from collections import defaultdict
from typing import Callable, Dict, Hashable, Iterable, List, Mapping, Optional, Sequence

from analytics.fields import (
    entry_date,
    entry_hour,
    instrument_label,
    notional,
    strategy_label,
    trade_pnl,
)
from analytics.trade_filter import filter_closed
from shared.constants import (
    DAY_NAMES,
    HOURS_IN_DAY,
    PNL_RANGES,
    PROFIT_FACTOR_NO_LOSSES,
)
from shared.types import GroupStats, PnLRange

logger = logging.getLogger(__name__)

SORT_BY_PNL = 'pnl'
SORT_BY_LABEL = 'label'
SORT_BY_KEY = 'key'
SORT_ORDERS = (SORT_BY_PNL, SORT_BY_LABEL, SORT_BY_KEY)

KeyFn = Callable[[Mapping], Optional[Hashable]]


# ---------------------------------------------------------------------------
# Key functions (None excludes the trade from the grouping)
# ---------------------------------------------------------------------------

def strategy_key(trade: Mapping) -> str:
    return strategy_label(trade)


def instrument_key(trade: Mapping) -> str:
    return instrument_label(trade)


def hour_key(trade: Mapping) -> Optional[int]:
    return entry_hour(trade)


def day_of_week_key(trade: Mapping) -> Optional[str]:
    d = entry_date(trade)
    return DAY_NAMES[d.weekday()] if d is not None else None


def month_key(trade: Mapping) -> Optional[str]:
    d = entry_date(trade)
    return d.strftime('%Y-%m') if d is not None else None


def hour_label(hour: int) -> str:
    return f"{hour:02d}:00"


def month_label(key: str) -> str:
    """'2025-01' -> 'Jan 2025'."""
    year, month = key.split('-')
    names = ['Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun',
             'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec']
    return f"{names[int(month) - 1]} {year}"


# ---------------------------------------------------------------------------
# Core aggregation
# ---------------------------------------------------------------------------

def _new_bucket() -> Dict:
    return {'total_trades': 0, 'wins': 0, 'losses': 0,
            'total_pnl': 0.0, 'win_sum': 0.0, 'loss_sum': 0.0}


def group_profit_factor(wins: int, losses: int, avg_win: float, avg_loss: float) -> float:
    """
    Profit factor for a bucket.

    Wins without losses report ``PROFIT_FACTOR_NO_LOSSES`` (999) rather
    than infinity; a bucket with neither reports 0.
    """
    if avg_loss > 0 and losses > 0:
        return (avg_win * wins) / (avg_loss * losses)
    if wins > 0:
        return PROFIT_FACTOR_NO_LOSSES
    return 0


def _finalize(label: str, bucket: Dict) -> GroupStats:
    total = bucket['total_trades']
    wins = bucket['wins']
    losses = bucket['losses']
    avg_win = bucket['win_sum'] / wins if wins > 0 else 0.0
    avg_loss = abs(bucket['loss_sum'] / losses) if losses > 0 else 0.0
    profit_factor = group_profit_factor(wins, losses, avg_win, avg_loss)

    return {
        'label': label,
        'total_trades': total,
        'wins': wins,
        'losses': losses,
        'total_pnl': round(bucket['total_pnl'], 2),
        'win_rate': round(wins / total * 100, 2) if total > 0 else 0,
        'avg_win': round(avg_win, 2),
        'avg_loss': round(avg_loss, 2),
        'profit_factor': round(profit_factor, 2),
    }


def group_by(
    trades: Iterable[Mapping],
    key_fn: KeyFn,
    initial_keys: Sequence[Hashable] = (),
    sort_by: str = SORT_BY_PNL,
    label_fn: Optional[Callable[[Hashable], str]] = None,
) -> Dict[Hashable, GroupStats]:
    """
    Bucket *trades* by ``key_fn`` and compute per-bucket statistics.

    Trades are taken as given: filter to closed trades first if needed.

    Args:
        trades: Trade collection
        key_fn: Extracts the bucket key; returning None skips the trade
        initial_keys: Buckets to pre-seed (dropped again if still empty)
        sort_by: 'pnl' (total P&L desc, then label), 'label', or 'key'
            (seeded key order, then natural key order)
        label_fn: Display label for a key; defaults to ``str(key)``

    Returns:
        Ordered dict of key -> GroupStats
    """
    if sort_by not in SORT_ORDERS:
        raise ValueError(f"Unknown sort order {sort_by!r}; expected one of {SORT_ORDERS}")

    buckets: Dict[Hashable, Dict] = {key: _new_bucket() for key in initial_keys}
    skipped = 0

    for trade in trades:
        key = key_fn(trade)
        if key is None:
            skipped += 1
            continue
        bucket = buckets.get(key)
        if bucket is None:
            bucket = buckets[key] = _new_bucket()

        pnl = trade_pnl(trade)
        bucket['total_trades'] += 1
        bucket['total_pnl'] += pnl
        if pnl > 0:
            bucket['wins'] += 1
            bucket['win_sum'] += pnl
        elif pnl < 0:
            bucket['losses'] += 1
            bucket['loss_sum'] += pnl

    if skipped:
        logger.debug("group_by skipped %d trades without a key", skipped)

    label_fn = label_fn or str
    stats = {
        key: _finalize(label_fn(key), bucket)
        for key, bucket in buckets.items()
        if bucket['total_trades'] > 0
    }

    if sort_by == SORT_BY_PNL:
        ordered = sorted(stats, key=lambda k: (-stats[k]['total_pnl'], stats[k]['label']))
    elif sort_by == SORT_BY_LABEL:
        ordered = sorted(stats, key=lambda k: stats[k]['label'])
    else:
        seeded_keys = set(initial_keys)
        seeded = [k for k in initial_keys if k in stats]
        # mixed key types order by type name first
        extra = sorted((k for k in stats if k not in seeded_keys), key=lambda k: (type(k).__name__, k))
        ordered = seeded + extra

    return {key: stats[key] for key in ordered}


# ---------------------------------------------------------------------------
# Breakdowns over closed trades
# ---------------------------------------------------------------------------

def strategy_breakdown(trades: Iterable[Mapping], sort_by: str = SORT_BY_PNL) -> Dict[str, GroupStats]:
    """Per-strategy statistics; unset strategies group under 'No Strategy'."""
    return group_by(filter_closed(trades), strategy_key, sort_by=sort_by)


def instrument_breakdown(trades: Iterable[Mapping], sort_by: str = SORT_BY_PNL) -> Dict[str, GroupStats]:
    """Per-instrument statistics plus ``total_volume`` (sum of entry notional)."""
    closed = filter_closed(trades)
    volumes: Dict[str, float] = defaultdict(float)
    for trade in closed:
        volumes[instrument_key(trade)] += notional(trade)

    breakdown = group_by(closed, instrument_key, sort_by=sort_by)
    for key, stats in breakdown.items():
        stats['total_volume'] = round(volumes[key], 2)
    return breakdown


def hourly_breakdown(trades: Iterable[Mapping], sort_by: str = SORT_BY_PNL) -> Dict[int, GroupStats]:
    """Statistics by entry hour; hours without trades are omitted."""
    return group_by(
        filter_closed(trades),
        hour_key,
        initial_keys=range(HOURS_IN_DAY),
        sort_by=sort_by,
        label_fn=hour_label,
    )


def day_of_week_breakdown(trades: Iterable[Mapping], sort_by: str = SORT_BY_PNL) -> Dict[str, GroupStats]:
    """Statistics by weekday of entry (Monday first when sorted by key)."""
    return group_by(
        filter_closed(trades),
        day_of_week_key,
        initial_keys=DAY_NAMES,
        sort_by=sort_by,
    )


def monthly_breakdown(trades: Iterable[Mapping], sort_by: str = SORT_BY_PNL) -> Dict[str, GroupStats]:
    """Statistics by entry month, keyed 'YYYY-MM' and labelled 'Mon YYYY'."""
    return group_by(
        filter_closed(trades),
        month_key,
        sort_by=sort_by,
        label_fn=month_label,
    )


def pnl_distribution(trades: Iterable[Mapping]) -> List[PnLRange]:
    """
    Histogram of closed-trade P&L over fixed dollar ranges.

    A trade falls in the range where ``min < pnl <= max``.  Positive P&L
    counts as a win, anything else as a loss.  Empty ranges are omitted.
    """
    ranges = [
        {'label': label, 'min': low, 'max': high, 'wins': 0, 'losses': 0}
        for label, low, high in PNL_RANGES
    ]

    for trade in filter_closed(trades):
        pnl = trade_pnl(trade)
        for bucket in ranges:
            if bucket['min'] < pnl <= bucket['max']:
                if pnl > 0:
                    bucket['wins'] += 1
                else:
                    bucket['losses'] += 1
                break

    return [r for r in ranges if r['wins'] > 0 or r['losses'] > 0]
