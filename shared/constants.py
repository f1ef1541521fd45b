"""Shared constants used across the trade journal.

This is the single canonical location for all named constants.  Do NOT
create secondary ``constants.py`` files elsewhere in the tree.
"""

import math
import os

# ---------------------------------------------------------------------------
# Standardized project paths
# Override via JOURNAL_*_DIR env vars for mounted volumes.
# ---------------------------------------------------------------------------
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DATA_DIR = os.environ.get('JOURNAL_DATA_DIR', os.path.join(PROJECT_ROOT, 'data'))
OUTPUT_DIR = os.environ.get('JOURNAL_OUTPUT_DIR', os.path.join(PROJECT_ROOT, 'output'))
LOGS_DIR = os.environ.get('JOURNAL_LOGS_DIR', os.path.join(PROJECT_ROOT, 'logs'))
CONFIG_PATH = os.path.join(PROJECT_ROOT, 'config.yaml')

# ---------------------------------------------------------------------------
# Trade fields
# ---------------------------------------------------------------------------
STATUS_OPEN = 'open'
STATUS_CLOSED = 'closed'

NO_STRATEGY_LABEL = 'No Strategy'
UNKNOWN_INSTRUMENT_LABEL = 'Unknown'

# ---------------------------------------------------------------------------
# Profit factor
# ---------------------------------------------------------------------------
# Reported for a group with wins and no losses, so "undefeated" (999) is
# distinguishable from "no data" (0).  Kept for compatibility with the
# journal's existing breakdown tables; it is not a meaningful ratio.
PROFIT_FACTOR_NO_LOSSES = 999

# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------
FILTER_ALL = 'all'

# Lookback windows for the date-range selector, in days.
PERIOD_DAYS = {
    '7d': 7,
    '30d': 30,
    '90d': 90,
    '1y': 365,
}

OUTCOME_WINNING = 'winning'
OUTCOME_LOSING = 'losing'

# ---------------------------------------------------------------------------
# Sharpe ratio normalization policies
# ---------------------------------------------------------------------------
SHARPE_PER_TRADE = 'per_trade'
SHARPE_FIRST_TRADE = 'first_trade'
SHARPE_NORMALIZATIONS = (SHARPE_PER_TRADE, SHARPE_FIRST_TRADE)

# ---------------------------------------------------------------------------
# Time bucketing
# ---------------------------------------------------------------------------
HOURS_IN_DAY = 24

DAY_NAMES = [
    'Monday',
    'Tuesday',
    'Wednesday',
    'Thursday',
    'Friday',
    'Saturday',
    'Sunday',
]

# ---------------------------------------------------------------------------
# P&L distribution buckets: (label, exclusive lower bound, inclusive upper bound)
# ---------------------------------------------------------------------------
PNL_RANGES = [
    ('< -$1000', -math.inf, -1000),
    ('-$1000 to -$500', -1000, -500),
    ('-$500 to -$100', -500, -100),
    ('-$100 to $0', -100, 0),
    ('$0 to $100', 0, 100),
    ('$100 to $500', 100, 500),
    ('$500 to $1000', 500, 1000),
    ('> $1000', 1000, math.inf),
]

# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------
DEFAULT_TOP_N = 5
RECENT_PERFORMANCE_DAYS = 30
WIN_RATE_GOOD = 60
WIN_RATE_FAIR = 40
