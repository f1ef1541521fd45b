"""TypedDict definitions for major data shapes used across the system."""

from typing import TypedDict, List, Optional


class TradeRecord(TypedDict, total=False):
    """A single journal trade.

    Only ``id`` and ``status`` are reliably present; every analytics
    function reads the rest through ``analytics.fields`` and tolerates
    missing or malformed values.
    """
    id: str
    status: str  # 'open' or 'closed'
    instrument: str
    strategy: str
    trade_type: str  # 'long' or 'short'
    entry_date: str
    entry_time: str
    exit_date: str
    exit_time: str
    entry_price: float
    exit_price: float
    quantity: float
    fees: float
    pnl: float
    stop_loss: float
    take_profit: float
    setup: str
    market_condition: str
    notes: str
    tags: List[str]
    broker_trade_id: str
    created_at: str


class MetricsResult(TypedDict):
    """Return type of calculate_metrics."""
    total_trades: int
    winning_trades: int
    losing_trades: int
    win_rate: float
    total_pnl: float
    avg_win: float
    avg_loss: float
    profit_factor: float
    max_drawdown: float
    largest_win: float
    largest_loss: float
    expectancy: float
    sharpe_ratio: float
    avg_hold_days: float


class DrawdownPoint(TypedDict):
    """One point of the running-balance/drawdown series."""
    date: str
    running_total: float
    peak: float
    drawdown: float
    drawdown_percent: float
    trade_index: int
    trade_pnl: float
    instrument: str


class DrawdownStats(TypedDict):
    """Drawdown-period statistics derived from a drawdown series."""
    longest_drawdown: int
    avg_drawdown_length: int
    recovery_trades: int
    time_in_drawdown: float
    drawdown_periods: int
    current_drawdown: float


class DrawdownAnalysis(DrawdownStats):
    """Return type of analyze_drawdown."""
    series: List[DrawdownPoint]
    max_drawdown: float
    max_drawdown_date: Optional[str]
    max_drawdown_percent: float


class GroupStats(TypedDict, total=False):
    """Per-bucket statistics produced by group_by.

    ``total_volume`` is only present in instrument breakdowns.
    """
    label: str
    total_trades: int
    wins: int
    losses: int
    total_pnl: float
    win_rate: float
    avg_win: float
    avg_loss: float
    profit_factor: float
    total_volume: float


class PnLRange(TypedDict):
    """One bucket of the P&L distribution."""
    label: str
    min: float
    max: float
    wins: int
    losses: int


class DailyPoint(TypedDict):
    """Net realized P&L for one calendar date."""
    date: str
    daily_pnl: float


class CumulativePoint(DailyPoint):
    """Daily point plus the running cumulative P&L."""
    cumulative_pnl: float


class JournalConfig(TypedDict, total=False):
    """Trade snapshot source."""
    trades_file: str


class AnalyticsConfig(TypedDict, total=False):
    """Analytics engine policies."""
    default_range: str
    sharpe_normalization: str
    cumulative_policy: str
    top_n: int


class ReportsConfig(TypedDict, total=False):
    """Report output configuration."""
    report_dir: str


class LoggingConfig(TypedDict, total=False):
    """Logging configuration."""
    level: str
    file: str
    console: bool


class AppConfig(TypedDict, total=False):
    """Top-level application configuration."""
    journal: JournalConfig
    analytics: AnalyticsConfig
    reports: ReportsConfig
    logging: LoggingConfig
