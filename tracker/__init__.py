"""
Trade journal, dashboard and report module.
"""

from .trade_journal import TradeJournal
from .pnl_dashboard import AnalyticsDashboard
from .analytics_report import AnalyticsReport

__all__ = ['TradeJournal', 'AnalyticsDashboard', 'AnalyticsReport']
