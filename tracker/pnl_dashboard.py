"""
P&L Dashboard
Displays journal performance: overall metrics, drawdown, breakdowns and
time analysis.
"""

import logging
from datetime import datetime, timedelta
from typing import Dict, List, Mapping, Optional

from analytics import (
    CumulativePolicy,
    analyze_drawdown,
    build_cumulative_series,
    build_daily_series,
    day_of_week_breakdown,
    filter_closed,
    filter_open,
    hourly_breakdown,
    instrument_breakdown,
    monthly_breakdown,
    pnl_distribution,
    strategy_breakdown,
)
from analytics.fields import exit_date
from analytics.grouping import SORT_BY_KEY
from shared.constants import (
    DEFAULT_TOP_N,
    RECENT_PERFORMANCE_DAYS,
    WIN_RATE_FAIR,
    WIN_RATE_GOOD,
)

logger = logging.getLogger(__name__)


class AnalyticsDashboard:
    """
    Display P&L and performance dashboard.
    """

    def __init__(self, config: Dict, journal):
        """
        Initialize P&L dashboard.

        Args:
            config: Configuration dictionary
            journal: TradeJournal instance
        """
        self.config = config
        self.journal = journal

        analytics_config = config.get('analytics', {})
        self.top_n = analytics_config.get('top_n', DEFAULT_TOP_N)
        self.cumulative_policy = CumulativePolicy(
            analytics_config.get('cumulative_policy', CumulativePolicy.ALL_DATES)
        )

        logger.info("AnalyticsDashboard initialized")

    def display_dashboard(self, trades: Optional[List[Mapping]] = None):
        """
        Display comprehensive dashboard.

        Args:
            trades: Trades to analyse; defaults to the whole journal
        """
        trades = self.journal.get_trades() if trades is None else trades

        print("\n" + "=" * 80)
        print("TRADE JOURNAL - PERFORMANCE DASHBOARD")
        print("=" * 80)
        print(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        print("")

        self._display_overall_stats(trades)
        self._display_drawdown(trades)
        self._display_recent_performance(trades)
        self._display_breakdown("STRATEGY BREAKDOWN", strategy_breakdown(trades))
        self._display_breakdown("INSTRUMENT BREAKDOWN", instrument_breakdown(trades))
        self._display_time_analysis(trades)
        self._display_open_positions(trades)

        print("=" * 80 + "\n")

    def _display_overall_stats(self, trades: List[Mapping]):
        """Display overall trading statistics."""
        stats = self.journal.get_statistics(trades)

        print("OVERALL STATISTICS")
        print("-" * 80)
        print(f"Total Trades: {stats['total_trades']}")
        print(f"Winning Trades: {stats['winning_trades']}")
        print(f"Losing Trades: {stats['losing_trades']}")
        print(f"Win Rate: {stats['win_rate']:.2f}%")

        if stats['win_rate'] >= WIN_RATE_GOOD:
            print("  ✅ Strong win rate")
        elif stats['win_rate'] >= WIN_RATE_FAIR:
            print("  ⚠️  Average win rate")
        else:
            print("  ❌ Below average win rate")

        print("")
        print(f"Total P&L: ${stats['total_pnl']:,.2f}")
        print(f"Average Win: ${stats['avg_win']:,.2f}")
        print(f"Average Loss: ${stats['avg_loss']:,.2f}")
        print(f"Largest Win: ${stats['largest_win']:,.2f}")
        print(f"Largest Loss: ${stats['largest_loss']:,.2f}")
        print(f"Profit Factor: {stats['profit_factor']:.2f}")
        print(f"Expectancy: ${stats['expectancy']:,.2f}")
        print(f"Sharpe Ratio: {stats['sharpe_ratio']:.2f}")
        print(f"Average Hold: {stats['avg_hold_days']:.1f} days")
        print("")

    def _display_drawdown(self, trades: List[Mapping]):
        """Display drawdown statistics."""
        dd = analyze_drawdown(trades)
        if not dd['series']:
            return

        print("DRAWDOWN")
        print("-" * 80)
        print(f"Max Drawdown: ${dd['max_drawdown']:,.2f} ({dd['max_drawdown_percent']:.1f}%)")
        if dd['max_drawdown_date']:
            print(f"  Reached: {dd['max_drawdown_date']}")
        print(f"Current Drawdown: ${dd['current_drawdown']:,.2f}")
        print(f"Longest Drawdown: {dd['longest_drawdown']} trades")
        print(f"Average Drawdown Length: {dd['avg_drawdown_length']} trades")
        print(f"Recoveries: {dd['recovery_trades']}")
        print(f"Time in Drawdown: {dd['time_in_drawdown']:.1f}%")
        print("")

    def _display_recent_performance(self, trades: List[Mapping]):
        """Display recent performance (last 30 days by exit date)."""
        cutoff = (datetime.now() - timedelta(days=RECENT_PERFORMANCE_DAYS)).date()
        recent = []
        for trade in filter_closed(trades):
            closed_on = exit_date(trade)
            if closed_on is not None and closed_on >= cutoff:
                recent.append(trade)
        if not recent:
            return

        recent_metrics = self.journal.get_statistics(recent)

        print(f"RECENT PERFORMANCE (Last {RECENT_PERFORMANCE_DAYS} Days)")
        print("-" * 80)
        print(f"Trades: {recent_metrics['total_trades']}")
        print(f"P&L: ${recent_metrics['total_pnl']:,.2f}")
        print(f"Win Rate: {recent_metrics['win_rate']:.2f}%")
        print("")

    def _display_breakdown(self, title: str, breakdown: Dict):
        """Display the top buckets of a breakdown by total P&L."""
        if not breakdown:
            return

        print(title)
        print("-" * 80)
        for stats in list(breakdown.values())[:self.top_n]:
            pf = stats['profit_factor']
            print(
                f"{stats['label']:<20} trades {stats['total_trades']:>4}  "
                f"win {stats['win_rate']:>6.1f}%  P&L ${stats['total_pnl']:>12,.2f}  PF {pf:.2f}"
            )
        print("")

    def _display_time_analysis(self, trades: List[Mapping]):
        """Display best hour and weekday."""
        hours = hourly_breakdown(trades)
        days = day_of_week_breakdown(trades)
        if not hours and not days:
            return

        print("TIME ANALYSIS")
        print("-" * 80)
        if hours:
            best_hour = next(iter(hours.values()))
            print(f"Best Hour: {best_hour['label']} (${best_hour['total_pnl']:,.2f}, "
                  f"{best_hour['total_trades']} trades)")
        if days:
            best_day = next(iter(days.values()))
            worst_day = list(days.values())[-1]
            print(f"Best Day: {best_day['label']} (${best_day['total_pnl']:,.2f})")
            print(f"Worst Day: {worst_day['label']} (${worst_day['total_pnl']:,.2f})")
        print("")

    def _display_open_positions(self, trades: List[Mapping]):
        """Display open positions."""
        positions = filter_open(trades)

        print("OPEN POSITIONS")
        print("-" * 80)

        if not positions:
            print("No open positions")
            print("")
            return

        print(f"Total Open: {len(positions)}")
        print("")

        for i, pos in enumerate(positions, 1):
            print(f"{i}. {pos.get('instrument')} - {pos.get('trade_type', 'long')}")
            print(f"   Entry: {pos.get('entry_date')} {pos.get('entry_time') or ''}".rstrip())
            print(f"   Price: ${pos.get('entry_price', 0) or 0:.2f} x {pos.get('quantity', 0)}")
            print("")

    def generate_summary(self, trades: Optional[List[Mapping]] = None) -> Dict:
        """
        Generate summary data for external use.

        Returns:
            Dictionary with statistics, drawdown, breakdowns and series
        """
        trades = self.journal.get_trades() if trades is None else trades
        daily = build_daily_series(trades)

        summary = {
            'timestamp': datetime.now().isoformat(),
            'statistics': self.journal.get_statistics(trades),
            'drawdown': analyze_drawdown(trades),
            'strategies': list(strategy_breakdown(trades).values()),
            'instruments': list(instrument_breakdown(trades).values()),
            'hours': list(hourly_breakdown(trades, sort_by=SORT_BY_KEY).values()),
            'days': list(day_of_week_breakdown(trades, sort_by=SORT_BY_KEY).values()),
            'months': list(monthly_breakdown(trades, sort_by=SORT_BY_KEY).values()),
            'pnl_distribution': pnl_distribution(trades),
            'daily_pnl': daily,
            'cumulative_pnl': build_cumulative_series(daily, self.cumulative_policy),
        }

        return summary
