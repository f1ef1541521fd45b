#!/usr/bin/env python3
"""
Trade Journal Analytics
Main entry point for the journal analytics system.

Usage:
    python main.py dashboard     # Display performance dashboard
    python main.py metrics       # Print aggregate metrics
    python main.py drawdown      # Print drawdown curve and statistics
    python main.py breakdown     # Print per-group breakdown
    python main.py daily         # Print daily and cumulative P&L
    python main.py report        # Write report files
"""

import sys
import signal
import logging
import argparse
from typing import Dict, List, Optional

from shared.types import AppConfig

from utils import load_config, setup_logging, validate_config
from analytics import (
    analyze_drawdown,
    cumulative_pnl_series,
    day_of_week_breakdown,
    hourly_breakdown,
    instrument_breakdown,
    monthly_breakdown,
    strategy_breakdown,
)
from analytics.cumulative import CumulativePolicy
from analytics.grouping import SORT_BY_KEY, SORT_BY_PNL
from shared.constants import FILTER_ALL, OUTCOME_LOSING, OUTCOME_WINNING, PERIOD_DAYS
from tracker import AnalyticsDashboard, AnalyticsReport, TradeJournal


logger = logging.getLogger(__name__)

# Breakdown name -> (function, sort order used for display)
BREAKDOWNS = {
    'strategy': (strategy_breakdown, SORT_BY_PNL),
    'instrument': (instrument_breakdown, SORT_BY_PNL),
    'hour': (hourly_breakdown, SORT_BY_KEY),
    'day': (day_of_week_breakdown, SORT_BY_KEY),
    'month': (monthly_breakdown, SORT_BY_KEY),
}


class JournalAnalyticsSystem:
    """
    Main journal analytics system.
    """

    def __init__(
        self,
        config: AppConfig,
        journal: Optional[TradeJournal] = None,
        dashboard: Optional[AnalyticsDashboard] = None,
        report: Optional[AnalyticsReport] = None,
    ):
        """
        Initialize the analytics system.

        Args:
            config: Configuration dictionary (already loaded & validated).
            journal: Pre-built TradeJournal or None to load from config.
            dashboard: Pre-built AnalyticsDashboard or None for default.
            report: Pre-built AnalyticsReport or None for default.
        """
        self.config = config

        logger.info("=" * 80)
        logger.info("Trade Journal Analytics Starting")
        logger.info("=" * 80)

        self.journal = journal or TradeJournal(self.config)
        self.dashboard = dashboard or AnalyticsDashboard(self.config, self.journal)
        self.report = report or AnalyticsReport(self.config)

        analytics_cfg = self.config.get('analytics', {})
        self.default_range = analytics_cfg.get('default_range', FILTER_ALL)
        self.cumulative_policy = CumulativePolicy(
            analytics_cfg.get('cumulative_policy', CumulativePolicy.ALL_DATES)
        )

        logger.info("All components initialized successfully")

    def select_trades(
        self,
        date_range: Optional[str] = None,
        instrument: str = FILTER_ALL,
        strategy: str = FILTER_ALL,
        outcome: str = FILTER_ALL,
    ) -> List[Dict]:
        """Apply the filter bar to the journal; range defaults to config."""
        trades = self.journal.filtered(
            instrument=instrument,
            strategy=strategy,
            outcome=outcome,
            date_range=date_range or self.default_range,
        )
        logger.info(f"Selected {len(trades)} of {len(self.journal.get_trades())} trades")
        return trades

    def show_dashboard(self, trades: List[Dict]):
        """
        Display performance dashboard.
        """
        self.dashboard.display_dashboard(trades)

    def show_metrics(self, trades: List[Dict]):
        """Print aggregate metrics."""
        stats = self.journal.get_statistics(trades)

        print("\nMETRICS")
        print("-" * 60)
        for key, value in stats.items():
            print(f"{key.replace('_', ' ').title():<20} {value}")
        print("")
        return stats

    def show_drawdown(self, trades: List[Dict]):
        """Print the drawdown curve and its statistics."""
        dd = analyze_drawdown(trades)

        print("\nDRAWDOWN")
        print("-" * 60)
        print(f"{'#':>4} {'Date':<12} {'P&L':>12} {'Balance':>12} {'Peak':>12} {'Drawdown':>12}")
        for point in dd['series']:
            print(
                f"{point['trade_index']:>4} {point['date']:<12} {point['trade_pnl']:>12,.2f} "
                f"{point['running_total']:>12,.2f} {point['peak']:>12,.2f} {point['drawdown']:>12,.2f}"
            )
        print("")
        print(f"Max Drawdown: ${dd['max_drawdown']:,.2f} ({dd['max_drawdown_percent']:.1f}%)")
        print(f"Current Drawdown: ${dd['current_drawdown']:,.2f}")
        print(f"Longest Drawdown: {dd['longest_drawdown']} trades")
        print(f"Drawdown Periods: {dd['drawdown_periods']}")
        print(f"Time in Drawdown: {dd['time_in_drawdown']:.1f}%")
        print("")
        return dd

    def show_breakdown(self, trades: List[Dict], by: str = 'strategy'):
        """Print a per-group breakdown."""
        breakdown_fn, sort_by = BREAKDOWNS[by]
        groups = breakdown_fn(trades, sort_by=sort_by)

        print(f"\n{by.upper()} BREAKDOWN")
        print("-" * 80)
        for stats in groups.values():
            print(
                f"{stats['label']:<20} trades {stats['total_trades']:>4}  "
                f"win {stats['win_rate']:>6.1f}%  P&L ${stats['total_pnl']:>12,.2f}  "
                f"PF {stats['profit_factor']:.2f}"
            )
        print("")
        return groups

    def show_daily(self, trades: List[Dict]):
        """Print daily and cumulative P&L."""
        series = cumulative_pnl_series(trades, self.cumulative_policy)

        print("\nDAILY P&L")
        print("-" * 60)
        for point in series:
            print(f"{point['date']:<12} {point['daily_pnl']:>12,.2f} {point['cumulative_pnl']:>14,.2f}")
        print("")
        return series

    def run_report(self, trades: List[Dict]) -> str:
        """
        Write report files and print a summary.
        """
        report_file = self.report.generate_report(trades)
        if report_file:
            self.report.print_summary(trades)
            logger.info(f"Report saved to: {report_file}")
        return report_file


def create_system(config_file: str = 'config.yaml', trades_file: Optional[str] = None) -> JournalAnalyticsSystem:
    """Factory function that loads config and builds a JournalAnalyticsSystem.

    Args:
        config_file: Path to the YAML configuration file.
        trades_file: Trade file to import instead of ``journal.trades_file``.

    Returns:
        A fully initialised JournalAnalyticsSystem.
    """
    config = load_config(config_file)
    validate_config(config)
    setup_logging(config)

    journal = None
    if trades_file:
        journal = TradeJournal(config, trades=[])
        journal.import_file(trades_file)

    return JournalAnalyticsSystem(config=config, journal=journal)


def main():
    """
    Main entry point.
    """
    parser = argparse.ArgumentParser(
        description='Trade Journal Analytics',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py dashboard                     # Show performance dashboard
  python main.py metrics --range 30d           # Metrics for the last 30 days
  python main.py breakdown --by hour           # P&L by entry hour
  python main.py daily --trades trades.csv     # Daily P&L from a CSV export
  python main.py report --strategy Breakout    # Write report files
        """
    )

    parser.add_argument(
        'command',
        choices=['dashboard', 'metrics', 'drawdown', 'breakdown', 'daily', 'report'],
        help='Command to run'
    )

    parser.add_argument(
        '--trades',
        default=None,
        help='JSON or CSV trade file (default: journal.trades_file from config)'
    )

    parser.add_argument(
        '--range',
        dest='date_range',
        choices=[FILTER_ALL] + list(PERIOD_DAYS),
        default=None,
        help='Date range (default: analytics.default_range from config)'
    )

    parser.add_argument(
        '--instrument',
        default=FILTER_ALL,
        help='Only trades on this instrument'
    )

    parser.add_argument(
        '--strategy',
        default=FILTER_ALL,
        help='Only trades with this strategy'
    )

    parser.add_argument(
        '--outcome',
        choices=[FILTER_ALL, OUTCOME_WINNING, OUTCOME_LOSING],
        default=FILTER_ALL,
        help='Only winning or losing trades'
    )

    parser.add_argument(
        '--by',
        choices=list(BREAKDOWNS),
        default='strategy',
        help='Grouping for the breakdown command (default: strategy)'
    )

    parser.add_argument(
        '--config',
        default='config.yaml',
        help='Config file path (default: config.yaml)'
    )

    args = parser.parse_args()

    def _shutdown_handler(signum, frame):
        sig_name = signal.Signals(signum).name
        logging.getLogger(__name__).info(
            f"Received shutdown signal ({sig_name}), exiting gracefully..."
        )
        sys.exit(0)

    signal.signal(signal.SIGTERM, _shutdown_handler)
    signal.signal(signal.SIGINT, _shutdown_handler)

    try:
        system = create_system(config_file=args.config, trades_file=args.trades)

        trades = system.select_trades(
            date_range=args.date_range,
            instrument=args.instrument,
            strategy=args.strategy,
            outcome=args.outcome,
        )

        if args.command == 'dashboard':
            system.show_dashboard(trades)

        elif args.command == 'metrics':
            system.show_metrics(trades)

        elif args.command == 'drawdown':
            system.show_drawdown(trades)

        elif args.command == 'breakdown':
            system.show_breakdown(trades, by=args.by)

        elif args.command == 'daily':
            system.show_daily(trades)

        elif args.command == 'report':
            system.run_report(trades)

        logger.info("Command completed successfully")

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(0)

    except Exception as e:
        logger.error(f"Error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == '__main__':
    main()
