"""
Analytics Report
Write journal performance reports: text summary, JSON data and CSV
breakdown sheets.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Mapping, Optional

import pandas as pd

from analytics import (
    analyze_drawdown,
    calculate_metrics,
    instrument_breakdown,
    strategy_breakdown,
)
from shared.constants import OUTPUT_DIR, SHARPE_PER_TRADE
from shared.exceptions import ReportError
from shared.io_utils import atomic_csv_write, atomic_json_write, atomic_text_write

logger = logging.getLogger(__name__)

_SHEET_COLUMNS = {
    'label': 'Name',
    'total_trades': 'Total Trades',
    'wins': 'Wins',
    'losses': 'Losses',
    'win_rate': 'Win Rate (%)',
    'total_pnl': 'Total P&L ($)',
    'avg_win': 'Average Win ($)',
    'avg_loss': 'Average Loss ($)',
    'profit_factor': 'Profit Factor',
    'total_volume': 'Total Volume ($)',
}


class AnalyticsReport:
    """
    Calculate and report journal performance.
    """

    def __init__(self, config: Dict):
        """
        Initialize report writer.

        Args:
            config: Configuration dictionary
        """
        self.config = config
        self.report_dir = Path(config.get('reports', {}).get('report_dir') or Path(OUTPUT_DIR) / 'reports')
        self.sharpe_normalization = config.get('analytics', {}).get('sharpe_normalization', SHARPE_PER_TRADE)

        logger.info("AnalyticsReport initialized")

    def build_results(self, trades: List[Mapping]) -> Dict:
        """Collect everything a report needs from *trades*."""
        drawdown = analyze_drawdown(trades)
        drawdown.pop('series')
        return {
            'metrics': calculate_metrics(trades, self.sharpe_normalization),
            'drawdown': drawdown,
            'strategies': list(strategy_breakdown(trades).values()),
            'instruments': list(instrument_breakdown(trades).values()),
        }

    def generate_report(self, trades: List[Mapping]) -> str:
        """
        Generate report files for *trades*.

        Args:
            trades: Trades to report on

        Returns:
            Path to the text report, or "" when there is nothing to report

        Raises:
            ReportError: if the report directory cannot be created
        """
        if not trades:
            logger.warning("No trades to report")
            return ""

        try:
            self.report_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ReportError(f"Cannot create report directory {self.report_dir}: {e}") from e

        results = self.build_results(trades)
        stamp = self._timestamp()

        report_file = self.report_dir / f"analytics_report_{stamp}.txt"
        try:
            atomic_text_write(report_file, self._generate_text_report(results))
            logger.info(f"Report generated: {report_file}")
        except OSError as e:
            logger.warning(f"Failed to write text report to {report_file}: {e}")

        json_file = self.report_dir / f"analytics_results_{stamp}.json"
        try:
            atomic_json_write(json_file, results)
        except OSError as e:
            logger.warning(f"Failed to write JSON results to {json_file}: {e}")

        for name, rows in (('strategy', results['strategies']), ('instrument', results['instruments'])):
            sheet = self.report_dir / f"{name}_analysis_{stamp}.csv"
            try:
                atomic_csv_write(sheet, self._breakdown_frame(rows))
            except OSError as e:
                logger.warning(f"Failed to write {name} sheet to {sheet}: {e}")

        return str(report_file)

    @staticmethod
    def _breakdown_frame(rows: List[Dict]) -> pd.DataFrame:
        """Breakdown rows as a spreadsheet-style DataFrame."""
        df = pd.DataFrame(rows, columns=[c for c in _SHEET_COLUMNS if any(c in r for r in rows)] or None)
        return df.rename(columns=_SHEET_COLUMNS)

    def _generate_text_report(self, results: Dict) -> str:
        """
        Generate formatted text report.
        """
        m = results['metrics']
        dd = results['drawdown']

        lines = []
        lines.append("=" * 80)
        lines.append("TRADE JOURNAL - ANALYTICS REPORT")
        lines.append("=" * 80)
        lines.append("")

        lines.append("SUMMARY")
        lines.append("-" * 80)
        lines.append(f"Total Trades: {m['total_trades']}")
        lines.append(f"Winning Trades: {m['winning_trades']}")
        lines.append(f"Losing Trades: {m['losing_trades']}")
        lines.append(f"Win Rate: {m['win_rate']:.2f}%")
        lines.append(f"Total P&L: ${m['total_pnl']:,.2f}")
        lines.append("")

        lines.append("TRADE STATISTICS")
        lines.append("-" * 80)
        lines.append(f"Average Win: ${m['avg_win']:,.2f}")
        lines.append(f"Average Loss: ${m['avg_loss']:,.2f}")
        lines.append(f"Largest Win: ${m['largest_win']:,.2f}")
        lines.append(f"Largest Loss: ${m['largest_loss']:,.2f}")
        lines.append(f"Profit Factor: {m['profit_factor']:.2f}")
        lines.append(f"Expectancy: ${m['expectancy']:,.2f}")
        lines.append("")

        lines.append("RISK METRICS")
        lines.append("-" * 80)
        lines.append(f"Max Drawdown: ${m['max_drawdown']:,.2f}")
        lines.append(f"Longest Drawdown: {dd['longest_drawdown']} trades")
        lines.append(f"Time in Drawdown: {dd['time_in_drawdown']:.2f}%")
        lines.append(f"Sharpe Ratio: {m['sharpe_ratio']:.2f}")
        lines.append("")

        for title, rows in (("STRATEGY ANALYSIS", results['strategies']),
                            ("INSTRUMENT ANALYSIS", results['instruments'])):
            lines.append(title)
            lines.append("-" * 80)
            if not rows:
                lines.append("No closed trades")
            for row in rows:
                lines.append(
                    f"{row['label']:<20} {row['total_trades']:>4} trades  "
                    f"{row['win_rate']:>6.2f}%  ${row['total_pnl']:>12,.2f}"
                )
            lines.append("")

        if m['total_pnl'] > 0:
            lines.append("✅ PROFITABLE")
        else:
            lines.append("❌ Journal shows losses")

        lines.append("")
        lines.append("=" * 80)

        return "\n".join(lines)

    def _timestamp(self) -> str:
        """
        Generate timestamp string for filenames.
        """
        return datetime.now().strftime("%Y%m%d_%H%M%S")

    def print_summary(self, trades: List[Mapping], results: Optional[Dict] = None):
        """
        Print summary to console.
        """
        results = results or self.build_results(trades)
        m = results['metrics']
        print("\n" + "=" * 60)
        print("ANALYTICS SUMMARY")
        print("=" * 60)
        print(f"Total Trades: {m['total_trades']}")
        print(f"Win Rate: {m['win_rate']:.2f}%")
        print(f"Total P&L: ${m['total_pnl']:,.2f}")
        print(f"Profit Factor: {m['profit_factor']:.2f}")
        print(f"Max Drawdown: ${m['max_drawdown']:,.2f}")
        print(f"Sharpe Ratio: {m['sharpe_ratio']:.2f}")
        print("=" * 60 + "\n")
