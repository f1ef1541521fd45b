"""Tests for aggregate trade metrics."""
import pytest

from analytics.metrics_calculator import (
    average_hold_days,
    calculate_metrics,
    empty_metrics,
    sharpe_ratio,
    trade_returns,
)


def _closed(pnl, entry_price=100, quantity=10, **fields):
    trade = {'status': 'closed', 'pnl': pnl, 'entry_date': '2025-01-06',
             'entry_price': entry_price, 'quantity': quantity}
    trade.update(fields)
    return trade


# ---------------------------------------------------------------------------
# calculate_metrics
# ---------------------------------------------------------------------------

class TestCalculateMetrics:

    def test_sample_journal(self, sample_trades):
        """Open trades are ignored; values are rounded to 2 decimals."""
        m = calculate_metrics(sample_trades)

        assert m['total_trades'] == 5
        assert m['winning_trades'] == 3
        assert m['losing_trades'] == 2
        assert m['win_rate'] == 60.0
        assert m['total_pnl'] == 0
        assert m['avg_win'] == 116.67
        assert m['avg_loss'] == 175.0
        assert m['profit_factor'] == 1.0
        assert m['largest_win'] == 200
        assert m['largest_loss'] == -300
        assert m['expectancy'] == 0
        assert m['max_drawdown'] == 300
        assert m['avg_hold_days'] == 1.2

    def test_empty_returns_zeroed_record(self):
        assert calculate_metrics([]) == empty_metrics()

    def test_only_open_trades(self):
        trades = [{'status': 'open', 'pnl': 500}]
        m = calculate_metrics(trades)
        assert m['total_trades'] == 0
        assert m['win_rate'] == 0

    def test_all_wins_profit_factor_is_zero(self):
        """Without losses the aggregate profit factor is 0, not a sentinel."""
        m = calculate_metrics([_closed(100), _closed(50)])
        assert m['win_rate'] == 100.0
        assert m['profit_factor'] == 0
        assert m['avg_loss'] == 0

    def test_breakeven_trade_is_neither_win_nor_loss(self):
        m = calculate_metrics([_closed(0), _closed(100)])
        assert m['total_trades'] == 2
        assert m['winning_trades'] == 1
        assert m['losing_trades'] == 0
        assert m['win_rate'] == 50.0

    def test_malformed_pnl_reads_as_zero(self):
        m = calculate_metrics([_closed('n/a'), _closed(None), _closed(40)])
        assert m['total_trades'] == 3
        assert m['total_pnl'] == 40

    def test_expectancy(self):
        m = calculate_metrics([_closed(300), _closed(-100), _closed(-100), _closed(100)])
        # 50% * 200 - 50% * 100
        assert m['expectancy'] == 50.0
        assert m['profit_factor'] == 2.0

    def test_unknown_normalization_raises(self):
        with pytest.raises(ValueError, match="Unknown sharpe normalization"):
            calculate_metrics([_closed(10)], sharpe_normalization='annualized')
        with pytest.raises(ValueError):
            calculate_metrics([], sharpe_normalization='annualized')

    def test_input_not_mutated(self, sample_trades):
        before = [dict(t) for t in sample_trades]
        calculate_metrics(sample_trades)
        assert sample_trades == before


# ---------------------------------------------------------------------------
# Sharpe ratio
# ---------------------------------------------------------------------------

class TestSharpeRatio:

    def test_per_trade_uses_each_notional(self):
        trades = [_closed(100, entry_price=100, quantity=10),
                  _closed(100, entry_price=50, quantity=10)]
        # returns 10% and 20%: mean 15, population std 5
        assert trade_returns(trades) == pytest.approx([10.0, 20.0])
        assert sharpe_ratio(trades) == pytest.approx(3.0)

    def test_first_trade_normalization(self):
        trades = [_closed(100, entry_price=100, quantity=10),
                  _closed(100, entry_price=50, quantity=10)]
        # both divided by the first trade's 1000 notional
        assert trade_returns(trades, 'first_trade') == pytest.approx([10.0, 10.0])
        assert sharpe_ratio(trades, 'first_trade') == 0.0

    def test_trades_without_notional_are_skipped(self):
        trades = [_closed(100, entry_price=None), _closed(50)]
        assert trade_returns(trades) == pytest.approx([5.0])

    def test_zero_std_is_zero(self):
        assert sharpe_ratio([_closed(10), _closed(10)]) == 0.0

    def test_empty(self):
        assert sharpe_ratio([]) == 0.0

    def test_metrics_uses_configured_normalization(self):
        trades = [_closed(100, entry_price=100, quantity=10),
                  _closed(-50, entry_price=50, quantity=10)]
        per_trade = calculate_metrics(trades)['sharpe_ratio']
        first = calculate_metrics(trades, sharpe_normalization='first_trade')['sharpe_ratio']
        # per_trade returns [10, -10] -> mean 0; first_trade [10, -5] -> 2.5 / 7.5
        assert per_trade == 0
        assert first == pytest.approx(0.33)


class TestAverageHoldDays:

    def test_mean_of_dated_trades(self):
        trades = [
            _closed(1, entry_date='2025-01-01', exit_date='2025-01-04'),
            _closed(1, entry_date='2025-01-01', exit_date='2025-01-02'),
            _closed(1, entry_date='2025-01-01'),
        ]
        assert average_hold_days(trades) == 2.0

    def test_no_dates(self):
        assert average_hold_days([{'status': 'closed'}]) == 0.0
