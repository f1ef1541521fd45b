"""Shared test fixtures."""
import pytest


@pytest.fixture
def sample_config():
    return {
        'journal': {
            'trades_file': '',
        },
        'analytics': {
            'default_range': 'all',
            'sharpe_normalization': 'per_trade',
            'cumulative_policy': 'all_dates',
            'top_n': 5,
        },
        'reports': {
            'report_dir': '/tmp/journal_reports',
        },
        'logging': {'level': 'WARNING', 'file': '/tmp/test_journal.log', 'console': False},
    }


def make_trade(pnl, entry_date='2025-01-06', status='closed', **fields):
    """Return a minimal trade dict."""
    trade = {
        'id': fields.pop('id', f"T-{entry_date}-{pnl}"),
        'status': status,
        'entry_date': entry_date,
        'pnl': pnl,
    }
    trade.update(fields)
    return trade


@pytest.fixture
def sample_trades():
    """Five closed trades (P&L 100, -50, 200, -300, 50 in date order) and one open."""
    return [
        make_trade(100, '2025-01-06', id='T1', instrument='AAPL', strategy='Breakout',
                   entry_time='09:30', exit_date='2025-01-07', entry_price=100, quantity=10,
                   notes='Gap and go', tags=['momentum']),
        make_trade(-50, '2025-01-07', id='T2', instrument='AAPL', strategy='Breakout',
                   entry_time='10:15', exit_date='2025-01-07', entry_price=100, quantity=10),
        make_trade(200, '2025-01-08', id='T3', instrument='MSFT', strategy='Reversal',
                   entry_time='09:45', exit_date='2025-01-10', entry_price=200, quantity=5,
                   tags=['earnings']),
        make_trade(-300, '2025-02-03', id='T4', instrument='TSLA', strategy=None,
                   entry_time='14:00', exit_date='2025-02-05', entry_price=250, quantity=4),
        make_trade(50, '2025-02-04', id='T5', instrument='MSFT', strategy='Reversal',
                   entry_time='15:30', exit_date='2025-02-05', entry_price=200, quantity=5),
        make_trade(None, '2025-02-10', id='T6', status='open', instrument='NVDA',
                   strategy='Breakout', entry_time='11:00', entry_price=500, quantity=2),
    ]
