"""Tests for trade selection and tolerant field readers."""
from datetime import date, datetime, time

import numpy as np
import pandas as pd
import pytest

from analytics.fields import entry_hour, parse_date, settlement_date, strategy_label, to_float
from analytics.trade_filter import (
    filter_by_date_range,
    filter_by_period,
    filter_closed,
    filter_open,
    filter_trades,
    period_start,
    search_trades,
)


def _ids(trades):
    return [t['id'] for t in trades]


# ---------------------------------------------------------------------------
# Field readers
# ---------------------------------------------------------------------------

class TestFieldReaders:

    @pytest.mark.parametrize("value,expected", [
        (125.5, 125.5),
        ('42', 42.0),
        (None, 0.0),
        ('', 0.0),
        ('abc', 0.0),
        (float('nan'), 0.0),
        (float('inf'), 0.0),
        (np.int64(7), 7.0),
    ])
    def test_to_float(self, value, expected):
        """Malformed numbers degrade to 0."""
        assert to_float(value) == expected

    @pytest.mark.parametrize("value,expected", [
        ('2025-01-06', date(2025, 1, 6)),
        ('2025-01-06T15:45:00Z', date(2025, 1, 6)),
        (date(2025, 3, 1), date(2025, 3, 1)),
        (datetime(2025, 3, 1, 9, 30), date(2025, 3, 1)),
        (pd.Timestamp('2025-04-02'), date(2025, 4, 2)),
        ('not a date', None),
        (None, None),
        (12345, None),
    ])
    def test_parse_date(self, value, expected):
        assert parse_date(value) == expected

    def test_entry_hour(self):
        assert entry_hour({'entry_time': '09:30'}) == 9
        assert entry_hour({'entry_time': time(14, 5)}) == 14
        assert entry_hour({'entry_time': '25:00'}) is None
        assert entry_hour({'entry_time': 'noon'}) is None
        assert entry_hour({}) is None

    def test_settlement_date_falls_back_to_created_at(self):
        trade = {'exit_date': None, 'created_at': '2025-02-01T10:00:00+00:00'}
        assert settlement_date(trade) == date(2025, 2, 1)

    def test_missing_strategy_uses_sentinel(self):
        assert strategy_label({'strategy': None}) == 'No Strategy'
        assert strategy_label({'strategy': ''}) == 'No Strategy'
        assert strategy_label({'strategy': 'scalp'}) == 'scalp'


# ---------------------------------------------------------------------------
# Status filters
# ---------------------------------------------------------------------------

class TestStatusFilters:

    def test_filter_closed(self, sample_trades):
        assert _ids(filter_closed(sample_trades)) == ['T1', 'T2', 'T3', 'T4', 'T5']

    def test_filter_open(self, sample_trades):
        assert _ids(filter_open(sample_trades)) == ['T6']

    def test_status_is_case_insensitive(self):
        assert len(filter_closed([{'status': 'CLOSED'}, {'status': None}])) == 1

    def test_input_not_mutated(self, sample_trades):
        """Filtering returns a new list and leaves the input untouched."""
        before = [dict(t) for t in sample_trades]
        result = filter_closed(sample_trades)
        result.clear()
        assert sample_trades == before


# ---------------------------------------------------------------------------
# Date ranges
# ---------------------------------------------------------------------------

class TestDateRange:

    def test_inclusive_bounds(self, sample_trades):
        result = filter_by_date_range(sample_trades, start='2025-01-07', end='2025-01-08')
        assert _ids(result) == ['T2', 'T3']

    def test_open_ended_start(self, sample_trades):
        result = filter_by_date_range(sample_trades, end=date(2025, 1, 6))
        assert _ids(result) == ['T1']

    def test_all_disables_filtering(self, sample_trades):
        assert len(filter_by_date_range(sample_trades, start='all')) == len(sample_trades)

    def test_unparsable_dates_are_excluded(self):
        trades = [
            {'id': 'good', 'entry_date': '2025-01-10'},
            {'id': 'bad', 'entry_date': 'yesterday-ish'},
            {'id': 'none'},
        ]
        assert _ids(filter_by_date_range(trades, start='2025-01-01')) == ['good']


class TestPeriod:

    NOW = datetime(2025, 2, 10, 12, 0)

    def test_period_start(self):
        assert period_start('7d', self.NOW) == date(2025, 2, 3)
        assert period_start('1y', self.NOW) == date(2024, 2, 11)
        assert period_start('all', self.NOW) is None

    def test_seven_days(self, sample_trades):
        assert _ids(filter_by_period(sample_trades, '7d', now=self.NOW)) == ['T4', 'T5', 'T6']

    def test_ninety_days_keeps_everything(self, sample_trades):
        assert len(filter_by_period(sample_trades, '90d', now=self.NOW)) == 6

    def test_unknown_period_does_not_filter(self, sample_trades):
        assert len(filter_by_period(sample_trades, '2w', now=self.NOW)) == 6


# ---------------------------------------------------------------------------
# Filter bar and search
# ---------------------------------------------------------------------------

class TestFilterTrades:

    def test_instrument(self, sample_trades):
        assert _ids(filter_trades(sample_trades, instrument='MSFT')) == ['T3', 'T5']

    def test_instrument_is_case_sensitive(self, sample_trades):
        assert filter_trades(sample_trades, instrument='msft') == []

    def test_strategy_sentinel(self, sample_trades):
        assert _ids(filter_trades(sample_trades, strategy='No Strategy')) == ['T4']

    def test_outcome(self, sample_trades):
        assert _ids(filter_trades(sample_trades, outcome='winning')) == ['T1', 'T3', 'T5']
        assert _ids(filter_trades(sample_trades, outcome='losing')) == ['T2', 'T4']

    def test_combined(self, sample_trades):
        result = filter_trades(
            sample_trades,
            strategy='Reversal',
            date_range='30d',
            now=datetime(2025, 2, 10),
        )
        assert _ids(result) == ['T5']


class TestSearchTrades:

    def test_matches_instrument_and_strategy(self, sample_trades):
        assert _ids(search_trades(sample_trades, 'break')) == ['T1', 'T2', 'T6']

    def test_matches_notes_and_tags(self, sample_trades):
        assert _ids(search_trades(sample_trades, 'GAP')) == ['T1']
        assert _ids(search_trades(sample_trades, 'earn')) == ['T3']

    def test_empty_term_returns_all(self, sample_trades):
        assert len(search_trades(sample_trades, '')) == 6
