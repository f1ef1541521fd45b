"""Tests for the JournalAnalyticsSystem wiring and CLI."""
import json
import sys
from unittest.mock import patch

import pytest
import yaml

import main
from main import JournalAnalyticsSystem, create_system
from tracker.trade_journal import TradeJournal


@pytest.fixture
def system(sample_config, sample_trades, tmp_path):
    sample_config['reports']['report_dir'] = str(tmp_path / 'reports')
    journal = TradeJournal(sample_config, trades=sample_trades)
    return JournalAnalyticsSystem(sample_config, journal=journal)


@pytest.fixture
def config_file(sample_config, tmp_path):
    trades_file = tmp_path / 'trades.json'
    trades_file.write_text(json.dumps([
        {'instrument': 'AAPL', 'entry_date': '2025-01-06', 'entry_price': 100, 'quantity': 10,
         'exit_price': 105, 'exit_date': '2025-01-07', 'status': 'closed'},
        {'instrument': 'MSFT', 'entry_date': '2025-01-08', 'entry_price': 200, 'quantity': 5,
         'status': 'open'},
    ]))
    sample_config['journal']['trades_file'] = str(trades_file)
    sample_config['reports']['report_dir'] = str(tmp_path / 'reports')
    sample_config['logging']['file'] = str(tmp_path / 'logs' / 'journal.log')

    path = tmp_path / 'config.yaml'
    path.write_text(yaml.dump(sample_config))
    return path


class TestSelectTrades:

    def test_default_range_from_config(self, system):
        assert len(system.select_trades()) == 6

    def test_filters(self, system):
        trades = system.select_trades(instrument='MSFT', outcome='winning')
        assert [t['id'] for t in trades] == ['T3', 'T5']


class TestCommands:

    def test_show_metrics(self, system, capsys):
        stats = system.show_metrics(system.select_trades())
        assert stats['total_trades'] == 5
        assert "Win Rate" in capsys.readouterr().out

    def test_show_drawdown(self, system, capsys):
        dd = system.show_drawdown(system.select_trades())
        assert dd['max_drawdown'] == 300
        assert "Longest Drawdown: 2 trades" in capsys.readouterr().out

    @pytest.mark.parametrize("by,first", [
        ('strategy', 'Reversal'),
        ('instrument', 'MSFT'),
        ('hour', 9),
        ('day', 'Monday'),
        ('month', '2025-01'),
    ])
    def test_show_breakdown(self, system, by, first):
        groups = system.show_breakdown(system.select_trades(), by=by)
        assert next(iter(groups)) == first

    def test_show_daily(self, system):
        series = system.show_daily(system.select_trades())
        assert [p['cumulative_pnl'] for p in series] == [50, 250, 0]

    def test_run_report(self, system, tmp_path):
        report_file = system.run_report(system.select_trades())
        assert report_file.startswith(str(tmp_path / 'reports'))


class TestCreateSystem:

    def test_loads_journal_from_config(self, config_file):
        with patch('dotenv.load_dotenv'), patch('main.setup_logging'):
            system = create_system(str(config_file))
        assert len(system.journal.get_trades()) == 2
        assert system.journal.get_closed_trades()[0]['pnl'] == 50

    def test_trades_override(self, config_file, tmp_path):
        csv_file = tmp_path / 'other.csv'
        csv_file.write_text(
            "Symbol,Entry Date,Entry Price,Quantity,Exit Price,Status\n"
            "ES,2025-02-03,5000,1,5010,closed\n"
        )
        with patch('dotenv.load_dotenv'), patch('main.setup_logging'):
            system = create_system(str(config_file), trades_file=str(csv_file))
        assert [t['instrument'] for t in system.journal.get_trades()] == ['ES']


class TestMain:

    def test_metrics_command(self, config_file, capsys):
        argv = ['main.py', 'metrics', '--config', str(config_file)]
        with patch.object(sys, 'argv', argv), patch('dotenv.load_dotenv'), \
                patch('main.setup_logging'), patch('signal.signal'):
            main.main()
        assert "Total Trades" in capsys.readouterr().out

    def test_bad_trades_file_exits_1(self, config_file, tmp_path):
        argv = ['main.py', 'metrics', '--config', str(config_file),
                '--trades', str(tmp_path / 'missing.csv')]
        with patch.object(sys, 'argv', argv), patch('dotenv.load_dotenv'), \
                patch('main.setup_logging'), patch('signal.signal'):
            with pytest.raises(SystemExit) as exc:
                main.main()
        assert exc.value.code == 1
