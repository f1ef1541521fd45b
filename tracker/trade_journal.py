"""
Trade Journal
Holds the journal's trade snapshot, normalizes imported rows and derives
realized P&L before handing trades to the analytics engine.
"""

import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional

import pandas as pd

from analytics import calculate_metrics, filter_closed, filter_open, filter_trades
from analytics.fields import is_missing, parse_date, to_float
from shared.constants import (
    FILTER_ALL,
    OUTPUT_DIR as _OUTPUT_DIR,
    SHARPE_PER_TRADE,
    STATUS_CLOSED,
    STATUS_OPEN,
)
from shared.exceptions import TradeImportError
from shared.io_utils import atomic_csv_write, safe_json_read

logger = logging.getLogger(__name__)

# Canonical field -> accepted column names from spreadsheets and broker exports.
COLUMN_ALIASES = {
    'id': ['id', 'Trade ID', 'trade_id', 'tradeId'],
    'instrument': ['instrument', 'Instrument', 'Symbol', 'symbol'],
    'trade_type': ['trade_type', 'Trade Type', 'TradeType', 'tradeType', 'Type', 'type'],
    'strategy': ['strategy', 'Strategy'],
    'setup': ['setup', 'Setup'],
    'market_condition': ['market_condition', 'Market Condition', 'marketCondition'],
    'entry_date': ['entry_date', 'Entry Date', 'EntryDate', 'entryDate', 'Date', 'date'],
    'entry_time': ['entry_time', 'Entry Time', 'EntryTime', 'entryTime'],
    'entry_price': ['entry_price', 'Entry Price', 'EntryPrice', 'entryPrice'],
    'quantity': ['quantity', 'Quantity', 'Qty', 'qty'],
    'exit_date': ['exit_date', 'Exit Date', 'ExitDate', 'exitDate'],
    'exit_time': ['exit_time', 'Exit Time', 'ExitTime', 'exitTime'],
    'exit_price': ['exit_price', 'Exit Price', 'ExitPrice', 'exitPrice'],
    'stop_loss': ['stop_loss', 'Stop Loss', 'StopLoss', 'stopLoss'],
    'take_profit': ['take_profit', 'Take Profit', 'TakeProfit', 'takeProfit'],
    'fees': ['fees', 'Fees', 'Commission', 'commission'],
    'pnl': ['pnl', 'P&L', 'PnL', 'profit'],
    'status': ['status', 'Status'],
    'notes': ['notes', 'Notes', 'Comments', 'comments'],
    'tags': ['tags', 'Tags'],
    'broker_trade_id': ['broker_trade_id', 'brokerTradeId', 'Broker Trade ID'],
    'created_at': ['created_at', 'Created At', 'createdAt'],
}

REQUIRED_FIELDS = ('instrument', 'entry_price', 'quantity', 'entry_date')

_PRICE_FIELDS = ('exit_price', 'stop_loss', 'take_profit')
_TEXT_FIELDS = ('strategy', 'setup', 'market_condition', 'entry_time',
                'exit_time', 'notes', 'broker_trade_id')


def _column_value(row: Mapping, canonical: str):
    for name in COLUMN_ALIASES[canonical]:
        if name in row and not is_missing(row[name]):
            return row[name]
    return None


def _parse_tags(value) -> List[str]:
    if is_missing(value):
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    return [t.strip() for t in str(value).split(',') if t.strip()]


def calculate_pnl(trade: Mapping) -> float:
    """
    Realized P&L of a trade from its prices, net of fees.

    Returns 0 when there is no exit price.  Short trades profit when the
    exit is below the entry; anything not marked short is treated as long.
    """
    exit_price = to_float(trade.get('exit_price'))
    if not exit_price:
        return 0.0

    entry_price = to_float(trade.get('entry_price'))
    quantity = to_float(trade.get('quantity'))
    fees = to_float(trade.get('fees'))

    if str(trade.get('trade_type') or 'long').lower() == 'short':
        pnl = (entry_price - exit_price) * quantity
    else:
        pnl = (exit_price - entry_price) * quantity

    return pnl - fees


def realized_pnl(trade: Mapping) -> float:
    """
    P&L the journal records for a trade.

    Closed trades with an exit price are priced with :func:`calculate_pnl`;
    closed trades without one keep any P&L they were imported with.  Open
    trades carry 0.
    """
    if str(trade.get('status') or '').lower() != STATUS_CLOSED:
        return 0.0
    if not is_missing(trade.get('exit_price')):
        return calculate_pnl(trade)
    return to_float(trade.get('pnl'))


def normalize_trade(row: Mapping, index: int = 0) -> Dict:
    """
    Map an imported row onto the canonical trade shape.

    Args:
        row: Raw row (spreadsheet columns, broker export, or canonical dict)
        index: Zero-based row number, used in error messages

    Returns:
        Canonical trade dict with P&L derived

    Raises:
        TradeImportError: when the row is not a mapping, or a required field
            is missing or invalid
    """
    if not isinstance(row, Mapping):
        raise TradeImportError(
            f"Invalid data in row {index + 1}. Expected a trade record, got {type(row).__name__}"
        )

    instrument = _column_value(row, 'instrument')
    entry_price = to_float(_column_value(row, 'entry_price'))
    quantity = to_float(_column_value(row, 'quantity'))
    entry = parse_date(_column_value(row, 'entry_date'))

    if is_missing(instrument) or not entry_price or not quantity or entry is None:
        raise TradeImportError(
            f"Invalid data in row {index + 1}. "
            f"Required fields: {', '.join(REQUIRED_FIELDS)}"
        )

    exit_d = parse_date(_column_value(row, 'exit_date'))
    trade_id = _column_value(row, 'id')
    created_at = _column_value(row, 'created_at')

    trade = {
        'id': str(trade_id) if trade_id is not None else uuid.uuid4().hex,
        'instrument': str(instrument),
        'trade_type': str(_column_value(row, 'trade_type') or 'long').lower(),
        'entry_date': entry.isoformat(),
        'entry_price': entry_price,
        'quantity': quantity,
        'exit_date': exit_d.isoformat() if exit_d else None,
        'fees': to_float(_column_value(row, 'fees')),
        'status': str(_column_value(row, 'status') or STATUS_OPEN).lower(),
        'tags': _parse_tags(_column_value(row, 'tags')),
        'created_at': str(created_at) if created_at is not None
        else datetime.now(timezone.utc).isoformat(),
    }
    for field in _TEXT_FIELDS:
        value = _column_value(row, field)
        trade[field] = str(value) if value is not None else ''
    for field in _PRICE_FIELDS:
        value = _column_value(row, field)
        trade[field] = to_float(value) if value is not None else None

    imported_pnl = _column_value(row, 'pnl')
    if imported_pnl is not None:
        trade['pnl'] = imported_pnl
    trade['pnl'] = realized_pnl(trade)

    return trade


def read_trades_file(path) -> List[Dict]:
    """
    Read raw trade rows from a JSON or CSV file.

    JSON may be a list of trades or an object with a ``trades`` list.

    Raises:
        TradeImportError: when the file is missing, unreadable or empty
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == '.csv':
        try:
            df = pd.read_csv(path)
        except (OSError, UnicodeDecodeError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            raise TradeImportError(f"Could not read {path}: {e}") from e
        df = df.astype(object).where(pd.notna(df), None)
        rows = df.to_dict(orient='records')
    elif suffix == '.json':
        data = safe_json_read(path)
        if data is None:
            raise TradeImportError(f"Could not read {path}")
        rows = data.get('trades', []) if isinstance(data, dict) else data
        if not isinstance(rows, list):
            raise TradeImportError(f"{path} does not contain a list of trades")
    else:
        raise TradeImportError(f"Unsupported trade file type: {path.suffix or path.name}")

    if not rows:
        raise TradeImportError(f"No data found in {path}")
    return rows


class TradeJournal:
    """
    In-memory trade journal.
    """

    def __init__(self, config: Dict, trades: Optional[Iterable[Mapping]] = None):
        """
        Initialize trade journal.

        Args:
            config: Configuration dictionary
            trades: Initial trades; loaded from ``journal.trades_file`` when None
        """
        self.config = config
        analytics_config = config.get('analytics', {})
        self.sharpe_normalization = analytics_config.get('sharpe_normalization', SHARPE_PER_TRADE)

        if trades is None:
            self.trades = self._load_trades()
        else:
            self.trades = [dict(t) for t in trades]

        logger.info(f"TradeJournal initialized with {len(self.trades)} trades")

    def _load_trades(self) -> List[Dict]:
        """Load the configured trade snapshot.

        Returns an empty list when no file is configured or it cannot be read,
        so the journal can always start cleanly.  Invalid rows are skipped.
        """
        trades_file = self.config.get('journal', {}).get('trades_file')
        if not trades_file:
            return []
        if not Path(trades_file).exists():
            logger.info(f"No trade file at {trades_file}; starting with empty journal")
            return []

        try:
            rows = read_trades_file(trades_file)
        except TradeImportError as e:
            logger.warning(f"Could not load trades: {e}. Starting with empty journal.")
            return []

        trades = []
        for index, row in enumerate(rows):
            try:
                trades.append(normalize_trade(row, index))
            except TradeImportError as e:
                logger.warning(f"Skipping trade: {e}")
        return trades

    def add_trade(self, trade: Mapping) -> str:
        """
        Add a new trade.

        Args:
            trade: Trade data

        Returns:
            Trade ID
        """
        record = dict(trade)
        instrument = record.get('instrument') or 'trade'
        record['id'] = f"{instrument}_{datetime.now(timezone.utc).strftime('%Y%m%d_%H%M%S')}_{uuid.uuid4().hex[:6]}"
        record['created_at'] = datetime.now(timezone.utc).isoformat()
        record.setdefault('status', STATUS_OPEN)
        record['pnl'] = realized_pnl(record)

        self.trades.append(record)
        logger.info(f"Added trade: {record['id']}")
        return record['id']

    def update_trade(self, trade_id: str, updates: Mapping) -> bool:
        """
        Merge *updates* into a trade and re-derive its P&L.

        Returns:
            True if the trade was found
        """
        trade = self.get_trade(trade_id)
        if trade is None:
            logger.warning(f"Trade not found: {trade_id}")
            return False

        trade.update(updates)
        trade['pnl'] = realized_pnl(trade)
        logger.info(f"Updated trade: {trade_id}")
        return True

    def close_trade(
        self,
        trade_id: str,
        exit_price: float,
        exit_date: Optional[str] = None,
        exit_time: Optional[str] = None,
    ) -> bool:
        """
        Close an open trade at *exit_price*.

        Args:
            trade_id: Trade identifier
            exit_price: Exit price
            exit_date: ISO exit date (defaults to today, UTC)
            exit_time: Optional 'HH:MM' exit time
        """
        now = datetime.now(timezone.utc)
        updates = {
            'status': STATUS_CLOSED,
            'exit_price': exit_price,
            'exit_date': exit_date or now.date().isoformat(),
        }
        if exit_time:
            updates['exit_time'] = exit_time

        closed = self.update_trade(trade_id, updates)
        if closed:
            logger.info(f"Closed trade: {trade_id}, P&L: ${self.get_trade(trade_id)['pnl']:.2f}")
        return closed

    def delete_trade(self, trade_id: str) -> bool:
        """Remove a trade; returns False if it was not found."""
        for i, trade in enumerate(self.trades):
            if trade.get('id') == trade_id:
                self.trades.pop(i)
                logger.info(f"Deleted trade: {trade_id}")
                return True
        logger.warning(f"Trade not found: {trade_id}")
        return False

    def import_trades(self, rows: Iterable[Mapping]) -> int:
        """
        Normalize and append imported rows.

        Rows whose ``broker_trade_id`` is already in the journal are skipped.

        Returns:
            Number of trades added

        Raises:
            TradeImportError: if any row is invalid (nothing is imported)
        """
        imported = [normalize_trade(row, i) for i, row in enumerate(rows)]

        existing = {t['broker_trade_id'] for t in self.trades if t.get('broker_trade_id')}
        new_trades = [t for t in imported if not t.get('broker_trade_id') or t['broker_trade_id'] not in existing]

        skipped = len(imported) - len(new_trades)
        if skipped:
            logger.info(f"Skipped {skipped} already-imported broker trades")

        self.trades.extend(new_trades)
        logger.info(f"Imported {len(new_trades)} trades")
        return len(new_trades)

    def import_file(self, path) -> int:
        """Import trades from a JSON or CSV file."""
        return self.import_trades(read_trades_file(path))

    def get_trade(self, trade_id: str) -> Optional[Dict]:
        for trade in self.trades:
            if trade.get('id') == trade_id:
                return trade
        return None

    def get_trades(self) -> List[Dict]:
        return self.trades

    def get_closed_trades(self) -> List[Dict]:
        return filter_closed(self.trades)

    def get_open_positions(self) -> List[Dict]:
        return filter_open(self.trades)

    def filtered(
        self,
        instrument: str = FILTER_ALL,
        strategy: str = FILTER_ALL,
        outcome: str = FILTER_ALL,
        date_range: str = FILTER_ALL,
    ) -> List[Dict]:
        """Trades matching the journal filter bar."""
        return filter_trades(
            self.trades,
            instrument=instrument,
            strategy=strategy,
            outcome=outcome,
            date_range=date_range,
        )

    def get_statistics(self, trades: Optional[Iterable[Mapping]] = None) -> Dict:
        """
        Calculate trading statistics.

        Args:
            trades: Subset to analyse; defaults to the whole journal

        Returns:
            Metrics dictionary plus the count of open positions
        """
        trades = self.trades if trades is None else list(trades)
        stats = dict(calculate_metrics(trades, self.sharpe_normalization))
        stats['open_positions'] = len(filter_open(trades))
        return stats

    def export_to_csv(self, filename: str = 'trades_export.csv', output_dir=None) -> Optional[Path]:
        """
        Export trades to CSV.

        Args:
            filename: Output filename
            output_dir: Target directory (defaults to OUTPUT_DIR)

        Returns:
            Path written, or None when there is nothing to export
        """
        if not self.trades:
            logger.warning("No trades to export")
            return None

        trades_df = pd.DataFrame(self.trades)
        if 'tags' in trades_df:
            trades_df['tags'] = trades_df['tags'].apply(
                lambda tags: ', '.join(tags) if isinstance(tags, list) else tags
            )

        output_path = Path(output_dir or _OUTPUT_DIR) / filename
        atomic_csv_write(output_path, trades_df)
        logger.info(f"Trades exported to {output_path}")
        return output_path
