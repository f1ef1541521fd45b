"""Custom exception hierarchy for the trade journal."""


class JournalError(Exception):
    """Base exception for all trade journal errors."""


class TradeImportError(JournalError):
    """Raised when an import file or one of its rows cannot be turned into trades."""


class ConfigError(JournalError, ValueError):
    """Raised on configuration errors."""


class ReportError(JournalError):
    """Raised when a report cannot be written."""
