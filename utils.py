"""
Utility functions for the trade journal.
"""

import logging
import logging.handlers
from pathlib import Path
from typing import Dict
import yaml
import colorlog

from analytics.cumulative import CumulativePolicy
from shared.constants import PERIOD_DAYS, FILTER_ALL, SHARPE_NORMALIZATIONS
from shared.exceptions import ConfigError
from shared.types import AppConfig


def _resolve_env_vars(obj):
    """Recursively resolve ${ENV_VAR} references in config values."""
    import os
    import re
    if isinstance(obj, str):
        def replacer(m):
            return os.environ.get(m.group(1), m.group(0))
        return re.sub(r'\$\{(\w+)\}', replacer, obj)
    elif isinstance(obj, dict):
        return {k: _resolve_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_resolve_env_vars(i) for i in obj]
    return obj


def load_config(config_file: str = 'config.yaml') -> Dict:
    """
    Load configuration from YAML file.
    Supports ${ENV_VAR} substitution in string values.

    Args:
        config_file: Path to config file

    Returns:
        Configuration dictionary
    """
    from dotenv import load_dotenv
    load_dotenv()

    config_path = Path(config_file)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_file}")

    with open(config_path, 'r') as f:
        config = yaml.safe_load(f) or {}

    return _resolve_env_vars(config)


def setup_logging(config: Dict):
    """
    Setup logging configuration.

    Args:
        config: Configuration dictionary
    """
    log_config = config['logging']

    # Create logs directory
    log_file = Path(log_config['file'])
    log_file.parent.mkdir(parents=True, exist_ok=True)

    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_formatter = colorlog.ColoredFormatter(
        '%(log_color)s%(asctime)s - %(name)s - %(levelname)s - %(message)s%(reset)s',
        datefmt='%H:%M:%S',
        log_colors={
            'DEBUG': 'cyan',
            'INFO': 'green',
            'WARNING': 'yellow',
            'ERROR': 'red',
            'CRITICAL': 'red,bg_white',
        }
    )

    handlers = []

    # File handler (rotating)
    file_handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=10*1024*1024,  # 10 MB
        backupCount=5
    )
    file_handler.setFormatter(file_formatter)
    handlers.append(file_handler)

    if log_config.get('console', True):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    log_level = getattr(logging, log_config.get('level', 'INFO'))

    logging.basicConfig(
        level=log_level,
        handlers=handlers
    )


def validate_config(config: AppConfig) -> None:
    """
    Validate configuration.  Raises ``ConfigError`` on invalid input.

    Args:
        config: Configuration dictionary
    """
    required_sections = ['journal', 'analytics', 'logging']

    for section in required_sections:
        if section not in config:
            raise ConfigError(f"Missing required config section: {section}")

    analytics = config['analytics'] or {}

    normalization = analytics.get('sharpe_normalization', SHARPE_NORMALIZATIONS[0])
    if normalization not in SHARPE_NORMALIZATIONS:
        raise ConfigError(
            f"sharpe_normalization must be one of {', '.join(SHARPE_NORMALIZATIONS)}"
        )

    policies = [p.value for p in CumulativePolicy]
    policy = analytics.get('cumulative_policy', CumulativePolicy.ALL_DATES.value)
    if policy not in policies:
        raise ConfigError(f"cumulative_policy must be one of {', '.join(policies)}")

    ranges = [FILTER_ALL] + list(PERIOD_DAYS)
    default_range = analytics.get('default_range', FILTER_ALL)
    if default_range not in ranges:
        raise ConfigError(f"default_range must be one of {', '.join(ranges)}")

    top_n = analytics.get('top_n', 1)
    if not isinstance(top_n, int) or top_n <= 0:
        raise ConfigError("top_n must be a positive integer")

    if 'level' in config['logging'] and not isinstance(
            getattr(logging, str(config['logging']['level']), None), int):
        raise ConfigError(f"Unknown logging level: {config['logging']['level']}")
