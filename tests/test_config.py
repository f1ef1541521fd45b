"""Tests for configuration loading and validation."""
import logging
import logging.handlers
import os
import pytest
import yaml
from unittest.mock import patch

from shared.exceptions import ConfigError
from utils import load_config, setup_logging, validate_config


class TestLoadConfig:

    def test_load_config_success(self, tmp_path):
        """load_config should return a dict from a valid YAML file."""
        cfg = {
            'journal': {'trades_file': 'data/trades.json'},
            'analytics': {'top_n': 3},
        }
        cfg_file = tmp_path / "config.yaml"
        cfg_file.write_text(yaml.dump(cfg))

        with patch('dotenv.load_dotenv'):
            result = load_config(str(cfg_file))

        assert result['journal']['trades_file'] == 'data/trades.json'
        assert result['analytics']['top_n'] == 3

    def test_load_config_missing_file(self):
        """load_config should raise FileNotFoundError for a missing path."""
        with patch('dotenv.load_dotenv'):
            with pytest.raises(FileNotFoundError):
                load_config('/nonexistent/path/config.yaml')

    def test_empty_file_is_empty_dict(self, tmp_path):
        cfg_file = tmp_path / "config.yaml"
        cfg_file.write_text("")

        with patch('dotenv.load_dotenv'):
            assert load_config(str(cfg_file)) == {}

    def test_env_var_resolution(self, tmp_path):
        """${ENV_VAR} references in config strings should be resolved."""
        cfg = {
            'journal': {'trades_file': '${MY_TEST_JOURNAL_DIR}/trades.csv'},
            'reports': {'report_dir': '${UNSET_TEST_VAR_XYZ}'},
        }
        cfg_file = tmp_path / "config.yaml"
        cfg_file.write_text(yaml.dump(cfg))

        with patch('dotenv.load_dotenv'):
            with patch.dict(os.environ, {'MY_TEST_JOURNAL_DIR': '/srv/journal'}):
                result = load_config(str(cfg_file))

        assert result['journal']['trades_file'] == '/srv/journal/trades.csv'
        # unknown variables are left as written
        assert result['reports']['report_dir'] == '${UNSET_TEST_VAR_XYZ}'


class TestValidateConfig:

    def test_validate_config_valid(self, sample_config):
        """A complete, well-formed config should pass validation (no exception)."""
        validate_config(sample_config)  # Should not raise

    def test_validate_config_missing_section(self, sample_config):
        """Removing a required section should raise ConfigError."""
        del sample_config['analytics']
        with pytest.raises(ConfigError, match="Missing required config section"):
            validate_config(sample_config)

    def test_config_error_is_value_error(self, sample_config):
        del sample_config['journal']
        with pytest.raises(ValueError):
            validate_config(sample_config)

    def test_bad_sharpe_normalization(self, sample_config):
        sample_config['analytics']['sharpe_normalization'] = 'annualized'
        with pytest.raises(ConfigError, match="sharpe_normalization"):
            validate_config(sample_config)

    def test_bad_cumulative_policy(self, sample_config):
        sample_config['analytics']['cumulative_policy'] = 'weekly'
        with pytest.raises(ConfigError, match="cumulative_policy"):
            validate_config(sample_config)

    def test_bad_default_range(self, sample_config):
        sample_config['analytics']['default_range'] = '2w'
        with pytest.raises(ConfigError, match="default_range"):
            validate_config(sample_config)

    @pytest.mark.parametrize("top_n", [0, -1, 'five'])
    def test_bad_top_n(self, sample_config, top_n):
        sample_config['analytics']['top_n'] = top_n
        with pytest.raises(ConfigError, match="top_n"):
            validate_config(sample_config)

    def test_bad_log_level(self, sample_config):
        sample_config['logging']['level'] = 'LOUD'
        with pytest.raises(ConfigError, match="logging level"):
            validate_config(sample_config)

    def test_defaults_are_valid(self, sample_config):
        sample_config['analytics'] = {}
        validate_config(sample_config)


class TestSetupLogging:

    def test_creates_log_directory(self, sample_config, tmp_path):
        log_file = tmp_path / 'logs' / 'journal.log'
        sample_config['logging']['file'] = str(log_file)

        root = logging.getLogger()
        before = list(root.handlers)
        try:
            with patch('logging.basicConfig') as basic_config:
                setup_logging(sample_config)
            assert log_file.parent.is_dir()
            handlers = basic_config.call_args.kwargs['handlers']
            # console disabled in the sample config
            assert len(handlers) == 1
            assert isinstance(handlers[0], logging.handlers.RotatingFileHandler)
            for handler in handlers:
                handler.close()
        finally:
            root.handlers = before
