"""
Unit tests for Configuration management.
"""

import pytest
from unittest.mock import patch
import json
from pathlib import Path

from maintenance_calendar.config import Config, DEFAULT_DASHBOARD_URL


class TestConfig:
    """Test cases for Config class."""

    @pytest.fixture
    def config_file(self, temp_dir):
        return temp_dir / 'config.json'

    def test_init_with_defaults(self):
        """Test initialization with default values."""
        config = Config()

        assert config.get('aws.region') == 'us-east-1'
        assert config.get('aws.profile') is None
        assert config.get('aws.max_attempts') == 5
        assert config.get('health.page_size') == 100
        assert config.get('calendar.dashboard_url') == DEFAULT_DASHBOARD_URL
        assert config.get('calendar.legacy_same_day_check') is False

    def test_default_config_path(self, temp_dir):
        config = Config()
        assert Path(config.config_file) == temp_dir / '.aws-health-calendar' / 'config.json'

    def test_defaults_not_shared_between_instances(self):
        first = Config()
        first.set('aws.region', 'eu-west-1')

        assert Config().get('aws.region') == 'us-east-1'
        assert Config.DEFAULT_CONFIG['aws']['region'] == 'us-east-1'

    def test_load_config_from_file(self, config_file):
        """Test loading configuration from file successfully."""
        config_file.write_text(json.dumps({
            'aws': {'region': 'eu-west-1', 'profile': 'production'},
            'calendar': {'legacy_same_day_check': True}
        }), encoding='utf-8')

        config = Config(config_file=str(config_file))

        assert config.get('aws.region') == 'eu-west-1'
        assert config.get('aws.profile') == 'production'
        assert config.get('calendar.legacy_same_day_check') is True
        # Untouched keys keep their defaults
        assert config.get('aws.read_timeout') == 30
        assert config.get('calendar.dashboard_url') == DEFAULT_DASHBOARD_URL

    def test_load_config_file_not_found(self, config_file):
        config = Config(config_file=str(config_file))
        assert config.get('aws.region') == 'us-east-1'

    def test_load_config_invalid_json(self, config_file):
        """Test loading configuration from invalid JSON file."""
        config_file.write_text('{ invalid json }', encoding='utf-8')

        with patch('builtins.print') as mock_print:
            config = Config(config_file=str(config_file))

        mock_print.assert_called_once()
        assert 'Failed to load config file' in mock_print.call_args[0][0]
        assert config.get('aws.region') == 'us-east-1'

    def test_load_config_non_object_root(self, config_file):
        config_file.write_text('["not", "an", "object"]', encoding='utf-8')

        with patch('builtins.print') as mock_print:
            config = Config(config_file=str(config_file))

        mock_print.assert_called_once()
        assert config.get('health.page_size') == 100

    def test_environment_overrides_file(self, config_file, monkeypatch):
        config_file.write_text(json.dumps({'aws': {'region': 'eu-west-1', 'profile': 'file'}}), encoding='utf-8')
        monkeypatch.setenv('AWS_PROFILE', 'env-profile')
        monkeypatch.setenv('AWS_REGION', 'ap-southeast-2')

        config = Config(config_file=str(config_file))

        assert config.get('aws.profile') == 'env-profile'
        assert config.get('aws.region') == 'ap-southeast-2'

    def test_default_region_env_takes_precedence(self, monkeypatch):
        monkeypatch.setenv('AWS_DEFAULT_REGION', 'eu-central-1')
        monkeypatch.setenv('AWS_REGION', 'ap-southeast-2')

        assert Config().get('aws.region') == 'eu-central-1'

    def test_get_missing_key_returns_default(self):
        config = Config()

        assert config.get('aws.missing') is None
        assert config.get('missing.key', 'fallback') == 'fallback'
        assert config.get('aws.region.deeper', 'fallback') == 'fallback'

    def test_set_creates_nested_keys(self):
        config = Config()
        config.set('new.nested.key', 'value')

        assert config.get('new.nested.key') == 'value'

    def test_get_aws_config(self):
        aws_config = Config().get_aws_config()

        assert aws_config['region'] == 'us-east-1'
        assert aws_config['connect_timeout'] == 10

    def test_get_calendar_config(self):
        calendar_config = Config().get_calendar_config()

        assert calendar_config == {
            'dashboard_url': DEFAULT_DASHBOARD_URL,
            'legacy_same_day_check': False
        }
