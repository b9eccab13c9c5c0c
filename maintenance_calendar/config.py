"""Configuration management module."""

import copy
import os
import json
from typing import Dict, Optional, Any
from pathlib import Path

from .security import SecureFileHandler, validate_file_path_input
from .error_handler import ValidationError


DEFAULT_DASHBOARD_URL = 'https://phd.aws.amazon.com/phd/home?region=us-east-1#/dashboard/scheduled-changes'


class Config:
    """Configuration management for the application."""

    DEFAULT_CONFIG = {
        'aws': {
            'region': 'us-east-1',
            'profile': None,
            'connect_timeout': 10,
            'read_timeout': 30,
            'max_attempts': 5
        },
        'health': {
            'page_size': 100
        },
        'calendar': {
            'dashboard_url': DEFAULT_DASHBOARD_URL,
            'legacy_same_day_check': False
        }
    }

    def __init__(self, config_file: Optional[str] = None):
        """Initialize configuration.

        Args:
            config_file: Path to configuration file (optional)
        """
        self.config_file = config_file or self._get_default_config_path()
        self.config = copy.deepcopy(self.DEFAULT_CONFIG)
        self.load_config()

    def _get_default_config_path(self) -> str:
        """Get default configuration file path.

        Returns:
            Default config file path
        """
        return str(Path.home() / '.aws-health-calendar' / 'config.json')

    def load_config(self):
        """Load configuration from file and environment variables."""
        if os.path.exists(self.config_file):
            try:
                validated_path = validate_file_path_input(self.config_file, require_exists=True)
                content = SecureFileHandler.read_secure_file(validated_path)
                file_config = json.loads(content)
                if not isinstance(file_config, dict):
                    raise ValidationError("Configuration root must be a JSON object")
                self._merge_config(file_config)
            except (json.JSONDecodeError, IOError, ValidationError) as e:
                print(f"Warning: Failed to load config file {self.config_file}: {e}")

        # Environment variables override the file
        env_config = {}
        if os.getenv('AWS_PROFILE'):
            env_config['aws'] = {'profile': os.getenv('AWS_PROFILE')}
        region = os.getenv('AWS_DEFAULT_REGION') or os.getenv('AWS_REGION')
        if region:
            env_config.setdefault('aws', {})['region'] = region

        if env_config:
            self._merge_config(env_config)

    def _merge_config(self, new_config: Dict[str, Any]):
        """Merge new configuration with existing config.

        Args:
            new_config: New configuration to merge
        """
        def merge_dict(base: Dict, update: Dict):
            for key, value in update.items():
                if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                    merge_dict(base[key], value)
                else:
                    base[key] = value

        merge_dict(self.config, new_config)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value by key path.

        Args:
            key_path: Dot-separated key path (e.g., 'aws.region')
            default: Default value if key not found

        Returns:
            Configuration value
        """
        keys = key_path.split('.')
        value = self.config

        try:
            for key in keys:
                value = value[key]
            return value
        except (KeyError, TypeError):
            return default

    def set(self, key_path: str, value: Any):
        """Set configuration value by key path.

        Args:
            key_path: Dot-separated key path
            value: Value to set
        """
        keys = key_path.split('.')
        config = self.config

        for key in keys[:-1]:
            if key not in config:
                config[key] = {}
            config = config[key]

        config[keys[-1]] = value

    def get_aws_config(self) -> Dict[str, Any]:
        """Get AWS configuration.

        Returns:
            AWS configuration dictionary
        """
        return self.config.get('aws', {})

    def get_calendar_config(self) -> Dict[str, Any]:
        """Get calendar configuration.

        Returns:
            Calendar configuration dictionary
        """
        return self.config.get('calendar', {})
