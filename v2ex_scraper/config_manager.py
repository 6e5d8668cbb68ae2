"""
Configuration management for the scraper.
Handles loading and validation of the YAML configuration file.
"""

import copy
import os
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from .exceptions import ConfigurationError

load_dotenv()

DEFAULT_CONFIG: Dict[str, Any] = {
    'client': {
        'base_url': 'https://v2ex.com',
        'user_agent': (
            'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 '
            '(KHTML, like Gecko) Chrome/139.0.0.0 Safari/537.36'
        ),
        'accept_language': 'zh-CN,zh;q=0.9,en;q=0.8',
    },
    'politeness': {
        'timeout': 10,
        'request_delay': 1.0,
        'retry_count': 2,
        'retry_cooldown': 2.0,
        'page_delay': 1.0,
    },
    'batch': {
        'show_progress': True,
    },
    'logging': {
        'level': 'INFO',
        'log_file': None,
    },
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigManager:
    """Manages loading and validation of the configuration file."""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path
        self.config = {}
        self._load_configuration()

    def _load_configuration(self):
        """Load the configuration file over the defaults and validate it."""
        file_config = self._load_yaml_file(self.config_path) if self.config_path else {}
        self.config = _deep_merge(DEFAULT_CONFIG, file_config)
        self._apply_environment()
        self._validate_config()

    def _load_yaml_file(self, file_path: str) -> Dict[str, Any]:
        """Load and parse a YAML file."""
        if not os.path.exists(file_path):
            raise ConfigurationError(f"Configuration file not found: {file_path}")

        try:
            with open(file_path, 'r', encoding='utf-8') as file:
                data = yaml.safe_load(file) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {file_path}: {e}")
        except OSError as e:
            raise ConfigurationError(f"Error reading {file_path}: {e}")

        if not isinstance(data, dict):
            raise ConfigurationError(f"Top level of {file_path} must be a mapping")
        return data

    def _apply_environment(self):
        """Environment variables (or a .env file) override the file values."""
        base_url = os.getenv('V2EX_BASE_URL')
        if base_url:
            self.config['client']['base_url'] = base_url

        timeout = os.getenv('V2EX_TIMEOUT')
        if timeout:
            try:
                self.config['politeness']['timeout'] = float(timeout)
            except ValueError:
                raise ConfigurationError(f"V2EX_TIMEOUT must be a number, got {timeout!r}")

    def _validate_config(self):
        """Validate the configuration schema."""
        for section in ('client', 'politeness', 'batch'):
            if not isinstance(self.config.get(section), dict):
                raise ConfigurationError(f"Missing required section in config: {section}")

        base_url = self.config['client'].get('base_url')
        if not isinstance(base_url, str) or not base_url.startswith(('http://', 'https://')):
            raise ConfigurationError(f"client.base_url must be an http(s) URL, got {base_url!r}")

        politeness = self.config['politeness']
        for key in ('timeout', 'request_delay', 'retry_cooldown', 'page_delay'):
            value = politeness.get(key)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
                raise ConfigurationError(f"politeness.{key} must be a non-negative number, got {value!r}")
        if politeness['timeout'] == 0:
            raise ConfigurationError("politeness.timeout must be greater than zero")

        retry_count = politeness.get('retry_count')
        if isinstance(retry_count, bool) or not isinstance(retry_count, int) or retry_count < 0:
            raise ConfigurationError(f"politeness.retry_count must be a non-negative integer, got {retry_count!r}")

        if not isinstance(self.config['batch'].get('show_progress'), bool):
            raise ConfigurationError("batch.show_progress must be true or false")

    def get_config(self) -> Dict[str, Any]:
        """Get the complete configuration."""
        return copy.deepcopy(self.config)

    def get_client_config(self) -> Dict[str, Any]:
        """Get base URL and request header settings."""
        return self.config['client'].copy()

    def get_politeness_config(self) -> Dict[str, Any]:
        """Get timeout, delay and retry settings."""
        return self.config['politeness'].copy()

    def get_batch_config(self) -> Dict[str, Any]:
        """Get batch run settings."""
        return self.config['batch'].copy()

    def get_logging_config(self) -> Dict[str, Any]:
        """Get logging settings."""
        return self.config.get('logging', {}).copy()
