#!/usr/bin/env python3
"""
Configuration management for Quay Scanner
Handles CLI arguments, environment variables and the YAML config file, and provides a unified config object
"""

import argparse
import logging
import os
from pathlib import Path
from typing import Dict, Any, Optional

import yaml

from .image_ref import DEFAULT_REGISTRY_HOST
from .quay.client import DEFAULT_API_BASE_URL, DEFAULT_USER_AGENT
from .scanner.pool import DEFAULT_WORKERS
from .validator import SchemaValidator, CONFIG_FILE_SCHEMA

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = 'config.yaml'
DEFAULT_TIMEOUT_SECONDS = 15
OUTPUT_FORMATS = ('human', 'json')

# Keys read from the `quay` section of the config file
QUAY_SETTINGS = ('api_base_url', 'timeout_seconds', 'user_agent', 'registry_host')


class ConfigError(Exception):
    """Raised when configuration cannot be loaded or is invalid."""


def default_config() -> Dict[str, Any]:
    """Return a configuration dictionary populated with default values."""
    return {
        'api_base_url': DEFAULT_API_BASE_URL,
        'timeout_seconds': DEFAULT_TIMEOUT_SECONDS,
        'user_agent': DEFAULT_USER_AGENT,
        'registry_host': DEFAULT_REGISTRY_HOST,
        'token': '',
        'workers': DEFAULT_WORKERS,
        'output_format': 'human',
        'verbose': False,
    }


class Config:
    """Configuration object that provides unified access to all settings"""

    def __init__(self, config_dict: Dict[str, Any] | None = None, yaml_config_path: str | None = None):
        """Initialize configuration from dictionary, YAML file, or environment

        Args:
            config_dict: Optional configuration dictionary (takes precedence)
            yaml_config_path: Optional path to YAML configuration file

        Raises:
            ConfigError: If the YAML file exists but cannot be read or is invalid
        """
        if config_dict is not None:
            self._config = config_dict
        elif yaml_config_path is not None:
            self._config = merge_yaml_and_env_config(load_config_from_yaml(yaml_config_path))
        else:
            self._config = merge_yaml_and_env_config()

        logger.debug("Final Config object created with key values:")
        logger.debug(f"  api_base_url: {self.api_base_url}")
        logger.debug(f"  timeout_seconds: {self.timeout}")
        logger.debug(f"  registry_host: {self.registry_host}")
        logger.debug(f"  workers: {self.workers}")
        logger.debug(f"  token set: {bool(self.token)}")

    def get(self, key: str, default=None):
        """Get configuration value"""
        return self._config.get(key, default)

    def set(self, key: str, value: Any):
        """Set configuration value"""
        self._config[key] = value

    @property
    def api_base_url(self) -> str:
        return str(self.get('api_base_url') or DEFAULT_API_BASE_URL)

    @property
    def timeout(self) -> float:
        """Per-request timeout in seconds"""
        value = self.get('timeout_seconds', DEFAULT_TIMEOUT_SECONDS)
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
            return DEFAULT_TIMEOUT_SECONDS
        return value

    @property
    def user_agent(self) -> str:
        return str(self.get('user_agent') or '')

    @property
    def token(self) -> str:
        return str(self.get('token') or '')

    @property
    def registry_host(self) -> str:
        return str(self.get('registry_host') or DEFAULT_REGISTRY_HOST)

    @property
    def workers(self) -> int:
        return self.get('workers', DEFAULT_WORKERS)

    @property
    def output_format(self) -> str:
        return str(self.get('output_format') or 'human')

    @property
    def verbose(self) -> bool:
        return bool(self.get('verbose', False))


# Centralized environment variable getters
# Other modules should use these instead of calling os.getenv directly

def get_env_with_fallbacks(*env_vars: str, default: str = '') -> str:
    """Get environment variable value with multiple fallback options.

    Args:
        *env_vars: Variable number of environment variable names to check (in priority order)
        default: Default value if none of the env vars are set

    Returns:
        First non-empty environment variable value found, or default
    """
    for env_var in env_vars:
        value = os.getenv(env_var)
        if value:
            return value
    return default


def get_quay_token() -> str:
    """Get Quay API bearer token from environment variables."""
    return get_env_with_fallbacks('QUAY_TOKEN', 'INPUT_QUAY_TOKEN')


def get_quay_api_base_url() -> str:
    """Get Quay API base URL from environment variables."""
    return get_env_with_fallbacks('QUAY_API_BASE_URL', 'INPUT_QUAY_API_BASE_URL')


def get_quay_user_agent() -> str:
    """Get the User-Agent override from environment variables."""
    return get_env_with_fallbacks('QUAY_USER_AGENT', 'INPUT_QUAY_USER_AGENT')


def get_quay_timeout_seconds() -> str:
    """Get request timeout (seconds) from environment variables."""
    return get_env_with_fallbacks('QUAY_TIMEOUT_SECONDS', 'INPUT_QUAY_TIMEOUT_SECONDS')


def get_scanner_workers() -> str:
    """Get worker count from environment variables."""
    return get_env_with_fallbacks('QUAY_SCANNER_WORKERS', 'INPUT_QUAY_SCANNER_WORKERS')


def _parse_int(name: str, raw: str) -> Optional[int]:
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring %s: expected an integer, got '%s'", name, raw)
        return None


def load_config_from_yaml(yaml_path: str) -> Dict[str, Any]:
    """Load the `quay` section of a YAML configuration file

    A missing file is not an error: an empty dictionary is returned so that
    defaults apply.

    Args:
        yaml_path: Path to the YAML configuration file

    Returns:
        Dictionary of the settings found in the `quay` section

    Raises:
        ConfigError: If the file cannot be read, is malformed, or fails schema validation
    """
    path = Path(yaml_path).expanduser().resolve()
    if not path.exists():
        logger.info("Config file '%s' not found, using default settings.", path)
        return {}

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"failed to read config file '{path}': {e}")
    except yaml.YAMLError as e:
        raise ConfigError(f"failed to parse YAML config file '{path}': {e}")

    if data is None:
        return {}

    errors = SchemaValidator(CONFIG_FILE_SCHEMA).validate_data(data)
    if errors:
        raise ConfigError(f"invalid config file '{path}': {'; '.join(errors)}")

    quay_section = data.get('quay') or {}
    config = {k: v for k, v in quay_section.items() if k in QUAY_SETTINGS and v is not None}
    logger.info("Loaded configuration from '%s'", path)
    return config


def load_config_from_env() -> Dict[str, Any]:
    """Load configuration overrides from environment variables"""
    config: Dict[str, Any] = {}

    token = get_quay_token()
    if token:
        config['token'] = token

    base_url = get_quay_api_base_url()
    if base_url:
        config['api_base_url'] = base_url

    user_agent = get_quay_user_agent()
    if user_agent:
        config['user_agent'] = user_agent

    timeout = get_quay_timeout_seconds()
    if timeout:
        parsed = _parse_int('QUAY_TIMEOUT_SECONDS', timeout)
        if parsed is not None:
            config['timeout_seconds'] = parsed

    workers = get_scanner_workers()
    if workers:
        parsed = _parse_int('QUAY_SCANNER_WORKERS', workers)
        if parsed is not None:
            config['workers'] = parsed

    return config


def _apply_fallbacks(config: Dict[str, Any]) -> Dict[str, Any]:
    """Replace unusable values with defaults, warning about each replacement"""
    defaults = default_config()

    if not config.get('api_base_url'):
        logger.warning("quay.api_base_url is empty, using default: %s", defaults['api_base_url'])
        config['api_base_url'] = defaults['api_base_url']
    elif not str(config['api_base_url']).startswith(('http://', 'https://')):
        logger.warning("quay.api_base_url ('%s') might be invalid, attempting to use anyway.", config['api_base_url'])

    timeout = config.get('timeout_seconds')
    if isinstance(timeout, bool) or not isinstance(timeout, int) or timeout <= 0:
        logger.warning("quay.timeout_seconds must be positive, using default: %d", defaults['timeout_seconds'])
        config['timeout_seconds'] = defaults['timeout_seconds']

    if not config.get('registry_host'):
        config['registry_host'] = defaults['registry_host']

    return config


def merge_yaml_and_env_config(yaml_config: Dict[str, Any] | None = None) -> Dict[str, Any]:
    """Merge YAML configuration with environment variables

    Priority order (highest to lowest):
    1. CLI options (handled separately via argparse, highest priority)
    2. Environment variables
    3. YAML config file
    4. Built-in defaults

    Args:
        yaml_config: Optional dictionary from the YAML config file

    Returns:
        Merged configuration dictionary
    """
    config = default_config()
    if yaml_config:
        config.update(yaml_config)
    config.update(load_config_from_env())
    return _apply_fallbacks(config)


def parse_cli_args():
    """Build the command line argument parser"""
    parser = argparse.ArgumentParser(
        prog='quay-scanner',
        description='Queries Quay for vulnerability information for one or more images.',
        epilog=(
            'Input file format (JSON): {"images": ["quay.io/ns/repo:tag", ...]}. '
            'Input file format (YAML): a top-level "images" list. '
            'Authentication uses the QUAY_TOKEN environment variable or --token.'
        ),
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument('--image', type=str, help='Single Quay image reference, e.g. quay.io/ns/repo:tag')
    source.add_argument('--file', type=str, dest='input_file',
                        help='Path to a JSON or YAML file containing a list of image references')
    parser.add_argument('--format', type=str, dest='output_format', choices=OUTPUT_FORMATS, default='human',
                        help="Output format: 'json' or 'human' (default: human)")
    parser.add_argument('--verbose', '-v', action='store_true', help='Verbose logging')
    parser.add_argument('--token', type=str, help='Quay API bearer token (overrides QUAY_TOKEN env var)')
    parser.add_argument('--workers', type=int, default=None,
                        help=f'Number of concurrent workers (default: {DEFAULT_WORKERS})')
    parser.add_argument('--config', type=str, default=DEFAULT_CONFIG_PATH,
                        help=f'Path to YAML configuration file (default: {DEFAULT_CONFIG_PATH})')
    parser.add_argument('--output', type=str, help='Write the report to this file instead of stdout')
    return parser


def create_config_from_args(args) -> Config:
    """Create configuration object from parsed CLI arguments

    Raises:
        ConfigError: If the config file is invalid or the worker count is not positive
    """
    config_dict = merge_yaml_and_env_config(load_config_from_yaml(getattr(args, 'config', None) or DEFAULT_CONFIG_PATH))

    # Override config with CLI args
    if getattr(args, 'token', None):
        config_dict['token'] = args.token
    if getattr(args, 'workers', None) is not None:
        config_dict['workers'] = args.workers
    if getattr(args, 'output_format', None):
        config_dict['output_format'] = args.output_format
    config_dict['verbose'] = bool(getattr(args, 'verbose', False))
    config_dict['image'] = getattr(args, 'image', None)
    config_dict['input_file'] = getattr(args, 'input_file', None)
    config_dict['output'] = getattr(args, 'output', None)

    workers = config_dict.get('workers')
    if isinstance(workers, bool) or not isinstance(workers, int) or workers <= 0:
        raise ConfigError("--workers must be a positive number")
    if config_dict['output_format'] not in OUTPUT_FORMATS:
        raise ConfigError(
            f"invalid --format value '{config_dict['output_format']}'. Must be one of: {', '.join(OUTPUT_FORMATS)}"
        )

    return Config(config_dict)
