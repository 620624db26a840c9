"""
respclient Configuration Module

Settings for connections, the reply decoder, and logging. Every component
takes an explicit Config; get_config() returns a process-wide default for
callers that do not pass one.

Usage:
    config = Config({'host': 'cache.local', 'read_timeout': 2.0})
    connection = await open_connection(config=config)
"""

import logging

from .core.constants import (
    DEFAULT_HOST, DEFAULT_PORT, READ_SIZE,
    MAX_ARRAY_DEPTH, MAX_BULK_SIZE, MAX_ARRAY_SIZE, MAX_LINE_SIZE,
)


DEFAULT_CONFIG = {
    # Server address used by open_connection() and Redis.connect()
    'host': DEFAULT_HOST,
    'port': DEFAULT_PORT,

    # Timeouts in seconds (None = wait forever)
    'connect_timeout': 10.0,
    'read_timeout': 30.0,
    'write_timeout': 5.0,

    'read_size': READ_SIZE,   # Bytes requested per transport read

    # Decoder limits; a reply beyond any of them is a protocol error
    'max_bulk_size': MAX_BULK_SIZE,
    'max_array_size': MAX_ARRAY_SIZE,
    'max_array_depth': MAX_ARRAY_DEPTH,
    'max_line_size': MAX_LINE_SIZE,

    # Encoding of str arguments and RedisString.as_string()
    'encoding': 'utf-8',

    'loglevel': 'warning',  # debug, info, warning, error
}

# Keys that must hold a positive number, optionally None
_TIMEOUT_KEYS = ('connect_timeout', 'read_timeout', 'write_timeout')
_SIZE_KEYS = ('read_size', 'max_bulk_size', 'max_array_size', 'max_array_depth', 'max_line_size')


def _validate(key, value):
    if key in _TIMEOUT_KEYS:
        if value is not None and (isinstance(value, bool) or not isinstance(value, (int, float))
                                  or value <= 0):
            raise ValueError(f'{key} must be a positive number or None, got {value!r}')
    elif key in _SIZE_KEYS:
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise ValueError(f'{key} must be a positive integer, got {value!r}')


class Config:
    """
    Client settings over DEFAULT_CONFIG.

    Unknown keys are ignored when constructing and refused by set().
    Timeouts and sizes are checked on the way in.
    """

    __slots__ = ('_config',)

    def __init__(self, initial_config=None):
        """
        Args:
            initial_config: dict - Overrides applied on top of DEFAULT_CONFIG

        Raises:
            ValueError: If a timeout or size override is invalid
        """
        self._config = dict(DEFAULT_CONFIG)
        for key, value in (initial_config or {}).items():
            if key in DEFAULT_CONFIG:
                _validate(key, value)
                self._config[key] = value

    def get(self, key, default=None):
        """Return a setting, or default for an unknown key."""
        return self._config.get(key, default)

    def set(self, key, value):
        """
        Change one setting.

        Returns:
            bool: False if key is not a known setting (nothing changes)

        Raises:
            ValueError: If a timeout or size value is invalid
        """
        if key not in DEFAULT_CONFIG:
            return False
        _validate(key, value)
        self._config[key] = value
        return True

    def get_all(self):
        """Return a dict copy of every setting."""
        return dict(self._config)

    def copy(self, **overrides):
        """Return a new Config with the given keys replaced."""
        values = self.get_all()
        values.update(overrides)
        return Config(values)

    def __repr__(self):
        return f"Config(host={self._config['host']!r}, port={self._config['port']!r})"


def configure_logging(config=None):
    """
    Apply the configured log level to the respclient logger.

    The package only installs a NullHandler; attaching handlers is left to
    the application.

    Args:
        config: Config - Configuration to read 'loglevel' from (default: global)

    Returns:
        logging.Logger: The package logger
    """
    config = config or get_config()
    logger = logging.getLogger('respclient')
    level = str(config.get('loglevel', 'warning')).upper()
    logger.setLevel(getattr(logging, level, logging.WARNING))
    return logger


# Process-wide default, created on first use
_global_config = None


def get_config():
    """Return the process-wide Config, creating it with defaults if needed."""
    global _global_config
    if _global_config is None:
        _global_config = Config()
    return _global_config


def init_config(config_dict=None):
    """
    Replace the process-wide Config.

    Args:
        config_dict: dict - Overrides applied on top of DEFAULT_CONFIG

    Returns:
        Config: The new default configuration
    """
    global _global_config
    _global_config = Config(config_dict)
    return _global_config
