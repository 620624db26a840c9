"""
respclient Core Module

Wire-level building blocks of the client:

- constants: RESP2 markers, terminators, decoder limits
- protocol: streaming reply parser
- request: command encoder and multi-command request builder
- reply: decoded reply values and the RedisString payload wrapper
"""

# Export public API
from .constants import (
    # RESP2 Protocol markers
    SIMPLE_STRING,
    ERROR,
    INTEGER,
    BULK_STRING,
    ARRAY,
    # Network defaults
    DEFAULT_HOST,
    DEFAULT_PORT,
    READ_SIZE,
    # Protocol terminators
    CRLF,
)

from .protocol import RESPParser
from .request import encode_argument, encode_command, RequestBuilder
from .reply import Reply, RedisString

__all__ = [
    # Constants
    'SIMPLE_STRING',
    'ERROR',
    'INTEGER',
    'BULK_STRING',
    'ARRAY',
    'DEFAULT_HOST',
    'DEFAULT_PORT',
    'READ_SIZE',
    'CRLF',
    # Codec
    'RESPParser',
    'encode_argument',
    'encode_command',
    'RequestBuilder',
    # Values
    'Reply',
    'RedisString',
]
