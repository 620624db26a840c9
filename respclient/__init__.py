"""
respclient - An asyncio client core for the Redis Serialization Protocol.

respclient encodes commands as RESP2 arrays of bulk strings, decodes the
server's replies incrementally from an ordered byte stream, and maps each
reply to the typed result its command promises.

Components:
- core: wire codec and reply values
- network: command dispatcher over an asyncio transport
- commands: typed mappers, command table, BITFIELD/SORT/SCAN builders
- features: server info, capability gate, pipelines and transactions

Usage:
    import asyncio
    from respclient import Redis

    async def main():
        async with await Redis.connect('localhost', 6379) as client:
            await client.set('greeting', 'hello')
            print(await client.get('greeting'))

    asyncio.run(main())
"""

import logging

from .client import Redis
from .commands import (
    OverflowMode, Get, Set, IncrBy, Overflow, BitFieldOperation,
    NOSORT, SortOptions, hash_field,
)
from .config import Config, get_config, init_config, configure_logging
from .core import Reply, RedisString
from .exceptions import (
    RedisError,
    ProtocolError,
    TransportError,
    ConnectionFaultedError,
    DataError,
    WrongArityError,
    CommandNotSupportedError,
    MappingError,
    ServerError,
    WrongTypeError,
    ExecAbortError,
    WatchError,
)
from .features import ServerVersion, ServerInfo
from .features.pipeline import Pipeline
from .network import Connection, StreamTransport, open_connection

__version__ = '1.0.0'

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    '__version__',
    # Client
    'Redis',
    'Pipeline',
    'Connection',
    'StreamTransport',
    'open_connection',
    # Values
    'Reply',
    'RedisString',
    'ServerVersion',
    'ServerInfo',
    # Builders
    'OverflowMode',
    'Get',
    'Set',
    'IncrBy',
    'Overflow',
    'BitFieldOperation',
    'NOSORT',
    'SortOptions',
    'hash_field',
    # Configuration
    'Config',
    'get_config',
    'init_config',
    'configure_logging',
    # Errors
    'RedisError',
    'ProtocolError',
    'TransportError',
    'ConnectionFaultedError',
    'DataError',
    'WrongArityError',
    'CommandNotSupportedError',
    'MappingError',
    'ServerError',
    'WrongTypeError',
    'ExecAbortError',
    'WatchError',
]
