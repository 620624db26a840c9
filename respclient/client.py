"""
respclient Client

Typed command facade over one Connection.

The facade validates each call against the command table, applies the
capability gate, sends the command through the connection, and maps the
reply to the type the command promises.

The server version used by the capability gate is read once when the
client connects (INFO server) and stored on the client. It can also be
passed in explicitly; with no version known, gated commands are sent
as-is and the server decides.

Usage:
    async with await Redis.connect('localhost', 6379) as client:
        await client.set('counter', 1)
        await client.incr('counter', by=5)
        value = await client.get('counter')        # RedisString(b'6')

        async for key in client.scan_iter(match='user:*'):
            ...

        pipe = client.pipeline()
        pipe.incr('a').incr('b')
        results = await pipe.execute()             # [1, 1]
"""

import functools
import logging

from .commands.methods import CommandMethods
from .commands.router import DEFAULT_ROUTER
from .commands.scan import iterate
from .exceptions import RedisError
from .features.pipeline import Pipeline
from .network.connection import open_connection

logger = logging.getLogger(__name__)


class Redis(CommandMethods):
    """
    Async client bound to one connection.

    Command methods return coroutines; await them for the mapped result.
    """

    __slots__ = (
        'connection',       # Connection: Command dispatcher
        'router',           # CommandRouter: Command table (arity, mapper, since)
        '_server_version',  # ServerVersion | None: Version for the capability gate
    )

    def __init__(self, connection, server_version=None, router=None):
        """
        Args:
            connection: Connection - Open command dispatcher
            server_version: ServerVersion | None - Version of the server
                behind the connection, if known
            router: CommandRouter - Command table (default: shared table)
        """
        self.connection = connection
        self.router = router or DEFAULT_ROUTER
        self._server_version = server_version

    @classmethod
    async def connect(cls, host=None, port=None, config=None, detect_version=True):
        """
        Open a connection and build a client over it.

        Args:
            host: str - Server host (default: config 'host')
            port: int - Server port (default: config 'port')
            config: Config - Settings (default: global configuration)
            detect_version: bool - Read the server version with INFO server

        Returns:
            Redis
        """
        connection = await open_connection(host, port, config)
        client = cls(connection)
        if detect_version:
            try:
                info = await client.info('server')
            except RedisError:
                await connection.close()
                raise
            client._server_version = info.server_version
            logger.debug('Server version: %s', client._server_version)
        return client

    @property
    def server_version(self):
        """ServerVersion of the connected server, or None if unknown."""
        return self._server_version

    def _call(self, name, *args, mapper=None):
        return self._execute(name, args, mapper)

    async def _execute(self, name, args, mapper):
        command, default_mapper = self.router.build(name, *args, version=self._server_version)
        reply = await self.connection.execute(*command)
        return (mapper or default_mapper)(reply)

    async def execute_command(self, *args):
        """
        Send a raw command without the command table.

        Returns:
            Reply: The undecoded reply (error replies raise ServerError)
        """
        return await self.connection.execute(*args)

    def pipeline(self, transaction=False):
        """
        Create a pipeline sharing this client's connection.

        Args:
            transaction: bool - Wrap the batch in MULTI/EXEC

        Returns:
            Pipeline
        """
        return Pipeline(self, transaction)

    # =========================================================================
    # Cursor iteration
    # =========================================================================

    async def scan_iter(self, match=None, count=None):
        """Yield every key, driving SCAN until the cursor returns to 0."""
        async for key in iterate(self.scan, match, count):
            yield key

    async def sscan_iter(self, key, match=None, count=None):
        """Yield every member of a set with SSCAN."""
        async for member in iterate(functools.partial(self.sscan, key), match, count):
            yield member

    async def hscan_iter(self, key, match=None, count=None):
        """Yield (field, value) pairs of a hash with HSCAN."""
        async def fetch_page(cursor, match, count):
            cursor, fields = await self.hscan(key, cursor, match, count)
            return cursor, fields.items()

        async for item in iterate(fetch_page, match, count):
            yield item

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def close(self):
        await self.connection.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def __repr__(self):
        return f'Redis(server_version={self._server_version!r})'
