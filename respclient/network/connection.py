"""
respclient Async Connection

Implements the command dispatcher: encodes commands, writes them to a
transport, and reads back exactly one reply per command in request order.

Transport contract (anything with these coroutines works):
    read(n)      -> bytes, at most n; b'' means end of stream
    write(data)  -> None once the bytes are handed to the OS
    close()      -> None, best effort

StreamTransport adapts an asyncio StreamReader/StreamWriter pair and
open_connection() builds one over TCP.

Failure model:
- ServerError: server answered '-'; the connection stays usable.
- ProtocolError / TransportError: the connection is faulted and closed;
  later commands raise ConnectionFaultedError without touching the wire.
"""

import asyncio
import logging

from ..config import get_config
from ..core.protocol import RESPParser
from ..core.request import RequestBuilder
from ..exceptions import (
    ServerError, ProtocolError, TransportError, ConnectionFaultedError,
)

logger = logging.getLogger(__name__)


class StreamTransport:
    """
    Transport over an asyncio stream pair with per-operation timeouts.
    """

    __slots__ = (
        'reader',           # StreamReader: Async reader for socket
        'writer',           # StreamWriter: Async writer for socket
        'read_timeout',     # float | None: Seconds allowed per read
        'write_timeout',    # float | None: Seconds allowed per drain
        '_closed',          # bool: Connection closed flag
    )

    def __init__(self, reader, writer, read_timeout=None, write_timeout=None):
        """
        Initialize stream transport.

        Args:
            reader: asyncio.StreamReader for reading from socket
            writer: asyncio.StreamWriter for writing to socket
            read_timeout: float - Seconds to wait for data (None = forever)
            write_timeout: float - Seconds to wait for drain (None = forever)
        """
        self.reader = reader
        self.writer = writer
        self.read_timeout = read_timeout
        self.write_timeout = write_timeout
        self._closed = False

    async def read(self, n):
        """
        Read up to n bytes.

        Raises:
            TransportError: On timeout or socket error
        """
        try:
            return await asyncio.wait_for(self.reader.read(n), timeout=self.read_timeout)
        except asyncio.TimeoutError:
            raise TransportError(f'Read timed out after {self.read_timeout}s') from None
        except OSError as e:
            raise TransportError(f'Read failed: {e}') from e

    async def write(self, data):
        """
        Write data and wait until the stream buffer drains.

        Raises:
            TransportError: On timeout or socket error
        """
        try:
            self.writer.write(data)
            await asyncio.wait_for(self.writer.drain(), timeout=self.write_timeout)
        except asyncio.TimeoutError:
            raise TransportError(f'Write timed out after {self.write_timeout}s') from None
        except OSError as e:
            raise TransportError(f'Write failed: {e}') from e

    async def close(self):
        """
        Close the stream pair.

        Errors raised while closing are ignored: the socket may already be
        gone when a fault triggers the close.
        """
        if self._closed:
            return
        self._closed = True
        try:
            self.writer.close()
            await self.writer.wait_closed()
        except (OSError, RuntimeError):
            pass


class Connection:
    """
    Command dispatcher for one ordered byte stream.

    Replies are consumed strictly in request order. An internal lock keeps
    each command (or pipelined batch) from interleaving with another task
    sharing the connection.

    Usage:
        conn = await open_connection('localhost', 6379)
        reply = await conn.execute('GET', 'key')
        replies = await conn.pipeline([('SET', 'a', 1), ('INCR', 'a')])
        await conn.close()
    """

    __slots__ = (
        'transport',        # Transport: Byte stream collaborator
        'parser',           # RESPParser: Reply decoder with buffered input
        'config',           # Config: Settings used by this connection
        '_lock',            # asyncio.Lock: Serializes request/reply exchanges
        '_encoding',        # str: Encoding for str arguments
        '_read_size',       # int: Bytes requested per transport read
        '_faulted',         # str | None: Reason the connection became unusable
        '_closed',          # bool: close() was called
    )

    def __init__(self, transport, config=None):
        """
        Initialize connection over an open transport.

        Args:
            transport: Object providing async read(n), write(data), close()
            config: Config - Settings (default: global configuration)
        """
        self.config = config or get_config()
        self.transport = transport
        self.parser = RESPParser.from_config(self.config)
        self._lock = asyncio.Lock()
        self._encoding = self.config.get('encoding', 'utf-8')
        self._read_size = self.config.get('read_size')
        self._faulted = None
        self._closed = False

    @property
    def is_usable(self):
        """True until the connection is closed or faulted."""
        return not self._closed and self._faulted is None

    @property
    def fault_reason(self):
        """Description of the error that faulted the connection, or None."""
        return self._faulted

    async def execute(self, *args):
        """
        Send one command and read its reply.

        Args:
            *args: Command name followed by its arguments

        Returns:
            Reply: The decoded reply (never an ERROR reply)

        Raises:
            DataError: If an argument cannot be encoded (nothing is sent)
            ServerError: If the server replied with an error
            ProtocolError: If the reply is malformed (connection faulted)
            TransportError: If the transport failed (connection faulted)
        """
        self._check_usable()
        builder = RequestBuilder(encoding=self._encoding)
        builder.add_command(*args)
        payload = builder.get_request()

        async with self._lock:
            self._check_usable()
            replies = await self._exchange(payload, 1)

        reply = replies[0]
        if reply.is_error:
            raise ServerError.from_message(reply.value)
        return reply

    async def pipeline(self, commands, raise_on_error=True):
        """
        Send several commands in one write, then read their replies.

        Args:
            commands: Iterable of argument sequences, one per command
            raise_on_error: bool - Raise the first ServerError after every
                reply has been read (default True)

        Returns:
            list: One entry per command, in order. Each is a Reply, or a
                ServerError instance when raise_on_error is False and the
                server rejected that command.

        Raises:
            DataError: If any argument cannot be encoded (nothing is sent)
            ServerError: First server error, when raise_on_error is True
            ProtocolError / TransportError: Connection faulted
        """
        self._check_usable()
        builder = RequestBuilder(encoding=self._encoding)
        for command in commands:
            builder.add_command(*command)
        count = builder.command_count
        if count == 0:
            return []
        payload = builder.get_request()

        async with self._lock:
            self._check_usable()
            replies = await self._exchange(payload, count)

        logger.debug('Pipeline of %d commands completed', count)

        results = []
        first_error = None
        for reply in replies:
            if reply.is_error:
                error = ServerError.from_message(reply.value)
                if first_error is None:
                    first_error = error
                results.append(error)
            else:
                results.append(reply)

        if raise_on_error and first_error is not None:
            raise first_error
        return results

    async def close(self):
        """
        Close the connection and its transport.

        Safe to call more than once.
        """
        if self._closed:
            return
        self._closed = True
        await self.transport.close()
        self.parser.reset()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    # =========================================================================
    # Internal I/O
    # =========================================================================

    def _check_usable(self):
        if self._closed:
            raise ConnectionFaultedError('Connection is closed')
        if self._faulted is not None:
            raise ConnectionFaultedError(f'Connection is faulted: {self._faulted}')

    async def _exchange(self, payload, count):
        """Write payload and read exactly count replies. Caller holds the lock."""
        try:
            logger.debug('Writing %d bytes', len(payload))
            await self.transport.write(payload)
            return [await self._read_reply() for _ in range(count)]
        except (ProtocolError, TransportError) as e:
            await self._fault(str(e))
            raise
        except OSError as e:
            await self._fault(f'transport error: {e!r}')
            raise TransportError(f'Transport failed: {e!r}') from e
        except asyncio.CancelledError:
            # Replies still owed would be attributed to the next command
            await self._fault('cancelled while awaiting a reply')
            raise

    async def _read_reply(self):
        """Read transport data until the parser yields one reply."""
        parser = self.parser
        while True:
            reply = parser.parse()
            if reply is not None:
                return reply
            data = await self.transport.read(max(self._read_size, parser.bytes_needed))
            if not data:
                raise TransportError('Connection closed by server while a reply was pending')
            logger.debug('Read %d bytes', len(data))
            parser.feed(data)

    async def _fault(self, reason):
        if self._faulted is None:
            self._faulted = reason
            logger.warning('Connection faulted: %s', reason)
        await self.transport.close()


async def open_connection(host=None, port=None, config=None):
    """
    Open a TCP connection to a server and wrap it in a Connection.

    Authentication, database selection, TLS, and reconnection are left to
    the caller.

    Args:
        host: str - Server host (default: config 'host')
        port: int - Server port (default: config 'port')
        config: Config - Settings (default: global configuration)

    Returns:
        Connection: Ready to execute commands

    Raises:
        TransportError: If the TCP connection cannot be established
    """
    config = config or get_config()
    host = host or config.get('host')
    port = port or config.get('port')

    try:
        reader, writer = await asyncio.wait_for(
            asyncio.open_connection(host, port),
            timeout=config.get('connect_timeout'),
        )
    except asyncio.TimeoutError:
        raise TransportError(f'Timed out connecting to {host}:{port}') from None
    except OSError as e:
        raise TransportError(f'Cannot connect to {host}:{port}: {e}') from e

    logger.debug('Connected to %s:%s', host, port)
    transport = StreamTransport(
        reader, writer,
        read_timeout=config.get('read_timeout'),
        write_timeout=config.get('write_timeout'),
    )
    return Connection(transport, config)
