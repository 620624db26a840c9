"""
Test suite for the async command dispatcher.

Uses the scripted FakeTransport from conftest.py; no server is needed.
"""

import asyncio

import pytest

from respclient.core.reply import Reply
from respclient.core.request import encode_command
from respclient.exceptions import (
    ServerError, WrongTypeError, ProtocolError, TransportError,
    ConnectionFaultedError, DataError,
)
from respclient.network.connection import Connection, StreamTransport


def test_execute_round_trip(make_connection):
    """Test one command: exact bytes written, one reply read."""
    conn, transport = make_connection(b'$3\r\nbar\r\n')

    reply = asyncio.run(conn.execute('GET', 'foo'))

    assert reply == Reply.bulk(b'bar')
    assert transport.written == [encode_command('GET', 'foo')]


def test_execute_with_tiny_reads(make_connection):
    """Test a reply delivered one byte per transport read."""
    conn, _ = make_connection(b'*2\r\n$1\r\na\r\n:7\r\n', chunk_size=1)

    reply = asyncio.run(conn.execute('X'))

    assert reply == Reply.array([Reply.bulk(b'a'), Reply.integer(7)])


def test_server_error_keeps_connection_usable(make_connection):
    conn, _ = make_connection(
        b'-WRONGTYPE Operation against a key holding the wrong kind of value\r\n'
        b'+PONG\r\n'
    )

    async def run():
        with pytest.raises(WrongTypeError) as excinfo:
            await conn.execute('GET', 'hash')
        assert excinfo.value.prefix == 'WRONGTYPE'
        assert conn.is_usable
        return await conn.execute('PING')

    assert asyncio.run(run()) == Reply.simple('PONG')


def test_pipeline_order_and_single_write(make_connection):
    conn, transport = make_connection(b'+OK\r\n:2\r\n$1\r\n2\r\n')

    replies = asyncio.run(conn.pipeline([('SET', 'a', 1), ('INCR', 'a'), ('GET', 'a')]))

    assert replies == [Reply.simple('OK'), Reply.integer(2), Reply.bulk(b'2')]
    assert len(transport.written) == 1


def test_pipeline_error_raised_after_all_replies(make_connection):
    """Test that the stream stays aligned when a pipelined command fails."""
    conn, _ = make_connection(b'+OK\r\n-ERR bad\r\n:5\r\n$1\r\nx\r\n')

    async def run():
        with pytest.raises(ServerError) as excinfo:
            await conn.pipeline([('SET', 'a', 1), ('BAD',), ('INCR', 'b')])
        assert excinfo.value.message == 'ERR bad'
        # The :5 reply was consumed by the pipeline, not by this call
        return await conn.execute('GET', 'x')

    assert asyncio.run(run()) == Reply.bulk(b'x')


def test_pipeline_without_raising(make_connection):
    conn, _ = make_connection(b'+OK\r\n-ERR bad\r\n')

    replies = asyncio.run(conn.pipeline([('SET', 'a', 1), ('BAD',)], raise_on_error=False))

    assert replies[0] == Reply.simple('OK')
    assert isinstance(replies[1], ServerError)


def test_empty_pipeline(make_connection):
    conn, transport = make_connection()
    assert asyncio.run(conn.pipeline([])) == []
    assert transport.written == []


def test_surplus_bytes_stay_buffered(make_connection):
    conn, transport = make_connection(b':1\r\n:2\r\n')

    async def run():
        first = await conn.execute('INCR', 'a')
        second = await conn.execute('INCR', 'a')
        return first, second

    assert asyncio.run(run()) == (Reply.integer(1), Reply.integer(2))


def test_data_error_sends_nothing(make_connection):
    conn, transport = make_connection()

    with pytest.raises(DataError):
        asyncio.run(conn.execute('SET', 'k', [1, 2]))

    assert transport.written == []
    assert conn.is_usable


def test_protocol_error_faults_connection(make_connection):
    conn, transport = make_connection(b'?garbage\r\n')

    async def run():
        with pytest.raises(ProtocolError):
            await conn.execute('GET', 'a')
        with pytest.raises(ConnectionFaultedError):
            await conn.execute('GET', 'a')

    asyncio.run(run())
    assert transport.closed
    assert not conn.is_usable
    assert conn.fault_reason is not None
    assert len(transport.written) == 1


def test_end_of_stream_faults_connection(make_connection):
    conn, transport = make_connection(b'$10\r\nabc')

    with pytest.raises(TransportError):
        asyncio.run(conn.execute('GET', 'a'))

    assert transport.closed
    assert not conn.is_usable


def test_closed_connection(make_connection):
    conn, transport = make_connection()

    async def run():
        async with conn:
            pass
        with pytest.raises(ConnectionFaultedError):
            await conn.execute('PING')

    asyncio.run(run())
    assert transport.closed
    assert transport.written == []


def test_concurrent_commands_keep_order(make_connection):
    conn, _ = make_connection(b'$1\r\n1\r\n$1\r\n2\r\n$1\r\n3\r\n')

    async def run():
        return await asyncio.gather(
            conn.execute('GET', 'a'),
            conn.execute('GET', 'b'),
            conn.execute('GET', 'c'),
        )

    replies = asyncio.run(run())
    assert [reply.as_bytes() for reply in replies] == [b'1', b'2', b'3']


class StalledTransport:
    """Transport whose reads never complete."""

    def __init__(self):
        self.written = []
        self.closed = False

    async def read(self, n):
        await asyncio.sleep(3600)

    async def write(self, data):
        self.written.append(data)

    async def close(self):
        self.closed = True


def test_cancel_after_write_faults_connection():
    """Test that a reply owed to a cancelled command cannot be misattributed."""
    transport = StalledTransport()

    async def run():
        conn = Connection(transport)
        task = asyncio.ensure_future(conn.execute('GET', 'a'))
        for _ in range(3):
            await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        return conn

    conn = asyncio.run(run())
    assert len(transport.written) == 1
    assert not conn.is_usable
    assert transport.closed


class SlowReader:
    async def read(self, n):
        await asyncio.sleep(3600)


class NullWriter:
    def write(self, data):
        pass

    async def drain(self):
        pass

    def close(self):
        pass

    async def wait_closed(self):
        pass


def test_stream_transport_read_timeout():
    transport = StreamTransport(SlowReader(), NullWriter(), read_timeout=0.01)

    with pytest.raises(TransportError):
        asyncio.run(transport.read(10))


def test_stream_transport_close_is_idempotent():
    transport = StreamTransport(SlowReader(), NullWriter())

    async def run():
        await transport.close()
        await transport.close()

    asyncio.run(run())


def test_error_with_raw_bytes_keeps_connection_usable(make_connection):
    """Test that an error line echoing non-UTF-8 bytes is a server error."""
    conn, _ = make_connection(b"-ERR unknown command '\xff'\r\n+PONG\r\n")

    async def run():
        with pytest.raises(ServerError) as excinfo:
            await conn.execute(b'\xff')
        assert excinfo.value.prefix == 'ERR'
        assert conn.is_usable
        return await conn.execute('PING')

    assert asyncio.run(run()) == Reply.simple('PONG')


class ResettingTransport:
    """Transport whose reads fail the way a dropped socket does."""

    def __init__(self):
        self.written = []
        self.closed = False

    async def read(self, n):
        raise ConnectionResetError('Connection reset by peer')

    async def write(self, data):
        self.written.append(bytes(data))

    async def close(self):
        self.closed = True


def test_os_error_faults_connection():
    transport = ResettingTransport()
    conn = Connection(transport)

    async def run():
        with pytest.raises(TransportError) as excinfo:
            await conn.execute('PING')
        assert isinstance(excinfo.value.__cause__, ConnectionResetError)
        with pytest.raises(ConnectionFaultedError):
            await conn.execute('PING')

    asyncio.run(run())
    assert transport.closed
    assert not conn.is_usable
