"""
Shared fixtures for the respclient test suite.

FakeTransport stands in for a socket: it serves scripted reply bytes in
configurable chunk sizes and records every write, so the dispatcher can
be tested without a server.
"""

import pytest

from respclient import Config, Connection, Redis


class FakeTransport:
    """In-memory transport serving scripted replies."""

    def __init__(self, replies=b'', chunk_size=None):
        self.written = []
        self.closed = False
        self.chunk_size = chunk_size
        self._pending = bytearray(replies)

    def add_replies(self, data):
        self._pending.extend(data)

    @property
    def sent(self):
        """Everything written so far as one byte string."""
        return b''.join(self.written)

    async def read(self, n):
        size = min(n, self.chunk_size or n)
        data = bytes(self._pending[:size])
        del self._pending[:size]
        return data

    async def write(self, data):
        self.written.append(bytes(data))

    async def close(self):
        self.closed = True


@pytest.fixture
def make_connection():
    """Factory: make_connection(replies, chunk_size=None, config=None) -> (Connection, FakeTransport)"""
    def factory(replies=b'', chunk_size=None, config=None):
        transport = FakeTransport(replies, chunk_size)
        return Connection(transport, config or Config()), transport
    return factory


@pytest.fixture
def make_client(make_connection):
    """Factory: make_client(replies, chunk_size=None, version=None) -> (Redis, FakeTransport)"""
    def factory(replies=b'', chunk_size=None, version=None):
        connection, transport = make_connection(replies, chunk_size)
        return Redis(connection, server_version=version), transport
    return factory
