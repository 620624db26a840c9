"""
Network module for respclient.

Provides the command dispatcher (Connection), the asyncio stream
transport it normally runs over, and a TCP connection helper.
"""

from .connection import Connection, StreamTransport, open_connection

__all__ = ['Connection', 'StreamTransport', 'open_connection']
