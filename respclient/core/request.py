"""
respclient Request Encoder Module

Encodes commands into RESP2 requests. A request is always an array of bulk
strings:

    *<argc>\r\n
    $<len>\r\n<arg bytes>\r\n   (repeated argc times)

Length prefixing makes every payload binary safe, so arguments are never
escaped or inspected.
"""

from .constants import CRLF, ARRAY, BULK_STRING
from .reply import RedisString
from ..exceptions import DataError
from ..utils import to_bytes

_ARRAY_PREFIX = bytes((ARRAY,))
_BULK_PREFIX = bytes((BULK_STRING,))


def encode_argument(value, encoding='utf-8'):
    """
    Convert one command argument to its wire bytes.

    Args:
        value: bytes, str, int, float, or RedisString
        encoding: str - Encoding applied to str arguments

    Returns:
        bytes: Raw argument payload (without framing)

    Raises:
        DataError: If value is a nested sequence or an unsupported type
    """
    if isinstance(value, RedisString):
        return value.as_bytes()
    if isinstance(value, (list, tuple, dict, set)):
        raise DataError(
            f'Nested {type(value).__name__} cannot be sent as a single argument; '
            'flatten it into separate arguments'
        )
    try:
        return to_bytes(value, encoding)
    except TypeError as e:
        raise DataError(str(e)) from None


def encode_command(*args, encoding='utf-8'):
    """
    Build a RESP2 request for one command.

    Format: *<count>\r\n followed by one bulk string per argument
    Example: encode_command('GET', 'k') -> b'*2\r\n$3\r\nGET\r\n$1\r\nk\r\n'

    Args:
        *args: Command name followed by its arguments
        encoding: str - Encoding applied to str arguments

    Returns:
        bytes: RESP2-encoded request

    Raises:
        DataError: If no arguments are given or one cannot be encoded
    """
    builder = RequestBuilder(encoding=encoding)
    builder.add_command(*args)
    return builder.get_request()


class RequestBuilder:
    """
    Accumulates one or more encoded commands in a single buffer.

    Used to write a pipeline in one transport call:
        builder = RequestBuilder()
        builder.add_command('SET', 'a', 1)
        builder.add_command('GET', 'a')
        transport_payload = builder.get_request()
    """
    __slots__ = ('_buffer', '_count', '_encoding')

    def __init__(self, encoding='utf-8'):
        self._buffer = bytearray()
        self._count = 0
        self._encoding = encoding

    def add_command(self, *args):
        """
        Append one encoded command to the buffer.

        Arguments are validated before anything is appended, so a failed
        call leaves the buffer unchanged.

        Args:
            *args: Command name followed by its arguments

        Raises:
            DataError: If no arguments are given or one cannot be encoded
        """
        if not args:
            raise DataError('a command needs at least a name')

        payloads = [encode_argument(arg, self._encoding) for arg in args]

        buf = self._buffer
        buf.extend(_ARRAY_PREFIX)
        buf.extend(str(len(payloads)).encode('ascii'))
        buf.extend(CRLF)
        for payload in payloads:
            buf.extend(_BULK_PREFIX)
            buf.extend(str(len(payload)).encode('ascii'))
            buf.extend(CRLF)
            buf.extend(payload)
            buf.extend(CRLF)
        self._count += 1

    @property
    def command_count(self):
        """Number of commands added since the last reset."""
        return self._count

    def get_request(self):
        """
        Get the encoded request as bytes and reset the buffer.

        Returns:
            bytes: Concatenated RESP2 requests
        """
        result = bytes(self._buffer)
        self.reset()
        return result

    def reset(self):
        """Discard buffered commands."""
        del self._buffer[:]
        self._count = 0

    def __len__(self):
        """Return current buffer size in bytes."""
        return len(self._buffer)
