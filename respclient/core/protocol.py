"""
respclient RESP2 Protocol Parser

Streaming decoder for replies in the Redis Serialization Protocol version 2
(RESP2). Bytes are fed in whatever chunks the transport delivers; each
call to parse() returns one complete Reply or None when more bytes are
needed. Progress inside a reply, including partially read nested arrays,
is kept between calls, so a reply split across any number of reads
decodes exactly as if it had arrived at once.

The parser never blocks and never touches the transport. Waiting for more
data is the caller's concern; bytes_needed reports how much is missing.
"""

from .constants import (
    SIMPLE_STRING, ERROR, INTEGER, BULK_STRING, ARRAY, CRLF, NULL_LENGTH,
    MAX_ARRAY_DEPTH, MAX_BULK_SIZE, MAX_ARRAY_SIZE, MAX_LINE_SIZE,
)
from .reply import Reply
from ..exceptions import ProtocolError

_INCOMPLETE = object()


class RESPParser:
    """
    Streaming RESP2 reply parser.

    Usage:
        parser = RESPParser()
        parser.feed(data_chunk)
        reply = parser.parse()
        if reply is not None:
            # Process reply

    After a ProtocolError the parser stays failed: every later parse()
    raises the same error until reset() is called. A connection that saw
    a protocol error cannot resynchronize with the stream.
    """

    __slots__ = (
        '_buffer',           # bytearray: Unconsumed input
        '_offset',           # int: Parse position inside _buffer
        '_stack',            # list: Open array frames [expected, elements]
        '_bulk_len',         # int | None: Payload length of a pending bulk string
        '_failure',          # str | None: Message of the error that poisoned the parser
        '_max_bulk_size',    # int: Largest accepted bulk payload
        '_max_array_size',   # int: Largest accepted array element count
        '_max_array_depth',  # int: Deepest accepted array nesting
        '_max_line_size',    # int: Longest accepted header line
    )

    def __init__(self, max_bulk_size=MAX_BULK_SIZE, max_array_size=MAX_ARRAY_SIZE,
                 max_array_depth=MAX_ARRAY_DEPTH, max_line_size=MAX_LINE_SIZE):
        """
        Initialize parser with decoding limits.

        Args:
            max_bulk_size: int - Largest bulk payload accepted
            max_array_size: int - Largest array element count accepted
            max_array_depth: int - Deepest array nesting accepted
            max_line_size: int - Longest type/length line accepted
        """
        self._buffer = bytearray()
        self._offset = 0
        self._stack = []
        self._bulk_len = None
        self._failure = None
        self._max_bulk_size = max_bulk_size
        self._max_array_size = max_array_size
        self._max_array_depth = max_array_depth
        self._max_line_size = max_line_size

    @classmethod
    def from_config(cls, config):
        """Create a parser using the limits stored in a Config."""
        return cls(
            max_bulk_size=config.get('max_bulk_size', MAX_BULK_SIZE),
            max_array_size=config.get('max_array_size', MAX_ARRAY_SIZE),
            max_array_depth=config.get('max_array_depth', MAX_ARRAY_DEPTH),
            max_line_size=config.get('max_line_size', MAX_LINE_SIZE),
        )

    def feed(self, data):
        """
        Append incoming bytes to the parser buffer.

        Args:
            data: bytes, bytearray, or memoryview received from the transport
        """
        if not data:
            return
        if self._offset:
            # Drop consumed bytes; partial state only refers to what remains
            del self._buffer[:self._offset]
            self._offset = 0
        self._buffer.extend(data)

    def parse(self):
        """
        Decode the next complete reply from buffered data.

        Returns:
            Reply: The decoded reply, consuming exactly its bytes
            None: If the buffer does not yet hold a complete reply

        Raises:
            ProtocolError: If the buffered bytes violate RESP2 framing
        """
        if self._failure is not None:
            raise ProtocolError(self._failure)
        try:
            return self._parse()
        except ProtocolError as e:
            self._failure = str(e)
            raise

    @property
    def bytes_needed(self):
        """
        Minimum number of additional bytes required before parse() can
        make progress. Zero means parse() can advance with what is buffered.
        """
        available = len(self._buffer) - self._offset
        if self._bulk_len is not None:
            return max(self._bulk_len + 2 - available, 0)
        if self._buffer.find(CRLF, self._offset) != -1:
            return 0
        # A line is at least a type byte and CRLF
        return max(3 - available, 1)

    @property
    def buffered(self):
        """Number of received bytes not yet consumed by a complete reply."""
        return len(self._buffer) - self._offset

    @property
    def in_progress(self):
        """True while a reply has been partially decoded."""
        return bool(self._stack) or self._bulk_len is not None

    @property
    def failed(self):
        """True once a protocol error has been raised."""
        return self._failure is not None

    def reset(self):
        """
        Reset parser to initial state.

        Clears buffered bytes, partial progress, and any recorded failure.
        """
        self._buffer = bytearray()
        self._offset = 0
        self._stack = []
        self._bulk_len = None
        self._failure = None

    # =========================================================================
    # Internal decoding
    # =========================================================================

    def _parse(self):
        while True:
            if self._bulk_len is not None:
                data = self._read_bulk()
                if data is _INCOMPLETE:
                    return None
                reply = Reply.bulk(data)
            else:
                line = self._read_line()
                if line is None:
                    return None
                reply = self._parse_line(line)
                if reply is None:
                    # Started a bulk payload or opened an array frame
                    continue

            reply = self._attach(reply)
            if reply is not None:
                return reply

    def _attach(self, reply):
        """
        Append a finished value to the innermost open array.

        Returns:
            Reply: The top-level reply once every frame is complete
            None: While an enclosing array still expects elements
        """
        while self._stack:
            frame = self._stack[-1]
            frame[1].append(reply)
            if len(frame[1]) < frame[0]:
                return None
            self._stack.pop()
            reply = Reply.array(frame[1])
        return reply

    def _read_line(self):
        """Return the next CRLF-terminated line without its CRLF, or None."""
        end = self._buffer.find(CRLF, self._offset)
        if end == -1:
            if len(self._buffer) - self._offset > self._max_line_size:
                raise ProtocolError(f'Reply line exceeds {self._max_line_size} bytes')
            return None
        if end - self._offset > self._max_line_size:
            raise ProtocolError(f'Reply line exceeds {self._max_line_size} bytes')
        line = bytes(self._buffer[self._offset:end])
        self._offset = end + 2
        return line

    def _read_bulk(self):
        """Return the pending bulk payload, or _INCOMPLETE."""
        length = self._bulk_len
        needed = length + 2
        if len(self._buffer) - self._offset < needed:
            return _INCOMPLETE

        start = self._offset
        data = bytes(self._buffer[start:start + length])
        if self._buffer[start + length:start + needed] != CRLF:
            raise ProtocolError('Bulk string payload not terminated by CRLF')

        self._offset = start + needed
        self._bulk_len = None
        return data

    def _parse_line(self, line):
        """
        Interpret one header or simple-value line.

        Returns:
            Reply: For complete scalar values, absent values and empty arrays
            None: When a bulk payload or array elements must follow
        """
        if not line:
            raise ProtocolError('Empty reply line')

        marker = line[0]
        body = line[1:]

        if marker == SIMPLE_STRING:
            return Reply.simple(self._decode_text(body))

        elif marker == ERROR:
            return Reply.error(self._decode_text(body))

        elif marker == INTEGER:
            return Reply.integer(self._parse_length(body, 'integer'))

        elif marker == BULK_STRING:
            length = self._parse_length(body, 'bulk string length')
            if length == NULL_LENGTH:
                return Reply.bulk(None)
            if length < NULL_LENGTH:
                raise ProtocolError(f'Invalid bulk string length: {length}')
            if length > self._max_bulk_size:
                raise ProtocolError(f'Bulk string too large: {length} > {self._max_bulk_size}')
            self._bulk_len = length
            return None

        elif marker == ARRAY:
            count = self._parse_length(body, 'array length')
            if count == NULL_LENGTH:
                return Reply.array(None)
            if count < NULL_LENGTH:
                raise ProtocolError(f'Invalid array length: {count}')
            if count > self._max_array_size:
                raise ProtocolError(f'Array too large: {count} > {self._max_array_size}')
            if count == 0:
                return Reply.array([])
            if len(self._stack) >= self._max_array_depth:
                raise ProtocolError(f'Array nesting too deep: > {self._max_array_depth}')
            self._stack.append([count, []])
            return None

        raise ProtocolError(f'Invalid reply type byte: {bytes((marker,))!r}')

    @staticmethod
    def _parse_length(body, what):
        """Parse an optionally signed ASCII decimal."""
        digits = body[1:] if body[:1] in (b'-', b'+') else body
        if not digits or not digits.isdigit():
            raise ProtocolError(f'Invalid {what}: {body!r}')
        return int(body)

    @staticmethod
    def _decode_text(body):
        # Error text may echo raw argument bytes back; framing is still valid
        return body.decode('utf-8', 'backslashreplace')
