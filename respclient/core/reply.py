"""
respclient Reply Value Module

Decoded RESP2 replies are represented by a single immutable Reply class
tagged with one of six kinds. Accessors never raise: asking for the wrong
kind returns None, so callers can probe a reply without knowing its shape.

RedisString wraps a bulk payload handed back by typed commands. It keeps
the exact bytes sent by the server and offers text and numeric views.
"""

from decimal import Decimal, InvalidOperation

from ..utils import parse_int, parse_float

# Reply kinds
NIL = 'nil'
INTEGER = 'integer'
SIMPLE_STRING = 'simple'
BULK_STRING = 'bulk'
ERROR = 'error'
ARRAY = 'array'

KINDS = (NIL, INTEGER, SIMPLE_STRING, BULK_STRING, ERROR, ARRAY)


class Reply:
    """
    One decoded RESP2 value.

    Kinds and payloads:
        NIL            None
        INTEGER        int
        SIMPLE_STRING  str
        BULK_STRING    bytes, or None for an absent bulk ($-1)
        ERROR          str (the error line without '-')
        ARRAY          list of Reply, or None for an absent array (*-1)

    An absent array is distinct from an empty one: the former has value
    None, the latter an empty list. Both absent forms report is_nil.
    """

    __slots__ = ('kind', 'value')

    def __init__(self, kind, value=None):
        if kind not in KINDS:
            raise ValueError(f'unknown reply kind: {kind!r}')
        object.__setattr__(self, 'kind', kind)
        object.__setattr__(self, 'value', value)

    def __setattr__(self, name, value):
        raise AttributeError('Reply is immutable')

    # =========================================================================
    # Constructors
    # =========================================================================

    @classmethod
    def nil(cls):
        return cls(NIL)

    @classmethod
    def integer(cls, n):
        return cls(INTEGER, n)

    @classmethod
    def simple(cls, text):
        return cls(SIMPLE_STRING, text)

    @classmethod
    def bulk(cls, data):
        return cls(BULK_STRING, data)

    @classmethod
    def error(cls, message):
        return cls(ERROR, message)

    @classmethod
    def array(cls, items):
        return cls(ARRAY, None if items is None else list(items))

    # =========================================================================
    # Predicates
    # =========================================================================

    @property
    def is_nil(self):
        """True for NIL and for absent bulk strings or arrays."""
        if self.kind == NIL:
            return True
        return self.kind in (BULK_STRING, ARRAY) and self.value is None

    @property
    def is_error(self):
        return self.kind == ERROR

    # =========================================================================
    # Accessors
    # =========================================================================

    def as_integer(self):
        """Return the integer payload, or None if this is not an INTEGER."""
        if self.kind == INTEGER:
            return self.value
        return None

    def as_bytes(self):
        """Return bulk or simple string content as bytes, else None."""
        if self.kind == BULK_STRING:
            return self.value
        if self.kind == SIMPLE_STRING:
            return self.value.encode('utf-8')
        return None

    def as_string(self, encoding='utf-8'):
        """Return bulk or simple string content as str, else None."""
        if self.kind == SIMPLE_STRING:
            return self.value
        if self.kind == BULK_STRING and self.value is not None:
            try:
                return self.value.decode(encoding)
            except UnicodeDecodeError:
                return None
        return None

    def as_redis_string(self, encoding='utf-8'):
        """Return a RedisString for a present bulk string, else None."""
        if self.kind == BULK_STRING and self.value is not None:
            return RedisString(self.value, encoding)
        return None

    def as_float(self):
        """Parse bulk or simple string content as float, else None."""
        data = self.as_bytes()
        if data is None:
            return None
        return parse_float(data)

    def as_array(self):
        """Return the element list of a present ARRAY, else None."""
        if self.kind == ARRAY:
            return self.value
        return None

    def as_error(self):
        """Return the error message of an ERROR reply, else None."""
        if self.kind == ERROR:
            return self.value
        return None

    # =========================================================================
    # Python protocol
    # =========================================================================

    def __eq__(self, other):
        if not isinstance(other, Reply):
            return NotImplemented
        return self.kind == other.kind and self.value == other.value

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    __hash__ = None

    def __repr__(self):
        return f'Reply({self.kind}, {self.value!r})'


class RedisString:
    """
    Bulk string payload returned by a typed command.

    The reply bytes are kept verbatim, so numeric replies such as
    INCRBYFLOAT round-trip exactly through as_bytes()/as_string().

    Usage:
        value = await client.incrbyfloat('price', 1.5)
        value.as_string()   # '10.5'
        value.as_float()    # 10.5
    """

    __slots__ = ('_data', '_encoding')

    def __init__(self, data, encoding='utf-8'):
        if isinstance(data, str):
            data = data.encode(encoding)
        self._data = bytes(data)
        self._encoding = encoding

    def as_bytes(self):
        return self._data

    def as_string(self):
        """
        Return the value as str.

        Undecodable bytes become surrogate escapes, so binary keys still
        map to a str that encodes back to the same bytes.
        """
        return self._data.decode(self._encoding, 'surrogateescape')

    def as_integer(self):
        """Return the value as int, or None if it is not an integer."""
        return parse_int(self._data)

    def as_float(self):
        """Return the value as float, or None if it is not numeric."""
        return parse_float(self._data)

    def as_decimal(self):
        """Return the value as Decimal, or None if it is not numeric."""
        try:
            return Decimal(self._data.decode('ascii'))
        except (InvalidOperation, UnicodeDecodeError):
            return None

    def __bytes__(self):
        return self._data

    def __str__(self):
        return self.as_string()

    def __len__(self):
        return len(self._data)

    def __eq__(self, other):
        if isinstance(other, RedisString):
            return self._data == other._data
        if isinstance(other, bytes):
            return self._data == other
        return NotImplemented

    def __hash__(self):
        return hash(self._data)

    def __repr__(self):
        return f'RedisString({self._data!r})'
