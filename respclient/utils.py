"""
respclient Utility Functions

Value coercion and argument flattening helpers shared by the encoder,
the reply accessors, and the command builders.
"""

from .exceptions import DataError


def parse_int(value, default=None):
    """
    Parse integer value from bytes or string.

    Args:
        value: bytes, str, or int - Value to parse
        default: Any - Default value if parsing fails

    Returns:
        int or default value
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value

    try:
        if isinstance(value, (bytes, bytearray)):
            return int(bytes(value).decode('ascii'))
        return int(value)
    except (ValueError, UnicodeDecodeError, TypeError):
        return default


def parse_float(value, default=None):
    """
    Parse float value from bytes or string.

    Args:
        value: bytes, str, or float - Value to parse
        default: Any - Default value if parsing fails

    Returns:
        float or default value
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return float(value)

    try:
        if isinstance(value, (bytes, bytearray)):
            return float(bytes(value).decode('ascii'))
        return float(value)
    except (ValueError, UnicodeDecodeError, TypeError):
        return default


def to_bytes(value, encoding='utf-8'):
    """
    Convert a scalar command argument to bytes.

    Args:
        value: bytes, str, int, or float - Value to convert
        encoding: str - Encoding for str values (default: utf-8)

    Returns:
        bytes: Value as bytes

    Raises:
        TypeError: If value is not a scalar argument type
    """
    if isinstance(value, bytes):
        return value
    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        # Names decoded from binary replies carry surrogate escapes
        return value.encode(encoding, 'surrogateescape')
    if isinstance(value, bool):
        # bool is an int subclass but has no wire meaning of its own
        raise TypeError('bool is not a valid command argument; pass 0/1 or a string')
    if isinstance(value, int):
        return str(value).encode('ascii')
    if isinstance(value, float):
        return repr(value).encode('ascii')
    raise TypeError(f'Cannot encode type {type(value).__name__} as a command argument')


def flatten_pairs(mapping_or_pairs):
    """
    Flatten a mapping or an iterable of (key, value) pairs.

    Args:
        mapping_or_pairs: dict or iterable of 2-tuples

    Returns:
        list: [key1, val1, key2, val2, ...] in iteration order

    Raises:
        DataError: If an element is not a 2-item pair
    """
    if hasattr(mapping_or_pairs, 'items'):
        items = mapping_or_pairs.items()
    else:
        items = mapping_or_pairs

    result = []
    for pair in items:
        if len(pair) != 2:
            raise DataError(f'expected (key, value) pair, got {pair!r}')
        result.append(pair[0])
        result.append(pair[1])
    return result
