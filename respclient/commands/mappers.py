"""
respclient Typed Result Mappers

Each mapper converts a decoded Reply into the value a command family
promises. A reply whose kind does not fit the contract raises MappingError,
which is kept distinct from server error replies: it signals a client bug
or a server speaking a different dialect, never something to retry.

Error replies are normally raised by the connection before a mapper runs.
Inside MULTI/EXEC results they arrive as array elements, so every mapper
re-raises them as the matching ServerError.
"""

from ..core.reply import Reply, SIMPLE_STRING
from ..exceptions import MappingError, ServerError
from ..features.info import ServerInfo


def _check(reply):
    if reply.is_error:
        raise ServerError.from_message(reply.value)


def _mismatch(expected, reply):
    return MappingError(f'Expected {expected}, got {reply!r}', reply)


def _name(item):
    """Key or field name of a bulk or status element, else None."""
    if item.kind == SIMPLE_STRING:
        return item.value
    value = item.as_redis_string()
    if value is None:
        return None
    return value.as_string()


def identity(reply):
    """Return the Reply unchanged (raw command access)."""
    _check(reply)
    return reply


def ok_to_bool(reply):
    """
    Status reply of a conditional write (SET NX/XX, MSET, HMSET, FLUSHDB).

    Returns:
        bool: True for +OK, False for an absent bulk or array
    """
    _check(reply)
    if reply.is_nil:
        return False
    if reply.as_string() == 'OK':
        return True
    raise _mismatch('+OK or nil', reply)


def to_status(reply):
    """
    Simple string status (TYPE, PING).

    Returns:
        str: Status text
    """
    _check(reply)
    if reply.kind == SIMPLE_STRING:
        return reply.value
    raise _mismatch('simple string', reply)


def to_integer(reply):
    """
    Integer reply (INCR, DECR, DEL, TOUCH, LPUSH, ...).

    Returns:
        int
    """
    _check(reply)
    value = reply.as_integer()
    if value is None:
        raise _mismatch('integer', reply)
    return value


def to_boolean(reply):
    """Integer reply used as a flag (EXPIRE, HSET on old servers)."""
    return to_integer(reply) != 0


def to_optional_string(reply):
    """
    Bulk reply that may be absent (GET, GETSET, HGET, RANDOMKEY).

    Returns:
        RedisString: Present value, possibly empty
        None: Key or field does not exist
    """
    _check(reply)
    if reply.is_nil:
        return None
    value = reply.as_redis_string()
    if value is None:
        raise _mismatch('bulk string or nil', reply)
    return value


def to_float_string(reply):
    """
    Decimal carried in a bulk reply (INCRBYFLOAT).

    Returns:
        RedisString: Exact server representation; use as_float() or
            as_decimal() for the numeric value
    """
    _check(reply)
    value = reply.as_redis_string()
    if value is None or value.as_float() is None:
        raise _mismatch('bulk string holding a number', reply)
    return value


def to_optional_string_list(reply):
    """
    Array whose elements may individually be absent (MGET, SORT, LRANGE).

    Returns:
        list: RedisString or None per element, same length as the array
    """
    _check(reply)
    items = reply.as_array()
    if items is None:
        raise _mismatch('array', reply)
    return [to_optional_string(item) for item in items]


def to_string_list(reply):
    """
    Array of present strings (KEYS).

    Returns:
        list of str
    """
    _check(reply)
    items = reply.as_array()
    if items is None:
        raise _mismatch('array', reply)
    result = []
    for item in items:
        text = _name(item)
        if text is None:
            raise _mismatch('string element', item)
        result.append(text)
    return result


def to_integer_list(reply):
    """
    Array of integers where slots may be absent (BITFIELD).

    Returns:
        list: int or None per element
    """
    _check(reply)
    items = reply.as_array()
    if items is None:
        raise _mismatch('array', reply)
    result = []
    for item in items:
        _check(item)
        if item.is_nil:
            result.append(None)
            continue
        value = item.as_integer()
        if value is None:
            raise _mismatch('integer or nil element', item)
        result.append(value)
    return result


def to_hash(reply):
    """
    Flat field/value array (HGETALL).

    Returns:
        dict: {str field: RedisString value}
    """
    _check(reply)
    items = reply.as_array()
    if items is None or len(items) % 2:
        raise _mismatch('array of field/value pairs', reply)
    result = {}
    for i in range(0, len(items), 2):
        field = _name(items[i])
        value = items[i + 1].as_redis_string()
        if field is None or value is None:
            raise _mismatch('bulk string pair', Reply.array(items[i:i + 2]))
        result[field] = value
    return result


def to_scan_page(reply):
    """
    Cursor reply of the SCAN family.

    Wire shape: *2 [ $cursor, *N [ keys... ] ]

    Returns:
        tuple: (next_cursor: str, items: list of RedisString)
            next_cursor '0' means the iteration is complete
    """
    _check(reply)
    items = reply.as_array()
    if items is None or len(items) != 2:
        raise _mismatch('two element array', reply)
    cursor = items[0].as_string()
    keys = items[1].as_array()
    if cursor is None or not cursor.isdigit() or keys is None:
        raise _mismatch('[cursor, array]', reply)
    page = []
    for key in keys:
        value = key.as_redis_string()
        if value is None:
            raise _mismatch('bulk string key', key)
        page.append(value)
    return cursor, page


def to_hscan_page(reply):
    """
    Cursor reply of HSCAN, whose page alternates fields and values.

    Returns:
        tuple: (next_cursor: str, fields: dict of str -> RedisString)
    """
    cursor, items = to_scan_page(reply)
    if len(items) % 2:
        raise _mismatch('field/value pairs', reply)
    fields = {}
    for i in range(0, len(items), 2):
        fields[items[i].as_string()] = items[i + 1]
    return cursor, fields


def to_info(reply):
    """
    INFO reply.

    Returns:
        ServerInfo
    """
    _check(reply)
    data = reply.as_bytes()
    if data is None:
        raise _mismatch('bulk string', reply)
    return ServerInfo.parse(data)


def sort_mapper(has_store):
    """
    Select the mapper for a SORT call.

    Args:
        has_store: bool - True if STORE was part of the command

    Returns:
        callable: to_integer when storing, else to_optional_string_list
    """
    if has_store:
        return to_integer
    return to_optional_string_list


def bitfield_mapper(slots):
    """
    Select the mapper for a BITFIELD call.

    Args:
        slots: int - Reply slots the subcommand chain produces

    Returns:
        callable: to_integer_list that also checks the slot count
    """
    def mapper(reply):
        values = to_integer_list(reply)
        if len(values) != slots:
            raise MappingError(
                f'BITFIELD returned {len(values)} slots, expected {slots}', reply)
        return values
    return mapper


__all__ = [
    'identity', 'ok_to_bool', 'to_status', 'to_integer', 'to_boolean',
    'to_optional_string', 'to_float_string', 'to_optional_string_list',
    'to_string_list', 'to_integer_list', 'to_hash', 'to_scan_page',
    'to_hscan_page', 'to_info', 'sort_mapper', 'bitfield_mapper',
]
