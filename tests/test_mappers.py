"""
Test suite for the typed result mappers.

Each mapper either returns the promised type or raises MappingError; error
replies embedded in arrays surface as ServerError subclasses.
"""

import pytest

from respclient.commands import mappers
from respclient.core.reply import Reply, RedisString
from respclient.exceptions import MappingError, ServerError, WrongTypeError
from respclient.features.info import ServerInfo, ServerVersion


def bulk_array(*values):
    return Reply.array([Reply.bulk(value) for value in values])


def test_ok_to_bool():
    assert mappers.ok_to_bool(Reply.simple('OK')) is True
    assert mappers.ok_to_bool(Reply.bulk(None)) is False
    assert mappers.ok_to_bool(Reply.array(None)) is False
    with pytest.raises(MappingError):
        mappers.ok_to_bool(Reply.integer(1))


def test_to_optional_string():
    """Test that an absent value and an empty value stay distinct."""
    assert mappers.to_optional_string(Reply.bulk(b'bar')) == RedisString(b'bar')
    assert mappers.to_optional_string(Reply.bulk(None)) is None

    empty = mappers.to_optional_string(Reply.bulk(b''))
    assert empty is not None
    assert empty.as_bytes() == b''

    with pytest.raises(MappingError):
        mappers.to_optional_string(Reply.integer(3))


def test_to_integer():
    assert mappers.to_integer(Reply.integer(-2)) == -2
    with pytest.raises(MappingError) as excinfo:
        mappers.to_integer(Reply.bulk(b'5'))
    assert excinfo.value.reply == Reply.bulk(b'5')

    assert mappers.to_boolean(Reply.integer(1)) is True
    assert mappers.to_boolean(Reply.integer(0)) is False


def test_error_reply_raises_server_error():
    with pytest.raises(WrongTypeError):
        mappers.to_integer(Reply.error('WRONGTYPE Operation against a key'))
    with pytest.raises(ServerError):
        mappers.identity(Reply.error('ERR no'))


def test_to_float_string():
    """Test that the server's decimal text is kept verbatim."""
    value = mappers.to_float_string(Reply.bulk(b'97.25'))
    assert value.as_bytes() == b'97.25'
    assert value.as_float() == 97.25

    with pytest.raises(MappingError):
        mappers.to_float_string(Reply.bulk(b'abc'))
    with pytest.raises(MappingError):
        mappers.to_float_string(Reply.bulk(None))


def test_to_optional_string_list():
    values = mappers.to_optional_string_list(bulk_array(b'a', None, b''))
    assert values == [RedisString(b'a'), None, RedisString(b'')]

    with pytest.raises(MappingError):
        mappers.to_optional_string_list(Reply.integer(1))
    with pytest.raises(MappingError):
        mappers.to_optional_string_list(Reply.array([Reply.integer(1)]))


def test_to_string_list():
    reply = Reply.array([Reply.bulk(b'k1'), Reply.simple('k2')])
    assert mappers.to_string_list(reply) == ['k1', 'k2']
    with pytest.raises(MappingError):
        mappers.to_string_list(bulk_array(b'a', None))


def test_to_integer_list():
    reply = Reply.array([Reply.integer(0), Reply.bulk(None), Reply.integer(-8)])
    assert mappers.to_integer_list(reply) == [0, None, -8]
    with pytest.raises(MappingError):
        mappers.to_integer_list(bulk_array(b'1'))


def test_to_status():
    assert mappers.to_status(Reply.simple('string')) == 'string'
    assert mappers.to_status(Reply.simple('none')) == 'none'
    with pytest.raises(MappingError):
        mappers.to_status(Reply.bulk(b'string'))


def test_to_hash():
    result = mappers.to_hash(bulk_array(b'name', b'apple', b'kg', b'3'))
    assert result == {'name': RedisString(b'apple'), 'kg': RedisString(b'3')}

    with pytest.raises(MappingError):
        mappers.to_hash(bulk_array(b'odd'))


def test_to_scan_page():
    reply = Reply.array([Reply.bulk(b'17'), bulk_array(b'a', b'b')])
    cursor, keys = mappers.to_scan_page(reply)
    assert cursor == '17'
    assert keys == [b'a', b'b']

    finished = Reply.array([Reply.bulk(b'0'), Reply.array([])])
    assert mappers.to_scan_page(finished) == ('0', [])

    with pytest.raises(MappingError):
        mappers.to_scan_page(Reply.array([Reply.bulk(b'x1'), Reply.array([])]))
    with pytest.raises(MappingError):
        mappers.to_scan_page(bulk_array(b'0'))


def test_to_hscan_page():
    reply = Reply.array([Reply.bulk(b'0'), bulk_array(b'f1', b'v1', b'f2', b'v2')])
    cursor, fields = mappers.to_hscan_page(reply)
    assert cursor == '0'
    assert fields == {'f1': b'v1', 'f2': b'v2'}


def test_to_info():
    info = mappers.to_info(Reply.bulk(b'# Server\r\nredis_version:3.2.1\r\n'))
    assert isinstance(info, ServerInfo)
    assert info.server_version == ServerVersion(3, 2, 1)


def test_sort_mapper():
    assert mappers.sort_mapper(True) is mappers.to_integer
    assert mappers.sort_mapper(False) is mappers.to_optional_string_list


def test_bitfield_mapper_checks_slot_count():
    reply = Reply.array([Reply.integer(0), Reply.integer(1)])
    assert mappers.bitfield_mapper(2)(reply) == [0, 1]
    with pytest.raises(MappingError):
        mappers.bitfield_mapper(3)(reply)


def test_binary_names():
    """Test that keys and fields with non-UTF-8 bytes map without error."""
    assert mappers.to_string_list(bulk_array(b'k\xff')) == ['k\udcff']

    fields = mappers.to_hash(bulk_array(b'\xff', b'v'))
    assert fields == {'\udcff': RedisString(b'v')}

    reply = Reply.array([Reply.bulk(b'0'), bulk_array(b'\xff', b'v')])
    assert mappers.to_hscan_page(reply) == ('0', {'\udcff': b'v'})
