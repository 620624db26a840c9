"""
Test suite for Reply and RedisString values.
"""

from decimal import Decimal

import pytest

from respclient.core.reply import Reply, RedisString, BULK_STRING, ARRAY


def test_accessors_match_kind():
    """Test that each accessor answers only for its own kind."""
    integer = Reply.integer(5)
    assert integer.as_integer() == 5
    assert integer.as_bytes() is None
    assert integer.as_array() is None

    bulk = Reply.bulk(b'12')
    assert bulk.as_bytes() == b'12'
    assert bulk.as_string() == '12'
    assert bulk.as_float() == 12.0
    # A numeric bulk is not an INTEGER reply
    assert bulk.as_integer() is None

    simple = Reply.simple('OK')
    assert simple.as_string() == 'OK'
    assert simple.as_bytes() == b'OK'
    assert simple.as_redis_string() is None

    error = Reply.error('ERR boom')
    assert error.as_error() == 'ERR boom'
    assert error.as_string() is None


def test_nil_forms():
    assert Reply.nil().is_nil
    assert Reply.bulk(None).is_nil
    assert Reply.bulk(None).kind == BULK_STRING
    assert Reply.array(None).is_nil
    assert Reply.array(None).kind == ARRAY
    assert not Reply.bulk(b'').is_nil
    assert not Reply.array([]).is_nil


def test_undecodable_bulk():
    reply = Reply.bulk(b'\xff\xfe')
    assert reply.as_string() is None
    assert reply.as_bytes() == b'\xff\xfe'


def test_immutable_and_equality():
    reply = Reply.array([Reply.integer(1)])
    with pytest.raises(AttributeError):
        reply.kind = 'nil'
    assert reply == Reply.array([Reply.integer(1)])
    assert reply != Reply.array([Reply.integer(2)])
    assert Reply.bulk(b'1') != Reply.simple('1')


def test_unknown_kind():
    with pytest.raises(ValueError):
        Reply('double', 1.0)


def test_redis_string_views():
    """Test that RedisString keeps exact bytes and offers numeric views."""
    value = RedisString(b'97.25')
    assert value.as_bytes() == b'97.25'
    assert value.as_string() == '97.25'
    assert value.as_float() == 97.25
    assert value.as_decimal() == Decimal('97.25')
    assert value.as_integer() is None
    assert str(value) == '97.25'
    assert bytes(value) == b'97.25'
    assert len(value) == 5

    assert RedisString(b'10').as_integer() == 10
    assert RedisString(b'abc').as_decimal() is None


def test_redis_string_equality():
    assert RedisString(b'a') == RedisString(b'a')
    assert RedisString(b'a') == b'a'
    assert RedisString('é') == 'é'.encode('utf-8')
    assert hash(RedisString(b'a')) == hash(b'a')
    assert RedisString(b'') != b'x'


def test_redis_string_binary_text():
    """Test that undecodable bytes survive a str round trip."""
    value = RedisString(b'k\xff')
    assert value.as_string() == 'k\udcff'
    assert value.as_string().encode('utf-8', 'surrogateescape') == b'k\xff'
