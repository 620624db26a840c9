"""
Test suite for the RESP2 reply parser.

Covers every reply kind, absent versus empty values, decoding of replies
split at arbitrary byte boundaries, and the protocol error paths.
"""

import pytest

from respclient.core.protocol import RESPParser
from respclient.core.reply import Reply
from respclient.exceptions import ProtocolError


def parse_one(data):
    parser = RESPParser()
    parser.feed(data)
    return parser.parse()


def test_simple_string_and_error():
    """Test status and error lines."""
    assert parse_one(b'+OK\r\n') == Reply.simple('OK')
    assert parse_one(b'-ERR unknown command\r\n') == Reply.error('ERR unknown command')
    assert parse_one(b'-ERR unknown command\r\n').is_error


def test_integer():
    assert parse_one(b':0\r\n') == Reply.integer(0)
    assert parse_one(b':-42\r\n') == Reply.integer(-42)
    assert parse_one(b':1000000000000\r\n').as_integer() == 1000000000000


def test_bulk_string():
    """Test bulk strings including empty and binary payloads."""
    assert parse_one(b'$5\r\nhello\r\n') == Reply.bulk(b'hello')

    empty = parse_one(b'$0\r\n\r\n')
    assert empty == Reply.bulk(b'')
    assert not empty.is_nil

    # Payload bytes are never interpreted
    binary = parse_one(b'$4\r\n\r\n\x00\xff\r\n')
    assert binary.as_bytes() == b'\r\n\x00\xff'


def test_absent_values():
    """Test that absent bulk and absent array differ from empty ones."""
    absent_bulk = parse_one(b'$-1\r\n')
    assert absent_bulk.is_nil
    assert absent_bulk.as_bytes() is None

    absent_array = parse_one(b'*-1\r\n')
    assert absent_array.is_nil
    assert absent_array.as_array() is None

    empty_array = parse_one(b'*0\r\n')
    assert not empty_array.is_nil
    assert empty_array.as_array() == []


def test_nested_array():
    reply = parse_one(b'*3\r\n*2\r\n:1\r\n:2\r\n$1\r\na\r\n$-1\r\n')
    assert reply == Reply.array([
        Reply.array([Reply.integer(1), Reply.integer(2)]),
        Reply.bulk(b'a'),
        Reply.bulk(None),
    ])


def test_scan_shaped_reply():
    reply = parse_one(b'*2\r\n$2\r\n17\r\n*2\r\n$3\r\nfoo\r\n$3\r\nbar\r\n')
    cursor, keys = reply.as_array()
    assert cursor.as_string() == '17'
    assert [key.as_bytes() for key in keys.as_array()] == [b'foo', b'bar']


def test_incomplete_returns_none():
    """Test that a partial reply yields None and keeps its progress."""
    parser = RESPParser()
    assert parser.parse() is None
    assert parser.bytes_needed == 3

    parser.feed(b'$5\r\nhel')
    assert parser.parse() is None
    assert parser.in_progress
    assert parser.bytes_needed == 4

    parser.feed(b'lo\r\n')
    assert parser.parse() == Reply.bulk(b'hello')
    assert not parser.in_progress
    assert parser.buffered == 0


def test_byte_at_a_time():
    """Test that feeding one byte per call decodes the same value."""
    data = b'*2\r\n*1\r\n$4\r\na\r\nb\r\n-WRONGTYPE bad\r\n'
    expected = parse_one(data)

    parser = RESPParser()
    results = []
    for i in range(len(data)):
        parser.feed(data[i:i + 1])
        reply = parser.parse()
        if reply is not None:
            results.append(reply)

    assert results == [expected]


def test_every_split_point():
    data = b'*3\r\n:1\r\n$3\r\nfoo\r\n*-1\r\n'
    expected = parse_one(data)
    for split in range(1, len(data)):
        parser = RESPParser()
        parser.feed(data[:split])
        first = parser.parse()
        parser.feed(data[split:])
        second = parser.parse()
        assert (first or second) == expected
        assert first is None or second is None


def test_multiple_replies_in_one_feed():
    """Test that each parse() consumes exactly one reply."""
    parser = RESPParser()
    parser.feed(b'+OK\r\n:1\r\n$1\r\nx')
    assert parser.parse() == Reply.simple('OK')
    assert parser.parse() == Reply.integer(1)
    assert parser.parse() is None
    parser.feed(b'\r\n')
    assert parser.parse() == Reply.bulk(b'x')


@pytest.mark.parametrize('data', [
    b'?what\r\n',
    b'\r\n',
    b'$abc\r\n',
    b'$-2\r\n',
    b'*-5\r\n',
    b':12a\r\n',
    b':\r\n',
    b'$3\r\nabcXY',
])
def test_malformed_input(data):
    parser = RESPParser()
    parser.feed(data)
    with pytest.raises(ProtocolError):
        parser.parse()


def test_failure_poisons_parser():
    """Test that the parser keeps failing until reset()."""
    parser = RESPParser()
    parser.feed(b'!oops\r\n')
    with pytest.raises(ProtocolError):
        parser.parse()
    assert parser.failed

    parser.feed(b'+OK\r\n')
    with pytest.raises(ProtocolError):
        parser.parse()

    parser.reset()
    assert not parser.failed
    parser.feed(b'+OK\r\n')
    assert parser.parse() == Reply.simple('OK')


def test_limits():
    """Test configured size and depth limits."""
    parser = RESPParser(max_bulk_size=4)
    parser.feed(b'$5\r\n')
    with pytest.raises(ProtocolError):
        parser.parse()

    parser = RESPParser(max_array_size=2)
    parser.feed(b'*3\r\n')
    with pytest.raises(ProtocolError):
        parser.parse()

    parser = RESPParser(max_array_depth=2)
    parser.feed(b'*1\r\n*1\r\n*1\r\n:1\r\n')
    with pytest.raises(ProtocolError):
        parser.parse()

    parser = RESPParser(max_line_size=8)
    parser.feed(b'+' + b'a' * 20)
    with pytest.raises(ProtocolError):
        parser.parse()


def test_line_limit_with_terminator_present():
    """Test that an oversized line is refused even when its CRLF has arrived."""
    parser = RESPParser(max_line_size=8)
    parser.feed(b'+' + b'a' * 20 + b'\r\n')
    with pytest.raises(ProtocolError):
        parser.parse()

    parser = RESPParser(max_line_size=8)
    parser.feed(b'+abcdefg\r\n')
    assert parser.parse() == Reply.simple('abcdefg')


def test_undecodable_error_text():
    """Test that error and status lines with raw bytes still decode."""
    reply = parse_one(b"-ERR unknown command '\xff'\r\n")
    assert reply.is_error
    assert reply.as_error() == "ERR unknown command '\\xff'"

    assert parse_one(b'+caf\xe9\r\n') == Reply.simple('caf\\xe9')
