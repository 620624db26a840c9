"""
respclient Command Methods

Typed command surface shared by the Redis client and Pipeline. Every method
builds its arguments and hands them to self._call(name, *args, mapper=...),
which the concrete class implements:

- Redis._call returns a coroutine resolving to the mapped result.
- Pipeline._call queues the command and returns the pipeline for chaining.

Subclasses provide `router` and `server_version` attributes.
"""

from . import mappers
from .bitmaps import BitFieldOperation, build_bitfield, reply_slots
from .scan import START_CURSOR, build_scan, build_key_scan
from .sort import SortOptions, build_sort, group_sorted
from ..exceptions import DataError
from ..utils import flatten_pairs


class CommandMethods:
    """Command wrappers common to Redis and Pipeline."""

    __slots__ = ()

    def _call(self, name, *args, mapper=None):
        raise NotImplementedError

    # =========================================================================
    # Connection / server
    # =========================================================================

    def ping(self):
        """PING -> 'PONG'"""
        return self._call('PING')

    def echo(self, value):
        """ECHO value -> RedisString"""
        return self._call('ECHO', value)

    def flushdb(self):
        """Delete every key of the current database -> True"""
        return self._call('FLUSHDB')

    def info(self, section=None):
        """
        INFO [section]

        Returns:
            ServerInfo
        """
        if section is None:
            return self._call('INFO')
        return self._call('INFO', section)

    # =========================================================================
    # Strings
    # =========================================================================

    def get(self, key):
        """GET key -> RedisString or None"""
        return self._call('GET', key)

    def set(self, key, value, exists=None, expires_in=None):
        """
        SET key value [PX ms] [NX|XX]

        Args:
            key: Key to set
            value: Value to store
            exists: bool | None - True sets only an existing key (XX),
                False only a missing key (NX), None always
            expires_in: float | None - Time to live in seconds

        Returns:
            bool: True if the value was set, False if the condition failed
        """
        args = [key, value]
        if expires_in is not None:
            milliseconds = int(round(expires_in * 1000))
            if milliseconds <= 0:
                raise DataError(f'SET expiry must be positive, got {expires_in!r}')
            args.extend(('PX', milliseconds))
        if exists is True:
            args.append('XX')
        elif exists is False:
            args.append('NX')
        return self._call('SET', *args)

    def getset(self, key, value):
        """GETSET key value -> previous RedisString or None"""
        return self._call('GETSET', key, value)

    def mget(self, *keys):
        """MGET key [key ...] -> list of RedisString or None"""
        return self._call('MGET', *keys)

    def mset(self, mapping):
        """
        MSET key value [key value ...]

        Args:
            mapping: dict or iterable of (key, value) pairs
        """
        return self._call('MSET', *flatten_pairs(mapping))

    def incr(self, key, by=1):
        """INCR / INCRBY -> new value"""
        if by == 1:
            return self._call('INCR', key)
        return self._call('INCRBY', key, by)

    def decr(self, key, by=1):
        """DECR / DECRBY -> new value"""
        if by == 1:
            return self._call('DECR', key)
        return self._call('DECRBY', key, by)

    def incrbyfloat(self, key, by):
        """
        INCRBYFLOAT key increment

        Returns:
            RedisString: New value as the server formats it
        """
        return self._call('INCRBYFLOAT', key, by)

    def append(self, key, value):
        """APPEND key value -> new length"""
        return self._call('APPEND', key, value)

    def strlen(self, key):
        return self._call('STRLEN', key)

    # =========================================================================
    # Keys
    # =========================================================================

    def delete(self, *keys):
        """DEL key [key ...] -> number of keys removed"""
        return self._call('DEL', *keys)

    def exists(self, *keys):
        """EXISTS key [key ...] -> number of existing keys"""
        return self._call('EXISTS', *keys)

    def touch(self, *keys):
        """TOUCH key [key ...] -> number of existing keys (server 3.2.1+)"""
        return self._call('TOUCH', *keys)

    def type(self, key):
        """TYPE key -> 'string', 'list', ..., or 'none'"""
        return self._call('TYPE', key)

    def keys(self, pattern='*'):
        return self._call('KEYS', pattern)

    def randomkey(self):
        return self._call('RANDOMKEY')

    def expire(self, key, seconds):
        """EXPIRE key seconds -> True if the timeout was set"""
        return self._call('EXPIRE', key, seconds)

    def ttl(self, key):
        """TTL key -> seconds, -1 without expiry, -2 if missing"""
        return self._call('TTL', key)

    # =========================================================================
    # Lists / hashes
    # =========================================================================

    def lpush(self, key, *values):
        return self._call('LPUSH', key, *values)

    def rpush(self, key, *values):
        return self._call('RPUSH', key, *values)

    def lrange(self, key, start, end):
        return self._call('LRANGE', key, start, end)

    def llen(self, key):
        return self._call('LLEN', key)

    def hset(self, key, field, value):
        """HSET key field value -> 1 if the field is new, else 0"""
        return self._call('HSET', key, field, value)

    def hmset(self, key, mapping):
        """HMSET key field value [field value ...] -> True"""
        return self._call('HMSET', key, *flatten_pairs(mapping))

    def hget(self, key, field):
        return self._call('HGET', key, field)

    def hgetall(self, key):
        """HGETALL key -> dict of str -> RedisString"""
        return self._call('HGETALL', key)

    # =========================================================================
    # Builders
    # =========================================================================

    def bitfield(self, key, *subcommands):
        """
        BITFIELD key subcommand [subcommand ...]

        Args:
            key: Key holding the bit string
            *subcommands: Get, Set, IncrBy, and Overflow instances, applied
                in the order given

        Returns:
            list: int or None per non-Overflow subcommand
        """
        args = build_bitfield(key, subcommands)
        return self._call(*args, mapper=mappers.bitfield_mapper(reply_slots(subcommands)))

    def bitfield_operation(self, key):
        """Return a fluent BitFieldOperation bound to this client."""
        return BitFieldOperation(self, key)

    def sort(self, key, options=None, groups=False, **kwargs):
        """
        SORT key [BY ...] [LIMIT ...] [GET ...] [DESC] [ALPHA] [STORE ...]

        Args:
            key: Key to sort
            options: SortOptions | None - Modifiers; alternatively pass the
                SortOptions fields as keyword arguments
            groups: bool - Split the reply into one tuple per element
                (one entry per GET pattern)

        Returns:
            int: Stored element count when store is given
            list: RedisString or None per returned value otherwise
        """
        if options is None:
            options = SortOptions(**kwargs)
        elif kwargs:
            raise DataError('pass either SortOptions or keyword modifiers, not both')

        mapper = mappers.sort_mapper(options.has_store)
        if groups and not options.has_store:
            values_mapper = mapper

            def mapper(reply):
                return group_sorted(values_mapper(reply), options)

        return self._call(*build_sort(key, options), mapper=mapper)

    def scan(self, cursor=START_CURSOR, match=None, count=None):
        """
        SCAN cursor [MATCH pattern] [COUNT count]

        Returns:
            tuple: (next_cursor, list of RedisString keys)
        """
        return self._call(*build_scan(cursor, match, count))

    def sscan(self, key, cursor=START_CURSOR, match=None, count=None):
        """SSCAN -> (next_cursor, list of RedisString members)"""
        return self._call(*build_key_scan('SSCAN', key, cursor, match, count))

    def hscan(self, key, cursor=START_CURSOR, match=None, count=None):
        """HSCAN -> (next_cursor, dict of str -> RedisString)"""
        return self._call(*build_key_scan('HSCAN', key, cursor, match, count))

    # =========================================================================
    # Transactions
    # =========================================================================

    def watch(self, *keys):
        """WATCH key [key ...]; a later MULTI/EXEC aborts if one changes."""
        return self._call('WATCH', *keys)

    def unwatch(self):
        return self._call('UNWATCH')
