"""Command table for respclient.

Maps each command the typed client issues to its reply mapper, arity, flags,
and the first server version that understands it. Arity uses the server's
convention: it counts the command name, >0 means exact and <0 means minimum.
"""

from . import mappers
from ..exceptions import DataError, WrongArityError, CommandNotSupportedError
from ..features.info import ServerVersion


class CommandInfo:
    """Metadata about a Redis command.

    Attributes:
        name: Command name (upper case str)
        mapper: Callable converting the Reply into the typed result
        arity: Argument count (>0 exact, <0 minimum, 0 any)
        flags: Command flags (readonly, write, category, ...)
        since: ServerVersion | None - First server version with the command
    """
    __slots__ = ('name', 'mapper', 'arity', 'flags', 'since')

    def __init__(self, name, mapper, arity, flags=(), since=None):
        self.name = name
        self.mapper = mapper
        self.arity = arity
        self.flags = flags
        self.since = ServerVersion(*since) if since is not None else None


class CommandRouter:
    """Command table used by the typed client.

    Validates argument counts before anything is encoded and gates
    version-dependent commands against an explicitly supplied server version.
    """
    __slots__ = ('_commands', '_categories')

    def __init__(self):
        self._commands = {}
        self._categories = {
            'connection': [],
            'server': [],
            'string': [],
            'keys': [],
            'hash': [],
            'list': [],
            'bitmap': [],
            'transaction': [],
        }
        self._register_all_commands()

    def register(self, name, mapper, arity, flags=(), since=None):
        """Register a command.

        Args:
            name: Command name
            mapper: Callable(Reply) -> typed result
            arity: Argument count including command name
            flags: Tuple of flag strings; the first known category wins
            since: Tuple (major, minor, micro) of the first supporting version
        """
        cmd_upper = name.upper()
        self._commands[cmd_upper] = CommandInfo(cmd_upper, mapper, arity, flags, since)

        # Categorize command
        for category, commands in self._categories.items():
            if category in flags:
                commands.append(cmd_upper)
                break

    def get_command_info(self, cmd):
        """Get command metadata.

        Args:
            cmd: Command name as str or bytes

        Returns:
            CommandInfo instance or None
        """
        if isinstance(cmd, bytes):
            cmd = cmd.decode('ascii', 'replace')
        return self._commands.get(cmd.upper())

    def get_commands_by_category(self, category):
        """Get command names registered under a category."""
        return self._categories.get(category, []).copy()

    def build(self, name, *args, version=None):
        """Validate a command and return its wire arguments and mapper.

        Args:
            name: Registered command name
            *args: Command arguments (excluding the name)
            version: ServerVersion | None - Version of the connected server;
                when None the availability check is skipped

        Returns:
            Tuple of (argument list, mapper)

        Raises:
            DataError: If the command is not registered
            WrongArityError: If the argument count does not match
            CommandNotSupportedError: If the server is too old
        """
        cmd_info = self.get_command_info(name)
        if cmd_info is None:
            raise DataError(f"unknown command '{name}'")

        if not self._check_arity(cmd_info, args):
            raise WrongArityError(cmd_info.name)

        self.check_available(cmd_info, version)
        return [cmd_info.name, *args], cmd_info.mapper

    @staticmethod
    def check_available(cmd_info, version):
        """Capability gate for one command.

        Raises:
            CommandNotSupportedError: If version is known and older than
                the command's minimum
        """
        if version is None or cmd_info.since is None:
            return
        if not version.is_at_least(*cmd_info.since):
            raise CommandNotSupportedError(cmd_info.name, cmd_info.since, version)

    @staticmethod
    def _check_arity(cmd_info, args):
        """Check if argument count matches command arity.

        Args:
            cmd_info: CommandInfo instance
            args: Arguments (excluding command name)

        Returns:
            True if arity is valid
        """
        arg_count = len(args) + 1  # +1 for command name

        if cmd_info.arity > 0:
            # Exact argument count
            return arg_count == cmd_info.arity
        elif cmd_info.arity < 0:
            # Minimum argument count
            return arg_count >= abs(cmd_info.arity)
        else:
            # Any number of arguments
            return True

    def _register_all_commands(self):
        """Register every command the typed client issues."""
        # Connection and server commands
        self.register('PING', mappers.to_status, 1, ('connection', 'fast'))
        self.register('ECHO', mappers.to_optional_string, 2, ('connection', 'fast'))
        self.register('INFO', mappers.to_info, -1, ('server', 'slow'))
        self.register('FLUSHDB', mappers.ok_to_bool, -1, ('server', 'write', 'slow'))

        # String commands
        self.register('GET', mappers.to_optional_string, 2, ('string', 'readonly', 'fast'))
        self.register('SET', mappers.ok_to_bool, -3, ('string', 'write'))
        self.register('GETSET', mappers.to_optional_string, 3, ('string', 'write', 'fast'))
        self.register('MGET', mappers.to_optional_string_list, -2, ('string', 'readonly', 'fast'))
        self.register('MSET', mappers.ok_to_bool, -3, ('string', 'write'))
        self.register('INCR', mappers.to_integer, 2, ('string', 'write', 'fast'))
        self.register('DECR', mappers.to_integer, 2, ('string', 'write', 'fast'))
        self.register('INCRBY', mappers.to_integer, 3, ('string', 'write', 'fast'))
        self.register('DECRBY', mappers.to_integer, 3, ('string', 'write', 'fast'))
        self.register('INCRBYFLOAT', mappers.to_float_string, 3, ('string', 'write', 'fast'),
                      since=(2, 6, 0))
        self.register('APPEND', mappers.to_integer, 3, ('string', 'write', 'fast'))
        self.register('STRLEN', mappers.to_integer, 2, ('string', 'readonly', 'fast'))

        # Key commands
        self.register('DEL', mappers.to_integer, -2, ('keys', 'write'))
        self.register('EXISTS', mappers.to_integer, -2, ('keys', 'readonly', 'fast'))
        self.register('TOUCH', mappers.to_integer, -2, ('keys', 'readonly', 'fast'),
                      since=(3, 2, 1))
        self.register('TYPE', mappers.to_status, 2, ('keys', 'readonly', 'fast'))
        self.register('KEYS', mappers.to_string_list, 2, ('keys', 'readonly', 'slow'))
        self.register('RANDOMKEY', mappers.to_optional_string, 1, ('keys', 'readonly'))
        self.register('EXPIRE', mappers.to_boolean, 3, ('keys', 'write', 'fast'))
        self.register('TTL', mappers.to_integer, 2, ('keys', 'readonly', 'fast'))
        self.register('SORT', mappers.to_optional_string_list, -2, ('keys', 'write', 'slow'))
        self.register('SCAN', mappers.to_scan_page, -2, ('keys', 'readonly', 'slow'),
                      since=(2, 8, 0))

        # List commands
        self.register('LPUSH', mappers.to_integer, -3, ('list', 'write', 'fast'))
        self.register('RPUSH', mappers.to_integer, -3, ('list', 'write', 'fast'))
        self.register('LLEN', mappers.to_integer, 2, ('list', 'readonly', 'fast'))
        self.register('LRANGE', mappers.to_optional_string_list, 4, ('list', 'readonly'))

        # Hash commands
        self.register('HSET', mappers.to_integer, -4, ('hash', 'write', 'fast'))
        self.register('HMSET', mappers.ok_to_bool, -4, ('hash', 'write', 'fast'))
        self.register('HGET', mappers.to_optional_string, 3, ('hash', 'readonly', 'fast'))
        self.register('HGETALL', mappers.to_hash, 2, ('hash', 'readonly'))
        self.register('HSCAN', mappers.to_hscan_page, -3, ('hash', 'readonly'),
                      since=(2, 8, 0))
        self.register('SSCAN', mappers.to_scan_page, -3, ('keys', 'readonly'),
                      since=(2, 8, 0))
        self.register('ZSCAN', mappers.to_scan_page, -3, ('keys', 'readonly'),
                      since=(2, 8, 0))

        # Bitmap commands
        self.register('BITFIELD', mappers.to_integer_list, -2, ('bitmap', 'write'),
                      since=(3, 2, 0))

        # Transaction commands
        self.register('MULTI', mappers.ok_to_bool, 1, ('transaction', 'fast'))
        self.register('EXEC', mappers.identity, 1, ('transaction', 'slow'))
        self.register('WATCH', mappers.ok_to_bool, -2, ('transaction', 'fast'))
        self.register('UNWATCH', mappers.ok_to_bool, 1, ('transaction', 'fast'))


# Shared default table; it is read-only after construction
DEFAULT_ROUTER = CommandRouter()
