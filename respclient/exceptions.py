"""
respclient Exceptions Module

Defines the exception hierarchy raised by the respclient protocol core.

Four families are kept apart so callers can react to each differently:

- ProtocolError: the byte stream is malformed; the connection is unusable.
- TransportError: the transport failed, timed out, or reached end of
  stream; the connection is unusable.
- ServerError: the server answered with a well-formed error reply; the
  connection stays usable. Subclasses are selected by the error prefix.
- MappingError: a reply did not have the shape its command promises.

DataError and CommandNotSupportedError are raised before any bytes are
written, so they never affect connection state.
"""


class RedisError(Exception):
    """Base exception for every error raised by respclient."""


# =============================================================================
# Connection-fatal errors
# =============================================================================

class ProtocolError(RedisError):
    """
    Raised when the reply stream violates RESP framing.

    The connection that produced it must be discarded.
    """

    def __init__(self, message='Protocol error'):
        super().__init__(message)


class TransportError(RedisError):
    """
    Raised when a transport read or write fails, times out, or the peer
    closes the stream while a reply is still owed.
    """


class ConnectionFaultedError(TransportError):
    """
    Raised when a command is issued on a connection that is closed or was
    faulted by an earlier protocol or transport error.
    """

    def __init__(self, message='Connection is faulted or closed'):
        super().__init__(message)


# =============================================================================
# Caller-side errors
# =============================================================================

class DataError(RedisError):
    """
    Raised when an argument cannot be encoded or a builder receives an
    invalid option combination. Nothing has been sent when this is raised.
    """


class WrongArityError(DataError):
    """
    Raised when a command is built with the wrong number of arguments.
    """

    def __init__(self, command_name):
        super().__init__(f"wrong number of arguments for '{command_name}' command")
        self.command_name = command_name


class CommandNotSupportedError(RedisError):
    """
    Raised when the connected server is older than a command requires.

    Attributes:
        command: str - Command name
        required: ServerVersion - Minimum version for the command
        actual: ServerVersion - Version reported by the server
    """

    def __init__(self, command, required, actual):
        super().__init__(f'{command} requires server {required}, connected to {actual}')
        self.command = command
        self.required = required
        self.actual = actual


class MappingError(RedisError):
    """
    Raised when a reply does not match the shape its command declares.

    Indicates a client bug or a server version mismatch; it is never a
    recoverable condition.

    Attributes:
        reply: Reply - The offending reply
    """

    def __init__(self, message, reply=None):
        super().__init__(message)
        self.reply = reply


# =============================================================================
# Server error replies
# =============================================================================

class ServerError(RedisError):
    """
    Error reply sent by the server (RESP '-' line).

    Attributes:
        prefix: str - Error code prefix (e.g., 'ERR', 'WRONGTYPE')
        message: str - Full error text exactly as sent by the server
    """

    prefix = 'ERR'

    def __init__(self, message):
        """
        Initialize server error.

        Args:
            message: str - Error line without the leading '-'
        """
        super().__init__(message)
        self.message = message
        code = message.split(' ', 1)[0]
        if code and code.isupper():
            self.prefix = code

    @classmethod
    def from_message(cls, message):
        """
        Build the most specific ServerError subclass for an error line.

        Args:
            message: str - Error line without the leading '-'

        Returns:
            ServerError: Instance of the subclass registered for the prefix
        """
        code = message.split(' ', 1)[0]
        error_class = _PREFIX_CLASSES.get(code, ServerError)
        return error_class(message)


class WrongTypeError(ServerError):
    """
    Command was executed against a key of the wrong type.

    Example: GET on a hash key, LPUSH on a string key.
    """

    prefix = 'WRONGTYPE'


class OutOfMemoryError(ServerError):
    """Server refused a write because used memory exceeds maxmemory."""

    prefix = 'OOM'


class AuthError(ServerError):
    """Authentication failed."""

    prefix = 'WRONGPASS'


class NoAuthError(ServerError):
    """Authentication is required but was not provided."""

    prefix = 'NOAUTH'


class BusyError(ServerError):
    """Server is busy running a script."""

    prefix = 'BUSY'


class ExecAbortError(ServerError):
    """EXEC was aborted because of errors while queueing."""

    prefix = 'EXECABORT'


class NoScriptError(ServerError):
    """EVALSHA referenced an unknown script."""

    prefix = 'NOSCRIPT'


class ReadOnlyError(ServerError):
    """Write was sent to a read only replica."""

    prefix = 'READONLY'


class LoadingError(ServerError):
    """Server is loading the dataset in memory."""

    prefix = 'LOADING'


class WatchError(RedisError):
    """
    Raised when EXEC returns a null array because a WATCHed key changed.
    """


_PREFIX_CLASSES = {
    error_class.prefix: error_class
    for error_class in (
        WrongTypeError, OutOfMemoryError, AuthError, NoAuthError, BusyError,
        ExecAbortError, NoScriptError, ReadOnlyError, LoadingError,
    )
}
