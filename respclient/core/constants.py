"""
respclient Constants Module

Defines the RESP2 wire markers, line terminators, and the default decoder
limits used by the respclient protocol core.
"""

# =============================================================================
# RESP2 Protocol Markers
# =============================================================================
# Redis Serialization Protocol (RESP2) type indicators
# Using ord() to get byte values for protocol parsing

SIMPLE_STRING = ord('+')  # Simple string reply: +OK\r\n
ERROR = ord('-')          # Error reply: -ERR message\r\n
INTEGER = ord(':')        # Integer reply: :1000\r\n
BULK_STRING = ord('$')    # Bulk string: $6\r\nfoobar\r\n
ARRAY = ord('*')          # Array: *2\r\n$3\r\nfoo\r\n$3\r\nbar\r\n

# =============================================================================
# Network Defaults
# =============================================================================

DEFAULT_HOST = 'localhost'
DEFAULT_PORT = 6379              # Standard Redis port

READ_SIZE = 64 * 1024            # Bytes requested per transport read

# =============================================================================
# Decoder Limits
# =============================================================================
# A reply exceeding any of these is treated as a protocol error

MAX_ARRAY_DEPTH = 32                   # Maximum nesting depth for arrays

MAX_BULK_SIZE = 512 * 1024 * 1024      # Server side proto-max-bulk-len default

MAX_ARRAY_SIZE = 2 ** 32 - 1           # Largest element count a server reports

MAX_LINE_SIZE = 64 * 1024              # Longest header/simple line accepted

# =============================================================================
# Protocol Line Terminators
# =============================================================================
# RESP protocol requires CRLF (\r\n) line endings

CRLF = b'\r\n'  # Carriage Return + Line Feed (as bytes for binary protocol)

NULL_LENGTH = -1  # Length announced for absent bulk strings and arrays
