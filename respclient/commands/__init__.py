"""
Command layer for respclient.

- mappers: Reply -> typed result conversions
- router: command table (mapper, arity, minimum server version)
- bitmaps, sort, scan: argument builders for BITFIELD, SORT, SCAN
- methods: typed command surface shared by Redis and Pipeline
"""

from .bitmaps import (
    OverflowMode, Get, Set, IncrBy, Overflow, BitFieldOperation, build_bitfield,
)
from .sort import NOSORT, SortOptions, build_sort, hash_field
from .scan import build_scan, build_key_scan
from .router import CommandInfo, CommandRouter

__all__ = [
    # BITFIELD
    'OverflowMode',
    'Get',
    'Set',
    'IncrBy',
    'Overflow',
    'BitFieldOperation',
    'build_bitfield',
    # SORT
    'NOSORT',
    'SortOptions',
    'build_sort',
    'hash_field',
    # SCAN
    'build_scan',
    'build_key_scan',
    # Command table
    'CommandInfo',
    'CommandRouter',
]
