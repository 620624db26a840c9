"""
respclient SCAN Family Builders

    SCAN cursor [MATCH pattern] [COUNT count]
    SSCAN key cursor [MATCH pattern] [COUNT count]
    HSCAN key cursor [MATCH pattern] [COUNT count]
    ZSCAN key cursor [MATCH pattern] [COUNT count]

The cursor is opaque. Start at 0 and feed back whatever the server
returned; iteration is complete only when the server returns 0 again.
COUNT is a per-call hint, and MATCH filters server side, so an individual
page may be empty while the iteration is still running.
"""

from ..exceptions import DataError

START_CURSOR = '0'

KEY_SCAN_COMMANDS = ('SSCAN', 'HSCAN', 'ZSCAN')


def _scan_options(args, match, count):
    if match is not None:
        args.extend(('MATCH', match))
    if count is not None:
        if isinstance(count, bool) or not isinstance(count, int) or count < 1:
            raise DataError(f'SCAN count must be a positive integer, got {count!r}')
        args.extend(('COUNT', count))
    return args


def build_scan(cursor=START_CURSOR, match=None, count=None):
    """
    Build the wire arguments for SCAN.

    Args:
        cursor: Cursor returned by the previous call, or 0 to start
        match: str | None - Glob pattern filtering returned keys
        count: int | None - Batch size hint

    Returns:
        list: ['SCAN', cursor, ...]
    """
    return _scan_options(['SCAN', cursor], match, count)


def build_key_scan(command, key, cursor=START_CURSOR, match=None, count=None):
    """
    Build the wire arguments for SSCAN, HSCAN, or ZSCAN.

    Args:
        command: str - One of KEY_SCAN_COMMANDS
        key: Key of the collection being iterated
        cursor: Cursor returned by the previous call, or 0 to start
        match: str | None - Glob pattern filtering returned members
        count: int | None - Batch size hint

    Returns:
        list: [command, key, cursor, ...]
    """
    command = command.upper()
    if command not in KEY_SCAN_COMMANDS:
        raise DataError(f'not a keyed scan command: {command!r}')
    return _scan_options([command, key, cursor], match, count)


def is_complete(cursor):
    """True when a returned cursor signals the end of the iteration."""
    return str(cursor) == START_CURSOR


async def iterate(fetch_page, match=None, count=None):
    """
    Drive a SCAN loop until the server returns cursor 0.

    Args:
        fetch_page: async callable(cursor, match, count) -> (cursor, items)
        match: str | None - Glob pattern
        count: int | None - Batch size hint

    Yields:
        Each returned item, page by page in server order
    """
    cursor = START_CURSOR
    while True:
        cursor, items = await fetch_page(cursor, match, count)
        for item in items:
            yield item
        if is_complete(cursor):
            return
