"""
respclient BITFIELD Command Builder

BITFIELD treats a string as an array of arbitrary width integers. One call
carries a chain of subcommands that the server applies left to right:

    BITFIELD key [GET type offset] [SET type offset value]
                 [INCRBY type offset increment] [OVERFLOW WRAP|SAT|FAIL] ...

OVERFLOW is positional: it changes the overflow behavior of the SET and
INCRBY subcommands that follow it in the same call, and nothing before it.
Subcommands are therefore modeled as an ordered sequence of variants and
flattened in order; they are never reordered or merged.

Types are 'i1'..'i64' (signed) or 'u1'..'u63' (unsigned). Offsets are a
bit position, or '#N' meaning N times the type width.

The reply holds one slot per non-OVERFLOW subcommand. Under OVERFLOW FAIL
a subcommand that would overflow yields an absent slot (None).
"""

from ..exceptions import DataError


class OverflowMode:
    """Overflow behaviors accepted by OVERFLOW."""

    WRAP = 'WRAP'   # Modular arithmetic
    SAT = 'SAT'     # Clamp to the type's minimum/maximum
    FAIL = 'FAIL'   # Skip the operation and report nil

    ALL = (WRAP, SAT, FAIL)


def parse_bitfield_type(type_spec):
    """
    Parse bitfield type specifier.

    Args:
        type_spec: str or bytes - Type (e.g., 'u8', 'i16')

    Returns:
        Tuple of (signed: bool, bits: int)

    Raises:
        DataError: If invalid type format
    """
    if isinstance(type_spec, bytes):
        type_spec = type_spec.decode('ascii', 'replace')
    if not isinstance(type_spec, str) or len(type_spec) < 2:
        raise DataError(f'invalid bitfield type: {type_spec!r}')

    signed = type_spec[0] == 'i'
    if not signed and type_spec[0] != 'u':
        raise DataError(f'invalid bitfield type: {type_spec!r}')

    if not type_spec[1:].isdigit():
        raise DataError(f'invalid bitfield type: {type_spec!r}')
    bits = int(type_spec[1:])

    # Validate bit width
    if signed:
        if bits < 1 or bits > 64:
            raise DataError(f'invalid bitfield type: {type_spec!r}')
    else:
        if bits < 1 or bits > 63:
            raise DataError(f'invalid bitfield type: {type_spec!r}')

    return signed, bits


def parse_bitfield_offset(offset):
    """
    Validate a bitfield offset.

    Args:
        offset: int, or str/bytes of digits optionally prefixed with '#'

    Returns:
        str: Offset as sent on the wire

    Raises:
        DataError: If the offset is negative or malformed
    """
    if isinstance(offset, bytes):
        offset = offset.decode('ascii', 'replace')
    if isinstance(offset, int) and not isinstance(offset, bool):
        if offset < 0:
            raise DataError(f'bitfield offset must be non-negative: {offset}')
        return str(offset)
    if isinstance(offset, str):
        digits = offset[1:] if offset.startswith('#') else offset
        if digits.isdigit():
            return offset
    raise DataError(f'invalid bitfield offset: {offset!r}')


class BitfieldSubcommand:
    """Base class of the BITFIELD subcommand variants."""

    __slots__ = ()

    #: False for subcommands that do not produce a reply slot
    has_reply = True

    def to_args(self):
        """Return the wire arguments for this subcommand."""
        raise NotImplementedError

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.to_args() == other.to_args()

    def __hash__(self):
        return hash((type(self).__name__, tuple(self.to_args())))

    def __repr__(self):
        return f"{type(self).__name__}({', '.join(map(repr, self.to_args()[1:]))})"


class Get(BitfieldSubcommand):
    """GET <type> <offset>"""

    __slots__ = ('type', 'offset')

    def __init__(self, type, offset):
        parse_bitfield_type(type)
        self.type = type
        self.offset = parse_bitfield_offset(offset)

    def to_args(self):
        return ['GET', self.type, self.offset]


class Set(BitfieldSubcommand):
    """SET <type> <offset> <value>; the reply slot holds the old value."""

    __slots__ = ('type', 'offset', 'value')

    def __init__(self, type, offset, value):
        parse_bitfield_type(type)
        self.type = type
        self.offset = parse_bitfield_offset(offset)
        self.value = _require_int(value, 'value')

    def to_args(self):
        return ['SET', self.type, self.offset, self.value]


class IncrBy(BitfieldSubcommand):
    """INCRBY <type> <offset> <increment>; the reply slot holds the new value."""

    __slots__ = ('type', 'offset', 'increment')

    def __init__(self, type, offset, increment):
        parse_bitfield_type(type)
        self.type = type
        self.offset = parse_bitfield_offset(offset)
        self.increment = _require_int(increment, 'increment')

    def to_args(self):
        return ['INCRBY', self.type, self.offset, self.increment]


class Overflow(BitfieldSubcommand):
    """OVERFLOW <mode>; applies to later SET/INCRBY subcommands only."""

    __slots__ = ('mode',)

    has_reply = False

    def __init__(self, mode):
        if isinstance(mode, bytes):
            mode = mode.decode('ascii', 'replace')
        mode = mode.upper() if isinstance(mode, str) else mode
        if mode not in OverflowMode.ALL:
            raise DataError(f'invalid overflow mode: {mode!r}')
        self.mode = mode

    def to_args(self):
        return ['OVERFLOW', self.mode]


def _require_int(value, what):
    if isinstance(value, bool) or not isinstance(value, int):
        raise DataError(f'bitfield {what} must be an integer, got {value!r}')
    return value


def build_bitfield(key, subcommands):
    """
    Flatten a BITFIELD call into wire arguments.

    Args:
        key: Key holding the bit string
        subcommands: Iterable of BitfieldSubcommand, in execution order

    Returns:
        list: ['BITFIELD', key, ...subcommand arguments in order...]

    Raises:
        DataError: If an element is not a BitfieldSubcommand
    """
    args = ['BITFIELD', key]
    for sub in subcommands:
        if not isinstance(sub, BitfieldSubcommand):
            raise DataError(f'not a bitfield subcommand: {sub!r}')
        args.extend(sub.to_args())
    return args


def reply_slots(subcommands):
    """Number of reply slots a subcommand chain produces."""
    return sum(1 for sub in subcommands if sub.has_reply)


class BitFieldOperation:
    """
    Fluent builder for one BITFIELD call bound to a client.

    Usage:
        results = await (client.bitfield_operation('flags')
                         .overflow('SAT')
                         .incrby('u4', '#0', 3)
                         .get('u4', 0)
                         .execute())
    """

    __slots__ = ('client', 'key', 'subcommands')

    def __init__(self, client, key):
        """
        Args:
            client: Redis or Pipeline - Provides bitfield(key, *subcommands)
            key: Key holding the bit string
        """
        self.client = client
        self.key = key
        self.subcommands = []

    def get(self, type, offset):
        self.subcommands.append(Get(type, offset))
        return self

    def set(self, type, offset, value):
        self.subcommands.append(Set(type, offset, value))
        return self

    def incrby(self, type, offset, increment):
        self.subcommands.append(IncrBy(type, offset, increment))
        return self

    def overflow(self, mode):
        self.subcommands.append(Overflow(mode))
        return self

    @property
    def command(self):
        """Wire arguments for the collected subcommands."""
        return build_bitfield(self.key, self.subcommands)

    def reset(self):
        """Discard collected subcommands."""
        self.subcommands = []

    def execute(self):
        """
        Issue the collected subcommands as one BITFIELD call.

        Returns whatever the bound client's bitfield() returns: a coroutine
        resolving to the result list on Redis, or the Pipeline itself once
        the call is queued.

        Returns:
            Awaitable of list (int or None per non-OVERFLOW subcommand), or
            Pipeline
        """
        subcommands = self.subcommands
        self.reset()
        return self.client.bitfield(self.key, *subcommands)
