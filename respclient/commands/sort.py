"""
respclient SORT Command Builder

    SORT key [BY pattern] [LIMIT offset count] [GET pattern [GET pattern ...]]
             [ASC|DESC] [ALPHA] [STORE destination]

Patterns substitute the element for the first '*'. A '->field' suffix
reads a hash field instead of a plain key: 'weight_*->kg' sorts by field
'kg' of hash 'weight_<element>'. GET '#' returns the element itself.

BY with a pattern that contains no '*' (conventionally 'nosort') skips
sorting while still applying LIMIT and GET.

With STORE the server replies with the number of stored elements instead
of the elements, so the caller must pick the integer mapper.
"""

from ..exceptions import DataError

NOSORT = 'nosort'
SELF_PATTERN = '#'


def hash_field(key_pattern, field):
    """
    Compose a BY/GET pattern dereferencing a hash field.

    Example: hash_field('object_*', 'name') -> 'object_*->name'
    """
    return f'{key_pattern}->{field}'


class SortOptions:
    """
    Modifiers of one SORT call.

    Attributes:
        by: str | None - External weight pattern, or 'nosort'
        limit: tuple | None - (offset, count)
        get: tuple - Patterns to fetch per element, in reply order
        desc: bool - Descending order
        alpha: bool - Lexicographic instead of numeric comparison
        store: str | None - Destination list key
    """

    __slots__ = ('by', 'limit', 'get', 'desc', 'alpha', 'store')

    def __init__(self, by=None, limit=None, get=None, desc=False, alpha=False, store=None):
        if limit is not None:
            try:
                offset, count = limit
                limit = (int(offset), int(count))
            except (TypeError, ValueError):
                raise DataError(f'SORT limit must be an (offset, count) pair, got {limit!r}') from None

        # A single pattern is iterable too, so accept it explicitly
        if get is None:
            get = ()
        elif isinstance(get, (str, bytes)):
            get = (get,)
        else:
            get = tuple(get)

        self.by = by
        self.limit = limit
        self.get = get
        self.desc = bool(desc)
        self.alpha = bool(alpha)
        self.store = store

    @property
    def has_store(self):
        return self.store is not None

    @property
    def values_per_element(self):
        """Reply entries produced per sorted element (1 without GET)."""
        return len(self.get) or 1

    def __repr__(self):
        fields = ', '.join(f'{name}={getattr(self, name)!r}' for name in self.__slots__)
        return f'SortOptions({fields})'


def build_sort(key, options=None):
    """
    Build the wire arguments for SORT.

    Args:
        key: List, set, or sorted set to sort
        options: SortOptions | None

    Returns:
        list: ['SORT', key, ...modifiers in canonical order...]
    """
    options = options or SortOptions()
    args = ['SORT', key]
    if options.by is not None:
        args.extend(('BY', options.by))
    if options.limit is not None:
        args.extend(('LIMIT', options.limit[0], options.limit[1]))
    for pattern in options.get:
        args.extend(('GET', pattern))
    if options.desc:
        args.append('DESC')
    if options.alpha:
        args.append('ALPHA')
    if options.store is not None:
        args.extend(('STORE', options.store))
    return args


def group_sorted(values, options):
    """
    Split a flat SORT reply into one tuple per element when several GET
    patterns were given.

    Args:
        values: list - Mapped SORT reply
        options: SortOptions used for the call

    Returns:
        list of tuples, each of len(options.get) entries
    """
    width = options.values_per_element
    return [tuple(values[i:i + width]) for i in range(0, len(values), width)]
