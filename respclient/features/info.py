"""
respclient Server Info Module

Parses INFO replies and provides the capability gate used to guard
commands that older servers do not understand.

The server version is read once per connection and then passed around as
an explicit ServerVersion value; nothing here keeps global state.

INFO reply format (one bulk string):
    # Server
    redis_version:7.2.4
    redis_mode:standalone

    # Clients
    connected_clients:1
"""

import re
from collections import namedtuple

_VERSION_RE = re.compile(r'^\s*(\d+)(?:\.(\d+))?(?:\.(\d+))?')


class ServerVersion(namedtuple('ServerVersion', ('major', 'minor', 'micro'))):
    """
    (major, minor, micro) server version with tuple ordering.

    Usage:
        version = ServerVersion.parse('3.2.1')
        if version.is_at_least(3, 2, 0):
            ...
    """

    __slots__ = ()

    @classmethod
    def parse(cls, text):
        """
        Parse a dotted version string.

        Missing parts default to 0 and trailing suffixes such as '-rc1'
        are ignored.

        Args:
            text: str or bytes - Version text (e.g., '7.2.4')

        Returns:
            ServerVersion

        Raises:
            ValueError: If text does not start with a number
        """
        if isinstance(text, bytes):
            text = text.decode('ascii', 'replace')
        match = _VERSION_RE.match(text)
        if match is None:
            raise ValueError(f'invalid server version: {text!r}')
        return cls(*(int(part) if part else 0 for part in match.groups()))

    def is_at_least(self, major, minor=0, micro=0):
        """
        Capability gate: compare against a minimum version.

        Args:
            major: int - Required major version
            minor: int - Required minor version
            micro: int - Required micro version

        Returns:
            bool: True if this version is >= (major, minor, micro)
        """
        return tuple(self) >= (major, minor, micro)

    def __str__(self):
        return f'{self.major}.{self.minor}.{self.micro}'


class ServerInfo:
    """
    Sections of an INFO reply.

    Section and field names are lower-cased section headers mapped to
    {field: value} dictionaries with string values.
    """

    __slots__ = ('sections',)

    def __init__(self, sections):
        self.sections = sections

    @classmethod
    def parse(cls, text):
        """
        Parse INFO reply text.

        Args:
            text: str or bytes - INFO reply payload

        Returns:
            ServerInfo
        """
        if isinstance(text, bytes):
            text = text.decode('utf-8', 'replace')

        sections = {}
        current = sections.setdefault('default', {})
        for raw_line in text.splitlines():
            line = raw_line.strip()
            if not line:
                continue
            if line.startswith('#'):
                current = sections.setdefault(line[1:].strip().lower(), {})
                continue
            field, sep, value = line.partition(':')
            if sep:
                current[field] = value

        if not sections['default']:
            del sections['default']
        return cls(sections)

    def section(self, name):
        """Return the fields of a section (empty dict if absent)."""
        return self.sections.get(name.lower(), {})

    def get(self, field, default=None):
        """Look a field up across all sections."""
        for fields in self.sections.values():
            if field in fields:
                return fields[field]
        return default

    @property
    def server_version(self):
        """
        Version reported in the server section.

        Returns:
            ServerVersion or None if the reply carries no version
        """
        version = self.get('redis_version')
        if version is None:
            return None
        return ServerVersion.parse(version)

    def __getitem__(self, name):
        return self.sections[name.lower()]

    def __contains__(self, name):
        return name.lower() in self.sections

    def __repr__(self):
        return f'ServerInfo({sorted(self.sections)})'
