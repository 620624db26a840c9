"""
Features module for respclient.

- info: INFO parsing, ServerVersion and the capability gate
- pipeline: batched and MULTI/EXEC command execution
"""

from .info import ServerVersion, ServerInfo

__all__ = ['ServerVersion', 'ServerInfo']
