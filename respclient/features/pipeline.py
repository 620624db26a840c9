"""
respclient Pipeline Module

Queues typed commands and sends them to the server in one write.

Pipeline Semantics:
1. Command methods queue (arguments, mapper) pairs and return the pipeline,
   so calls can be chained. Validation and the capability gate run when a
   command is queued.
2. execute() writes the whole batch, reads one reply per command in order,
   and maps each reply.
3. A server error does not stop the batch. Every reply is read first, then
   the first error is raised (raise_on_error=True) or left in the result
   list as a ServerError instance (raise_on_error=False).

Transaction Semantics (transaction=True):
1. The batch is wrapped as MULTI, <commands>, EXEC and still sent in one write
2. Each queued command is answered with +QUEUED, or with an error if the
   server rejected it while queueing
3. EXEC returns one result per command, or a null array when a WATCHed
   key changed (WatchError), or EXECABORT when a command was rejected
"""

import logging

from ..commands import mappers
from ..commands.methods import CommandMethods
from ..exceptions import DataError, MappingError, ServerError, WatchError

logger = logging.getLogger(__name__)


class Pipeline(CommandMethods):
    """
    Command batch bound to a client's connection.

    Usage:
        pipe = client.pipeline(transaction=True)
        pipe.set('a', 1).incr('a').get('a')
        ok, value, current = await pipe.execute()

    Memory: queued commands are held until execute() or reset()
    """

    __slots__ = (
        'client',           # Redis: Client whose connection and table are used
        'transaction',      # bool: Wrap the batch in MULTI/EXEC
        'command_stack',    # list[tuple[list, callable]]: Queued (args, mapper) pairs
    )

    def __init__(self, client, transaction=False):
        """
        Args:
            client: Redis - Client providing connection, router, server_version
            transaction: bool - Wrap the batch in MULTI/EXEC
        """
        self.client = client
        self.transaction = transaction
        self.command_stack = []

    @property
    def router(self):
        return self.client.router

    @property
    def server_version(self):
        return self.client.server_version

    def _call(self, name, *args, mapper=None):
        command, default_mapper = self.router.build(name, *args, version=self.server_version)
        self.command_stack.append((command, mapper or default_mapper))
        return self

    def execute_command(self, *args):
        """Queue a raw command; its result is the unmapped Reply."""
        if not args:
            raise DataError('Empty command')
        self.command_stack.append((list(args), mappers.identity))
        return self

    def reset(self):
        """Discard queued commands."""
        self.command_stack = []

    def __len__(self):
        return len(self.command_stack)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.reset()

    # =========================================================================
    # Execution
    # =========================================================================

    async def execute(self, raise_on_error=True):
        """
        Send every queued command and return their mapped results.

        The queue is cleared before anything is sent, whatever the outcome.

        Args:
            raise_on_error: bool - Raise the first ServerError once every
                reply has been read (default True)

        Returns:
            list: One result per queued command, in order. With
                raise_on_error=False a rejected command yields its
                ServerError instance.

        Raises:
            ServerError: First server error, when raise_on_error is True
            WatchError: A WATCHed key changed before EXEC
            MappingError: A reply did not fit its command's mapper
        """
        stack = self.command_stack
        self.reset()
        if not stack:
            return []

        if self.transaction:
            replies = await self._execute_transaction(stack)
        else:
            replies = await self.client.connection.pipeline(
                [command for command, _ in stack], raise_on_error=False)

        logger.debug('Executed %s of %d commands',
                     'transaction' if self.transaction else 'pipeline', len(stack))

        results = []
        first_error = None
        for reply, (_, mapper) in zip(replies, stack):
            if isinstance(reply, ServerError):
                if first_error is None:
                    first_error = reply
                results.append(reply)
            else:
                results.append(mapper(reply))

        if raise_on_error and first_error is not None:
            raise first_error
        return results

    async def _execute_transaction(self, stack):
        """
        Run the batch inside MULTI/EXEC.

        Returns:
            list: Reply or ServerError per queued command
        """
        multi, _ = self.router.build('MULTI')
        exec_, _ = self.router.build('EXEC')
        commands = [multi]
        commands.extend(command for command, _ in stack)
        commands.append(exec_)

        replies = await self.client.connection.pipeline(commands, raise_on_error=False)

        # MULTI itself was refused (e.g. nested MULTI)
        if isinstance(replies[0], ServerError):
            raise replies[0]

        # Commands rejected while queueing
        queue_errors = [reply for reply in replies[1:-1] if isinstance(reply, ServerError)]

        exec_reply = replies[-1]
        if isinstance(exec_reply, ServerError):
            if queue_errors:
                raise queue_errors[0] from exec_reply
            raise exec_reply

        if exec_reply.is_nil:
            raise WatchError('Watched key changed, transaction aborted')

        items = exec_reply.as_array()
        if items is None or len(items) != len(stack):
            raise MappingError(
                f'EXEC returned {exec_reply!r} for {len(stack)} queued commands', exec_reply)

        return [
            ServerError.from_message(item.value) if item.is_error else item
            for item in items
        ]
