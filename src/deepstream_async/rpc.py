"""
Awaitable remote procedure calls and progress events.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import TYPE_CHECKING, Any, Callable

from .bridge import Deferred
from .errors import RpcError, describe
from .types import ProgressEvent

if TYPE_CHECKING:
    from .types import RpcResponse, StoreClient

__all__ = ["RpcBridge"]

logger = logging.getLogger(__name__)


class RpcBridge:
    """
    RPC operations over the store client.

    Example:
        rpc = RpcBridge(client)
        total = await rpc.call("add-two", {"a": 1, "b": 2})

        async def add_two(data):
            return data["a"] + data["b"]

        rpc.provide("add-two", add_two)
    """

    __slots__ = ("_client", "_progress_prefix")

    def __init__(self, client: StoreClient, progress_prefix: str = "progress_event") -> None:
        self._client = client
        self._progress_prefix = progress_prefix

    async def call(self, rpc_id: str, args: Any = None) -> Any:
        """
        Make a remote procedure call.

        Raises:
            RpcError: If the provider reports an error
        """
        deferred: Deferred[Any] = Deferred(rpc_id)
        self._client.rpc.make(
            rpc_id,
            args,
            deferred.node_callback(
                lambda error: RpcError(f"{rpc_id}: {describe(error)}", rpc_id, error)
            ),
        )
        return await deferred

    def provide(self, rpc_id: str, handler: Callable[..., Any]) -> None:
        """
        Register a provider for an RPC.

        Plain callables receive ``(data, response)`` and answer through the
        response themselves. Coroutine functions receive ``data`` only: the
        returned value is sent and a raised exception is reported as the
        RPC's error. Coroutine providers run on the loop that registered
        them, so they must be registered from a running loop.
        """
        if inspect.iscoroutinefunction(handler):
            callback = self._adapt(rpc_id, handler, asyncio.get_running_loop())
        else:
            callback = handler
        self._client.rpc.provide(rpc_id, callback)

    def unprovide(self, rpc_id: str) -> None:
        self._client.rpc.unprovide(rpc_id)

    @staticmethod
    def _adapt(
        rpc_id: str,
        handler: Callable[[Any], Any],
        loop: asyncio.AbstractEventLoop,
    ) -> Callable[[Any, RpcResponse], None]:
        def callback(data: Any, response: RpcResponse) -> None:
            future = asyncio.run_coroutine_threadsafe(handler(data), loop)

            def reply(done: Any) -> None:
                if done.cancelled():
                    response.error(f"{rpc_id}: provider cancelled")
                    return
                error = done.exception()
                if error is None:
                    response.send(done.result())
                else:
                    logger.warning("Provider for %s failed: %s", rpc_id, error)
                    response.error(describe(error))

            future.add_done_callback(reply)

        return callback

    def create_progress_event(self, starting_value: Any = 0) -> ProgressEvent:
        """Create a progress event and broadcast its starting value."""
        progress = ProgressEvent(id=f"{self._progress_prefix}/{self._client.get_uid()}")
        self.update_progress_event(progress, starting_value or 0)
        return progress

    def update_progress_event(self, progress: ProgressEvent, value: Any) -> None:
        """Store and broadcast a new progress value."""
        progress.value = value
        self._client.event.emit(progress.id, progress.value)
