"""
DeepstreamAsync - awaitable access to a callback-based real-time store client.

The facade wraps one explicitly constructed store client; nothing is
shared between instances, so several independent stores can be used side
by side.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from types import TracebackType
from typing import TYPE_CHECKING, Any

from .bridge import RecordBridge, login as login_async
from .config import get_config
from .join import JoinEngine
from .options import JoinOptions, parse_join_options
from .paths import get_field, set_field
from .rpc import RpcBridge
from .types import ClientConfig, PathMode

if TYPE_CHECKING:
    from .types import (
        ListHandle,
        PathExpression,
        RecordHandle,
        RecordRef,
        StoreClient,
    )

__all__ = ["DeepstreamAsync"]

logger = logging.getLogger(__name__)


class DeepstreamAsync:
    """
    Awaitable records, lists, snapshots, RPCs and joins.

    Example:
        ds = DeepstreamAsync(client)
        await ds.login({"username": "test"})

        todos = await ds.get_list("todos")
        items = await ds.join_list(todos, snapshot=True)

        # Resolve each item's owner as well
        pairs = await ds.join_list(todos, snapshot=True, join_fields=["owner"])
        for pair in pairs:
            print(pair.left["title"], pair.right["owner"]["name"])

    Attributes:
        record: Awaitable record operations
        rpc: Awaitable RPC operations and progress events
        joins: Concurrent join operations
    """

    def __init__(self, client: StoreClient, config: ClientConfig | None = None) -> None:
        """
        Args:
            client: A connected store client
            config: Settings to use instead of the global configuration
        """
        self._client = client
        self._config = config if config is not None else get_config()
        self.record = RecordBridge(client)
        self.rpc = RpcBridge(client, self._config.progress_prefix)
        self.joins = JoinEngine(self.record, path_mode=self._config.path_mode)
        self._client.on("error", self._on_client_error)

    @property
    def config(self) -> ClientConfig:
        """The configuration in use."""
        return self._config

    @property
    def client(self) -> StoreClient:
        """The wrapped store client."""
        return self._client

    @staticmethod
    def _on_client_error(error: Any, event: Any = None, topic: Any = None) -> None:
        logger.warning("Store client error: %s (event=%s, topic=%s)", error, event, topic)

    async def login(self, credentials: dict[str, Any]) -> Any:
        """
        Log in to the store.

        Raises:
            AuthError: If the store rejects the credentials
        """
        return await login_async(self._client, credentials)

    def generate_uid(self) -> str:
        """A store-issued unique token."""
        return self._client.get_uid()

    def generate_record_id(self, table: str) -> RecordRef:
        """A fresh record ref of the form ``<table>/<uid>``."""
        return f"{table}/{self.generate_uid()}"

    async def get_record(self, ref: RecordRef, *, must_exist: bool = False) -> RecordHandle:
        return await self.record.get_record(ref, must_exist=must_exist)

    async def get_snapshot(self, ref: RecordRef) -> Any:
        return await self.record.get_snapshot(ref)

    async def get_list(self, ref: RecordRef) -> ListHandle:
        return await self.record.get_list(ref)

    async def exists(self, ref: RecordRef, *, reject_on_false: bool = False) -> bool:
        return await self.record.exists(ref, reject_on_false=reject_on_false)

    async def join_list(
        self,
        source: ListHandle | Sequence[RecordRef],
        options: JoinOptions | Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> list[Any]:
        """
        Resolve every entry of a list, in entry order.

        Options (as a JoinOptions, a mapping, or keyword arguments):
            snapshot: Fetch snapshots instead of live record handles
            join_fields: Paths whose refs are resolved on every record
            progress: Called with (index, total) as each entry resolves

        Raises:
            ValueError: If the options are invalid
            RecordError: The first failure among the fetches
        """
        opts = parse_join_options(options, **kwargs)
        return await self.joins.join_list(
            source,
            snapshot=opts.snapshot,
            join_fields=opts.join_fields,
            progress=opts.progress,
        )

    async def join_fields(
        self,
        payload: Any,
        target_fields: Sequence[PathExpression],
        *,
        snapshot: bool = False,
    ) -> dict[PathExpression, Any]:
        """Resolve the refs stored at several paths of one record."""
        return await self.joins.join_fields(payload, target_fields, snapshot=snapshot)

    def get_field(
        self, payload: Any, path: PathExpression, *, mode: PathMode | None = None
    ) -> Any:
        return get_field(payload, path, mode=mode or self._config.path_mode)

    def set_field(
        self,
        payload: Any,
        path: PathExpression,
        value: Any,
        *,
        mode: PathMode | None = None,
    ) -> None:
        set_field(payload, path, value, mode=mode or self._config.path_mode)

    async def rpc_call(self, rpc_id: str, args: Any = None) -> Any:
        """
        Make a remote procedure call.

        Raises:
            RpcError: If the provider reports an error
        """
        return await self.rpc.call(rpc_id, args)

    async def close(self) -> None:
        """Close the store client, if it can be closed."""
        close = getattr(self._client, "close", None)
        if callable(close):
            close()

    async def __aenter__(self) -> DeepstreamAsync:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()
