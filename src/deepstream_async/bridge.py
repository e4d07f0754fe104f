"""
Awaitable wrappers around the store client's callback primitives.

Every store primitive reports its outcome through callbacks or handle
events. A Deferred turns that into one awaitable future which settles
exactly once: the first success or failure wins and anything reported
afterwards is ignored.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from .errors import AuthError, NotFoundError, RecordError, describe

if TYPE_CHECKING:
    from .types import ListHandle, RecordHandle, RecordRef, StoreClient

T = TypeVar("T")

__all__ = ["Deferred", "RecordBridge", "login"]

logger = logging.getLogger(__name__)


class Deferred(Generic[T]):
    """
    Single-shot result fed by callbacks.

    Callbacks may fire on the loop's thread or on a client I/O thread;
    settlement is always marshalled onto the loop that created the
    Deferred.

    Example:
        deferred = Deferred[dict]()
        client.record.snapshot(ref, deferred.node_callback(to_error))
        data = await deferred
    """

    __slots__ = ("_loop", "_future", "_label")

    def __init__(self, label: str = "") -> None:
        self._loop = asyncio.get_running_loop()
        self._future: asyncio.Future[T] = self._loop.create_future()
        self._label = label

    def resolve(self, value: T) -> None:
        self._loop.call_soon_threadsafe(self._settle, value, None)

    def reject(self, error: BaseException) -> None:
        self._loop.call_soon_threadsafe(self._settle, None, error)

    def node_callback(self, to_error: Any) -> Any:
        """Build an ``(error, result)`` callback settling this Deferred."""

        def callback(error: Any, result: Any = None) -> None:
            if error:
                self.reject(to_error(error))
            else:
                self.resolve(result)

        return callback

    def _settle(self, value: Any, error: BaseException | None) -> None:
        if self._future.done():
            logger.debug("Ignoring late settlement for %s", self._label or "deferred")
            return
        if error is not None:
            self._future.set_exception(error)
        else:
            self._future.set_result(value)

    def __await__(self):
        return self._future.__await__()

    def __repr__(self) -> str:
        status = "settled" if self._future.done() else "pending"
        return f"Deferred({self._label}, {status})"


async def login(client: StoreClient, credentials: dict[str, Any]) -> Any:
    """
    Log in to the store.

    Returns:
        The session data reported by the store

    Raises:
        AuthError: If the store rejects the credentials
    """
    deferred: Deferred[Any] = Deferred("login")

    def callback(success: bool, data: Any = None) -> None:
        if success:
            deferred.resolve(data)
        else:
            deferred.reject(AuthError(f"Login rejected: {describe(data)}", data))

    client.login(credentials, callback)
    return await deferred


class RecordBridge:
    """
    Awaitable record operations.

    Handles returned by get_record() and get_list() are live
    subscriptions owned by the caller, who must discard() them.
    """

    __slots__ = ("_client",)

    def __init__(self, client: StoreClient) -> None:
        self._client = client

    async def _when_ready(self, handle: Any, ref: RecordRef) -> Any:
        deferred: Deferred[Any] = Deferred(ref)

        def on_error(error: Any, *_: Any) -> None:
            deferred.reject(RecordError(f"{ref}: {describe(error)}", ref, error))

        handle.on("error", on_error)
        handle.when_ready(deferred.resolve)
        return await deferred

    async def get_record(self, ref: RecordRef, *, must_exist: bool = False) -> RecordHandle:
        """
        Get a live record handle once it is ready.

        The store creates records that do not exist yet; pass
        must_exist=True to check for existence first.

        Raises:
            NotFoundError: If must_exist is set and the record is absent
            RecordError: If the store reports an error before readiness
        """
        if must_exist:
            await self.exists(ref, reject_on_false=True)
        return await self._when_ready(self._client.record.get_record(ref), ref)

    async def get_list(self, ref: RecordRef) -> ListHandle:
        """Get a live list handle once it is ready."""
        return await self._when_ready(self._client.record.get_list(ref), ref)

    async def get_snapshot(self, ref: RecordRef) -> Any:
        """
        Get a detached copy of a record's data.

        Raises:
            RecordError: If the store reports an error, e.g. not found
        """
        deferred: Deferred[Any] = Deferred(ref)
        self._client.record.snapshot(
            ref,
            deferred.node_callback(
                lambda error: RecordError(f"{ref}: {describe(error)}", ref, error)
            ),
        )
        return await deferred

    async def exists(self, ref: RecordRef, *, reject_on_false: bool = False) -> bool:
        """
        Check whether a record exists.

        Returns:
            True if the record exists, False if not

        Raises:
            NotFoundError: If reject_on_false is set and the record is absent
            RecordError: If the store reports an error for the check
        """
        deferred: Deferred[bool] = Deferred(ref)
        self._client.record.has(
            ref,
            deferred.node_callback(
                lambda error: RecordError(f"{ref}: {describe(error)}", ref, error)
            ),
        )
        found = bool(await deferred)
        if reject_on_false and not found:
            raise NotFoundError(ref)
        return found
