"""
Concurrent resolution of record references.

join_list() fetches every entry of a list at once and returns the results
in entry order. With join_fields it also resolves the references stored at
the given paths of each fetched record, pairing them up as JoinedRecord
values.

All fetches of one call are started together. The first failure fails the
whole call; the remaining fetches are not cancelled and any handles they
produce are never handed to the caller, so their subscriptions stay open
until the store client tears them down.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from .errors import RecordError
from .paths import get_field
from .types import JoinedRecord, PathMode

if TYPE_CHECKING:
    from .bridge import RecordBridge
    from .types import ListHandle, PathExpression, ProgressObserver, RecordRef

__all__ = ["JoinEngine"]

logger = logging.getLogger(__name__)


def _entries(source: ListHandle | Sequence[RecordRef]) -> list[RecordRef]:
    if isinstance(source, Sequence) and not isinstance(source, str):
        return list(source)
    return list(source.get_entries())


def _data(payload: Any) -> Any:
    """Plain data behind a payload; live handles are read through get()."""
    if isinstance(payload, (Mapping, Sequence)) or not callable(getattr(payload, "get", None)):
        return payload
    return payload.get()


class JoinEngine:
    """
    Fan-out joins over a RecordBridge.

    Example:
        engine = JoinEngine(RecordBridge(client))
        todos = await engine.join_list(todo_list, snapshot=True)
        pairs = await engine.join_list(
            todo_list, snapshot=True, join_fields=["owner", "meta.project"]
        )
        pairs[0].right["owner"]  # the owner's snapshot
    """

    __slots__ = ("_records", "_path_mode")

    def __init__(self, records: RecordBridge, *, path_mode: PathMode = PathMode.PRESENT) -> None:
        self._records = records
        self._path_mode = path_mode

    def _fetch(self, ref: RecordRef, snapshot: bool) -> Any:
        if snapshot:
            return self._records.get_snapshot(ref)
        return self._records.get_record(ref)

    async def join_list(
        self,
        source: ListHandle | Sequence[RecordRef],
        *,
        snapshot: bool = False,
        join_fields: Iterable[PathExpression] | None = None,
        progress: ProgressObserver | None = None,
    ) -> list[Any]:
        """
        Resolve every entry of a list.

        Args:
            source: A list handle, or the refs themselves
            snapshot: Fetch snapshots instead of live record handles
            join_fields: Paths whose refs are resolved on every record
            progress: Called with (index, total) as each entry resolves;
                completion order, not index order

        Returns:
            Resolved payloads aligned with the entries, or JoinedRecord
            values when join_fields is given

        Raises:
            RecordError: The first failure among the fetches
        """
        entries = _entries(source)
        total = len(entries)
        logger.debug("Joining %d entries (snapshot=%s)", total, snapshot)

        async def resolve(index: int, ref: RecordRef) -> Any:
            payload = await self._fetch(ref, snapshot)
            if progress is not None:
                self._notify(progress, index, total)
            return payload

        lefts = await asyncio.gather(*(resolve(i, ref) for i, ref in enumerate(entries)))

        if join_fields is None:
            return list(lefts)

        fields = list(join_fields)
        rights = await asyncio.gather(
            *(self.join_fields(left, fields, snapshot=snapshot) for left in lefts)
        )
        logger.debug("Joined %d fields on %d entries", len(fields), total)
        return [JoinedRecord(left, right) for left, right in zip(lefts, rights)]

    async def join_fields(
        self,
        payload: Any,
        target_fields: Iterable[PathExpression],
        *,
        snapshot: bool = False,
    ) -> dict[PathExpression, Any]:
        """
        Resolve the refs stored at several paths of one record.

        Args:
            payload: Record data, or a live record handle
            target_fields: Paths holding record refs
            snapshot: Fetch snapshots instead of live record handles

        Returns:
            Mapping of each path to the payload its ref resolved to

        Raises:
            RecordError: If a path holds no ref, or the first fetch failure
        """
        data = _data(payload)
        paths = list(dict.fromkeys(target_fields))

        async def resolve(path: PathExpression) -> Any:
            ref = get_field(data, path, mode=self._path_mode)
            if not isinstance(ref, str):
                raise RecordError(f"No record reference at {path!r}", detail=ref)
            return await self._fetch(ref, snapshot)

        resolved = await asyncio.gather(*(resolve(path) for path in paths))
        return dict(zip(paths, resolved))

    @staticmethod
    def _notify(progress: ProgressObserver, index: int, total: int) -> None:
        try:
            progress(index, total)
        except Exception:
            logger.warning(
                "Progress observer failed at entry %d of %d", index, total, exc_info=True
            )
