"""
Unit tests for the awaitable record bridge.

Tests cover:
- Exactly-once settlement of Deferred
- Login success and rejection
- Record and list readiness, store errors and implicit creation
- Snapshots and existence checks, including strict mode
"""

import asyncio
import threading

import pytest

from deepstream_async import AuthError, Deferred, NotFoundError, RecordError
from deepstream_async.bridge import login


class TestDeferred:
    """Tests for single-shot settlement."""

    @pytest.mark.asyncio
    async def test_resolve(self):
        """The first resolution is the result."""
        deferred = Deferred("test")
        deferred.resolve(42)
        assert await deferred == 42

    @pytest.mark.asyncio
    async def test_reject(self):
        """A rejection is raised from the await."""
        deferred = Deferred("test")
        deferred.reject(ValueError("boom"))
        with pytest.raises(ValueError, match="boom"):
            await deferred

    @pytest.mark.asyncio
    async def test_first_settlement_wins(self):
        """Later settlements are ignored."""
        deferred = Deferred("test")
        deferred.resolve("first")
        deferred.reject(RuntimeError("late"))
        deferred.resolve("later")
        assert await deferred == "first"

    @pytest.mark.asyncio
    async def test_error_then_ready_keeps_error(self):
        """An error reported first is not overridden by readiness."""
        deferred = Deferred("test")
        deferred.reject(RuntimeError("first"))
        deferred.resolve("late")
        with pytest.raises(RuntimeError, match="first"):
            await deferred

    @pytest.mark.asyncio
    async def test_settle_from_other_thread(self):
        """Callbacks fired on a client I/O thread settle on the loop."""
        deferred = Deferred("threaded")
        thread = threading.Thread(target=deferred.resolve, args=("from-thread",))
        thread.start()
        result = await asyncio.wait_for(asyncio.ensure_future(_await(deferred)), 1.0)
        thread.join()
        assert result == "from-thread"

    @pytest.mark.asyncio
    async def test_node_callback(self):
        """(error, result) callbacks map errors through the converter."""
        ok = Deferred("ok")
        ok.node_callback(RuntimeError)(None, {"x": 1})
        assert await ok == {"x": 1}

        failed = Deferred("failed")
        failed.node_callback(RuntimeError)("BAD", None)
        with pytest.raises(RuntimeError, match="BAD"):
            await failed

    @pytest.mark.asyncio
    async def test_repr(self):
        deferred = Deferred("users/1")
        assert "users/1" in repr(deferred)
        assert "pending" in repr(deferred)


async def _await(deferred):
    return await deferred


class TestLogin:
    """Tests for login()."""

    @pytest.mark.asyncio
    async def test_login_success(self, store):
        """Accepted credentials resolve with the session data."""
        result = await login(store, {"username": "test"})
        assert result == {"username": "test"}

    @pytest.mark.asyncio
    async def test_login_rejected(self, store):
        """Rejected credentials raise AuthError carrying the store payload."""
        with pytest.raises(AuthError) as exc_info:
            await login(store, {"username": "mallory"})
        assert exc_info.value.detail == "INVALID_AUTH_DATA"
        assert "INVALID_AUTH_DATA" in exc_info.value.message


class TestGetRecord:
    """Tests for RecordBridge.get_record() and get_list()."""

    @pytest.mark.asyncio
    async def test_get_record_ready(self, records, store):
        """A ready handle is returned."""
        handle = await records.get_record("users/ada")
        assert handle.name == "users/ada"
        assert handle.get() == {"name": "Ada", "team": "teams/core"}
        assert store.subscriptions == ["users/ada"]

    @pytest.mark.asyncio
    async def test_get_record_creates_missing(self, records, store):
        """Missing records are created by the store, not rejected."""
        handle = await records.get_record("users/new")
        assert handle.get() == {}
        assert "users/new" in store.records

    @pytest.mark.asyncio
    async def test_get_record_error(self, records, store):
        """A store error before readiness raises RecordError."""
        store.failures["users/ada"] = "PERMISSION_DENIED"
        with pytest.raises(RecordError) as exc_info:
            await records.get_record("users/ada")
        assert exc_info.value.ref == "users/ada"
        assert exc_info.value.detail == "PERMISSION_DENIED"

    @pytest.mark.asyncio
    async def test_error_and_ready_settle_once(self, records, store):
        """When both error and ready fire, the error reported first wins."""
        store.failures["users/ada"] = "VERSION_EXISTS"
        store.also_ready_on_error = True
        with pytest.raises(RecordError, match="VERSION_EXISTS"):
            await records.get_record("users/ada")

    @pytest.mark.asyncio
    async def test_get_record_must_exist(self, records, store):
        """must_exist checks existence before subscribing."""
        handle = await records.get_record("users/bob", must_exist=True)
        assert handle.get()["name"] == "Bob"

    @pytest.mark.asyncio
    async def test_get_record_must_exist_missing(self, records, store):
        """must_exist raises NotFoundError and never subscribes."""
        with pytest.raises(NotFoundError) as exc_info:
            await records.get_record("users/ghost", must_exist=True)
        assert exc_info.value.ref == "users/ghost"
        assert store.subscriptions == []
        assert "users/ghost" not in store.records

    @pytest.mark.asyncio
    async def test_get_list(self, records):
        """List handles expose their entries."""
        handle = await records.get_list("todos")
        assert handle.get_entries() == ["todos/1", "todos/2", "todos/3"]

    @pytest.mark.asyncio
    async def test_get_list_error(self, records, store):
        store.failures["todos"] = "STORAGE_ERROR"
        with pytest.raises(RecordError, match="STORAGE_ERROR"):
            await records.get_list("todos")


class TestSnapshotAndExists:
    """Tests for RecordBridge.get_snapshot() and exists()."""

    @pytest.mark.asyncio
    async def test_snapshot(self, records, store):
        """Snapshots are detached copies."""
        data = await records.get_snapshot("users/ada")
        assert data == {"name": "Ada", "team": "teams/core"}
        data["name"] = "changed"
        assert store.records["users/ada"]["name"] == "Ada"

    @pytest.mark.asyncio
    async def test_snapshot_not_found(self, records):
        """A missing record raises RecordError."""
        with pytest.raises(RecordError) as exc_info:
            await records.get_snapshot("users/ghost")
        assert exc_info.value.detail == "RECORD_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_exists(self, records):
        assert await records.exists("users/ada") is True
        assert await records.exists("users/ghost") is False

    @pytest.mark.asyncio
    async def test_exists_strict(self, records):
        """reject_on_false raises NotFoundError naming the ref."""
        assert await records.exists("users/ada", reject_on_false=True) is True
        with pytest.raises(NotFoundError, match="users/ghost"):
            await records.exists("users/ghost", reject_on_false=True)

    @pytest.mark.asyncio
    async def test_exists_store_error(self, records, store):
        """A store error is a RecordError, not a False result."""
        store.failures["users/ada"] = "CONNECTION_LOST"
        with pytest.raises(RecordError) as exc_info:
            await records.exists("users/ada")
        assert not isinstance(exc_info.value, NotFoundError)
