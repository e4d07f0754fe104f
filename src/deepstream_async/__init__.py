"""
deepstream-async - Awaitable access layer for callback-based real-time store clients.

This package wraps a deepstream-style store client with:
- Awaitable records, lists, snapshots, existence checks and RPCs
- Concurrent joins that resolve list entries and the refs in their fields
- Dot-notation field access on record data
- Async/await native API

Example usage:
    from deepstream_async import DeepstreamAsync

    async def main(client):
        ds = DeepstreamAsync(client)
        await ds.login({"username": "test"})

        todos = await ds.get_list("todos")
        items = await ds.join_list(todos, snapshot=True)
        print(items)  # [{'title': ...}, ...] in list order

        pairs = await ds.join_list(todos, snapshot=True, join_fields=["owner"])
        print(pairs[0].right["owner"])
"""

from __future__ import annotations

__version__ = "0.1.0"

from .bridge import Deferred, RecordBridge
from .client import DeepstreamAsync
from .config import configure, configure_from_env, get_config
from .errors import (
    AuthError,
    DeepstreamAsyncError,
    ErrorCode,
    NotFoundError,
    PathError,
    RecordError,
    RpcError,
    is_error_code,
)
from .join import JoinEngine
from .options import JoinOptions
from .paths import get_field, set_field
from .rpc import RpcBridge
from .types import ClientConfig, JoinedRecord, PathMode, ProgressEvent

__all__ = [
    # Main API
    "DeepstreamAsync",
    "RecordBridge",
    "RpcBridge",
    "JoinEngine",
    "Deferred",
    # Values and options
    "ClientConfig",
    "JoinOptions",
    "JoinedRecord",
    "PathMode",
    "ProgressEvent",
    # Field access
    "get_field",
    "set_field",
    # Configuration
    "configure",
    "configure_from_env",
    "get_config",
    # Errors
    "ErrorCode",
    "DeepstreamAsyncError",
    "AuthError",
    "RecordError",
    "NotFoundError",
    "RpcError",
    "PathError",
    "is_error_code",
    # Version
    "__version__",
]
