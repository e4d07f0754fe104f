"""
Type definitions for deepstream-async

This module contains the value types shared across the package and the
protocols describing the callback-based store client this layer wraps.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Protocol, TypeAlias


RecordRef: TypeAlias = str
PathExpression: TypeAlias = str
ProgressObserver: TypeAlias = Callable[[int, int], Any]


class PathMode(str, Enum):
    """How field lookups treat falsy intermediate values."""

    # Stop on None, 0, "" and False; empty containers are kept
    TRUTHY = "truthy"
    # Stop only on absent keys or None
    PRESENT = "present"


@dataclass
class ClientConfig:
    """Configuration for DeepstreamAsync."""

    url: str = "localhost:6021"
    path_mode: PathMode = PathMode.PRESENT
    progress_prefix: str = "progress_event"
    client_factory: str | None = None


@dataclass
class JoinedRecord:
    """A list entry paired with the records its fields reference."""

    left: Any
    right: dict[PathExpression, Any] = field(default_factory=dict)


@dataclass
class ProgressEvent:
    """A progress value broadcast on the store's event channel."""

    id: str
    value: Any = 0


# ============================================================================
# Store client surface
# ============================================================================


class RecordHandle(Protocol):
    """Live, subscribed handle to a single record."""

    name: str

    def when_ready(self, callback: Callable[[Any], Any]) -> None:
        ...

    def on(self, event: str, callback: Callable[..., Any]) -> None:
        ...

    def get(self, path: str | None = None) -> Any:
        ...

    def discard(self) -> None:
        ...


class ListHandle(RecordHandle, Protocol):
    """Record handle whose payload is an ordered sequence of record refs."""

    def get_entries(self) -> list[RecordRef]:
        ...


class RecordApi(Protocol):
    def get_record(self, name: RecordRef) -> RecordHandle:
        ...

    def get_list(self, name: RecordRef) -> ListHandle:
        ...

    def snapshot(self, name: RecordRef, callback: Callable[[Any, Any], Any]) -> None:
        ...

    def has(self, name: RecordRef, callback: Callable[[Any, bool], Any]) -> None:
        ...


class RpcResponse(Protocol):
    def send(self, data: Any) -> None:
        ...

    def error(self, message: str) -> None:
        ...


class RpcApi(Protocol):
    def make(self, name: str, data: Any, callback: Callable[[Any, Any], Any]) -> None:
        ...

    def provide(self, name: str, callback: Callable[[Any, RpcResponse], Any]) -> None:
        ...

    def unprovide(self, name: str) -> None:
        ...


class EventApi(Protocol):
    def emit(self, name: str, data: Any = None) -> None:
        ...


class StoreClient(Protocol):
    """The callback-based real-time store client consumed by this layer."""

    record: RecordApi
    rpc: RpcApi
    event: EventApi

    def login(self, auth: dict[str, Any], callback: Callable[[bool, Any], Any]) -> None:
        ...

    def get_uid(self) -> str:
        ...

    def on(self, event: str, callback: Callable[..., Any]) -> None:
        ...
