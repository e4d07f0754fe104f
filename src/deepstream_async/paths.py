"""
Dot-notation field access for record payloads.

Paths such as ``"files.config.a"`` descend one level per segment: mapping
keys by name, list items by canonical decimal index ("0", "1", ... with
no leading zeros). The empty path names the payload itself.
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping, MutableSequence, Sequence
from typing import Any

from .errors import PathError
from .types import PathMode

__all__ = ["get_field", "set_field", "split_path"]

_MISSING = object()


def split_path(path: str) -> list[str]:
    """Split a path expression into its segments. The empty path has none."""
    if path == "":
        return []
    return path.split(".")


def _index(segment: str, size: int) -> int | None:
    """Return the list index a segment names, or None if it names none."""
    if not (segment.isascii() and segment.isdigit()):
        return None
    if len(segment) > 1 and segment.startswith("0"):
        return None
    index = int(segment)
    return index if index < size else None


def _child(container: Any, segment: str) -> Any:
    if isinstance(container, Mapping):
        return container.get(segment, _MISSING)
    if isinstance(container, Sequence) and not isinstance(container, (str, bytes)):
        index = _index(segment, len(container))
        if index is not None:
            return container[index]
    return _MISSING


def _stops(value: Any, mode: PathMode) -> bool:
    if value is _MISSING or value is None:
        return True
    if mode is not PathMode.TRUTHY:
        return False
    # Empty mappings and lists do not stop descent
    if value is False or value == "":
        return True
    return isinstance(value, (int, float)) and value == 0


def get_field(payload: Any, path: str, *, mode: PathMode = PathMode.PRESENT) -> Any:
    """
    Retrieve a field's value using dot notation.

    Args:
        payload: The record data (not a record handle)
        path: The field path, e.g. "files.config.a"
        mode: PRESENT stops only on absent or None values; TRUTHY also
            stops on 0, "" and False (empty containers are kept)

    Returns:
        The field's value, or None if descent stopped early
    """
    field = payload
    for segment in split_path(path):
        field = _child(field, segment)
        if _stops(field, mode):
            return None
    return field


def set_field(
    payload: Any, path: str, value: Any, *, mode: PathMode = PathMode.PRESENT
) -> None:
    """
    Set a field's value using dot notation.

    The containers leading up to the last segment must already exist;
    none are created.

    Raises:
        PathError: If the path is empty, or the container for the last
            segment is missing or cannot hold the field
    """
    segments = split_path(path)
    if not segments:
        raise PathError("Cannot replace the payload root", path)

    name = segments.pop()
    parent = ".".join(segments)
    container = get_field(payload, parent, mode=mode)

    if isinstance(container, MutableMapping):
        container[name] = value
    elif isinstance(container, MutableSequence):
        index = _index(name, len(container))
        if index is None:
            raise PathError(f"Index {name!r} out of range at {path!r}", path)
        container[index] = value
    elif container is None:
        raise PathError(f"Container {parent!r} does not exist for {path!r}", path)
    else:
        raise PathError(
            f"Container {parent!r} is a {type(container).__name__}, "
            f"cannot set {name!r}",
            path,
        )
