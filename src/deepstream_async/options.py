"""
Validation of join options.

Options may arrive as a JoinOptions instance, as a mapping using either
snake_case or camelCase keys (``join_fields`` / ``joinFields``), or as
keyword arguments.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

__all__ = ["JoinOptions", "parse_join_options"]


class JoinOptions(BaseModel):
    """Options accepted by join_list()."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    snapshot: bool = False
    join_fields: list[str] | None = Field(default=None, alias="joinFields")
    progress: Callable[[int, int], Any] | None = None

    @field_validator("join_fields", mode="before")
    @classmethod
    def reject_bare_string(cls, v: Any) -> Any:
        """A single path must still be given as a list."""
        if isinstance(v, str):
            raise ValueError("join_fields must be a list of paths, not a string")
        return v


def parse_join_options(
    options: JoinOptions | Mapping[str, Any] | None = None, **overrides: Any
) -> JoinOptions:
    """
    Build JoinOptions from a mapping and/or keyword overrides.

    Raises:
        ValueError: If an option is unknown or has the wrong type
    """
    if isinstance(options, JoinOptions):
        if not overrides:
            return options
        merged: dict[str, Any] = options.model_dump(exclude_unset=True)
    else:
        merged = dict(options or {})
    merged.update(overrides)

    try:
        return JoinOptions.model_validate(merged)
    except ValidationError as e:
        errors = e.errors()
        if errors:
            first_error = errors[0]
            field = ".".join(str(loc) for loc in first_error.get("loc", []))
            msg = first_error.get("msg", "validation error")
            raise ValueError(f"Invalid join options: {field} - {msg}") from e
        raise ValueError(f"Invalid join options: {e}") from e
