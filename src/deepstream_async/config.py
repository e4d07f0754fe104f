"""
Configuration management for deepstream-async

This module provides global defaults for DeepstreamAsync instances. A
config can always be built explicitly and passed to the facade instead.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .types import ClientConfig, PathMode


def _get_env(key: str) -> str | None:
    """Get environment variable value."""
    return os.environ.get(key)


# Global configuration
_global_config: dict[str, str | None] = {
    "url": _get_env("DEEPSTREAM_URL") or "localhost:6021",
    "path_mode": _get_env("DEEPSTREAM_PATH_MODE") or "present",
    "progress_prefix": _get_env("DEEPSTREAM_PROGRESS_PREFIX") or "progress_event",
    "client_factory": _get_env("DEEPSTREAM_CLIENT_FACTORY"),
}


def configure(
    *,
    url: str | None = None,
    path_mode: "str | PathMode | None" = None,
    progress_prefix: str | None = None,
    client_factory: str | None = None,
) -> None:
    """
    Configure deepstream-async defaults.

    Args:
        url: Store endpoint handed to the client factory (default: localhost:6021)
        path_mode: Field lookup mode, "present" or "truthy" (default: present)
        progress_prefix: Record name prefix for progress events
        client_factory: "module:callable" that builds a store client from a URL

    Example::

        from deepstream_async import configure

        configure(url="ds.example.com:6020", path_mode="truthy")
    """
    global _global_config

    if url is not None:
        _global_config["url"] = url
    if path_mode is not None:
        _global_config["path_mode"] = str(getattr(path_mode, "value", path_mode))
    if progress_prefix is not None:
        _global_config["progress_prefix"] = progress_prefix
    if client_factory is not None:
        _global_config["client_factory"] = client_factory


def get_config() -> "ClientConfig":
    """
    Get current configuration.

    Raises:
        ValueError: If the configured path mode is not a known PathMode
    """
    from .types import ClientConfig, PathMode

    return ClientConfig(
        url=_global_config["url"] or "localhost:6021",
        path_mode=PathMode(_global_config["path_mode"] or "present"),
        progress_prefix=_global_config["progress_prefix"] or "progress_event",
        client_factory=_global_config["client_factory"],
    )


def configure_from_env() -> None:
    """
    Configure from environment variables.

    Reads from:
        - DEEPSTREAM_URL
        - DEEPSTREAM_PATH_MODE
        - DEEPSTREAM_PROGRESS_PREFIX
        - DEEPSTREAM_CLIENT_FACTORY
    """
    configure(
        url=_get_env("DEEPSTREAM_URL"),
        path_mode=_get_env("DEEPSTREAM_PATH_MODE"),
        progress_prefix=_get_env("DEEPSTREAM_PROGRESS_PREFIX"),
        client_factory=_get_env("DEEPSTREAM_CLIENT_FACTORY"),
    )
