#!/usr/bin/env python3
"""
deepstream-async CLI

Inspect a real-time store from the command line.

Usage:
    deepstream-async uid              - Generate a uid or record id
    deepstream-async exists REF       - Check whether a record exists
    deepstream-async snapshot REF     - Print a record's data
    deepstream-async join LIST_REF    - Resolve every entry of a list
    deepstream-async call RPC_ID      - Make a remote procedure call

The store client is built by a factory named with --client (or
DEEPSTREAM_CLIENT_FACTORY) as "module:callable"; it is called with the
store URL and returns a connected client.
"""

from __future__ import annotations

import asyncio
import importlib
import inspect
import json
import logging
import sys
from typing import Any, Awaitable, Callable

import click
from pydantic import BaseModel, ConfigDict, ValidationError

from .client import DeepstreamAsync
from .config import configure, configure_from_env, get_config
from .errors import DeepstreamAsyncError
from .types import JoinedRecord


# Color codes for terminal output
class Colors:
    RESET = "\x1b[0m"
    RED = "\x1b[31m"
    CYAN = "\x1b[36m"


class LoginCredentials(BaseModel):
    """Credentials passed with --auth; extra keys go to the store as-is."""

    model_config = ConfigDict(extra="allow")

    username: str | None = None
    password: str | None = None
    token: str | None = None


def print_error(message: str) -> None:
    """Print error message."""
    click.echo(f"{Colors.RED}Error:{Colors.RESET} {message}", err=True)


def print_info(message: str) -> None:
    """Print info message."""
    click.echo(f"{Colors.CYAN}[i]{Colors.RESET} {message}", err=True)


def print_json(value: Any) -> None:
    click.echo(json.dumps(value, indent=2, default=str))


def run_async(coro: Any) -> Any:
    """Run an async function synchronously."""
    return asyncio.run(coro)


def parse_credentials(raw: str | None) -> dict[str, Any] | None:
    """
    Parse and validate the --auth JSON.

    Raises:
        click.BadParameter: If the JSON is malformed or not an object
    """
    if raw is None:
        return None
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"Invalid JSON format: {e}", param_hint="--auth") from e
    if not isinstance(parsed, dict):
        raise click.BadParameter(
            f"expected JSON object, got {type(parsed).__name__}", param_hint="--auth"
        )
    try:
        credentials = LoginCredentials.model_validate(parsed)
    except ValidationError as e:
        raise click.BadParameter(str(e), param_hint="--auth") from e
    return credentials.model_dump(exclude_none=True)


def load_factory(spec: str) -> Callable[[str], Any]:
    """
    Resolve a "module:callable" client factory.

    Raises:
        click.UsageError: If the spec is malformed or cannot be imported
    """
    module_name, _, attr = spec.partition(":")
    if not module_name or not attr:
        raise click.UsageError(f"Client factory must look like 'module:callable', got {spec!r}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise click.UsageError(f"Cannot import client factory module {module_name!r}: {e}") from e
    factory = getattr(module, attr, None)
    if not callable(factory):
        raise click.UsageError(f"{spec!r} is not a callable")
    return factory


def to_plain(value: Any) -> Any:
    """Turn join results and live handles into JSON-ready data."""
    if isinstance(value, JoinedRecord):
        return {"left": to_plain(value.left), "right": to_plain(value.right)}
    if isinstance(value, dict):
        return {key: to_plain(item) for key, item in value.items()}
    if isinstance(value, list):
        return [to_plain(item) for item in value]
    getter = getattr(value, "get", None)
    if callable(getter):
        return getter()
    return value


def discard_all(result: list[Any]) -> None:
    """Release the live handles held by a join result."""
    for item in result:
        handles = [item.left, *item.right.values()] if isinstance(item, JoinedRecord) else [item]
        for handle in handles:
            handle.discard()


async def with_session(
    obj: dict[str, Any], action: Callable[[DeepstreamAsync], Awaitable[Any]]
) -> Any:
    """Build a client, log in if credentials were given, and run the action."""
    factory = load_factory(obj["client_factory"])
    client = factory(obj["url"])
    if inspect.isawaitable(client):
        client = await client

    async with DeepstreamAsync(client) as ds:
        if obj["credentials"] is not None:
            await ds.login(obj["credentials"])
        return await action(ds)


def run_command(ctx: click.Context, action: Callable[[DeepstreamAsync], Awaitable[Any]]) -> None:
    try:
        result = run_async(with_session(ctx.obj, action))
    except DeepstreamAsyncError as e:
        print_error(e.message)
        print_json(e.to_dict())
        sys.exit(1)
    print_json(to_plain(result))


@click.group()
@click.option("--client", "client_factory", help="Store client factory as module:callable")
@click.option("--url", help="Store URL passed to the client factory")
@click.option("--auth", help="Login credentials as a JSON object")
@click.option("--debug", is_flag=True, help="Show debug information")
@click.pass_context
def cli(
    ctx: click.Context,
    client_factory: str | None,
    url: str | None,
    auth: str | None,
    debug: bool,
) -> None:
    """
    deepstream-async CLI - Awaitable real-time store access
    """
    if debug:
        logging.basicConfig(level=logging.DEBUG)

    configure_from_env()
    configure(url=url, client_factory=client_factory)
    config = get_config()

    if config.client_factory is None:
        raise click.UsageError(
            "No store client factory. Pass --client or set DEEPSTREAM_CLIENT_FACTORY."
        )

    ctx.obj = {
        "client_factory": config.client_factory,
        "url": config.url,
        "credentials": parse_credentials(auth),
    }


@cli.command()
@click.option("--table", help="Prefix the uid with a table name")
@click.pass_context
def uid(ctx: click.Context, table: str | None) -> None:
    """Generate a uid, or a record id with --table."""

    async def action(ds: DeepstreamAsync) -> str:
        return ds.generate_record_id(table) if table else ds.generate_uid()

    run_command(ctx, action)


@cli.command()
@click.argument("ref")
@click.option("--strict", is_flag=True, help="Fail when the record does not exist")
@click.pass_context
def exists(ctx: click.Context, ref: str, strict: bool) -> None:
    """Check whether a record exists."""

    async def action(ds: DeepstreamAsync) -> bool:
        return await ds.exists(ref, reject_on_false=strict)

    run_command(ctx, action)


@cli.command()
@click.argument("ref")
@click.pass_context
def snapshot(ctx: click.Context, ref: str) -> None:
    """Print a record's data."""

    async def action(ds: DeepstreamAsync) -> Any:
        return await ds.get_snapshot(ref)

    run_command(ctx, action)


@cli.command()
@click.argument("list_ref")
@click.option("--snapshot", "use_snapshot", is_flag=True, help="Fetch snapshots")
@click.option("--field", "fields", multiple=True, help="Also resolve the ref at this path")
@click.option("--progress", is_flag=True, help="Report each resolved entry on stderr")
@click.pass_context
def join(
    ctx: click.Context,
    list_ref: str,
    use_snapshot: bool,
    fields: tuple[str, ...],
    progress: bool,
) -> None:
    """Resolve every entry of a list."""

    def report(index: int, total: int) -> None:
        print_info(f"resolved entry {index + 1} of {total}")

    async def action(ds: DeepstreamAsync) -> Any:
        source = await ds.get_list(list_ref)
        try:
            result = await ds.join_list(
                source,
                snapshot=use_snapshot,
                join_fields=list(fields) if fields else None,
                progress=report if progress else None,
            )
            plain = to_plain(result)
            if not use_snapshot:
                discard_all(result)
            return plain
        finally:
            source.discard()

    run_command(ctx, action)


@cli.command()
@click.argument("rpc_id")
@click.argument("args", required=False)
@click.pass_context
def call(ctx: click.Context, rpc_id: str, args: str | None) -> None:
    """Make a remote procedure call with optional JSON arguments."""
    try:
        data = json.loads(args) if args is not None else None
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"Invalid JSON format: {e}", param_hint="ARGS") from e

    async def action(ds: DeepstreamAsync) -> Any:
        return await ds.rpc_call(rpc_id, data)

    run_command(ctx, action)


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
