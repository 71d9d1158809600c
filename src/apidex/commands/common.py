"""Helpers shared by the command modules.

The specification is loaded and indexed at most once per invocation: the
first command that needs the engine builds it and caches it on the Typer
context object, which Click shares between a group and its sub-commands.
"""

from __future__ import annotations

from typing import NoReturn

import typer

from apidex.config import resolve_config, resolve_spec_source
from apidex.engine.query import QueryEngine
from apidex.exceptions import ApidexError
from apidex.models import GlobalConfig
from apidex.output import debug, error, progress


def fail(exc: ApidexError) -> NoReturn:
    """Report *exc* on stderr and exit with its code."""
    error(str(exc))
    raise typer.Exit(code=exc.exit_code)


def get_config(ctx: typer.Context) -> GlobalConfig:
    """Return the configuration resolved by the root callback (or resolve it now)."""
    obj = ctx.ensure_object(dict)
    config = obj.get("config")
    if config is None:
        try:
            config = resolve_config()
        except ApidexError as exc:
            fail(exc)
        obj["config"] = config
    return config


def get_engine(ctx: typer.Context) -> QueryEngine:
    """Load the configured specification and build the query engine.

    Raises:
        typer.Exit: With the error's exit code when no source is configured
            or the specification cannot be loaded.
    """
    from apidex.parser import load_spec

    obj = ctx.ensure_object(dict)
    engine = obj.get("engine")
    if engine is not None:
        return engine

    config = get_config(ctx)
    try:
        source = resolve_spec_source(obj.get("spec"), config)
        if source.startswith(("http://", "https://")):
            progress(f"Fetching {source}...")
        else:
            debug(f"Loading spec from {source}")
        spec = load_spec(source)
    except ApidexError as exc:
        fail(exc)

    engine = QueryEngine(spec)
    debug(
        f"Indexed {len(engine.endpoints)} endpoints, "
        f"{len(engine.definitions)} definitions ({spec.spec_version or 'unversioned'})"
    )
    obj["engine"] = engine
    return engine
