"""Export command -- write the whole index as one Markdown document."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from apidex.commands.common import get_config, get_engine
from apidex.output import paged_output, success
from apidex.presenters.exporter import export_markdown, render_markdown


def export_command(
    ctx: typer.Context,
    output_path: Optional[Path] = typer.Option(
        None,
        "--file",
        "-o",
        help="Write the document to this file instead of stdout.",
        dir_okay=False,
    ),
    title: Optional[str] = typer.Option(
        None, "--title", help="Document heading (default: '<API title> API Documentation')."
    ),
) -> None:
    """Export every endpoint as Markdown for AI assistant context.

    Example::

        apidex export -o api-context.md
        apidex export --title "Billing API" | less
    """
    engine = get_engine(ctx)
    heading = title or get_config(ctx).export_title

    if output_path is None:
        paged_output(render_markdown(engine, heading))
        return

    export_markdown(engine, output_path, heading)
    success(f"Exported {len(engine.endpoints)} endpoints to {output_path}")
