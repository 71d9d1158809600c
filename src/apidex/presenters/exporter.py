"""Render the whole index as a single Markdown document.

The document is meant to be pasted into an AI assistant's context:

* ``# <title>`` and a one-line preamble.
* One ``## <tag>`` section per tag, in ordinal order of tag name.
* One ``### METHOD path`` subsection per endpoint, in index order, with
  summary, description, a parameter list, and a response list whose
  schemas are expanded by :func:`~apidex.engine.expander.expand_schema`
  and fenced.

Rendering goes through the Jinja2 template ``templates/export.md.j2``.
Nothing in the output depends on time or iteration order of unordered
containers, so exporting an unchanged specification twice yields
byte-identical documents.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from apidex.engine.query import QueryEngine
from apidex.engine.results import endpoint_detail

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"
"""Path to the Jinja2 template directory (``presenters/templates/``)."""

EXPORT_TEMPLATE = "export.md.j2"

PREAMBLE = "Generated for AI Context. Contains optimized summaries of all endpoints."


def _create_jinja_env() -> Environment:
    """Create the Jinja2 environment for export templates.

    Autoescape is disabled for ``.md.j2`` templates since they produce
    Markdown, and block tags do not leave blank lines behind.
    """
    return Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(disabled_extensions=("md.j2",)),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def default_title(engine: QueryEngine) -> str:
    """``"<API title> API Documentation"``."""
    return f"{engine.spec.info.title} API Documentation"


def _build_context(engine: QueryEngine, title: Optional[str]) -> dict:
    groups = []
    for tag, records in engine.grouped():
        groups.append(
            {
                "tag": tag,
                "endpoints": [endpoint_detail(r, engine) for r in records],
            }
        )
    return {
        "title": title or default_title(engine),
        "preamble": PREAMBLE,
        "groups": groups,
    }


def render_markdown(engine: QueryEngine, title: Optional[str] = None) -> str:
    """Render the export document and return it.

    Args:
        engine: The engine whose whole index is exported.
        title: Document heading.  Defaults to :func:`default_title`.
    """
    env = _create_jinja_env()
    template = env.get_template(EXPORT_TEMPLATE)
    return template.render(**_build_context(engine, title))


def export_markdown(
    engine: QueryEngine,
    output_path: Path,
    title: Optional[str] = None,
) -> Path:
    """Render the export document and write it to *output_path*.

    Parent directories are created as needed.

    Returns:
        The path written.
    """
    rendered = render_markdown(engine, title)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    # newline="" keeps the bytes identical across platforms
    with open(output_path, "w", encoding="utf-8", newline="") as f:
        f.write(rendered)
    logger.info("Exported %d endpoints to %s", len(engine.endpoints), output_path)
    return output_path
