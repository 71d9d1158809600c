"""Presenters -- the surfaces that render query results.

Each presenter depends only on the :class:`~apidex.engine.query.QueryEngine`
interface and the shared models in :mod:`apidex.engine.results`:

* :mod:`~apidex.presenters.browser` -- Rich/plain/JSON terminal views.
* :mod:`~apidex.presenters.responder` -- transport-agnostic resource and
  tool catalog for protocol servers.
* :mod:`~apidex.presenters.exporter` -- Markdown documentation export.
"""

from apidex.presenters.exporter import export_markdown, render_markdown
from apidex.presenters.responder import Responder, ToolResult

__all__ = [
    "Responder",
    "ToolResult",
    "export_markdown",
    "render_markdown",
]
