"""Built-in CLI sub-commands for apidex.

This package groups the Typer command modules that form the CLI's
command tree:

* :mod:`~apidex.commands.browse` -- browse, search, show, tags, list,
  schemas, and schema.
* :mod:`~apidex.commands.export` -- Markdown export.
* :mod:`~apidex.commands.mcp` -- list and call the responder catalog.
* :mod:`~apidex.commands.config` -- view and modify global settings.
* :mod:`~apidex.commands.common` -- lazy spec loading shared by all of
  the above.

Modules either export a :class:`typer.Typer` sub-application (for groups
like ``mcp`` and ``config``) or plain callback functions registered
directly on the root app.
"""
