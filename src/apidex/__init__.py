"""apidex -- Index, search, and document Swagger/OpenAPI specifications.

This package loads a Swagger 2.0 or OpenAPI 3.x document once, flattens its
operations into uniform endpoint records, and answers read-only queries
against them: keyword search, category listing, exact path + method lookup,
and a Markdown export with recursively expanded type schemas.

Typical workflow::

    apidex --spec openapi.json tags           # categories with counts
    apidex --spec openapi.json search invoice # keyword search
    apidex --spec openapi.json export -o api.md

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the entire package.
    config: XDG-aware configuration and spec source resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
    parser: Spec loading and record extraction.
    engine: Endpoint index, query engine, and schema expander.
    presenters: Terminal browser, protocol responder, and Markdown exporter.
"""

__version__ = "0.1.0"
