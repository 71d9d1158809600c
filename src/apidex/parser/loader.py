"""Load API specifications from a URL, local file, stdin, or raw bytes.

This module handles all I/O for fetching raw Swagger/OpenAPI documents and
turning them into an immutable :class:`~apidex.models.Specification`.  It
supports both JSON and YAML formats with automatic format detection, and
checks the one structural requirement the rest of the system relies on: the
document must contain a ``paths`` mapping.

The public functions are:

* :func:`load_spec` -- Load and parse a spec from any supported source.
* :func:`parse_spec` -- Parse an in-memory payload (``bytes`` or ``str``).
* :func:`build_specification` -- Turn an already-decoded document dict into
  a :class:`~apidex.models.Specification`.

Every failure raises :class:`~apidex.exceptions.SpecParseError`.  A failed
load is fatal: callers must not serve queries without a specification.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import httpx
import yaml
from pydantic import ValidationError

from apidex.exceptions import SpecParseError
from apidex.models import APIInfo, Specification, TagInfo
from apidex.parser.extractor import security_requirements
from apidex.parser.type_nodes import convert_definitions

logger = logging.getLogger(__name__)


def load_spec(source: str) -> Specification:
    """Load a spec from URL, file path, or stdin ('-').

    Supports JSON and YAML formats.
    Auto-detects format from content/extension.

    Args:
        source: A URL (http/https), file path, or '-' for stdin.

    Returns:
        The loaded specification.

    Raises:
        SpecParseError: If the source cannot be read, parsed, or lacks a
            ``paths`` table.
    """
    if source == "-":
        document = _load_from_stdin()
    elif source.startswith(("http://", "https://")):
        document = _load_from_url(source)
    else:
        document = _load_from_file(source)
    return build_specification(document)


def parse_spec(raw: bytes | str, hint: str = "") -> Specification:
    """Parse an in-memory payload into a :class:`~apidex.models.Specification`.

    Args:
        raw: The document as bytes (decoded as UTF-8) or text.
        hint: Optional format hint ('json' or 'yaml').

    Raises:
        SpecParseError: If the payload is not valid UTF-8, not JSON/YAML,
            or lacks a ``paths`` table.
    """
    if isinstance(raw, bytes):
        try:
            content = raw.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise SpecParseError(f"Spec is not valid UTF-8: {exc}") from exc
    else:
        content = raw

    if not content.strip():
        raise SpecParseError("Spec payload is empty")

    return build_specification(_parse_content(content, hint=hint))


def _load_from_stdin() -> dict[str, Any]:
    """Read spec from stdin.

    Raises:
        SpecParseError: If stdin is empty or content cannot be parsed.
    """
    try:
        content = sys.stdin.read()
    except Exception as exc:
        raise SpecParseError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise SpecParseError("No input received from stdin")

    return _parse_content(content, hint="stdin")


def _load_from_url(url: str) -> dict[str, Any]:
    """Fetch spec from URL. Supports JSON and YAML responses.

    Raises:
        SpecParseError: If the URL cannot be fetched or content cannot be parsed.
    """
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecParseError(
            f"HTTP {exc.response.status_code} fetching spec from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SpecParseError(f"Failed to fetch spec from {url}: {exc}") from exc

    content = response.text
    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"

    return _parse_content(content, hint=hint)


def _load_from_file(path: str) -> dict[str, Any]:
    """Load spec from local file.

    Supports .json, .yaml, and .yml extensions. Falls back to content-based
    detection if the extension is not recognized.

    Raises:
        SpecParseError: If the file cannot be read or content cannot be parsed.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecParseError(f"Spec file not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise SpecParseError(f"Failed to read spec file {path}: {exc}") from exc

    if not content.strip():
        raise SpecParseError(f"Spec file is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"

    return _parse_content(content, hint=hint)


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse content as JSON or YAML.

    Tries JSON first (unless hint is 'yaml'), then falls back to YAML.
    Valid JSON is also valid YAML, but JSON parsing is stricter and faster.

    Raises:
        SpecParseError: If the content cannot be parsed as either format.
    """
    json_error: Exception | None = None
    yaml_error: Exception | None = None

    if hint != "yaml":
        try:
            result = json.loads(content)
            if not isinstance(result, dict):
                raise SpecParseError(
                    "Spec must be a JSON/YAML object (got "
                    f"{type(result).__name__})"
                )
            return result
        except json.JSONDecodeError as exc:
            json_error = exc
            if hint == "json":
                raise SpecParseError(f"Invalid JSON: {exc}") from exc

    try:
        result = yaml.safe_load(content)
        if not isinstance(result, dict):
            raise SpecParseError(
                "Spec must be a JSON/YAML object (got "
                f"{type(result).__name__ if result is not None else 'empty document'})"
            )
        return result
    except yaml.YAMLError as exc:
        yaml_error = exc

    msg = "Failed to parse spec as JSON or YAML"
    if json_error:
        msg += f"\n  JSON error: {json_error}"
    if yaml_error:
        msg += f"\n  YAML error: {yaml_error}"
    raise SpecParseError(msg)


def build_specification(document: dict[str, Any]) -> Specification:
    """Build an immutable :class:`~apidex.models.Specification` from a decoded document.

    Only the ``paths`` table is mandatory.  ``tags``, ``definitions`` (or
    ``components.schemas``), ``info`` and the server fields are optional
    and default to empty values.  Path items that are not mappings are
    dropped with a warning.

    Raises:
        SpecParseError: If ``paths`` is missing or is not a mapping.
    """
    paths = document.get("paths")
    if paths is None:
        raise SpecParseError(
            "Spec has no 'paths' table. Is this a Swagger/OpenAPI document?"
        )
    if not isinstance(paths, dict):
        raise SpecParseError(
            f"Spec 'paths' must be an object (got {type(paths).__name__})"
        )

    clean_paths: dict[str, dict[str, Any]] = {}
    for path, path_item in paths.items():
        if not isinstance(path_item, dict):
            logger.warning("Skipping path %r: path item is not an object", path)
            continue
        clean_paths[str(path)] = {str(key): value for key, value in path_item.items()}

    raw_definitions = _section(document, "definitions", "schemas")

    try:
        spec = Specification(
            info=_extract_info(document),
            spec_version=_detect_version(document),
            base_url=_extract_base_url(document),
            tags=_extract_tags(document),
            paths=clean_paths,
            definitions=convert_definitions(raw_definitions),
            shared_parameters=_dict_entries(_section(document, "parameters", "parameters")),
            shared_responses=_dict_entries(_section(document, "responses", "responses")),
            security=security_requirements(document.get("security")),
        )
    except ValidationError as exc:
        raise SpecParseError(f"Malformed spec: {exc}") from exc
    logger.info(
        "Loaded %d API paths, %d definitions", len(spec.paths), len(spec.definitions)
    )
    return spec


def _section(document: dict[str, Any], swagger_key: str, components_key: str) -> Any:
    """Return a reusable-object table from Swagger 2.0 or OpenAPI 3.x layout."""
    if swagger_key in document:
        return document[swagger_key]
    components = document.get("components")
    if isinstance(components, dict):
        return components.get(components_key)
    return None


def _dict_entries(table: Any) -> dict[str, dict[str, Any]]:
    """Keep only the mapping-valued entries of a name -> object table."""
    if not isinstance(table, dict):
        return {}
    return {str(name): value for name, value in table.items() if isinstance(value, dict)}


def _detect_version(document: dict[str, Any]) -> str:
    """Return ``'swagger X'`` / ``'openapi X'`` from the version field, or ``''``."""
    if "swagger" in document:
        return f"swagger {document['swagger']}"
    if "openapi" in document:
        return f"openapi {document['openapi']}"
    return ""


def _extract_info(document: dict[str, Any]) -> APIInfo:
    """Extract title, version and description from the ``info`` object."""
    info = document.get("info")
    if not isinstance(info, dict):
        return APIInfo()
    return APIInfo(
        title=str(info.get("title") or "Untitled API"),
        version=str(info.get("version") or "0.0.0"),
        description=str(info["description"]) if info.get("description") is not None else None,
    )


def _extract_tags(document: dict[str, Any]) -> tuple[TagInfo, ...]:
    """Extract declared categories in source order.

    Entries without a ``name`` are skipped.
    """
    raw_tags = document.get("tags")
    if not isinstance(raw_tags, list):
        return ()

    tags: list[TagInfo] = []
    for entry in raw_tags:
        if not isinstance(entry, dict) or not entry.get("name"):
            continue
        tags.append(
            TagInfo(
                name=str(entry["name"]),
                description=str(entry.get("description") or ""),
            )
        )
    return tuple(tags)


def _extract_base_url(document: dict[str, Any]) -> Optional[str]:
    """Derive the API base URL.

    OpenAPI 3.x uses the first ``servers`` entry; Swagger 2.0 combines the
    first of ``schemes`` (default ``https``), ``host`` and ``basePath``.
    Returns ``None`` when the document declares neither.
    """
    servers = document.get("servers")
    if isinstance(servers, list) and servers:
        first = servers[0]
        if isinstance(first, dict) and first.get("url"):
            return str(first["url"])

    host = document.get("host")
    if not host:
        return None

    schemes = document.get("schemes")
    scheme = schemes[0] if isinstance(schemes, list) and schemes else "https"
    base_path = str(document.get("basePath") or "")
    if base_path == "/":
        base_path = ""
    return f"{scheme}://{host}{base_path}"
