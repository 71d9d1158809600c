"""Flatten a specification's operations table into an ordered endpoint index.

:func:`build_index` walks ``paths`` in source declaration order and, for each
path, its HTTP method keys in source order, producing one
:class:`~apidex.models.EndpointRecord` per ``(method, path)`` pair.  The
returned tuple is the backing store of the query engine and is never
mutated; every filter produces a new tuple.

:func:`group_by_tag` is the one grouping used by every presenter: groups
sorted by ordinal comparison of the tag name, members in index order.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Iterable

from apidex.models import EndpointRecord, HTTPMethod, Specification
from apidex.parser.extractor import extract_endpoint

logger = logging.getLogger(__name__)

_HTTP_METHODS = frozenset(m.value for m in HTTPMethod)


def build_index(spec: Specification) -> tuple[EndpointRecord, ...]:
    """Build the ordered endpoint index for *spec*.

    Keys of a path item that are not HTTP methods (``parameters``,
    ``summary``, ``x-*`` extensions, ...) are ignored; method keys are
    matched case-insensitively and canonicalised to upper case.  A key that
    canonicalises to an already-indexed ``(method, path)`` pair (``get``
    next to ``GET``) is skipped with a warning, keeping identities unique.
    An operation value that is not a mapping still yields a record, with
    every optional field empty.

    Args:
        spec: The loaded specification.

    Returns:
        Endpoint records in source declaration order.
    """
    records: list[EndpointRecord] = []
    seen: set[tuple[str, str]] = set()

    for path, path_item in spec.paths.items():
        path_params = path_item.get("parameters")

        for key, operation in path_item.items():
            token = str(key).upper()
            if token not in _HTTP_METHODS:
                continue

            if (token, path) in seen:
                logger.warning("Skipping duplicate endpoint %s %s", token, path)
                continue
            seen.add((token, path))

            if not isinstance(operation, dict):
                logger.warning("Operation %s %s is not an object", token, path)
                operation = {}

            records.append(
                extract_endpoint(
                    path,
                    HTTPMethod(token),
                    operation,
                    path_params=path_params if isinstance(path_params, list) else None,
                    global_security=spec.security,
                    shared_parameters=spec.shared_parameters,
                    shared_responses=spec.shared_responses,
                )
            )

    logger.debug("Indexed %d endpoints across %d paths", len(records), len(spec.paths))
    return tuple(records)


def group_by_tag(
    records: Iterable[EndpointRecord],
) -> list[tuple[str, tuple[EndpointRecord, ...]]]:
    """Group records by ``tag``.

    Groups are sorted by tag name using ordinal string comparison; records
    inside a group keep their relative input order.

    Returns:
        A list of ``(tag, records)`` pairs.
    """
    groups: dict[str, list[EndpointRecord]] = defaultdict(list)
    for record in records:
        groups[record.tag].append(record)
    return [(tag, tuple(groups[tag])) for tag in sorted(groups)]
