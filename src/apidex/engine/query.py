"""Read-only query engine over the endpoint index.

:class:`QueryEngine` is constructed once from a
:class:`~apidex.models.Specification` and never changes afterwards, so any
number of callers may query it concurrently without coordination.  It
implements the four operations every presenter maps onto:

* :meth:`QueryEngine.search` -- keyword search with optional tag filter.
* :meth:`QueryEngine.get_by_path_and_method` -- exact lookup.
* :meth:`QueryEngine.list_by_tag` -- all endpoints in one category.
* :meth:`QueryEngine.list_tags` -- declared categories with endpoint counts.

"Nothing found" is never an exception: lookups return ``None`` and filters
return an empty tuple.  Result sizes are not capped here; presenters that
need a cap truncate after querying.
"""

from __future__ import annotations

from collections import Counter
from typing import Mapping, Optional, Sequence

from apidex.engine.index import build_index, group_by_tag
from apidex.exceptions import InvalidUsageError
from apidex.models import (
    EndpointRecord,
    HTTPMethod,
    Specification,
    TagSummary,
    TypeNode,
)


def search_surface(record: EndpointRecord) -> str:
    """Return the lower-cased text a search term is matched against.

    Path, summary, description, operationId, every parameter name, every
    parameter description, and every response description, joined by a
    single space.
    """
    parts = [
        record.path,
        record.summary,
        record.description,
        record.operation_id or "",
    ]
    parts.extend(p.name for p in record.parameters)
    parts.extend(p.description for p in record.parameters)
    parts.extend(r.description for r in record.responses)
    return " ".join(parts).lower()


def _canonical_method(method: HTTPMethod | str) -> str:
    if isinstance(method, HTTPMethod):
        return method.value
    return str(method).upper()


class QueryEngine:
    """Answer structured queries against one specification's endpoints.

    Args:
        spec: The loaded specification.
        records: A pre-built index; built with
            :func:`~apidex.engine.index.build_index` when omitted.
    """

    def __init__(
        self,
        spec: Specification,
        records: Optional[Sequence[EndpointRecord]] = None,
    ) -> None:
        self._spec = spec
        self._records = tuple(records) if records is not None else build_index(spec)
        self._surfaces = tuple(search_surface(r) for r in self._records)
        self._by_key = {r.key: r for r in self._records}
        self._tag_counts = Counter(r.tag for r in self._records)

    @property
    def spec(self) -> Specification:
        """The specification this engine was built from."""
        return self._spec

    @property
    def endpoints(self) -> tuple[EndpointRecord, ...]:
        """Every endpoint, in index order."""
        return self._records

    @property
    def definitions(self) -> Mapping[str, TypeNode]:
        """The specification's type definitions table."""
        return self._spec.definitions

    def search(self, term: str, tag: Optional[str] = None) -> tuple[EndpointRecord, ...]:
        """Find endpoints whose search surface contains *term*, case-insensitively.

        When *tag* is given, only endpoints whose tag equals it
        (case-insensitively) are considered.  Matches keep index order.

        Args:
            term: Non-empty search text.
            tag: Optional category filter.  An empty string means no filter.

        Returns:
            Matching records, possibly empty.

        Raises:
            InvalidUsageError: If *term* is empty.  List all endpoints
                through :attr:`endpoints` instead.
        """
        if not term:
            raise InvalidUsageError(
                "Search term must not be empty; list endpoints by tag instead"
            )

        needle = term.lower()
        tag_key = tag.lower() if tag else None
        return tuple(
            record
            for record, surface in zip(self._records, self._surfaces)
            if (tag_key is None or record.tag.lower() == tag_key) and needle in surface
        )

    def get_by_path_and_method(
        self, path: str, method: HTTPMethod | str
    ) -> Optional[EndpointRecord]:
        """Return the endpoint at exactly *path* with *method*, or ``None``.

        The path match is case-sensitive; the method match is not.
        """
        return self._by_key.get((_canonical_method(method), path))

    def list_by_tag(self, tag: str) -> tuple[EndpointRecord, ...]:
        """Return endpoints whose tag equals *tag* case-insensitively, in index order."""
        tag_key = tag.lower()
        return tuple(r for r in self._records if r.tag.lower() == tag_key)

    def list_tags(self) -> tuple[TagSummary, ...]:
        """Return declared categories in declaration order with endpoint counts.

        Counts use exact tag equality.  Categories with no endpoints are
        listed with a count of 0; tags used by endpoints but never declared
        (including the ``"Other"`` fallback) are not listed.
        """
        return tuple(
            TagSummary(
                name=tag.name,
                description=tag.description,
                endpoint_count=self._tag_counts.get(tag.name, 0),
            )
            for tag in self._spec.tags
        )

    def tag_names(self) -> tuple[str, ...]:
        """Names of the declared categories, in declaration order."""
        return tuple(tag.name for tag in self._spec.tags)

    def grouped(self) -> list[tuple[str, tuple[EndpointRecord, ...]]]:
        """The whole index grouped by tag (see :func:`~apidex.engine.index.group_by_tag`)."""
        return group_by_tag(self._records)
