"""Query engine -- index endpoints, answer queries, and expand schemas.

This sub-package is the second half of the apidex pipeline.  It takes a
loaded :class:`~apidex.models.Specification` and serves read-only queries
against it.

Typical usage::

    from apidex.engine import QueryEngine, expand_schema
    from apidex.parser import load_spec

    engine = QueryEngine(load_spec("swagger.json"))
    for record in engine.search("invoice"):
        print(record.method.value, record.path)

Sub-modules:

* :mod:`~apidex.engine.index` -- flattening into ordered endpoint records
  and the shared tag grouping.
* :mod:`~apidex.engine.expander` -- depth-bounded schema expansion.
* :mod:`~apidex.engine.query` -- the :class:`QueryEngine`.
* :mod:`~apidex.engine.results` -- serialisable result models shared by
  every presenter.
"""

from apidex.engine.expander import MAX_DEPTH, expand_definition, expand_schema
from apidex.engine.index import build_index, group_by_tag
from apidex.engine.query import QueryEngine

__all__ = [
    "MAX_DEPTH",
    "QueryEngine",
    "build_index",
    "expand_definition",
    "expand_schema",
    "group_by_tag",
]
