"""Spec parser -- load documents, convert schemas, and extract endpoint records.

This sub-package is responsible for the first half of the apidex pipeline:
turning a raw Swagger 2.0 / OpenAPI 3.x document (JSON or YAML, local file,
remote URL, or in-memory bytes) into an immutable
:class:`~apidex.models.Specification`, and turning its raw operations into
:class:`~apidex.models.EndpointRecord` objects for the index.

Typical usage::

    from apidex.parser import load_spec

    spec = load_spec("https://petstore.swagger.io/v2/swagger.json")
    print(len(spec.paths), "paths")

Sub-modules:

* :mod:`~apidex.parser.loader` -- I/O layer (URL, file, stdin, bytes) plus
  format detection and the ``paths`` shape check.
* :mod:`~apidex.parser.type_nodes` -- JSON Schema fragment to
  :data:`~apidex.models.TypeNode` conversion.
* :mod:`~apidex.parser.extractor` -- raw operation to
  :class:`~apidex.models.EndpointRecord`.
"""

from apidex.parser.extractor import extract_endpoint
from apidex.parser.loader import build_specification, load_spec, parse_spec

__all__ = ["load_spec", "parse_spec", "build_specification", "extract_endpoint"]
