"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~apidex.exceptions.ApidexError` subclass.
Shell wrappers can inspect the exit code to tell a broken spec apart from a
lookup that simply found nothing.

Example::

    $ apidex show /widgets/{id} DELETE
    $ echo $?
    4   # EXIT_NOT_FOUND -- no such endpoint in the spec
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or an empty search term."""

EXIT_NOT_FOUND = 4
"""The requested endpoint or category is not part of the loaded spec."""

EXIT_SPEC_PARSE_ERROR = 7
"""The API specification could not be parsed or lacks a ``paths`` table."""
