"""Exception hierarchy for apidex.

All exceptions inherit from :class:`ApidexError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`apidex.exit_codes`.
The top-level error handler in :func:`apidex.app.main` catches
``ApidexError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Lookups that find nothing are *not* exceptions: the query engine returns
``None`` or an empty tuple and presenters render a normal message.

Subclass hierarchy::

    ApidexError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- SpecParseError      (exit 7)
    +-- ConfigError         (exit 1)
"""

from apidex.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_SPEC_PARSE_ERROR,
)


class ApidexError(Exception):
    """Base exception for all apidex errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`apidex.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(ApidexError):
    """Raised for malformed query input: empty search terms, unknown resources or tools."""

    exit_code = EXIT_INVALID_USAGE


class SpecParseError(ApidexError):
    """Raised when the API spec cannot be parsed or has no ``paths`` table."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class ConfigError(ApidexError):
    """Raised for configuration problems (invalid JSON, no spec source configured)."""

    exit_code = EXIT_GENERIC_FAILURE
