"""Exception hierarchy for specmodel.

All exceptions inherit from :class:`SpecModelError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`specmodel.exit_codes`.
The CLI entry point in :func:`specmodel.app.main` catches ``SpecModelError``
and exits with the appropriate code.

Validation findings are *not* exceptions: rules report
:class:`~specmodel.models.ValidationProblem` records as data.

Subclass hierarchy::

    SpecModelError (exit 1)
    +-- StructuralError            (exit 3)
    |   +-- InvalidState
    |   +-- NodeNotFound
    |   +-- InvalidNodePath
    +-- UnsupportedOperation       (exit 4)
    |   +-- UnsupportedNodeKind
    |   +-- UnsupportedConversion
    +-- UnrecognizedDocumentType   (exit 5)
    +-- CommandInvariantViolation  (exit 6)
    +-- SpecParseError             (exit 7)
    +-- ConfigError                (exit 1)
"""

from specmodel.exit_codes import (
    EXIT_COMMAND_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_SPEC_PARSE_ERROR,
    EXIT_STRUCTURAL_ERROR,
    EXIT_UNRECOGNIZED_DOCUMENT,
    EXIT_UNSUPPORTED,
)


class SpecModelError(Exception):
    """Base exception for all specmodel errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class StructuralError(SpecModelError):
    """Raised for malformed or unresolvable node paths and broken tree structure.

    Structural errors are always surfaced to the caller and never silently
    recovered from.
    """

    exit_code = EXIT_STRUCTURAL_ERROR


class InvalidState(StructuralError):
    """Raised when an operation needs a node that is rooted in a document but it is not."""


class NodeNotFound(StructuralError):
    """Raised when a node path does not resolve to a node in the given document."""


class InvalidNodePath(StructuralError):
    """Raised when a node path string cannot be parsed."""


class UnsupportedOperation(SpecModelError):
    """Raised when dispatch finds no handler for a ``(kind, dialect, version)`` triple.

    Tooling can catch this to skip content it does not understand or let it
    propagate to fail loudly.
    """

    exit_code = EXIT_UNSUPPORTED


class UnsupportedNodeKind(UnsupportedOperation):
    """Raised when a node kind is not part of the catalog for its document type."""


class UnsupportedConversion(UnsupportedOperation):
    """Raised when cloning a node into an incompatible dialect or major version."""


class UnrecognizedDocumentType(SpecModelError):
    """Raised when a generic value carries no recognised version marker."""

    exit_code = EXIT_UNRECOGNIZED_DOCUMENT


class CommandInvariantViolation(SpecModelError):
    """Raised when a command is executed twice or undone before it was executed.

    This is a programmer error and is never retried.
    """

    exit_code = EXIT_COMMAND_ERROR


class SpecParseError(SpecModelError):
    """Raised when document text cannot be read or parsed as JSON/YAML."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class ConfigError(SpecModelError):
    """Raised for configuration problems (invalid JSON, bad severity names)."""

    exit_code = EXIT_GENERIC_FAILURE
