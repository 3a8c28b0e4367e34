"""Numeric process exit codes used by the ``specmodel`` CLI.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~specmodel.exceptions.SpecModelError` subclass.
External tooling (CI scripts, pre-commit hooks) can inspect the exit code to
determine the failure class without parsing stderr.

Example::

    $ specmodel validate openapi.yaml
    $ echo $?
    1   # EXIT_PROBLEMS_FOUND -- the document has validation problems
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_PROBLEMS_FOUND = 1
"""Validation finished and reported problems at or above the failure threshold."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_STRUCTURAL_ERROR = 3
"""A node path could not be parsed or resolved, or the tree is in an invalid state."""

EXIT_UNSUPPORTED = 4
"""No handler exists for a node kind, dialect, and version combination."""

EXIT_UNRECOGNIZED_DOCUMENT = 5
"""The input is not a recognised OpenAPI or AsyncAPI document."""

EXIT_COMMAND_ERROR = 6
"""A command was executed or undone out of order."""

EXIT_SPEC_PARSE_ERROR = 7
"""The document text could not be loaded or parsed."""
