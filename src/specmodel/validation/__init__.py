"""Validation rule engine.

Typical usage::

    from specmodel.validation import validate_document

    problems = asyncio.run(validate_document(document))
    for problem in problems:
        print(problem.node_path, problem.error_code, problem.message)

Sub-modules:

* :mod:`~specmodel.validation.rule` -- rule base class and severity registries.
* :mod:`~specmodel.validation.rules` -- built-in rules and :class:`ValidationRuleSet`.
* :mod:`~specmodel.validation.engine` -- the synchronous engine and the
  extension-merging :func:`validate_document`.
* :mod:`~specmodel.validation.extensions` -- the extension validator contract.
"""

from specmodel.validation.engine import ValidationEngine, validate_document
from specmodel.validation.extensions import DocumentValidatorExtension, RemoteReferenceValidator
from specmodel.validation.rule import ConfiguredSeverityRegistry, SeverityRegistry, ValidationRule
from specmodel.validation.rules import ValidationRuleSet

__all__ = [
    "ConfiguredSeverityRegistry",
    "DocumentValidatorExtension",
    "RemoteReferenceValidator",
    "SeverityRegistry",
    "ValidationEngine",
    "ValidationRule",
    "ValidationRuleSet",
    "validate_document",
]
