"""Run validation rules over a document and merge extension findings.

Two layers:

* :class:`ValidationEngine` runs the built-in, synchronous rules. Each
  applicable rule gets its own depth-first pre-order traversal, so problems
  of one rule appear in tree order and rules appear in rule-set order.
* :func:`validate_document` runs the engine **eagerly** and returns an
  awaitable that joins any caller-supplied
  :class:`~specmodel.validation.extensions.DocumentValidatorExtension`
  instances. Synchronous problems always come first, followed by each
  extension's problems in the order the extensions were given.

A rule that raises is isolated by default: the failure is logged, the rule's
partial problems are discarded, and the remaining rules still run. An
extension that raises is **not** isolated -- the first failure propagates
through the awaitable.

Example::

    problems = asyncio.run(validate_document(document, extensions=[MyCheck()]))
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Iterable, Optional, Sequence

from specmodel.core.node import Document, Node
from specmodel.core.paths import resolve
from specmodel.core.visitor import traverse
from specmodel.exceptions import StructuralError
from specmodel.models import ValidationConfig, ValidationProblem
from specmodel.validation.extensions import DocumentValidatorExtension
from specmodel.validation.rule import ConfiguredSeverityRegistry, SeverityRegistry
from specmodel.validation.rules import ValidationRuleSet

logger = logging.getLogger(__name__)


class ValidationEngine:
    """Runs the applicable rules of a :class:`ValidationRuleSet` over a document.

    Args:
        rule_set: Rules to run. Defaults to the built-in rule set.
        severity_registry: Severity lookup; defaults to each rule's default.
        disabled_rules: Rule codes to skip entirely.
        isolate_rule_failures: When ``False``, an exception raised by a rule
            aborts the whole pass instead of only that rule.
    """

    def __init__(
        self,
        rule_set: Optional[ValidationRuleSet] = None,
        severity_registry: Optional[SeverityRegistry] = None,
        disabled_rules: Iterable[str] = (),
        isolate_rule_failures: bool = True,
    ) -> None:
        self.rule_set = rule_set or ValidationRuleSet()
        self.severity_registry = severity_registry or SeverityRegistry()
        self.disabled_rules = frozenset(disabled_rules)
        self.isolate_rule_failures = isolate_rule_failures

    @classmethod
    def from_config(
        cls, config: ValidationConfig, rule_set: Optional[ValidationRuleSet] = None
    ) -> ValidationEngine:
        return cls(
            rule_set=rule_set,
            severity_registry=ConfiguredSeverityRegistry.from_config(config),
            disabled_rules=config.disabled_rules,
            isolate_rule_failures=config.isolate_rule_failures,
        )

    def validate(self, document: Document) -> list[ValidationProblem]:
        """Run every applicable rule and return the problems found.

        Problems from the previous pass are cleared first; the new ones are
        attached to the nodes they concern as well as returned. The tree is
        not otherwise modified.
        """
        document.clear_all_validation_problems()
        problems: list[ValidationProblem] = []
        for rule_cls in self.rule_set.rules_for(document):
            code = rule_cls.metadata.code
            if code in self.disabled_rules:
                logger.debug("Rule %s is disabled, skipping", code)
                continue
            rule = rule_cls(self.severity_registry)
            try:
                traverse(document, rule)
            except Exception:
                if not self.isolate_rule_failures:
                    raise
                logger.warning("Validation rule %s failed and was skipped", code, exc_info=True)
                continue
            for node, problem in rule.problems:
                node.add_validation_problem(problem)
                problems.append(problem)
        logger.debug("Validation of %s found %d problem(s)", document.document_type.value, len(problems))
        return problems


def validate_document(
    document: Document,
    severity_registry: Optional[SeverityRegistry] = None,
    extensions: Optional[Sequence[DocumentValidatorExtension]] = None,
    engine: Optional[ValidationEngine] = None,
) -> Awaitable[list[ValidationProblem]]:
    """Validate *document* with the built-in rules plus optional extensions.

    The synchronous rules run immediately, before this function returns. The
    returned awaitable resolves to the merged, order-preserving result; the
    extensions only start once it is awaited. The result is always a list,
    possibly empty.

    Args:
        document: The document to validate. It must not be mutated until the
            awaitable has resolved.
        severity_registry: Severity lookup for the built-in rules. Ignored
            when *engine* is given.
        extensions: Caller-supplied validators, awaited concurrently.
        engine: A preconfigured engine, e.g. from
            :meth:`ValidationEngine.from_config`.
    """
    if engine is None:
        engine = ValidationEngine(severity_registry=severity_registry)
    problems = engine.validate(document)
    return _join_extensions(document, problems, list(extensions or ()))


async def _join_extensions(
    document: Document,
    problems: list[ValidationProblem],
    extensions: list[DocumentValidatorExtension],
) -> list[ValidationProblem]:
    merged = list(problems)
    if not extensions:
        return merged
    results = await asyncio.gather(
        *(ext.validate_document(document) for ext in extensions), return_exceptions=True
    )
    for result in results:
        if isinstance(result, BaseException):
            raise result
    for extension_problems in results:
        for problem in extension_problems:
            _attach(document, problem).add_validation_problem(problem)
            merged.append(problem)
    return merged


def _attach(document: Document, problem: ValidationProblem) -> Node:
    """Find the node an extension problem refers to, falling back to the root."""
    try:
        return resolve(problem.node_path, document)
    except StructuralError:
        return document
