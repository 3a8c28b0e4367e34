"""Base class for validation rules and the severity registries.

A rule is a restricted :class:`~specmodel.core.visitor.Visitor`: it
registers handlers for the node kinds it cares about, evaluates a predicate,
and reports a problem when the predicate fails. Rules never mutate the tree.

Each rule class carries a :class:`~specmodel.models.RuleMetadata` describing
its code, category, default severity, and the dialect versions it applies to.
A fresh rule instance is created for every validation pass, so rules may keep
state between handler calls without leaking it into the next pass.
"""

from __future__ import annotations

from typing import Any, ClassVar, Optional

from specmodel.core.node import Document, Node
from specmodel.core.visitor import Visitor
from specmodel.models import (
    RuleMetadata,
    ValidationConfig,
    ValidationProblem,
    ValidationProblemSeverity,
)


class SeverityRegistry:
    """Decides the severity a rule reports with. Uses each rule's default."""

    def lookup_severity(self, metadata: RuleMetadata) -> ValidationProblemSeverity:
        return metadata.default_severity


class ConfiguredSeverityRegistry(SeverityRegistry):
    """Severity registry with per-code overrides, typically loaded from config."""

    def __init__(self, overrides: Optional[dict[str, ValidationProblemSeverity]] = None) -> None:
        self._overrides = dict(overrides or {})

    @classmethod
    def from_config(cls, config: ValidationConfig) -> ConfiguredSeverityRegistry:
        return cls(config.severity_overrides)

    def lookup_severity(self, metadata: RuleMetadata) -> ValidationProblemSeverity:
        return self._overrides.get(metadata.code, metadata.default_severity)


class ValidationRule(Visitor):
    """Base class for all validation rules.

    Subclasses set :attr:`metadata` and implement handlers with
    :func:`~specmodel.core.visitor.handles`. Inside a handler, call
    :meth:`report` or :meth:`report_if_invalid`.

    Example::

        class MissingApiTitleRule(ValidationRule):
            metadata = RuleMetadata(code="INF-001", ...)

            @handles("info")
            def visit_info(self, node: Node) -> None:
                self.report_if_invalid(
                    self.has_value(node.get_property("title")), node, "title"
                )
    """

    metadata: ClassVar[RuleMetadata]

    def __init__(self, severity_registry: Optional[SeverityRegistry] = None) -> None:
        self._severity_registry = severity_registry or SeverityRegistry()
        self.problems: list[tuple[Node, ValidationProblem]] = []

    @classmethod
    def is_applicable(cls, document: Document) -> bool:
        """Return True when the rule's ``applies_to`` covers *document*.

        The declared version string (``openapi: "3.0.2"``) is matched against
        each version family; when it is missing or matches none, the rule
        still applies if one of its families shares the document's major
        version, so that rules checking the version itself keep running.
        """
        document_type = document.document_type
        families = cls.metadata.applies_to.get(document_type.dialect.value)
        if not families:
            return False
        version = document.get_property(document_type.version_marker)
        if version is not None:
            version = str(version)
            if any(version == f or version.startswith(f + ".") for f in families):
                return True
        major = str(document_type.major_version)
        return any(f.split(".")[0] == major for f in families)

    @staticmethod
    def has_value(value: Any) -> bool:
        """True for anything except ``None`` and the empty string."""
        return value is not None and value != ""

    def report(
        self,
        node: Node,
        property_name: Optional[str] = None,
        context: Optional[dict[str, str]] = None,
    ) -> None:
        """Record a problem for *node*, unless the rule's severity is ``ignore``."""
        severity = self._severity_registry.lookup_severity(self.metadata)
        if severity is ValidationProblemSeverity.IGNORE:
            return
        context = {k: str(v) for k, v in (context or {}).items()}
        problem = ValidationProblem(
            error_code=self.metadata.code,
            node_path=str(node.path()),
            property_name=property_name,
            message=self.metadata.format_message(context),
            severity=severity,
            context=context,
        )
        self.problems.append((node, problem))

    def report_if_invalid(
        self,
        is_valid: bool,
        node: Node,
        property_name: Optional[str] = None,
        context: Optional[dict[str, str]] = None,
    ) -> None:
        if not is_valid:
            self.report(node, property_name, context)
