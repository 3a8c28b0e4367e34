"""The built-in validation rules and the rule set that selects them.

Every rule is a small :class:`~specmodel.validation.rule.ValidationRule`
subclass with its metadata declared next to it. :class:`ValidationRuleSet`
holds an ordered list of rule classes; the order is the order in which rules
run and therefore the order of their problems in a validation result.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional

from specmodel.core.node import Document, Node
from specmodel.core.references import is_local_ref, resolve_ref
from specmodel.core.types import DocumentType
from specmodel.core.visitor import handles
from specmodel.models import RuleMetadata, ValidationProblemSeverity
from specmodel.validation.rule import ValidationRule

_ALL = {"openapi": frozenset({"2", "3"}), "asyncapi": frozenset({"2"})}
_OPENAPI = {"openapi": frozenset({"2", "3"})}
_ASYNCAPI = {"asyncapi": frozenset({"2"})}

VALID_VERSIONS: dict[DocumentType, frozenset[str]] = {
    DocumentType.OPENAPI2: frozenset({"2.0"}),
    DocumentType.OPENAPI3: frozenset({"3.0.0", "3.0.1", "3.0.2", "3.0.3", "3.1.0", "3.1.1"}),
    DocumentType.ASYNCAPI2: frozenset(
        {"2.0.0", "2.1.0", "2.2.0", "2.3.0", "2.4.0", "2.5.0", "2.6.0"}
    ),
}

# Scheme, then only unreserved, reserved, or percent-encoded characters (RFC 3986).
RFC3986_URI = re.compile(
    r"^[A-Za-z][A-Za-z0-9+.\-]*:(?:[A-Za-z0-9\-._~:/?#\[\]@!$&'()*+,;=]|%[0-9A-Fa-f]{2})*$"
)

_EMAIL = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

_SCHEMA_TYPES: dict[DocumentType, frozenset[str]] = {
    DocumentType.OPENAPI2: frozenset({"string", "number", "integer", "boolean", "array", "object", "file"}),
    DocumentType.OPENAPI3: frozenset({"string", "number", "integer", "boolean", "array", "object", "null"}),
    DocumentType.ASYNCAPI2: frozenset({"string", "number", "integer", "boolean", "array", "object", "null"}),
}


class MissingVersionMarkerRule(ValidationRule):
    metadata = RuleMetadata(
        code="R-001",
        name="Missing Version Property",
        category="Required Property",
        entity="Document",
        applies_to=_ALL,
        message_template="Document is missing its '{marker}' version property.",
        default_severity=ValidationProblemSeverity.HIGH,
    )

    @handles("document")
    def visit_document(self, node: Node) -> None:
        marker = node.document_type.version_marker
        self.report_if_invalid(
            self.has_value(node.get_property(marker)), node, marker, {"marker": marker}
        )


class MissingInfoRule(ValidationRule):
    metadata = RuleMetadata(
        code="R-002",
        name="Missing API Information",
        category="Required Property",
        entity="Document",
        applies_to=_ALL,
        message_template="API is missing the 'info' property.",
        default_severity=ValidationProblemSeverity.HIGH,
    )

    @handles("document")
    def visit_document(self, node: Node) -> None:
        self.report_if_invalid(node.get_property("info") is not None, node, "info")


class InvalidVersionRule(ValidationRule):
    """Flags a version marker naming a release that does not exist for the dialect."""

    metadata = RuleMetadata(
        code="R-003",
        name="Invalid Specification Version",
        category="Invalid Property Format",
        entity="Document",
        applies_to=_ALL,
        message_template="Unsupported {dialect} version '{version}'.",
        default_severity=ValidationProblemSeverity.HIGH,
    )

    @handles("document")
    def visit_document(self, node: Node) -> None:
        document_type = node.document_type
        marker = document_type.version_marker
        version = node.get_property(marker)
        if not self.has_value(version):
            return
        self.report_if_invalid(
            str(version) in VALID_VERSIONS[document_type],
            node,
            marker,
            {"dialect": document_type.dialect.value, "version": str(version)},
        )


class MissingApiTitleRule(ValidationRule):
    metadata = RuleMetadata(
        code="INF-001",
        name="Missing API Title",
        category="Required Property",
        entity="Info",
        applies_to=_ALL,
        message_template="API is missing a title.",
    )

    @handles("info")
    def visit_info(self, node: Node) -> None:
        self.report_if_invalid(self.has_value(node.get_property("title")), node, "title")


class MissingApiVersionRule(ValidationRule):
    metadata = RuleMetadata(
        code="INF-002",
        name="Missing API Version",
        category="Required Property",
        entity="Info",
        applies_to=_ALL,
        message_template="API is missing a version.",
    )

    @handles("info")
    def visit_info(self, node: Node) -> None:
        self.report_if_invalid(self.has_value(node.get_property("version")), node, "version")


class InvalidContactEmailRule(ValidationRule):
    metadata = RuleMetadata(
        code="INF-003",
        name="Invalid Contact Email",
        category="Invalid Property Format",
        entity="Contact",
        applies_to=_ALL,
        message_template="API Contact has an invalid email address '{email}'.",
        default_severity=ValidationProblemSeverity.LOW,
    )

    @handles("contact")
    def visit_contact(self, node: Node) -> None:
        email = node.get_property("email")
        if self.has_value(email):
            self.report_if_invalid(
                isinstance(email, str) and bool(_EMAIL.match(email)), node, "email", {"email": email}
            )


class InvalidApiIdRule(ValidationRule):
    """The AsyncAPI ``id`` must be a URI per RFC 3986."""

    metadata = RuleMetadata(
        code="ID-001",
        name="Invalid API Identifier",
        category="Invalid Property Format",
        entity="Document",
        applies_to=_ASYNCAPI,
        message_template="API identifier '{id}' is not a valid RFC 3986 URI.",
    )

    @handles("document", dialect="asyncapi")
    def visit_document(self, node: Node) -> None:
        api_id = node.get_property("id")
        if self.has_value(api_id):
            self.report_if_invalid(is_valid_id(api_id), node, "id", {"id": api_id})


def is_valid_id(value: object) -> bool:
    return isinstance(value, str) and RFC3986_URI.match(value) is not None


class MissingResponseDescriptionRule(ValidationRule):
    metadata = RuleMetadata(
        code="RES-001",
        name="Missing Response Description",
        category="Required Property",
        entity="Response",
        applies_to=_OPENAPI,
        message_template="Response is missing a description.",
    )

    @handles("response")
    @handles("response_definition")
    def visit_response(self, node: Node) -> None:
        if node.get_property("$ref") is not None:
            return
        self.report_if_invalid(node.get_property("description") is not None, node, "description")


class InvalidSchemaTypeRule(ValidationRule):
    metadata = RuleMetadata(
        code="SCH-001",
        name="Invalid Schema Type",
        category="Invalid Property Value",
        entity="Schema",
        applies_to=_ALL,
        message_template="Schema type '{type}' is not one of the allowed types.",
    )

    @handles("schema")
    @handles("schema_definition")
    def visit_schema(self, node: Node) -> None:
        declared = node.get_property("type")
        if declared is None:
            return
        allowed = _SCHEMA_TYPES[node.document_type]
        types = declared if isinstance(declared, list) else [declared]
        for item in types:
            if not isinstance(item, str) or item not in allowed:
                self.report(node, "type", {"type": item})


class UnresolvableReferenceRule(ValidationRule):
    """Local ``$ref`` values must point at an existing node."""

    metadata = RuleMetadata(
        code="REF-001",
        name="Unresolvable Reference",
        category="Invalid Reference",
        entity="Reference",
        applies_to=_ALL,
        message_template="Reference '{ref}' does not resolve to a node in this document.",
        default_severity=ValidationProblemSeverity.HIGH,
    )

    def visit_node(self, node: Node) -> None:
        if node.spec.get_field("$ref") is None:
            return
        ref = node.get_property("$ref")
        if not isinstance(ref, str) or not is_local_ref(ref):
            return
        document = node.owner_document
        self.report_if_invalid(
            document is not None and resolve_ref(ref, document) is not None, node, "$ref", {"ref": ref}
        )


DEFAULT_RULES: tuple[type[ValidationRule], ...] = (
    MissingVersionMarkerRule,
    MissingInfoRule,
    InvalidVersionRule,
    MissingApiTitleRule,
    MissingApiVersionRule,
    InvalidContactEmailRule,
    InvalidApiIdRule,
    MissingResponseDescriptionRule,
    InvalidSchemaTypeRule,
    UnresolvableReferenceRule,
)


class ValidationRuleSet:
    """An ordered collection of rule classes."""

    def __init__(self, rules: Optional[Iterable[type[ValidationRule]]] = None) -> None:
        self._rules: list[type[ValidationRule]] = list(DEFAULT_RULES if rules is None else rules)

    def all_rules(self) -> list[type[ValidationRule]]:
        return list(self._rules)

    def get_rule(self, code: str) -> Optional[type[ValidationRule]]:
        for rule in self._rules:
            if rule.metadata.code == code:
                return rule
        return None

    def rules_for(self, document: Document) -> list[type[ValidationRule]]:
        """Return the rules applicable to *document*, in rule-set order."""
        return [rule for rule in self._rules if rule.is_applicable(document)]
