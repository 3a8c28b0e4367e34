"""One-call entry points for the common read / write / validate workflows.

Everything here is thin wiring around :mod:`specmodel.core`,
:mod:`specmodel.parser` and :mod:`specmodel.validation`; the functions exist
so that callers do not need to know which module provides what.

Example::

    from specmodel import library

    document = library.read_document_from_json_string(text)
    problems = library.validate(document)
    print(library.write_document_to_json_string(document))
"""

from __future__ import annotations

from typing import Any, Optional, Sequence, Union

from specmodel.core import factories
from specmodel.core.catalog import get_catalog
from specmodel.core.node import Document, Node
from specmodel.core.paths import NodePath, resolve
from specmodel.core.reader import DataModelReader
from specmodel.core.types import DocumentType
from specmodel.core.writer import write_node as _write_node
from specmodel.exceptions import UnsupportedConversion
from specmodel.models import ValidationConfig, ValidationProblem
from specmodel.parser.loader import parse_content, stringify
from specmodel.validation.engine import ValidationEngine
from specmodel.validation.engine import validate_document as _validate_document
from specmodel.validation.extensions import DocumentValidatorExtension
from specmodel.validation.rule import SeverityRegistry


def read_document(value: Any) -> Document:
    """Build a document from a generic value, detecting its type.

    Raises:
        UnrecognizedDocumentType: If the value carries no supported version marker.
    """
    return DataModelReader().read_document(value)


def read_document_from_json_string(text: str) -> Document:
    """Parse JSON *text* and build a document from it.

    Raises:
        SpecParseError: If *text* is not a JSON object.
        UnrecognizedDocumentType: If no supported version marker is found.
    """
    return read_document(parse_content(text, hint="json"))


def read_node(value: Any, node: Node) -> Node:
    """Populate an existing, empty *node* from *value*."""
    return DataModelReader().read_node(value, node)


def write_node(node: Node) -> dict[str, Any]:
    """Serialise *node* and its subtree to a generic value."""
    return _write_node(node)


def write_document_to_json_string(document: Document, indent: int = 2) -> str:
    return stringify(_write_node(document), "json", indent=indent)


def create_document(document_type: Union[DocumentType, str]) -> Document:
    """Create an empty document, e.g. ``create_document("openapi3")``."""
    return factories.create_document(DocumentType(document_type))


def clone_document(document: Document) -> Document:
    """Return an independent deep copy of *document*."""
    return read_document(_write_node(document))


def clone_node(node: Node, target_type: Optional[Union[DocumentType, str]] = None) -> Node:
    """Return a detached copy of *node*, optionally for another document type.

    The copy can be attached anywhere a node of its kind is allowed, in the
    original document or in another document of *target_type* (by default
    the node's own type).

    Raises:
        UnsupportedConversion: If *target_type* has a different dialect or
            major version, or does not define the node's kind.
    """
    target = node.document_type if target_type is None else DocumentType(target_type)
    source = node.document_type
    if (target.dialect, target.major_version) != (source.dialect, source.major_version):
        raise UnsupportedConversion(
            f"Cannot clone a {source.value} '{node.kind}' node into a {target.value} document"
        )
    if not get_catalog(target).has_kind(node.kind):
        raise UnsupportedConversion(f"Node kind '{node.kind}' does not exist in {target.value}")
    copy = Node(node.kind, target)
    return DataModelReader().read_node(_write_node(node), copy)


def resolve_node_path(path: Union[NodePath, str], document: Document) -> Node:
    """Return the node at *path*.

    Raises:
        InvalidNodePath: If *path* is malformed.
        NodeNotFound: If nothing exists at *path*.
    """
    return resolve(path, document)


def validate(
    document: Document,
    config: Optional[ValidationConfig] = None,
) -> list[ValidationProblem]:
    """Run the built-in rules synchronously and return their problems."""
    engine = ValidationEngine.from_config(config) if config is not None else ValidationEngine()
    return engine.validate(document)


async def validate_document(
    document: Document,
    extensions: Optional[Sequence[DocumentValidatorExtension]] = None,
    severity_registry: Optional[SeverityRegistry] = None,
    config: Optional[ValidationConfig] = None,
) -> list[ValidationProblem]:
    """Run the built-in rules plus *extensions* and return the merged problems.

    Built-in problems come first, then each extension's problems in the
    order the extensions are given.
    """
    engine = ValidationEngine.from_config(config) if config is not None else None
    return await _validate_document(
        document, severity_registry=severity_registry, extensions=extensions, engine=engine
    )
