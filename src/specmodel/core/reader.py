"""Build node trees from generic values.

The reader is driven by the shape of the input rather than by a fixed schema
order: for each key of the input mapping it asks the catalog what the key
means for the current node kind and creates values or child nodes
accordingly. Keys the catalog does not know -- ``x-*`` extensions as well as
plain unknown properties -- are stored verbatim in the extension bag. So is
any recognised key whose value has the wrong shape (a list where a mapping
was expected, for example), which keeps reads lossless.

Reading goes through :func:`~specmodel.core.visitor.dispatch` with a
:class:`ReaderDispatcher`, so a document type can specialise how one node
kind is read by registering a handler for it.
"""

from __future__ import annotations

import logging
from typing import Any

from specmodel.core.catalog import FieldShape
from specmodel.core.node import Document, Node, copy_value
from specmodel.core.visitor import Visitor, dispatch
from specmodel.exceptions import StructuralError
from specmodel.parser.detect import detect_document_type

logger = logging.getLogger(__name__)


class ReaderDispatcher(Visitor):
    """Routes one input value to the reader operation for a node's kind."""

    def __init__(self, value: dict[str, Any], reader: DataModelReader) -> None:
        self._value = value
        self._reader = reader

    def visit_node(self, node: Node) -> None:
        self._reader.read_properties(self._value, node)


class DataModelReader:
    """Reads generic values into documents and nodes."""

    def read_document(self, value: Any) -> Document:
        """Detect the document type of *value* and build a new document from it.

        Raises:
            UnrecognizedDocumentType: If no supported version marker is found.
        """
        document_type = detect_document_type(value)
        document = Document(document_type)
        self.read_node(value, document)
        logger.debug("Read %s document", document_type.value)
        return document

    def read_node(self, value: Any, node: Node) -> Node:
        """Populate an existing *node* from *value* and return it.

        Raises:
            StructuralError: If *value* is not a mapping.
        """
        if not isinstance(value, dict):
            raise StructuralError(
                f"Cannot read a {type(value).__name__} into a '{node.kind}' node"
            )
        dispatch(node, ReaderDispatcher(value, self))
        return node

    def read_properties(self, value: dict[str, Any], node: Node) -> None:
        """Generic, catalog-driven read of every key in *value*."""
        spec = node.spec
        for key, item in value.items():
            field = spec.get_field(key)
            if field is None:
                if spec.is_container and not key.startswith("x-") and isinstance(item, dict):
                    self.read_node(item, node.create_entry(key))
                else:
                    node.set_extension(key, copy_value(item))
            elif field.shape is FieldShape.VALUE:
                node.store_value(key, copy_value(item))
            elif field.shape is FieldShape.NODE:
                if isinstance(item, dict):
                    self.read_node(item, node.create_child(key))
                else:
                    self._mismatch(node, key, item)
            elif field.shape is FieldShape.NODE_LIST:
                if isinstance(item, list) and all(isinstance(i, dict) for i in item):
                    node.ensure_collection(key)
                    for element in item:
                        self.read_node(element, node.create_child(key))
                else:
                    self._mismatch(node, key, item)
            elif isinstance(item, dict) and all(isinstance(i, dict) for i in item.values()):
                node.ensure_collection(key)
                for name, element in item.items():
                    self.read_node(element, node.create_child(key, name))
            else:
                self._mismatch(node, key, item)

    @staticmethod
    def _mismatch(node: Node, key: str, item: Any) -> None:
        logger.debug("Keeping '%s' of %s verbatim: unexpected %s", key, node.kind, type(item).__name__)
        node.set_extension(key, copy_value(item))
