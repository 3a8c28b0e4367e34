"""Serialise node trees back to generic values.

The writer emits catalog values in the order they are stored on the node,
then container entries, then the extension bag. Property order in the output
is therefore not a canonical schema order; only round-trip equivalence with
the input is guaranteed.

Unlike the reader, the writer never skips content it cannot handle: a node
whose kind has no catalog entry for its document type fails with
:class:`~specmodel.exceptions.UnsupportedNodeKind`.
"""

from __future__ import annotations

from typing import Any

from specmodel.core.node import Node, copy_value
from specmodel.core.visitor import Visitor, dispatch, handles


class DataModelWriter(Visitor):
    """Writes nodes to plain ``dict``/``list``/scalar trees."""

    def write_node(self, node: Node) -> dict[str, Any]:
        return dispatch(node, self)

    def visit_node(self, node: Node) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for name, value in node.iter_values():
            result[name] = self._write_value(value)
        for key, entry in node.entries().items():
            result[key] = self.write_node(entry)
        for name, value in node.extensions.items():
            result.setdefault(name, copy_value(value))
        return result

    @handles("document")
    def visit_document(self, node: Node) -> dict[str, Any]:
        # Version marker first.
        result = self.visit_node(node)
        marker = node.document_type.version_marker
        if marker in result:
            result = {marker: result.pop(marker), **result}
        return result

    def _write_value(self, value: Any) -> Any:
        if isinstance(value, Node):
            return self.write_node(value)
        if isinstance(value, list) and value and all(isinstance(v, Node) for v in value):
            return [self.write_node(v) for v in value]
        if isinstance(value, dict) and value and all(isinstance(v, Node) for v in value.values()):
            return {k: self.write_node(v) for k, v in value.items()}
        return copy_value(value)


def write_node(node: Node) -> dict[str, Any]:
    """Serialise *node* (and its subtree) to a generic value."""
    return DataModelWriter().write_node(node)
