"""Set or remove a raw-valued property."""

from __future__ import annotations

from typing import Any, Optional, Union

from specmodel.commands.base import Command
from specmodel.core.node import Document, Node, copy_value
from specmodel.core.paths import NodePath, resolve
from specmodel.exceptions import StructuralError


class SetPropertyCommand(Command):
    """Set *property_name* on the node at *node_path* to *value*.

    Works for catalog value fields and for extension properties alike.
    A *value* of ``None`` removes the property.
    """

    type_name = "set_property"
    fields = ("node_path", "property_name", "value")
    captured = ("had_value", "old_value")

    def __init__(self, node_path: Union[NodePath, str], property_name: str, value: Any) -> None:
        super().__init__()
        self.node_path = str(node_path)
        self.property_name = property_name
        self.value = copy_value(value)
        self.had_value = False
        self.old_value: Optional[Any] = None

    def _execute(self, document: Document) -> None:
        node = resolve(self.node_path, document)
        field = node.spec.get_field(self.property_name)
        if field is not None and field.is_node:
            raise StructuralError(f"'{self.property_name}' of {node.kind} holds child nodes")
        self.had_value, self.old_value = _current(node, self.property_name)
        node.set_property(self.property_name, copy_value(self.value))

    def _undo(self, document: Document) -> None:
        node = resolve(self.node_path, document)
        if not self.had_value:
            node.remove_property(self.property_name)
        elif node.spec.get_field(self.property_name) is not None:
            node.store_value(self.property_name, copy_value(self.old_value))
        else:
            node.set_extension(self.property_name, copy_value(self.old_value))


def _current(node: Node, name: str) -> tuple[bool, Any]:
    if node.has_property(name):
        return True, copy_value(node.get_property(name))
    if name in node.extensions:
        return True, copy_value(node.get_extension(name))
    return False, None
