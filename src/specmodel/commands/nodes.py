"""Structural edits: add, remove, replace and rename child nodes.

All of these record the exact slot a node occupied -- parent path, field,
sequence index, and for keyed collections the key and its position in
insertion order -- so that undo puts content back where it was. Nodes are
always (re)built from their serialised form through
:class:`~specmodel.core.reader.DataModelReader`, the same path used when a
document is first read.
"""

from __future__ import annotations

from typing import Any, Optional, Union

from specmodel.commands.base import Command
from specmodel.core.catalog import FieldShape
from specmodel.core.node import Document, Node, Slot, copy_value
from specmodel.core.paths import NodePath, resolve
from specmodel.core.reader import DataModelReader
from specmodel.core.writer import write_node
from specmodel.exceptions import NodeNotFound, StructuralError


def _build(document: Document, kind: str, value: dict[str, Any]) -> Node:
    node = document.create_node(kind)
    DataModelReader().read_node(copy_value(value), node)
    return node


def _child_kind(parent: Node, property_name: Optional[str]) -> str:
    if property_name is None:
        if not parent.spec.is_container:
            raise StructuralError(f"{parent.kind} does not hold keyed entries")
        return parent.spec.entry_kind
    field = parent.spec.get_field(property_name)
    if field is None or not field.is_node:
        raise StructuralError(f"'{property_name}' of {parent.kind} does not hold child nodes")
    return field.kind


def _child_at(parent: Node, property_name: Optional[str], index: Optional[int], key: Optional[str]) -> Optional[Node]:
    """Return the child currently in the given slot of *parent*, if any."""
    if property_name is None:
        return parent.get_entry(key)
    shape = parent.spec.get_field(property_name).shape
    if shape is FieldShape.NODE:
        return parent.get_property(property_name)
    if shape is FieldShape.NODE_LIST:
        items = parent.get_list(property_name)
        if index is None or index >= len(items):
            return None
        return items[index]
    return parent.get_map(property_name).get(key)


class AddNodeCommand(Command):
    """Create a child of *parent_path* from the generic *value*.

    * A single-node field is set, replacing any existing child.
    * A sequence field is appended to.
    * A keyed field (or a container's entries, when *property_name* is
      ``None``) gets *key*; an existing child under that key is replaced in
      place.

    A replaced child is restored on undo.
    """

    type_name = "add_node"
    fields = ("parent_path", "property_name", "value", "key")
    captured = ("index", "replaced")

    def __init__(
        self,
        parent_path: Union[NodePath, str],
        property_name: Optional[str],
        value: dict[str, Any],
        key: Optional[str] = None,
    ) -> None:
        super().__init__()
        self.parent_path = str(parent_path)
        self.property_name = property_name
        self.value = copy_value(value)
        self.key = key
        self.index: Optional[int] = None
        self.replaced: Optional[dict[str, Any]] = None

    def _execute(self, document: Document) -> None:
        parent = resolve(self.parent_path, document)
        kind = _child_kind(parent, self.property_name)
        shape = None if self.property_name is None else parent.spec.get_field(self.property_name).shape
        if self.key is None and shape in (None, FieldShape.NODE_MAP):
            raise StructuralError("A key is required to add to a keyed collection")
        child = _build(document, kind, self.value)

        existing = None
        if shape is not FieldShape.NODE_LIST:
            existing = _child_at(parent, self.property_name, None, self.key)
        if existing is not None:
            self.replaced = write_node(existing)
            slot = parent.remove_child(existing)
        else:
            self.replaced = None
            slot = Slot(self.property_name, None, self.key)
        parent.insert_child(child, slot)
        self.index = parent.slot_of(child).index

    def _undo(self, document: Document) -> None:
        parent = resolve(self.parent_path, document)
        added = _child_at(parent, self.property_name, self.index, self.key)
        if added is None:
            raise NodeNotFound(f"Added node is no longer under {self.parent_path}")
        slot = parent.remove_child(added)
        if self.replaced is not None:
            parent.insert_child(_build(document, added.kind, self.replaced), slot)


class RemoveNodeCommand(Command):
    """Detach the node at *node_path* from its parent."""

    type_name = "remove_node"
    fields = ("node_path",)
    captured = ("parent_path", "kind", "removed", "property_name", "index", "key")

    def __init__(self, node_path: Union[NodePath, str]) -> None:
        super().__init__()
        self.node_path = str(node_path)
        self.parent_path: Optional[str] = None
        self.kind: Optional[str] = None
        self.removed: Optional[dict[str, Any]] = None
        self.property_name: Optional[str] = None
        self.index: Optional[int] = None
        self.key: Optional[str] = None

    def _execute(self, document: Document) -> None:
        node = resolve(self.node_path, document)
        parent = node.parent
        if parent is None:
            raise StructuralError("The document root cannot be removed")
        self.parent_path = str(parent.path())
        self.kind = node.kind
        self.removed = write_node(node)
        slot = parent.remove_child(node)
        self.property_name, self.index, self.key = slot.property_name, slot.index, slot.key

    def _undo(self, document: Document) -> None:
        parent = resolve(self.parent_path, document)
        node = _build(document, self.kind, self.removed)
        parent.insert_child(node, Slot(self.property_name, self.index, self.key))


class ReplaceNodeCommand(Command):
    """Put *new_node*'s content in the slot currently held by *old_node*.

    The replacement is serialised when the command is created. The slot --
    including the key of a keyed definition -- is captured when the command
    executes, so a rename between creation and execution is honoured, and
    undo restores the original content under the key it had at that moment.

    Example::

        old = document.get_property("components").get_map("responses")["NotFoundError"]
        new = document.create_node("response_definition")
        new.set_property("description", "Nothing here")
        ReplaceNodeCommand(old, new).execute(document)
    """

    type_name = "replace_node"
    fields = ("node_path", "new_value")
    captured = ("parent_path", "kind", "old_value", "property_name", "index", "key")

    def __init__(self, old_node: Node, new_node: Node) -> None:
        super().__init__()
        if old_node.kind != new_node.kind:
            raise StructuralError(
                f"Cannot replace a '{old_node.kind}' node with a '{new_node.kind}' node"
            )
        self._old_node: Optional[Node] = old_node
        self.node_path = str(old_node.path())
        self.new_value = write_node(new_node)
        self.parent_path: Optional[str] = None
        self.kind: Optional[str] = old_node.kind
        self.old_value: Optional[dict[str, Any]] = None
        self.property_name: Optional[str] = None
        self.index: Optional[int] = None
        self.key: Optional[str] = None

    @classmethod
    def _from_fields(cls, values: dict[str, Any]) -> ReplaceNodeCommand:
        command = cls.__new__(cls)
        Command.__init__(command)
        command._old_node = None
        command.node_path = values["node_path"]
        command.new_value = values["new_value"]
        return command

    def _target(self, document: Document) -> Node:
        old = self._old_node
        if old is not None and old.owner_document is document:
            return old
        return resolve(self.node_path, document)

    def _execute(self, document: Document) -> None:
        old = self._target(document)
        self._old_node = None
        parent = old.parent
        if parent is None:
            raise StructuralError("The document root cannot be replaced")
        self.parent_path = str(parent.path())
        self.kind = old.kind
        self.old_value = write_node(old)
        slot = parent.remove_child(old)
        self.property_name, self.index, self.key = slot.property_name, slot.index, slot.key
        replacement = _build(document, self.kind, self.new_value)
        parent.insert_child(replacement, slot)
        self.node_path = str(replacement.path())

    def _undo(self, document: Document) -> None:
        parent = resolve(self.parent_path, document)
        current = _child_at(parent, self.property_name, self.index, self.key)
        if current is not None:
            slot = parent.remove_child(current)
        elif self.key is not None:
            # Replacement renamed away since; restore under the captured key.
            slot = Slot(self.property_name, self.index, self.key)
        else:
            raise NodeNotFound(f"Replacement node is no longer under {self.parent_path}")
        parent.insert_child(_build(document, self.kind, self.old_value), slot)


class RenameNodeCommand(Command):
    """Change the key of the keyed node at *node_path*, keeping its position."""

    type_name = "rename_node"
    fields = ("node_path", "new_key")
    captured = ("parent_path", "property_name", "old_key")

    def __init__(self, node_path: Union[NodePath, str], new_key: str) -> None:
        super().__init__()
        self.node_path = str(node_path)
        self.new_key = new_key
        self.parent_path: Optional[str] = None
        self.property_name: Optional[str] = None
        self.old_key: Optional[str] = None

    def _execute(self, document: Document) -> None:
        if self.parent_path is not None and self.old_key is not None:
            parent = resolve(self.parent_path, document)
        else:
            node = resolve(self.node_path, document)
            if node.parent is None or node.map_key is None:
                raise StructuralError(f"Node at {self.node_path} is not in a keyed collection")
            parent = node.parent
            self.parent_path = str(parent.path())
            self.property_name = node.parent_property
            self.old_key = node.map_key
        parent.rename_key(self.old_key, self.new_key, self.property_name)

    def _undo(self, document: Document) -> None:
        parent = resolve(self.parent_path, document)
        parent.rename_key(self.new_key, self.old_key, self.property_name)
