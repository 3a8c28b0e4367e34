"""Typed tree nodes with ownership back-references and an extension bag.

Every element of a parsed API description is a :class:`Node`. A node has a
``kind`` (its semantic role, e.g. ``"schema"`` or ``"response_definition"``)
and inherits its :class:`~specmodel.core.types.DocumentType` from the
document that created it. What a node may contain is decided by the
:mod:`~specmodel.core.catalog`, not by a class hierarchy.

A node stores:

* **values** -- catalog fields in insertion order. Depending on the field's
  shape the stored value is a raw JSON value, a single child :class:`Node`, a
  ``list`` of nodes, or a ``dict`` of nodes keyed by name.
* **entries** -- for container kinds (``paths``, ``responses``...), the keyed
  child nodes held directly by the node.
* **extensions** -- every property the catalog does not recognise, kept
  verbatim for lossless round trips.

Ownership rules: a node has at most one parent and belongs to at most one
document. All structural mutation goes through the attach/detach helpers on
this class so that ``parent`` and ``owner_document`` stay consistent. A
detached node keeps its kind and document type and can be re-attached
elsewhere in a document of the same type.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Iterator, Mapping, Optional

from specmodel.core.catalog import FieldShape, FieldSpec, KindSpec, get_catalog
from specmodel.core.types import DocumentType
from specmodel.exceptions import StructuralError

if TYPE_CHECKING:
    from specmodel.core.paths import NodePath
    from specmodel.models import ValidationProblem


@dataclass(frozen=True)
class Slot:
    """The structural position a child occupies inside its parent.

    Attributes:
        property_name: The parent field holding the child, or ``None`` when the
            child is an entry of a container node.
        index: Position within a sequence field, or within the insertion order
            of a keyed collection.
        key: The key of the child in a keyed collection.
    """

    property_name: Optional[str] = None
    index: Optional[int] = None
    key: Optional[str] = None


class Node:
    """A single element of a document tree.

    Nodes are normally created by the reader or through
    :meth:`create_child` / :meth:`Document.create_node`, never by calling the
    constructor directly with an owner from another document.
    """

    def __init__(
        self,
        kind: str,
        document_type: DocumentType,
        owner_document: Optional[Document] = None,
    ) -> None:
        self._spec: KindSpec = get_catalog(document_type).kind(kind)
        self.kind = kind
        self._document_type = document_type
        self._owner: Optional[Document] = owner_document
        self._parent: Optional[Node] = None
        self._parent_property: Optional[str] = None
        self._map_key: Optional[str] = None
        self._values: dict[str, Any] = {}
        self._entries: dict[str, Node] = {}
        self._extensions: dict[str, Any] = {}
        self._validation_problems: list[ValidationProblem] = []

    def __repr__(self) -> str:
        key = f" {self._map_key!r}" if self._map_key is not None else ""
        return f"<{type(self).__name__} {self._document_type.value}:{self.kind}{key}>"

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    @property
    def document_type(self) -> DocumentType:
        return self._document_type

    @property
    def spec(self) -> KindSpec:
        """The catalog entry describing this node's kind."""
        return self._spec

    @property
    def parent(self) -> Optional[Node]:
        return self._parent

    @property
    def owner_document(self) -> Optional[Document]:
        return self._owner

    @property
    def map_key(self) -> Optional[str]:
        """The key this node is stored under when it lives in a keyed collection."""
        return self._map_key

    @property
    def parent_property(self) -> Optional[str]:
        return self._parent_property

    def is_attached(self) -> bool:
        return self._parent is not None

    def path(self) -> NodePath:
        """Return this node's :class:`~specmodel.core.paths.NodePath`.

        Raises:
            InvalidState: If the node is not rooted in a document.
        """
        from specmodel.core.paths import path_of

        return path_of(self)

    # ------------------------------------------------------------------
    # Values
    # ------------------------------------------------------------------

    def _field(self, name: str) -> FieldSpec:
        spec = self._spec.get_field(name)
        if spec is None:
            raise StructuralError(f"'{name}' is not a field of {self.kind} ({self._document_type.value})")
        return spec

    def has_property(self, name: str) -> bool:
        return name in self._values

    def get_property(self, name: str, default: Any = None) -> Any:
        """Return the raw value or single child node stored under *name*.

        Node collections are better read with :meth:`get_list` and
        :meth:`get_map`, which return copies.
        """
        return self._values.get(name, default)

    def set_property(self, name: str, value: Any) -> None:
        """Set a raw-valued property.

        Catalog value fields are stored on the node; unrecognised names go to
        the extension bag. Passing ``None`` removes the property.

        Raises:
            StructuralError: If *name* is a node-valued field; use the child
                helpers for those.
        """
        spec = self._spec.get_field(name)
        if spec is None:
            if value is None:
                self._extensions.pop(name, None)
            else:
                self._extensions[name] = value
            return
        if spec.is_node:
            raise StructuralError(f"'{name}' holds child nodes and cannot be set to a raw value")
        if value is None:
            self._values.pop(name, None)
        else:
            self._values[name] = value

    def store_value(self, name: str, value: Any) -> None:
        """Store *value* verbatim under catalog value field *name*.

        Unlike :meth:`set_property`, ``None`` is kept as a JSON ``null``.

        Raises:
            StructuralError: If *name* is not a value field of this kind.
        """
        if self._field(name).is_node:
            raise StructuralError(f"'{name}' holds child nodes and cannot be set to a raw value")
        self._values[name] = value

    def remove_property(self, name: str) -> None:
        """Remove the raw value or extension stored under *name*, if any."""
        spec = self._spec.get_field(name)
        if spec is None:
            self._extensions.pop(name, None)
        elif not spec.is_node:
            self._values.pop(name, None)
        else:
            raise StructuralError(f"'{name}' holds child nodes; use remove_child")

    def iter_values(self) -> Iterator[tuple[str, Any]]:
        """Yield ``(name, stored value)`` pairs in insertion order."""
        yield from self._values.items()

    # ------------------------------------------------------------------
    # Extensions
    # ------------------------------------------------------------------

    @property
    def extensions(self) -> Mapping[str, Any]:
        """Read-only view of the extension bag."""
        return MappingProxyType(self._extensions)

    def get_extension(self, name: str, default: Any = None) -> Any:
        return self._extensions.get(name, default)

    def set_extension(self, name: str, value: Any) -> None:
        self._extensions[name] = value

    def remove_extension(self, name: str) -> Any:
        return self._extensions.pop(name, None)

    # ------------------------------------------------------------------
    # Children
    # ------------------------------------------------------------------

    def get_list(self, name: str) -> list[Node]:
        return list(self._values.get(name) or ())

    def get_map(self, name: str) -> dict[str, Node]:
        return dict(self._values.get(name) or {})

    def entries(self) -> dict[str, Node]:
        return dict(self._entries)

    def get_entry(self, key: str) -> Optional[Node]:
        return self._entries.get(key)

    def ensure_collection(self, name: str) -> None:
        """Create an empty sequence or mapping for *name* if it is absent."""
        spec = self._field(name)
        if spec.shape is FieldShape.NODE_LIST:
            self._values.setdefault(name, [])
        elif spec.shape is FieldShape.NODE_MAP:
            self._values.setdefault(name, {})
        else:
            raise StructuralError(f"'{name}' is not a collection field of {self.kind}")

    def child_nodes(self) -> Iterator[Node]:
        """Yield direct children in catalog field order, then container entries."""
        for spec in self._spec.fields:
            if not spec.is_node or spec.name not in self._values:
                continue
            value = self._values[spec.name]
            if spec.shape is FieldShape.NODE:
                yield value
            elif spec.shape is FieldShape.NODE_LIST:
                yield from list(value)
            else:
                yield from list(value.values())
        yield from list(self._entries.values())

    def create_child(self, name: Optional[str], key: Optional[str] = None) -> Node:
        """Create a child of the catalog-declared kind for field *name* and attach it.

        Single-node fields are replaced, sequence fields are appended to, and
        keyed fields require *key*. For container kinds pass ``name=None``
        and a *key* to create an entry.
        """
        if name is None:
            if not self._spec.is_container:
                raise StructuralError(f"{self.kind} does not hold keyed entries")
            child = self.create_detached(self._spec.entry_kind)
        else:
            child = self.create_detached(self._field(name).kind)
        self.insert_child(child, Slot(property_name=name, key=key))
        return child

    def create_entry(self, key: str) -> Node:
        return self.create_child(None, key)

    def create_detached(self, kind: str) -> Node:
        """Create an unattached node of *kind* owned by this node's document.

        Raises:
            UnsupportedNodeKind: If *kind* is not in the catalog.
        """
        return Node(kind, self._document_type, self._owner)

    def set_child(self, name: str, child: Node) -> None:
        """Attach *child* as the single-node field *name*, replacing any existing child."""
        if self._field(name).shape is not FieldShape.NODE:
            raise StructuralError(f"'{name}' of {self.kind} is not a single-node field")
        self.insert_child(child, Slot(name))

    def append_child(self, name: str, child: Node) -> None:
        if self._field(name).shape is not FieldShape.NODE_LIST:
            raise StructuralError(f"'{name}' of {self.kind} is not a sequence field")
        self.insert_child(child, Slot(name))

    def put_entry(
        self,
        key: str,
        child: Node,
        position: Optional[int] = None,
        property_name: Optional[str] = None,
    ) -> None:
        """Attach *child* under *key*, optionally at an insertion-order *position*.

        *property_name* names a keyed field; ``None`` targets the entries of a
        container node.
        """
        if property_name is not None and self._field(property_name).shape is not FieldShape.NODE_MAP:
            raise StructuralError(f"'{property_name}' of {self.kind} is not a keyed collection")
        self.insert_child(child, Slot(property_name, position, key))

    def insert_child(self, child: Node, slot: Slot) -> None:
        """Attach *child* at *slot*, setting its parent and owner.

        For sequences ``slot.index`` is the insertion position (append when
        ``None``). For keyed collections ``slot.key`` is required and
        ``slot.index`` optionally restores the key's position in insertion
        order. An existing child in a single-node slot or under the same key
        is detached first.
        """
        if child.parent is not None:
            raise StructuralError(f"{child!r} is already attached; detach it first")
        if child.document_type is not self._document_type:
            raise StructuralError(
                f"Cannot attach a {child.document_type.value} node to a {self._document_type.value} document"
            )
        name = slot.property_name
        if name is None:
            self._require_key(slot)
            expected = self._spec.entry_kind
            self._check_kind(child, expected)
            self._drop_existing(self._entries.get(slot.key))
            _insert_key(self._entries, slot.key, child, slot.index)
            child._map_key = slot.key
        else:
            spec = self._field(name)
            self._check_kind(child, spec.kind)
            if spec.shape is FieldShape.NODE:
                self._drop_existing(self._values.get(name))
                self._values[name] = child
                child._map_key = None
            elif spec.shape is FieldShape.NODE_LIST:
                items = self._values.setdefault(name, [])
                items.insert(len(items) if slot.index is None else slot.index, child)
                child._map_key = None
            elif spec.shape is FieldShape.NODE_MAP:
                self._require_key(slot)
                mapping = self._values.setdefault(name, {})
                self._drop_existing(mapping.get(slot.key))
                _insert_key(mapping, slot.key, child, slot.index)
                child._map_key = slot.key
            else:
                raise StructuralError(f"'{name}' is a value field of {self.kind}")
        child._parent = self
        child._parent_property = name
        child._adopt(self._owner)

    def slot_of(self, child: Node) -> Slot:
        """Return the slot *child* currently occupies in this node."""
        if child.parent is not self:
            raise StructuralError(f"{child!r} is not a child of {self!r}")
        name = child._parent_property
        if name is None:
            return Slot(None, list(self._entries).index(child._map_key), child._map_key)
        value = self._values.get(name)
        if isinstance(value, list):
            return Slot(name, _identity_index(value, child))
        if isinstance(value, dict):
            return Slot(name, list(value).index(child._map_key), child._map_key)
        return Slot(name)

    def remove_child(self, child: Node) -> Slot:
        """Detach *child* from this node and return the slot it occupied."""
        slot = self.slot_of(child)
        if slot.property_name is None:
            del self._entries[slot.key]
        else:
            value = self._values[slot.property_name]
            if isinstance(value, list):
                del value[slot.index]
            elif isinstance(value, dict):
                del value[slot.key]
            else:
                del self._values[slot.property_name]
        child._release()
        return slot

    def rename_key(self, old_key: str, new_key: str, property_name: Optional[str] = None) -> Node:
        """Rename a keyed child in place, keeping its position.

        *property_name* names the keyed field holding the child; ``None``
        means the entries of a container node.
        """
        if property_name is None:
            mapping = self._entries
        elif self._field(property_name).shape is FieldShape.NODE_MAP:
            mapping = self._values.get(property_name, {})
        else:
            raise StructuralError(f"'{property_name}' of {self.kind} is not a keyed collection")
        if old_key not in mapping:
            raise StructuralError(f"No child keyed '{old_key}' in {self!r}")
        if new_key in mapping and new_key != old_key:
            raise StructuralError(f"Key '{new_key}' already exists in {self!r}")
        child = mapping[old_key]
        items = [(new_key if k == old_key else k, v) for k, v in mapping.items()]
        mapping.clear()
        mapping.update(items)
        child._map_key = new_key
        return child

    def detach(self) -> Optional[Slot]:
        """Remove this node from its parent.

        The node remains a valid standalone node. Returns the slot it was
        removed from, or ``None`` if it was not attached.
        """
        if self._parent is None:
            self._adopt(None)
            return None
        return self._parent.remove_child(self)

    def _check_kind(self, child: Node, expected: Optional[str]) -> None:
        if child.kind != expected:
            raise StructuralError(f"Expected a '{expected}' node, got '{child.kind}'")

    @staticmethod
    def _require_key(slot: Slot) -> None:
        if slot.key is None:
            raise StructuralError("A key is required to insert into a keyed collection")

    @staticmethod
    def _drop_existing(existing: Optional[Node]) -> None:
        if existing is not None:
            existing._release()

    def _release(self) -> None:
        self._parent = None
        self._parent_property = None
        self._adopt(None)

    def _adopt(self, owner: Optional[Document]) -> None:
        self._owner = owner
        for child in self.child_nodes():
            child._adopt(owner)

    # ------------------------------------------------------------------
    # Validation problems
    # ------------------------------------------------------------------

    @property
    def validation_problems(self) -> list[ValidationProblem]:
        return list(self._validation_problems)

    def add_validation_problem(self, problem: ValidationProblem) -> None:
        self._validation_problems.append(problem)

    def clear_validation_problems(self) -> None:
        self._validation_problems.clear()


class Document(Node):
    """The root node of a parsed API description.

    A document owns every node created through it. Its ``kind`` is always
    ``"document"``.
    """

    def __init__(self, document_type: DocumentType) -> None:
        super().__init__("document", document_type)
        self._owner = self

    def create_node(self, kind: str) -> Node:
        """Create a detached node of *kind* for this document's type.

        Raises:
            UnsupportedNodeKind: If *kind* is not in the catalog.
        """
        return Node(kind, self._document_type)

    def _adopt(self, owner: Optional[Document]) -> None:
        super()._adopt(self)

    def all_nodes(self) -> Iterator[Node]:
        """Yield every node of the tree in depth-first pre-order."""
        stack: list[Node] = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(list(node.child_nodes())))

    def validation_problem_codes(self) -> list[str]:
        """Return the error codes of all problems attached to nodes, in tree order."""
        return [p.error_code for node in self.all_nodes() for p in node.validation_problems]

    def clear_all_validation_problems(self) -> None:
        for node in self.all_nodes():
            node.clear_validation_problems()


def _insert_key(mapping: dict[str, Node], key: str, value: Node, position: Optional[int]) -> None:
    """Insert *key* into *mapping*, optionally at a given insertion-order position."""
    mapping.pop(key, None)
    if position is None or position >= len(mapping):
        mapping[key] = value
        return
    items = list(mapping.items())
    items.insert(position, (key, value))
    mapping.clear()
    mapping.update(items)


def _identity_index(items: list[Node], target: Node) -> int:
    for i, item in enumerate(items):
        if item is target:
            return i
    raise StructuralError(f"{target!r} is not in its parent's sequence")


def copy_value(value: Any) -> Any:
    """Deep-copy a raw JSON value so the tree never aliases caller data."""
    return copy.deepcopy(value)
