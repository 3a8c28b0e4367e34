"""Node path addressing -- a portable string for a node's position in a document.

A path is a sequence of segments, each of which is exactly one of:

* a **property** name, written bare after a slash: ``/info``;
* a sequence **index**, written in brackets: ``[0]``;
* a collection **key**, written single-quoted in brackets: ``['NotFoundError']``
  (backslash escapes ``\\'`` and ``\\\\``).

The root of a document is ``/``. Some examples::

    /info/contact
    /components/responses['NotFoundError']
    /paths['/pets/{id}']/get/parameters[0]/schema

Index segments are positional: reordering a sequence changes the paths of its
elements. Keys and property names are stable across clone and re-attach of
the same logical position.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Any, Union

from specmodel.core.node import Document, Node
from specmodel.exceptions import InvalidNodePath, InvalidState, NodeNotFound

_PROPERTY_RE = re.compile(r"[A-Za-z_$][A-Za-z0-9_$\-]*")
_INDEX_RE = re.compile(r"\[(\d+)\]")


class SegmentType(str, enum.Enum):
    PROPERTY = "property"
    INDEX = "index"
    KEY = "key"


@dataclass(frozen=True)
class PathSegment:
    """One step of a :class:`NodePath`."""

    type: SegmentType
    value: Union[str, int]

    def __str__(self) -> str:
        if self.type is SegmentType.PROPERTY:
            return f"/{self.value}"
        if self.type is SegmentType.INDEX:
            return f"[{self.value}]"
        escaped = str(self.value).replace("\\", "\\\\").replace("'", "\\'")
        return f"['{escaped}']"


@dataclass(frozen=True)
class NodePath:
    """An immutable, hashable node address.

    Build paths with :meth:`parse` or the ``append_*`` helpers; the string
    form is produced by ``str(path)``.
    """

    segments: tuple[PathSegment, ...] = ()

    def __str__(self) -> str:
        if not self.segments:
            return "/"
        text = "".join(str(s) for s in self.segments)
        return text if text.startswith("/") else "/" + text

    def __len__(self) -> int:
        return len(self.segments)

    @property
    def is_root(self) -> bool:
        return not self.segments

    @property
    def last_segment(self) -> PathSegment | None:
        return self.segments[-1] if self.segments else None

    def parent(self) -> NodePath:
        """Return the path with the last segment removed."""
        return NodePath(self.segments[:-1])

    def append_property(self, name: str) -> NodePath:
        if not _PROPERTY_RE.fullmatch(name):
            raise InvalidNodePath(f"Invalid property name in node path: {name!r}")
        return NodePath(self.segments + (PathSegment(SegmentType.PROPERTY, name),))

    def append_index(self, index: int) -> NodePath:
        if index < 0:
            raise InvalidNodePath(f"Negative index in node path: {index}")
        return NodePath(self.segments + (PathSegment(SegmentType.INDEX, index),))

    def append_key(self, key: str) -> NodePath:
        return NodePath(self.segments + (PathSegment(SegmentType.KEY, key),))

    @classmethod
    def parse(cls, text: str) -> NodePath:
        """Parse the string form of a node path.

        Raises:
            InvalidNodePath: If *text* is not a well-formed path.
        """
        if not text or not text.startswith("/"):
            raise InvalidNodePath(f"Node path must start with '/': {text!r}")
        if text == "/":
            return cls()

        segments: list[PathSegment] = []
        pos = 0
        while pos < len(text):
            char = text[pos]
            if char == "/":
                match = _PROPERTY_RE.match(text, pos + 1)
                if match is None:
                    raise InvalidNodePath(f"Expected a property name at offset {pos + 1} in {text!r}")
                segments.append(PathSegment(SegmentType.PROPERTY, match.group()))
                pos = match.end()
            elif text.startswith("['", pos):
                key, pos = _parse_key(text, pos + 2)
                segments.append(PathSegment(SegmentType.KEY, key))
            elif char == "[":
                match = _INDEX_RE.match(text, pos)
                if match is None:
                    raise InvalidNodePath(f"Malformed index at offset {pos} in {text!r}")
                segments.append(PathSegment(SegmentType.INDEX, int(match.group(1))))
                pos = match.end()
            else:
                raise InvalidNodePath(f"Unexpected character {char!r} at offset {pos} in {text!r}")
        return cls(tuple(segments))


def _parse_key(text: str, pos: int) -> tuple[str, int]:
    """Read a quoted key starting after ``['``; return the key and the offset after ``']``."""
    chars: list[str] = []
    while pos < len(text):
        char = text[pos]
        if char == "\\":
            if pos + 1 >= len(text):
                break
            chars.append(text[pos + 1])
            pos += 2
        elif char == "'":
            if not text.startswith("']", pos):
                raise InvalidNodePath(f"Expected \"']\" at offset {pos} in {text!r}")
            return "".join(chars), pos + 2
        else:
            chars.append(char)
            pos += 1
    raise InvalidNodePath(f"Unterminated key in node path {text!r}")


def path_of(node: Node) -> NodePath:
    """Compute the path of *node* from its document root.

    Raises:
        InvalidState: If the node is detached or its ancestors do not end in
            the document that owns it.
    """
    segments: list[PathSegment] = []
    current = node
    while current.parent is not None:
        slot = current.parent.slot_of(current)
        if slot.property_name is None:
            segments.append(PathSegment(SegmentType.KEY, slot.key))
        else:
            if slot.key is not None:
                segments.append(PathSegment(SegmentType.KEY, slot.key))
            elif slot.index is not None:
                segments.append(PathSegment(SegmentType.INDEX, slot.index))
            segments.append(PathSegment(SegmentType.PROPERTY, slot.property_name))
        current = current.parent
    if not isinstance(current, Document) or current.owner_document is not current:
        raise InvalidState(f"{node!r} is not rooted in a document")
    return NodePath(tuple(reversed(segments)))


def resolve(path: NodePath | str, document: Document) -> Node:
    """Return the node at *path* in *document*.

    Raises:
        InvalidNodePath: If *path* is a malformed string.
        NodeNotFound: If nothing exists at that path.
    """
    if isinstance(path, str):
        path = NodePath.parse(path)

    current: Any = document
    for segment in path.segments:
        current = _step(current, segment)
        if current is None:
            raise NodeNotFound(f"No node at {path} (failed at segment '{segment}')")
    if not isinstance(current, Node):
        raise NodeNotFound(f"No node at {path}: it addresses a collection, not a node")
    return current


def _step(current: Any, segment: PathSegment) -> Any:
    if segment.type is SegmentType.PROPERTY:
        if not isinstance(current, Node):
            return None
        field = current.spec.get_field(str(segment.value))
        if field is None or not field.is_node:
            return None
        return current.get_property(str(segment.value))
    if segment.type is SegmentType.INDEX:
        if not isinstance(current, list) or segment.value >= len(current):
            return None
        return current[segment.value]
    if isinstance(current, dict):
        return current.get(segment.value)
    if isinstance(current, Node) and current.spec.is_container:
        return current.get_entry(str(segment.value))
    return None
