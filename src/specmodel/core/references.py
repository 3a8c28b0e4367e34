"""Resolve ``$ref`` JSON Reference pointers against a document tree.

Only **internal** references (those starting with ``#/``) are resolved here.
External file or URL references are left to extension validators such as
:class:`~specmodel.validation.extensions.RemoteReferenceValidator`; for them
:func:`resolve_ref` returns ``None``.

A JSON pointer is translated segment by segment into node navigation: a
segment is first tried as a node-valued field, then as a collection key, and
for sequences as an index. RFC 6901 escaping (``~0`` for ``~``, ``~1`` for
``/``) is honoured.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from specmodel.core.catalog import FieldShape
from specmodel.core.node import Document, Node

# RFC 6901 array index: no sign, no leading zeros.
_ARRAY_INDEX_RE = re.compile(r"0|[1-9][0-9]*")


def is_local_ref(ref: str) -> bool:
    return ref == "#" or ref.startswith("#/")


def is_external_ref(ref: str) -> bool:
    """Return True for references that point outside the current document."""
    return not ref.startswith("#")


def resolve_ref(ref: str, document: Document) -> Optional[Node]:
    """Resolve an internal ``$ref`` to the node it points at.

    Args:
        ref: The ``$ref`` string (e.g. ``"#/components/schemas/Pet"``).
        document: The document to resolve against.

    Returns:
        The referenced node, or ``None`` when the reference is external or
        does not lead to a node.

    Example::

        schema = resolve_ref("#/components/schemas/Pet", document)
        assert schema.map_key == "Pet"
    """
    if not is_local_ref(ref):
        return None
    if ref == "#":
        return document

    current: Any = document
    for raw in ref[2:].split("/"):
        segment = raw.replace("~1", "/").replace("~0", "~")
        current = _navigate(current, segment)
        if current is None:
            return None
    return current if isinstance(current, Node) else None


def _navigate(current: Any, segment: str) -> Any:
    if isinstance(current, Node):
        field = current.spec.get_field(segment)
        if field is not None and field.shape is not FieldShape.VALUE:
            return current.get_property(segment)
        if current.spec.is_container:
            return current.get_entry(segment)
        return None
    if isinstance(current, dict):
        return current.get(segment)
    if isinstance(current, list):
        if not _ARRAY_INDEX_RE.fullmatch(segment):
            return None
        index = int(segment)
        return current[index] if index < len(current) else None
    return None


def local_refs(document: Document) -> list[tuple[Node, str]]:
    """Collect every ``(node, $ref)`` pair in *document*, in tree order."""
    found: list[tuple[Node, str]] = []
    for node in document.all_nodes():
        ref = node.get_property("$ref") if node.spec.get_field("$ref") else None
        if isinstance(ref, str):
            found.append((node, ref))
    return found
