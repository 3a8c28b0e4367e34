"""Visitor dispatch keyed by ``(kind, dialect, major_version)``.

Visitors declare their fine-grained operations with the :func:`handles`
decorator instead of subclassing one walker per dialect and version::

    class TitleCollector(Visitor):
        def __init__(self) -> None:
            self.titles: list[str] = []

        @handles("info")
        def visit_info(self, node: Node) -> None:
            self.titles.append(node.get_property("title"))

        @handles("schema", dialect="openapi", versions=[2])
        def visit_swagger_schema(self, node: Node) -> None:
            ...

At class creation the decorated methods are collected into a lookup table.
For each node, :func:`dispatch` resolves the most specific handler --
exact triple, then ``(kind, dialect, *)``, then ``(kind, *, *)`` -- and
falls back to :meth:`Visitor.visit_node`. A new dialect or version becomes
a table entry, not a new visitor class.

:class:`Traverser` walks a tree depth-first in pre-order, so ancestors are
always visited before their descendants.
"""

from __future__ import annotations

from typing import Any, Callable, ClassVar, Iterable, Optional

from specmodel.core.catalog import get_catalog
from specmodel.core.node import Node
from specmodel.core.types import Dialect, DocumentType
from specmodel.exceptions import UnsupportedOperation

HandlerKey = tuple[str, Optional[Dialect], Optional[int]]


def handles(
    kind: str,
    dialect: Dialect | str | None = None,
    versions: Optional[Iterable[int]] = None,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Register the decorated method as the handler for a node kind.

    Args:
        kind: Node kind, e.g. ``"response_definition"``.
        dialect: Restrict the handler to one dialect (``None`` for all).
        versions: Restrict the handler to these major versions of *dialect*
            (``None`` for all).
    """
    if versions is not None and dialect is None:
        raise ValueError("versions can only be given together with a dialect")
    resolved = Dialect(dialect) if dialect is not None else None

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        keys: list[HandlerKey] = list(getattr(func, "_handles", ()))
        for version in versions if versions is not None else (None,):
            keys.append((kind, resolved, version))
        func._handles = keys  # type: ignore[attr-defined]
        return func

    return decorator


class Visitor:
    """Base class for every read, write, and validation operation over nodes.

    Attributes:
        accepts: Document types this visitor supports, or ``None`` for all.
    """

    accepts: ClassVar[Optional[frozenset[DocumentType]]] = None
    _handlers: ClassVar[dict[HandlerKey, str]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        table = dict(cls._handlers)
        for name, attr in vars(cls).items():
            for key in getattr(attr, "_handles", ()):
                table[key] = name
        cls._handlers = table

    def supports(self, document_type: DocumentType) -> bool:
        return self.accepts is None or document_type in self.accepts

    def handler_for(self, kind: str, document_type: DocumentType) -> Callable[[Node], Any]:
        """Resolve the bound method for a node of *kind* in *document_type*."""
        dialect = document_type.dialect
        for key in (
            (kind, dialect, document_type.major_version),
            (kind, dialect, None),
            (kind, None, None),
        ):
            name = self._handlers.get(key)
            if name is not None:
                return getattr(self, name)
        return self.visit_node

    def visit_node(self, node: Node) -> Any:
        """Fallback for kinds without a dedicated handler. Does nothing by default."""
        return None


def dispatch(node: Node, visitor: Visitor) -> Any:
    """Route *node* to the matching operation on *visitor*.

    Raises:
        UnsupportedNodeKind: If the node's kind is not in the catalog for its
            document type.
        UnsupportedOperation: If the visitor does not accept the node's
            document type.
    """
    document_type = node.document_type
    get_catalog(document_type).kind(node.kind)
    if not visitor.supports(document_type):
        raise UnsupportedOperation(
            f"{type(visitor).__name__} does not support {document_type.value} documents"
        )
    return visitor.handler_for(node.kind, document_type)(node)


class Traverser:
    """Depth-first, pre-order traversal that dispatches every node to a visitor."""

    def __init__(self, visitor: Visitor) -> None:
        self.visitor = visitor

    def traverse(self, node: Node) -> None:
        dispatch(node, self.visitor)
        for child in node.child_nodes():
            self.traverse(child)


def traverse(node: Node, visitor: Visitor) -> None:
    """Visit *node* and all of its descendants in pre-order."""
    Traverser(visitor).traverse(node)


def traverse_up(node: Node, visitor: Visitor) -> None:
    """Visit *node*, then each of its ancestors up to the root."""
    current: Optional[Node] = node
    while current is not None:
        dispatch(current, visitor)
        current = current.parent
