"""The generic document model -- nodes, paths, dispatch, reading and writing.

Sub-modules:

* :mod:`~specmodel.core.types` -- dialects and document types.
* :mod:`~specmodel.core.catalog` -- node kinds and fields per document type.
* :mod:`~specmodel.core.node` -- :class:`Node` and :class:`Document`.
* :mod:`~specmodel.core.paths` -- :class:`NodePath` encoding and resolution.
* :mod:`~specmodel.core.visitor` -- ``(kind, dialect, version)`` dispatch.
* :mod:`~specmodel.core.reader` / :mod:`~specmodel.core.writer` -- generic
  value to tree and back.
* :mod:`~specmodel.core.references` -- local ``$ref`` resolution.
* :mod:`~specmodel.core.factories` -- new documents and example-based schemas.
"""

from specmodel.core.node import Document, Node, Slot
from specmodel.core.paths import NodePath, path_of, resolve
from specmodel.core.types import Dialect, DocumentType
from specmodel.core.visitor import Visitor, dispatch, handles, traverse, traverse_up

__all__ = [
    "Dialect",
    "Document",
    "DocumentType",
    "Node",
    "NodePath",
    "Slot",
    "Visitor",
    "dispatch",
    "handles",
    "path_of",
    "resolve",
    "traverse",
    "traverse_up",
]
