"""Dialect and document-type identities.

A :class:`DocumentType` pins down the specification family (its
:class:`Dialect`) and the major version of that family. Every node in a
document inherits its document type from the owning
:class:`~specmodel.core.node.Document`, and dispatch tables are keyed by
``(kind, dialect, major_version)``.
"""

from __future__ import annotations

import enum


class Dialect(str, enum.Enum):
    """Specification families understood by the data model."""

    OPENAPI = "openapi"
    ASYNCAPI = "asyncapi"


class DocumentType(str, enum.Enum):
    """A ``(dialect, major_version)`` pair with a stable string value."""

    OPENAPI2 = "openapi2"
    OPENAPI3 = "openapi3"
    ASYNCAPI2 = "asyncapi2"

    @property
    def dialect(self) -> Dialect:
        return _IDENTITY[self][0]

    @property
    def major_version(self) -> int:
        return _IDENTITY[self][1]

    @property
    def version_marker(self) -> str:
        """Name of the root property declaring the version (``swagger``, ``openapi``, ``asyncapi``)."""
        return _MARKERS[self]

    @classmethod
    def of(cls, dialect: Dialect | str, major_version: int) -> DocumentType:
        """Look up the document type for a dialect and major version.

        Raises:
            KeyError: If the pair is not supported.
        """
        dialect = Dialect(dialect)
        for doc_type, identity in _IDENTITY.items():
            if identity == (dialect, major_version):
                return doc_type
        raise KeyError(f"{dialect.value} {major_version}")


_IDENTITY: dict[DocumentType, tuple[Dialect, int]] = {
    DocumentType.OPENAPI2: (Dialect.OPENAPI, 2),
    DocumentType.OPENAPI3: (Dialect.OPENAPI, 3),
    DocumentType.ASYNCAPI2: (Dialect.ASYNCAPI, 2),
}

_MARKERS: dict[DocumentType, str] = {
    DocumentType.OPENAPI2: "swagger",
    DocumentType.OPENAPI3: "openapi",
    DocumentType.ASYNCAPI2: "asyncapi",
}
