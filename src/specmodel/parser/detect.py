"""Infer the document type of a generic value from its version marker.

The marker field and its value decide the dialect and major version:

* ``swagger: "2.0"`` -- OpenAPI 2
* ``openapi: "3.x.y"`` -- OpenAPI 3
* ``asyncapi: "2.x.y"`` -- AsyncAPI 2

Only the major version is inspected here. A marker that names a supported
major version but an unknown minor/patch release (``"3.0.9"``) is still
detected -- rejecting it is the job of the validation rules, which report it
as a problem instead of failing the read.
"""

from __future__ import annotations

from typing import Any

from specmodel.core.types import DocumentType
from specmodel.exceptions import UnrecognizedDocumentType


def detect_document_type(value: Any) -> DocumentType:
    """Return the :class:`~specmodel.core.types.DocumentType` declared by *value*.

    Args:
        value: A generic mapping as produced by
            :func:`~specmodel.parser.loader.parse_content`.

    Raises:
        UnrecognizedDocumentType: If *value* is not a mapping or carries no
            supported version marker.
    """
    if not isinstance(value, dict):
        raise UnrecognizedDocumentType(
            f"Expected a mapping at the document root (got {type(value).__name__})"
        )

    if "swagger" in value:
        version = str(value["swagger"])
        if version == "2.0" or version.startswith("2."):
            return DocumentType.OPENAPI2
        raise UnrecognizedDocumentType(f"Unsupported Swagger version: {version}")

    if "openapi" in value:
        version = str(value["openapi"])
        if version.startswith("3."):
            return DocumentType.OPENAPI3
        raise UnrecognizedDocumentType(f"Unsupported OpenAPI version: {version}")

    if "asyncapi" in value:
        version = str(value["asyncapi"])
        if version.startswith("2."):
            return DocumentType.ASYNCAPI2
        raise UnrecognizedDocumentType(f"Unsupported AsyncAPI version: {version}")

    raise UnrecognizedDocumentType(
        "Missing version marker. Expected one of 'swagger', 'openapi' or 'asyncapi'."
    )
