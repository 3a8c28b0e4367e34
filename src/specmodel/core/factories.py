"""Factories for new documents and for schemas inferred from examples."""

from __future__ import annotations

import json
import re
from typing import Any

from specmodel.core.node import Document, Node
from specmodel.core.types import DocumentType

_DATE_RE = re.compile(r"^(\d{4})\D?(0[1-9]|1[0-2])\D?([12]\d|0[1-9]|3[01])$")
_DATE_TIME_RE = re.compile(
    r"^(\d{4})\D?(0[1-9]|1[0-2])\D?([12]\d|0[1-9]|3[01])"
    r"(\D?([01]\d|2[0-3])\D?([0-5]\d)\D?([0-5]\d)?\D?(\d{3})?([zZ]|([\+-])([01]\d|2[0-3])\D?([0-5]\d)?)?)?$"
)

_INT32_MAX = 2147483647
_INT64_MAX = 9223372036854775807

_DEFAULT_VERSIONS = {
    DocumentType.OPENAPI2: "2.0",
    DocumentType.OPENAPI3: "3.0.3",
    DocumentType.ASYNCAPI2: "2.6.0",
}


def create_document(document_type: DocumentType) -> Document:
    """Create an empty document of *document_type* with its version marker set."""
    document = Document(document_type)
    document.set_property(document_type.version_marker, _DEFAULT_VERSIONS[document_type])
    return document


def create_schema_definition_from_example(document: Document, name: str, example: Any) -> Node:
    """Create a named schema definition describing *example*.

    The example is analysed recursively: numbers become ``integer`` (with an
    ``int32``/``int64`` format) or ``number``/``double``, strings that look
    like dates get a ``date`` or ``date-time`` format, arrays take their item
    schema from the first element and objects get one property schema per
    key. The result is a starting point for a schema, not a canonical one.

    The definition is stored under ``definitions`` for OpenAPI 2 and under
    ``components.schemas`` otherwise; the components node is created when
    missing. A string *example* is parsed as JSON first.
    """
    if document.document_type is DocumentType.OPENAPI2:
        schema = document.create_child("definitions", name)
    else:
        components = document.get_property("components")
        if components is None:
            components = document.create_child("components")
        schema = components.create_child("schemas", name)

    if isinstance(example, str):
        example = json.loads(example)

    _resolve_all(example, schema)
    schema.set_property("title", f"Root Type for {name}")
    schema.set_property("description", f"The root of the {name} type's schema.")
    return schema


def _resolve_type(thing: Any, schema: Node) -> None:
    if isinstance(thing, bool):
        schema.set_property("type", "boolean")
    elif isinstance(thing, int):
        schema.set_property("type", "integer")
        if -_INT32_MAX <= thing <= _INT32_MAX:
            schema.set_property("format", "int32")
        elif -_INT64_MAX <= thing <= _INT64_MAX:
            schema.set_property("format", "int64")
    elif isinstance(thing, float):
        schema.set_property("type", "number")
        schema.set_property("format", "double")
    elif isinstance(thing, list):
        schema.set_property("type", "array")
    elif isinstance(thing, dict):
        schema.set_property("type", "object")
    elif isinstance(thing, str):
        schema.set_property("type", "string")
        if _DATE_RE.match(thing):
            schema.set_property("format", "date")
        elif _DATE_TIME_RE.match(thing):
            schema.set_property("format", "date-time")
    elif thing is None:
        schema.set_property("type", "string")


def _resolve_all(thing: Any, schema: Node) -> None:
    _resolve_type(thing, schema)
    if isinstance(thing, list):
        items = schema.create_child("items")
        if thing:
            _resolve_all(thing[0], items)
    elif isinstance(thing, dict):
        schema.ensure_collection("properties")
        for prop_name, prop_value in thing.items():
            _resolve_all(prop_value, schema.create_child("properties", prop_name))
