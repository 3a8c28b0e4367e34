"""Node-kind and field catalog for every supported document type.

The catalog is pure data. For each :class:`~specmodel.core.types.DocumentType`
it lists the node kinds that may appear in a document and, for each kind, the
fields it recognises together with their *shape*:

* :attr:`FieldShape.VALUE` -- a raw JSON value (string, number, boolean, or an
  uninterpreted list/mapping such as ``enum`` or ``example``).
* :attr:`FieldShape.NODE` -- a single child node of the given kind.
* :attr:`FieldShape.NODE_LIST` -- an ordered sequence of child nodes.
* :attr:`FieldShape.NODE_MAP` -- a keyed, insertion-ordered mapping of child nodes.

Some kinds (``paths``, ``responses``, ``channels``, ``callback``) are keyed
containers themselves; their ``entry_kind`` names the kind of every non
extension key.

Anything the catalog does not recognise is kept in the node's extension bag.
Adding a dialect or version means adding a table here, not new node classes.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional

from specmodel.core.types import DocumentType
from specmodel.exceptions import UnsupportedNodeKind


class FieldShape(str, enum.Enum):
    """How a field's value is stored on a node."""

    VALUE = "value"
    NODE = "node"
    NODE_LIST = "node_list"
    NODE_MAP = "node_map"


@dataclass(frozen=True)
class FieldSpec:
    """One recognised field of a node kind."""

    name: str
    shape: FieldShape = FieldShape.VALUE
    kind: Optional[str] = None

    @property
    def is_node(self) -> bool:
        return self.shape is not FieldShape.VALUE


@dataclass(frozen=True)
class KindSpec:
    """The recognised fields of one node kind, in canonical traversal order."""

    name: str
    fields: tuple[FieldSpec, ...] = ()
    entry_kind: Optional[str] = None
    _index: dict[str, FieldSpec] = field(default_factory=dict, compare=False, repr=False)

    def __post_init__(self) -> None:
        self._index.update({f.name: f for f in self.fields})

    def get_field(self, name: str) -> Optional[FieldSpec]:
        return self._index.get(name)

    @property
    def is_container(self) -> bool:
        return self.entry_kind is not None


@dataclass(frozen=True)
class Catalog:
    """All node kinds known for one document type."""

    document_type: DocumentType
    kinds: dict[str, KindSpec]

    def kind(self, name: str) -> KindSpec:
        """Return the spec for *name*.

        Raises:
            UnsupportedNodeKind: If the kind is not defined for this document type.
        """
        try:
            return self.kinds[name]
        except KeyError:
            raise UnsupportedNodeKind(
                f"Node kind '{name}' is not supported for {self.document_type.value}"
            ) from None

    def has_kind(self, name: str) -> bool:
        return name in self.kinds


# --- field helpers ---


def _values(*names: str) -> tuple[FieldSpec, ...]:
    return tuple(FieldSpec(n) for n in names)


def _node(name: str, kind: str) -> FieldSpec:
    return FieldSpec(name, FieldShape.NODE, kind)


def _list(name: str, kind: str) -> FieldSpec:
    return FieldSpec(name, FieldShape.NODE_LIST, kind)


def _map(name: str, kind: str) -> FieldSpec:
    return FieldSpec(name, FieldShape.NODE_MAP, kind)


def _kinds(*specs: KindSpec) -> dict[str, KindSpec]:
    return {s.name: s for s in specs}


def _definition(name: str, base: KindSpec) -> KindSpec:
    """Reusable component definitions share the fields of their inline counterpart."""
    return KindSpec(name, base.fields, base.entry_kind)


# --- shared kinds ---

_INFO = KindSpec(
    "info",
    _values("title", "description", "termsOfService")
    + (_node("contact", "contact"), _node("license", "license"))
    + _values("version"),
)
_CONTACT = KindSpec("contact", _values("name", "url", "email"))
_LICENSE = KindSpec("license", _values("name", "url"))
_EXTERNAL_DOCS = KindSpec("external_documentation", _values("description", "url"))
_TAG = KindSpec(
    "tag",
    _values("name", "description") + (_node("externalDocs", "external_documentation"),),
)
_SERVER_VARIABLE = KindSpec("server_variable", _values("enum", "default", "description"))

_JSON_SCHEMA_VALUES = _values(
    "$ref",
    "title",
    "description",
    "type",
    "format",
    "multipleOf",
    "maximum",
    "exclusiveMaximum",
    "minimum",
    "exclusiveMinimum",
    "maxLength",
    "minLength",
    "pattern",
    "maxItems",
    "minItems",
    "uniqueItems",
    "maxProperties",
    "minProperties",
    "required",
    "enum",
    "default",
    "example",
    "readOnly",
    "discriminator",
    "xml",
    "additionalProperties",
)


# --- OpenAPI 3.x ---

_OAS3_SCHEMA = KindSpec(
    "schema",
    _JSON_SCHEMA_VALUES
    + _values("nullable", "writeOnly", "deprecated")
    + (
        _node("externalDocs", "external_documentation"),
        _list("allOf", "schema"),
        _list("anyOf", "schema"),
        _list("oneOf", "schema"),
        _node("not", "schema"),
        _node("items", "schema"),
        _map("properties", "schema"),
    ),
)
_OAS3_SERVER = KindSpec(
    "server",
    _values("url", "description") + (_map("variables", "server_variable"),),
)
_OAS3_EXAMPLE = KindSpec("example", _values("$ref", "summary", "description", "value", "externalValue"))
_OAS3_MEDIA_TYPE = KindSpec(
    "media_type",
    (_node("schema", "schema"),)
    + _values("example")
    + (_map("examples", "example"),)
    + _values("encoding"),
)
_OAS3_PARAMETER = KindSpec(
    "parameter",
    _values(
        "$ref",
        "name",
        "in",
        "description",
        "required",
        "deprecated",
        "allowEmptyValue",
        "style",
        "explode",
        "allowReserved",
    )
    + (_node("schema", "schema"),)
    + _values("example")
    + (_map("examples", "example"), _map("content", "media_type")),
)
_OAS3_HEADER = KindSpec(
    "header",
    _values("$ref", "description", "required", "deprecated", "allowEmptyValue", "style", "explode")
    + (_node("schema", "schema"),)
    + _values("example")
    + (_map("examples", "example"), _map("content", "media_type")),
)
_OAS3_REQUEST_BODY = KindSpec(
    "request_body",
    _values("$ref", "description") + (_map("content", "media_type"),) + _values("required"),
)
_OAS3_LINK = KindSpec(
    "link",
    _values("$ref", "operationRef", "operationId", "parameters", "requestBody", "description")
    + (_node("server", "server"),),
)
_OAS3_RESPONSE = KindSpec(
    "response",
    _values("$ref", "description")
    + (_map("headers", "header"), _map("content", "media_type"), _map("links", "link")),
)
_OAS3_RESPONSES = KindSpec("responses", (), entry_kind="response")
_OAS3_CALLBACK = KindSpec("callback", _values("$ref"), entry_kind="path_item")
_OAS3_OPERATION = KindSpec(
    "operation",
    _values("tags", "summary", "description")
    + (_node("externalDocs", "external_documentation"),)
    + _values("operationId")
    + (
        _list("parameters", "parameter"),
        _node("requestBody", "request_body"),
        _node("responses", "responses"),
        _map("callbacks", "callback"),
    )
    + _values("deprecated", "security")
    + (_list("servers", "server"),),
)
_OAS3_PATH_ITEM = KindSpec(
    "path_item",
    _values("$ref", "summary", "description")
    + tuple(
        _node(method, "operation")
        for method in ("get", "put", "post", "delete", "options", "head", "patch", "trace")
    )
    + (_list("servers", "server"), _list("parameters", "parameter")),
)
_OAS3_PATHS = KindSpec("paths", (), entry_kind="path_item")
_OAS3_SECURITY_SCHEME = KindSpec(
    "security_scheme",
    _values(
        "$ref", "type", "description", "name", "in", "scheme", "bearerFormat", "flows", "openIdConnectUrl"
    ),
)
_OAS3_COMPONENTS = KindSpec(
    "components",
    (
        _map("schemas", "schema_definition"),
        _map("responses", "response_definition"),
        _map("parameters", "parameter_definition"),
        _map("examples", "example_definition"),
        _map("requestBodies", "request_body_definition"),
        _map("headers", "header_definition"),
        _map("securitySchemes", "security_scheme"),
        _map("links", "link_definition"),
        _map("callbacks", "callback_definition"),
    ),
)
_OAS3_DOCUMENT = KindSpec(
    "document",
    _values("openapi")
    + (
        _node("info", "info"),
        _list("servers", "server"),
        _node("paths", "paths"),
        _node("components", "components"),
    )
    + _values("security")
    + (_list("tags", "tag"), _node("externalDocs", "external_documentation")),
)

_OPENAPI3 = Catalog(
    DocumentType.OPENAPI3,
    _kinds(
        _OAS3_DOCUMENT,
        _INFO,
        _CONTACT,
        _LICENSE,
        _TAG,
        _EXTERNAL_DOCS,
        _OAS3_SERVER,
        _SERVER_VARIABLE,
        _OAS3_PATHS,
        _OAS3_PATH_ITEM,
        _OAS3_OPERATION,
        _OAS3_PARAMETER,
        _OAS3_REQUEST_BODY,
        _OAS3_MEDIA_TYPE,
        _OAS3_EXAMPLE,
        _OAS3_RESPONSES,
        _OAS3_RESPONSE,
        _OAS3_HEADER,
        _OAS3_LINK,
        _OAS3_CALLBACK,
        _OAS3_SCHEMA,
        _OAS3_COMPONENTS,
        _OAS3_SECURITY_SCHEME,
        _definition("schema_definition", _OAS3_SCHEMA),
        _definition("response_definition", _OAS3_RESPONSE),
        _definition("parameter_definition", _OAS3_PARAMETER),
        _definition("example_definition", _OAS3_EXAMPLE),
        _definition("request_body_definition", _OAS3_REQUEST_BODY),
        _definition("header_definition", _OAS3_HEADER),
        _definition("link_definition", _OAS3_LINK),
        _definition("callback_definition", _OAS3_CALLBACK),
    ),
)


# --- OpenAPI 2.0 ---

_OAS2_SCHEMA = KindSpec(
    "schema",
    _JSON_SCHEMA_VALUES
    + (
        _node("externalDocs", "external_documentation"),
        _list("allOf", "schema"),
        _node("items", "schema"),
        _map("properties", "schema"),
    ),
)
_OAS2_ITEMS_VALUES = _values(
    "type",
    "format",
    "items",
    "collectionFormat",
    "default",
    "maximum",
    "exclusiveMaximum",
    "minimum",
    "exclusiveMinimum",
    "maxLength",
    "minLength",
    "pattern",
    "maxItems",
    "minItems",
    "uniqueItems",
    "enum",
    "multipleOf",
)
_OAS2_PARAMETER = KindSpec(
    "parameter",
    _values("$ref", "name", "in", "description", "required")
    + (_node("schema", "schema"),)
    + _values("allowEmptyValue")
    + _OAS2_ITEMS_VALUES,
)
_OAS2_HEADER = KindSpec("header", _values("description") + _OAS2_ITEMS_VALUES)
_OAS2_RESPONSE = KindSpec(
    "response",
    _values("$ref", "description")
    + (_node("schema", "schema"), _map("headers", "header"))
    + _values("examples"),
)
_OAS2_RESPONSES = KindSpec("responses", (), entry_kind="response")
_OAS2_OPERATION = KindSpec(
    "operation",
    _values("tags", "summary", "description")
    + (_node("externalDocs", "external_documentation"),)
    + _values("operationId", "consumes", "produces")
    + (_list("parameters", "parameter"), _node("responses", "responses"))
    + _values("schemes", "deprecated", "security"),
)
_OAS2_PATH_ITEM = KindSpec(
    "path_item",
    _values("$ref")
    + tuple(
        _node(method, "operation")
        for method in ("get", "put", "post", "delete", "options", "head", "patch")
    )
    + (_list("parameters", "parameter"),),
)
_OAS2_PATHS = KindSpec("paths", (), entry_kind="path_item")
_OAS2_SECURITY_SCHEME = KindSpec(
    "security_scheme",
    _values("type", "description", "name", "in", "flow", "authorizationUrl", "tokenUrl", "scopes"),
)
_OAS2_DOCUMENT = KindSpec(
    "document",
    _values("swagger")
    + (_node("info", "info"),)
    + _values("host", "basePath", "schemes", "consumes", "produces")
    + (
        _node("paths", "paths"),
        _map("definitions", "schema_definition"),
        _map("parameters", "parameter_definition"),
        _map("responses", "response_definition"),
        _map("securityDefinitions", "security_scheme"),
    )
    + _values("security")
    + (_list("tags", "tag"), _node("externalDocs", "external_documentation")),
)

_OPENAPI2 = Catalog(
    DocumentType.OPENAPI2,
    _kinds(
        _OAS2_DOCUMENT,
        _INFO,
        _CONTACT,
        _LICENSE,
        _TAG,
        _EXTERNAL_DOCS,
        _OAS2_PATHS,
        _OAS2_PATH_ITEM,
        _OAS2_OPERATION,
        _OAS2_PARAMETER,
        _OAS2_RESPONSES,
        _OAS2_RESPONSE,
        _OAS2_HEADER,
        _OAS2_SCHEMA,
        _OAS2_SECURITY_SCHEME,
        _definition("schema_definition", _OAS2_SCHEMA),
        _definition("parameter_definition", _OAS2_PARAMETER),
        _definition("response_definition", _OAS2_RESPONSE),
    ),
)


# --- AsyncAPI 2.x ---

_AAI2_SCHEMA = KindSpec(
    "schema",
    _JSON_SCHEMA_VALUES
    + _values("const", "writeOnly", "deprecated")
    + (
        _node("externalDocs", "external_documentation"),
        _list("allOf", "schema"),
        _list("anyOf", "schema"),
        _list("oneOf", "schema"),
        _node("not", "schema"),
        _node("items", "schema"),
        _map("properties", "schema"),
    ),
)
_AAI2_SERVER = KindSpec(
    "server",
    _values("url", "protocol", "protocolVersion", "description")
    + (_map("variables", "server_variable"),)
    + _values("security", "bindings"),
)
_AAI2_PARAMETER = KindSpec(
    "parameter",
    _values("$ref", "description") + (_node("schema", "schema"),) + _values("location"),
)
_AAI2_MESSAGE = KindSpec(
    "message",
    _values("$ref")
    + (_node("headers", "schema"), _node("payload", "schema"))
    + _values("correlationId", "schemaFormat", "contentType", "name", "title", "summary", "description")
    + (_list("tags", "tag"), _node("externalDocs", "external_documentation"))
    + _values("bindings", "examples", "traits"),
)
_AAI2_OPERATION = KindSpec(
    "operation",
    _values("operationId", "summary", "description")
    + (_list("tags", "tag"), _node("externalDocs", "external_documentation"))
    + _values("bindings", "traits")
    + (_node("message", "message"),),
)
_AAI2_CHANNEL_ITEM = KindSpec(
    "channel_item",
    _values("$ref", "description", "servers")
    + (
        _node("subscribe", "operation"),
        _node("publish", "operation"),
        _map("parameters", "parameter"),
    )
    + _values("bindings"),
)
_AAI2_CHANNELS = KindSpec("channels", (), entry_kind="channel_item")
_AAI2_SECURITY_SCHEME = KindSpec(
    "security_scheme",
    _values("$ref", "type", "description", "name", "in", "scheme", "bearerFormat", "flows", "openIdConnectUrl"),
)
_AAI2_COMPONENTS = KindSpec(
    "components",
    (
        _map("schemas", "schema_definition"),
        _map("messages", "message_definition"),
        _map("securitySchemes", "security_scheme"),
        _map("parameters", "parameter_definition"),
    )
    + _values(
        "correlationIds",
        "operationTraits",
        "messageTraits",
        "serverBindings",
        "channelBindings",
        "operationBindings",
        "messageBindings",
    ),
)
_AAI2_DOCUMENT = KindSpec(
    "document",
    _values("asyncapi", "id")
    + (_node("info", "info"), _map("servers", "server"))
    + _values("defaultContentType")
    + (
        _node("channels", "channels"),
        _node("components", "components"),
        _list("tags", "tag"),
        _node("externalDocs", "external_documentation"),
    ),
)

_ASYNCAPI2 = Catalog(
    DocumentType.ASYNCAPI2,
    _kinds(
        _AAI2_DOCUMENT,
        _INFO,
        _CONTACT,
        _LICENSE,
        _TAG,
        _EXTERNAL_DOCS,
        _AAI2_SERVER,
        _SERVER_VARIABLE,
        _AAI2_CHANNELS,
        _AAI2_CHANNEL_ITEM,
        _AAI2_OPERATION,
        _AAI2_MESSAGE,
        _AAI2_PARAMETER,
        _AAI2_SCHEMA,
        _AAI2_COMPONENTS,
        _AAI2_SECURITY_SCHEME,
        _definition("schema_definition", _AAI2_SCHEMA),
        _definition("message_definition", _AAI2_MESSAGE),
        _definition("parameter_definition", _AAI2_PARAMETER),
    ),
)

_CATALOGS: dict[DocumentType, Catalog] = {
    DocumentType.OPENAPI2: _OPENAPI2,
    DocumentType.OPENAPI3: _OPENAPI3,
    DocumentType.ASYNCAPI2: _ASYNCAPI2,
}


def get_catalog(document_type: DocumentType) -> Catalog:
    """Return the catalog for *document_type*."""
    return _CATALOGS[document_type]
