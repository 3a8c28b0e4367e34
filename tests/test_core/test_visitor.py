"""Tests for specmodel.core.visitor -- handler resolution and traversal order."""

from __future__ import annotations

import pytest

from specmodel.core.node import Document, Node
from specmodel.core.types import DocumentType
from specmodel.core.visitor import Visitor, dispatch, handles, traverse, traverse_up
from specmodel.exceptions import UnsupportedOperation


class SchemaRecorder(Visitor):
    def __init__(self) -> None:
        self.seen: list[str] = []

    @handles("schema", dialect="openapi", versions=[2])
    def visit_swagger_schema(self, node: Node) -> None:
        self.seen.append("openapi-2")

    @handles("schema", dialect="openapi")
    def visit_openapi_schema(self, node: Node) -> None:
        self.seen.append("openapi")

    @handles("schema")
    def visit_schema(self, node: Node) -> None:
        self.seen.append("any")

    def visit_node(self, node: Node) -> None:
        self.seen.append(f"fallback:{node.kind}")


class NodeCollector(Visitor):
    def __init__(self) -> None:
        self.nodes: list[Node] = []

    def visit_node(self, node: Node) -> None:
        self.nodes.append(node)


def _swagger_schema(document: Document) -> Node:
    return document.get_map("definitions")["Pet"].get_map("properties")["id"]


def _petstore_schema(document: Document) -> Node:
    return document.get_property("components").get_map("schemas")["Pet"].get_map("properties")["id"]


def _streetlights_schema(document: Document) -> Node:
    schemas = document.get_property("components").get_map("schemas")
    return schemas["lightMeasuredPayload"].get_map("properties")["lumens"]


# ---------------------------------------------------------------------------
# Handler resolution
# ---------------------------------------------------------------------------


class TestHandlerResolution:
    def test_exact_version_wins(self, swagger: Document) -> None:
        visitor = SchemaRecorder()
        dispatch(_swagger_schema(swagger), visitor)
        assert visitor.seen == ["openapi-2"]

    def test_dialect_handler_covers_other_versions(self, petstore: Document) -> None:
        visitor = SchemaRecorder()
        dispatch(_petstore_schema(petstore), visitor)
        assert visitor.seen == ["openapi"]

    def test_generic_handler_covers_other_dialects(self, streetlights: Document) -> None:
        visitor = SchemaRecorder()
        dispatch(_streetlights_schema(streetlights), visitor)
        assert visitor.seen == ["any"]

    def test_unhandled_kind_falls_back(self, petstore: Document) -> None:
        visitor = SchemaRecorder()
        dispatch(petstore.get_property("info"), visitor)
        assert visitor.seen == ["fallback:info"]

    def test_default_fallback_does_nothing(self, petstore: Document) -> None:
        assert dispatch(petstore, Visitor()) is None

    def test_dispatch_returns_handler_result(self, petstore: Document) -> None:
        class TitleReader(Visitor):
            @handles("info")
            def visit_info(self, node: Node) -> str:
                return node.get_property("title")

        assert dispatch(petstore.get_property("info"), TitleReader()) == "Swagger Petstore"

    def test_several_versions_register_several_keys(self) -> None:
        class Both(Visitor):
            @handles("operation", dialect="openapi", versions=[2, 3])
            def visit_operation(self, node: Node) -> None:
                pass

        assert ("operation", DocumentType.OPENAPI2.dialect, 2) in Both._handlers
        assert ("operation", DocumentType.OPENAPI3.dialect, 3) in Both._handlers
        visitor = Both()
        assert visitor.handler_for("operation", DocumentType.OPENAPI3) == visitor.visit_operation
        assert visitor.handler_for("operation", DocumentType.ASYNCAPI2) == visitor.visit_node

    def test_stacked_decorators(self, petstore: Document) -> None:
        class Stacked(Visitor):
            def __init__(self) -> None:
                self.kinds: list[str] = []

            @handles("contact")
            @handles("license")
            def visit_party(self, node: Node) -> None:
                self.kinds.append(node.kind)

        visitor = Stacked()
        traverse(petstore.get_property("info"), visitor)
        assert visitor.kinds == ["contact", "license"]

    def test_versions_without_dialect_raises(self) -> None:
        with pytest.raises(ValueError, match="dialect"):
            handles("schema", versions=[3])

    def test_subclass_inherits_and_overrides(self, swagger: Document, petstore: Document) -> None:
        class Narrower(SchemaRecorder):
            @handles("schema", dialect="openapi", versions=[3])
            def visit_oas3_schema(self, node: Node) -> None:
                self.seen.append("openapi-3")

        visitor = Narrower()
        dispatch(_swagger_schema(swagger), visitor)
        dispatch(_petstore_schema(petstore), visitor)
        assert visitor.seen == ["openapi-2", "openapi-3"]
        assert ("schema", DocumentType.OPENAPI3.dialect, 3) not in SchemaRecorder._handlers

    def test_unsupported_document_type_raises(self, petstore: Document) -> None:
        class AsyncOnly(Visitor):
            accepts = frozenset({DocumentType.ASYNCAPI2})

        with pytest.raises(UnsupportedOperation, match="openapi3"):
            dispatch(petstore, AsyncOnly())


# ---------------------------------------------------------------------------
# Traversal
# ---------------------------------------------------------------------------


class TestTraversal:
    def test_traverse_visits_every_node_in_pre_order(self, petstore: Document) -> None:
        collector = NodeCollector()
        traverse(petstore, collector)
        assert collector.nodes == list(petstore.all_nodes())

    def test_parents_before_children(self, streetlights: Document) -> None:
        collector = NodeCollector()
        traverse(streetlights, collector)
        seen: set[int] = set()
        for node in collector.nodes:
            if node.parent is not None:
                assert id(node.parent) in seen
            seen.add(id(node))

    def test_traverse_subtree_only(self, petstore: Document) -> None:
        collector = NodeCollector()
        info = petstore.get_property("info")
        traverse(info, collector)
        assert [n.kind for n in collector.nodes] == ["info", "contact", "license"]

    def test_traverse_up(self, petstore: Document) -> None:
        collector = NodeCollector()
        contact = petstore.get_property("info").get_property("contact")
        traverse_up(contact, collector)
        assert collector.nodes == [contact, petstore.get_property("info"), petstore]
