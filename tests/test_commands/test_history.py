"""Tests for specmodel.commands.history.CommandStack."""

from __future__ import annotations

from typing import Any

import pytest

from specmodel.commands import (
    CommandStack,
    RenameNodeCommand,
    ReplaceNodeCommand,
    SetPropertyCommand,
)
from specmodel.core.node import Document
from specmodel.core.writer import write_node
from specmodel.exceptions import CommandInvariantViolation


def _title(document: Document) -> str:
    return document.get_property("info").get_property("title")


class TestCommandStack:
    def test_empty_stack(self, petstore: Document) -> None:
        stack = CommandStack(petstore)
        assert not stack.can_undo()
        assert not stack.can_redo()
        assert stack.undo() is None
        assert stack.redo() is None

    def test_undo_and_redo(self, petstore: Document) -> None:
        stack = CommandStack(petstore)
        first = stack.execute(SetPropertyCommand("/info", "title", "One"))
        stack.execute(SetPropertyCommand("/info", "title", "Two"))
        assert _title(petstore) == "Two"

        stack.undo()
        assert _title(petstore) == "One"
        assert stack.undo() is first
        assert _title(petstore) == "Swagger Petstore"
        assert stack.can_redo()

        assert stack.redo() is first
        assert _title(petstore) == "One"
        stack.redo()
        assert _title(petstore) == "Two"
        assert not stack.can_redo()

    def test_new_command_clears_redo(self, petstore: Document) -> None:
        stack = CommandStack(petstore)
        stack.execute(SetPropertyCommand("/info", "title", "One"))
        stack.undo()
        stack.execute(SetPropertyCommand("/info", "version", "9"))
        assert not stack.can_redo()
        assert [c.property_name for c in stack.history()] == ["version"]

    def test_same_command_cannot_be_pushed_twice(self, petstore: Document) -> None:
        stack = CommandStack(petstore)
        command = stack.execute(SetPropertyCommand("/info", "title", "One"))
        with pytest.raises(CommandInvariantViolation):
            stack.execute(command)
        assert len(stack.history()) == 1

    def test_clear(self, petstore: Document) -> None:
        stack = CommandStack(petstore)
        stack.execute(SetPropertyCommand("/info", "title", "One"))
        stack.undo()
        stack.clear()
        assert not stack.can_undo()
        assert not stack.can_redo()

    def test_replace_then_rename_unwinds(
        self, petstore: Document, petstore_raw: dict[str, Any]
    ) -> None:
        stack = CommandStack(petstore)
        old = petstore.get_property("components").get_map("responses")["NotFoundError"]
        new = petstore.create_node("response_definition")
        new.set_property("description", "Nothing here")

        replace = stack.execute(ReplaceNodeCommand(old, new))
        stack.execute(RenameNodeCommand(replace.node_path, "Gone"))
        responses = petstore.get_property("components").get_map("responses")
        assert list(responses) == ["Gone", "ServerError"]
        assert write_node(responses["Gone"]) == {"description": "Nothing here"}

        stack.undo()
        stack.undo()
        assert write_node(petstore) == petstore_raw

        stack.redo()
        stack.redo()
        responses = petstore.get_property("components").get_map("responses")
        assert list(responses) == ["Gone", "ServerError"]
