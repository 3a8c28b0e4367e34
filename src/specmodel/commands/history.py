"""Undo/redo history for one document."""

from __future__ import annotations

import logging
from typing import Optional

from specmodel.commands.base import Command
from specmodel.core.node import Document

logger = logging.getLogger(__name__)


class CommandStack:
    """Linear undo/redo history over a single :class:`~specmodel.core.node.Document`.

    Executing a new command clears the redo stack. A command instance can
    only be in the history once; pushing it again fails through the
    command's own state guard.

    Example::

        stack = CommandStack(document)
        stack.execute(SetPropertyCommand("/info", "title", "New title"))
        stack.undo()
        stack.redo()
    """

    def __init__(self, document: Document) -> None:
        self.document = document
        self._undo: list[Command] = []
        self._redo: list[Command] = []

    def execute(self, command: Command) -> Command:
        command.execute(self.document)
        self._undo.append(command)
        self._redo.clear()
        return command

    def undo(self) -> Optional[Command]:
        """Undo the most recent command; return it, or ``None`` if there is none."""
        if not self._undo:
            return None
        command = self._undo.pop()
        command.undo(self.document)
        self._redo.append(command)
        return command

    def redo(self) -> Optional[Command]:
        """Re-apply the most recently undone command; return it, or ``None``."""
        if not self._redo:
            return None
        command = self._redo.pop()
        command.execute(self.document)
        self._undo.append(command)
        return command

    def can_undo(self) -> bool:
        return bool(self._undo)

    def can_redo(self) -> bool:
        return bool(self._redo)

    def clear(self) -> None:
        logger.debug("Clearing %d undo and %d redo entries", len(self._undo), len(self._redo))
        self._undo.clear()
        self._redo.clear()

    def history(self) -> list[Command]:
        """The executed commands, oldest first."""
        return list(self._undo)
