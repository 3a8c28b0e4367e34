"""Abstract base class for reversible document edits.

A :class:`Command` is one atomic edit of a document tree. ``execute`` applies
the edit and records everything needed to invert it; ``undo`` restores a
state observably identical to the one before ``execute`` -- same node kinds,
values, positions and keys.

Commands address nodes by :class:`~specmodel.core.paths.NodePath` strings and
store removed content in serialised (generic value) form, so a command holds
no references into the tree once it has run. That also makes every command
marshallable: :meth:`Command.to_dict` and :func:`command_from_dict` convert
to and from plain JSON-compatible dicts.

Each command instance follows a small lifecycle::

    new --execute--> executed --undo--> undone --execute (redo)--> executed

Executing an already-executed command, or undoing one that is not executed,
raises :class:`~specmodel.exceptions.CommandInvariantViolation`.
"""

from __future__ import annotations

import copy
import enum
import logging
from abc import ABC, abstractmethod
from typing import Any, ClassVar

from specmodel.core.node import Document
from specmodel.exceptions import CommandInvariantViolation

logger = logging.getLogger(__name__)

_COMMAND_TYPES: dict[str, type[Command]] = {}


class CommandState(str, enum.Enum):
    NEW = "new"
    EXECUTED = "executed"
    UNDONE = "undone"


class Command(ABC):
    """Base class for all commands.

    Subclasses set :attr:`type_name`, list their constructor arguments in
    :attr:`fields` and their execute-time captures in :attr:`captured`, and
    implement :meth:`_execute` and :meth:`_undo`.

    Example::

        command = SetPropertyCommand("/info", "title", "Pet Store")
        command.execute(document)
        command.undo(document)
    """

    type_name: ClassVar[str] = ""
    fields: ClassVar[tuple[str, ...]] = ()
    captured: ClassVar[tuple[str, ...]] = ()

    def __init__(self) -> None:
        self._state = CommandState.NEW

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if cls.type_name:
            _COMMAND_TYPES[cls.type_name] = cls

    def __repr__(self) -> str:
        args = ", ".join(f"{name}={getattr(self, name)!r}" for name in self.fields)
        return f"{type(self).__name__}({args})"

    @property
    def state(self) -> CommandState:
        return self._state

    def execute(self, document: Document) -> None:
        """Apply the edit to *document* (or re-apply it after an undo).

        Raises:
            CommandInvariantViolation: If the command is already executed.
        """
        if self._state is CommandState.EXECUTED:
            raise CommandInvariantViolation(f"{self!r} has already been executed")
        logger.debug("Executing %r", self)
        self._execute(document)
        self._state = CommandState.EXECUTED

    def undo(self, document: Document) -> None:
        """Revert the edit made by the last :meth:`execute`.

        Raises:
            CommandInvariantViolation: If the command is not in the executed state.
        """
        if self._state is not CommandState.EXECUTED:
            raise CommandInvariantViolation(f"Cannot undo {self!r}: it is {self._state.value}")
        logger.debug("Undoing %r", self)
        self._undo(document)
        self._state = CommandState.UNDONE

    @abstractmethod
    def _execute(self, document: Document) -> None:
        ...

    @abstractmethod
    def _undo(self, document: Document) -> None:
        ...

    # ------------------------------------------------------------------
    # Marshalling
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-compatible representation, captured state included."""
        data: dict[str, Any] = {"type": self.type_name, "state": self._state.value}
        for name in self.fields + self.captured:
            data[name] = copy.deepcopy(getattr(self, name))
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Command:
        command = cls._from_fields({name: copy.deepcopy(data.get(name)) for name in cls.fields})
        for name in cls.captured:
            setattr(command, name, copy.deepcopy(data.get(name)))
        command._state = CommandState(data.get("state", CommandState.NEW.value))
        return command

    @classmethod
    def _from_fields(cls, values: dict[str, Any]) -> Command:
        return cls(**values)


def command_from_dict(data: dict[str, Any]) -> Command:
    """Rebuild a command from the output of :meth:`Command.to_dict`.

    Raises:
        CommandInvariantViolation: If ``data["type"]`` names no known command.
    """
    type_name = data.get("type")
    command_cls = _COMMAND_TYPES.get(type_name) if isinstance(type_name, str) else None
    if command_cls is None:
        available = ", ".join(sorted(_COMMAND_TYPES)) or "(none)"
        raise CommandInvariantViolation(
            f"Unknown command type {type_name!r}. Available types: {available}"
        )
    return command_cls.from_dict(data)
