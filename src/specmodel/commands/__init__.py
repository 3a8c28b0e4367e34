"""Reversible edits of a document tree and an undo/redo history.

Sub-modules:

* :mod:`~specmodel.commands.base` -- the :class:`Command` lifecycle and
  marshalling.
* :mod:`~specmodel.commands.property` -- :class:`SetPropertyCommand`.
* :mod:`~specmodel.commands.nodes` -- add, remove, replace and rename nodes.
* :mod:`~specmodel.commands.history` -- :class:`CommandStack`.
"""

from specmodel.commands.base import Command, CommandState, command_from_dict
from specmodel.commands.history import CommandStack
from specmodel.commands.nodes import (
    AddNodeCommand,
    RemoveNodeCommand,
    RenameNodeCommand,
    ReplaceNodeCommand,
)
from specmodel.commands.property import SetPropertyCommand

__all__ = [
    "AddNodeCommand",
    "Command",
    "CommandStack",
    "CommandState",
    "RemoveNodeCommand",
    "RenameNodeCommand",
    "ReplaceNodeCommand",
    "SetPropertyCommand",
    "command_from_dict",
]
