"""Exceptions raised by the mindcore document model."""

from typing import Optional


class MindMapError(Exception):
    """Base class for all mindcore errors."""


class NotFound(MindMapError, KeyError):
    """An operation referenced a node id that is not in the store."""

    def __init__(self, node_id: str, message: Optional[str] = None):
        self.node_id = node_id
        super().__init__(message or f"Node not found: {node_id!r}")

    def __str__(self) -> str:
        # KeyError would repr() the message
        return str(self.args[0])


class InvariantViolation(MindMapError):
    """The tree is (or would be) left in a state that breaks a model invariant."""


class MalformedDocument(MindMapError, ValueError):
    """A structured document could not be parsed or has the wrong shape."""


class EmptyOutline(MindMapError, ValueError):
    """An outline import found no heading or list item to build a tree from."""
