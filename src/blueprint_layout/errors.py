"""Exceptions raised by the blueprint layout and link passes."""

from __future__ import annotations


class BlueprintError(Exception):
    """Base class for every error raised by blueprint_layout."""


class InvalidTreeError(BlueprintError):
    """The tree violates a structural precondition of a pass.

    Raised when the root is unset, a node is reached twice during traversal,
    a child is appended under a leaf or barrier, or a composite has no
    children when it is sized or expanded.
    """


class InvalidModeError(BlueprintError, ValueError):
    """A composite has no execution mode, or a kind/mode value is unrecognised."""
