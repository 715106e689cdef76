"""Diagnostics raised while expanding and resolving guarded functions.

Every error carries the source position it refers to, so callers can print
it the way a compiler prints a diagnostic::

    example.py:3:1: Condition was met.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Self


if TYPE_CHECKING:
    import ast


class AbortIfError(Exception):
    """Base class for all abort-if diagnostics.

    Attributes:
        message: The bare diagnostic message.
        filename: Source file the diagnostic refers to.
        lineno: 1-based line number, or None when unknown.
        col_offset: 0-based column offset, or None when unknown.
    """

    def __init__(
        self,
        message: str,
        filename: str = '<unknown>',
        lineno: int | None = None,
        col_offset: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.filename = filename
        self.lineno = lineno
        self.col_offset = col_offset

    @classmethod
    def at(cls, node: ast.AST, message: str, filename: str = '<unknown>') -> Self:
        """Create a diagnostic anchored at an AST node's position."""
        return cls(
            message,
            filename=filename,
            lineno=getattr(node, 'lineno', None),
            col_offset=getattr(node, 'col_offset', None),
        )

    @property
    def location(self) -> str:
        """Return the position as ``file:line:col`` (as much as is known)."""
        parts = [self.filename]
        if self.lineno is not None:
            parts.append(str(self.lineno))
            if self.col_offset is not None:
                parts.append(str(self.col_offset + 1))
        return ':'.join(parts)

    def __str__(self) -> str:
        return f'{self.location}: {self.message}'


class GuardSyntaxError(AbortIfError):
    """The condition passed to ``@abort_if`` is not a valid condition expression."""


class GuardShapeError(AbortIfError):
    """``@abort_if`` was applied to something other than a top-level function."""


class MissingAbortHandlerError(AbortIfError):
    """Soft abort mode is selected but no abort hook could be resolved."""


class ConditionMetError(AbortIfError):
    """The guard condition holds for the selected flags (hard abort)."""


class ConditionMetWarning(UserWarning):
    """Emitted by the built-in warning hook when a guard condition holds."""
