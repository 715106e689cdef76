"""Condition expression tree.

A guard condition is a small boolean expression over build flags. Leaves are
either a bare flag (``debug``) or a key/value flag (``feature == 'x'``); inner
nodes are ``not``, ``any(...)`` and ``all(...)``.

Conditions are immutable. They are only ever evaluated by the host resolver
against a flag set; the transformer just renders them back into ``cfg``
decorators.
"""

from __future__ import annotations

import ast
from dataclasses import dataclass


@dataclass(frozen=True)
class Flag:
    """A bare flag that is either set or not (e.g. ``debug``)."""

    name: str

    def to_ast(self) -> ast.expr:
        """Render this flag as a Python expression node."""
        return ast.Name(id=self.name, ctx=ast.Load())

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class KeyValue:
    """A key/value flag (e.g. ``feature == 'x'``).

    A key may be set to several values at once, so this is a membership test
    rather than an equality on a single slot.
    """

    key: str
    value: str

    def to_ast(self) -> ast.expr:
        """Render this flag as ``key == 'value'``."""
        return ast.Compare(
            left=ast.Name(id=self.key, ctx=ast.Load()),
            ops=[ast.Eq()],
            comparators=[ast.Constant(value=self.value)],
        )

    def __str__(self) -> str:
        return f'{self.key} == {self.value!r}'


@dataclass(frozen=True)
class Not:
    """Logical negation of a single condition."""

    term: Condition

    def to_ast(self) -> ast.expr:
        return ast.UnaryOp(op=ast.Not(), operand=self.term.to_ast())

    def __str__(self) -> str:
        return ast.unparse(self.to_ast())


@dataclass(frozen=True)
class AnyOf:
    """Holds when at least one term holds. ``any()`` never holds."""

    terms: tuple[Condition, ...]

    def to_ast(self) -> ast.expr:
        return _call('any', self.terms)

    def __str__(self) -> str:
        return ast.unparse(self.to_ast())


@dataclass(frozen=True)
class AllOf:
    """Holds when every term holds. ``all()`` always holds."""

    terms: tuple[Condition, ...]

    def to_ast(self) -> ast.expr:
        return _call('all', self.terms)

    def __str__(self) -> str:
        return ast.unparse(self.to_ast())


Condition = Flag | KeyValue | Not | AnyOf | AllOf


def _call(name: str, terms: tuple[Condition, ...]) -> ast.Call:
    return ast.Call(
        func=ast.Name(id=name, ctx=ast.Load()),
        args=[term.to_ast() for term in terms],
        keywords=[],
    )


def combine_all(terms: list[Condition]) -> Condition:
    """Combine top-level terms the way the decorator does.

    A single term stands for itself; several terms are implicitly ALL-combined.

    Example:
        >>> str(combine_all([Flag('a'), Flag('b')]))
        'all(a, b)'
        >>> str(combine_all([Flag('a')]))
        'a'
    """
    if len(terms) == 1:
        return terms[0]
    return AllOf(tuple(terms))
