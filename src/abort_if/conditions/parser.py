"""Parse ``@abort_if(...)`` arguments into condition terms.

The decorator arguments are ordinary Python syntax, so the source is parsed
by :mod:`ast` first and this module only checks that the resulting nodes
follow the condition grammar::

    term := NAME
          | NAME == VALUE
          | NAME = VALUE          (keyword argument of abort_if/any/all)
          | not term
          | any(term, ...)
          | all(term, ...)

VALUE is a string literal or a bare name.
"""

from __future__ import annotations

import ast

from abort_if.conditions.expression import AllOf, AnyOf, Condition, Flag, KeyValue, Not
from abort_if.errors import GuardSyntaxError


COMBINATORS: dict[str, type[AnyOf] | type[AllOf]] = {
    'any': AnyOf,
    'all': AllOf,
}


class ConditionParser:
    """Turns decorator argument nodes into :data:`Condition` trees."""

    def __init__(self, filename: str = '<unknown>') -> None:
        self.filename = filename

    def _error(self, node: ast.AST, message: str) -> GuardSyntaxError:
        return GuardSyntaxError.at(node, message, self.filename)

    def parse_arguments(self, call: ast.Call) -> list[Condition]:
        """Parse the positional and keyword arguments of a call node."""
        terms: list[Condition] = []
        for arg in call.args:
            if isinstance(arg, ast.Starred):
                raise self._error(arg, 'unpacking is not allowed in a condition')
            terms.append(self.parse_term(arg))
        for keyword in call.keywords:
            if keyword.arg is None:
                raise self._error(keyword, 'unpacking is not allowed in a condition')
            terms.append(KeyValue(keyword.arg, self._parse_value(keyword.value)))
        return terms

    def parse_term(self, node: ast.expr) -> Condition:
        """Parse a single condition term."""
        if isinstance(node, ast.Name):
            return Flag(node.id)

        if isinstance(node, ast.Compare):
            return self._parse_key_value(node)

        if isinstance(node, ast.UnaryOp) and isinstance(node.op, ast.Not):
            if isinstance(node.operand, ast.Tuple):
                raise self._error(node.operand, 'not() takes exactly one condition')
            return Not(self.parse_term(node.operand))

        if isinstance(node, ast.Call):
            if not isinstance(node.func, ast.Name):
                raise self._error(node.func, 'expected any(...), all(...) or not(...)')
            combinator = COMBINATORS.get(node.func.id)
            if combinator is None:
                raise self._error(node.func, f"unknown condition operator '{node.func.id}'")
            return combinator(tuple(self.parse_arguments(node)))

        raise self._error(node, f'unexpected {type(node).__name__} in condition')

    def _parse_key_value(self, node: ast.Compare) -> KeyValue:
        if len(node.ops) != 1 or not isinstance(node.ops[0], ast.Eq):
            raise self._error(node, "only 'key == value' comparisons are allowed in a condition")
        if not isinstance(node.left, ast.Name):
            raise self._error(node.left, 'expected a flag name on the left of ==')
        return KeyValue(node.left.id, self._parse_value(node.comparators[0]))

    def _parse_value(self, node: ast.expr) -> str:
        if isinstance(node, ast.Constant) and isinstance(node.value, str):
            return node.value
        if isinstance(node, ast.Name):
            return node.id
        raise self._error(node, 'expected a string value')


def parse_condition_args(call: ast.Call, filename: str = '<unknown>') -> list[Condition]:
    """Parse the arguments of an ``@abort_if(...)`` decorator.

    Args:
        call: The decorator call node.
        filename: Source file name used in diagnostics.

    Returns:
        The top-level condition terms, in source order. Several terms are
        implicitly ALL-combined by the caller.

    Raises:
        GuardSyntaxError: If the arguments do not follow the condition grammar,
            or if there are no arguments at all.
    """
    terms = ConditionParser(filename).parse_arguments(call)
    if not terms:
        raise GuardSyntaxError.at(call, 'expected at least one condition', filename)
    return terms


def parse_condition(text: str, filename: str = '<string>') -> list[Condition]:
    """Parse a condition list written as text, e.g. ``"any(a, not b)"``.

    Example:
        >>> [str(term) for term in parse_condition("debug, feature == 'x'")]
        ['debug', "feature == 'x'"]
    """
    # The text goes on its own line so that columns match the caller's text.
    try:
        tree = ast.parse(f'abort_if(\n{text}\n)', filename=filename, mode='eval')
    except SyntaxError as exc:
        lineno = max((exc.lineno or 2) - 1, 1)
        col_offset = exc.offset - 1 if exc.offset else None
        raise GuardSyntaxError(exc.msg, filename=filename, lineno=lineno, col_offset=col_offset) from exc
    ast.increment_lineno(tree, -1)
    call = tree.body
    if not isinstance(call, ast.Call):
        raise GuardSyntaxError.at(call, 'expected a condition list', filename)
    return parse_condition_args(call, filename)
