"""Conditional compilation of transformed modules.

The resolver plays the part of the compiler's conditional compilation: it
evaluates ``@cfg(...)`` predicates against a flag set, physically removes the
items whose predicates do not hold, and expands the abort statements left in
the surviving functions. The result is a plain module AST with no trace of
the guards, ready for :func:`compile`.
"""

from __future__ import annotations

import ast
import logging
from typing import TYPE_CHECKING

from abort_if.conditions.flags import FlagSet
from abort_if.conditions.parser import ConditionParser
from abort_if.config import AbortIfConfig
from abort_if.errors import AbortIfError, ConditionMetError
from abort_if.transform.abort import COMPILE_ERROR, match_abort_statement, resolve_abort_hook
from abort_if.transform.transformer import CFG_DECORATOR, FUNCTION_TYPES, expand_source


if TYPE_CHECKING:
    from abort_if.conditions.expression import Condition
    from abort_if.transform.transformer import FunctionNode


logger = logging.getLogger(__name__)


def is_cfg_decorator(node: ast.expr) -> bool:
    """Return True for a ``@cfg(...)`` decorator."""
    return isinstance(node, ast.Call) and isinstance(node.func, ast.Name) and node.func.id == CFG_DECORATOR


class CfgResolver:
    """Applies a flag assignment to a transformed module.

    Attributes:
        flags: The flag assignment to resolve against.
        config: Supplies the abort hook for soft aborts.
        filename: Source file name used in diagnostics.
        dropped: Names of the items removed by their ``cfg`` predicates.
    """

    def __init__(self, flags: FlagSet, config: AbortIfConfig, filename: str = '<unknown>') -> None:
        self.flags = flags
        self.config = config
        self.filename = filename
        self._parser = ConditionParser(filename)
        self.dropped: list[str] = []

    def predicates(self, statement: ast.stmt) -> list[Condition]:
        """Return the conditions of every ``@cfg`` decorator on a statement."""
        conditions: list[Condition] = []
        for decorator in getattr(statement, 'decorator_list', ()):
            if is_cfg_decorator(decorator):
                conditions.extend(self._parser.parse_arguments(decorator))
        return conditions

    def is_enabled(self, statement: ast.stmt) -> bool:
        """Return True if every ``cfg`` predicate on the statement holds."""
        return all(self.flags.evaluate(condition) for condition in self.predicates(statement))

    def resolve(self, tree: ast.Module) -> ast.Module:
        """Drop disabled items and expand aborts in the rest, in place."""
        body: list[ast.stmt] = []
        for statement in tree.body:
            if not self.is_enabled(statement):
                name = getattr(statement, 'name', type(statement).__name__)
                logger.debug('Dropped %s at %s:%s', name, self.filename, statement.lineno)
                self.dropped.append(name)
                continue
            if hasattr(statement, 'decorator_list'):
                statement.decorator_list = [d for d in statement.decorator_list if not is_cfg_decorator(d)]
            if isinstance(statement, FUNCTION_TYPES):
                self._expand_aborts(statement)
            body.append(statement)
        tree.body = body
        return tree

    def _expand_aborts(self, function: FunctionNode) -> None:
        body: list[ast.stmt] = []
        for statement in function.body:
            match = match_abort_statement(statement)
            if match is None:
                body.append(statement)
                continue

            name, message = match
            if name == COMPILE_ERROR:
                raise ConditionMetError.at(statement, message, self.filename)

            hook = resolve_abort_hook(self.config.abort_hook, statement, self.filename)
            logger.debug('Calling abort hook for %s at %s:%s', function.name, self.filename, statement.lineno)
            try:
                hook(message)
            except AbortIfError as exc:
                if exc.lineno is None:
                    exc.filename = self.filename
                    exc.lineno = statement.lineno
                    exc.col_offset = statement.col_offset
                raise

        if not body:
            body.append(ast.copy_location(ast.Pass(), function))
        function.body = body


def resolve_module(
    tree: ast.Module,
    flags: FlagSet,
    config: AbortIfConfig | None = None,
    filename: str = '<unknown>',
) -> ast.Module:
    """Apply a flag assignment to a transformed module.

    Args:
        tree: Module produced by :func:`abort_if.transform.expand_source`.
        flags: The flag assignment.
        config: Supplies the abort hook for soft aborts.
        filename: Source file name used in diagnostics.

    Returns:
        The same tree, with disabled items removed.

    Raises:
        ConditionMetError: If a kept function contains a hard abort.
        MissingAbortHandlerError: If a kept function contains a soft abort
            and no hook can be resolved.
    """
    CfgResolver(flags, config or AbortIfConfig(), filename).resolve(tree)
    ast.fix_missing_locations(tree)
    return tree


def build_source(
    source: str,
    flags: FlagSet | None = None,
    config: AbortIfConfig | None = None,
    filename: str = '<unknown>',
) -> ast.Module:
    """Transform and resolve source code in one step.

    Args:
        source: The Python source code.
        flags: The flag assignment. Defaults to the flags in ``config``.
        config: abort-if configuration (defaults: hard abort, no continuation).
        filename: The path to the source file (for diagnostics).

    Returns:
        A module AST containing exactly one variant of every guarded function.

    Example:
        >>> import ast
        >>> tree = build_source('''
        ... @abort_if(debug)
        ... def foo():
        ...     return 1
        ... ''', FlagSet.from_strings(['release']))
        >>> print(ast.unparse(tree))
        def foo():
            return 1
    """
    config = config or AbortIfConfig()
    if flags is None:
        flags = FlagSet.from_strings(config.flags or [])
    tree = expand_source(source, config, filename)
    return resolve_module(tree, flags, config, filename)
