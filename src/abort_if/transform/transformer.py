"""AST transformer that splits guarded functions into two variants.

A top-level function decorated with ``@abort_if(<conditions>)`` is replaced
by two functions with the same name and signature:

    @abort_if(feature == 'x')            @cfg(not feature == 'x')
    def foo():                   ==>     def foo():
        body()                               body()

                                         @cfg(feature == 'x')
                                         def foo():
                                             compile_error('Condition was met.')

The ``cfg`` predicates are exact complements, so once the host resolver has
applied a flag assignment exactly one ``foo`` is left in the module.
"""

from __future__ import annotations

import ast
import copy
import logging
from typing import TYPE_CHECKING

from abort_if.conditions.expression import Not, combine_all
from abort_if.conditions.parser import parse_condition_args
from abort_if.config import AbortIfConfig
from abort_if.errors import GuardShapeError, GuardSyntaxError
from abort_if.transform.abort import build_abort_statement


if TYPE_CHECKING:
    from abort_if.conditions.expression import Condition


logger = logging.getLogger(__name__)

ABORT_IF_DECORATOR = 'abort_if'
CFG_DECORATOR = 'cfg'

FunctionNode = ast.FunctionDef | ast.AsyncFunctionDef
FUNCTION_TYPES = (ast.FunctionDef, ast.AsyncFunctionDef)


def is_abort_if_decorator(node: ast.expr) -> bool:
    """Return True for ``@abort_if``, ``@abort_if(...)`` and ``@pkg.abort_if(...)``."""
    target = node.func if isinstance(node, ast.Call) else node
    if isinstance(target, ast.Name):
        return target.id == ABORT_IF_DECORATOR
    if isinstance(target, ast.Attribute):
        return target.attr == ABORT_IF_DECORATOR
    return False


def find_abort_if_decorator(node: ast.AST) -> ast.expr | None:
    """Return the outermost ``@abort_if`` decorator of a statement, if any."""
    for decorator in getattr(node, 'decorator_list', ()):
        if is_abort_if_decorator(decorator):
            return decorator
    return None


def build_cfg_decorator(condition: Condition, anchor: ast.AST) -> ast.expr:
    """Build a ``@cfg(<condition>)`` decorator located at ``anchor``."""
    decorator = ast.Call(
        func=ast.Name(id=CFG_DECORATOR, ctx=ast.Load()),
        args=[condition.to_ast()],
        keywords=[],
    )
    for child in ast.walk(decorator):
        ast.copy_location(child, anchor)
    return decorator


def split_function(
    node: FunctionNode,
    decorator: ast.expr,
    config: AbortIfConfig,
    filename: str = '<unknown>',
) -> tuple[FunctionNode, FunctionNode]:
    """Split a guarded function into its negative and positive variants.

    Args:
        node: The decorated function.
        decorator: The ``@abort_if(...)`` decorator of ``node``.
        config: Abort mode, continuation and abort hook.
        filename: Source file name used in diagnostics.

    Returns:
        ``(negative, positive)``. The negative variant keeps the original body
        and is gated by ``not <condition>``; the positive variant starts with
        the abort statement and is gated by each condition term.

        Several terms are negated as a whole, ``not all(a, b)``, rather than
        term by term: ``not a`` plus ``not b`` would leave no variant when only
        ``a`` is set.

    Raises:
        GuardSyntaxError: If the decorator has no valid condition arguments.
        MissingAbortHandlerError: In soft mode without a resolvable hook.
    """
    if not isinstance(decorator, ast.Call):
        raise GuardSyntaxError.at(decorator, 'expected condition arguments: @abort_if(...)', filename)

    terms = parse_condition_args(decorator, filename)
    abort_statement = build_abort_statement(config, decorator, filename)
    remaining = [d for d in node.decorator_list if d is not decorator]

    negative = copy.deepcopy(node)
    negative.decorator_list = [
        build_cfg_decorator(Not(combine_all(terms)), decorator),
        *copy.deepcopy(remaining),
    ]

    positive = copy.deepcopy(node)
    positive.decorator_list = [
        *(build_cfg_decorator(term, decorator) for term in terms),
        *copy.deepcopy(remaining),
    ]
    positive.body = [abort_statement]
    if config.continuation:
        positive.body.extend(copy.deepcopy(node.body))

    logger.debug(
        'Split %s at %s:%s on %s',
        node.name,
        filename,
        decorator.lineno,
        combine_all(terms),
    )
    return negative, positive


class GuardTransformer(ast.NodeTransformer):
    """Replaces every guarded top-level function with its two variants.

    Only the module body is rewritten. A variant that still carries another
    ``@abort_if`` decorator is split again, so stacked guards compose.
    """

    def __init__(self, config: AbortIfConfig, filename: str = '<unknown>') -> None:
        self.config = config
        self.filename = filename
        self.split_count = 0

    def visit_Module(self, node: ast.Module) -> ast.Module:
        """Expand guarded top-level items."""
        for statement in node.body:
            self._reject_nested_guards(statement)

        body: list[ast.stmt] = []
        for statement in node.body:
            body.extend(self._expand(statement))
        node.body = body
        return node

    def _expand(self, statement: ast.stmt) -> list[ast.stmt]:
        decorator = find_abort_if_decorator(statement)
        if decorator is None:
            return [statement]
        if not isinstance(statement, FUNCTION_TYPES):
            raise GuardShapeError.at(decorator, 'expected function item', self.filename)

        negative, positive = split_function(statement, decorator, self.config, self.filename)
        self.split_count += 1
        return [*self._expand(negative), *self._expand(positive)]

    def _reject_nested_guards(self, statement: ast.stmt) -> None:
        for child in ast.walk(statement):
            if child is statement:
                continue
            decorator = find_abort_if_decorator(child)
            if decorator is not None:
                raise GuardShapeError.at(decorator, 'expected top-level function item', self.filename)


def parse_source(source: str, filename: str = '<unknown>') -> ast.Module:
    """Parse Python source, reporting syntax errors as GuardSyntaxError."""
    try:
        return ast.parse(source, filename=filename)
    except SyntaxError as exc:
        col_offset = exc.offset - 1 if exc.offset else None
        raise GuardSyntaxError(exc.msg, filename=filename, lineno=exc.lineno, col_offset=col_offset) from exc


def expand_module(
    tree: ast.Module,
    config: AbortIfConfig | None = None,
    filename: str = '<unknown>',
) -> ast.Module:
    """Split every guarded function in a parsed module.

    The tree is modified in place and returned.
    """
    transformer = GuardTransformer(config or AbortIfConfig(), filename)
    new_tree = transformer.visit(tree)
    if not isinstance(new_tree, ast.Module):
        raise TypeError(f'Expected ast.Module, got {type(new_tree).__name__}')
    ast.fix_missing_locations(new_tree)
    logger.debug('Expanded %d guarded function(s) in %s', transformer.split_count, filename)
    return new_tree


def expand_source(
    source: str,
    config: AbortIfConfig | None = None,
    filename: str = '<unknown>',
) -> ast.Module:
    """Parse source code and split every guarded function.

    This is the main entry point of the transformer. The result still
    contains both variants of each guarded function, gated by ``@cfg``
    decorators; see :func:`abort_if.host.resolver.build_source` to apply a
    flag assignment.

    Args:
        source: The Python source code to transform.
        config: Abort mode, continuation and abort hook (defaults: hard, off).
        filename: The path to the source file (for diagnostics).

    Returns:
        The transformed module AST.
    """
    return expand_module(parse_source(source, filename), config, filename)
