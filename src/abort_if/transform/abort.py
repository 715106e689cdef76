"""Abort statements injected into the positive variant.

The positive variant of a guarded function starts with one of two marker
statements, both taking the diagnostic message as their only argument:

    compile_error('Condition was met.')        # hard mode
    custom_abort_error('Condition was met.')   # soft mode

Neither name exists at runtime. The host resolver expands them while the
module is built: ``compile_error`` fails the build, ``custom_abort_error``
calls the configured abort hook.
"""

from __future__ import annotations

import ast
import pkgutil
from typing import TYPE_CHECKING

from abort_if.config import AbortIfConfig, AbortMode
from abort_if.errors import MissingAbortHandlerError


if TYPE_CHECKING:
    from collections.abc import Callable


COMPILE_ERROR = 'compile_error'
CUSTOM_ABORT_ERROR = 'custom_abort_error'
CONDITION_MET_MESSAGE = 'Condition was met.'

ABORT_STATEMENTS = frozenset({COMPILE_ERROR, CUSTOM_ABORT_ERROR})


def resolve_abort_hook(
    hook: str | Callable[[str], object] | None,
    anchor: ast.AST | None = None,
    filename: str = '<unknown>',
) -> Callable[[str], object]:
    """Resolve the soft abort hook to a callable.

    Args:
        hook: A callable, or a dotted path such as 'pkg.mod:func'.
        anchor: Node the diagnostic points at if resolution fails.
        filename: Source file name used in diagnostics.

    Returns:
        The hook callable.

    Raises:
        MissingAbortHandlerError: If no hook is configured, it cannot be
            imported, or it is not callable.
    """
    position = anchor if anchor is not None else ast.Pass()
    if hook is None:
        raise MissingAbortHandlerError.at(position, 'missing custom abort handler', filename)
    if callable(hook):
        return hook

    try:
        resolved = pkgutil.resolve_name(hook)
    except (ImportError, AttributeError, TypeError, ValueError) as exc:
        raise MissingAbortHandlerError.at(
            position, f'missing custom abort handler: cannot resolve {hook!r}', filename
        ) from exc

    if not callable(resolved):
        raise MissingAbortHandlerError.at(
            position, f'missing custom abort handler: {hook!r} is not callable', filename
        )
    return resolved


def _locate(node: ast.AST, anchor: ast.AST) -> ast.AST:
    for child in ast.walk(node):
        ast.copy_location(child, anchor)
    return node


def build_abort_statement(
    config: AbortIfConfig,
    anchor: ast.AST,
    filename: str = '<unknown>',
) -> ast.stmt:
    """Build the abort statement for the configured abort mode.

    The statement takes the source position of ``anchor`` (the decorator),
    so a triggered guard is reported at the decorator.

    Raises:
        MissingAbortHandlerError: In soft mode, if the abort hook cannot be resolved.
    """
    if config.abort_mode is AbortMode.SOFT:
        resolve_abort_hook(config.abort_hook, anchor, filename)
        name = CUSTOM_ABORT_ERROR
    else:
        name = COMPILE_ERROR

    statement = ast.Expr(
        value=ast.Call(
            func=ast.Name(id=name, ctx=ast.Load()),
            args=[ast.Constant(value=CONDITION_MET_MESSAGE)],
            keywords=[],
        )
    )
    _locate(statement, anchor)
    return statement


def match_abort_statement(statement: ast.stmt) -> tuple[str, str] | None:
    """Recognize an abort statement.

    Returns:
        ``(name, message)`` if the statement is ``compile_error(msg)`` or
        ``custom_abort_error(msg)`` with a string literal, None otherwise.
    """
    if not isinstance(statement, ast.Expr) or not isinstance(statement.value, ast.Call):
        return None
    call = statement.value
    if not isinstance(call.func, ast.Name) or call.func.id not in ABORT_STATEMENTS:
        return None
    if len(call.args) != 1 or call.keywords:
        return None
    message = call.args[0]
    if not isinstance(message, ast.Constant) or not isinstance(message.value, str):
        return None
    return call.func.id, message.value
