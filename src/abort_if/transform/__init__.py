"""Source transformation for guarded functions.

This package rewrites ``@abort_if(...)`` functions into a negative and a
positive variant, each gated by a ``@cfg(...)`` decorator.

Example usage:
    >>> import ast
    >>> tree = expand_source('''
    ... @abort_if(debug)
    ... def foo():
    ...     return 1
    ... ''')
    >>> [ast.unparse(f.decorator_list[0]) for f in tree.body]
    ['cfg(not debug)', 'cfg(debug)']
"""

from __future__ import annotations

from abort_if.transform.abort import CONDITION_MET_MESSAGE, build_abort_statement, resolve_abort_hook
from abort_if.transform.transformer import GuardTransformer, expand_module, expand_source, split_function


__all__ = [
    'CONDITION_MET_MESSAGE',
    'GuardTransformer',
    'build_abort_statement',
    'expand_module',
    'expand_source',
    'resolve_abort_hook',
    'split_function',
]
