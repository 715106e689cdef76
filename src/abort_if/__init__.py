"""abort-if: build-time guards for Python functions.

Decorate a top-level function with the flags under which it must not be
built::

    @abort_if(any(debug, feature == 'legacy'))
    def handler():
        ...

abort-if splits the function into two variants gated by complementary
``@cfg`` predicates. When a module is built for a flag assignment, only one
variant survives: the original one, or one that aborts the build with
"Condition was met." No condition is ever checked while the code runs.

Example:
    Print both variants::

        $ abort-if expand handlers.py

    Print what gets compiled for a flag assignment::

        $ abort-if build handlers.py --flag feature=legacy
"""

from __future__ import annotations

from abort_if.conditions import FlagSet, parse_condition
from abort_if.config import AbortIfConfig, AbortMode, load_config
from abort_if.errors import (
    AbortIfError,
    ConditionMetError,
    ConditionMetWarning,
    GuardShapeError,
    GuardSyntaxError,
    MissingAbortHandlerError,
)
from abort_if.host import build_source, register_import_hooks, resolve_module, unregister_import_hooks
from abort_if.transform import expand_source


__version__ = '0.1.0'
__all__ = [
    'AbortIfConfig',
    'AbortIfError',
    'AbortMode',
    'ConditionMetError',
    'ConditionMetWarning',
    'FlagSet',
    'GuardShapeError',
    'GuardSyntaxError',
    'MissingAbortHandlerError',
    '__version__',
    'build_source',
    'expand_source',
    'load_config',
    'parse_condition',
    'register_import_hooks',
    'resolve_module',
    'unregister_import_hooks',
]
