"""pytest plugin for abort-if.

This module provides the pytest plugin hooks that build configured modules
through abort-if for the duration of a test session, so the tests run
against the variant selected by the given flags.
"""

from __future__ import annotations

import pytest

from abort_if.conditions.flags import FlagSet
from abort_if.config import load_config, merge_configs
from abort_if.host.import_hooks import register_import_hooks, unregister_import_hooks


_hooks_registered = pytest.StashKey[bool]()


def pytest_addoption(parser: pytest.Parser) -> None:
    """Add command-line options for abort-if."""
    group = parser.getgroup('abort-if', 'build-time guarded functions')
    group.addoption(
        '--abort-if-flags',
        action='store',
        default=None,
        dest='abort_if_flags',
        help="Comma-separated flags to build with, e.g. 'debug,feature=x'",
    )
    group.addoption(
        '--abort-if-modules',
        action='store',
        default=None,
        dest='abort_if_modules',
        help='Comma-separated modules to build through abort-if on import',
    )
    group.addoption(
        '--abort-if-mode',
        action='store',
        default=None,
        dest='abort_if_mode',
        help='Abort mode: hard or soft (default: from pyproject.toml, else hard)',
    )


def pytest_configure(config: pytest.Config) -> None:
    """Register the import hook when modules are configured."""
    try:
        merged = merge_configs(
            load_config(config.rootpath),
            cli_flags=config.option.abort_if_flags,
            cli_modules=config.option.abort_if_modules,
            cli_abort_mode=config.option.abort_if_mode,
        )
    except ValueError as exc:
        raise pytest.UsageError(f'abort-if: {exc}') from exc

    if not merged.modules:
        return

    register_import_hooks(merged.modules, FlagSet.from_strings(merged.flags or []), merged)
    config.stash[_hooks_registered] = True


def pytest_unconfigure(config: pytest.Config) -> None:
    """Remove the import hook registered by pytest_configure."""
    if config.stash.get(_hooks_registered, False):
        unregister_import_hooks()
