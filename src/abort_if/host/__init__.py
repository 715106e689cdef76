"""Host build: resolving ``cfg`` predicates and loading built modules."""

from __future__ import annotations

from abort_if.host.import_hooks import GuardFinder, GuardLoader, register_import_hooks, unregister_import_hooks
from abort_if.host.resolver import CfgResolver, build_source, resolve_module


__all__ = [
    'CfgResolver',
    'GuardFinder',
    'GuardLoader',
    'build_source',
    'register_import_hooks',
    'resolve_module',
    'unregister_import_hooks',
]
