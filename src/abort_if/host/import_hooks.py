"""Import hooks that build guarded modules at import time.

Importing is the closest Python gets to a compile step, so this is where the
host build runs for installed code:

1. GuardFinder is registered on sys.meta_path
2. When Python imports a configured module, GuardFinder.find_spec() locates
   its source with the regular path finder
3. GuardLoader.exec_module() expands and resolves the source for the
   configured flags, then compiles and executes the resulting AST

Only one variant of each guarded function reaches the compiled module.

Example:
    >>> from abort_if.host.import_hooks import (
    ...     register_import_hooks,
    ...     unregister_import_hooks,
    ... )
    >>> register_import_hooks(['mypackage.core'])
    >>> # Now importing mypackage.core builds it for the configured flags
    >>> unregister_import_hooks()
"""

from __future__ import annotations

from importlib.abc import Loader, MetaPathFinder
from importlib.machinery import ModuleSpec, PathFinder
from importlib.util import spec_from_file_location
import logging
from pathlib import Path
import sys
from typing import TYPE_CHECKING

from abort_if.conditions.flags import FlagSet
from abort_if.config import AbortIfConfig
from abort_if.host.resolver import build_source


if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    import types


logger = logging.getLogger(__name__)


class GuardLoader(Loader):
    """Loader that builds a module's source through abort-if before executing it."""

    def __init__(self, origin: str, module_name: str, flags: FlagSet, config: AbortIfConfig) -> None:
        """Initialize the loader.

        Args:
            origin: Path of the module's source file.
            module_name: The name of the module being loaded.
            flags: Flag assignment to build the module for.
            config: abort-if configuration.
        """
        self._origin = origin
        self._module_name = module_name
        self._flags = flags
        self._config = config

    def create_module(self, spec: ModuleSpec) -> types.ModuleType | None:  # noqa: ARG002
        """Return None to use default module creation semantics."""
        return None

    def exec_module(self, module: types.ModuleType) -> None:
        """Build the module source for the configured flags and execute it.

        Raises:
            AbortIfError: If the build fails (malformed guard, triggered hard
                abort, missing abort hook).
        """
        source = Path(self._origin).read_text(encoding='utf-8')
        tree = build_source(source, self._flags, self._config, filename=self._origin)
        logger.debug('Built %s for flags %s', self._module_name, self._flags.to_strings())

        code = compile(tree, self._origin, 'exec')
        exec(code, module.__dict__)  # noqa: S102


class GuardFinder(MetaPathFinder):
    """Finder that routes configured modules through GuardLoader."""

    def __init__(
        self,
        modules: Iterable[str],
        flags: FlagSet | None = None,
        config: AbortIfConfig | None = None,
    ) -> None:
        """Initialize the finder.

        Args:
            modules: Fully qualified names of the modules to build.
            flags: Flag assignment. Defaults to the flags in ``config``.
            config: abort-if configuration.
        """
        self._modules = frozenset(modules)
        self._config = config or AbortIfConfig()
        self._flags = flags if flags is not None else FlagSet.from_strings(self._config.flags or [])

    def find_spec(
        self,
        fullname: str,
        path: Sequence[str] | None,
        target: types.ModuleType | None = None,  # noqa: ARG002
    ) -> ModuleSpec | None:
        """Find a module spec for the given module name.

        Returns:
            ModuleSpec with GuardLoader for configured source modules, None otherwise.
        """
        if fullname not in self._modules:
            return None

        spec = PathFinder.find_spec(fullname, path)
        if spec is None or spec.origin is None or not spec.origin.endswith('.py'):
            return None

        loader = GuardLoader(spec.origin, fullname, self._flags, self._config)
        return spec_from_file_location(
            fullname,
            spec.origin,
            loader=loader,
            submodule_search_locations=spec.submodule_search_locations,
        )


# Global reference to the registered finder (for cleanup)
_registered_finder: GuardFinder | None = None


def register_import_hooks(
    modules: Iterable[str],
    flags: FlagSet | None = None,
    config: AbortIfConfig | None = None,
) -> None:
    """Register the import hook for the given modules.

    Modules already imported are not rebuilt; remove them from sys.modules
    first if needed.

    Args:
        modules: Fully qualified names of the modules to build.
        flags: Flag assignment. Defaults to the flags in ``config``.
        config: abort-if configuration.
    """
    global _registered_finder  # noqa: PLW0603
    unregister_import_hooks()

    _registered_finder = GuardFinder(modules, flags, config)
    sys.meta_path.insert(0, _registered_finder)


def unregister_import_hooks() -> None:
    """Remove the import hook from sys.meta_path.

    Safe to call even if no hook is registered.
    """
    global _registered_finder  # noqa: PLW0603

    if _registered_finder is not None and _registered_finder in sys.meta_path:
        sys.meta_path.remove(_registered_finder)

    _registered_finder = None

    sys.meta_path[:] = [f for f in sys.meta_path if not isinstance(f, GuardFinder)]
