"""Configuration loading for abort-if.

This module reads configuration from pyproject.toml [tool.abort-if]
section and provides defaults when configuration is absent:

    [tool.abort-if]
    abort_mode = "soft"
    continuation = true
    abort_hook = "abort_if.hooks:warn"
    flags = ["debug", "feature=x"]
    modules = ["mypackage.core"]
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
import tomllib
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


class AbortMode(str, Enum):
    """How the positive variant aborts.

    HARD fails the build unconditionally. SOFT hands the message to an abort
    hook, which decides whether to fail or only warn.
    """

    HARD = 'hard'
    SOFT = 'soft'

    @classmethod
    def parse(cls, value: str | AbortMode) -> AbortMode:
        """Convert a configuration value to an AbortMode.

        Raises:
            ValueError: If the value is not 'hard' or 'soft'.
        """
        try:
            return cls(value)
        except ValueError:
            choices = ', '.join(repr(mode.value) for mode in cls)
            raise ValueError(f'Invalid abort_mode {value!r}, expected one of {choices}') from None


@dataclass(frozen=True)
class AbortIfConfig:
    """Configuration for abort-if.

    Attributes:
        abort_mode: Hard or soft abort in the positive variant.
        continuation: Keep the original statements after the abort statement.
            Only observable in soft mode.
        abort_hook: The soft abort hook, as a dotted path ('pkg.mod:func') or
            a callable taking the diagnostic message.
        flags: Flags set for the host build, as 'name' or 'key=value'.
        modules: Module names built through the import hook.
    """

    abort_mode: AbortMode = AbortMode.HARD
    continuation: bool = False
    abort_hook: str | Callable[[str], object] | None = None
    flags: list[str] | None = None
    modules: list[str] | None = None


def load_config(rootdir: Path) -> AbortIfConfig:
    """Load configuration from pyproject.toml.

    Reads the [tool.abort-if] section from pyproject.toml in the given
    directory. Returns default configuration if the file or section does
    not exist.

    Args:
        rootdir: Directory containing pyproject.toml.

    Returns:
        AbortIfConfig with values from pyproject.toml or defaults.

    Raises:
        ValueError: If an option has an invalid value or type.
    """
    pyproject_path = rootdir / 'pyproject.toml'

    if not pyproject_path.exists():
        return AbortIfConfig()

    with pyproject_path.open('rb') as f:
        data = tomllib.load(f)

    tool_config = data.get('tool', {}).get('abort-if', {})

    continuation = tool_config.get('continuation', False)
    if not isinstance(continuation, bool):
        raise ValueError(f'Invalid continuation {continuation!r}, expected true or false')

    abort_hook = tool_config.get('abort_hook')
    if abort_hook is not None and not isinstance(abort_hook, str):
        raise ValueError(f'Invalid abort_hook {abort_hook!r}, expected a dotted path string')

    return AbortIfConfig(
        abort_mode=AbortMode.parse(tool_config.get('abort_mode', AbortMode.HARD)),
        continuation=continuation,
        abort_hook=abort_hook,
        flags=_string_list(tool_config, 'flags'),
        modules=_string_list(tool_config, 'modules'),
    )


def _string_list(tool_config: dict[str, object], key: str) -> list[str] | None:
    value = tool_config.get(key)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f'Invalid {key} {value!r}, expected a list of strings')
    return value


def _split_csv(value: str | None) -> list[str] | None:
    if value and value.strip():
        return [item.strip() for item in value.split(',') if item.strip()]
    return None


def merge_configs(
    file_config: AbortIfConfig,
    cli_flags: str | None = None,
    cli_modules: str | None = None,
    cli_abort_mode: str | None = None,
    cli_continuation: bool | None = None,
    cli_abort_hook: str | None = None,
) -> AbortIfConfig:
    """Merge command-line options with file configuration.

    Command-line values take precedence over pyproject.toml configuration.
    Empty strings and None are treated as not provided.

    Args:
        file_config: Configuration loaded from pyproject.toml.
        cli_flags: Comma-separated flags (--flag / --abort-if-flags).
        cli_modules: Comma-separated module names (--abort-if-modules).
        cli_abort_mode: 'hard' or 'soft' (--abort-mode).
        cli_continuation: Continuation switch (--continuation).
        cli_abort_hook: Dotted path of the soft abort hook (--abort-hook).

    Returns:
        AbortIfConfig with command-line values overriding file config where provided.
    """
    config = file_config

    flags = _split_csv(cli_flags)
    if flags is not None:
        config = replace(config, flags=flags)

    modules = _split_csv(cli_modules)
    if modules is not None:
        config = replace(config, modules=modules)

    if cli_abort_mode and cli_abort_mode.strip():
        config = replace(config, abort_mode=AbortMode.parse(cli_abort_mode.strip()))

    if cli_continuation is not None:
        config = replace(config, continuation=cli_continuation)

    if cli_abort_hook and cli_abort_hook.strip():
        config = replace(config, abort_hook=cli_abort_hook.strip())

    return config
