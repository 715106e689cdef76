"""Ready-made abort hooks for soft abort mode.

Point ``abort_hook`` at one of these, or at any callable that takes the
diagnostic message:

    [tool.abort-if]
    abort_mode = "soft"
    abort_hook = "abort_if.hooks:warn"
"""

from __future__ import annotations

from typing import NoReturn
import warnings

from abort_if.errors import ConditionMetError, ConditionMetWarning


def warn(message: str) -> None:
    """Report a met condition as a ConditionMetWarning and let the build go on."""
    warnings.warn(message, ConditionMetWarning, stacklevel=2)


def fail(message: str) -> NoReturn:
    """Fail the build, like hard abort mode."""
    raise ConditionMetError(message)
