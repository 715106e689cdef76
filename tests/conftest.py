"""Shared fixtures for abort-if tests."""

from __future__ import annotations

import sys
import textwrap
from typing import TYPE_CHECKING

import pytest

from abort_if.host.import_hooks import unregister_import_hooks


if TYPE_CHECKING:
    from collections.abc import Callable, Generator
    from pathlib import Path


@pytest.fixture
def write_module(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Callable[[str, str], Path]:
    """Write a module into a directory on sys.path and return its path."""
    monkeypatch.syspath_prepend(str(tmp_path))

    def _write(name: str, source: str) -> Path:
        path = tmp_path / f'{name}.py'
        path.write_text(textwrap.dedent(source), encoding='utf-8')
        return path

    return _write


@pytest.fixture
def clean_imports() -> Generator[list[str], None, None]:
    """Collect module names to forget after the test, and remove import hooks."""
    names: list[str] = []
    yield names
    unregister_import_hooks()
    for name in names:
        sys.modules.pop(name, None)
