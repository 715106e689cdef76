"""Tests for the built-in soft abort hooks."""

from __future__ import annotations

import pytest

from abort_if import hooks
from abort_if.errors import ConditionMetError, ConditionMetWarning


def test_warn_emits_condition_met_warning():
    with pytest.warns(ConditionMetWarning, match='Condition was met.'):
        hooks.warn('Condition was met.')


def test_warning_is_a_user_warning():
    assert issubclass(ConditionMetWarning, UserWarning)


def test_fail_raises_condition_met_error():
    with pytest.raises(ConditionMetError) as exc_info:
        hooks.fail('Condition was met.')

    assert exc_info.value.message == 'Condition was met.'
