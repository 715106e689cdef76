"""Guard conditions: the expression tree, its parser, and flag evaluation."""

from __future__ import annotations

from abort_if.conditions.expression import AllOf, AnyOf, Condition, Flag, KeyValue, Not, combine_all
from abort_if.conditions.flags import FlagSet
from abort_if.conditions.parser import parse_condition, parse_condition_args


__all__ = [
    'AllOf',
    'AnyOf',
    'Condition',
    'Flag',
    'FlagSet',
    'KeyValue',
    'Not',
    'combine_all',
    'parse_condition',
    'parse_condition_args',
]
