"""Tests for parsing @abort_if arguments into condition trees."""

from __future__ import annotations

import ast

import pytest

from abort_if.conditions.expression import AllOf, AnyOf, Flag, KeyValue, Not
from abort_if.conditions.parser import parse_condition, parse_condition_args
from abort_if.errors import GuardSyntaxError


class TestParseTerms:
    """Test each form of the condition grammar."""

    def test_bare_flag(self):
        assert parse_condition('debug') == [Flag('debug')]

    def test_key_value_comparison(self):
        assert parse_condition("feature == 'x'") == [KeyValue('feature', 'x')]

    def test_key_value_keyword_argument(self):
        assert parse_condition('feature="x"') == [KeyValue('feature', 'x')]

    def test_key_value_with_bare_name_value(self):
        assert parse_condition('feature == x') == [KeyValue('feature', 'x')]

    def test_not(self):
        assert parse_condition('not(debug)') == [Not(Flag('debug'))]

    def test_not_without_parentheses(self):
        assert parse_condition('not debug') == [Not(Flag('debug'))]

    def test_any_with_nested_not(self):
        assert parse_condition('any(a, not(b))') == [AnyOf((Flag('a'), Not(Flag('b'))))]

    def test_all_with_nested_any_and_keywords(self):
        result = parse_condition('all(a, any(b, feature="x"))')

        assert result == [AllOf((Flag('a'), AnyOf((Flag('b'), KeyValue('feature', 'x')))))]

    def test_empty_combinators_are_allowed(self):
        assert parse_condition('any(), all()') == [AnyOf(()), AllOf(())]

    def test_multiple_terms_keep_source_order(self):
        assert parse_condition("a, b, feature == 'x'") == [Flag('a'), Flag('b'), KeyValue('feature', 'x')]

    def test_not_of_key_value(self):
        assert parse_condition("not feature == 'x'") == [Not(KeyValue('feature', 'x'))]


class TestParseErrors:
    """Test that malformed conditions raise GuardSyntaxError."""

    @pytest.mark.parametrize(
        ('text', 'message'),
        [
            ('', 'expected at least one condition'),
            ('foo(a)', "unknown condition operator 'foo'"),
            ('not(a, b)', 'not() takes exactly one condition'),
            ('a < b', "only 'key == value' comparisons are allowed in a condition"),
            ('feature == 1', 'expected a string value'),
            ('1', 'unexpected Constant in condition'),
            ('a.b', 'unexpected Attribute in condition'),
            ('*flags', 'unpacking is not allowed in a condition'),
            ('**flags', 'unpacking is not allowed in a condition'),
            ('a == b == c', "only 'key == value' comparisons are allowed in a condition"),
            ('x.y(a)', 'expected any(...), all(...) or not(...)'),
        ],
    )
    def test_invalid_condition(self, text, message):
        with pytest.raises(GuardSyntaxError) as exc_info:
            parse_condition(text)

        assert exc_info.value.message == message

    def test_unbalanced_parentheses_is_a_syntax_error(self):
        with pytest.raises(GuardSyntaxError):
            parse_condition('all(a,')

    def test_error_points_at_offending_token(self):
        with pytest.raises(GuardSyntaxError) as exc_info:
            parse_condition('a, foo(b)')

        assert exc_info.value.lineno == 1
        assert exc_info.value.col_offset == 3

    def test_error_carries_filename(self):
        with pytest.raises(GuardSyntaxError) as exc_info:
            parse_condition('foo(a)', filename='guards.py')

        assert exc_info.value.filename == 'guards.py'
        assert str(exc_info.value).startswith('guards.py:1:1: ')


class TestParseConditionArgs:
    """Test parsing directly from a decorator call node."""

    def test_parses_decorator_call(self):
        call = ast.parse("abort_if(debug, feature == 'x')", mode='eval').body
        assert isinstance(call, ast.Call)

        assert parse_condition_args(call) == [Flag('debug'), KeyValue('feature', 'x')]

    def test_rejects_empty_call(self):
        call = ast.parse('abort_if()', mode='eval').body
        assert isinstance(call, ast.Call)

        with pytest.raises(GuardSyntaxError, match='expected at least one condition'):
            parse_condition_args(call, 'example.py')
