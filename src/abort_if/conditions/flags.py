"""Flag assignments and condition evaluation.

A :class:`FlagSet` is the host build's answer to "which flags are on". It is
the only place conditions are ever evaluated, and it happens while a module is
being built, never while the built code runs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from abort_if.conditions.expression import AllOf, AnyOf, Flag, KeyValue, Not


if TYPE_CHECKING:
    from collections.abc import Iterable

    from abort_if.conditions.expression import Condition


@dataclass(frozen=True)
class FlagSet:
    """An immutable flag assignment.

    Attributes:
        names: Bare flags that are set.
        pairs: ``(key, value)`` flags that are set. A key may appear with
            several values.

    Example:
        >>> flags = FlagSet.from_strings(['debug', 'feature=x'])
        >>> flags.evaluate(KeyValue('feature', 'x'))
        True
        >>> flags.evaluate(Flag('release'))
        False
    """

    names: frozenset[str] = field(default_factory=frozenset)
    pairs: frozenset[tuple[str, str]] = field(default_factory=frozenset)

    @classmethod
    def from_strings(cls, flags: Iterable[str]) -> FlagSet:
        """Build a flag set from ``name`` and ``key=value`` strings.

        Values may be quoted (``feature="x"``); surrounding quotes are dropped.
        Blank entries are ignored.
        """
        names: set[str] = set()
        pairs: set[tuple[str, str]] = set()
        for raw in flags:
            entry = raw.strip()
            if not entry:
                continue
            if '=' in entry:
                key, _, value = entry.partition('=')
                pairs.add((key.strip(), _unquote(value.strip())))
            else:
                names.add(entry)
        return cls(frozenset(names), frozenset(pairs))

    @classmethod
    def parse(cls, text: str | None) -> FlagSet:
        """Build a flag set from a comma-separated string (CLI form)."""
        if not text:
            return cls()
        return cls.from_strings(text.split(','))

    def evaluate(self, condition: Condition) -> bool:
        """Evaluate a condition against this flag assignment."""
        if isinstance(condition, Flag):
            return condition.name in self.names
        if isinstance(condition, KeyValue):
            return (condition.key, condition.value) in self.pairs
        if isinstance(condition, Not):
            return not self.evaluate(condition.term)
        if isinstance(condition, AnyOf):
            return any(self.evaluate(term) for term in condition.terms)
        if isinstance(condition, AllOf):
            return all(self.evaluate(term) for term in condition.terms)
        raise TypeError(f'Expected a condition, got {type(condition).__name__}')

    def to_strings(self) -> list[str]:
        """Return the flags in ``name`` / ``key=value`` form, sorted."""
        return sorted(self.names) + sorted(f'{key}={value}' for key, value in self.pairs)


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in '"\'':
        return value[1:-1]
    return value
