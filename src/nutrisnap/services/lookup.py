"""Ordered name lookup used for glycemic index and swap tables."""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Generic, Protocol, TypeVar

T = TypeVar("T")


class MatchStrategy(Protocol):
    """A single way of matching a food name against table keys."""

    def match(self, name: str, keys: Sequence[str]) -> int | None:
        """Return the index of the matching key, if any."""


class ExactMatch(MatchStrategy):
    """Matches keys equal to the name."""

    def match(self, name: str, keys: Sequence[str]) -> int | None:
        for index, key in enumerate(keys):
            if key == name:
                return index
        return None


class SubstringMatch(MatchStrategy):
    """Matches the first key contained in the name, or containing it."""

    def match(self, name: str, keys: Sequence[str]) -> int | None:
        for index, key in enumerate(keys):
            if key in name or name in key:
                return index
        return None


DEFAULT_STRATEGIES: tuple[MatchStrategy, ...] = (ExactMatch(), SubstringMatch())


@dataclass(frozen=True)
class NameLookup(Generic[T]):
    """Looks up a value by food name, trying each strategy in order."""

    table: tuple[tuple[str, T], ...]
    strategies: tuple[MatchStrategy, ...] = DEFAULT_STRATEGIES

    def find(self, name: str) -> T | None:
        """Return the value for a name, or None when nothing matches.

        Names are compared case-insensitively with surrounding whitespace
        removed. Blank names never match.
        """
        cleaned = name.strip().lower()
        if not cleaned:
            return None
        keys = [key for key, _value in self.table]
        for strategy in self.strategies:
            index = strategy.match(cleaned, keys)
            if index is not None:
                return self.table[index][1]
        return None

    def find_or_default(self, name: str, default: T) -> tuple[T, bool]:
        """Return the value for a name and whether it came from the table."""
        value = self.find(name)
        if value is None:
            return default, False
        return value, True
