"""Units - the fixed, ordered set of work a Run executes.

A ``Unit`` is an immutable identifier (a target address) together with its
position in the set. Positions are what keep collect-all results
index-stable: every outcome carries the index of the unit that produced it.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass

from scatter.core.errors import DuplicateUnitError


@dataclass(frozen=True, slots=True)
class Unit:
    """One independently executable piece of work."""

    target: str
    index: int

    def __str__(self) -> str:
        return self.target


class UnitSet(Sequence[Unit]):
    """Immutable, ordered collection of uniquely named units.

    Example:
        >>> units = UnitSet.of(["http://a", "http://b"])
        >>> [u.index for u in units]
        [0, 1]
        >>> units.targets
        ('http://a', 'http://b')
    """

    __slots__ = ("_units",)

    def __init__(self, units: Iterable[Unit]) -> None:
        items = tuple(units)
        seen: set[str] = set()
        for position, unit in enumerate(items):
            if unit.target in seen:
                raise DuplicateUnitError(unit.target)
            if unit.index != position:
                raise ValueError(
                    f"Unit {unit.target!r} has index {unit.index}, expected {position}"
                )
            seen.add(unit.target)
        self._units = items

    @classmethod
    def of(cls, targets: Iterable[str]) -> UnitSet:
        """Build a unit set from target strings, numbering them in order."""
        return cls(Unit(target=t, index=i) for i, t in enumerate(targets))

    @property
    def targets(self) -> tuple[str, ...]:
        return tuple(u.target for u in self._units)

    def __getitem__(self, index):  # type: ignore[override]
        return self._units[index]

    def __len__(self) -> int:
        return len(self._units)

    def __iter__(self) -> Iterator[Unit]:
        return iter(self._units)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, UnitSet):
            return self._units == other._units
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._units)

    def __repr__(self) -> str:
        return f"UnitSet({list(self.targets)!r})"


__all__ = ["Unit", "UnitSet"]
