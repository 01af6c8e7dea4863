"""
Combination Template Model

Immutable representation of one catalog entry. Each per-leg constraint is a
tagged variant: a slot field holds exactly one spec class, or None when the
catalog leaves that constraint unspecified.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from .leg import InstrumentType


class Sign(Enum):
    POSITIVE = "+"
    NEGATIVE = "-"


@dataclass(frozen=True)
class ExactRatio:
    """Leg ratio must equal `value` exactly."""

    value: float

    def admits(self, ratio: float) -> bool:
        return ratio == self.value


@dataclass(frozen=True)
class SignRatio:
    """Leg ratio must carry `sign`. Zero satisfies either sign."""

    sign: Sign

    def admits(self, ratio: float) -> bool:
        if self.sign is Sign.POSITIVE:
            return ratio >= 0
        return ratio <= 0


@dataclass(frozen=True)
class TieGroup:
    """Symbolic label: slots sharing a label share the actual value."""

    label: str


@dataclass(frozen=True)
class Offset:
    """Signed ordering offset: larger offsets need strictly larger actual values."""

    value: int


class CalendarUnit(Enum):
    DAY = "d"
    MONTH = "m"
    QUARTER = "q"
    YEAR = "y"


@dataclass(frozen=True)
class CalendarDelta:
    """Expiration must sit `count` calendar units after the group's reference leg."""

    count: int
    unit: CalendarUnit


RatioSpec = Union[ExactRatio, SignRatio]
StrikeSpec = Union[TieGroup, Offset]
ExpirationSpec = Union[TieGroup, Offset, CalendarDelta]


@dataclass(frozen=True)
class LegTemplate:
    """One leg slot of a combination template."""

    type: Optional[InstrumentType] = None
    ratio: Optional[RatioSpec] = None
    strike: Optional[StrikeSpec] = None
    expiration: Optional[ExpirationSpec] = None


class CardinalityKind(Enum):
    FIXED = "fixed"
    AT_LEAST = "more"
    MULTIPLE = "multiple"


@dataclass(frozen=True)
class Cardinality:
    kind: CardinalityKind
    min_count: int = 0

    @classmethod
    def fixed(cls) -> "Cardinality":
        return cls(CardinalityKind.FIXED)

    @classmethod
    def at_least(cls, min_count: int) -> "Cardinality":
        return cls(CardinalityKind.AT_LEAST, min_count)

    @classmethod
    def multiple(cls) -> "Cardinality":
        return cls(CardinalityKind.MULTIPLE)


@dataclass(frozen=True)
class CombinationTemplate:
    """
    A named multi-leg strategy pattern.

    For FIXED and MULTIPLE, `legs` is one unit of the pattern. For AT_LEAST it
    holds the single slot every input leg is checked against.
    """

    name: str
    cardinality: Cardinality
    legs: tuple[LegTemplate, ...]
    short_name: str = ""
    identifier: str = ""

    def __post_init__(self) -> None:
        if self.cardinality.kind is CardinalityKind.AT_LEAST:
            if len(self.legs) != 1:
                raise ValueError(f"{self.name!r}: AT_LEAST templates take exactly one leg slot")
        elif not self.legs:
            raise ValueError(f"{self.name!r}: template has no leg slots")

    @property
    def unit_size(self) -> int:
        return len(self.legs)

    def admits_count(self, count: int) -> bool:
        """Cheap leg-count gate applied before any search."""
        kind = self.cardinality.kind
        if kind is CardinalityKind.FIXED:
            return count == self.unit_size
        if kind is CardinalityKind.MULTIPLE:
            return count > 0 and count % self.unit_size == 0
        return count >= self.cardinality.min_count
