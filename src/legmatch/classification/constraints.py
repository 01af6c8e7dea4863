"""
Constraint Checker

Pure predicates deciding whether a candidate assignment of legs to template
slots fits. An assignment is a sequence of (leg, slot) pairs; nothing here
mutates the legs or the templates.
"""

from collections.abc import Sequence
from datetime import date
from functools import cmp_to_key
from typing import Optional, Union

from ..models.leg import InstrumentType, Leg
from ..models.template import (
    CalendarDelta,
    CalendarUnit,
    ExpirationSpec,
    LegTemplate,
    Offset,
    RatioSpec,
    TieGroup,
)

Pair = tuple[Leg, LegTemplate]
OrderSpec = Union[ExpirationSpec, None]


def is_option(instrument: Optional[InstrumentType]) -> bool:
    return instrument is not None and instrument.is_option


def types_match(leg_type: InstrumentType, slot_type: Optional[InstrumentType]) -> bool:
    """Exact mode: the leg must carry the slot's type."""
    return slot_type is None or leg_type == slot_type


def types_compatible(leg_type: InstrumentType, slot_type: Optional[InstrumentType]) -> bool:
    """Relaxed mode: any two option-family types are interchangeable."""
    return types_match(leg_type, slot_type) or (is_option(leg_type) and is_option(slot_type))


def ratio_fits(ratio: float, spec: Optional[RatioSpec]) -> bool:
    return spec is None or spec.admits(ratio)


def compare_specs(a: OrderSpec, b: OrderSpec) -> int:
    """
    Three-way comparison of strike or expiration specs.

    Two labels compare lexically. Any other pairing compares numerically,
    with anything that is not an Offset counting as 0.
    """
    if isinstance(a, TieGroup) and isinstance(b, TieGroup):
        return (a.label > b.label) - (a.label < b.label)
    av = a.value if isinstance(a, Offset) else 0
    bv = b.value if isinstance(b, Offset) else 0
    return (av > bv) - (av < bv)


def _sorted_by(pairs: Sequence[Pair], attribute: str) -> list[Pair]:
    key = cmp_to_key(lambda p1, p2: compare_specs(getattr(p1[1], attribute), getattr(p2[1], attribute)))
    return sorted(pairs, key=key)


def check_type_and_ratio(pairs: Sequence[Pair]) -> bool:
    for leg, slot in pairs:
        if not types_match(leg.type, slot.type):
            return False
        if not ratio_fits(leg.ratio, slot.ratio):
            return False
    return True


def check_strike_order(pairs: Sequence[Pair]) -> bool:
    """
    Walk option slots in strike-spec order. Equal specs need equal strikes,
    otherwise strikes must strictly ascend.
    """
    option_pairs = [
        (leg, slot)
        for leg, slot in pairs
        if slot.strike is not None and is_option(slot.type or leg.type)
    ]
    ordered = _sorted_by(option_pairs, "strike")
    for (prev_leg, prev_slot), (leg, slot) in zip(ordered, ordered[1:]):
        if compare_specs(prev_slot.strike, slot.strike) == 0:
            if prev_leg.strike != leg.strike:
                return False
        elif prev_leg.strike >= leg.strike:
            return False
    return True


def calendar_difference(reference: date, other: date, unit: CalendarUnit) -> int:
    """Raw calendar-field difference; no duration arithmetic."""
    if unit is CalendarUnit.DAY:
        return other.day - reference.day
    if unit is CalendarUnit.YEAR:
        return other.year - reference.year
    return other.month - reference.month


def delta_matches(reference: date, other: date, delta: CalendarDelta) -> bool:
    expected = delta.count * 3 if delta.unit is CalendarUnit.QUARTER else delta.count
    return calendar_difference(reference, other, delta.unit) == expected


def check_expiration_order(pairs: Sequence[Pair]) -> bool:
    """
    Walk slots in expiration-spec order. Calendar deltas are measured against
    the first slot in that order; other neighbours follow the same
    equal-or-strictly-ascending rule as strikes.
    """
    ordered = _sorted_by([p for p in pairs if p[1].expiration is not None], "expiration")
    if not ordered:
        return True
    reference = ordered[0][0].expiration
    for (prev_leg, prev_slot), (leg, slot) in zip(ordered, ordered[1:]):
        if isinstance(slot.expiration, CalendarDelta):
            if not delta_matches(reference, leg.expiration, slot.expiration):
                return False
            continue
        if isinstance(prev_slot.expiration, CalendarDelta):
            continue
        if compare_specs(prev_slot.expiration, slot.expiration) == 0:
            if prev_leg.expiration != leg.expiration:
                return False
        elif prev_leg.expiration >= leg.expiration:
            return False
    return True


def check_all(pairs: Sequence[Pair]) -> bool:
    """Combined check used by the FIXED and MULTIPLE strategies."""
    return check_type_and_ratio(pairs) and check_strike_order(pairs) and check_expiration_order(pairs)
