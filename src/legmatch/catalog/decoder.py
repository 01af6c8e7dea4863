"""
Catalog Attribute Decoder

Turns the catalog's compact per-attribute encodings into template specs.
Both the XML and the JSON front-ends hand this module plain attribute
mappings, so the decoding rules live in exactly one place.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Optional

from ..errors import CatalogError
from ..models.leg import InstrumentType
from ..models.template import (
    CalendarDelta,
    CalendarUnit,
    Cardinality,
    CardinalityKind,
    CombinationTemplate,
    ExactRatio,
    ExpirationSpec,
    LegTemplate,
    Offset,
    RatioSpec,
    Sign,
    SignRatio,
    StrikeSpec,
    TieGroup,
)

logger = logging.getLogger(__name__)

_CALENDAR_SUFFIXES = {unit.value: unit for unit in CalendarUnit}


def decode_ratio(raw: str) -> RatioSpec:
    """A lone '+' or '-' is a sign constraint; anything else is an exact ratio."""
    if raw in ("+", "-"):
        return SignRatio(Sign(raw))
    try:
        return ExactRatio(float(raw))
    except ValueError:
        raise CatalogError(f"Invalid ratio {raw!r}") from None


def decode_label(raw: str, attribute: str) -> TieGroup:
    if not raw:
        raise CatalogError(f"Empty {attribute} attribute")
    return TieGroup(raw[0])


def decode_length_offset(raw: str, attribute: str) -> Offset:
    """
    The offset magnitude is the literal's length, sign character included.

    '1' -> 1, '11' -> 2, '-1' -> -2.
    """
    if not raw:
        raise CatalogError(f"Empty {attribute} attribute")
    magnitude = len(raw)
    return Offset(-magnitude if raw.startswith("-") else magnitude)


def decode_strike_offset(raw: str) -> StrikeSpec:
    return decode_length_offset(raw, "strike_offset")


def decode_expiration_offset(raw: str) -> ExpirationSpec:
    """
    A trailing d/m/q/y makes a relative calendar delta whose count is the
    leading digits (1 when there are none). Otherwise the length rule applies.
    """
    if not raw:
        raise CatalogError("Empty expiration_offset attribute")
    unit = _CALENDAR_SUFFIXES.get(raw[-1])
    if unit is None:
        return decode_length_offset(raw, "expiration_offset")
    prefix = raw[:-1]
    if not prefix:
        return CalendarDelta(1, unit)
    try:
        count = int(prefix)
    except ValueError:
        raise CatalogError(f"Invalid expiration_offset count in {raw!r}") from None
    return CalendarDelta(count, unit)


def decode_leg(attributes: Mapping[str, Any]) -> LegTemplate:
    """
    Decode one leg record. Attributes are applied in document order, so a
    later strike/strike_offset (or expiration/expiration_offset) wins.
    """
    instrument: Optional[InstrumentType] = None
    ratio: Optional[RatioSpec] = None
    strike: Optional[StrikeSpec] = None
    expiration: Optional[ExpirationSpec] = None

    for name, value in attributes.items():
        raw = str(value)
        if name == "type":
            try:
                instrument = InstrumentType.from_code(raw)
            except ValueError as exc:
                raise CatalogError(str(exc)) from None
        elif name == "ratio":
            ratio = decode_ratio(raw)
        elif name == "strike":
            strike = decode_label(raw, "strike")
        elif name == "strike_offset":
            strike = decode_strike_offset(raw)
        elif name == "expiration":
            expiration = decode_label(raw, "expiration")
        elif name == "expiration_offset":
            expiration = decode_expiration_offset(raw)
        else:
            logger.debug("Ignoring unknown leg attribute %r", name)

    return LegTemplate(type=instrument, ratio=ratio, strike=strike, expiration=expiration)


def decode_cardinality(attributes: Mapping[str, Any]) -> Cardinality:
    raw_kind = str(attributes.get("cardinality", ""))
    try:
        kind = CardinalityKind(raw_kind)
    except ValueError:
        raise CatalogError(f"Unknown cardinality {raw_kind!r}") from None

    if kind is not CardinalityKind.AT_LEAST:
        return Cardinality(kind)

    raw_min = attributes.get("mincount", 0)
    try:
        return Cardinality.at_least(int(raw_min))
    except (TypeError, ValueError):
        raise CatalogError(f"Invalid mincount {raw_min!r}") from None


def decode_combination(
    attributes: Mapping[str, Any],
    legs_attributes: Optional[Mapping[str, Any]],
    leg_records: Iterable[Mapping[str, Any]],
) -> CombinationTemplate:
    """
    Build a template from a combination record, its legs block, and the
    ordered leg records inside that block.
    """
    name = str(attributes.get("name", ""))
    if legs_attributes is None:
        raise CatalogError(f"Combination {name!r} has no legs block")

    cardinality = decode_cardinality(legs_attributes)
    try:
        legs = tuple(decode_leg(record) for record in leg_records)
    except CatalogError as exc:
        raise CatalogError(f"Combination {name!r}: {exc}") from exc

    if cardinality.kind is CardinalityKind.AT_LEAST:
        if len(legs) != 1:
            raise CatalogError(
                f"Combination {name!r}: 'more' cardinality needs exactly one leg, got {len(legs)}"
            )
    elif not legs:
        raise CatalogError(f"Combination {name!r} has no legs")

    return CombinationTemplate(
        name=name,
        cardinality=cardinality,
        legs=legs,
        short_name=str(attributes.get("shortname", "")),
        identifier=str(attributes.get("identifier", "")),
    )
