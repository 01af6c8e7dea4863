"""
Leg Domain Model

A single instrument position as seen by the combination matcher.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional

from ..portfolio_parser import is_future_type, is_stock_type, parse_currency, parse_expiration


class InstrumentType(str, Enum):
    """Instrument-type tags, keyed by the single-character catalog code."""

    CALL = "C"
    PUT = "P"
    OTHER_OPTION = "O"
    FUTURE = "F"
    UNDERLYING = "U"
    UNKNOWN = "?"

    @property
    def is_option(self) -> bool:
        return self in _OPTION_FAMILY

    @classmethod
    def from_code(cls, code: str) -> "InstrumentType":
        """
        Resolve a catalog type attribute. Only the first character is significant.

        Raises:
            ValueError: If the code is empty or not a known instrument type.
        """
        if not code:
            raise ValueError("Empty instrument type code")
        head = code[0].upper()
        head = _CODE_ALIASES.get(head, head)
        try:
            return cls(head)
        except ValueError:
            raise ValueError(f"Unknown instrument type code: {code!r}") from None


_OPTION_FAMILY = frozenset({InstrumentType.CALL, InstrumentType.PUT, InstrumentType.OTHER_OPTION})

# Stock exports use "S"; the catalog spells the same thing "U".
_CODE_ALIASES = {"S": "U"}


@dataclass(frozen=True)
class Leg:
    """
    Represents one leg of a position.

    `ratio` is signed: positive for long, negative for short.
    """

    type: InstrumentType
    ratio: float
    strike: float = 0.0
    expiration: date = date.min
    symbol: str = ""

    @property
    def is_option(self) -> bool:
        return self.type.is_option

    @classmethod
    def from_row(cls, row: dict[str, str]) -> "Leg":
        """Factory method to create a Leg from a normalized CSV row."""
        return cls(
            type=_row_instrument_type(row),
            ratio=parse_currency(row.get("Quantity", "0")),
            strike=parse_currency(row.get("Strike Price")),
            expiration=parse_expiration(row.get("Exp Date")) or date.min,
            symbol=row.get("Symbol", ""),
        )


def _row_instrument_type(row: dict[str, str]) -> InstrumentType:
    asset_type: Optional[str] = row.get("Type")
    if is_stock_type(asset_type):
        return InstrumentType.UNDERLYING
    side = str(row.get("Call/Put") or "").strip().upper()
    if side in ("CALL", "C"):
        return InstrumentType.CALL
    if side in ("PUT", "P"):
        return InstrumentType.PUT
    if asset_type and "option" in asset_type.strip().lower():
        return InstrumentType.OTHER_OPTION
    if is_future_type(asset_type):
        return InstrumentType.FUTURE
    return InstrumentType.UNKNOWN
