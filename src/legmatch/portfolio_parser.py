"""
Portfolio Parser Module

Reads broker position exports and turns each row into a Leg. Column names
vary between brokers, so every row is first mapped onto a fixed set of keys.
"""

import csv
import logging
import re
from collections.abc import Iterator
from datetime import date, datetime
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .models.leg import Leg

logger = logging.getLogger(__name__)

EXPIRATION_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%m/%d/%y", "%b %d %Y", "%d %b %Y")

STOCK_TYPES = frozenset({"stock", "equity", "equities", "equity stock", "underlying"})
FUTURE_TYPES = frozenset({"future", "futures"})

_SIDE_NAMES = {"CALL": "Call", "C": "Call", "PUT": "Put", "P": "Put"}
_FUTURE_ROOT = re.compile(r"^(/[A-Z0-9]{1,3})[FGHJKMNQUVXZ]\d{1,2}$")
_EMPTY_MARKERS = ("", "--")


class PortfolioParser:
    """
    Maps position exports onto the keys Leg.from_row reads.
    """

    # Canonical key : accepted CSV headers, first match wins
    MAPPING = {
        "Symbol": ["Symbol", "Sym", "Ticker"],
        "Type": ["Type", "Asset Class", "Instrument Type"],
        "Quantity": ["Quantity", "Qty", "Position", "Size", "Ratio"],
        "Exp Date": ["Exp Date", "Expiration", "Expiry"],
        "Strike Price": ["Strike Price", "Strike"],
        "Call/Put": ["Call/Put", "Side", "C/P"],
    }

    @staticmethod
    def normalize_row(row: dict[str, str]) -> dict[str, str]:
        """
        Re-key one CSV row by MAPPING.

        Keys with no matching header come back as "". The option side is
        rewritten to "Call" or "Put" whatever its casing or abbreviation.
        """
        normalized = {
            key: next((row[alias] or "" for alias in aliases if alias in row), "")
            for key, aliases in PortfolioParser.MAPPING.items()
        }
        side = normalized["Call/Put"].strip().upper()
        if side in _SIDE_NAMES:
            normalized["Call/Put"] = _SIDE_NAMES[side]
        return normalized

    @staticmethod
    def _read_rows(file_path: str) -> Iterator[dict[str, str]]:
        with open(file_path, encoding="utf-8-sig", newline="") as f:
            yield from csv.DictReader(f)

    @staticmethod
    def parse(file_path: str) -> list[dict[str, str]]:
        """
        Read the CSV at file_path into normalized rows.

        Raises:
            FileNotFoundError: If the file does not exist.
            csv.Error: If the file is not valid CSV.
        """
        try:
            rows = [PortfolioParser.normalize_row(row) for row in PortfolioParser._read_rows(file_path)]
        except FileNotFoundError:
            logger.error("Portfolio file not found: %s", file_path)
            raise
        except csv.Error as e:
            logger.error("Malformed CSV in %s: %s", file_path, e)
            raise
        logger.debug("Read %d rows from %s", len(rows), file_path)
        return rows

    @staticmethod
    def parse_legs(file_path: str) -> list["Leg"]:
        """Parse a CSV export straight into Leg objects, skipping blank rows."""
        from .models.leg import Leg

        return [
            Leg.from_row(row)
            for row in PortfolioParser.parse(file_path)
            if any(value.strip() for value in row.values())
        ]


def parse_currency(value: Optional[str]) -> float:
    """
    Convert a broker number such as '$1,234.56', '(100.00)' or '12%' to float.

    Parenthesized values are negative. Empty, '--' and unparseable input give 0.0.
    """
    clean = (value or "").strip()
    if clean in _EMPTY_MARKERS:
        return 0.0

    sign = 1.0
    if clean[0] == "(" and clean[-1] == ")":
        sign = -1.0
        clean = clean[1:-1]

    clean = re.sub(r"[,$%\s]", "", clean)
    try:
        return sign * float(clean)
    except ValueError:
        return 0.0


def parse_expiration(value: Optional[str]) -> Optional[date]:
    """
    Convert an expiration string into a date.

    Accepts ISO dates as well as the US and month-name layouts brokers export.
    Returns None when the value is empty or in no known layout.
    """
    clean = (value or "").strip().replace(",", "")
    if clean in _EMPTY_MARKERS:
        return None
    for fmt in EXPIRATION_FORMATS:
        try:
            return datetime.strptime(clean, fmt).date()
        except ValueError:
            continue
    logger.warning("Unrecognized expiration date: %r", value)
    return None


def get_root_symbol(raw_symbol: Optional[str]) -> str:
    """
    Reduce a position symbol to the underlying it belongs to.

    'SPY 250117C00450000' -> 'SPY', 'MSFT_2025-01-17_400_P' -> 'MSFT',
    './CLG6' -> '/CL', '/ESZ24' -> '/ES'.
    """
    parts = (raw_symbol or "").strip().lstrip("$").split()
    if not parts:
        return ""

    token = parts[0].split("_")[0]
    if token.startswith("./"):
        token = token[1:]

    if token.startswith("/"):
        # Futures: drop the month code and year
        match = _FUTURE_ROOT.match(token.upper())
        return match.group(1) if match else token
    return token


def is_stock_type(type_str: Optional[str]) -> bool:
    """True if the position type names the underlying stock or equity."""
    return (type_str or "").strip().lower() in STOCK_TYPES


def is_future_type(type_str: Optional[str]) -> bool:
    return (type_str or "").strip().lower() in FUTURE_TYPES
