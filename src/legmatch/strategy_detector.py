"""
Strategy Detector Module

Groups a flat portfolio into per-underlying leg sets and names each set with
the combination matcher.
"""

import logging
from collections import defaultdict
from typing import TypedDict

from .catalog import Catalog
from .classification import CombinationMatcher
from .models.leg import Leg
from .portfolio_parser import get_root_symbol

logger = logging.getLogger(__name__)


class ClassifiedGroup(TypedDict):
    """One underlying's legs and the combination they form."""

    root_symbol: str
    strategy_name: str
    short_name: str
    identifier: str
    legs: list[Leg]
    order: tuple[int, ...]


def _ensure_legs(legs: list[Leg]) -> list[Leg]:
    for idx, leg in enumerate(legs):
        if not isinstance(leg, Leg):
            raise TypeError(
                f"Strategy detection expects Leg objects; got {type(leg).__name__} "
                f"at index {idx}. Use PortfolioParser.parse_legs or Leg.from_row."
            )
    return list(legs)


def group_legs_by_root(legs: list[Leg]) -> dict[str, list[Leg]]:
    """Group legs by root symbol, keeping first-seen order. Legs without a symbol are dropped."""
    by_root: dict[str, list[Leg]] = defaultdict(list)
    for leg in _ensure_legs(legs):
        root = get_root_symbol(leg.symbol)
        if root:
            by_root[root].append(leg)
        else:
            logger.warning("Skipping leg without symbol: %s", leg)
    return dict(by_root)


def classify_portfolio_legs(
    legs: list[Leg], matcher: CombinationMatcher, catalog: Catalog
) -> list[ClassifiedGroup]:
    """
    Classify every root-symbol group of a portfolio.

    Args:
        legs: Flat list of portfolio legs.
        matcher: Matcher bound to `catalog`.
        catalog: Used to look up short names and identifiers.

    Returns:
        One ClassifiedGroup per root symbol, in first-seen order.
    """
    groups: list[ClassifiedGroup] = []
    for root, root_legs in group_legs_by_root(legs).items():
        result = matcher.classify(root_legs)
        template = catalog.find(result.name) if result.is_classified else None
        groups.append(
            {
                "root_symbol": root,
                "strategy_name": result.name,
                "short_name": template.short_name if template else "",
                "identifier": template.identifier if template else "",
                "legs": root_legs,
                "order": result.order,
            }
        )
    return groups
