"""
Combination Matcher

Finds the first catalog template that admits some assignment of the input
legs to its slots.
"""

import logging
from collections.abc import Iterator, Sequence
from itertools import permutations
from typing import NamedTuple, Optional

from ..catalog import Catalog
from ..config_loader import DEFAULT_MAX_LEGS
from ..errors import CatalogNotLoadedError
from ..models.leg import Leg
from ..models.template import CardinalityKind, CombinationTemplate
from .constraints import check_all, ratio_fits, types_compatible

logger = logging.getLogger(__name__)

UNCLASSIFIED = "Unclassified"


class ClassificationResult(NamedTuple):
    """
    `order[i]` is the 1-based sequence position assigned to input leg `i`.
    Empty when unclassified.
    """

    name: str
    order: tuple[int, ...]

    @property
    def is_classified(self) -> bool:
        return self.name != UNCLASSIFIED


UNCLASSIFIED_RESULT = ClassificationResult(UNCLASSIFIED, ())


def _order_from_arrangement(arrangement: Sequence[int]) -> tuple[int, ...]:
    """arrangement[k] is the input index placed at position k."""
    order = [0] * len(arrangement)
    for position, index in enumerate(arrangement):
        order[index] = position + 1
    return tuple(order)


def _arrangements(seed: Sequence[int]) -> Iterator[tuple[int, ...]]:
    """
    Every ordering of `seed`, lexicographic with respect to the seed order.
    The seed is already sorted in the desired total order, so this is the
    next-permutation walk starting from the smallest arrangement.
    """
    return permutations(seed)


class CombinationMatcher:
    """
    Classifies leg sets against a catalog.

    Stateless between calls: every search works on per-call index arrays, so
    one matcher may be shared across threads.
    """

    def __init__(self, catalog: Catalog, *, max_legs: Optional[int] = DEFAULT_MAX_LEGS):
        self.catalog = catalog
        self.max_legs = max_legs

    def classify(self, legs: Sequence[Leg]) -> ClassificationResult:
        """
        Return the name of the first template in catalog order that fits,
        together with the leg order it accepted.

        Raises:
            CatalogNotLoadedError: If the catalog never loaded.
        """
        if not self.catalog.is_loaded:
            raise CatalogNotLoadedError("Combination catalog is not loaded")
        if not legs:
            return UNCLASSIFIED_RESULT

        legs = list(legs)
        too_many = self.max_legs is not None and len(legs) > self.max_legs
        if too_many:
            logger.warning(
                "Leg count %d exceeds ceiling %d; skipping permutation searches",
                len(legs),
                self.max_legs,
            )

        for template in self.catalog:
            if not template.admits_count(len(legs)):
                continue
            kind = template.cardinality.kind
            if kind is CardinalityKind.AT_LEAST:
                order = self._fit_at_least(legs, template)
            elif too_many:
                continue
            elif kind is CardinalityKind.FIXED:
                order = self._fit_fixed(legs, template)
            else:
                order = self._fit_multiple(legs, template)

            if order is not None:
                logger.debug("Matched %s with order %s", template.name, order)
                return ClassificationResult(template.name, order)

        return UNCLASSIFIED_RESULT

    @staticmethod
    def _fit_fixed(legs: list[Leg], template: CombinationTemplate) -> Optional[tuple[int, ...]]:
        for arrangement in _arrangements(range(len(legs))):
            pairs = [(legs[index], slot) for index, slot in zip(arrangement, template.legs)]
            if check_all(pairs):
                return _order_from_arrangement(arrangement)
        return None

    @staticmethod
    def _fit_at_least(legs: list[Leg], template: CombinationTemplate) -> Optional[tuple[int, ...]]:
        slot = template.legs[0]
        for leg in legs:
            if not types_compatible(leg.type, slot.type):
                return None
            if not ratio_fits(leg.ratio, slot.ratio):
                return None
        return tuple(range(1, len(legs) + 1))

    @staticmethod
    def _fit_multiple(legs: list[Leg], template: CombinationTemplate) -> Optional[tuple[int, ...]]:
        unit = template.unit_size
        # Nearest expiration first, input position breaks ties
        seed = sorted(range(len(legs)), key=lambda index: (legs[index].expiration, index))
        for arrangement in _arrangements(seed):
            fits = all(
                check_all(
                    [(legs[index], slot) for index, slot in zip(arrangement[start : start + unit], template.legs)]
                )
                for start in range(0, len(arrangement), unit)
            )
            if fits:
                return _order_from_arrangement(arrangement)
        return None
