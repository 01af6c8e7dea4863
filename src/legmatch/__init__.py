"""
Legmatch Combination Classification Engine
"""

from .catalog import Catalog
from .classification import UNCLASSIFIED, ClassificationResult, CombinationMatcher
from .models.leg import InstrumentType, Leg

__all__ = [
    "Catalog",
    "ClassificationResult",
    "CombinationMatcher",
    "InstrumentType",
    "Leg",
    "UNCLASSIFIED",
]

__version__ = "0.1.0"
