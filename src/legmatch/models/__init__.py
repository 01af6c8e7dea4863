"""
Legmatch Domain Models

Export core domain objects for external consumption.
"""

from typing import TYPE_CHECKING

__all__ = ["InstrumentType", "Leg", "LegTemplate", "CombinationTemplate"]


if TYPE_CHECKING:
    from .leg import InstrumentType, Leg
    from .template import CombinationTemplate, LegTemplate


def __getattr__(name: str) -> type:
    if name in ("InstrumentType", "Leg"):
        from . import leg

        return getattr(leg, name)
    if name in ("LegTemplate", "CombinationTemplate"):
        from . import template

        return getattr(template, name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
