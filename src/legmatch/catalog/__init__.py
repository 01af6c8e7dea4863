"""
Catalog Submodule

Loads the declarative combination rule set into template models.
"""

from .catalog import Catalog

__all__ = ["Catalog"]
