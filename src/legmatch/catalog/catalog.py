"""
Combination Catalog

Ordered, read-only collection of combination templates. Catalog order is the
priority order used when more than one template could match.
"""

import json
import logging
import xml.etree.ElementTree as ET
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any, Optional, Union

from ..errors import CatalogError
from ..models.template import CombinationTemplate
from .decoder import decode_combination

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class Catalog:
    """
    Holds the combination templates for the life of the process.

    A catalog built from an explicit template sequence is ready immediately.
    An empty catalog becomes ready after a successful `load`.
    """

    def __init__(self, templates: Optional[Iterable[CombinationTemplate]] = None):
        self._templates: tuple[CombinationTemplate, ...] = ()
        self._loaded = False
        if templates is not None:
            self._templates = tuple(templates)
            self._loaded = True

    @classmethod
    def from_file(cls, source: PathLike) -> "Catalog":
        """
        Build a catalog from a rule file.

        Raises:
            CatalogError: If the file is missing or malformed.
        """
        return cls(_read_templates(Path(source)))

    def load(self, source: PathLike) -> bool:
        """
        Replace this catalog's contents with the templates in `source`.

        Returns False, leaving the catalog untouched, if the file is missing
        or malformed.
        """
        path = Path(source)
        try:
            templates = _read_templates(path)
        except CatalogError as exc:
            logger.error("Failed to load combination catalog %s: %s", path, exc)
            return False
        self._templates = tuple(templates)
        self._loaded = True
        logger.info("Loaded %d combinations from %s", len(self._templates), path)
        return True

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def templates(self) -> tuple[CombinationTemplate, ...]:
        return self._templates

    def names(self) -> list[str]:
        return [template.name for template in self._templates]

    def find(self, name: str) -> Optional[CombinationTemplate]:
        """Return the first template called `name`, or None."""
        for template in self._templates:
            if template.name == name:
                return template
        return None

    def __iter__(self) -> Iterator[CombinationTemplate]:
        return iter(self._templates)

    def __len__(self) -> int:
        return len(self._templates)

    def __repr__(self) -> str:
        return f"Catalog({len(self._templates)} templates, loaded={self._loaded})"


def _read_templates(path: Path) -> list[CombinationTemplate]:
    if not path.is_file():
        raise CatalogError(f"Catalog file not found: {path}")
    if path.suffix.lower() == ".json":
        return _read_json(path)
    return _read_xml(path)


def _read_xml(path: Path) -> list[CombinationTemplate]:
    try:
        root = ET.parse(path).getroot()
    except ET.ParseError as exc:
        raise CatalogError(f"Malformed catalog XML {path}: {exc}") from exc
    except OSError as exc:
        raise CatalogError(f"Cannot read catalog {path}: {exc}") from exc

    templates = []
    for node in root.findall("combination"):
        legs_node = node.find("legs")
        legs_attributes = legs_node.attrib if legs_node is not None else None
        leg_records = [leg.attrib for leg in legs_node.findall("leg")] if legs_node is not None else []
        templates.append(decode_combination(node.attrib, legs_attributes, leg_records))
    return templates


def _read_json(path: Path) -> list[CombinationTemplate]:
    try:
        with path.open("r", encoding="utf-8") as f:
            payload = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise CatalogError(f"Malformed catalog JSON {path}: {exc}") from exc
    except OSError as exc:
        raise CatalogError(f"Cannot read catalog {path}: {exc}") from exc

    records = payload.get("combinations") if isinstance(payload, dict) else None
    if not isinstance(records, list):
        raise CatalogError(f"Expected a 'combinations' list in {path}")

    templates = []
    for record in records:
        if not isinstance(record, dict):
            raise CatalogError(f"Expected combination objects in {path}")
        legs_block = record.get("legs")
        if legs_block is not None and not isinstance(legs_block, dict):
            raise CatalogError(f"Expected 'legs' to be an object in {record.get('name')!r}")
        leg_records: list[dict[str, Any]] = (legs_block or {}).get("leg", [])
        if not isinstance(leg_records, list) or not all(isinstance(r, dict) for r in leg_records):
            raise CatalogError(f"Expected a list of leg objects in {record.get('name')!r}")
        legs_attributes = None
        if legs_block is not None:
            legs_attributes = {k: v for k, v in legs_block.items() if k != "leg"}
        templates.append(decode_combination(record, legs_attributes, leg_records))
    return templates
