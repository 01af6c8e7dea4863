"""
Tests for loading the combination catalog from XML and JSON sources.
"""

import json
import logging

import pytest

from legmatch.catalog import Catalog
from legmatch.errors import CatalogError
from legmatch.models.template import CardinalityKind, Offset, TieGroup

VERTICAL = """
<combination name="Bull Call Spread" shortname="BCS" identifier="bull_call_spread">
  <legs cardinality="fixed">
    <leg type="C" ratio="+" strike_offset="1" expiration="a"/>
    <leg type="C" ratio="-" strike_offset="11" expiration="a"/>
  </legs>
</combination>
"""

LONG_OPTIONS = """
<combination name="Long Options" shortname="LOpt" identifier="long_options">
  <legs cardinality="more" mincount="2">
    <leg type="C" ratio="+"/>
  </legs>
</combination>
"""


class TestShippedCatalog:
    def test_loads_in_document_order(self, config_dir):
        catalog = Catalog()
        assert catalog.load(config_dir / "combinations.xml") is True
        assert catalog.is_loaded
        assert len(catalog) == 30
        assert catalog.names()[0] == "Long Stock"
        assert catalog.names()[-1] == "Short Options"

    def test_find_returns_template_metadata(self, shipped_catalog):
        template = shipped_catalog.find("Iron Condor")
        assert template is not None
        assert template.short_name == "IC"
        assert template.identifier == "iron_condor"
        assert [leg.strike for leg in template.legs] == [Offset(1), Offset(2), Offset(3), Offset(4)]

    def test_find_unknown_name(self, shipped_catalog):
        assert shipped_catalog.find("Jade Lizard") is None


class TestLoadXml:
    def test_decodes_cardinality_and_legs(self, write_catalog):
        catalog = Catalog.from_file(write_catalog(VERTICAL + LONG_OPTIONS))
        vertical, long_options = catalog.templates
        assert vertical.cardinality.kind is CardinalityKind.FIXED
        assert vertical.legs[0].expiration == TieGroup("a")
        assert long_options.cardinality.kind is CardinalityKind.AT_LEAST
        assert long_options.cardinality.min_count == 2

    def test_missing_file_reports_failure(self, tmp_path, caplog):
        catalog = Catalog()
        with caplog.at_level(logging.ERROR, logger="legmatch.catalog.catalog"):
            assert catalog.load(tmp_path / "nope.xml") is False
        assert not catalog.is_loaded
        assert len(catalog) == 0
        assert "not found" in caplog.text

    def test_unparseable_xml(self, tmp_path):
        path = tmp_path / "broken.xml"
        path.write_text("<combinations><combination>", encoding="utf-8")
        assert Catalog().load(path) is False

    def test_malformed_expiration_offset_fails_the_load(self, write_catalog):
        body = VERTICAL + """
        <combination name="Bad Calendar">
          <legs cardinality="fixed">
            <leg type="C" expiration_offset="xm"/>
          </legs>
        </combination>
        """
        catalog = Catalog()
        assert catalog.load(write_catalog(body)) is False
        assert len(catalog) == 0

    def test_failed_reload_keeps_previous_templates(self, write_catalog, tmp_path):
        catalog = Catalog()
        assert catalog.load(write_catalog(VERTICAL))
        assert catalog.load(tmp_path / "missing.xml") is False
        assert catalog.is_loaded
        assert catalog.names() == ["Bull Call Spread"]

    def test_from_file_raises(self, tmp_path):
        with pytest.raises(CatalogError):
            Catalog.from_file(tmp_path / "missing.xml")

    def test_non_combination_children_are_ignored(self, write_catalog):
        catalog = Catalog.from_file(write_catalog("<!-- note -->" + VERTICAL + "<comment/>"))
        assert catalog.names() == ["Bull Call Spread"]


class TestLoadJson:
    def test_json_matches_xml(self, tmp_path, write_catalog):
        payload = {
            "combinations": [
                {
                    "name": "Bull Call Spread",
                    "shortname": "BCS",
                    "identifier": "bull_call_spread",
                    "legs": {
                        "cardinality": "fixed",
                        "leg": [
                            {"type": "C", "ratio": "+", "strike_offset": "1", "expiration": "a"},
                            {"type": "C", "ratio": "-", "strike_offset": "11", "expiration": "a"},
                        ],
                    },
                }
            ]
        }
        path = tmp_path / "combinations.json"
        path.write_text(json.dumps(payload), encoding="utf-8")

        from_json = Catalog.from_file(path)
        from_xml = Catalog.from_file(write_catalog(VERTICAL))
        assert from_json.templates == from_xml.templates

    def test_json_without_combinations_list(self, tmp_path):
        path = tmp_path / "combinations.json"
        path.write_text('{"templates": []}', encoding="utf-8")
        assert Catalog().load(path) is False

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "combinations.json"
        path.write_text("{ not json", encoding="utf-8")
        with pytest.raises(CatalogError, match="Malformed"):
            Catalog.from_file(path)


def test_explicit_templates_count_as_loaded(shipped_catalog):
    catalog = Catalog(shipped_catalog.templates[:2])
    assert catalog.is_loaded
    assert list(catalog) == list(shipped_catalog.templates[:2])


def test_undecodable_json_reports_failure(tmp_path):
    path = tmp_path / "combinations.json"
    path.write_bytes(b'{"combinations": [{"name": "\xff\xfe"}]}')
    catalog = Catalog()
    assert catalog.load(path) is False
    assert not catalog.is_loaded
    with pytest.raises(CatalogError, match="Malformed"):
        Catalog.from_file(path)


def test_unreadable_file_reports_failure(tmp_path, monkeypatch):
    path = tmp_path / "combinations.json"
    path.write_text('{"combinations": []}', encoding="utf-8")

    def deny(*args, **kwargs):
        raise PermissionError("denied")

    monkeypatch.setattr(type(path), "open", deny)
    assert Catalog().load(path) is False
