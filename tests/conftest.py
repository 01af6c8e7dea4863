"""
Shared pytest fixtures for test suite.
"""

import logging
from datetime import date
from pathlib import Path

import pytest

from legmatch.catalog import Catalog
from legmatch.models.leg import InstrumentType, Leg

REPO_CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"


@pytest.fixture
def make_leg():
    """
    Returns a factory for Leg objects.

    Usage:
        make_leg("C", 1, 100, "2024-01-19")
    """

    def _create(type_code="C", ratio=1.0, strike=100.0, expiration="2024-01-19", symbol="ABC"):
        return Leg(
            type=InstrumentType(type_code),
            ratio=float(ratio),
            strike=float(strike),
            expiration=date.fromisoformat(expiration),
            symbol=symbol,
        )

    return _create


@pytest.fixture
def config_dir():
    """Path to the configuration shipped with the repository."""
    return REPO_CONFIG_DIR


@pytest.fixture
def shipped_catalog(config_dir):
    """The sample combination catalog, loaded."""
    return Catalog.from_file(config_dir / "combinations.xml")


@pytest.fixture
def write_catalog(tmp_path):
    """
    Returns a function writing an XML catalog body into a temp file.

    The body is wrapped in a <combinations> root element.
    """

    def _write(body, name="combinations.xml"):
        path = tmp_path / name
        path.write_text(f"<combinations>{body}</combinations>", encoding="utf-8")
        return path

    return _write


@pytest.fixture
def restore_logging():
    """Undo setup_logging() side effects on the root and audit loggers."""
    root = logging.getLogger()
    audit = logging.getLogger("legmatch.audit")
    engine = logging.getLogger("legmatch.classification")
    saved = (list(root.handlers), root.level, list(audit.handlers), audit.propagate)
    engine_level = engine.level
    yield
    for logger, handlers in ((root, saved[0]), (audit, saved[2])):
        for handler in list(logger.handlers):
            if handler not in handlers:
                logger.removeHandler(handler)
                handler.close()
        for handler in handlers:
            if handler not in logger.handlers:
                logger.addHandler(handler)
    root.setLevel(saved[1])
    audit.propagate = saved[3]
    engine.setLevel(engine_level)
