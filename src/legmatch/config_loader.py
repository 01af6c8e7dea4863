"""
Runtime configuration for the legmatch CLI.

Settings live in <config dir>/runtime_config.json under a "matcher" key. The
config dir is the --config-dir argument, else $LEGMATCH_CONFIG_DIR, else the
repository's config/ directory. Problems are printed as warnings and defaults
used, unless strict mode is on, in which case they raise.
"""

import json
import os
import sys
from pathlib import Path
from typing import Any, Optional, TypedDict

CONFIG_DIR_ENV = "LEGMATCH_CONFIG_DIR"
STRICT_ENV = "LEGMATCH_STRICT_CONFIG"
DEFAULT_CONFIG_DIR = Path(__file__).resolve().parent.parent.parent / "config"
RUNTIME_CONFIG_FILE = "runtime_config.json"
DEFAULT_CATALOG_FILE = "combinations.xml"
DEFAULT_MAX_LEGS = 8

_TRUTHY = {"1", "true", "yes", "on"}


class MatcherConfig(TypedDict):
    catalog_path: Path
    max_legs: Optional[int]


def _resolve_config_dir(config_dir: Optional[str]) -> Path:
    return Path(config_dir or os.getenv(CONFIG_DIR_ENV) or DEFAULT_CONFIG_DIR)


def _resolve_strict(strict: Optional[bool]) -> bool:
    if strict is None:
        return os.getenv(STRICT_ENV, "").lower() in _TRUTHY
    return strict


def _report(message: str, *, strict: bool, error: type[Exception] = ValueError) -> None:
    """Raise `error` in strict mode, otherwise print a warning to stderr."""
    if strict:
        raise error(message)
    print(f"Warning: {message}", file=sys.stderr)


def _load_json(path: Path, *, strict: bool) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        _report(f"{path} not found.", strict=strict, error=FileNotFoundError)
    except json.JSONDecodeError as exc:
        _report(f"{path} is malformed ({exc}).", strict=strict)
    return {}


def _ensure_dict(payload: Any, *, name: str, strict: bool) -> dict[str, Any]:
    if isinstance(payload, dict):
        return payload
    _report(f"Expected {name} to be an object.", strict=strict)
    return {}


def load_runtime_config(
    *, config_dir: Optional[str] = None, strict: Optional[bool] = None
) -> dict[str, Any]:
    strict_flag = _resolve_strict(strict)
    config_path = _resolve_config_dir(config_dir) / RUNTIME_CONFIG_FILE
    return _ensure_dict(
        _load_json(config_path, strict=strict_flag), name=RUNTIME_CONFIG_FILE, strict=strict_flag
    )


def _resolve_max_legs(value: Any, *, strict: bool) -> Optional[int]:
    # None disables the ceiling; bool is an int subclass and is rejected
    if value is None or (type(value) is int and value > 0):
        return value
    _report(
        f"Expected {RUNTIME_CONFIG_FILE}.matcher.max_legs to be a positive integer or null.",
        strict=strict,
    )
    return DEFAULT_MAX_LEGS


def load_matcher_config(
    *, config_dir: Optional[str] = None, strict: Optional[bool] = None
) -> MatcherConfig:
    """
    Resolve the catalog location and the leg-count ceiling.

    A relative catalog_file is taken relative to the config directory.
    """
    strict_flag = _resolve_strict(strict)
    base_dir = _resolve_config_dir(config_dir)
    runtime_config = load_runtime_config(config_dir=str(base_dir), strict=strict_flag)
    section = _ensure_dict(
        runtime_config.get("matcher", {}),
        name=f"{RUNTIME_CONFIG_FILE}.matcher",
        strict=strict_flag,
    )

    catalog_path = base_dir / section.get("catalog_file", DEFAULT_CATALOG_FILE)
    return {
        "catalog_path": catalog_path,
        "max_legs": _resolve_max_legs(section.get("max_legs", DEFAULT_MAX_LEGS), strict=strict_flag),
    }
