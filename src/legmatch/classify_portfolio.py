import argparse
import csv
import json
import logging
import sys
from datetime import date
from typing import Any, Optional

from .catalog import Catalog
from .classification import UNCLASSIFIED, CombinationMatcher
from .config_loader import load_matcher_config
from .errors import build_error, error_lines
from .logging_config import audit_log, generate_session_id, set_session_id, setup_logging
from .models.leg import Leg
from .portfolio_parser import PortfolioParser
from .strategy_detector import classify_portfolio_legs

logger = logging.getLogger(__name__)


def _leg_to_dict(leg: Leg) -> dict[str, Any]:
    return {
        "symbol": leg.symbol,
        "type": leg.type.name,
        "ratio": leg.ratio,
        "strike": leg.strike,
        "expiration": leg.expiration.isoformat() if leg.expiration != date.min else None,
    }


def classify_portfolio(
    file_path: str,
    *,
    config_dir: Optional[str] = None,
    catalog_path: Optional[str] = None,
    strict: Optional[bool] = None,
) -> dict[str, Any]:
    """
    Main entry point for portfolio classification.

    Returns a JSON-ready report, or an error payload with an "error" key.
    """
    matcher_config = load_matcher_config(config_dir=config_dir, strict=strict)
    source = catalog_path or matcher_config["catalog_path"]

    # Step 1: Load the combination catalog
    catalog = Catalog()
    if not catalog.load(source):
        return build_error(
            "Combination catalog could not be loaded.",
            details=str(source),
            hint="Check the catalog path and the log for the parse error.",
        )

    # Step 2: Parse CSV into legs
    try:
        legs = PortfolioParser.parse_legs(file_path)
    except (OSError, csv.Error) as exc:
        return build_error("Could not read portfolio file.", details=str(exc))
    if not legs:
        return build_error("No positions found in CSV.", details=file_path)

    # Step 3: Classify each underlying
    matcher = CombinationMatcher(catalog, max_legs=matcher_config["max_legs"])
    groups = classify_portfolio_legs(legs, matcher, catalog)
    unclassified = sum(1 for group in groups if group["strategy_name"] == UNCLASSIFIED)

    audit_log(
        "Classification completed",
        file=file_path,
        groups=len(groups),
        unclassified=unclassified,
    )

    return {
        "summary": {
            "legs": len(legs),
            "groups": len(groups),
            "unclassified": unclassified,
            "catalog_size": len(catalog),
        },
        "groups": [
            {
                "root_symbol": group["root_symbol"],
                "strategy_name": group["strategy_name"],
                "short_name": group["short_name"],
                "identifier": group["identifier"],
                "order": list(group["order"]),
                "legs": [_leg_to_dict(leg) for leg in group["legs"]],
            }
            for group in groups
        ],
    }


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        description="Classify portfolio positions into named multi-leg combinations."
    )
    parser.add_argument("file_path", type=str, help="Path to the portfolio CSV file.")
    parser.add_argument("--config-dir", help="Directory holding runtime_config.json.")
    parser.add_argument("--catalog", help="Combination catalog file (XML or JSON).")
    parser.add_argument("--json", action="store_true", help="Print the report as JSON.")
    parser.add_argument("--strict", action="store_true", default=None, help="Fail on config problems.")
    parser.add_argument("--log-level", default="WARNING", help="Console log level.")
    args = parser.parse_args(argv)

    setup_logging(console_level=args.log_level)
    set_session_id(generate_session_id())

    report = classify_portfolio(
        args.file_path,
        config_dir=args.config_dir,
        catalog_path=args.catalog,
        strict=args.strict,
    )

    if "error" in report:
        if args.json:
            print(json.dumps(report, indent=2), file=sys.stderr)
        else:
            print("\n".join(error_lines(report)), file=sys.stderr)
        sys.exit(1)

    if args.json:
        print(json.dumps(report, indent=2))
        return

    from .tui_renderer import TUIRenderer

    TUIRenderer(report).render()


if __name__ == "__main__":
    main()
