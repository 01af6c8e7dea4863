from rich.console import Console

from legmatch.tui_renderer import LEGMATCH_THEME, TUIRenderer, fmt_leg


def make_report():
    return {
        "summary": {"legs": 3, "groups": 2, "unclassified": 1},
        "groups": [
            {
                "root_symbol": "SPY",
                "strategy_name": "Bull Call Spread",
                "short_name": "BCS",
                "order": [2, 1],
                "legs": [
                    {"type": "CALL", "ratio": -1.0, "strike": 460.0, "expiration": "2025-01-17"},
                    {"type": "CALL", "ratio": 1.0, "strike": 450.0, "expiration": "2025-01-17"},
                ],
            },
            {
                "root_symbol": "/ES",
                "strategy_name": "Unclassified",
                "short_name": "",
                "order": [],
                "legs": [{"type": "FUTURE", "ratio": -1.0, "strike": 0.0, "expiration": "2025-03-21"}],
            },
        ],
    }


def test_render_lists_groups_in_assigned_order():
    console = Console(record=True, width=120, theme=LEGMATCH_THEME)
    TUIRenderer(make_report(), console=console).render()
    text = console.export_text()

    assert "Bull Call Spread" in text
    assert "Unclassified" in text
    assert text.index("1. +1 CALL @450") < text.index("2. -1 CALL @460")
    assert "- -1 FUTURE 2025-03-21" in text


def test_fmt_leg_without_order():
    assert fmt_leg({"type": "PUT", "ratio": 2.0, "strike": 95.5}, None) == "- +2 PUT @95.5"
