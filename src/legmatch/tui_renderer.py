from typing import Any, Optional

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

from .classification import UNCLASSIFIED

LEGMATCH_THEME = Theme(
    {
        "header": "bold blue",
        "matched": "bold green",
        "unmatched": "bold yellow",
        "dim": "dim white",
        "label": "dim cyan",
        "value": "bold white",
    }
)


class TUIRenderer:
    def __init__(self, data: dict[str, Any], *, console: Optional[Console] = None):
        self.data = data
        self.console = console or Console(theme=LEGMATCH_THEME)

    def render(self) -> None:
        """Main entry point for TUI rendering."""
        self.render_summary()
        self.render_groups()

    def render_summary(self) -> None:
        summary = self.data.get("summary", {})
        grid = Table.grid(padding=(0, 4))
        grid.add_column()
        grid.add_column()
        grid.add_row(
            Text.assemble(("Groups: ", "label"), (str(summary.get("groups", 0)), "value")),
            Text.assemble(("Unclassified: ", "label"), (str(summary.get("unclassified", 0)), "value")),
        )
        self.console.print(grid)

    def render_groups(self) -> None:
        table = Table(title="[header]Combinations[/header]", box=box.ROUNDED, expand=False)
        table.add_column("Root", style="value")
        table.add_column("Strategy")
        table.add_column("Short", style="dim")
        table.add_column("Legs", justify="left")

        for group in self.data.get("groups", []):
            name = group.get("strategy_name", UNCLASSIFIED)
            style = "unmatched" if name == UNCLASSIFIED else "matched"
            table.add_row(
                group.get("root_symbol", ""),
                Text(name, style=style),
                group.get("short_name", ""),
                "\n".join(fmt_leg(leg, pos) for leg, pos in _legs_with_order(group)),
            )
        self.console.print(table)


def _legs_with_order(group: dict[str, Any]) -> list[tuple[dict[str, Any], Optional[int]]]:
    legs = group.get("legs", [])
    order = group.get("order") or []
    if len(order) != len(legs):
        return [(leg, None) for leg in legs]
    return sorted(zip(legs, order), key=lambda item: item[1])


# --- Formatting Helpers ---


def fmt_leg(leg: dict[str, Any], position: Optional[int]) -> str:
    prefix = f"{position}. " if position is not None else "- "
    ratio = leg.get("ratio", 0.0)
    parts = [f"{ratio:+g}", str(leg.get("type", "?"))]
    if leg.get("strike"):
        parts.append(f"@{leg['strike']:g}")
    if leg.get("expiration"):
        parts.append(str(leg["expiration"]))
    return prefix + " ".join(parts)
