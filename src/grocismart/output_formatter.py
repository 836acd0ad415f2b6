"""Output formatting for CLI and programmatic use."""

import json
from datetime import date, datetime
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table


class JSONEncoder(json.JSONEncoder):
    """Custom JSON encoder for output."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, date):
            return obj.isoformat()
        return super().default(obj)


def format_quantity(quantity: Any) -> str:
    """Render 1.0 as '1' and 0.5 as '0.5'."""
    if isinstance(quantity, (int, float)):
        return f"{quantity:g}"
    return str(quantity)


class OutputFormatter:
    """Formats output for both Rich terminal and JSON modes."""

    def __init__(self, json_mode: bool = False):
        """Initialize formatter.

        Args:
            json_mode: If True, output JSON instead of Rich formatting
        """
        self.json_mode = json_mode
        self.console = Console()

    def output(self, data: dict[str, Any], message: str = "") -> None:
        """Output data in appropriate format.

        Args:
            data: Data to output
            message: Optional message for Rich mode
        """
        if self.json_mode:
            self._output_json(data)
        else:
            self._output_rich(data, message)

    def _output_json(self, data: dict[str, Any]) -> None:
        """Output as JSON to stdout."""
        print(json.dumps(data, cls=JSONEncoder, indent=2))

    def _output_rich(self, data: dict[str, Any], message: str) -> None:
        """Output with Rich formatting."""
        if message:
            self.console.print(f"[green]✓[/green] {message}")

        payload = data.get("data", {})
        if "list" in payload:
            self._render_grocery_list(data)
        elif "grocery_suggestions" in payload:
            self._render_grocery_suggestions(data)
        elif "item" in payload and isinstance(payload["item"], dict):
            self._render_item(data)
        elif "history" in payload:
            self._render_history(data)
        elif "pantry_item" in payload:
            self._render_pantry_item(data)
        elif "pantry" in payload:
            self._render_pantry(data)
        elif "expiring" in payload:
            self._render_expiring(data)
        elif "recipes" in payload:
            self._render_recipes(data)
        elif "recipe" in payload:
            self._render_recipe(data)
        elif "suggestions" in payload:
            self._render_suggestions(data)

    def _render_grocery_list(self, data: dict) -> None:
        """Render grocery list with Rich."""
        list_data = data["data"]["list"]
        items = list_data["items"]

        if not items:
            self.console.print("[dim]No items on the list[/dim]")
            return

        table = Table(title="Grocery List", show_header=True, header_style="bold cyan")
        table.add_column("ID", style="dim")
        table.add_column("Item", style="cyan", no_wrap=False)
        table.add_column("Qty", style="magenta", justify="right")
        table.add_column("Unit", style="green")
        table.add_column("Status", style="blue")

        for item in items:
            status_icon = "[green]✓[/green]" if item.get("purchased") else "[white]○[/white]"
            table.add_row(
                item["id"],
                item["name"],
                format_quantity(item.get("quantity", 1)),
                item.get("unit", ""),
                status_icon,
            )

        self.console.print(table)
        self.console.print(
            f"\nTotal items: {len(items)} ({list_data.get('purchased_count', 0)} purchased)"
        )

    def _render_item(self, data: dict) -> None:
        """Render a single grocery item with Rich."""
        item = data["data"]["item"]
        status = "purchased" if item.get("purchased") else "to buy"

        panel_content = f"""[bold]{item["name"]}[/bold]

ID: {item["id"]}
Quantity: {format_quantity(item.get("quantity", 1))} {item.get("unit", "")}
Status: {status}"""

        self.console.print(Panel(panel_content, title="Item Details", border_style="cyan"))

        pantry_item = data["data"].get("pantry_item")
        if "pantry_item" in data["data"]:
            if pantry_item:
                self.console.print(
                    f"Pantry now holds {format_quantity(pantry_item['quantity'])} "
                    f"{pantry_item['unit']} of {pantry_item['name']}"
                )
            else:
                self.console.print("[dim]No matching pantry stock[/dim]")

    def _render_history(self, data: dict) -> None:
        """Render purchase history."""
        history = data["data"]["history"]

        if not history:
            self.console.print("[dim]No purchases recorded yet[/dim]")
            return

        self.console.print("[bold]Past Purchases[/bold]")
        for name in history:
            self.console.print(f"  • {name}")

    def _pantry_table(self, items: list[dict], title: str | None = None) -> Table:
        table = Table(title=title, show_header=True, header_style="bold cyan")
        table.add_column("ID", style="dim")
        table.add_column("Item", style="cyan")
        table.add_column("Qty", justify="right")
        table.add_column("Unit", style="green")
        table.add_column("Expires", style="red")

        status_style = {
            "expired": "bold red",
            "expiring_soon": "yellow",
            "fresh": "green",
        }

        for item in items:
            expiry = item.get("expiryDate") or "N/A"
            days = item.get("days_until_expiry")
            if days is not None:
                if days < 0:
                    expiry = f"{expiry} (expired)"
                elif days == 0:
                    expiry = f"{expiry} (today)"
                else:
                    expiry = f"{expiry} ({days}d)"

            style = status_style.get(item.get("expiry_status", ""), "")
            table.add_row(
                item["id"],
                item["name"],
                format_quantity(item.get("quantity", 1)),
                item.get("unit", ""),
                f"[{style}]{expiry}[/{style}]" if style else expiry,
            )

        return table

    def _render_pantry(self, data: dict) -> None:
        """Render pantry list."""
        items = data["data"]["pantry"]

        if not items:
            self.console.print("[dim]Pantry is empty[/dim]")
            return

        self.console.print(self._pantry_table(items, title="My Pantry"))

    def _render_pantry_item(self, data: dict) -> None:
        """Render a single pantry item."""
        item = data["data"]["pantry_item"]

        panel_content = f"""[bold]{item["name"]}[/bold]

ID: {item["id"]}
Quantity: {format_quantity(item.get("quantity", 1))} {item.get("unit", "")}
Expires: {item.get("expiryDate") or "N/A"}"""

        self.console.print(Panel(panel_content, title="Pantry Item", border_style="green"))

    def _render_expiring(self, data: dict) -> None:
        """Render expiring items."""
        items = data["data"]["expiring"]
        days = data["data"].get("days", 30)

        if not items:
            self.console.print(f"[dim]No items expiring within {days} days[/dim]")
            return

        self.console.print(f"\n[bold red]Items Expiring Within {days} Days[/bold red]")
        self.console.print(self._pantry_table(items))

    def _render_grocery_suggestions(self, data: dict) -> None:
        """Render an AI-generated grocery list."""
        items = data["data"]["grocery_suggestions"]

        if not items:
            self.console.print("[dim]Nothing to buy, the pantry covers these meals[/dim]")
            return

        table = Table(title="Suggested Groceries", show_header=True, header_style="bold cyan")
        table.add_column("Item", style="cyan")
        table.add_column("Qty", justify="right")
        table.add_column("Unit", style="green")

        for item in items:
            table.add_row(item["name"], format_quantity(item["quantity"]), item["unit"])

        self.console.print(table)
        if data["data"].get("added"):
            self.console.print(f"Added {data['data']['added']} items to the grocery list")

    def _recipe_panel(self, recipe: dict, title: str) -> Panel:
        ingredients = "\n".join(f"• {line}" for line in recipe.get("ingredients", []))
        steps = "\n".join(
            f"{i}. {line}" for i, line in enumerate(recipe.get("instructions", []), start=1)
        )
        body = f"[bold]Ingredients[/bold]\n{ingredients}\n\n[bold]Instructions[/bold]\n{steps}"
        return Panel(body, title=title, border_style="magenta")

    def _render_recipes(self, data: dict) -> None:
        """Render suggested recipes."""
        recipes = data["data"]["recipes"]

        if not recipes:
            self.console.print("[dim]No recipes suggested[/dim]")
            return

        for recipe in recipes:
            self.console.print(self._recipe_panel(recipe, recipe["name"]))

    def _render_recipe(self, data: dict) -> None:
        """Render a single recipe."""
        recipe = data["data"]["recipe"]
        self.console.print(self._recipe_panel(recipe, recipe.get("name", "Recipe")))

    def _render_suggestions(self, data: dict) -> None:
        """Render smart grocery suggestions."""
        suggestions = data["data"]["suggestions"]

        if not suggestions:
            self.console.print("[dim]No suggestions at this time[/dim]")
            return

        self.console.print("[bold]Smart Suggestions[/bold]")
        for name in suggestions:
            self.console.print(f"  • {name}")
        if data["data"].get("added"):
            self.console.print(f"Added {data['data']['added']} items to the grocery list")

    def error(self, message: str, error_code: str | None = None) -> None:
        """Output error message.

        Args:
            message: Error message
            error_code: Optional error code
        """
        if self.json_mode:
            output = {"success": False, "error": message}
            if error_code:
                output["error_code"] = error_code
            print(json.dumps(output))
        else:
            self.console.print(f"[red]✗ Error:[/red] {message}")

    def success(self, message: str, data: dict | None = None) -> None:
        """Output success message.

        Args:
            message: Success message
            data: Optional data to include
        """
        if self.json_mode:
            output: dict[str, Any] = {"success": True, "message": message}
            if data:
                output["data"] = data
            print(json.dumps(output, cls=JSONEncoder))
        else:
            self.console.print(f"[green]✓[/green] {message}")

    def warning(self, message: str) -> None:
        """Output warning message.

        Args:
            message: Warning message
        """
        if self.json_mode:
            print(json.dumps({"warning": message}))
        else:
            self.console.print(f"[yellow]⚠[/yellow] {message}")
