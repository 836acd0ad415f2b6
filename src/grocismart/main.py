"""CLI entry point for GrociSmart."""

import asyncio
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError

from .assistant import (
    AssistantError,
    GroceryAssistant,
    build_expiring_request,
    build_meal_plan_request,
    grocery_list_to_actions,
    split_lines,
    suggestions_to_actions,
)
from .config import ConfigManager
from .data_store import BackendType, create_state_store
from .list_manager import AmbiguousIdError, ItemNotFoundError, ListManager
from .logging_config import configure_logging
from .models import FindRecipeInput, PantryItem, SmartSuggestionsInput
from .output_formatter import OutputFormatter
from .pantry_manager import PantryManager
from .store import StateStore

app = typer.Typer(
    name="groci",
    help="Grocery list and pantry tracker with AI recipe suggestions",
    no_args_is_help=True,
)

# Global state for formatter and config (set by callback)
formatter: OutputFormatter = OutputFormatter()
config: ConfigManager | None = None
state_store: StateStore | None = None
list_manager: ListManager | None = None
pantry_manager: PantryManager | None = None
assistant: GroceryAssistant | None = None


class ListFilter(str, Enum):
    """Grocery list filter."""

    ALL = "all"
    TO_BUY = "to_buy"
    PURCHASED = "purchased"


def get_config() -> ConfigManager:
    """Get or create ConfigManager instance."""
    global config
    if config is None:
        config = ConfigManager()
    return config


def get_state_store() -> StateStore:
    """Get or create the StateStore using config values."""
    global state_store
    if state_store is None:
        cfg = get_config()
        persistence = create_state_store(
            backend=BackendType(cfg.data.backend), data_dir=cfg.data.storage_dir
        )
        state_store = StateStore(persistence)
    return state_store


def get_list_manager() -> ListManager:
    """Get or create ListManager instance."""
    global list_manager
    if list_manager is None:
        list_manager = ListManager(get_state_store())
    return list_manager


def get_pantry_manager() -> PantryManager:
    """Get or create PantryManager instance."""
    global pantry_manager
    if pantry_manager is None:
        pantry_manager = PantryManager(get_state_store())
    return pantry_manager


def get_assistant() -> GroceryAssistant:
    """Get or create the AI assistant for the configured model."""
    global assistant
    if assistant is None:
        assistant = GroceryAssistant(model=get_config().ai.model)
    return assistant


def _pantry_dict(item: PantryItem, today: date | None = None) -> dict:
    data = item.model_dump(mode="json", by_alias=True)
    data["expiry_status"] = item.expiry_status(today).value
    data["days_until_expiry"] = item.days_until_expiry(today)
    return data


@app.callback()
def main(
    json_output: Annotated[
        bool, typer.Option("--json", help="Output as JSON for programmatic use")
    ] = False,
    data_dir: Annotated[Path | None, typer.Option("--data-dir", help="Data directory path")] = None,
    log_level: Annotated[
        str | None, typer.Option("--log-level", help="Log level (DEBUG, INFO, WARNING, ...)")
    ] = None,
) -> None:
    """GrociSmart CLI - Track groceries and pantry stock."""
    global formatter, config, state_store, list_manager, pantry_manager

    formatter = OutputFormatter(json_mode=json_output)

    # Load config early
    config = ConfigManager()
    configure_logging(log_level or config.logging.level)

    # CLI --data-dir overrides config, which overrides default
    effective_data_dir = data_dir if data_dir else config.data.storage_dir
    backend = BackendType(config.data.backend)

    persistence = create_state_store(backend=backend, data_dir=effective_data_dir)
    state_store = StateStore(persistence)
    list_manager = ListManager(state_store)
    pantry_manager = PantryManager(state_store)


@app.command()
def add(
    item: Annotated[str, typer.Argument(help="Item name to add")],
    quantity: Annotated[float, typer.Option("--quantity", "-q", help="Quantity to buy")] = 1,
    unit: Annotated[str | None, typer.Option("--unit", "-u", help="Unit of measurement")] = None,
) -> None:
    """Add an item to the grocery list."""
    try:
        manager = get_list_manager()
        result = manager.add_item(
            name=item, quantity=quantity, unit=unit or get_config().pantry.default_unit
        )
        formatter.output(result, result["message"])
    except ValidationError as e:
        formatter.error(str(e), error_code="INVALID_INPUT")
        raise typer.Exit(code=1)
    except Exception as e:
        formatter.error(str(e))
        raise typer.Exit(code=1)


@app.command()
def update(
    item_id: Annotated[str, typer.Argument(help="Item ID (or unique prefix) to update")],
    quantity: Annotated[float | None, typer.Option("--quantity", "-q", help="New quantity")] = None,
    unit: Annotated[str | None, typer.Option("--unit", "-u", help="New unit")] = None,
) -> None:
    """Update quantity or unit of a grocery item."""
    try:
        manager = get_list_manager()
        result = manager.update_item(item_id, quantity=quantity, unit=unit)
        formatter.output(result, result["message"])
    except ItemNotFoundError as e:
        formatter.error(str(e), error_code="ITEM_NOT_FOUND")
        raise typer.Exit(code=1)
    except AmbiguousIdError as e:
        formatter.error(str(e), error_code="AMBIGUOUS_ID")
        raise typer.Exit(code=1)
    except ValueError as e:
        formatter.error(str(e), error_code="INVALID_INPUT")
        raise typer.Exit(code=1)
    except Exception as e:
        formatter.error(str(e))
        raise typer.Exit(code=1)


@app.command()
def remove(
    item_id: Annotated[str, typer.Argument(help="Item ID (or unique prefix) to remove")],
) -> None:
    """Remove an item from the grocery list."""
    try:
        manager = get_list_manager()
        result = manager.remove_item(item_id)
        formatter.output(result, result["message"])
    except ItemNotFoundError as e:
        formatter.error(str(e), error_code="ITEM_NOT_FOUND")
        raise typer.Exit(code=1)
    except AmbiguousIdError as e:
        formatter.error(str(e), error_code="AMBIGUOUS_ID")
        raise typer.Exit(code=1)
    except Exception as e:
        formatter.error(str(e))
        raise typer.Exit(code=1)


@app.command()
def toggle(
    item_id: Annotated[str, typer.Argument(help="Item ID (or unique prefix) to toggle")],
) -> None:
    """Mark an item purchased (stocking the pantry) or undo the purchase."""
    try:
        manager = get_list_manager()
        result = manager.toggle_purchased(item_id)
        formatter.output(result, result["message"])
    except ItemNotFoundError as e:
        formatter.error(str(e), error_code="ITEM_NOT_FOUND")
        raise typer.Exit(code=1)
    except AmbiguousIdError as e:
        formatter.error(str(e), error_code="AMBIGUOUS_ID")
        raise typer.Exit(code=1)
    except Exception as e:
        formatter.error(str(e))
        raise typer.Exit(code=1)


@app.command(name="list")
def list_items(
    status: Annotated[
        ListFilter, typer.Option("--status", help="Filter by purchased status")
    ] = ListFilter.ALL,
) -> None:
    """View the grocery list."""
    try:
        manager = get_list_manager()
        purchased = {
            ListFilter.ALL: None,
            ListFilter.TO_BUY: False,
            ListFilter.PURCHASED: True,
        }[status]
        result = manager.get_list(purchased=purchased)
        formatter.output(result)
    except Exception as e:
        formatter.error(str(e))
        raise typer.Exit(code=1)


@app.command()
def history() -> None:
    """Show past purchases."""
    try:
        result = get_list_manager().get_history()
        formatter.output(result)
    except Exception as e:
        formatter.error(str(e))
        raise typer.Exit(code=1)


# --- Pantry subcommand group ---
pantry_app = typer.Typer(help="Pantry commands")
app.add_typer(pantry_app, name="pantry")


@pantry_app.command("add")
def pantry_add(
    item: Annotated[str, typer.Argument(help="Item name")],
    quantity: Annotated[float, typer.Option("--quantity", "-q", help="Quantity")] = 1.0,
    unit: Annotated[str | None, typer.Option("--unit", "-u", help="Unit")] = None,
    expires: Annotated[
        datetime | None,
        typer.Option("--expires", "-e", formats=["%Y-%m-%d"], help="Expiry date (YYYY-MM-DD)"),
    ] = None,
) -> None:
    """Add stock to the pantry, merging with matching name and unit."""
    try:
        manager = get_pantry_manager()
        pantry_item = manager.add_item(
            name=item,
            quantity=quantity,
            unit=unit or get_config().pantry.default_unit,
            expiry_date=expires.date() if expires else None,
        )
        output_data = {
            "success": True,
            "message": (
                f"{pantry_item.name}: {pantry_item.quantity:g} {pantry_item.unit} in pantry"
            ),
            "data": {"pantry_item": _pantry_dict(pantry_item)},
        }
        formatter.output(output_data, output_data["message"])
    except ValidationError as e:
        formatter.error(str(e), error_code="INVALID_INPUT")
        raise typer.Exit(code=1)
    except Exception as e:
        formatter.error(str(e))
        raise typer.Exit(code=1)


@pantry_app.command("update")
def pantry_update(
    item_id: Annotated[str, typer.Argument(help="Pantry item ID (or unique prefix)")],
    name: Annotated[str | None, typer.Option("--name", help="New name")] = None,
    quantity: Annotated[float | None, typer.Option("--quantity", "-q", help="New quantity")] = None,
    unit: Annotated[str | None, typer.Option("--unit", "-u", help="New unit")] = None,
    expires: Annotated[
        datetime | None,
        typer.Option("--expires", "-e", formats=["%Y-%m-%d"], help="New expiry date"),
    ] = None,
    clear_expiry: Annotated[
        bool, typer.Option("--clear-expiry", help="Remove the expiry date")
    ] = False,
) -> None:
    """Edit a pantry item."""
    try:
        manager = get_pantry_manager()
        pantry_item = manager.update_item(
            item_id,
            name=name,
            quantity=quantity,
            unit=unit,
            expiry_date=expires.date() if expires else None,
            treat_none_as_unset=not clear_expiry,
        )
        output_data = {
            "success": True,
            "message": f"Updated {pantry_item.name}",
            "data": {"pantry_item": _pantry_dict(pantry_item)},
        }
        formatter.output(output_data, output_data["message"])
    except ItemNotFoundError as e:
        formatter.error(str(e), error_code="ITEM_NOT_FOUND")
        raise typer.Exit(code=1)
    except AmbiguousIdError as e:
        formatter.error(str(e), error_code="AMBIGUOUS_ID")
        raise typer.Exit(code=1)
    except ValueError as e:
        formatter.error(str(e), error_code="INVALID_INPUT")
        raise typer.Exit(code=1)
    except Exception as e:
        formatter.error(str(e))
        raise typer.Exit(code=1)


@pantry_app.command("remove")
def pantry_remove(
    item_id: Annotated[str, typer.Argument(help="Pantry item ID (or unique prefix)")],
) -> None:
    """Remove an item from the pantry."""
    try:
        manager = get_pantry_manager()
        removed = manager.remove_item(item_id)
        output_data = {
            "success": True,
            "message": f"Removed {removed.name} from pantry",
            "data": {"pantry_item": _pantry_dict(removed)},
        }
        formatter.output(output_data, output_data["message"])
    except ItemNotFoundError as e:
        formatter.error(str(e), error_code="ITEM_NOT_FOUND")
        raise typer.Exit(code=1)
    except AmbiguousIdError as e:
        formatter.error(str(e), error_code="AMBIGUOUS_ID")
        raise typer.Exit(code=1)
    except Exception as e:
        formatter.error(str(e))
        raise typer.Exit(code=1)


@pantry_app.command("list")
def pantry_list() -> None:
    """View pantry stock."""
    try:
        manager = get_pantry_manager()
        today = date.today()
        items = [_pantry_dict(i, today) for i in manager.get_pantry()]
        output_data = {
            "success": True,
            "data": {"pantry": items, "total_items": len(items)},
        }
        formatter.output(output_data)
    except Exception as e:
        formatter.error(str(e))
        raise typer.Exit(code=1)


@pantry_app.command("expiring")
def pantry_expiring(
    days: Annotated[int | None, typer.Option("--days", "-d", help="Days to look ahead")] = None,
) -> None:
    """Show pantry items that expire soon or already expired."""
    try:
        manager = get_pantry_manager()
        days = days if days is not None else get_config().pantry.expiring_within_days
        today = date.today()
        items = [_pantry_dict(i, today) for i in manager.get_expiring(days=days, today=today)]
        output_data = {
            "success": True,
            "data": {"expiring": items, "days": days},
        }
        formatter.output(output_data)
    except Exception as e:
        formatter.error(str(e))
        raise typer.Exit(code=1)


# --- AI subcommand group ---
ai_app = typer.Typer(help="AI-powered planning and recipe commands")
app.add_typer(ai_app, name="ai")


@ai_app.command("plan")
def ai_plan(
    meals: Annotated[list[str], typer.Argument(help="Meals to plan for")],
    people: Annotated[int | None, typer.Option("--people", "-p", help="Number of people")] = None,
    exclude: Annotated[
        list[str] | None,
        typer.Option("--exclude", "-x", help="Pantry item already owned (repeatable)"),
    ] = None,
    accept: Annotated[
        bool, typer.Option("--accept", help="Add the generated items to the grocery list")
    ] = False,
) -> None:
    """Generate a grocery list for planned meals."""
    try:
        store = get_state_store()
        request = build_meal_plan_request(
            meals,
            store.state.pantry,
            number_of_people=people or get_config().ai.number_of_people,
            exclude=exclude or [],
        )
        result = asyncio.run(get_assistant().generate_grocery_list(request))

        actions = grocery_list_to_actions(result)
        added = 0
        if accept:
            for action in actions:
                store.dispatch(action)
            added = len(actions)

        output_data = {
            "success": True,
            "data": {
                "grocery_suggestions": [
                    a.model_dump(mode="json", exclude={"type"}) for a in actions
                ],
                "added": added,
            },
        }
        formatter.output(output_data)
    except AssistantError as e:
        formatter.error(str(e), error_code="AI_ERROR")
        raise typer.Exit(code=1)
    except Exception as e:
        formatter.error(str(e))
        raise typer.Exit(code=1)


@ai_app.command("recipes")
def ai_recipes(
    people: Annotated[int | None, typer.Option("--people", "-p", help="Number of people")] = None,
    use_all: Annotated[
        bool, typer.Option("--all", help="Use the whole pantry, not only expiring items")
    ] = False,
) -> None:
    """Suggest recipes that use up expiring pantry items."""
    try:
        cfg = get_config()
        store = get_state_store()
        items = (
            store.state.pantry
            if use_all
            else store.expiring_items(within_days=cfg.pantry.expiring_within_days)
        )
        if not items:
            formatter.warning(
                "There are no items to suggest recipes for."
                if use_all
                else "There are no expiring items to suggest recipes for."
            )
            return

        request = build_expiring_request(items, people or cfg.ai.number_of_people)
        result = asyncio.run(get_assistant().suggest_recipes_from_expiring_items(request))

        output_data = {
            "success": True,
            "data": {
                "recipes": [
                    {
                        "name": recipe.name,
                        "ingredients": split_lines(recipe.ingredients),
                        "instructions": split_lines(recipe.instructions),
                    }
                    for recipe in result.recipes
                ]
            },
        }
        formatter.output(output_data)
    except AssistantError as e:
        formatter.error(str(e), error_code="AI_ERROR")
        raise typer.Exit(code=1)
    except Exception as e:
        formatter.error(str(e))
        raise typer.Exit(code=1)


@ai_app.command("recipe")
def ai_recipe(
    dish: Annotated[str, typer.Argument(help="Dish to find a recipe for")],
    people: Annotated[int | None, typer.Option("--people", "-p", help="Number of people")] = None,
) -> None:
    """Find a recipe for a dish."""
    try:
        request = FindRecipeInput(
            dish_name=dish, number_of_people=people or get_config().ai.number_of_people
        )
        result = asyncio.run(get_assistant().find_recipe(request))

        output_data = {
            "success": True,
            "data": {
                "recipe": {
                    "name": dish,
                    "ingredients": split_lines(result.ingredients),
                    "instructions": split_lines(result.instructions),
                }
            },
        }
        formatter.output(output_data)
    except AssistantError as e:
        formatter.error(str(e), error_code="AI_ERROR")
        raise typer.Exit(code=1)
    except Exception as e:
        formatter.error(str(e))
        raise typer.Exit(code=1)


@ai_app.command("suggest")
def ai_suggest(
    accept: Annotated[
        bool, typer.Option("--accept", help="Add every suggestion to the grocery list")
    ] = False,
) -> None:
    """Suggest groceries based on purchase history."""
    try:
        store = get_state_store()
        if not store.state.past_purchases:
            formatter.warning("No purchase history yet; mark items purchased first.")
            return

        request = SmartSuggestionsInput(past_purchases=list(store.state.past_purchases))
        result = asyncio.run(get_assistant().get_smart_grocery_suggestions(request))

        added = 0
        if accept:
            actions = suggestions_to_actions(result, unit=get_config().pantry.default_unit)
            for action in actions:
                store.dispatch(action)
            added = len(actions)

        output_data = {
            "success": True,
            "data": {"suggestions": result.suggested_items, "added": added},
        }
        formatter.output(output_data)
    except AssistantError as e:
        formatter.error(str(e), error_code="AI_ERROR")
        raise typer.Exit(code=1)
    except Exception as e:
        formatter.error(str(e))
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
