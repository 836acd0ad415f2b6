"""Generative-model helpers for grocery lists, recipes and suggestions.

Each helper is a stateless request/response call built on a Pydantic AI
agent with a structured output type. None of them touch AppState: callers
turn results into ordinary actions (see ``grocery_list_to_actions`` and
``suggestions_to_actions``) and dispatch those.
"""

import asyncio
import logging
from collections.abc import Awaitable, Iterable
from typing import Generic, TypeVar

from pydantic import BaseModel
from pydantic_ai import Agent
from pydantic_ai.models import Model

from .config import DEFAULT_MODEL
from .models import (
    AddGroceryItem,
    ExpiringItem,
    FindRecipeInput,
    FindRecipeOutput,
    Meal,
    MealPlannerInput,
    MealPlannerOutput,
    PantryItem,
    PlannerPantryItem,
    SmartSuggestionsInput,
    SmartSuggestionsOutput,
    SuggestRecipesInput,
    SuggestRecipesOutput,
    fold,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
OutputT = TypeVar("OutputT", bound=BaseModel)

MEAL_PLANNER_PROMPT = (
    "You are a helpful assistant that generates a grocery list based on planned meals "
    "and the number of people they are for, while taking into account existing pantry "
    "items. If a pantry item is marked as excluded, the household already owns it: "
    "reduce the needed quantity of that item accordingly, omitting it entirely when "
    "the pantry covers the whole amount."
)

EXPIRING_RECIPES_PROMPT = (
    "You are an expert chef who provides recipes based on expiring items, minimizing "
    "food waste. For the given list of expiring items and number of people, provide a "
    "list of recipes that can be made.\n"
    "- List each ingredient on a new line.\n"
    "- List each instruction on a new line.\n"
    "- Do not number the instructions.\n"
    "- Do not add any introductory or concluding text."
)

FIND_RECIPE_PROMPT = (
    "You are an expert chef who provides recipes. For the given dish and number of "
    "people, provide a list of ingredients and a list of cooking instructions.\n"
    "- List each ingredient on a new line.\n"
    "- List each instruction on a new line.\n"
    "- Do not number the instructions.\n"
    "- Do not add any introductory or concluding text."
)

SMART_SUGGESTIONS_PROMPT = (
    "You are a helpful AI assistant that suggests grocery items based on a user's past "
    "purchases. Suggest grocery items that the user might want to add to their "
    "grocery list."
)


class AssistantError(Exception):
    """Raised when a model request fails. Application state is never affected."""

    def __init__(self, operation: str, cause: BaseException):
        self.operation = operation
        self.cause = cause
        super().__init__(f"AI request '{operation}' failed: {cause}")


def _bullets(lines: Iterable[str]) -> str:
    return "\n".join(f"- {line}" for line in lines)


def render_meal_plan_request(request: MealPlannerInput) -> str:
    return (
        f"Number of People: {request.number_of_people}\n\n"
        f"Meals:\n{_bullets(m.name for m in request.meals)}\n\n"
        "Pantry Items:\n"
        + _bullets(
            f"{p.name} (Quantity: {_format_quantity(p.quantity)} {p.unit}) "
            f"- exclude: {str(p.selected).lower()}"
            for p in request.pantry_items
        )
    )


def render_expiring_request(request: SuggestRecipesInput) -> str:
    return (
        "Expiring Items:\n"
        + _bullets(
            f"{_format_quantity(i.quantity)} {i.unit} of {i.name}" for i in request.expiring_items
        )
        + f"\nNumber of People: {request.number_of_people}"
    )


def render_find_recipe_request(request: FindRecipeInput) -> str:
    return f"Dish Name: {request.dish_name}\nNumber of People: {request.number_of_people}"


def render_suggestions_request(request: SmartSuggestionsInput) -> str:
    return "Past Purchases:\n" + _bullets(request.past_purchases)


def _format_quantity(quantity: float) -> str:
    return f"{quantity:g}"


class GroceryAssistant:
    """Runs the four model-backed collaborators against a single model."""

    def __init__(self, model: Model | str = DEFAULT_MODEL, retries: int = 2):
        """Initialize the assistant.

        Args:
            model: Pydantic AI model instance or ``provider:model`` name
            retries: Output validation retries per request
        """
        self.model = model
        self.retries = retries

    def _agent(self, output_type: type[OutputT], system_prompt: str) -> Agent[None, OutputT]:
        return Agent(
            self.model,
            output_type=output_type,
            system_prompt=system_prompt,
            retries=self.retries,
        )

    async def _run(
        self,
        operation: str,
        output_type: type[OutputT],
        system_prompt: str,
        user_prompt: str,
    ) -> OutputT:
        logger.info("ai_request_started", extra={"operation": operation})
        try:
            agent = self._agent(output_type, system_prompt)
            result = await agent.run(user_prompt)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning("ai_request_failed", extra={"operation": operation, "error": str(e)})
            raise AssistantError(operation, e) from e

        logger.info("ai_request_completed", extra={"operation": operation})
        return result.output

    async def generate_grocery_list(self, request: MealPlannerInput) -> MealPlannerOutput:
        """Generate a grocery list for planned meals, net of owned pantry items."""
        return await self._run(
            "generate_grocery_list",
            MealPlannerOutput,
            MEAL_PLANNER_PROMPT,
            render_meal_plan_request(request),
        )

    async def suggest_recipes_from_expiring_items(
        self, request: SuggestRecipesInput
    ) -> SuggestRecipesOutput:
        """Suggest recipes that use up expiring pantry items."""
        return await self._run(
            "suggest_recipes_from_expiring_items",
            SuggestRecipesOutput,
            EXPIRING_RECIPES_PROMPT,
            render_expiring_request(request),
        )

    async def find_recipe(self, request: FindRecipeInput) -> FindRecipeOutput:
        """Look up ingredients and instructions for a dish."""
        return await self._run(
            "find_recipe",
            FindRecipeOutput,
            FIND_RECIPE_PROMPT,
            render_find_recipe_request(request),
        )

    async def get_smart_grocery_suggestions(
        self, request: SmartSuggestionsInput
    ) -> SmartSuggestionsOutput:
        """Suggest items to buy based on purchase history."""
        return await self._run(
            "get_smart_grocery_suggestions",
            SmartSuggestionsOutput,
            SMART_SUGGESTIONS_PROMPT,
            render_suggestions_request(request),
        )


class PendingRequest(Generic[T]):
    """Handle for a submitted model request.

    Abandoning a handle is safe: results only ever become dispatched actions.
    """

    def __init__(self, task: "asyncio.Task[T]"):
        self._task = task

    def done(self) -> bool:
        return self._task.done()

    def cancel(self) -> None:
        self._task.cancel()

    async def resolve(self) -> T:
        """Wait for the result.

        Raises:
            AssistantError: If the request failed
        """
        return await self._task


def submit(request: Awaitable[T]) -> PendingRequest[T]:
    """Start a request in the running event loop and return its handle."""
    return PendingRequest(asyncio.ensure_future(request))


# --- Request builders ---


def build_meal_plan_request(
    meals: Iterable[str],
    pantry: Iterable[PantryItem],
    number_of_people: int,
    exclude: Iterable[str] = (),
) -> MealPlannerInput:
    """Build a meal planner request.

    Pantry items whose name is in ``exclude`` (case-insensitive) are marked
    selected, meaning they are already owned.
    """
    excluded = {fold(name) for name in exclude}
    return MealPlannerInput(
        number_of_people=number_of_people,
        meals=[Meal(name=name) for name in meals],
        pantry_items=[
            PlannerPantryItem(
                name=item.name,
                quantity=item.quantity,
                unit=item.unit,
                selected=fold(item.name) in excluded,
            )
            for item in pantry
        ],
    )


def build_expiring_request(
    items: Iterable[PantryItem], number_of_people: int
) -> SuggestRecipesInput:
    return SuggestRecipesInput(
        expiring_items=[
            ExpiringItem(name=item.name, quantity=item.quantity, unit=item.unit) for item in items
        ],
        number_of_people=number_of_people,
    )


# --- Result converters ---


def grocery_list_to_actions(output: MealPlannerOutput) -> list[AddGroceryItem]:
    """Turn a generated grocery list into add actions.

    Entries without a name or with a non-positive quantity are dropped.
    """
    return [
        AddGroceryItem(name=item.name.strip(), quantity=item.quantity, unit=item.unit)
        for item in output.grocery_list
        if item.name.strip() and item.quantity > 0
    ]


def suggestions_to_actions(
    output: SmartSuggestionsOutput, unit: str = "pcs"
) -> list[AddGroceryItem]:
    """Turn suggested item names into add actions of quantity 1."""
    return [
        AddGroceryItem(name=name.strip(), quantity=1, unit=unit)
        for name in output.suggested_items
        if name.strip()
    ]


def split_lines(text: str) -> list[str]:
    """Split newline-delimited recipe text, dropping blank lines."""
    return [line.strip() for line in text.splitlines() if line.strip()]
