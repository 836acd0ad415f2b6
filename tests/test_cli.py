"""Tests for CLI commands."""

import json
import re

import pytest
from pydantic_ai.messages import ModelResponse
from pydantic_ai.models.function import AgentInfo, FunctionModel
from pydantic_ai.models.test import TestModel
from typer.testing import CliRunner

import grocismart.main as cli
from grocismart.assistant import GroceryAssistant
from grocismart.main import app

runner = CliRunner()

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-?]*[ -/]*[@-~]")


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep user config files out of CLI runs."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)


def invoke(data_dir, *args):
    return runner.invoke(app, ["--json", "--data-dir", str(data_dir), *args])


def invoke_json(data_dir, *args):
    result = invoke(data_dir, *args)
    assert result.exit_code == 0, result.stdout
    return json.loads(result.stdout)


def use_model(monkeypatch, model):
    monkeypatch.setattr(cli, "assistant", GroceryAssistant(model=model))


class TestSeedState:
    """A fresh data directory starts from the starter data."""

    def test_list_shows_seed(self, temp_data_dir):
        data = invoke_json(temp_data_dir, "list")
        grocery = data["data"]["list"]
        assert [i["id"] for i in grocery["items"]] == ["g-1", "g-2", "g-3"]
        assert grocery["purchased_count"] == 1

    def test_history_shows_seed(self, temp_data_dir):
        data = invoke_json(temp_data_dir, "history")
        assert len(data["data"]["history"]) == 9
        assert data["data"]["history"][0] == "Eggs"

    def test_pantry_shows_seed(self, temp_data_dir):
        data = invoke_json(temp_data_dir, "pantry", "list")
        assert data["data"]["total_items"] == 4
        statuses = {i["name"]: i["expiry_status"] for i in data["data"]["pantry"]}
        assert statuses == {
            "Eggs": "fresh",
            "Chicken Breast": "expired",
            "Tomatoes": "expiring_soon",
            "Pasta": "fresh",
        }

    def test_reads_do_not_write(self, temp_data_dir):
        invoke_json(temp_data_dir, "list")
        assert not (temp_data_dir / "state.json").exists()


class TestGroceryCommands:
    """Tests for grocery list commands."""

    def test_add_item(self, temp_data_dir):
        data = invoke_json(temp_data_dir, "add", "Butter", "-q", "2", "-u", "pack")
        assert data["success"] is True
        assert data["data"]["item"]["name"] == "Butter"
        assert data["data"]["item"]["id"].startswith("g-")

        listing = invoke_json(temp_data_dir, "list")
        assert listing["data"]["list"]["total_items"] == 4

    def test_add_uses_default_unit(self, temp_data_dir):
        data = invoke_json(temp_data_dir, "add", "Butter")
        assert data["data"]["item"]["unit"] == "pcs"

    def test_add_rejects_infinite_quantity(self, temp_data_dir):
        result = invoke(temp_data_dir, "add", "Butter", "-q", "inf")
        assert result.exit_code == 1
        assert json.loads(result.stdout)["error_code"] == "INVALID_INPUT"
        assert not (temp_data_dir / "state.json").exists()

    def test_add_rejects_non_positive_quantity(self, temp_data_dir):
        result = invoke(temp_data_dir, "add", "Butter", "-q", "0")
        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["error_code"] == "INVALID_INPUT"

    def test_update_item(self, temp_data_dir):
        data = invoke_json(temp_data_dir, "update", "g-1", "-q", "3")
        assert data["data"]["item"]["quantity"] == 3
        assert data["data"]["item"]["unit"] == "l"

    def test_update_missing_item(self, temp_data_dir):
        result = invoke(temp_data_dir, "update", "g-99", "-q", "3")
        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["success"] is False
        assert data["error_code"] == "ITEM_NOT_FOUND"

    def test_ambiguous_prefix(self, temp_data_dir):
        result = invoke(temp_data_dir, "remove", "g-")
        assert result.exit_code == 1
        assert json.loads(result.stdout)["error_code"] == "AMBIGUOUS_ID"

    def test_remove_item(self, temp_data_dir):
        data = invoke_json(temp_data_dir, "remove", "g-2")
        assert data["message"] == "Removed Bread from grocery list"
        listing = invoke_json(temp_data_dir, "list")
        assert [i["name"] for i in listing["data"]["list"]["items"]] == ["Milk", "Eggs"]

    def test_toggle_purchase_stocks_pantry(self, temp_data_dir):
        data = invoke_json(temp_data_dir, "toggle", "g-1")
        assert data["data"]["item"]["purchased"] is True
        assert data["data"]["pantry_item"]["name"] == "Milk"

        pantry = invoke_json(temp_data_dir, "pantry", "list")
        assert "Milk" in [i["name"] for i in pantry["data"]["pantry"]]

    def test_toggle_reversal_empties_stock(self, temp_data_dir):
        data = invoke_json(temp_data_dir, "toggle", "g-3")
        assert data["data"]["item"]["purchased"] is False
        assert data["data"]["pantry_item"] is None

        pantry = invoke_json(temp_data_dir, "pantry", "list")
        assert "Eggs" not in [i["name"] for i in pantry["data"]["pantry"]]

        history = invoke_json(temp_data_dir, "history")
        assert "Eggs" in history["data"]["history"]

    def test_list_filters(self, temp_data_dir):
        to_buy = invoke_json(temp_data_dir, "list", "--status", "to_buy")
        assert [i["name"] for i in to_buy["data"]["list"]["items"]] == ["Milk", "Bread"]

        purchased = invoke_json(temp_data_dir, "list", "--status", "purchased")
        assert [i["name"] for i in purchased["data"]["list"]["items"]] == ["Eggs"]

    def test_rich_list_output(self, temp_data_dir):
        result = runner.invoke(app, ["--data-dir", str(temp_data_dir), "list"])
        assert result.exit_code == 0
        output = ANSI_ESCAPE_RE.sub("", result.stdout)
        assert "Milk" in output
        assert "Bread" in output


class TestPantryCommands:
    """Tests for pantry commands."""

    def test_add_merges_stock(self, temp_data_dir):
        data = invoke_json(temp_data_dir, "pantry", "add", "eggs", "-q", "6", "-u", "PCS")
        item = data["data"]["pantry_item"]
        assert item["id"] == "p-1"
        assert item["quantity"] == 18
        assert item["name"] == "Eggs"

    def test_add_with_expiry(self, temp_data_dir):
        data = invoke_json(
            temp_data_dir, "pantry", "add", "Yogurt", "-u", "cup", "--expires", "2030-05-01"
        )
        assert data["data"]["pantry_item"]["expiryDate"] == "2030-05-01"

    def test_add_invalid_date(self, temp_data_dir):
        result = invoke(temp_data_dir, "pantry", "add", "Yogurt", "--expires", "01/05/2030")
        assert result.exit_code != 0

    def test_update_and_clear_expiry(self, temp_data_dir):
        data = invoke_json(temp_data_dir, "pantry", "update", "p-4", "-q", "2")
        assert data["data"]["pantry_item"]["quantity"] == 2
        assert data["data"]["pantry_item"]["expiryDate"] is not None

        data = invoke_json(temp_data_dir, "pantry", "update", "p-4", "--clear-expiry")
        assert data["data"]["pantry_item"]["expiryDate"] is None
        assert data["data"]["pantry_item"]["expiry_status"] == "no_expiry"

    def test_update_without_fields(self, temp_data_dir):
        result = invoke(temp_data_dir, "pantry", "update", "p-1")
        assert result.exit_code == 1
        assert json.loads(result.stdout)["error_code"] == "INVALID_INPUT"
        assert not (temp_data_dir / "state.json").exists()

    def test_remove(self, temp_data_dir):
        data = invoke_json(temp_data_dir, "pantry", "remove", "p-2")
        assert data["message"] == "Removed Chicken Breast from pantry"

    def test_remove_missing(self, temp_data_dir):
        result = invoke(temp_data_dir, "pantry", "remove", "p-99")
        assert result.exit_code == 1
        assert json.loads(result.stdout)["error_code"] == "ITEM_NOT_FOUND"

    def test_expiring(self, temp_data_dir):
        data = invoke_json(temp_data_dir, "pantry", "expiring")
        assert data["data"]["days"] == 30
        assert [i["name"] for i in data["data"]["expiring"]] == [
            "Chicken Breast",
            "Tomatoes",
            "Eggs",
        ]

    def test_expiring_custom_days(self, temp_data_dir):
        data = invoke_json(temp_data_dir, "pantry", "expiring", "--days", "10")
        assert [i["name"] for i in data["data"]["expiring"]] == ["Chicken Breast", "Tomatoes"]


class TestAICommands:
    """Tests for AI commands with a stubbed model."""

    def test_plan_without_accept(self, temp_data_dir, monkeypatch):
        use_model(
            monkeypatch,
            TestModel(
                custom_output_args={
                    "groceryList": [
                        {"name": "Flour", "quantity": 500, "unit": "g"},
                        {"name": "Sugar", "quantity": 0, "unit": "g"},
                    ]
                }
            ),
        )
        data = invoke_json(temp_data_dir, "ai", "plan", "Pancakes", "--exclude", "Eggs")
        assert data["data"]["grocery_suggestions"] == [
            {"name": "Flour", "quantity": 500.0, "unit": "g"}
        ]
        assert data["data"]["added"] == 0

        listing = invoke_json(temp_data_dir, "list")
        assert listing["data"]["list"]["total_items"] == 3

    def test_plan_with_accept(self, temp_data_dir, monkeypatch):
        use_model(
            monkeypatch,
            TestModel(custom_output_args={"groceryList": [{"name": "Flour", "quantity": 1, "unit": "kg"}]}),
        )
        data = invoke_json(temp_data_dir, "ai", "plan", "Pancakes", "--accept")
        assert data["data"]["added"] == 1

        listing = invoke_json(temp_data_dir, "list")
        assert listing["data"]["list"]["items"][-1]["name"] == "Flour"

    def test_recipes(self, temp_data_dir, monkeypatch):
        use_model(
            monkeypatch,
            TestModel(
                custom_output_args={
                    "recipes": [
                        {
                            "name": "Chicken Pasta",
                            "ingredients": "Chicken\nTomatoes",
                            "instructions": "Cook\nServe",
                        }
                    ]
                }
            ),
        )
        data = invoke_json(temp_data_dir, "ai", "recipes")
        recipe = data["data"]["recipes"][0]
        assert recipe["name"] == "Chicken Pasta"
        assert recipe["instructions"] == ["Cook", "Serve"]

    def test_recipes_without_expiring_items(self, temp_data_dir, monkeypatch):
        use_model(monkeypatch, TestModel())
        for item_id in ("p-1", "p-2", "p-3"):
            invoke_json(temp_data_dir, "pantry", "remove", item_id)

        data = invoke_json(temp_data_dir, "ai", "recipes")
        assert "no expiring items" in data["warning"]

    def test_recipe(self, temp_data_dir, monkeypatch):
        use_model(
            monkeypatch,
            TestModel(custom_output_args={"ingredients": "Rice\nWater", "instructions": "Boil"}),
        )
        data = invoke_json(temp_data_dir, "ai", "recipe", "Rice")
        assert data["data"]["recipe"] == {
            "name": "Rice",
            "ingredients": ["Rice", "Water"],
            "instructions": ["Boil"],
        }

    def test_suggest_with_accept(self, temp_data_dir, monkeypatch):
        use_model(monkeypatch, TestModel(custom_output_args={"suggestedItems": ["Basil", "Parmesan"]}))
        data = invoke_json(temp_data_dir, "ai", "suggest", "--accept")
        assert data["data"]["suggestions"] == ["Basil", "Parmesan"]
        assert data["data"]["added"] == 2

        listing = invoke_json(temp_data_dir, "list")
        assert [i["name"] for i in listing["data"]["list"]["items"]][-2:] == ["Basil", "Parmesan"]

    def test_failure_reports_ai_error(self, temp_data_dir, monkeypatch):
        def broken(messages, info: AgentInfo) -> ModelResponse:
            raise RuntimeError("quota exceeded")

        use_model(monkeypatch, FunctionModel(broken))
        result = invoke(temp_data_dir, "ai", "recipe", "Soup")
        assert result.exit_code == 1
        data = json.loads(result.stdout.strip().splitlines()[-1])
        assert data["error_code"] == "AI_ERROR"
        assert "quota exceeded" in data["error"]

        listing = invoke_json(temp_data_dir, "list")
        assert listing["data"]["list"]["total_items"] == 3
