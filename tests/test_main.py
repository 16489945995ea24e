"""
Tests for the command-line entry point
"""

import pytest

from delora.storefront.main import build_parser, commands_for, load_catalog, run
from delora.storefront.state import AddItem, AppState, OpenAccount, Register
from delora.shared.infrastructure.persistence import MemoryKeyValueStore


@pytest.fixture
def cli_env(tmp_path, monkeypatch):
    monkeypatch.setenv("DELORA_DB_PATH", str(tmp_path / "cli.duckdb"))


class TestCatalog:

    def test_demo_catalog_loads_in_page_order(self):
        catalog = load_catalog()
        assert [c.base_order_index for c in catalog] == list(range(len(catalog)))
        assert catalog[0].key == "aurora-vase"


class TestCommandsFor:

    def test_add_uses_catalog_name_and_price(self):
        state = AppState.load(MemoryKeyValueStore(), candidates=load_catalog())
        args = build_parser().parse_args(["add", "aurora-vase", "--quantity", "2"])

        assert commands_for(args, state) == [AddItem("aurora-vase", "Aurora Vase", 25.0, 2)]

    def test_register_opens_register_tab_first(self):
        state = AppState.load(MemoryKeyValueStore())
        args = build_parser().parse_args(["register", "Ada", "ada@example.com", "secret1"])

        assert commands_for(args, state) == [
            OpenAccount("register"),
            Register("Ada", "ada@example.com", "secret1"),
        ]


class TestRun:
    """Tests for consecutive invocations sharing durable state."""

    @pytest.mark.asyncio
    async def test_state_survives_between_runs(self, cli_env, capsys):
        parser = build_parser()

        assert await run(parser.parse_args(["add", "aurora-vase"])) == 0
        assert await run(parser.parse_args(["add", "aurora-vase", "--quantity", "2"])) == 0
        assert await run(parser.parse_args(["register", "Ada", "ada@example.com", "secret1"])) == 0
        assert await run(parser.parse_args(["cart"])) == 0

        out = capsys.readouterr().out
        assert "$75" in out
        assert "Welcome to Delora, Ada!" in out

    @pytest.mark.asyncio
    async def test_error_exit_code(self, cli_env, capsys):
        code = await run(build_parser().parse_args(["sign-in", "nobody@example.com", "secret1"]))

        assert code == 1
        assert "Incorrect email or password" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_products_listing(self, cli_env, capsys):
        code = await run(build_parser().parse_args(["products", "--category", "kitchen", "--sort", "price-desc"]))

        out = capsys.readouterr().out
        assert code == 0
        assert out.index("Oak Serving Board") < out.index("Stoneware Mug")

    @pytest.mark.asyncio
    async def test_unknown_product_without_price_fails(self, cli_env, capsys):
        parser = build_parser()

        code = await run(parser.parse_args(["add", "mystery-box"]))

        assert code == 1
        assert "No product 'mystery-box'" in capsys.readouterr().out
        assert await run(parser.parse_args(["cart"])) == 0
        assert "Your cart is empty." in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_unknown_product_with_price_is_added(self, cli_env, capsys):
        code = await run(build_parser().parse_args(["add", "gift-box", "--name", "[gift] Box", "--price", "12"]))

        out = capsys.readouterr().out
        assert code == 0
        assert "[gift] Box" in out
        assert "$12" in out
