"""Delora storefront - command-line entry point.

Drives the state core from a terminal. The cart and the session are stored in
the configured key-value store, so consecutive invocations share them:

    delora add aurora-vase --quantity 2
    delora register "Ada Lovelace" ada@example.com secret1
    delora cart
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import List, Optional, Sequence

import yaml
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from delora.shared.core.configuration import ValidationLevel, get_config
from delora.shared.core.event_bus import EventBus
from delora.shared.domain.catalog import ProductCandidate, candidates_from_records
from delora.shared.domain.notifications import Severity
from delora.shared.infrastructure.persistence import close_key_value_store, open_key_value_store
from delora.storefront.state import (
    AddItem,
    AppState,
    ChangeFilter,
    ChangeSort,
    Checkout,
    ClearCart,
    Command,
    OpenAccount,
    Projection,
    Register,
    RemoveItem,
    SignIn,
    SignOut,
    StorefrontController,
)

PROJECT_ROOT = Path.cwd()
CATALOG_PATH = Path(__file__).resolve().parent / "catalog.yaml"

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

logger = logging.getLogger(__name__)
console = Console()


def configure_logging(logs_dir: Optional[Path] = None) -> Path:
    """File handler at LOG_LEVEL (default INFO), console handler at WARNING+."""
    logs_dir = logs_dir or PROJECT_ROOT / "data" / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_file_path = logs_dir / "delora.log"

    file_log_level = LOG_LEVELS.get(os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(file_log_level)
    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()

    file_handler = logging.handlers.RotatingFileHandler(
        log_file_path,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5,
        encoding='utf-8'
    )
    file_handler.setLevel(file_log_level)
    file_handler.setFormatter(logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    ))
    root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(logging.Formatter(
        "%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S"
    ))
    root_logger.addHandler(console_handler)

    logger.info(f"Logging configured: file={log_file_path}, console=WARNING+")
    return log_file_path


def load_catalog(path: Path = CATALOG_PATH) -> List[ProductCandidate]:
    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}
    return candidates_from_records(data.get("products", []))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="delora", description="Delora storefront state from the terminal")
    sub = parser.add_subparsers(dest="action", required=True)

    add = sub.add_parser("add", help="Add a catalog product (or any item with --name/--price)")
    add.add_argument("item_id")
    add.add_argument("--quantity", type=int, default=1)
    add.add_argument("--name")
    add.add_argument("--price", type=float)

    remove = sub.add_parser("remove", help="Remove a cart line")
    remove.add_argument("item_id")

    sub.add_parser("clear", help="Empty the cart")
    sub.add_parser("cart", help="Show the cart")
    sub.add_parser("checkout", help="Start checkout")

    register = sub.add_parser("register", help="Create an account and sign in")
    register.add_argument("name")
    register.add_argument("email")
    register.add_argument("password")

    sign_in = sub.add_parser("sign-in", help="Sign in")
    sign_in.add_argument("email")
    sign_in.add_argument("password")

    sub.add_parser("sign-out", help="Sign out")
    sub.add_parser("whoami", help="Show the account panel")

    products = sub.add_parser("products", help="List products")
    products.add_argument("--category", default="all")
    products.add_argument("--sort", default="featured", choices=["featured", "price-asc", "price-desc"])

    return parser


def commands_for(args: argparse.Namespace, state: AppState) -> List[Command]:
    """Translate parsed arguments into the commands a page would send."""
    if args.action == "add":
        name, price = args.name, args.price
        product = state.listing.find(args.item_id)
        if product is not None:
            name = name or product.display_name
            price = price if price is not None else product.price
        return [AddItem(args.item_id, name or args.item_id, price, args.quantity)]
    if args.action == "remove":
        return [RemoveItem(args.item_id)]
    if args.action == "clear":
        return [ClearCart()]
    if args.action == "checkout":
        return [Checkout()]
    if args.action == "register":
        return [OpenAccount("register"), Register(args.name, args.email, args.password)]
    if args.action == "sign-in":
        return [OpenAccount("login"), SignIn(args.email, args.password)]
    if args.action == "sign-out":
        return [SignOut()]
    if args.action == "whoami":
        return [OpenAccount()]
    if args.action == "products":
        return [ChangeFilter(args.category), ChangeSort(args.sort)]
    return []


def unknown_product_message(item_id: str) -> str:
    return f"No product '{item_id}' in the catalog. Pass --price to add it anyway."


def render_cart(projection: Projection) -> None:
    if projection.cart_empty:
        console.print("Your cart is empty.")
        return
    table = Table(title=f"Cart ({projection.item_count} items)")
    table.add_column("Id")
    table.add_column("Item")
    table.add_column("Price", justify="right")
    table.add_column("Qty", justify="right")
    table.add_column("Line total", justify="right")
    for line in projection.lines:
        table.add_row(escape(line.id), escape(line.name), line.price_display, str(line.quantity), line.line_total_display)
    table.add_section()
    table.add_row("", "Total", "", str(projection.item_count), projection.total_display)
    console.print(table)


def render_products(projection: Projection) -> None:
    pills = "  ".join(f"[bold]{escape(p.value)}[/bold]" if p.active else escape(p.value) for p in projection.pills)
    console.print(pills)
    if projection.listing_empty:
        console.print(projection.listing_placeholder)
        return
    table = Table(title=escape(f"Products ({projection.filter}, {projection.sort.value})"))
    table.add_column("Key")
    table.add_column("Name")
    table.add_column("Category")
    table.add_column("Price", justify="right")
    for product in projection.products:
        table.add_row(escape(product.key), escape(product.display_name), escape(product.category), f"{product.price:g}")
    console.print(table)


def render_account(projection: Projection) -> None:
    if projection.signed_in and projection.user is not None:
        user = projection.user
        console.print(escape(f"[{projection.account_initials}] {user.name} <{user.email}>"))
    else:
        console.print(f"Not signed in (panel: {projection.panels.panel.value})")


def render_message(projection: Projection) -> None:
    message = projection.message
    if message.is_empty:
        return
    style = "red" if message.severity is Severity.ERROR else "green"
    console.print(f"[{style}]{escape(message.text)}[/{style}]")


async def run(args: argparse.Namespace) -> int:
    config = get_config(ValidationLevel.LENIENT)
    store = open_key_value_store(config.storage)
    try:
        state = AppState.load(store, config, load_catalog())
        if args.action == "add" and args.price is None and state.listing.find(args.item_id) is None:
            logger.info(f"Rejected add of unknown product {args.item_id!r} without a price")
            console.print(f"[red]{escape(unknown_product_message(args.item_id))}[/red]")
            return 1
        controller = StorefrontController(state, EventBus())

        projection = controller.projection
        for command in commands_for(args, state):
            projection = await controller.dispatch(command)
        await controller.bus.wait_until_idle()
    finally:
        close_key_value_store(store)

    if args.action in ("add", "remove", "clear", "cart", "checkout"):
        render_cart(projection)
    elif args.action == "products":
        render_products(projection)
    else:
        render_account(projection)
    render_message(projection)
    return 1 if projection.message.severity is Severity.ERROR else 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv(dotenv_path=PROJECT_ROOT / ".env")
    configure_logging()
    args = build_parser().parse_args(argv)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
