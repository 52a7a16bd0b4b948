"""Command line entry point: ``store-fn push``."""

from __future__ import annotations

import argparse
import asyncio
import inspect
import logging
import os
import runpy
import sys
from pathlib import Path
from typing import Any, Optional, Sequence

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from store_fn.codegen import write_products_to_file
from store_fn.config import init_config, reset_config
from store_fn.errors import ConfigurationLoadError, StoreFnError
from store_fn.reconciler import SyncAction

DEFAULT_INPUT = "store_config.py"
DEFAULT_OUTPUT = "store/products.py"

console = Console(soft_wrap=True)
err_console = Console(stderr=True, soft_wrap=True)

logger = logging.getLogger(__name__)


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        raise StoreFnError(f"{self.prog}: {message}")


def _print_usage() -> None:
    console.print("\nUsage: store-fn <command>")
    console.print("\nCommands:")
    console.print("  push    Sync products to Polar store")
    console.print("\nExample:")
    console.print(f"  store-fn push -i {DEFAULT_INPUT} -o {DEFAULT_OUTPUT}")
    console.print(f"  store-fn push  # Uses defaults: -i {DEFAULT_INPUT} -o {DEFAULT_OUTPUT}")


def _build_push_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="store-fn push",
        description="Sync the products defined in a store file and write a snapshot module.",
    )
    parser.add_argument(
        "-i", "--input", default=DEFAULT_INPUT, help="Store configuration file to load."
    )
    parser.add_argument(
        "-o", "--output", default=DEFAULT_OUTPUT, help="Python module to write the products to."
    )
    parser.add_argument(
        "--env-file", help="Read credentials from this .env file instead of the nearest one."
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be created or updated without changing anything.",
    )
    parser.add_argument("--debug", action="store_true", help="Verbose logging and tracebacks.")
    return parser


def _debug_enabled(options: Optional[argparse.Namespace] = None) -> bool:
    return bool(os.environ.get("DEBUG")) or bool(options and options.debug)


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False, rich_tracebacks=True)],
        force=True,
    )
    logging.getLogger("httpx").setLevel(logging.DEBUG if debug else logging.WARNING)


def _load_configuration(env_file: Optional[str]) -> None:
    if env_file and not Path(env_file).expanduser().exists():
        raise ConfigurationLoadError(f"Environment file not found: {env_file}")
    reset_config()
    try:
        init_config(dotenv_path=env_file)
    except (RuntimeError, ValueError) as exc:
        raise ConfigurationLoadError(f"Invalid configuration: {exc}") from exc


def load_store(path: Path) -> Any:
    """Run the store file and return its module-level ``store`` object."""

    if not path.is_file():
        raise ConfigurationLoadError(
            f"Store file not found: {path}\nMake sure the file exists and the path is correct."
        )

    search_path = str(path.parent)
    sys.path.insert(0, search_path)
    try:
        namespace = runpy.run_path(str(path), run_name="__store_config__")
    except StoreFnError:
        raise
    except Exception as exc:
        raise ConfigurationLoadError(f"Cannot load store file: {path}\n{exc}") from exc
    finally:
        if search_path in sys.path:
            sys.path.remove(search_path)

    store = namespace.get("store")
    if store is None:
        exports = sorted(name for name in namespace if not name.startswith("_"))
        raise ConfigurationLoadError(
            "Store file must define a module-level 'store'. "
            f"Found names: {', '.join(exports) or '(none)'}"
        )
    if not callable(getattr(store, "push", None)):
        raise ConfigurationLoadError(
            "'store' must be the object returned by create_store (an object with a push method)"
        )
    return store


def _extract_products(result: Any) -> list[Any]:
    products = getattr(result, "updated_products", None)
    if products is None and isinstance(result, dict):
        products = result.get("updated_products")
    if products is None or not isinstance(products, list):
        raise ConfigurationLoadError(
            "Push function did not return products. Expected PushResult(updated_products=[...])"
        )
    return products


def _render_plan(actions: Sequence[SyncAction]) -> None:
    table = Table(title="Planned changes")
    table.add_column("Key", style="cyan")
    table.add_column("Name")
    table.add_column("Action", style="bold")
    table.add_column("Remote id", style="dim")
    table.add_column("Status")

    for action in actions:
        status = "unchanged" if action.unchanged else ""
        table.add_row(
            action.definition.key or "",
            action.definition.name,
            action.kind.value,
            action.existing.id if action.existing else "",
            status,
        )
    console.print(table)


async def handle_push(options: argparse.Namespace) -> int:
    input_path = Path.cwd() / options.input
    output_path = Path.cwd() / options.output

    _load_configuration(options.env_file)

    console.print(f"[blue]Loading store definition from: {escape(str(input_path.resolve()))}[/blue]")
    store = load_store(input_path.resolve())

    if options.dry_run:
        if not callable(getattr(store, "plan", None)):
            raise ConfigurationLoadError("'store' does not support dry runs (no plan method)")
        _render_plan(await store.plan())
        console.print("[yellow]Dry run: nothing was pushed or written[/yellow]")
        return 0

    console.print("[blue]Syncing products to Polar store...[/blue]\n")
    result = store.push()
    if inspect.isawaitable(result):
        result = await result

    products = _extract_products(result)
    if not products:
        console.print("[yellow]No products to write[/yellow]")
        return 0

    console.print(f"\n[blue]Writing {len(products)} product(s) to: {escape(str(output_path.resolve()))}[/blue]")
    destination = write_products_to_file(products, output_path)
    console.print(f"\n[green]✓ Successfully wrote products to {escape(str(destination))}[/green]")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)

    if not args:
        err_console.print("[red]Error: No command provided[/red]")
        _print_usage()
        return 1

    command, rest = args[0], args[1:]
    if command in {"-h", "--help"}:
        _print_usage()
        return 0
    if command != "push":
        err_console.print(f'[red]Error: Unknown command "{escape(command)}"[/red]')
        console.print("\nAvailable commands:")
        console.print("  push    Sync products to Polar store")
        return 1

    options: Optional[argparse.Namespace] = None
    try:
        options = _build_push_parser().parse_args(rest)
        _configure_logging(_debug_enabled(options))
        return asyncio.run(handle_push(options))
    except StoreFnError as exc:
        err_console.print(f"\n[red]Error: {escape(str(exc))}[/red]", highlight=False)
        if _debug_enabled(options):
            err_console.print_exception()
        return 1
    except Exception as exc:
        err_console.print(f"[red]Fatal error: {escape(str(exc))}[/red]", highlight=False)
        if _debug_enabled(options):
            err_console.print_exception()
        return 1


if __name__ == "__main__":
    sys.exit(main())
