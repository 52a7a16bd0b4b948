"""Writing the synced catalog back to an importable Python module.

The generated module exposes one ``Product`` constant per record, named after
the product (``"Pro Plan"`` becomes ``proPlanProduct``). Timestamps are written
as ``datetime.fromisoformat(...)`` calls so the module loads back into typed
records rather than raw strings.
"""

from __future__ import annotations

import logging
import re
import sys
import unicodedata
from datetime import datetime
from pathlib import Path
from pprint import pformat
from typing import Any, Sequence

from store_fn.errors import SerializationError
from store_fn.models import Product

try:
    import black
except ImportError:  # pragma: no cover - black is an optional extra
    black = None

logger = logging.getLogger(__name__)

MODULE_HEADER = '''"""Product catalog snapshot written by store-fn. Do not edit by hand."""

from datetime import datetime

from store_fn.models import Product
'''

_WORD_SEPARATORS = re.compile(r"[\W_]+")


class _DateLiteral:
    """Renders a timestamp as the expression that rebuilds it."""

    def __init__(self, value: datetime) -> None:
        self._iso = value.isoformat()

    def __repr__(self) -> str:
        return f"datetime.fromisoformat({self._iso!r})"


def to_camel_case(value: str) -> str:
    if not value:
        return value
    words = [word.lower() for word in _WORD_SEPARATORS.split(value) if word]
    return "".join(
        word if index == 0 else word[:1].upper() + word[1:]
        for index, word in enumerate(words)
    )


def product_constant_name(product: Product) -> str:
    # Identifiers are NFKC-normalised when the module is parsed.
    name = unicodedata.normalize("NFKC", f"{to_camel_case(product.name)}Product")
    name = "".join(char for char in name if f"_{char}".isidentifier())
    if not name.isidentifier():
        name = f"_{name}"
    return name


def _literal_tree(value: Any) -> Any:
    if isinstance(value, datetime):
        return _DateLiteral(value)
    if isinstance(value, dict):
        return {key: _literal_tree(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_literal_tree(item) for item in value]
    return value


def _json_with_dates(product: Product) -> Any:
    # JSON mode normalises enums and nested models; timestamps are then put
    # back from the python dump so they can be rendered as expressions.
    json_dump = product.model_dump(mode="json")
    python_dump = product.model_dump(mode="python")

    def merge(json_value: Any, python_value: Any) -> Any:
        if isinstance(python_value, datetime):
            return python_value
        if isinstance(json_value, dict) and isinstance(python_value, dict):
            return {key: merge(item, python_value.get(key)) for key, item in json_value.items()}
        if isinstance(json_value, list) and isinstance(python_value, list):
            return [merge(left, right) for left, right in zip(json_value, python_value)]
        return json_value

    return merge(json_dump, python_dump)


def format_product(product: Product) -> str:
    literal = pformat(_literal_tree(_json_with_dates(product)), indent=1, width=88, sort_dicts=False)
    return f"{product_constant_name(product)}: Product = Product.model_validate(\n{literal}\n)"


def render_products_module(products: Sequence[Product]) -> str:
    """Return the source of the snapshot module for ``products``."""

    seen: dict[str, str] = {}
    for product in products:
        name = product_constant_name(product)
        if name in seen:
            raise SerializationError(
                f"Products '{seen[name]}' and '{product.name}' would both be written as {name}; "
                "rename one of them",
                payload={"constant": name, "products": [seen[name], product.name]},
            )
        seen[name] = product.name

    body = "\n\n\n".join(format_product(product) for product in products)
    return f"{MODULE_HEADER}\n\n{body}\n"


def format_source(source: str) -> str:
    """Run ``black`` over ``source`` when it is installed; otherwise return it as is."""

    if black is None:
        logger.debug("black is not installed; writing unformatted output")
        return source
    try:
        return black.format_str(source, mode=black.Mode())
    except Exception as exc:  # noqa: BLE001 - formatting is best effort
        logger.warning("Formatting generated module failed, writing it unformatted: %s", exc)
        return source


def write_products_to_file(products: Sequence[Product], path: str | Path) -> Path:
    """Write ``products`` as a Python module at ``path`` and return the resolved path."""

    if sys.platform == "emscripten":
        raise SerializationError("write_products_to_file is not supported without a filesystem")

    destination = Path(path).expanduser().resolve()
    content = format_source(render_products_module(products))

    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise SerializationError(
            f"Cannot write products to {destination}: {exc}",
            payload={"path": str(destination)},
        ) from exc

    logger.info("Wrote %s product(s) to %s", len(products), destination)
    return destination


__all__ = [
    "format_product",
    "format_source",
    "product_constant_name",
    "render_products_module",
    "to_camel_case",
    "write_products_to_file",
]
