"""store-fn: define Polar product catalogs in code and keep a snapshot of them."""

from .adapters import MockPolarAdapter, PolarAdapterError, PolarRESTAdapter, get_polar_adapter
from .codegen import render_products_module, write_products_to_file
from .config import get_config, init_config, require_config
from .errors import (
    ConfigurationLoadError,
    DefinitionValidationError,
    RemoteCallError,
    SerializationError,
    StoreFnError,
)
from .models import Product, ProductCreateDefinition, ProductDefinition
from .reconciler import SyncAction, SyncActionKind
from .snapshot import RemoteSnapshot, SyncContext
from .store import PushResult, Store, create_store

__all__ = [
    "ConfigurationLoadError",
    "DefinitionValidationError",
    "MockPolarAdapter",
    "PolarAdapterError",
    "PolarRESTAdapter",
    "Product",
    "ProductCreateDefinition",
    "ProductDefinition",
    "PushResult",
    "RemoteCallError",
    "RemoteSnapshot",
    "SerializationError",
    "Store",
    "StoreFnError",
    "SyncAction",
    "SyncActionKind",
    "SyncContext",
    "create_store",
    "get_config",
    "get_polar_adapter",
    "init_config",
    "render_products_module",
    "require_config",
    "write_products_to_file",
]

__version__ = "0.1.0"
