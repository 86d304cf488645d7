"""
Snapshot access: connections, read-only query execution, catalog introspection.
"""

from .connection import ConnectionConfig, Snapshot, connect, open_snapshot
from .executor import QueryExecutor
from .provider import CatalogProvider, InformationSchemaCatalog

__all__ = [
    "CatalogProvider",
    "InformationSchemaCatalog",
    "QueryExecutor",
    "ConnectionConfig",
    "Snapshot",
    "connect",
    "open_snapshot",
]
