"""
Snapshot connections for PostgreSQL and SQL Server.

Drivers are imported when a connection is opened so that the package can be
imported on machines that only have one of them (pyodbc needs the unixODBC
shared library at import time).
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from opentelemetry import trace

from utils.database_types import DatabaseType
from utils.retry import retry_database_operation
from utils.tracing import trace_operation

from ..errors import SnapshotConnectionError
from .executor import QueryExecutor
from .provider import CatalogProvider, InformationSchemaCatalog

logger = logging.getLogger(__name__)

DEFAULT_PORTS = {
    DatabaseType.POSTGRESQL: 5432,
    DatabaseType.SQLSERVER: 1433,
}


@dataclass(frozen=True)
class ConnectionConfig:
    """Connection settings of one snapshot database."""

    host: str
    database: str
    user: str
    password: str = field(repr=False)
    port: int | None = None
    driver: str = "ODBC Driver 18 for SQL Server"


@dataclass
class Snapshot:
    """An open, read-only snapshot: its executor and catalog."""

    name: str
    db_type: DatabaseType
    executor: QueryExecutor
    catalog: CatalogProvider
    connection: Any = None

    def close(self) -> None:
        if self.connection is not None:
            try:
                self.connection.close()
            finally:
                self.connection = None


def _connect_postgres(config: ConnectionConfig, statement_timeout: int | None) -> tuple[Any, tuple]:
    import psycopg2

    options = None
    if statement_timeout:
        options = f"-c statement_timeout={statement_timeout * 1000}"

    conn = psycopg2.connect(
        host=config.host,
        port=config.port or DEFAULT_PORTS[DatabaseType.POSTGRESQL],
        dbname=config.database,
        user=config.user,
        password=config.password,
        connect_timeout=10,
        options=options,
    )
    conn.set_session(readonly=True, autocommit=True)
    return conn, (psycopg2.Error,)


def _connect_sqlserver(config: ConnectionConfig, statement_timeout: int | None) -> tuple[Any, tuple]:
    import pyodbc

    conn_str = (
        f"DRIVER={{{config.driver}}};"
        f"SERVER={config.host},{config.port or DEFAULT_PORTS[DatabaseType.SQLSERVER]};"
        f"DATABASE={config.database};"
        f"UID={config.user};"
        f"PWD={config.password};"
        "TrustServerCertificate=yes;"
        "Encrypt=yes;"
        "ApplicationIntent=ReadOnly;"
    )
    conn = pyodbc.connect(conn_str, timeout=10, autocommit=True, readonly=True)
    if statement_timeout:
        conn.timeout = statement_timeout
    return conn, (pyodbc.Error,)


_CONNECTORS = {
    DatabaseType.POSTGRESQL: _connect_postgres,
    DatabaseType.SQLSERVER: _connect_sqlserver,
}


def connect(
    name: str,
    config: ConnectionConfig,
    db_type: DatabaseType,
    statement_timeout: int | None = None,
) -> tuple[Any, tuple]:
    """
    Open a read-only autocommit connection.

    Args:
        name: Snapshot label ("before"/"after") for errors and logs
        config: Connection settings
        db_type: Dialect selecting the driver
        statement_timeout: Per-statement timeout in seconds (None = no limit)

    Returns:
        ``(connection, driver_error_types)``

    Raises:
        SnapshotConnectionError: If the connection cannot be established
    """
    connector = retry_database_operation(max_retries=2, base_delay=1.0)(_CONNECTORS[db_type])

    with trace_operation(
        f"{db_type.value}_connect",
        kind=trace.SpanKind.CLIENT,
        snapshot=name,
        db_host=config.host,
        db_name=config.database,
    ):
        try:
            conn, error_types = connector(config, statement_timeout)
        except ImportError as e:
            raise SnapshotConnectionError(name, f"driver for {db_type.value} is not installed ({e})") from e
        except Exception as e:
            raise SnapshotConnectionError(name, f"{type(e).__name__}: {e}") from e

    logger.info(f"Connected to {name} database {config.database} on {config.host}")
    return conn, error_types


def open_snapshot(
    name: str,
    config: ConnectionConfig,
    db_type: DatabaseType,
    schema: str,
    statement_timeout: int | None = None,
) -> Snapshot:
    """Connect and wire up the executor and catalog of one snapshot."""
    conn, error_types = connect(name, config, db_type, statement_timeout)
    executor = QueryExecutor(conn, db_type, name=name, error_types=error_types)
    return Snapshot(
        name=name,
        db_type=db_type,
        executor=executor,
        catalog=InformationSchemaCatalog(executor, schema),
        connection=conn,
    )
