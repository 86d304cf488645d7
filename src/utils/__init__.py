"""
Shared utilities for dbdiff

Provides:
- database_types: dialect enumeration (quoting, placeholders, literals)
- sql_safety: identifier validation and quoting
- retry: backoff for transient database errors
- logging: console/JSON logging setup
- tracing: OpenTelemetry spans
- metrics: Prometheus metric registration helpers
- vault_client: HashiCorp Vault credential lookup
"""

__version__ = "1.0.0"
__all__ = [
    "database_types",
    "sql_safety",
    "retry",
    "logging",
    "tracing",
    "metrics",
    "vault_client",
]
