"""
Prometheus metrics of a diff run.

Written to a textfile at the end of the run when ``--metrics-file`` is given.
"""

from prometheus_client import Counter, Histogram

from utils.metrics import get_or_create_metric

TABLES_PROCESSED = get_or_create_metric(
    lambda: Counter(
        "dbdiff_tables_total",
        "Candidate tables processed, by outcome",
        ["status"],
    ),
    "dbdiff_tables_total",
)

NEW_ROWS = get_or_create_metric(
    lambda: Counter(
        "dbdiff_new_rows_total",
        "Rows present in the after snapshot but not in the before snapshot",
        ["table"],
    ),
    "dbdiff_new_rows_total",
)

STATEMENTS_EMITTED = get_or_create_metric(
    lambda: Counter(
        "dbdiff_statements_emitted_total",
        "INSERT statements written to the output",
        ["table"],
    ),
    "dbdiff_statements_emitted_total",
)

NON_UNIQUE_IDENTITIES = get_or_create_metric(
    lambda: Counter(
        "dbdiff_non_unique_identities_total",
        "Rows whose identity values matched more than one row",
        ["table", "snapshot"],
    ),
    "dbdiff_non_unique_identities_total",
)

TABLE_DIFF_TIME = get_or_create_metric(
    lambda: Histogram(
        "dbdiff_table_seconds",
        "Time to diff one table and emit its statements",
        ["table"],
        buckets=[0.1, 0.5, 1, 5, 10, 30, 60, 120, 300, 600, 1800],
    ),
    "dbdiff_table_seconds",
)
