"""
Row-level diff: key-set comparison, row materialization and INSERT emission.
"""

from .differ import ChangeSet, RowData, RowKey, RowSetDiffer, build_row_key
from .emitter import emit_change_set, generate_insert_sql
from .encoding import LITERAL_FORMATS, encode_literal, to_text
from .materializer import RowMaterializer, build_row_predicate

__all__ = [
    "RowKey",
    "RowData",
    "ChangeSet",
    "RowSetDiffer",
    "build_row_key",
    "RowMaterializer",
    "build_row_predicate",
    "LITERAL_FORMATS",
    "encode_literal",
    "to_text",
    "generate_insert_sql",
    "emit_change_set",
]
