"""Bulk import of resident records into the housing hierarchy."""

from __future__ import annotations

from .outcomes import BatchAbort, ImportOutcome, ImportSummary, OutcomeStatus
from .reconciler import BatchReconciler, BatchState, reconcile_batch
from .records import (
    COLUMNS,
    ImportRecord,
    ParsedRecord,
    ParseSkip,
    parse_date,
    parse_record,
    read_import_records,
)
from .resolver import HierarchyResolver, single_or_none

__all__ = [
    "COLUMNS",
    "BatchAbort",
    "BatchReconciler",
    "BatchState",
    "HierarchyResolver",
    "ImportOutcome",
    "ImportRecord",
    "ImportSummary",
    "OutcomeStatus",
    "ParseSkip",
    "ParsedRecord",
    "parse_date",
    "parse_record",
    "read_import_records",
    "reconcile_batch",
    "single_or_none",
]
