"""Ordering and reconciliation core for content imports.

Flow for one batch:
1) index scanned locations into descriptors
2) build the dependency graph from descriptor references
3) plan an application order (cycles collapsed, dependencies first)
4) decide create/update/skip per planned identity against the destination
5) hand each decision to an import driver and aggregate the counters
"""

from __future__ import annotations

from .apply import ApplyOutcome, ImportDriver, apply_decisions
from .contracts import (
    ApplyFailure,
    BatchResult,
    DecisionReason,
    ReconciliationAction,
    ReconciliationDecision,
)
from .engine import ReconciliationEngine
from .errors import (
    ApplyFailed,
    ContentSyncError,
    DuplicateIdentity,
    LookupFailed,
    MalformedRecord,
)
from .graph import DependencyGraph, FrozenGraphError, Vertex
from .index import (
    DecodedRecord,
    DuplicatePolicy,
    DuplicateWarning,
    RecordDecoder,
    RecordDescriptor,
    RecordIndex,
    SourceLocation,
    build_record_index,
)
from .plan import ImportPlan, plan_import, strongly_connected_components

__all__ = [
    "ApplyFailed",
    "ApplyFailure",
    "ApplyOutcome",
    "BatchResult",
    "ContentSyncError",
    "DecisionReason",
    "DecodedRecord",
    "DependencyGraph",
    "DuplicateIdentity",
    "DuplicatePolicy",
    "DuplicateWarning",
    "FrozenGraphError",
    "ImportDriver",
    "ImportPlan",
    "LookupFailed",
    "MalformedRecord",
    "ReconciliationAction",
    "ReconciliationDecision",
    "ReconciliationEngine",
    "RecordDecoder",
    "RecordDescriptor",
    "RecordIndex",
    "SourceLocation",
    "Vertex",
    "apply_decisions",
    "build_record_index",
    "plan_import",
    "strongly_connected_components",
]
