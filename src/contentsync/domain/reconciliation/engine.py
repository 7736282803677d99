"""Per-record create/update/skip decisions against destination state.

Rules, applied in plan order:

- no destination record with the identity -> ``CREATE``
- destination and incoming record both carry a modification time -> ``UPDATE``
  when the destination is strictly older, otherwise ``SKIP`` (never regress
  content)
- staleness cannot be determined (the destination type tracks no modification
  time, or the incoming record declares none) -> always ``UPDATE``

``UPDATE`` decisions carry the destination's internal key so the write lands
on the existing record. Incoming records without an owner get the configured
default owner attached when the destination exposes ownership for the type.

The engine only reads from the destination. Any lookup error aborts the run
with ``LookupFailed``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .contracts import DecisionReason, ReconciliationAction, ReconciliationDecision
from .errors import LookupFailed

if TYPE_CHECKING:
    from collections.abc import Hashable, Iterator

    from contentsync.domain.ports.persistence import DestinationLookup, ExistingRecord

    from .index import RecordDescriptor, RecordIndex
    from .plan import ImportPlan

log = logging.getLogger(__name__)


@dataclass(slots=True)
class ReconciliationEngine:
    lookup: DestinationLookup
    default_owner: str | None = None

    def iter_decisions(
        self, plan: ImportPlan, index: RecordIndex
    ) -> Iterator[ReconciliationDecision]:
        """Yield one decision per planned identity, lazily.

        The next destination lookup only happens once the caller asks for the
        next decision, so a driver can apply each decision before the
        following record is inspected.
        """

        for identity in plan:
            yield self.decide(index.descriptor_for(identity))

    def reconcile(self, plan: ImportPlan, index: RecordIndex) -> list[ReconciliationDecision]:
        return list(self.iter_decisions(plan, index))

    def decide(self, descriptor: RecordDescriptor) -> ReconciliationDecision:
        existing = self._find(descriptor)

        if existing is None:
            return self._decision(
                descriptor,
                ReconciliationAction.CREATE,
                DecisionReason.NOT_FOUND,
            )

        destination_time = existing.last_modified()
        source_time = descriptor.last_modified
        if destination_time is None or source_time is None:
            log.debug(
                "Update forced for %s: modification time unavailable "
                "(destination=%s, source=%s)",
                descriptor.identity,
                destination_time,
                source_time,
            )
            return self._decision(
                descriptor,
                ReconciliationAction.UPDATE,
                DecisionReason.STALENESS_UNKNOWN,
                target_key=existing.internal_key(),
            )

        if destination_time < source_time:
            return self._decision(
                descriptor,
                ReconciliationAction.UPDATE,
                DecisionReason.SOURCE_NEWER,
                target_key=existing.internal_key(),
            )

        log.debug(
            "Skipping %s: destination is same age or newer (destination=%s, source=%s)",
            descriptor.identity,
            destination_time,
            source_time,
        )
        return ReconciliationDecision(
            identity=descriptor.identity,
            type_id=descriptor.type_id,
            action=ReconciliationAction.SKIP,
            reason=DecisionReason.DESTINATION_CURRENT,
        )

    def _decision(
        self,
        descriptor: RecordDescriptor,
        action: ReconciliationAction,
        reason: DecisionReason,
        *,
        target_key: Hashable | None = None,
    ) -> ReconciliationDecision:
        return ReconciliationDecision(
            identity=descriptor.identity,
            type_id=descriptor.type_id,
            action=action,
            reason=reason,
            target_key=target_key,
            owner=self._owner_for(descriptor),
        )

    def _owner_for(self, descriptor: RecordDescriptor) -> str | None:
        if descriptor.owner is not None or self.default_owner is None:
            return None
        try:
            supported = self.lookup.supports_ownership(descriptor.type_id)
        except Exception as exc:
            raise LookupFailed(descriptor.identity, str(exc)) from exc
        return self.default_owner if supported else None

    def _find(self, descriptor: RecordDescriptor) -> ExistingRecord | None:
        try:
            return self.lookup.find_by_identity(descriptor.identity, type_id=descriptor.type_id)
        except LookupFailed:
            raise
        except Exception as exc:
            raise LookupFailed(descriptor.identity, str(exc)) from exc
