"""Drive a batch of import records through parsing, resolution and insertion.

The batch is a fold over the records: ``step`` takes the state accumulated so far
plus one record and returns the next state. A hard store failure is recorded on the
state as ``abort`` and the fold stops there; records after it are never read.
Parse skips only add an outcome and the fold carries on.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from housing_registry.config.csv_format import ImportConfig
from housing_registry.domain.errors import MultipleMatchError, StoreError
from housing_registry.domain.importing.outcomes import BatchAbort, ImportOutcome, ImportSummary
from housing_registry.domain.importing.records import ParseSkip, parse_record
from housing_registry.domain.importing.resolver import HierarchyResolver
from housing_registry.domain.model import Resident

if TYPE_CHECKING:
    from collections.abc import Iterable

    from housing_registry.domain.importing.records import ImportRecord, ParsedRecord
    from housing_registry.domain.ports.unit_of_work import RegistryUnitOfWork

log = logging.getLogger(__name__)


@dataclass(slots=True)
class BatchState:
    outcomes: list[ImportOutcome] = field(default_factory=list[ImportOutcome])
    abort: BatchAbort | None = None

    @property
    def stopped(self) -> bool:
        return self.abort is not None


class BatchReconciler:
    """Reconcile import records against the store one at a time, in order."""

    def __init__(self, uow: RegistryUnitOfWork, *, config: ImportConfig | None = None) -> None:
        self.uow = uow
        self.config = config or ImportConfig()
        self.resolver = HierarchyResolver(
            uow,
            imported_house_floors=self.config.imported_house_floors,
        )

    def run(self, records: Iterable[ImportRecord]) -> ImportSummary:
        state = BatchState()
        for record in records:
            state = self.step(state, record)
            if state.stopped:
                break
        return self.summarize(state)

    def step(self, state: BatchState, record: ImportRecord) -> BatchState:
        parsed = parse_record(record, date_formats=self.config.date_formats)
        if isinstance(parsed, ParseSkip):
            log.warning("Skipping line %s: %s", parsed.line_number, parsed.reason)
            state.outcomes.append(ImportOutcome.skipped(record, parsed.reason))
            return state

        try:
            resident_id = self._insert(parsed)
        except (MultipleMatchError, StoreError) as exc:
            log.error("Import aborted at line %s: %s", record.line_number, exc)  # noqa: TRY400
            self.uow.rollback()
            state.outcomes.append(ImportOutcome.failed(record, str(exc)))
            state.abort = BatchAbort(record, exc)
            return state

        state.outcomes.append(ImportOutcome.inserted(record, resident_id))
        return state

    def summarize(self, state: BatchState) -> ImportSummary:
        return ImportSummary(
            outcomes=tuple(state.outcomes),
            abort=state.abort,
            houses_created=self.resolver.houses_created,
            apartments_created=self.resolver.apartments_created,
        )

    def _insert(self, parsed: ParsedRecord) -> int | None:
        apartment_id = self.resolver.resolve(
            parsed.microdistrict,
            parsed.house_number,
            parsed.apartment_num,
            parsed.floor,
        )
        resident = self.uow.repositories.residents.add(
            Resident(
                apartment_id=apartment_id,
                first_name=parsed.first_name,
                last_name=parsed.last_name,
                phone=parsed.phone,
                move_in_date=parsed.move_in_date,
            )
        )
        self.uow.commit()
        return resident.id


def reconcile_batch(
    records: Iterable[ImportRecord],
    uow: RegistryUnitOfWork,
    *,
    config: ImportConfig | None = None,
) -> ImportSummary:
    """Reconcile ``records`` inside an open unit of work and summarise the run."""

    summary = BatchReconciler(uow, config=config).run(records)
    if summary.abort is None:
        log.info(
            "Import finished: inserted=%s, skipped=%s, houses_created=%s, apartments_created=%s",
            summary.inserted,
            summary.skipped,
            summary.houses_created,
            summary.apartments_created,
        )
    else:
        log.error(summary.abort.message)
    return summary
