"""Per-record outcomes and the summary of an import run."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from housing_registry.domain.errors import RegistryError
    from housing_registry.domain.importing.records import ImportRecord


class OutcomeStatus(StrEnum):
    SKIPPED = "skipped"
    INSERTED = "inserted"
    FAILED = "failed"


@dataclass(frozen=True, slots=True, kw_only=True)
class ImportOutcome:
    """What happened to one input row."""

    record: ImportRecord
    status: OutcomeStatus
    reason: str
    resident_id: int | None = None

    @property
    def line_number(self) -> int:
        return self.record.line_number

    @classmethod
    def skipped(cls, record: ImportRecord, reason: str) -> ImportOutcome:
        return cls(record=record, status=OutcomeStatus.SKIPPED, reason=reason)

    @classmethod
    def inserted(cls, record: ImportRecord, resident_id: int | None) -> ImportOutcome:
        return cls(
            record=record,
            status=OutcomeStatus.INSERTED,
            reason="resident inserted",
            resident_id=resident_id,
        )

    @classmethod
    def failed(cls, record: ImportRecord, reason: str) -> ImportOutcome:
        return cls(record=record, status=OutcomeStatus.FAILED, reason=reason)


@dataclass(frozen=True, slots=True)
class BatchAbort:
    """The hard error that terminated a run, and the row it happened on."""

    record: ImportRecord
    error: RegistryError

    @property
    def line_number(self) -> int:
        return self.record.line_number

    @property
    def message(self) -> str:
        return f"Import stopped at line {self.line_number}: {self.error}"


@dataclass(frozen=True, slots=True, kw_only=True)
class ImportSummary:
    outcomes: tuple[ImportOutcome, ...] = ()
    abort: BatchAbort | None = None
    houses_created: int = 0
    apartments_created: int = 0

    @property
    def completed(self) -> bool:
        return self.abort is None

    @property
    def inserted(self) -> int:
        return self._count(OutcomeStatus.INSERTED)

    @property
    def skipped(self) -> int:
        return self._count(OutcomeStatus.SKIPPED)

    @property
    def failed(self) -> int:
        return self._count(OutcomeStatus.FAILED)

    def _count(self, status: OutcomeStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status is status)
