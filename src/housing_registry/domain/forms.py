"""Pydantic models for operator form submissions."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Self

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from housing_registry.domain.errors import InvalidSubmissionError

if TYPE_CHECKING:
    from collections.abc import Mapping


def _required_text(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValueError("required field")
        return stripped
    return value


class SubmissionModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    @classmethod
    def parse(cls, payload: Mapping[str, object]) -> Self:
        """Validate ``payload`` and report every failing field at once."""

        try:
            return cls.model_validate(payload)
        except ValidationError as exc:
            field_errors: dict[str, str] = {}
            for error in exc.errors():
                name = ".".join(str(part) for part in error["loc"]) or "__root__"
                field_errors.setdefault(name, error["msg"])
            raise InvalidSubmissionError(field_errors) from exc


class HouseSubmission(SubmissionModel):
    microdistrict: str
    house_number: str
    floors_count: int = Field(gt=0)

    _require_text = field_validator("microdistrict", "house_number", mode="before")(
        _required_text
    )


class ResidentSubmission(SubmissionModel):
    first_name: str
    last_name: str
    phone: str
    move_in_date: date = Field(default_factory=date.today)

    _require_text = field_validator("first_name", "last_name", "phone", mode="before")(
        _required_text
    )
