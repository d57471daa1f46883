"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import distinct, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload

from housing_registry.adapters.sqlalchemy.mappings import (
    apartment_table,
    house_table,
    resident_table,
)
from housing_registry.domain.errors import NotFoundError, StoreError
from housing_registry.domain.model import Apartment, House, Resident, ResidentListing

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from sqlalchemy import ColumnElement, Row, Select
    from sqlalchemy.orm import Session

# natural-key lookups fetch one row more than allowed so duplicates are visible
_LOOKUP_LIMIT = 2


@contextmanager
def store_errors(operation: str) -> Iterator[None]:
    """Re-raise SQLAlchemy failures as ``StoreError``."""

    try:
        yield
    except SQLAlchemyError as exc:
        raise StoreError(operation, str(exc)) from exc


class SqlAlchemyHouseRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: House) -> House:
        with store_errors("insert house"):
            self.session.add(entity)
            self.session.flush()
        return entity

    def find(self, microdistrict: str, house_number: str) -> list[House]:
        stmt = (
            select(House)
            .where(house_table.c.microdistrict == microdistrict)
            .where(house_table.c.house_number == house_number)
            .order_by(house_table.c.id)
            .limit(_LOOKUP_LIMIT)
        )
        with store_errors("find house"):
            return list(self.session.execute(stmt).scalars())

    def microdistricts(self) -> list[str]:
        stmt = select(distinct(house_table.c.microdistrict)).order_by(house_table.c.microdistrict)
        with store_errors("list microdistricts"):
            return list(self.session.execute(stmt).scalars())

    def in_microdistrict(self, microdistrict: str) -> list[House]:
        house_apartments = cast(Any, House).apartments
        apartment_residents = cast(Any, Apartment).residents
        stmt = (
            select(House)
            .where(house_table.c.microdistrict == microdistrict)
            .options(selectinload(house_apartments).selectinload(apartment_residents))
            .order_by(house_table.c.house_number, house_table.c.id)
            .execution_options(populate_existing=True)
        )
        with store_errors("load microdistrict"):
            return list(self.session.execute(stmt).scalars())


class SqlAlchemyApartmentRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Apartment) -> Apartment:
        with store_errors("insert apartment"):
            self.session.add(entity)
            self.session.flush()
        return entity

    def add_all(self, apartments: Iterable[Apartment]) -> None:
        with store_errors("insert apartments"):
            self.session.add_all(list(apartments))
            self.session.flush()

    def get(self, apartment_id: int) -> Apartment | None:
        with store_errors("get apartment"):
            return self.session.get(Apartment, apartment_id)

    def find(self, house_id: int, apartment_num: int) -> list[Apartment]:
        stmt = (
            select(Apartment)
            .where(apartment_table.c.house_id == house_id)
            .where(apartment_table.c.apartment_num == apartment_num)
            .order_by(apartment_table.c.id)
            .limit(_LOOKUP_LIMIT)
        )
        with store_errors("find apartment"):
            return list(self.session.execute(stmt).scalars())


class SqlAlchemyResidentRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Resident) -> Resident:
        with store_errors("insert resident"):
            self.session.add(entity)
            self.session.flush()
        return entity

    def remove(self, resident_id: int) -> None:
        with store_errors("delete resident"):
            resident = self.session.get(Resident, resident_id)
            if resident is None:
                raise NotFoundError("resident", resident_id)
            self.session.delete(resident)
            self.session.flush()

    def search(
        self,
        term: str | None = None,
        *,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[ResidentListing]:
        stmt = self._listing_query().order_by(resident_table.c.id)
        condition = _search_condition(term)
        if condition is not None:
            stmt = stmt.where(condition)
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        with store_errors("search residents"):
            return [_listing_from_row(row) for row in self.session.execute(stmt)]

    def count(self, term: str | None = None) -> int:
        stmt = select(func.count()).select_from(resident_table)
        condition = _search_condition(term)
        if condition is not None:
            stmt = stmt.where(condition)
        with store_errors("count residents"):
            return int(self.session.execute(stmt).scalar_one())

    def export_view(self) -> list[ResidentListing]:
        return self.search()

    @staticmethod
    def _listing_query() -> Select[Any]:
        joined = resident_table.outerjoin(
            apartment_table,
            apartment_table.c.id == resident_table.c.apartment_id,
        ).outerjoin(
            house_table,
            house_table.c.id == apartment_table.c.house_id,
        )
        return select(
            resident_table.c.id,
            resident_table.c.first_name,
            resident_table.c.last_name,
            resident_table.c.phone,
            resident_table.c.move_in_date,
            apartment_table.c.id.label("apartment_id"),
            apartment_table.c.apartment_num,
            apartment_table.c.floor,
            house_table.c.microdistrict,
            house_table.c.house_number,
        ).select_from(joined)


def _search_condition(term: str | None) -> ColumnElement[bool] | None:
    if not term:
        return None
    return or_(
        resident_table.c.last_name.icontains(term, autoescape=True),
        resident_table.c.first_name.icontains(term, autoescape=True),
        resident_table.c.phone.icontains(term, autoescape=True),
    )


def _listing_from_row(row: Row[Any]) -> ResidentListing:
    return ResidentListing(
        resident_id=row.id,
        first_name=row.first_name,
        last_name=row.last_name,
        phone=row.phone,
        move_in_date=row.move_in_date,
        apartment_id=row.apartment_id,
        apartment_num=row.apartment_num,
        floor=row.floor,
        microdistrict=row.microdistrict,
        house_number=row.house_number,
    )


if TYPE_CHECKING:
    from housing_registry.domain.ports.persistence import (
        ApartmentRepository,
        HouseRepository,
        ResidentRepository,
    )

    _session_stub = cast("Session", object())
    _house_repo: HouseRepository = SqlAlchemyHouseRepository(_session_stub)
    _apartment_repo: ApartmentRepository = SqlAlchemyApartmentRepository(_session_stub)
    _resident_repo: ResidentRepository = SqlAlchemyResidentRepository(_session_stub)
