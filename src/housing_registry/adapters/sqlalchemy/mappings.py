"""SQLAlchemy mapping metadata for the housing domain model."""

from __future__ import annotations

import logging
from functools import cache
from typing import TYPE_CHECKING

from sqlalchemy import Column, Date, ForeignKey, Index, Integer, String, Table, orm
from sqlalchemy.orm import configure_mappers, relationship

from housing_registry.domain.model import Apartment, House, Resident

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Address lookups are indexed but not unique; duplicates surface as MultipleMatchError.

house_table = Table(
    "house",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("microdistrict", String, nullable=False),
    Column("house_number", String, nullable=False),
    Column("floors_count", Integer, nullable=True),
    Index("ix_house_address", "microdistrict", "house_number"),
)

apartment_table = Table(
    "apartment",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "house_id",
        Integer,
        ForeignKey("house.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("floor", Integer, nullable=False),
    Column("apartment_num", Integer, nullable=False),
    Index("ix_apartment_house_num", "house_id", "apartment_num"),
)

resident_table = Table(
    "resident",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "apartment_id",
        Integer,
        ForeignKey("apartment.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("first_name", String, nullable=False),
    Column("last_name", String, nullable=False),
    Column("phone", String, nullable=False),
    Column("move_in_date", Date, nullable=True),
)


@cache
def start_mappers() -> orm.registry:
    """Map houses, apartments and residents onto their tables; runs once per process."""

    log.debug("Mapping registry entities")

    mapper_registry.map_imperatively(
        House,
        house_table,
        properties={
            "apartments": relationship(
                Apartment,
                order_by=(apartment_table.c.floor, apartment_table.c.apartment_num),
                cascade="all, delete-orphan",
            ),
        },
    )

    mapper_registry.map_imperatively(
        Apartment,
        apartment_table,
        properties={
            "residents": relationship(
                Resident,
                order_by=resident_table.c.id,
                cascade="all, delete-orphan",
            ),
        },
    )

    mapper_registry.map_imperatively(
        Resident,
        resident_table,
    )

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create the registry tables that do not exist yet; existing tables are kept as is."""

    log.debug("Ensuring registry tables exist")
    mapper_registry.metadata.create_all(engine)
