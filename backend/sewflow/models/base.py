"""Declarative base for the production tables.

All ``prd_*`` tables share one ``MetaData`` so ``create_all`` (startup in dev,
``scripts/init_db.py``, the SQLite tests) sees every table, and unnamed
indexes and constraints get stable names on MySQL.
"""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

NAMING_CONVENTION = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)
