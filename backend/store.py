"""Generic list/insert/update/delete access to the named record collections."""
from __future__ import annotations

import logging
from datetime import UTC, datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, select

from models import Appointment, DailyStatistic, Incentive, WeeklyMeeting

logger = logging.getLogger(__name__)

COLLECTIONS: dict[str, type[SQLModel]] = {
    "appointments": Appointment,
    "daily_statistics": DailyStatistic,
    "incentives": Incentive,
    "weekly_meetings": WeeklyMeeting,
}

# Columns the store manages itself; callers may not write them
_READONLY_COLUMNS = {"id", "created_at", "updated_at"}


class RecordStoreError(Exception):
    """Raised when a store operation cannot be completed."""


class RecordNotFoundError(RecordStoreError):
    def __init__(self, collection: str, record_id: int):
        super().__init__(f"No record {record_id} in {collection}")
        self.collection = collection
        self.record_id = record_id


class RecordStore:
    """Record store client bound to one database session.

    Every write is committed before returning; a failed write is rolled back
    so nothing from it is left in the session.
    """

    def __init__(self, session: Session):
        self.session = session

    def _model(self, collection: str) -> type[SQLModel]:
        try:
            return COLLECTIONS[collection]
        except KeyError:
            raise RecordStoreError(f"Unknown collection: {collection}") from None

    def _check_columns(self, model: type[SQLModel], row: dict) -> dict:
        unknown = set(row) - set(model.model_fields)
        if unknown:
            raise RecordStoreError(f"Unknown field(s) for {model.__tablename__}: {sorted(unknown)}")
        return {k: v for k, v in row.items() if k not in _READONLY_COLUMNS}

    def _get(self, collection: str, record_id: int) -> SQLModel:
        model = self._model(collection)
        record = self.session.get(model, record_id)
        if record is None:
            raise RecordNotFoundError(collection, record_id)
        return record

    def list(self, collection: str, order_by: str | None = "created_at", direction: str = "desc") -> list:
        model = self._model(collection)
        stmt = select(model)
        if order_by:
            if order_by not in model.model_fields:
                raise RecordStoreError(f"Cannot order {collection} by unknown column {order_by}")
            if direction not in ("asc", "desc"):
                raise RecordStoreError(f"Order direction must be 'asc' or 'desc', got {direction!r}")
            # id breaks ties in the same direction so "desc" stays newest-first
            if direction == "desc":
                stmt = stmt.order_by(getattr(model, order_by).desc(), model.id.desc())
            else:
                stmt = stmt.order_by(getattr(model, order_by).asc(), model.id.asc())
        try:
            return list(self.session.exec(stmt).all())
        except SQLAlchemyError as e:
            logger.error(f"Error listing {collection}: {str(e)}")
            raise RecordStoreError(f"Could not load {collection}") from e

    def insert(self, collection: str, row: dict) -> SQLModel:
        model = self._model(collection)
        record = model(**self._check_columns(model, row))
        try:
            self.session.add(record)
            self.session.commit()
            self.session.refresh(record)
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Error inserting into {collection}: {str(e)}")
            raise RecordStoreError(f"Could not insert into {collection}") from e
        logger.info(f"Inserted {collection} record {record.id}")
        return record

    def insert_many(self, collection: str, rows: list[dict]) -> int:
        """Insert all rows in one transaction; either every row is committed or none is."""
        model = self._model(collection)
        records = [model(**self._check_columns(model, row)) for row in rows]
        try:
            self.session.add_all(records)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Error bulk inserting {len(records)} rows into {collection}: {str(e)}")
            raise RecordStoreError(f"Could not insert {len(records)} rows into {collection}") from e
        logger.info(f"Inserted {len(records)} {collection} records")
        return len(records)

    def update(self, collection: str, record_id: int, partial_row: dict) -> SQLModel:
        record = self._get(collection, record_id)
        changes = self._check_columns(type(record), partial_row)
        try:
            for key, value in changes.items():
                setattr(record, key, value)
            record.updated_at = datetime.now(UTC)
            self.session.add(record)
            self.session.commit()
            self.session.refresh(record)
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Error updating {collection} record {record_id}: {str(e)}")
            raise RecordStoreError(f"Could not update {collection} record {record_id}") from e
        logger.info(f"Updated {collection} record {record_id}")
        return record

    def delete(self, collection: str, record_id: int) -> None:
        record = self._get(collection, record_id)
        try:
            self.session.delete(record)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Error deleting {collection} record {record_id}: {str(e)}")
            raise RecordStoreError(f"Could not delete {collection} record {record_id}") from e
        logger.info(f"Deleted {collection} record {record_id}")
