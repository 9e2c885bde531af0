"""
Generic table-addressed record store over the ORM models.

Callers (the import pipeline, the exporter, the audit sink) only ever see
plain dicts keyed by column name, never ORM instances.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from sqlalchemy import inspect as sa_inspect
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db.base import Base
from db.models import AuditLog, ImportJob, IndustryMetric, StrategicGoal
from db.repositories.errors import RecordNotFoundError, RecordStoreError, UnknownTableError

DEFAULT_TABLE_MODELS: dict[str, type[Base]] = {
    model.__tablename__: model
    for model in (ImportJob, StrategicGoal, IndustryMetric, AuditLog)
}


@dataclass(frozen=True)
class Pagination:
    limit: int = 100
    offset: int = 0


class RecordStore(Protocol):
    def create_record(self, table: str, data: Mapping[str, Any]) -> dict[str, Any]:
        ...

    def update_record(
        self,
        table: str,
        record_id: Any,
        patch: Mapping[str, Any],
    ) -> dict[str, Any]:
        ...

    def get_record(self, table: str, record_id: Any) -> dict[str, Any] | None:
        ...

    def fetch_data(
        self,
        table: str,
        *,
        pagination: Pagination | None = None,
        filters: Mapping[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        ...


def model_to_dict(instance: Base) -> dict[str, Any]:
    """
    Column values of one ORM instance, in mapper column order.
    """

    mapper = sa_inspect(instance).mapper
    return {attr.key: getattr(instance, attr.key) for attr in mapper.column_attrs}


class SQLAlchemyRecordStore:
    """
    RecordStore backed by a SQLAlchemy session.

    Every write is its own transaction: it commits on success and rolls back
    before raising RecordStoreError, so one failed write never takes earlier
    ones with it.
    """

    def __init__(
        self,
        session: Session,
        *,
        table_models: Mapping[str, type[Base]] | None = None,
    ) -> None:
        self._session = session
        self._table_models = dict(table_models or DEFAULT_TABLE_MODELS)

    def create_record(self, table: str, data: Mapping[str, Any]) -> dict[str, Any]:
        model = self._resolve_model(table)
        self._check_columns(model, table, data.keys())

        instance = model(**dict(data))
        try:
            self._session.add(instance)
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise RecordStoreError(
                f"Failed to create {table} record: {_describe(exc)}"
            ) from exc
        return model_to_dict(instance)

    def update_record(
        self,
        table: str,
        record_id: Any,
        patch: Mapping[str, Any],
    ) -> dict[str, Any]:
        model = self._resolve_model(table)
        self._check_columns(model, table, patch.keys())

        instance = self._get_instance(model, record_id)
        if instance is None:
            raise RecordNotFoundError(f"{table} record not found: {record_id}")

        try:
            for key, value in patch.items():
                setattr(instance, key, value)
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise RecordStoreError(
                f"Failed to update {table} record {record_id}: {_describe(exc)}"
            ) from exc
        return model_to_dict(instance)

    def get_record(self, table: str, record_id: Any) -> dict[str, Any] | None:
        model = self._resolve_model(table)
        instance = self._get_instance(model, record_id)
        if instance is None:
            return None
        return model_to_dict(instance)

    def fetch_data(
        self,
        table: str,
        *,
        pagination: Pagination | None = None,
        filters: Mapping[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        model = self._resolve_model(table)
        page = pagination or Pagination()
        stmt = select(model)

        for key, value in (filters or {}).items():
            self._check_columns(model, table, [key])
            column = getattr(model, key)
            if key == "id":
                value = _coerce_uuid(value)
                if value is None:
                    return []
            stmt = stmt.where(column == value)

        created_at = getattr(model, "created_at", None)
        if created_at is not None:
            stmt = stmt.order_by(created_at.desc())

        stmt = stmt.offset(max(0, page.offset)).limit(max(1, page.limit))
        try:
            instances = self._session.scalars(stmt).all()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise RecordStoreError(f"Failed to fetch {table} records: {_describe(exc)}") from exc
        return [model_to_dict(instance) for instance in instances]

    def _resolve_model(self, table: str) -> type[Base]:
        model = self._table_models.get(table)
        if model is None:
            allowed = ", ".join(sorted(self._table_models))
            raise UnknownTableError(f"Unknown table '{table}'. Allowed tables: {allowed}.")
        return model

    def _get_instance(self, model: type[Base], record_id: Any) -> Base | None:
        key = _coerce_uuid(record_id)
        if key is None:
            return None
        return self._session.get(model, key)

    @staticmethod
    def _check_columns(model: type[Base], table: str, keys: Any) -> None:
        columns = {attr.key for attr in sa_inspect(model).column_attrs}
        unknown = sorted(set(keys) - columns)
        if unknown:
            raise RecordStoreError(f"Unknown column(s) for {table}: {', '.join(unknown)}.")


def _coerce_uuid(value: Any) -> uuid.UUID | None:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


def _describe(exc: SQLAlchemyError) -> str:
    detail = getattr(exc, "orig", None) or exc
    return str(detail).strip().splitlines()[0] if str(detail).strip() else type(exc).__name__
