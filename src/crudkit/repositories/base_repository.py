"""
Generic repository over one SQLAlchemy model.

The repository owns *what* is written; the unit of work owns *when* it becomes
durable. Every mutating method flushes immediately (so database errors and
generated values surface at the call site) but never commits.

Optimistic concurrency
----------------------
Models that declare `__mapper_args__ = {"version_id_col": ...}` get a version
check on every UPDATE. When `update()` hits a conflict (`StaleDataError`) it
keeps the caller's changes, reloads the row, re-applies the changes on top of
the fresh state and flushes once more. A second conflict is raised to the
caller unchanged.

A detached entity that carries an old version is refused by `merge()`. The
values it holds are then applied to the freshly loaded row in the same single
retry.

Each update attempt runs inside a SAVEPOINT (`session.begin_nested()`), so a
failed attempt is rolled back without touching the rest of the transaction.
"""
import logging
import time
from typing import Any, Generic, Hashable, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from ..exceptions.base import InvalidOperationError, NotFoundError
from ..validators.entity_validators import (
    is_key_set,
    is_missing_key,
    loaded_values,
    pending_changes,
    primary_key_values,
)

# Type variables for the model class and its primary-key type
ModelType = TypeVar("ModelType")
KeyType = TypeVar("KeyType", bound=Hashable)

logger = logging.getLogger(__name__)


class BaseRepository(Generic[ModelType, KeyType]):
    """
    Generic repository providing CRUD operations for one model.

    Type Parameters:
        ModelType: The SQLAlchemy model class this repository manages.
        KeyType: The primary-key type (a tuple for composite keys).
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        """
        Args:
            model: The mapped model class (e.g. `Widget`, not `Widget()`).
            db: The request-scoped async session, shared with the unit of work.
        """
        self.model = model
        self.db = db

    @property
    def model_name(self) -> str:
        return self.model.__name__

    # =================================================================================================================
    # Read Operations
    # =================================================================================================================

    async def find_by_id(self, entity_id: KeyType | None) -> ModelType | None:
        """
        Point lookup by primary key.

        Returns None when no row matches or when the key is missing
        (None, or a composite key with a None part). Never raises for absence.
        """
        if is_missing_key(entity_id):
            logger.debug(
                "repo.find_by_id.missing_key",
                extra={"model": self.model_name, "operation": "find_by_id"},
            )
            return None

        entity = await self.db.get(self.model, entity_id)
        logger.debug(
            "repo.find_by_id.done",
            extra={
                "model": self.model_name,
                "operation": "find_by_id",
                "key": str(entity_id),
                "found": entity is not None,
            },
        )
        return entity

    async def get_all(self) -> list[ModelType]:
        """
        All rows of the model, in no particular order. Empty list when the table is empty.
        """
        result = await self.db.execute(select(self.model))
        entities = list(result.scalars().all())
        logger.debug(
            "repo.get_all.done",
            extra={"model": self.model_name, "operation": "get_all", "count": len(entities)},
        )
        return entities

    # =================================================================================================================
    # Write Operations
    # =================================================================================================================

    async def add(self, entity: ModelType) -> ModelType:
        """
        Stage a new entity, flush it and refresh it so store-generated columns
        (autoincrement keys, server defaults, version counters) are populated.
        """
        start = time.perf_counter()
        self.db.add(entity)
        await self.db.flush()
        await self.db.refresh(entity)

        logger.info(
            "repo.add.success",
            extra={
                "model": self.model_name,
                "operation": "add",
                "key": _format_key(entity),
                "duration_ms": int((time.perf_counter() - start) * 1000),
            },
        )
        return entity

    async def update(self, entity: ModelType) -> ModelType | None:
        """
        Persist the changes made to `entity`.

        Returns:
            The persistent entity (a merged copy when `entity` was detached),
            or None when no row exists for the entity's key.

        Raises:
            InvalidOperationError: the entity's primary key is not set.
            StaleDataError: a concurrency conflict happened again after one reload-and-retry.
        """
        if not is_key_set(entity):
            raise InvalidOperationError(
                f"Cannot update {self.model_name}: primary key is not set."
            )

        start = time.perf_counter()

        if entity not in self.db:
            key = _key_argument(entity)
            existing = await self.db.get(self.model, key)
            if existing is None:
                logger.info(
                    "repo.update.not_found",
                    extra={"model": self.model_name, "operation": "update", "key": str(key)},
                )
                return None
            try:
                entity = await self.db.merge(entity)
            except StaleDataError:
                # The caller's version is older than the row's; merge copied nothing.
                changes = loaded_values(entity)
                key_text = str(key)
                await self._retry_after_conflict(existing, changes, key_text)
                self._log_update_success(key_text, changes, start)
                return existing

        changes = pending_changes(entity)
        # Read before any attempt; a rolled-back savepoint may expire the instance.
        key_text = _format_key(entity)

        try:
            await self._flush_in_savepoint(entity, changes)
        except StaleDataError:
            await self._retry_after_conflict(entity, changes, key_text)

        self._log_update_success(key_text, changes, start)
        return entity

    async def remove(self, entity_id: KeyType) -> bool:
        """
        Delete the row identified by `entity_id` and flush.

        Raises:
            InvalidOperationError: the key is missing, or the loaded entity has no key.
            NotFoundError: no row exists for the key.
        """
        if is_missing_key(entity_id):
            raise InvalidOperationError(
                f"Cannot remove {self.model_name}: key is missing."
            )

        entity = await self.find_by_id(entity_id)
        if entity is None:
            logger.info(
                "repo.remove.not_found",
                extra={"model": self.model_name, "operation": "remove", "key": str(entity_id)},
            )
            raise NotFoundError(entity_name=self.model_name, key=entity_id)

        # Guards subclasses whose find_by_id() builds the entity from another source.
        if not is_key_set(entity):
            raise InvalidOperationError(
                f"Cannot remove {self.model_name}: primary key is not set."
            )

        await self.db.delete(entity)
        await self.db.flush()

        logger.info(
            "repo.remove.success",
            extra={"model": self.model_name, "operation": "remove", "key": str(entity_id)},
        )
        return True

    # =================================================================================================================
    # Helpers
    # =================================================================================================================

    async def _retry_after_conflict(
        self, entity: ModelType, changes: dict[str, Any], key_text: str
    ) -> None:
        """
        Reload `entity` from the store and flush `changes` on top of it once.

        A conflict raised here is the second one and propagates unchanged.
        """
        logger.info(
            "repo.update.conflict_retry",
            extra={
                "model": self.model_name,
                "operation": "update",
                "key": key_text,
                "fields": sorted(changes),
            },
        )
        await self.db.refresh(entity)
        await self._flush_in_savepoint(entity, changes)

    def _log_update_success(self, key_text: str, changes: dict[str, Any], start: float) -> None:
        logger.info(
            "repo.update.success",
            extra={
                "model": self.model_name,
                "operation": "update",
                "key": key_text,
                "fields": sorted(changes),
                "duration_ms": int((time.perf_counter() - start) * 1000),
            },
        )

    async def _flush_in_savepoint(self, entity: ModelType, changes: dict[str, Any]) -> None:
        """
        Write `changes` onto `entity` inside a SAVEPOINT and flush.

        `begin_nested()` flushes pending state before emitting SAVEPOINT, so
        the changed attributes are expired first and set again inside the
        savepoint. That keeps the UPDATE (and a possible conflict) inside it.
        """
        if changes:
            self.db.expire(entity, list(changes))

        async with self.db.begin_nested():
            for attr, value in changes.items():
                setattr(entity, attr, value)
            await self.db.flush()


def _key_argument(entity: Any) -> Any:
    """Primary key in the form `session.get()` expects: scalar or tuple for composite keys."""
    values = primary_key_values(entity)
    return values[0] if len(values) == 1 else values


def _format_key(entity: Any) -> str:
    return str(_key_argument(entity))


__all__ = ["BaseRepository", "ModelType", "KeyType"]
