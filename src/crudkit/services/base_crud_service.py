"""
Generic CRUD service over a repository.

The service adds what a repository deliberately leaves out:
  - argument checks (None entities, blank keys) before the store is touched
  - translation of "no such row" into `NotFoundError`
  - entry/exit tracing and error logging for every operation

It never commits; pair it with a unit of work for durability.
"""
import logging
from typing import Any, Generic

from sqlalchemy.exc import NoInspectionAvailable

from ..exceptions.base import InvalidArgumentError, NotFoundError
from ..repositories.base_repository import KeyType, ModelType
from ..repositories.interfaces import Repository
from ..validators.entity_validators import is_blank_key, primary_key_values
from .tracing import traced_operation

logger = logging.getLogger(__name__)


class BaseCrudService(Generic[ModelType, KeyType]):
    """
    CRUD operations for one model, delegating persistence to `repository`.

    Args:
        repository: Any object matching the `Repository` protocol.
        model: The model class handled (used in messages).
        description: Optional human-readable description of the service.
    """

    def __init__(
        self,
        repository: Repository[ModelType, KeyType],
        model: type[ModelType],
        description: str | None = None,
    ):
        self.repository = repository
        self.model = model
        self._description = description or f"CRUD service for {model.__name__}"

    @property
    def description(self) -> str:
        return self._description

    @property
    def entity_name(self) -> str:
        return self.model.__name__

    async def create(self, entity: ModelType | None) -> ModelType:
        async with traced_operation(logger, "BaseCrudService.create", self.entity_name):
            self._require_entity(entity)
            return await self.repository.add(entity)

    async def get_by_id(self, entity_id: KeyType | None) -> ModelType:
        """Return the entity for `entity_id` or raise NotFoundError."""
        async with traced_operation(logger, "BaseCrudService.get_by_id", self.entity_name):
            self._require_key(entity_id)
            entity = await self.repository.find_by_id(entity_id)
            if entity is None:
                raise self._not_found(entity_id)
            return entity

    async def get_all(self) -> list[ModelType]:
        async with traced_operation(logger, "BaseCrudService.get_all", self.entity_name):
            return await self.repository.get_all()

    async def update(self, entity: ModelType | None) -> ModelType:
        """Persist changes to `entity`; NotFoundError when its row does not exist."""
        async with traced_operation(logger, "BaseCrudService.update", self.entity_name):
            self._require_entity(entity)
            updated = await self.repository.update(entity)
            if updated is None:
                raise self._not_found(_entity_key(entity))
            return updated

    async def delete(self, entity_id: KeyType | None) -> bool:
        async with traced_operation(logger, "BaseCrudService.delete", self.entity_name):
            self._require_key(entity_id)
            return await self.repository.remove(entity_id)

    # -- checks -----------------------------------------------------------------------------

    def _require_entity(self, entity: Any) -> None:
        if entity is None:
            raise InvalidArgumentError("entity", f"{self.entity_name} entity cannot be null")

    def _require_key(self, entity_id: Any) -> None:
        if is_blank_key(entity_id):
            raise InvalidArgumentError("entity_id", "ID cannot be null or empty")

    def _not_found(self, entity_id: Any) -> NotFoundError:
        return NotFoundError(
            f"Entity of type {self.entity_name} with ID {entity_id} not found.",
            entity_name=self.entity_name,
            key=entity_id,
        )


def _entity_key(entity: Any) -> Any:
    # Repositories are not required to work on mapped models.
    try:
        values = primary_key_values(entity)
    except NoInspectionAvailable:
        return getattr(entity, "id", None)
    return values[0] if len(values) == 1 else values


__all__ = ["BaseCrudService"]
