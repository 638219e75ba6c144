"""
Structural interfaces for the service layer.
"""
from typing import Hashable, Protocol, TypeVar, runtime_checkable

ModelT = TypeVar("ModelT")
KeyT = TypeVar("KeyT", bound=Hashable, contravariant=True)


@runtime_checkable
class Service(Protocol):
    @property
    def description(self) -> str: ...


@runtime_checkable
class CrudService(Service, Protocol[ModelT, KeyT]):
    async def create(self, entity: ModelT) -> ModelT: ...

    async def get_by_id(self, entity_id: KeyT) -> ModelT: ...

    async def get_all(self) -> list[ModelT]: ...

    async def update(self, entity: ModelT) -> ModelT: ...

    async def delete(self, entity_id: KeyT) -> bool: ...


__all__ = ["Service", "CrudService"]
