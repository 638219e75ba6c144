"""
Structural interfaces for the data-access layer.

Anything that matches these Protocols can be registered in the
`ServiceRegistry` in place of the SQLAlchemy implementations.
"""

from typing import Hashable, Protocol, TypeVar, runtime_checkable

from sqlalchemy.ext.asyncio import AsyncSession, AsyncSessionTransaction

ModelT = TypeVar("ModelT")
KeyT = TypeVar("KeyT", bound=Hashable, contravariant=True)


@runtime_checkable
class Repository(Protocol[ModelT, KeyT]):
    async def find_by_id(self, entity_id: KeyT | None) -> ModelT | None: ...

    async def get_all(self) -> list[ModelT]: ...

    async def add(self, entity: ModelT) -> ModelT: ...

    async def update(self, entity: ModelT) -> ModelT | None: ...

    async def remove(self, entity_id: KeyT) -> bool: ...


@runtime_checkable
class UnitOfWork(Protocol):
    @property
    def session(self) -> AsyncSession: ...

    @property
    def transaction(self) -> AsyncSessionTransaction | None: ...

    @property
    def has_active_transaction(self) -> bool: ...

    async def begin_transaction(self) -> None: ...

    async def commit_transaction(self) -> None: ...

    async def rollback_transaction(self) -> None: ...

    async def save_changes(self, cancel_event=None) -> int: ...

    async def dispose(self) -> None: ...


__all__ = ["Repository", "UnitOfWork"]
