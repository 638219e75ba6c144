"""
Service registry: factories for repositories, the unit of work and CRUD services.

Factory signatures:

| Registration             | Factory called as             |
| ------------------------ | ----------------------------- |
| `register_repository`    | `factory(model, session)`     |
| `register_unit_of_work`  | `factory(session)`            |
| `register_crud_service`  | `factory(repository, model)`  |

Repositories and services can be registered for one model; resolving for
that model prefers the model-specific factory over the generic one.

Typical wiring:

    registry = add_crudkit_infrastructure()
    registry.register_crud_service(WidgetService, model=Widget)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, Dict, Mapping

from ..repositories.base_repository import BaseRepository
from ..repositories.unit_of_work import SqlAlchemyUnitOfWork
from ..services.base_crud_service import BaseCrudService

Factory = Callable[..., Any]

logger = logging.getLogger(__name__)


def _model_key(prefix: str, model: type | None) -> str:
    if model is None:
        return prefix
    return f"{prefix}:{model.__module__}.{model.__qualname__}"


@dataclass(slots=True)
class ServiceRegistry:
    """Factories keyed by string."""

    REPOSITORY: ClassVar[str] = "repository"
    UNIT_OF_WORK: ClassVar[str] = "unit_of_work"
    CRUD_SERVICE: ClassVar[str] = "service.crud"

    factories: Dict[str, Factory] = field(default_factory=dict)

    def register(self, key: str, factory: Factory) -> None:
        """Register (or replace) the factory stored under `key`."""
        self.factories[key] = factory
        logger.debug("registry.register", extra={"key": key})

    def resolve(self, key: str) -> Factory:
        try:
            return self.factories[key]
        except KeyError:
            raise LookupError(f"No factory registered for '{key}'.") from None

    def snapshot(self) -> Mapping[str, Factory]:
        """Copy of the current registrations."""
        return dict(self.factories)

    # -- typed helpers ----------------------------------------------------------------------

    def register_repository(self, factory: Factory, model: type | None = None) -> None:
        self.register(_model_key(self.REPOSITORY, model), factory)

    def register_unit_of_work(self, factory: Factory) -> None:
        self.register(self.UNIT_OF_WORK, factory)

    def register_crud_service(self, factory: Factory, model: type | None = None) -> None:
        self.register(_model_key(self.CRUD_SERVICE, model), factory)

    def resolve_repository(self, model: type) -> Factory:
        return self._resolve_for_model(self.REPOSITORY, model)

    def resolve_unit_of_work(self) -> Factory:
        return self.resolve(self.UNIT_OF_WORK)

    def resolve_crud_service(self, model: type) -> Factory:
        return self._resolve_for_model(self.CRUD_SERVICE, model)

    def _resolve_for_model(self, prefix: str, model: type) -> Factory:
        specific = self.factories.get(_model_key(prefix, model))
        if specific is not None:
            return specific
        return self.resolve(prefix)


def add_repositories(registry: ServiceRegistry) -> ServiceRegistry:
    """Register the generic repository and the SQLAlchemy unit of work."""
    registry.register_repository(BaseRepository)
    registry.register_unit_of_work(SqlAlchemyUnitOfWork)
    return registry


def add_domain_services(registry: ServiceRegistry) -> ServiceRegistry:
    """Register the generic CRUD service."""
    registry.register_crud_service(BaseCrudService)
    return registry


def add_crudkit_infrastructure(registry: ServiceRegistry | None = None) -> ServiceRegistry:
    """Register everything crudkit provides; returns the (new or given) registry."""
    registry = registry if registry is not None else ServiceRegistry()
    add_repositories(registry)
    add_domain_services(registry)
    return registry


__all__ = [
    "ServiceRegistry",
    "add_repositories",
    "add_domain_services",
    "add_crudkit_infrastructure",
]
