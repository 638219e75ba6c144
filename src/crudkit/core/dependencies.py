"""
FastAPI dependencies resolving crudkit components from the app's registry.

    app = FastAPI()
    install_crudkit(app)

    @app.post("/widgets")
    async def create_widget(
        payload: WidgetIn,
        service=Depends(provide_crud_service(Widget)),
        uow: SqlAlchemyUnitOfWork = Depends(get_unit_of_work),
    ):
        widget = await service.create(Widget(**payload.model_dump()))
        await uow.save_changes()
        return widget

Within one request every dependency shares the same session (FastAPI caches
`get_db_session` per request), so repositories and the unit of work see the
same transaction.
"""

from typing import AsyncGenerator

from fastapi import Depends, FastAPI, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ..api.middleware import register_error_handling
from ..database.session import get_async_session
from .logging.middleware import RequestIDMiddleware
from .registry import ServiceRegistry, add_crudkit_infrastructure

REGISTRY_STATE_KEY = "crudkit_registry"


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session; override this dependency to point at another database."""
    async for session in get_async_session():
        yield session


def get_registry(request: Request) -> ServiceRegistry:
    registry = getattr(request.app.state, REGISTRY_STATE_KEY, None)
    if registry is None:
        raise RuntimeError("crudkit is not installed on this app; call install_crudkit(app).")
    return registry


async def get_unit_of_work(
    session: AsyncSession = Depends(get_db_session),
    registry: ServiceRegistry = Depends(get_registry),
):
    """Unit of work for the request; disposed (rolled back if still open) on teardown."""
    uow = registry.resolve_unit_of_work()(session)
    try:
        yield uow
    finally:
        await uow.dispose()


def provide_repository(model: type):
    """Dependency factory: the registered repository for `model`."""

    async def _repository(
        session: AsyncSession = Depends(get_db_session),
        registry: ServiceRegistry = Depends(get_registry),
    ):
        return registry.resolve_repository(model)(model, session)

    return _repository


def provide_crud_service(model: type):
    """Dependency factory: the registered CRUD service for `model`, built on its repository."""
    repository_dependency = provide_repository(model)

    async def _crud_service(
        repository=Depends(repository_dependency),
        registry: ServiceRegistry = Depends(get_registry),
    ):
        return registry.resolve_crud_service(model)(repository, model)

    return _crud_service


def install_crudkit(app: FastAPI, registry: ServiceRegistry | None = None) -> ServiceRegistry:
    """
    Store the registry on `app.state` and add the error-handling and request-id middleware.

    Returns the registry so callers can add model-specific registrations.
    """
    registry = registry if registry is not None else add_crudkit_infrastructure()
    setattr(app.state, REGISTRY_STATE_KEY, registry)
    register_error_handling(app)
    # Added last so it wraps the error handler and the request id is set for its logs.
    app.add_middleware(RequestIDMiddleware)
    return registry
