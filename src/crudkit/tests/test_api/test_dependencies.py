"""
End-to-end tests of the FastAPI wiring: registry on app.state, dependency
providers, unit of work per request, and both middleware.
"""

import httpx
import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from crudkit.api.middleware import register_error_handling
from crudkit.core.dependencies import (
    get_db_session,
    get_registry,
    get_unit_of_work,
    install_crudkit,
    provide_crud_service,
    provide_repository,
)
from crudkit.core.registry import ServiceRegistry, add_crudkit_infrastructure
from crudkit.repositories.base_repository import BaseRepository
from crudkit.repositories.unit_of_work import SqlAlchemyUnitOfWork
from crudkit.services.base_crud_service import BaseCrudService

from ..test_fixtures.models import Widget


BUMP_VERSION = text("UPDATE widgets SET version = version + 1 WHERE id = :id")


async def bump_version(session_maker, widget_id: str) -> None:
    """Commit a concurrent write to the widget's row."""
    async with session_maker() as session:
        await session.execute(BUMP_VERSION, {"id": widget_id})
        await session.commit()


class WidgetIn(BaseModel):
    id: str
    name: str
    quantity: int = 0
    version: int | None = None


class InventoryService(BaseCrudService):
    def __init__(self, repository, model):
        super().__init__(repository, model, description="Inventory widgets")


def widget_out(widget: Widget) -> dict:
    return {"id": widget.id, "name": widget.name, "quantity": widget.quantity, "version": widget.version}


def make_app(session_maker, registry: ServiceRegistry | None = None) -> FastAPI:
    app = FastAPI()
    install_crudkit(app, registry)

    async def _session():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db_session] = _session

    @app.post("/widgets", status_code=201)
    async def create_widget(
        payload: WidgetIn,
        service=Depends(provide_crud_service(Widget)),
        uow: SqlAlchemyUnitOfWork = Depends(get_unit_of_work),
    ):
        widget = await service.create(Widget(**payload.model_dump(exclude={"version"})))
        await uow.save_changes()
        return widget_out(widget)

    @app.get("/widgets")
    async def list_widgets(repository=Depends(provide_repository(Widget))):
        return [widget_out(w) for w in await repository.get_all()]

    @app.get("/widgets/{widget_id}")
    async def get_widget(widget_id: str, service=Depends(provide_crud_service(Widget))):
        return widget_out(await service.get_by_id(widget_id))

    @app.put("/widgets/{widget_id}")
    async def replace_widget(
        widget_id: str,
        payload: WidgetIn,
        service=Depends(provide_crud_service(Widget)),
        uow: SqlAlchemyUnitOfWork = Depends(get_unit_of_work),
    ):
        data = payload.model_dump(exclude_none=True)
        data["id"] = widget_id
        widget = await service.update(Widget(**data))
        await uow.save_changes()
        return widget_out(widget)

    @app.delete("/widgets/{widget_id}")
    async def delete_widget(
        widget_id: str,
        service=Depends(provide_crud_service(Widget)),
        uow: SqlAlchemyUnitOfWork = Depends(get_unit_of_work),
    ):
        await uow.begin_transaction()
        deleted = await service.delete(widget_id)
        await uow.commit_transaction()
        return {"deleted": deleted}

    @app.get("/describe")
    async def describe(service=Depends(provide_crud_service(Widget))):
        return {"description": service.description, "type": type(service).__name__}

    return app


def make_client(app: FastAPI) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")


@pytest.mark.asyncio
class TestCrudkitWiring:

    async def test_create_then_get(self, session_maker):
        """
        Behavior:
            - POST creates through the CRUD service and commits via the unit of work.
            - A later request (new session) reads it back.

        Importance:
            - Exercises registry resolution, per-request session sharing and save_changes().
        """
        async with make_client(make_app(session_maker)) as client:
            created = await client.post("/widgets", json={"id": "E1", "name": "Sprocket", "quantity": 4})
            fetched = await client.get("/widgets/E1")
            listed = await client.get("/widgets")

        assert created.status_code == 201
        assert created.json() == {"id": "E1", "name": "Sprocket", "quantity": 4, "version": 1}
        assert fetched.status_code == 200
        assert fetched.json()["name"] == "Sprocket"
        assert [w["id"] for w in listed.json()] == ["E1"]

    async def test_missing_entity_returns_json_404(self, session_maker):
        async with make_client(make_app(session_maker)) as client:
            resp = await client.get("/widgets/nope")

        assert resp.status_code == 404
        assert resp.json() == {"status": 404, "error": "Entity of type Widget with ID nope not found."}

    async def test_delete_in_explicit_transaction(self, session_maker):
        async with make_client(make_app(session_maker)) as client:
            await client.post("/widgets", json={"id": "E2", "name": "Cog"})
            deleted = await client.delete("/widgets/E2")
            missing = await client.delete("/widgets/E2")
            listed = await client.get("/widgets")

        assert deleted.json() == {"deleted": True}
        assert missing.status_code == 404
        assert missing.json() == {"status": 404, "error": "Widget with Id E2 was not found."}
        assert listed.json() == []

    async def test_put_with_stale_version_wins_after_one_conflict(self, session_maker):
        """
        Behavior:
            - The client read version 1; another writer commits version 2 before the PUT.
            - The PUT body (detached, version 1) is applied after one reload.

        Importance:
            - One concurrent write does not fail the request.
        """
        async with make_client(make_app(session_maker)) as client:
            await client.post("/widgets", json={"id": "E3", "name": "Cog", "quantity": 1})
            await bump_version(session_maker, "E3")

            resp = await client.put("/widgets/E3", json={"id": "E3", "name": "Mine", "quantity": 2, "version": 1})
            fetched = await client.get("/widgets/E3")

        assert resp.status_code == 200
        assert resp.json() == {"id": "E3", "name": "Mine", "quantity": 2, "version": 3}
        assert fetched.json() == resp.json()

    async def test_put_second_conflict_is_unexpected_error(self, session_maker, monkeypatch):
        async with make_client(make_app(session_maker)) as client:
            await client.post("/widgets", json={"id": "E4", "name": "Cog", "quantity": 1})
            await bump_version(session_maker, "E4")

            original_refresh = AsyncSession.refresh

            async def refresh_then_bump(session, instance, *args, **kwargs):
                await original_refresh(session, instance, *args, **kwargs)
                await session.execute(BUMP_VERSION, {"id": instance.id})

            monkeypatch.setattr(AsyncSession, "refresh", refresh_then_bump)
            resp = await client.put("/widgets/E4", json={"id": "E4", "name": "Mine", "quantity": 2, "version": 1})
            monkeypatch.undo()
            fetched = await client.get("/widgets/E4")

        assert resp.status_code == 500
        assert resp.json() == {"status": 500, "error": "An unexpected error occurred."}
        assert fetched.json()["name"] == "Cog"

    async def test_request_id_header(self, session_maker):
        async with make_client(make_app(session_maker)) as client:
            generated = await client.get("/widgets")
            forwarded = await client.get("/widgets/nope", headers={"X-Request-ID": "rid-123"})

        assert generated.headers["X-Request-ID"]
        # Error responses from the inner middleware still carry the id.
        assert forwarded.headers["X-Request-ID"] == "rid-123"

    async def test_model_specific_service_wins(self, session_maker):
        registry = add_crudkit_infrastructure()
        registry.register_crud_service(InventoryService, model=Widget)

        async with make_client(make_app(session_maker, registry)) as client:
            resp = await client.get("/describe")

        assert resp.json() == {"description": "Inventory widgets", "type": "InventoryService"}

    async def test_install_stores_default_registry(self, session_maker):
        app = FastAPI()
        registry = install_crudkit(app)

        assert app.state.crudkit_registry is registry
        assert registry.resolve_repository(Widget) is BaseRepository
        assert registry.resolve_unit_of_work() is SqlAlchemyUnitOfWork
        assert registry.resolve_crud_service(Widget) is BaseCrudService


def test_get_registry_without_install_is_unexpected_error():
    app = FastAPI()
    register_error_handling(app)

    @app.get("/registry")
    def read_registry(registry=Depends(get_registry)):
        return {"ok": True}

    resp = TestClient(app).get("/registry")

    assert resp.status_code == 500
    assert resp.json() == {"status": 500, "error": "An unexpected error occurred."}
