"""
crudkit: generic async repository, unit of work and CRUD service for
SQLAlchemy, with FastAPI wiring and a JSON error-response middleware.
"""

from .core.dependencies import install_crudkit
from .core.registry import ServiceRegistry, add_crudkit_infrastructure
from .repositories import BaseRepository, SqlAlchemyUnitOfWork
from .services import BaseCrudService

__all__ = [
    "install_crudkit",
    "ServiceRegistry",
    "add_crudkit_infrastructure",
    "BaseRepository",
    "SqlAlchemyUnitOfWork",
    "BaseCrudService",
]
