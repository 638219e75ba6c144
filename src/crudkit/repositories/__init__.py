"""
Data-access layer.

Usage:
    from crudkit.repositories import BaseRepository, SqlAlchemyUnitOfWork
"""

from .base_repository import BaseRepository
from .interfaces import Repository, UnitOfWork
from .unit_of_work import SqlAlchemyUnitOfWork

__all__ = [
    "BaseRepository",
    "Repository",
    "UnitOfWork",
    "SqlAlchemyUnitOfWork",
]
