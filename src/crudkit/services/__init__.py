from .base_crud_service import BaseCrudService
from .interfaces import CrudService, Service
from .tracing import traced_operation

__all__ = ["BaseCrudService", "CrudService", "Service", "traced_operation"]
