"""
Entry/exit tracing for service operations.

    async with traced_operation(logger, "BaseCrudService.create", "Widget"):
        ...

emits, on the given logger:
  - TRACE  "ENTRY: BaseCrudService.create for entity=Widget."
  - ERROR  "Error in BaseCrudService.create for entity=Widget." with exc_info, on failure
  - TRACE  "EXIT: BaseCrudService.create for entity=Widget." on every path

The exception is never swallowed.
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from ..core.logging.levels import trace


@asynccontextmanager
async def traced_operation(
    logger: logging.Logger, operation: str, entity_name: str
) -> AsyncIterator[None]:
    trace(logger, "ENTRY: %s for entity=%s.", operation, entity_name)
    try:
        yield
    except Exception:
        logger.error(
            "Error in %s for entity=%s.",
            operation,
            entity_name,
            exc_info=True,
            extra={"operation": operation, "entity": entity_name},
        )
        raise
    finally:
        trace(logger, "EXIT: %s for entity=%s.", operation, entity_name)


__all__ = ["traced_operation"]
