"""
Unit of work over a request-scoped `AsyncSession`.

Repositories built on the same session flush their changes as they go; the
unit of work decides whether those changes become durable.

State machine:
    Idle --begin_transaction--> InTransaction --commit/rollback--> Idle

`begin_transaction()` while InTransaction is a no-op; `commit_transaction()`
and `rollback_transaction()` while Idle do nothing beyond the flush performed
by commit. After commit or rollback returns (or raises), no transaction handle
is held.
"""
import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncSession, AsyncSessionTransaction

logger = logging.getLogger(__name__)


class SqlAlchemyUnitOfWork:
    """Explicit transaction lifecycle plus change flushing for one session."""

    def __init__(self, session: AsyncSession):
        self._session = session
        self._transaction: AsyncSessionTransaction | None = None

    # ----------------------------------------------------------------------------------------
    # Introspection
    # ----------------------------------------------------------------------------------------

    @property
    def session(self) -> AsyncSession:
        return self._session

    @property
    def transaction(self) -> AsyncSessionTransaction | None:
        return self._transaction

    @property
    def has_active_transaction(self) -> bool:
        return self._transaction is not None

    # ----------------------------------------------------------------------------------------
    # Transaction lifecycle
    # ----------------------------------------------------------------------------------------

    async def begin_transaction(self) -> None:
        """
        Open the transaction if none is held yet.

        A session autobegins a transaction on first use, so a transaction that
        is already running is adopted rather than begun a second time.
        """
        if self._transaction is not None:
            return

        current = self._session.get_transaction()
        if current is not None:
            self._transaction = current
            logger.debug("uow.begin.adopted")
        else:
            self._transaction = await self._session.begin()
            logger.debug("uow.begin.started")

    async def commit_transaction(self) -> None:
        """
        Flush pending changes and commit the held transaction, if any.

        On failure the held transaction is rolled back and the original
        exception is raised again. The handle is cleared on every path.
        """
        try:
            await self._session.flush()
            if self._transaction is not None:
                await self._transaction.commit()
                logger.debug("uow.commit.success")
        except Exception:
            logger.info("uow.commit.failed", exc_info=True)
            await self._rollback_held()
            raise
        finally:
            self._transaction = None

    async def rollback_transaction(self) -> None:
        """Roll back the held transaction. Does nothing when idle."""
        try:
            await self._rollback_held()
        finally:
            self._transaction = None

    # ----------------------------------------------------------------------------------------
    # Change flushing
    # ----------------------------------------------------------------------------------------

    async def save_changes(self, cancel_event: asyncio.Event | None = None) -> int:
        """
        Flush pending changes and return how many entities were affected
        (new + deleted + actually modified).

        Inside an explicit transaction the changes stay uncommitted until
        `commit_transaction()`. Outside one, the session's implicit
        transaction is committed so the changes are durable.

        Raises:
            asyncio.CancelledError: `cancel_event` was set before anything was written.
        """
        if cancel_event is not None and cancel_event.is_set():
            raise asyncio.CancelledError("save_changes cancelled before flush")

        affected = (
            len(self._session.new)
            + len(self._session.deleted)
            + sum(1 for obj in self._session.dirty if self._session.is_modified(obj))
        )

        await self._session.flush()

        if self._transaction is None and self._session.in_transaction():
            await self._session.commit()

        logger.debug("uow.save_changes.done", extra={"affected": affected})
        return affected

    # ----------------------------------------------------------------------------------------
    # Disposal
    # ----------------------------------------------------------------------------------------

    async def dispose(self) -> None:
        """Roll back anything still open and close the session. Never commits."""
        try:
            await self._rollback_held()
        finally:
            self._transaction = None
            await self._session.close()

    async def __aenter__(self) -> "SqlAlchemyUnitOfWork":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.dispose()

    async def _rollback_held(self) -> None:
        # The held handle is always the session's root transaction; rolling back
        # through the session also resets a transaction deactivated by a failed flush.
        if self._transaction is not None:
            await self._session.rollback()
            logger.debug("uow.rollback.done")


__all__ = ["SqlAlchemyUnitOfWork"]
