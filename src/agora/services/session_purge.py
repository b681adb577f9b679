"""Background removal of expired login sessions.

The worker runs independently of request handling. Deleting by timestamp is
safe against concurrent logins because new rows are always newer than the
cutoff.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from sqlalchemy.orm import Session

from agora.core.errors import StorageError
from agora.core.settings import settings
from agora.db.session import SessionLocal
from agora.services.auth_service import AuthService

logger = logging.getLogger(__name__)


class SessionPurgeWorker:
    """Periodically deletes sessions older than the configured TTL."""

    def __init__(
        self,
        session_factory: Callable[[], Session] | None = None,
        *,
        interval_seconds: float | None = None,
        max_age_hours: float | None = None,
    ) -> None:
        """Initialize the purge worker.

        Args:
            session_factory: Callable returning a new DB session. Defaults to SessionLocal.
            interval_seconds: Pause between runs. Defaults to the configured interval.
            max_age_hours: Session lifetime. Defaults to the configured TTL.
        """
        self._session_factory = session_factory or SessionLocal
        self.interval_seconds = (
            interval_seconds
            if interval_seconds is not None
            else settings.session_purge_interval_seconds
        )
        self.max_age_hours = (
            max_age_hours if max_age_hours is not None else settings.session_ttl_hours
        )
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the background purge loop."""
        if not self.running:
            self._stopping.clear()
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the background purge loop."""
        if self._task is None:
            return
        self._stopping.set()
        await self._task
        self._task = None

    def run_once(self) -> int:
        """Purge expired sessions once and return how many were removed."""
        db = self._session_factory()
        try:
            removed = AuthService(db).purge_expired_sessions(self.max_age_hours)
        finally:
            db.close()
        if removed:
            logger.info("Purged %d expired sessions", removed)
        return removed

    async def _run(self) -> None:
        interval = max(0.1, float(self.interval_seconds))
        while not self._stopping.is_set():
            try:
                await asyncio.to_thread(self.run_once)
            except StorageError as e:
                logger.warning("SessionPurgeWorker failed to purge sessions: %s", e)
            except Exception as e:
                logger.error("SessionPurgeWorker crashed during a run: %s", e, exc_info=True)

            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=interval)
            except TimeoutError:
                continue
