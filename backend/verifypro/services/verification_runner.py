import asyncio
import logging

from sqlalchemy.orm import sessionmaker

from verifypro.services import document_service
from verifypro.services.verification import Verifier

logger = logging.getLogger(__name__)


class VerificationRunner:
    """Runs simulated verifications after a delay, one cancellable task per document."""

    def __init__(self):
        self._tasks: dict[str, asyncio.Task] = {}

    def is_running(self, document_id: str) -> bool:
        task = self._tasks.get(document_id)
        return task is not None and not task.done()

    async def run(self, document_id: str, verifier: Verifier, session_factory: sessionmaker, delay: float = 0.0):
        task = asyncio.create_task(self._verify_after(document_id, verifier, session_factory, delay))
        self._tasks[document_id] = task
        try:
            await asyncio.wait({task})
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            if self._tasks.get(document_id) is task:
                del self._tasks[document_id]

        if task.cancelled():
            logger.info("Verification of %s cancelled", document_id)
        elif task.exception() is not None:
            logger.error("Verification of %s failed: %s", document_id, task.exception())

    async def _verify_after(self, document_id: str, verifier: Verifier, session_factory: sessionmaker, delay: float):
        if delay > 0:
            await asyncio.sleep(delay)
        db = session_factory()
        try:
            await document_service.run_verification(db, document_id, verifier)
        finally:
            db.close()

    def cancel(self, document_id: str) -> bool:
        task = self._tasks.get(document_id)
        if task is None or task.done():
            return False
        task.cancel()
        return True

    def cancel_all(self) -> int:
        pending = [t for t in self._tasks.values() if not t.done()]
        for task in pending:
            task.cancel()
        return len(pending)


verification_runner = VerificationRunner()
