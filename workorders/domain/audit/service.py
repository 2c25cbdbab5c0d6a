"""Change audit log - who changed which client, employee or inventory item"""

import logging
from typing import Callable, Optional

from fastapi import BackgroundTasks
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...database import SessionLocal
from ...exceptions import AuditError
from .repository import ChangeLogRepository

logger = logging.getLogger(__name__)


class ChangeAuditLog:
    """
    Append-only change history.

    Entries are written on a session of their own, after the business
    transaction has committed. A failed write is logged and dropped; it never
    fails or rolls back the operation it describes.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        background_tasks: Optional[BackgroundTasks] = None,
    ):
        self.session_factory = session_factory
        self.background_tasks = background_tasks
        self.repo = ChangeLogRepository()

    def _write(self, entity_kind: str, entity_id: int, actor_id: str, description: str) -> None:
        db = self.session_factory()
        try:
            self.repo.append(db, entity_kind, entity_id, actor_id, description)
        except ValueError as e:
            raise AuditError(f"Cannot record {entity_kind} {entity_id} change: {e}") from e
        except SQLAlchemyError as e:
            db.rollback()
            raise AuditError(f"Failed to record {entity_kind} {entity_id} change: {e}") from e
        finally:
            db.close()

    def record(self, entity_kind: str, entity_id: int, actor_id: str, description: str) -> bool:
        """Append one entry now. Returns False when the write failed"""
        try:
            self._write(entity_kind, entity_id, actor_id, description)
            logger.debug(f"📝 {entity_kind} {entity_id} change recorded: {description}")
            return True
        except AuditError as e:
            logger.error(f"❌ {e}")
            return False

    def record_later(self, entity_kind: str, entity_id: int, actor_id: str, description: str) -> None:
        """Schedule an entry to be written after the response is sent"""
        if self.background_tasks is None:
            self.record(entity_kind, entity_id, actor_id, description)
            return
        self.background_tasks.add_task(self.record, entity_kind, entity_id, actor_id, description)

    def history(self, db: Session, entity_kind: str, entity_id: int) -> list:
        return self.repo.list_for_entity(db, entity_kind, entity_id)


def get_audit_log(background_tasks: BackgroundTasks) -> ChangeAuditLog:
    """Dependency injection for ChangeAuditLog bound to the request's background tasks"""
    return ChangeAuditLog(background_tasks=background_tasks)
