"""
Push notifications to employees' devices via Firebase Cloud Messaging.

Delivery is best-effort and runs after the triggering transaction commits;
failures are logged and never reach the API caller.
"""

import logging
from typing import Callable, Optional

from firebase_admin import exceptions as firebase_exceptions
from firebase_admin import messaging
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import PUSH_ENABLED
from ..database import SessionLocal
from ..models import Employee, UserToken
from .firebase import get_firebase_app

logger = logging.getLogger(__name__)


def save_token(db: Session, user_id: str, token: str) -> UserToken:
    """Store or replace a user's device token"""
    record = db.query(UserToken).filter(UserToken.user_id == user_id).first()
    if record:
        record.token = token
    else:
        record = UserToken(user_id=user_id, token=token)
        db.add(record)
    db.commit()
    db.refresh(record)
    return record


class PushNotifier:
    """Sends FCM messages to the devices of linked employees"""

    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        enabled: bool = PUSH_ENABLED,
    ):
        self.session_factory = session_factory
        self.enabled = enabled

    def _tokens_for_employees(self, employee_ids: list[int]) -> list[str]:
        db = self.session_factory()
        try:
            rows = (
                db.query(UserToken.token)
                .join(Employee, Employee.user_id == UserToken.user_id)
                .filter(Employee.id.in_(employee_ids))
                .all()
            )
            return [row[0] for row in rows]
        finally:
            db.close()

    def send(self, tokens: list[str], title: str, body: str, data: Optional[dict] = None) -> int:
        """Send one notification per token; returns the number delivered"""
        app = get_firebase_app()
        sent = 0
        for token in tokens:
            message = messaging.Message(
                token=token,
                notification=messaging.Notification(title=title, body=body),
                data={k: str(v) for k, v in (data or {}).items()},
            )
            try:
                messaging.send(message, app=app)
                sent += 1
            except (ValueError, firebase_exceptions.FirebaseError) as e:
                logger.warning(f"⚠️ Push to token {token[:12]}... failed: {e}")
        return sent

    def notify_employees(self, employee_ids: list[int], title: str, body: str, data: Optional[dict] = None) -> int:
        if not self.enabled or not employee_ids:
            return 0
        try:
            tokens = self._tokens_for_employees(employee_ids)
        except SQLAlchemyError as e:
            logger.error(f"❌ Could not load push tokens: {e}")
            return 0
        if not tokens:
            logger.debug(f"No push tokens for employees {employee_ids}")
            return 0

        try:
            sent = self.send(tokens, title, body, data)
        except Exception as e:
            # Firebase app could not be initialized (credentials missing or invalid)
            logger.error(f"❌ Push delivery unavailable: {e}")
            return 0
        logger.info(f"📱 Push '{title}' delivered to {sent}/{len(tokens)} devices")
        return sent


def get_push_notifier() -> PushNotifier:
    """Dependency injection for PushNotifier"""
    return PushNotifier()
