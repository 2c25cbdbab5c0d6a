import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..auth import get_current_actor
from ..config import AUTH_ENABLED
from ..database import get_db
from ..services.push_service import save_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


class PushTokenRequest(BaseModel):
    token: str = Field(..., min_length=1)


def verify_user_access(user_id: str, actor_id: str) -> None:
    """Verify the authenticated user is registering their own device"""
    if AUTH_ENABLED and actor_id != user_id:
        logger.warning(f"🚫 Access denied: User {actor_id} tried to set push token of {user_id}")
        raise HTTPException(status_code=403, detail="You can only register your own device")


@router.put("/{user_id}/push-token")
def update_push_token(
    user_id: str,
    data: PushTokenRequest,
    actor_id: str = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    """Store the FCM device token used to notify this user"""
    verify_user_access(user_id, actor_id)
    save_token(db, user_id, data.token)
    logger.info(f"📱 Push token updated for user {user_id}")
    return {"message": "Push token saved"}
