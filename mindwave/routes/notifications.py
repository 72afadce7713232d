from fastapi import APIRouter, Depends
from mindwave.database import Database, get_db
from mindwave.models.base import CamelModel, camelize
from mindwave.models.material import NOTIFICATIONS_TABLE, Notification
from mindwave.utils.auth_utils import get_current_user, require_admin
from mindwave.utils.errors import MindwaveError, ServerError, ValidationError
from mindwave.utils.time_utils import get_ist_time
from pydantic import ValidationError as PydanticValidationError
from typing import Optional
from uuid import uuid4
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

class SendNotification(CamelModel):
    title: Optional[str] = None
    message: Optional[str] = None
    recipient_role: Optional[str] = None
    link: Optional[str] = None

@router.post("/send")
async def send_notification(request: SendNotification, admin_user: dict = Depends(require_admin),
                            db: Database = Depends(get_db)):
    """Post an announcement for students (or everyone)"""
    if not request.title or not request.message:
        raise ValidationError("Title and message required")

    try:
        notification = Notification(
            id=uuid4().hex,
            recipient_role=request.recipient_role or "student",
            title=request.title,
            message=request.message,
            type="info",
            link=request.link or "",
            created_at=get_ist_time().isoformat(),
        )
    except PydanticValidationError:
        raise ValidationError("recipientRole must be 'student' or 'all'")

    try:
        db.insert(NOTIFICATIONS_TABLE, notification.model_dump())
        return {"ok": True, "notification": camelize(notification.model_dump())}
    except MindwaveError:
        raise
    except Exception as e:
        logger.error(f"Send notification error: {e}")
        raise ServerError("Failed to send notification")

@router.get("")
async def get_notifications(current_user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    """Latest 20 notifications addressed to the caller's role"""
    try:
        notifications = db.select(
            NOTIFICATIONS_TABLE, "*",
            in_filters={"recipient_role": ["all", current_user["role"]]},
            order_by=[("created_at", True)],
            limit=20,
        )
        return {"ok": True, "notifications": [camelize(n) for n in notifications]}
    except Exception as e:
        logger.error(f"Get notifications error: {e}")
        raise ServerError("Failed to fetch notifications")
