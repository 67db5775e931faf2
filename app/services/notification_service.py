# app/services/notification_service.py
import logging
from typing import Any, Dict, Optional
from sqlalchemy.orm import Session

from app.models.notification import Notification

logger = logging.getLogger(__name__)


class NotificationService:
    """Writes in-app notifications for a user."""

    def create_notification(
        self,
        db: Session,
        user_id: str,
        type: str,
        title: str,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Notification:
        notification = Notification(
            user_id=user_id,
            type=type,
            title=title,
            message=message,
            notification_metadata=metadata or {},
        )
        db.add(notification)
        db.commit()
        logger.info(f"🔔 Notification '{type}' created for user {user_id}")
        return notification
