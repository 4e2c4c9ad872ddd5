from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from sqlalchemy import func, select, update
from sqlmodel import col

from hrdesk.config import get_settings
from hrdesk.exceptions import NotFoundError
from hrdesk.models.enums import NotificationType
from hrdesk.models.notification import Notification
from hrdesk.schemas.notification import MarkAllReadResponse, NotificationListResponse, NotificationResponse

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


def _build_notification_response(notification: Notification) -> NotificationResponse:
    return NotificationResponse(
        id=notification.id,
        recipient_id=notification.recipient_id,
        type=NotificationType(notification.type),
        message=notification.message,
        link=notification.link,
        is_read=notification.is_read,
        created_at=notification.created_at,
    )


# ---------------------------------------------------------------------------
# Emission
# ---------------------------------------------------------------------------


async def record_notification(
    session: AsyncSession,
    *,
    recipient_id: uuid.UUID,
    notification_type: NotificationType,
    message: str,
    link: str | None = None,
) -> Notification:
    """Insert a notification row within the caller's transaction."""
    notification = Notification(
        recipient_id=recipient_id,
        type=notification_type.value,
        message=message,
        link=link,
    )
    session.add(notification)
    await session.flush()
    return notification


async def emit_notification(
    session: AsyncSession,
    *,
    recipient_id: uuid.UUID,
    notification_type: NotificationType,
    message: str,
    link: str | None = None,
) -> Notification | None:
    """Best-effort: record and commit a notification, or log and drop it.

    Must only be called after the triggering transaction has committed. Any
    failure (including running past ``notification_timeout_seconds``) is
    rolled back and logged; the caller always gets a result, never an error.
    """
    timeout = get_settings().notification_timeout_seconds
    try:
        async with asyncio.timeout(timeout):
            notification = await record_notification(
                session,
                recipient_id=recipient_id,
                notification_type=notification_type,
                message=message,
                link=link,
            )
            await session.commit()
    except Exception:
        logger.exception("Failed to record %s notification for %s", notification_type.value, recipient_id)
        try:
            await session.rollback()
        except Exception:
            logger.exception("Rollback after failed %s notification also failed", notification_type.value)
        return None

    logger.debug("Recorded %s notification %s for %s", notification_type.value, notification.id, recipient_id)
    return notification


# ---------------------------------------------------------------------------
# Read path and mark-read
# ---------------------------------------------------------------------------


async def list_notifications(
    session: AsyncSession,
    user_id: uuid.UUID,
    limit: int = 10,
    unread_only: bool = False,
) -> NotificationListResponse:
    """Newest notifications for a user, optionally only unread ones."""
    base_filters = [col(Notification.recipient_id) == user_id]
    if unread_only:
        base_filters.append(col(Notification.is_read).is_(False))

    count_result = await session.execute(select(func.count()).select_from(Notification).where(*base_filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(Notification).where(*base_filters).order_by(col(Notification.created_at).desc()).limit(limit)
    )
    return NotificationListResponse(
        items=[_build_notification_response(n) for n in result.scalars().all()],
        total=total,
    )


async def mark_notification_read(
    session: AsyncSession,
    user_id: uuid.UUID,
    notification_id: uuid.UUID,
) -> NotificationResponse:
    """Mark one of the user's notifications as read. 404 for anyone else's."""
    result = await session.execute(
        select(Notification).where(
            col(Notification.id) == notification_id,
            col(Notification.recipient_id) == user_id,
        )
    )
    notification = result.scalar_one_or_none()
    if notification is None:
        raise NotFoundError("Notification not found")

    notification.is_read = True
    await session.commit()
    return _build_notification_response(notification)


async def mark_all_notifications_read(session: AsyncSession, user_id: uuid.UUID) -> MarkAllReadResponse:
    """Mark every unread notification of the user as read."""
    result = await session.execute(
        update(Notification)
        .where(col(Notification.recipient_id) == user_id, col(Notification.is_read).is_(False))
        .values(is_read=True)
        .execution_options(synchronize_session=False)
    )
    await session.commit()
    return MarkAllReadResponse(updated=result.rowcount)  # type: ignore[attr-defined]
