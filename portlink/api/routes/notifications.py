from fastapi import APIRouter, Depends, Query, status

from portlink.api.dependencies import get_notification_service, get_current_user_id
from portlink.api.schemas.notifications import NotificationResponse, UnreadCountResponse, MessageResponse
from portlink.services.notification_service import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationResponse])
async def list_notifications(
    unread_only: bool = Query(False, alias="unreadOnly"),
    user_id: int = Depends(get_current_user_id),
    notifications: NotificationService = Depends(get_notification_service),
):
    return await notifications.list_for_user(user_id, only_unread=unread_only)


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count(
    user_id: int = Depends(get_current_user_id),
    notifications: NotificationService = Depends(get_notification_service),
):
    return {"count": await notifications.unread_count(user_id)}


# Declared before /{notification_id}/read so "read-all" is never parsed as an id
@router.patch("/read-all", response_model=MessageResponse)
async def mark_all_as_read(
    user_id: int = Depends(get_current_user_id),
    notifications: NotificationService = Depends(get_notification_service),
):
    updated = await notifications.mark_all_as_read(user_id)
    return {"message": f"{updated} notifications marked as read"}


@router.patch("/{notification_id}/read", response_model=MessageResponse)
async def mark_as_read(
    notification_id: int,
    user_id: int = Depends(get_current_user_id),
    notifications: NotificationService = Depends(get_notification_service),
):
    await notifications.mark_as_read(notification_id, user_id)
    return {"message": "Notification marked as read"}


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(
    notification_id: int,
    user_id: int = Depends(get_current_user_id),
    notifications: NotificationService = Depends(get_notification_service),
):
    await notifications.delete(notification_id, user_id)
