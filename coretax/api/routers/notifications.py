from http import HTTPStatus
from typing import Annotated, Any, Literal, cast

from fastapi import APIRouter, Body, Query

from coretax.api.dependencies import CurrentActor, Notifications
from coretax.api.schemas.common import BulkResponse, MessageResponse, PaginationMeta
from coretax.api.schemas.notifications import (
    NotificationOut,
    NotificationPage,
    ReminderOut,
    RemindersResponse,
)
from coretax.api.utils.pagination import Paging
from coretax.core.cache import CacheProfile, cache_key, get_response_cache
from coretax.domain.enums import NotificationType
from coretax.services.inputs.common import BulkRequest
from coretax.services.inputs.notifications import NotificationCreate, NotificationUpdate
from coretax.services.notifications import CACHE_PREFIX

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationPage)
async def list_notifications(
    actor: CurrentActor,
    service: Notifications,
    paging: Paging,
    type_: Annotated[NotificationType | None, Query(alias="type")] = None,
    is_read: Annotated[bool | None, Query(alias="isRead")] = None,
) -> NotificationPage:
    """The caller's notifications, newest first, with the unread total."""
    cache = get_response_cache()
    key = cache_key(CACHE_PREFIX, actor.id, paging.cache_part, type_, is_read)
    if (cached := cache.get(key)) is not None:
        return cast("NotificationPage", cached)

    page, unread = await service.list_page(
        actor, type_=type_, is_read=is_read, page=paging.page, limit=paging.limit
    )
    result = NotificationPage(
        data=[NotificationOut.model_validate(n) for n in page.items],
        pagination=PaginationMeta(
            page=page.page, limit=page.limit, total=page.total, pages=page.pages
        ),
        unread_count=unread,
    )
    cache.set(key, result, CacheProfile.REALTIME)
    return result


@router.post("", response_model=NotificationOut, status_code=HTTPStatus.CREATED)
async def create_notification(
    body: NotificationCreate, actor: CurrentActor, service: Notifications
) -> NotificationOut:
    return NotificationOut.model_validate(await service.create(actor, body))


@router.post("/bulk", response_model=BulkResponse)
async def bulk_notifications(
    body: BulkRequest, actor: CurrentActor, service: Notifications
) -> BulkResponse:
    """Only the caller's own notifications are touched; others are skipped."""
    return BulkResponse.from_outcome(await service.bulk(actor, body))


@router.get("/reminders", response_model=RemindersResponse)
async def list_reminders(
    actor: CurrentActor,
    service: Notifications,
    category: Literal["spt", "payment"] | None = None,
) -> RemindersResponse:
    reminders = await service.reminders(actor, category=category)
    return RemindersResponse(
        reminders=[ReminderOut.model_validate(r) for r in reminders],
        total=len(reminders),
    )


@router.get("/settings")
async def get_notification_settings(
    actor: CurrentActor, service: Notifications
) -> dict[str, Any]:
    return await service.get_settings(actor)


@router.patch("/settings")
async def update_notification_settings(
    actor: CurrentActor,
    service: Notifications,
    body: Annotated[dict[str, Any], Body()],
) -> dict[str, Any]:
    """Deep-merge the body into the stored preferences."""
    return await service.update_settings(actor, body)


@router.patch("/{notification_id}", response_model=NotificationOut)
async def update_notification(
    notification_id: int,
    actor: CurrentActor,
    service: Notifications,
    body: NotificationUpdate | None = None,
) -> NotificationOut:
    is_read = body.is_read if body is not None else True
    return NotificationOut.model_validate(
        await service.mark(actor, notification_id, is_read=is_read)
    )


@router.delete("/{notification_id}", response_model=MessageResponse)
async def delete_notification(
    notification_id: int, actor: CurrentActor, service: Notifications
) -> MessageResponse:
    await service.delete(actor, notification_id)
    return MessageResponse(message="Notification deleted successfully")
