"""
System Notifications API Endpoints.
"""

from fastapi import APIRouter

from beautyslot.backend.core.dependencies import RequestId
from beautyslot.backend.schemas.base import ApiResponse
from beautyslot.backend.schemas.system_notification import SystemNotification
from beautyslot.backend.services.system_notification import SystemNotificationService

router = APIRouter()


@router.get(
    "",
    response_model=ApiResponse[list[SystemNotification]],
    summary="System notifications",
    description="Notification feed generated from the synced data, newest first.",
)
async def list_system_notifications(request_id: RequestId) -> ApiResponse[list[SystemNotification]]:
    return ApiResponse(data=SystemNotificationService().generate())
