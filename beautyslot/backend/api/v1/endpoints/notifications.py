"""
Notification API Endpoints.

Template settings for the admin panel and the reminder cron trigger.
"""

from fastapi import APIRouter

from beautyslot.backend.core.dependencies import RequestId
from beautyslot.backend.models.notification import NotificationTemplate
from beautyslot.backend.schemas.base import ApiResponse
from beautyslot.backend.schemas.notification import (
    NotificationSettingsResponse,
    NotificationTemplateUpdate,
    ReminderRunResult,
)
from beautyslot.backend.services.notification import NotificationSettingsService, ReminderService

settings_router = APIRouter()
cron_router = APIRouter()


@settings_router.get(
    "",
    response_model=ApiResponse[NotificationSettingsResponse],
    summary="List notification templates",
    description="All notification templates plus counts of sent notifications.",
)
async def get_notification_settings(request_id: RequestId) -> ApiResponse[NotificationSettingsResponse]:
    return ApiResponse(data=NotificationSettingsService().get_settings())


@settings_router.patch(
    "",
    response_model=ApiResponse[NotificationTemplate],
    summary="Update a notification template",
    description="Change a template's message and/or active flag by id.",
)
async def update_notification_setting(
    data: NotificationTemplateUpdate,
    request_id: RequestId,
) -> ApiResponse[NotificationTemplate]:
    return ApiResponse(data=NotificationSettingsService().update_template(data))


@cron_router.get(
    "/cron",
    response_model=ApiResponse[ReminderRunResult],
    summary="Run reminders",
    description=(
        "Send the day, hour and post-visit reminders that are due now. "
        "Meant to be called every minute by an external scheduler."
    ),
)
async def run_reminders(request_id: RequestId) -> ApiResponse[ReminderRunResult]:
    return ApiResponse(data=await ReminderService().run())
