"""
API Version 1 Router.

Aggregates all v1 endpoint routers.
"""

from fastapi import APIRouter

from beautyslot.backend.api.v1.endpoints import (
    analytics,
    appointments,
    broadcasts,
    calendar,
    clients,
    dashboard,
    notifications,
    orders,
    public,
    services,
    staff,
    sync,
    system_notifications,
    telegram,
)

router = APIRouter()

# Admin panel
router.include_router(clients.router, prefix="/admin/clients", tags=["clients"])
router.include_router(staff.router, prefix="/admin/staff", tags=["staff"])
router.include_router(services.router, prefix="/admin/services", tags=["services"])
router.include_router(appointments.router, prefix="/admin/appointments", tags=["appointments"])
router.include_router(calendar.router, prefix="/admin/calendar", tags=["calendar"])
router.include_router(sync.router, prefix="/admin/sync", tags=["sync"])
router.include_router(broadcasts.router, prefix="/admin/broadcasts", tags=["broadcasts"])
router.include_router(dashboard.router, prefix="/admin/dashboard", tags=["dashboard"])
router.include_router(analytics.router, prefix="/admin/analytics", tags=["analytics"])
router.include_router(
    system_notifications.router,
    prefix="/admin/system-notifications",
    tags=["system-notifications"],
)
router.include_router(
    notifications.settings_router,
    prefix="/admin/notification-settings",
    tags=["notifications"],
)

# Reminder trigger
router.include_router(notifications.cron_router, prefix="/notifications", tags=["notifications"])

# Public microsite and shop
router.include_router(public.router, prefix="/public", tags=["public"])
router.include_router(orders.router, prefix="/shop/orders", tags=["shop"])

# Telegram administration
router.include_router(telegram.router, prefix="/telegram", tags=["telegram"])
