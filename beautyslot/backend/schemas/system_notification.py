"""
System Notification Schemas.

Feed items for the admin notification bell. They are derived from the
synced data on every request and never stored.
"""

from typing import Literal

from pydantic import BaseModel

SystemNotificationType = Literal[
    "reminder", "mention", "assignment", "comment", "invite", "update", "system", "share"
]


class NotificationActor(BaseModel):
    name: str
    avatar: str


class NotificationTarget(BaseModel):
    type: Literal["page", "task"]
    title: str
    url: str


class NotificationMeta(BaseModel):
    workspace: str
    page_icon: str


class NotificationAction(BaseModel):
    label: str
    url: str
    type: Literal["primary"] | None = None


class SystemNotification(BaseModel):
    id: str
    type: SystemNotificationType
    title: str
    message: str
    timestamp: str
    read: bool = False
    actor: NotificationActor | None = None
    target: NotificationTarget | None = None
    metadata: NotificationMeta
    action: NotificationAction | None = None
