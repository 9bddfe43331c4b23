from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from enum import Enum


class NotificationType(str, Enum):
    CONTACT_SHARED = "contact_shared"
    BOOK_REQUEST = "book_request"
    REQUEST_ACCEPTED = "request_accepted"
    REQUEST_REJECTED = "request_rejected"
    SYSTEM_UPDATE = "system_update"


class Notification(BaseModel):
    id: str
    user_id: str
    type: str
    title: str
    message: str
    read: bool = False
    created_at: Optional[datetime] = None
