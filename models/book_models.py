from pydantic import BaseModel, computed_field
from typing import Optional
from datetime import datetime
from enum import Enum


class BookStatus(str, Enum):
    AVAILABLE = "available"
    REQUESTED = "requested"
    DONATED = "donated"


STATUS_LABELS = {
    BookStatus.AVAILABLE.value: "Available",
    BookStatus.REQUESTED.value: "Requested",
    BookStatus.DONATED.value: "Completed",
}


class RequestStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    COMPLETED = "completed"


class DonatedBook(BaseModel):
    id: str
    title: str
    author: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    condition: Optional[str] = None
    status: str = BookStatus.AVAILABLE.value
    donor_id: str
    is_free_to_read: bool = False
    created_at: Optional[datetime] = None

    @computed_field
    @property
    def status_label(self) -> str:
        return STATUS_LABELS.get(self.status, self.status)


class BookRequest(BaseModel):
    id: str
    book_id: str
    requester_id: str
    donor_id: str
    status: RequestStatus = RequestStatus.PENDING
    message: Optional[str] = None
    created_at: Optional[datetime] = None
