from pydantic import BaseModel
from typing import List, Optional
from enum import Enum


class Page(str, Enum):
    FREE_BOOKS = "free-books"
    BROWSE = "browse"
    DONATE = "donate"
    REQUESTS = "requests"
    DONATED = "donated"
    NOTIFICATIONS = "notifications"


PUBLIC_PAGES = [Page.FREE_BOOKS, Page.BROWSE]
MEMBER_PAGES = [Page.DONATE, Page.REQUESTS, Page.DONATED, Page.NOTIFICATIONS]

PAGE_LABELS = {
    Page.FREE_BOOKS: "Free Books",
    Page.BROWSE: "Browse Books",
    Page.DONATE: "Donate Book",
    Page.REQUESTS: "My Requests",
    Page.DONATED: "My Donations",
    Page.NOTIFICATIONS: "Notifications",
}


class SessionState(str, Enum):
    SIGNED_OUT = "signed_out"
    PROFILE_LOADING = "profile_loading"
    READY = "ready"


class NavLink(BaseModel):
    page: Page
    label: str
    active: bool = False
    badge: int = 0


class NavState(BaseModel):
    session_state: SessionState
    current_page: Page
    display_name: Optional[str] = None
    unread_notifications: int = 0
    pending_requests: int = 0
    links: List[NavLink] = []
