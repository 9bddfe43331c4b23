"""
Navigation header state: session-aware links and two counters.

The unread counter is the number of unread notifications. The pending
counter is the number of pending requests for the user's books created
after the user last opened the requests page (the "last visited"
watermark, kept in local storage per user). Counters are recomputed on
session changes, on navigation to the requests page, and on ``refresh()``.
"""

import asyncio
import inspect
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional, Union

from backend_client import AuthEvent, BackendClient, Subscription, gt
from errors import BackendError
from local_storage import LocalStorage
from models.auth_models import Session
from models.book_models import RequestStatus
from models.navigation_models import (
    MEMBER_PAGES,
    PAGE_LABELS,
    PUBLIC_PAGES,
    NavLink,
    NavState,
    Page,
)
from session_context import SessionContext

logger = logging.getLogger(__name__)

PageChangeCallback = Callable[[Page], Union[None, Awaitable[None]]]


def watermark_key(user_id: str) -> str:
    return f"lastVisitedRequests_{user_id}"


def read_watermark(storage: LocalStorage, user_id: str) -> Optional[datetime]:
    """Last visit to the requests page, or None if the user never went there."""
    value = storage.get_item(watermark_key(user_id))
    if not value:
        return None
    try:
        visited = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.warning("Ignoring malformed watermark %r for %s", value, user_id)
        return None
    if visited.tzinfo is not None:
        visited = visited.astimezone(timezone.utc).replace(tzinfo=None)
    return visited


def write_watermark(storage: LocalStorage, user_id: str, visited: datetime) -> None:
    storage.set_item(watermark_key(user_id), visited.isoformat())


async def count_unread_notifications(backend: BackendClient, user_id: str) -> int:
    return await backend.count("notifications", {"user_id": user_id, "read": False})


async def count_pending_requests(
    backend: BackendClient,
    user_id: str,
    watermark: Optional[datetime] = None,
) -> int:
    filters = {"donor_id": user_id, "status": RequestStatus.PENDING}
    if watermark is not None:
        filters["created_at"] = gt(watermark)
    return await backend.count("book_requests", filters)


class NavigationBar:
    def __init__(
        self,
        backend: BackendClient,
        storage: LocalStorage,
        context: Optional[SessionContext] = None,
        current_page: Page = Page.FREE_BOOKS,
        on_page_change: Optional[PageChangeCallback] = None,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.backend = backend
        self.storage = storage
        self.context = context or SessionContext(backend)
        self.current_page = Page(current_page)
        self.on_page_change = on_page_change
        self.clock = clock

        self.unread_notifications = 0
        self.pending_requests = 0
        self.last_visited_requests: Optional[datetime] = None
        self._subscription: Optional[Subscription] = None

    async def __aenter__(self) -> "NavigationBar":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()

    async def start(self, access_token: Optional[str] = None) -> NavState:
        """Subscribe to auth changes and load the initial session state."""
        if self._subscription is None:
            self._subscription = self.backend.auth.on_auth_state_change(self._on_auth_state_change)
        if access_token is not None or not self.context.signed_in:
            await self.context.init(access_token)
        await self._sync_with_session()
        return self.render()

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    async def _on_auth_state_change(self, event: AuthEvent, session: Optional[Session]) -> None:
        if await self.context.handle_auth_event(event, session):
            await self._sync_with_session()

    async def _sync_with_session(self) -> None:
        if not self.context.signed_in:
            self._reset()
            return
        if self.current_page is Page.REQUESTS:
            await self._mark_requests_visited()
        else:
            self.last_visited_requests = read_watermark(self.storage, self.context.user_id)
        await self.refresh()

    def _reset(self) -> None:
        self.unread_notifications = 0
        self.pending_requests = 0
        self.last_visited_requests = None

    async def _mark_requests_visited(self) -> None:
        now = self.clock()
        # file write, kept off the event loop
        await asyncio.to_thread(write_watermark, self.storage, self.context.user_id, now)
        self.last_visited_requests = now

    async def refresh(self) -> NavState:
        if self.context.signed_in:
            await self.refresh_notifications()
            await self.refresh_pending_requests()
        return self.render()

    async def refresh_notifications(self) -> None:
        try:
            self.unread_notifications = await count_unread_notifications(
                self.backend, self.context.user_id
            )
        except BackendError as e:
            logger.warning("Error fetching notifications for %s: %s", self.context.user_id, e)

    async def refresh_pending_requests(self) -> None:
        user_id = self.context.user_id
        try:
            self.pending_requests = await count_pending_requests(
                self.backend, user_id, read_watermark(self.storage, user_id)
            )
        except BackendError as e:
            logger.warning("Error fetching pending requests for %s: %s", user_id, e)

    async def navigate(self, page: Page) -> NavState:
        self.current_page = Page(page)
        if self.on_page_change is not None:
            result = self.on_page_change(self.current_page)
            if inspect.isawaitable(result):
                await result

        if self.current_page is Page.REQUESTS and self.context.signed_in:
            await self._mark_requests_visited()
            await self.refresh_pending_requests()
        return self.render()

    async def sign_out(self) -> NavState:
        session = self.context.session
        if session is not None:
            await self.backend.auth.sign_out(session)
        # the auth event already cleared us unless we were unsubscribed
        self.context.clear()
        self._reset()
        return await self.navigate(Page.FREE_BOOKS)

    def render(self) -> NavState:
        pages = list(PUBLIC_PAGES)
        if self.context.signed_in:
            pages += MEMBER_PAGES

        badges = {
            Page.REQUESTS: self.pending_requests,
            Page.NOTIFICATIONS: self.unread_notifications,
        }
        links = [
            NavLink(
                page=page,
                label=PAGE_LABELS[page],
                active=page is self.current_page,
                badge=badges.get(page, 0),
            )
            for page in pages
        ]
        return NavState(
            session_state=self.context.state,
            current_page=self.current_page,
            display_name=self.context.display_name,
            unread_notifications=self.unread_notifications,
            pending_requests=self.pending_requests,
            links=links,
        )
