"""
Explicit session state shared by the screens of a signed-in user.

Lifecycle::

    signed_out --(sign-in / valid token)--> profile_loading --> ready
    ready --(sign-out)--> signed_out

The profile read is best-effort: a failure leaves ``profile`` as ``None``
and the context still becomes ready.
"""

import logging
from typing import Optional

from backend_client import AuthEvent, BackendClient
from errors import BackendError
from models.auth_models import Session
from models.navigation_models import SessionState
from models.profile_model import UserProfile

logger = logging.getLogger(__name__)


class SessionContext:
    def __init__(self, backend: BackendClient):
        self.backend = backend
        self.state = SessionState.SIGNED_OUT
        self.session: Optional[Session] = None
        self.profile: Optional[UserProfile] = None

    @property
    def signed_in(self) -> bool:
        return self.session is not None

    @property
    def user_id(self) -> Optional[str]:
        return self.session.user_id if self.session else None

    @property
    def display_name(self) -> Optional[str]:
        if self.session is None:
            return None
        if self.profile and self.profile.full_name:
            return self.profile.full_name
        return self.session.email

    async def init(self, access_token: Optional[str]) -> "SessionContext":
        session = await self.backend.auth.get_session(access_token)
        await self.adopt(session)
        return self

    async def adopt(self, session: Optional[Session]) -> None:
        if session is None:
            self.clear()
            return
        self.session = session
        self.state = SessionState.PROFILE_LOADING
        await self.load_profile()
        self.state = SessionState.READY

    async def load_profile(self) -> None:
        try:
            row = await self.backend.select_one("profiles", {"id": self.session.user_id})
        except BackendError as e:
            logger.warning("Error fetching profile for %s: %s", self.session.user_id, e)
            self.profile = None
            return
        self.profile = UserProfile(**row) if row else None

    def clear(self) -> None:
        self.state = SessionState.SIGNED_OUT
        self.session = None
        self.profile = None

    async def handle_auth_event(self, event: AuthEvent, session: Optional[Session]) -> bool:
        """Apply an auth-state change; returns True when this context changed.

        Events are matched on the access token, so another user or another
        sign-in of the same user leaves this context alone. A signed-out
        context adopts any sign-in.
        """
        if event is AuthEvent.SIGNED_IN:
            if session is None:
                return False
            if self.session is not None and self.session.access_token != session.access_token:
                return False
            await self.adopt(session)
            return True

        if event is AuthEvent.SIGNED_OUT:
            if self.session is None:
                return False
            if session is not None and session.access_token != self.session.access_token:
                return False
            self.clear()
            return True

        return False
