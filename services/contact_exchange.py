"""
Contact exchange between the donor and the requester of a book request.

Each party shares a phone number and an address once. The exchange record
is keyed by the request id; it completes when both parties have shared, at
which point each side can see the other's details.
"""

import inspect
import logging
from typing import Awaitable, Callable, Optional, Union

from backend_client import BackendClient, not_null
from errors import BackendError, ContactValidationError, ExchangeAccessError, RequestNotFoundError
from models.auth_models import Session
from models.book_models import BookRequest
from models.exchange_models import (
    ContactSubmission,
    ExchangeRecord,
    ExchangeRole,
    ExchangeStatus,
    ExchangeView,
    SubmissionResult,
    ViewMode,
    submission_for,
)
from models.notification_models import NotificationType

logger = logging.getLogger(__name__)

MISSING_DETAILS_MESSAGE = "Please provide both phone number and address."
SHARED_MESSAGE = "Your contact information has been shared successfully."
FALLBACK_SENDER_NAME = "Someone"

ExchangeCompleteCallback = Callable[[], Union[None, Awaitable[None]]]


class ContactExchangeDialog:
    def __init__(
        self,
        backend: BackendClient,
        session: Session,
        request_id: str,
        role: ExchangeRole,
        on_exchange_complete: Optional[ExchangeCompleteCallback] = None,
    ):
        self.backend = backend
        self.session = session
        self.request_id = request_id
        self.role = role
        self.on_exchange_complete = on_exchange_complete

        self.is_open = False
        self.loading = False
        self.phone = ""
        self.address = ""
        self.record: Optional[ExchangeRecord] = None
        self.request: Optional[BookRequest] = None

    async def open(self) -> ExchangeView:
        await self._authorize()
        self.is_open = True
        await self._load_profile_contact()
        await self.refresh()
        return self.view()

    def close(self) -> None:
        self.is_open = False

    async def _authorize(self) -> BookRequest:
        """Load the request and check the caller holds the role they claim."""
        row = await self.backend.select_one("book_requests", {"id": self.request_id})
        if not row:
            raise RequestNotFoundError("Request not found")
        request = BookRequest(**row)

        participant = request.donor_id if self.role is ExchangeRole.DONOR else request.requester_id
        if participant != self.session.user_id:
            logger.warning(
                "User %s denied %s access to exchange for request %s",
                self.session.user_id, self.role.value, self.request_id,
            )
            raise ExchangeAccessError(f"You are not the {self.role.value} of this request.")
        self.request = request
        return request

    async def _load_profile_contact(self) -> None:
        try:
            profile = await self.backend.select_one(
                "profiles", {"id": self.session.user_id}, columns=["phone", "address"]
            )
        except BackendError as e:
            logger.warning("Error fetching profile for %s: %s", self.session.user_id, e)
            return
        if profile:
            self.phone = profile.get("phone") or ""
            self.address = profile.get("address") or ""

    async def refresh(self) -> Optional[ExchangeRecord]:
        """Re-read the exchange record, keeping the previous one on failure."""
        try:
            row = await self.backend.select_one("contact_exchanges", {"request_id": self.request_id})
        except BackendError as e:
            logger.warning("Error fetching exchange status for %s: %s", self.request_id, e)
            return self.record
        self.record = ExchangeRecord(**row) if row else None
        return self.record

    def view(self) -> ExchangeView:
        own = self.record.contact_for(self.role) if self.record else None
        other = self.record.contact_for(self.role.other) if self.record else None

        if own is None:
            mode = ViewMode.FORM
        elif not self.record.both_shared:
            mode = ViewMode.WAITING
        else:
            mode = ViewMode.REVEAL

        return ExchangeView(
            request_id=self.request_id,
            role=self.role,
            mode=mode,
            phone=self.phone,
            address=self.address,
            other_party=other if mode is ViewMode.REVEAL else None,
            record=self.record,
        )

    async def submit(self, submission: Optional[ContactSubmission] = None) -> SubmissionResult:
        """Share the caller's contact details for this request.

        Without an explicit submission the dialog's current form fields are
        used. A failing backend call aborts the remaining steps; earlier
        writes are not rolled back.
        """
        if submission is None:
            submission = submission_for(self.role, self.phone, self.address)
        if submission.role != self.role.value:
            raise ContactValidationError(
                f"Cannot submit {submission.role} details from the {self.role.value} side."
            )
        if not submission.is_complete():
            raise ContactValidationError(MISSING_DETAILS_MESSAGE)

        await self._authorize()

        self.phone = submission.phone
        self.address = submission.address
        self.loading = True
        try:
            fields = submission.exchange_fields()
            await self.backend.update(
                "profiles",
                {"phone": fields[f"{self.role.value}_phone"], "address": fields[f"{self.role.value}_address"]},
                {"id": self.session.user_id},
            )

            await self.backend.upsert(
                "contact_exchanges",
                {"request_id": self.request_id},
                fields,
                defaults={
                    f"{self.role.other.value}_phone": None,
                    f"{self.role.other.value}_address": None,
                    "status": ExchangeStatus.PENDING,
                },
            )

            await self._notify_other_party()

            completed = await self._complete_if_both_shared()
            await self.refresh()
        finally:
            self.loading = False

        if completed and self.on_exchange_complete is not None:
            result = self.on_exchange_complete()
            if inspect.isawaitable(result):
                await result

        self.close()
        return SubmissionResult(message=SHARED_MESSAGE, completed=completed, record=self.record)

    async def _notify_other_party(self) -> None:
        request = self.request
        book = await self.backend.select_one("books", {"id": request.book_id}, columns=["title"])
        title = book.get("title") if book else None

        if self.role is ExchangeRole.DONOR:
            other_user_id = request.requester_id
        else:
            other_user_id = request.donor_id

        profile = await self.backend.select_one(
            "profiles", {"id": self.session.user_id}, columns=["full_name"]
        )
        sender_name = (profile or {}).get("full_name") or FALLBACK_SENDER_NAME

        await self.backend.invoke_procedure("create_book_notification", {
            "user_id": other_user_id,
            "notification_type": NotificationType.CONTACT_SHARED.value,
            "notification_title": "Contact Details Shared",
            "notification_message": f'{sender_name} has shared their contact details for "{title or "your book"}".',
        })

    async def _complete_if_both_shared(self) -> bool:
        # Only the write that moves the record out of pending reports a match,
        # so completion is signalled once however often this runs.
        updated = await self.backend.update(
            "contact_exchanges",
            {"status": ExchangeStatus.COMPLETED},
            {
                "request_id": self.request_id,
                "donor_phone": not_null(),
                "requester_phone": not_null(),
                "status": ExchangeStatus.PENDING,
            },
        )
        if updated:
            logger.info("Contact exchange for request %s completed", self.request_id)
        return bool(updated)
