from pydantic import BaseModel, Field
from typing import Annotated, Dict, Literal, Optional, Union
from datetime import datetime
from enum import Enum


class ExchangeRole(str, Enum):
    DONOR = "donor"
    REQUESTER = "requester"

    @property
    def other(self) -> "ExchangeRole":
        return ExchangeRole.REQUESTER if self is ExchangeRole.DONOR else ExchangeRole.DONOR


class ExchangeStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class ViewMode(str, Enum):
    FORM = "form"
    WAITING = "waiting"
    REVEAL = "reveal"


class ContactDetails(BaseModel):
    phone: str
    address: str


class _ContactSubmission(BaseModel):
    phone: str = ""
    address: str = ""

    def is_complete(self) -> bool:
        return bool(self.phone.strip()) and bool(self.address.strip())

    def exchange_fields(self) -> Dict[str, str]:
        """Record columns owned by the submitting role."""
        return {
            f"{self.role}_phone": self.phone.strip(),
            f"{self.role}_address": self.address.strip(),
        }


class DonorSubmission(_ContactSubmission):
    role: Literal["donor"] = "donor"


class RequesterSubmission(_ContactSubmission):
    role: Literal["requester"] = "requester"


ContactSubmission = Annotated[
    Union[DonorSubmission, RequesterSubmission],
    Field(discriminator="role"),
]


def submission_for(role: ExchangeRole, phone: str, address: str) -> _ContactSubmission:
    if role is ExchangeRole.DONOR:
        return DonorSubmission(phone=phone, address=address)
    return RequesterSubmission(phone=phone, address=address)


class ExchangeRecord(BaseModel):
    id: Optional[str] = None
    request_id: str
    donor_phone: Optional[str] = None
    donor_address: Optional[str] = None
    requester_phone: Optional[str] = None
    requester_address: Optional[str] = None
    status: ExchangeStatus = ExchangeStatus.PENDING
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def contact_for(self, role: ExchangeRole) -> Optional[ContactDetails]:
        # a side counts as shared once its phone is on the record
        phone = getattr(self, f"{role.value}_phone")
        if not phone:
            return None
        return ContactDetails(phone=phone, address=getattr(self, f"{role.value}_address") or "")

    @property
    def both_shared(self) -> bool:
        return bool(self.donor_phone) and bool(self.requester_phone)


class ExchangeView(BaseModel):
    request_id: str
    role: ExchangeRole
    mode: ViewMode
    phone: str = ""
    address: str = ""
    other_party: Optional[ContactDetails] = None
    record: Optional[ExchangeRecord] = None


class SubmissionResult(BaseModel):
    message: str
    completed: bool = False
    record: Optional[ExchangeRecord] = None
