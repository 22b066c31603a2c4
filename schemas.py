"""
Request schemas

Pydantic models validating request bodies and query strings. Field errors are
reported with the request's own field names (camelCase where the API uses it).
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, List, Optional

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    field_validator,
)

from models import (
    ClubMemberCategory,
    EventStatus,
    Gender,
    InvoiceStatus,
    PublicInvoiceStatus,
    StartingListStatus,
    UserRole,
)
from utils.helpers import normalize_phone, to_naive_utc, validate_phone

# stored datetimes are naive UTC
Timestamp = Annotated[datetime, AfterValidator(to_naive_utc)]


class RequestModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


def _phone(value):
    if not validate_phone(value):
        raise ValueError('Invalid phone number format')
    return normalize_phone(value)


PhoneNumber = Annotated[str, AfterValidator(_phone)]


# Auth schemas
class RegisterRequest(RequestModel):
    email: EmailStr
    username: str = Field(..., min_length=3, max_length=100)
    password: str = Field(..., min_length=6, max_length=128)
    role: UserRole = UserRole.CLUB

    @field_validator('role')
    @classmethod
    def no_self_service_admin(cls, value):
        if value == UserRole.ADMIN:
            raise ValueError('Admin accounts cannot be self-registered')
        return value


class LoginRequest(RequestModel):
    email_or_username: str = Field(..., alias='emailOrUsername', min_length=1)
    password: str = Field(..., min_length=1)


# User administration
class UserCreate(RequestModel):
    username: str = Field(..., min_length=3, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    role: UserRole = UserRole.CLUB
    is_active: bool = True


class UserUpdate(RequestModel):
    username: Optional[str] = Field(None, min_length=3, max_length=100)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6, max_length=128)
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None


# Clubs
class ClubUpdate(RequestModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[PhoneNumber] = None
    address: Optional[str] = None


# Events
class EventCreate(RequestModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    location: Optional[str] = Field(None, max_length=255)
    start_date: Timestamp = Field(..., alias='startDate')
    end_date: Timestamp = Field(..., alias='endDate')
    registration_deadline: Optional[Timestamp] = Field(None, alias='registrationDeadline')
    status: Optional[EventStatus] = None
    max_participants: Optional[int] = Field(None, alias='maxParticipants', gt=0)


class EventUpdate(RequestModel):
    """All fields optional; untouched fields keep their stored values"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    location: Optional[str] = Field(None, max_length=255)
    start_date: Optional[Timestamp] = Field(None, alias='startDate')
    end_date: Optional[Timestamp] = Field(None, alias='endDate')
    registration_deadline: Optional[Timestamp] = Field(None, alias='registrationDeadline')
    status: Optional[EventStatus] = None
    max_participants: Optional[int] = Field(None, alias='maxParticipants', gt=0)


class EventQuery(RequestModel):
    status: Optional[EventStatus] = None


# Starting lists
class StartingListCreate(RequestModel):
    category: str = Field(..., min_length=1, max_length=100)
    age_group: Optional[str] = Field(None, max_length=50)
    gender: Optional[Gender] = None
    max_participants: Optional[int] = Field(None, ge=1)
    start_time: Optional[Timestamp] = None


class StartingListUpdate(RequestModel):
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    age_group: Optional[str] = Field(None, max_length=50)
    gender: Optional[Gender] = None
    max_participants: Optional[int] = Field(None, ge=1)
    start_time: Optional[Timestamp] = None
    status: Optional[StartingListStatus] = None


class ParticipantAdd(RequestModel):
    member_id: int = Field(..., gt=0)
    lane_number: Optional[int] = Field(None, ge=1)
    seed_time: Optional[Timestamp] = None


class ParticipantRemove(RequestModel):
    participant_id: int = Field(..., alias='participantId', gt=0)


class ParticipantResults(RequestModel):
    participant_id: int = Field(..., alias='participantId', gt=0)
    final_time: Optional[Timestamp] = None
    position: Optional[int] = Field(None, ge=1)


class StartingListStatusUpdate(RequestModel):
    status: StartingListStatus


# Invoices
class InvoiceItemIn(RequestModel):
    starting_list_id: int = Field(..., gt=0)
    member_id: int = Field(..., gt=0)
    description: str = Field(..., min_length=3, max_length=255)
    quantity: int = Field(..., ge=1)
    unit_price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)


class InvoiceCreate(RequestModel):
    """A client-supplied ``amount`` is ignored; it is computed from the items"""
    event_id: int = Field(..., gt=0)
    issue_date: Optional[Timestamp] = None
    due_date: Timestamp
    status: Optional[InvoiceStatus] = None
    reference_number: Optional[str] = Field(None, max_length=50)
    payment_method: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = Field(None, max_length=500)
    items: List[InvoiceItemIn] = Field(..., min_length=1)


class InvoiceUpdate(RequestModel):
    status: Optional[InvoiceStatus] = None
    payment_date: Optional[Timestamp] = None
    payment_method: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = Field(None, max_length=500)


class InvoiceQuery(RequestModel):
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=100)
    search: str = Field('', max_length=100)
    status: Optional[InvoiceStatus] = None


# Public kejurkab registration
class PublicRegistration(RequestModel):
    registrant_name: str = Field(..., min_length=1, max_length=255)
    event_name: str = Field(..., min_length=1, max_length=255)
    category: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: PhoneNumber


class PublicInvoiceStatusUpdate(RequestModel):
    status: PublicInvoiceStatus


# Roster upload form fields
class RosterUploadForm(RequestModel):
    event_id: int = Field(..., alias='eventId', gt=0)
    club_id: int = Field(..., alias='clubId', gt=0)
    compe_type: ClubMemberCategory = Field(..., alias='compeType')
