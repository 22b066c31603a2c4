#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Akuatik admin backend - database models
"""

import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Enum as SqlEnum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class UserRole(Enum):
    """User roles"""
    CLUB = 'club'          # club account, owns a Club profile
    OFFICIAL = 'official'  # race official, owns an Official profile
    ADMIN = 'admin'


class ClubMemberCategory(Enum):
    """Athlete category"""
    ACHIEVING = 'achieving'
    NON_ACHIEVING = 'non_achieving'


class EventStatus(Enum):
    """Event status"""
    DRAFT = 'draft'
    OPEN = 'open'
    IN_PROGRESS = 'in_progress'
    COMPLETED = 'completed'
    CANCELED = 'canceled'


class RegistrationStatus(Enum):
    """Club registration to an event"""
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    CANCELED = 'canceled'


class StartingListStatus(Enum):
    """Starting list (heat) status"""
    SCHEDULED = 'scheduled'
    IN_PROGRESS = 'in_progress'
    COMPLETED = 'completed'


class Gender(Enum):
    MALE = 'male'
    FEMALE = 'female'


class InvoiceStatus(Enum):
    """Club invoice status"""
    DRAFT = 'draft'
    ISSUED = 'issued'
    PAID = 'paid'
    OVERDUE = 'overdue'
    CANCELED = 'canceled'


class PublicInvoiceStatus(Enum):
    """Public (kejurkab) invoice status"""
    PENDING = 'pending'
    PAID = 'paid'
    CANCELLED = 'cancelled'


# Allowed starting list status changes; same-state requests are no-ops
STARTING_LIST_TRANSITIONS = {
    StartingListStatus.SCHEDULED: {StartingListStatus.IN_PROGRESS},
    StartingListStatus.IN_PROGRESS: {StartingListStatus.COMPLETED, StartingListStatus.SCHEDULED},
    StartingListStatus.COMPLETED: set(),
}


def _enum_column(enum_cls, **kwargs):
    # store enum values ('in_progress'), not member names ('IN_PROGRESS')
    return Column(
        SqlEnum(enum_cls, values_callable=lambda e: [m.value for m in e],
                name=enum_cls.__name__.lower(), validate_strings=True),
        **kwargs,
    )


def _iso(value):
    return value.isoformat() if value else None


def _money(value):
    return float(value) if value is not None else None


class TimestampMixin:
    created_at = Column(DateTime, default=datetime.now, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)


class User(TimestampMixin, Base):
    """User account"""
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False)
    username = Column(String(100), unique=True, nullable=False)
    password = Column(String(255), nullable=False)
    role = _enum_column(UserRole, nullable=False, default=UserRole.CLUB)
    is_active = Column(Boolean, nullable=False, default=True)
    last_login = Column(DateTime, nullable=True)

    club = relationship('Club', back_populates='user', uselist=False)
    official = relationship('Official', back_populates='user', uselist=False,
                            cascade='all, delete-orphan')

    def to_dict(self, include_profile=False):
        """Serialize without the credential"""
        data = {
            'id': self.id,
            'email': self.email,
            'username': self.username,
            'role': self.role.value,
            'is_active': self.is_active,
            'last_login': _iso(self.last_login),
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }
        if include_profile:
            data['club'] = self.club.to_dict() if self.club else None
            data['official'] = self.official.to_dict() if self.official else None
        return data


class Official(TimestampMixin, Base):
    """Race official profile"""
    __tablename__ = 'officials'

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey('users.id'), unique=True, nullable=False)
    name = Column(String(255), nullable=False)
    phone = Column(String(20))
    license_number = Column(String(50))

    user = relationship('User', back_populates='official')

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'name': self.name,
            'phone': self.phone,
            'license_number': self.license_number,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }


class Club(TimestampMixin, Base):
    """Club profile, soft-deletable"""
    __tablename__ = 'clubs'

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey('users.id'), unique=True, nullable=False)
    name = Column(String(255), nullable=False)
    email = Column(String(255))
    phone = Column(String(20))
    address = Column(Text)
    active = Column(Boolean, nullable=False, default=True)
    deleted_at = Column(DateTime, nullable=True)

    user = relationship('User', back_populates='club')
    members = relationship('ClubMember', back_populates='club')
    event_registrations = relationship('EventRegistration', back_populates='club')
    invoices = relationship('Invoice', back_populates='club')

    __table_args__ = (
        Index('idx_clubs_deleted_at', 'deleted_at'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'name': self.name,
            'email': self.email,
            'phone': self.phone,
            'address': self.address,
            'active': self.active,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
            'deleted_at': _iso(self.deleted_at),
        }


class ClubMember(TimestampMixin, Base):
    """Athlete belonging to a club"""
    __tablename__ = 'club_members'

    id = Column(Integer, primary_key=True, autoincrement=True)
    club_id = Column(Integer, ForeignKey('clubs.id'), nullable=False)
    name = Column(String(255), nullable=False)
    date_of_birth = Column(Date, nullable=True)
    email = Column(String(255))
    phone = Column(String(20))
    emergency_contact = Column(String(255))
    category = _enum_column(ClubMemberCategory, nullable=False,
                            default=ClubMemberCategory.NON_ACHIEVING)
    active = Column(Boolean, nullable=False, default=True)

    club = relationship('Club', back_populates='members')

    # (club, name, date_of_birth) is the import lookup key, deliberately not unique
    __table_args__ = (
        Index('idx_members_club_name_dob', 'club_id', 'name', 'date_of_birth'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'club_id': self.club_id,
            'name': self.name,
            'date_of_birth': _iso(self.date_of_birth),
            'email': self.email,
            'phone': self.phone,
            'emergency_contact': self.emergency_contact,
            'category': self.category.value,
            'active': self.active,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }


class Event(TimestampMixin, Base):
    """Competition event"""
    __tablename__ = 'events'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    location = Column(String(255))
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    registration_deadline = Column(DateTime, nullable=True)
    status = _enum_column(EventStatus, nullable=False, default=EventStatus.DRAFT)
    max_participants = Column(Integer, nullable=True)

    starting_lists = relationship('StartingList', back_populates='event',
                                  cascade='all, delete-orphan')
    registrations = relationship('EventRegistration', back_populates='event',
                                 cascade='all, delete-orphan')

    __table_args__ = (
        Index('idx_events_status_start', 'status', 'start_date'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'location': self.location,
            'start_date': _iso(self.start_date),
            'end_date': _iso(self.end_date),
            'registration_deadline': _iso(self.registration_deadline),
            'status': self.status.value,
            'max_participants': self.max_participants,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }

    def to_summary(self):
        return {'id': self.id, 'name': self.name, 'start_date': _iso(self.start_date),
                'end_date': _iso(self.end_date)}


class EventRegistration(TimestampMixin, Base):
    """A club's registration to an event"""
    __tablename__ = 'event_registrations'

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(Integer, ForeignKey('events.id'), nullable=False)
    club_id = Column(Integer, ForeignKey('clubs.id'), nullable=False)
    status = _enum_column(RegistrationStatus, nullable=False, default=RegistrationStatus.PENDING)

    event = relationship('Event', back_populates='registrations')
    club = relationship('Club', back_populates='event_registrations')

    def to_dict(self):
        return {
            'id': self.id,
            'event_id': self.event_id,
            'club_id': self.club_id,
            'status': self.status.value,
            'event': self.event.to_summary() if self.event else None,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }


class StartingList(TimestampMixin, Base):
    """Heat grouping by (event, category, age_group, gender)"""
    __tablename__ = 'starting_lists'

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(Integer, ForeignKey('events.id'), nullable=False)
    category = Column(String(100), nullable=False)
    age_group = Column(String(50), nullable=True)
    gender = _enum_column(Gender, nullable=True)
    max_participants = Column(Integer, nullable=True)
    start_time = Column(DateTime, nullable=True)
    status = _enum_column(StartingListStatus, nullable=False,
                          default=StartingListStatus.SCHEDULED)

    event = relationship('Event', back_populates='starting_lists')
    participants = relationship('StartingListParticipant', back_populates='starting_list',
                                cascade='all, delete-orphan',
                                order_by='StartingListParticipant.id')

    __table_args__ = (
        Index('idx_lists_grouping', 'event_id', 'category', 'age_group', 'gender'),
    )

    def can_transition_to(self, new_status):
        if new_status == self.status:
            return True
        return new_status in STARTING_LIST_TRANSITIONS[self.status]

    def to_dict(self, include_participants=False, include_event=False):
        data = {
            'id': self.id,
            'event_id': self.event_id,
            'category': self.category,
            'age_group': self.age_group,
            'gender': self.gender.value if self.gender else None,
            'max_participants': self.max_participants,
            'start_time': _iso(self.start_time),
            'status': self.status.value,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }
        if include_participants:
            data['participants'] = [p.to_dict() for p in self.participants]
        if include_event:
            data['event'] = self.event.to_dict() if self.event else None
        return data


class StartingListParticipant(TimestampMixin, Base):
    """A club member entered into a starting list"""
    __tablename__ = 'starting_list_participants'

    id = Column(Integer, primary_key=True, autoincrement=True)
    starting_list_id = Column(Integer, ForeignKey('starting_lists.id'), nullable=False)
    member_id = Column(Integer, ForeignKey('club_members.id'), nullable=False)
    lane_number = Column(Integer, nullable=True)
    seed_time = Column(DateTime, nullable=True)
    final_time = Column(DateTime, nullable=True)
    position = Column(Integer, nullable=True)

    starting_list = relationship('StartingList', back_populates='participants')
    member = relationship('ClubMember')

    __table_args__ = (
        UniqueConstraint('starting_list_id', 'member_id', name='uniq_list_member'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'starting_list_id': self.starting_list_id,
            'member_id': self.member_id,
            'lane_number': self.lane_number,
            'seed_time': _iso(self.seed_time),
            'final_time': _iso(self.final_time),
            'position': self.position,
            'member': self.member.to_dict() if self.member else None,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }


class Invoice(TimestampMixin, Base):
    """Club invoice, soft-deletable"""
    __tablename__ = 'invoices'

    id = Column(Integer, primary_key=True, autoincrement=True)
    club_id = Column(Integer, ForeignKey('clubs.id'), nullable=False)
    event_id = Column(Integer, ForeignKey('events.id'), nullable=False)
    reference_number = Column(String(50), unique=True, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False, default=Decimal('0'))
    status = _enum_column(InvoiceStatus, nullable=False, default=InvoiceStatus.DRAFT)
    issue_date = Column(DateTime, nullable=False)
    due_date = Column(DateTime, nullable=False)
    payment_date = Column(DateTime, nullable=True)
    payment_method = Column(String(50))
    notes = Column(String(500))
    deleted_at = Column(DateTime, nullable=True)

    club = relationship('Club', back_populates='invoices')
    event = relationship('Event')
    items = relationship('InvoiceItem', back_populates='invoice', cascade='all, delete-orphan',
                         order_by='InvoiceItem.id')

    __table_args__ = (
        Index('idx_invoices_club_deleted', 'club_id', 'deleted_at'),
    )

    def to_dict(self, include_items=False):
        data = {
            'id': self.id,
            'club_id': self.club_id,
            'event_id': self.event_id,
            'reference_number': self.reference_number,
            'amount': _money(self.amount),
            'status': self.status.value,
            'issue_date': _iso(self.issue_date),
            'due_date': _iso(self.due_date),
            'payment_date': _iso(self.payment_date),
            'payment_method': self.payment_method,
            'notes': self.notes,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
            'deleted_at': _iso(self.deleted_at),
        }
        if include_items:
            data['items'] = [item.to_dict() for item in self.items]
        return data


class InvoiceItem(Base):
    """One billable line of an invoice"""
    __tablename__ = 'invoice_items'

    id = Column(Integer, primary_key=True, autoincrement=True)
    invoice_id = Column(Integer, ForeignKey('invoices.id'), nullable=False)
    starting_list_id = Column(Integer, ForeignKey('starting_lists.id'), nullable=False)
    member_id = Column(Integer, ForeignKey('club_members.id'), nullable=False)
    description = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Numeric(12, 2), nullable=False)
    total_price = Column(Numeric(12, 2), nullable=False)

    invoice = relationship('Invoice', back_populates='items')
    member = relationship('ClubMember')
    starting_list = relationship('StartingList')

    __table_args__ = (
        Index('idx_items_list_member', 'starting_list_id', 'member_id'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'invoice_id': self.invoice_id,
            'starting_list_id': self.starting_list_id,
            'member_id': self.member_id,
            'description': self.description,
            'quantity': self.quantity,
            'unit_price': _money(self.unit_price),
            'total_price': _money(self.total_price),
            'member': {'id': self.member.id, 'name': self.member.name,
                       'category': self.member.category.value} if self.member else None,
            'starting_list': {'id': self.starting_list.id, 'category': self.starting_list.category,
                              'gender': self.starting_list.gender.value if self.starting_list.gender else None}
            if self.starting_list else None,
        }


def _uuid():
    return str(uuid.uuid4())


class PublicInvoice(Base):
    """Invoice of the public kejurkab registration flow"""
    __tablename__ = 'public_invoices'

    invoice_number = Column(String(36), primary_key=True, default=_uuid)
    billed_to = Column(String(255), nullable=False)
    invoice_date = Column(DateTime, nullable=False, default=datetime.now)
    status = _enum_column(PublicInvoiceStatus, nullable=False, default=PublicInvoiceStatus.PENDING)

    kejurkab = relationship('PublicKejurkab', back_populates='invoice', uselist=False)

    def to_dict(self, include_registration=False):
        data = {
            'invoice_number': self.invoice_number,
            'billed_to': self.billed_to,
            'invoice_date': _iso(self.invoice_date),
            'status': self.status.value,
        }
        if include_registration:
            data['kejurkab'] = self.kejurkab.to_dict() if self.kejurkab else None
        return data


class PublicKejurkab(Base):
    """Public self-registration to the regency championship"""
    __tablename__ = 'public_kejurkab'

    registration_number = Column(String(36), primary_key=True, default=_uuid)
    invoice_number = Column(String(36), ForeignKey('public_invoices.invoice_number'),
                            unique=True, nullable=False)
    registrant_name = Column(String(255), nullable=False)
    event_name = Column(String(255), nullable=False)
    category = Column(String(100), nullable=False)
    # storage-level uniqueness closes the check-then-insert race
    email = Column(String(255), unique=True, nullable=False)
    phone = Column(String(20), unique=True, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    invoice = relationship('PublicInvoice', back_populates='kejurkab')

    def to_dict(self, include_invoice=False):
        data = {
            'registration_number': self.registration_number,
            'invoice_number': self.invoice_number,
            'registrant_name': self.registrant_name,
            'event_name': self.event_name,
            'category': self.category,
            'email': self.email,
            'phone': self.phone,
            'created_at': _iso(self.created_at),
        }
        if include_invoice:
            data['invoice'] = self.invoice.to_dict() if self.invoice else None
        return data
