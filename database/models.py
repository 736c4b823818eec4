"""
SQLAlchemy models for the Quote Threading service.
Defines users, companies, quotes (with revisions), quote line items and
the email messages exchanged about each quote.
"""

import json
import uuid
from datetime import datetime
from sqlalchemy import (
    Column, String, Text, Float, Boolean, DateTime,
    ForeignKey, Index
)
from sqlalchemy.orm import relationship
from database.connection import Base


def generate_uuid():
    """Generate a new UUID."""
    return str(uuid.uuid4())


# =============================================================================
# USERS & COMPANIES (tenant scope)
# =============================================================================

class User(Base):
    """Application users. Every quote and message is scoped to one user."""
    __tablename__ = 'users'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    email = Column(String(255), unique=True, nullable=False)
    display_name = Column(String(255))
    subscription_tier = Column(String(20), default='free', nullable=False)  # free, pro
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    companies = relationship("Company", back_populates="user")
    quotes = relationship("Quote", back_populates="user")

    __table_args__ = (
        Index('ix_users_email', 'email'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'display_name': self.display_name,
            'subscription_tier': self.subscription_tier,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None
        }


class Company(Base):
    """A business the user quotes on behalf of."""
    __tablename__ = 'companies'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    name = Column(String(255), nullable=False)
    email = Column(String(255))
    currency = Column(String(3), default='USD')
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="companies")
    quotes = relationship("Quote", back_populates="company")

    __table_args__ = (
        Index('ix_companies_user', 'user_id'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'name': self.name,
            'email': self.email,
            'currency': self.currency,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }


# =============================================================================
# QUOTES
# =============================================================================

QUOTE_STATUSES = (
    'draft', 'awaiting_client', 'under_revision', 'revised',
    'accepted', 'rejected', 'expired',
)


class Quote(Base):
    """
    A priced proposal.

    parent_quote_id is null for the root of a quote family; revisions point
    at the root. version_number is a display label, never an ordering key.
    """
    __tablename__ = 'quotes'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    company_id = Column(String(36), ForeignKey('companies.id', ondelete='CASCADE'), nullable=False)
    project_title = Column(String(255), nullable=False)
    project_description = Column(Text)
    amount = Column(Float)
    currency = Column(String(3), default='USD', nullable=False)
    status = Column(String(50), default='draft', nullable=False)
    client_name = Column(String(255))
    client_email = Column(String(255))
    sent_at = Column(DateTime)

    # Revision fields
    parent_quote_id = Column(String(36), ForeignKey('quotes.id'))
    revision_notes = Column(Text)
    client_feedback = Column(Text)
    version_number = Column(String(20), default='1', nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="quotes")
    company = relationship("Company", back_populates="quotes")
    line_items = relationship("QuoteService", back_populates="quote", cascade="all, delete-orphan")
    email_threads = relationship("EmailThread", back_populates="quote", cascade="all, delete-orphan")

    __table_args__ = (
        Index('ix_quotes_user', 'user_id'),
        Index('ix_quotes_company', 'company_id'),
        Index('ix_quotes_parent', 'parent_quote_id'),
        Index('ix_quotes_status', 'status'),
    )

    @property
    def is_revision(self):
        return self.parent_quote_id is not None

    def to_dict(self, include_line_items=False):
        data = {
            'id': self.id,
            'user_id': self.user_id,
            'company_id': self.company_id,
            'project_title': self.project_title,
            'project_description': self.project_description,
            'amount': self.amount,
            'currency': self.currency,
            'status': self.status,
            'client_name': self.client_name,
            'client_email': self.client_email,
            'parent_quote_id': self.parent_quote_id,
            'revision_notes': self.revision_notes,
            'client_feedback': self.client_feedback,
            'version_number': self.version_number,
            'is_revision': self.is_revision,
            'sent_at': self.sent_at.isoformat() if self.sent_at else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None
        }
        if include_line_items:
            data['line_items'] = [item.to_dict() for item in self.line_items]
        return data


class QuoteService(Base):
    """Individual service line on a quote."""
    __tablename__ = 'quote_services'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    quote_id = Column(String(36), ForeignKey('quotes.id', ondelete='CASCADE'), nullable=False)
    service_name = Column(String(255), nullable=False)
    quantity = Column(Float, default=1)
    unit_price = Column(Float)
    total_price = Column(Float)
    notes = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    quote = relationship("Quote", back_populates="line_items")

    def to_dict(self):
        return {
            'id': self.id,
            'quote_id': self.quote_id,
            'service_name': self.service_name,
            'quantity': self.quantity,
            'unit_price': self.unit_price,
            'total_price': self.total_price,
            'notes': self.notes
        }


# =============================================================================
# EMAIL THREADS
# =============================================================================

EMAIL_TYPE_QUOTE_SENT = 'quote_sent'
EMAIL_TYPE_REVISION_SENT = 'quote_revision_sent'


class EmailThread(Base):
    """
    One sent or received email about a specific quote.

    Rows point at the quote that was actually sent (a revision, not the root);
    conversations are rebuilt by querying across the family's quote ids.
    """
    __tablename__ = 'email_threads'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    company_id = Column(String(36), ForeignKey('companies.id', ondelete='CASCADE'), nullable=False)
    quote_id = Column(String(36), ForeignKey('quotes.id', ondelete='CASCADE'), nullable=False)
    provider_message_id = Column(String(255), nullable=False)
    provider_thread_id = Column(String(255))
    direction = Column(String(10), default='outbound', nullable=False)  # inbound, outbound
    from_email = Column(String(255))
    to = Column(String(255), nullable=False)
    cc = Column(String(500))
    bcc = Column(String(500))
    subject = Column(String(500), nullable=False)
    body = Column(Text, nullable=False)
    attachments = Column(Text)  # JSON array of attachment filenames
    include_quote_pdf = Column(Boolean, default=False)
    is_read = Column(Boolean, default=False)
    email_type = Column(String(50))  # quote_sent, quote_revision_sent, client_response, follow_up
    sent_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    quote = relationship("Quote", back_populates="email_threads")

    __table_args__ = (
        Index('ix_email_threads_user', 'user_id'),
        Index('ix_email_threads_quote', 'quote_id'),
        Index('ix_email_threads_to', 'to'),
        Index('ix_email_threads_sent_at', 'sent_at'),
    )

    @property
    def attachment_list(self):
        if not self.attachments:
            return []
        try:
            return json.loads(self.attachments)
        except ValueError:
            return []

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'company_id': self.company_id,
            'quote_id': self.quote_id,
            'provider_message_id': self.provider_message_id,
            'provider_thread_id': self.provider_thread_id,
            'direction': self.direction,
            'from_email': self.from_email,
            'to': self.to,
            'cc': self.cc,
            'bcc': self.bcc,
            'subject': self.subject,
            'body': self.body,
            'attachments': self.attachment_list,
            'include_quote_pdf': self.include_quote_pdf,
            'is_read': self.is_read,
            'email_type': self.email_type,
            'sent_at': self.sent_at.isoformat() if self.sent_at else None,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }
