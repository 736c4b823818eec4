"""
Structured return values shared by the services and the action layer.
"""

from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Any, List, Optional


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class ServiceResult:
    """
    Outcome of a route-facing operation.

    Attributes:
        success: Whether the operation succeeded
        data: Payload on success
        error: Human readable message on failure
        error_code: Stable failure kind (not_found, unauthorized, ...)
    """
    success: bool
    data: Any = None
    error: Optional[str] = None
    error_code: Optional[str] = None

    @classmethod
    def ok(cls, data: Any = None) -> 'ServiceResult':
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, error_code: str) -> 'ServiceResult':
        return cls(success=False, error=error, error_code=error_code)

    def to_dict(self):
        if self.success:
            return {'success': True, 'data': _serialize(self.data)}
        return {'success': False, 'error': self.error, 'error_code': self.error_code}


@dataclass
class ThreadLookup:
    """Most recent prior email to one recipient across a quote family."""
    thread_id: Optional[str] = None
    last_sent_at: Optional[datetime] = None
    message_count: int = 0

    def to_dict(self):
        return {
            'thread_id': self.thread_id,
            'last_sent_at': _isoformat(self.last_sent_at),
            'message_count': self.message_count
        }


@dataclass
class RevisionContext:
    version_number: Optional[str] = None
    revision_notes: Optional[str] = None
    is_revision: bool = False


@dataclass
class OutboundMessage:
    """An email that has just been handed to the mail provider."""
    to: str
    subject: str
    body: str
    provider_message_id: str
    provider_thread_id: Optional[str] = None
    cc: Optional[str] = None
    bcc: Optional[str] = None
    attachments: Optional[List[str]] = None
    include_quote_pdf: bool = False
    sent_at: Optional[datetime] = None


@dataclass
class MessageSummary:
    """One entry of a family-wide conversation timeline."""
    id: str
    quote_id: str
    root_quote_id: str
    subject: str
    body: str
    sent_at: datetime
    direction: str
    from_email: Optional[str]
    to: str
    revision_tag: str  # 'revision' or 'original'

    def to_dict(self):
        data = asdict(self)
        data['sent_at'] = _isoformat(self.sent_at)
        data['is_revision'] = self.revision_tag == 'revision'
        return data


@dataclass
class RevisionEntry:
    """A family member that has been emailed at least once."""
    quote_id: str
    version_number: str
    revision_notes: Optional[str]
    sent_at: datetime
    subject: str
    is_revision: bool

    def to_dict(self):
        data = asdict(self)
        data['sent_at'] = _isoformat(self.sent_at)
        return data


def _serialize(value):
    """Convert result payloads into JSON-friendly structures."""
    if hasattr(value, 'to_dict'):
        return value.to_dict()
    if isinstance(value, dict):
        return {k: _serialize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        items = sorted(value) if isinstance(value, set) else value
        return [_serialize(v) for v in items]
    if isinstance(value, datetime):
        return value.isoformat()
    return value
