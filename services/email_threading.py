"""
Email Threading Service

Correlates quote emails across a quote family so that a revision sent to a
client continues the conversation started by the original quote.

Messages are stored against the quote that was actually sent. Every lookup
first resolves the family and then queries messages for all of its quote
ids, always filtered by the acting user.
"""

import json
import logging
from datetime import datetime, timezone
from typing import List, Optional

from dateutil import parser as date_parser
from sqlalchemy.orm import Session

from database.models import EmailThread, EMAIL_TYPE_QUOTE_SENT, EMAIL_TYPE_REVISION_SENT
from services.email_thread_repository import EmailThreadRepository
from services.errors import CorruptFamilyError
from services.quote_family import QuoteFamilyResolver
from services.results import (
    MessageSummary,
    OutboundMessage,
    RevisionContext,
    RevisionEntry,
    ThreadLookup,
)

logger = logging.getLogger(__name__)

# Statuses that move to awaiting_client once the quote has been emailed
SENDABLE_STATUSES = ('draft', 'revised')


def build_revision_annotation(revision_context: RevisionContext, root_quote_id: str) -> str:
    """Text appended to a revision email body so the stored row describes itself."""
    return (
        '\n\n---\nRevision Context:\n'
        f'Version: {revision_context.version_number}\n'
        f"Notes: {revision_context.revision_notes or 'No specific notes'}\n"
        f'Original Quote ID: {root_quote_id}'
    )


def parse_sent_at(value) -> Optional[datetime]:
    """
    Accept a datetime, an ISO-ish string, or nothing.

    Values carrying an offset are converted to naive UTC, matching the
    datetime.utcnow() default of the sent_at column.
    """
    if not value:
        return None
    if not isinstance(value, datetime):
        value = date_parser.parse(value)
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class EmailThreadService:
    """Thread lookup, send recording and history for one acting user."""

    def __init__(self, session: Session, user_id: str, resolver: QuoteFamilyResolver = None):
        self.session = session
        self.user_id = user_id
        self.resolver = resolver or QuoteFamilyResolver(session, user_id)
        self.messages = EmailThreadRepository(session, user_id)

    def find_thread(self, quote_id: str, recipient: str) -> ThreadLookup:
        """
        Find the latest prior email to recipient anywhere in the quote's family.

        Returns an empty ThreadLookup when nothing has been sent yet, in
        which case the caller starts a new provider thread.
        """
        root_id = self.resolver.resolve_root(quote_id)
        family_ids = self.resolver.resolve_family(root_id)

        found = self.messages.find_messages(family_ids, recipient=recipient, newest_first=True)
        if not found:
            return ThreadLookup()

        latest = found[0]
        logger.debug(
            f"Quote {quote_id} continues thread {latest.provider_thread_id} "
            f"({len(found)} messages to {recipient})"
        )
        return ThreadLookup(
            thread_id=latest.provider_thread_id,
            last_sent_at=latest.sent_at,
            message_count=len(found)
        )

    def record_sent(self, quote_id: str, message: OutboundMessage,
                    revision_context: RevisionContext = None,
                    root_id: str = None) -> EmailThread:
        """
        Persist an outbound email against the quote that was sent.

        When revision_context is omitted it is derived from the quote itself.
        Revision sends are tagged quote_revision_sent and carry an annotation
        in the stored body.

        Raises:
            CorruptFamilyError: root_id was given and is not this quote's root
            WriteFailureError: the insert was rejected
        """
        quote = self.resolver.get_owned_quote(quote_id)
        resolved_root = self.resolver.resolve_root(quote_id)
        if root_id is not None and root_id != resolved_root:
            raise CorruptFamilyError(
                f'Quote {quote_id} does not belong to family {root_id}', quote_id=quote_id
            )

        if revision_context is None:
            revision_context = RevisionContext(
                version_number=quote.version_number,
                revision_notes=quote.revision_notes,
                is_revision=quote.is_revision
            )

        body = message.body
        if revision_context.is_revision:
            body += build_revision_annotation(revision_context, resolved_root)

        sent_at = parse_sent_at(message.sent_at) or datetime.utcnow()
        row = {
            'company_id': quote.company_id,
            'quote_id': quote.id,
            'provider_message_id': message.provider_message_id,
            'provider_thread_id': message.provider_thread_id,
            'direction': 'outbound',
            'to': message.to,
            'cc': message.cc,
            'bcc': message.bcc,
            'subject': message.subject,
            'body': body,
            'attachments': json.dumps(message.attachments) if message.attachments else None,
            'include_quote_pdf': message.include_quote_pdf,
            'email_type': EMAIL_TYPE_REVISION_SENT if revision_context.is_revision else EMAIL_TYPE_QUOTE_SENT,
            'sent_at': sent_at,
        }

        if quote.status in SENDABLE_STATUSES:
            quote.status = 'awaiting_client'
        quote.sent_at = sent_at

        return self.messages.insert_message(row)

    def get_history(self, quote_id: str) -> List[MessageSummary]:
        """Every message across the family, oldest first."""
        root_id = self.resolver.resolve_root(quote_id)
        family_ids = self.resolver.resolve_family(root_id)

        return [
            MessageSummary(
                id=email.id,
                quote_id=email.quote_id,
                root_quote_id=root_id,
                subject=email.subject,
                body=email.body,
                sent_at=email.sent_at,
                direction=email.direction,
                from_email=email.from_email,
                to=email.to,
                revision_tag='revision' if email.email_type == EMAIL_TYPE_REVISION_SENT else 'original'
            )
            for email in self.messages.find_messages(family_ids)
        ]

    def get_revision_timeline(self, quote_id: str) -> List[RevisionEntry]:
        """Family members that have been emailed, with their latest outbound send."""
        timeline = []
        for member in self.resolver.family_quotes(quote_id):
            sent = self.messages.find_messages([member.id], direction='outbound', newest_first=True)
            if not sent:
                continue
            timeline.append(RevisionEntry(
                quote_id=member.id,
                version_number=member.version_number or '1',
                revision_notes=member.revision_notes,
                sent_at=sent[0].sent_at,
                subject=sent[0].subject,
                is_revision=member.is_revision
            ))
        return timeline
