"""
Revision Service - creates new revisions of a quote behind the tier limit.
"""

import logging
from typing import Any, Dict

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database.models import Quote
from services.errors import RevisionLimitExceededError, WriteFailureError
from services.quote_family import QuoteFamilyResolver

logger = logging.getLogger(__name__)

# Fields a revision inherits from the quote it revises unless overridden.
# The company always comes from the source quote.
INHERITED_FIELDS = (
    'project_title', 'project_description', 'amount',
    'currency', 'client_name', 'client_email',
)


class RevisionService:
    """Creates revisions; every revision is parented on the family root."""

    def __init__(self, session: Session, user_id: str, resolver: QuoteFamilyResolver = None):
        self.session = session
        self.user_id = user_id
        self.resolver = resolver or QuoteFamilyResolver(session, user_id)

    def create_revision(self, quote_id: str, data: Dict[str, Any], tier: str) -> Quote:
        """
        Create a revision of quote_id.

        Args:
            quote_id: The quote being revised (root or an existing revision)
            data: Overrides for the new quote plus revision_notes,
                client_feedback and line_items
            tier: Subscription tier of the acting user

        Returns:
            The new revision

        Raises:
            RevisionLimitExceededError: the tier's revision ceiling is reached
            WriteFailureError: the insert was rejected
        """
        source = self.resolver.get_owned_quote(quote_id)
        root_id = self.resolver.resolve_root(quote_id)

        if not self.resolver.can_create_revision(quote_id, tier):
            logger.warning(f"Revision limit reached for quote family {root_id} (user {self.user_id})")
            raise RevisionLimitExceededError(
                'Revision limit reached. Upgrade to Pro for unlimited revisions.',
                quote_id=quote_id
            )

        family_size = len(self.resolver.resolve_family(root_id))

        values = {field: data.get(field, getattr(source, field)) for field in INHERITED_FIELDS}
        values.update({
            'user_id': self.user_id,
            'company_id': source.company_id,
            'status': 'revised',
            'parent_quote_id': root_id,
            'version_number': str(family_size + 1),
            'revision_notes': data.get('revision_notes'),
            'client_feedback': data.get('client_feedback'),
            'line_items': data.get('line_items') or [],
        })

        try:
            revision = self.resolver.quotes.create_quote(values)
            self.resolver.quotes.update_status(source.id, 'rejected')
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Error creating revised quote for {quote_id}: {e}")
            raise WriteFailureError('Failed to create revised quote', quote_id=quote_id) from e

        logger.info(
            f"Created revision {revision.id} (version {revision.version_number}) of family {root_id}"
        )
        return revision
