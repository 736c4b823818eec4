"""
Quote Repository - Database access layer for quotes and their line items.
"""

import logging
from datetime import datetime
from typing import List, Optional, Dict

from sqlalchemy import or_
from sqlalchemy.orm import Session

from database.models import Quote, QuoteService, QUOTE_STATUSES

logger = logging.getLogger(__name__)


class QuoteRepository:
    """Repository for quote database operations."""

    def __init__(self, session: Session, user_id: str = None):
        self.session = session
        self.user_id = user_id

    def get_quote_by_id(self, quote_id: str) -> Optional[Quote]:
        """
        Get a quote by ID regardless of owner.

        Callers compare ``user_id`` themselves so a foreign quote can be told
        apart from a missing one.
        """
        if not quote_id:
            return None
        return self.session.query(Quote).filter(Quote.id == quote_id).first()

    def find_quotes_by_parent_or_id(self, root_id: str) -> List[Quote]:
        """Get the root quote plus its direct revisions, oldest first."""
        query = self.session.query(Quote).filter(
            or_(Quote.id == root_id, Quote.parent_quote_id == root_id)
        )
        if self.user_id:
            query = query.filter(Quote.user_id == self.user_id)
        return query.order_by(Quote.created_at, Quote.id).all()

    def list_quotes(self, company_id: str = None) -> List[Quote]:
        """List the user's quotes, oldest first."""
        query = self.session.query(Quote)
        if self.user_id:
            query = query.filter(Quote.user_id == self.user_id)
        if company_id:
            query = query.filter(Quote.company_id == company_id)
        return query.order_by(Quote.created_at, Quote.id).all()

    def create_quote(self, data: Dict) -> Quote:
        """Create a new quote (root or revision) with optional line items."""
        quote = Quote(
            user_id=data.get('user_id') or self.user_id,
            company_id=data['company_id'],
            project_title=data.get('project_title', ''),
            project_description=data.get('project_description'),
            amount=data.get('amount'),
            currency=data.get('currency') or 'USD',
            status=data.get('status', 'draft'),
            client_name=data.get('client_name'),
            client_email=data.get('client_email'),
            parent_quote_id=data.get('parent_quote_id'),
            revision_notes=data.get('revision_notes'),
            client_feedback=data.get('client_feedback'),
            version_number=str(data.get('version_number') or '1'),
        )
        if data.get('created_at'):
            quote.created_at = data['created_at']
        self.session.add(quote)
        self.session.flush()

        for item in data.get('line_items') or []:
            self.add_line_item(quote.id, item)

        logger.info(f"Created quote: {quote.id}")
        return quote

    def add_line_item(self, quote_id: str, item: Dict) -> QuoteService:
        """Attach a service line to a quote."""
        quantity = item.get('quantity') or 1
        unit_price = item.get('unit_price')
        line = QuoteService(
            quote_id=quote_id,
            service_name=item.get('service_name', ''),
            quantity=quantity,
            unit_price=unit_price,
            total_price=quantity * unit_price if unit_price is not None else None,
            notes=item.get('notes'),
        )
        self.session.add(line)
        self.session.flush()
        return line

    def update_status(self, quote_id: str, status: str) -> Optional[Quote]:
        """Set a quote's status; unknown statuses raise ValueError."""
        if status not in QUOTE_STATUSES:
            raise ValueError(f"Unknown quote status: {status}")
        quote = self.get_quote_by_id(quote_id)
        if not quote:
            return None
        quote.status = status
        quote.updated_at = datetime.utcnow()
        self.session.flush()
        logger.info(f"Quote {quote_id} status -> {status}")
        return quote
