"""
Email Thread Repository - Database access layer for quote email messages.
"""

import logging
from typing import Iterable, List, Dict

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database.models import EmailThread
from services.errors import WriteFailureError

logger = logging.getLogger(__name__)


class EmailThreadRepository:
    """Repository for email thread messages, always scoped to one user."""

    def __init__(self, session: Session, user_id: str):
        self.session = session
        self.user_id = user_id

    def find_messages(self, quote_ids: Iterable[str], recipient: str = None,
                      direction: str = None, newest_first: bool = False) -> List[EmailThread]:
        """
        Find the user's messages attached to any of the given quotes.

        Ordered by sent_at, ties broken by id, so results are deterministic.
        """
        quote_ids = list(quote_ids)
        if not quote_ids:
            return []

        query = self.session.query(EmailThread).filter(
            EmailThread.quote_id.in_(quote_ids),
            EmailThread.user_id == self.user_id
        )
        if recipient is not None:
            query = query.filter(EmailThread.to == recipient)
        if direction is not None:
            query = query.filter(EmailThread.direction == direction)

        if newest_first:
            query = query.order_by(EmailThread.sent_at.desc(), EmailThread.id.desc())
        else:
            query = query.order_by(EmailThread.sent_at.asc(), EmailThread.id.asc())
        return query.all()

    def insert_message(self, data: Dict) -> EmailThread:
        """
        Insert one message row.

        Raises:
            WriteFailureError: the database rejected the row; the session is rolled back.
        """
        message = EmailThread(user_id=self.user_id, **data)
        try:
            self.session.add(message)
            self.session.flush()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Failed to save email thread for quote {data.get('quote_id')}: {e}")
            raise WriteFailureError(
                'Failed to save email thread', quote_id=data.get('quote_id')
            ) from e

        logger.info(f"Saved email thread {message.id} for quote {message.quote_id}")
        return message
