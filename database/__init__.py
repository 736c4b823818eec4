"""
Database package for the Quote Threading service.
Provides SQLAlchemy models, connection management, and session handling.
"""

from database.connection import (
    Base,
    configure_engine,
    reset_engine,
    get_engine,
    get_db_session,
    init_db,
    check_db_connection
)

from database.models import (
    User,
    Company,
    Quote,
    QuoteService,
    EmailThread,
    EMAIL_TYPE_QUOTE_SENT,
    EMAIL_TYPE_REVISION_SENT
)

__all__ = [
    # Connection
    'Base',
    'configure_engine',
    'reset_engine',
    'get_engine',
    'get_db_session',
    'init_db',
    'check_db_connection',
    # Models
    'User',
    'Company',
    'Quote',
    'QuoteService',
    'EmailThread',
    'EMAIL_TYPE_QUOTE_SENT',
    'EMAIL_TYPE_REVISION_SENT'
]
