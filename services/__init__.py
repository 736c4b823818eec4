"""
Services package for the Quote Threading service.
Repositories for database access plus the quote family and email threading logic.
"""

from services.email_thread_repository import EmailThreadRepository
from services.email_threading import EmailThreadService
from services.quote_family import QuoteFamilyResolver
from services.quote_repository import QuoteRepository
from services.revision_service import RevisionService

__all__ = [
    'EmailThreadRepository',
    'EmailThreadService',
    'QuoteFamilyResolver',
    'QuoteRepository',
    'RevisionService'
]
