"""
Errors raised by the quote threading services.

Each error carries a stable ``code`` so the action layer can turn it into a
structured failure without inspecting messages.
"""

from typing import Optional


class QuoteThreadError(Exception):
    """Base class for expected, caller-facing failures"""
    code = 'error'

    def __init__(self, message: str, quote_id: Optional[str] = None):
        self.message = message
        self.quote_id = quote_id
        super().__init__(self.message)


class QuoteNotFoundError(QuoteThreadError):
    """The referenced quote does not exist"""
    code = 'not_found'


class UnauthorizedError(QuoteThreadError):
    """The acting user does not own the quote or its family"""
    code = 'unauthorized'


class RevisionLimitExceededError(QuoteThreadError):
    """The subscription tier's revision ceiling has been reached"""
    code = 'limit_exceeded'


class CorruptFamilyError(QuoteThreadError):
    """The parent chain is dangling, cyclic, or deeper than allowed"""
    code = 'corrupt_family'


class WriteFailureError(QuoteThreadError):
    """The database rejected an insert"""
    code = 'write_failure'
