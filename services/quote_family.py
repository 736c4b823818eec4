"""
Quote Family Service

A quote and all of its revisions form one family. The family is the unit of
revision limiting and of email conversation threading, so both need to find
the root quote starting from any member.

Revisions always point at the family root (see RevisionService), which keeps
every family two levels deep: the root plus its direct children.
"""

import logging
from collections import OrderedDict
from typing import Dict, List, Optional, Set

from sqlalchemy.orm import Session

from config import get_revision_policy
from database.models import Quote
from services.errors import CorruptFamilyError, QuoteNotFoundError, UnauthorizedError
from services.quote_repository import QuoteRepository

logger = logging.getLogger(__name__)

TIER_FREE = 'free'
TIER_PRO = 'pro'


def normalize_tier(tier: Optional[str]) -> str:
    """Anything other than 'pro' is treated as the free tier."""
    return TIER_PRO if tier == TIER_PRO else TIER_FREE


class QuoteFamilyResolver:
    """Resolves family roots and members for one acting user."""

    def __init__(self, session: Session, user_id: str,
                 max_family_depth: int = None, free_tier_revision_limit: int = None):
        policy = get_revision_policy()
        self.session = session
        self.user_id = user_id
        self.quotes = QuoteRepository(session, user_id)
        self.max_family_depth = max_family_depth or policy['max_family_depth']
        if free_tier_revision_limit is None:
            free_tier_revision_limit = policy['free_tier_revision_limit']
        self.free_tier_revision_limit = free_tier_revision_limit

    def _check_owner(self, quote: Quote) -> None:
        if quote.user_id != self.user_id:
            logger.warning(f"User {self.user_id} denied access to quote {quote.id}")
            raise UnauthorizedError('Unauthorized to access this quote', quote_id=quote.id)

    def get_owned_quote(self, quote_id: str) -> Quote:
        """Load a quote, failing unless it exists and belongs to the user."""
        quote = self.quotes.get_quote_by_id(quote_id)
        if quote is None:
            raise QuoteNotFoundError('Quote not found', quote_id=quote_id)
        self._check_owner(quote)
        return quote

    def resolve_root(self, quote_id: str) -> str:
        """
        Walk up the parent chain to the family root.

        Every quote on the chain must belong to the user. The walk is bounded
        by max_family_depth and stops on a repeated id.

        Raises:
            QuoteNotFoundError: quote_id does not exist
            UnauthorizedError: a quote on the chain belongs to someone else
            CorruptFamilyError: dangling parent, cycle, or chain too deep
        """
        quote = self.get_owned_quote(quote_id)
        visited = set()

        while quote.parent_quote_id is not None:
            visited.add(quote.id)
            if len(visited) > self.max_family_depth:
                raise CorruptFamilyError(
                    f'Parent chain of quote {quote_id} exceeds {self.max_family_depth} levels',
                    quote_id=quote_id
                )
            if quote.parent_quote_id in visited:
                raise CorruptFamilyError(
                    f'Parent chain of quote {quote_id} contains a cycle', quote_id=quote_id
                )

            parent = self.quotes.get_quote_by_id(quote.parent_quote_id)
            if parent is None:
                raise CorruptFamilyError(
                    f'Quote {quote.id} references missing parent {quote.parent_quote_id}',
                    quote_id=quote_id
                )
            self._check_owner(parent)
            quote = parent

        logger.debug(f"Quote {quote_id} resolves to root {quote.id}")
        return quote.id

    def resolve_family(self, root_quote_id: str) -> Set[str]:
        """Return the root id plus the ids of its direct revisions."""
        self.get_owned_quote(root_quote_id)
        members = self.quotes.find_quotes_by_parent_or_id(root_quote_id)
        return {q.id for q in members}

    def family_quotes(self, quote_id: str) -> List[Quote]:
        """All quotes in the family of quote_id, oldest first."""
        root_id = self.resolve_root(quote_id)
        return self.quotes.find_quotes_by_parent_or_id(root_id)

    def count_revisions(self, quote_id: str) -> int:
        """Number of revisions in the quote's family; the root does not count."""
        root_id = self.resolve_root(quote_id)
        return len(self.resolve_family(root_id)) - 1

    def can_create_revision(self, quote_id: str, tier: str) -> bool:
        """Whether the tier allows one more revision in this quote's family."""
        if normalize_tier(tier) == TIER_PRO:
            # Still resolves so missing or foreign quotes fail the same way on every tier
            self.resolve_root(quote_id)
            return True
        return self.count_revisions(quote_id) < self.free_tier_revision_limit

    def group_by_family(self, company_id: str = None) -> Dict[str, List[Quote]]:
        """
        Group the user's quotes by family root id.

        Uses parent_quote_id or id as the key, which matches resolve_root for
        families written through RevisionService.
        """
        families = OrderedDict()
        for quote in self.quotes.list_quotes(company_id=company_id):
            key = quote.parent_quote_id or quote.id
            families.setdefault(key, []).append(quote)
        return families
