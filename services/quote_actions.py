"""
Quote Actions

Entry points for the route layer. Each action takes an open session and the
acting user id, runs one service operation and returns a ServiceResult.
Expected failures (missing quote, foreign quote, limit reached, corrupt
family, rejected write) become failed results; anything else propagates.
"""

import logging
from functools import wraps

from services.email_threading import EmailThreadService
from services.errors import QuoteThreadError
from services.quote_family import QuoteFamilyResolver, normalize_tier, TIER_FREE
from services.results import ServiceResult
from services.revision_service import RevisionService

logger = logging.getLogger(__name__)


def service_action(f):
    """Wrap a service call so expected errors come back as failed results."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            return ServiceResult.ok(f(*args, **kwargs))
        except QuoteThreadError as e:
            logger.warning(f"{f.__name__} failed [{e.code}]: {e.message}")
            return ServiceResult.fail(e.message, e.code)
    return decorated_function


@service_action
def resolve_root(session, user_id, quote_id):
    return QuoteFamilyResolver(session, user_id).resolve_root(quote_id)


@service_action
def get_quote_family(session, user_id, quote_id):
    resolver = QuoteFamilyResolver(session, user_id)
    root_id = resolver.resolve_root(quote_id)
    members = resolver.resolve_family(root_id)
    return {
        'root_quote_id': root_id,
        'quote_ids': members,
        'revision_count': len(members) - 1,
    }


@service_action
def count_revisions(session, user_id, quote_id):
    return QuoteFamilyResolver(session, user_id).count_revisions(quote_id)


@service_action
def can_create_revision(session, user_id, quote_id, tier):
    return QuoteFamilyResolver(session, user_id).can_create_revision(quote_id, tier)


@service_action
def check_revision_limit(session, user_id, quote_id, tier):
    resolver = QuoteFamilyResolver(session, user_id)
    tier = normalize_tier(tier)
    return {
        'can_create': resolver.can_create_revision(quote_id, tier),
        'current_revisions': resolver.count_revisions(quote_id),
        'upgrade_message': 'Upgrade to Pro for unlimited revisions' if tier == TIER_FREE else '',
    }


@service_action
def create_revision(session, user_id, quote_id, data, tier):
    return RevisionService(session, user_id).create_revision(quote_id, data, tier)


@service_action
def find_thread(session, user_id, quote_id, recipient):
    return EmailThreadService(session, user_id).find_thread(quote_id, recipient)


@service_action
def record_sent(session, user_id, quote_id, root_id, message, revision_context=None):
    return EmailThreadService(session, user_id).record_sent(
        quote_id, message, revision_context=revision_context, root_id=root_id
    )


@service_action
def get_history(session, user_id, quote_id):
    return EmailThreadService(session, user_id).get_history(quote_id)


@service_action
def get_revision_timeline(session, user_id, quote_id):
    return EmailThreadService(session, user_id).get_revision_timeline(quote_id)


@service_action
def get_version_history(session, user_id, quote_id):
    """Root first, then every revision by creation time, each with its line items."""
    resolver = QuoteFamilyResolver(session, user_id)
    root_id = resolver.resolve_root(quote_id)
    members = resolver.quotes.find_quotes_by_parent_or_id(root_id)
    members.sort(key=lambda quote: quote.id != root_id)
    return {
        'root_quote_id': root_id,
        'versions': [quote.to_dict(include_line_items=True) for quote in members],
    }


@service_action
def list_quote_families(session, user_id, company_id=None):
    families = QuoteFamilyResolver(session, user_id).group_by_family(company_id=company_id)
    return [
        {
            'root_quote_id': root_id,
            'revision_count': len(quotes) - 1,
            'quotes': [quote.to_dict() for quote in quotes],
        }
        for root_id, quotes in families.items()
    ]
