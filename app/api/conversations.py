"""
Quote Conversation Routes Blueprint

Handles quote families and the email conversation around them:
- /api/quotes/families: the user's quotes grouped by family
- /api/quotes/<quote_id>/family: root, members and revision count
- /api/quotes/<quote_id>/revision-limit: whether another revision is allowed
- /api/quotes/<quote_id>/revisions: create a revision
- /api/quotes/<quote_id>/versions: every version of the family with line items
- /api/quotes/<quote_id>/thread: latest prior email to a recipient
- /api/quotes/<quote_id>/emails: record a sent email
- /api/quotes/<quote_id>/conversation: family-wide message history
- /api/quotes/<quote_id>/revision-timeline: sent revisions of the family
"""

import logging
from flask import Blueprint, request, jsonify

from auth import get_current_user_id, get_subscription_tier, login_required
from database.connection import get_db_session
from services import quote_actions
from services.email_threading import parse_sent_at
from services.results import OutboundMessage, RevisionContext
from validators import (
    validate_attachments,
    validate_email,
    validate_email_list,
    validate_line_items,
    validate_required_fields,
    validate_revision_context,
    validate_string_fields,
)

logger = logging.getLogger(__name__)

# Create blueprint
conversations_bp = Blueprint('conversations_bp', __name__)

ERROR_STATUS = {
    'not_found': 404,
    'unauthorized': 403,
    'limit_exceeded': 403,
    'corrupt_family': 409,
    'write_failure': 500,
}


def respond(result, success_status=200):
    """Turn a ServiceResult into a JSON response."""
    if result.success:
        return jsonify(result.to_dict()), success_status
    return jsonify(result.to_dict()), ERROR_STATUS.get(result.error_code, 400)


def bad_request(error):
    return jsonify({'success': False, 'error': error, 'error_code': 'invalid_request'}), 400


# ============================================================================
# QUOTE FAMILY & REVISIONS
# ============================================================================

@conversations_bp.route('/api/quotes/families', methods=['GET'])
@login_required
def list_families():
    """The user's quotes grouped by family root, optionally for one ?company_id="""
    company_id = request.args.get('company_id') or None
    with get_db_session() as db:
        result = quote_actions.list_quote_families(db, get_current_user_id(), company_id)
        return respond(result)


@conversations_bp.route('/api/quotes/<quote_id>/family', methods=['GET'])
@login_required
def get_family(quote_id):
    """Root id, member ids and revision count of a quote's family"""
    with get_db_session() as db:
        result = quote_actions.get_quote_family(db, get_current_user_id(), quote_id)
        return respond(result)


@conversations_bp.route('/api/quotes/<quote_id>/revision-limit', methods=['GET'])
@login_required
def get_revision_limit(quote_id):
    """Whether the user's tier allows another revision of this quote"""
    user_id = get_current_user_id()
    with get_db_session() as db:
        tier = get_subscription_tier(db, user_id)
        result = quote_actions.check_revision_limit(db, user_id, quote_id, tier)
        return respond(result)


@conversations_bp.route('/api/quotes/<quote_id>/revisions', methods=['POST'])
@login_required
def create_revision(quote_id):
    """Create a revision of the quote"""
    data = request.get_json(silent=True) or {}
    is_valid, error = validate_required_fields(data, ['revision_notes'])
    if is_valid:
        is_valid, error = validate_string_fields(
            data, ['revision_notes', 'client_feedback', 'project_title', 'project_description']
        )
    if is_valid:
        is_valid, error = validate_line_items(data.get('line_items'))
    if not is_valid:
        return bad_request(error)

    user_id = get_current_user_id()
    with get_db_session() as db:
        tier = get_subscription_tier(db, user_id)
        result = quote_actions.create_revision(db, user_id, quote_id, data, tier)
        return respond(result, success_status=201)


@conversations_bp.route('/api/quotes/<quote_id>/versions', methods=['GET'])
@login_required
def get_versions(quote_id):
    """Root and every revision of the family, each with its line items"""
    with get_db_session() as db:
        result = quote_actions.get_version_history(db, get_current_user_id(), quote_id)
        return respond(result)


# ============================================================================
# EMAIL THREADS
# ============================================================================

@conversations_bp.route('/api/quotes/<quote_id>/thread', methods=['GET'])
@login_required
def get_thread(quote_id):
    """Latest prior email to ?to=<address> anywhere in the quote family"""
    recipient = request.args.get('to', '').strip()
    is_valid, error = validate_email(recipient)
    if not is_valid:
        return bad_request(error)

    with get_db_session() as db:
        result = quote_actions.find_thread(db, get_current_user_id(), quote_id, recipient)
        return respond(result)


@conversations_bp.route('/api/quotes/<quote_id>/emails', methods=['POST'])
@login_required
def record_email(quote_id):
    """Record an email that the mail provider has accepted"""
    data = request.get_json(silent=True) or {}
    is_valid, error = validate_required_fields(
        data, ['to', 'subject', 'body', 'provider_message_id']
    )
    if not is_valid:
        return bad_request(error)

    for is_valid, error in (
        validate_string_fields(data, [
            'subject', 'body', 'provider_message_id', 'provider_thread_id',
            'sent_at', 'root_quote_id',
        ]),
        validate_email(data['to']),
        validate_email_list(data.get('cc')),
        validate_email_list(data.get('bcc')),
        validate_attachments(data.get('attachments')),
        validate_revision_context(data.get('revision_context')),
    ):
        if not is_valid:
            return bad_request(error)

    try:
        sent_at = parse_sent_at(data.get('sent_at'))
    except (ValueError, OverflowError):
        return bad_request('Invalid sent_at timestamp')

    message = OutboundMessage(
        to=data['to'],
        subject=data['subject'],
        body=data['body'],
        provider_message_id=data['provider_message_id'],
        provider_thread_id=data.get('provider_thread_id'),
        cc=data.get('cc'),
        bcc=data.get('bcc'),
        attachments=data.get('attachments'),
        include_quote_pdf=bool(data.get('include_quote_pdf', False)),
        sent_at=sent_at,
    )

    revision_context = None
    if 'revision_context' in data:
        context = data.get('revision_context') or {}
        revision_context = RevisionContext(
            version_number=context.get('version_number'),
            revision_notes=context.get('revision_notes'),
            is_revision=bool(context.get('is_revision', False)),
        )

    with get_db_session() as db:
        result = quote_actions.record_sent(
            db, get_current_user_id(), quote_id, data.get('root_quote_id'),
            message, revision_context
        )
        return respond(result, success_status=201)


@conversations_bp.route('/api/quotes/<quote_id>/conversation', methods=['GET'])
@login_required
def get_conversation(quote_id):
    """Every message across the quote family, oldest first"""
    with get_db_session() as db:
        result = quote_actions.get_history(db, get_current_user_id(), quote_id)
        return respond(result)


@conversations_bp.route('/api/quotes/<quote_id>/revision-timeline', methods=['GET'])
@login_required
def get_revision_timeline(quote_id):
    """Family members that have been emailed, oldest first"""
    with get_db_session() as db:
        result = quote_actions.get_revision_timeline(db, get_current_user_id(), quote_id)
        return respond(result)
