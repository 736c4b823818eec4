"""
Session-based access helpers for the API routes.

Login itself (OAuth, passwords, cookies) lives outside this service; the
session only needs to carry the authenticated user's id.
"""
from functools import wraps
from flask import session, jsonify

from database.models import User


def get_current_user_id():
    """Id of the logged in user, or None"""
    return session.get('user_id')


def is_authenticated():
    """Check if user is logged in"""
    return 'user_id' in session


def get_subscription_tier(db_session, user_id):
    """Tier of the user as stored in the database; unknown users are free"""
    user = db_session.query(User).filter(User.id == user_id).first()
    return user.subscription_tier if user else 'free'


def login_required(f):
    """Decorator to require login for an API route"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not is_authenticated():
            return jsonify({'success': False, 'error': 'Authentication required'}), 401
        return f(*args, **kwargs)
    return decorated_function
