"""
Pytest configuration and shared fixtures
"""
import os
import sys
import pytest
from datetime import datetime, timedelta
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

os.environ.setdefault('FLASK_ENV', 'testing')

from database.connection import configure_engine, get_session_factory, init_db, reset_engine  # noqa: E402
from database.models import Company, EmailThread, Quote, User  # noqa: E402

BASE_TIME = datetime(2025, 3, 1, 9, 0, 0)


@pytest.fixture
def app_config():
    """Fixture providing test configuration"""
    from config import TestingConfig
    return TestingConfig


@pytest.fixture
def db_session():
    """A session bound to a fresh in-memory SQLite database"""
    configure_engine('sqlite://')
    init_db()
    session = get_session_factory()()
    yield session
    session.close()
    reset_engine()


@pytest.fixture
def user(db_session):
    user = User(email='owner@quotes.test', display_name='Owner', subscription_tier='free')
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def other_user(db_session):
    user = User(email='intruder@quotes.test', display_name='Intruder', subscription_tier='pro')
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def company(db_session, user):
    company = Company(user_id=user.id, name='Acme Studio', email='hello@acme.test')
    db_session.add(company)
    db_session.commit()
    return company


@pytest.fixture
def make_quote(db_session, user, company):
    """Factory for quotes with strictly increasing creation times"""
    counter = {'n': 0}

    def _make_quote(parent=None, owner=None, version_number=None, **fields):
        counter['n'] += 1
        quote = Quote(
            user_id=(owner or user).id,
            company_id=company.id,
            project_title=fields.pop('project_title', f"Website rebuild #{counter['n']}"),
            client_email=fields.pop('client_email', 'client@x.com'),
            parent_quote_id=parent.id if parent is not None else None,
            version_number=version_number or str(counter['n']),
            status=fields.pop('status', 'draft'),
            created_at=BASE_TIME + timedelta(minutes=counter['n']),
            **fields
        )
        db_session.add(quote)
        db_session.commit()
        return quote

    return _make_quote


@pytest.fixture
def make_message(db_session, user, company):
    """Factory for stored email thread rows"""
    counter = {'n': 0}

    def _make_message(quote, to='client@x.com', sent_at=None, owner=None, **fields):
        counter['n'] += 1
        message = EmailThread(
            user_id=(owner or user).id,
            company_id=company.id,
            quote_id=quote.id,
            provider_message_id=fields.pop('provider_message_id', f"msg-{counter['n']}"),
            provider_thread_id=fields.pop('provider_thread_id', f"thread-{counter['n']}"),
            direction=fields.pop('direction', 'outbound'),
            to=to,
            subject=fields.pop('subject', f"Quote update {counter['n']}"),
            body=fields.pop('body', 'Please find the quote attached.'),
            email_type=fields.pop('email_type', 'quote_sent'),
            sent_at=sent_at or BASE_TIME + timedelta(hours=counter['n']),
            **fields
        )
        db_session.add(message)
        db_session.commit()
        return message

    return _make_message


@pytest.fixture
def quote_family(make_quote):
    """Root Q1 with two revisions Q2 and Q3, both parented on Q1"""
    q1 = make_quote()
    q2 = make_quote(parent=q1)
    q3 = make_quote(parent=q1)
    return q1, q2, q3


@pytest.fixture
def app():
    """Flask app on an in-memory database"""
    from app_init import create_app
    from config import TestingConfig

    flask_app = create_app(TestingConfig)
    yield flask_app
    reset_engine()


@pytest.fixture
def seeded(app):
    """Owner, stranger, company and a three-quote family committed through the app's engine"""
    from database.connection import get_db_session

    with get_db_session() as db:
        owner = User(email='owner@quotes.test', subscription_tier='free')
        stranger = User(email='stranger@quotes.test', subscription_tier='pro')
        db.add_all([owner, stranger])
        db.flush()
        company = Company(user_id=owner.id, name='Acme Studio')
        db.add(company)
        db.flush()
        root = Quote(user_id=owner.id, company_id=company.id, project_title='Brand refresh',
                     version_number='1', created_at=BASE_TIME)
        db.add(root)
        db.flush()
        revision = Quote(user_id=owner.id, company_id=company.id, project_title='Brand refresh',
                         parent_quote_id=root.id, version_number='2', status='revised',
                         created_at=BASE_TIME + timedelta(days=1))
        db.add(revision)
        db.flush()
        ids = {
            'owner': owner.id,
            'stranger': stranger.id,
            'company': company.id,
            'root': root.id,
            'revision': revision.id,
        }
    return ids


def login(client, user_id):
    with client.session_transaction() as sess:
        sess['user_id'] = user_id


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def owner_client(client, seeded):
    login(client, seeded['owner'])
    return client
