"""Initial database schema

Revision ID: 001
Revises:
Create Date: 2026-10-19

Creates users, companies, quotes (with revision columns), quote services
and email threads.
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Users table
    op.create_table('users',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('display_name', sa.String(255)),
        sa.Column('subscription_tier', sa.String(20), nullable=False, server_default='free'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email')
    )
    op.create_index('ix_users_email', 'users', ['email'])

    # Companies table
    op.create_table('companies',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255)),
        sa.Column('currency', sa.String(3), server_default='USD'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_companies_user', 'companies', ['user_id'])

    # Quotes table
    op.create_table('quotes',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('company_id', sa.String(36), nullable=False),
        sa.Column('project_title', sa.String(255), nullable=False),
        sa.Column('project_description', sa.Text()),
        sa.Column('amount', sa.Float()),
        sa.Column('currency', sa.String(3), nullable=False, server_default='USD'),
        sa.Column('status', sa.String(50), nullable=False, server_default='draft'),
        sa.Column('client_name', sa.String(255)),
        sa.Column('client_email', sa.String(255)),
        sa.Column('sent_at', sa.DateTime()),
        sa.Column('parent_quote_id', sa.String(36)),
        sa.Column('revision_notes', sa.Text()),
        sa.Column('client_feedback', sa.Text()),
        sa.Column('version_number', sa.String(20), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['parent_quote_id'], ['quotes.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_quotes_user', 'quotes', ['user_id'])
    op.create_index('ix_quotes_company', 'quotes', ['company_id'])
    op.create_index('ix_quotes_parent', 'quotes', ['parent_quote_id'])
    op.create_index('ix_quotes_status', 'quotes', ['status'])

    # Quote services table
    op.create_table('quote_services',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('quote_id', sa.String(36), nullable=False),
        sa.Column('service_name', sa.String(255), nullable=False),
        sa.Column('quantity', sa.Float(), server_default='1'),
        sa.Column('unit_price', sa.Float()),
        sa.Column('total_price', sa.Float()),
        sa.Column('notes', sa.Text()),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['quote_id'], ['quotes.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )

    # Email threads table
    op.create_table('email_threads',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('company_id', sa.String(36), nullable=False),
        sa.Column('quote_id', sa.String(36), nullable=False),
        sa.Column('provider_message_id', sa.String(255), nullable=False),
        sa.Column('provider_thread_id', sa.String(255)),
        sa.Column('direction', sa.String(10), nullable=False, server_default='outbound'),
        sa.Column('from_email', sa.String(255)),
        sa.Column('to', sa.String(255), nullable=False),
        sa.Column('cc', sa.String(500)),
        sa.Column('bcc', sa.String(500)),
        sa.Column('subject', sa.String(500), nullable=False),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('attachments', sa.Text()),
        sa.Column('include_quote_pdf', sa.Boolean(), server_default=sa.false()),
        sa.Column('is_read', sa.Boolean(), server_default=sa.false()),
        sa.Column('email_type', sa.String(50)),
        sa.Column('sent_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['quote_id'], ['quotes.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_email_threads_user', 'email_threads', ['user_id'])
    op.create_index('ix_email_threads_quote', 'email_threads', ['quote_id'])
    op.create_index('ix_email_threads_to', 'email_threads', ['to'])
    op.create_index('ix_email_threads_sent_at', 'email_threads', ['sent_at'])


def downgrade() -> None:
    op.drop_table('email_threads')
    op.drop_table('quote_services')
    op.drop_table('quotes')
    op.drop_table('companies')
    op.drop_table('users')
