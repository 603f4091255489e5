# alembic/versions/001_initial_migration.py
"""Initial migration: client profiles and audit logs

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Sensitive columns are TEXT: encoded values outgrow the plaintext
    op.create_table(
        'client_profiles',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('user_email', sa.String(255), unique=True, nullable=False, index=True),
        sa.Column('first_name', sa.String(100)),
        sa.Column('last_name', sa.String(100)),
        sa.Column('ssn', sa.Text),
        sa.Column('address_street', sa.Text),
        sa.Column('bank_routing_number', sa.Text),
        sa.Column('bank_account_number', sa.Text),
        sa.Column('turbotax_email', sa.Text),
        sa.Column('turbotax_password', sa.Text),
        sa.Column('irs_username', sa.Text),
        sa.Column('irs_password', sa.Text),
        sa.Column('state_username', sa.Text),
        sa.Column('state_password', sa.Text),
        sa.Column('address_city', sa.String(100)),
        sa.Column('address_state', sa.String(50)),
        sa.Column('address_zip', sa.String(20)),
        sa.Column('created_at', sa.DateTime, nullable=False),
        sa.Column('updated_at', sa.DateTime, nullable=False),
    )

    op.create_table(
        'audit_logs',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', sa.String(100), index=True),
        sa.Column('action', sa.String(100), nullable=False, index=True),
        sa.Column('resource_type', sa.String(50)),
        sa.Column('resource_id', sa.String(100)),
        sa.Column('ip_address', sa.String(45)),
        sa.Column('user_agent', sa.Text),
        sa.Column('details', postgresql.JSON, server_default=sa.text("'{}'::json")),
        sa.Column('created_at', sa.DateTime, nullable=False),
        sa.Column('updated_at', sa.DateTime, nullable=False),
    )
    op.create_index('ix_audit_logs_resource', 'audit_logs', ['resource_type', 'resource_id'])


def downgrade() -> None:
    op.drop_index('ix_audit_logs_resource', table_name='audit_logs')
    op.drop_table('audit_logs')
    op.drop_table('client_profiles')
