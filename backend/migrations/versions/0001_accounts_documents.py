"""accounts and documents tables

Revision ID: 0001_accounts_documents
Revises: 
Create Date: 2026-10-19
"""
from __future__ import annotations
from alembic import op
import sqlalchemy as sa

revision = '0001_accounts_documents'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('accounts',
        sa.Column('uid', sa.String(length=64), primary_key=True),
        sa.Column('email', sa.String(length=128), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=True, server_default=sa.text('1')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'))
    )
    op.create_index('ix_accounts_email', 'accounts', ['email'], unique=True)

    # One row per store document; collections are read through the parent index
    op.create_table('documents',
        sa.Column('path', sa.String(length=255), primary_key=True),
        sa.Column('parent', sa.String(length=255), nullable=False),
        sa.Column('key', sa.String(length=128), nullable=False),
        sa.Column('data', sa.JSON(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'))
    )
    op.create_index('ix_documents_parent', 'documents', ['parent'])


def downgrade():
    op.drop_index('ix_documents_parent', table_name='documents')
    op.drop_table('documents')
    op.drop_index('ix_accounts_email', table_name='accounts')
    op.drop_table('accounts')
