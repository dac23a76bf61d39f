"""create_export_tables

Revision ID: 3f9c2a7d41b0
Revises:
Create Date: 2026-10-19 09:12:44.118203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9c2a7d41b0'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'forms',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False),
        sa.Column('enable_status_updates', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'form_versions',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('form_id', sa.String(length=36), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('schema', sa.JSON(), nullable=False),
        sa.Column('published', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['form_id'], ['forms.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('form_id', 'version', name='uq_form_versions_form_version'),
    )
    op.create_index('ix_form_versions_form_id', 'form_versions', ['form_id'])

    op.create_table(
        'submissions',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('form_id', sa.String(length=36), nullable=False),
        sa.Column('form_version_id', sa.String(length=36), nullable=False),
        sa.Column('confirmation_id', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('created_by', sa.String(), nullable=True),
        sa.Column('full_name', sa.String(), nullable=True),
        sa.Column('username', sa.String(), nullable=True),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('status', sa.String(), nullable=True),
        sa.Column('assignee', sa.String(), nullable=True),
        sa.Column('assignee_email', sa.String(), nullable=True),
        sa.Column('deleted', sa.Boolean(), nullable=False),
        sa.Column('draft', sa.Boolean(), nullable=False),
        sa.Column('submission', sa.JSON(), nullable=False),
        sa.ForeignKeyConstraint(['form_id'], ['forms.id']),
        sa.ForeignKeyConstraint(['form_version_id'], ['form_versions.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_submissions_form_created', 'submissions', ['form_id', 'created_at'])

    op.create_table(
        'file_storage',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('original_name', sa.String(), nullable=False),
        sa.Column('mime_type', sa.String(), nullable=False),
        sa.Column('size', sa.Integer(), nullable=False),
        sa.Column('storage', sa.String(), nullable=False),
        sa.Column('path', sa.String(), nullable=False),
        sa.Column('created_by', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_by', sa.String(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'file_storage_reservations',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('file_id', sa.String(length=36), nullable=True),
        sa.Column('ready', sa.Boolean(), nullable=False),
        sa.Column(
            'status',
            sa.Enum('PENDING', 'READY', 'FAILED', name='reservationstatus'),
            nullable=False,
        ),
        sa.Column('error', sa.Text(), nullable=True),
        sa.Column('created_by', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_by', sa.String(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('version_id', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_reservations_file', 'file_storage_reservations', ['file_id'])
    op.create_index('idx_reservations_created_by', 'file_storage_reservations', ['created_by'])

    op.create_table(
        'submissions_exports',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('form_id', sa.String(length=36), nullable=False),
        sa.Column('form_version_id', sa.String(length=36), nullable=False),
        sa.Column('reservation_id', sa.String(length=36), nullable=False),
        sa.Column('created_by', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_by', sa.String(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['form_id'], ['forms.id']),
        sa.ForeignKeyConstraint(['form_version_id'], ['form_versions.id']),
        sa.ForeignKeyConstraint(['reservation_id'], ['file_storage_reservations.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('form_id', 'form_version_id', name='uq_submissions_exports_form_version'),
    )
    op.create_index('ix_submissions_exports_reservation_id', 'submissions_exports', ['reservation_id'])


def downgrade() -> None:
    op.drop_index('ix_submissions_exports_reservation_id', table_name='submissions_exports')
    op.drop_table('submissions_exports')
    op.drop_index('idx_reservations_created_by', table_name='file_storage_reservations')
    op.drop_index('idx_reservations_file', table_name='file_storage_reservations')
    op.drop_table('file_storage_reservations')
    op.drop_table('file_storage')
    op.drop_index('idx_submissions_form_created', table_name='submissions')
    op.drop_table('submissions')
    op.drop_index('ix_form_versions_form_id', table_name='form_versions')
    op.drop_table('form_versions')
    op.drop_table('forms')
