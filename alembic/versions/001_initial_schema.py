"""contacts_preferences_submissions

Revision ID: 001
Revises: 
Create Date: 2026-10-18 09:30:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # Contacts: one row per person, matched by email OR phone
    op.create_table(
        'contacts',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('email', sa.String(320), nullable=True),
        sa.Column('phone_e164', sa.String(16), nullable=True),
        sa.Column('first_name', sa.String(255), nullable=True),
        sa.Column('last_name', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
        sa.UniqueConstraint('phone_e164'),
    )
    op.create_index(op.f('ix_contacts_id'), 'contacts', ['id'], unique=False)
    op.create_index(op.f('ix_contacts_email'), 'contacts', ['email'], unique=False)
    op.create_index(op.f('ix_contacts_phone_e164'), 'contacts', ['phone_e164'], unique=False)

    # Preferences: exactly one row per contact
    op.create_table(
        'preferences',
        sa.Column('contact_id', sa.String(), nullable=False),
        sa.Column('thrive_invites', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('friday_reminders', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('updates', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('real_insights', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('frequency', sa.String(20), nullable=False, server_default='invites_only'),
        sa.Column('channels', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint(
            "frequency IN ('invites_only', 'monthly', 'weekly')", name='ck_preferences_frequency'
        ),
        sa.ForeignKeyConstraint(['contact_id'], ['contacts.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('contact_id'),
    )
    op.create_index(op.f('ix_preferences_contact_id'), 'preferences', ['contact_id'], unique=False)

    # Submissions: append-only audit log
    op.create_table(
        'submissions',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('contact_id', sa.String(), nullable=False),
        sa.Column('source', sa.String(255), nullable=False, server_default='web'),
        sa.Column('ip', sa.String(64), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=False, server_default=''),
        sa.Column('payload', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['contact_id'], ['contacts.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_submissions_id'), 'submissions', ['id'], unique=False)
    op.create_index(op.f('ix_submissions_contact_id'), 'submissions', ['contact_id'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f('ix_submissions_contact_id'), table_name='submissions')
    op.drop_index(op.f('ix_submissions_id'), table_name='submissions')
    op.drop_table('submissions')
    op.drop_index(op.f('ix_preferences_contact_id'), table_name='preferences')
    op.drop_table('preferences')
    op.drop_index(op.f('ix_contacts_phone_e164'), table_name='contacts')
    op.drop_index(op.f('ix_contacts_email'), table_name='contacts')
    op.drop_index(op.f('ix_contacts_id'), table_name='contacts')
    op.drop_table('contacts')
