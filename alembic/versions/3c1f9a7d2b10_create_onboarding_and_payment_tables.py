"""Create onboarding and payment settlement tables

Revision ID: 3c1f9a7d2b10
Revises:
Create Date: 2026-10-19 09:12:40.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3c1f9a7d2b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'profiles',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='trainee'),
        sa.Column('full_name', sa.String(length=150), nullable=False, server_default=''),
        sa.Column('phone', sa.String(length=30), nullable=True),
        sa.Column('avatar_url', sa.String(length=500), nullable=True),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('gender', sa.String(length=20), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('onboarding_completed', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
    )
    op.create_index('ix_profiles_email', 'profiles', ['email'], unique=True)

    op.create_table(
        'programs',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='published'),
        sa.Column('application_fee', sa.Float(), nullable=False, server_default='0'),
        sa.Column('registration_fee', sa.Float(), nullable=False, server_default='0'),
        sa.Column('enrolled_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('max_capacity', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
    )

    op.create_table(
        'applications',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('trainee_id', sa.String(), sa.ForeignKey('profiles.id'), nullable=False),
        sa.Column('program_id', sa.String(), sa.ForeignKey('programs.id'), nullable=False),
        sa.Column(
            'status',
            sa.Enum('pending', 'approved', 'rejected', name='application_status', create_constraint=True),
            nullable=False,
            server_default='pending',
        ),
        sa.Column('application_fee_paid', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('registration_fee_paid', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('submitted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('submitted_at', sa.DateTime(), nullable=True),
        sa.Column('registration_number', sa.String(length=50), nullable=True, unique=True),
        sa.Column('admin_notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
    )
    op.create_index('ix_applications_trainee_id', 'applications', ['trainee_id'])
    op.create_index('ix_applications_program_id', 'applications', ['program_id'])
    op.create_index('ix_applications_created_at', 'applications', ['created_at'])

    op.create_table(
        'payments',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('application_id', sa.String(), sa.ForeignKey('applications.id'), nullable=False),
        sa.Column('trainee_id', sa.String(), sa.ForeignKey('profiles.id'), nullable=False),
        sa.Column('amount', sa.Float(), nullable=False),
        sa.Column('payment_type', sa.String(length=30), nullable=False),
        sa.Column('provider', sa.String(length=20), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('provider_reference', sa.String(), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
    )
    op.create_index('ix_payments_application_id', 'payments', ['application_id'])
    op.create_index('ix_payments_trainee_id', 'payments', ['trainee_id'])
    op.create_index('ix_payments_provider_reference', 'payments', ['provider_reference'])

    op.create_table(
        'receipts',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('payment_id', sa.String(), sa.ForeignKey('payments.id'), nullable=False, unique=True),
        sa.Column('trainee_id', sa.String(), sa.ForeignKey('profiles.id'), nullable=False),
        sa.Column('receipt_number', sa.String(length=50), nullable=False, unique=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
    )
    op.create_index('ix_receipts_trainee_id', 'receipts', ['trainee_id'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('type', sa.String(length=50), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('read', sa.Boolean(), nullable=True, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])

    op.create_table(
        'email_templates',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('template_key', sa.String(length=100), nullable=False),
        sa.Column('template_name', sa.String(length=200), nullable=False),
        sa.Column('subject_template', sa.String(length=500), nullable=False),
        sa.Column('html_template', sa.Text(), nullable=False),
        sa.Column('is_enabled', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
    )
    op.create_index('ix_email_templates_template_key', 'email_templates', ['template_key'], unique=True)

    op.create_table(
        'receipt_template',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('organization_name', sa.String(length=200), nullable=False, server_default='Training Center'),
        sa.Column('send_email_on_verification', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('email_subject_template', sa.String(length=500), nullable=False, server_default='Payment Receipt - {{payment_type}}'),
        sa.Column('email_body_template', sa.Text(), nullable=False, server_default=''),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
    )

    op.create_table(
        'site_config',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('site_name', sa.String(length=200), nullable=False, server_default='Training Center'),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
    )


def downgrade() -> None:
    op.drop_table('site_config')
    op.drop_table('receipt_template')
    op.drop_index('ix_email_templates_template_key', table_name='email_templates')
    op.drop_table('email_templates')
    op.drop_index('ix_notifications_user_id', table_name='notifications')
    op.drop_table('notifications')
    op.drop_index('ix_receipts_trainee_id', table_name='receipts')
    op.drop_table('receipts')
    op.drop_index('ix_payments_provider_reference', table_name='payments')
    op.drop_index('ix_payments_trainee_id', table_name='payments')
    op.drop_index('ix_payments_application_id', table_name='payments')
    op.drop_table('payments')
    op.drop_index('ix_applications_created_at', table_name='applications')
    op.drop_index('ix_applications_program_id', table_name='applications')
    op.drop_index('ix_applications_trainee_id', table_name='applications')
    op.drop_table('applications')
    sa.Enum(name='application_status').drop(op.get_bind(), checkfirst=True)
    op.drop_table('programs')
    op.drop_index('ix_profiles_email', table_name='profiles')
    op.drop_table('profiles')
