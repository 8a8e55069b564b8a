"""Initial portal schema

Revision ID: 001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    ]


def upgrade():
    op.create_table(
        'citizens',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('national_id', sa.String(16), nullable=False),
        sa.Column('full_name', sa.String(), nullable=False),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('address', sa.String(), nullable=True),
        sa.Column('phone_number', sa.String(), nullable=True),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('photo_url', sa.String(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_citizens_id', 'citizens', ['id'])
    op.create_index('ix_citizens_national_id', 'citizens', ['national_id'], unique=True)
    op.create_index('ix_citizens_email', 'citizens', ['email'])

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('full_name', sa.String(), nullable=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('national_id', sa.String(16), nullable=True),
        sa.Column('phone_number', sa.String(), nullable=True),
        sa.Column('hashed_password', sa.String(), nullable=False),
        sa.Column('role', sa.String(20), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('failed_login_attempts', sa.Integer(), nullable=False),
        sa.Column('locked_until', sa.DateTime(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_national_id', 'users', ['national_id'])
    op.create_index('ix_users_phone_number', 'users', ['phone_number'])

    op.create_table(
        'license_applications',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('citizen_id', sa.Integer(), sa.ForeignKey('citizens.id'), nullable=False),
        sa.Column('license_type', sa.String(50), nullable=True),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('personal_info', sa.JSON(), nullable=True),
        sa.Column('documents', sa.JSON(), nullable=True),
        sa.Column('photos', sa.JSON(), nullable=True),
        sa.Column('emergency_contact', sa.JSON(), nullable=True),
        sa.Column('review_notes', sa.Text(), nullable=True),
        sa.Column('submitted_at', sa.DateTime(), nullable=True),
        sa.Column('approved_at', sa.DateTime(), nullable=True),
        sa.Column('rejected_at', sa.DateTime(), nullable=True),
        sa.Column('picked_up', sa.Boolean(), nullable=False),
        sa.Column('pickup_time', sa.DateTime(), nullable=True),
        sa.Column('license_number', sa.String(64), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_license_applications_id', 'license_applications', ['id'])
    op.create_index('ix_license_applications_citizen_id', 'license_applications', ['citizen_id'])
    op.create_index('ix_license_applications_status', 'license_applications', ['status'])
    op.create_index('ix_license_applications_license_number', 'license_applications', ['license_number'])

    op.create_table(
        'payments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('application_id', sa.String(64), sa.ForeignKey('license_applications.id'), nullable=False),
        sa.Column('payment_info', sa.JSON(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('transaction_id', sa.String(64), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False),
        sa.Column('method', sa.String(20), nullable=False),
        sa.Column('processing_fee', sa.Integer(), nullable=False),
        sa.Column('provider', sa.String(), nullable=True),
        sa.Column('provider_transaction_id', sa.String(64), nullable=True),
        sa.Column('payment_date', sa.DateTime(), nullable=True),
        sa.Column('due_date', sa.DateTime(), nullable=True),
        sa.Column('failure_reason', sa.Text(), nullable=True),
        sa.Column('receipt_url', sa.String(), nullable=True),
        sa.Column('refund_amount', sa.Integer(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_payments_id', 'payments', ['id'])
    op.create_index('ix_payments_application_id', 'payments', ['application_id'])
    op.create_index('ix_payments_transaction_id', 'payments', ['transaction_id'], unique=True)

    op.create_table(
        'qr_codes',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('application_id', sa.String(64), sa.ForeignKey('license_applications.id'), nullable=False),
        sa.Column('license_number', sa.String(64), nullable=False),
        sa.Column('qr_code_data', sa.JSON(), nullable=False),
        sa.Column('qr_code_image', sa.Text(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_qr_codes_id', 'qr_codes', ['id'])
    op.create_index('ix_qr_codes_application_id', 'qr_codes', ['application_id'], unique=True)
    op.create_index('ix_qr_codes_license_number', 'qr_codes', ['license_number'])

    op.create_table(
        'admin_actions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('admin_id', sa.Integer(), nullable=True),
        sa.Column('action_type', sa.String(20), nullable=False),
        sa.Column('application_id', sa.String(64), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_admin_actions_id', 'admin_actions', ['id'])
    op.create_index('ix_admin_actions_application_id', 'admin_actions', ['application_id'])

    op.create_table(
        'auth_sessions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('citizen_id', sa.Integer(), sa.ForeignKey('citizens.id'), nullable=False),
        sa.Column('transaction_id', sa.String(64), nullable=False),
        sa.Column('otp_code', sa.String(6), nullable=False),
        sa.Column('otp_expires_at', sa.DateTime(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('attempts', sa.Integer(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_auth_sessions_id', 'auth_sessions', ['id'])
    op.create_index('ix_auth_sessions_citizen_id', 'auth_sessions', ['citizen_id'])
    op.create_index('ix_auth_sessions_transaction_id', 'auth_sessions', ['transaction_id'], unique=True)

    op.create_table(
        'user_permissions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('citizen_id', sa.Integer(), sa.ForeignKey('citizens.id'), nullable=False),
        sa.Column('national_id', sa.String(16), nullable=True),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('email_permission', sa.Boolean(), nullable=False),
        sa.Column('birthdate_permission', sa.Boolean(), nullable=False),
        sa.Column('gender_permission', sa.Boolean(), nullable=False),
        sa.Column('name_permission', sa.Boolean(), nullable=False),
        sa.Column('phone_number_permission', sa.Boolean(), nullable=False),
        sa.Column('picture_permission', sa.Boolean(), nullable=False),
        sa.Column('is_verified', sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_user_permissions_id', 'user_permissions', ['id'])
    op.create_index('ix_user_permissions_citizen_id', 'user_permissions', ['citizen_id'], unique=True)
    op.create_index('ix_user_permissions_national_id', 'user_permissions', ['national_id'])
    op.create_index('ix_user_permissions_email', 'user_permissions', ['email'])


def downgrade():
    op.drop_table('user_permissions')
    op.drop_table('auth_sessions')
    op.drop_table('admin_actions')
    op.drop_table('qr_codes')
    op.drop_table('payments')
    op.drop_table('license_applications')
    op.drop_table('users')
    op.drop_table('citizens')
