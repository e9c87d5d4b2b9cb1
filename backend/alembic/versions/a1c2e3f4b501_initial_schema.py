"""initial gymdesk schema

Revision ID: a1c2e3f4b501
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'a1c2e3f4b501'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps(updated: bool = True) -> list:
    cols = [sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False)]
    if updated:
        cols.append(sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False))
    return cols


def upgrade() -> None:
    op.create_table(
        'tenants',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('slug', sa.String(100), nullable=False),
        sa.Column('category', sa.Enum('GYM', 'COFFEE', 'ECOMMERCE', 'OTHER', name='business_category'), nullable=False),
        sa.Column('email', sa.String(255), nullable=True, comment='Owner contact address'),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('welcome_email_enabled', sa.Boolean(), nullable=False, comment='Send welcome email to new members'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_tenants_slug', 'tenants', ['slug'], unique=True)

    op.create_table(
        'branches',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('address', sa.String(500), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_branches_tenant_id', 'branches', ['tenant_id'])

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=True, comment='NULL for super admins'),
        sa.Column('branch_id', sa.Integer(), nullable=True, comment='Home branch (members)'),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('password_hash', sa.String(255), nullable=True, comment='NULL for members without a login'),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('phone_number', sa.String(50), nullable=True),
        sa.Column('role', sa.Enum('SUPER_ADMIN', 'OWNER', 'MANAGER', 'STAFF', 'GYM_MEMBER', name='user_role'),
                  nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('deleted_at', sa.DateTime(), nullable=True, comment='Soft delete timestamp'),
        sa.Column('deleted_by', sa.Integer(), nullable=True),
        sa.Column('deletion_reason', sa.String(255), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['branch_id'], ['branches.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_tenant_id', 'users', ['tenant_id'])
    op.create_index('ix_users_branch_id', 'users', ['branch_id'])
    op.create_index('ix_users_email', 'users', ['email'])

    op.create_table(
        'user_branches',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('branch_id', sa.Integer(), nullable=False),
        sa.Column('access_level', sa.Enum('FULL_ACCESS', 'MANAGER_ACCESS', 'STAFF_ACCESS', 'READ_ONLY',
                                          name='branch_access_level'), nullable=False),
        sa.Column('is_primary', sa.Boolean(), nullable=False),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['branch_id'], ['branches.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'branch_id', name='uq_user_branch'),
    )
    op.create_index('ix_user_branches_user_id', 'user_branches', ['user_id'])
    op.create_index('ix_user_branches_branch_id', 'user_branches', ['branch_id'])

    op.create_table(
        'membership_plans',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price', sa.Integer(), nullable=False, comment='Price in whole currency units'),
        sa.Column('duration', sa.Integer(), nullable=False, comment='Length in days'),
        sa.Column('plan_type', sa.String(50), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_membership_plans_tenant_id', 'membership_plans', ['tenant_id'])

    op.create_table(
        'customer_subscriptions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('branch_id', sa.Integer(), nullable=True),
        sa.Column('customer_id', sa.Integer(), nullable=False),
        sa.Column('membership_plan_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.Enum('ACTIVE', 'EXPIRED', 'CANCELLED', name='subscription_status'), nullable=False),
        sa.Column('start_date', sa.DateTime(), nullable=False),
        sa.Column('end_date', sa.DateTime(), nullable=False),
        sa.Column('price', sa.Integer(), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False),
        sa.Column('auto_renew', sa.Boolean(), nullable=False),
        sa.Column('cancelled_at', sa.DateTime(), nullable=True),
        sa.Column('cancellation_reason', sa.String(255), nullable=True),
        sa.Column('cancellation_notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['branch_id'], ['branches.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['customer_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['membership_plan_id'], ['membership_plans.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_customer_subscriptions_tenant_id', 'customer_subscriptions', ['tenant_id'])
    op.create_index('ix_customer_subscriptions_branch_id', 'customer_subscriptions', ['branch_id'])
    op.create_index('ix_customer_subscriptions_customer_id', 'customer_subscriptions', ['customer_id'])
    op.create_index('ix_customer_subscriptions_customer_created', 'customer_subscriptions',
                    ['customer_id', 'created_at'])
    op.create_index('ix_customer_subscriptions_status_end', 'customer_subscriptions', ['status', 'end_date'])

    op.create_table(
        'member_audit_logs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('member_id', sa.Integer(), nullable=False),
        sa.Column('action', sa.String(50), nullable=False),
        sa.Column('reason', sa.String(255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('previous_state', sa.String(30), nullable=True),
        sa.Column('new_state', sa.String(30), nullable=True),
        sa.Column('performed_by', sa.Integer(), nullable=True),
        sa.Column('details', sa.JSON(), nullable=True),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(['member_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['performed_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_member_audit_logs_member_id', 'member_audit_logs', ['member_id'])
    op.create_index('ix_member_audit_logs_action', 'member_audit_logs', ['action'])
    op.create_index('ix_member_audit_logs_created_at', 'member_audit_logs', ['created_at'])

    op.create_table(
        'terminals',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('branch_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('secret_hash', sa.String(255), nullable=False, comment='bcrypt hash of the terminal secret'),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('last_seen_at', sa.DateTime(), nullable=True),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(['branch_id'], ['branches.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_terminals_branch_id', 'terminals', ['branch_id'])

    op.create_table(
        'inventory_cards',
        sa.Column('uid', sa.String(64), nullable=False),
        sa.Column('allocated_branch_id', sa.Integer(), nullable=True),
        sa.Column('status', sa.Enum('AVAILABLE', 'ASSIGNED', 'DISABLED', name='inventory_card_status'), nullable=False),
        sa.Column('batch_id', sa.String(100), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['allocated_branch_id'], ['branches.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('uid'),
    )
    op.create_index('ix_inventory_cards_allocated_branch_id', 'inventory_cards', ['allocated_branch_id'])

    op.create_table(
        'cards',
        sa.Column('uid', sa.String(64), nullable=False),
        sa.Column('branch_id', sa.Integer(), nullable=False),
        sa.Column('member_id', sa.Integer(), nullable=True),
        sa.Column('card_type', sa.Enum('MONTHLY', 'DAILY', name='card_type'), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['branch_id'], ['branches.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['member_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('uid'),
    )
    op.create_index('ix_cards_branch_id', 'cards', ['branch_id'])
    op.create_index('ix_cards_member_id', 'cards', ['member_id'])

    op.create_table(
        'pending_member_assignments',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('branch_id', sa.Integer(), nullable=False),
        sa.Column('member_id', sa.Integer(), nullable=False),
        sa.Column('purpose', sa.Enum('ONBOARD', 'REPLACE', name='assignment_purpose'), nullable=False),
        sa.Column('old_card_uid', sa.String(64), nullable=True),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('created_by', sa.Integer(), nullable=True),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(['branch_id'], ['branches.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['member_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['created_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('branch_id'),
    )

    op.create_table(
        'access_events',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('branch_id', sa.Integer(), nullable=False),
        sa.Column('terminal_id', sa.Integer(), nullable=True),
        sa.Column('event_type', sa.String(50), nullable=False),
        sa.Column('card_uid', sa.String(64), nullable=True),
        sa.Column('member_id', sa.Integer(), nullable=True),
        sa.Column('actor_user_id', sa.Integer(), nullable=True),
        sa.Column('details', sa.JSON(), nullable=True),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(['branch_id'], ['branches.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['terminal_id'], ['terminals.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['member_id'], ['users.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['actor_user_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_access_events_branch_id', 'access_events', ['branch_id'])
    op.create_index('ix_access_events_terminal_id', 'access_events', ['terminal_id'])
    op.create_index('ix_access_events_event_type', 'access_events', ['event_type'])
    op.create_index('ix_access_events_member_id', 'access_events', ['member_id'])
    op.create_index('ix_access_events_created_at', 'access_events', ['created_at'])

    op.create_table(
        'email_logs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=True),
        sa.Column('recipient_email', sa.String(255), nullable=False),
        sa.Column('email_type', sa.String(50), nullable=False),
        sa.Column('subscription_id', sa.Integer(), nullable=True),
        sa.Column('status', sa.Enum('SENT', 'FAILED', name='email_status'), nullable=False),
        sa.Column('provider_message_id', sa.String(255), nullable=True),
        sa.Column('error_message', sa.Text(), nullable=True),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['subscription_id'], ['customer_subscriptions.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_email_logs_tenant_id', 'email_logs', ['tenant_id'])
    op.create_index('ix_email_logs_email_type', 'email_logs', ['email_type'])
    op.create_index('ix_email_logs_subscription_id', 'email_logs', ['subscription_id'])
    op.create_index('ix_email_logs_created_at', 'email_logs', ['created_at'])

    op.create_table(
        'system_settings',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('site_name', sa.String(255), nullable=False),
        sa.Column('site_url', sa.String(500), nullable=False),
        sa.Column('from_email', sa.String(255), nullable=False),
        sa.Column('resend_api_key_enc', sa.Text(), nullable=True, comment='Resend API key (encrypted)'),
        sa.Column('expiry_reminder_days', sa.Integer(), nullable=False, comment='Expiring-soon reminder window'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )


def downgrade() -> None:
    for table in (
        'system_settings',
        'email_logs',
        'access_events',
        'pending_member_assignments',
        'cards',
        'inventory_cards',
        'terminals',
        'member_audit_logs',
        'customer_subscriptions',
        'membership_plans',
        'user_branches',
        'users',
        'branches',
        'tenants',
    ):
        op.drop_table(table)
