"""Initial schema: users, donors, donations, payments and report lookups

Revision ID: 001
Revises:
Create Date: 2025-01-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column('created', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(), onupdate=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('email', sa.String(255), unique=True, nullable=False, index=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('is_admin', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('settings', sa.JSON(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'donors',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('title', sa.String(50), nullable=True),
        sa.Column('first_name', sa.String(100), nullable=True),
        sa.Column('last_name', sa.String(100), nullable=True),
        sa.Column('is_anash', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_alumni', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_other_connection', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true(), index=True),
        sa.Column('fundraiser_id', sa.String(15), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True, index=True),
        *_timestamps(),
    )

    op.create_table(
        'campaigns',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('target_amount', sa.Numeric(15, 2), nullable=True),
        sa.Column('currency', sa.String(10), nullable=False, server_default='ILS'),
        sa.Column('invited_donor_ids', sa.JSON(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true(), index=True),
        *_timestamps(),
    )

    op.create_table(
        'donation_methods',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('type', sa.Enum('cash', 'check', 'credit_card', 'bank_transfer', 'standing_order', 'other', name='donationmethodtype', create_constraint=True), nullable=False, server_default='cash'),
        sa.Column('standing_order_kind', sa.Enum('bank', 'credit_card', 'organization', name='standingorderkind', create_constraint=True), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true(), index=True),
        *_timestamps(),
    )

    op.create_table(
        'donations',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('donor_id', sa.String(15), sa.ForeignKey('donors.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('campaign_id', sa.String(15), sa.ForeignKey('campaigns.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('donation_method_id', sa.String(15), sa.ForeignKey('donation_methods.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('amount', sa.Numeric(15, 2), nullable=False),
        sa.Column('currency', sa.String(30), nullable=False, server_default='ILS'),
        sa.Column('donation_date', sa.Date(), nullable=False, index=True),
        sa.Column('donation_type', sa.Enum('one_time', 'commitment', name='donationtype', create_constraint=True), nullable=False, server_default='one_time', index=True),
        sa.Column('frequency', sa.Enum('weekly', 'monthly', 'quarterly', 'yearly', name='paymentfrequency', create_constraint=True), nullable=True),
        sa.Column('number_of_payments', sa.Integer(), nullable=True),
        sa.Column('unlimited_payments', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('partner_ids', sa.JSON(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'payments',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('donation_id', sa.String(15), sa.ForeignKey('donations.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('amount', sa.Numeric(15, 2), nullable=False),
        sa.Column('currency', sa.String(30), nullable=True),
        sa.Column('payment_date', sa.Date(), nullable=False),
        sa.Column('type', sa.String(100), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='completed'),
        sa.Column('reference', sa.String(100), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true(), index=True),
        *_timestamps(),
    )

    op.create_table(
        'countries',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('code', sa.String(5), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'places',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('country_id', sa.String(15), sa.ForeignKey('countries.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('city', sa.String(100), nullable=True, index=True),
        sa.Column('neighborhood', sa.String(100), nullable=True, index=True),
        sa.Column('street', sa.String(200), nullable=True),
        sa.Column('house_number', sa.String(20), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'donor_places',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('donor_id', sa.String(15), sa.ForeignKey('donors.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('place_id', sa.String(15), sa.ForeignKey('places.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('address_type', sa.String(50), nullable=True),
        sa.Column('is_primary', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true(), index=True),
        *_timestamps(),
    )

    op.create_table(
        'donor_contacts',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('donor_id', sa.String(15), sa.ForeignKey('donors.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('type', sa.Enum('phone', 'email', name='contacttype', create_constraint=True), nullable=False),
        sa.Column('phone_number', sa.String(50), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('is_primary', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true(), index=True),
        *_timestamps(),
    )

    op.create_table(
        'target_audiences',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('donor_ids', sa.JSON(), nullable=True),
        *_timestamps(),
    )


def downgrade() -> None:
    op.drop_table('target_audiences')
    op.drop_table('donor_contacts')
    op.drop_table('donor_places')
    op.drop_table('places')
    op.drop_table('countries')
    op.drop_table('payments')
    op.drop_table('donations')
    op.drop_table('donation_methods')
    op.drop_table('campaigns')
    op.drop_table('donors')
    op.drop_table('users')
    # Drop enum types
    op.execute('DROP TYPE IF EXISTS contacttype')
    op.execute('DROP TYPE IF EXISTS paymentfrequency')
    op.execute('DROP TYPE IF EXISTS donationtype')
    op.execute('DROP TYPE IF EXISTS standingorderkind')
    op.execute('DROP TYPE IF EXISTS donationmethodtype')
