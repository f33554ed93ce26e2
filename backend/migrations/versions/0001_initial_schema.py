"""initial schema: users, token revocation, audit, inventory, orders, sections, packets

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19
"""
from __future__ import annotations
from alembic import op
import sqlalchemy as sa

revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('email', sa.String(length=128), nullable=False, unique=True),
        sa.Column('phone', sa.String(length=32)),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=32), nullable=False, server_default='CUSTOM'),
        sa.Column('permissions', sa.JSON(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('1')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_index('ix_users_email', 'users', ['email'])

    op.create_table('revoked_tokens',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('jti', sa.String(length=64), nullable=False, unique=True),
        sa.Column('user_id', sa.Integer()),
        sa.Column('revoked_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_index('ix_revoked_tokens_jti', 'revoked_tokens', ['jti'])
    op.create_index('ix_revoked_tokens_user_id', 'revoked_tokens', ['user_id'])

    op.create_table('audit_logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('actor_user_id', sa.Integer(), nullable=False),
        sa.Column('action', sa.String(length=64), nullable=False),
        sa.Column('entity', sa.String(length=64)),
        sa.Column('entity_id', sa.String(length=64)),
        sa.Column('perms_snapshot', sa.JSON(), nullable=True),
        sa.Column('meta', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_index('ix_audit_logs_actor_user_id', 'audit_logs', ['actor_user_id'])
    op.create_index('ix_audit_logs_action', 'audit_logs', ['action'])

    op.create_table('inventory_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('sku', sa.String(length=64), nullable=False, unique=True),
        sa.Column('category', sa.String(length=64)),
        sa.Column('unit', sa.String(length=16)),
        sa.Column('remaining_stock', sa.Float(), nullable=False, server_default='0'),
        sa.Column('reorder_level', sa.Float(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime()),
        sa.Column('updated_at', sa.DateTime()),
    )
    op.create_index('ix_inventory_items_sku', 'inventory_items', ['sku'])
    op.create_index('ix_inventory_items_category', 'inventory_items', ['category'])

    op.create_table('orders',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('order_number', sa.String(length=32), nullable=False, unique=True),
        sa.Column('customer_name', sa.String(length=128), nullable=False),
        sa.Column('customer_email', sa.String(length=128)),
        sa.Column('customer_phone', sa.String(length=32)),
        sa.Column('destination', sa.String(length=128)),
        sa.Column('priority', sa.String(length=16)),
        sa.Column('fwd_date', sa.Date()),
        sa.Column('status', sa.String(length=32), nullable=False),
        sa.Column('dispatch_data', sa.JSON()),
        sa.Column('completed_at', sa.DateTime()),
        sa.Column('completed_by', sa.Integer()),
        sa.Column('created_at', sa.DateTime()),
        sa.Column('updated_at', sa.DateTime()),
    )
    op.create_index('ix_orders_order_number', 'orders', ['order_number'])
    op.create_index('ix_orders_customer_name', 'orders', ['customer_name'])
    op.create_index('ix_orders_status', 'orders', ['status'])

    op.create_table('order_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('order_id', sa.Integer(), sa.ForeignKey('orders.id', ondelete='CASCADE'), nullable=False),
        sa.Column('product_name', sa.String(length=128), nullable=False),
        sa.Column('product_sku', sa.String(length=64)),
        sa.Column('size', sa.String(length=16)),
        sa.Column('quantity', sa.Integer()),
        sa.Column('status', sa.String(length=40), nullable=False),
        sa.Column('created_at', sa.DateTime()),
        sa.Column('updated_at', sa.DateTime()),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
    )
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])
    op.create_index('ix_order_items_status', 'order_items', ['status'])

    op.create_table('item_sections',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('order_item_id', sa.Integer(), sa.ForeignKey('order_items.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(length=64), nullable=False),
        sa.Column('status', sa.String(length=40), nullable=False),
        sa.Column('dyeing_round', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('dyeing_accepted_at', sa.DateTime()),
        sa.Column('dyeing_accepted_by', sa.Integer()),
        sa.Column('dyeing_accepted_by_name', sa.String(length=128)),
        sa.Column('dyeing_started_at', sa.DateTime()),
        sa.Column('dyeing_completed_at', sa.DateTime()),
        sa.Column('dyeing_completed_by', sa.Integer()),
        sa.Column('dyeing_rejected_at', sa.DateTime()),
        sa.Column('dyeing_rejected_by', sa.Integer()),
        sa.Column('dyeing_rejected_by_name', sa.String(length=128)),
        sa.Column('dyeing_rejection_reason_code', sa.String(length=40)),
        sa.Column('dyeing_rejection_reason', sa.String(length=255)),
        sa.Column('dyeing_rejection_notes', sa.Text()),
        sa.Column('packet_created_by', sa.Integer()),
        sa.Column('packet_created_by_name', sa.String(length=128)),
        sa.Column('previous_fabrication_user_id', sa.Integer()),
        sa.Column('previous_fabrication_user_name', sa.String(length=128)),
        sa.Column('inventory_check_result', sa.JSON()),
        sa.Column('updated_at', sa.DateTime()),
    )
    op.create_index('ix_item_sections_order_item_id', 'item_sections', ['order_item_id'])
    op.create_index('ix_item_sections_status', 'item_sections', ['status'])
    op.create_index('ix_item_sections_dyeing_accepted_by', 'item_sections', ['dyeing_accepted_by'])
    with op.batch_alter_table('item_sections') as batch_op:
        batch_op.create_unique_constraint('uq_item_section_name', ['order_item_id', 'name'])

    op.create_table('material_requirements',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('order_item_id', sa.Integer(), sa.ForeignKey('order_items.id', ondelete='CASCADE'), nullable=False),
        sa.Column('piece', sa.String(length=64), nullable=False),
        sa.Column('inventory_item_id', sa.Integer(), sa.ForeignKey('inventory_items.id'), nullable=False),
        sa.Column('inventory_item_name', sa.String(length=128)),
        sa.Column('required_qty', sa.Float(), nullable=False),
        sa.Column('unit', sa.String(length=16)),
    )
    op.create_index('ix_material_requirements_order_item_id', 'material_requirements', ['order_item_id'])

    op.create_table('timeline_entries',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('order_item_id', sa.Integer(), sa.ForeignKey('order_items.id', ondelete='CASCADE'), nullable=False),
        sa.Column('action', sa.Text(), nullable=False),
        sa.Column('user', sa.String(length=128), nullable=False),
        sa.Column('timestamp', sa.DateTime()),
        sa.Column('details', sa.JSON()),
    )
    op.create_index('ix_timeline_entries_order_item_id', 'timeline_entries', ['order_item_id'])

    op.create_table('packets',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('order_item_id', sa.Integer(), sa.ForeignKey('order_items.id', ondelete='CASCADE'), nullable=False),
        sa.Column('status', sa.String(length=32), nullable=False),
        sa.Column('assigned_to', sa.Integer()),
        sa.Column('assigned_to_name', sa.String(length=128)),
        sa.Column('sections_included', sa.JSON()),
        sa.Column('invalidated_sections', sa.JSON()),
        sa.Column('created_at', sa.DateTime()),
        sa.Column('updated_at', sa.DateTime()),
    )
    op.create_index('ix_packets_order_item_id', 'packets', ['order_item_id'])


def downgrade():
    for tbl in ['packets', 'timeline_entries', 'material_requirements', 'item_sections', 'order_items', 'orders',
                'inventory_items', 'audit_logs', 'revoked_tokens', 'users']:
        op.drop_table(tbl)
