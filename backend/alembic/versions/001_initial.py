"""initial schema: stock, orders, templates, preferences

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _money(name: str) -> sa.Column:
    return sa.Column(name, sa.Numeric(12, 2), nullable=False, server_default="0")


def upgrade() -> None:
    op.create_table(
        "categories",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("color_hex", sa.String(9), nullable=False, server_default="#007AFF"),
        sa.Column("icon", sa.String(100), nullable=False, server_default="folder"),
    )

    op.create_table(
        "stock_items",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("quantity_available", sa.Integer(), nullable=False, server_default="0"),
        _money("price"),
        _money("cost"),
        sa.Column("currency", sa.String(30), nullable=True, comment="ISO 4217 currency code"),
        sa.Column("attributes", sa.JSON(), nullable=False),
        sa.Column(
            "category_id",
            sa.Uuid(),
            sa.ForeignKey("categories.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )

    op.create_table(
        "orders",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("order_received_date", sa.DateTime(), nullable=False),
        sa.Column("order_reference", sa.String(100), nullable=True),
        sa.Column("customer_name", sa.String(255), nullable=True),
        sa.Column("status", sa.String(30), nullable=False),
        sa.Column("platform", sa.String(30), nullable=False),
        _money("shipping_cost"),
        _money("selling_fees"),
        _money("transaction_fees"),
        _money("other_costs"),
        _money("additional_costs"),
        _money("customer_shipping_charge"),
        sa.Column("delivery_method", sa.String(30), nullable=True),
        sa.Column("shipping_method", sa.String(100), nullable=True),
        sa.Column("shipping_company", sa.String(30), nullable=True),
        sa.Column("tracking_reference", sa.String(100), nullable=True),
        sa.Column("order_completion_date", sa.DateTime(), nullable=True),
        sa.Column("reminder_enabled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "reminder_time_before_completion",
            sa.Integer(),
            nullable=False,
            server_default=str(24 * 60 * 60),
            comment="Seconds before completion date",
        ),
        sa.Column("notification_id", sa.String(100), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("attributes", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_orders_order_received_date", "orders", ["order_received_date"])

    op.create_table(
        "order_items",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "order_id",
            sa.Uuid(),
            sa.ForeignKey("orders.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "stock_item_id",
            sa.Uuid(),
            sa.ForeignKey("stock_items.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="1"),
    )

    op.create_table(
        "attribute_templates",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("attributes", sa.JSON(), nullable=False),
        sa.Column("template_type", sa.String(30), nullable=False),
        sa.Column("date_created", sa.DateTime(), nullable=True),
        sa.Column("is_default", sa.Boolean(), nullable=True),
    )

    op.create_table(
        "order_templates",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("status", sa.String(30), nullable=False),
        sa.Column("platform", sa.String(30), nullable=False),
        sa.Column("custom_attributes", sa.JSON(), nullable=False),
        sa.Column("date_created", sa.DateTime(), nullable=True),
        sa.Column("is_default", sa.Boolean(), nullable=True),
    )

    op.create_table(
        "field_preference_documents",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("preference_type", sa.String(20), nullable=False, comment="stock or order"),
        sa.Column("doc_id", sa.String(50), nullable=False),
        sa.Column("field_items_data", sa.Text(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.UniqueConstraint("preference_type", "doc_id", name="uq_field_preference_doc"),
    )

    op.create_table(
        "legacy_preferences",
        sa.Column("key", sa.String(100), primary_key=True),
        sa.Column("value", sa.Text(), nullable=False),
    )

    op.create_table(
        "app_settings",
        sa.Column("key", sa.String(100), primary_key=True),
        sa.Column("value", sa.JSON(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )


def downgrade() -> None:
    op.drop_table("app_settings")
    op.drop_table("legacy_preferences")
    op.drop_table("field_preference_documents")
    op.drop_table("order_templates")
    op.drop_table("attribute_templates")
    op.drop_table("order_items")
    op.drop_index("ix_orders_order_received_date", table_name="orders")
    op.drop_table("orders")
    op.drop_table("stock_items")
    op.drop_table("categories")
