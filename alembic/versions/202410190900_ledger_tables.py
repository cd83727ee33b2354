"""categories and transactions

Revision ID: 202410190900
Revises:
Create Date: 2024-10-19 09:00:00.000000

"""

from alembic import op
import sqlalchemy as sa


revision = "202410190900"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "categories",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("owner_id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("color", sa.String(length=20)),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_categories_owner_name", "categories", ["owner_id", "name"])

    op.create_table(
        "transactions",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("owner_id", sa.String(length=64), nullable=False),
        sa.Column("amount_cents", sa.BigInteger(), nullable=False),
        sa.Column("description", sa.String(length=200), nullable=False),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.Column(
            "category_id",
            sa.String(length=36),
            sa.ForeignKey("categories.id"),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("amount_cents > 0", name="ck_transactions_amount_positive"),
    )
    op.create_index("ix_transactions_owner_date", "transactions", ["owner_id", "date"])
    op.create_index(
        "ix_transactions_owner_category", "transactions", ["owner_id", "category_id"]
    )


def downgrade():
    op.drop_index("ix_transactions_owner_category", table_name="transactions")
    op.drop_index("ix_transactions_owner_date", table_name="transactions")
    op.drop_table("transactions")
    op.drop_index("ix_categories_owner_name", table_name="categories")
    op.drop_table("categories")
