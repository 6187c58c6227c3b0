"""Initial migration

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
import sqlmodel

from alembic import op

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # 1. Staff
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("username", sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column("firstname", sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column("lastname", sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    # 2. Customers
    op.create_table(
        "customers",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("first_name", sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column("last_name", sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column("email", sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column("phone", sqlmodel.sql.sqltypes.AutoString(length=50), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_customers_email", "customers", ["email"], unique=False)

    # 3. Bikes
    op.create_table(
        "bikes",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("make", sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column("model", sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column(
            "condition",
            sqlmodel.sql.sqltypes.AutoString(length=20),
            nullable=False,
            server_default="Used",
        ),
        sa.Column("price", sa.Float(), nullable=True),
        sa.Column("is_available", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    # 4. Transactions
    op.create_table(
        "transactions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("transaction_num", sa.Integer(), nullable=False),
        sa.Column(
            "transaction_type",
            sqlmodel.sql.sqltypes.AutoString(length=50),
            nullable=False,
            server_default="retail",
        ),
        sa.Column("customer_id", sa.Uuid(), nullable=True),
        sa.Column("bike_id", sa.Uuid(), nullable=True),
        sa.Column("total_cost", sa.Float(), nullable=False, server_default="0"),
        sa.Column("is_completed", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("is_reserved", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["customer_id"], ["customers.id"]),
        sa.ForeignKeyConstraint(["bike_id"], ["bikes.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_transactions_transaction_num", "transactions", ["transaction_num"], unique=True
    )
    op.create_index("ix_transactions_customer_id", "transactions", ["customer_id"], unique=False)

    # 5. Workflow steps
    op.create_table(
        "workflow_steps",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("transaction_id", sa.Uuid(), nullable=False),
        sa.Column("workflow_type", sqlmodel.sql.sqltypes.AutoString(length=50), nullable=False),
        sa.Column("step_name", sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column("step_order", sa.Integer(), nullable=False),
        sa.Column("is_completed", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_by", sa.Uuid(), nullable=False),
        sa.Column("completed_by", sa.Uuid(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["transaction_id"], ["transactions.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"]),
        sa.ForeignKeyConstraint(["completed_by"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "transaction_id",
            "workflow_type",
            "step_order",
            name="uq_workflow_steps_transaction_workflow_order",
        ),
    )
    op.create_index(
        "ix_workflow_steps_transaction_id", "workflow_steps", ["transaction_id"], unique=False
    )
    op.create_index(
        "ix_workflow_steps_workflow_type", "workflow_steps", ["workflow_type"], unique=False
    )
    op.create_index(
        "ix_workflow_steps_transaction_workflow",
        "workflow_steps",
        ["transaction_id", "workflow_type"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_workflow_steps_transaction_workflow", table_name="workflow_steps")
    op.drop_index("ix_workflow_steps_workflow_type", table_name="workflow_steps")
    op.drop_index("ix_workflow_steps_transaction_id", table_name="workflow_steps")
    op.drop_table("workflow_steps")
    op.drop_index("ix_transactions_customer_id", table_name="transactions")
    op.drop_index("ix_transactions_transaction_num", table_name="transactions")
    op.drop_table("transactions")
    op.drop_table("bikes")
    op.drop_index("ix_customers_email", table_name="customers")
    op.drop_table("customers")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")
