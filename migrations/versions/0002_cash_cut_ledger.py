"""cash cut ledger: sales, cash cut records, cut schedule settings

Revision ID: 0002_cash_cut_ledger
Revises: 0001_initial
Create Date: 2026-10-02 00:00:00.000000
"""

from alembic import op
import sqlalchemy as sa


revision = "0002_cash_cut_ledger"
down_revision = "0001_initial"
branch_labels = None
depends_on = None


class GUID(sa.TypeDecorator):
    impl = sa.CHAR
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            from sqlalchemy.dialects.postgresql import UUID

            return dialect.type_descriptor(UUID(as_uuid=True))
        return dialect.type_descriptor(sa.CHAR(36))


MONEY = sa.Numeric(12, 2)


def upgrade() -> None:
    op.create_table(
        "sales",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("folio", sa.String(length=50), nullable=True, unique=True),
        sa.Column("total", MONEY, nullable=False),
        sa.Column("payment_method", sa.String(length=20), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("payment_method IN ('cash', 'card', 'transfer')", name="ck_sales_payment_method"),
    )
    op.create_index("ix_sales_created_at", "sales", ["created_at"], unique=False)

    op.create_table(
        "cash_cut_records",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("business_date", sa.Date(), nullable=False),
        sa.Column("ledger_seq", sa.Integer(), nullable=False),
        sa.Column("cut_time", sa.String(length=5), nullable=True),
        sa.Column("is_manual", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("opening_balance", MONEY, nullable=False),
        sa.Column("cash_sales", MONEY, nullable=False, server_default="0"),
        sa.Column("card_sales", MONEY, nullable=False, server_default="0"),
        sa.Column("transfer_sales", MONEY, nullable=False, server_default="0"),
        sa.Column("total_sales", MONEY, nullable=False, server_default="0"),
        sa.Column("sales_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("closing_balance_reported", MONEY, nullable=False),
        sa.Column("discrepancy", MONEY, nullable=False, server_default="0"),
        sa.Column("window_start", sa.DateTime(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("recorded_by_user_id", GUID(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("business_date", "cut_time", name="uq_cash_cut_records_date_cut_time"),
        sa.UniqueConstraint("business_date", "ledger_seq", name="uq_cash_cut_records_date_seq"),
    )
    op.create_index("ix_cash_cut_records_business_date", "cash_cut_records", ["business_date"], unique=False)
    op.create_index("ix_cash_cut_records_created_at", "cash_cut_records", ["created_at"], unique=False)
    # NULL cut_time escapes the composite constraint; one opening per day is enforced here
    op.create_index(
        "uq_cash_cut_records_opening_per_day",
        "cash_cut_records",
        ["business_date"],
        unique=True,
        sqlite_where=sa.text("cut_time IS NULL"),
        postgresql_where=sa.text("cut_time IS NULL"),
    )

    op.create_table(
        "cut_schedule_settings",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("first_cut", sa.String(length=5), nullable=False),
        sa.Column("second_cut", sa.String(length=5), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("updated_by_user_id", GUID(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_cut_schedule_settings_is_active", "cut_schedule_settings", ["is_active"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_cut_schedule_settings_is_active", table_name="cut_schedule_settings")
    op.drop_table("cut_schedule_settings")
    op.drop_index("uq_cash_cut_records_opening_per_day", table_name="cash_cut_records")
    op.drop_index("ix_cash_cut_records_created_at", table_name="cash_cut_records")
    op.drop_index("ix_cash_cut_records_business_date", table_name="cash_cut_records")
    op.drop_table("cash_cut_records")
    op.drop_index("ix_sales_created_at", table_name="sales")
    op.drop_table("sales")
