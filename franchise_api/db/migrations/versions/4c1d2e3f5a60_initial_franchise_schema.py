"""Initial franchise schema.

- organization accounts: hqs, master_franchisees, learning_centers, teacher_trainers
- users
- catalog: programs, sub_programs and their MF/LC share lists
- people: students, teachers
- learning_groups
- commerce: products, inventory_transactions, orders, order_lines

Column types are portable (integer keys, JSON, enums as strings) so the same
revision runs on PostgreSQL and SQLite.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "4c1d2e3f5a60"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _contact_columns() -> list:
    return [
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("code", sa.String(32), nullable=False, unique=True),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("phone", sa.Text(), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("city", sa.Text(), nullable=True),
        sa.Column("state", sa.Text(), nullable=True),
        sa.Column("country", sa.Text(), nullable=True),
        sa.Column("postal_code", sa.Text(), nullable=True),
        sa.Column("status", sa.String(16), nullable=False, server_default="ACTIVE"),
    ]


def _address_columns() -> list:
    return [
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("city", sa.Text(), nullable=True),
        sa.Column("state", sa.Text(), nullable=True),
        sa.Column("country", sa.Text(), nullable=True),
        sa.Column("postal_code", sa.Text(), nullable=True),
    ]


def _org_chain() -> list:
    return [
        sa.Column("hq_id", sa.Integer(), sa.ForeignKey("hqs.id", ondelete="SET NULL"), nullable=True, index=True),
        sa.Column(
            "mf_id", sa.Integer(), sa.ForeignKey("master_franchisees.id", ondelete="SET NULL"), nullable=True, index=True
        ),
        sa.Column(
            "lc_id", sa.Integer(), sa.ForeignKey("learning_centers.id", ondelete="SET NULL"), nullable=True, index=True
        ),
    ]


def _pk() -> sa.Column:
    return sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True)


def upgrade() -> None:
    # Organization accounts
    op.create_table("hqs", _pk(), *_contact_columns(), *_timestamps())
    op.create_table(
        "master_franchisees",
        _pk(),
        *_contact_columns(),
        sa.Column("hq_id", sa.Integer(), sa.ForeignKey("hqs.id", ondelete="RESTRICT"), nullable=False, index=True),
        *_timestamps(),
    )
    op.create_table(
        "learning_centers",
        _pk(),
        *_contact_columns(),
        sa.Column(
            "mf_id",
            sa.Integer(),
            sa.ForeignKey("master_franchisees.id", ondelete="RESTRICT"),
            nullable=False,
            index=True,
        ),
        *_timestamps(),
    )
    op.create_table(
        "teacher_trainers",
        _pk(),
        *_contact_columns(),
        sa.Column("hq_id", sa.Integer(), sa.ForeignKey("hqs.id", ondelete="RESTRICT"), nullable=False, index=True),
        *_timestamps(),
    )

    # Users
    op.create_table(
        "users",
        _pk(),
        sa.Column("email", sa.String(320), nullable=False, unique=True),
        sa.Column("hashed_password", sa.Text(), nullable=False),
        sa.Column("first_name", sa.Text(), nullable=False),
        sa.Column("last_name", sa.Text(), nullable=False),
        sa.Column("phone", sa.Text(), nullable=True),
        sa.Column("role", sa.String(16), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="ACTIVE"),
        sa.Column("email_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("hq_id", sa.Integer(), sa.ForeignKey("hqs.id", ondelete="SET NULL"), nullable=True, index=True),
        sa.Column(
            "mf_id", sa.Integer(), sa.ForeignKey("master_franchisees.id", ondelete="SET NULL"), nullable=True, index=True
        ),
        sa.Column(
            "lc_id", sa.Integer(), sa.ForeignKey("learning_centers.id", ondelete="SET NULL"), nullable=True, index=True
        ),
        sa.Column(
            "tt_id", sa.Integer(), sa.ForeignKey("teacher_trainers.id", ondelete="SET NULL"), nullable=True, index=True
        ),
        *_timestamps(),
    )

    # Catalog
    op.create_table(
        "programs",
        _pk(),
        sa.Column("name", sa.String(255), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="DRAFT"),
        sa.Column("category", sa.Text(), nullable=False, server_default="General"),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("price", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("max_students", sa.Integer(), nullable=False),
        sa.Column("current_students", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("requirements", sa.JSON(), nullable=False),
        sa.Column("learning_objectives", sa.JSON(), nullable=False),
        sa.Column("hours", sa.Integer(), nullable=False),
        sa.Column("lesson_length", sa.Integer(), nullable=False),
        sa.Column("kind", sa.String(32), nullable=False),
        sa.Column("visibility", sa.String(16), nullable=False, server_default="PRIVATE"),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "program_mf_shares",
        sa.Column("program_id", sa.Integer(), sa.ForeignKey("programs.id", ondelete="CASCADE"), primary_key=True),
        sa.Column(
            "mf_id", sa.Integer(), sa.ForeignKey("master_franchisees.id", ondelete="CASCADE"), primary_key=True
        ),
    )
    op.create_table(
        "sub_programs",
        _pk(),
        sa.Column(
            "program_id", sa.Integer(), sa.ForeignKey("programs.id", ondelete="RESTRICT"), nullable=False, index=True
        ),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="DRAFT"),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("price", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("prerequisites", sa.JSON(), nullable=False),
        sa.Column("learning_objectives", sa.JSON(), nullable=False),
        sa.Column("pricing_model", sa.String(32), nullable=False),
        sa.Column("course_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("number_of_payments", sa.Integer(), nullable=True),
        sa.Column("gap", sa.Integer(), nullable=True),
        sa.Column("price_per_month", sa.Numeric(12, 2), nullable=True),
        sa.Column("price_per_session", sa.Numeric(12, 2), nullable=True),
        sa.Column("visibility", sa.String(16), nullable=False, server_default="PRIVATE"),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column(
            "owner_mf_id",
            sa.Integer(),
            sa.ForeignKey("master_franchisees.id", ondelete="SET NULL"),
            nullable=True,
            index=True,
        ),
        *_timestamps(),
        sa.UniqueConstraint("program_id", "name", name="uq_sub_programs_program_id_name"),
    )
    op.create_table(
        "subprogram_mf_shares",
        sa.Column(
            "sub_program_id", sa.Integer(), sa.ForeignKey("sub_programs.id", ondelete="CASCADE"), primary_key=True
        ),
        sa.Column(
            "mf_id", sa.Integer(), sa.ForeignKey("master_franchisees.id", ondelete="CASCADE"), primary_key=True
        ),
    )
    op.create_table(
        "subprogram_lc_shares",
        sa.Column(
            "sub_program_id", sa.Integer(), sa.ForeignKey("sub_programs.id", ondelete="CASCADE"), primary_key=True
        ),
        sa.Column(
            "lc_id", sa.Integer(), sa.ForeignKey("learning_centers.id", ondelete="CASCADE"), primary_key=True
        ),
    )

    # People
    op.create_table(
        "students",
        _pk(),
        *_org_chain(),
        *_address_columns(),
        sa.Column("first_name", sa.Text(), nullable=False),
        sa.Column("last_name", sa.Text(), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=False),
        sa.Column("gender", sa.String(16), nullable=False),
        sa.Column("enrollment_date", sa.Date(), nullable=True),
        sa.Column("status", sa.String(16), nullable=False, server_default="ACTIVE"),
        sa.Column("parent_first_name", sa.Text(), nullable=False),
        sa.Column("parent_last_name", sa.Text(), nullable=False),
        sa.Column("parent_phone", sa.Text(), nullable=False),
        sa.Column("parent_email", sa.Text(), nullable=False),
        sa.Column("emergency_contact_email", sa.Text(), nullable=True),
        sa.Column("emergency_contact_phone", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("avatar", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "teachers",
        _pk(),
        *_org_chain(),
        *_address_columns(),
        sa.Column("first_name", sa.Text(), nullable=False),
        sa.Column("last_name", sa.Text(), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=False),
        sa.Column("gender", sa.String(16), nullable=False),
        sa.Column("title", sa.Text(), nullable=True),
        sa.Column("email", sa.String(320), nullable=False, unique=True),
        sa.Column("phone", sa.Text(), nullable=True),
        sa.Column("experience", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("status", sa.String(16), nullable=False, server_default="PROCESS"),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("avatar", sa.Text(), nullable=True),
        sa.Column("availability", sa.JSON(), nullable=True),
        sa.Column("education", sa.JSON(), nullable=True),
        sa.Column("trainings", sa.JSON(), nullable=True),
        sa.Column("specialization", sa.JSON(), nullable=True),
        sa.Column("qualifications", sa.JSON(), nullable=True),
        sa.Column("contract_file", sa.Text(), nullable=True),
        sa.Column("contract_date", sa.Date(), nullable=True),
        sa.Column("contract_uploaded_by", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("contract_uploaded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("approved_by", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )

    # Learning groups
    op.create_table(
        "learning_groups",
        _pk(),
        *_org_chain(),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="ACTIVE"),
        sa.Column("max_students", sa.Integer(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("location", sa.Text(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("schedule", sa.JSON(), nullable=False),
        sa.Column("pricing_snapshot", sa.JSON(), nullable=True),
        sa.Column("students", sa.JSON(), nullable=False),
        sa.Column(
            "program_id", sa.Integer(), sa.ForeignKey("programs.id", ondelete="RESTRICT"), nullable=False, index=True
        ),
        sa.Column(
            "sub_program_id",
            sa.Integer(),
            sa.ForeignKey("sub_programs.id", ondelete="RESTRICT"),
            nullable=True,
            index=True,
        ),
        sa.Column(
            "teacher_id", sa.Integer(), sa.ForeignKey("teachers.id", ondelete="RESTRICT"), nullable=False, index=True
        ),
        *_timestamps(),
    )

    # Commerce
    op.create_table(
        "products",
        _pk(),
        sa.Column("sku", sa.String(64), nullable=False, unique=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.Text(), nullable=True),
        sa.Column("price", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("cost", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("stock_quantity", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("min_stock_level", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("supplier", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_table(
        "inventory_transactions",
        _pk(),
        sa.Column(
            "product_id", sa.Integer(), sa.ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
        ),
        sa.Column("direction", sa.String(8), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("reason", sa.String(32), nullable=False),
        sa.Column("reference_id", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "orders",
        _pk(),
        *_org_chain(),
        sa.Column("order_number", sa.String(32), nullable=False, unique=True),
        sa.Column("status", sa.String(16), nullable=False, server_default="PENDING"),
        sa.Column("subtotal", sa.Numeric(12, 2), nullable=False),
        sa.Column("tax", sa.Numeric(12, 2), nullable=False),
        sa.Column("total", sa.Numeric(12, 2), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("placed_by", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "order_lines",
        _pk(),
        sa.Column("order_id", sa.Integer(), sa.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column(
            "product_id", sa.Integer(), sa.ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True
        ),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("total_price", sa.Numeric(12, 2), nullable=False),
    )


def downgrade() -> None:
    for table in [
        "order_lines",
        "orders",
        "inventory_transactions",
        "products",
        "learning_groups",
        "teachers",
        "students",
        "subprogram_lc_shares",
        "subprogram_mf_shares",
        "sub_programs",
        "program_mf_shares",
        "programs",
        "users",
        "teacher_trainers",
        "learning_centers",
        "master_franchisees",
        "hqs",
    ]:
        op.drop_table(table)
