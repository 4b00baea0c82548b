"""initial schema: schools, staff, roster, catalog, credits, attendance, audit log

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision = "a1b2c3d4e5f6"
down_revision = None
branch_labels = None
depends_on = None


ENUMS = {
    "school_plan": ("free", "basic", "pro", "enterprise"),
    "user_role": ("superadmin", "owner", "admin", "teacher"),
    "gender": ("male", "female", "other"),
    "student_status": ("active", "inactive", "graduated", "suspended"),
    "parent_type": ("father", "mother", "guardian"),
    "course_category": ("academic", "sport", "art", "language", "other"),
    "course_status": ("active", "inactive", "archived"),
    "day_of_week": ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"),
    "validity_type": ("months", "days", "unlimited"),
    "package_status": ("active", "inactive"),
    "payment_status": ("pending", "paid", "refunded"),
    "payment_method": ("cash", "transfer", "credit_card", "promptpay"),
    "credit_status": ("active", "expired", "depleted", "suspended"),
    "adjustment_type": ("add", "subtract", "set"),
    "check_in_method": ("manual", "qr_code", "face_recognition"),
    "attendance_status": ("present", "absent", "late", "excused", "holiday", "cancelled"),
}


def _enum(name):
    return postgresql.ENUM(*ENUMS[name], name=name, create_type=False)


def _base_columns():
    return [
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def _school_fk():
    return sa.Column("school_id", sa.UUID(), sa.ForeignKey("schools.id", ondelete="CASCADE"), nullable=False)


def _soft_delete_columns():
    return [
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
    ]


def _is_active():
    return sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true())


def _indexes(table, *columns):
    for column in ("id", "created_at") + columns:
        op.create_index(op.f(f"ix_{table}_{column}"), table, [column], unique=False)


def upgrade() -> None:
    for name, values in ENUMS.items():
        quoted = ", ".join(f"'{v}'" for v in values)
        op.execute(f"CREATE TYPE {name} AS ENUM ({quoted})")

    op.create_table(
        "schools",
        *_base_columns(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("logo_url", sa.Text(), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("line_oa", sa.String(100), nullable=True),
        sa.Column("website", sa.String(255), nullable=True),
        sa.Column("tax_id", sa.String(50), nullable=True),
        sa.Column("timezone", sa.String(64), nullable=False, server_default="Asia/Bangkok"),
        sa.Column("currency", sa.String(8), nullable=False, server_default="THB"),
        sa.Column("date_format", sa.String(20), nullable=False, server_default="DD/MM/YYYY"),
        sa.Column("language", sa.String(8), nullable=False, server_default="th"),
        sa.Column("business_hours", postgresql.JSONB(), nullable=True),
        sa.Column("plan", _enum("school_plan"), nullable=False, server_default="free"),
        sa.Column("plan_expiry", sa.DateTime(), nullable=True),
        sa.Column("billing_email", sa.String(255), nullable=True),
        sa.Column("max_students", sa.Integer(), nullable=False, server_default="50"),
        sa.Column("max_teachers", sa.Integer(), nullable=False, server_default="3"),
        sa.Column("max_courses", sa.Integer(), nullable=False, server_default="5"),
        sa.Column("storage_quota", sa.BigInteger(), nullable=False, server_default=str(1024 ** 3)),
        sa.Column("feature_online_payment", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("feature_parent_app", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("feature_api_access", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("feature_custom_domain", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("feature_white_label", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("last_active_at", sa.DateTime(), nullable=True),
        _is_active(),
        sa.PrimaryKeyConstraint("id"),
    )
    _indexes("schools", "is_active")

    op.create_table(
        "users",
        *_base_columns(),
        sa.Column("school_id", sa.UUID(), sa.ForeignKey("schools.id", ondelete="CASCADE"), nullable=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(255), nullable=False),
        sa.Column("last_name", sa.String(255), nullable=False),
        sa.Column("display_name", sa.String(512), nullable=False),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("profile_image_url", sa.String(500), nullable=True),
        sa.Column("role", _enum("user_role"), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_login", sa.DateTime(), nullable=True),
        sa.Column("created_by", sa.UUID(), nullable=True),
        *_soft_delete_columns(),
        sa.PrimaryKeyConstraint("id"),
    )
    _indexes("users", "school_id", "role", "is_active", "is_deleted")
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

    op.create_table(
        "students",
        *_base_columns(),
        _school_fk(),
        sa.Column("student_code", sa.String(20), nullable=False),
        sa.Column("first_name", sa.String(255), nullable=False),
        sa.Column("last_name", sa.String(255), nullable=False),
        sa.Column("nickname", sa.String(100), nullable=True),
        sa.Column("birth_date", sa.Date(), nullable=True),
        sa.Column("age", sa.Integer(), nullable=True),
        sa.Column("gender", _enum("gender"), nullable=True),
        sa.Column("current_grade", sa.String(50), nullable=True),
        sa.Column("profile_image_url", sa.String(500), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("address", postgresql.JSONB(), nullable=True),
        sa.Column("status", _enum("student_status"), nullable=False, server_default="active"),
        sa.Column("notes", sa.Text(), nullable=True),
        *_soft_delete_columns(),
        _is_active(),
        sa.PrimaryKeyConstraint("id"),
    )
    _indexes("students", "school_id", "student_code", "status", "is_deleted", "is_active")

    op.create_table(
        "student_parents",
        *_base_columns(),
        sa.Column("student_id", sa.UUID(), sa.ForeignKey("students.id", ondelete="CASCADE"), nullable=False),
        sa.Column("type", _enum("parent_type"), nullable=False),
        sa.Column("first_name", sa.String(255), nullable=False),
        sa.Column("last_name", sa.String(255), nullable=False, server_default=""),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("line_id", sa.String(100), nullable=True),
        sa.Column("occupation", sa.String(255), nullable=True),
        sa.Column("is_primary_contact", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("receive_notifications", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.PrimaryKeyConstraint("id"),
    )
    _indexes("student_parents", "student_id")

    op.create_table(
        "courses",
        *_base_columns(),
        _school_fk(),
        sa.Column("code", sa.String(20), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("category", _enum("course_category"), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("cover_image_url", sa.String(500), nullable=True),
        sa.Column("tags", postgresql.ARRAY(sa.String()), nullable=False, server_default="{}"),
        sa.Column("max_students_per_class", sa.Integer(), nullable=True),
        sa.Column("default_credits_per_session", sa.Integer(), nullable=False, server_default="1"),
        sa.Column(
            "primary_teacher_id", sa.UUID(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True
        ),
        sa.Column("status", _enum("course_status"), nullable=False, server_default="active"),
        sa.Column("total_enrolled", sa.Integer(), nullable=False, server_default="0"),
        *_soft_delete_columns(),
        _is_active(),
        sa.PrimaryKeyConstraint("id"),
    )
    _indexes("courses", "school_id", "code", "status", "is_deleted", "is_active")

    op.create_table(
        "course_sessions",
        *_base_columns(),
        sa.Column("course_id", sa.UUID(), sa.ForeignKey("courses.id", ondelete="CASCADE"), nullable=False),
        sa.Column("day", _enum("day_of_week"), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("room", sa.String(100), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    _indexes("course_sessions", "course_id")

    op.create_table(
        "credit_packages",
        *_base_columns(),
        _school_fk(),
        sa.Column("is_universal", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("applicable_course_ids", postgresql.ARRAY(sa.UUID()), nullable=True),
        sa.Column("course_id", sa.UUID(), sa.ForeignKey("courses.id", ondelete="SET NULL"), nullable=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("code", sa.String(20), nullable=False),
        sa.Column("credits", sa.Integer(), nullable=False),
        sa.Column("bonus_credits", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_credits_with_bonus", sa.Integer(), nullable=False),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("price_per_credit", sa.Numeric(12, 2), nullable=False),
        sa.Column("validity_type", _enum("validity_type"), nullable=False),
        sa.Column("validity_value", sa.Integer(), nullable=True),
        sa.Column("validity_description", sa.String(100), nullable=False),
        sa.Column("is_promotion", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("original_price", sa.Numeric(12, 2), nullable=True),
        sa.Column("discount_percent", sa.Numeric(5, 2), nullable=True),
        sa.Column("promotion_end_date", sa.DateTime(), nullable=True),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("color", sa.String(20), nullable=False, server_default="#f97316"),
        sa.Column("popular", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("recommended", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("status", _enum("package_status"), nullable=False, server_default="active"),
        *_soft_delete_columns(),
        _is_active(),
        sa.PrimaryKeyConstraint("id"),
    )
    _indexes("credit_packages", "school_id", "course_id", "code", "status", "is_deleted", "is_active")

    op.create_table(
        "student_credits",
        *_base_columns(),
        _school_fk(),
        sa.Column("student_id", sa.UUID(), sa.ForeignKey("students.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "package_id", sa.UUID(), sa.ForeignKey("credit_packages.id", ondelete="SET NULL"), nullable=True
        ),
        sa.Column("course_id", sa.UUID(), sa.ForeignKey("courses.id", ondelete="SET NULL"), nullable=True),
        sa.Column("is_universal", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("applicable_course_ids", postgresql.ARRAY(sa.UUID()), nullable=True),
        sa.Column("student_name", sa.String(512), nullable=False),
        sa.Column("student_code", sa.String(20), nullable=False),
        sa.Column("course_name", sa.String(255), nullable=True),
        sa.Column("package_name", sa.String(255), nullable=False),
        sa.Column("package_code", sa.String(20), nullable=False),
        sa.Column("total_credits", sa.Integer(), nullable=False),
        sa.Column("bonus_credits", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("used_credits", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("remaining_credits", sa.Integer(), nullable=False),
        sa.Column("original_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("discount_amount", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("final_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("price_per_credit", sa.Numeric(12, 2), nullable=False),
        sa.Column("payment_status", _enum("payment_status"), nullable=False, server_default="paid"),
        sa.Column("payment_method", _enum("payment_method"), nullable=False),
        sa.Column("payment_reference", sa.String(255), nullable=True),
        sa.Column("payment_date", sa.DateTime(), nullable=True),
        sa.Column("payment_note", sa.Text(), nullable=True),
        sa.Column("has_expiry", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("purchase_date", sa.DateTime(), nullable=False),
        sa.Column("activation_date", sa.DateTime(), nullable=True),
        sa.Column("expiry_date", sa.Date(), nullable=True),
        sa.Column("status", _enum("credit_status"), nullable=False, server_default="active"),
        sa.Column("receipt_number", sa.String(20), nullable=False),
        sa.Column("last_used_date", sa.DateTime(), nullable=True),
        sa.Column("last_adjusted_at", sa.DateTime(), nullable=True),
        sa.Column("last_adjusted_by", sa.UUID(), nullable=True),
        sa.Column("sold_by", sa.UUID(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    _indexes(
        "student_credits", "school_id", "student_id", "package_id", "course_id",
        "payment_status", "purchase_date", "expiry_date", "status", "receipt_number",
    )

    op.create_table(
        "credit_adjustments",
        *_base_columns(),
        _school_fk(),
        sa.Column(
            "credit_id", sa.UUID(), sa.ForeignKey("student_credits.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("student_id", sa.UUID(), sa.ForeignKey("students.id", ondelete="CASCADE"), nullable=False),
        sa.Column("student_name", sa.String(512), nullable=False),
        sa.Column("package_name", sa.String(255), nullable=False),
        sa.Column("adjustment_type", _enum("adjustment_type"), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("credits_before", sa.Integer(), nullable=False),
        sa.Column("credits_after", sa.Integer(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("adjusted_by", sa.UUID(), nullable=False),
        sa.Column("adjusted_by_name", sa.String(512), nullable=False),
        sa.Column("adjusted_by_role", _enum("user_role"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    _indexes("credit_adjustments", "school_id", "credit_id", "student_id")

    op.create_table(
        "attendance",
        *_base_columns(),
        _school_fk(),
        sa.Column("student_id", sa.UUID(), sa.ForeignKey("students.id", ondelete="CASCADE"), nullable=False),
        sa.Column("course_id", sa.UUID(), sa.ForeignKey("courses.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "credit_id", sa.UUID(), sa.ForeignKey("student_credits.id", ondelete="SET NULL"), nullable=True
        ),
        sa.Column("student_code", sa.String(20), nullable=False),
        sa.Column("student_name", sa.String(512), nullable=False),
        sa.Column("student_nickname", sa.String(100), nullable=True),
        sa.Column("course_name", sa.String(255), nullable=False),
        sa.Column("course_code", sa.String(20), nullable=False),
        sa.Column("check_in_date", sa.Date(), nullable=False),
        sa.Column("check_in_time", sa.DateTime(), nullable=False),
        sa.Column("check_in_method", _enum("check_in_method"), nullable=False, server_default="manual"),
        sa.Column("session_date", sa.Date(), nullable=False),
        sa.Column("session_start_time", sa.Time(), nullable=True),
        sa.Column("session_end_time", sa.Time(), nullable=True),
        sa.Column("room", sa.String(100), nullable=True),
        sa.Column("credits_deducted", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("credits_before", sa.Integer(), nullable=False),
        sa.Column("credits_after", sa.Integer(), nullable=False),
        sa.Column("status", _enum("attendance_status"), nullable=False, server_default="present"),
        sa.Column("is_late", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("late_minutes", sa.Integer(), nullable=True),
        sa.Column("checked_by", sa.UUID(), nullable=False),
        sa.Column("checked_by_name", sa.String(512), nullable=False),
        sa.Column("checked_by_role", _enum("user_role"), nullable=False),
        sa.Column("teacher_notes", sa.Text(), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(), nullable=True),
        sa.Column("cancel_reason", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    _indexes("attendance", "school_id", "student_id", "course_id", "credit_id", "check_in_date", "status")

    op.create_table(
        "system_logs",
        *_base_columns(),
        sa.Column("action", sa.String(100), nullable=False),
        sa.Column("school_id", sa.UUID(), nullable=True),
        sa.Column("actor_id", sa.UUID(), nullable=True),
        sa.Column("actor_email", sa.String(255), nullable=True),
        sa.Column("details", postgresql.JSONB(), nullable=True),
        sa.Column("error", sa.Text(), nullable=True),
        sa.Column("timestamp", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    _indexes("system_logs", "action", "school_id", "timestamp")


def downgrade() -> None:
    for table in (
        "system_logs", "attendance", "credit_adjustments", "student_credits",
        "credit_packages", "course_sessions", "courses", "student_parents",
        "students", "users", "schools",
    ):
        op.drop_table(table)
    for name in reversed(list(ENUMS)):
        op.execute(f"DROP TYPE IF EXISTS {name}")
