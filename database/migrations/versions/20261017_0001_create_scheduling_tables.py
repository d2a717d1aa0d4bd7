"""create scheduling tables

Revision ID: 20261017_0001
Revises: None
Create Date: 2026-10-17 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261017_0001"
down_revision = None
branch_labels = None
depends_on = None


user_role_enum = sa.Enum("admin", "professor", "student", "staff", name="user_role")
subject_status_enum = sa.Enum("active", "inactive", name="subject_status")
room_type_enum = sa.Enum("ordinary", "lab", "auditorium", "library", "conference", "gym", name="room_type")
weekday_enum = sa.Enum("SUN", "MON", "TUE", "WED", "THU", "FRI", "SAT", name="weekday")
conflict_type_enum = sa.Enum(
    "professor_overlap",
    "room_overlap",
    "capacity_exceeded",
    "room_unavailable",
    name="conflict_type",
)
event_type_enum = sa.Enum(
    "teaching_period",
    "break",
    "exam_window",
    "holiday",
    "academic_event",
    "maintenance",
    name="event_type",
)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("role", user_role_enum, nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "subjects",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("code", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("status", subject_status_enum, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_subjects_code", "subjects", ["code"], unique=True)

    op.create_table(
        "classrooms",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("room_type", room_type_enum, nullable=False),
        sa.Column("equipment", sa.JSON(), nullable=False),
        sa.Column("available", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("location", sa.String(length=200), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_classrooms_name", "classrooms", ["name"], unique=True)

    op.create_table(
        "schedule_entries",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("subject_id", sa.String(length=36), nullable=False),
        sa.Column("professor_id", sa.String(length=36), nullable=False),
        sa.Column(
            "room_id",
            sa.String(length=36),
            sa.ForeignKey("classrooms.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("weekday", weekday_enum, nullable=False),
        sa.Column("start_minute", sa.Integer(), nullable=False),
        sa.Column("end_minute", sa.Integer(), nullable=False),
        sa.Column("academic_period", sa.String(length=20), nullable=False),
        sa.Column("expected_attendance", sa.Integer(), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("start_minute < end_minute", name="ck_schedule_entries_time_order"),
    )
    op.create_index("ix_schedule_entries_subject_id", "schedule_entries", ["subject_id"])
    op.create_index("ix_schedule_entries_academic_period", "schedule_entries", ["academic_period"])
    op.create_index(
        "ix_schedule_entries_professor_slot",
        "schedule_entries",
        ["professor_id", "weekday", "academic_period"],
    )
    op.create_index("ix_schedule_entries_room_slot", "schedule_entries", ["room_id", "weekday", "academic_period"])

    op.create_table(
        "conflict_records",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("conflict_type", conflict_type_enum, nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("primary_entry_id", sa.String(length=36), nullable=False),
        sa.Column("secondary_entry_id", sa.String(length=36), nullable=True),
        sa.Column("professor_id", sa.String(length=36), nullable=True),
        sa.Column("room_id", sa.String(length=36), nullable=True),
        sa.Column("detected_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("resolved", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
    )
    for column in ("conflict_type", "primary_entry_id", "secondary_entry_id", "professor_id", "room_id"):
        op.create_index(f"ix_conflict_records_{column}", "conflict_records", [column])

    op.create_table(
        "academic_calendar_events",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("academic_period", sa.String(length=20), nullable=False),
        sa.Column("event_type", event_type_enum, nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("start_date <= end_date", name="ck_calendar_events_date_order"),
    )
    op.create_index(
        "ix_academic_calendar_events_academic_period",
        "academic_calendar_events",
        ["academic_period"],
    )


def downgrade() -> None:
    op.drop_index("ix_academic_calendar_events_academic_period", table_name="academic_calendar_events")
    op.drop_table("academic_calendar_events")
    for column in ("conflict_type", "primary_entry_id", "secondary_entry_id", "professor_id", "room_id"):
        op.drop_index(f"ix_conflict_records_{column}", table_name="conflict_records")
    op.drop_table("conflict_records")
    op.drop_index("ix_schedule_entries_room_slot", table_name="schedule_entries")
    op.drop_index("ix_schedule_entries_professor_slot", table_name="schedule_entries")
    op.drop_index("ix_schedule_entries_academic_period", table_name="schedule_entries")
    op.drop_index("ix_schedule_entries_subject_id", table_name="schedule_entries")
    op.drop_table("schedule_entries")
    op.drop_index("ix_classrooms_name", table_name="classrooms")
    op.drop_table("classrooms")
    op.drop_index("ix_subjects_code", table_name="subjects")
    op.drop_table("subjects")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")

    bind = op.get_bind()
    for enum in (
        event_type_enum,
        conflict_type_enum,
        weekday_enum,
        room_type_enum,
        subject_status_enum,
        user_role_enum,
    ):
        enum.drop(bind, checkfirst=True)
