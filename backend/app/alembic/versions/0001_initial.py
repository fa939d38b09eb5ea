"""Initial schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 00:00:00
"""
from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("user_id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("username", sa.String(length=120), nullable=False, unique=True),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("password", sa.String(length=255), nullable=False),
        sa.Column("first_name", sa.String(length=120), nullable=False),
        sa.Column("role", sa.String(length=16), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("last_login", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_users_username", "users", ["username"])
    op.create_index("ix_users_email", "users", ["email"])

    op.create_table(
        "sessions",
        sa.Column("token", sa.String(length=128), primary_key=True, nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
        sa.Column("expires", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_sessions_user_id", "sessions", ["user_id"])

    op.create_table(
        "students",
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.user_id", ondelete="CASCADE"), primary_key=True, nullable=False),
        sa.Column("year_group", sa.String(length=8), nullable=False),
        sa.Column("progress_emails", sa.Boolean(), nullable=False, server_default=sa.true()),
    )

    op.create_table(
        "teachers",
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.user_id", ondelete="CASCADE"), primary_key=True, nullable=False),
        sa.Column("title", sa.String(length=16), nullable=False),
        sa.Column("surname", sa.String(length=120), nullable=False),
        sa.Column("subject", sa.String(length=120), nullable=True),
    )

    op.create_table(
        "courses",
        sa.Column("course_id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("course_name", sa.String(length=160), nullable=False),
        sa.Column("course_description", sa.Text(), nullable=True),
        sa.Column("exam_board", sa.String(length=80), nullable=False),
        sa.Column("qualification", sa.String(length=40), nullable=False),
        sa.Column("papers", sa.Text(), nullable=True),
        sa.Column("final_year", sa.Integer(), nullable=True),
        sa.UniqueConstraint("course_name", "exam_board", "qualification", name="uq_courses_name_board_qual"),
    )
    op.create_index("ix_courses_course_name", "courses", ["course_name"])

    op.create_table(
        "exam_dates",
        sa.Column("exam_date_id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("course_id", sa.Integer(), sa.ForeignKey("courses.course_id", ondelete="CASCADE"), nullable=False),
        sa.Column("exam_date", sa.DateTime(), nullable=False),
        sa.Column("type", sa.String(length=80), nullable=True),
    )
    op.create_index("ix_exam_dates_course_id", "exam_dates", ["course_id"])

    op.create_table(
        "subjects",
        sa.Column("subject_id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
        sa.Column("course_id", sa.Integer(), sa.ForeignKey("courses.course_id"), nullable=False),
        sa.Column("teacher_name", sa.String(length=160), nullable=True),
    )
    op.create_index("ix_subjects_user_id", "subjects", ["user_id"])

    op.create_table(
        "tasks",
        sa.Column("task_id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
        sa.Column("task_name", sa.String(length=200), nullable=False),
        sa.Column("task_description", sa.Text(), nullable=True),
        sa.Column("due", sa.DateTime(), nullable=True),
        sa.Column("priority", sa.String(length=16), nullable=False),
        sa.Column("subject_id", sa.Integer(), sa.ForeignKey("subjects.subject_id", ondelete="SET NULL"), nullable=True),
    )
    op.create_index("ix_tasks_user_id", "tasks", ["user_id"])

    op.create_table(
        "calendar_events",
        sa.Column("event_id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
        sa.Column("event_name", sa.String(length=200), nullable=False),
        sa.Column("event_description", sa.Text(), nullable=True),
        sa.Column("event_start", sa.DateTime(), nullable=False),
        sa.Column("event_end", sa.DateTime(), nullable=False),
        sa.Column("type", sa.String(length=40), nullable=True),
        sa.Column("subject_id", sa.Integer(), sa.ForeignKey("subjects.subject_id", ondelete="SET NULL"), nullable=True),
        sa.Column("location_type", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("location", sa.String(length=255), nullable=True),
    )
    op.create_index("ix_calendar_events_user_id", "calendar_events", ["user_id"])

    op.create_table(
        "schoolwork",
        sa.Column("schoolwork_id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
        sa.Column("type", sa.Integer(), nullable=False),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("due", sa.DateTime(), nullable=False),
        sa.Column("issued", sa.DateTime(), nullable=False),
        sa.Column("schoolwork_name", sa.String(length=200), nullable=False),
        sa.Column("schoolwork_description", sa.Text(), nullable=True),
        sa.Column("subject_id", sa.Integer(), sa.ForeignKey("subjects.subject_id", ondelete="SET NULL"), nullable=True),
    )
    op.create_index("ix_schoolwork_user_id", "schoolwork", ["user_id"])

    op.create_table(
        "classes",
        sa.Column("class_id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("teacher_id", sa.Integer(), sa.ForeignKey("teachers.user_id", ondelete="CASCADE"), nullable=False),
        sa.Column("class_name", sa.String(length=120), nullable=False),
        sa.Column("join_code", sa.String(length=32), nullable=False, unique=True),
    )
    op.create_index("ix_classes_teacher_id", "classes", ["teacher_id"])
    op.create_index("ix_classes_join_code", "classes", ["join_code"])

    op.create_table(
        "class_student_link",
        sa.Column("class_id", sa.Integer(), sa.ForeignKey("classes.class_id", ondelete="CASCADE"), primary_key=True, nullable=False),
        sa.Column("student_id", sa.Integer(), sa.ForeignKey("students.user_id", ondelete="CASCADE"), primary_key=True, nullable=False),
    )

    op.create_table(
        "class_schoolwork",
        sa.Column("class_schoolwork_id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("class_id", sa.Integer(), sa.ForeignKey("classes.class_id", ondelete="CASCADE"), nullable=False),
        sa.Column("course_id", sa.Integer(), sa.ForeignKey("courses.course_id"), nullable=True),
        sa.Column("type", sa.Integer(), nullable=False),
        sa.Column("due", sa.DateTime(), nullable=False),
        sa.Column("issued", sa.DateTime(), nullable=False),
        sa.Column("schoolwork_name", sa.String(length=200), nullable=False),
        sa.Column("schoolwork_description", sa.Text(), nullable=True),
    )
    op.create_index("ix_class_schoolwork_class_id", "class_schoolwork", ["class_id"])

    op.create_table(
        "schoolwork_student_link",
        sa.Column(
            "class_schoolwork_id",
            sa.Integer(),
            sa.ForeignKey("class_schoolwork.class_schoolwork_id", ondelete="CASCADE"),
            primary_key=True,
            nullable=False,
        ),
        sa.Column("student_id", sa.Integer(), sa.ForeignKey("students.user_id", ondelete="CASCADE"), primary_key=True, nullable=False),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default=sa.false()),
    )

    op.create_table(
        "notifications",
        sa.Column("notification_id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("time_sent", sa.DateTime(), nullable=False),
        sa.Column("read", sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_notifications_user_id", table_name="notifications")
    op.drop_table("notifications")
    op.drop_table("schoolwork_student_link")
    op.drop_index("ix_class_schoolwork_class_id", table_name="class_schoolwork")
    op.drop_table("class_schoolwork")
    op.drop_table("class_student_link")
    op.drop_index("ix_classes_join_code", table_name="classes")
    op.drop_index("ix_classes_teacher_id", table_name="classes")
    op.drop_table("classes")
    op.drop_index("ix_schoolwork_user_id", table_name="schoolwork")
    op.drop_table("schoolwork")
    op.drop_index("ix_calendar_events_user_id", table_name="calendar_events")
    op.drop_table("calendar_events")
    op.drop_index("ix_tasks_user_id", table_name="tasks")
    op.drop_table("tasks")
    op.drop_index("ix_subjects_user_id", table_name="subjects")
    op.drop_table("subjects")
    op.drop_index("ix_exam_dates_course_id", table_name="exam_dates")
    op.drop_table("exam_dates")
    op.drop_index("ix_courses_course_name", table_name="courses")
    op.drop_table("courses")
    op.drop_table("teachers")
    op.drop_table("students")
    op.drop_index("ix_sessions_user_id", table_name="sessions")
    op.drop_table("sessions")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")
