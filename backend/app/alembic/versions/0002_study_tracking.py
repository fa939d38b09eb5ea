"""Student stats, past papers, resources and specification tracking

Revision ID: 0002_study_tracking
Revises: 0001_initial
Create Date: 2026-10-26 00:00:00
"""
from alembic import op
import sqlalchemy as sa

revision = "0002_study_tracking"
down_revision = "0001_initial"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "student_stats",
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("students.user_id", ondelete="CASCADE"), primary_key=True, nullable=False),
        sa.Column("streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("tasks_completed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("schoolwork_completed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("past_papers_completed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("resources_downloaded", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("pomodoro_time", sa.Integer(), nullable=False, server_default="0"),
    )

    op.create_table(
        "past_papers",
        sa.Column("paper_id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("course_id", sa.Integer(), sa.ForeignKey("courses.course_id", ondelete="CASCADE"), nullable=False),
        sa.Column("resource_name", sa.String(length=200), nullable=False),
        sa.Column("series", sa.String(length=80), nullable=True),
        sa.Column("question_paper_location", sa.String(length=500), nullable=True),
        sa.Column("mark_scheme_location", sa.String(length=500), nullable=True),
        sa.Column("model_answers_location", sa.String(length=500), nullable=True),
        sa.Column("insert_location", sa.String(length=500), nullable=True),
    )
    op.create_index("ix_past_papers_course_id", "past_papers", ["course_id"])

    op.create_table(
        "specification_entries",
        sa.Column("entry_id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("course_id", sa.Integer(), sa.ForeignKey("courses.course_id", ondelete="CASCADE"), nullable=False),
        sa.Column("topic", sa.String(length=40), nullable=False),
        sa.Column("topic_name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("paper", sa.String(length=80), nullable=True),
        sa.Column("common", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("difficult", sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index("ix_specification_entries_course_id", "specification_entries", ["course_id"])

    op.create_table(
        "specification_subject_link",
        sa.Column(
            "entry_id",
            sa.Integer(),
            sa.ForeignKey("specification_entries.entry_id", ondelete="CASCADE"),
            primary_key=True,
            nullable=False,
        ),
        sa.Column("subject_id", sa.Integer(), sa.ForeignKey("subjects.subject_id", ondelete="CASCADE"), primary_key=True, nullable=False),
        sa.Column("confidence", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("sessions", sa.Integer(), nullable=False, server_default="0"),
    )

    op.create_table(
        "resources",
        sa.Column("resource_id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("resource_name", sa.String(length=200), nullable=False),
        sa.Column("resource_description", sa.Text(), nullable=True),
        sa.Column("location", sa.String(length=500), nullable=False),
        sa.Column("type", sa.String(length=40), nullable=True),
        sa.Column("creator", sa.String(length=120), nullable=True),
        sa.Column("uploaded_at", sa.DateTime(), nullable=False),
    )

    op.create_table(
        "course_resource_link",
        sa.Column("resource_id", sa.Integer(), sa.ForeignKey("resources.resource_id", ondelete="CASCADE"), primary_key=True, nullable=False),
        sa.Column("course_id", sa.Integer(), sa.ForeignKey("courses.course_id", ondelete="CASCADE"), primary_key=True, nullable=False),
        sa.Column(
            "specification_entry_id",
            sa.Integer(),
            sa.ForeignKey("specification_entries.entry_id", ondelete="SET NULL"),
            nullable=True,
        ),
    )


def downgrade() -> None:
    op.drop_table("course_resource_link")
    op.drop_table("resources")
    op.drop_table("specification_subject_link")
    op.drop_index("ix_specification_entries_course_id", table_name="specification_entries")
    op.drop_table("specification_entries")
    op.drop_index("ix_past_papers_course_id", table_name="past_papers")
    op.drop_table("past_papers")
    op.drop_table("student_stats")
