"""mentors and questions

Revision ID: 0001_init
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None

MENTOR_STATUSES = ("Available", "Unavailable", "On Leave")
QUESTION_STATUSES = ("New", "Assigned", "In Progress", "Resolved")


def upgrade():
    mstatus = sa.Enum(*MENTOR_STATUSES, name="mentor_status_enum")
    qstatus = sa.Enum(*QUESTION_STATUSES, name="question_status_enum")

    op.create_table(
        "mentors",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("subject", sa.String(255), nullable=False),
        sa.Column("university", sa.String(255), nullable=False, server_default="Not specified"),
        sa.Column("status", mstatus, nullable=False, server_default="Available"),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_mentors_email", "mentors", ["email"], unique=True)

    op.create_table(
        "questions",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("student_name", sa.String(255), nullable=False),
        sa.Column("student_email", sa.String(255), nullable=True),
        sa.Column("student_phone", sa.String(10), nullable=True),
        sa.Column("subject", sa.String(255), nullable=False),
        sa.Column("question", sa.Text, nullable=False),
        sa.Column("status", qstatus, nullable=False, server_default="New"),
        sa.Column("assigned_mentor_id", sa.String(32), sa.ForeignKey("mentors.id", ondelete="SET NULL"), nullable=True),
        sa.Column("answer_text", sa.Text, nullable=True),
        sa.Column("answered_by_mentor_id", sa.String(32), sa.ForeignKey("mentors.id", ondelete="SET NULL"), nullable=True),
        sa.Column("answered_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("notification_sent", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("notification_sent_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("notification_error", sa.Text, nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_questions_student_email", "questions", ["student_email"])
    op.create_index("ix_questions_student_phone", "questions", ["student_phone"])
    op.create_index("ix_questions_subject", "questions", ["subject"])
    op.create_index("ix_questions_assigned_mentor_id", "questions", ["assigned_mentor_id"])
    op.create_index("ix_questions_answered_by_mentor_id", "questions", ["answered_by_mentor_id"])
    op.create_index("ix_questions_status_answered_at", "questions", ["status", "answered_at"])
    op.create_index("ix_questions_created_at", "questions", ["created_at"])


def downgrade():
    op.drop_table("questions")
    op.drop_table("mentors")
    sa.Enum(name="question_status_enum").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="mentor_status_enum").drop(op.get_bind(), checkfirst=True)
