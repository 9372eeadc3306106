"""Initial schema

Revision ID: 001_initial
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Users table
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("medical_conditions", sa.JSON(), nullable=False),
        sa.Column("preferred_language", sa.String(10), nullable=False, server_default="en"),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)
    op.create_index(op.f("ix_users_id"), "users", ["id"], unique=False)

    # Assessments table
    op.create_table(
        "assessments",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("pain_level", sa.Integer(), nullable=True, server_default="0"),
        sa.Column("pain_location", sa.String(100), nullable=True),
        sa.Column("pain_type", sa.String(200), nullable=True),
        sa.Column("pain_duration", sa.String(100), nullable=True),
        sa.Column("symptoms", sa.JSON(), nullable=True),
        sa.Column("red_flags", sa.JSON(), nullable=True),
        sa.Column("protocol_key_selected", sa.String(100), nullable=True),
        sa.Column("phase_number_selected", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_assessments_id"), "assessments", ["id"], unique=False)
    op.create_index(op.f("ix_assessments_user_id"), "assessments", ["user_id"], unique=False)
    op.create_index(op.f("ix_assessments_created_at"), "assessments", ["created_at"], unique=False)
    op.create_index(
        op.f("ix_assessments_protocol_key_selected"), "assessments", ["protocol_key_selected"], unique=False
    )

    # Exercise Videos table
    op.create_table(
        "exercise_videos",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("body_parts", sa.JSON(), nullable=True),
        sa.Column("difficulty", sa.String(20), nullable=True, server_default="Beginner"),
        sa.Column("youtube_video_id", sa.String(50), nullable=True),
        sa.Column("thumbnail_url", sa.String(500), nullable=True),
        sa.Column("recommended_sets", sa.Integer(), nullable=True),
        sa.Column("recommended_reps", sa.Integer(), nullable=True),
        sa.Column("recommended_hold_seconds", sa.Integer(), nullable=True),
        sa.Column("display_order", sa.Integer(), nullable=True, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=True, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_exercise_videos_id"), "exercise_videos", ["id"], unique=False)

    # Exercise Routines table
    op.create_table(
        "exercise_routines",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_exercise_routines_id"), "exercise_routines", ["id"], unique=False)

    # Routine Exercises table
    op.create_table(
        "routine_exercises",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("routine_id", sa.Integer(), nullable=False),
        sa.Column("exercise_id", sa.Integer(), nullable=False),
        sa.Column("display_order", sa.Integer(), nullable=True, server_default="0"),
        sa.Column("sets_override", sa.Integer(), nullable=True),
        sa.Column("reps_override", sa.Integer(), nullable=True),
        sa.Column("hold_seconds_override", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["routine_id"], ["exercise_routines.id"]),
        sa.ForeignKeyConstraint(["exercise_id"], ["exercise_videos.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_routine_exercises_id"), "routine_exercises", ["id"], unique=False)
    op.create_index(op.f("ix_routine_exercises_routine_id"), "routine_exercises", ["routine_id"], unique=False)

    # Protocols table
    op.create_table(
        "protocols",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("protocol_key", sa.String(100), nullable=False),
        sa.Column("region", sa.String(50), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=True, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_protocols_id"), "protocols", ["id"], unique=False)
    op.create_index(op.f("ix_protocols_protocol_key"), "protocols", ["protocol_key"], unique=True)

    # Protocol Phases table
    op.create_table(
        "protocol_phases",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("protocol_id", sa.Integer(), nullable=False),
        sa.Column("phase_number", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("week_start", sa.Integer(), nullable=True, server_default="0"),
        sa.Column("week_end", sa.Integer(), nullable=True),
        sa.Column("goals", sa.JSON(), nullable=True),
        sa.Column("precautions", sa.JSON(), nullable=True),
        sa.Column("progress_criteria", sa.JSON(), nullable=True),
        sa.ForeignKeyConstraint(["protocol_id"], ["protocols.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("protocol_id", "phase_number"),
    )
    op.create_index(op.f("ix_protocol_phases_id"), "protocol_phases", ["id"], unique=False)
    op.create_index(op.f("ix_protocol_phases_protocol_id"), "protocol_phases", ["protocol_id"], unique=False)

    # Phase Routines table
    op.create_table(
        "phase_routines",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("protocol_key", sa.String(100), nullable=True),
        sa.Column("phase_number", sa.Integer(), nullable=True),
        sa.Column("protocol_phase_id", sa.Integer(), nullable=True),
        sa.Column("routine_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["protocol_phase_id"], ["protocol_phases.id"]),
        sa.ForeignKeyConstraint(["routine_id"], ["exercise_routines.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_phase_routines_id"), "phase_routines", ["id"], unique=False)
    op.create_index(op.f("ix_phase_routines_protocol_key"), "phase_routines", ["protocol_key"], unique=False)
    op.create_index(
        op.f("ix_phase_routines_protocol_phase_id"), "phase_routines", ["protocol_phase_id"], unique=False
    )

    # Protocol Precautions table
    op.create_table(
        "protocol_precautions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("protocol_key", sa.String(100), nullable=False),
        sa.Column("phase_number", sa.Integer(), nullable=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("bullets", sa.JSON(), nullable=True),
        sa.Column("severity", sa.String(20), nullable=True, server_default="info"),
        sa.Column("display_order", sa.Integer(), nullable=True, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=True, server_default=sa.true()),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_protocol_precautions_id"), "protocol_precautions", ["id"], unique=False)
    op.create_index(
        op.f("ix_protocol_precautions_protocol_key"), "protocol_precautions", ["protocol_key"], unique=False
    )

    # Questionnaires table
    op.create_table(
        "questionnaires",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("key", sa.String(50), nullable=False),
        sa.Column("display_name", sa.String(200), nullable=False),
        sa.Column("body_region", sa.String(50), nullable=True, server_default="general"),
        sa.Column("min_score", sa.Float(), nullable=True),
        sa.Column("max_score", sa.Float(), nullable=True),
        sa.Column("mcid", sa.Float(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_questionnaires_id"), "questionnaires", ["id"], unique=False)
    op.create_index(op.f("ix_questionnaires_key"), "questionnaires", ["key"], unique=True)

    # Outcome Assessments table
    op.create_table(
        "outcome_assessments",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("questionnaire_key", sa.String(50), nullable=False),
        sa.Column("context_type", sa.String(20), nullable=True, server_default="baseline"),
        sa.Column("condition_tag", sa.String(50), nullable=False),
        sa.Column("related_assessment_id", sa.Integer(), nullable=True),
        sa.Column("total_score", sa.Float(), nullable=True),
        sa.Column("normalized_score", sa.Float(), nullable=True),
        sa.Column("interpretation", sa.String(100), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["related_assessment_id"], ["assessments.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_outcome_assessments_id"), "outcome_assessments", ["id"], unique=False)
    op.create_index(op.f("ix_outcome_assessments_user_id"), "outcome_assessments", ["user_id"], unique=False)
    op.create_index(
        op.f("ix_outcome_assessments_questionnaire_key"), "outcome_assessments", ["questionnaire_key"], unique=False
    )
    op.create_index(
        op.f("ix_outcome_assessments_condition_tag"), "outcome_assessments", ["condition_tag"], unique=False
    )
    op.create_index(
        op.f("ix_outcome_assessments_created_at"), "outcome_assessments", ["created_at"], unique=False
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_outcome_assessments_created_at"), table_name="outcome_assessments")
    op.drop_index(op.f("ix_outcome_assessments_condition_tag"), table_name="outcome_assessments")
    op.drop_index(op.f("ix_outcome_assessments_questionnaire_key"), table_name="outcome_assessments")
    op.drop_index(op.f("ix_outcome_assessments_user_id"), table_name="outcome_assessments")
    op.drop_index(op.f("ix_outcome_assessments_id"), table_name="outcome_assessments")
    op.drop_table("outcome_assessments")

    op.drop_index(op.f("ix_questionnaires_key"), table_name="questionnaires")
    op.drop_index(op.f("ix_questionnaires_id"), table_name="questionnaires")
    op.drop_table("questionnaires")

    op.drop_index(op.f("ix_protocol_precautions_protocol_key"), table_name="protocol_precautions")
    op.drop_index(op.f("ix_protocol_precautions_id"), table_name="protocol_precautions")
    op.drop_table("protocol_precautions")

    op.drop_index(op.f("ix_phase_routines_protocol_phase_id"), table_name="phase_routines")
    op.drop_index(op.f("ix_phase_routines_protocol_key"), table_name="phase_routines")
    op.drop_index(op.f("ix_phase_routines_id"), table_name="phase_routines")
    op.drop_table("phase_routines")

    op.drop_index(op.f("ix_protocol_phases_protocol_id"), table_name="protocol_phases")
    op.drop_index(op.f("ix_protocol_phases_id"), table_name="protocol_phases")
    op.drop_table("protocol_phases")

    op.drop_index(op.f("ix_protocols_protocol_key"), table_name="protocols")
    op.drop_index(op.f("ix_protocols_id"), table_name="protocols")
    op.drop_table("protocols")

    op.drop_index(op.f("ix_routine_exercises_routine_id"), table_name="routine_exercises")
    op.drop_index(op.f("ix_routine_exercises_id"), table_name="routine_exercises")
    op.drop_table("routine_exercises")

    op.drop_index(op.f("ix_exercise_routines_id"), table_name="exercise_routines")
    op.drop_table("exercise_routines")

    op.drop_index(op.f("ix_exercise_videos_id"), table_name="exercise_videos")
    op.drop_table("exercise_videos")

    op.drop_index(op.f("ix_assessments_protocol_key_selected"), table_name="assessments")
    op.drop_index(op.f("ix_assessments_created_at"), table_name="assessments")
    op.drop_index(op.f("ix_assessments_user_id"), table_name="assessments")
    op.drop_index(op.f("ix_assessments_id"), table_name="assessments")
    op.drop_table("assessments")

    op.drop_index(op.f("ix_users_id"), table_name="users")
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_table("users")
