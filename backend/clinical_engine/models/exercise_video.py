from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from clinical_engine.database import Base


class ExerciseVideo(Base):
    """Stored exercise with video metadata, used by protocol routines."""
    __tablename__ = "exercise_videos"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # e.g. ["Knee", "Hip"]
    body_parts: Mapped[list] = mapped_column(JSON, default=list)
    difficulty: Mapped[str] = mapped_column(String(20), default="Beginner")
    youtube_video_id: Mapped[str | None] = mapped_column(String(50), nullable=True)
    thumbnail_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    recommended_sets: Mapped[int | None] = mapped_column(Integer, nullable=True)
    recommended_reps: Mapped[int | None] = mapped_column(Integer, nullable=True)
    recommended_hold_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)
    display_order: Mapped[int] = mapped_column(Integer, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class ExerciseRoutine(Base):
    __tablename__ = "exercise_routines"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    exercises = relationship(
        "RoutineExercise",
        back_populates="routine",
        cascade="all, delete-orphan",
        order_by="RoutineExercise.display_order",
    )


class RoutineExercise(Base):
    """Ordered routine membership with optional dosage overrides."""
    __tablename__ = "routine_exercises"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    routine_id: Mapped[int] = mapped_column(ForeignKey("exercise_routines.id"), index=True, nullable=False)
    exercise_id: Mapped[int] = mapped_column(ForeignKey("exercise_videos.id"), nullable=False)
    display_order: Mapped[int] = mapped_column(Integer, default=0)
    sets_override: Mapped[int | None] = mapped_column(Integer, nullable=True)
    reps_override: Mapped[int | None] = mapped_column(Integer, nullable=True)
    hold_seconds_override: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Relationships
    routine = relationship("ExerciseRoutine", back_populates="exercises")
    exercise = relationship("ExerciseVideo", lazy="joined")
