from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from clinical_engine.database import Base


class Protocol(Base):
    """Post-operative rehabilitation protocol, e.g. knee_acl_reconstruction."""
    __tablename__ = "protocols"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    protocol_key: Mapped[str] = mapped_column(String(100), unique=True, index=True, nullable=False)
    region: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    phases = relationship(
        "ProtocolPhase",
        back_populates="protocol",
        cascade="all, delete-orphan",
        order_by="ProtocolPhase.phase_number",
    )


class ProtocolPhase(Base):
    __tablename__ = "protocol_phases"
    __table_args__ = (UniqueConstraint("protocol_id", "phase_number"),)

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    protocol_id: Mapped[int] = mapped_column(ForeignKey("protocols.id"), index=True, nullable=False)
    phase_number: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    week_start: Mapped[int] = mapped_column(Integer, default=0)
    week_end: Mapped[int | None] = mapped_column(Integer, nullable=True)

    goals: Mapped[list] = mapped_column(JSON, default=list)
    precautions: Mapped[list] = mapped_column(JSON, default=list)
    progress_criteria: Mapped[list] = mapped_column(JSON, default=list)

    # Relationships
    protocol = relationship("Protocol", back_populates="phases")


class PhaseRoutine(Base):
    """
    Maps a protocol phase to an exercise routine.

    Rows are keyed either by (protocol_key, phase_number) or by protocol_phase_id.
    """
    __tablename__ = "phase_routines"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    protocol_key: Mapped[str | None] = mapped_column(String(100), index=True, nullable=True)
    phase_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    protocol_phase_id: Mapped[int | None] = mapped_column(ForeignKey("protocol_phases.id"), index=True, nullable=True)
    routine_id: Mapped[int] = mapped_column(ForeignKey("exercise_routines.id"), nullable=False)

    # Relationships
    routine = relationship("ExerciseRoutine", lazy="joined")


class ProtocolPrecaution(Base):
    """Safety bullets for a protocol; phase_number NULL applies to every phase."""
    __tablename__ = "protocol_precautions"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    protocol_key: Mapped[str] = mapped_column(String(100), index=True, nullable=False)
    phase_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    bullets: Mapped[list] = mapped_column(JSON, default=list)
    severity: Mapped[str] = mapped_column(String(20), default="info")  # info, warning
    display_order: Mapped[int] = mapped_column(Integer, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
