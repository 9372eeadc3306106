from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from clinical_engine.database import Base


class Questionnaire(Base):
    """Standardized outcome instrument (ODI, KOOS, QuickDASH, NPRS, GROC)."""
    __tablename__ = "questionnaires"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    key: Mapped[str] = mapped_column(String(50), unique=True, index=True, nullable=False)
    display_name: Mapped[str] = mapped_column(String(200), nullable=False)
    body_region: Mapped[str] = mapped_column(String(50), default="general")
    min_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    max_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    # Minimal clinically important difference
    mcid: Mapped[float | None] = mapped_column(Float, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)


class OutcomeAssessment(Base):
    """Append-only questionnaire submission. Rows are never updated."""
    __tablename__ = "outcome_assessments"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True, nullable=False)
    questionnaire_key: Mapped[str] = mapped_column(String(50), index=True, nullable=False)
    context_type: Mapped[str] = mapped_column(String(20), default="baseline")  # baseline, followup, final
    condition_tag: Mapped[str] = mapped_column(String(50), index=True, nullable=False)
    related_assessment_id: Mapped[int | None] = mapped_column(ForeignKey("assessments.id"), nullable=True)
    total_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    normalized_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    interpretation: Mapped[str | None] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, index=True, nullable=False, default=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="outcome_assessments")
