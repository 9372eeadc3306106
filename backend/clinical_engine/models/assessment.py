from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from clinical_engine.database import Base


class Assessment(Base):
    """Completed symptom assessment. A selected protocol drives phase assignment."""
    __tablename__ = "assessments"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, index=True, nullable=False, default=datetime.utcnow)

    # Symptom report
    pain_level: Mapped[int] = mapped_column(Integer, default=0)  # 0-10
    pain_location: Mapped[str | None] = mapped_column(String(100), nullable=True)
    pain_type: Mapped[str | None] = mapped_column(String(200), nullable=True)
    pain_duration: Mapped[str | None] = mapped_column(String(100), nullable=True)
    symptoms: Mapped[list] = mapped_column(JSON, default=list)
    red_flags: Mapped[list] = mapped_column(JSON, default=list)

    # Post-operative protocol assignment
    protocol_key_selected: Mapped[str | None] = mapped_column(String(100), index=True, nullable=True)
    phase_number_selected: Mapped[int | None] = mapped_column(Integer, nullable=True)

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    user = relationship("User", back_populates="assessments")
