"""
Safety Rules - Deterministic triage and per-exercise safety guidance.

Triage decides whether an assessment may receive exercise recommendations
at all; the notes accompany every recommended exercise.
"""
from dataclasses import dataclass, field
from typing import Optional

from clinical_engine.schemas.enums import CONCERNING_SYMPTOMS, RiskLevel
from clinical_engine.services.catalog import Exercise
from clinical_engine.services.matcher import SymptomQuery, is_chronic
from clinical_engine.services.scoring_config import MatcherConfig, get_scoring_config

# Pain thresholds for triage
SEVERE_PAIN_THRESHOLD = 8
MODERATE_PAIN_THRESHOLD = 6
CAUTION_PAIN_THRESHOLD = 5

GENERAL_SAFETY_REMINDER = (
    "Consult with a healthcare provider if symptoms worsen or do not improve within 2 weeks."
)


@dataclass
class TriageResult:
    risk_level: RiskLevel
    reason: str
    red_flags: list[str] = field(default_factory=list)

    @property
    def allows_exercise(self) -> bool:
        return self.risk_level != RiskLevel.CRITICAL


def _has_concerning_symptom(symptoms: list[str]) -> bool:
    return any(
        concerning.lower() in symptom.lower()
        for symptom in symptoms
        for concerning in CONCERNING_SYMPTOMS
    )


def assess_risk_level(
    query: SymptomQuery,
    red_flags: list[str],
    config: Optional[MatcherConfig] = None,
) -> TriageResult:
    """
    Triage an assessment.

    critical: any red flag reported
    high:     pain >= 8 with a concerning neurological symptom
    moderate: pain >= 6 or chronic duration
    low:      everything else
    """
    flags = [f for f in red_flags if isinstance(f, str) and f.strip()]
    if flags:
        return TriageResult(
            risk_level=RiskLevel.CRITICAL,
            reason=f"Red flags reported: {', '.join(flags)}",
            red_flags=flags,
        )

    if query.pain_level >= SEVERE_PAIN_THRESHOLD and _has_concerning_symptom(query.symptoms):
        return TriageResult(
            risk_level=RiskLevel.HIGH,
            reason=f"Severe pain ({query.pain_level}/10) with neurological symptoms",
        )

    if query.pain_level >= MODERATE_PAIN_THRESHOLD or is_chronic(query.pain_duration, config):
        return TriageResult(
            risk_level=RiskLevel.MODERATE,
            reason=f"Moderate pain ({query.pain_level}/10) or chronic duration",
        )

    return TriageResult(risk_level=RiskLevel.LOW, reason="Mild pain with recent onset")


def generate_safety_notes(
    query: SymptomQuery,
    exercise: Exercise,
    config: Optional[MatcherConfig] = None,
) -> list[str]:
    """Safety notes for one recommended exercise, most specific first."""
    if config is None:
        config = get_scoring_config().matcher
    notes: list[str] = []

    if query.pain_level >= config.high_pain_threshold:
        notes.append("Start very gently and reduce intensity if pain increases above baseline.")
    elif query.pain_level >= CAUTION_PAIN_THRESHOLD:
        notes.append("Perform within pain-free range. Stop if pain significantly worsens.")

    if exercise.contraindications:
        notes.append(f"Avoid this exercise if you have: {', '.join(exercise.contraindications)}.")

    if "More than 6 months" in query.pain_duration:
        notes.append(
            "For chronic conditions, consistency is key. Start with lower intensity and progress slowly."
        )
    elif "Less than 1 week" in query.pain_duration:
        notes.append(
            "For acute pain, rest may be beneficial. If pain worsens with exercise, pause and reassess."
        )

    if "Numbness or tingling" in query.symptoms:
        notes.append("If numbness or tingling increases during the exercise, stop immediately.")
    if "Muscle weakness" in query.symptoms:
        notes.append("Start with supported positions and progress to unsupported as strength improves.")

    notes.append(GENERAL_SAFETY_REMINDER)
    return notes


NEXT_STEPS: dict[RiskLevel, list[str]] = {
    RiskLevel.CRITICAL: [
        "Seek immediate medical attention",
        "Contact emergency services if symptoms worsen",
        "Visit emergency room or urgent care",
    ],
    RiskLevel.HIGH: [
        "Schedule appointment with healthcare provider within 24-48 hours",
        "Avoid strenuous activities until evaluated",
        "Apply ice for acute injuries, heat for muscle tension",
    ],
    RiskLevel.MODERATE: [
        "Follow recommended exercises below",
        "Track your progress daily",
        "Consider seeing a healthcare provider if no improvement in 1-2 weeks",
    ],
    RiskLevel.LOW: [
        "Start with recommended beginner exercises",
        "Monitor your symptoms and progress",
        "Gradually increase activity as tolerated",
        "Contact healthcare provider if symptoms worsen",
    ],
}


def generate_next_steps(risk_level: RiskLevel, telehealth_available: bool = False) -> list[str]:
    steps = list(NEXT_STEPS[risk_level])
    if telehealth_available and risk_level in (RiskLevel.HIGH, RiskLevel.MODERATE):
        steps.append("Consider booking a virtual consultation for a personalized plan")
    return steps
