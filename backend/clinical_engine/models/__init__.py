# SQLAlchemy Models
from clinical_engine.models.user import User
from clinical_engine.models.assessment import Assessment
from clinical_engine.models.exercise_video import ExerciseRoutine, ExerciseVideo, RoutineExercise
from clinical_engine.models.protocol import PhaseRoutine, Protocol, ProtocolPhase, ProtocolPrecaution
from clinical_engine.models.outcome import OutcomeAssessment, Questionnaire

__all__ = [
    "User",
    "Assessment",
    "ExerciseVideo",
    "ExerciseRoutine",
    "RoutineExercise",
    "Protocol",
    "ProtocolPhase",
    "PhaseRoutine",
    "ProtocolPrecaution",
    "Questionnaire",
    "OutcomeAssessment",
]
