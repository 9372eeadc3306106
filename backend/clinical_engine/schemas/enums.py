from enum import Enum


class Difficulty(str, Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


class ExerciseCategory(str, Enum):
    STRETCH = "stretch"
    STRENGTHENING = "strengthening"
    MOBILITY = "mobility"
    NERVE_GLIDE = "nerve_glide"
    POSTURAL = "postural"


class RiskLevel(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    CRITICAL = "critical"


class QuestionnaireKey(str, Enum):
    ODI = "odi"
    KOOS = "koos"
    QUICKDASH = "quickdash"
    NPRS = "nprs"  # Numeric pain rating scale
    GROC = "groc"


class InstrumentRole(str, Enum):
    FUNCTION = "function"
    PAIN = "pain"
    GLOBAL = "global"


class Polarity(str, Enum):
    LOWER_IS_BETTER = "lower_is_better"
    HIGHER_IS_BETTER = "higher_is_better"


class ContextType(str, Enum):
    BASELINE = "baseline"
    FOLLOWUP = "followup"
    FINAL = "final"


class Improvement(str, Enum):
    IMPROVED = "improved"
    WORSENED = "worsened"
    SAME = "same"


# Canonical body part -> free-text aliases
BODY_PART_ALIASES: dict[str, list[str]] = {
    "lower back": ["lower back", "lumbar", "low back", "lumbosacral"],
    "upper back": ["upper back", "thoracic", "mid back", "middle back"],
    "neck": ["neck", "cervical", "cervicothoracic"],
    "shoulder": ["shoulder", "rotator cuff", "deltoid"],
    "elbow": ["elbow", "forearm"],
    "wrist": ["wrist", "hand", "carpal"],
    "hip": ["hip", "pelvis", "groin"],
    "knee": ["knee", "patella", "patellar"],
    "ankle": ["ankle", "foot", "achilles"],
}

# Condition tag -> function questionnaire
CONDITION_QUESTIONNAIRE_MAP: dict[str, QuestionnaireKey] = {
    "back": QuestionnaireKey.ODI,
    "knee": QuestionnaireKey.KOOS,
    "shoulder": QuestionnaireKey.QUICKDASH,
}

# Symptoms that escalate severe pain to high risk
CONCERNING_SYMPTOMS: list[str] = [
    "Numbness or tingling",
    "Muscle weakness",
    "Weakness in both legs",
]
