"""
Scoring Configuration - Configurable weights and thresholds for the decision engine.

All "magic numbers" are centralized here for easy tuning without code changes.
"""
from dataclasses import dataclass, field
from typing import Optional

import yaml
from pathlib import Path


@dataclass
class MatcherConfig:
    """Exercise matching weights (total per exercise never exceeds 100)."""
    body_part_points: int = 40
    pain_type_points: int = 20

    # Difficulty appropriateness
    high_pain_threshold: int = 7  # pain_level >= this counts as high pain
    gentle_points: int = 20  # Beginner exercise under high pain
    appropriate_points: int = 15  # Non-advanced exercise under lower pain

    # Awarded when exercise.max_pain_level >= pain_level
    safety_points: int = 20

    # Symptom/condition keyword bonus
    symptom_points: int = 5
    symptom_points_cap: int = 10

    # Upper bound on a total score; the symptom bonus only fills remaining headroom
    max_score: int = 100

    # Keyword marking a chronic duration (detected, not scored)
    chronic_duration_keyword: str = "month"


@dataclass
class RecommendationConfig:
    """Presentation-layer selection of ranked exercises."""
    min_score: int = 40
    max_results: int = 5
    min_results: int = 3


@dataclass
class ResolverConfig:
    """Protocol/phase resolution configuration."""
    default_phase_number: int = 1
    fallback_limit: int = 10
    fallback_regions: list[str] = field(
        default_factory=lambda: ["shoulder", "knee", "hip", "elbow", "foot_ankle", "ankle"]
    )


@dataclass
class OutcomeConfig:
    """Outcome tracking thresholds."""
    # Days since the last assessment before a follow-up is due
    follow_up_days: int = 14

    # Minimal clinically important differences per questionnaire key
    mcid: dict[str, float] = field(
        default_factory=lambda: {
            "odi": 10.0,
            "koos": 8.0,
            "quickdash": 8.0,
            "nprs": 2.0,
            "groc": 2.0,
        }
    )
    # Used for a function instrument with no configured MCID
    default_function_mcid: float = 10.0


@dataclass
class ScoringConfig:
    """Master configuration for all decision engine parameters."""
    matcher: MatcherConfig = field(default_factory=MatcherConfig)
    recommendations: RecommendationConfig = field(default_factory=RecommendationConfig)
    resolver: ResolverConfig = field(default_factory=ResolverConfig)
    outcomes: OutcomeConfig = field(default_factory=OutcomeConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "ScoringConfig":
        """Load configuration from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}

        config = cls()

        if "matcher" in data:
            config.matcher = MatcherConfig(**data["matcher"])
        if "recommendations" in data:
            config.recommendations = RecommendationConfig(**data["recommendations"])
        if "resolver" in data:
            config.resolver = ResolverConfig(**data["resolver"])
        if "outcomes" in data:
            outcomes = dict(data["outcomes"])
            # Partial MCID maps extend the defaults
            mcid = {**OutcomeConfig().mcid, **outcomes.pop("mcid", {})}
            config.outcomes = OutcomeConfig(mcid=mcid, **outcomes)

        return config

    def to_dict(self) -> dict:
        """Convert configuration to dictionary."""
        return {
            "matcher": self.matcher.__dict__,
            "recommendations": self.recommendations.__dict__,
            "resolver": self.resolver.__dict__,
            "outcomes": self.outcomes.__dict__,
        }


# Global default configuration instance
_default_config: Optional[ScoringConfig] = None


def get_scoring_config() -> ScoringConfig:
    """Get the current scoring configuration (singleton pattern)."""
    global _default_config
    if _default_config is None:
        _default_config = ScoringConfig()
    return _default_config


def set_scoring_config(config: Optional[ScoringConfig]) -> None:
    """Set a custom scoring configuration (None restores the defaults)."""
    global _default_config
    _default_config = config


def load_scoring_config_from_yaml(path: str | Path) -> ScoringConfig:
    """Load and set scoring configuration from YAML file."""
    config = ScoringConfig.from_yaml(path)
    set_scoring_config(config)
    return config
