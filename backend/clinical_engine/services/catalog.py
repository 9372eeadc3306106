"""
Exercise Catalog - Immutable in-memory library of curated exercises.

The catalog is reference data: loaded once, never mutated, and injectable
so callers and tests can swap in smaller fixtures.
"""
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Optional

import yaml

from clinical_engine.exceptions import CatalogError
from clinical_engine.schemas.enums import Difficulty, ExerciseCategory

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent.parent / "data" / "exercise_catalog.yaml"


@dataclass(frozen=True)
class ExerciseDosage:
    sets: int
    frequency: str
    reps: Optional[int] = None
    duration: Optional[str] = None  # Time-based exercises, e.g. "1-2 minutes"
    hold_time: Optional[str] = None
    rest_between_sets: Optional[str] = None


@dataclass(frozen=True)
class Exercise:
    id: str
    name: str
    description: str
    body_parts: tuple[str, ...]
    pain_types: tuple[str, ...]
    conditions: tuple[str, ...]
    difficulty: Difficulty
    category: ExerciseCategory
    dosage: ExerciseDosage
    max_pain_level: int  # Inclusive upper bound on patient pain (0-10)
    contraindications: tuple[str, ...] = ()
    red_flag_warnings: tuple[str, ...] = ()
    progression_tips: tuple[str, ...] = ()
    regression_tips: tuple[str, ...] = ()
    video_url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "Exercise":
        try:
            return cls(
                id=data["id"],
                name=data["name"],
                description=data.get("description", ""),
                body_parts=tuple(data.get("body_parts", [])),
                pain_types=tuple(data.get("pain_types", [])),
                conditions=tuple(data.get("conditions", [])),
                difficulty=Difficulty(data["difficulty"]),
                category=ExerciseCategory(data["category"]),
                dosage=ExerciseDosage(**data["dosage"]),
                max_pain_level=int(data["max_pain_level"]),
                contraindications=tuple(data.get("contraindications", [])),
                red_flag_warnings=tuple(data.get("red_flag_warnings", [])),
                progression_tips=tuple(data.get("progression_tips", [])),
                regression_tips=tuple(data.get("regression_tips", [])),
                video_url=data.get("video_url"),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise CatalogError(f"Invalid exercise entry {data.get('id', '?')!r}: {e}") from e


@dataclass(frozen=True)
class ExerciseCatalog:
    """Ordered, read-only collection of exercises."""
    exercises: tuple[Exercise, ...] = field(default_factory=tuple)

    def __post_init__(self):
        ids = [e.id for e in self.exercises]
        if len(ids) != len(set(ids)):
            raise CatalogError("Exercise ids must be unique")

    def __iter__(self) -> Iterator[Exercise]:
        return iter(self.exercises)

    def __len__(self) -> int:
        return len(self.exercises)

    def get(self, exercise_id: str) -> Optional[Exercise]:
        for exercise in self.exercises:
            if exercise.id == exercise_id:
                return exercise
        return None

    @classmethod
    def from_entries(cls, entries: list[dict]) -> "ExerciseCatalog":
        return cls(tuple(Exercise.from_dict(entry) for entry in entries))

    @classmethod
    def from_yaml(cls, path: str | Path) -> "ExerciseCatalog":
        """Load a catalog from a YAML file with a top-level `exercises` list."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}

        catalog = cls.from_entries(data.get("exercises", []))
        logger.info(
            "Exercise catalog loaded",
            extra={"path": str(path), "exercise_count": len(catalog)},
        )
        return catalog


# Process-wide catalog instance
_catalog: Optional[ExerciseCatalog] = None


def get_exercise_catalog() -> ExerciseCatalog:
    """Get the current exercise catalog, loading the bundled one on first use."""
    global _catalog
    if _catalog is None:
        _catalog = ExerciseCatalog.from_yaml(DEFAULT_CATALOG_PATH)
    return _catalog


def set_exercise_catalog(catalog: Optional[ExerciseCatalog]) -> None:
    """Replace the catalog (None resets to the bundled library on next access)."""
    global _catalog
    _catalog = catalog


def load_exercise_catalog_from_yaml(path: str | Path) -> ExerciseCatalog:
    """Load and set the exercise catalog from a YAML file."""
    catalog = ExerciseCatalog.from_yaml(path)
    set_exercise_catalog(catalog)
    return catalog
