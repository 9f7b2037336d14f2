"""In-process concept and skill mastery estimates."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List


LOGGER = logging.getLogger(__name__)

BASELINE_MASTERY = 0.5
CORRECT_DELTA = 0.1
INCORRECT_DELTA = -0.05
DEFAULT_LEVELS = 19
DEFAULT_SKILLS = (
    "critical-thinking",
    "pattern-recognition",
    "system-design",
    "debugging",
    "optimization",
)


class MasteryTracker:
    """Maintain 0..1 mastery scores per concept and per skill."""

    def __init__(self) -> None:
        self._concepts: Dict[str, float] = {}
        self._skills: Dict[str, float] = {}

    def initialize(
        self,
        tracks: Iterable[str],
        levels: int = DEFAULT_LEVELS,
        skills: Iterable[str] = DEFAULT_SKILLS,
    ) -> None:
        """Seed every ``<track>-level-<n>`` concept and each skill at the baseline."""
        for track in tracks:
            for level in range(1, levels + 1):
                self._concepts[f"{track}-level-{level}"] = BASELINE_MASTERY
        for skill in skills:
            self._skills[skill] = BASELINE_MASTERY
        LOGGER.info(
            "Initialized mastery for %s concepts and %s skills.",
            len(self._concepts),
            len(self._skills),
        )

    def update_mastery(self, concept_id: str, is_correct: bool, confidence: float = 1.0) -> float:
        """Nudge a concept's mastery after an answer and return the new score."""
        current = self._concepts.get(concept_id, BASELINE_MASTERY)
        delta = CORRECT_DELTA if is_correct else INCORRECT_DELTA
        updated = max(0.0, min(1.0, current + delta * confidence))
        self._concepts[concept_id] = updated
        return updated

    def get_mastery_score(self, concept_id: str) -> float:
        return self._concepts.get(concept_id, BASELINE_MASTERY)

    def get_skill_score(self, skill: str) -> float:
        return self._skills.get(skill, BASELINE_MASTERY)

    def get_track_mastery(self, track: str) -> float:
        """Average mastery of the concepts belonging to a track."""
        scores = [score for concept_id, score in self._concepts.items() if concept_id.startswith(track)]
        if not scores:
            return BASELINE_MASTERY
        return sum(scores) / len(scores)

    def identify_weak_areas(self, track: str, threshold: float = 0.4) -> List[str]:
        """Return the track's concepts scoring below ``threshold``."""
        return [
            concept_id
            for concept_id, score in self._concepts.items()
            if concept_id.startswith(track) and score < threshold
        ]

    def export(self) -> Dict[str, Dict[str, float]]:
        return {"concepts": dict(self._concepts), "skills": dict(self._skills)}
