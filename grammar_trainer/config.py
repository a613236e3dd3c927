"""Trainer configuration loaded from environment variables."""

import os
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel

from grammar_trainer.srs.mastery import CardCountModel, MasteryModel, SubtopicCoverageModel


class TrainerSettings(BaseModel):
    """Settings for scheduling, dashboard and catalog behaviour."""

    mastery_model: Literal["card_count", "subtopic_coverage"] = "subtopic_coverage"
    unit_completion_threshold: int = 15  # card_count model
    subtopic_min_mastered: int = 3  # subtopic_coverage model
    subtopic_completion_fraction: float = 0.8  # subtopic_coverage model
    card_dataset_path: str = ""  # JSON dataset used by /api/seed instead of the sample cards
    catalog_cache_seconds: int = 300

    def build_mastery_model(self) -> MasteryModel:
        """Return the configured mastery model variant."""
        if self.mastery_model == "card_count":
            return CardCountModel(threshold=self.unit_completion_threshold)
        return SubtopicCoverageModel(
            min_mastered_per_subtopic=self.subtopic_min_mastered,
            completion_fraction=self.subtopic_completion_fraction,
        )


@lru_cache()
def get_trainer_settings() -> TrainerSettings:
    """Get cached trainer settings from environment variables."""
    return TrainerSettings(
        mastery_model=os.getenv("MASTERY_MODEL", "subtopic_coverage").strip().lower(),
        unit_completion_threshold=int(os.getenv("UNIT_COMPLETION_THRESHOLD", "15")),
        subtopic_min_mastered=int(os.getenv("SUBTOPIC_MIN_MASTERED", "3")),
        subtopic_completion_fraction=float(os.getenv("SUBTOPIC_COMPLETION_FRACTION", "0.8")),
        card_dataset_path=os.getenv("CARD_DATASET_PATH", ""),
        catalog_cache_seconds=int(os.getenv("CATALOG_CACHE_SECONDS", "300")),
    )
