"""Card catalog models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator


# Option keys every multiple-choice card carries
CHOICE_KEYS: tuple[str, ...] = ("A", "B", "C", "D")


class CardBase(BaseModel):
    """Fields of a card that are safe to show before the card is answered."""

    id: str = Field(..., min_length=1, description="Stable card identifier")
    unit_id: str = Field(..., min_length=1, description="Unit the card belongs to")
    subtopic: str = Field(..., min_length=1, description="Grammar subtopic within the unit")
    prompt: str = Field(..., min_length=1, description="Question shown to the learner")
    choices: dict[str, str] = Field(..., description="Option key (A-D) to option text")
    explanation: str = Field(..., min_length=1, description="Why the correct option is correct")
    difficulty: int = Field(1, ge=1, description="Small positive difficulty rating")
    tags: list[str] = Field(default_factory=list, description="Free-form content tags")


class Card(CardBase):
    """Full card as stored in the catalog. Immutable."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "id": "card_3f1c0a9b2d4e5f6a7b8c9d0e",
                "unit_id": "unit-1",
                "subtopic": "subject-verb agreement",
                "prompt": "The list of items ___ on the desk.",
                "choices": {"A": "are", "B": "is", "C": "were", "D": "be"},
                "correct_choice": "B",
                "explanation": "The subject is 'list', which is singular.",
                "difficulty": 1,
                "tags": ["agreement"],
            }
        },
    )

    correct_choice: str = Field(..., description="Key of the correct option")

    @model_validator(mode="after")
    def _check_choices(self) -> "Card":
        if sorted(self.choices) != list(CHOICE_KEYS):
            raise ValueError(f"choices must have exactly the keys {', '.join(CHOICE_KEYS)}")

        texts = [text.strip() for text in self.choices.values()]
        if any(not text for text in texts):
            raise ValueError("choice texts must be non-empty")
        # Options differing only in case count as the same option
        if len({text.lower() for text in texts}) != len(texts):
            raise ValueError("choice texts must be distinct")

        if self.correct_choice not in self.choices:
            raise ValueError(f"correct_choice must be one of {', '.join(CHOICE_KEYS)}")
        return self


class UnitSummary(BaseModel):
    """A unit of the catalog and how many cards it holds."""

    unit_id: str
    card_count: int = Field(..., ge=0)


class UnitListResponse(BaseModel):
    """Response for GET /api/cards/units."""

    units: list[UnitSummary]
    count: int
