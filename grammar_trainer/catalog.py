"""Card dataset parsing and validation.

Datasets are JSON arrays of raw entries shaped like::

    {
        "unit": "unit-1",
        "subtopic": "subject-verb agreement",
        "prompt": "The list of items ___ on the desk.",
        "choices": {"A": "are", "B": "is", "C": "were", "D": "be"},
        "correct_answer": "B",
        "explanation": "The subject is 'list', which is singular.",
        "difficulty": 1,
        "tags": ["agreement"]
    }

Card ids are derived from unit, subtopic and prompt, so re-importing a
dataset updates cards in place instead of duplicating them.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

from grammar_trainer.models.card import CHOICE_KEYS, Card


MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 3


class CatalogValidationError(ValueError):
    """Raised when dataset entries fail validation."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("; ".join(errors))


def make_card_id(unit: str, subtopic: str, prompt: str) -> str:
    digest = hashlib.sha256(f"{unit}\n{subtopic}\n{prompt}".encode("utf-8")).hexdigest()
    return f"card_{digest[:24]}"


def _non_empty(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def validate_raw_card(raw: Any, index: int = 0) -> list[str]:
    """Return every problem found in one raw dataset entry."""
    prefix = f"card[{index}]"
    if not isinstance(raw, dict):
        return [f"{prefix}: must be an object"]

    errors = []
    for key in ("unit", "subtopic", "prompt", "explanation"):
        if not _non_empty(raw.get(key)):
            errors.append(f"{prefix}.{key} must be a non-empty string")

    correct = raw.get("correct_answer")
    if not isinstance(correct, str) or correct.strip().upper() not in CHOICE_KEYS:
        errors.append(f"{prefix}.correct_answer must be one of: {', '.join(CHOICE_KEYS)}")

    difficulty = raw.get("difficulty")
    if (
        not isinstance(difficulty, int)
        or isinstance(difficulty, bool)
        or not MIN_DIFFICULTY <= difficulty <= MAX_DIFFICULTY
    ):
        errors.append(
            f"{prefix}.difficulty must be an integer between {MIN_DIFFICULTY} and {MAX_DIFFICULTY}"
        )

    tags = raw.get("tags", [])
    if not isinstance(tags, list) or not all(_non_empty(tag) for tag in tags):
        errors.append(f"{prefix}.tags must be a list of non-empty strings")

    choices = raw.get("choices")
    if not isinstance(choices, dict):
        errors.append(f"{prefix}.choices must be an object with {'/'.join(CHOICE_KEYS)} keys")
    else:
        for key in CHOICE_KEYS:
            if not _non_empty(choices.get(key)):
                errors.append(f"{prefix}.choices.{key} must be a non-empty string")
        extra = sorted(set(choices) - set(CHOICE_KEYS))
        if extra:
            errors.append(f"{prefix}.choices has unexpected keys: {', '.join(extra)}")
        texts = [choices[key].strip().lower() for key in CHOICE_KEYS if _non_empty(choices.get(key))]
        if len(set(texts)) != len(texts):
            errors.append(f"{prefix}.choices must be distinct")

    return errors


def parse_card(raw: dict[str, Any], index: int = 0) -> Card:
    """Validate one raw dataset entry and build its Card."""
    errors = validate_raw_card(raw, index)
    if errors:
        raise CatalogValidationError(errors)

    unit = raw["unit"].strip()
    subtopic = raw["subtopic"].strip()
    prompt = raw["prompt"].strip()
    return Card(
        id=make_card_id(unit, subtopic, prompt),
        unit_id=unit,
        subtopic=subtopic,
        prompt=prompt,
        choices={key: raw["choices"][key].strip() for key in CHOICE_KEYS},
        correct_choice=raw["correct_answer"].strip().upper(),
        explanation=raw["explanation"].strip(),
        difficulty=raw["difficulty"],
        tags=[tag.strip() for tag in raw.get("tags", [])],
    )


def parse_cards(raws: list[Any]) -> list[Card]:
    """Validate a whole dataset, reporting every invalid or duplicate entry at once."""
    if not isinstance(raws, list):
        raise CatalogValidationError(["dataset must be a JSON array"])

    errors: list[str] = []
    cards: list[Card] = []
    seen: dict[str, int] = {}
    for index, raw in enumerate(raws):
        entry_errors = validate_raw_card(raw, index)
        if entry_errors:
            errors.extend(entry_errors)
            continue
        card = parse_card(raw, index)
        if card.id in seen:
            errors.append(f"card[{index}]: duplicates card[{seen[card.id]}] (same unit, subtopic and prompt)")
            continue
        seen[card.id] = index
        cards.append(card)

    if errors:
        raise CatalogValidationError(errors)
    return cards


def load_cards_file(path: str | Path) -> list[Card]:
    """Load and validate a JSON dataset file."""
    with open(path, encoding="utf-8") as f:
        raws = json.load(f)
    return parse_cards(raws)
