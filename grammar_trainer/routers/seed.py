"""Seed API router for populating the card catalog."""

import logging
from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from grammar_trainer.auth import get_current_user, CurrentUser
from grammar_trainer.catalog import CatalogValidationError, load_cards_file, parse_cards
from grammar_trainer.config import get_trainer_settings
from grammar_trainer.errors import StoreUnavailableError
from grammar_trainer.repositories import get_card_repository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/seed", tags=["seed"])


def _sample(unit, subtopic, prompt, choices, correct, explanation, difficulty):
    return {
        "unit": unit,
        "subtopic": subtopic,
        "prompt": prompt,
        "choices": dict(zip("ABCD", choices)),
        "correct_answer": correct,
        "explanation": explanation,
        "difficulty": difficulty,
    }


# Sample data
SAMPLE_CARDS = [
    _sample(
        "unit-1", "subject-verb agreement",
        "The list of items ___ on the desk.",
        ["are", "is", "were", "be"], "B",
        "The subject is 'list', which is singular.", 1,
    ),
    _sample(
        "unit-1", "subject-verb agreement",
        "Neither the manager nor the workers ___ ready.",
        ["is", "was", "are", "be"], "C",
        "With 'neither...nor' the verb agrees with the nearer subject, 'workers'.", 2,
    ),
    _sample(
        "unit-1", "subject-verb agreement",
        "Each of the players ___ a uniform.",
        ["have", "has", "are having", "were having"], "B",
        "'Each' is singular and takes a singular verb.", 2,
    ),
    _sample(
        "unit-1", "pronoun case",
        "Between you and ___, the plan will not work.",
        ["I", "me", "myself", "mine"], "B",
        "'Between' is a preposition, so it takes the object pronoun 'me'.", 1,
    ),
    _sample(
        "unit-1", "pronoun case",
        "___ and Maria went to the library.",
        ["Her", "Hers", "She", "Herself"], "C",
        "The pronoun is part of the subject, so the subject case 'she' is needed.", 1,
    ),
    _sample(
        "unit-2", "verb tense",
        "By the time we arrived, the film ___.",
        ["already started", "has already started", "had already started", "already starts"], "C",
        "An action completed before another past action uses the past perfect.", 2,
    ),
    _sample(
        "unit-2", "verb tense",
        "She ___ in Paris since 2019.",
        ["lives", "has lived", "lived", "is living"], "B",
        "'Since' with a period reaching the present calls for the present perfect.", 1,
    ),
    _sample(
        "unit-2", "modifiers",
        "___, the dog wagged its tail.",
        ["Happy to see us", "Seeing us happily it", "While happy we", "Happily we saw"], "A",
        "The introductory phrase must describe the subject that follows, the dog.", 3,
    ),
    _sample(
        "unit-2", "modifiers",
        "Which sentence places the modifier correctly?",
        [
            "She almost ate the whole cake.",
            "She ate almost the whole cake.",
            "Almost she ate the whole cake.",
            "She ate the whole almost cake.",
        ], "B",
        "'Almost' belongs next to 'the whole cake', the quantity it limits.", 2,
    ),
    _sample(
        "unit-2", "punctuation",
        "Choose the correctly punctuated sentence.",
        [
            "It's tail was wagging.",
            "Its tail was wagging.",
            "Its' tail was wagging.",
            "It is tail was wagging.",
        ], "B",
        "'Its' is the possessive form; 'it's' means 'it is'.", 1,
    ),
]


class SeedResponse(BaseModel):
    """Response from seed operation."""

    message: str
    cards_upserted: int
    source: str


@router.post("", response_model=SeedResponse, status_code=status.HTTP_201_CREATED)
async def seed_catalog(
    user: Annotated[CurrentUser, Depends(get_current_user)]
) -> SeedResponse:
    """Load the sample catalog, or the dataset at CARD_DATASET_PATH when set.

    Cards are upserted by their derived ids, so seeding twice is harmless.
    """
    dataset_path = get_trainer_settings().card_dataset_path
    try:
        if dataset_path:
            cards = load_cards_file(dataset_path)
            source = dataset_path
        else:
            cards = parse_cards(SAMPLE_CARDS)
            source = "sample"
    except CatalogValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "Card dataset failed validation", "errors": e.errors},
        )
    except (OSError, ValueError) as e:
        # Unreadable file or malformed JSON
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Card dataset could not be read: {e}",
        )

    try:
        written = get_card_repository().upsert_many(cards)
    except StoreUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)

    logger.info("User %s seeded %d cards from %s", user.user_id, written, source)
    return SeedResponse(
        message="Card catalog seeded successfully",
        cards_upserted=written,
        source=source,
    )
