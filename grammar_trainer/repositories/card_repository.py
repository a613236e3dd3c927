"""Repository for the card catalog."""

import logging
import threading
from collections import Counter
from collections.abc import Iterable

from azure.cosmos import ContainerProxy
from cachetools import TTLCache

from grammar_trainer.config import get_trainer_settings
from grammar_trainer.db import get_cards_container, translate_store_errors
from grammar_trainer.errors import NotFoundError
from grammar_trainer.models import Card

logger = logging.getLogger(__name__)

_CATALOG_KEY = "catalog"


class CardNotFoundError(NotFoundError):
    """Raised when a card is not found."""

    pass


class CardRepository:
    """Read access to the catalog, plus bulk upserts for seeding.

    The catalog is small and immutable between imports, so the full card
    list is cached for a short time. Progress is never cached.
    """

    def __init__(self, container: ContainerProxy | None = None, cache_ttl: int | None = None):
        """Initialize the repository with an optional container."""
        self._container = container
        if cache_ttl is None:
            cache_ttl = get_trainer_settings().catalog_cache_seconds
        self._cache: TTLCache[str, list[Card]] = TTLCache(maxsize=1, ttl=max(cache_ttl, 1))
        self._lock = threading.Lock()

    @property
    def container(self) -> ContainerProxy:
        """Get the container, lazily initializing if needed."""
        if self._container is None:
            self._container = get_cards_container()
        return self._container

    def list_cards(self) -> list[Card]:
        """Return the whole catalog ordered by card id."""
        with self._lock:
            cached = self._cache.get(_CATALOG_KEY)
        if cached is not None:
            return cached

        with translate_store_errors("list cards"):
            items = list(
                self.container.query_items(
                    query="SELECT * FROM c",
                    enable_cross_partition_query=True,
                )
            )
        cards = sorted((Card(**item) for item in items), key=lambda card: card.id)

        with self._lock:
            self._cache[_CATALOG_KEY] = cards
        return cards

    def get_by_id(self, card_id: str) -> Card:
        """Get a card by ID."""
        for card in self.list_cards():
            if card.id == card_id:
                return card
        raise CardNotFoundError(f"Card with ID {card_id} not found")

    def count_by_unit(self) -> dict[str, int]:
        """Return the number of cards in each unit."""
        counts = Counter(card.unit_id for card in self.list_cards())
        return dict(sorted(counts.items()))

    def upsert_many(self, cards: Iterable[Card]) -> int:
        """Create or update cards. Returns how many were written."""
        written = 0
        with translate_store_errors("upsert cards"):
            for card in cards:
                self.container.upsert_item(body=card.model_dump())
                written += 1
        self.clear_cache()
        logger.info("Upserted %d cards into the catalog", written)
        return written

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()


# Singleton instance
_card_repository: CardRepository | None = None


def get_card_repository() -> CardRepository:
    """Get the card repository singleton."""
    global _card_repository
    if _card_repository is None:
        _card_repository = CardRepository()
    return _card_repository
