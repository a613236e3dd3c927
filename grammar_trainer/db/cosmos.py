"""
Cosmos DB client and connection management.

Authentication modes:
1. Azure Managed Identity (production): Uses DefaultAzureCredential for passwordless auth
2. Azure CLI credential (local dev with Azure): Uses your `az login` session
3. Cosmos DB Emulator (local dev): Uses emulator key for local development

Containers and their partition keys:
- cards     /unit_id   immutable card catalog
- progress  /user_id   card states, daily scores and review log of one user
- rooms     /id        one document per room, keyed by the room code hash
- users     /room_id   learners of a room

Keeping all progress of a user in one partition is what lets an answer be
written as a single transactional batch.
"""

import os
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from functools import lru_cache
from azure.core.exceptions import AzureError
from azure.cosmos import CosmosClient, DatabaseProxy, ContainerProxy
from azure.cosmos.exceptions import CosmosResourceNotFoundError
from azure.identity import DefaultAzureCredential

from grammar_trainer.errors import StoreUnavailableError

logger = logging.getLogger(__name__)

# Cosmos DB Emulator well-known key (public, not a secret)
# https://learn.microsoft.com/en-us/azure/cosmos-db/emulator#authentication
EMULATOR_KEY = "C2y6yDjf5/R+ob0N8A7Cgv30VRDJIWEHLM+4QDU5DE2nQ9nDuVTqobD4b8mGGyPMbIZnqyMsEcaGQy67XIw/Jw=="
EMULATOR_ENDPOINT = "https://localhost:8081"


class CosmosDBSettings:
    """Settings for Cosmos DB connection."""

    def __init__(self):
        self.endpoint = os.getenv("COSMOS_ENDPOINT", "")
        self.database_name = os.getenv("COSMOS_DB_NAME", "grammartrainer")
        self.cards_container = os.getenv("COSMOS_CARDS_CONTAINER", "cards")
        self.progress_container = os.getenv("COSMOS_PROGRESS_CONTAINER", "progress")
        self.rooms_container = os.getenv("COSMOS_ROOMS_CONTAINER", "rooms")
        self.users_container = os.getenv("COSMOS_USERS_CONTAINER", "users")
        # Emulator mode for local development
        self.use_emulator = os.getenv("COSMOS_EMULATOR", "false").lower() == "true"

    def is_configured(self) -> bool:
        """Check if Cosmos DB is configured."""
        if self.use_emulator:
            return True  # Emulator always uses well-known endpoint
        return bool(self.endpoint)


@lru_cache()
def get_settings() -> CosmosDBSettings:
    """Get cached Cosmos DB settings."""
    return CosmosDBSettings()


_client: CosmosClient | None = None
_database: DatabaseProxy | None = None


def get_client() -> CosmosClient:
    """
    Get or create the Cosmos DB client.

    For local development with the emulator, set COSMOS_EMULATOR=true.
    Otherwise DefaultAzureCredential picks Managed Identity in Azure or the
    Azure CLI login locally.
    """
    global _client
    if _client is None:
        settings = get_settings()
        if not settings.is_configured():
            raise RuntimeError(
                "Cosmos DB is not configured. "
                "Set COSMOS_ENDPOINT environment variable, or COSMOS_EMULATOR=true for local emulator."
            )

        if settings.use_emulator:
            logger.info("Using Cosmos DB Emulator at %s", EMULATOR_ENDPOINT)
            _client = CosmosClient(
                EMULATOR_ENDPOINT,
                credential=EMULATOR_KEY,
                connection_verify=False  # Emulator uses self-signed cert
            )
        else:
            logger.info("Using DefaultAzureCredential for Cosmos DB at %s", settings.endpoint)
            credential = DefaultAzureCredential()
            _client = CosmosClient(settings.endpoint, credential=credential)

    return _client


def get_database() -> DatabaseProxy:
    """Get or create the database proxy."""
    global _database
    if _database is None:
        settings = get_settings()
        client = get_client()
        _database = client.get_database_client(settings.database_name)
    return _database


def get_container(container_name: str) -> ContainerProxy:
    """Get a container proxy by name."""
    database = get_database()
    return database.get_container_client(container_name)


def get_cards_container() -> ContainerProxy:
    return get_container(get_settings().cards_container)


def get_progress_container() -> ContainerProxy:
    return get_container(get_settings().progress_container)


def get_rooms_container() -> ContainerProxy:
    return get_container(get_settings().rooms_container)


def get_users_container() -> ContainerProxy:
    return get_container(get_settings().users_container)


@contextmanager
def translate_store_errors(action: str) -> Iterator[None]:
    """Re-raise Azure SDK failures inside the block as StoreUnavailableError.

    Errors the caller wants to handle itself (not found, conflicts) must be
    caught inside the block.
    """
    try:
        yield
    except AzureError as e:
        logger.error("Cosmos DB %s failed: %s", action, e)
        raise StoreUnavailableError(f"Store unavailable while trying to {action}") from e


def verify_connection() -> bool:
    """Verify the Cosmos DB connection is working."""
    try:
        settings = get_settings()
        if not settings.is_configured():
            return False
        database = get_database()
        # Try to read database properties to verify connection
        database.read()
        return True
    except CosmosResourceNotFoundError:
        return False
    except Exception:
        logger.exception("Cosmos DB connection check failed")
        return False


def close_client():
    """Drop the cached client and database so the next call reconnects."""
    global _client, _database
    _client = None
    _database = None
