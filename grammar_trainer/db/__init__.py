"""Database module for Cosmos DB integration."""

from .cosmos import (
    get_client,
    get_database,
    get_container,
    get_cards_container,
    get_progress_container,
    get_rooms_container,
    get_users_container,
    get_settings,
    translate_store_errors,
    verify_connection,
    close_client,
)

__all__ = [
    "get_client",
    "get_database",
    "get_container",
    "get_cards_container",
    "get_progress_container",
    "get_rooms_container",
    "get_users_container",
    "get_settings",
    "translate_store_errors",
    "verify_connection",
    "close_client",
]
