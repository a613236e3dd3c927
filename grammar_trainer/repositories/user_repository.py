"""Repository for rooms and their learners."""

import hashlib
import logging
import uuid

from azure.cosmos import ContainerProxy
from azure.cosmos.exceptions import CosmosResourceExistsError, CosmosResourceNotFoundError

from grammar_trainer.db import get_rooms_container, get_users_container, translate_store_errors
from grammar_trainer.errors import NotFoundError
from grammar_trainer.models import User
from grammar_trainer.srs.time import utc_now_iso

logger = logging.getLogger(__name__)


class UserNotFoundError(NotFoundError):
    """Raised when a user is not found in a room."""

    pass


def hash_room_code(room_code: str) -> str:
    """Return the SHA-256 hex digest rooms are stored under. Codes are never stored."""
    return hashlib.sha256(room_code.encode("utf-8")).hexdigest()


def make_user_id(room_id: str, display_name: str) -> str:
    """Derive the id of a room member from the room and the name, ignoring case."""
    namespace = uuid.UUID("6ba7b811-9dad-11d1-80b4-00c04fd430c8")
    return str(uuid.uuid5(namespace, f"{room_id}\n{display_name.lower()}"))


class UserRepository:
    """Repository for room and user database operations."""

    def __init__(
        self,
        rooms_container: ContainerProxy | None = None,
        users_container: ContainerProxy | None = None,
    ):
        self._rooms_container = rooms_container
        self._users_container = users_container

    @property
    def rooms_container(self) -> ContainerProxy:
        if self._rooms_container is None:
            self._rooms_container = get_rooms_container()
        return self._rooms_container

    @property
    def users_container(self) -> ContainerProxy:
        if self._users_container is None:
            self._users_container = get_users_container()
        return self._users_container

    def _read_room(self, room_code_hash: str) -> dict | None:
        try:
            return self.rooms_container.read_item(item=room_code_hash, partition_key=room_code_hash)
        except CosmosResourceNotFoundError:
            return None

    def get_or_create_room(self, room_code_hash: str) -> str:
        """Return the id of the room with this code hash, creating the room if needed."""
        with translate_store_errors("resolve room"):
            room = self._read_room(room_code_hash)
            if room is not None:
                return room["room_id"]

            doc = {"id": room_code_hash, "room_id": str(uuid.uuid4()), "created_at": utc_now_iso()}
            try:
                created = self.rooms_container.create_item(body=doc)
                logger.info("Created room %s", created["room_id"])
                return created["room_id"]
            except CosmosResourceExistsError:
                # Another login created the room first
                room = self._read_room(room_code_hash)
                if room is None:
                    raise
                return room["room_id"]

    def _read_user(self, user_id: str, room_id: str) -> dict | None:
        try:
            return self.users_container.read_item(item=user_id, partition_key=room_id)
        except CosmosResourceNotFoundError:
            return None

    def get_or_create_user(self, room_id: str, display_name: str) -> User:
        """Return the room member with this name, creating them on first login.

        Names are matched case-insensitively through the derived user id.
        """
        user_id = make_user_id(room_id, display_name)
        with translate_store_errors("resolve user"):
            existing = self._read_user(user_id, room_id)
            if existing is not None:
                return User(**existing)

            user = User(id=user_id, display_name=display_name, room_id=room_id)
            try:
                self.users_container.create_item(body=user.model_dump())
            except CosmosResourceExistsError:
                # Another first login with the same name created the user
                existing = self._read_user(user_id, room_id)
                if existing is None:
                    raise
                return User(**existing)

        logger.info("Created user %s in room %s", user.id, room_id)
        return user

    def get(self, user_id: str, room_id: str) -> User:
        """Get a user by ID within a room."""
        with translate_store_errors("read user"):
            try:
                item = self.users_container.read_item(item=user_id, partition_key=room_id)
            except CosmosResourceNotFoundError:
                raise UserNotFoundError(f"User with ID {user_id} not found")
        return User(**item)

    def list_by_room(self, room_id: str) -> list[User]:
        """List all users of a room."""
        query = "SELECT * FROM c WHERE c.room_id = @roomId"
        parameters = [{"name": "@roomId", "value": room_id}]
        with translate_store_errors("list users"):
            items = list(
                self.users_container.query_items(
                    query=query,
                    parameters=parameters,
                    partition_key=room_id,
                )
            )
        return [User(**item) for item in items]


# Singleton instance
_user_repository: UserRepository | None = None


def get_user_repository() -> UserRepository:
    """Get the user repository singleton."""
    global _user_repository
    if _user_repository is None:
        _user_repository = UserRepository()
    return _user_repository
