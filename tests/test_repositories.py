"""Tests for the card and user repositories against mocked Cosmos containers."""

import pytest
from unittest.mock import MagicMock
from azure.cosmos.exceptions import (
    CosmosHttpResponseError,
    CosmosResourceExistsError,
    CosmosResourceNotFoundError,
)

from grammar_trainer.errors import StoreUnavailableError
from grammar_trainer.repositories.card_repository import CardNotFoundError, CardRepository
from grammar_trainer.repositories.user_repository import (
    UserNotFoundError,
    UserRepository,
    hash_room_code,
    make_user_id,
)


class TestCardRepository:
    @pytest.fixture
    def cards(self, make_card):
        return [
            make_card(prompt="two", unit_id="unit-2", card_id="c2"),
            make_card(prompt="one", unit_id="unit-1", card_id="c1"),
            make_card(prompt="three", unit_id="unit-1", card_id="c3"),
        ]

    @pytest.fixture
    def container(self, cards):
        container = MagicMock()
        container.query_items.side_effect = lambda **kwargs: iter([c.model_dump() for c in cards])
        return container

    def test_list_cards_sorted_by_id(self, container):
        repo = CardRepository(container=container, cache_ttl=60)

        assert [c.id for c in repo.list_cards()] == ["c1", "c2", "c3"]
        assert container.query_items.call_args.kwargs["enable_cross_partition_query"] is True

    def test_list_cards_is_cached(self, container):
        repo = CardRepository(container=container, cache_ttl=60)

        repo.list_cards()
        repo.list_cards()

        assert container.query_items.call_count == 1

    def test_get_by_id(self, container):
        repo = CardRepository(container=container, cache_ttl=60)

        assert repo.get_by_id("c2").unit_id == "unit-2"
        with pytest.raises(CardNotFoundError):
            repo.get_by_id("missing")

    def test_count_by_unit(self, container):
        repo = CardRepository(container=container, cache_ttl=60)

        assert repo.count_by_unit() == {"unit-1": 2, "unit-2": 1}

    def test_upsert_many_clears_cache(self, container, cards):
        repo = CardRepository(container=container, cache_ttl=60)
        repo.list_cards()

        written = repo.upsert_many(cards)
        repo.list_cards()

        assert written == 3
        assert container.upsert_item.call_count == 3
        assert container.query_items.call_count == 2

    def test_store_failure(self):
        container = MagicMock()
        container.query_items.side_effect = CosmosHttpResponseError(status_code=503, message="down")

        with pytest.raises(StoreUnavailableError):
            CardRepository(container=container, cache_ttl=60).list_cards()


class TestUserRepository:
    @pytest.fixture
    def rooms(self):
        return MagicMock()

    @pytest.fixture
    def users(self):
        return MagicMock()

    @pytest.fixture
    def repo(self, rooms, users):
        return UserRepository(rooms_container=rooms, users_container=users)

    def test_hash_room_code(self):
        digest = hash_room_code("ROOM42")
        assert len(digest) == 64
        assert digest == hash_room_code("ROOM42")
        assert digest != hash_room_code("ROOM43")

    def test_existing_room(self, repo, rooms):
        rooms.read_item.return_value = {"id": "hash", "room_id": "room-1"}

        assert repo.get_or_create_room("hash") == "room-1"
        rooms.create_item.assert_not_called()

    def test_new_room(self, repo, rooms):
        rooms.read_item.side_effect = CosmosResourceNotFoundError(status_code=404, message="Not found")
        rooms.create_item.side_effect = lambda body: body

        room_id = repo.get_or_create_room("hash")

        body = rooms.create_item.call_args.kwargs["body"]
        assert body["id"] == "hash"
        assert body["room_id"] == room_id

    def test_room_created_concurrently(self, repo, rooms):
        rooms.read_item.side_effect = [
            CosmosResourceNotFoundError(status_code=404, message="Not found"),
            {"id": "hash", "room_id": "room-winner"},
        ]
        rooms.create_item.side_effect = CosmosResourceExistsError(status_code=409, message="Conflict")

        assert repo.get_or_create_room("hash") == "room-winner"

    def test_user_id_ignores_name_case(self):
        assert make_user_id("room-1", "Alice") == make_user_id("room-1", "ALICE")
        assert make_user_id("room-1", "Alice") != make_user_id("room-2", "Alice")
        assert make_user_id("room-1", "Alice") != make_user_id("room-1", "Alicia")

    def test_existing_user_matched_case_insensitively(self, repo, users):
        user_id = make_user_id("room-1", "Alice")
        users.read_item.return_value = {
            "id": user_id,
            "display_name": "Alice",
            "room_id": "room-1",
            "created_at": "2025-12-01T00:00:00Z",
        }

        user = repo.get_or_create_user("room-1", "ALICE")

        assert user.id == user_id
        assert user.display_name == "Alice"
        users.read_item.assert_called_once_with(item=user_id, partition_key="room-1")
        users.create_item.assert_not_called()

    def test_new_user(self, repo, users):
        users.read_item.side_effect = CosmosResourceNotFoundError(status_code=404, message="Not found")
        users.create_item.side_effect = lambda body: body

        user = repo.get_or_create_user("room-1", "Bob")

        assert user.id == make_user_id("room-1", "bob")
        assert user.display_name == "Bob"
        assert user.room_id == "room-1"
        assert users.create_item.call_args.kwargs["body"]["id"] == user.id

    def test_simultaneous_first_logins_share_one_user(self, repo, users):
        user_id = make_user_id("room-1", "Bob")
        users.read_item.side_effect = [
            CosmosResourceNotFoundError(status_code=404, message="Not found"),
            {"id": user_id, "display_name": "bob", "room_id": "room-1"},
        ]
        users.create_item.side_effect = CosmosResourceExistsError(status_code=409, message="Conflict")

        user = repo.get_or_create_user("room-1", "Bob")

        assert user.id == user_id
        assert user.display_name == "bob"

    def test_get_missing_user(self, repo, users):
        users.read_item.side_effect = CosmosResourceNotFoundError(status_code=404, message="Not found")

        with pytest.raises(UserNotFoundError):
            repo.get("u1", "room-1")

    def test_list_by_room(self, repo, users):
        users.query_items.return_value = iter(
            [
                {"id": "u1", "display_name": "Alice", "room_id": "room-1"},
                {"id": "u2", "display_name": "Bob", "room_id": "room-1"},
            ]
        )

        members = repo.list_by_room("room-1")

        assert [m.id for m in members] == ["u1", "u2"]
        assert users.query_items.call_args.kwargs["partition_key"] == "room-1"
