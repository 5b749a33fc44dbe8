"""Shared pytest fixtures for the room server tests."""
import random
from typing import Optional

import pytest

from game.game_manager import GameManager
from game.projector import room_path
from storage.blob_store import BlobStore
from storage.entity_store import EntityStore

ROOM = "TEST"


class FakeClock:
    """Millisecond clock the tests move by hand."""

    def __init__(self, now: int = 1_700_000_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: float) -> int:
        self.now += int(seconds * 1000)
        return self.now


class RoomSeeder:
    """Writes raw records straight into the store."""

    def __init__(self, store: EntityStore, room_code: str = ROOM):
        self.store = store
        self.room_code = room_code

    def player(self, player_id: str, score: int = 0, volunteered: int = 0, **extra) -> str:
        data = {"name": player_id.upper(), "score": score, "hasVolunteeredCount": volunteered}
        data.update(extra)
        self.store.set(room_path(self.room_code, "players", player_id), data)
        return player_id

    def submission(self, submission_id: str, owner_id: str, played: bool = False,
                   photo_url: Optional[str] = None) -> str:
        self.store.set(room_path(self.room_code, "submissions", submission_id), {
            "ownerId": owner_id,
            "photoUrl": photo_url or f"/media/rooms/{self.room_code}/photos/{submission_id}.jpg",
            "hasBeenPlayed": played,
        })
        return submission_id

    def game(self, **fields) -> None:
        self.store.update(room_path(self.room_code, "game"), fields)

    def raw(self, *parts):
        return self.store.get(room_path(self.room_code, *parts))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return EntityStore()


@pytest.fixture
def blobs(tmp_path):
    return BlobStore(str(tmp_path / "media"), "/media")


@pytest.fixture
def manager(store, blobs, clock):
    return GameManager(store, blobs, rng=random.Random(7), clock=clock, presence_ttl_seconds=30)


@pytest.fixture
def seed(store):
    return RoomSeeder(store)
