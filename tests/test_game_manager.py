"""
Game Manager Tests - a full round, queue, intents, sessions, deletes.

Run with: pytest tests/test_game_manager.py -v
"""
import pytest

from game.errors import (
    IntentRejected,
    NotFound,
    PlayerAlreadyOnline,
    QueueEmpty,
    StaleSession,
)
from game.game_manager import Upload, normalize_room_code
from game.models import GameMode, GamePhase

ROOM = "TEST"


def scores(manager):
    return {p.id: p.score for p in manager.load_room(ROOM).players}


def test_normalize_room_code():
    assert normalize_room_code(" vtry ") == "VTRY"
    with pytest.raises(IntentRejected):
        normalize_room_code("  ")
    with pytest.raises(IntentRejected):
        normalize_room_code("a/b")


def test_ensure_room_writes_defaults_once(manager, seed):
    game = manager.ensure_room(ROOM)
    assert game.mode == GameMode.LOBBY
    assert seed.raw("game", "timerSettings", "voting") == 30
    manager.set_mode(ROOM, GameMode.SLIDESHOW)
    assert manager.ensure_room(ROOM).mode == GameMode.SLIDESHOW


class TestFullRound:

    def test_bluffer_wins_round(self, manager, seed, clock):
        for pid in ("O", "A", "B", "C", "v1", "v2"):
            seed.player(pid)
        seed.submission("s1", "O")
        manager.enqueue_photo(ROOM, "s1")

        photo = manager.play_next(ROOM)
        game = manager.load_game(ROOM)
        assert photo.id == "s1"
        assert game.phase == GamePhase.COUNTDOWN
        assert game.real_owner_id == "O"
        assert game.photo_queue == []
        assert game.timer.ends_at == clock.now + 3000
        assert seed.raw("submissions", "s1", "hasBeenPlayed") is True

        assert manager.advance(ROOM) == GamePhase.VOLUNTEERING
        for pid in ("A", "B", "C"):
            manager.volunteer(ROOM, pid)

        assert manager.advance(ROOM) == GamePhase.PITCHES
        presenters = manager.load_game(ROOM).selected_presenters
        assert sorted(presenters) == ["A", "B", "C", "O"]

        assert manager.advance(ROOM) == GamePhase.VOTING
        manager.vote(ROOM, "v1", "B")
        manager.vote(ROOM, "v2", "O")
        manager.vote(ROOM, "v1", "B")

        assert manager.advance(ROOM) == GamePhase.RESULTS
        results = manager.load_game(ROOM).results
        # B and O tie on one vote each
        assert sorted(results.winner_ids()) == ["B", "O"]
        assert results.correct_voters == ["v2"]
        assert results.voter_points_awarded == 1
        assert scores(manager) == {"O": 3, "A": 0, "B": 4, "C": 0, "v1": 0, "v2": 1}

        assert manager.advance(ROOM) == GamePhase.SCOREBOARD
        assert manager.load_game(ROOM).timer is None
        assert manager.advance(ROOM) is None

    def test_next_photo_clears_round_state(self, manager, seed):
        for pid in ("O", "A", "v1"):
            seed.player(pid)
        seed.submission("s1", "O")
        seed.submission("s2", "A")
        manager.enqueue_photo(ROOM, "s1")
        manager.enqueue_photo(ROOM, "s2")
        manager.play_next(ROOM)
        manager.set_phase(ROOM, GamePhase.VOLUNTEERING)
        manager.volunteer(ROOM, "A")

        manager.play_next(ROOM)

        game = manager.load_game(ROOM)
        assert game.current_photo_id == "s2"
        assert game.real_owner_id == "A"
        assert game.volunteers == set()
        assert game.selected_presenters == []
        assert game.votes == {}
        assert game.results is None


class TestQueue:

    def test_enqueue_rules(self, manager, seed):
        seed.player("O")
        seed.submission("s1", "O")
        seed.submission("played", "O", played=True)

        assert manager.enqueue_photo(ROOM, "s1") == ["s1"]
        assert manager.enqueue_photo(ROOM, "s1") == ["s1"]
        with pytest.raises(IntentRejected):
            manager.enqueue_photo(ROOM, "played")
        with pytest.raises(NotFound):
            manager.enqueue_photo(ROOM, "nope")

    def test_dequeue_and_reorder(self, manager, seed):
        seed.player("O")
        for sid in ("s1", "s2", "s3"):
            seed.submission(sid, "O")
            manager.enqueue_photo(ROOM, sid)

        assert manager.reorder_queue(ROOM, 2, 0) == ["s3", "s1", "s2"]
        assert manager.dequeue_photo(ROOM, "s1") == ["s3", "s2"]
        with pytest.raises(IntentRejected):
            manager.reorder_queue(ROOM, 0, 5)

    def test_play_next_on_empty_queue(self, manager):
        with pytest.raises(QueueEmpty) as error:
            manager.play_next(ROOM)
        assert error.value.message == "Queue is empty! Add photos to the queue first."
        assert manager.load_game(ROOM).mode == GameMode.LOBBY

    def test_play_next_skips_unplayable_entries(self, manager, seed):
        seed.player("O")
        seed.submission("s2", "O")
        seed.submission("s3", "O", played=True)
        seed.game(photoQueue=["gone", "s3", "s2"])

        assert manager.play_next(ROOM).id == "s2"
        assert manager.load_game(ROOM).photo_queue == []

    def test_play_next_with_only_unplayable_entries(self, manager, seed):
        seed.game(photoQueue=["gone"])
        with pytest.raises(QueueEmpty):
            manager.play_next(ROOM)
        assert manager.load_game(ROOM).photo_queue == []


class TestIntents:

    @pytest.fixture
    def round_in(self, manager, seed):
        def start(phase, **fields):
            for pid in ("O", "A", "B", "v1"):
                seed.player(pid)
            seed.game(mode="game", phase=phase.value, realOwnerId="O", **fields)
        return start

    def test_volunteer_is_idempotent(self, manager, round_in):
        round_in(GamePhase.VOLUNTEERING)
        manager.volunteer(ROOM, "A")
        manager.volunteer(ROOM, "A")
        assert manager.load_game(ROOM).volunteers == {"A"}

    def test_volunteer_rules(self, manager, round_in):
        round_in(GamePhase.VOLUNTEERING)
        with pytest.raises(IntentRejected):
            manager.volunteer(ROOM, "O")
        with pytest.raises(NotFound):
            manager.volunteer(ROOM, "ghost")
        manager.set_phase(ROOM, GamePhase.VOTING)
        with pytest.raises(IntentRejected):
            manager.volunteer(ROOM, "A")

    def test_unvolunteer(self, manager, round_in):
        round_in(GamePhase.VOLUNTEERING, volunteers={"A": True})
        manager.unvolunteer(ROOM, "B")
        manager.unvolunteer(ROOM, "A")
        assert manager.load_game(ROOM).volunteers == set()

    def test_unvolunteer_after_selection_is_rejected(self, manager, round_in):
        round_in(GamePhase.PITCHES, volunteers={"A": True}, selectedPresenters=["A", "O"])
        with pytest.raises(IntentRejected):
            manager.unvolunteer(ROOM, "A")

    def test_presenters_cannot_vote(self, manager, round_in):
        round_in(GamePhase.VOTING, selectedPresenters=["A", "O"])
        with pytest.raises(IntentRejected) as error:
            manager.vote(ROOM, "A", "O")
        assert error.value.message == "You're a presenter - you can't vote!"

    def test_vote_target_must_present(self, manager, round_in):
        round_in(GamePhase.VOTING, selectedPresenters=["A", "O"])
        with pytest.raises(IntentRejected):
            manager.vote(ROOM, "v1", "B")

    def test_vote_outside_voting_is_rejected(self, manager, round_in):
        round_in(GamePhase.PITCHES, selectedPresenters=["A", "O"])
        with pytest.raises(IntentRejected):
            manager.vote(ROOM, "v1", "A")

    def test_changing_vote_replaces_it(self, manager, round_in):
        round_in(GamePhase.VOTING, selectedPresenters=["A", "O"])
        manager.vote(ROOM, "v1", "A")
        manager.vote(ROOM, "v1", "O")
        assert manager.load_game(ROOM).votes == {"v1": "O"}


class TestScores:

    def test_adjust_points_floors_at_zero(self, manager, seed):
        seed.player("A", score=2)
        assert manager.adjust_points(ROOM, "A", 5) == 7
        assert manager.adjust_points(ROOM, "A", -10) == 0
        with pytest.raises(NotFound):
            manager.adjust_points(ROOM, "ghost", 1)

    def test_reset_room(self, manager, seed):
        seed.player("A", score=5, volunteered=2)
        seed.submission("s1", "A", played=True)
        seed.game(mode="game", phase="voting", photoQueue=["s1"], autoAdvance=False,
                  timerSettings={"voting": 60}, votes={"x": "A"})

        manager.reset_room(ROOM)

        game = manager.load_game(ROOM)
        assert game.mode == GameMode.LOBBY
        assert game.photo_queue == []
        assert game.votes == {}
        assert game.timer_settings.voting == 60
        assert game.auto_advance is False
        assert seed.raw("players", "A", "score") == 0
        assert seed.raw("players", "A", "hasVolunteeredCount") == 0
        assert seed.raw("submissions", "s1", "hasBeenPlayed") is False


class TestSessions:

    def test_stale_session(self, manager):
        with pytest.raises(StaleSession):
            manager.resolve_session(ROOM, "gone")
        with pytest.raises(StaleSession):
            manager.join(ROOM, "gone")

    def test_join_blocks_second_device(self, manager, seed, clock):
        seed.player("A")
        player = manager.join(ROOM, "A")
        assert player.is_online is True
        assert seed.raw("players", "A", "lastSeen") == clock.now

        with pytest.raises(PlayerAlreadyOnline):
            manager.join(ROOM, "A")

        clock.advance(31)
        manager.join(ROOM, "A")

    def test_heartbeat_keeps_session_alive(self, manager, seed, clock):
        seed.player("A")
        manager.join(ROOM, "A")
        clock.advance(25)
        manager.heartbeat(ROOM, "A")
        clock.advance(25)
        assert manager.expire_stale_presence(ROOM) == []
        clock.advance(10)
        assert manager.expire_stale_presence(ROOM) == ["A"]
        assert seed.raw("players", "A", "isOnline") is False

    def test_ghost_without_heartbeat_can_rejoin(self, manager, seed):
        seed.player("A", isOnline=True)
        manager.join(ROOM, "A")

    def test_leave_and_disconnect(self, manager, seed):
        seed.player("A")
        manager.join(ROOM, "A")
        manager.leave(ROOM, "A")
        assert seed.raw("players", "A", "isOnline") is False
        manager.leave(ROOM, "gone")

        manager.join(ROOM, "A")
        manager.disconnect(ROOM, "A")
        assert seed.raw("players", "A", "isOnline") is False
        with pytest.raises(NotFound):
            manager.disconnect(ROOM, "gone")


class TestDeletePlayer:

    def _seed_owner(self, manager, seed, blobs):
        selfie = blobs.store(b"s", "rooms/TEST/selfies/A/1-me.jpg")
        photo = blobs.store(b"p", "rooms/TEST/photos/A/1-a.jpg")
        seed.player("A", selfieUrl=selfie)
        seed.player("B")
        seed.submission("s1", "A", photo_url=photo)
        seed.submission("s2", "B")
        seed.game(photoQueue=["s1", "s2"])

    def test_cascade(self, manager, seed, blobs):
        self._seed_owner(manager, seed, blobs)

        manager.delete_player(ROOM, "A")

        assert seed.raw("players", "A") is None
        assert seed.raw("submissions", "s1") is None
        assert seed.raw("submissions", "s2") is not None
        assert manager.load_game(ROOM).photo_queue == ["s2"]
        assert not blobs.exists("rooms/TEST/selfies/A/1-me.jpg")
        assert not blobs.exists("rooms/TEST/photos/A/1-a.jpg")
        assert seed.raw("pendingDeletes") is None

    def test_missing_player(self, manager):
        with pytest.raises(NotFound):
            manager.delete_player(ROOM, "ghost")

    def test_interrupted_delete_resumes(self, manager, seed, blobs, monkeypatch):
        self._seed_owner(manager, seed, blobs)
        original_purge = manager._purge_queue

        def broken_purge(room_code, submission_ids):
            raise RuntimeError("store unavailable")

        monkeypatch.setattr(manager, "_purge_queue", broken_purge)
        with pytest.raises(RuntimeError):
            manager.delete_player(ROOM, "A")

        checkpoint = seed.raw("pendingDeletes", "A")
        assert checkpoint["done"] == ["blobs", "submissions"]
        assert seed.raw("submissions", "s1") is None
        assert seed.raw("players", "A") is not None

        monkeypatch.setattr(manager, "_purge_queue", original_purge)
        assert manager.resume_pending_deletes(ROOM) == ["A"]

        assert seed.raw("players", "A") is None
        assert manager.load_game(ROOM).photo_queue == ["s2"]
        assert seed.raw("pendingDeletes") is None

    def test_cleanup_orphans(self, manager, seed, blobs):
        seed.player("B")
        photo = blobs.store(b"p", "rooms/TEST/photos/gone/1-a.jpg")
        seed.submission("orphan", "gone", photo_url=photo)
        seed.submission("kept", "B")
        seed.game(photoQueue=["orphan", "kept"])

        assert manager.cleanup_orphans(ROOM) == ["orphan"]
        assert seed.raw("submissions", "orphan") is None
        assert manager.load_game(ROOM).photo_queue == ["kept"]
        assert not blobs.exists("rooms/TEST/photos/gone/1-a.jpg")
        assert manager.cleanup_orphans(ROOM) == []


class TestEntry:

    def test_submit_entry(self, manager, blobs):
        player = manager.submit_entry(
            ROOM,
            "  Ana ",
            Upload("me.jpg", b"selfie"),
            [Upload("one.jpg", b"1"), Upload("two.jpg", b"2")],
            [Upload("bonus.jpg", b"b")],
        )

        room = manager.load_room(ROOM)
        assert room.get_player(player.id).name == "Ana"
        assert player.selfie_url.startswith("/media/rooms/TEST/selfies/")
        submissions = room.submissions_of(player.id)
        assert len(submissions) == 2
        assert all(not s.has_been_played for s in submissions)
        assert room.orphaned_submissions() == []
        assert len(manager.list_slideshow(ROOM)) == 1

    def test_submit_entry_requires_name(self, manager):
        with pytest.raises(IntentRejected):
            manager.submit_entry(ROOM, "  ", None, [Upload("a.jpg", b"1")])


class TestSlideshowAndPrompts:

    def test_slideshow_lifecycle(self, manager, blobs, clock):
        first = manager.add_slideshow_photo(ROOM, Upload("a.jpg", b"a"))
        clock.advance(1)
        second = manager.add_slideshow_photo(ROOM, Upload("b.jpg", b"b"))

        listed = manager.list_slideshow(ROOM)
        assert [photo.id for photo, _ in listed] == [second.id, first.id]
        assert listed[0][1] == second.photo_url

        manager.delete_slideshow_photo(ROOM, first.id)
        assert [photo.id for photo, _ in manager.list_slideshow(ROOM)] == [second.id]
        with pytest.raises(NotFound):
            manager.delete_slideshow_photo(ROOM, first.id)

        assert manager.delete_all_slideshow(ROOM) == 1
        assert manager.list_slideshow(ROOM) == []

    def test_prompt_answers(self, manager, clock):
        manager.submit_prompt_answer(ROOM, "Best trip?", " Lisbon ")
        clock.advance(1)
        manager.submit_prompt_answer(ROOM, "Best trip?", "Oslo")

        answers = manager.list_prompt_answers(ROOM)
        assert [a.answer for a in answers] == ["Lisbon", "Oslo"]
        with pytest.raises(IntentRejected):
            manager.submit_prompt_answer(ROOM, "Best trip?", "   ")
