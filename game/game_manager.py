"""
Authoritative handler for every room intent.

All mutating operations for a room run under that room's lock, so the
read-modify-write steps below never interleave with each other. Score and
volunteer-count changes also go through the store's atomic transaction.
"""
import random
import secrets
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from config.settings import DEBUG_RANDOM, MAX_BLUFFERS, MEDIA_DIR, MEDIA_URL, PRESENCE_TTL_SECONDS
from game.errors import (
    IntentRejected,
    NotFound,
    PlayerAlreadyOnline,
    QueueEmpty,
    StaleSession,
)
from game.models import (
    GameMode,
    GamePhase,
    GameState,
    Player,
    PromptAnswer,
    RoomData,
    RoundResults,
    SlideshowPhoto,
    Submission,
    TimerSettings,
)
from game.phases import (
    computes_results,
    next_phase,
    phase_timer,
    selects_presenters,
    timer_for,
)
from game.presenters import select_presenters, shuffle
from game.projector import (
    game_from_snapshot,
    game_to_snapshot,
    player_to_snapshot,
    prompts_from_snapshot,
    results_to_snapshot,
    room_from_snapshot,
    room_path,
    slideshow_from_snapshot,
    submission_to_snapshot,
    timer_to_snapshot,
)
from game.scoring import compute_results
from storage.blob_store import BlobStore, safe_filename
from storage.entity_store import EntityStore, entity_store
from utils.logger import get_logger

logger = get_logger(__name__)

# Cascading delete steps, in order
DELETE_STEPS = ("blobs", "submissions", "queue", "player")


def now_ms() -> int:
    return int(time.time() * 1000)


def normalize_room_code(room_code: str) -> str:
    code = (room_code or "").strip().upper()
    if not code or "/" in code:
        raise IntentRejected("Invalid room code")
    return code


@dataclass
class Upload:
    """An uploaded photo"""
    filename: str
    data: bytes


class GameManager:
    """Room state owner"""

    def __init__(
        self,
        store: EntityStore,
        blobs: BlobStore,
        rng: Optional[random.Random] = None,
        clock: Callable[[], int] = now_ms,
        presence_ttl_seconds: int = PRESENCE_TTL_SECONDS,
        max_bluffers: int = MAX_BLUFFERS,
    ):
        self.store = store
        self.blobs = blobs
        self.rng = rng or secrets.SystemRandom()
        self.clock = clock
        self.presence_ttl_ms = presence_ttl_seconds * 1000
        self.max_bluffers = max_bluffers
        self._locks: Dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    # Reads

    def lock(self, room_code: str) -> threading.RLock:
        """The lock serializing every mutation of a room"""
        with self._locks_guard:
            if room_code not in self._locks:
                self._locks[room_code] = threading.RLock()
            return self._locks[room_code]

    def room_codes(self) -> List[str]:
        return self.store.keys("rooms")

    def load_game(self, room_code: str) -> GameState:
        return game_from_snapshot(self.store.get(room_path(room_code, "game")))

    def load_room(self, room_code: str) -> RoomData:
        return room_from_snapshot(self.store.get(room_path(room_code)))

    def ensure_room(self, room_code: str) -> GameState:
        """Read the game record, writing lobby defaults on first access"""
        with self.lock(room_code):
            raw = self.store.get(room_path(room_code, "game"))
            if raw is None:
                logger.info("Room %s: creating game record", room_code)
                game = GameState()
                self._write_game(room_code, game_to_snapshot(game), replace=True)
                return game
            return game_from_snapshot(raw)

    def _write_game(self, room_code: str, fields: Dict[str, Any], replace: bool = False) -> None:
        path = room_path(room_code, "game")
        if replace:
            self.store.set(path, fields)
        else:
            self.store.update(path, fields)

    def _require_player(self, room: RoomData, player_id: str) -> Player:
        player = room.get_player(player_id)
        if player is None:
            raise NotFound(f"Player {player_id} not found")
        return player

    def _increment(self, room_code: str, player_id: str, field: str, delta: int) -> Optional[int]:
        """
        Atomically add delta to a player's counter, floored at 0.

        Returns:
            The new value, or None if the player does not exist
        """
        result: Dict[str, int] = {}

        def apply(current):
            if not current:
                return current
            try:
                value = int(current.get(field) or 0)
            except (TypeError, ValueError):
                value = 0
            current[field] = max(0, value + delta)
            result["value"] = current[field]
            return current

        self.store.transaction(room_path(room_code, "players", player_id), apply)
        return result.get("value")

    # Phase state machine

    def advance(self, room_code: str) -> Optional[GamePhase]:
        """
        Move the round to its next phase (manual skip or timer expiry).

        Returns:
            The new phase, or None when no transition exists (scoreboard)
        """
        with self.lock(room_code):
            return self._advance(room_code, self.load_game(room_code))

    def advance_if_due(self, room_code: str, now: Optional[int] = None) -> Optional[GamePhase]:
        """
        Advance only if auto-advance is on and the deadline has passed.
        The check runs under the room lock, so a deadline fires once.
        """
        now = self.clock() if now is None else now
        with self.lock(room_code):
            game = self.load_game(room_code)
            if not game.auto_advance or game.mode != GameMode.GAME:
                return None
            if not game.deadline_passed(now):
                return None
            if next_phase(game.phase) is None:
                # Nothing follows; drop the spent deadline so it stops firing
                self._write_game(room_code, {"timer": None})
                return None
            return self._advance(room_code, game)

    def _advance(self, room_code: str, game: GameState) -> Optional[GamePhase]:
        target = next_phase(game.phase)
        if target is None:
            logger.info("Room %s: no phase after %s, host must start the next photo", room_code, game.phase.value)
            return None

        timer = phase_timer(game.timer_settings, target, self.clock())
        fields: Dict[str, Any] = {
            "phase": target.value,
            "mode": GameMode.GAME.value,
            "timer": timer_to_snapshot(timer),
        }

        # Presenters and results are fixed once per round; re-entering the
        # phase after a host jump keeps them
        if selects_presenters(game.phase, target) and not game.selected_presenters:
            # Counts are bumped before the phase write so nobody sees
            # 'pitches' without presenters
            fields["selectedPresenters"] = self._choose_presenters(room_code, game)

        results: Optional[RoundResults] = None
        if computes_results(game.phase, target) and game.real_owner_id and game.results is None:
            results = compute_results(game.votes, game.selected_presenters, game.real_owner_id)
            fields["results"] = results_to_snapshot(results)

        self._write_game(room_code, fields)
        logger.info("Room %s: %s -> %s", room_code, game.phase.value, target.value)

        if results is not None:
            self._apply_results(room_code, results)
        return target

    def _choose_presenters(self, room_code: str, game: GameState) -> List[str]:
        room = self.load_room(room_code)
        counts = {player.id: player.has_volunteered_count for player in room.players}
        volunteers = [pid for pid in game.volunteers if pid in counts]

        presenters = select_presenters(
            volunteers,
            game.real_owner_id,
            counts,
            rng=self.rng,
            max_bluffers=self.max_bluffers,
        )
        for player_id in presenters:
            self._increment(room_code, player_id, "hasVolunteeredCount", 1)

        if DEBUG_RANDOM:
            logger.info("Room %s presenters volunteers=%s counts=%s picked=%s",
                        room_code, sorted(volunteers), counts, presenters)
        return presenters

    def _apply_results(self, room_code: str, results: RoundResults) -> None:
        for player_id, delta in results.score_deltas().items():
            if self._increment(room_code, player_id, "score", delta) is None:
                logger.warning("Room %s: cannot credit %d to missing player %s", room_code, delta, player_id)
        logger.info(
            "Room %s results: winners=%s correct_voters=%s",
            room_code, results.winner_ids(), results.correct_voters,
        )

    def set_mode(self, room_code: str, mode: GameMode) -> None:
        with self.lock(room_code):
            self._write_game(room_code, {"mode": mode.value})
        logger.info("Room %s: mode %s", room_code, mode.value)

    def set_phase(self, room_code: str, phase: GamePhase) -> None:
        """
        Jump straight to a phase; its configured timer restarts.
        The round keeps its presenters and results, so they are never
        drawn or scored twice.
        """
        with self.lock(room_code):
            game = self.load_game(room_code)
            timer = phase_timer(game.timer_settings, phase, self.clock())
            self._write_game(room_code, {
                "phase": phase.value,
                "mode": GameMode.GAME.value,
                "timer": timer_to_snapshot(timer),
            })
        logger.info("Room %s: phase set to %s", room_code, phase.value)

    def start_timer(self, room_code: str, seconds: int) -> None:
        if seconds <= 0:
            raise IntentRejected("Timer must be at least 1 second")
        with self.lock(room_code):
            self._write_game(room_code, {"timer": timer_to_snapshot(timer_for(seconds, self.clock()))})

    def clear_timer(self, room_code: str) -> None:
        with self.lock(room_code):
            self._write_game(room_code, {"timer": None})

    def update_timer_setting(self, room_code: str, phase: str, seconds: int) -> TimerSettings:
        if phase not in TimerSettings.phases():
            raise IntentRejected(f"No timer setting for phase {phase!r}")
        with self.lock(room_code):
            settings = self.load_game(room_code).timer_settings
            setattr(settings, phase, max(0, int(seconds)))
            self._write_game(room_code, {f"timerSettings/{phase}": getattr(settings, phase)})
            return settings

    def toggle_auto_advance(self, room_code: str) -> bool:
        with self.lock(room_code):
            enabled = not self.load_game(room_code).auto_advance
            self._write_game(room_code, {"autoAdvance": enabled})
            return enabled

    def shuffle_presenters(self, room_code: str) -> List[str]:
        with self.lock(room_code):
            presenters = shuffle(self.load_game(room_code).selected_presenters, self.rng)
            self._write_game(room_code, {"selectedPresenters": presenters})
            return presenters

    def reveal_results(self, room_code: str) -> RoundResults:
        """Score the round on demand when the host skipped past voting"""
        with self.lock(room_code):
            game = self.load_game(room_code)
            if not game.real_owner_id:
                raise IntentRejected("No photo in play")
            if game.results is not None:
                raise IntentRejected("Results already revealed for this round")
            results = compute_results(game.votes, game.selected_presenters, game.real_owner_id)
            self._write_game(room_code, {"results": results_to_snapshot(results)})
            self._apply_results(room_code, results)
            return results

    # Photo queue

    def enqueue_photo(self, room_code: str, submission_id: str) -> List[str]:
        with self.lock(room_code):
            room = self.load_room(room_code)
            submission = room.get_submission(submission_id)
            if submission is None:
                raise NotFound(f"Submission {submission_id} not found")
            if submission.has_been_played:
                raise IntentRejected("Photo has already been played")
            queue = room.game.photo_queue
            if submission_id in queue:
                return queue
            queue = queue + [submission_id]
            self._write_game(room_code, {"photoQueue": queue})
            return queue

    def dequeue_photo(self, room_code: str, submission_id: str) -> List[str]:
        with self.lock(room_code):
            queue = [sid for sid in self.load_game(room_code).photo_queue if sid != submission_id]
            self._write_game(room_code, {"photoQueue": queue})
            return queue

    def reorder_queue(self, room_code: str, from_index: int, to_index: int) -> List[str]:
        with self.lock(room_code):
            queue = self.load_game(room_code).photo_queue
            if not (0 <= from_index < len(queue)) or not (0 <= to_index < len(queue)):
                raise IntentRejected("Queue position out of range")
            moved = queue.pop(from_index)
            queue.insert(to_index, moved)
            self._write_game(room_code, {"photoQueue": queue})
            return queue

    def play_next(self, room_code: str) -> Submission:
        """
        Start a round with the photo at the head of the queue.

        Raises:
            QueueEmpty: nothing playable is queued
        """
        with self.lock(room_code):
            room = self.load_room(room_code)
            game = room.game
            queue = list(game.photo_queue)
            if not queue:
                raise QueueEmpty("Queue is empty! Add photos to the queue first.")

            photo: Optional[Submission] = None
            while queue:
                candidate = room.get_submission(queue.pop(0))
                if candidate is not None and not candidate.has_been_played:
                    photo = candidate
                    break
                logger.warning("Room %s: dropping unplayable queue entry", room_code)

            if photo is None:
                self._write_game(room_code, {"photoQueue": queue})
                raise QueueEmpty("Queue is empty! Add photos to the queue first.")

            self.store.update(room_path(room_code, "submissions", photo.id), {"hasBeenPlayed": True})
            timer = phase_timer(game.timer_settings, GamePhase.COUNTDOWN, self.clock())
            self._write_game(room_code, {
                "photoQueue": queue,
                "currentPhotoId": photo.id,
                "realOwnerId": photo.owner_id,
                "mode": GameMode.GAME.value,
                "phase": GamePhase.COUNTDOWN.value,
                "volunteers": None,
                "selectedPresenters": None,
                "votes": None,
                "results": None,
                "timer": timer_to_snapshot(timer),
            })
            logger.info("Room %s: playing photo %s", room_code, photo.id)
            return photo

    # Player intents

    def volunteer(self, room_code: str, player_id: str) -> None:
        with self.lock(room_code):
            room = self.load_room(room_code)
            self._require_player(room, player_id)
            game = room.game
            if game.mode != GameMode.GAME or game.phase != GamePhase.VOLUNTEERING:
                raise IntentRejected("Volunteering is closed")
            if player_id == game.real_owner_id:
                raise IntentRejected("You can't bluff on your own photo")
            if player_id in game.volunteers:
                return
            self._write_game(room_code, {f"volunteers/{player_id}": True})

    def unvolunteer(self, room_code: str, player_id: str) -> None:
        with self.lock(room_code):
            game = self.load_game(room_code)
            if player_id not in game.volunteers:
                return
            if game.phase != GamePhase.VOLUNTEERING:
                raise IntentRejected("Presenters have already been chosen")
            self._write_game(room_code, {f"volunteers/{player_id}": None})

    def vote(self, room_code: str, voter_id: str, target_id: str) -> None:
        with self.lock(room_code):
            room = self.load_room(room_code)
            self._require_player(room, voter_id)
            game = room.game
            if game.mode != GameMode.GAME or game.phase != GamePhase.VOTING:
                raise IntentRejected("Voting is closed")
            if game.is_presenter(voter_id):
                raise IntentRejected("You're a presenter - you can't vote!")
            if not game.is_presenter(target_id):
                raise IntentRejected("You can only vote for a presenter")
            self._write_game(room_code, {f"votes/{voter_id}": target_id})

    # Player sessions

    def resolve_session(self, room_code: str, player_id: str) -> Player:
        """The player behind a cached session id, or StaleSession"""
        player = self.load_room(room_code).get_player(player_id)
        if player is None:
            raise StaleSession("stale_session")
        return player

    def _is_live(self, player: Player, now: int) -> bool:
        return (
            player.is_online
            and player.last_seen is not None
            and now - player.last_seen < self.presence_ttl_ms
        )

    def join(self, room_code: str, player_id: str) -> Player:
        with self.lock(room_code):
            player = self.resolve_session(room_code, player_id)
            now = self.clock()
            if self._is_live(player, now):
                raise PlayerAlreadyOnline("This player is already connected on another device!")
            self.store.update(room_path(room_code, "players", player_id), {"isOnline": True, "lastSeen": now})
            player.is_online = True
            player.last_seen = now
            logger.info("Room %s: %s joined", room_code, player.name)
            return player

    def heartbeat(self, room_code: str, player_id: str) -> None:
        with self.lock(room_code):
            self.resolve_session(room_code, player_id)
            self.store.update(room_path(room_code, "players", player_id), {"isOnline": True, "lastSeen": self.clock()})

    def leave(self, room_code: str, player_id: str) -> None:
        with self.lock(room_code):
            if self.load_room(room_code).get_player(player_id) is None:
                return
            self.store.update(room_path(room_code, "players", player_id), {"isOnline": False})

    def disconnect(self, room_code: str, player_id: str) -> None:
        """Host-side kick of a (possibly ghost) session"""
        with self.lock(room_code):
            self._require_player(self.load_room(room_code), player_id)
            self.store.update(room_path(room_code, "players", player_id), {"isOnline": False})
        logger.info("Room %s: disconnected %s", room_code, player_id)

    def expire_stale_presence(self, room_code: str, now: Optional[int] = None) -> List[str]:
        """Mark players offline whose heartbeat is older than the TTL"""
        now = self.clock() if now is None else now
        expired = []
        with self.lock(room_code):
            for player in self.load_room(room_code).players:
                if player.is_online and not self._is_live(player, now):
                    self.store.update(room_path(room_code, "players", player.id), {"isOnline": False})
                    expired.append(player.id)
        if expired:
            logger.info("Room %s: presence expired for %s", room_code, expired)
        return expired

    # Scores & room admin

    def adjust_points(self, room_code: str, player_id: str, delta: int) -> int:
        with self.lock(room_code):
            score = self._increment(room_code, player_id, "score", delta)
            if score is None:
                raise NotFound(f"Player {player_id} not found")
            return score

    def reset_room(self, room_code: str) -> None:
        """Back to the lobby: keeps timer settings, zeroes scores, unplays photos"""
        with self.lock(room_code):
            room = self.load_room(room_code)
            fresh = GameState(
                timer_settings=room.game.timer_settings,
                auto_advance=room.game.auto_advance,
            )
            self._write_game(room_code, game_to_snapshot(fresh), replace=True)
            for submission in room.submissions:
                self.store.update(room_path(room_code, "submissions", submission.id), {"hasBeenPlayed": False})
            for player in room.players:
                self.store.update(
                    room_path(room_code, "players", player.id),
                    {"score": 0, "hasVolunteeredCount": 0},
                )
        logger.info("Room %s: reset (%d players, %d submissions)",
                    room_code, len(room.players), len(room.submissions))

    def delete_player(self, room_code: str, player_id: str) -> None:
        """
        Delete a player with their submissions, blobs and queue entries.

        Progress is checkpointed under 'pendingDeletes/{playerId}' so a
        delete interrupted by an error can be resumed.
        """
        with self.lock(room_code):
            checkpoint_path = room_path(room_code, "pendingDeletes", player_id)
            checkpoint = self.store.get(checkpoint_path)
            if checkpoint is None:
                room = self.load_room(room_code)
                player = self._require_player(room, player_id)
                submissions = room.submissions_of(player_id)
                blob_urls = [player.selfie_url] if player.selfie_url else []
                blob_urls.extend(s.photo_url for s in submissions if s.photo_url)
                checkpoint = {
                    "submissionIds": [s.id for s in submissions],
                    "blobUrls": blob_urls,
                    "done": [],
                    "startedAt": self.clock(),
                }
                self.store.set(checkpoint_path, checkpoint)
            self._run_delete(room_code, player_id, checkpoint)

    def _run_delete(self, room_code: str, player_id: str, checkpoint: Dict[str, Any]) -> None:
        checkpoint_path = room_path(room_code, "pendingDeletes", player_id)
        done = list(checkpoint.get("done") or [])
        submission_ids = list(checkpoint.get("submissionIds") or [])

        for step in DELETE_STEPS:
            if step in done:
                continue
            try:
                if step == "blobs":
                    for url in checkpoint.get("blobUrls") or []:
                        self.blobs.delete(url)
                elif step == "submissions":
                    for submission_id in submission_ids:
                        self.store.remove(room_path(room_code, "submissions", submission_id))
                elif step == "queue":
                    self._purge_queue(room_code, set(submission_ids))
                elif step == "player":
                    self.store.remove(room_path(room_code, "players", player_id))
            except Exception:
                logger.error("Room %s: deleting player %s stopped at step %r", room_code, player_id, step)
                raise
            done.append(step)
            self.store.set(f"{checkpoint_path}/done", done)

        self.store.remove(checkpoint_path)
        logger.info("Room %s: deleted player %s (%d submissions)", room_code, player_id, len(submission_ids))

    def resume_pending_deletes(self, room_code: str) -> List[str]:
        """Finish player deletes that stopped part-way"""
        resumed = []
        with self.lock(room_code):
            for player_id in self.store.keys(room_path(room_code, "pendingDeletes")):
                checkpoint = self.store.get(room_path(room_code, "pendingDeletes", player_id))
                if checkpoint is None:
                    continue
                logger.info("Room %s: resuming delete of %s", room_code, player_id)
                self._run_delete(room_code, player_id, checkpoint)
                resumed.append(player_id)
        return resumed

    def _purge_queue(self, room_code: str, submission_ids) -> None:
        queue = self.load_game(room_code).photo_queue
        kept = [sid for sid in queue if sid not in submission_ids]
        if len(kept) != len(queue):
            self._write_game(room_code, {"photoQueue": kept})

    def cleanup_orphans(self, room_code: str) -> List[str]:
        """
        Delete submissions whose owner no longer exists.

        Returns:
            Ids of the deleted submissions
        """
        with self.lock(room_code):
            orphaned = self.load_room(room_code).orphaned_submissions()
            if not orphaned:
                return []
            orphan_ids = [s.id for s in orphaned]
            self._purge_queue(room_code, set(orphan_ids))
            for submission in orphaned:
                self.blobs.delete(submission.photo_url)
                self.store.remove(room_path(room_code, "submissions", submission.id))
        logger.info("Room %s: deleted %d orphaned submission(s)", room_code, len(orphan_ids))
        return orphan_ids

    # Entry, slideshow, prompts

    def _blob_path(self, room_code: str, folder: str, upload: Upload) -> str:
        return f"rooms/{room_code}/{folder}/{self.clock()}-{safe_filename(upload.filename)}"

    def submit_entry(
        self,
        room_code: str,
        name: str,
        selfie: Optional[Upload],
        required_photos: Sequence[Upload],
        bonus_photos: Sequence[Upload] = (),
    ) -> Player:
        """
        Register a player with their mystery photos.

        The player record is written before any submission so that no
        submission ever references a missing owner.
        """
        name = (name or "").strip()
        if not name:
            raise IntentRejected("Name is required")

        player_id = self.store.push_id()
        selfie_url = ""
        if selfie is not None:
            selfie_url = self.blobs.store(selfie.data, self._blob_path(room_code, f"selfies/{player_id}", selfie))

        player = Player(id=player_id, name=name, selfie_url=selfie_url, created_at=self.clock())
        self.store.set(room_path(room_code, "players", player_id), player_to_snapshot(player))

        for photo in required_photos:
            photo_url = self.blobs.store(photo.data, self._blob_path(room_code, f"photos/{player_id}", photo))
            submission = Submission(
                id=self.store.push_id(),
                owner_id=player_id,
                photo_url=photo_url,
                created_at=self.clock(),
            )
            self.store.set(room_path(room_code, "submissions", submission.id), submission_to_snapshot(submission))

        for photo in bonus_photos:
            self.add_slideshow_photo(room_code, photo)

        logger.info("Room %s: %s submitted %d photo(s), %d bonus",
                    room_code, name, len(required_photos), len(bonus_photos))
        return player

    def add_slideshow_photo(self, room_code: str, upload: Upload) -> SlideshowPhoto:
        photo_url = self.blobs.store(upload.data, self._blob_path(room_code, "slideshow", upload))
        photo = SlideshowPhoto(id=self.store.push_id(), photo_url=photo_url, created_at=self.clock())
        self.store.set(
            room_path(room_code, "slideshow", photo.id),
            {"photoUrl": photo.photo_url, "createdAt": photo.created_at},
        )
        return photo

    def list_slideshow(self, room_code: str) -> List[Tuple[SlideshowPhoto, str]]:
        """Slideshow photos, newest first, with their thumbnail URL"""
        photos = slideshow_from_snapshot(self.store.get(room_path(room_code, "slideshow")))
        return [(photo, self.blobs.thumbnail_url(photo.photo_url)) for photo in photos]

    def delete_slideshow_photo(self, room_code: str, photo_id: str) -> None:
        path = room_path(room_code, "slideshow", photo_id)
        raw = self.store.get(path)
        if raw is None:
            raise NotFound(f"Slideshow photo {photo_id} not found")
        self.store.remove(path)
        self.blobs.delete(raw.get("photoUrl") or "", with_thumbnail=True)

    def delete_all_slideshow(self, room_code: str) -> int:
        photos = slideshow_from_snapshot(self.store.get(room_path(room_code, "slideshow")))
        for photo in photos:
            self.delete_slideshow_photo(room_code, photo.id)
        return len(photos)

    def submit_prompt_answer(self, room_code: str, prompt: str, answer: str) -> PromptAnswer:
        answer = (answer or "").strip()
        if not answer:
            raise IntentRejected("Answer is required")
        entry = PromptAnswer(id=self.store.push_id(), prompt=(prompt or "").strip(), answer=answer,
                             created_at=self.clock())
        self.store.set(
            room_path(room_code, "prompts", entry.id),
            {"prompt": entry.prompt, "answer": entry.answer, "createdAt": entry.created_at},
        )
        return entry

    def list_prompt_answers(self, room_code: str) -> List[PromptAnswer]:
        return prompts_from_snapshot(self.store.get(room_path(room_code, "prompts")))


# Global game manager
game_manager = GameManager(entity_store, BlobStore(MEDIA_DIR, MEDIA_URL))
