"""
Typed views over raw store snapshots, and the inverse serialization.

Store records use the camelCase keys the realtime clients read. Reading
never fails on missing fields: every absent value falls back to its default.
Older records keyed the owner as 'odUid'; those are still understood.
"""
from dataclasses import asdict, fields
from typing import Any, Dict, List, Optional

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
    Timer,
    TimerSettings,
    WinnerEntry,
)
from utils.logger import get_logger

logger = get_logger(__name__)


def room_path(room_code: str, *parts: str) -> str:
    """rooms/{code}/part/part..."""
    return "/".join(["rooms", room_code, *parts])


def _enum_value(enum_cls, raw: Any, default):
    if raw is None:
        return default
    try:
        return enum_cls(raw)
    except ValueError:
        logger.warning("Unknown %s %r in store, using %s", enum_cls.__name__, raw, default.value)
        return default


def _int(raw: Any, default: int = 0) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


def _optional_int(raw: Any) -> Optional[int]:
    if raw is None:
        return None
    return _int(raw)


# Timer


def timer_from_snapshot(data: Optional[Dict[str, Any]]) -> Optional[Timer]:
    if not data:
        return None
    return Timer(ends_at=_optional_int(data.get("endsAt")), duration=_optional_int(data.get("duration")))


def timer_to_snapshot(timer: Optional[Timer]) -> Optional[Dict[str, Any]]:
    if timer is None or (timer.ends_at is None and timer.duration is None):
        return None
    return {"endsAt": timer.ends_at, "duration": timer.duration}


def timer_settings_from_snapshot(data: Optional[Dict[str, Any]]) -> TimerSettings:
    settings = TimerSettings()
    for item in fields(TimerSettings):
        if data and item.name in data:
            setattr(settings, item.name, max(0, _int(data[item.name], getattr(settings, item.name))))
    return settings


def timer_settings_to_snapshot(settings: TimerSettings) -> Dict[str, int]:
    return asdict(settings)


# Results


def results_from_snapshot(data: Optional[Dict[str, Any]]) -> Optional[RoundResults]:
    if not data or not data.get("realOwnerId"):
        return None
    winners = [
        WinnerEntry(
            presenter_id=entry.get("presenterId") or entry.get("odUid") or "",
            votes=_int(entry.get("votes")),
            is_real_owner=bool(entry.get("isRealOwner", False)),
            points_awarded=_int(entry.get("pointsAwarded")),
        )
        for entry in (data.get("winners") or [])
    ]
    return RoundResults(
        real_owner_id=data["realOwnerId"],
        real_owner_votes=_int(data.get("realOwnerVotes")),
        winners=winners,
        correct_voters=list(data.get("correctVoters") or []),
        voter_points_awarded=_int(data.get("voterPointsAwarded")),
    )


def results_to_snapshot(results: Optional[RoundResults]) -> Optional[Dict[str, Any]]:
    if results is None:
        return None
    return {
        "realOwnerId": results.real_owner_id,
        "realOwnerVotes": results.real_owner_votes,
        "winners": [
            {
                "presenterId": winner.presenter_id,
                "votes": winner.votes,
                "isRealOwner": winner.is_real_owner,
                "pointsAwarded": winner.points_awarded,
            }
            for winner in results.winners
        ],
        "correctVoters": list(results.correct_voters),
        "voterPointsAwarded": results.voter_points_awarded,
    }


# Game


def _volunteers_from_snapshot(data: Any) -> set:
    if isinstance(data, dict):
        return {player_id for player_id, claimed in data.items() if claimed}
    if isinstance(data, (list, tuple, set)):
        return set(data)
    return set()


def game_from_snapshot(data: Optional[Dict[str, Any]]) -> GameState:
    """Project the raw game record; an absent record yields lobby defaults"""
    if not data:
        return GameState()
    return GameState(
        mode=_enum_value(GameMode, data.get("mode"), GameMode.LOBBY),
        phase=_enum_value(GamePhase, data.get("phase"), GamePhase.PHOTO),
        photo_queue=list(data.get("photoQueue") or []),
        current_photo_id=data.get("currentPhotoId") or None,
        real_owner_id=data.get("realOwnerId") or None,
        timer=timer_from_snapshot(data.get("timer")),
        volunteers=_volunteers_from_snapshot(data.get("volunteers")),
        selected_presenters=list(data.get("selectedPresenters") or []),
        votes=dict(data.get("votes") or {}),
        results=results_from_snapshot(data.get("results")),
        timer_settings=timer_settings_from_snapshot(data.get("timerSettings")),
        auto_advance=data.get("autoAdvance") if data.get("autoAdvance") is not None else True,
    )


def game_to_snapshot(game: GameState) -> Dict[str, Any]:
    return {
        "mode": game.mode.value,
        "phase": game.phase.value,
        "photoQueue": list(game.photo_queue),
        "currentPhotoId": game.current_photo_id,
        "realOwnerId": game.real_owner_id,
        "timer": timer_to_snapshot(game.timer),
        "volunteers": {player_id: True for player_id in sorted(game.volunteers)},
        "selectedPresenters": list(game.selected_presenters),
        "votes": dict(game.votes),
        "results": results_to_snapshot(game.results),
        "timerSettings": timer_settings_to_snapshot(game.timer_settings),
        "autoAdvance": game.auto_advance,
    }


# Players & submissions


def player_from_snapshot(player_id: str, data: Dict[str, Any]) -> Player:
    return Player(
        id=player_id,
        name=data.get("name") or "",
        selfie_url=data.get("selfieUrl") or "",
        score=max(0, _int(data.get("score"))),
        has_volunteered_count=max(0, _int(data.get("hasVolunteeredCount"))),
        is_online=bool(data.get("isOnline", False)),
        last_seen=_optional_int(data.get("lastSeen")),
        created_at=_optional_int(data.get("createdAt")),
    )


def player_to_snapshot(player: Player) -> Dict[str, Any]:
    return {
        "name": player.name,
        "selfieUrl": player.selfie_url,
        "score": player.score,
        "hasVolunteeredCount": player.has_volunteered_count,
        "isOnline": player.is_online,
        "lastSeen": player.last_seen,
        "createdAt": player.created_at,
    }


def submission_from_snapshot(submission_id: str, data: Dict[str, Any]) -> Submission:
    return Submission(
        id=submission_id,
        owner_id=data.get("ownerId") or data.get("odUid") or "",
        photo_url=data.get("photoUrl") or "",
        caption=data.get("caption") or "",
        has_been_played=bool(data.get("hasBeenPlayed", False)),
        is_bonus=bool(data.get("isBonus", False)),
        created_at=_optional_int(data.get("createdAt")),
    )


def submission_to_snapshot(submission: Submission) -> Dict[str, Any]:
    return {
        "ownerId": submission.owner_id,
        "photoUrl": submission.photo_url,
        "caption": submission.caption,
        "hasBeenPlayed": submission.has_been_played,
        "isBonus": submission.is_bonus,
        "createdAt": submission.created_at,
    }


def players_from_snapshot(data: Optional[Dict[str, Any]]) -> List[Player]:
    return [player_from_snapshot(pid, raw) for pid, raw in (data or {}).items() if isinstance(raw, dict)]


def submissions_from_snapshot(data: Optional[Dict[str, Any]]) -> List[Submission]:
    return [submission_from_snapshot(sid, raw) for sid, raw in (data or {}).items() if isinstance(raw, dict)]


def slideshow_from_snapshot(data: Optional[Dict[str, Any]]) -> List[SlideshowPhoto]:
    """Slideshow photos, newest first"""
    photos = [
        SlideshowPhoto(id=pid, photo_url=raw.get("photoUrl") or "", created_at=_int(raw.get("createdAt")))
        for pid, raw in (data or {}).items()
        if isinstance(raw, dict)
    ]
    photos.sort(key=lambda photo: photo.created_at, reverse=True)
    return photos


def prompts_from_snapshot(data: Optional[Dict[str, Any]]) -> List[PromptAnswer]:
    answers = [
        PromptAnswer(
            id=pid,
            prompt=raw.get("prompt") or "",
            answer=raw.get("answer") or "",
            created_at=_int(raw.get("createdAt")),
        )
        for pid, raw in (data or {}).items()
        if isinstance(raw, dict)
    ]
    answers.sort(key=lambda answer: answer.created_at)
    return answers


def room_from_snapshot(data: Optional[Dict[str, Any]]) -> RoomData:
    """Project a whole 'rooms/{code}' value"""
    data = data or {}
    return RoomData(
        game=game_from_snapshot(data.get("game")),
        players=players_from_snapshot(data.get("players")),
        submissions=submissions_from_snapshot(data.get("submissions")),
    )
