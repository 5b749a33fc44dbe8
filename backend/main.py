import asyncio
import base64
import binascii
import hmac
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, Field

from config.settings import DEFAULT_ROOM_CODE, HOST_PASSWORD, MEDIA_DIR, MEDIA_URL, WEBAPP_ORIGINS
from game.errors import GameError
from game.game_manager import Upload, game_manager, normalize_room_code
from game.models import GameMode, GamePhase, Player, RoomData, Submission
from game.phases import seconds_left
from game.projector import (
    game_to_snapshot,
    player_to_snapshot,
    room_from_snapshot,
    room_path,
    submission_to_snapshot,
)
from game.timer_driver import AutoAdvanceDriver
from utils.logger import get_logger

logger = get_logger(__name__)

MAX_UPLOAD_BYTES = 15 * 1024 * 1024


@asynccontextmanager
async def lifespan(app: FastAPI):
    os.makedirs(MEDIA_DIR, exist_ok=True)
    game_manager.ensure_room(normalize_room_code(DEFAULT_ROOM_CODE))
    for room_code in game_manager.room_codes():
        game_manager.resume_pending_deletes(room_code)
    driver = AutoAdvanceDriver(game_manager)
    driver.start()
    try:
        yield
    finally:
        await driver.stop()


app = FastAPI(title="Photo Bluff API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=WEBAPP_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(GameError)
async def game_error_handler(request, exc: GameError) -> JSONResponse:
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


class HostRequest(BaseModel):
    password: str = Field(..., min_length=1)


class PhotoUpload(BaseModel):
    filename: str = "photo.jpg"
    data: str = Field(..., min_length=1)


class SubmitRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=40)
    selfie: Optional[PhotoUpload] = None
    photos: List[PhotoUpload] = Field(default_factory=list)
    bonus_photos: List[PhotoUpload] = Field(default_factory=list)


class SubmitResponse(BaseModel):
    player_id: str
    submission_count: int


class VoteRequest(BaseModel):
    target_id: str = Field(..., min_length=1)


class PromptRequest(BaseModel):
    prompt: str = ""
    answer: str = Field(..., max_length=500)


class ModeRequest(HostRequest):
    mode: GameMode


class PhaseRequest(HostRequest):
    phase: GamePhase


class TimerRequest(HostRequest):
    seconds: int


class TimerSettingRequest(HostRequest):
    phase: str
    seconds: int


class QueueRequest(HostRequest):
    submission_id: str


class QueueMoveRequest(HostRequest):
    from_index: int
    to_index: int


class PointsRequest(HostRequest):
    delta: int


class StatusResponse(BaseModel):
    status: str = "ok"


class AdvanceResponse(BaseModel):
    advanced: bool
    phase: Optional[GamePhase] = None


class QueueResponse(BaseModel):
    photo_queue: List[str]


class PlayNextResponse(BaseModel):
    current_photo_id: str
    real_owner_id: str


class PointsResponse(BaseModel):
    score: int


class AutoAdvanceResponse(BaseModel):
    auto_advance: bool


class PresentersResponse(BaseModel):
    selected_presenters: List[str]


class IdsResponse(BaseModel):
    ids: List[str]


class SlideshowPhotoInfo(BaseModel):
    id: str
    photo_url: str
    thumbnail_url: str
    created_at: int


class PromptAnswerInfo(BaseModel):
    id: str
    prompt: str
    answer: str
    created_at: int


class PlayerSession(BaseModel):
    id: str
    name: str
    selfie_url: str
    score: int
    is_online: bool


def verify_host(password: str) -> None:
    if not HOST_PASSWORD:
        raise HTTPException(status_code=500, detail="HOST_PASSWORD is not configured")
    if not hmac.compare_digest(password.encode(), HOST_PASSWORD.encode()):
        raise HTTPException(status_code=401, detail="Invalid host password")


def decode_upload(upload: PhotoUpload) -> Upload:
    try:
        data = base64.b64decode(upload.data, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(status_code=400, detail="Photo data is not valid base64")
    if not data:
        raise HTTPException(status_code=400, detail="Photo is empty")
    if len(data) > MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail="Photo is too large")
    return Upload(filename=upload.filename, data=data)


def player_payload(player: Player) -> Dict[str, Any]:
    return {"id": player.id, **player_to_snapshot(player)}


def submission_payload(submission: Submission) -> Dict[str, Any]:
    return {"id": submission.id, **submission_to_snapshot(submission)}


def build_room_payload(room_code: str, room: RoomData) -> Dict[str, Any]:
    now = game_manager.clock()
    current = room.current_photo
    return {
        "roomCode": room_code,
        "game": game_to_snapshot(room.game),
        "players": [player_payload(p) for p in room.players],
        "submissions": [submission_payload(s) for s in room.submissions],
        "currentPhoto": submission_payload(current) if current else None,
        "leaderboard": [p.id for p in room.leaderboard],
        "secondsLeft": seconds_left(room.game.timer, now),
        "serverTime": now,
    }


@app.get("/api/health")
async def health() -> Dict[str, str]:
    return {"status": "ok"}


# Room state


@app.get("/api/rooms/{room_code}/state")
async def room_state(room_code: str) -> Dict[str, Any]:
    code = normalize_room_code(room_code)
    game_manager.ensure_room(code)
    return build_room_payload(code, game_manager.load_room(code))


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    # Clients only listen; anything they send is ignored
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


@app.websocket("/api/rooms/{room_code}/stream")
async def room_stream(websocket: WebSocket, room_code: str) -> None:
    try:
        code = normalize_room_code(room_code)
    except GameError as exc:
        logger.info("Rejected stream for room %r: %s", room_code, exc.message)
        await websocket.close(code=1008)
        return
    game_manager.ensure_room(code)
    await websocket.accept()

    loop = asyncio.get_running_loop()
    updates: asyncio.Queue = asyncio.Queue()

    def on_change(raw: Any) -> None:
        loop.call_soon_threadsafe(updates.put_nowait, raw)

    unsubscribe = game_manager.store.listen(room_path(code), on_change)
    closed = asyncio.create_task(_wait_for_disconnect(websocket))
    try:
        while True:
            next_update = asyncio.create_task(updates.get())
            done, _ = await asyncio.wait({next_update, closed}, return_when=asyncio.FIRST_COMPLETED)
            if closed in done:
                next_update.cancel()
                break
            raw = next_update.result()
            # Collapse bursts of writes into the latest value
            while not updates.empty():
                raw = updates.get_nowait()
            await websocket.send_json(build_room_payload(code, room_from_snapshot(raw)))
    except WebSocketDisconnect:
        pass
    finally:
        closed.cancel()
        unsubscribe()
    logger.debug("Room %s: stream client left", code)


# Entry


@app.post("/api/rooms/{room_code}/submit", response_model=SubmitResponse)
async def submit_entry(room_code: str, request: SubmitRequest) -> SubmitResponse:
    code = normalize_room_code(room_code)
    selfie = decode_upload(request.selfie) if request.selfie else None
    photos = [decode_upload(photo) for photo in request.photos]
    bonus = [decode_upload(photo) for photo in request.bonus_photos]
    try:
        player = game_manager.submit_entry(code, request.name, selfie, photos, bonus)
    except OSError:
        logger.exception("Room %s: upload failed", code)
        raise HTTPException(status_code=502, detail="Upload failed, please try again")
    return SubmitResponse(player_id=player.id, submission_count=len(photos))


# Player intents


@app.get("/api/rooms/{room_code}/players/{player_id}/session", response_model=PlayerSession)
async def player_session(room_code: str, player_id: str) -> PlayerSession:
    player = game_manager.resolve_session(normalize_room_code(room_code), player_id)
    return PlayerSession(
        id=player.id,
        name=player.name,
        selfie_url=player.selfie_url,
        score=player.score,
        is_online=player.is_online,
    )


@app.post("/api/rooms/{room_code}/players/{player_id}/join", response_model=StatusResponse)
async def player_join(room_code: str, player_id: str) -> StatusResponse:
    game_manager.join(normalize_room_code(room_code), player_id)
    return StatusResponse()


@app.post("/api/rooms/{room_code}/players/{player_id}/heartbeat", response_model=StatusResponse)
async def player_heartbeat(room_code: str, player_id: str) -> StatusResponse:
    game_manager.heartbeat(normalize_room_code(room_code), player_id)
    return StatusResponse()


@app.post("/api/rooms/{room_code}/players/{player_id}/leave", response_model=StatusResponse)
async def player_leave(room_code: str, player_id: str) -> StatusResponse:
    game_manager.leave(normalize_room_code(room_code), player_id)
    return StatusResponse()


@app.post("/api/rooms/{room_code}/players/{player_id}/volunteer", response_model=StatusResponse)
async def player_volunteer(room_code: str, player_id: str) -> StatusResponse:
    game_manager.volunteer(normalize_room_code(room_code), player_id)
    return StatusResponse()


@app.post("/api/rooms/{room_code}/players/{player_id}/unvolunteer", response_model=StatusResponse)
async def player_unvolunteer(room_code: str, player_id: str) -> StatusResponse:
    game_manager.unvolunteer(normalize_room_code(room_code), player_id)
    return StatusResponse()


@app.post("/api/rooms/{room_code}/players/{player_id}/vote", response_model=StatusResponse)
async def player_vote(room_code: str, player_id: str, request: VoteRequest) -> StatusResponse:
    game_manager.vote(normalize_room_code(room_code), player_id, request.target_id)
    return StatusResponse()


# Slideshow & prompts


@app.post("/api/rooms/{room_code}/slideshow", response_model=SlideshowPhotoInfo)
async def slideshow_upload(room_code: str, request: PhotoUpload) -> SlideshowPhotoInfo:
    code = normalize_room_code(room_code)
    upload = decode_upload(request)
    try:
        photo = game_manager.add_slideshow_photo(code, upload)
    except OSError:
        logger.exception("Room %s: slideshow upload failed", code)
        raise HTTPException(status_code=502, detail="Upload failed, please try again")
    return SlideshowPhotoInfo(
        id=photo.id,
        photo_url=photo.photo_url,
        thumbnail_url=photo.photo_url,
        created_at=photo.created_at,
    )


@app.get("/api/rooms/{room_code}/slideshow", response_model=List[SlideshowPhotoInfo])
async def slideshow_list(room_code: str) -> List[SlideshowPhotoInfo]:
    return [
        SlideshowPhotoInfo(
            id=photo.id,
            photo_url=photo.photo_url,
            thumbnail_url=thumbnail,
            created_at=photo.created_at,
        )
        for photo, thumbnail in game_manager.list_slideshow(normalize_room_code(room_code))
    ]


@app.post("/api/rooms/{room_code}/prompts", response_model=PromptAnswerInfo)
async def prompt_submit(room_code: str, request: PromptRequest) -> PromptAnswerInfo:
    entry = game_manager.submit_prompt_answer(normalize_room_code(room_code), request.prompt, request.answer)
    return PromptAnswerInfo(id=entry.id, prompt=entry.prompt, answer=entry.answer, created_at=entry.created_at)


# Host console


@app.post("/api/rooms/{room_code}/host/auth", response_model=StatusResponse)
async def host_auth(room_code: str, request: HostRequest) -> StatusResponse:
    verify_host(request.password)
    game_manager.ensure_room(normalize_room_code(room_code))
    return StatusResponse()


@app.post("/api/rooms/{room_code}/host/advance", response_model=AdvanceResponse)
async def host_advance(room_code: str, request: HostRequest) -> AdvanceResponse:
    verify_host(request.password)
    phase = game_manager.advance(normalize_room_code(room_code))
    return AdvanceResponse(advanced=phase is not None, phase=phase)


@app.post("/api/rooms/{room_code}/host/play-next", response_model=PlayNextResponse)
async def host_play_next(room_code: str, request: HostRequest) -> PlayNextResponse:
    verify_host(request.password)
    photo = game_manager.play_next(normalize_room_code(room_code))
    return PlayNextResponse(current_photo_id=photo.id, real_owner_id=photo.owner_id)


@app.post("/api/rooms/{room_code}/host/mode", response_model=StatusResponse)
async def host_mode(room_code: str, request: ModeRequest) -> StatusResponse:
    verify_host(request.password)
    game_manager.set_mode(normalize_room_code(room_code), request.mode)
    return StatusResponse()


@app.post("/api/rooms/{room_code}/host/phase", response_model=StatusResponse)
async def host_phase(room_code: str, request: PhaseRequest) -> StatusResponse:
    verify_host(request.password)
    game_manager.set_phase(normalize_room_code(room_code), request.phase)
    return StatusResponse()


@app.post("/api/rooms/{room_code}/host/timer", response_model=StatusResponse)
async def host_timer(room_code: str, request: TimerRequest) -> StatusResponse:
    verify_host(request.password)
    game_manager.start_timer(normalize_room_code(room_code), request.seconds)
    return StatusResponse()


@app.post("/api/rooms/{room_code}/host/timer/clear", response_model=StatusResponse)
async def host_timer_clear(room_code: str, request: HostRequest) -> StatusResponse:
    verify_host(request.password)
    game_manager.clear_timer(normalize_room_code(room_code))
    return StatusResponse()


@app.post("/api/rooms/{room_code}/host/timer-settings")
async def host_timer_settings(room_code: str, request: TimerSettingRequest) -> Dict[str, int]:
    verify_host(request.password)
    settings = game_manager.update_timer_setting(normalize_room_code(room_code), request.phase, request.seconds)
    return {phase: getattr(settings, phase) for phase in settings.phases()}


@app.post("/api/rooms/{room_code}/host/auto-advance", response_model=AutoAdvanceResponse)
async def host_auto_advance(room_code: str, request: HostRequest) -> AutoAdvanceResponse:
    verify_host(request.password)
    return AutoAdvanceResponse(auto_advance=game_manager.toggle_auto_advance(normalize_room_code(room_code)))


@app.post("/api/rooms/{room_code}/host/presenters/shuffle", response_model=PresentersResponse)
async def host_shuffle_presenters(room_code: str, request: HostRequest) -> PresentersResponse:
    verify_host(request.password)
    presenters = game_manager.shuffle_presenters(normalize_room_code(room_code))
    return PresentersResponse(selected_presenters=presenters)


@app.post("/api/rooms/{room_code}/host/results/reveal")
async def host_reveal_results(room_code: str, request: HostRequest) -> Dict[str, Any]:
    verify_host(request.password)
    results = game_manager.reveal_results(normalize_room_code(room_code))
    return {
        "realOwnerId": results.real_owner_id,
        "winners": results.winner_ids(),
        "correctVoters": results.correct_voters,
        "voterPointsAwarded": results.voter_points_awarded,
    }


@app.post("/api/rooms/{room_code}/host/reset", response_model=StatusResponse)
async def host_reset(room_code: str, request: HostRequest) -> StatusResponse:
    verify_host(request.password)
    game_manager.reset_room(normalize_room_code(room_code))
    return StatusResponse()


@app.post("/api/rooms/{room_code}/host/queue/add", response_model=QueueResponse)
async def host_queue_add(room_code: str, request: QueueRequest) -> QueueResponse:
    verify_host(request.password)
    return QueueResponse(photo_queue=game_manager.enqueue_photo(normalize_room_code(room_code), request.submission_id))


@app.post("/api/rooms/{room_code}/host/queue/remove", response_model=QueueResponse)
async def host_queue_remove(room_code: str, request: QueueRequest) -> QueueResponse:
    verify_host(request.password)
    return QueueResponse(photo_queue=game_manager.dequeue_photo(normalize_room_code(room_code), request.submission_id))


@app.post("/api/rooms/{room_code}/host/queue/move", response_model=QueueResponse)
async def host_queue_move(room_code: str, request: QueueMoveRequest) -> QueueResponse:
    verify_host(request.password)
    queue = game_manager.reorder_queue(normalize_room_code(room_code), request.from_index, request.to_index)
    return QueueResponse(photo_queue=queue)


@app.post("/api/rooms/{room_code}/host/players/{player_id}/points", response_model=PointsResponse)
async def host_points(room_code: str, player_id: str, request: PointsRequest) -> PointsResponse:
    verify_host(request.password)
    return PointsResponse(score=game_manager.adjust_points(normalize_room_code(room_code), player_id, request.delta))


@app.post("/api/rooms/{room_code}/host/players/{player_id}/disconnect", response_model=StatusResponse)
async def host_disconnect(room_code: str, player_id: str, request: HostRequest) -> StatusResponse:
    verify_host(request.password)
    game_manager.disconnect(normalize_room_code(room_code), player_id)
    return StatusResponse()


@app.post("/api/rooms/{room_code}/host/players/{player_id}/delete", response_model=StatusResponse)
async def host_delete_player(room_code: str, player_id: str, request: HostRequest) -> StatusResponse:
    verify_host(request.password)
    game_manager.delete_player(normalize_room_code(room_code), player_id)
    return StatusResponse()


@app.post("/api/rooms/{room_code}/host/cleanup-orphans", response_model=IdsResponse)
async def host_cleanup_orphans(room_code: str, request: HostRequest) -> IdsResponse:
    verify_host(request.password)
    return IdsResponse(ids=game_manager.cleanup_orphans(normalize_room_code(room_code)))


@app.post("/api/rooms/{room_code}/host/pending-deletes/resume", response_model=IdsResponse)
async def host_resume_deletes(room_code: str, request: HostRequest) -> IdsResponse:
    verify_host(request.password)
    return IdsResponse(ids=game_manager.resume_pending_deletes(normalize_room_code(room_code)))


@app.post("/api/rooms/{room_code}/host/slideshow/{photo_id}/delete", response_model=StatusResponse)
async def host_slideshow_delete(room_code: str, photo_id: str, request: HostRequest) -> StatusResponse:
    verify_host(request.password)
    game_manager.delete_slideshow_photo(normalize_room_code(room_code), photo_id)
    return StatusResponse()


@app.post("/api/rooms/{room_code}/host/slideshow/delete-all")
async def host_slideshow_delete_all(room_code: str, request: HostRequest) -> Dict[str, int]:
    verify_host(request.password)
    return {"deleted": game_manager.delete_all_slideshow(normalize_room_code(room_code))}


@app.post("/api/rooms/{room_code}/host/prompts", response_model=List[PromptAnswerInfo])
async def host_prompts(room_code: str, request: HostRequest) -> List[PromptAnswerInfo]:
    verify_host(request.password)
    return [
        PromptAnswerInfo(id=entry.id, prompt=entry.prompt, answer=entry.answer, created_at=entry.created_at)
        for entry in game_manager.list_prompt_answers(normalize_room_code(room_code))
    ]


app.mount(MEDIA_URL, StaticFiles(directory=MEDIA_DIR, check_dir=False), name="media")

WEBAPP_DIST = Path(__file__).resolve().parent / "webapp_dist"
if WEBAPP_DIST.exists():
    app.mount("/", StaticFiles(directory=str(WEBAPP_DIST), html=True), name="webapp")
