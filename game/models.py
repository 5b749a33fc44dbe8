"""
Data models for the photo bluffing game
"""
from enum import Enum
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set


class GameMode(str, Enum):
    """Top-level room modes"""
    LOBBY = "lobby"
    SLIDESHOW = "slideshow"
    GAME = "game"
    FINISHED = "finished"        # Terminal: TV clients move to the finish page


class GamePhase(str, Enum):
    """Phases of a round, meaningful only while mode is GAME"""
    COUNTDOWN = "countdown"
    PHOTO = "photo"
    VOLUNTEERING = "volunteering"
    PITCHES = "pitches"
    VOTING = "voting"
    RESULTS = "results"
    SCOREBOARD = "scoreboard"


@dataclass
class Player:
    """A player who submitted photos"""
    id: str
    name: str
    selfie_url: str = ""
    score: int = 0
    has_volunteered_count: int = 0
    is_online: bool = False
    last_seen: Optional[int] = None       # ms timestamp of the last heartbeat
    created_at: Optional[int] = None


@dataclass
class Submission:
    """A mystery photo uploaded by a player"""
    id: str
    owner_id: str
    photo_url: str
    caption: str = ""
    has_been_played: bool = False
    is_bonus: bool = False
    created_at: Optional[int] = None


@dataclass
class SlideshowPhoto:
    """Ambient slideshow photo, not part of the game"""
    id: str
    photo_url: str
    created_at: int = 0


@dataclass
class PromptAnswer:
    id: str
    prompt: str
    answer: str
    created_at: int = 0


@dataclass
class Timer:
    """Phase deadline; no Timer at all means the host advances manually"""
    ends_at: Optional[int] = None         # ms timestamp
    duration: Optional[int] = None        # seconds


@dataclass
class TimerSettings:
    """Per-phase durations in seconds (0 = manual advance)"""
    countdown: int = 3
    volunteering: int = 15
    pitches: int = 0
    voting: int = 30
    results: int = 10

    def duration_for(self, phase: GamePhase) -> int:
        """Configured seconds for a phase; phases without a setting are manual"""
        return max(0, int(getattr(self, phase.value, 0) or 0))

    @staticmethod
    def phases() -> List[str]:
        return ["countdown", "volunteering", "pitches", "voting", "results"]


@dataclass
class WinnerEntry:
    presenter_id: str
    votes: int
    is_real_owner: bool
    points_awarded: int


@dataclass
class RoundResults:
    """Outcome of one round, computed once at voting -> results"""
    real_owner_id: str
    real_owner_votes: int
    winners: List[WinnerEntry] = field(default_factory=list)
    correct_voters: List[str] = field(default_factory=list)
    voter_points_awarded: int = 0

    def winner_ids(self) -> List[str]:
        return [winner.presenter_id for winner in self.winners]

    def score_deltas(self) -> Dict[str, int]:
        """Points owed to each player; a player can be credited twice"""
        deltas: Dict[str, int] = {}
        for winner in self.winners:
            deltas[winner.presenter_id] = deltas.get(winner.presenter_id, 0) + winner.points_awarded
        for voter_id in self.correct_voters:
            deltas[voter_id] = deltas.get(voter_id, 0) + self.voter_points_awarded
        return deltas


@dataclass
class GameState:
    """The singleton game record of a room"""
    mode: GameMode = GameMode.LOBBY
    phase: GamePhase = GamePhase.PHOTO
    photo_queue: List[str] = field(default_factory=list)
    current_photo_id: Optional[str] = None
    real_owner_id: Optional[str] = None
    timer: Optional[Timer] = None
    volunteers: Set[str] = field(default_factory=set)
    selected_presenters: List[str] = field(default_factory=list)
    votes: Dict[str, str] = field(default_factory=dict)
    results: Optional[RoundResults] = None
    timer_settings: TimerSettings = field(default_factory=TimerSettings)
    auto_advance: bool = True

    def is_presenter(self, player_id: str) -> bool:
        return player_id in self.selected_presenters

    def deadline_passed(self, now_ms: int) -> bool:
        """True when a timer deadline exists and has elapsed"""
        return (
            self.timer is not None
            and self.timer.ends_at is not None
            and now_ms >= self.timer.ends_at
        )


@dataclass
class RoomData:
    """Everything a client view needs, projected from the store"""
    game: GameState
    players: List[Player] = field(default_factory=list)
    submissions: List[Submission] = field(default_factory=list)

    def get_player(self, player_id: Optional[str]) -> Optional[Player]:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def get_submission(self, submission_id: Optional[str]) -> Optional[Submission]:
        for submission in self.submissions:
            if submission.id == submission_id:
                return submission
        return None

    @property
    def current_photo(self) -> Optional[Submission]:
        return self.get_submission(self.game.current_photo_id)

    @property
    def leaderboard(self) -> List[Player]:
        """Players sorted by score, highest first"""
        return sorted(self.players, key=lambda p: p.score, reverse=True)

    def submissions_of(self, player_id: str) -> List[Submission]:
        return [s for s in self.submissions if s.owner_id == player_id]

    def orphaned_submissions(self) -> List[Submission]:
        """Submissions whose owner no longer exists"""
        player_ids = {player.id for player in self.players}
        return [s for s in self.submissions if s.owner_id not in player_ids]
