"""
Phase transitions and per-phase timers
"""
from typing import Dict, Optional

from game.models import GamePhase, Timer, TimerSettings

NEXT_PHASE: Dict[GamePhase, GamePhase] = {
    GamePhase.COUNTDOWN: GamePhase.VOLUNTEERING,
    GamePhase.PHOTO: GamePhase.VOLUNTEERING,
    GamePhase.VOLUNTEERING: GamePhase.PITCHES,
    GamePhase.PITCHES: GamePhase.VOTING,
    GamePhase.VOTING: GamePhase.RESULTS,
    GamePhase.RESULTS: GamePhase.SCOREBOARD,
}


def next_phase(phase: GamePhase) -> Optional[GamePhase]:
    """Phase that follows, or None when the host must start the next photo"""
    return NEXT_PHASE.get(phase)


def timer_for(seconds: int, now_ms: int) -> Optional[Timer]:
    """A deadline `seconds` from now; None (manual advance) for 0"""
    if seconds <= 0:
        return None
    return Timer(ends_at=now_ms + seconds * 1000, duration=seconds)


def phase_timer(settings: TimerSettings, phase: GamePhase, now_ms: int) -> Optional[Timer]:
    return timer_for(settings.duration_for(phase), now_ms)


def selects_presenters(current: GamePhase, target: GamePhase) -> bool:
    return current == GamePhase.VOLUNTEERING and target == GamePhase.PITCHES


def computes_results(current: GamePhase, target: GamePhase) -> bool:
    return current == GamePhase.VOTING and target == GamePhase.RESULTS


def seconds_left(timer: Optional[Timer], now_ms: int) -> Optional[int]:
    """Whole seconds until the deadline (0 once passed), None without one"""
    if timer is None or timer.ends_at is None:
        return None
    remaining = timer.ends_at - now_ms
    if remaining <= 0:
        return 0
    return -(-remaining // 1000)
