"""
Polling loop that advances phases when their deadline passes
"""
import asyncio
from typing import Dict, Optional

from config.settings import TIMER_POLL_SECONDS
from game.game_manager import GameManager
from game.models import GamePhase
from utils.logger import get_logger

logger = get_logger(__name__)


class AutoAdvanceDriver:
    """
    Checks every room on a fixed interval: expired deadlines advance the
    phase (when the room has auto-advance on) and stale player sessions
    are marked offline.
    """

    def __init__(self, manager: GameManager, interval: float = TIMER_POLL_SECONDS):
        self.manager = manager
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    def tick(self, now: Optional[int] = None) -> Dict[str, GamePhase]:
        """
        Run one check over all rooms.

        Returns:
            Rooms that advanced, with their new phase
        """
        now = self.manager.clock() if now is None else now
        advanced: Dict[str, GamePhase] = {}
        for room_code in self.manager.room_codes():
            try:
                phase = self.manager.advance_if_due(room_code, now)
                if phase is not None:
                    advanced[room_code] = phase
                self.manager.expire_stale_presence(room_code, now)
            except Exception:
                # Leave the room as it was; the next tick retries
                logger.exception("Room %s: auto-advance check failed", room_code)
        return advanced

    async def run(self) -> None:
        logger.info("Auto-advance driver started (every %.2fs)", self.interval)
        try:
            while True:
                self.tick()
                await asyncio.sleep(self.interval)
        except asyncio.CancelledError:
            logger.info("Auto-advance driver stopped")
            raise

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run())
        return self._task

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
