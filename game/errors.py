"""
Errors raised by the room intent handlers
"""


class GameError(Exception):
    """Base class for every rejected or failed room operation"""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class IntentRejected(GameError):
    """The intent is not allowed in the current room state"""


class NotFound(GameError):
    """A referenced player, submission or photo does not exist"""

    status_code = 404


class QueueEmpty(GameError):
    """playNext was called with nothing queued"""

    status_code = 409


class PlayerAlreadyOnline(GameError):
    """Another live session already holds this player"""

    status_code = 409


class StaleSession(GameError):
    """A client's cached player id no longer exists in the room"""

    status_code = 404
