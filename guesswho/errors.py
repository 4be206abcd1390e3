"""Room and game errors.

Raised by the room store, turned into ``error`` events for the sending
connection by the socket handlers. None of them is ever broadcast.
"""


class GuessWhoError(Exception):
    """Base class for every recoverable game error."""
    message = 'Invalid action'

    def __init__(self, message=None):
        super().__init__(message or self.message)


class RoomNotFound(GuessWhoError):
    message = 'Room not found'

    def __init__(self, room_id=None):
        self.room_id = room_id
        super().__init__()


class RoomFull(GuessWhoError):
    message = 'Room is full'


class GameInProgress(GuessWhoError):
    message = 'Game already in progress'


class PlayerNotFound(GuessWhoError):
    message = 'Player not found'

    def __init__(self, player_id=None):
        self.player_id = player_id
        super().__init__()


class InvalidRoomState(GuessWhoError):
    """Action attempted while the room is in the wrong status."""
    message = 'Action not allowed in the current room state'


class AlreadyInRoom(GuessWhoError):
    message = 'You are already in a room'
