"""Game domain services: room store, coordinator and the idle sweeper.

This package holds the room lifecycle and game rules. Socket handlers and
HTTP routes import from here, keeping transport concerns separated from
core game mechanics.
"""

from .coordinator import GameCoordinator, GameView, Outcome
from .store import ReadyState, RoomStore

__all__ = ['GameCoordinator', 'GameView', 'Outcome', 'ReadyState', 'RoomStore']
