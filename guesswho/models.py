import enum
import random
import string
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional


class RoomStatus(str, enum.Enum):
    WAITING = 'waiting'
    FULL = 'full'  # two seated, waiting on ready signals
    PLAYING = 'playing'
    FINISHED = 'finished'


@dataclass
class Player:
    id: str
    nickname: str
    remaining: int
    secret_card: Optional[str] = None
    is_ready: bool = False

    def reset_for_new_game(self, deck_size: int) -> None:
        self.secret_card = None
        self.remaining = deck_size
        self.is_ready = False

    def to_dict(self):
        """Public view; the secret only travels in the owner's game_started."""
        return {
            'id': self.id,
            'nickname': self.nickname,
            'remaining': self.remaining,
            'isReady': self.is_ready,
        }


@dataclass
class Room:
    id: str
    status: RoomStatus = RoomStatus.WAITING
    players: Dict[str, Player] = field(default_factory=dict)
    deck: List[str] = field(default_factory=list)
    created_at: float = field(default_factory=time.time)

    @property
    def is_empty(self) -> bool:
        return not self.players

    def opponent_of(self, player_id: str) -> Optional[Player]:
        for player in self.players.values():
            if player.id != player_id:
                return player
        return None

    def to_dict(self):
        """Snapshot sent as ``room_info``. Secrets are never part of it."""
        return {
            'roomId': self.id,
            'players': [p.to_dict() for p in self.players.values()],
            'status': self.status.value,
        }


def generate_room_code(taken, length=6):
    """Generate a short shareable room code not present in ``taken``."""
    while True:
        code = ''.join(random.choices(string.ascii_uppercase + string.digits, k=length))
        if code not in taken:
            return code
