import logging
import random
import threading
import time
from typing import Callable, Dict, List, NamedTuple, Optional

from guesswho.errors import (
    GameInProgress,
    InvalidRoomState,
    PlayerNotFound,
    RoomFull,
    RoomNotFound,
)
from guesswho.models import Player, Room, RoomStatus, generate_room_code

logger = logging.getLogger(__name__)

MAX_PLAYERS = 2
DEFAULT_DECK_SIZE = 20


class ReadyState(NamedTuple):
    room: Room
    player: Player
    all_ready: bool


def generate_deck(size: int) -> List[str]:
    return [f'card_{i}' for i in range(1, size + 1)]


class RoomStore:
    """In-memory collection of rooms keyed by room id.

    Every public method runs under ``self.lock``. The lock is re-entrant so
    callers (the coordinator, the sweeper) can hold it across several calls
    and see a consistent room.
    """

    def __init__(
        self,
        deck_size: int = DEFAULT_DECK_SIZE,
        ready_gate: bool = True,
        distinct_secrets: bool = False,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.time,
    ):
        if distinct_secrets and deck_size < MAX_PLAYERS:
            raise ValueError('deck too small to deal distinct secrets')
        self.deck_size = deck_size
        self.ready_gate = ready_gate
        self.distinct_secrets = distinct_secrets
        self.lock = threading.RLock()
        self._rooms: Dict[str, Room] = {}
        self._rng = rng or random.Random()
        self._clock = clock

    def __len__(self):
        with self.lock:
            return len(self._rooms)

    def __contains__(self, room_id):
        with self.lock:
            return room_id in self._rooms

    def room_ids(self) -> List[str]:
        with self.lock:
            return list(self._rooms)

    def create_room(self, room_id: str) -> Room:
        with self.lock:
            room = self._rooms.get(room_id)
            if room is None:
                room = Room(id=room_id, created_at=self._clock())
                self._rooms[room_id] = room
                logger.info(f"[room-create] room={room_id}")
            return room

    def create_room_with_code(self) -> Room:
        with self.lock:
            return self.create_room(generate_room_code(self._rooms))

    def get_room(self, room_id: str) -> Optional[Room]:
        with self.lock:
            return self._rooms.get(room_id)

    def add_player(self, room_id: str, player_id: str, nickname: str) -> Room:
        with self.lock:
            room = self._rooms.get(room_id)
            if room is None:
                raise RoomNotFound(room_id)
            if len(room.players) >= MAX_PLAYERS:
                raise RoomFull()
            if room.status != RoomStatus.WAITING:
                raise GameInProgress()

            room.players[player_id] = Player(
                id=player_id,
                nickname=nickname,
                remaining=self.deck_size,
            )
            if len(room.players) == MAX_PLAYERS:
                if self.ready_gate:
                    room.status = RoomStatus.FULL
                else:
                    self._deal(room)
            logger.info(f"[room-join] room={room_id} player={player_id} players={len(room.players)} status={room.status.value}")
            return room

    def remove_player(self, room_id: str, player_id: str) -> None:
        """Remove a player; always succeeds, even for unknown rooms/players."""
        with self.lock:
            room = self._rooms.get(room_id)
            if room is None:
                return
            room.players.pop(player_id, None)
            if room.is_empty:
                del self._rooms[room_id]
                logger.info(f"[room-delete] room={room_id} last player left")
                return
            # The survivor waits for a fresh opponent and a fresh deal
            room.status = RoomStatus.WAITING
            room.deck = []
            for remaining_player in room.players.values():
                remaining_player.reset_for_new_game(self.deck_size)
            logger.info(f"[room-leave] room={room_id} player={player_id} players={len(room.players)}")

    def find_room_by_player(self, player_id: str) -> Optional[Room]:
        with self.lock:
            for room in self._rooms.values():
                if player_id in room.players:
                    return room
            return None

    def set_player_ready(self, room_id: str, player_id: str) -> ReadyState:
        with self.lock:
            room = self._rooms.get(room_id)
            if room is None:
                raise RoomNotFound(room_id)
            player = room.players.get(player_id)
            if player is None:
                raise PlayerNotFound(player_id)
            if room.status in (RoomStatus.PLAYING, RoomStatus.FINISHED):
                raise InvalidRoomState('Game has already started or is finished')

            player.is_ready = True
            all_ready = (
                room.status == RoomStatus.FULL
                and len(room.players) == MAX_PLAYERS
                and all(p.is_ready for p in room.players.values())
            )
            if all_ready:
                self._deal(room)
            return ReadyState(room, player, all_ready)

    def _deal(self, room: Room) -> None:
        """Fresh deck, one secret per player, room goes to playing."""
        room.deck = generate_deck(self.deck_size)
        players = list(room.players.values())
        if self.distinct_secrets:
            secrets = self._rng.sample(room.deck, len(players))
        else:
            secrets = [self._rng.choice(room.deck) for _ in players]
        for player, secret in zip(players, secrets):
            player.secret_card = secret
        room.status = RoomStatus.PLAYING
        logger.info(f"[deal] room={room.id} deck={len(room.deck)} players={len(players)}")

    def sweep_idle(self, max_age: float) -> List[str]:
        """Delete empty rooms older than ``max_age`` seconds."""
        with self.lock:
            now = self._clock()
            stale = [
                room_id for room_id, room in self._rooms.items()
                if room.is_empty and now - room.created_at > max_age
            ]
            for room_id in stale:
                del self._rooms[room_id]
            return stale
