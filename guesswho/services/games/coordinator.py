import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, NamedTuple, Optional

from guesswho.errors import AlreadyInRoom, GuessWhoError, InvalidRoomState, PlayerNotFound, RoomNotFound
from guesswho.models import Player, Room, RoomStatus
from .store import MAX_PLAYERS, RoomStore

logger = logging.getLogger(__name__)


@dataclass
class Outcome:
    """What a player action produced.

    ``broadcast`` is the payload for the audience the action implies;
    ``dealt`` maps player id -> private ``game_started`` payload.
    """
    ok: bool
    error: Optional[GuessWhoError] = None
    room: Optional[Room] = None
    player: Optional[Player] = None
    all_ready: bool = False
    broadcast: Optional[Dict[str, Any]] = None
    dealt: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    @classmethod
    def failed(cls, error=None):
        return cls(ok=False, error=error)


class GameView(NamedTuple):
    room: Optional[Room] = None
    player: Optional[Player] = None
    opponent: Optional[Player] = None


def game_started_payload(room: Room, player: Player) -> Dict[str, Any]:
    return {
        'roomId': room.id,
        'deck': list(room.deck),
        'mySecret': player.secret_card,
    }


class GameCoordinator:
    def __init__(self, store: RoomStore):
        self.store = store

    def _deal_payloads(self, room: Room) -> Dict[str, Dict[str, Any]]:
        return {pid: game_started_payload(room, p) for pid, p in room.players.items()}

    def join_room(self, player_id: str, room_id: str, nickname: str) -> Outcome:
        with self.store.lock:
            current = self.store.find_room_by_player(player_id)
            if current is not None:
                return Outcome.failed(AlreadyInRoom())
            self.store.create_room(room_id)
            try:
                room = self.store.add_player(room_id, player_id, nickname)
            except GuessWhoError as exc:
                logger.info(f"[join-reject] room={room_id} player={player_id} reason={exc}")
                return Outcome.failed(exc)
            outcome = Outcome(ok=True, room=room, player=room.players[player_id])
            # Only the instant-start mode deals at join time
            if room.status == RoomStatus.PLAYING:
                outcome.all_ready = True
                outcome.dealt = self._deal_payloads(room)
            return outcome

    def set_ready(self, room_id: str, player_id: str) -> Outcome:
        with self.store.lock:
            try:
                state = self.store.set_player_ready(room_id, player_id)
            except GuessWhoError as exc:
                return Outcome.failed(exc)
            outcome = Outcome(ok=True, room=state.room, player=state.player, all_ready=state.all_ready)
            if state.all_ready:
                outcome.dealt = self._deal_payloads(state.room)
            return outcome

    def update_remaining(self, room_id: str, player_id: str, remaining: int) -> Outcome:
        with self.store.lock:
            room = self.store.get_room(room_id)
            player = room.players.get(player_id) if room else None
            if player is None:
                return Outcome.failed()
            player.remaining = remaining
            return Outcome(
                ok=True,
                room=room,
                player=player,
                broadcast={'from': player.nickname, 'remaining': remaining},
            )

    def make_guess(self, room_id: str, player_id: str, card_id: str) -> Outcome:
        with self.store.lock:
            room = self.store.get_room(room_id)
            if room is None:
                return Outcome.failed(RoomNotFound(room_id))
            if room.status != RoomStatus.PLAYING or len(room.players) != MAX_PLAYERS:
                return Outcome.failed(InvalidRoomState('No game in progress'))
            guesser = room.players.get(player_id)
            if guesser is None:
                return Outcome.failed(PlayerNotFound(player_id))
            opponent = room.opponent_of(player_id)

            is_correct = card_id == opponent.secret_card
            winner = guesser if is_correct else opponent
            room.status = RoomStatus.FINISHED

            result = {
                'winner': winner.nickname,
                # Every player's secret; each client shows its opponent's
                'correctCard': [
                    {'player': p.id, 'card': p.secret_card} for p in room.players.values()
                ],
                'guesser': guesser.nickname,
                'guessedCard': card_id,
            }
            logger.info(f"[guess] room={room_id} guesser={player_id} card={card_id} correct={is_correct}")
            return Outcome(ok=True, room=room, player=guesser, broadcast=result)

    def handle_voice(self, room_id: str, player_id: str, payload: Any) -> Outcome:
        room = self.store.get_room(room_id)
        if room is None:
            return Outcome.failed()
        return Outcome(ok=True, room=room, broadcast={'from': player_id, 'data': payload})

    def get_game_state(self, room_id: str, player_id: str) -> GameView:
        with self.store.lock:
            room = self.store.get_room(room_id)
            if room is None:
                return GameView()
            return GameView(room, room.players.get(player_id), room.opponent_of(player_id))

    def room_info(self, room_id: str) -> Optional[Dict[str, Any]]:
        with self.store.lock:
            room = self.store.get_room(room_id)
            return room.to_dict() if room else None

    def is_game_ready(self, room_id: str) -> bool:
        room = self.store.get_room(room_id)
        return room is not None and len(room.players) == MAX_PLAYERS and room.status == RoomStatus.PLAYING

    def leave_room(self, player_id: str, room_id: str) -> Outcome:
        self.store.remove_player(room_id, player_id)
        return Outcome(ok=True, room=self.store.get_room(room_id))

    def disconnect(self, player_id: str) -> Outcome:
        """Drop a connection from whatever room it sits in.

        ``player`` is the departed player (None when it was not seated) and
        ``room`` is the room left behind, None once deleted.
        """
        with self.store.lock:
            room = self.store.find_room_by_player(player_id)
            if room is None:
                return Outcome(ok=True)
            player = room.players[player_id]
            self.store.remove_player(room.id, player_id)
            return Outcome(ok=True, room=self.store.get_room(room.id), player=player)

    def sweep_idle(self, max_age: float) -> List[str]:
        return self.store.sweep_idle(max_age)
