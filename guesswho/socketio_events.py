from flask import current_app, request
from flask_socketio import emit, join_room, leave_room
from guesswho import socketio
from guesswho.services.games import GameCoordinator, Outcome


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _coordinator() -> GameCoordinator:
    return current_app.extensions['game_coordinator']


def _namespace() -> str:
    return current_app.config.get('SOCKETIO_NAMESPACE', '/')


def _emit_error(message: str) -> None:
    emit('error', {'message': message})


def _send_game_started(outcome: Outcome) -> None:
    # One private payload per player: the shared deck and only their own secret
    for player_id, payload in outcome.dealt.items():
        socketio.emit('game_started', payload, to=player_id, namespace=_namespace())


def _broadcast_room_info(room_id: str) -> None:
    info = _coordinator().room_info(room_id)
    if not info or not info['players']:
        current_app.logger.warning(f"[room_info] no players found for room={room_id}")
        return
    for player in info['players']:
        socketio.emit('room_info', info, to=player['id'], namespace=_namespace())


def handle_connect(auth=None):
    current_app.logger.info(f"[connect] player={_get_sid()}")


def handle_disconnect(reason=None):
    sid = _get_sid()
    outcome = _coordinator().disconnect(sid)
    current_app.logger.info(f"[disconnect] player={sid} reason={reason}")
    if outcome.player is None or outcome.room is None:
        return
    # The departing sid is still in the socket room until this handler returns
    emit('player_disconnected', {'id': sid, 'nickname': outcome.player.nickname},
         to=outcome.room.id, include_self=False)
    _broadcast_room_info(outcome.room.id)


def handle_join_room(data):
    room_id = (data or {}).get('roomId')
    nickname = (data or {}).get('nickname')
    if not room_id or not nickname:
        _emit_error('roomId and nickname are required')
        return
    sid = _get_sid()
    current_app.logger.info(f"[join] player={sid} room={room_id} nickname={nickname}")

    outcome = _coordinator().join_room(sid, room_id, nickname)
    if not outcome.ok:
        current_app.logger.warning(f"[join] failed room={room_id} player={sid}: {outcome.error}")
        _emit_error(str(outcome.error))
        return

    join_room(room_id)
    emit('player_joined', {'nickname': nickname, 'id': sid}, to=room_id, include_self=False)
    _broadcast_room_info(room_id)
    if outcome.all_ready:
        current_app.logger.info(f"[game] room full, dealing room={room_id}")
        _send_game_started(outcome)


def handle_ready(data):
    room_id = (data or {}).get('roomId')
    sid = _get_sid()
    current_app.logger.info(f"[ready] player={sid} room={room_id}")

    outcome = _coordinator().set_ready(room_id, sid)
    if not outcome.ok:
        _emit_error(str(outcome.error))
        return

    emit('player_ready', {'nickname': outcome.player.nickname, 'id': sid},
         to=room_id, include_self=False)
    _broadcast_room_info(room_id)
    if outcome.all_ready:
        current_app.logger.info(f"[game] all players ready, starting room={room_id}")
        _send_game_started(outcome)


def handle_update_remaining(data):
    room_id = (data or {}).get('roomId')
    remaining = (data or {}).get('remaining')
    # Stale or malformed updates are dropped silently
    if not isinstance(remaining, int) or isinstance(remaining, bool):
        return
    outcome = _coordinator().update_remaining(room_id, _get_sid(), remaining)
    if outcome.ok:
        emit('update_remaining', outcome.broadcast, to=room_id, include_self=False)


def handle_guess(data):
    room_id = (data or {}).get('roomId')
    card_id = (data or {}).get('cardId')
    if not isinstance(card_id, str) or not card_id:
        _emit_error('cardId is required')
        return
    sid = _get_sid()
    current_app.logger.info(f"[guess] player={sid} room={room_id} card={card_id}")

    outcome = _coordinator().make_guess(room_id, sid, card_id)
    if not outcome.ok:
        _emit_error(str(outcome.error))
        return
    current_app.logger.info(f"[game] ended room={room_id} winner={outcome.broadcast['winner']}")
    emit('result', outcome.broadcast, to=room_id)


def handle_voice(data):
    room_id = (data or {}).get('roomId')
    payload = (data or {}).get('data')
    outcome = _coordinator().handle_voice(room_id, _get_sid(), payload)
    if outcome.ok:
        size = len(payload) if isinstance(payload, (str, bytes)) else 0
        current_app.logger.debug(f"[voice] player={_get_sid()} room={room_id} bytes={size}")
        emit('voice', outcome.broadcast, to=room_id, include_self=False)


def handle_leave_room(data):
    room_id = (data or {}).get('roomId')
    if not room_id:
        _emit_error('roomId is required')
        return
    sid = _get_sid()
    view = _coordinator().get_game_state(room_id, sid)
    outcome = _coordinator().leave_room(sid, room_id)
    leave_room(room_id)
    emit('left', {'roomId': room_id})
    current_app.logger.info(f"[leave] player={sid} room={room_id}")
    if view.player is not None and outcome.room is not None:
        emit('player_disconnected', {'id': sid, 'nickname': view.player.nickname},
             to=room_id, include_self=False)
        _broadcast_room_info(room_id)


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register Socket.IO event handlers on ``namespace``."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('join_room', handle_join_room, namespace=namespace)
    socketio.on_event('ready', handle_ready, namespace=namespace)
    socketio.on_event('update_remaining', handle_update_remaining, namespace=namespace)
    socketio.on_event('guess', handle_guess, namespace=namespace)
    socketio.on_event('voice', handle_voice, namespace=namespace)
    socketio.on_event('leave_room', handle_leave_room, namespace=namespace)
