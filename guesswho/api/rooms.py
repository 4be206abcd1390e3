from flask import Blueprint, current_app, jsonify

rooms = Blueprint('rooms', __name__)


def _coordinator():
    return current_app.extensions['game_coordinator']


@rooms.route('', methods=['POST'])
def create_room():
    """
    Reserves a fresh shareable room code. The room stays empty until a
    player joins it over the socket and is swept if nobody does.
    """
    room = _coordinator().store.create_room_with_code()
    current_app.logger.info(f"[api-create] room={room.id}")
    return jsonify({
        'message': 'New room created!',
        'roomId': room.id,
    }), 201


@rooms.route('/<string:room_id>', methods=['GET'])
def get_room_info(room_id):
    """
    Returns the public room snapshot (players, status). Secrets are never
    included.
    """
    info = _coordinator().room_info(room_id)
    if info is None:
        return jsonify({'error': 'Room not found'}), 404
    return jsonify(info), 200
