from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

dev_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:63342",
]
socketio = SocketIO(async_mode=None)


def allowed_origins(config):
    if config.get('ENV_NAME') == 'production':
        return [config['FRONTEND_URL']]
    return dev_origins + [config['FRONTEND_URL']]


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    # Service modules log through child loggers of the app logger
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))
    origins = allowed_origins(flask_app.config)

    CORS(flask_app, supports_credentials=True, origins=origins)

    # Rooms live in this process only: one store per app, injected into
    # the coordinator and reached by handlers through app.extensions
    from guesswho.services.games import GameCoordinator, RoomStore
    store = RoomStore(
        deck_size=flask_app.config['DECK_SIZE'],
        ready_gate=flask_app.config['READY_GATE'],
        distinct_secrets=flask_app.config['DISTINCT_SECRETS'],
    )
    flask_app.extensions['room_store'] = store
    flask_app.extensions['game_coordinator'] = GameCoordinator(store)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=origins)

    from guesswho.main import main
    flask_app.register_blueprint(main)

    from guesswho.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    # Importing here ensures the handlers bind to the initialized socketio instance
    from guesswho.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=flask_app.config['SOCKETIO_NAMESPACE'])

    from guesswho.services.games.sweeper import start_room_sweeper
    start_room_sweeper(flask_app, socketio)

    return flask_app
