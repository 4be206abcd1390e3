import os


def _env_flag(name, default):
    return os.environ.get(name, default).lower() in ('1', 'true', 'yes')


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    ENV_NAME = os.environ.get('ENV_NAME', 'development')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    PORT = int(os.environ.get('PORT', '3001'))
    # Production only trusts the deployed frontend
    FRONTEND_URL = os.environ.get('FRONTEND_URL', 'http://localhost:3000')
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    # Game rules
    DECK_SIZE = int(os.environ.get('DECK_SIZE', '20'))
    # False deals cards as soon as the second player joins
    READY_GATE = _env_flag('READY_GATE', 'true')
    DISTINCT_SECRETS = _env_flag('DISTINCT_SECRETS', 'false')
    # Idle room sweeper (seconds)
    ROOM_SWEEP_INTERVAL_SEC = int(os.environ.get('ROOM_SWEEP_INTERVAL_SEC', '60'))
    ROOM_IDLE_GRACE_SEC = int(os.environ.get('ROOM_IDLE_GRACE_SEC', '60'))
    # The sweeper is off under TESTING unless this is set
    ENABLE_SWEEPER_IN_TESTS = _env_flag('ENABLE_SWEEPER_IN_TESTS', 'false')
