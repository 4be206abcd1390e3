from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return '<h1>Guess Who Server is running!</h1><p>Socket.IO server is active.</p>'


@main.route('/health')
def health():
    return jsonify({
        'status': 'ok',
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'server': current_app.config.get('ENV_NAME'),
    })
