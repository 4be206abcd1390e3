from typing import List


def run_sweep(app) -> List[str]:
    """Single sweep pass: drop empty rooms older than the idle grace period."""
    coordinator = app.extensions['game_coordinator']
    grace = int(app.config.get('ROOM_IDLE_GRACE_SEC', 60))
    removed = coordinator.sweep_idle(grace)
    active = coordinator.store.room_ids()
    if removed:
        app.logger.info(f"[sweep] removed idle rooms: {', '.join(removed)}")
    app.logger.debug(f"[sweep] done active={len(active)} rooms={', '.join(active)}")
    return removed


def start_room_sweeper(app, socketio) -> bool:
    """Run ``run_sweep`` every ROOM_SWEEP_INTERVAL_SEC on a background task.

    No-ops in TESTING mode unless ENABLE_SWEEPER_IN_TESTS is set. Returns
    whether a task was started.
    """
    if app.config.get('TESTING') and not app.config.get('ENABLE_SWEEPER_IN_TESTS'):
        return False

    interval = int(app.config.get('ROOM_SWEEP_INTERVAL_SEC', 60))

    def _worker():
        while True:
            socketio.sleep(interval)
            with app.app_context():
                try:
                    run_sweep(app)
                except Exception:
                    app.logger.exception('[sweep] pass failed')

    socketio.start_background_task(_worker)
    app.logger.info(f"[sweep] started interval={interval}s grace={app.config.get('ROOM_IDLE_GRACE_SEC')}s")
    return True
