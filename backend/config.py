import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Match rules
    INITIAL_HP = int(os.environ.get('INITIAL_HP', '5'))
    HAND_SIZE = int(os.environ.get('HAND_SIZE', '10'))
    # Round timers (milliseconds)
    ROUND_REVEAL_DELAY_MS = int(os.environ.get('ROUND_REVEAL_DELAY_MS', '1000'))
    NEXT_TURN_DELAY_MS = int(os.environ.get('NEXT_TURN_DELAY_MS', '2000'))
    # How long a finished room is kept for its players (ms). 0 disables.
    ROOM_LINGER_MS = int(os.environ.get('ROOM_LINGER_MS', '60000'))
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/ws')
    CORS_ALLOWED_ORIGINS = [
        o.strip() for o in os.environ.get(
            'CORS_ALLOWED_ORIGINS',
            'http://localhost:5173,http://127.0.0.1:5173',
        ).split(',') if o.strip()
    ]
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()
    ENABLE_SCHEDULER_IN_TESTS = False
