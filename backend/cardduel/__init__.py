from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import logging
import random
import click
from config import Config

socketio = SocketIO(async_mode=None)


def build_engine(flask_app):
    """Create the match engine for ``flask_app``.

    Timers run as Socket.IO background tasks; in TESTING mode they run
    inline (no sleeping) unless ENABLE_SCHEDULER_IN_TESTS is set.
    """
    from cardduel.services.duel.engine import MatchEngine
    from cardduel.services.duel.scheduler import StageScheduler, no_sleep, run_inline

    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/ws')

    def _emit(event, payload, sid):
        socketio.emit(event, payload, to=sid, namespace=namespace)

    if flask_app.config.get('TESTING') and not flask_app.config.get('ENABLE_SCHEDULER_IN_TESTS'):
        scheduler = StageScheduler(run_inline, no_sleep, flask_app.logger)
    else:
        scheduler = StageScheduler(socketio.start_background_task, socketio.sleep, flask_app.logger)
    return MatchEngine.from_config(flask_app.config, _emit, scheduler, flask_app.logger)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    level = str(flask_app.config.get('LOG_LEVEL', 'INFO')).upper()
    flask_app.logger.setLevel(getattr(logging, level, logging.INFO))

    allowed_origins = flask_app.config.get('CORS_ALLOWED_ORIGINS') or []
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from cardduel.main import main
    flask_app.register_blueprint(main)

    flask_app.extensions['duel'] = build_engine(flask_app)

    # Register Socket.IO event handlers
    from cardduel.socketio_events import register_socketio_handlers
    register_socketio_handlers(flask_app.config.get('SOCKETIO_NAMESPACE', '/ws'))

    @click.command('simulate')
    @click.option('--seed', type=int, default=None, help='Seed for a reproducible deal and play.')
    def simulate_command(seed):
        """Play one match between two scripted players and print each round."""
        from cardduel.services.duel.engine import MatchEngine
        from cardduel.services.duel.scheduler import StageScheduler, no_sleep, run_inline

        rng = random.Random(seed)

        def _echo(event, payload, sid):
            # Both seats get the same round/game messages; print them once
            if sid == 'bot-1' and event in ('round_result', 'game_over'):
                click.echo(payload['message'])
                click.echo('')

        scheduler = StageScheduler(run_inline, no_sleep, flask_app.logger)
        engine = MatchEngine.from_config(flask_app.config, _echo, scheduler, flask_app.logger, rng=rng)
        engine.find_match('bot-1', 'Bot 1')
        state = engine.find_match('bot-2', 'Bot 2')
        if state is None:
            raise click.ClickException('Could not start a match.')
        while not state.game_over:
            hand = state.hands[state.current_turn]
            engine.play_card(state.players[state.current_turn], rng.randrange(len(hand)))
        click.echo(f'Rounds played: {state.round_number}, final HP: {state.hp[0]} vs {state.hp[1]}')

    flask_app.cli.add_command(simulate_command)

    return flask_app
