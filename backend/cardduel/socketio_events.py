from flask import current_app, request
from flask_socketio import emit
from cardduel import socketio
from cardduel.errors import DuelError
from cardduel.messages import ErrorMessage, FindMatch, PlayCard, parse_find_match, parse_play_card


def _engine():
    return current_app.extensions['duel']


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _reject(exc: DuelError) -> None:
    """Report a refused request to the offending connection only."""
    current_app.logger.info(f"[rejected] sid={_get_sid()} error={type(exc).__name__}")
    error = ErrorMessage(exc.message)
    emit(error.event, error.to_dict())


def handle_connect(auth=None):
    current_app.logger.info(f"[connect] sid={_get_sid()}")


def handle_disconnect(reason=None):
    # Network drop, explicit close and server-side close are all handled alike
    sid = _get_sid()
    current_app.logger.info(f"[disconnect] sid={sid} reason={reason}")
    _engine().disconnect(sid)


def handle_find_match(data=None):
    try:
        request_msg = parse_find_match(data)
        _engine().find_match(_get_sid(), request_msg.name)
    except DuelError as exc:
        _reject(exc)


def handle_play_card(data=None):
    try:
        request_msg = parse_play_card(data)
        _engine().play_card(_get_sid(), request_msg.card_index)
    except DuelError as exc:
        _reject(exc)


def register_socketio_handlers(namespace: str = '/ws') -> None:
    """Register Socket.IO event handlers on ``namespace``."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event(FindMatch.event, handle_find_match, namespace=namespace)
    socketio.on_event(PlayCard.event, handle_play_card, namespace=namespace)
