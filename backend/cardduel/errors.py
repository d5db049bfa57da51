"""Error taxonomy for the duel server.

Every error carries a client-facing ``message``; socket handlers turn
:class:`DuelError` into an ``error_message`` event for the offending
connection only.
"""


class DuelError(Exception):
    message = 'Something went wrong.'

    def __init__(self, message=None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ProtocolViolation(DuelError):
    """A client asked for something the rules do not allow. Non-fatal."""


class NotInMatch(ProtocolViolation):
    message = 'Not currently in a game.'


class AlreadyInMatch(ProtocolViolation):
    message = 'You are already in a game.'


class GameAlreadyOver(ProtocolViolation):
    message = 'The game is already over.'


class RoundInProgress(ProtocolViolation):
    message = 'Invalid game state to play.'


class NotYourTurn(ProtocolViolation):
    message = 'Not your turn.'


class InvalidCardIndex(ProtocolViolation):
    message = 'Invalid card selection.'


class InvalidPayload(ProtocolViolation):
    message = 'Malformed request.'


class SetupError(DuelError):
    """A match could not be set up; the pairing must not proceed."""


class InsufficientCards(SetupError):
    message = 'Could not deal cards for a new match.'
