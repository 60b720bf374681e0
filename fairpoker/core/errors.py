"""
Exceptions raised by the poker core.

Contract violations (caller bugs) are raised. Verification failures are
never raised: they come back as structured results from
``fairpoker.core.verifiable``.
"""


class PokerError(Exception):
    """Base class for every error raised by fairpoker."""


class IllegalActionError(PokerError, ValueError):
    """The submitted action is not legal in the current hand state."""

    def __init__(self, action, player_id=None, reason=""):
        self.action = action
        self.player_id = player_id
        self.reason = reason
        who = f" by {player_id}" if player_id is not None else ""
        message = f"Illegal action {action}{who}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class IllegalStateError(PokerError, RuntimeError):
    """The engine or a session was driven out of sequence."""


class DeckExhaustedError(PokerError, ValueError):
    """More cards were requested than remain in the deck."""


class InsufficientCardsError(PokerError, ValueError):
    """A hand was evaluated without two hole cards."""


class InvalidCardError(PokerError, ValueError):
    """A card notation string could not be decoded."""


class InvalidActionInputError(PokerError, ValueError):
    """Wire-level action input is malformed (unknown type, bad amount)."""


class ConfigError(PokerError, ValueError):
    """A GameConfig value is out of range."""
