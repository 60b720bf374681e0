"""
Texas Hold'em Rules, Actions and Configuration.

Table conventions used by the engine:

1. Small blind sits one seat after the dealer, big blind two seats after
   the dealer. This also holds heads-up.
2. Preflop, the first player to act is the first seat after the big blind
   who can still act. Postflop, it is the first active seat after the dealer.
3. Minimum raise: a raise must increase the table bet by at least the
   previous full raise increment (the big blind when nobody has raised).
4. Only a single pot is modeled; there are no side pots.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Optional, Tuple, Union

from fairpoker.core.errors import ConfigError, InvalidActionInputError


class Street(Enum):
    """Betting rounds of a hand."""
    PREFLOP = "preflop"
    FLOP = "flop"
    TURN = "turn"
    RIVER = "river"


class ActionType(Enum):
    """Possible player actions (wire values)."""
    FOLD = "fold"
    CHECK = "check"
    CALL = "call"
    RAISE = "raise"
    ALL_IN = "all_in"


# ============= Actions =============
#
# A closed set of variants. ``Raise.amount`` is the new total bet for the
# street, not the increment.

@dataclass(frozen=True)
class Fold:
    type: ClassVar[ActionType] = ActionType.FOLD


@dataclass(frozen=True)
class Check:
    type: ClassVar[ActionType] = ActionType.CHECK


@dataclass(frozen=True)
class Call:
    type: ClassVar[ActionType] = ActionType.CALL


@dataclass(frozen=True)
class Raise:
    amount: int
    type: ClassVar[ActionType] = ActionType.RAISE


@dataclass(frozen=True)
class AllIn:
    type: ClassVar[ActionType] = ActionType.ALL_IN


Action = Union[Fold, Check, Call, Raise, AllIn]


def parse_action(action_type: Any, amount: Optional[int] = None) -> Action:
    """
    Build an action from wire input.

    Args:
        action_type: ActionType or its string value ("fold", "raise", ...)
        amount: Required for raise (new total bet); ignored otherwise

    Raises:
        InvalidActionInputError: Unknown type, or raise without a positive amount
    """
    if isinstance(action_type, str):
        try:
            action_type = ActionType(action_type.lower())
        except ValueError:
            raise InvalidActionInputError(f"Unknown action type: {action_type!r}") from None
    if not isinstance(action_type, ActionType):
        raise InvalidActionInputError(f"Unknown action type: {action_type!r}")

    if action_type is ActionType.RAISE:
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise InvalidActionInputError(f"Raise needs a positive integer total, got {amount!r}")
        return Raise(amount)

    return {
        ActionType.FOLD: Fold,
        ActionType.CHECK: Check,
        ActionType.CALL: Call,
        ActionType.ALL_IN: AllIn,
    }[action_type]()


def describe_action(action: Action) -> str:
    if isinstance(action, Raise):
        return f"raise to {action.amount}"
    return action.type.value


# ============= Configuration =============

# Default game settings
DEFAULT_SMALL_BLIND = 10
DEFAULT_BIG_BLIND = 20
DEFAULT_STARTING_CHIPS = 1000
DEFAULT_MAX_HANDS = 5
MIN_PLAYERS = 2
MAX_PLAYERS = 10

# Cards per phase
HOLE_CARDS = 2
FLOP_CARDS = 3
TURN_CARDS = 1
RIVER_CARDS = 1
TOTAL_COMMUNITY_CARDS = 5


@dataclass(frozen=True)
class GameConfig:
    """
    Table settings passed explicitly into every hand.

    Attributes:
        small_blind: Small blind amount
        big_blind: Big blind amount
        starting_chips: Stack for seats that bring no chip count
        max_hands: Hands per game (used by GameSession)
        min_raise: Opening minimum raise increment; defaults to big_blind
    """
    small_blind: int = DEFAULT_SMALL_BLIND
    big_blind: int = DEFAULT_BIG_BLIND
    starting_chips: int = DEFAULT_STARTING_CHIPS
    max_hands: int = DEFAULT_MAX_HANDS
    min_raise: Optional[int] = None

    def __post_init__(self) -> None:
        for name in ("small_blind", "big_blind", "starting_chips", "max_hands"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigError(f"{name} must be a positive integer, got {value!r}")
        if self.small_blind > self.big_blind:
            raise ConfigError("small_blind cannot exceed big_blind")
        if self.min_raise is not None and (not isinstance(self.min_raise, int) or self.min_raise <= 0):
            raise ConfigError(f"min_raise must be a positive integer, got {self.min_raise!r}")

    @property
    def min_raise_increment(self) -> int:
        return self.min_raise if self.min_raise is not None else self.big_blind


def get_blind_positions(num_players: int, dealer_position: int) -> Tuple[int, int]:
    """
    Calculate small blind and big blind positions.

    Args:
        num_players: Number of seated players
        dealer_position: Position of the dealer (0-indexed)

    Returns:
        Tuple of (small_blind_position, big_blind_position)
    """
    if num_players < MIN_PLAYERS:
        raise ValueError("Need at least 2 players")
    return (dealer_position + 1) % num_players, (dealer_position + 2) % num_players


def calculate_min_raise(current_bet: int, min_raise_increment: int) -> int:
    """Minimum legal total for a raise."""
    return current_bet + min_raise_increment
