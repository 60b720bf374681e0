"""
Texas Hold'em Betting Engine - State Machine Implementation.

One call to :func:`start_hand` creates a :class:`HandState`; every accepted
action goes through :func:`apply_action`, which returns a new state and
never mutates the one passed in.

States::

    preflop -> flop -> turn -> river -> showdown (terminal)
        \\________\\_______\\________\\-> terminal (one player left)

Rules:
- Blinds are posted by the two seats after the dealer.
- A round is complete when every active (unfolded, non-all-in) player
  has acted and matched the table bet, or nobody is left to act.
- When fewer than two players can still act, the remaining streets are
  dealt straight through to showdown.
- A single pot is modeled. Tied hands at showdown split it evenly; odd
  chips go one at a time to the winners clockwise from the dealer.
"""

from __future__ import annotations
from typing import List, Dict, Optional, Any, FrozenSet, Sequence, Tuple, Union
from dataclasses import dataclass, field
from fractions import Fraction
import copy
import logging
import math

from fairpoker.core.card import (
    Card, build_deck, shuffle, seeded_shuffle,
    deal_hole_cards, deal_flop, deal_turn, deal_river,
)
from fairpoker.core.errors import IllegalActionError, IllegalStateError, InvalidActionInputError
from fairpoker.core.hand import determine_winners, evaluate_hand
from fairpoker.core.player import PlayerState, Seat
from fairpoker.core.rules import (
    Action, ActionType, AllIn, Call, Check, Fold, GameConfig, Raise, Street,
    calculate_min_raise, describe_action, get_blind_positions,
    MIN_PLAYERS, MAX_PLAYERS,
)


logger = logging.getLogger(__name__)


@dataclass
class HandState:
    """
    Aggregate root for one played hand.

    Attributes:
        hand_id: Identifier of the hand
        hand_number: Position of the hand within its game
        players: Per-player state, in seat order
        deck: Remaining (undealt) cards, top first
        config: Table settings for this hand
        street: Current betting round
        pot: Total chips committed this hand
        community_cards: Board revealed so far
        current_bet: Table bet to match on this street
        min_raise: Minimum raise increment on this street
        active_player_index: Seat to act, None when nobody can act
        seeded: Whether the deck came from a seed (verifiable)
    """
    hand_id: str
    hand_number: int
    players: List[PlayerState]
    deck: List[Card]
    config: GameConfig
    dealer_index: int
    small_blind_index: int
    big_blind_index: int
    street: Street = Street.PREFLOP
    pot: int = 0
    community_cards: List[Card] = field(default_factory=list)
    current_bet: int = 0
    min_raise: int = 0
    active_player_index: Optional[int] = None
    seeded: bool = False
    is_complete: bool = False
    winner_id: Optional[str] = None
    winner_ids: List[str] = field(default_factory=list)
    winning_hand: Optional[str] = None
    payouts: Dict[str, int] = field(default_factory=dict)
    history: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def num_players(self) -> int:
        return len(self.players)

    @property
    def active_player(self) -> Optional[PlayerState]:
        """The player whose turn it is to act."""
        if self.is_complete or self.active_player_index is None:
            return None
        return self.players[self.active_player_index]

    def get_player(self, player_id: str) -> Optional[PlayerState]:
        for player in self.players:
            if player.player_id == player_id:
                return player
        return None

    def to_dict(self, reveal: bool = False) -> Dict[str, Any]:
        return hand_snapshot(self, reveal=reveal)


# ============= Hand setup =============

def start_hand(
    players: Sequence[Union[Seat, str, Dict[str, Any]]],
    dealer_index: int = 0,
    config: Optional[GameConfig] = None,
    *,
    hand_id: Optional[str] = None,
    hand_number: int = 1,
    seed: Optional[str] = None,
) -> HandState:
    """
    Start a new hand.

    Deals two hole cards per player from a fresh deck (seeded when ``seed``
    is given), posts the blinds and sets the first player to act.

    Args:
        players: Seats in table order (Seat objects, ids, or dicts)
        dealer_index: Dealer button position in ``players``
        config: Table settings (defaults to GameConfig())
        hand_id: Optional identifier (defaults to "hand-<hand_number>")
        hand_number: Position of this hand within its game
        seed: Hand seed for a verifiable deck

    Raises:
        ValueError: Bad player count, duplicate ids, empty stacks, or an
            out-of-range dealer index
    """
    config = config or GameConfig()
    seats = [Seat.coerce(p) for p in players]

    if not MIN_PLAYERS <= len(seats) <= MAX_PLAYERS:
        raise ValueError(f"Number of players must be {MIN_PLAYERS}-{MAX_PLAYERS}, got {len(seats)}")
    ids = [s.player_id for s in seats]
    if len(set(ids)) != len(ids):
        raise ValueError(f"Duplicate player ids: {ids}")
    if not 0 <= dealer_index < len(seats):
        raise ValueError(f"Dealer index {dealer_index} out of range for {len(seats)} players")

    deck = seeded_shuffle(build_deck(), seed) if seed is not None else shuffle(build_deck())
    hole_cards, deck = deal_hole_cards(deck, len(seats))

    states = []
    for i, (seat, cards) in enumerate(zip(seats, hole_cards)):
        chips = config.starting_chips if seat.chips is None else seat.chips
        if chips <= 0:
            raise ValueError(f"Player {seat.player_id} has no chips")
        states.append(PlayerState(
            player_id=seat.player_id,
            name=seat.name or seat.player_id,
            seat=i,
            chips=chips,
            hole_cards=cards,
        ))

    sb_index, bb_index = get_blind_positions(len(states), dealer_index)
    state = HandState(
        hand_id=hand_id or f"hand-{hand_number}",
        hand_number=hand_number,
        players=states,
        deck=deck,
        config=config,
        dealer_index=dealer_index,
        small_blind_index=sb_index,
        big_blind_index=bb_index,
        min_raise=config.min_raise_increment,
        seeded=seed is not None,
    )

    _post_blinds(state)

    logger.info(
        f"Starting {state.hand_id}: {len(states)} players, dealer seat {dealer_index}, "
        f"SB seat {sb_index}, BB seat {bb_index}"
    )
    _log_action(state, "HAND_START", {
        "dealer": dealer_index,
        "small_blind": sb_index,
        "big_blind": bb_index,
        "seeded": state.seeded,
    })

    state.active_player_index = _next_active(state, bb_index + 1)
    if _is_round_complete(state):
        # Blinds alone put everyone but one player all-in
        _close_round(state)
    return state


def _post_blinds(state: HandState) -> None:
    """Post small and big blinds; a short stack posts what it has."""
    sb_player = state.players[state.small_blind_index]
    bb_player = state.players[state.big_blind_index]

    sb_amount = sb_player.bet(state.config.small_blind)
    sb_player.last_action = f"SB {sb_amount}"

    bb_amount = bb_player.bet(state.config.big_blind)
    bb_player.last_action = f"BB {bb_amount}"

    state.pot = sb_amount + bb_amount
    state.current_bet = max(sb_amount, bb_amount)

    logger.debug(f"Blinds posted: SB={sb_amount} BB={bb_amount}")


# ============= Actions =============

def legal_actions(state: HandState) -> FrozenSet[ActionType]:
    """
    Actions the acting player may take.

    Raises:
        IllegalStateError: The hand is complete or nobody can act
    """
    player = state.active_player
    if player is None:
        raise IllegalStateError(f"No player to act in {state.hand_id}")
    if not player.is_active:
        raise IllegalStateError(f"Player {player.player_id} cannot act (folded or all-in)")

    to_call = state.current_bet - player.current_bet
    actions = {ActionType.FOLD}

    if to_call <= 0:
        actions.add(ActionType.CHECK)
    elif player.chips > 0:
        actions.add(ActionType.CALL)

    if player.chips > to_call:
        actions.add(ActionType.RAISE)

    if player.chips > 0:
        actions.add(ActionType.ALL_IN)

    return frozenset(actions)


def raise_bounds(state: HandState) -> Optional[Tuple[int, int]]:
    """
    Valid (min, max) raise totals for the acting player, or None.

    The maximum is the player's whole stack; a raise below the minimum
    has to be made as an all-in instead.
    """
    player = state.active_player
    if player is None or not player.is_active:
        return None
    min_total = calculate_min_raise(state.current_bet, state.min_raise)
    max_total = player.current_bet + player.chips
    if max_total < min_total:
        return None
    return min_total, max_total


def apply_action(state: HandState, action: Action) -> HandState:
    """
    Apply the acting player's action and return the resulting state.

    The input state is never modified.

    Raises:
        IllegalActionError: The action is not legal right now
        IllegalStateError: The hand is already complete
    """
    if not isinstance(action, (Fold, Check, Call, Raise, AllIn)):
        raise InvalidActionInputError(f"Not an action: {action!r}")

    legal = legal_actions(state)
    player = state.active_player

    if action.type not in legal:
        allowed = ", ".join(sorted(a.value for a in legal))
        raise IllegalActionError(describe_action(action), player.player_id, f"legal actions are {allowed}")

    if isinstance(action, Raise):
        _validate_raise(state, player, action)

    new_state = copy.deepcopy(state)
    actor_index = new_state.active_player_index
    actor = new_state.players[actor_index]

    amount = _execute(new_state, actor, action)
    actor.has_acted = True

    logger.debug(
        f"{new_state.hand_id} {new_state.street.value}: {actor.player_id} "
        f"{describe_action(action)} (moved {amount}, pot {new_state.pot})"
    )
    _log_action(new_state, action.type.value, {"player": actor.player_id, "amount": amount})

    _progress(new_state, actor_index)
    return new_state


def _validate_raise(state: HandState, player: PlayerState, action: Raise) -> None:
    max_total = player.current_bet + player.chips
    min_total = calculate_min_raise(state.current_bet, state.min_raise)
    if action.amount > max_total:
        raise IllegalActionError(
            describe_action(action), player.player_id,
            f"only {max_total} available (stack {player.chips} + bet {player.current_bet})",
        )
    if action.amount < min_total:
        raise IllegalActionError(
            describe_action(action), player.player_id,
            f"minimum raise is to {min_total} (current bet {state.current_bet}, "
            f"min raise {state.min_raise})",
        )


def _execute(state: HandState, player: PlayerState, action: Action) -> int:
    """Mutate ``state`` for the action; returns chips moved into the pot."""
    to_call = state.current_bet - player.current_bet

    if isinstance(action, Fold):
        player.is_folded = True
        player.last_action = "FOLD"
        return 0

    if isinstance(action, Check):
        player.last_action = "CHECK"
        return 0

    if isinstance(action, Call):
        moved = player.bet(min(to_call, player.chips))
        state.pot += moved
        player.last_action = f"CALL {moved}"
        return moved

    if isinstance(action, Raise):
        increment = action.amount - state.current_bet
        moved = player.bet(action.amount - player.current_bet)
        state.pot += moved
        state.current_bet = player.current_bet
        state.min_raise = increment
        _reopen_action(state, player)
        player.last_action = f"ALL-IN {player.total_bet}" if player.is_all_in else f"RAISE {player.current_bet}"
        return moved

    if isinstance(action, AllIn):
        moved = player.bet(player.chips)
        state.pot += moved
        if player.current_bet > state.current_bet:
            increment = player.current_bet - state.current_bet
            if increment >= state.min_raise:
                state.min_raise = increment
            state.current_bet = player.current_bet
            _reopen_action(state, player)
        player.last_action = f"ALL-IN {player.total_bet}"
        return moved

    raise IllegalActionError(repr(action), player.player_id, "unknown action")


def _reopen_action(state: HandState, aggressor: PlayerState) -> None:
    """Everyone else who can still act must respond to the new bet."""
    for player in state.players:
        if player is not aggressor and player.is_active:
            player.has_acted = False


# ============= Round and street progression =============

def _progress(state: HandState, actor_index: int) -> None:
    contenders = [p for p in state.players if p.in_hand]
    if len(contenders) == 1:
        _award_uncontested(state, contenders[0])
        return

    if not _is_round_complete(state):
        state.active_player_index = _next_active(state, actor_index + 1)
        return

    _close_round(state)


def _close_round(state: HandState) -> None:
    """Advance streets until someone has to act or the hand is over."""
    while True:
        if state.street is Street.RIVER:
            _showdown(state)
            return
        _advance_street(state)
        if not _is_round_complete(state):
            return


def _is_round_complete(state: HandState) -> bool:
    active = [p for p in state.players if p.is_active]
    if not active:
        return True
    if len(active) == 1 and active[0].current_bet >= state.current_bet:
        # Nobody left to bet against
        return True
    return all(p.has_acted and p.current_bet == state.current_bet for p in active)


def _next_active(state: HandState, start: int) -> Optional[int]:
    """First seat from ``start`` (wrapping) that can still act."""
    n = state.num_players
    for offset in range(n):
        index = (start + offset) % n
        if state.players[index].is_active:
            return index
    return None


def _advance_street(state: HandState) -> None:
    for player in state.players:
        player.reset_for_new_round()
    state.current_bet = 0
    state.min_raise = state.config.min_raise_increment

    if state.street is Street.PREFLOP:
        flop, state.deck = deal_flop(state.deck)
        state.community_cards.extend(flop)
        state.street = Street.FLOP
        _log_action(state, "FLOP", {"cards": [c.notation for c in flop]})
    elif state.street is Street.FLOP:
        turn, state.deck = deal_turn(state.deck)
        state.community_cards.append(turn)
        state.street = Street.TURN
        _log_action(state, "TURN", {"card": turn.notation})
    elif state.street is Street.TURN:
        river, state.deck = deal_river(state.deck)
        state.community_cards.append(river)
        state.street = Street.RIVER
        _log_action(state, "RIVER", {"card": river.notation})

    logger.debug(f"{state.hand_id} {state.street.value}: board {[c.notation for c in state.community_cards]}")

    state.active_player_index = _next_active(state, state.dealer_index + 1)


# ============= Resolution =============

def _award_uncontested(state: HandState, winner: PlayerState) -> None:
    """End the hand when only one player remains."""
    winner.chips += state.pot
    state.payouts = {winner.player_id: state.pot}
    state.winner_id = winner.player_id
    state.winner_ids = [winner.player_id]
    state.winning_hand = None
    _finish(state)

    logger.info(f"{state.hand_id} won by {winner.player_id} uncontested ({state.pot})")
    _log_action(state, "WIN_BY_FOLD", {"winner": winner.player_id, "amount": state.pot})


def _showdown(state: HandState) -> None:
    """Evaluate every unfolded hand and pay the single pot."""
    contenders = [p for p in state.players if p.in_hand]
    winners = determine_winners(
        [(p.player_id, p.hole_cards) for p in contenders],
        state.community_cards,
    )
    winning_ids = {pid for pid, _ in winners}

    # Clockwise from the left of the dealer
    n = state.num_players
    order = [state.players[(state.dealer_index + 1 + k) % n] for k in range(n)]
    paid = [p for p in order if p.player_id in winning_ids]

    share, remainder = divmod(state.pot, len(paid))
    payouts = {}
    for i, player in enumerate(paid):
        amount = share + (1 if i < remainder else 0)
        player.chips += amount
        payouts[player.player_id] = amount

    state.payouts = payouts
    state.winner_ids = [p.player_id for p in paid]
    state.winner_id = state.winner_ids[0]
    state.winning_hand = winners[0][1].description
    _finish(state)

    logger.info(f"{state.hand_id} showdown: {state.winner_ids} win {state.pot} with {state.winning_hand}")
    _log_action(state, "SHOWDOWN", {
        "winners": state.winner_ids,
        "description": state.winning_hand,
        "payouts": dict(payouts),
    })


def _finish(state: HandState) -> None:
    state.is_complete = True
    state.active_player_index = None


def _log_action(state: HandState, action: str, details: Dict[str, Any]) -> None:
    """Log an action to hand history."""
    state.history.append({
        "action": action,
        "street": state.street.value,
        **details,
    })


# ============= Snapshots and odds =============

def hand_snapshot(state: HandState, reveal: bool = False) -> Dict[str, Any]:
    """
    Table snapshot for persistence, broadcast and display.

    Args:
        state: The hand
        reveal: Include every player's hole cards
    """
    active = state.active_player
    bounds = raise_bounds(state) if active is not None else None
    return {
        "hand_id": state.hand_id,
        "hand_number": state.hand_number,
        "round": state.street.value,
        "pot": state.pot,
        "community_cards": [c.notation for c in state.community_cards],
        "current_bet": state.current_bet,
        "min_raise": state.min_raise,
        "dealer_index": state.dealer_index,
        "small_blind_index": state.small_blind_index,
        "big_blind_index": state.big_blind_index,
        "active_player_index": state.active_player_index,
        "active_player_id": active.player_id if active else None,
        "players": [p.to_dict(hide_cards=not reveal) for p in state.players],
        "raise_range": {"min": bounds[0], "max": bounds[1]} if bounds else None,
        "is_complete": state.is_complete,
        "winner_id": state.winner_id,
        "winner_ids": list(state.winner_ids),
        "winning_hand": state.winning_hand,
        "payouts": dict(state.payouts),
    }


def calculate_odds(state: HandState) -> Dict[str, Fraction]:
    """
    Rough win shares for spectators.

    Preflop every unfolded player gets an equal share; afterwards shares
    are weighted by the category of each player's current best hand.
    """
    contenders = [p for p in state.players if p.in_hand]
    if not contenders:
        return {}

    if not state.community_cards:
        return {p.player_id: Fraction(1, len(contenders)) for p in contenders}

    strengths = {
        p.player_id: evaluate_hand(p.hole_cards, state.community_cards).rank_value
        for p in contenders
    }
    total = sum(strengths.values())
    return {pid: Fraction(value, total) for pid, value in strengths.items()}


def probability_to_odds(probability: Union[Fraction, float, int]) -> float:
    """
    Decimal payout odds for a win probability (0.5 -> 2.0).

    Rounded half-up to one decimal and capped at 99.9.
    """
    if probability <= 0:
        return 99.9
    odds = 1 / Fraction(probability)
    tenths = math.floor(odds * 10 + Fraction(1, 2))
    return min(99.9, tenths / 10)
