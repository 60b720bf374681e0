"""
Multi-hand game session bound to one commitment.

A GameSession runs up to ``config.max_hands`` hands between the same
seats. The commitment is created when the session is created; hand ``n``
is dealt from ``hand_seed(seed, n)``. The seed stays private until the
game ends, after which anyone can re-run the verification.

Usage:
    session = GameSession(["alice", "bob", "carol"])
    print(session.commitment)          # publish before play
    session.start_hand()
    session.apply_action(Call())
    ...
    seed = session.finish()            # reveal
    assert session.verify().valid
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Union
import logging
import uuid

from fairpoker.core.errors import IllegalStateError
from fairpoker.core.game import HandState, apply_action, hand_snapshot, legal_actions, start_hand
from fairpoker.core.player import Seat
from fairpoker.core.rules import Action, GameConfig, MAX_PLAYERS, MIN_PLAYERS, describe_action
from fairpoker.core.verifiable import (
    GameCommitment,
    GameVerification,
    HandRecord,
    format_commitment,
    generate_commitment,
    hand_seed,
    verify_game,
)


logger = logging.getLogger(__name__)

END_MAX_HANDS = "max_hands_reached"
END_ONE_PLAYER = "one_player_left"


@dataclass(frozen=True)
class ActionLogEntry:
    """One accepted action. The timestamp is metadata only."""
    hand: int
    player_id: str
    action: str
    street: str
    amount: int
    timestamp: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hand": self.hand,
            "player_id": self.player_id,
            "action": self.action,
            "street": self.street,
            "amount": self.amount,
            "timestamp": self.timestamp,
        }


@dataclass
class HandResult:
    hand_number: int
    winner_ids: List[str]
    winning_hand: Optional[str]
    pot: int
    payouts: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hand_number": self.hand_number,
            "winner_ids": list(self.winner_ids),
            "winning_hand": self.winning_hand,
            "pot": self.pot,
            "payouts": dict(self.payouts),
        }


class GameSession:
    """
    A verifiable game of several hands.

    Attributes:
        game_id: Identifier of the game
        seats: Seats in table order
        config: Table settings shared by every hand
        stacks: Chips per player, carried from hand to hand
        hand_number: Number of the last started hand (0 before the first)
        hand: The current (or last) hand, None before the first
        records: What was dealt in every completed hand
        results: Winners and payouts of every completed hand
    """

    def __init__(
        self,
        seats: Sequence[Union[Seat, str, Dict[str, Any]]],
        config: Optional[GameConfig] = None,
        game_id: Optional[str] = None,
        commitment: Optional[GameCommitment] = None,
    ):
        self.config = config or GameConfig()
        self.seats = [Seat.coerce(s) for s in seats]
        if not MIN_PLAYERS <= len(self.seats) <= MAX_PLAYERS:
            raise ValueError(f"Number of players must be {MIN_PLAYERS}-{MAX_PLAYERS}, got {len(self.seats)}")
        ids = [s.player_id for s in self.seats]
        if len(set(ids)) != len(ids):
            raise ValueError(f"Duplicate player ids: {ids}")

        self.game_id = game_id or uuid.uuid4().hex[:12]
        self._commitment = commitment or generate_commitment()
        self._revealed = False
        self._finished = False

        self.stacks: Dict[str, int] = {
            s.player_id: self.config.starting_chips if s.chips is None else s.chips
            for s in self.seats
        }
        self.hand_number = 0
        self.hand: Optional[HandState] = None
        self.records: List[HandRecord] = []
        self.results: List[HandResult] = []
        self._actions: List[ActionLogEntry] = []
        self._hand_actions: List[ActionLogEntry] = []
        self._dealer_seat: Optional[int] = None

        logger.info(
            f"Created game {self.game_id} with {len(self.seats)} players, "
            f"commitment {format_commitment(self.commitment)}"
        )

    # ============= Public state =============

    @property
    def commitment(self) -> str:
        return self._commitment.commitment

    @property
    def revealed(self) -> bool:
        return self._revealed

    @property
    def hand_in_progress(self) -> bool:
        return self.hand is not None and not self.hand.is_complete

    @property
    def actions(self) -> List[ActionLogEntry]:
        """Every accepted action of the game, in order."""
        return list(self._actions)

    def end_reason(self) -> Optional[str]:
        """Why the game is over, or None while it can continue."""
        if self.hand_in_progress:
            return None
        if self.hand_number >= self.config.max_hands:
            return END_MAX_HANDS
        if len(self._funded_seats()) < MIN_PLAYERS:
            return END_ONE_PLAYER
        return None

    @property
    def is_over(self) -> bool:
        return self._finished or self.end_reason() is not None

    # ============= Playing =============

    def start_hand(self) -> HandState:
        """
        Deal the next hand to every player with chips.

        Raises:
            IllegalStateError: A hand is running or the game is over
        """
        if self.hand_in_progress:
            raise IllegalStateError(f"Hand {self.hand_number} of game {self.game_id} is still running")
        if self.is_over:
            raise IllegalStateError(f"Game {self.game_id} is over ({self.end_reason() or 'finished'})")

        funded = self._funded_seats()
        self._dealer_seat = self._next_dealer(funded)
        players = [
            Seat(s.player_id, s.name, self.stacks[s.player_id])
            for s in (self.seats[i] for i in funded)
        ]

        self.hand_number += 1
        self.hand = start_hand(
            players,
            dealer_index=funded.index(self._dealer_seat),
            config=self.config,
            hand_id=f"{self.game_id}-hand-{self.hand_number}",
            hand_number=self.hand_number,
            seed=hand_seed(self._commitment.seed, self.hand_number),
        )
        self._hand_actions = []

        if self.hand.is_complete:
            self._complete_hand()
        return self.hand

    def apply_action(self, action: Action) -> HandState:
        """
        Apply an action for the player to act in the current hand.

        Raises:
            IllegalStateError: No hand is running
            IllegalActionError: The action is not legal
        """
        if not self.hand_in_progress:
            raise IllegalStateError(f"No hand in progress in game {self.game_id}")

        before = self.hand
        actor = before.active_player
        new_state = apply_action(before, action)

        entry = ActionLogEntry(
            hand=self.hand_number,
            player_id=actor.player_id,
            action=describe_action(action),
            street=before.street.value,
            amount=new_state.get_player(actor.player_id).total_bet - actor.total_bet,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
        self._actions.append(entry)
        self._hand_actions.append(entry)
        self.hand = new_state

        if new_state.is_complete:
            self._complete_hand()
        return new_state

    def legal_actions(self) -> List[str]:
        """Wire names of the actions open to the player to act."""
        if not self.hand_in_progress or self.hand.active_player is None:
            return []
        return sorted(a.value for a in legal_actions(self.hand))

    def _complete_hand(self) -> None:
        hand = self.hand
        for player in hand.players:
            self.stacks[player.player_id] = player.chips

        self.records.append(HandRecord(
            hand_number=hand.hand_number,
            hole_cards=[[c.notation for c in p.hole_cards] for p in hand.players],
            community_cards=[c.notation for c in hand.community_cards],
            actions=list(self._hand_actions),
        ))
        self.results.append(HandResult(
            hand_number=hand.hand_number,
            winner_ids=list(hand.winner_ids),
            winning_hand=hand.winning_hand,
            pot=hand.pot,
            payouts=dict(hand.payouts),
        ))
        logger.info(f"Game {self.game_id}: hand {hand.hand_number} complete, stacks {self.stacks}")

        reason = self.end_reason()
        if reason:
            logger.info(f"Game {self.game_id} over: {reason}")

    def _funded_seats(self) -> List[int]:
        return [i for i, s in enumerate(self.seats) if self.stacks[s.player_id] > 0]

    def _next_dealer(self, funded: List[int]) -> int:
        """First hand: first funded seat. Afterwards the next funded seat clockwise."""
        if self._dealer_seat is None:
            return funded[0]
        n = len(self.seats)
        for offset in range(1, n + 1):
            seat = (self._dealer_seat + offset) % n
            if seat in funded:
                return seat
        return funded[0]

    # ============= Reveal and verification =============

    def finish(self) -> str:
        """
        End the game and reveal the seed.

        Raises:
            IllegalStateError: A hand is still running
        """
        if self.hand_in_progress:
            raise IllegalStateError(f"Cannot finish game {self.game_id} during hand {self.hand_number}")
        self._finished = True
        if not self._revealed:
            self._revealed = True
            logger.info(f"Game {self.game_id} revealed seed for commitment {format_commitment(self.commitment)}")
        return self._commitment.seed

    def reveal(self) -> str:
        """
        The seed, available only once the game is over.

        Raises:
            IllegalStateError: The game is still running
        """
        if not self.is_over:
            raise IllegalStateError(f"Game {self.game_id} is not over; the seed stays secret")
        return self.finish()

    def verify(self) -> GameVerification:
        """Verify every recorded hand against the revealed seed."""
        if not self._revealed:
            raise IllegalStateError(f"Seed of game {self.game_id} has not been revealed")
        return verify_game(self.commitment, self._commitment.seed, self.records)

    # ============= Serialization =============

    def status(self) -> str:
        if self.hand_in_progress:
            return "in_hand"
        if self.is_over:
            return "finished"
        return "waiting"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "game_id": self.game_id,
            "commitment": self.commitment,
            "status": self.status(),
            "end_reason": self.end_reason(),
            "hand_number": self.hand_number,
            "max_hands": self.config.max_hands,
            "players": [
                {"id": s.player_id, "name": s.name or s.player_id, "chips": self.stacks[s.player_id]}
                for s in self.seats
            ],
            "results": [r.to_dict() for r in self.results],
            "seed": self._commitment.seed if self._revealed else None,
        }

    def hand_snapshot(self, reveal: bool = False) -> Optional[Dict[str, Any]]:
        if self.hand is None:
            return None
        snapshot = hand_snapshot(self.hand, reveal=reveal)
        snapshot["legal_actions"] = self.legal_actions()
        return snapshot
