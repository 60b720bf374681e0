"""
Player records for one hand of Texas Hold'em.

- Seat: what the caller hands to ``start_hand`` (identity and optional stack)
- PlayerState: the engine-owned, per-hand mutable record
"""

from __future__ import annotations
from typing import List, Optional, Dict, Any, Union
from dataclasses import dataclass, field

from fairpoker.core.card import Card


@dataclass(frozen=True)
class Seat:
    """
    A player joining a hand.

    Attributes:
        player_id: Unique identifier for the player
        name: Display name (defaults to player_id)
        chips: Stack to bring; None means the config's starting chips
    """
    player_id: str
    name: Optional[str] = None
    chips: Optional[int] = None

    @classmethod
    def coerce(cls, value: Union["Seat", str, Dict[str, Any]]) -> "Seat":
        """Accept a Seat, a bare player id, or a dict with id/name/chips."""
        if isinstance(value, Seat):
            return value
        if isinstance(value, str):
            return cls(player_id=value)
        if isinstance(value, dict):
            return cls(
                player_id=str(value.get("player_id", value.get("id"))),
                name=value.get("name"),
                chips=value.get("chips"),
            )
        raise TypeError(f"Cannot build a Seat from {value!r}")


@dataclass
class PlayerState:
    """
    A player's state within a single hand.

    Attributes:
        player_id: Unique identifier for the player
        name: Display name
        seat: Index in the hand's player list
        hole_cards: The player's private cards (2 cards)
        chips: Chips behind (not yet committed)
        current_bet: Amount bet in the current betting round
        total_bet: Total amount committed this hand
        is_folded: Has folded
        is_all_in: Has no chips left and is still in the hand
        has_acted: Has acted since the last bet that reopened action
    """
    player_id: str
    name: str
    seat: int
    chips: int
    hole_cards: List[Card] = field(default_factory=list)
    current_bet: int = 0
    total_bet: int = 0
    is_folded: bool = False
    is_all_in: bool = False
    has_acted: bool = False
    # Track last action for display
    last_action: Optional[str] = None

    def bet(self, amount: int) -> int:
        """
        Move chips from the stack into the current bet.

        Returns:
            Actual amount moved (capped at the stack)
        """
        if amount <= 0:
            return 0

        actual = min(amount, self.chips)
        self.chips -= actual
        self.current_bet += actual
        self.total_bet += actual

        if self.chips == 0:
            self.is_all_in = True

        return actual

    def reset_for_new_round(self) -> None:
        """Reset per-street bookkeeping (flop, turn, river)."""
        self.current_bet = 0
        self.has_acted = False

    @property
    def is_active(self) -> bool:
        """Still able to act: not folded and not all-in."""
        return not self.is_folded and not self.is_all_in

    @property
    def in_hand(self) -> bool:
        """Still contesting the pot."""
        return not self.is_folded

    def to_dict(self, hide_cards: bool = True) -> Dict[str, Any]:
        """
        Convert to dictionary for JSON serialization.

        Args:
            hide_cards: If True, don't include hole cards
        """
        result = {
            "id": self.player_id,
            "name": self.name,
            "seat": self.seat,
            "chips": self.chips,
            "bet": self.current_bet,
            "total_bet": self.total_bet,
            "folded": self.is_folded,
            "all_in": self.is_all_in,
            "has_acted": self.has_acted,
            "last_action": self.last_action,
        }

        if not hide_cards and self.hole_cards:
            result["cards"] = [card.notation for card in self.hole_cards]

        return result

    def __repr__(self) -> str:
        return (
            f"PlayerState({self.player_id}, chips={self.chips}, bet={self.current_bet}, "
            f"folded={self.is_folded}, all_in={self.is_all_in})"
        )
