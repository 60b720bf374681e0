"""
Card and Deck primitives for verifiable Texas Hold'em.

The canonical wire form of a card is its notation: rank followed by a
lowercase suit letter, e.g. ``"Ah"``, ``"10d"``, ``"2c"``. Every layer
outside the core (storage, transport, verification payloads) uses exactly
this text.

Canonical deck order is suit-major, rank-minor::

    2h 3h ... Ah 2d ... Ad 2c ... Ac 2s ... As

This order is the baseline permuted by :func:`seeded_shuffle`, so it must
never change.

Dealing order for one hand (replayed by the verifier):

1. Hole cards: two consecutive cards per player, players in seat order.
2. Flop: burn 1, deal 3.
3. Turn: burn 1, deal 1.
4. River: burn 1, deal 1.
"""

from __future__ import annotations

import hashlib
import random
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from fairpoker.core.errors import DeckExhaustedError, InvalidCardError


class Suit(Enum):
    """Card suits, declared in canonical deck order."""
    HEARTS = "h"
    DIAMONDS = "d"
    CLUBS = "c"
    SPADES = "s"


class Rank(IntEnum):
    """Card ranks valued 2 (lowest) to 14 (Ace, high)."""
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14


SUIT_SYMBOLS = {
    Suit.HEARTS: "♥",
    Suit.DIAMONDS: "♦",
    Suit.CLUBS: "♣",
    Suit.SPADES: "♠",
}

RANK_NOTATION = {
    Rank.TWO: "2",
    Rank.THREE: "3",
    Rank.FOUR: "4",
    Rank.FIVE: "5",
    Rank.SIX: "6",
    Rank.SEVEN: "7",
    Rank.EIGHT: "8",
    Rank.NINE: "9",
    Rank.TEN: "10",
    Rank.JACK: "J",
    Rank.QUEEN: "Q",
    Rank.KING: "K",
    Rank.ACE: "A",
}

# Reverse mappings
NOTATION_TO_RANK = {v: k for k, v in RANK_NOTATION.items()}
NOTATION_TO_SUIT = {suit.value: suit for suit in Suit}

DECK_SIZE = 52


@dataclass(frozen=True)
class Card:
    """
    An immutable playing card.

    Cards can be created from:
    - Rank and Suit enums: Card(Rank.ACE, Suit.SPADES)
    - Notation: Card.from_notation("As"), Card.from_notation("10d")
    """

    rank: Rank
    suit: Suit

    def __post_init__(self) -> None:
        # Accept raw ints / letters but always store the enums
        object.__setattr__(self, "rank", Rank(self.rank))
        object.__setattr__(self, "suit", Suit(self.suit))

    @classmethod
    def from_notation(cls, notation: str) -> Card:
        """
        Decode a card from its canonical notation.

        Decoding is strict: ``"Th"``, ``"AH"`` or ``" Ah"`` are rejected so
        that decode stays injective over the 52 valid strings.

        Raises:
            InvalidCardError: If the notation is malformed.
        """
        if not isinstance(notation, str) or not 2 <= len(notation) <= 3:
            raise InvalidCardError(f"Invalid card notation: {notation!r}")

        rank_part, suit_part = notation[:-1], notation[-1]
        if rank_part not in NOTATION_TO_RANK:
            raise InvalidCardError(f"Invalid rank {rank_part!r} in card {notation!r}")
        if suit_part not in NOTATION_TO_SUIT:
            raise InvalidCardError(f"Invalid suit {suit_part!r} in card {notation!r}")

        return cls(NOTATION_TO_RANK[rank_part], NOTATION_TO_SUIT[suit_part])

    @property
    def notation(self) -> str:
        """Canonical notation like 'Ah', '10d'."""
        return f"{RANK_NOTATION[self.rank]}{self.suit.value}"

    @property
    def value(self) -> int:
        """Rank value 2-14 (Ace high)."""
        return int(self.rank)

    @property
    def color(self) -> str:
        """Return 'red' for hearts/diamonds, 'black' for clubs/spades."""
        return "red" if self.suit in (Suit.HEARTS, Suit.DIAMONDS) else "black"

    def __deepcopy__(self, memo) -> Card:
        return self

    def __repr__(self) -> str:
        return f"Card({self.notation})"

    def __str__(self) -> str:
        return f"{RANK_NOTATION[self.rank]}{SUIT_SYMBOLS[self.suit]}"

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "notation": self.notation,
            "rank": RANK_NOTATION[self.rank],
            "suit": SUIT_SYMBOLS[self.suit],
            "color": self.color,
        }


def parse_cards(notations: Iterable[str]) -> List[Card]:
    """
    Decode a sequence of notations.

    Accepts a list (``["Ah", "10d"]``) or a space-separated string
    (``"Ah 10d"``).
    """
    if isinstance(notations, str):
        notations = notations.split()
    return [Card.from_notation(n) for n in notations]


def to_notation(cards: Iterable[Card]) -> List[str]:
    """Encode cards to their notation strings."""
    return [card.notation for card in cards]


def build_deck() -> List[Card]:
    """Return all 52 cards in canonical (suit-major, rank-minor) order."""
    return [Card(rank, suit) for suit in Suit for rank in Rank]


# ---------------------------------------------------------------------------
# Shuffling
# ---------------------------------------------------------------------------

_MASK32 = 0xFFFFFFFF


def mulberry32(state: int) -> Callable[[], int]:
    """
    Mulberry32 generator in pure 32-bit integer arithmetic.

    Returns a callable yielding the next unsigned 32-bit output. No floats
    are involved, so the sequence is identical on every platform.
    """
    state &= _MASK32

    def next_u32() -> int:
        nonlocal state
        state = (state + 0x6D2B79F5) & _MASK32
        t = state
        t = ((t ^ (t >> 15)) * (t | 1)) & _MASK32
        t = (t ^ ((t + (((t ^ (t >> 7)) * (t | 61)) & _MASK32)) & _MASK32)) & _MASK32
        return (t ^ (t >> 14)) & _MASK32

    return next_u32


def seed_to_state(seed: str) -> int:
    """First 4 bytes (big-endian) of SHA-256(seed) as the generator state."""
    digest = hashlib.sha256(seed.encode("utf-8")).digest()
    return int.from_bytes(digest[:4], "big")


def shuffle(cards: Sequence[Card], rng: Optional[random.Random] = None) -> List[Card]:
    """
    Fisher-Yates shuffle from a non-reproducible source.

    Only for non-verifiable play. Returns a new list.
    """
    rng = rng or random.SystemRandom()
    shuffled = list(cards)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randrange(i + 1)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def seeded_shuffle(cards: Sequence[Card], seed: str) -> List[Card]:
    """
    Deterministic Fisher-Yates shuffle driven by ``seed``.

    The same seed and the same input order always produce the same output.
    ``j = (u * (i + 1)) >> 32`` is the exact integer form of
    ``floor(u / 2**32 * (i + 1))``.
    """
    next_u32 = mulberry32(seed_to_state(seed))
    shuffled = list(cards)
    for i in range(len(shuffled) - 1, 0, -1):
        j = (next_u32() * (i + 1)) >> 32
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


# ---------------------------------------------------------------------------
# Dealing primitives (pure: they return the remaining cards)
# ---------------------------------------------------------------------------

def deal(cards: Sequence[Card], n: int) -> Tuple[List[Card], List[Card]]:
    """
    Take the first ``n`` cards.

    Returns:
        Tuple of (dealt, remaining)

    Raises:
        DeckExhaustedError: If fewer than ``n`` cards remain.
    """
    if n < 0:
        raise ValueError(f"Cannot deal a negative number of cards: {n}")
    if n > len(cards):
        raise DeckExhaustedError(f"Cannot deal {n} cards from deck with {len(cards)} cards")
    return list(cards[:n]), list(cards[n:])


def deal_hole_cards(cards: Sequence[Card], player_count: int) -> Tuple[List[List[Card]], List[Card]]:
    """Deal two consecutive cards to each player, in player order."""
    hole_cards = []
    remaining = list(cards)
    for _ in range(player_count):
        dealt, remaining = deal(remaining, 2)
        hole_cards.append(dealt)
    return hole_cards, remaining


def deal_flop(cards: Sequence[Card]) -> Tuple[List[Card], List[Card]]:
    """Burn one, deal three."""
    _, after_burn = deal(cards, 1)
    return deal(after_burn, 3)


def deal_turn(cards: Sequence[Card]) -> Tuple[Card, List[Card]]:
    """Burn one, deal one."""
    _, after_burn = deal(cards, 1)
    dealt, remaining = deal(after_burn, 1)
    return dealt[0], remaining


def deal_river(cards: Sequence[Card]) -> Tuple[Card, List[Card]]:
    """Burn one, deal one (same consumption as the turn)."""
    return deal_turn(cards)
