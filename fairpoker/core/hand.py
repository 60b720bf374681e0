"""
Hand Evaluation for Texas Hold'em.

This module picks the best 5-card hand out of a player's two hole cards
plus 0-5 community cards (2-7 cards in total). With fewer than five cards
available (preflop, or a partial board) the made hand simply contains
every card there is.

Hand Rankings (best to worst):
10. Royal Flush: A K Q J 10 of one suit
 9. Straight Flush: 5 consecutive cards of same suit
 8. Four of a Kind: 4 cards of same rank
 7. Full House: 3 of a kind + pair
 6. Flush: 5 cards of same suit
 5. Straight: 5 consecutive cards
 4. Three of a Kind: 3 cards of same rank
 3. Two Pair: 2 different pairs
 2. One Pair: 2 cards of same rank
 1. High Card: No made hand

Comparison is by category first, then lexicographically by the rank
values of the hand's cards in significance order. The Ace is 14
everywhere except as the low card of the wheel (5-4-3-2-A), where it
counts as 1.
"""

from __future__ import annotations
from collections import Counter, defaultdict
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from fairpoker.core.card import Card, Rank, Suit
from fairpoker.core.errors import InsufficientCardsError

CardLike = Union[Card, str]


class HandRank(IntEnum):
    """Hand categories from worst (lowest value) to best (highest value)."""
    HIGH_CARD = 1
    ONE_PAIR = 2
    TWO_PAIR = 3
    THREE_OF_A_KIND = 4
    STRAIGHT = 5
    FLUSH = 6
    FULL_HOUSE = 7
    FOUR_OF_A_KIND = 8
    STRAIGHT_FLUSH = 9
    ROYAL_FLUSH = 10

    @property
    def label(self) -> str:
        """Wire name, e.g. 'full_house'."""
        return HAND_RANK_LABELS[self]


HAND_RANK_LABELS = {
    HandRank.HIGH_CARD: "high_card",
    HandRank.ONE_PAIR: "pair",
    HandRank.TWO_PAIR: "two_pair",
    HandRank.THREE_OF_A_KIND: "three_of_a_kind",
    HandRank.STRAIGHT: "straight",
    HandRank.FLUSH: "flush",
    HandRank.FULL_HOUSE: "full_house",
    HandRank.FOUR_OF_A_KIND: "four_of_a_kind",
    HandRank.STRAIGHT_FLUSH: "straight_flush",
    HandRank.ROYAL_FLUSH: "royal_flush",
}

# Coarse display strength per category (percent)
HAND_STRENGTH = {
    HandRank.HIGH_CARD: 10,
    HandRank.ONE_PAIR: 25,
    HandRank.TWO_PAIR: 40,
    HandRank.THREE_OF_A_KIND: 55,
    HandRank.STRAIGHT: 65,
    HandRank.FLUSH: 75,
    HandRank.FULL_HOUSE: 85,
    HandRank.FOUR_OF_A_KIND: 95,
    HandRank.STRAIGHT_FLUSH: 99,
    HandRank.ROYAL_FLUSH: 100,
}

RANK_NAMES = {
    Rank.TWO: "Two", Rank.THREE: "Three", Rank.FOUR: "Four",
    Rank.FIVE: "Five", Rank.SIX: "Six", Rank.SEVEN: "Seven",
    Rank.EIGHT: "Eight", Rank.NINE: "Nine", Rank.TEN: "Ten",
    Rank.JACK: "Jack", Rank.QUEEN: "Queen", Rank.KING: "King",
    Rank.ACE: "Ace",
}

RANK_PLURALS = {rank: f"{name}s" for rank, name in RANK_NAMES.items()}
RANK_PLURALS[Rank.SIX] = "Sixes"

_SUIT_ORDER = {suit: i for i, suit in enumerate(Suit)}

MAX_COMMUNITY_CARDS = 5
HAND_SIZE = 5


@dataclass(frozen=True)
class EvaluatedHand:
    """
    Result of evaluating a player's best hand.

    Attributes:
        rank: Hand category
        rank_value: Integer category value for coarse comparison
        cards: The cards forming the hand, ordered by significance
        values: Tie-break sequence (rank values of ``cards``; wheel Ace = 1)
        description: Human-readable text, e.g. "Full House, Twos over Kings"
    """
    rank: HandRank
    rank_value: int
    cards: Tuple[Card, ...]
    values: Tuple[int, ...]
    description: str

    @property
    def notation(self) -> List[str]:
        return [card.notation for card in self.cards]

    def to_dict(self) -> Dict[str, object]:
        """Convert to dictionary for JSON serialization."""
        return {
            "rank": self.rank.label,
            "rank_value": self.rank_value,
            "cards": self.notation,
            "description": self.description,
        }


def _coerce(cards: Iterable[CardLike]) -> List[Card]:
    return [c if isinstance(c, Card) else Card.from_notation(c) for c in cards]


def _sort_key(card: Card) -> Tuple[int, int]:
    # Rank descending, then canonical suit order so equal ranks are stable
    return (-int(card.rank), _SUIT_ORDER[card.suit])


def evaluate_hand(
    hole_cards: Sequence[CardLike],
    community_cards: Sequence[CardLike] = (),
) -> EvaluatedHand:
    """
    Evaluate the best hand from two hole cards plus the board.

    Args:
        hole_cards: Exactly 2 cards (Card objects or notation strings)
        community_cards: 0-5 cards

    Returns:
        EvaluatedHand for the strongest 5-card (or smaller) subset

    Raises:
        InsufficientCardsError: If fewer than 2 hole cards are given
        ValueError: Too many cards, or duplicate cards
    """
    hole = _coerce(hole_cards)
    board = _coerce(community_cards)

    if len(hole) < 2:
        raise InsufficientCardsError(f"Need 2 hole cards, got {len(hole)}")
    if len(hole) > 2:
        raise ValueError(f"Need 2 hole cards, got {len(hole)}")
    if len(board) > MAX_COMMUNITY_CARDS:
        raise ValueError(f"At most {MAX_COMMUNITY_CARDS} community cards, got {len(board)}")

    cards = hole + board
    if len(set(cards)) != len(cards):
        dupes = sorted(c.notation for c, n in Counter(cards).items() if n > 1)
        raise ValueError(f"Duplicate cards: {', '.join(dupes)}")

    return _evaluate(cards)


def _evaluate(cards: List[Card]) -> EvaluatedHand:
    """Test categories from strongest to weakest; first match wins."""
    cards = sorted(cards, key=_sort_key)

    by_rank: Dict[Rank, List[Card]] = defaultdict(list)
    by_suit: Dict[Suit, List[Card]] = defaultdict(list)
    for card in cards:
        by_rank[card.rank].append(card)
        by_suit[card.suit].append(card)

    flush_cards: Optional[List[Card]] = None
    for suited in by_suit.values():
        if len(suited) >= HAND_SIZE:
            flush_cards = suited
            break

    # Straight flush / royal flush: search every card of the flush suit
    if flush_cards:
        straight_flush = _find_straight(flush_cards)
        if straight_flush:
            high = straight_flush[0].rank
            if high == Rank.ACE:
                return _make(HandRank.ROYAL_FLUSH, straight_flush, "Royal Flush")
            return _make(
                HandRank.STRAIGHT_FLUSH, straight_flush,
                f"Straight Flush, {RANK_NAMES[high]} high",
            )

    quads = _ranks_with_count(by_rank, 4)
    trips = _ranks_with_count(by_rank, 3)
    pairs = _ranks_with_count(by_rank, 2)

    if quads:
        quad = quads[0]
        hand = by_rank[quad] + _kickers(cards, [quad], 1)
        return _make(HandRank.FOUR_OF_A_KIND, hand, f"Four of a Kind, {RANK_PLURALS[quad]}")

    if trips and (pairs or len(trips) > 1):
        trip = trips[0]
        pair = max(pairs[:1] + trips[1:2])
        hand = by_rank[trip][:3] + by_rank[pair][:2]
        return _make(
            HandRank.FULL_HOUSE, hand,
            f"Full House, {RANK_PLURALS[trip]} over {RANK_PLURALS[pair]}",
        )

    if flush_cards:
        hand = flush_cards[:HAND_SIZE]
        return _make(HandRank.FLUSH, hand, f"Flush, {RANK_NAMES[hand[0].rank]} high")

    straight = _find_straight(cards)
    if straight:
        return _make(HandRank.STRAIGHT, straight, f"Straight, {RANK_NAMES[straight[0].rank]} high")

    if trips:
        trip = trips[0]
        hand = by_rank[trip] + _kickers(cards, [trip], 2)
        return _make(HandRank.THREE_OF_A_KIND, hand, f"Three of a Kind, {RANK_PLURALS[trip]}")

    if len(pairs) >= 2:
        high_pair, low_pair = pairs[0], pairs[1]
        hand = by_rank[high_pair] + by_rank[low_pair] + _kickers(cards, [high_pair, low_pair], 1)
        return _make(
            HandRank.TWO_PAIR, hand,
            f"Two Pair, {RANK_PLURALS[high_pair]} and {RANK_PLURALS[low_pair]}",
        )

    if pairs:
        pair = pairs[0]
        hand = by_rank[pair] + _kickers(cards, [pair], 3)
        return _make(HandRank.ONE_PAIR, hand, f"Pair of {RANK_PLURALS[pair]}")

    hand = cards[:HAND_SIZE]
    return _make(HandRank.HIGH_CARD, hand, f"High Card, {RANK_NAMES[hand[0].rank]}")


def _make(rank: HandRank, cards: List[Card], description: str) -> EvaluatedHand:
    values = [card.value for card in cards]
    if rank in (HandRank.STRAIGHT, HandRank.STRAIGHT_FLUSH) and cards[0].rank == Rank.FIVE:
        values[-1] = 1  # wheel: Ace plays low
    return EvaluatedHand(
        rank=rank,
        rank_value=int(rank),
        cards=tuple(cards),
        values=tuple(values),
        description=description,
    )


def _ranks_with_count(by_rank: Dict[Rank, List[Card]], count: int) -> List[Rank]:
    """Ranks appearing exactly ``count`` times, highest first."""
    return sorted((r for r, group in by_rank.items() if len(group) == count), reverse=True)


def _kickers(cards: List[Card], used: List[Rank], count: int) -> List[Card]:
    """Highest cards whose rank is not part of the made hand."""
    return [c for c in cards if c.rank not in used][:count]


def _find_straight(cards: List[Card]) -> Optional[List[Card]]:
    """
    Best straight in ``cards`` (sorted high to low), or None.

    Returns the five cards high to low; a wheel is returned as 5-4-3-2-A.
    """
    first_of_rank: Dict[int, Card] = {}
    for card in cards:
        first_of_rank.setdefault(card.value, card)

    for high in range(Rank.ACE, Rank.FIVE, -1):
        if all(high - k in first_of_rank for k in range(HAND_SIZE)):
            return [first_of_rank[high - k] for k in range(HAND_SIZE)]

    wheel = [5, 4, 3, 2, 14]
    if all(v in first_of_rank for v in wheel):
        return [first_of_rank[v] for v in wheel]

    return None


def compare_hands(a: EvaluatedHand, b: EvaluatedHand) -> int:
    """
    Compare two evaluated hands.

    Returns:
        1 if ``a`` is stronger, -1 if ``b`` is stronger, 0 for a split
    """
    key_a = (a.rank_value, a.values)
    key_b = (b.rank_value, b.values)
    if key_a > key_b:
        return 1
    if key_a < key_b:
        return -1
    return 0


def determine_winners(
    player_hands: Union[Mapping[str, Sequence[CardLike]], Sequence[Tuple[str, Sequence[CardLike]]]],
    community_cards: Sequence[CardLike] = (),
) -> List[Tuple[str, EvaluatedHand]]:
    """
    Evaluate every candidate and return all hands tied for best.

    Args:
        player_hands: Mapping or sequence of (player_id, hole_cards)
        community_cards: The shared board

    Returns:
        List of (player_id, EvaluatedHand), in input order. More than one
        entry means a split.
    """
    items = list(player_hands.items()) if isinstance(player_hands, Mapping) else list(player_hands)
    if not items:
        raise ValueError("No hands to compare")

    evaluated = [(pid, evaluate_hand(hole, community_cards)) for pid, hole in items]

    best = evaluated[0][1]
    for _, hand in evaluated[1:]:
        if compare_hands(hand, best) > 0:
            best = hand

    return [(pid, hand) for pid, hand in evaluated if compare_hands(hand, best) == 0]


def hand_strength_percent(hand: EvaluatedHand) -> int:
    """Coarse strength estimate by category, for display only."""
    return HAND_STRENGTH[hand.rank]
