"""
Tests for hand evaluation.
"""

import random
from collections import Counter
from itertools import combinations

import pytest
from fairpoker.core.card import build_deck
from fairpoker.core.errors import InsufficientCardsError
from fairpoker.core.hand import (
    HandRank, compare_hands, determine_winners, evaluate_hand, hand_strength_percent,
)


def _score_five(cards):
    """Independent 5-card scorer used as an oracle."""
    values = sorted((c.value for c in cards), reverse=True)
    counts = Counter(values)
    shape = sorted(counts.values(), reverse=True)
    grouped = sorted(counts.items(), key=lambda kv: (kv[1], kv[0]), reverse=True)
    ordered = tuple(v for v, n in grouped for _ in range(n))
    flush = len({c.suit for c in cards}) == 1

    straight_high = None
    unique = sorted(set(values), reverse=True)
    if len(unique) == 5:
        if unique[0] - unique[4] == 4:
            straight_high = unique[0]
        elif unique == [14, 5, 4, 3, 2]:
            straight_high = 5

    if straight_high and flush:
        return (10 if straight_high == 14 else 9, (straight_high,))
    if shape == [4, 1]:
        return (8, ordered)
    if shape == [3, 2]:
        return (7, ordered)
    if flush:
        return (6, tuple(values))
    if straight_high:
        return (5, (straight_high,))
    if shape == [3, 1, 1]:
        return (4, ordered)
    if shape == [2, 2, 1]:
        return (3, ordered)
    if shape == [2, 1, 1, 1]:
        return (2, ordered)
    return (1, tuple(values))


class TestHandRanking:
    """Tests for hand ranking and descriptions."""

    def test_royal_flush(self, royal_flush):
        """Test royal flush recognition."""
        hole, board = royal_flush
        hand = evaluate_hand(hole, board)
        assert hand.rank == HandRank.ROYAL_FLUSH
        assert hand.rank_value == 10
        assert hand.description == "Royal Flush"
        assert hand.notation == ["As", "Ks", "Qs", "Js", "10s"]

    def test_straight_flush_below_top_flush_cards(self):
        """A straight flush hidden under higher flush cards is still found."""
        hand = evaluate_hand(["9h", "8h"], ["7h", "6h", "5h", "Ah", "Kh"])
        assert hand.rank == HandRank.STRAIGHT_FLUSH
        assert hand.description == "Straight Flush, Nine high"
        assert hand.notation == ["9h", "8h", "7h", "6h", "5h"]

    def test_steel_wheel(self):
        hand = evaluate_hand(["Ad", "2d"], ["3d", "4d", "5d", "Kc", "Kh"])
        assert hand.rank == HandRank.STRAIGHT_FLUSH
        assert hand.description == "Straight Flush, Five high"
        assert hand.values == (5, 4, 3, 2, 1)

    def test_four_of_a_kind(self):
        """Test four of a kind recognition."""
        hand = evaluate_hand(["Ah", "Ad"], ["Ac", "As", "Kd", "2c", "3d"])
        assert hand.rank == HandRank.FOUR_OF_A_KIND
        assert hand.description == "Four of a Kind, Aces"
        assert hand.values == (14, 14, 14, 14, 13)

    def test_full_house(self):
        """Test full house recognition."""
        hand = evaluate_hand(["2c", "2d"], ["Ks", "Kd", "2h", "3s", "4c"])
        assert hand.rank == HandRank.FULL_HOUSE
        assert hand.description == "Full House, Twos over Kings"
        assert hand.values == (2, 2, 2, 13, 13)

    def test_two_trips_make_full_house(self):
        hand = evaluate_hand(["Kh", "Kd"], ["Ks", "2c", "2d", "2h", "5s"])
        assert hand.rank == HandRank.FULL_HOUSE
        assert hand.description == "Full House, Kings over Twos"

    def test_flush(self):
        """Test flush recognition."""
        hand = evaluate_hand(["Ah", "2h"], ["9h", "5h", "7h", "Kd", "Qc"])
        assert hand.rank == HandRank.FLUSH
        assert hand.description == "Flush, Ace high"
        assert hand.values == (14, 9, 7, 5, 2)

    def test_straight(self):
        """Test straight recognition."""
        hand = evaluate_hand(["9c", "8d"], ["7h", "6s", "5c", "2d", "2h"])
        assert hand.rank == HandRank.STRAIGHT
        assert hand.description == "Straight, Nine high"

    def test_wheel_straight(self, wheel_straight):
        """The Ace plays low in A-2-3-4-5."""
        hole, board = wheel_straight
        hand = evaluate_hand(hole, board)
        assert hand.rank == HandRank.STRAIGHT
        assert hand.description == "Straight, Five high"
        assert hand.values == (5, 4, 3, 2, 1)
        assert hand.notation == ["5c", "4s", "3h", "2d", "Ac"]

    def test_wheel_loses_to_six_high_straight(self, wheel_straight):
        hole, board = wheel_straight
        wheel = evaluate_hand(hole, board)
        six_high = evaluate_hand(["6d", "2d"], ["3h", "4s", "5c", "Kd", "9h"])
        assert compare_hands(six_high, wheel) == 1

    def test_three_of_a_kind(self):
        hand = evaluate_hand(["7c", "7d"], ["7h", "Ks", "2c", "9d", "4h"])
        assert hand.rank == HandRank.THREE_OF_A_KIND
        assert hand.description == "Three of a Kind, Sevens"
        assert hand.values == (7, 7, 7, 13, 9)

    def test_two_pair(self):
        hand = evaluate_hand(["Kh", "2d"], ["Kd", "2c", "9s", "5h", "3c"])
        assert hand.rank == HandRank.TWO_PAIR
        assert hand.description == "Two Pair, Kings and Twos"
        assert hand.values == (13, 13, 2, 2, 9)

    def test_three_pairs_use_best_two(self):
        hand = evaluate_hand(["Kh", "Kd"], ["Qs", "Qc", "2d", "2h", "3c"])
        assert hand.rank == HandRank.TWO_PAIR
        assert hand.values == (13, 13, 12, 12, 3)

    def test_one_pair(self):
        hand = evaluate_hand(["Kh", "Kd"], ["2c", "5d", "9s", "7h", "3c"])
        assert hand.rank == HandRank.ONE_PAIR
        assert hand.description == "Pair of Kings"
        assert hand.values == (13, 13, 9, 7, 5)

    def test_plural_of_six(self):
        hand = evaluate_hand(["6c", "6d"], ["2c", "5d", "9s", "Kh", "3c"])
        assert hand.description == "Pair of Sixes"

    def test_high_card(self):
        hand = evaluate_hand(["Ac", "9d"], ["2h", "5s", "7c", "Jd", "3h"])
        assert hand.rank == HandRank.HIGH_CARD
        assert hand.description == "High Card, Ace"
        assert hand.values == (14, 11, 9, 7, 5)

    def test_label_and_to_dict(self):
        hand = evaluate_hand(["2c", "2d"], ["Ks", "Kd", "2h", "3s", "4c"])
        assert hand.rank.label == "full_house"
        assert hand.to_dict() == {
            "rank": "full_house",
            "rank_value": 7,
            "cards": ["2h", "2d", "2c", "Kd", "Ks"],
            "description": "Full House, Twos over Kings",
        }
        assert hand_strength_percent(hand) == 85


class TestPartialBoards:
    """Hands with fewer than seven cards."""

    def test_preflop_pair(self):
        hand = evaluate_hand(["Ah", "Ad"])
        assert hand.rank == HandRank.ONE_PAIR
        assert len(hand.cards) == 2

    def test_preflop_high_card(self):
        hand = evaluate_hand(["Ah", "Kd"])
        assert hand.rank == HandRank.HIGH_CARD
        assert hand.description == "High Card, Ace"

    def test_flop(self):
        hand = evaluate_hand(["Ah", "Kd"], ["Ac", "7s", "2h"])
        assert hand.rank == HandRank.ONE_PAIR
        assert hand.values == (14, 14, 13, 7, 2)


class TestInvalidInput:
    """Contract violations fail fast."""

    def test_one_hole_card(self):
        with pytest.raises(InsufficientCardsError):
            evaluate_hand(["Ah"], ["Kd", "Qc", "Js"])

    def test_no_hole_cards(self):
        with pytest.raises(InsufficientCardsError):
            evaluate_hand([])

    def test_three_hole_cards(self):
        with pytest.raises(ValueError):
            evaluate_hand(["Ah", "Kd", "Qc"])

    def test_too_many_community_cards(self):
        with pytest.raises(ValueError):
            evaluate_hand(["Ah", "Kd"], ["2c", "3c", "4c", "5c", "6c", "7c"])

    def test_duplicate_cards(self):
        with pytest.raises(ValueError, match="Duplicate"):
            evaluate_hand(["Ah", "Kd"], ["Ah", "3c", "4c"])


class TestHandComparison:
    """Tests for hand comparison."""

    def test_category_beats_kickers(self):
        flush = evaluate_hand(["2h", "4h"], ["6h", "8h", "10h", "Ks", "Kd"])
        trips = evaluate_hand(["Kh", "Kc"], ["6h", "8h", "10d", "Ks", "2d"])
        assert compare_hands(flush, trips) == 1
        assert compare_hands(trips, flush) == -1

    def test_kicker_decides(self):
        board = ["Ah", "7c", "5s", "3d", "9h"]
        ace_king = evaluate_hand(["Ac", "Kd"], board)
        ace_queen = evaluate_hand(["As", "Qd"], board)
        assert compare_hands(ace_king, ace_queen) == 1

    def test_board_plays_is_a_tie(self):
        board = ["As", "Ks", "Qs", "Js", "10s"]
        a = evaluate_hand(["2c", "3d"], board)
        b = evaluate_hand(["4h", "5h"], board)
        assert compare_hands(a, b) == 0

    def test_antisymmetric_and_transitive(self):
        rng = random.Random(7)
        deck = build_deck()
        hands = []
        for _ in range(40):
            cards = rng.sample(deck, 7)
            hands.append(evaluate_hand(cards[:2], cards[2:]))

        for a in hands:
            for b in hands:
                assert compare_hands(a, b) == -compare_hands(b, a)
                if compare_hands(a, b) == 0:
                    assert (a.rank_value, a.values) == (b.rank_value, b.values)

        ordered = sorted(hands, key=lambda h: (h.rank_value, h.values))
        for lower, higher in zip(ordered, ordered[1:]):
            assert compare_hands(higher, lower) >= 0
        for a, b, c in combinations(hands[:15], 3):
            if compare_hands(a, b) >= 0 and compare_hands(b, c) >= 0:
                assert compare_hands(a, c) >= 0

    def test_evaluation_is_pure(self):
        first = evaluate_hand(["Ah", "Kh"], ["Qh", "Jh", "2c"])
        second = evaluate_hand(["Ah", "Kh"], ["Qh", "Jh", "2c"])
        assert first == second


class TestBruteForceOracle:
    """Best-of-seven matches exhaustive search over every 5-card subset."""

    def test_sampled_seven_card_hands(self):
        rng = random.Random(20240501)
        deck = build_deck()
        for _ in range(300):
            cards = rng.sample(deck, 7)
            evaluated = evaluate_hand(cards[:2], cards[2:])

            best = max(combinations(cards, 5), key=_score_five)
            assert evaluated.rank_value == _score_five(best)[0]
            reference = evaluate_hand(list(best[:2]), list(best[2:]))
            assert compare_hands(evaluated, reference) == 0


class TestDetermineWinners:
    """Tests for picking the best hand(s)."""

    def test_single_winner(self):
        winners = determine_winners(
            [("alice", ["Ah", "Kh"]), ("bob", ["2c", "2d"])],
            ["Ks", "Kd", "2h", "3s", "4c"],
        )
        assert len(winners) == 1
        assert winners[0][0] == "bob"
        assert winners[0][1].description == "Full House, Twos over Kings"

    def test_split(self):
        winners = determine_winners(
            {"a": ["2c", "3d"], "b": ["4h", "5h"], "c": ["7c", "8d"]},
            ["As", "Ks", "Qs", "Js", "10s"],
        )
        assert [pid for pid, _ in winners] == ["a", "b", "c"]

    def test_empty(self):
        with pytest.raises(ValueError):
            determine_winners([], [])
