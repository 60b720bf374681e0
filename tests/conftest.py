"""
Pytest configuration and shared fixtures for FairPoker tests.
"""

import pytest
from fairpoker.core.card import Card, Rank, Suit, build_deck, parse_cards
from fairpoker.core.game import start_hand
from fairpoker.core.rules import GameConfig
from fairpoker.core.verifiable import GameCommitment, compute_commitment


FIXED_SEED = "5f" * 32


@pytest.fixture
def config():
    """Default 10/20 table with 1000-chip stacks."""
    return GameConfig()


@pytest.fixture
def fixed_commitment():
    """A commitment over a known seed, for reproducible games."""
    return GameCommitment(seed=FIXED_SEED, commitment=compute_commitment(FIXED_SEED))


@pytest.fixture
def heads_up_hand(config):
    """2-player hand, dealer at seat 0 (SB seat 1, BB seat 0)."""
    return start_hand(["alice", "bob"], dealer_index=0, config=config, seed="heads-up")


@pytest.fixture
def four_player_hand(config):
    """4-player hand, dealer at seat 0 (SB 1, BB 2, first to act 3)."""
    return start_hand(["p0", "p1", "p2", "p3"], dealer_index=0, config=config, seed="four-players")


@pytest.fixture
def rig():
    """
    Replace the cards of a freshly started hand.

    Usage:
        rig(state, [["Ah", "Kh"], ["2c", "2d"]], ["Ks", "Kd", "2h", "3s", "4c"])

    The remaining deck is rebuilt as burn + flop, burn + turn, burn + river
    so that the board comes out exactly as given.
    """
    def _rig(state, hole_cards, board):
        for player, cards in zip(state.players, hole_cards):
            player.hole_cards = parse_cards(cards)
        board_cards = parse_cards(board)
        used = {c for p in state.players for c in p.hole_cards} | set(board_cards)
        spare = [c for c in build_deck() if c not in used]

        deck = []
        remaining = iter(board_cards)
        for count in (3, 1, 1):
            deck.append(spare.pop())
            deck.extend(next(remaining) for _ in range(count))
        state.deck = deck + spare
        return state

    return _rig


@pytest.fixture
def royal_flush():
    """Create a royal flush hand (2 hole cards + board)."""
    return (
        [Card(Rank.ACE, Suit.SPADES), Card(Rank.KING, Suit.SPADES)],
        [
            Card(Rank.QUEEN, Suit.SPADES),
            Card(Rank.JACK, Suit.SPADES),
            Card(Rank.TEN, Suit.SPADES),
            Card(Rank.TWO, Suit.HEARTS),
            Card(Rank.THREE, Suit.DIAMONDS),
        ],
    )


@pytest.fixture
def wheel_straight():
    """Create a wheel straight (A-2-3-4-5) with unrelated high cards."""
    return (["Ac", "2d"], ["3h", "4s", "5c", "Kd", "9h"])
