"""
FairPoker Core - Pure Python Texas Hold'em Game Logic

This package contains all game and verification logic without any
network dependencies.
"""

from fairpoker.core.card import Card, Rank, Suit, build_deck, seeded_shuffle, shuffle
from fairpoker.core.errors import (
    PokerError,
    IllegalActionError,
    IllegalStateError,
    DeckExhaustedError,
    InsufficientCardsError,
    InvalidCardError,
    InvalidActionInputError,
    ConfigError,
)
from fairpoker.core.hand import EvaluatedHand, HandRank, compare_hands, determine_winners, evaluate_hand
from fairpoker.core.player import PlayerState, Seat
from fairpoker.core.rules import (
    Action, ActionType, AllIn, Call, Check, Fold, GameConfig, Raise, Street, parse_action,
)
from fairpoker.core.game import HandState, apply_action, hand_snapshot, legal_actions, start_hand
from fairpoker.core.verifiable import (
    FailureReason,
    GameCommitment,
    HandRecord,
    compute_commitment,
    generate_commitment,
    hand_seed,
    verify_commitment,
    verify_game,
    verify_hand_cards,
)
from fairpoker.core.session import GameSession

__all__ = [
    "Card",
    "Rank",
    "Suit",
    "build_deck",
    "seeded_shuffle",
    "shuffle",
    "PokerError",
    "IllegalActionError",
    "IllegalStateError",
    "DeckExhaustedError",
    "InsufficientCardsError",
    "InvalidCardError",
    "InvalidActionInputError",
    "ConfigError",
    "EvaluatedHand",
    "HandRank",
    "compare_hands",
    "determine_winners",
    "evaluate_hand",
    "PlayerState",
    "Seat",
    "Action",
    "ActionType",
    "AllIn",
    "Call",
    "Check",
    "Fold",
    "GameConfig",
    "Raise",
    "Street",
    "parse_action",
    "HandState",
    "apply_action",
    "hand_snapshot",
    "legal_actions",
    "start_hand",
    "FailureReason",
    "GameCommitment",
    "HandRecord",
    "compute_commitment",
    "generate_commitment",
    "hand_seed",
    "verify_commitment",
    "verify_game",
    "verify_hand_cards",
    "GameSession",
]
