"""
FairPoker - Verifiable Texas Hold'em Engine

A Texas Hold'em game core whose deals can be proven fair after the fact:
- Seeded, reproducible shuffling
- Hand evaluation with full tie-break semantics
- Pure betting state machine (fold/check/call/raise/all-in)
- Commit-reveal verification of every dealt card
- Thin FastAPI server over in-memory games

Usage:
    from fairpoker.core import GameSession, evaluate_hand, verify_commitment
"""

__version__ = "0.1.0"

from fairpoker.core.card import Card
from fairpoker.core.game import HandState, start_hand, apply_action, legal_actions
from fairpoker.core.hand import HandRank, evaluate_hand
from fairpoker.core.session import GameSession
from fairpoker.core.verifiable import generate_commitment, verify_commitment, verify_hand_cards

__all__ = [
    "Card",
    "HandState",
    "start_hand",
    "apply_action",
    "legal_actions",
    "HandRank",
    "evaluate_hand",
    "GameSession",
    "generate_commitment",
    "verify_commitment",
    "verify_hand_cards",
    "__version__",
]
