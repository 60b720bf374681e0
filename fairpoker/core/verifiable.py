"""
Verifiable Games - Commit-Reveal Scheme.

Flow:
1. Before the game: generate a random seed, publish
   ``commitment = sha256(seed)``.
2. During the game: hand ``n`` is dealt from
   ``seeded_shuffle(build_deck(), hand_seed(seed, n))``.
3. After the game: reveal the seed. Anyone can recompute the commitment
   and every hand's deck and compare them with what was dealt.

The seed is 32 random bytes written as 64 lowercase hex characters. The
commitment is the SHA-256 hex digest of the seed's text (its UTF-8
bytes), so a verifier needs nothing beyond a standard SHA-256.

Every function here is pure. Verification failures are returned as
structured results, never raised.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence
import hashlib
import logging
import re
import secrets

from fairpoker.core.card import DECK_SIZE, Card, build_deck, seeded_shuffle
from fairpoker.core.errors import InvalidCardError
from fairpoker.core.rules import (
    FLOP_CARDS, HOLE_CARDS, RIVER_CARDS, TOTAL_COMMUNITY_CARDS, TURN_CARDS,
)


logger = logging.getLogger(__name__)

SEED_BYTES = 32
HEX_LENGTH = 64
_HEX_RE = re.compile(r"^[0-9a-fA-F]{64}$")

# Board positions in deal order, with a burn before each street
_STREETS = (("flop", FLOP_CARDS), ("turn", TURN_CARDS), ("river", RIVER_CARDS))


class FailureReason(Enum):
    """Why a verification did not pass."""
    INVALID_FORMAT = "invalid_format"
    HASH_MISMATCH = "hash_mismatch"
    CARD_MISMATCH = "card_mismatch"
    MISSING_DATA = "missing_data"


@dataclass(frozen=True)
class GameCommitment:
    """
    A game's secret seed and its public commitment.

    Attributes:
        seed: 64-char hex seed; keep secret until the game ends
        commitment: SHA-256 hex digest of the seed; safe to publish
    """
    seed: str
    commitment: str

    def __repr__(self) -> str:
        # Never print the seed by accident
        return f"GameCommitment(commitment={self.commitment!r})"


@dataclass(frozen=True)
class CommitmentVerification:
    valid: bool
    commitment: str
    computed_hash: str = ""
    reason: Optional[FailureReason] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "commitment": self.commitment,
            "computed_hash": self.computed_hash,
            "reason": self.reason.value if self.reason else None,
            "error": self.error,
        }


@dataclass(frozen=True)
class HandVerification:
    """
    Outcome of replaying one hand's deal.

    On a card mismatch, ``mismatch_index`` is the absolute deck position
    and ``stage`` names the dealing step ("hole", "flop", "turn", "river").
    """
    valid: bool
    hand_number: int
    reason: Optional[FailureReason] = None
    error: Optional[str] = None
    stage: Optional[str] = None
    mismatch_index: Optional[int] = None
    expected_card: Optional[str] = None
    actual_card: Optional[str] = None
    expected_deck: List[str] = field(default_factory=list)

    def to_dict(self, deck_preview: int = 20) -> Dict[str, Any]:
        result = {
            "hand_number": self.hand_number,
            "valid": self.valid,
            "reason": self.reason.value if self.reason else None,
            "error": self.error,
        }
        if not self.valid:
            result.update({
                "stage": self.stage,
                "mismatch_index": self.mismatch_index,
                "expected_card": self.expected_card,
                "actual_card": self.actual_card,
                "expected_deck": self.expected_deck[:deck_preview],
            })
        return result


@dataclass(frozen=True)
class HandRecord:
    """
    What was dealt in one hand, in notation, hole cards in seat order.

    ``actions`` carries the hand's action log for display; verification
    ignores it.
    """
    hand_number: int
    hole_cards: List[List[str]]
    community_cards: List[str]
    actions: List[Any] = field(default_factory=list)


@dataclass(frozen=True)
class GameVerification:
    commitment_valid: bool
    commitment: str
    computed_hash: str
    hands_verified: int = 0
    hands_total: int = 0
    hand_results: List[HandVerification] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def valid(self) -> bool:
        """The commitment matches and every hand replays exactly."""
        return self.commitment_valid and self.hands_verified == self.hands_total

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "commitment_valid": self.commitment_valid,
            "commitment": self.commitment,
            "computed_hash": self.computed_hash,
            "hands_verified": self.hands_verified,
            "hands_total": self.hands_total,
            "hand_results": [r.to_dict() for r in self.hand_results],
            "error": self.error,
        }


# ============= Commitment generation =============

def generate_seed() -> str:
    """32 cryptographically random bytes as a hex string."""
    return secrets.token_hex(SEED_BYTES)


def compute_commitment(seed: str) -> str:
    """SHA-256 hex digest of the seed text."""
    return hashlib.sha256(seed.encode("utf-8")).hexdigest()


def generate_commitment() -> GameCommitment:
    """
    Generate a fresh seed and its commitment.

    Publish ``commitment`` before play; reveal ``seed`` after the game.
    """
    seed = generate_seed()
    commitment = GameCommitment(seed=seed, commitment=compute_commitment(seed))
    logger.info(f"Generated game commitment {format_commitment(commitment.commitment)}")
    return commitment


def hand_seed(seed: str, hand_number: int) -> str:
    """Per-hand shuffle seed: ``"<seed>:hand:<n>"``."""
    return f"{seed}:hand:{hand_number}"


def deck_for_hand(seed: str, hand_number: int) -> List[Card]:
    """The deterministic deck for a hand, top card first."""
    return seeded_shuffle(build_deck(), hand_seed(seed, hand_number))


def is_hex_digest(value: Any) -> bool:
    """True for a 64-character hex string (either case)."""
    return isinstance(value, str) and bool(_HEX_RE.match(value))


def format_commitment(commitment: str) -> str:
    """Shortened form for display, e.g. 'a1b2c3d4...e5f6a7b8'."""
    if not commitment or len(commitment) < 16:
        return commitment
    return f"{commitment[:8]}...{commitment[-8:]}"


# ============= Verification =============

def verify_commitment(commitment: str, seed: str) -> CommitmentVerification:
    """
    Check that a revealed seed matches the published commitment.

    Inputs are format-checked before hashing; a malformed value is an
    ``INVALID_FORMAT`` failure, a well-formed seed that hashes to something
    else is a ``HASH_MISMATCH``.
    """
    if not is_hex_digest(commitment):
        return CommitmentVerification(
            valid=False,
            commitment=commitment if isinstance(commitment, str) else "",
            reason=FailureReason.INVALID_FORMAT,
            error=f"Invalid commitment hash format (expected {HEX_LENGTH}-char hex string)",
        )

    if not is_hex_digest(seed):
        return CommitmentVerification(
            valid=False,
            commitment=commitment,
            reason=FailureReason.INVALID_FORMAT,
            error=f"Invalid seed format (expected {HEX_LENGTH}-char hex string)",
        )

    computed = compute_commitment(seed)
    if computed != commitment.lower():
        logger.warning(f"Commitment mismatch for {format_commitment(commitment)}")
        return CommitmentVerification(
            valid=False,
            commitment=commitment,
            computed_hash=computed,
            reason=FailureReason.HASH_MISMATCH,
            error="Hash mismatch - commitment does not match seed",
        )

    return CommitmentVerification(valid=True, commitment=commitment, computed_hash=computed)


def verify_hand_cards(
    seed: str,
    hand_number: int,
    hole_cards: Sequence[Sequence[str]],
    community_cards: Sequence[str],
) -> HandVerification:
    """
    Replay one hand's deal and compare it card by card.

    Consumption order: two hole cards per player in seat order, then
    burn + flop, burn + turn, burn + river. Stops at the first
    divergence.

    Args:
        seed: The revealed master seed
        hand_number: Hand number used to derive the hand seed
        hole_cards: Hole cards per player, in seat order
        community_cards: Board dealt (0-5 cards)
    """
    expected_deck = [c.notation for c in deck_for_hand(seed, hand_number)]

    def failure(reason: FailureReason, error: str, **details: Any) -> HandVerification:
        return HandVerification(
            valid=False,
            hand_number=hand_number,
            reason=reason,
            error=error,
            expected_deck=expected_deck,
            **details,
        )

    format_error = _check_dealt_format(hole_cards, community_cards)
    if format_error:
        return failure(FailureReason.INVALID_FORMAT, format_error)

    position = 0
    for player_index, cards in enumerate(hole_cards):
        for card in cards:
            if expected_deck[position] != card:
                return failure(
                    FailureReason.CARD_MISMATCH,
                    f"Hole card mismatch at position {position} (player {player_index}): "
                    f"expected {expected_deck[position]}, got {card}",
                    stage="hole",
                    mismatch_index=position,
                    expected_card=expected_deck[position],
                    actual_card=card,
                )
            position += 1

    board_index = 0
    for stage, count in _STREETS:
        if board_index >= len(community_cards):
            break
        position += 1  # burn
        for _ in range(count):
            if board_index >= len(community_cards):
                break
            card = community_cards[board_index]
            if expected_deck[position] != card:
                return failure(
                    FailureReason.CARD_MISMATCH,
                    f"{stage.capitalize()} card mismatch at position {position}: "
                    f"expected {expected_deck[position]}, got {card}",
                    stage=stage,
                    mismatch_index=position,
                    expected_card=expected_deck[position],
                    actual_card=card,
                )
            position += 1
            board_index += 1

    return HandVerification(valid=True, hand_number=hand_number, expected_deck=expected_deck)


def _check_dealt_format(hole_cards: Sequence[Sequence[str]], community_cards: Sequence[str]) -> Optional[str]:
    if len(community_cards) > TOTAL_COMMUNITY_CARDS:
        return f"At most {TOTAL_COMMUNITY_CARDS} community cards, got {len(community_cards)}"
    for i, cards in enumerate(hole_cards):
        if len(cards) != HOLE_CARDS:
            return f"Player {i} has {len(cards)} hole cards, expected {HOLE_CARDS}"
    # Deck capacity: hole cards plus three burns and the board
    if len(hole_cards) * HOLE_CARDS + 3 + TOTAL_COMMUNITY_CARDS > DECK_SIZE:
        return f"Too many players for one deck: {len(hole_cards)}"
    for card in [c for cards in hole_cards for c in cards] + list(community_cards):
        try:
            Card.from_notation(card)
        except InvalidCardError as e:
            return str(e)
    return None


def verify_game(commitment: str, seed: str, hands: Iterable[HandRecord]) -> GameVerification:
    """
    Verify a finished game: the commitment, then every recorded hand.

    Hands are only replayed when the commitment matches.
    """
    check = verify_commitment(commitment, seed)
    if not check.valid:
        return GameVerification(
            commitment_valid=False,
            commitment=check.commitment,
            computed_hash=check.computed_hash,
            error=check.error,
        )

    results = []
    for record in hands:
        if not record.hole_cards:
            results.append(HandVerification(
                valid=False,
                hand_number=record.hand_number,
                reason=FailureReason.MISSING_DATA,
                error="No hole cards found",
            ))
            continue
        results.append(verify_hand_cards(seed, record.hand_number, record.hole_cards, record.community_cards))

    verified = sum(1 for r in results if r.valid)
    if verified != len(results):
        logger.warning(f"Game {format_commitment(commitment)}: {len(results) - verified} hand(s) failed verification")

    return GameVerification(
        commitment_valid=True,
        commitment=commitment,
        computed_hash=check.computed_hash,
        hands_verified=verified,
        hands_total=len(results),
        hand_results=results,
    )
