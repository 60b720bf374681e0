"""
Pydantic schemas for API request/response validation.
"""

from typing import List, Optional, Dict, Any
from pydantic import BaseModel, Field

from fairpoker.core.rules import (
    DEFAULT_BIG_BLIND,
    DEFAULT_MAX_HANDS,
    DEFAULT_SMALL_BLIND,
    DEFAULT_STARTING_CHIPS,
    MAX_PLAYERS,
    MIN_PLAYERS,
)


# ============= Request Schemas =============

class SeatSchema(BaseModel):
    """A player taking a seat."""
    id: str = Field(..., min_length=1)
    name: Optional[str] = None
    chips: Optional[int] = Field(default=None, gt=0, description="Defaults to starting_chips")


class CreateGameRequest(BaseModel):
    """Request to create a new verifiable game."""
    players: List[SeatSchema] = Field(..., min_length=MIN_PLAYERS, max_length=MAX_PLAYERS)
    small_blind: int = Field(gt=0, default=DEFAULT_SMALL_BLIND)
    big_blind: int = Field(gt=0, default=DEFAULT_BIG_BLIND)
    starting_chips: int = Field(gt=0, default=DEFAULT_STARTING_CHIPS)
    max_hands: int = Field(gt=0, default=DEFAULT_MAX_HANDS)


class ActionRequest(BaseModel):
    """Request to take a game action."""
    type: str = Field(..., description="Action type: fold, check, call, raise, all_in")
    amount: Optional[int] = Field(default=None, description="New total bet for raise")


class VerifyCommitmentRequest(BaseModel):
    """Revealed seed to check against a published commitment."""
    commitment: str
    seed: str


class VerifyHandRequest(BaseModel):
    """Cards dealt in one hand, to replay against a revealed seed."""
    seed: str
    hand_number: int = Field(ge=1)
    hole_cards: List[List[str]] = Field(..., description="Hole cards per player, in seat order")
    community_cards: List[str] = []


class EvaluateRequest(BaseModel):
    """Cards to evaluate."""
    hole_cards: List[str]
    community_cards: List[str] = []


# ============= Response Schemas =============

class CreateGameResponse(BaseModel):
    """A freshly created game; the commitment is safe to publish."""
    game_id: str
    commitment: str
    players: List[str]


class CommitmentVerificationSchema(BaseModel):
    valid: bool
    commitment: str
    computed_hash: str
    reason: Optional[str] = None
    error: Optional[str] = None


class HandVerificationSchema(BaseModel):
    hand_number: int
    valid: bool
    reason: Optional[str] = None
    error: Optional[str] = None
    stage: Optional[str] = None
    mismatch_index: Optional[int] = None
    expected_card: Optional[str] = None
    actual_card: Optional[str] = None
    expected_deck: Optional[List[str]] = None


class GameVerificationSchema(BaseModel):
    valid: bool
    commitment_valid: bool
    commitment: str
    computed_hash: str
    hands_verified: int
    hands_total: int
    hand_results: List[HandVerificationSchema]
    error: Optional[str] = None


class EvaluatedHandSchema(BaseModel):
    """Best five-card hand."""
    rank: str
    rank_value: int
    cards: List[str]
    description: str
    strength: int


class ErrorSchema(BaseModel):
    """Error response."""
    detail: str


class GameSummarySchema(BaseModel):
    game_id: str
    commitment: str
    status: str
    end_reason: Optional[str] = None
    hand_number: int
    max_hands: int
    players: List[Dict[str, Any]]
    results: List[Dict[str, Any]]
    seed: Optional[str] = None


class PlayerOddsSchema(BaseModel):
    """Win share and decimal odds of one player still in the hand."""
    probability: float
    odds: float


class OddsSchema(BaseModel):
    """Spectator odds for the current hand."""
    game_id: str
    hand_number: int
    round: str
    players: Dict[str, PlayerOddsSchema]
