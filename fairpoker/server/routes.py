"""
HTTP API Routes for FairPoker.

Games live in memory in a GameManager attached to the application. The
routes translate JSON to engine calls and engine errors to HTTP errors:

- IllegalStateError -> 409 (wrong moment, e.g. verify before reveal)
- other PokerError / ValueError -> 400
- unknown game -> 404
"""

from typing import Dict, Any, List, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from fairpoker.core.errors import IllegalStateError, PokerError
from fairpoker.core.game import calculate_odds, probability_to_odds
from fairpoker.core.hand import evaluate_hand, hand_strength_percent
from fairpoker.core.player import Seat
from fairpoker.core.rules import GameConfig, parse_action
from fairpoker.core.session import GameSession
from fairpoker.core.verifiable import verify_commitment, verify_hand_cards
from fairpoker.server.schemas import (
    ActionRequest,
    CommitmentVerificationSchema,
    CreateGameRequest,
    CreateGameResponse,
    EvaluateRequest,
    EvaluatedHandSchema,
    GameSummarySchema,
    GameVerificationSchema,
    HandVerificationSchema,
    OddsSchema,
    VerifyCommitmentRequest,
    VerifyHandRequest,
)


logger = logging.getLogger(__name__)

router = APIRouter()


class GameManager:
    """
    Keeps every running game in memory.

    Usage:
        manager = GameManager()
        session = manager.create_game(["alice", "bob"], GameConfig())
        manager.get_game(session.game_id)
    """

    def __init__(self):
        self.games: Dict[str, GameSession] = {}

    def create_game(self, seats: List[Seat], config: GameConfig) -> GameSession:
        session = GameSession(seats, config=config)
        self.games[session.game_id] = session
        logger.info(f"Registered game {session.game_id} ({len(self.games)} games in memory)")
        return session

    def get_game(self, game_id: str) -> Optional[GameSession]:
        return self.games.get(game_id)


def get_manager(request: Request) -> GameManager:
    return request.app.state.games


def get_session(game_id: str, manager: GameManager = Depends(get_manager)) -> GameSession:
    session = manager.get_game(game_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Game {game_id} not found")
    return session


def _http_error(e: Exception) -> HTTPException:
    if isinstance(e, IllegalStateError):
        return HTTPException(status_code=409, detail=str(e))
    return HTTPException(status_code=400, detail=str(e))


# ============= Games =============

@router.post("/games", response_model=CreateGameResponse)
async def create_game(
    req: CreateGameRequest,
    manager: GameManager = Depends(get_manager),
) -> Dict[str, Any]:
    """
    Create a game and publish its commitment.

    The seed behind the commitment stays secret until the game is finished.
    """
    try:
        config = GameConfig(
            small_blind=req.small_blind,
            big_blind=req.big_blind,
            starting_chips=req.starting_chips,
            max_hands=req.max_hands,
        )
        seats = [Seat(player_id=p.id, name=p.name, chips=p.chips) for p in req.players]
        session = manager.create_game(seats, config)
    except (PokerError, ValueError) as e:
        raise _http_error(e)

    return {
        "game_id": session.game_id,
        "commitment": session.commitment,
        "players": [s.player_id for s in session.seats],
    }


@router.get("/games/{game_id}", response_model=GameSummarySchema)
async def get_game(session: GameSession = Depends(get_session)) -> Dict[str, Any]:
    """Game summary: stacks, progress and, after reveal, the seed."""
    return session.to_dict()


@router.post("/games/{game_id}/hands")
async def start_hand(session: GameSession = Depends(get_session)) -> Dict[str, Any]:
    """Deal the next hand."""
    try:
        hand = session.start_hand()
    except (PokerError, ValueError) as e:
        raise _http_error(e)
    return session.hand_snapshot(reveal=hand.is_complete)


@router.get("/games/{game_id}/hand")
async def get_hand(session: GameSession = Depends(get_session)) -> Dict[str, Any]:
    """Current hand snapshot with the legal actions of the player to act."""
    if session.hand is None:
        raise HTTPException(status_code=409, detail=f"No hand has been dealt in game {session.game_id}")
    return session.hand_snapshot(reveal=session.hand.is_complete)


@router.get("/games/{game_id}/odds", response_model=OddsSchema)
async def get_odds(session: GameSession = Depends(get_session)) -> Dict[str, Any]:
    """
    Spectator odds for the current hand.

    Postflop shares depend on hidden hole cards, so this is meant for
    observers rather than seated players.
    """
    hand = session.hand
    if hand is None:
        raise HTTPException(status_code=409, detail=f"No hand has been dealt in game {session.game_id}")
    shares = calculate_odds(hand)
    return {
        "game_id": session.game_id,
        "hand_number": hand.hand_number,
        "round": hand.street.value,
        "players": {
            pid: {"probability": float(share), "odds": probability_to_odds(share)}
            for pid, share in shares.items()
        },
    }


@router.post("/games/{game_id}/actions")
async def take_action(req: ActionRequest, session: GameSession = Depends(get_session)) -> Dict[str, Any]:
    """
    Apply an action for the player to act.

    Returns the new snapshot; hole cards are shown once the hand is over.
    """
    try:
        action = parse_action(req.type, req.amount)
        hand = session.apply_action(action)
    except (PokerError, ValueError) as e:
        raise _http_error(e)
    return session.hand_snapshot(reveal=hand.is_complete)


@router.post("/games/{game_id}/finish")
async def finish_game(session: GameSession = Depends(get_session)) -> Dict[str, Any]:
    """End the game and reveal the seed."""
    try:
        seed = session.finish()
    except PokerError as e:
        raise _http_error(e)
    return {
        "game_id": session.game_id,
        "commitment": session.commitment,
        "seed": seed,
        "hands": session.hand_number,
    }


@router.get("/games/{game_id}/verify", response_model=GameVerificationSchema)
async def verify_game(session: GameSession = Depends(get_session)) -> Dict[str, Any]:
    """Verify every hand of a finished game."""
    try:
        result = session.verify()
    except PokerError as e:
        raise _http_error(e)
    return result.to_dict()


# ============= Stateless tools =============

@router.post("/verify/commitment", response_model=CommitmentVerificationSchema)
async def check_commitment(req: VerifyCommitmentRequest) -> Dict[str, Any]:
    """Check a revealed seed against a published commitment."""
    return verify_commitment(req.commitment, req.seed).to_dict()


@router.post("/verify/hand", response_model=HandVerificationSchema)
async def check_hand(req: VerifyHandRequest) -> Dict[str, Any]:
    """Replay one hand's deal from a revealed seed."""
    return verify_hand_cards(req.seed, req.hand_number, req.hole_cards, req.community_cards).to_dict()


@router.post("/evaluate", response_model=EvaluatedHandSchema)
async def evaluate(req: EvaluateRequest) -> Dict[str, Any]:
    """Evaluate the best hand from hole and community cards."""
    try:
        hand = evaluate_hand(req.hole_cards, req.community_cards)
    except (PokerError, ValueError) as e:
        raise _http_error(e)
    return {**hand.to_dict(), "strength": hand_strength_percent(hand)}
