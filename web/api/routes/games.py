"""Game API routes."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import APIRouter, HTTPException, WebSocket, WebSocketDisconnect
from pydantic import BaseModel, Field

from leekha_engine.selection import SelectionError
from strategies.factory import StrategyFactory
from web.api.session_manager import GameSession, session_manager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["games"])


# Request/Response models
class CreateGameRequest(BaseModel):
    """Request to create a new game against three bots."""

    strategy: str | None = Field(None, description="Strategy for the three bot seats")
    strategy_params: dict[str, Any] = Field(
        default_factory=dict, description="Heuristic weight overrides or a random seed"
    )
    seed: int | None = Field(None, description="Random seed for reproducibility")
    score_limit: int | None = Field(None, description="Score that ends the game (default 101)")
    player_name: str = Field("You", description="Display name of the human seat")


class PlayRequest(BaseModel):
    """Request to play one card."""

    card: str = Field(..., description="Card id, e.g. '10H' or 'QS'")


class PassRequest(BaseModel):
    """Request to pass three cards to the seat on the right."""

    cards: list[str] = Field(..., description="Three card ids")


class StrategyInfo(BaseModel):
    """Information about an available strategy."""

    name: str
    description: str


def _get_session(game_id: str) -> GameSession:
    session = session_manager.get_session(game_id)
    if not session:
        raise HTTPException(status_code=404, detail="Game not found")
    return session


async def _state_response(session: GameSession) -> dict:
    await session.wait_until_idle()
    return {"game_id": session.id, "state": session.to_client_state()}


# REST Endpoints


@router.get("/strategies", response_model=list[StrategyInfo])
async def list_strategies():
    """List available bot strategies."""
    strategies = StrategyFactory().list_strategies()
    return [StrategyInfo(name=name, description=desc) for name, desc in strategies.items()]


@router.post("/games", response_model=dict)
async def create_game(request: CreateGameRequest):
    """Create a game session and run it until the human must act."""
    try:
        session = await session_manager.create_session(
            strategy_name=request.strategy,
            strategy_params=request.strategy_params,
            seed=request.seed,
            score_limit=request.score_limit,
            player_name=request.player_name,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return await _state_response(session)


@router.get("/games", response_model=list[dict])
async def list_games():
    """List all active game sessions."""
    return session_manager.list_sessions()


@router.get("/games/{game_id}")
async def get_game(game_id: str, history: bool = False):
    """Get the table as the human seat sees it."""
    session = _get_session(game_id)
    response = {"game_id": session.id, "state": session.to_client_state()}
    if history:
        response["history"] = session.history
    return response


@router.post("/games/{game_id}/play")
async def play_card(game_id: str, request: PlayRequest):
    """Play a card for the human seat."""
    session = _get_session(game_id)
    try:
        session.play(request.card)
    except (SelectionError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    return await _state_response(session)


@router.post("/games/{game_id}/pass")
async def pass_cards(game_id: str, request: PassRequest):
    """Submit the human seat's three pass cards."""
    session = _get_session(game_id)
    try:
        session.pass_cards(request.cards)
    except (SelectionError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    return await _state_response(session)


@router.get("/games/{game_id}/debug")
async def debug_game(game_id: str):
    """Full diagnostic snapshot, including every seat's hand."""
    return _get_session(game_id).game.debug_snapshot()


@router.delete("/games/{game_id}")
async def delete_game(game_id: str):
    """Delete a game session, cancelling any pending selection."""
    if await session_manager.delete_session(game_id):
        return {"deleted": True}
    raise HTTPException(status_code=404, detail="Game not found")


# WebSocket endpoint for real-time game play


@router.websocket("/ws/game/{game_id}")
async def game_websocket(websocket: WebSocket, game_id: str):
    """WebSocket endpoint for real-time game updates.

    Protocol:
    Server -> Client messages:
        - game_state: Full table state
        - <event>: Every game event, as {"type", "data", "timestamp"}
        - error: Error message

    Client -> Server messages:
        - play: {card: str} - Play a card
        - pass: {cards: [str, str, str]} - Pass three cards
        - get_state: Request current state
    """
    session = session_manager.get_session(game_id)
    if not session:
        logger.warning(f"WebSocket: Game not found: {game_id}")
        await websocket.close(code=4004, reason="Game not found")
        return

    await websocket.accept()
    event_queue: asyncio.Queue = asyncio.Queue()
    session.add_listener(event_queue.put_nowait)

    async def forward_events():
        while True:
            event = await event_queue.get()
            await websocket.send_json(event)

    event_task = asyncio.create_task(forward_events())

    try:
        await websocket.send_json({"type": "game_state", "state": session.to_client_state()})

        while True:
            data = await websocket.receive_json()
            msg_type = data.get("type", "")

            try:
                if msg_type == "play":
                    session.play(data.get("card", ""))
                elif msg_type == "pass":
                    session.pass_cards(list(data.get("cards", [])))
                elif msg_type != "get_state":
                    await websocket.send_json({
                        "type": "error",
                        "message": f"Unknown message type: {msg_type}",
                    })
                    continue
            except (SelectionError, ValueError) as e:
                await websocket.send_json({"type": "error", "message": str(e)})
                continue

            await session.wait_until_idle()
            await websocket.send_json({"type": "game_state", "state": session.to_client_state()})

    except WebSocketDisconnect:
        logger.info(f"WebSocket disconnected from game {game_id}")
    finally:
        session.remove_listener(event_queue.put_nowait)
        event_task.cancel()
