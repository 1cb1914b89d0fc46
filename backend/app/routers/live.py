"""WebSocket endpoints for search-as-you-type and live candidate comparison."""

import asyncio
import json
from typing import Set

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from pydantic import ValidationError as PayloadError

from ..config import DEFAULT_ELECTION_YEAR, SEARCH_DEBOUNCE_SECONDS
from ..dependencies import get_lookup, get_orchestrator
from ..exceptions import ElectionDataError, status_code_for
from ..logging import get_logger
from ..models.schemas import ComparisonRequest, LiveSearchMessage
from ..services.debounce import Debouncer
from ..services.lookup import CandidateLookup
from ..services.orchestrator import ComparisonOrchestrator, ComparisonSession


logger = get_logger(__name__)

router = APIRouter(tags=["live"])


@router.websocket("/ws/candidates/search")
async def live_candidate_search(websocket: WebSocket, lookup: CandidateLookup = Depends(get_lookup)):
    """Search once the user stops typing.

    Each message ``{"term", "year", "office"}`` re-arms the debouncer; only
    the last term of a burst is searched and answered with
    ``{"term", "data"}``.
    """
    await websocket.accept()
    debouncer = Debouncer(SEARCH_DEBOUNCE_SECONDS)

    async def run_search(message: LiveSearchMessage) -> None:
        candidates = await lookup.search(
            message.term,
            message.year or DEFAULT_ELECTION_YEAR,
            office_code=message.office,
        )
        await websocket.send_json({
            "term": message.term,
            "data": [c.model_dump(mode="json") for c in candidates],
        })

    try:
        while True:
            text = await websocket.receive_text()
            try:
                message = LiveSearchMessage.model_validate(json.loads(text))
            except (ValueError, PayloadError):
                await websocket.send_json({"error": "Invalid search message", "status": 400})
                continue
            debouncer.call(run_search, message)
    except WebSocketDisconnect:
        logger.debug("search_socket_closed")
    finally:
        debouncer.cancel()


@router.websocket("/ws/comparative")
async def live_comparison(
    websocket: WebSocket,
    orchestrator: ComparisonOrchestrator = Depends(get_orchestrator),
):
    """Compare candidates as the selection changes.

    Every message ``{"candidate1Id", "candidate2Id", "year"}`` starts a new
    comparison; results of requests superseded by a later message are never
    sent.
    """
    await websocket.accept()
    session = ComparisonSession(orchestrator)
    pending: Set[asyncio.Task] = set()

    async def run_comparison(request: ComparisonRequest) -> None:
        try:
            outcome = await session.compare(request.candidate_a_id, request.candidate_b_id, request.year)
        except ElectionDataError as e:
            await websocket.send_json({"error": str(e), "status": status_code_for(e)})
            return
        if outcome is not None:
            await websocket.send_json(outcome.model_dump(mode="json"))

    try:
        while True:
            text = await websocket.receive_text()
            try:
                request = ComparisonRequest.model_validate(json.loads(text))
            except (ValueError, PayloadError):
                await websocket.send_json({"error": "Invalid comparison message", "status": 400})
                continue
            task = asyncio.create_task(run_comparison(request))
            pending.add(task)
            task.add_done_callback(pending.discard)
    except WebSocketDisconnect:
        logger.debug("comparison_socket_closed", pending=len(pending))
    finally:
        for task in list(pending):
            task.cancel()
