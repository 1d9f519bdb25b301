from fastapi import APIRouter, Depends, Request

from shared.errors import ServiceError, ValidationError
from shared.helper.time_helper import iso_now
from server.core.DecisionEngine import DecisionEngine, RoutingDecision
from server.core.HistoryService import HistoryService
from server.dependencies.services import get_decision_engine, get_history_service
from server.errors import ApiError
from server.models.history import HistoryResponse, HistoryStats
from server.models.requests import AgentTestRequest
from server.models.responses import AgentDecisionResponse

router = APIRouter(prefix="/agent", tags=["agent"])

REASONING = {
    RoutingDecision.RAG: "This question appears to require specific document search",
    RoutingDecision.GENERAL: "This question can be answered with general knowledge",
}


@router.post("/test")
async def test_decision(
    body: AgentTestRequest | None = None,
    decision_engine: DecisionEngine = Depends(get_decision_engine),
) -> AgentDecisionResponse:
    """Run only the routing decision for a question and expose the result."""
    if body is None or not body.question:
        raise ValidationError("Question is required")

    decision = await decision_engine.classify(body.question)
    return AgentDecisionResponse(
        question=body.question,
        decision=decision.value,
        reasoning=REASONING[decision],
    )


@router.get("/status")
async def agent_status() -> dict:
    return {
        "status": "Agent is running",
        "capabilities": ["RAG decision-making", "Document search", "General conversation"],
        "timestamp": iso_now(),
    }


@router.get("/history")
async def agent_history(
    request: Request,
    history_service: HistoryService = Depends(get_history_service),
) -> HistoryResponse:
    """Return the stored interactions of the shared session, oldest first."""
    try:
        records = await history_service.history()
    except ServiceError as e:
        request.app.state.logging.error("History endpoint error: %s", e)
        raise ApiError(500, "Failed to get agent history", str(e))
    return HistoryResponse(history=records)


@router.get("/stats")
async def agent_stats(
    request: Request,
    history_service: HistoryService = Depends(get_history_service),
) -> HistoryStats:
    """Return interaction counts and the share answered with RAG."""
    try:
        stats = await history_service.stats()
    except ServiceError as e:
        request.app.state.logging.error("Stats endpoint error: %s", e)
        raise ApiError(500, "Failed to get agent stats", str(e))
    return stats
