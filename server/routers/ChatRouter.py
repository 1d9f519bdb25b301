from fastapi import APIRouter, BackgroundTasks, Depends, Request

from shared.errors import ServiceError, ValidationError
from server.core.ChatService import ChatService
from server.core.HistoryService import HistoryService
from server.dependencies.services import get_chat_service, get_history_service
from server.errors import ApiError
from server.models.requests import ChatRequest
from server.models.responses import ChatResponse

router = APIRouter(tags=["chat"])


@router.post("/chat", response_model_exclude_none=True)
async def chat(
    request: Request,
    background_tasks: BackgroundTasks,
    body: ChatRequest | None = None,
    chat_service: ChatService = Depends(get_chat_service),
    history_service: HistoryService = Depends(get_history_service),
) -> ChatResponse:
    """Answer a question, routing between RAG and a direct completion.

    The interaction is saved as a background task after the response is
    built; a failed save is logged and never reaches the caller.

    Args:
        request (Request): FastAPI request.
        background_tasks (BackgroundTasks): Queue for the history save.
        body (ChatRequest | None): question, optional topK and forceRAG.

    Returns:
        ChatResponse: The answer with sources, routing decision and timestamp.

    Raises:
        ValidationError: 400 if the question is missing or empty.
        ApiError: 500 if the chosen pipeline fails.
    """
    if body is None or not body.question:
        raise ValidationError("Question is required")

    try:
        outcome = await chat_service.chat(body.question, top_k=body.top_k, force_rag=body.force_rag)
    except ServiceError as e:
        request.app.state.logging.error("Chat endpoint error: %s", e)
        raise ApiError(500, "Failed to process chat request", str(e))

    background_tasks.add_task(history_service.record_safely, outcome.record)
    return outcome.response
