"""FastAPI dependencies resolving the services wired up in the lifespan."""

from fastapi import Request

from server.core.ChatService import ChatService
from server.core.DecisionEngine import DecisionEngine
from server.core.DocumentService import DocumentService
from server.core.HistoryService import HistoryService


def get_chat_service(request: Request) -> ChatService:
    return request.app.state.chat_service


def get_decision_engine(request: Request) -> DecisionEngine:
    return request.app.state.decision_engine


def get_document_service(request: Request) -> DocumentService:
    return request.app.state.document_service


def get_history_service(request: Request) -> HistoryService:
    return request.app.state.history_service
