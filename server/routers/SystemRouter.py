"""Health, favicon and the catch-all discovery document.

Include this router last: its catch-all route answers every path and method
not matched by another router.
"""

from fastapi import APIRouter, Response

from shared.helper.time_helper import iso_now

router = APIRouter(tags=["system"])

ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD"]

DISCOVERY = {
    "message": "RAG API Server with Intelligent Agent",
    "endpoints": {
        "POST /chat": "Ask questions with intelligent RAG/General routing",
        "POST /insert": "Insert documents into knowledge base",
        "POST /search": "Search documents by similarity",
        "POST /agent/test": "Test agent decision making",
        "GET /agent/status": "Get agent status",
        "GET /agent/history": "Get conversation history",
        "GET /agent/stats": "Get agent usage statistics",
        "GET /health": "Health check",
    },
    "features": [
        "Intelligent routing between RAG and general responses",
        "Document embedding and search",
        "AI-powered decision making",
        "Vector similarity search",
        "Persistent conversation history",
        "Usage analytics and statistics",
    ],
}


@router.get("/health")
async def health() -> dict:
    return {
        "status": "healthy",
        "services": ["RAG", "Agent", "Vector index", "Embeddings", "LLM"],
        "timestamp": iso_now(),
    }


@router.api_route("/favicon{rest:path}", methods=ALL_METHODS, include_in_schema=False)
async def favicon(rest: str) -> Response:
    return Response(status_code=404)


@router.api_route("/{path:path}", methods=ALL_METHODS, include_in_schema=False)
async def discovery(path: str) -> dict:
    return DISCOVERY
