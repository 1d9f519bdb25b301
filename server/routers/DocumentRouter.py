from fastapi import APIRouter, Depends, Request

from shared.errors import EmbeddingError, ServiceError, ValidationError
from server.core.DocumentService import DocumentService
from server.dependencies.services import get_document_service
from server.errors import ApiError
from server.models.requests import InsertRequest, SearchRequest
from server.models.responses import InsertResponse, SearchResponse

router = APIRouter(tags=["documents"])


@router.post("/insert")
async def insert_documents(
    request: Request,
    body: InsertRequest | None = None,
    document_service: DocumentService = Depends(get_document_service),
) -> InsertResponse:
    """Embed documents and upsert them into the knowledge base.

    Args:
        request (Request): FastAPI request.
        body (InsertRequest | None): {"documents": [string | {content|text, title?, source?}]}

    Returns:
        InsertResponse: {success, inserted, message}
    """
    if body is None or not isinstance(body.documents, list):
        raise ValidationError("Documents array is required")

    try:
        inserted = await document_service.insert(body.documents)
    except EmbeddingError:
        raise ApiError(500, "No embedding data received")
    except ServiceError as e:
        request.app.state.logging.error("Insert endpoint error: %s", e)
        raise ApiError(500, "Failed to insert documents", str(e))

    return InsertResponse(
        success=True,
        inserted=inserted,
        message=f"Successfully inserted {inserted} documents",
    )


@router.post("/search", response_model_exclude_none=True)
async def search_documents(
    request: Request,
    body: SearchRequest | None = None,
    document_service: DocumentService = Depends(get_document_service),
) -> SearchResponse:
    """Return the documents most similar to a query.

    Args:
        request (Request): FastAPI request.
        body (SearchRequest | None): {"query": str, "topK": int = 5}

    Returns:
        SearchResponse: {query, matches: [{id, score, title, content, source, timestamp}]}
    """
    if body is None or not body.query:
        raise ValidationError("Query is required")

    try:
        result = await document_service.search(body.query, top_k=body.top_k)
    except EmbeddingError:
        raise ApiError(500, "No query vector data received")
    except ServiceError as e:
        request.app.state.logging.error("Search endpoint error: %s", e)
        raise ApiError(500, "Search failed", str(e))

    return result
