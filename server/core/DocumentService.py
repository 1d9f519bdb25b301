"""Document service: knowledge base ingestion and raw similarity search.

Insert: one batch embedding call for all documents, one upsert with a vector
per document. Ids are "doc-<epochMillis>-<index>"; they are unique within a
call but may collide across concurrent calls in the same millisecond.
"""

import json
from typing import Any

from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.clients.vector.VectorClientInterface import VectorClientInterface
from shared.clients.vector.models.VectorRecord import VectorRecord
from shared.errors import UpstreamServiceError
from shared.helper.HelperConfig import HelperConfig
from shared.helper.time_helper import epoch_millis, iso_now
from server.models.responses import SearchMatch, SearchResponse

DEFAULT_SOURCE = "manual_insert"


def _document_content(doc: dict) -> str | None:
    """The first non-empty string among content and text, if any."""
    for key in ("content", "text"):
        value = doc.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def _document_text(doc: Any) -> str:
    """Text sent to the embedding provider for one document."""
    if isinstance(doc, str):
        return doc
    if isinstance(doc, dict):
        return _document_content(doc) or json.dumps(doc, ensure_ascii=False)
    return str(doc)


def _document_metadata(doc: Any, index: int, timestamp: str) -> dict[str, Any]:
    """Metadata stored with a document vector. Keys without a value are dropped."""
    if isinstance(doc, dict):
        metadata = {
            "content": _document_content(doc),
            "title": doc.get("title"),
            "source": doc.get("source"),
        }
    else:
        metadata = {
            "content": doc if isinstance(doc, str) else None,
            "title": f"Document {index + 1}",
            "source": DEFAULT_SOURCE,
        }
    metadata["timestamp"] = timestamp
    metadata["type"] = "document"
    return {key: value for key, value in metadata.items() if value is not None}


class DocumentService:
    """Orchestrates embedding and vector index access for documents."""

    def __init__(
        self,
        helper_config: HelperConfig,
        embed_client: EmbedClientInterface,
        vector_client: VectorClientInterface,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._embed_client = embed_client
        self._vector_client = vector_client

    ##########################################
    ################ CORE ####################
    ##########################################

    async def insert(self, documents: list[Any]) -> int:
        """Embed and upsert documents into the knowledge base.

        Args:
            documents (list[Any]): Strings or dicts with content/text, title, source.

        Returns:
            int: Number of vectors upserted.

        Raises:
            EmbeddingError: If the embedding provider returned no vectors.
            UpstreamServiceError: If embedding or upsert fails.
        """
        if not documents:
            self.logging.info("Insert called with an empty document list, nothing to do.")
            return 0

        vectors = await self._embed_client.do_embed([_document_text(doc) for doc in documents])
        if len(vectors) != len(documents):
            raise UpstreamServiceError(
                f"Embedding provider returned {len(vectors)} vector(s) for {len(documents)} document(s)"
            )

        now_ms = epoch_millis()
        timestamp = iso_now()
        records = [
            VectorRecord(
                id=f"doc-{now_ms}-{index}",
                values=vector,
                metadata=_document_metadata(doc, index, timestamp),
            )
            for index, (doc, vector) in enumerate(zip(documents, vectors))
        ]
        inserted = await self._vector_client.do_upsert(records)
        self.logging.info("Inserted %d document(s) into the knowledge base.", inserted)
        return inserted

    async def search(self, query: str, top_k: int = 5) -> SearchResponse:
        """Embed a query and return the nearest documents with their metadata.

        Raises:
            EmbeddingError: If the embedding provider returned no vectors.
            UpstreamServiceError: If embedding or the vector query fails.
        """
        self.logging.info("Search query=%r top_k=%d", query[:80], top_k)
        vectors = await self._embed_client.do_embed([query])
        matches = await self._vector_client.do_query(vectors[0], top_k)

        return SearchResponse(
            query=query,
            matches=[
                SearchMatch(
                    id=match.id,
                    score=match.score,
                    title=match.metadata.get("title"),
                    content=match.metadata.get("content"),
                    source=match.metadata.get("source"),
                    timestamp=match.metadata.get("timestamp"),
                )
                for match in matches
            ],
        )
