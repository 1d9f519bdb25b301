"""Chat service: routes a question and answers it with RAG or a direct completion.

RAG:     embed question -> vector query -> context from matches above the
         similarity threshold -> grounded completion.
General: single completion with a helpful-assistant instruction.
"""

from dataclasses import dataclass

from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.clients.vector.VectorClientInterface import VectorClientInterface
from shared.clients.vector.models.VectorRecord import VectorMatch
from shared.errors import GeneralProcessingError, RAGProcessingError
from shared.helper.HelperConfig import HelperConfig
from shared.helper.time_helper import iso_now
from server.core.DecisionEngine import DecisionEngine, RoutingDecision
from server.models.history import InteractionRecord
from server.models.responses import ChatResponse, ChatResult, SourceItem

SIMILARITY_THRESHOLD = 0.7  # strict: a score of exactly 0.7 is excluded
PREVIEW_LENGTH = 200
MAX_ANSWER_TOKENS = 300

NO_CONTEXT_ANSWER = "I could not find relevant information in the knowledge base."
NO_ANSWER = "I could not generate an answer."

RAG_SYSTEM_PROMPT = (
    "You are a helpful assistant. Answer only from the provided context. "
    "If the context does not contain enough information to answer the question, say so explicitly."
)
GENERAL_SYSTEM_PROMPT = "You are a helpful and creative assistant. Answer clearly and in detail."


def _build_context(matches: list[VectorMatch]) -> str:
    """Join the content of matches scoring above the threshold, in rank order."""
    contents = [
        match.metadata.get("content")
        for match in matches
        if match.score > SIMILARITY_THRESHOLD
    ]
    return "\n\n".join(content for content in contents if isinstance(content, str) and content)


def _build_prompt(context: str, question: str) -> str:
    return (
        f"Context information:\n{context}\n\n"
        f"Question: {question}\n\n"
        "Please provide a helpful and accurate answer based on the context information above. "
        "If the context doesn't contain enough information to answer the question, please say so.\n\n"
        "Answer:"
    )


def _build_preview(content) -> str | None:
    if not isinstance(content, str):
        return None
    if len(content) > PREVIEW_LENGTH:
        return content[:PREVIEW_LENGTH] + "..."
    return content


def _build_sources(matches: list[VectorMatch]) -> list[SourceItem]:
    """Report every returned match, including those below the threshold."""
    return [
        SourceItem(
            id=match.id,
            score=match.score,
            title=match.metadata.get("title"),
            content=_build_preview(match.metadata.get("content")),
        )
        for match in matches
    ]


@dataclass
class ChatOutcome:
    """The response for the caller and the record to persist separately."""

    response: ChatResponse
    record: InteractionRecord


class ChatService:
    """Orchestrates routing and both answering pipelines."""

    def __init__(
        self,
        helper_config: HelperConfig,
        decision_engine: DecisionEngine,
        embed_client: EmbedClientInterface,
        vector_client: VectorClientInterface,
        llm_client: LLMClientInterface,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._decision_engine = decision_engine
        self._embed_client = embed_client
        self._vector_client = vector_client
        self._llm_client = llm_client

    ##########################################
    ################ CORE ####################
    ##########################################

    async def chat(self, question: str, top_k: int = 3, force_rag: bool = False) -> ChatOutcome:
        """Route a question and answer it.

        Args:
            question (str): The caller's question.
            top_k (int): Number of vector matches to retrieve for RAG.
            force_rag (bool): Skip classification and always use RAG.

        Returns:
            ChatOutcome: The response plus the interaction record to save.

        Raises:
            RAGProcessingError | GeneralProcessingError: If the chosen pipeline fails.
        """
        decision = RoutingDecision.RAG if force_rag else await self._decision_engine.classify(question)
        self.logging.info("Routing question %r -> %s (forced=%s)", question[:80], decision.value, force_rag)

        if decision is RoutingDecision.RAG:
            result = await self.answer_with_rag(question, top_k)
        else:
            result = await self.answer_general(question)

        timestamp = iso_now()
        response = ChatResponse(
            **result.model_dump(),
            agent_decision=decision.value,
            timestamp=timestamp,
        )
        record = InteractionRecord(
            question=result.question,
            answer=result.answer,
            used_rag=result.used_rag,
            timestamp=timestamp,
        )
        return ChatOutcome(response=response, record=record)

    async def answer_with_rag(self, question: str, top_k: int = 3) -> ChatResult:
        """Answer from the knowledge base.

        The completion provider is not called when no match clears the
        similarity threshold; a fixed answer is returned instead.

        Raises:
            RAGProcessingError: If embedding, vector query or generation fails.
        """
        try:
            vectors = await self._embed_client.do_embed([question])
            matches = await self._vector_client.do_query(vectors[0], top_k)

            context = _build_context(matches)
            self.logging.debug(
                "RAG retrieved %d match(es), %d above threshold",
                len(matches),
                sum(1 for match in matches if match.score > SIMILARITY_THRESHOLD),
            )

            answer = NO_CONTEXT_ANSWER
            if context:
                answer = await self._llm_client.do_chat(
                    messages=[
                        {"role": "system", "content": RAG_SYSTEM_PROMPT},
                        {"role": "user", "content": _build_prompt(context, question)},
                    ],
                    max_tokens=MAX_ANSWER_TOKENS,
                ) or NO_ANSWER
            sources = _build_sources(matches)
        except Exception as e:
            self.logging.error("Error in RAG pipeline: %s", e)
            raise RAGProcessingError(f"RAG processing failed: {e}") from e

        return ChatResult(
            question=question,
            answer=answer,
            used_rag=True,
            sources=sources,
            context_used=bool(context),
        )

    async def answer_general(self, question: str) -> ChatResult:
        """Answer with a single completion call.

        Raises:
            GeneralProcessingError: If the completion call fails.
        """
        try:
            answer = await self._llm_client.do_chat(
                messages=[
                    {"role": "system", "content": GENERAL_SYSTEM_PROMPT},
                    {"role": "user", "content": question},
                ],
                max_tokens=MAX_ANSWER_TOKENS,
            )
        except Exception as e:
            self.logging.error("Error in general pipeline: %s", e)
            raise GeneralProcessingError(f"General processing failed: {e}") from e

        return ChatResult(
            question=question,
            answer=answer or NO_ANSWER,
            used_rag=False,
            sources=[],
            context_used=False,
        )
