"""Routing decision: answer a question from the knowledge base (RAG) or directly (GENERAL).

Three tiers, first match wins:
  1. RAG keywords (document / knowledge-base lookups)
  2. general-conversation keywords (greetings, definitions, explanations)
  3. a forced-choice LLM call constrained to "RAG" or "GENERAL"
If the LLM call fails, questions longer than 20 characters are routed to RAG.
"""

from enum import Enum

from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.helper.HelperConfig import HelperConfig

RAG_KEYWORDS = (
    # spanish
    "document",
    "archivo",
    "información específica",
    "según el documento",
    "en la base de conocimientos",
    "qué dice sobre",
    "buscar información",
    "consultar",
    "referencias",
    "fuentes",
    "datos almacenados",
    # english
    "knowledge base",
    "according to the",
    "search for information",
    "look up",
    "references",
    "sources",
    "stored data",
)

GENERAL_KEYWORDS = (
    # spanish
    "hola",
    "cómo estás",
    "ayuda general",
    "explicar conceptos",
    "definir",
    "cómo funciona",
    "qué es",
    "ayúdame a entender",
    # english
    "hello",
    "how are you",
    "what is",
    "explain",
    "define",
    "how does",
    "help me understand",
)

LENGTH_HEURISTIC_THRESHOLD = 20

DECISION_SYSTEM_PROMPT = (
    "Decide whether the question requires searching specific documents (RAG) "
    "or can be answered with general knowledge (GENERAL). "
    "Answer with exactly one word: 'RAG' or 'GENERAL'."
)


class RoutingDecision(str, Enum):
    RAG = "RAG"
    GENERAL = "GENERAL"


class DecisionEngine:
    """Classifies questions as RAG or GENERAL. Never raises."""

    def __init__(self, helper_config: HelperConfig, llm_client: LLMClientInterface) -> None:
        self.logging = helper_config.get_logger()
        self._llm_client = llm_client

    ##########################################
    ################ CORE ####################
    ##########################################

    async def classify(self, question: str) -> RoutingDecision:
        """Classify a question.

        Args:
            question (str): The raw question text.

        Returns:
            RoutingDecision: RAG or GENERAL.
        """
        question_lower = question.lower()

        if any(keyword in question_lower for keyword in RAG_KEYWORDS):
            self.logging.debug("Decision RAG by keyword for %r", question[:80])
            return RoutingDecision.RAG

        if any(keyword in question_lower for keyword in GENERAL_KEYWORDS):
            self.logging.debug("Decision GENERAL by keyword for %r", question[:80])
            return RoutingDecision.GENERAL

        try:
            return await self._ask_model(question)
        except Exception as e:
            decision = self._length_heuristic(question_lower)
            self.logging.error("Forced-choice routing call failed: %s. Falling back to %s.", e, decision.value)
            return decision

    ##########################################
    ############### HELPERS ##################
    ##########################################

    async def _ask_model(self, question: str) -> RoutingDecision:
        reply = await self._llm_client.do_chat(
            messages=[
                {"role": "system", "content": DECISION_SYSTEM_PROMPT},
                {"role": "user", "content": f'Question: "{question}"'},
            ],
            max_tokens=10,
        )
        decision = RoutingDecision.RAG if "rag" in reply.lower() else RoutingDecision.GENERAL
        self.logging.info("Decision %s by model for %r (reply=%r)", decision.value, question[:80], reply)
        return decision

    @staticmethod
    def _length_heuristic(question_lower: str) -> RoutingDecision:
        if len(question_lower) > LENGTH_HEURISTIC_THRESHOLD:
            return RoutingDecision.RAG
        return RoutingDecision.GENERAL
