from abc import abstractmethod

from shared.clients.ClientInterface import ClientInterface
from shared.errors import EmbeddingError
from shared.helper.HelperConfig import HelperConfig


class EmbedClientInterface(ClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

        # model config, engines may supply their own default model
        self.embed_model = helper_config.get_string_val(
            f"{self.get_client_type().upper()}_MODEL", default=self._get_default_model()
        )

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        return "embed"

    def _get_default_model(self) -> str | None:
        """
        Returns the model used when EMBED_MODEL is not set. None makes EMBED_MODEL required.
        """
        return None

    ################ ENDPOINTS ##################
    @abstractmethod
    def get_endpoint_embedding(self) -> str:
        """
        Returns the endpoint path for embedding requests.

        Returns:
            str: The endpoint path for embedding requests (e.g. "/api/embed")
        """
        pass

    ################ PAYLOAD BUILDER ##################
    @abstractmethod
    def get_embed_payload(self, texts: list[str]) -> dict:
        """Build the backend-specific request body for an embedding request.

        Args:
            texts (list[str]): The texts to embed.

        Returns:
            dict: JSON-serialisable request body (e.g. {"text": [...]}).
        """
        pass

    ##########################################
    ################# OTHER ##################
    ##########################################

    @abstractmethod
    def extract_embeddings_from_response(self, response_data: dict) -> list[list[float]]:
        """Extract embedding vectors from a raw embedding API response.

        Response format differs by backend:
        - Workers AI: {"result": {"shape": [n, d], "data": [[...], ...]}}
        - Ollama /api/embed: {"embeddings": [[...], ...]}

        Args:
            response_data (dict): The parsed JSON response body.

        Returns:
            list[list[float]]: Embedding vectors in input order, empty if the
                backend returned none.
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_embed(self, texts: list[str] | str) -> list[list[float]]:
        """Send an embedding request and return the extracted vectors.

        Args:
            texts (list[str] | str): One or more texts to embed.

        Returns:
            list[list[float]]: Embedding vectors in the same order as the inputs.

        Raises:
            UpstreamServiceError: If the HTTP request fails or the payload is malformed.
            EmbeddingError: If the response contains no vectors.
        """
        texts = [texts] if isinstance(texts, str) else texts
        response = await self.do_request(
            method="POST",
            endpoint=self.get_endpoint_embedding(),
            json=self.get_embed_payload(texts),
            raise_on_error=True,
        )
        vectors = self.extract_embeddings_from_response(self.parse_json(response))
        if not vectors:
            raise EmbeddingError("No embedding data received")
        self.logging.debug("Embedded %d text(s) with %s", len(vectors), self.get_engine_name())
        return vectors
