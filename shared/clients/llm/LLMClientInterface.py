from abc import abstractmethod

from shared.clients.ClientInterface import ClientInterface
from shared.helper.HelperConfig import HelperConfig


class LLMClientInterface(ClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

        # sampling defaults shared by every completion request
        self.temperature = helper_config.get_number_val(f"{self.get_client_type().upper()}_TEMPERATURE", default=0.7)
        self.top_p = helper_config.get_number_val(f"{self.get_client_type().upper()}_TOP_P", default=0.9)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        return "llm"

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_endpoint_chat(self) -> str:
        """Returns the endpoint path for chat/completion requests (e.g. "/api/chat")."""
        pass

    def _get_chat_params(self) -> dict | None:
        """Returns query parameters sent with every chat request (e.g. an API version)."""
        return None

    ################ PAYLOAD BUILDER ##################
    @abstractmethod
    def get_chat_payload(self, messages: list[dict], max_tokens: int) -> dict:
        """Build the backend-specific request body for a chat/completion request.

        Args:
            messages (list[dict]): OpenAI-format messages
                (e.g. [{"role": "user", "content": "..."}]).
            max_tokens (int): Upper bound for generated tokens.

        Returns:
            dict: JSON-serialisable request body.
        """
        pass

    ##########################################
    ################# OTHER ##################
    ##########################################

    @abstractmethod
    def extract_chat_response(self, response_data: dict) -> str:
        """Extract the assistant reply text from a raw chat API response.

        Args:
            response_data (dict): The parsed JSON response body.

        Returns:
            str: The assistant reply text, empty if the backend returned none.
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_chat(self, messages: list[dict], max_tokens: int = 300) -> str:
        """Send a chat/completion request and return the assistant reply text.

        Args:
            messages (list[dict]): OpenAI-format messages.
            max_tokens (int): Upper bound for generated tokens.

        Returns:
            str: The assistant reply text ("" when the backend sent no content).

        Raises:
            UpstreamServiceError: If the request fails or the payload is malformed.
        """
        response = await self.do_request(
            method="POST",
            endpoint=self._get_endpoint_chat(),
            params=self._get_chat_params(),
            json=self.get_chat_payload(messages, max_tokens),
            raise_on_error=True,
        )
        return self.extract_chat_response(self.parse_json(response))
