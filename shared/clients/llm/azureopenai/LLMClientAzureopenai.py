from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class LLMClientAzureopenai(LLMClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._endpoint = self.get_config_val("ENDPOINT", default=None, val_type="string")
        self._deployment_name = self.get_config_val("DEPLOYMENT_NAME", default=None, val_type="string")
        self._api_version = self.get_config_val("API_VERSION", default=None, val_type="string")
        self._api_key = self.get_config_val("API_KEY", default="", val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Azureopenai"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="ENDPOINT", val_type="string", default=None),
            EnvConfig(env_key="DEPLOYMENT_NAME", val_type="string", default=None),
            EnvConfig(env_key="API_VERSION", val_type="string", default=None),
            EnvConfig(env_key="API_KEY", val_type="string", default=""),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        # Azure expects the header even when the key is blank
        return {"api-key": self._api_key}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._endpoint

    def _get_endpoint_healthcheck(self) -> str:
        return f"/openai/models?api-version={self._api_version}"

    def _get_endpoint_chat(self) -> str:
        return f"/openai/deployments/{self._deployment_name}/chat/completions"

    def _get_chat_params(self) -> dict | None:
        return {"api-version": self._api_version}

    ################ PAYLOAD BUILDER ##################
    def get_chat_payload(self, messages: list[dict], max_tokens: int) -> dict:
        return {
            "messages": messages,
            "temperature": self.temperature,
            "max_tokens": max_tokens,
            "top_p": self.top_p,
        }

    ##########################################
    ################# OTHER ##################
    ##########################################

    def extract_chat_response(self, response_data: dict) -> str:
        """Extract choices[0].message.content from an Azure OpenAI response."""
        choices = response_data.get("choices") or []
        if not choices:
            return ""
        message = choices[0].get("message") or {}
        return message.get("content") or ""
