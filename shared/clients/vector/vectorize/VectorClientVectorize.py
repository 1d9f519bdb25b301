import json

from shared.clients.vector.VectorClientInterface import VectorClientInterface
from shared.clients.vector.models.VectorRecord import VectorMatch, VectorRecord
from shared.errors import UpstreamServiceError
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class VectorClientVectorize(VectorClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default=None, val_type="string")
        self._account_id = self.get_config_val("ACCOUNT_ID", default=None, val_type="string")
        self._index_name = self.get_config_val("INDEX", default=None, val_type="string")
        self._api_token = self.get_config_val("API_TOKEN", default="", val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Vectorize"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default=None),
            EnvConfig(env_key="ACCOUNT_ID", val_type="string", default=None),
            EnvConfig(env_key="INDEX", val_type="string", default=None),
            EnvConfig(env_key="API_TOKEN", val_type="string", default=""),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        if self._api_token:
            return {"Authorization": f"Bearer {self._api_token}"}
        return {}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_index_path(self) -> str:
        return f"/accounts/{self._account_id}/vectorize/v2/indexes/{self._index_name}"

    def _get_endpoint_healthcheck(self) -> str:
        return self._get_index_path()

    def _get_endpoint_upsert(self) -> str:
        return f"{self._get_index_path()}/upsert"

    def _get_endpoint_query(self) -> str:
        return f"{self._get_index_path()}/query"

    def _get_upsert_content_type(self) -> str:
        return "application/x-ndjson"

    ##########################################
    ########### PAYLOAD BUILDER ##############
    ##########################################

    def get_upsert_payload(self, records: list[VectorRecord]) -> str:
        # one JSON object per line
        return "\n".join(json.dumps(record.model_dump()) for record in records)

    def get_query_payload(self, vector: list[float], top_k: int) -> dict:
        return {
            "vector": vector,
            "topK": top_k,
            "returnMetadata": "all",
            "returnValues": False,
        }

    ##########################################
    ########### RESPONSE PARSER ##############
    ##########################################

    def extract_matches(self, raw_response: dict) -> list[VectorMatch]:
        result = raw_response.get("result")
        if not isinstance(result, dict):
            raise UpstreamServiceError("Vectorize query response does not contain a result object")
        return [
            VectorMatch(
                id=str(match.get("id")),
                score=match.get("score", 0.0),
                metadata=match.get("metadata") or {},
            )
            for match in result.get("matches", [])
        ]
