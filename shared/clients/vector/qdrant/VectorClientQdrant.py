import json
import uuid

from shared.clients.vector.VectorClientInterface import VectorClientInterface
from shared.clients.vector.models.VectorRecord import VectorMatch, VectorRecord
from shared.errors import UpstreamServiceError
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig

# payload key holding the original record id, since Qdrant only accepts UUIDs or integers
RECORD_ID_KEY = "record_id"


def _make_point_id(record_id: str) -> str:
    """Map a record id onto a deterministic UUID5 so re-inserting the same id overwrites."""
    return str(uuid.uuid5(uuid.NAMESPACE_OID, record_id))


class VectorClientQdrant(VectorClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default=None, val_type="string")
        self._api_key = self.get_config_val("API_KEY", default="", val_type="string")
        self._collection_name = self.get_config_val("COLLECTION", default=None, val_type="string")
        # block upserts until Qdrant has applied them
        self._wait = self.get_config_val("WAIT", default=True, val_type="bool")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Qdrant"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default=None),
            EnvConfig(env_key="API_KEY", val_type="string", default=""),
            EnvConfig(env_key="COLLECTION", val_type="string", default=None),
            EnvConfig(env_key="WAIT", val_type="bool", default=True),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        if self._api_key:
            return {"api-key": self._api_key}
        return {}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return "/healthz"

    def _get_endpoint_upsert(self) -> str:
        return f"/collections/{self._collection_name}/points?wait={str(self._wait).lower()}"

    def _get_endpoint_query(self) -> str:
        return f"/collections/{self._collection_name}/points/query"

    def _get_upsert_method(self) -> str:
        return "PUT"

    ##########################################
    ########### PAYLOAD BUILDER ##############
    ##########################################

    def get_upsert_payload(self, records: list[VectorRecord]) -> str:
        points = [
            {
                "id": _make_point_id(record.id),
                "vector": record.values,
                "payload": {**record.metadata, RECORD_ID_KEY: record.id},
            }
            for record in records
        ]
        return json.dumps({"points": points})

    def get_query_payload(self, vector: list[float], top_k: int) -> dict:
        return {"query": vector, "limit": top_k, "with_payload": True}

    ##########################################
    ########### RESPONSE PARSER ##############
    ##########################################

    def extract_matches(self, raw_response: dict) -> list[VectorMatch]:
        result = raw_response.get("result")
        if not isinstance(result, dict):
            raise UpstreamServiceError("Qdrant query response does not contain a result object")
        matches: list[VectorMatch] = []
        for point in result.get("points", []):
            payload = dict(point.get("payload") or {})
            record_id = payload.pop(RECORD_ID_KEY, None) or str(point.get("id"))
            matches.append(VectorMatch(id=record_id, score=point.get("score", 0.0), metadata=payload))
        return matches
