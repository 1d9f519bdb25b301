from abc import abstractmethod

from shared.clients.ClientInterface import ClientInterface
from shared.clients.vector.models.VectorRecord import VectorMatch, VectorRecord
from shared.helper.HelperConfig import HelperConfig


class VectorClientInterface(ClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        return "vector"

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_endpoint_upsert(self) -> str:
        """
        Returns the endpoint path for upsert requests (e.g. "/collections/docs/points").
        """
        pass

    @abstractmethod
    def _get_endpoint_query(self) -> str:
        """
        Returns the endpoint path for similarity queries (e.g. "/collections/docs/points/query").
        """
        pass

    def _get_upsert_method(self) -> str:
        return "POST"

    def _get_upsert_content_type(self) -> str:
        return "application/json"

    ################ PAYLOAD BUILDER ##################
    @abstractmethod
    def get_upsert_payload(self, records: list[VectorRecord]) -> str:
        """
        Serialises records into the backend-specific upsert body.

        Args:
            records (list[VectorRecord]): The records to upsert.

        Returns:
            str: The encoded request body (JSON or NDJSON, see _get_upsert_content_type()).
        """
        pass

    @abstractmethod
    def get_query_payload(self, vector: list[float], top_k: int) -> dict:
        """
        Builds the backend-specific body for a similarity query that returns metadata.

        Args:
            vector (list[float]): The query vector.
            top_k (int): Number of nearest matches to return.

        Returns:
            dict: JSON-serialisable request body.
        """
        pass

    ##########################################
    ########### RESPONSE PARSER ##############
    ##########################################

    @abstractmethod
    def extract_matches(self, raw_response: dict) -> list[VectorMatch]:
        """
        Extracts the ranked matches (highest score first) from a raw query response.

        Args:
            raw_response (dict): The parsed JSON response of the query endpoint.

        Returns:
            list[VectorMatch]: The matches in backend rank order.
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_upsert(self, records: list[VectorRecord]) -> int:
        """Insert or replace records in the index.

        Args:
            records (list[VectorRecord]): The records to upsert.

        Returns:
            int: Number of records sent.

        Raises:
            UpstreamServiceError: If the backend rejects the request.
        """
        await self.do_request(
            method=self._get_upsert_method(),
            content=self.get_upsert_payload(records),
            endpoint=self._get_endpoint_upsert(),
            additional_headers={"Content-Type": self._get_upsert_content_type()},
            raise_on_error=True,
        )
        self.logging.debug("Upserted %d vector(s) into %s", len(records), self.get_engine_name())
        return len(records)

    async def do_query(self, vector: list[float], top_k: int) -> list[VectorMatch]:
        """Query the index for the top_k nearest records, including metadata.

        Raises:
            UpstreamServiceError: If the backend rejects the request or answers with a malformed payload.
        """
        resp = await self.do_request(
            method="POST",
            json=self.get_query_payload(vector, top_k),
            endpoint=self._get_endpoint_query(),
            raise_on_error=True,
        )
        matches = self.extract_matches(self.parse_json(resp))
        self.logging.debug("Vector query on %s returned %d match(es)", self.get_engine_name(), len(matches))
        return matches
