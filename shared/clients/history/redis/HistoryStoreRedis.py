import json

import redis.asyncio as redis

from shared.clients.history.HistoryStoreInterface import HistoryStoreInterface
from shared.errors import PersistenceError
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class HistoryStoreRedis(HistoryStoreInterface):
    """Stores each list as one JSON string under a prefixed Redis key."""

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._url = self.get_config_val("URL", default=None)
        self._prefix = self.get_config_val("PREFIX", default="rag-agent")
        self._redis: redis.Redis | None = None

    def _get_engine_name(self) -> str:
        return "Redis"

    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="URL", val_type="string", default=None),
            EnvConfig(env_key="PREFIX", val_type="string", default="rag-agent"),
        ]

    def _make_key(self, key: str) -> str:
        return f"{self._prefix}:{key}"

    async def boot(self) -> None:
        self._redis = redis.from_url(
            self._url,
            decode_responses=True,
            socket_timeout=5,
            socket_connect_timeout=5,
        )
        await self._redis.ping()
        # strip credentials before logging
        self.logging.info("Redis history store connected: %s", self._url.split("@")[-1])

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None

    def _get_connection(self) -> redis.Redis:
        if self._redis is None:
            raise PersistenceError("Redis history store not initialised. Call boot() first.")
        return self._redis

    async def get_list(self, key: str) -> list[dict] | None:
        raw = await self._get_connection().get(self._make_key(key))
        if raw is None:
            return None
        return json.loads(raw)

    async def put_list(self, key: str, values: list[dict]) -> None:
        await self._get_connection().set(self._make_key(key), json.dumps(values))
