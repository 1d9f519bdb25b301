import copy

from shared.clients.history.HistoryStoreInterface import HistoryStoreInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class HistoryStoreMemory(HistoryStoreInterface):
    """Process-local store. History is lost on restart and not shared between workers."""

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._data: dict[str, list[dict]] = {}

    def _get_engine_name(self) -> str:
        return "Memory"

    def _get_required_config(self) -> list[EnvConfig]:
        return []

    async def get_list(self, key: str) -> list[dict] | None:
        values = self._data.get(key)
        return copy.deepcopy(values) if values is not None else None

    async def put_list(self, key: str, values: list[dict]) -> None:
        self._data[key] = copy.deepcopy(values)
