from abc import ABC, abstractmethod
from typing import Any

from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class HistoryStoreInterface(ABC):
    """Durable key-value storage holding ordered lists of JSON-serialisable dicts.

    Keys are composed by the caller (e.g. "<session>:chat_history"); the store
    knows nothing about sessions or retention.
    """

    def __init__(self, helper_config: HelperConfig):
        self.logging = helper_config.get_logger()
        self._helper_config = helper_config
        for config in self._get_required_config():
            _ = self.get_config_val(raw_key=config.env_key, default=config.default)

    ##########################################
    ################ GETTER ##################
    ##########################################

    def get_engine_name(self) -> str:
        return self._get_engine_name().lower()

    @abstractmethod
    def _get_engine_name(self) -> str:
        pass

    @abstractmethod
    def _get_required_config(self) -> list[EnvConfig]:
        pass

    def get_config_val(self, raw_key: str, default: Any = None) -> str:
        """Reads HISTORY_<ENGINE>_<KEY> from the environment."""
        key = f"HISTORY_{self.get_engine_name().upper()}_{raw_key.upper()}"
        return self._helper_config.get_string_val(key, default=default)

    ##########################################
    ############### LIFECYCLE ################
    ##########################################

    async def boot(self) -> None:
        """Open connections, if the backend needs any."""

    async def close(self) -> None:
        """Release connections, if the backend holds any."""

    ##########################################
    ############### REQUESTS #################
    ##########################################

    @abstractmethod
    async def get_list(self, key: str) -> list[dict] | None:
        """Return the list stored under key, or None if nothing is stored."""
        pass

    @abstractmethod
    async def put_list(self, key: str, values: list[dict]) -> None:
        """Replace the list stored under key."""
        pass
