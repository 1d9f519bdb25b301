"""History service: bounded interaction log for one logical session.

All traffic shares a single session (HISTORY_SESSION, default "main-agent").
Saves are read-modify-write without locking, so concurrent saves may drop or
reorder entries; the length cap still holds after every completed save.
"""

import math

from shared.clients.history.HistoryStoreInterface import HistoryStoreInterface
from shared.errors import PersistenceError
from shared.helper.HelperConfig import HelperConfig
from server.models.history import HistoryStats, InteractionRecord

HISTORY_KEY = "chat_history"
DEFAULT_SESSION = "main-agent"
DEFAULT_MAX_ENTRIES = 100


class HistoryService:
    """Appends, trims, lists and summarises interaction records."""

    def __init__(
        self,
        helper_config: HelperConfig,
        store: HistoryStoreInterface,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._store = store
        self.session_name = helper_config.get_string_val("HISTORY_SESSION", default=DEFAULT_SESSION)
        self.max_entries = int(helper_config.get_number_val("HISTORY_MAX_ENTRIES", default=DEFAULT_MAX_ENTRIES))
        if self.max_entries < 1:
            raise ValueError(f"HISTORY_MAX_ENTRIES must be at least 1. Got: {self.max_entries}")

    @property
    def key(self) -> str:
        return f"{self.session_name}:{HISTORY_KEY}"

    ##########################################
    ################ CORE ####################
    ##########################################

    async def save(self, record: InteractionRecord) -> int:
        """Append a record, keep the newest max_entries, and write back.

        Returns:
            int: The history length after saving.

        Raises:
            PersistenceError: If the store cannot be read or written.
        """
        try:
            history = await self._store.get_list(self.key) or []
            history.append(record.model_dump(by_alias=True))
            if len(history) > self.max_entries:
                history = history[-self.max_entries:]
            await self._store.put_list(self.key, history)
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(f"Failed to save to history: {e}") from e

        self.logging.debug("Saved interaction to %s, history length %d", self.key, len(history))
        return len(history)

    async def history(self) -> list[InteractionRecord]:
        """Return all stored records, oldest first.

        Raises:
            PersistenceError: If the store cannot be read or holds malformed entries.
        """
        try:
            raw = await self._store.get_list(self.key) or []
            return [InteractionRecord.model_validate(item) for item in raw]
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(f"Failed to retrieve history: {e}") from e

    async def stats(self) -> HistoryStats:
        """Count RAG and general interactions.

        The percentage is rounded half up and is 0 for an empty history.
        """
        history = await self.history()
        total = len(history)
        rag_usage = sum(1 for record in history if record.used_rag)
        return HistoryStats(
            total_interactions=total,
            rag_usage=rag_usage,
            general_usage=total - rag_usage,
            rag_percentage=math.floor(rag_usage * 100 / total + 0.5) if total > 0 else 0,
        )

    async def record_safely(self, record: InteractionRecord) -> None:
        """Save a record without ever raising; failures are only logged.

        Used as a background task after the chat response has been produced.
        """
        try:
            await self.save(record)
        except Exception as e:
            self.logging.error("Failed to save to agent history: %s", e)
