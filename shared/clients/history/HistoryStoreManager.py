from shared.helper.HelperConfig import HelperConfig
from shared.clients.history.HistoryStoreInterface import HistoryStoreInterface


class HistoryStoreManager:
    """Instantiates the history store selected by HISTORY_ENGINE (default "memory")."""

    def __init__(self, helper_config: HelperConfig):
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()
        self.store = self._initialize_store()

    def _get_engine_from_env(self) -> str:
        engine = self.helper_config.get_string_val("HISTORY_ENGINE", default="memory")
        return engine.strip().lower().capitalize()

    def _initialize_store(self) -> HistoryStoreInterface:
        """
        Imports shared.clients.history.<engine>.HistoryStore<Engine> and instantiates it.

        Raises:
            ValueError: If the engine is unsupported.
        """
        engine = self._get_engine_from_env()
        class_name = f"HistoryStore{engine}"
        try:
            module = __import__(
                f"shared.clients.history.{engine.lower()}.{class_name}",
                fromlist=[class_name],
            )
            store_class = getattr(module, class_name)
        except (ImportError, AttributeError) as e:
            raise ValueError(f"Unsupported History engine specified: '{engine}'. Error: {e}")
        store = store_class(helper_config=self.helper_config)
        self.logging.debug("Instantiated History store for engine: %s", engine)
        return store

    def get_store(self) -> HistoryStoreInterface:
        """Return the instantiated History store."""
        return self.store
