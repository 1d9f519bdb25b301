from shared.helper.HelperConfig import HelperConfig
from shared.clients.vector.VectorClientInterface import VectorClientInterface


class VectorClientManager:
    """Instantiates the vector index client selected by VECTOR_ENGINE."""

    def __init__(self, helper_config: HelperConfig):
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()
        self.client = self._initialize_client()

    def _get_engine_from_env(self) -> str:
        engine = self.helper_config.get_string_val("VECTOR_ENGINE")
        return engine.strip().lower().capitalize()

    def _initialize_client(self) -> VectorClientInterface:
        """
        Imports shared.clients.vector.<engine>.VectorClient<Engine> and instantiates it.

        Raises:
            ValueError: If the engine is unsupported.
        """
        engine = self._get_engine_from_env()
        class_name = f"VectorClient{engine}"
        try:
            module = __import__(
                f"shared.clients.vector.{engine.lower()}.{class_name}",
                fromlist=[class_name],
            )
            client_class = getattr(module, class_name)
        except (ImportError, AttributeError) as e:
            raise ValueError(f"Unsupported Vector engine specified: '{engine}'. Error: {e}")
        client = client_class(helper_config=self.helper_config)
        self.logging.debug("Instantiated Vector client for engine: %s", engine)
        return client

    def get_client(self) -> VectorClientInterface:
        """Return the instantiated Vector client."""
        return self.client
