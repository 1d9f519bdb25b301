"""Error taxonomy shared by clients, services and the HTTP layer."""


class ServiceError(Exception):
    """Base class for all domain errors raised by this application."""


class ValidationError(ServiceError):
    """A required request field is missing or malformed (HTTP 400)."""


class UpstreamServiceError(ServiceError):
    """An external provider answered with a non-2xx status or an unusable payload.

    Attributes:
        status_code (int | None): Upstream HTTP status, if a response was received.
        body (str | None): Upstream response body (truncated), if available.
    """

    def __init__(self, message: str, status_code: int | None = None, body: str | None = None):
        if status_code is not None:
            message = f"{message} ({status_code}{' - ' + body if body else ''})"
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class EmbeddingError(UpstreamServiceError):
    """The embedding provider returned no vectors."""


class RAGProcessingError(ServiceError):
    """The RAG pipeline failed before producing an answer."""


class GeneralProcessingError(ServiceError):
    """The general completion pipeline failed."""


class PersistenceError(ServiceError):
    """Reading or writing the interaction history failed."""
