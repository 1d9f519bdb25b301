"""FastAPI application entry point for the RAG agent router."""

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Awaitable, Callable

from fastapi import FastAPI, Request, Response

from shared.logging.logging_setup import setup_logging
from shared.helper.HelperConfig import HelperConfig
from shared.errors import UpstreamServiceError
from shared.clients.ClientInterface import ClientInterface
from shared.clients.embed.EmbedClientManager import EmbedClientManager
from shared.clients.vector.VectorClientManager import VectorClientManager
from shared.clients.llm.LLMClientManager import LLMClientManager
from shared.clients.history.HistoryStoreManager import HistoryStoreManager
from server.core.DecisionEngine import DecisionEngine
from server.core.ChatService import ChatService
from server.core.DocumentService import DocumentService
from server.core.HistoryService import HistoryService
from server.errors import CORS_HEADERS, register_exception_handlers
from server.routers.ChatRouter import router as chat_router
from server.routers.DocumentRouter import router as document_router
from server.routers.AgentRouter import router as agent_router
from server.routers.SystemRouter import router as system_router

logging = setup_logging()
app_version = os.getenv("APP_VERSION", "unknown")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # when the app starts
    app.state.logging = logging
    app.state.helper_config = HelperConfig(logger=logging)

    embed_client = EmbedClientManager(helper_config=app.state.helper_config).get_client()
    vector_client = VectorClientManager(helper_config=app.state.helper_config).get_client()
    llm_client = LLMClientManager(helper_config=app.state.helper_config).get_client()
    history_store = HistoryStoreManager(helper_config=app.state.helper_config).get_store()
    clients: list[ClientInterface] = [embed_client, vector_client, llm_client]

    logging.info("Booting all clients...")
    for client in clients:
        await client.boot()
    await history_store.boot()
    logging.info("All clients booted successfully.", color="green")

    await check_connections(clients)

    app.state.decision_engine = DecisionEngine(
        helper_config=app.state.helper_config,
        llm_client=llm_client,
    )
    app.state.chat_service = ChatService(
        helper_config=app.state.helper_config,
        decision_engine=app.state.decision_engine,
        embed_client=embed_client,
        vector_client=vector_client,
        llm_client=llm_client,
    )
    app.state.document_service = DocumentService(
        helper_config=app.state.helper_config,
        embed_client=embed_client,
        vector_client=vector_client,
    )
    app.state.history_service = HistoryService(
        helper_config=app.state.helper_config,
        store=history_store,
    )
    logging.info(
        "RAG agent router ready (embed=%s, vector=%s, llm=%s, history=%s, session=%s).",
        embed_client.get_engine_name(),
        vector_client.get_engine_name(),
        llm_client.get_engine_name(),
        history_store.get_engine_name(),
        app.state.history_service.session_name,
        color="cyan",
    )

    # while the app is running...
    yield

    # when the app shuts down, close all client connections
    logging.info("Shutting down, closing all clients...")
    for client in clients:
        await client.close()
    await history_store.close()
    logging.info("All clients closed.")


async def check_connections(clients: list[ClientInterface]) -> None:
    """Probe every backend once on startup.

    Failures are logged, not raised: requests against an unreachable backend
    fail individually with a 500.
    """
    for client in clients:
        try:
            result = await client.do_healthcheck()
        except UpstreamServiceError as e:
            logging.warning("%s client '%s' is not reachable: %s", client.get_client_type().upper(), client.get_engine_name(), e)
            continue
        if not result.is_success:
            logging.warning(
                "%s client '%s' healthcheck returned status %d.",
                client.get_client_type().upper(),
                client.get_engine_name(),
                result.status_code,
            )


app = FastAPI(
    title="rag_agent_router",
    description=(
        "Routes each question either to retrieval-augmented generation over a "
        "vector-indexed knowledge base or to a direct LLM completion, and keeps a "
        "rolling interaction history for analytics."
    ),
    version=app_version,
    lifespan=lifespan,
)


@app.middleware("http")
async def cors_middleware(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
    """Answer OPTIONS on any path with headers only, and add CORS headers everywhere else."""
    if request.method == "OPTIONS":
        return Response(status_code=200, headers=CORS_HEADERS)
    response = await call_next(request)
    response.headers.update(CORS_HEADERS)
    return response


register_exception_handlers(app)

app.include_router(chat_router)
app.include_router(document_router)
app.include_router(agent_router)
# catch-all discovery route, must stay last
app.include_router(system_router)


if __name__ == "__main__":
    import uvicorn

    logging.info("Starting RAG agent router v%s on port 8000...", app_version)
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
