"""Shared fixtures for the RAG agent router tests."""

import logging
from unittest.mock import AsyncMock

import pytest

from shared.clients.vector.models.VectorRecord import VectorMatch
from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import ColorLogger


@pytest.fixture
def logger():
    return ColorLogger(logging.getLogger("rag_agent_router.tests"))


@pytest.fixture
def helper_config(logger):
    return HelperConfig(logger=logger)


@pytest.fixture
def embed_client():
    client = AsyncMock()
    client.do_embed.return_value = [[0.1, 0.2, 0.3]]
    return client


@pytest.fixture
def vector_client():
    client = AsyncMock()
    client.do_query.return_value = []
    client.do_upsert.side_effect = lambda records: len(records)
    return client


@pytest.fixture
def llm_client():
    client = AsyncMock()
    client.do_chat.return_value = "Generated answer"
    return client


def make_match(id="doc-1", score=0.9, content="Some content", title="Title", **metadata):
    """Build a VectorMatch; pass content=None to leave it out of the metadata."""
    meta = {"title": title, **metadata}
    if content is not None:
        meta["content"] = content
    return VectorMatch(id=id, score=score, metadata=meta)
