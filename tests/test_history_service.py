"""
Tests for the history service on top of the in-memory store.
"""

from unittest.mock import AsyncMock

import pytest

from shared.clients.history.memory.HistoryStoreMemory import HistoryStoreMemory
from shared.errors import PersistenceError
from server.core.HistoryService import HistoryService
from server.models.history import InteractionRecord


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("HISTORY_SESSION", raising=False)
    monkeypatch.delenv("HISTORY_MAX_ENTRIES", raising=False)


@pytest.fixture
def store(helper_config):
    return HistoryStoreMemory(helper_config=helper_config)


@pytest.fixture
def service(helper_config, store):
    return HistoryService(helper_config=helper_config, store=store)


def make_record(n: int, used_rag: bool = False) -> InteractionRecord:
    return InteractionRecord(
        question=f"question {n}",
        answer=f"answer {n}",
        used_rag=used_rag,
        timestamp=f"2024-01-01T00:00:{n % 60:02d}.000Z",
    )


class TestSave:
    """Tests for appending and trimming."""

    @pytest.mark.asyncio
    async def test_stores_wire_shape_under_session_key(self, service, store):
        await service.save(make_record(1, used_rag=True))

        stored = await store.get_list("main-agent:chat_history")
        assert stored == [{
            "question": "question 1",
            "answer": "answer 1",
            "usedRAG": True,
            "timestamp": "2024-01-01T00:00:01.000Z",
        }]

    @pytest.mark.asyncio
    async def test_keeps_newest_100_oldest_first(self, service):
        for n in range(105):
            length = await service.save(make_record(n))

        assert length == 100
        history = await service.history()
        assert len(history) == 100
        assert history[0].question == "question 5"
        assert history[-1].question == "question 104"

    @pytest.mark.asyncio
    async def test_session_and_limit_from_environment(self, helper_config, store, monkeypatch):
        monkeypatch.setenv("HISTORY_SESSION", "tenant-a")
        monkeypatch.setenv("HISTORY_MAX_ENTRIES", "3")
        service = HistoryService(helper_config=helper_config, store=store)

        for n in range(5):
            await service.save(make_record(n))

        stored = await store.get_list("tenant-a:chat_history")
        assert [item["question"] for item in stored] == ["question 2", "question 3", "question 4"]
        assert await store.get_list("main-agent:chat_history") is None

    @pytest.mark.parametrize("limit", ["0", "-5"])
    def test_limit_below_one_is_rejected(self, helper_config, store, monkeypatch, limit):
        monkeypatch.setenv("HISTORY_MAX_ENTRIES", limit)

        with pytest.raises(ValueError, match="HISTORY_MAX_ENTRIES"):
            HistoryService(helper_config=helper_config, store=store)

    @pytest.mark.asyncio
    async def test_limit_of_one_keeps_only_newest(self, helper_config, store, monkeypatch):
        monkeypatch.setenv("HISTORY_MAX_ENTRIES", "1")
        service = HistoryService(helper_config=helper_config, store=store)

        for n in range(3):
            length = await service.save(make_record(n))

        assert length == 1
        assert [record.question for record in await service.history()] == ["question 2"]

    @pytest.mark.asyncio
    async def test_store_failure_raises_persistence_error(self, helper_config):
        store = AsyncMock()
        store.get_list.side_effect = ConnectionError("store unreachable")
        service = HistoryService(helper_config=helper_config, store=store)

        with pytest.raises(PersistenceError, match="Failed to save to history"):
            await service.save(make_record(1))


class TestHistory:
    """Tests for listing records."""

    @pytest.mark.asyncio
    async def test_empty_history(self, service):
        assert await service.history() == []

    @pytest.mark.asyncio
    async def test_malformed_entries_raise_persistence_error(self, service, store):
        await store.put_list(service.key, [{"question": "only a question"}])

        with pytest.raises(PersistenceError, match="Failed to retrieve history"):
            await service.history()


class TestStats:
    """Tests for usage statistics."""

    @pytest.mark.asyncio
    async def test_empty_history_is_all_zero(self, service):
        stats = await service.stats()

        assert stats.model_dump(by_alias=True) == {
            "totalInteractions": 0,
            "ragUsage": 0,
            "generalUsage": 0,
            "ragPercentage": 0,
        }

    @pytest.mark.asyncio
    async def test_counts_and_percentage(self, service):
        for n, used_rag in enumerate([True, False, False, True]):
            await service.save(make_record(n, used_rag=used_rag))

        stats = await service.stats()

        assert stats.total_interactions == 4
        assert stats.rag_usage == 2
        assert stats.general_usage == 2
        assert stats.rag_percentage == 50

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "flags, expected",
        [
            ([True, False, False], 33),
            ([True, True, False], 67),
            ([True] + [False] * 7, 13),  # 12.5 rounds half up
            ([True, True, True], 100),
        ],
    )
    async def test_percentage_rounding(self, service, flags, expected):
        for n, used_rag in enumerate(flags):
            await service.save(make_record(n, used_rag=used_rag))

        stats = await service.stats()
        assert stats.rag_percentage == expected


class TestRecordSafely:
    """Tests for the background save."""

    @pytest.mark.asyncio
    async def test_saves_record(self, service):
        await service.record_safely(make_record(1))

        history = await service.history()
        assert [record.question for record in history] == ["question 1"]

    @pytest.mark.asyncio
    async def test_swallows_store_errors(self, helper_config):
        store = AsyncMock()
        store.get_list.return_value = []
        store.put_list.side_effect = ConnectionError("store unreachable")
        service = HistoryService(helper_config=helper_config, store=store)

        await service.record_safely(make_record(1))

        store.put_list.assert_awaited_once()
