import asyncio
from datetime import UTC, datetime

from support_rag.domain.models import ConversationKey, PendingToolConfirmation
from support_rag.infrastructure.memory.confirmation_store import InMemoryConfirmationStore
from support_rag.infrastructure.memory.history_store import InMemoryHistoryStore
from support_rag.infrastructure.memory.static_providers import (
    LoggingEscalationExecutor,
    StaticCategoryProvider,
    StaticConfigProvider,
)

KEY = ConversationKey(guild_id="g1", user_id="u1")


def _record(cid: str) -> PendingToolConfirmation:
    return PendingToolConfirmation(
        id=cid,
        category_id="cat-1",
        category_name="Billing",
        user_message="help",
        guild_id="g1",
        channel_id="c1",
        user_id="u1",
        tool_message="opening a ticket",
        created_at=datetime(2024, 1, 1, tzinfo=UTC),
    )


class TestHistoryStore:
    def test_append_and_read_in_order(self) -> None:
        store = InMemoryHistoryStore()

        async def run():
            await store.add_message(KEY, "user", "hi")
            await store.add_message(KEY, "assistant", "hello")
            return await store.get_history(KEY), await store.get_history(ConversationKey("g1", "other"))

        mine, other = asyncio.run(run())
        assert [(m.role, m.content) for m in mine] == [("user", "hi"), ("assistant", "hello")]
        assert other == []

    def test_add_exchange_stores_the_pair(self) -> None:
        store = InMemoryHistoryStore()

        async def run():
            await store.add_exchange(KEY, "question", "answer")
            return await store.get_history(KEY)

        assert [(m.role, m.content) for m in asyncio.run(run())] == [
            ("user", "question"),
            ("assistant", "answer"),
        ]

    def test_trim_keeps_most_recent(self) -> None:
        store = InMemoryHistoryStore()

        async def run():
            for i in range(5):
                await store.add_message(KEY, "user", str(i))
            await store.trim(KEY, 2)
            return await store.get_history(KEY)

        assert [m.content for m in asyncio.run(run())] == ["3", "4"]

    def test_returned_history_is_a_copy(self) -> None:
        store = InMemoryHistoryStore()

        async def run():
            await store.add_message(KEY, "user", "hi")
            list(await store.get_history(KEY)).clear()
            return await store.get_history(KEY)

        assert len(asyncio.run(run())) == 1

    def test_clear_keep_system(self) -> None:
        store = InMemoryHistoryStore()

        async def run():
            await store.add_message(KEY, "system", "persona")
            await store.add_message(KEY, "user", "hi")
            await store.clear(KEY, keep_system=True)
            kept = await store.get_history(KEY)
            await store.clear(KEY, keep_system=False)
            return kept, await store.get_history(KEY)

        kept, after = asyncio.run(run())
        assert [m.role for m in kept] == ["system"]
        assert after == []


class TestConfirmationStore:
    def test_put_get_pop(self) -> None:
        store = InMemoryConfirmationStore()
        store.put(_record("a"))

        assert store.get("a").category_name == "Billing"
        assert store.pop("a").id == "a"
        assert store.pop("a") is None
        assert len(store) == 0

    def test_snapshot_is_detached(self) -> None:
        store = InMemoryConfirmationStore()
        store.put(_record("a"))
        snap = store.snapshot()
        store.pop("a")
        assert "a" in snap

    def test_replace_all(self) -> None:
        store = InMemoryConfirmationStore()
        store.put(_record("a"))
        store.replace_all({"b": _record("b")})
        assert set(store.snapshot()) == {"b"}


def test_static_categories_from_names() -> None:
    provider = StaticCategoryProvider.from_names(["Billing", "Tech"])
    categories = asyncio.run(provider.list_enabled("any-guild"))
    assert [(c.id, c.name) for c in categories] == [("cat-1", "Billing"), ("cat-2", "Tech")]


def test_static_config_provider() -> None:
    provider = StaticConfigProvider({})
    assert asyncio.run(provider.get_by_channel("c1")) is None


def test_logging_executor_numbers_tickets(caplog) -> None:
    executor = LoggingEscalationExecutor(start=7)
    with caplog.at_level("INFO"):
        first = asyncio.run(executor.create("g1", "cat-1", "help me", user_id="u1"))
        second = asyncio.run(executor.create("g1", "cat-1", "again", user_id="u1"))

    assert (first.success, first.resource_ref, first.ticket_number) == (True, "ticket-0007", 7)
    assert second.ticket_number == 8
    assert "Ticket #7" in caplog.text
