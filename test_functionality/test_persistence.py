"""
Test the SQLite Memory Store, Recommendation Store and mood repository
against a throwaway database.
"""

import asyncio

from domain.entities import MoodEntry
from domain.memory import MoodMateMemory, load_memory
from factory import ServiceFactory


def _factory(settings) -> ServiceFactory:
    factory = ServiceFactory(settings)
    asyncio.run(factory.initialize())
    return factory


def test_missing_memory_is_empty(settings):
    store = _factory(settings).create_memory_store()
    assert asyncio.run(store.get(1, "MoodMate")) == {}
    assert asyncio.run(store.get_all_for_user(1)) == {}


def test_memory_put_is_last_write_wins_and_idempotent(settings):
    store = _factory(settings).create_memory_store()

    async def main():
        await store.put(1, "MoodMate", {"last_mood": "sad"})
        await store.put(1, "MoodMate", {"last_mood": "happy", "execution_count": 2})
        await store.put(1, "MoodMate", {"last_mood": "happy", "execution_count": 2})
        return await store.get(1, "MoodMate"), await store.get_all_for_user(1)

    record, everything = asyncio.run(main())

    assert record == {"last_mood": "happy", "execution_count": 2}
    assert list(everything) == ["MoodMate"]


def test_memory_records_are_per_user_and_agent(settings):
    factory = _factory(settings)
    store = factory.create_memory_store()

    async def main():
        await factory.create_user_repository().ensure(2, "Sam")
        await store.put(1, "MoodMate", {"last_mood": "calm"})
        await store.put(1, "MindPal", {"journal_streak": 3})
        await store.put(2, "MoodMate", {"last_mood": "tired"})
        return await store.get_all_for_user(1)

    assert asyncio.run(main()) == {
        "MoodMate": {"last_mood": "calm"},
        "MindPal": {"journal_streak": 3},
    }


def test_typed_memory_ignores_unknown_keys():
    memory = load_memory("MoodMate", {"last_mood": "happy", "legacy_field": [1, 2, 3]})
    assert isinstance(memory, MoodMateMemory)
    assert memory.last_mood == "happy"
    assert "legacy_field" not in memory.model_dump()


def test_recommendations_deactivate_softly(settings):
    store = _factory(settings).create_recommendation_store()

    async def main():
        first = await store.create(1, "NutriCoach", "nutrition", {"meals": ["oats"]})
        second = await store.create(1, "NutriCoach", "nutrition", {"meals": ["salad"]})
        await store.create(1, "FlexGenie", "fitness", {"workout": "yoga"})
        await store.deactivate(first.id)
        return (
            first,
            second,
            await store.list_active(1, "NutriCoach"),
            await store.list_active(1),
            await store.get_by_id(first.id),
        )

    first, second, nutrition, everything, stored_first = asyncio.run(main())

    assert [r.id for r in nutrition] == [second.id]
    assert len(everything) == 2
    assert everything[0].agent_name == "FlexGenie"
    assert stored_first.is_active is False
    assert stored_first.content == {"meals": ["oats"]}


def test_mood_save_updates_user_and_orders_newest_first(settings):
    factory = _factory(settings)
    moods = factory.create_mood_repository()

    async def main():
        await moods.save(MoodEntry(user_id=1, mood="sad", timestamp="2026-01-01T08:00:00+00:00"))
        await moods.save(MoodEntry(user_id=1, mood="happy", timestamp="2026-01-02T08:00:00+00:00"))
        return await moods.get_recent(1, 10), await factory.create_user_repository().get_by_id(1)

    recent, user = asyncio.run(main())

    assert [m.mood for m in recent] == ["happy", "sad"]
    assert user.name == "Alex"
    assert user.current_mood == "happy"
    assert user.streak_days >= 1
