"""
Unit Tests for PersonService listings.
"""

import random

import pytest

from models.person import Person
from services.person_service import PersonService
from storages.memory_storage import MemoryStorage


class TestSelection:
    """first / last / random over persons created in order p1..p4."""

    @pytest.fixture
    def population(self, add_persons):
        return add_persons("p1", "p2", "p3", "p4")

    @pytest.mark.asyncio
    async def test_first_three(self, ctx, population):
        persons = await ctx.persons.list_first(3)

        assert [p.first_name for p in persons] == ["p1", "p2", "p3"]

    @pytest.mark.asyncio
    async def test_last_three(self, ctx, population):
        persons = await ctx.persons.list_last(3)

        assert [p.first_name for p in persons] == ["p2", "p3", "p4"]

    @pytest.mark.asyncio
    async def test_first_with_offset(self, ctx, population):
        persons = await ctx.persons.list_first(3, offset=3)

        assert [p.first_name for p in persons] == ["p4"]

    @pytest.mark.asyncio
    async def test_last_with_offset(self, ctx, population):
        persons = await ctx.persons.list_last(2, offset=2)

        assert [p.first_name for p in persons] == ["p1", "p2"]

    @pytest.mark.asyncio
    async def test_rand_more_than_population_returns_everyone_once(self, ctx, population):
        persons = await ctx.persons.list_random(10)

        assert len(persons) == 4
        assert sorted(p.id for p in persons) == [1, 2, 3, 4]

    @pytest.mark.asyncio
    async def test_rand_has_no_duplicates(self, repos, population):
        for seed in range(20):
            service = PersonService(repos.persons, MemoryStorage("persons"), rng=random.Random(seed))
            persons = await service.list_random(3)
            assert len({p.id for p in persons}) == 3

    @pytest.mark.asyncio
    async def test_rand_on_empty_population(self, ctx):
        assert await ctx.persons.list_random(3) == []


class TestUpsert:

    @pytest.mark.asyncio
    async def test_upsert_keeps_creation_order(self, ctx, add_persons):
        add_persons("p1", "p2")

        await ctx.persons.upsert(Person(id=1, first_name="renamed"))
        persons = await ctx.persons.list_first(2)

        assert [p.first_name for p in persons] == ["renamed", "p2"]

    @pytest.mark.asyncio
    async def test_find_by_id_reads_through_storage(self, ctx, repos, add_persons):
        add_persons("p1")

        await ctx.persons.find_by_id(1)
        repos.persons.rows.clear()
        cached = await ctx.persons.find_by_id(1)

        assert cached.first_name == "p1"


class TestDisplayName:

    @pytest.mark.parametrize("person, expected", [
        (Person(id=1, first_name="Ada", last_name="Lovelace"), "Ada Lovelace"),
        (Person(id=2, first_name="", username="ada"), "@ada"),
        (Person(id=3), "3"),
    ])
    def test_display_name(self, person, expected):
        assert person.display_name == expected
