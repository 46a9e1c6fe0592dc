import asyncio

import pytest
from asgiref.sync import async_to_sync

from catalog.controllers.common import gather, genre_choices, parallel
from catalog.exceptions import StorageError
from catalog.models import Genre


async def value(result, delay=0):
    await asyncio.sleep(delay)
    return result


def test_parallel_returns_named_results():
    results = async_to_sync(parallel)(slow=value("a", 0.02), fast=value("b"))
    assert results == {"slow": "a", "fast": "b"}


def test_gather_keeps_call_order():
    assert async_to_sync(gather)(value(1, 0.02), value(2), value(3, 0.01)) == [1, 2, 3]


def test_parallel_raises_first_failure_and_cancels_siblings():
    cancelled = []

    async def slow():
        try:
            await asyncio.sleep(5)
        except asyncio.CancelledError:
            cancelled.append(True)
            raise

    async def broken():
        raise StorageError("database is down")

    with pytest.raises(StorageError, match="database is down"):
        async_to_sync(parallel)(slow=slow(), broken=broken())
    assert cancelled == [True]


def test_parallel_with_nothing_to_do():
    assert async_to_sync(parallel)() == {}


def test_genre_choices_marks_selected_without_touching_genres():
    fantasy, poetry = Genre(pk=1, name="Fantasy"), Genre(pk=2, name="Poetry")

    choices = genre_choices([fantasy, poetry], ["2"])

    assert choices == [
        {"genre": fantasy, "checked": False},
        {"genre": poetry, "checked": True},
    ]
    assert not hasattr(poetry, "checked")
