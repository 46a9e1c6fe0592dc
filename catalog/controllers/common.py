import asyncio
from dataclasses import dataclass, field


@dataclass
class Render:
    """Render ``template`` with ``context``."""
    template: str
    context: dict = field(default_factory=dict)
    status: int = 200


@dataclass
class Redirect:
    url: str


async def gather(*calls):
    """
    Runs the awaitables concurrently and returns their results in order.
    The first failure is raised as-is and the remaining calls are cancelled.
    """
    try:
        async with asyncio.TaskGroup() as group:
            tasks = [group.create_task(call) for call in calls]
    except BaseExceptionGroup as group_error:
        raise group_error.exceptions[0]
    return [task.result() for task in tasks]


async def parallel(**calls):
    """Named version of gather(): ``parallel(a=..., b=...) -> {"a": ..., "b": ...}``."""
    results = await gather(*calls.values())
    return dict(zip(calls, results))


async def verify_references(storage, result, references):
    """
    Adds one error per field whose referenced record(s) are missing.

    ``references`` maps a field name to ``(model, message)``. The field's
    cleaned value may be a single id or a list of ids. Fields that already
    failed validation are skipped.
    """
    fields, lookups = [], []
    for name, (model, message) in references.items():
        if result.has_error(name):
            continue
        ids = result.cleaned.get(name)
        if not isinstance(ids, list):
            ids = [ids]
        for pk in ids:
            fields.append(name)
            lookups.append(storage.find_by_id(model, pk))

    found = await gather(*lookups)

    missing = {name for name, record in zip(fields, found) if record is None}
    for name, (model, message) in references.items():
        if name in missing:
            result.add_error(name, message)
    return result


def genre_choices(genres, selected_ids):
    """Pairs each genre with whether it is among ``selected_ids``."""
    selected = {str(pk) for pk in selected_ids}
    return [{"genre": genre, "checked": str(genre.pk) in selected} for genre in genres]
