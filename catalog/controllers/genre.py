import logging

from django.urls import reverse

from catalog import validation
from catalog.exceptions import ConflictError, NotFoundError, ValidationError
from catalog.models import Book, Genre

from .common import Redirect, Render, parallel

logger = logging.getLogger(__name__)

GENRE_RULES = (
    validation.required(
        "name", "Genre name must not be empty",
        max_length=100, length_message="Genre name must be at most 100 characters",
    ),
)

DUPLICATE_NAME = "A genre with this name already exists"


def _form(title, genre=None, errors=()):
    return Render("catalog/genre_form.html", {
        "title": title,
        "genre": genre,
        "errors": list(errors),
    })


async def genre_list(storage):
    genres = await storage.find_all(Genre, order_by=("name",))
    return Render("catalog/genre_list.html", {"title": "Genre List", "genre_list": genres})


async def genre_detail(storage, pk):
    results = await parallel(
        genre=storage.find_by_id(Genre, pk),
        genre_books=storage.find_all(Book, {"genre": pk}, order_by=("title",)),
    )
    if results["genre"] is None:
        raise NotFoundError("Genre not found")

    return Render("catalog/genre_detail.html", {"title": "Genre Detail", **results})


async def genre_create_form(storage):
    return _form("Create Genre")


async def genre_create(storage, data):
    result = validation.validate(data, GENRE_RULES)
    genre = Genre(name=result.cleaned["name"])

    if not result.is_valid:
        return _form("Create Genre", genre, result.errors)

    # Same name already on file: send the user to it instead of duplicating
    existing = await storage.find_one(Genre, {"name": genre.name})
    if existing is not None:
        logger.info("Genre %r already exists as %s", genre.name, existing.pk)
        return Redirect(existing.url)

    try:
        await storage.insert(genre)
    except ConflictError:
        # Lost a race with a concurrent create of the same name
        existing = await storage.find_one(Genre, {"name": genre.name})
        if existing is None:
            raise
        return Redirect(existing.url)

    logger.info("Created genre %s (%s)", genre.pk, genre.name)
    return Redirect(genre.url)


async def genre_update_form(storage, pk):
    genre = await storage.find_by_id(Genre, pk)
    if genre is None:
        raise NotFoundError("Genre not found")
    return _form("Update Genre", genre)


async def _name_taken(storage, pk):
    original = await storage.find_by_id(Genre, pk)
    if original is None:
        raise NotFoundError("Genre not found")
    return _form("Update Genre", original, [ValidationError("name", DUPLICATE_NAME)])


async def genre_update(storage, pk, data):
    result = validation.validate(data, GENRE_RULES)
    genre = Genre(pk=pk, name=result.cleaned["name"])

    if not result.is_valid:
        if await storage.find_by_id(Genre, pk) is None:
            raise NotFoundError("Genre not found")
        return _form("Update Genre", genre, result.errors)

    holder = await storage.find_one(Genre, {"name": genre.name})
    if holder is not None and str(holder.pk) != str(pk):
        logger.info("Genre %s rename to %r refused: name in use", pk, genre.name)
        return await _name_taken(storage, pk)

    try:
        genre = await storage.update_by_id(Genre, pk, genre)
    except ConflictError:
        return await _name_taken(storage, pk)

    logger.info("Updated genre %s", genre.pk)
    return Redirect(genre.url)


async def _genre_with_books(storage, pk):
    return await parallel(
        genre=storage.find_by_id(Genre, pk),
        genre_books=storage.find_all(Book, {"genre": pk}, order_by=("title",), populate=("author",)),
    )


async def genre_delete_form(storage, pk):
    results = await _genre_with_books(storage, pk)
    if results["genre"] is None:
        return Redirect(reverse("genres"))
    return Render("catalog/genre_delete.html", {"title": "Delete Genre", **results})


async def genre_delete(storage, pk):
    results = await _genre_with_books(storage, pk)
    if results["genre"] is None:
        return Redirect(reverse("genres"))

    if results["genre_books"]:
        logger.info("Genre %s not deleted: %d books still use it", pk, len(results["genre_books"]))
        return Render("catalog/genre_delete.html", {"title": "Delete Genre", **results})

    await storage.delete_by_id(Genre, pk)
    logger.info("Deleted genre %s", pk)
    return Redirect(reverse("genres"))
