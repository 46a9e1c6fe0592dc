import logging

from django.urls import reverse

from catalog import validation
from catalog.exceptions import ConflictError, NotFoundError
from catalog.models import Author, Book

from .common import Redirect, Render, parallel

logger = logging.getLogger(__name__)

AUTHOR_RULES = (
    validation.required(
        "first_name", "First name must not be empty",
        max_length=100, length_message="First name must be at most 100 characters",
    ),
    validation.required(
        "family_name", "Family name must not be empty",
        max_length=100, length_message="Family name must be at most 100 characters",
    ),
    validation.optional_date("date_of_birth"),
    validation.optional_date("date_of_death"),
)


def _build(cleaned, pk=None):
    return Author(
        pk=pk,
        first_name=cleaned["first_name"],
        family_name=cleaned["family_name"],
        date_of_birth=cleaned["date_of_birth"],
        date_of_death=cleaned["date_of_death"],
    )


def _form(title, author=None, errors=()):
    return Render("catalog/author_form.html", {
        "title": title,
        "author": author,
        "errors": list(errors),
    })


async def author_list(storage):
    authors = await storage.find_all(Author, order_by=("family_name", "first_name"))
    return Render("catalog/author_list.html", {"title": "Author List", "author_list": authors})


async def _author_with_books(storage, pk):
    return await parallel(
        author=storage.find_by_id(Author, pk),
        author_books=storage.find_all(Book, {"author": pk}, order_by=("title",)),
    )


async def author_detail(storage, pk):
    results = await _author_with_books(storage, pk)
    if results["author"] is None:
        raise NotFoundError("Author not found")
    return Render("catalog/author_detail.html", {"title": "Author Detail", **results})


async def author_create_form(storage):
    return _form("Create Author")


async def author_create(storage, data):
    result = validation.validate(data, AUTHOR_RULES)
    author = _build(result.cleaned)

    if not result.is_valid:
        return _form("Create Author", author, result.errors)

    await storage.insert(author)
    logger.info("Created author %s (%s)", author.pk, author.name)
    return Redirect(author.url)


async def author_update_form(storage, pk):
    author = await storage.find_by_id(Author, pk)
    if author is None:
        raise NotFoundError("Author not found")
    return _form("Update Author", author)


async def author_update(storage, pk, data):
    result = validation.validate(data, AUTHOR_RULES)
    author = _build(result.cleaned, pk=pk)

    if not result.is_valid:
        if await storage.find_by_id(Author, pk) is None:
            raise NotFoundError("Author not found")
        return _form("Update Author", author, result.errors)

    author = await storage.update_by_id(Author, pk, author)
    logger.info("Updated author %s", author.pk)
    return Redirect(author.url)


async def author_delete_form(storage, pk):
    results = await _author_with_books(storage, pk)
    if results["author"] is None:
        return Redirect(reverse("authors"))
    return Render("catalog/author_delete.html", {"title": "Delete Author", **results})


async def author_delete(storage, pk):
    results = await _author_with_books(storage, pk)
    if results["author"] is None:
        return Redirect(reverse("authors"))

    if not results["author_books"]:
        try:
            await storage.delete_by_id(Author, pk)
        except ConflictError:
            # A book was added after we looked
            results = await _author_with_books(storage, pk)
        else:
            logger.info("Deleted author %s", pk)
            return Redirect(reverse("authors"))

    logger.info("Author %s not deleted: %d books reference it", pk, len(results["author_books"]))
    return Render("catalog/author_delete.html", {"title": "Delete Author", **results})
