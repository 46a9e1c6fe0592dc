import logging

from django.urls import reverse

from catalog import validation
from catalog.exceptions import ConflictError, NotFoundError
from catalog.models import Author, Book, BookInstance, Genre

from .common import Redirect, Render, genre_choices, parallel, verify_references

logger = logging.getLogger(__name__)

# ISBN length is enforced the same way on create and update
BOOK_RULES = (
    validation.required(
        "title", "Title must not be empty",
        max_length=200, length_message="Title must be at most 200 characters",
    ),
    validation.required("author", "Author must not be empty"),
    validation.required(
        "summary", "Summary must not be empty",
        max_length=1000, length_message="Summary must be at most 1000 characters",
    ),
    validation.required(
        "isbn", "ISBN must not be empty",
        min_length=10, max_length=13, length_message="ISBN must be 10-13 characters long",
    ),
    validation.escaped_list("genre"),
)

BOOK_REFERENCES = {
    "author": (Author, "Author does not exist"),
    "genre": (Genre, "Genre does not exist"),
}


async def index(storage):
    """Site home: record counts for each part of the catalog."""
    counts = await parallel(
        book_count=storage.count(Book),
        book_instance_count=storage.count(BookInstance),
        book_instance_available_count=storage.count(
            BookInstance, {"status": BookInstance.Status.AVAILABLE}
        ),
        author_count=storage.count(Author),
        genre_count=storage.count(Genre),
    )
    return Render("catalog/index.html", {"title": "Local Library Home", "data": counts})


async def book_list(storage):
    books = await storage.find_all(Book, order_by=("title",), populate=("author",))
    return Render("catalog/book_list.html", {"title": "Book List", "book_list": books})


async def _book_with_instances(storage, pk, populate):
    return await parallel(
        book=storage.find_by_id(Book, pk, populate=populate),
        book_instances=storage.find_all(BookInstance, {"book": pk}),
    )


async def book_detail(storage, pk):
    results = await _book_with_instances(storage, pk, ("author", "genre"))
    if results["book"] is None:
        raise NotFoundError("Book not found")
    return Render("catalog/book_detail.html", {"title": results["book"].title, **results})


async def _references(storage):
    return await parallel(
        authors=storage.find_all(Author, order_by=("family_name", "first_name")),
        genres=storage.find_all(Genre, order_by=("name",)),
    )


def _page(title, refs, book=None, selected_genres=(), errors=()):
    return Render("catalog/book_form.html", {
        "title": title,
        "book": book,
        "authors": refs["authors"],
        "selected_author": str(book.author_id) if book is not None and book.author_id else "",
        "genre_choices": genre_choices(refs["genres"], selected_genres),
        "errors": list(errors),
    })


async def _form(storage, title, book=None, selected_genres=(), errors=()):
    refs = await _references(storage)
    return _page(title, refs, book, selected_genres, errors)


async def _validate(storage, data):
    data = {**data, "genre": validation.normalize_multi(data.get("genre"))}
    result = validation.validate(data, BOOK_RULES)
    return await verify_references(storage, result, BOOK_REFERENCES)


def _build(cleaned, pk=None):
    return Book(
        pk=pk,
        title=cleaned["title"],
        author_id=cleaned["author"] or None,
        summary=cleaned["summary"],
        isbn=cleaned["isbn"],
    )


async def book_create_form(storage):
    return await _form(storage, "Create Book")


async def book_create(storage, data):
    result = await _validate(storage, data)
    book = _build(result.cleaned)

    if not result.is_valid:
        return await _form(storage, "Create Book", book, result.cleaned["genre"], result.errors)

    await storage.insert(book, relations={"genre": result.cleaned["genre"]})
    logger.info("Created book %s (%s)", book.pk, book.title)
    return Redirect(book.url)


async def book_update_form(storage, pk):
    results = await parallel(
        book=storage.find_by_id(Book, pk, populate=("author", "genre")),
        refs=_references(storage),
    )
    book = results["book"]
    if book is None:
        raise NotFoundError("Book not found")

    selected = [genre.pk for genre in book.genre.all()]
    return _page("Update Book", results["refs"], book, selected)


async def book_update(storage, pk, data):
    result = await _validate(storage, data)
    book = _build(result.cleaned, pk=pk)

    if not result.is_valid:
        results = await parallel(existing=storage.find_by_id(Book, pk), refs=_references(storage))
        if results["existing"] is None:
            raise NotFoundError("Book not found")
        return _page("Update Book", results["refs"], book, result.cleaned["genre"], result.errors)

    book = await storage.update_by_id(Book, pk, book, relations={"genre": result.cleaned["genre"]})
    logger.info("Updated book %s", book.pk)
    return Redirect(book.url)


async def book_delete_form(storage, pk):
    results = await _book_with_instances(storage, pk, ("author",))
    if results["book"] is None:
        return Redirect(reverse("books"))
    return Render("catalog/book_delete.html", {"title": "Delete Book", **results})


async def book_delete(storage, pk):
    results = await _book_with_instances(storage, pk, ("author",))
    if results["book"] is None:
        return Redirect(reverse("books"))

    if not results["book_instances"]:
        try:
            await storage.delete_by_id(Book, pk)
        except ConflictError:
            # A copy was added after we looked
            results = await _book_with_instances(storage, pk, ("author",))
        else:
            logger.info("Deleted book %s", pk)
            return Redirect(reverse("books"))

    logger.info("Book %s not deleted: %d copies reference it", pk, len(results["book_instances"]))
    return Render("catalog/book_delete.html", {"title": "Delete Book", **results})
